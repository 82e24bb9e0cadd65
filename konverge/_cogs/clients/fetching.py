from typing import Collection, List, Mapping, Optional

from konverge._cogs.clients import api
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import bodies, references


async def read_obj(
        *,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Read one specific object; raise ``APINotFoundError`` if it is absent.
    """
    obj: bodies.RawBody = await api.get(
        url=resource.get_url(namespace=namespace, name=name),
        settings=settings,
        logger=logger,
    )
    return obj


async def list_objs(
        *,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace,
        selector: Optional[Mapping[str, str]] = None,
        logger: typedefs.Logger,
) -> Collection[bodies.RawBody]:
    """
    List the objects of specific resource type.

    The cluster-scoped call is used if the resource is cluster-scoped,
    or if no namespace is given (i.e. all namespaces are listed).
    Otherwise, the namespace-scoped call is used.

    The items are enriched with their ``kind`` & ``apiVersion``, which are
    absent in the individual items of the lists as returned by the API.
    """
    params = {'labelSelector': ','.join(f'{k}={v}' for k, v in selector.items())} if selector else None
    rsp = await api.get(
        url=resource.get_url(namespace=namespace, params=params),
        settings=settings,
        logger=logger,
    )

    items: List[bodies.RawBody] = []
    for item in rsp.get('items') or []:
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])
        items.append(item)

    return items
