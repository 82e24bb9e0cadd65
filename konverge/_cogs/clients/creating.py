from typing import cast

from konverge._cogs.clients import api
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import bodies, references


async def create_obj(
        *,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace = None,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Create a resource, and return its body as stored by the API.

    The namespace is taken from the body unless explicitly given.
    The original body is not modified.
    """
    body = cast(bodies.RawBody, dict(body))
    body.setdefault('apiVersion', resource.api_version)
    if resource.kind is not None:
        body.setdefault('kind', resource.kind)
    if namespace is None and resource.namespaced:
        namespace = bodies.get_namespace(body)

    created_body: bodies.RawBody = await api.post(
        url=resource.get_url(namespace=namespace),
        payload=body,
        settings=settings,
        logger=logger,
    )
    return created_body
