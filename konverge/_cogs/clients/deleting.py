from typing import Any, Dict, Optional

from konverge._cogs.clients import api
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import references


async def delete_obj(
        *,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        propagation_policy: Optional[str] = None,
        grace_period: Optional[int] = None,
        logger: typedefs.Logger,
) -> None:
    """
    Delete the object. Only request the deletion, do not wait for it.

    The absent objects fail with ``APINotFoundError`` -- it is the caller's
    decision whether it is an error or a desired state.
    """
    options: Dict[str, Any] = {'apiVersion': 'v1', 'kind': 'DeleteOptions'}
    if propagation_policy is not None:
        options['propagationPolicy'] = propagation_policy
    if grace_period is not None:
        options['gracePeriodSeconds'] = grace_period

    await api.delete(
        url=resource.get_url(namespace=namespace, name=name),
        payload=options,
        settings=settings,
        logger=logger,
    )
