from konverge._cogs.clients import api
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import bodies, references


async def replace_obj(
        *,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Replace (update) the whole object with the new body.

    If the body contains ``metadata.resourceVersion``, the update is optimistic:
    it fails with ``APIConflictError`` if the object was changed since read.
    This is the caller's duty to re-read the object and retry.
    """
    replaced_body: bodies.RawBody = await api.put(
        url=resource.get_url(namespace=namespace, name=name),
        payload=body,
        settings=settings,
        logger=logger,
    )
    return replaced_body
