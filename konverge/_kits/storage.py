"""
Storage classes & persistent volume claims.
"""
import asyncio
import logging
from typing import Dict, Optional

from konverge._cogs.clients import creating, deleting, fetching
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import quantities, typedefs
from konverge._cogs.structs import bodies, references
from konverge._core.actions import loggers, retrying

logger = logging.getLogger(__name__)

# The legacy way of specifying the storage class, still used by some provisioners.
STORAGE_CLASS_ANNOTATION = 'volume.beta.kubernetes.io/storage-class'

BOUND_PHASE = 'Bound'


class PVCNotReadyError(retrying.TemporaryError):
    """ The persistent volume claim is not bound yet. """

    def __init__(self, name: Optional[str], cause: str) -> None:
        super().__init__(f"PVC {name} is not ready yet. Cause: {cause}")
        self.name = name
        self.cause = cause


class ClaimParamsError(Exception):
    """ The claim lacks the information needed to derive the volume's parameters. """


async def create_storage_class(
        storage_class: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> bodies.RawBody:
    logger = logger if logger is not None else loggers.ObjectLogger(body=storage_class)
    logger.info("Creating the storage class.")
    return await creating.create_obj(
        resource=references.STORAGE_CLASSES,
        body=storage_class,
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def delete_storage_class(
        storage_class: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    logger = logger if logger is not None else loggers.ObjectLogger(body=storage_class)
    logger.info("Deleting the storage class.")
    await deleting.delete_obj(
        resource=references.STORAGE_CLASSES,
        namespace=None,
        name=_name_of(storage_class),
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def validate_storage_class(
        storage_class: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> None:
    """ Check that the storage class exists; a single read, no retries. """
    await fetching.read_obj(
        resource=references.STORAGE_CLASSES,
        namespace=None,
        name=_name_of(storage_class),
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def create_pvc(
        pvc: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> bodies.RawBody:
    logger = logger if logger is not None else loggers.ObjectLogger(body=pvc)
    logger.info("Creating the persistent volume claim.")
    return await creating.create_obj(
        resource=references.PERSISTENT_VOLUME_CLAIMS,
        namespace=_namespace_of(pvc),
        body=pvc,
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def read_pvc(
        pvc: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> bodies.RawBody:
    return await fetching.read_obj(
        resource=references.PERSISTENT_VOLUME_CLAIMS,
        namespace=_namespace_of(pvc),
        name=_name_of(pvc),
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def delete_pvc(
        pvc: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    logger = logger if logger is not None else loggers.ObjectLogger(body=pvc)
    logger.info("Deleting the persistent volume claim.")
    await deleting.delete_obj(
        resource=references.PERSISTENT_VOLUME_CLAIMS,
        namespace=_namespace_of(pvc),
        name=_name_of(pvc),
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def validate_pvc(
        pvc: bodies.RawBody,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        stopper: Optional[asyncio.Event] = None,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Wait until the claim is bound to a volume.

    All other phases are considered as "not yet bound", even the terminal
    ones (e.g. ``Lost``): they are retried until the timeout.
    """
    settings = configuration.get_settings(settings)
    logger = logger if logger is not None else loggers.ObjectLogger(body=pvc)

    async def check_claim() -> None:
        latest = await read_pvc(pvc, settings=settings, logger=logger)
        phase = latest.get('status', {}).get('phase')
        if phase != BOUND_PHASE:
            raise PVCNotReadyError(bodies.get_name(latest), f"PVC expected status: {BOUND_PHASE} "
                                                            f"PVC actual status: {phase}")

    await retrying.run_until(
        check_claim,
        timeout=timeout if timeout is not None else settings.validation.claim_timeout,
        interval=interval if interval is not None else settings.validation.claim_interval,
        stopper=stopper,
        logger=logger,
    )
    logger.info("The persistent volume claim is bound.")


async def get_pvc_volume_name(
        pvc: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> Optional[str]:
    """ The name of the volume bound to the claim, or ``None`` if not bound yet. """
    latest = await read_pvc(pvc, settings=settings, logger=logger)
    return latest.get('spec', {}).get('volumeName') or None


async def get_pvc_params(
        pvc: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> Dict[str, str]:
    """
    Get the parameters of the volume as requested by the claim.

    The requested size is rounded up to whole GiBs and is put as bytes under
    the ``size`` key. The parameters of the claim's storage class are added.
    """
    settings = configuration.get_settings(settings)
    latest = await read_pvc(pvc, settings=settings, logger=logger)
    name = bodies.get_name(latest)
    spec = latest.get('spec', {})

    requested = spec.get('resources', {}).get('requests', {}).get('storage')
    if requested is None:
        raise ClaimParamsError(f"PVC {name} does not request any storage.")
    try:
        size = quantities.round_up(quantities.parse_quantity(requested), quantities.GiB)
    except ValueError as e:
        raise ClaimParamsError(f"PVC {name} requests an unparseable storage size: {e}") from e

    annotations = latest.get('metadata', {}).get('annotations') or {}
    class_name = annotations.get(STORAGE_CLASS_ANNOTATION) or spec.get('storageClassName')
    if not class_name:
        raise ClaimParamsError(f"PVC {name} does not have a storage class.")

    storage_class = await fetching.read_obj(
        resource=references.STORAGE_CLASSES,
        namespace=None,
        name=class_name,
        settings=settings,
        logger=logger,
    )

    params: Dict[str, str] = {'size': str(size * quantities.GiB)}
    params.update(storage_class.get('parameters') or {})
    return params


def _name_of(body: bodies.RawBody) -> str:
    name = bodies.get_name(body)
    if not name:
        raise ValueError(f"The {body.get('kind') or 'object'} has no name.")
    return name


def _namespace_of(body: bodies.RawBody) -> references.NamespaceName:
    return bodies.get_namespace(body) or references.NamespaceName('default')
