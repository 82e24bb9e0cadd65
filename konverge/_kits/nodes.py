"""
Nodes: readiness checks and label mutations.

The readiness check is a single-shot check, not retried: the nodes
are expected to be ready before the tests, and if not, it is a failure.
Wrap it into :func:`konverge.run_until` to wait for the nodes explicitly.
"""
import logging
from typing import Callable, Collection, Dict, Optional, cast

from konverge._cogs.clients import errors, fetching, replacing
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import bodies, references
from konverge._core.actions import loggers, retrying

logger = logging.getLogger(__name__)

MASTER_LABELS = frozenset({'node-role.kubernetes.io/master', 'node-role.kubernetes.io/control-plane'})

# The condition which must be "True" for the node to be ready.
READY_CONDITION = 'Ready'

# The conditions which must be "False" for the node to be ready (if reported at all).
NEGATIVE_CONDITIONS = frozenset({
    'OutOfDisk',
    'MemoryPressure',
    'DiskPressure',
    'NetworkUnavailable',
    'InodePressure',
    'PIDPressure',
})


class NodeNotReadyError(retrying.TemporaryError):
    """ One of the node's conditions is not as expected for a ready node. """

    def __init__(self, name: Optional[str], condition: bodies.RawCondition) -> None:
        super().__init__(
            f"Node {name} is not ready as condition {condition.get('type')} "
            f"({condition.get('message')}) is {condition.get('status')}. "
            f"Reason: {condition.get('reason')}")
        self.name = name
        self.condition = condition


def check_node_conditions(node: bodies.RawBody) -> None:
    """
    Check the node's conditions and raise `NodeNotReadyError` if not ready.

    The absent conditions have no opinion on the readiness: e.g. the ones
    deprecated or introduced in different versions of Kubernetes.
    """
    name = bodies.get_name(node)
    condition: bodies.RawCondition
    for condition in node.get('status', {}).get('conditions') or []:
        kind, status = condition.get('type'), condition.get('status')
        if kind == READY_CONDITION and status != 'True':
            raise NodeNotReadyError(name, condition)
        if kind in NEGATIVE_CONDITIONS and status != 'False':
            raise NodeNotReadyError(name, condition)


def is_master_node(node: bodies.RawBody) -> bool:
    return bool(MASTER_LABELS & set(bodies.get_labels(node)))


async def list_nodes(
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> Collection[bodies.RawBody]:
    return await fetching.list_objs(
        resource=references.NODES,
        namespace=None,
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def read_node(
        name: str,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> bodies.RawBody:
    return await fetching.read_obj(
        resource=references.NODES,
        namespace=None,
        name=name,
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def validate_node(
        name: str,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> None:
    """ Read the node and check its readiness once. """
    node = await read_node(name, settings=settings, logger=logger)
    check_node_conditions(node)


async def add_node_label(
        name: str,
        key: str,
        value: str,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> None:
    def mutate(labels: Dict[str, str]) -> bool:
        if labels.get(key) == value:
            return False
        labels[key] = value
        return True

    await _update_labels(name, mutate, settings=settings, logger=logger)


async def remove_node_label(
        name: str,
        key: str,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> None:
    def mutate(labels: Dict[str, str]) -> bool:
        return labels.pop(key, None) is not None

    await _update_labels(name, mutate, settings=settings, logger=logger)


async def _update_labels(
        name: str,
        mutate: Callable[[Dict[str, str]], bool],
        *,
        settings: Optional[configuration.Settings],
        logger: typedefs.Logger,
) -> None:
    """
    Re-read the node, change its labels, and write it back -- until it works.

    The node is re-read on every attempt, so that the write contains
    the latest ``resourceVersion`` and is not rejected as stale.
    The failed reads are escalated immediately; the failed writes are retried.
    """
    settings = configuration.get_settings(settings)
    if settings.labelling.max_retries < 1:
        raise ValueError(f"At least one label update attempt is needed, got {settings.labelling.max_retries!r}.")
    last_error: Optional[errors.APIError] = None
    for attempt in range(1, settings.labelling.max_retries + 1):
        node = await read_node(name, settings=settings, logger=logger)
        labels = dict(bodies.get_labels(node))
        if not mutate(labels):
            return

        body = cast(bodies.RawBody, dict(node))  # shallow
        body['metadata'] = cast(bodies.RawMeta, dict(node.get('metadata', {}), labels=labels))
        try:
            await replacing.replace_obj(
                resource=references.NODES,
                namespace=None,
                name=name,
                body=body,
                settings=settings,
                logger=logger,
            )
        except errors.APIError as e:
            last_error = e
            loggers.ObjectLogger(body=node).debug(f"Label update attempt #{attempt} failed: {e}")
        else:
            return

    if last_error is not None:
        raise last_error
