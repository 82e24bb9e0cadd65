"""
Deployments & their pods: creation, deletion, and reconciliation checks.

The pods are found via their owner references, in two hops:
the deployment owns the replica sets, the replica sets own the pods.
Nothing is cached: every check re-reads the live state from the API.
"""
import asyncio
import logging
from typing import Collection, Iterable, List, Optional

from konverge._cogs.clients import creating, deleting, errors, fetching
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import bodies, references
from konverge._core.actions import loggers, retrying

logger = logging.getLogger(__name__)


class AppNotReadyError(retrying.TemporaryError):
    """ The deployment is not yet fully available: replicas or pods. """

    def __init__(self, name: Optional[str], cause: str) -> None:
        super().__init__(f"App {name} is not ready yet. Cause: {cause}")
        self.name = name
        self.cause = cause


class AppNotTerminatedError(retrying.TemporaryError):
    """ The deployment's pods are still present after the deletion. """

    def __init__(self, name: Optional[str], cause: str) -> None:
        super().__init__(f"App {name} is not terminated yet. Cause: {cause}")
        self.name = name
        self.cause = cause


def is_pod_running(pod: bodies.RawBody) -> bool:
    """
    Check if all containers of the pod are running.

    A running init container means that the regular containers have not
    started yet, regardless of what the controllers report. A pod with no
    reported container statuses (e.g. just scheduled) is not running either.
    """
    status = pod.get('status', {})
    for container in status.get('initContainerStatuses') or []:
        if (container.get('state') or {}).get('running') is not None:
            return False

    containers = status.get('containerStatuses') or []
    if not containers:
        return False
    for container in containers:
        if (container.get('state') or {}).get('running') is None:
            return False
    return True


async def create_deployment(
        deployment: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> bodies.RawBody:
    logger = logger if logger is not None else loggers.ObjectLogger(body=deployment)
    logger.info("Creating the deployment.")
    return await creating.create_obj(
        resource=references.DEPLOYMENTS,
        namespace=_namespace_of(deployment),
        body=deployment,
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def read_deployment(
        deployment: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> bodies.RawBody:
    """ Re-read the deployment's latest state by its name & namespace. """
    return await fetching.read_obj(
        resource=references.DEPLOYMENTS,
        namespace=_namespace_of(deployment),
        name=_name_of(deployment),
        settings=configuration.get_settings(settings),
        logger=logger,
    )


async def delete_deployment(
        deployment: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Request the deletion of the deployment, but do not wait for it.

    With the foreground propagation (by default), the deployment remains
    visible until all its replica sets & pods are deleted.
    Use :func:`validate_terminated_deployment` to wait for that.
    """
    settings = configuration.get_settings(settings)
    logger = logger if logger is not None else loggers.ObjectLogger(body=deployment)
    logger.info("Deleting the deployment.")
    await deleting.delete_obj(
        resource=references.DEPLOYMENTS,
        namespace=_namespace_of(deployment),
        name=_name_of(deployment),
        propagation_policy=settings.deletion.propagation_policy,
        settings=settings,
        logger=logger,
    )


async def delete_pods(
        pods: Iterable[bodies.RawBody],
        *,
        settings: Optional[configuration.Settings] = None,
) -> None:
    settings = configuration.get_settings(settings)
    for pod in pods:
        pod_logger = loggers.ObjectLogger(body=pod)
        pod_logger.info(f"Deleting the pod: {bodies.get_name(pod)}")
        await deleting.delete_obj(
            resource=references.PODS,
            namespace=_namespace_of(pod),
            name=_name_of(pod),
            grace_period=settings.deletion.pod_grace_period,
            settings=settings,
            logger=pod_logger,
        )


async def list_replicaset_pods(
        replicaset: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> Collection[bodies.RawBody]:
    pods = await fetching.list_objs(
        resource=references.PODS,
        namespace=_namespace_of(replicaset),
        settings=configuration.get_settings(settings),
        logger=logger,
    )
    return [pod for pod in pods if bodies.is_owned_by(pod, replicaset)]


async def list_deployment_pods(
        deployment: bodies.RawBody,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> Collection[bodies.RawBody]:
    """
    List the pods of all replica sets owned by the deployment.

    During the rollouts, there can be several replica sets of one deployment,
    so the pods of the old & new replica sets are all listed.
    """
    settings = configuration.get_settings(settings)
    replicasets = await fetching.list_objs(
        resource=references.REPLICA_SETS,
        namespace=_namespace_of(deployment),
        settings=settings,
        logger=logger,
    )

    pods: List[bodies.RawBody] = []
    for replicaset in replicasets:
        if bodies.is_owned_by(replicaset, deployment):
            pods.extend(await list_replicaset_pods(replicaset, settings=settings, logger=logger))
    return pods


async def validate_deployment(
        deployment: bodies.RawBody,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        stopper: Optional[asyncio.Event] = None,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Wait until all the desired replicas of the deployment are available & ready,
    and all of its pods are running.
    """
    settings = configuration.get_settings(settings)
    logger = logger if logger is not None else loggers.ObjectLogger(body=deployment)

    async def check_deployment() -> None:
        latest = await read_deployment(deployment, settings=settings, logger=logger)
        name = bodies.get_name(latest)
        spec = latest.get('spec', {})
        status = latest.get('status', {})
        desired = spec.get('replicas')
        desired = 1 if desired is None else desired
        available = status.get('availableReplicas') or 0
        ready = status.get('readyReplicas') or 0
        if available != desired:
            raise AppNotReadyError(name, f"Expected replicas: {desired}, available replicas: {available}")
        if ready != desired:
            raise AppNotReadyError(name, f"Expected replicas: {desired}, ready replicas: {ready}")

        try:
            pods = await list_deployment_pods(latest, settings=settings, logger=logger)
        except errors.APIError as e:
            raise AppNotReadyError(name, f"Failed to get the pods: {e}") from e

        if desired and not pods:
            raise AppNotReadyError(name, "No pods are found.")
        for pod in pods:
            if not is_pod_running(pod):
                raise AppNotReadyError(name, f"Pod {bodies.get_name(pod)} is not yet running.")

    await retrying.run_until(
        check_deployment,
        timeout=timeout if timeout is not None else settings.validation.deployment_timeout,
        interval=interval if interval is not None else settings.validation.deployment_interval,
        stopper=stopper,
        logger=logger,
    )
    logger.info("The deployment is ready.")


async def validate_terminated_deployment(
        deployment: bodies.RawBody,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        stopper: Optional[asyncio.Event] = None,
        settings: Optional[configuration.Settings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Wait until the deployment is gone, or at least all of its pods are gone.
    """
    settings = configuration.get_settings(settings)
    logger = logger if logger is not None else loggers.ObjectLogger(body=deployment)

    async def check_termination() -> None:
        try:
            latest = await read_deployment(deployment, settings=settings, logger=logger)
        except Exception as e:
            if errors.is_not_found(e):
                return
            raise

        name = bodies.get_name(latest)
        try:
            pods = await list_deployment_pods(latest, settings=settings, logger=logger)
        except errors.APIError as e:
            raise AppNotTerminatedError(name, f"Failed to get the pods: {e}") from e

        if pods:
            names = ', '.join(str(bodies.get_name(pod)) for pod in pods)
            raise AppNotTerminatedError(name, f"The pods are still present: {names}")

    await retrying.run_until(
        check_termination,
        timeout=timeout if timeout is not None else settings.validation.teardown_timeout,
        interval=interval if interval is not None else settings.validation.teardown_interval,
        stopper=stopper,
        logger=logger,
    )
    logger.info("The deployment is terminated.")


def _name_of(body: bodies.RawBody) -> str:
    name = bodies.get_name(body)
    if not name:
        raise ValueError(f"The {body.get('kind') or 'object'} has no name.")
    return name


def _namespace_of(body: bodies.RawBody) -> references.NamespaceName:
    return bodies.get_namespace(body) or references.NamespaceName('default')
