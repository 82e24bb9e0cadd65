"""
All configuration flags, options, settings to fine-tune the checks.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The validation timeouts & intervals are the policy decisions, not derived
from anything: they are the expectations of how fast the cluster converges.
They can be overridden globally (via the settings), or per call (via kwargs).
"""
import dataclasses
from contextvars import ContextVar
from typing import Iterable, Optional

# The policy defaults, kept as module constants to be importable & patchable.
DEFAULT_DEPLOYMENT_TIMEOUT: float = 10 * 60
DEFAULT_DEPLOYMENT_INTERVAL: float = 10
DEFAULT_TEARDOWN_TIMEOUT: float = 10 * 60
DEFAULT_TEARDOWN_INTERVAL: float = 10
DEFAULT_CLAIM_TIMEOUT: float = 5 * 60
DEFAULT_CLAIM_INTERVAL: float = 10
DEFAULT_LABEL_UPDATE_RETRIES: int = 5


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout (in seconds) for all the requests to the API, including the body.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout (in seconds) for establishing the connection to the API server.
    """

    error_backoffs: Iterable[float] = (1, 1, 2, 3, 5)
    """
    Backoff intervals in case of connection errors or server errors (HTTP 5xx).

    The request is retried with these delays, and the error is escalated
    when the intervals are exhausted. To disable retries, set it to ``[]``.

    Unlike the convergence validation, these are not about the cluster state,
    but about the API's availability -- i.e. a single "attempt" of a check.
    """


@dataclasses.dataclass
class ValidationSettings:
    """
    The timeouts & intervals of the reconciliation checks (in seconds).
    """

    deployment_timeout: float = DEFAULT_DEPLOYMENT_TIMEOUT
    """ How long to wait until all replicas & pods of a deployment are ready. """

    deployment_interval: float = DEFAULT_DEPLOYMENT_INTERVAL

    teardown_timeout: float = DEFAULT_TEARDOWN_TIMEOUT
    """ How long to wait until the deployment and all of its pods are gone. """

    teardown_interval: float = DEFAULT_TEARDOWN_INTERVAL

    claim_timeout: float = DEFAULT_CLAIM_TIMEOUT
    """ How long to wait until a persistent volume claim is bound. """

    claim_interval: float = DEFAULT_CLAIM_INTERVAL


@dataclasses.dataclass
class LabellingSettings:

    max_retries: int = DEFAULT_LABEL_UPDATE_RETRIES
    """
    How many times to re-read & re-write a node when its labels are changed.

    The writes can conflict with other writers (e.g. the kubelet's status
    updates), so the node is re-read on every attempt to use the latest version.
    There are no delays between the attempts. Values below 1 are rejected.
    """


@dataclasses.dataclass
class DeletionSettings:

    propagation_policy: Optional[str] = 'Foreground'
    """
    How the deployments' dependants are deleted: the deployment is only gone
    when all its replica sets & pods are gone (with ``"Foreground"``).
    """

    pod_grace_period: Optional[int] = 0
    """
    The grace period (in seconds) for the deleted pods; ``0`` is immediately.
    ``None`` means the pods' own defaults.
    """


@dataclasses.dataclass
class Settings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    validation: ValidationSettings = dataclasses.field(default_factory=ValidationSettings)
    labelling: LabellingSettings = dataclasses.field(default_factory=LabellingSettings)
    deletion: DeletionSettings = dataclasses.field(default_factory=DeletionSettings)


# The settings of the current connection; set by `connected()`.
settings_var: ContextVar[Settings] = ContextVar('settings_var')


def get_settings(settings: Optional[Settings] = None) -> Settings:
    """ Use the explicit settings if given, else the current ones, else the defaults. """
    if settings is not None:
        return settings
    try:
        return settings_var.get()
    except LookupError:
        return Settings()
