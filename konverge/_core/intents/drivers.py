"""
The capability set of the storage service as operated under various schedulers.

The orchestration code does not know how the storage service is disabled
or enabled on a node under a specific scheduler (Kubernetes, Nomad, etc).
Instead, it resolves a driver by the scheduler's name from the registry,
and invokes the driver's operations (see :mod:`registries`).

The drivers do their own retries (if needed); the callers do not retry.
"""
import abc
import dataclasses
from typing import Tuple

from typing_extensions import Literal

NodeType = Literal['worker', 'master']


@dataclasses.dataclass(frozen=True)
class NodeRef:
    """ An identity of a single target machine, as known to the orchestration. """
    name: str
    addresses: Tuple[str, ...] = ()
    type: NodeType = 'worker'


class SchedulerOps(metaclass=abc.ABCMeta):
    """
    Operations of the storage service on a node, from the scheduler's perspective.

    All operations either succeed (return ``None``) or raise an error.
    """

    @abc.abstractmethod
    async def disable_on_node(self, node: NodeRef) -> None:
        """ Disable the storage service on the node. """
        raise NotImplementedError

    @abc.abstractmethod
    async def enable_on_node(self, node: NodeRef) -> None:
        """ Enable the storage service on the node. """
        raise NotImplementedError

    @abc.abstractmethod
    async def validate_on_node(self, node: NodeRef) -> None:
        """ Validate the storage service on the node; raise if it is not as expected. """
        raise NotImplementedError
