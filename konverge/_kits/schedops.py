"""
The built-in scheduler driver: the storage service is controlled by node labels.

It is suitable for the storage services deployed as daemon sets with a node
selector or affinity on a label: the service is not scheduled to the nodes
labelled with ``<label>=false``, and is scheduled again once the label is gone.

The driver is not registered implicitly. Register it under the scheduler's name::

    registry = konverge.DriverRegistry()
    registry.register('k8s', konverge.LabelSchedulerOps())
"""
from typing import Optional

from konverge._cogs.configs import configuration
from konverge._cogs.structs import bodies
from konverge._core.actions import loggers
from konverge._core.intents import drivers
from konverge._kits import nodes

DEFAULT_LABEL = 'storage/enabled'


class StorageDisabledError(Exception):
    """ The storage service is disabled on the node while expected to run there. """

    def __init__(self, name: str, label: str) -> None:
        super().__init__(f"Storage is disabled on node {name} with the label {label}=false.")
        self.name = name
        self.label = label


class LabelSchedulerOps(drivers.SchedulerOps):

    def __init__(
            self,
            label: str = DEFAULT_LABEL,
            *,
            settings: Optional[configuration.Settings] = None,
    ) -> None:
        super().__init__()
        self.label = label
        self.settings = settings

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(label={self.label!r})'

    async def disable_on_node(self, node: drivers.NodeRef) -> None:
        await nodes.add_node_label(node.name, self.label, 'false', settings=self.settings)

    async def enable_on_node(self, node: drivers.NodeRef) -> None:
        await nodes.remove_node_label(node.name, self.label, settings=self.settings)

    async def validate_on_node(self, node: drivers.NodeRef) -> None:
        body = await nodes.read_node(node.name, settings=self.settings)
        nodes.check_node_conditions(body)
        if bodies.get_labels(body).get(self.label) == 'false':
            raise StorageDisabledError(node.name, self.label)
        loggers.ObjectLogger(body=body).debug("The storage service is enabled on the node.")
