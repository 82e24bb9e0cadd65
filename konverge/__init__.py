"""
The main Konverge module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from konverge._cogs.clients.errors import (
    APIError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APIServerError,
    is_not_found,
)
from konverge._cogs.configs.configuration import (
    Settings,
    NetworkingSettings,
    ValidationSettings,
    LabellingSettings,
    DeletionSettings,
    DEFAULT_DEPLOYMENT_TIMEOUT,
    DEFAULT_DEPLOYMENT_INTERVAL,
    DEFAULT_TEARDOWN_TIMEOUT,
    DEFAULT_TEARDOWN_INTERVAL,
    DEFAULT_CLAIM_TIMEOUT,
    DEFAULT_CLAIM_INTERVAL,
    DEFAULT_LABEL_UPDATE_RETRIES,
)
from konverge._cogs.helpers.manifests import (
    load_manifests,
    parse_manifests,
)
from konverge._cogs.helpers.quantities import (
    parse_quantity,
)
from konverge._cogs.helpers.typedefs import (
    Logger,
)
from konverge._cogs.helpers.versions import (
    version as __version__,
)
from konverge._cogs.structs.bodies import (
    RawBody,
    Labels,
    Annotations,
)
from konverge._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from konverge._core.actions.loggers import (
    configure,
    LogFormat,
    ObjectLogger,
)
from konverge._core.actions.retrying import (
    TemporaryError,
    PermanentError,
    ConvergenceError,
    ConvergenceTimeoutError,
    ConvergenceStoppedError,
    run_until,
    fixed,
    exponential,
    jittered,
)
from konverge._core.engines.connecting import (
    connected,
)
from konverge._core.intents.drivers import (
    NodeRef,
    NodeType,
    SchedulerOps,
)
from konverge._core.intents.piggybacking import (
    login,
    login_with_kubeconfig,
    login_with_service_account,
)
from konverge._core.intents.registries import (
    DriverRegistry,
    DriverNotFoundError,
    get_default_registry,
    set_default_registry,
    driver,
)
from konverge._kits.nodes import (
    NodeNotReadyError,
    check_node_conditions,
    is_master_node,
    list_nodes,
    read_node,
    validate_node,
    add_node_label,
    remove_node_label,
)
from konverge._kits.schedops import (
    LabelSchedulerOps,
    StorageDisabledError,
)
from konverge._kits.storage import (
    PVCNotReadyError,
    ClaimParamsError,
    create_storage_class,
    delete_storage_class,
    validate_storage_class,
    create_pvc,
    read_pvc,
    delete_pvc,
    validate_pvc,
    get_pvc_volume_name,
    get_pvc_params,
)
from konverge._kits.workloads import (
    AppNotReadyError,
    AppNotTerminatedError,
    is_pod_running,
    create_deployment,
    read_deployment,
    delete_deployment,
    delete_pods,
    list_deployment_pods,
    list_replicaset_pods,
    validate_deployment,
    validate_terminated_deployment,
)

__all__ = [
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'APIServerError',
    'is_not_found',
    'Settings',
    'NetworkingSettings',
    'ValidationSettings',
    'LabellingSettings',
    'DeletionSettings',
    'DEFAULT_DEPLOYMENT_TIMEOUT',
    'DEFAULT_DEPLOYMENT_INTERVAL',
    'DEFAULT_TEARDOWN_TIMEOUT',
    'DEFAULT_TEARDOWN_INTERVAL',
    'DEFAULT_CLAIM_TIMEOUT',
    'DEFAULT_CLAIM_INTERVAL',
    'DEFAULT_LABEL_UPDATE_RETRIES',
    'load_manifests',
    'parse_manifests',
    'parse_quantity',
    'Logger',
    'RawBody',
    'Labels',
    'Annotations',
    'LoginError',
    'ConnectionInfo',
    'configure',
    'LogFormat',
    'ObjectLogger',
    'TemporaryError',
    'PermanentError',
    'ConvergenceError',
    'ConvergenceTimeoutError',
    'ConvergenceStoppedError',
    'run_until',
    'fixed',
    'exponential',
    'jittered',
    'connected',
    'NodeRef',
    'NodeType',
    'SchedulerOps',
    'login',
    'login_with_kubeconfig',
    'login_with_service_account',
    'DriverRegistry',
    'DriverNotFoundError',
    'get_default_registry',
    'set_default_registry',
    'driver',
    'NodeNotReadyError',
    'check_node_conditions',
    'is_master_node',
    'list_nodes',
    'read_node',
    'validate_node',
    'add_node_label',
    'remove_node_label',
    'LabelSchedulerOps',
    'StorageDisabledError',
    'PVCNotReadyError',
    'ClaimParamsError',
    'create_storage_class',
    'delete_storage_class',
    'validate_storage_class',
    'create_pvc',
    'read_pvc',
    'delete_pvc',
    'validate_pvc',
    'get_pvc_volume_name',
    'get_pvc_params',
    'AppNotReadyError',
    'AppNotTerminatedError',
    'is_pod_running',
    'create_deployment',
    'read_deployment',
    'delete_deployment',
    'delete_pods',
    'list_deployment_pods',
    'list_replicaset_pods',
    'validate_deployment',
    'validate_terminated_deployment',
]
