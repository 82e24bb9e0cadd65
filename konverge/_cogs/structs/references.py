import dataclasses
import urllib.parse
from typing import List, Mapping, NewType, Optional

# A specific really existing addressable namespace (at least, the one assumed to be so).
NamespaceName = NewType('NamespaceName', str)

# A namespace reference usable in the API calls. `None` means cluster-wide API calls.
Namespace = Optional[NamespaceName]


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Resource:
    """
    A reference to a very specific built-in resource kind.

    It is used to form the K8s API URLs. Generally, K8s API only needs
    an API group, an API version, and a plural name of the resource.
    """

    group: str
    """
    The resource's API group; e.g. ``"apps"``, ``"storage.k8s.io"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    version: str
    """
    The resource's API version; e.g. ``"v1"``, ``"v1beta1"``, etc.
    """

    plural: str
    """
    The resource's plural name; e.g. ``"pods"``, ``"deployments"``.
    It is used as an API endpoint, together with API group & version.
    """

    kind: Optional[str] = None
    """
    The resource's kind (as in YAML files); e.g. ``"Pod"``, ``"Deployment"``.
    """

    namespaced: Optional[bool] = None
    """
    Whether the resource is namespaced (``True``) or cluster-scoped (``False``).
    """

    def __hash__(self) -> int:
        return hash((self.group, self.version, self.plural))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            self_tuple = (self.group, self.version, self.plural)
            other_tuple = (other.group, other.version, other.plural)
            return self_tuple == other_tuple
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        """ As used in the bodies: e.g. ``"v1"`` or ``"apps/v1"``. """
        return f'{self.group}/{self.version}' if self.group else self.version

    def get_url(
            self,
            *,
            namespace: Namespace = None,
            name: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Build a URL to be used with K8s API.

        If the namespace is not set, a cluster-wide URL is returned.
        For cluster-scoped resources, the namespace must not be set.

        If the name is not set, the URL for the resource list is returned.
        Otherwise (if set), the URL for the individual resource is returned.

        Params go to the query parameters (``?param1=value1&param2=value2...``).
        """
        if not self.namespaced and namespace is not None:
            raise ValueError("Specific namespaces are not supported for cluster-scoped resources.")
        if self.namespaced and namespace is None and name is not None:
            raise ValueError("Specific namespaces are required for specific namespaced resources.")

        parts: List[Optional[str]] = [
            '/api' if self.group == '' and self.version == 'v1' else '/apis',
            self.group,
            self.version,
            'namespaces' if self.namespaced and namespace is not None else None,
            namespace if self.namespaced and namespace is not None else None,
            self.plural,
            name,
        ]

        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([part for part in parts if part])
        return path + ('?' if query else '') + query


# The well-known resources used by the checks. They are stable, so no discovery is needed.
NODES = Resource('', 'v1', 'nodes', kind='Node', namespaced=False)
PODS = Resource('', 'v1', 'pods', kind='Pod', namespaced=True)
PERSISTENT_VOLUME_CLAIMS = Resource('', 'v1', 'persistentvolumeclaims',
                                    kind='PersistentVolumeClaim', namespaced=True)
DEPLOYMENTS = Resource('apps', 'v1', 'deployments', kind='Deployment', namespaced=True)
REPLICA_SETS = Resource('apps', 'v1', 'replicasets', kind='ReplicaSet', namespaced=True)
STORAGE_CLASSES = Resource('storage.k8s.io', 'v1', 'storageclasses',
                           kind='StorageClass', namespaced=False)
