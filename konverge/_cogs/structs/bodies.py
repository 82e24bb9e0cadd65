"""
All the structures coming from/to the Kubernetes API.

For strict type-checking, they are detailed to the per-field level
(e.g. `TypedDict` instead of just ``Mapping[Any, Any]``) -- as used
by the checks. The callers can use arbitrary fields at runtime,
which are not declared in the type definitions at type-checking time.

All bodies are plain JSON-decoded dicts, as returned by the API.
The reconciliation checks only read them, and never modify them.
"""
from typing import Any, List, Mapping, Optional

from typing_extensions import TypedDict

from konverge._cogs.structs import references

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawOwnerReference(TypedDict, total=False):
    apiVersion: str
    kind: str
    name: str
    uid: str
    controller: bool
    blockOwnerDeletion: bool


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    ownerReferences: List[RawOwnerReference]
    resourceVersion: str
    deletionTimestamp: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.27/#nodecondition-v1-core
class RawCondition(TypedDict, total=False):
    type: str
    status: str  # "True", "False", "Unknown"
    reason: str
    message: str
    lastHeartbeatTime: str
    lastTransitionTime: str


def get_name(body: RawBody) -> Optional[str]:
    return body.get('metadata', {}).get('name')


def get_namespace(body: RawBody) -> references.Namespace:
    namespace: Optional[str] = body.get('metadata', {}).get('namespace')
    return None if namespace is None else references.NamespaceName(namespace)


def get_labels(body: RawBody) -> Labels:
    return body.get('metadata', {}).get('labels') or {}


def is_owned_by(body: RawBody, owner: RawBody) -> bool:
    """
    Check if the body is linked to the owner via its owner references.

    The links are matched by the owner's uid if both sides have it.
    Otherwise (e.g. the owner is a locally constructed body, not yet created),
    the links are matched by the owner's kind (if known) and name.
    """
    owner_meta = owner.get('metadata', {})
    owner_uid = owner_meta.get('uid')
    owner_name = owner_meta.get('name')
    owner_kind = owner.get('kind')
    for ref in body.get('metadata', {}).get('ownerReferences') or []:
        if owner_uid and ref.get('uid'):
            if ref.get('uid') == owner_uid:
                return True
        elif ref.get('name') == owner_name and (not owner_kind or ref.get('kind') == owner_kind):
            return True
    return False
