"""
Loading of the resource manifests from YAML files, as used to describe apps.

A single file can contain several documents (``---``-separated),
and ``kind: List`` documents are unwrapped into their items.
Empty documents are skipped.
"""
import os.path
from typing import Iterable, List, Mapping, Optional, Union

import yaml

from konverge._cogs.structs import bodies


def load_manifests(
        path: Union[str, 'os.PathLike[str]'],
        *,
        namespace: Optional[str] = None,
) -> List[bodies.RawBody]:
    """
    Read all resource bodies from a YAML file.

    If the namespace is given, it is set to the bodies that have none.
    """
    with open(os.path.expanduser(path), encoding='utf-8') as f:
        return parse_manifests(f.read(), namespace=namespace)


def parse_manifests(
        text: str,
        *,
        namespace: Optional[str] = None,
) -> List[bodies.RawBody]:
    result: List[bodies.RawBody] = []
    for document in yaml.safe_load_all(text):
        for body in _unwrap(document):
            if namespace is not None:
                body.setdefault('metadata', {}).setdefault('namespace', namespace)
            result.append(body)
    return result


def _unwrap(document: object) -> Iterable[bodies.RawBody]:
    if document is None:
        return []
    if not isinstance(document, Mapping):
        raise ValueError(f"A manifest must be a mapping, got {type(document).__name__}.")
    if document.get('kind') == 'List':
        return [body for item in document.get('items') or [] for body in _unwrap(item)]
    return [bodies.RawBody(document)]  # type: ignore
