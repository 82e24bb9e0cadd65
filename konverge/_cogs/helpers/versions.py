"""
Detecting the library's own version.

The version is not in the codebase: it belongs to the packaging metadata.
It is determined only once at startup when the code is loaded.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "konverge", unless renamed/forked.
        version = importlib.metadata.version(name)
    except Exception:
        pass  # not installed, or installed in some exotic way.
