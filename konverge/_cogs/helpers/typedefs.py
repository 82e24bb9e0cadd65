"""
Rudimentary type [re-]definitions for cross-versioned Python & mypy.

Some stdlib classes are generics in the type-sheds, but not at runtime
in the older Pythons: e.g. ``logging.LoggerAdapter``. They are defined here
once in a reusable way, together with some plain type aliases.
"""
import logging
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# We only promise that it is based on one of the built-in loggable classes.
Logger = Union[logging.Logger, LoggerAdapter]
