"""
Logging of the checks, with the references to the checked objects.

The per-object messages carry the object's reference in the ``k8s_ref`` extra.
It is rendered either as a ``[namespace/name]`` prefix of the message,
or as a separate field in the JSON logs -- for the log parsers to filter on.
Cluster-scoped objects (e.g. nodes) are prefixed with ``[name]`` only.
"""
import copy
import enum
import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, MutableMapping, Optional, TextIO, Tuple, Union

from pythonjsonlogger.core import RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter

from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import bodies

logger = logging.getLogger('konverge.objects')

# A key for object references in JSON logs, as seen by the log parsers.
DEFAULT_JSON_REFKEY = 'object'


class LogFormat(enum.Enum):
    """ Log formats, as accepted by :func:`configure`. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


def render_ref(ref: Mapping[str, Optional[str]]) -> str:
    namespace = ref.get('namespace')
    name = ref.get('name') or ''
    return f"[{namespace}/{name}]" if namespace else f"[{name}]"


class ObjectFormatter(logging.Formatter):
    """ A base for both text & JSON formatters: optionally prefixes the messages. """

    def __init__(self, *args: Any, prefix: bool = False, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.prefix = prefix

    def format(self, record: logging.LogRecord) -> str:
        if self.prefix and hasattr(record, 'k8s_ref'):
            record = copy.copy(record)  # shallow
            record.msg = f"{render_ref(getattr(record, 'k8s_ref'))} {record.msg}"
        return super().format(record)


class ObjectTextFormatter(ObjectFormatter):
    pass


class ObjectJsonFormatter(ObjectFormatter, JsonFormatter):
    """ JSON lines with the object reference and a severity for the log collectors. """

    def __init__(self, *args: Any, refkey: Optional[str] = None, **kwargs: Any) -> None:
        kwargs['reserved_attrs'] = set(kwargs.pop('reserved_attrs', RESERVED_ATTRS)) | {'k8s_ref'}
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self.refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: Dict[str, Any],
            record: logging.LogRecord,
            message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if hasattr(record, 'k8s_ref'):
            log_record[self.refkey] = getattr(record, 'k8s_ref')
        log_record.setdefault('severity', (
            "debug" if record.levelno <= logging.DEBUG else
            "info" if record.levelno <= logging.INFO else
            "warn" if record.levelno <= logging.WARNING else
            "error" if record.levelno <= logging.ERROR else
            "fatal"))


class ObjectLogger(typedefs.LoggerAdapter):
    """
    A logger/adapter to carry the object identifiers for formatting.

    Constructed for every checked object: a node, a deployment, a claim.
    Only the identifying fields are kept, not the body: it changes between
    the attempts of the checks while the same logger is in use.
    """

    def __init__(self, *, body: bodies.RawBody) -> None:
        metadata = body.get('metadata', {})
        super().__init__(logger, dict(
            k8s_ref=dict(
                apiVersion=body.get('apiVersion'),
                kind=body.get('kind'),
                name=metadata.get('name'),
                uid=metadata.get('uid'),
                namespace=metadata.get('namespace'),
            ),
        ))

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # The adapter's extra would replace the message's extra; both are kept instead.
        kwargs["extra"] = dict(self.extra or {}, **kwargs.get('extra', {}))
        return msg, kwargs


# Used to identify and remove our own handlers on repeated configuration, e.g. in tests.
if TYPE_CHECKING:
    class _KonvergeStreamHandler(logging.StreamHandler[TextIO]):
        pass
else:
    class _KonvergeStreamHandler(logging.StreamHandler):
        pass


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> None:
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    handler = _KonvergeStreamHandler()
    handler.setFormatter(make_formatter(log_format=log_format, log_prefix=log_prefix,
                                        log_refkey=log_refkey))
    root = logging.getLogger()
    root.handlers[:] = [h for h in root.handlers if not isinstance(h, _KonvergeStreamHandler)]
    root.addHandler(handler)
    root.setLevel(log_level)

    # The event loop's own messages are noise unless debugging.
    asyncio_logger = logging.getLogger('asyncio')
    asyncio_logger.propagate = bool(debug)
    if not debug:
        asyncio_logger.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> ObjectFormatter:
    """ Text logs are prefixed by default, JSON logs are not (unless explicitly requested). """
    if log_format is LogFormat.JSON:
        return ObjectJsonFormatter(refkey=log_refkey, prefix=bool(log_prefix))
    elif isinstance(log_format, (LogFormat, str)):
        fmt = log_format.value if isinstance(log_format, LogFormat) else log_format
        prefix = log_prefix if log_prefix is not None else True
        return ObjectTextFormatter(fmt, prefix=prefix)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")
