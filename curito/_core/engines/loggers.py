"""
Logging of the waiting per component.

Every polling task logs via its own `ComponentLogger`, which carries
the component's identity in the log records. The formatters can then either
prefix the text messages with the component, or put it into a JSON field,
so that the interleaved logs of concurrent tasks remain readable.
"""
import copy
import enum
import logging
from typing import Any, MutableMapping, Optional, Tuple, Union

import pythonjsonlogger.jsonlogger

from curito._cogs.helpers import typedefs
from curito._cogs.structs import components

# Where `ComponentLogger` puts the component in the records.
COMPONENT_ATTR = 'curito_component'

DEFAULT_JSON_REFKEY = 'component'

# The severities as the log collectors know them, by the highest level of each.
SEVERITIES = [
    (logging.DEBUG, 'debug'),
    (logging.INFO, 'info'),
    (logging.WARNING, 'warn'),
    (logging.ERROR, 'error'),
]


class LogFormat(enum.Enum):
    PLAIN = '%(message)s'
    FULL = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'
    JSON = enum.auto()


def get_component(record: logging.LogRecord) -> Optional[components.Component]:
    return getattr(record, COMPONENT_ATTR, None)


def severity(levelno: int) -> str:
    for level, name in SEVERITIES:
        if levelno <= level:
            return name
    return 'fatal'


def prefixed(record: logging.LogRecord) -> logging.LogRecord:
    component = get_component(record)
    if component is None:
        return record
    record = copy.copy(record)  # other handlers must see the original message.
    record.msg = f"[{component}] {record.msg}"
    return record


class ComponentTextFormatter(logging.Formatter):

    def __init__(self, fmt: Optional[str] = None, *, prefix: bool = True) -> None:
        super().__init__(fmt)
        self.prefix = prefix

    def format(self, record: logging.LogRecord) -> str:
        return super().format(prefixed(record) if self.prefix else record)


class ComponentJsonFormatter(pythonjsonlogger.jsonlogger.JsonFormatter):  # type: ignore
    """
    One JSON object per line, with the component as a structured field.
    """

    def __init__(self, *, prefix: bool = False, refkey: Optional[str] = None) -> None:
        super().__init__(timestamp=True)
        self.prefix = prefix
        self.refkey = refkey or DEFAULT_JSON_REFKEY

    def format(self, record: logging.LogRecord) -> str:
        return super().format(prefixed(record) if self.prefix else record)

    def add_fields(
            self,
            log_record: MutableMapping[str, object],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.pop(COMPONENT_ATTR, None)  # not serializable as is.
        component = get_component(record)
        if component is not None:
            log_record[self.refkey] = {'name': component.name, 'label': component.value}
        log_record.setdefault('severity', severity(record.levelno))


class ComponentLogger(typedefs.LoggerAdapter):
    """
    Put the component into every record, next to the per-call extras.
    """

    def __init__(
            self,
            *,
            component: components.Component,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        base = logger if logger is not None else logging.getLogger('curito.components')
        super().__init__(base, {COMPONENT_ATTR: component})
        self.component = component

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        kwargs['extra'] = {**kwargs.get('extra', {}), COMPONENT_ATTR: self.component}
        return msg, kwargs


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = True,
        log_refkey: Optional[str] = None,
) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug or verbose else logging.WARNING if quiet else logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(make_formatter(log_format, prefix=log_prefix, refkey=log_refkey))
    root.addHandler(handler)

    # The event loop's own messages are for debugging only; otherwise, they go nowhere.
    asyncio_logger = logging.getLogger('asyncio')
    asyncio_logger.propagate = bool(debug)
    asyncio_logger.handlers[:] = [] if debug else [logging.NullHandler()]


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        *,
        prefix: Optional[bool] = None,
        refkey: Optional[str] = None,
) -> logging.Formatter:
    """
    The text formats are prefixed by default, the JSON one is not: it has a field instead.
    """
    if log_format is LogFormat.JSON:
        return ComponentJsonFormatter(prefix=bool(prefix), refkey=refkey)
    fmt = log_format.value if isinstance(log_format, LogFormat) else log_format
    if not isinstance(fmt, str):
        raise ValueError(f"Unsupported log format: {log_format!r}")
    return ComponentTextFormatter(fmt, prefix=prefix is not False)
