import logging
import sys
from typing import Any, MutableMapping

import structlog

from .config import ClientConfig


# Event keys whose values must never reach a log line
SECRET_KEYS = frozenset({"password", "token", "authorization", "content"})
REDACTED = "[redacted]"

_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def redact_secrets(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    for key in event_dict.keys() & SECRET_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(config: ClientConfig, *, debug: bool = False) -> None:
    """
    Route structlog through stdlib logging on stderr.

    `debug` (the --debug flag) or `SECURENOTE_DEBUG` switches to DEBUG with the
    console renderer; otherwise events are JSON at WARNING so they stay out of
    the way of command output. httpx/httpcore follow `config.http_log_level`.
    """
    debug = debug or config.debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(config.http_log_level)

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
