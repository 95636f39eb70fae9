"""
Structlog setup for the client.

The library only logs; it installs handlers when the application calls
``configure_logging()`` or sets ``NAKAMA_LOG_AUTOCONFIGURE=true``.
"""
import json
import logging
from typing import Any, List, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter

from nakama_client.core.config import settings


def _json_dumps(obj: Any, default: Any = None, **kwargs: Any) -> str:
    # structlog passes default/sort_keys through to the serializer
    return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)


def get_renderer(debug: bool) -> Any:
    """Console output while debugging, one JSON object per line otherwise."""
    if debug:
        return ConsoleRenderer(colors=True)
    return JSONRenderer(serializer=_json_dumps)


def configure_logging(debug: Optional[bool] = None, level: Optional[int] = None) -> None:
    """Route structlog and stdlib records (httpx, grpc, tenacity) through one root handler."""
    if debug is None:
        debug = settings.DEBUG
    if level is None:
        level = logging.DEBUG if debug else logging.INFO

    shared_processors: List[Any] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[ProcessorFormatter.remove_processors_meta, get_renderer(debug)],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


if settings.LOG_AUTOCONFIGURE:
    configure_logging()
