from __future__ import annotations

import copy
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

import structlog
from uvicorn.config import LOGGING_CONFIG as UVICORN_LOGGING_CONFIG

from sourcarr.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Loggers that get the configured level; everything else inherits from root.
_APP_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sourcarr")

# Upstream clients log every request at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _drop_color_message(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    # Uvicorn attaches "color_message"; it duplicates "event".
    event_dict.pop("color_message", None)
    return event_dict


def _add_record_created_timestamp_utc(
    _: Any, __: Any, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp foreign (stdlib) records with the time the LogRecord was created."""
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = dt.isoformat().replace("+00:00", "Z")
    return event_dict


def _renderer(config: AppConfig) -> structlog.typing.Processor:
    if config.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _structlog_formatter(config: AppConfig) -> dict[str, Any]:
    return {
        "()": structlog.stdlib.ProcessorFormatter,
        "foreign_pre_chain": [
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            _add_record_created_timestamp_utc,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        "processors": [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(config),
        ],
    }


def build_logging_config(config: AppConfig) -> dict[str, Any]:
    """
    dictConfig for ``uvicorn.run(log_config=...)``: uvicorn's default handlers,
    all rendered through one structlog ProcessorFormatter.
    """
    cfg = copy.deepcopy(UVICORN_LOGGING_CONFIG)
    level = config.log_level

    cfg["formatters"]["structlog"] = _structlog_formatter(config)
    for handler in cfg["handlers"].values():
        handler["formatter"] = "structlog"

    loggers = cfg.setdefault("loggers", {})
    for name in _APP_LOGGERS:
        loggers.setdefault(name, {"handlers": ["default"], "propagate": False})
        loggers[name]["level"] = level
    for name in _QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}

    cfg["root"] = {"handlers": ["default"], "level": level}
    return cfg


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """Configure structlog + stdlib logging; returns the dict for uvicorn."""
    structlog.configure(
        processors=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    cfg = build_logging_config(config)
    logging.config.dictConfig(cfg)
    log.info(
        "logging_configured", log_format=config.log_format, log_level=config.log_level
    )
    return cfg
