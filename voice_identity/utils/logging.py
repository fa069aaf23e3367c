"""Structured logging for the voice identity engine.

Wraps the standard library logger so call sites can attach structured
context with ``extra_data={...}`` and every record carries the id of the
request it belongs to.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_ROOT_LOGGER_NAME = "voice_identity"


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the correlation id for the current request.

    Args:
        request_id: Id to use. A short random id is generated if omitted.

    Returns:
        The id now in effect.
    """
    request_id = request_id or uuid.uuid4().hex[:12]
    _request_id.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Get the correlation id for the current request, if any."""
    return _request_id.get()


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter accepting an ``extra_data`` keyword argument."""

    def process(self, msg, kwargs):
        extra = kwargs.pop("extra", None) or {}
        extra_data = kwargs.pop("extra_data", None)
        if extra_data:
            extra["extra_data"] = extra_data
        extra["request_id"] = get_request_id()
        kwargs["extra"] = extra
        return msg, kwargs


class JSONFormatter(logging.Formatter):
    """Render records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            payload["request_id"] = request_id
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["data"] = extra_data
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ReadableFormatter(logging.Formatter):
    """Human readable formatter that appends structured context."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        request_id = getattr(record, "request_id", None)
        if request_id:
            line = f"[{request_id}] {line}"
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            context = " ".join(f"{k}={v}" for k, v in extra_data.items())
            line = f"{line} | {context}"
        return line


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure the package root logger.

    Args:
        level: Log level name.
        json_format: Emit JSON lines instead of readable text.
    """
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else ReadableFormatter())
    root.addHandler(handler)
    root.propagate = False


def get_logger(name: str) -> StructuredLoggerAdapter:
    """Get a structured logger for a module."""
    return StructuredLoggerAdapter(logging.getLogger(name), {})


def log_llm_call(
    logger: StructuredLoggerAdapter,
    provider: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
    duration_ms: int,
    success: bool,
    error: Optional[str] = None,
) -> None:
    """Emit one structured record for a text-generation call."""
    data = {
        "provider": provider,
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "duration_ms": duration_ms,
        "success": success,
    }
    if error:
        data["error"] = error
        logger.warning(f"LLM call to {provider} failed: {error}", extra_data=data)
    else:
        logger.debug(f"LLM call to {provider}/{model} took {duration_ms}ms", extra_data=data)
