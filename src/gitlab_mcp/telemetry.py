"""OpenTelemetry spans for tool calls and GitLab requests, no-op without the SDK."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from importlib import import_module
from typing import Any

logger = logging.getLogger("gitlab_mcp.telemetry")

trace: Any | None = None
try:
    trace = import_module("opentelemetry.trace")
    _HAS_OTEL = True
except Exception:
    _HAS_OTEL = False

_TRACER_NAME = "gitlab_mcp"


def _get_tracer() -> Any:
    """Return the package tracer, or None when OpenTelemetry is absent."""
    if _HAS_OTEL and trace is not None:
        return trace.get_tracer(_TRACER_NAME)
    return None


def generate_request_id() -> str:
    """UUID4 used to correlate one tool invocation across logs and spans."""
    return str(uuid.uuid4())


def set_span_attribute(span: Any, key: str, value: Any) -> None:
    """Set an attribute on ``span`` if there is one; never raises."""
    if not span:
        return
    try:
        span.set_attribute(key, value)
    except Exception as exc:
        logger.debug("Failed to set span attribute %s: %s", key, exc)


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[Any, None, None]:
    """Open a span named ``name``, or yield None when tracing is unavailable.

    Exceptions raised inside the block are recorded on the span by the SDK
    and re-raised unchanged.
    """
    try:
        tracer = _get_tracer()
    except Exception as exc:
        logger.debug("Tracer unavailable for span '%s': %s", name, exc)
        yield None
        return

    if tracer is None:
        yield None
        return

    try:
        span_context = tracer.start_as_current_span(name, attributes=attributes or {})
        span = span_context.__enter__()
    except Exception as exc:
        logger.debug("Could not start span '%s': %s", name, exc)
        yield None
        return

    try:
        yield span
    except BaseException as inner_exc:
        try:
            span_context.__exit__(type(inner_exc), inner_exc, inner_exc.__traceback__)
        except Exception as exit_exc:
            logger.debug("Could not close span '%s': %s", name, exit_exc)
        raise
    else:
        try:
            span_context.__exit__(None, None, None)
        except Exception as exit_exc:
            logger.debug("Could not close span '%s': %s", name, exit_exc)
