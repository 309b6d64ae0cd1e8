"""Span helpers for the workflow pipeline (scheduler passes, tenant scopes, workflow runs)."""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

P = ParamSpec("P")
T = TypeVar("T")

SpanValue = str | int | float | bool

# Keyword arguments copied onto spans as arg.<name>; anything else is skipped.
_SPAN_ARG_KEYS = frozenset({
    "tenant_id", "workflow_id", "execution_id", "task_id", "event_id",
    "trigger_type", "days_before", "only_tenant",
})

_tracer = trace.get_tracer("app.workflows")


def _finish(span: trace.Span, error: BaseException | None) -> None:
    if error is None:
        span.set_status(Status(StatusCode.OK))
        return
    span.set_status(Status(StatusCode.ERROR, str(error)))
    span.record_exception(error)


def traced(
    span_name: str, attributes: dict[str, SpanValue] | None = None
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Wrap a coroutine function in a span named span_name.

    Allowlisted keyword arguments (ids, trigger type, offsets) become
    ``arg.*`` attributes; exceptions mark the span as failed and propagate.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with _tracer.start_as_current_span(
                span_name, record_exception=False, set_status_on_exception=False
            ) as span:
                for key, value in (attributes or {}).items():
                    span.set_attribute(key, value)
                for key, value in kwargs.items():
                    if key in _SPAN_ARG_KEYS and value is not None:
                        span.set_attribute(f"arg.{key}", str(value))
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _finish(span, e)
                    raise
                _finish(span, None)
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: SpanValue) -> None:
    """Add attributes to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


class TracedOperation:
    """Async context manager opening a child span around a block of work."""

    def __init__(self, span_name: str, attributes: dict[str, SpanValue] | None = None) -> None:
        self.span_name = span_name
        self.attributes = attributes or {}
        self._cm: Any = None
        self.span: trace.Span | None = None

    async def __aenter__(self) -> "TracedOperation":
        self._cm = _tracer.start_as_current_span(
            self.span_name,
            attributes=self.attributes,
            record_exception=False,
            set_status_on_exception=False,
        )
        self.span = self._cm.__enter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if self.span is not None:
            _finish(self.span, exc_val)
        self._cm.__exit__(exc_type, exc_val, exc_tb)
