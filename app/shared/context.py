"""Request-scoped identifiers held in contextvars.

Set by RequestIdsMiddleware; read by the logging filter so every log line
emitted while serving a request carries its request and correlation ids.
Async-safe: each request task sees its own values.
"""

from contextvars import ContextVar

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def set_request_ids(request_id: str | None, correlation_id: str | None) -> None:
    _request_id.set(request_id)
    _correlation_id.set(correlation_id)


def get_request_id() -> str | None:
    return _request_id.get()


def get_correlation_id() -> str | None:
    return _correlation_id.get()
