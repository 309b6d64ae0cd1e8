"""Request ID and correlation ID middleware.

Generates or forwards X-Request-ID and X-Correlation-ID, echoes both on the
response and publishes them to app.shared.context for log records. Client
values are sanitized (length + character set) to prevent log injection.
Raw ASGI (no BaseHTTPMiddleware) so streaming responses are untouched.
"""

import re
import uuid
from typing import Callable

from app.shared.context import set_request_ids

REQUEST_ID_MAX_LENGTH = 64
REQUEST_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$"
)


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def sanitize_id(raw: str | None) -> str | None:
    """Return the stripped value when safe for logging, else None."""
    if not raw:
        return None
    value = raw.strip()
    if not REQUEST_ID_ALLOWED_PATTERN.fullmatch(value):
        return None
    return value


def RequestIdsMiddleware(
    app: Callable,
    request_id_header: str = "X-Request-ID",
    correlation_id_header: str = "X-Correlation-ID",
) -> Callable:
    """Attach request and correlation ids to scope state, log context and response."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_id(get_header(scope, request_id_header)) or str(uuid.uuid4())
        # A correlation id spans services; fall back to this request when absent.
        correlation_id = sanitize_id(get_header(scope, correlation_id_header)) or request_id
        state = scope.setdefault("state", {})
        state["request_id"] = request_id
        state["correlation_id"] = correlation_id
        set_request_ids(request_id, correlation_id)

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((request_id_header.encode(), request_id.encode()))
                headers.append((correlation_id_header.encode(), correlation_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        finally:
            set_request_ids(None, None)

    return asgi_app
