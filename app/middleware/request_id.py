"""Request correlation id.

The id from the request header (or a fresh UUID) lands on scope["state"],
where tenant resolution picks it up as the correlation id for emitted
events and log records. It is echoed back on the response. Pure ASGI so
streamed bodies pass through untouched.
"""

import re
import uuid
from typing import Callable

_SAFE_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")


def sanitize_request_id(raw: str | None) -> str:
    """Keep a caller id only if it is short and log-safe; otherwise mint one."""
    candidate = (raw or "").strip()
    return candidate if _SAFE_ID.fullmatch(candidate) else str(uuid.uuid4())


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    header_key = header_name.lower().encode()

    async def middleware(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            return await app(scope, receive, send)

        incoming = next(
            (v.decode("latin-1") for k, v in scope.get("headers", []) if k.lower() == header_key),
            None,
        )
        request_id = sanitize_request_id(incoming)
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (header_key, request_id.encode()),
                ]
            await send(message)

        await app(scope, receive, send_with_id)

    return middleware
