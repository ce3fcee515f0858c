"""Raw ASGI helpers shared by the middleware (header lookup, JSON error replies).

Error bodies use the same envelope as the exception handlers:
{"error": <message>, "code": <code>[, "details"]}.
"""

import json
from typing import Any, Callable


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


async def send_json_error(
    send: Callable,
    status: int,
    message: str,
    code: str,
    details: dict[str, Any] | None = None,
) -> None:
    """Send a complete JSON error response."""
    content: dict[str, Any] = {"error": message, "code": code}
    if details:
        content["details"] = details
    await send({
        "type": "http.response.start",
        "status": status,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({
        "type": "http.response.body",
        "body": json.dumps(content).encode(),
        "more_body": False,
    })
