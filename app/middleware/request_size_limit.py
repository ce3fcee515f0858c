"""Request body size limit middleware.

Credential endpoints accept small JSON bodies only; anything above the
configured maximum is rejected with 413 before it reaches a handler.
Enforces the limit for both Content-Length and Transfer-Encoding: chunked.
Uses raw ASGI (no BaseHTTPMiddleware) for production-safe streaming and background tasks.
"""

from typing import Callable

from app.middleware._asgi import get_header, send_json_error


async def _reject(send: Callable, max_bytes: int, actual: int) -> None:
    await send_json_error(
        send,
        413,
        f"Request body must be at most {max_bytes} bytes",
        "PAYLOAD_TOO_LARGE",
        {"max_bytes": max_bytes, "content_length": actual},
    )


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes (Content-Length or chunked). Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared is not None:
            try:
                length = int(declared)
            except ValueError:
                length = 0
            if length > max_bytes:
                await _reject(send, max_bytes, length)
                return
            await app(scope, receive, send)
            return

        # No Content-Length (chunked or streamed): buffer up to the limit, then replay.
        chunks: list[bytes] = []
        total = 0
        while True:
            message = await receive()
            if message["type"] != "http.request":
                return  # client disconnected
            body = message.get("body", b"")
            total += len(body)
            if total > max_bytes:
                await _reject(send, max_bytes, total)
                return
            chunks.append(body)
            if not message.get("more_body", False):
                break

        replay = iter(chunks)

        async def replay_receive() -> dict:
            chunk = next(replay, None)
            if chunk is None:
                return {"type": "http.request", "body": b"", "more_body": False}
            return {"type": "http.request", "body": chunk, "more_body": True}

        await app(scope, replay_receive, send)

    return asgi_app
