import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("blog_api.access")


class TimingMiddleware:
    """
    Pure ASGI access logger.

    Stamps ``X-Response-Time-Ms`` on each HTTP response (time until the
    response starts) and logs one line per request with the client, the
    status and that duration. Lifespan and websocket scopes pass through.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        client = scope.get("client")
        client_host = client[0] if client else "-"

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                elapsed_ms = (time.perf_counter() - start) * 1000
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-response-time-ms", f"{elapsed_ms:.2f}".encode()),
                ]
                logger.info(
                    '%s "%s %s" %d %.2fms',
                    client_host,
                    scope["method"],
                    scope["path"],
                    message["status"],
                    elapsed_ms,
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)
