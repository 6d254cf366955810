"""Middleware enforcing the cross-origin policy."""

from typing import Any

from litestar.middleware import AbstractMiddleware
from litestar.types import ASGIApp, Message, Receive, Scope, Send

from core.errors import OriginRejected
from core.origins import OriginPolicy


class OriginGuardMiddleware(AbstractMiddleware):
    """Reject requests from origins outside the policy and add CORS headers
    to responses released to allowed ones."""

    def __init__(self, app: ASGIApp, policy: OriginPolicy, **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.policy = policy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = self._get_headers(scope)
        origin = headers.get("origin")

        if not self.policy.evaluate(origin):
            raise OriginRejected()

        if not origin:
            await self.app(scope, receive, send)
            return

        if scope.get("method") == "OPTIONS" and "access-control-request-method" in headers:
            extra = self.policy.preflight_headers(
                origin, headers.get("access-control-request-headers")
            )
        else:
            extra = self.policy.cors_headers(origin)

        encoded = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in extra.items()]

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                replaced = {name for name, _ in encoded}
                message["headers"] = [
                    (name, value)
                    for name, value in message.get("headers", [])
                    if name.lower() not in replaced
                ] + encoded
            await send(message)

        await self.app(scope, receive, send_with_cors)

    def _get_headers(self, scope: Scope) -> dict[str, str]:
        """Decode request headers; the last value wins for repeated names."""
        return {
            name.decode("latin-1").lower(): value.decode("latin-1")
            for name, value in scope.get("headers", [])
        }
