"""Cross-origin policy: which request origins may read our responses."""

import logging
from dataclasses import dataclass

from core.config import CorsConfig


logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, HEAD, OPTIONS"
DEFAULT_ALLOWED_HEADERS = "Content-Type"
PREFLIGHT_MAX_AGE = 600


@dataclass(frozen=True)
class OriginPolicy:
    """Allow-list check for the Origin request header.

    Evaluation is stateless: each call depends only on the origin and the
    policy itself.
    """

    allowed_origins: tuple[str, ...] = ()
    allow_all: bool = False

    @classmethod
    def from_config(cls, cors: CorsConfig) -> "OriginPolicy":
        return cls(allowed_origins=tuple(cors.allowed_origins), allow_all=cors.allow_all)

    def is_allowed(self, origin: str | None) -> bool:
        # No origin means a same-origin or non-browser caller (curl, Postman).
        if not origin:
            return True
        if self.allow_all:
            return True
        return origin in self.allowed_origins

    def evaluate(self, origin: str | None) -> bool:
        """Check the origin and log the decision."""
        allowed = self.is_allowed(origin)
        if allowed:
            logger.info("Origin %s: allow", origin or "<none>")
        else:
            logger.warning("Origin %s: reject", origin)
        return allowed

    def cors_headers(self, origin: str) -> dict[str, str]:
        """Headers for a response released to an allowed origin."""
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
            "Vary": "Origin",
        }

    def preflight_headers(
        self, origin: str, requested_headers: str | None = None
    ) -> dict[str, str]:
        """Headers answering an OPTIONS preflight from an allowed origin."""
        headers = self.cors_headers(origin)
        headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
        headers["Access-Control-Allow-Headers"] = requested_headers or DEFAULT_ALLOWED_HEADERS
        headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE)
        return headers
