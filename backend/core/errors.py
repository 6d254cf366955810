"""Error types raised between the origin guard, the pool and the endpoint."""

from litestar.exceptions import PermissionDeniedException


GENERIC_DATABASE_MESSAGE = "Error fetching data from the database."
GENERIC_ORIGIN_MESSAGE = "Not allowed by CORS"


class ConfigError(ValueError):
    """A configuration value could not be parsed."""


class OriginRejected(PermissionDeniedException):
    """The request origin is not in the allow-list and the override is off."""

    def __init__(self) -> None:
        super().__init__(detail=GENERIC_ORIGIN_MESSAGE)


class DatabaseError(Exception):
    """Base for failures talking to the database.

    The message is for server-side logs only; callers receive
    GENERIC_DATABASE_MESSAGE.
    """


class ConnectionFailure(DatabaseError):
    """Could not acquire or establish a database connection."""


class ExecutionFailure(DatabaseError):
    """The stored procedure call failed."""
