"""Process-wide logging setup."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once at startup.

    Unknown level names fall back to INFO.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    # basicConfig is a no-op when handlers already exist
    logging.getLogger().setLevel(resolved)
