"""Run the API server.

Usage:
    python -m main

Listens on HOST:PORT (defaults 0.0.0.0:3000).
"""

import uvicorn

from app import create_app
from core.config import AppConfig
from core.logging import configure_logging


def main() -> None:
    config = AppConfig.load()
    configure_logging(config.server.log_level)
    app = create_app(config)
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level.lower(),
    )


if __name__ == "__main__":
    main()
