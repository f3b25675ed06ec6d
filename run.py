"""Entrypoint that reads PORT from environment and serves the backend app."""
import logging
import sys

from pydantic import ValidationError
from uvicorn.config import LOG_LEVELS
from uvicorn.logging import TRACE_LOG_LEVEL

from app.config import load_settings
from app.server import BindError, Listener

logger = logging.getLogger("run")


def main() -> int:
    logging.addLevelName(TRACE_LOG_LEVEL, "TRACE")
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    logging.getLogger().setLevel(LOG_LEVELS[settings.log_level])

    from app.main import app

    listener = Listener(app, settings.port, host=settings.host, log_level=settings.log_level)

    def on_listening() -> None:
        # the bound port, which differs from the configured one for PORT=0
        print(f"Server running on port {listener.port}", flush=True)

    try:
        listener.run(on_listening)
    except BindError as e:
        logger.error(f"Failed to start server on port {settings.port}: {e.reason}")
        return 1

    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
