"""Run the clickbeat service.

Usage:
    CONFIG_PATH=config.yaml python -m clickbeat
"""

import logging
import sys

import uvicorn

from clickbeat.adapters.logging import configure_logging, resolve_level
from clickbeat.app import create_app
from clickbeat.core.config import load_config
from clickbeat.core.errors import ConfigError

logger = logging.getLogger("clickbeat")


def main() -> int:
    """Load configuration and serve until interrupted.

    Returns:
        Process exit status: 1 if the configuration cannot be loaded.
    """
    try:
        config = load_config()
    except ConfigError as error:
        configure_logging()
        logger.error("failed to load configuration: %s", error)
        return 1
    configure_logging(config.log_level)
    logger.info("clickbeat listening on %s:%d", config.server.host, config.server.port)
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=logging.getLevelName(resolve_level(config.log_level)).lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
