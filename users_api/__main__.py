import logging
import sys

import uvicorn

from .config import ConfigError, load_settings
from .main import create_app
from .store import StoreConnectionError, UserStore

logger = logging.getLogger("users_api")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> int:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.critical("%s", exc)
        return 1

    logging.getLogger().setLevel(settings.log_level)

    try:
        store = UserStore.connect(settings.database_url, echo=settings.sql_echo)
    except StoreConnectionError as exc:
        logger.critical("%s", exc)
        return 1

    app = create_app(store, title=settings.app_name)

    logger.info("Server is running on http://localhost:%s", settings.port)
    # uvicorn stops accepting connections on SIGINT/SIGTERM, then runs the
    # lifespan shutdown which closes the store.
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
    # Covers a server that failed to start before lifespan ran.
    store.close()
    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
