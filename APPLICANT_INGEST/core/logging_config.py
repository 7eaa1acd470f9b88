import logging
import os
from core.config import IS_PRODUCTION, LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    if IS_PRODUCTION:
        os.makedirs(LOG_DIR, exist_ok=True)
        access_logger = logging.getLogger("access")
        handler = logging.FileHandler(os.path.join(LOG_DIR, "access.log"), encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        access_logger.addHandler(handler)
