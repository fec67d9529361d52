import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging defaults for the API process.

    ``LOG_LEVEL`` applies to the application loggers. Uvicorn access logs
    stay at WARNING unless the process runs at DEBUG.
    """
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    if resolved != "DEBUG":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
