import logging
from logging.config import dictConfig

from sfa.core.config import settings


def configure_logging() -> None:
    """
    Configure console logging for the API and the Celery worker.

    Keeps configuration minimal so it works the same under uvicorn and tests.
    """
    level = settings.LOG_LEVEL.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "loggers": {
                # SQL echo stays off unless explicitly debugging
                "sqlalchemy.engine": {"level": "WARNING"},
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )
    logging.getLogger(__name__).info("Logging configured", extra={"level": level})
