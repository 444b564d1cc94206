"""
Logging Setup — console + rotating file under LOG_DIR.
"""
import logging.config
import os

from mamata.config import Settings


def configure_logging(settings: Settings) -> None:
    """Apply the process-wide logging config. Safe to call more than once."""
    os.makedirs(settings.LOG_DIR, exist_ok=True)

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"},
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "default",
                "filename": os.path.join(settings.LOG_DIR, "server.log"),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 3,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "mamata": {"handlers": ["console", "file"], "level": settings.LOG_LEVEL, "propagate": False},
        },
    })
