# logging_config.py

import logging
import logging.config
import os

from src.pagerduty.config import get_settings

LOG_DIR = "logs"


def build_logging_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
            "verbose": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - "
                "%(message)s [%(filename)s:%(lineno)s]",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
            "file": {
                "level": "DEBUG",
                "class": "logging.FileHandler",
                "filename": os.path.join(LOG_DIR, "pagerduty.log"),
                "formatter": "verbose",
            },
        },
        "loggers": {
            "src.pagerduty": {
                "level": "DEBUG",
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "httpx": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
            "aiohttp": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def setup_logging(level: str | None = None):
    """
    Opt-in logging setup for applications embedding the client.
    Importing the library never configures logging on its own.
    """
    if not os.path.exists(LOG_DIR):
        os.mkdir(LOG_DIR)

    logging.config.dictConfig(build_logging_config(level or get_settings().LOG_LEVEL))
