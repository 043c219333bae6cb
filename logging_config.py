import logging.config
from typing import Any, Dict


def logging_dict(level: str = "INFO") -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"std": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}},
        "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "std"}},
        "root": {"handlers": ["console"], "level": level.upper()},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(logging_dict(level))
