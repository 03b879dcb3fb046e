"""
Purpose:
- One place to configure stdlib logging for the API process.
- Console handler only; uvicorn's own loggers keep their handlers.
"""

from __future__ import annotations
import logging.config
from .settings import Settings

def build_logging_config(cfg: Settings) -> dict:
    level = cfg.log_level.upper()
    loggers = {
        name: {"level": lvl.upper()}
        for name, lvl in cfg.log_level_overrides.items()
    }
    loggers["app"] = {"handlers": ["console"], "level": level, "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{levelname} {asctime} {module} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": loggers,
    }

def configure_logging(cfg: Settings) -> None:
    logging.config.dictConfig(build_logging_config(cfg))
