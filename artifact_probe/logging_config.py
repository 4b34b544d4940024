"""
Custom logging configuration to suppress run-status polling logs
"""

import logging
import logging.config
from typing import Any, Dict

RUN_STATUS_PATH = "/apis/v2beta1/runs/"


class PollingRequestFilter(logging.Filter):
    """Filter to suppress the per-poll request logs emitted by httpx."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out run-status GETs from httpx request logs."""
        if record.name == "httpx":
            message = record.getMessage()
            if RUN_STATUS_PATH in message and "GET" in message:
                return False
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with polling-request suppression."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "polling_request_filter": {
                "()": PollingRequestFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "http": {
                "format": "%(asctime)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr"
            },
            "http": {
                "class": "logging.StreamHandler",
                "formatter": "http",
                "stream": "ext://sys.stderr",
                "filters": ["polling_request_filter"]
            }
        },
        "loggers": {
            "httpx": {
                "handlers": ["http"],
                "level": level,
                "propagate": False
            },
            "httpcore": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            },
            "artifact_probe": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
