import json
import logging
import logging.config
import sys
import uuid
from typing import Optional

from property_manager.core.config import settings


class JsonFormatter(logging.Formatter):
    """
    Formatter for logging in JSON format.
    """
    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


class EndpointFilter(logging.Filter):
    """Drops access-log lines for the Prometheus scrape endpoint."""

    def filter(self, record: logging.LogRecord) -> bool:
        return "/metrics" not in record.getMessage()


def sanitize(value: Optional[str]) -> str:
    """Strip line breaks so user-supplied values cannot forge log entries."""
    if not value:
        return ""
    return value.replace("\r", "").replace("\n", "").replace("\t", " ")


def mask_id(value) -> str:
    """Show only the first 8 characters of an identifier."""
    if value is None:
        return ""
    text = sanitize(str(value))
    return f"{text[:8]}-****" if len(text) > 8 else text


def mask_storage_key(storage_key: Optional[str]) -> str:
    """
    Mask the tenant segment of a storage key, and any other directory segment
    that looks like an identifier.

    "3f1c2b7a-9d1e-.../properties/2026/abc.jpg" -> "3f1c2b7a-****/properties/2026/abc.jpg"
    """
    text = sanitize(storage_key)
    segments = text.split("/")
    if len(segments) < 2:
        return text
    masked = [mask_id(segments[0])]
    for segment in segments[1:-1]:
        masked.append(mask_id(segment) if _looks_like_id(segment) else segment)
    masked.append(segments[-1])
    return "/".join(masked)


def _looks_like_id(segment: str) -> bool:
    try:
        uuid.UUID(segment)
    except ValueError:
        return False
    return True


def setup_logging():
    """
    Set up logging configuration based on the environment.
    """
    log_level = settings.LOG_LEVEL.upper()

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": JsonFormatter,
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
        },
        "filters": {
            "metrics": {"()": EndpointFilter},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "default",
            },
            "json": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "json",
            },
        },
        "loggers": {
            "property_manager": {
                "level": log_level,
                "handlers": ["default"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["default"],
                "filters": ["metrics"],
                "propagate": False,
            },
            "uvicorn.error": {
                "level": "ERROR",
                "handlers": ["default"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARNING",
                "handlers": ["default"],
                "propagate": False,
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["default"]
        },
    }

    if settings.ENVIRONMENT == "production":
        logging_config["loggers"]["property_manager"]["handlers"] = ["json"]
        logging_config["loggers"]["uvicorn.access"]["handlers"] = ["json"]
        logging_config["loggers"]["uvicorn.error"]["handlers"] = ["json"]
        logging_config["root"]["handlers"] = ["json"]

    logging.config.dictConfig(logging_config)
    logger = logging.getLogger(__name__)
    logger.info(f"Logging setup complete for {settings.ENVIRONMENT} environment with level {log_level}")
