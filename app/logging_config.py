from logging.config import dictConfig
import logging

from app.config import settings


class SafeRequestIDFormatter(logging.Formatter):
    """
    A formatter that safely handles missing request_id and user_id attributes.
    """

    def format(self, record):
        # Records logged outside a request carry neither attribute
        if not hasattr(record, 'request_id'):
            record.request_id = 'no-request-id'
        if not hasattr(record, 'user_id'):
            record.user_id = '-'
        return super().format(record)


LOG_LEVEL = "DEBUG" if settings.DEBUG else "INFO"

# Central logging configuration
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": SafeRequestIDFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] [user=%(user_id)s] - %(message)s",
        },
        "simple": {
            "()": SafeRequestIDFormatter,
            "format": "%(asctime)s - %(levelname)s - [%(request_id)s] [user=%(user_id)s] - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "root": {
        "level": LOG_LEVEL,
        "handlers": ["console"],
    },
    "loggers": {
        "app": {  # Catch-all logger for all app modules
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn.error": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn.access": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "sqlalchemy.engine": {
            "level": "INFO" if settings.DEBUG else "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
        "openai": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
    },
}

def configure_logging():
    """Configure logging for the application."""
    dictConfig(LOGGING_CONFIG)
