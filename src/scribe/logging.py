"""Logging configuration based on environment.

Every handler carries ``RequestContextFilter`` so application, uvicorn and
SQLAlchemy records all show the request that produced them.
"""

import logging.config

from scribe.config import settings

LOG_FORMATS = {
    "development": "%(levelname)s:     [%(request_id)s] %(name)s - %(message)s",
    "test": "%(levelname)s [%(request_id)s] %(name)s - %(message)s",
    "production": "%(asctime)s - [%(request_id)s] %(name)s - %(levelname)s - %(message)s",
}

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "aiosmtplib", "sqlalchemy.engine", "redis")


def get_log_config(include_uvicorn: bool = True) -> dict:
    """dictConfig for the current environment.

    Args:
        include_uvicorn: Also configure uvicorn's access and error loggers
    """
    is_dev = settings.is_development
    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {"()": "scribe.api.middleware.RequestContextFilter"},
        },
        "formatters": {
            "app": {"format": LOG_FORMATS[settings.environment]},
        },
        "handlers": {
            "app": {
                "class": "logging.StreamHandler",
                "formatter": "app",
                "filters": ["request_context"],
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        "root": {"handlers": ["app"], "level": settings.log_level},
    }

    if include_uvicorn:
        config["formatters"]["uvicorn"] = {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s [%(request_id)s] %(message)s"
            if is_dev
            else "%(asctime)s %(levelprefix)s [%(request_id)s] %(message)s",
        }
        config["formatters"]["access"] = {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s "%(request_line)s" %(status_code)s'
            if is_dev
            else '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
        }
        config["handlers"]["uvicorn"] = {
            "class": "logging.StreamHandler",
            "formatter": "uvicorn",
            "filters": ["request_context"],
            "stream": "ext://sys.stdout",
        }
        config["handlers"]["access"] = {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": "ext://sys.stdout",
        }
        config["loggers"]["uvicorn.error"] = {"handlers": ["uvicorn"], "level": "INFO", "propagate": False}
        config["loggers"]["uvicorn.access"] = {"handlers": ["access"], "level": "INFO", "propagate": False}

    return config


def get_uvicorn_log_config() -> dict:
    """Log config passed to ``uvicorn.run``."""
    return get_log_config(include_uvicorn=True)


def setup_logging() -> None:
    """Configure logging for the application."""
    logging.config.dictConfig(get_log_config(include_uvicorn=False))
