"""Logging configuration for the application."""
import logging
import logging.config
import sys


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging(level: str = "INFO"):
    """Setup logging configuration.

    Streamlit re-executes the entry script on every interaction, so this only
    installs handlers the first time it is called in a process.
    """
    global _configured
    if _configured:
        logging.getLogger("lounge").setLevel(level)
        return

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "simple",
                "stream": sys.stdout
            }
        },
        "loggers": {
            "lounge": {
                "level": level,
                "handlers": ["console"],
                "propagate": False
            },
            "db": {
                "level": level,
                "handlers": ["console"],
                "propagate": False
            },
            # Supabase clients log every request at INFO
            "httpx": {
                "level": "WARNING"
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"]
        }
    }

    logging.config.dictConfig(logging_config)
    _configured = True
