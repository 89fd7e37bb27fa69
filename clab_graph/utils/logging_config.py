# clab_graph/utils/logging_config.py

import logging.config
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"

# Loggers that report every container lookup; only shown when debugging
CHATTY_LOGGERS = ("clab_graph.clients",)


def stderr_rich_handler(**kwargs) -> RichHandler:
    """RichHandler writing to stderr; stdout carries the graph output."""
    return RichHandler(console=Console(stderr=True), **kwargs)


def file_handler_config(log_file: str, log_level: str) -> dict:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return {
        "class": "logging.FileHandler",
        "filename": str(log_path),
        "level": log_level,
        "formatter": "file",
    }


def setup_logging(log_level: str = "INFO", log_file: str | None = None):
    """
    Configure console logging on stderr, plus a log file when requested.

    Parameters
    ----------
    log_level : str
        Level name such as "WARNING", "INFO" or "DEBUG".
    log_file : str | None
        Also write records to this file, creating parent directories.
    """
    handlers = {
        "console": {
            "()": stderr_rich_handler,
            "level": log_level,
            "formatter": "console",
            "rich_tracebacks": True,
            "show_path": False,
            "markup": False,
        },
    }
    if log_file:
        handlers["file"] = file_handler_config(log_file, log_level)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {"format": "%(message)s"},
                "file": {"format": FILE_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            },
            "handlers": handlers,
            "root": {"handlers": list(handlers), "level": log_level},
        }
    )

    level = logging.getLevelName(log_level)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.NOTSET if level <= logging.DEBUG else max(level, logging.WARNING)
        )
