from __future__ import annotations

import inspect
import logging.config
import sys
import typing
from typing import Any, override

from loguru import logger

from querybuilder.config.general import CONFIG, GeneralConfig

if typing.TYPE_CHECKING:
    from loguru import Record


class InterceptHandler(logging.Handler):
    """Logger which forwards to loguru."""

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Intercept stdlib logging and send it to loguru handling."""
        # Get corresponding Loguru level if it exists.
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message.
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def format_stdout(record: Record) -> str:
    """Build the colorized stdout format for a record."""
    header = "<cyan>{time:YYYY-MM-DDTHH:mm:ss.SSSZ}</cyan> <level>{level:8}</level> "
    log = "{message:80} <cyan>{name}:{function}():{line}</cyan>\n{exception}"
    if "builder" in record["extra"]:
        header += f"<green>{record['extra']['builder']}</green> "

    return header + log


def configure_logging(config: GeneralConfig = CONFIG) -> dict[str, Any]:
    """Route standardlib logging to loguru and configure loguru.

    The library keeps its logger disabled until this is called, so that
    embedding applications decide whether builder activity is logged.
    """
    std_log_config = {
        "version": 1,
        "handlers": {
            "loguru": {
                "()": InterceptHandler,
            }
        },
        "loggers": {
            "querybuilder": {
                "level": "DEBUG",
                "handlers": ["loguru"],
            },
        },
        "incremental": False,
        "disable_existing_loggers": False,
    }
    logging.config.dictConfig(std_log_config)

    logger.remove()
    logger.add(
        sys.stdout,
        format=format_stdout,
        colorize=True,
        backtrace=True,
        diagnose=False,
        level=config.log_level,
    )
    if config.log.to_file:
        logger.add(
            config.log.path,
            format="{time:YYYY-MM-DDTHH:mm:ss.SSSZ} | {level:8} | {message:80} | {extra} | {name}:{function}:{line}",
            colorize=False,
            backtrace=True,
            diagnose=True,
            rotation=config.log.rotation,
            retention=config.log.retention,
            level=config.log_level,
        )
    logger.enable("querybuilder")

    return std_log_config
