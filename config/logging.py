# coding: utf-8
"""
Loguru setup for Saratov Quest API
"""
import logging
import sys
from pathlib import Path

import sentry_sdk
from loguru import logger

from config.config import LOG_LEVEL, ENVIRONMENT, SENTRY_DSN

LOGS_DIR = Path(__file__).parent.parent / 'logs'

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"

# (file name pattern, minimum level, retention)
FILE_SINKS = (
    ("api_{time:YYYY-MM-DD}.log", "DEBUG", "7 days"),
    ("error_{time:YYYY-MM-DD}.log", "ERROR", "30 days"),
)

QUIET_LOGGERS = {
    'sqlalchemy.engine': logging.ERROR,
    'aiosqlite': logging.WARNING,
    'httpx': logging.WARNING,
    'openai': logging.WARNING,
    'asyncio': logging.WARNING,
}


def setup_logging() -> None:
    """
    Console plus daily-rotated files; ERROR and above also go to Sentry
    """
    logger.remove()
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=LOG_LEVEL, colorize=True)

    LOGS_DIR.mkdir(exist_ok=True)
    for pattern, level, retention in FILE_SINKS:
        logger.add(
            LOGS_DIR / pattern,
            format=FILE_FORMAT,
            level=level,
            rotation="00:00",
            retention=retention,
            compression="zip",
            encoding="utf-8",
        )

    if SENTRY_DSN:
        logger.add(sentry_sink, level="ERROR", format="{message}")

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    logger.info(f"Logging ready | environment={ENVIRONMENT} level={LOG_LEVEL}")


def sentry_sink(message):
    """Forward loguru ERROR/CRITICAL records to Sentry"""
    record = message.record

    if record["exception"]:
        sentry_sdk.capture_exception(record["exception"].value)
        return

    sentry_sdk.capture_message(
        record["message"],
        level="fatal" if record["level"].name == "CRITICAL" else "error",
        extras={
            "function": record["function"],
            "file": record["file"].path,
            "line": record["line"],
        },
    )
