"""Loguru sinks for the sync job and library callers."""

import sys

from loguru import logger

from settings import API_TOKENS, LOG_DIR, LOG_LEVEL

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <cyan>{extra[taxonomy]}</cyan> <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {extra[taxonomy]} {message}"


def _redact_tokens(record) -> None:
    """Gallery API tokens never reach a sink."""
    for token in API_TOKENS:
        if token in record["message"]:
            record["message"] = record["message"].replace(token, token[:4] + "***")


def setup_logging(level: str | None = None, to_file: bool = True):
    """Console sink, plus a daily term sync log under LOG_DIR when to_file is set.

    Bind ``taxonomy=...`` on the logger to tag lines with the taxonomy they touch.
    """
    logger.remove()
    logger.configure(extra={"taxonomy": "-"}, patcher=_redact_tokens)

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level or LOG_LEVEL, colorize=True)

    if to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / "taxonomy_{time:YYYY-MM-DD}.log",
            format=FILE_FORMAT,
            level="DEBUG",
            rotation="00:00",
            retention="7 days",
            compression="gz",
        )
        logger.debug("Term sync log in {}", LOG_DIR)

    return logger
