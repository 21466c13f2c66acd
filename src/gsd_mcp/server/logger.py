"""
Diagnostic logger — NEVER writes to stdout (would corrupt MCP protocol)

stderr always; additionally a file when GSD_MCP_LOG_FILE is set.
"""

import logging
import sys

from gsd_mcp.config import Config

_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Get a logger that writes to stderr (and the optional log file) only."""
    logger = logging.getLogger(f"gsd_mcp.{name}")
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, Config.LOG_LEVEL, logging.INFO))

    eh = logging.StreamHandler(sys.stderr)
    eh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(eh)

    if Config.LOG_FILE:
        fh = logging.FileHandler(Config.LOG_FILE, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        logger.addHandler(fh)

    logger.propagate = False
    return logger
