"""
physdb logging configuration.

Usage:
    from physdb.log import logger

    logger.info('constraining clock net')
    logger.warning('net does not exist in design')

Submodules log through child loggers (``logging.getLogger(__name__)``),
so one call to :func:`set_log_level` controls all of them:

    import physdb
    physdb.set_log_level('SILENT')   # Disable all logging
    physdb.set_log_level('WARNING')  # Only warnings and errors
"""

from __future__ import annotations
import logging

logger = logging.getLogger('physdb')
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter('[%(levelname)s] %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def set_log_level(level: str | int) -> None:
    """
    Set physdb logging level.

    Args:
        level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL', 'SILENT',
               or numeric level (logging.DEBUG, etc.)
    """
    if isinstance(level, str):
        level = level.upper()
        if level == 'SILENT':
            logger.setLevel(logging.CRITICAL + 1)
        else:
            logger.setLevel(getattr(logging, level))
    else:
        logger.setLevel(level)
