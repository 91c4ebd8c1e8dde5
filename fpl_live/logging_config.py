"""Logging setup for the live table engine and CLI.

Engine modules log under the ``fpl_live`` tree (``fpl_live.bonus``,
``fpl_live.substitutions``, ...). Substitution and bonus decisions are
logged at DEBUG, so they can be traced per module without turning on
DEBUG for file loading and everything else.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

ROOT_LOGGER = 'fpl_live'

# Modules whose DEBUG output explains a live score
DECISION_MODULES = ('bonus', 'substitutions', 'standings')


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = False,
    log_to_console: bool = True,
    trace_modules: Iterable[str] = (),
) -> logging.Logger:
    """
    Configure the fpl_live logger tree.

    Console lines are short; the optional log file records source
    locations as well. Calling this again replaces the previous handlers.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Level for the whole tree (default: INFO)
        log_to_file: Whether to write a timestamped log file (default: False)
        log_to_console: Whether to log to stderr (default: True)
        trace_modules: Engine modules (e.g., 'substitutions') logged at
            DEBUG regardless of level

    Returns:
        The configured 'fpl_live' logger

    Example:
        from fpl_live.logging_config import setup_logging
        logger = setup_logging(trace_modules=['substitutions'])
        logger.info("Scoring gameweek 22")
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers = []
    logger.propagate = False

    trace_modules = list(trace_modules)
    for name in set(DECISION_MODULES) | set(trace_modules):
        get_logger(name).setLevel(logging.DEBUG if name in trace_modules else logging.NOTSET)
    handler_level = logging.DEBUG if trace_modules else level

    if log_to_file:
        log_dir = log_dir or Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f'fpl_live_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(handler_level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(handler_level)
        console_handler.setFormatter(logging.Formatter('%(levelname)s [%(name)s]: %(message)s'))
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get a logger inside the fpl_live tree.

    Args:
        name: Logger name; bare names like 'engine' become 'fpl_live.engine'

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER and not name.startswith(f'{ROOT_LOGGER}.'):
        name = f'{ROOT_LOGGER}.{name}'
    return logging.getLogger(name)
