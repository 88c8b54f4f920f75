"""
Centralized logging configuration for the Reformat service.

This module provides:
- Consistent logging setup for the app and the reformat package
- Environment-based level and format selection
- Optional rotating log file
"""

import logging
import logging.handlers
import sys
import os
from pathlib import Path
from typing import Optional, Dict, Union


# ===== LOGGING CONFIGURATION =====

LEVEL_NAMES: Dict[str, int] = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'WARN': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
    'FATAL': logging.CRITICAL,
}


def level_from_string(level_str: str) -> int:
    """Convert string log level to integer, defaulting to INFO."""
    return LEVEL_NAMES.get(level_str.strip().upper(), logging.INFO)


class LogConfig:
    """Logging settings read from the environment."""

    DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # More verbose, includes line numbers
    DEV_FORMAT = '%(asctime)s [%(levelname)8s] %(name)s:%(lineno)d - %(message)s'

    JSON_FORMAT = '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'

    @staticmethod
    def get_log_level() -> int:
        """Get log level from LOG_LEVEL, or INFO (WARNING under pytest)."""
        level_str = os.getenv('LOG_LEVEL', os.getenv('LOGLEVEL'))
        if level_str:
            return level_from_string(level_str)

        if 'pytest' in sys.modules or 'PYTEST_CURRENT_TEST' in os.environ:
            return logging.WARNING

        return logging.INFO

    @staticmethod
    def get_log_format() -> str:
        format_type = os.getenv('LOG_FORMAT', 'standard').lower()

        if format_type in ('dev', 'development'):
            return LogConfig.DEV_FORMAT
        elif format_type == 'json':
            return LogConfig.JSON_FORMAT
        return LogConfig.DEFAULT_FORMAT

    @staticmethod
    def should_log_to_file() -> bool:
        return os.getenv('LOG_TO_FILE', 'false').lower() in ('true', '1', 'yes')

    @staticmethod
    def get_log_file_path() -> Optional[Path]:
        log_file = os.getenv('LOG_FILE')
        if log_file:
            return Path(log_file)
        return None


# ===== SETUP =====

_configured = False


def setup_logging(level: Optional[Union[str, int]] = None,
                  format_str: Optional[str] = None,
                  log_to_file: bool = False,
                  log_file: Optional[Union[str, Path]] = None,
                  force: bool = False) -> None:
    """Configure the root logger once; later calls are no-ops unless forced."""
    global _configured
    if _configured and not force:
        return

    if isinstance(level, str):
        level = level_from_string(level)
    log_level = level or LogConfig.get_log_level()
    formatter = logging.Formatter(format_str or LogConfig.get_log_format())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file_path = Path(log_file) if log_file else LogConfig.get_log_file_path()
    if (log_to_file or LogConfig.should_log_to_file()) and log_file_path:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger, configuring logging on first use."""
    setup_logging()
    return logging.getLogger(name or "reformat")
