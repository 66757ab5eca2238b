"""
Logging System

All agent_tools loggers live under the "agent_tools" package logger. Modules
just call logging.getLogger("agent_tools.<module>") and propagate upward;
handlers, level and format are attached once, to the package logger, from the
"logging" section of the config.
"""

import logging
import os
import sys
from pathlib import Path

PACKAGE_LOGGER = "agent_tools"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_configured = False


def _logging_settings(config) -> tuple:
    """(level, log_file, console_enabled) from config, with env overrides."""
    if config:
        level_str = config.get("logging.level", "INFO")
        log_file = config.get("logging.file")
        console_enabled = config.get("logging.console", True)
    else:
        level_str, log_file, console_enabled = "INFO", None, True

    # File-only logging for hosts that own the console (e.g. stdio tool servers)
    if os.environ.get('AGENT_TOOLS_LOG_FILE_ONLY'):
        console_enabled = False
        log_file = log_file or str(Path.cwd() / "logs" / "agent_tools.log")

    level = getattr(logging, str(level_str).upper(), logging.INFO)
    return level, log_file, console_enabled


def configure_logging(config=None, force: bool = False) -> logging.Logger:
    """Attach handlers to the package logger.

    Only the first call takes effect unless force is set, in which case
    existing handlers are closed and replaced.

    Args:
        config: Configuration object (optional)
        force: Reconfigure even if already configured

    Returns:
        The package logger
    """
    global _configured
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _configured and not force:
        return package_logger

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    level, log_file, console_enabled = _logging_settings(config)
    package_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.propagate = False
    _configured = True
    return package_logger


def get_logger(name: str, config=None) -> logging.Logger:
    """
    Get a logger below the package logger, configuring the package on first use

    Args:
        name: Logger name (usually __name__)
        config: Configuration object (optional)

    Returns:
        Logger instance
    """
    configure_logging(config)
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
