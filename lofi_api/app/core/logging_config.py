"""
Logging setup shared by the HTTP application and the command line.

Both entrypoints call :func:`setup_logging` with their ``Settings``;
``LOG_LEVEL`` picks the root level and ``LOG_FILE``, when set, adds a
file next to the console output.  Handlers installed here are tagged so
that building several apps in one process (the test suite does) does
not duplicate every line.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .config import Settings, settings as default_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_TAG = "_lofi_api_handler"


def _build_handlers(logfile: str, formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
    return handlers


def setup_logging(app_settings: Optional[Settings] = None) -> logging.Logger:
    """Attach the console (and optional file) handler to the root logger.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Source of ``log_level`` and ``log_file``.  Defaults to the
        process-wide settings.

    Returns
    -------
    logging.Logger
        The root logger.
    """
    app_settings = app_settings or default_settings
    root = logging.getLogger()
    root.setLevel(getattr(logging, app_settings.log_level.upper(), logging.INFO))
    if any(getattr(handler, _HANDLER_TAG, False) for handler in root.handlers):
        return root

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _build_handlers(app_settings.log_file, formatter):
        root.addHandler(handler)
    return root
