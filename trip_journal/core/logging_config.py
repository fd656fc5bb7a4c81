"""
Logging setup for the command line and for applications embedding the
client.

Library modules only ever call ``logging.getLogger(__name__)``;
``setup_logging`` is the one place that attaches handlers.  It leaves
an already configured root logger alone, so calling it from an
application that set up logging itself is harmless.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Connection-pool chatter from the transport is only useful when
# debugging the transport itself.
NOISY_LOGGERS = ("urllib3",)


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Configure the root logger (or ``logger``) once.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Also write records to this file.  ``~`` is expanded.
    logger : Optional[logging.Logger]
        Logger to configure instead of the root logger.

    Returns
    -------
    bool
        ``True`` if handlers were installed, ``False`` if the logger
        already had some.
    """
    root = logger if logger is not None else logging.getLogger()
    if root.handlers:
        return False

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).expanduser().resolve()
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return True
