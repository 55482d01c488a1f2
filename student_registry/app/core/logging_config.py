"""
Logging configuration for the student registry.

What the service logs, by logger:

* ``student_registry.app.services.student_repository``: one INFO line
  per applied mutation (``Created student 1004803``, ``Updated student
  1004803 (gpa)``, ``Deleted student 1004803``).
* ``student_registry.app.services.student_service``: DEBUG lines for
  each step of a mutation (received, validated, applied) and a WARNING
  for every rejected one, carrying its status and reason.
* ``student_registry.app.core.db``: INFO per applied migration, DEBUG
  per stored or deleted record.
* ``student_registry_api``: DEBUG per outgoing client request, ERROR
  for failed ones.

``LOG_LEVEL`` picks the level (``DEBUG`` shows mutation steps) and
``LOG_FILE`` adds a file handler next to the console one.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path of a file to log to.  If omitted, only the console
        handler is installed.
    """
    logger = logging.getLogger()
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)
    if logger.handlers:
        # Already configured (tests, repeated create_app calls).
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
