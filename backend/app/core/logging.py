"""
logging.py — Task Board Log Setup

Purpose:
- One console format for request timings, auth decisions and store
  mutations: timestamp | level | logger | message
- Keep third-party noise (passlib backend probing, SQLAlchemy statement
  echo, httpx in tests) at WARNING unless SQL echo is switched on.

`create_app()` calls `configure_logging()` on every build; only the first
call installs the handler, later calls just adjust levels.
"""

import logging
from typing import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

THIRD_PARTY_LOGGERS = ("passlib", "sqlalchemy.engine.Engine", "httpx")


def configure_logging(
    level: str = "INFO",
    sql_echo: bool = False,
    quiet: Iterable[str] = THIRD_PARTY_LOGGERS,
) -> None:
    """
    Parameters:
        level: root level name ("DEBUG" ... "CRITICAL"); unknown names mean INFO.
        sql_echo: leave SQLAlchemy's statement log at INFO so `SQL_ECHO`
            output is visible.
        quiet: logger names pinned to WARNING.
    """
    root_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=root_level, format=LOG_FORMAT)
    root.setLevel(root_level)

    for name in quiet:
        if sql_echo and name.startswith("sqlalchemy"):
            continue
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).debug("Logging configured (level=%s, sql_echo=%s)", level, sql_echo)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use as `logger = get_logger(__name__)`."""
    return logging.getLogger(name)
