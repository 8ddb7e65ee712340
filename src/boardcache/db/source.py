"""
SQL source over an SQLAlchemy engine.

Queries are plain parameterized text; rows come back as dictionaries. Driver
errors are split into "the table does not exist", which callers may tolerate,
and everything else.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .. import constants
from ..exceptions import QueryExecutionError, TableNotFoundError

logger = logging.getLogger(__name__)


def is_missing_table_error(error: DBAPIError) -> bool:
    """
    Tell whether a driver error reports a missing table.

    Recognizes the SQLSTATE (MySQL ``42S02``, PostgreSQL ``42P01``), the MySQL
    error number 1146 and the SQLite message.
    """
    orig = getattr(error, "orig", None)
    if orig is None:
        return False
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) in constants.MISSING_TABLE_SQLSTATES:
            return True
    args = getattr(orig, "args", ())
    if args and args[0] in constants.MISSING_TABLE_ERRNOS:
        return True
    message = str(orig).lower()
    return any(fragment in message for fragment in constants.MISSING_TABLE_MESSAGES)


class SqlSource:
    """External store executing parameterized queries through SQLAlchemy."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a query and return every row.

        Args:
            sql: The statement, with ``:name`` placeholders
            params: The placeholder values

        Returns:
            List[Dict[str, Any]]: One mapping per row

        Raises:
            TableNotFoundError: If the queried table does not exist
            QueryExecutionError: For any other failure
        """
        logger.debug(f"Executing: {sql} {dict(params or {})}")
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), dict(params or {}))
                return [dict(row) for row in result.mappings()]
        except DBAPIError as e:
            if is_missing_table_error(e):
                raise TableNotFoundError(str(e.orig)) from e
            raise QueryExecutionError(f"Query failed: {e}") from e
        except SQLAlchemyError as e:
            raise QueryExecutionError(f"Query failed: {e}") from e

    def close(self):
        self.engine.dispose()


def create_source(url: str, echo: bool = False) -> SqlSource:
    """Build a SqlSource for a database URL."""
    logger.debug(f"Creating database engine for {url.split('@')[-1]}")
    return SqlSource(create_engine(url, echo=echo))
