"""
boardcache Database Module

- SqlSource: SQLAlchemy-backed external store
- DbQueries: Cached board, theme, ban and thread queries
"""

from .source import SqlSource, create_source, is_missing_table_error
from .queries import DbQueries, check_board_uri

__all__ = [
    'SqlSource',
    'create_source',
    'is_missing_table_error',
    'DbQueries',
    'check_board_uri',
]
