import pytest
from sqlalchemy import text

from boardcache.db.source import SqlSource, create_source

SCHEMA = [
    "CREATE TABLE boards (uri TEXT PRIMARY KEY, title TEXT, subtitle TEXT)",
    "CREATE TABLE theme_settings (theme TEXT, name TEXT, value TEXT)",
    "CREATE TABLE ban_appeals (id INTEGER PRIMARY KEY, ban_id INTEGER, time INTEGER, denied INTEGER)",
    "CREATE TABLE posts_b (id INTEGER PRIMARY KEY, thread INTEGER, files TEXT, locked INTEGER, sage INTEGER)",
]

ROWS = [
    "INSERT INTO boards VALUES ('v', 'Video Games', NULL), ('b', 'Random', 'anything goes')",
    "INSERT INTO theme_settings VALUES ('catalog', NULL, NULL), ('catalog', 'boards', 'b v'), "
    "('recent', NULL, NULL), ('recent', 'limit', '10'), ('orphan', NULL, NULL)",
    "INSERT INTO ban_appeals (ban_id, time, denied) VALUES (7, 1700000000, 1), (7, 1700000500, 0)",
    "INSERT INTO posts_b VALUES (1, NULL, '[]', 1, 0), (2, 1, '[\"a.png\"]', 0, 0), (3, NULL, NULL, 0, 1)",
]


class CountingSource(SqlSource):
    """SqlSource remembering every statement it executed."""

    def __init__(self, engine):
        super().__init__(engine)
        self.executed = []

    def fetch_all(self, sql, params=None):
        self.executed.append(sql)
        return super().fetch_all(sql, params)


@pytest.fixture
def source():
    base = create_source("sqlite://")
    with base.engine.begin() as conn:
        for statement in SCHEMA + ROWS:
            conn.execute(text(statement))
    counting = CountingSource(base.engine)
    yield counting
    counting.close()
