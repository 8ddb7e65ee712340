from unittest.mock import MagicMock

import pytest

from boardcache import constants
from boardcache.cache.facade import CacheFacade
from boardcache.cache.memory import MemoryCacheDriver
from boardcache.db.queries import DbQueries
from boardcache.exceptions import InvalidArgumentError, QueryExecutionError


@pytest.fixture
def queries(source, memory_cache):
    return DbQueries(source, memory_cache)


class TestCacheOrCompute:

    def test_miss_then_hit(self, queries, source):
        first = queries.get_boards()
        assert len(source.executed) == 1
        second = queries.get_boards()
        assert len(source.executed) == 1
        assert first == second

    def test_result_is_stored_with_family_ttl(self, source):
        cache = MagicMock()
        cache.get.return_value = None
        DbQueries(source, cache).get_ban_appeals(7)
        key, value, ttl = cache.set.call_args.args
        assert key == "ban_appeals_of_7"
        assert ttl == constants.BAN_INFO_TIMEOUT

    def test_board_ttl(self, source, clock):
        cache = CacheFacade(lambda: MemoryCacheDriver(clock=clock))
        queries = DbQueries(source, cache)
        queries.get_boards()
        clock.advance(constants.BOARD_INFO_TIMEOUT - 1)
        queries.get_boards()
        assert len(source.executed) == 1
        clock.advance(1)
        queries.get_boards()
        assert len(source.executed) == 2

    def test_empty_results_are_cached(self, queries, source):
        assert queries.get_ban_appeals(404) == []
        assert queries.get_ban_appeals(404) == []
        assert len(source.executed) == 1

    def test_other_failures_propagate(self, memory_cache):
        source = MagicMock()
        source.fetch_all.side_effect = QueryExecutionError("boom")
        with pytest.raises(QueryExecutionError):
            DbQueries(source, memory_cache).get_boards()
        assert memory_cache.get("boards_all_ordered") is None


class TestBoards:

    def test_boards_are_ordered(self, queries):
        assert queries.get_boards_uris() == ["b", "v"]

    def test_board_info_and_title(self, queries, source):
        assert queries.get_board_info("v")["title"] == "Video Games"
        assert queries.get_board_title("b") == "Random"
        assert queries.get_board_info("nope") is None
        assert queries.get_board_title("nope") is None
        assert len(source.executed) == 1


class TestThemes:

    def test_themes_empty(self, queries):
        assert sorted(row["theme"] for row in queries.get_themes_empty()) == ["catalog", "orphan", "recent"]

    def test_theme_settings(self, queries):
        assert queries.get_theme_settings("catalog") == {"boards": "b v"}
        assert queries.get_theme_settings("unknown") == {}

    def test_theme_settings_never_expire(self, source, clock):
        queries = DbQueries(source, CacheFacade(lambda: MemoryCacheDriver(clock=clock)))
        queries.get_theme_settings("recent")
        clock.advance(10 ** 8)
        queries.get_theme_settings("recent")
        assert len(source.executed) == 1


class TestBansAndThreads:

    def test_ban_files(self, queries):
        assert queries.get_ban_files_of(2, "b") == [{"files": '["a.png"]'}]

    def test_ban_files_of_board_without_table(self, queries, source):
        assert queries.get_ban_files_of(2, "gone") == []
        assert queries.get_ban_files_of(2, "gone") == []
        assert len(source.executed) == 1

    def test_ban_appeals(self, queries):
        appeals = queries.get_ban_appeals(7)
        assert [a["denied"] for a in appeals] == [1, 0]

    def test_thread(self, queries):
        assert queries.get_thread(1, "b") == {"locked": 1, "sage": 0}
        assert queries.get_thread_locked(1, "b") is True
        assert queries.get_thread_sage(3, "b") is True

    def test_reply_is_not_a_thread(self, queries):
        assert queries.get_thread(2, "b") is None

    def test_missing_thread_is_cached_as_false(self, queries, source, memory_cache):
        assert queries.get_thread(99, "b") is None
        assert queries.get_thread_locked(99, "b") is None
        assert memory_cache.get("thread_in_b_99") == constants.CACHE_FALSE
        assert len(source.executed) == 1

    def test_thread_of_board_without_table(self, queries):
        assert queries.get_thread(1, "gone") is None

    @pytest.mark.parametrize("uri", ["b; DROP TABLE boards", "a b", "", "x/y"])
    def test_board_uri_is_validated(self, queries, source, uri):
        with pytest.raises(InvalidArgumentError):
            queries.get_thread(1, uri)
        assert source.executed == []
