import itertools

import pytest

from boardcache.cache.keys import normalize, escape_key, unescape_key, is_entry_name


class TestNormalize:

    def test_prefix_is_prepended(self):
        assert normalize("board_", "thread_1") == "board_thread_1"

    def test_path_separator_is_escaped(self):
        assert "/" not in normalize("p_", "a/b/../c")

    def test_null_bytes_are_stripped(self):
        assert normalize("", "ab\0c") == "abc"

    @pytest.mark.parametrize("key", [".", ".."])
    def test_dot_names_do_not_point_at_directories(self, key):
        assert normalize("", key) not in (".", "..")

    def test_escape_is_reversible(self):
        for key in ["a/b", "100%", "%2F", "x%25/y", "..", "plain"]:
            assert unescape_key(escape_key(key)) == key

    def test_distinct_keys_never_collide(self):
        alphabet = ["a", "/", "%", "2", "F", ".", ":"]
        keys = {"".join(p) for n in range(1, 4) for p in itertools.product(alphabet, repeat=n)}
        normalized = {normalize("pre_", key) for key in keys}
        assert len(normalized) == len(keys)

    def test_escaped_separator_differs_from_literal_sequence(self):
        assert normalize("", "a/b") != normalize("", "a%2Fb")


class TestIsEntryName:

    @pytest.mark.parametrize("prefix, name", [
        ("", "lock"),
        ("", "%25lock"),
        ("", "%2E"),
        ("c_", "c_board%2Fa"),
    ])
    def test_names_produced_by_keys(self, prefix, name):
        assert is_entry_name(prefix, name)

    @pytest.mark.parametrize("prefix, name", [
        ("", "%lock"),
        ("", "."),
        ("c_", "lock"),
        ("", "%00"),
    ])
    def test_names_no_key_produces(self, prefix, name):
        assert not is_entry_name(prefix, name)
