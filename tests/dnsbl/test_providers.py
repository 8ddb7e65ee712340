import pytest

from boardcache.dnsbl.providers import BlacklistProvider, build_endpoint


class TestBuildEndpoint:

    def test_implicit_prefix(self):
        assert build_endpoint("zen.example.org", "4.3.2.1") == "4.3.2.1.zen.example.org"

    def test_placeholder(self):
        assert build_endpoint("%.tor.example.org", "4.3.2.1") == "4.3.2.1.tor.example.org"


class TestBlacklistProvider:

    def test_from_zone_string(self):
        provider = BlacklistProvider.from_config("zen.example.org")
        assert provider == BlacklistProvider("zen.example.org", None)

    def test_from_pair_with_list_policy(self):
        provider = BlacklistProvider.from_config(["zen.example.org", [2, 3]])
        assert provider.policy == (2, 3)

    def test_from_single_item_list(self):
        assert BlacklistProvider.from_config(["zen.example.org"]).policy is None

    def test_no_policy_always_blocks(self):
        assert BlacklistProvider("z").blocks(["127.0.0.200"])

    @pytest.mark.parametrize("policy, expected", [
        ({2, 4}, True),
        (frozenset({5}), False),
        ("4", True),
        (lambda addresses: False, False),
    ])
    def test_policies(self, policy, expected):
        assert BlacklistProvider("z", policy).blocks(["127.0.0.4"]) is expected
