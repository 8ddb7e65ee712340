import pytest

from boardcache import constants
from boardcache.cache.facade import CacheFacade
from boardcache.cache.memory import MemoryCacheDriver
from boardcache.dnsbl.queries import DnsQueries, reverse_ip, parse_ip
from boardcache.exceptions import InvalidArgumentError


@pytest.fixture
def make_queries(memory_cache):
    def _make(resolver, providers=("xbl.example.org",), **kwargs):
        kwargs.setdefault("skip_reserved", False)
        return DnsQueries(resolver, memory_cache, providers=providers, **kwargs)
    return _make


class TestReverseIp:

    def test_ipv4(self):
        assert reverse_ip(parse_ip("127.0.0.1")) == "1.0.0.127"

    def test_ipv6_nibbles(self):
        rip = reverse_ip(parse_ip("2001:db8::1"))
        assert rip.startswith("1.0.0.0.0.0.0.0")
        assert rip.endswith("8.b.d.0.1.0.0.2")
        assert len(rip.split(".")) == 32

    @pytest.mark.parametrize("ip", ["", "1.2.3", "256.1.1.1", "example.org", "::g"])
    def test_invalid(self, ip):
        with pytest.raises(InvalidArgumentError):
            parse_ip(ip)


class TestIsSpamIp:

    def test_listed_address(self, make_queries, make_resolver):
        resolver = make_resolver(names={"1.0.0.127.xbl.example.org": ["127.0.0.2"]})
        assert make_queries(resolver).is_spam_ip("127.0.0.1") is True

    def test_not_listed_address(self, make_queries, make_resolver):
        resolver = make_resolver()
        assert make_queries(resolver).is_spam_ip("127.0.0.1") is False
        assert resolver.name_calls == ["1.0.0.127.xbl.example.org"]

    def test_exception_list_skips_lookups(self, make_queries, make_resolver):
        resolver = make_resolver(names={"1.0.0.127.xbl.example.org": ["127.0.0.2"]})
        queries = make_queries(resolver, exceptions=["127.0.0.1"])
        assert queries.is_spam_ip("127.0.0.1") is False
        assert resolver.calls == 0

    def test_reserved_addresses_skip_lookups(self, make_queries, make_resolver):
        resolver = make_resolver()
        queries = make_queries(resolver, skip_reserved=True)
        for ip in ["127.0.0.1", "10.1.2.3", "192.168.0.5", "::1", "fe80::1"]:
            assert queries.is_spam_ip(ip) is False
        assert resolver.calls == 0

    def test_public_address_is_looked_up_when_skipping_reserved(self, make_queries, make_resolver):
        resolver = make_resolver(names={"8.8.8.8.xbl.example.org": ["127.0.0.4"]})
        assert make_queries(resolver, skip_reserved=True).is_spam_ip("8.8.8.8") is True

    def test_invalid_address_performs_no_io(self, make_queries, make_resolver):
        resolver = make_resolver()
        with pytest.raises(InvalidArgumentError):
            make_queries(resolver).is_spam_ip("not-an-ip")
        assert resolver.calls == 0

    def test_placeholder_zone(self, make_queries, make_resolver):
        resolver = make_resolver(names={"bl.example.net.1.0.0.127.check": ["127.0.0.2"]})
        queries = make_queries(resolver, providers=["bl.example.net.%.check"])
        assert queries.is_spam_ip("127.0.0.1") is True

    def test_ipv6_lookup_name(self, make_queries, make_resolver):
        resolver = make_resolver()
        make_queries(resolver).is_spam_ip("2001:db8::1")
        assert resolver.name_calls[0].endswith(".8.b.d.0.1.0.0.2.xbl.example.org")

    def test_first_blocking_zone_short_circuits(self, make_queries, make_resolver):
        resolver = make_resolver(names={
            "1.0.0.127.first.example": ["127.0.0.2"],
            "1.0.0.127.second.example": ["127.0.0.2"],
        })
        queries = make_queries(resolver, providers=["first.example", "second.example"])
        assert queries.is_spam_ip("127.0.0.1") is True
        assert resolver.name_calls == ["1.0.0.127.first.example"]


class TestPolicies:

    @pytest.mark.parametrize("policy, answer, expected", [
        ([2, 3], ["127.0.0.3"], True),
        ([2, 3], ["127.0.0.9"], False),
        ((4,), ["127.0.0.4"], True),
        (4, ["127.0.0.4"], True),
        ("127.0.0.4", ["127.0.0.4"], True),
        (4, ["127.0.0.5"], False),
    ])
    def test_value_policies(self, make_queries, make_resolver, policy, answer, expected):
        resolver = make_resolver(names={"1.0.0.127.xbl.example.org": answer})
        queries = make_queries(resolver, providers=[["xbl.example.org", policy]])
        assert queries.is_spam_ip("127.0.0.1") is expected

    def test_predicate_policy(self, make_queries, make_resolver):
        seen = []

        def only_proxies(addresses):
            seen.append(addresses)
            return "127.0.0.9" in addresses

        resolver = make_resolver(names={"1.0.0.127.xbl.example.org": ["127.0.0.9"]})
        queries = make_queries(resolver, providers=[("xbl.example.org", only_proxies)])
        assert queries.is_spam_ip("127.0.0.1") is True
        assert seen == [["127.0.0.9"]]

    def test_non_blocking_zone_falls_through(self, make_queries, make_resolver):
        resolver = make_resolver(names={
            "1.0.0.127.first.example": ["127.0.0.9"],
            "1.0.0.127.second.example": ["127.0.0.2"],
        })
        queries = make_queries(resolver, providers=[["first.example", [2]], "second.example"])
        assert queries.is_spam_ip("127.0.0.1") is True
        assert len(resolver.name_calls) == 2


class TestMemoization:

    def test_positive_and_negative_answers_are_cached(self, make_queries, make_resolver, memory_cache):
        resolver = make_resolver(names={"1.0.0.127.xbl.example.org": ["127.0.0.2"]})
        queries = make_queries(resolver)
        assert queries.is_spam_ip("127.0.0.1") is True
        assert queries.is_spam_ip("127.0.0.1") is True
        assert queries.is_spam_ip("127.0.0.2") is False
        assert queries.is_spam_ip("127.0.0.2") is False
        assert len(resolver.name_calls) == 2
        assert memory_cache.get("dns_queries_dns_2.0.0.127.xbl.example.org") == constants.CACHE_FALSE

    def test_cache_entries_expire_after_fifteen_minutes(self, make_resolver, clock):
        resolver = make_resolver()
        cache = CacheFacade(lambda: MemoryCacheDriver(clock=clock))
        queries = DnsQueries(resolver, cache, providers=["xbl.example.org"], skip_reserved=False)
        queries.is_spam_ip("127.0.0.1")
        clock.advance(constants.DNS_CACHE_TIMEOUT - 1)
        queries.is_spam_ip("127.0.0.1")
        assert len(resolver.name_calls) == 1
        clock.advance(1)
        queries.is_spam_ip("127.0.0.1")
        assert len(resolver.name_calls) == 2


class TestIpToNames:

    def test_names_are_returned_and_cached(self, make_queries, make_resolver):
        resolver = make_resolver(addresses={"203.0.113.7": ["host.example.org"]})
        queries = make_queries(resolver)
        assert queries.ip_to_names("203.0.113.7") == ["host.example.org"]
        assert queries.ip_to_names("203.0.113.7") == ["host.example.org"]
        assert resolver.ip_calls == ["203.0.113.7"]

    def test_no_names_is_cached_as_empty(self, make_queries, make_resolver):
        resolver = make_resolver()
        queries = make_queries(resolver)
        assert queries.ip_to_names("203.0.113.7") == []
        assert queries.ip_to_names("203.0.113.7") == []
        assert len(resolver.ip_calls) == 1

    def test_forward_confirmation(self, make_queries, make_resolver):
        resolver = make_resolver(
            names={"good.example.org": ["198.51.100.1", "203.0.113.7"], "forged.example.org": ["198.51.100.2"]},
            addresses={"203.0.113.7": ["good.example.org", "forged.example.org", "dangling.example.org"]},
        )
        queries = make_queries(resolver, rdns_validate=True)
        assert queries.ip_to_names("203.0.113.7") == ["good.example.org"]

    def test_ipv6_is_normalized(self, make_queries, make_resolver):
        resolver = make_resolver(addresses={"2001:db8::1": ["v6.example.org"]})
        queries = make_queries(resolver)
        assert queries.ip_to_names("2001:0db8:0000::0001") == ["v6.example.org"]

    def test_invalid(self, make_queries, make_resolver):
        with pytest.raises(InvalidArgumentError):
            make_queries(make_resolver()).ip_to_names("300.1.1.1")
