#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Tests for `pytplinklan.cache`."""

import unittest

from pytplinklan.cache import Request, ResponseCache
from pytplinklan.exceptions import TPLinkSerializationException


class FakeClock:

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRequest(unittest.TestCase):

    def test_equality_ignores_argument(self):
        assert Request("lighting", "set", {"brightness": 10}) == \
            Request("lighting", "set", {"brightness": 90})
        assert hash(Request("a", "b", 1)) == hash(Request("a", "b", 2))
        assert Request("a", "b") != Request("a", "c")

    def test_payload(self):
        assert Request("system", "get_sysinfo").payload() == \
            {"system": {"get_sysinfo": {}}}
        assert Request("system", "set_relay_state", {"state": 1}).payload() == \
            {"system": {"set_relay_state": {"state": 1}}}


class TestResponseCache(unittest.TestCase):
    """Tests for the TTL response cache."""

    def setUp(self):
        self.clock = FakeClock()
        self.cache = ResponseCache(3, clock=self.clock)

    def test_hit_then_expiry(self):
        request = Request("system", "get_sysinfo")
        self.cache.insert(request, {"alias": "Lamp"})

        assert self.cache.get(request) == {"alias": "Lamp"}
        assert self.cache.hits == 1
        assert len(self.cache) == 1

        self.clock.now += 3
        assert self.cache.get(request) is None
        assert self.cache.misses == 1
        assert len(self.cache) == 0

    def test_miss_on_empty(self):
        assert self.cache.get(Request("system", "get_sysinfo")) is None
        assert self.cache.misses == 1
        assert self.cache.hits == 0

    def test_insert_resets_age(self):
        request = Request("system", "get_sysinfo")
        self.cache.insert(request, 1)
        self.clock.now += 2
        self.cache.insert(request, 2)
        self.clock.now += 2

        assert self.cache.get(request) == 2

    def test_key_ignores_argument(self):
        self.cache.insert(Request("x", "y", {"level": 10}), "stale")

        assert self.cache.get(Request("x", "y", {"level": 90})) == "stale"

    def test_key_on_argument(self):
        cache = ResponseCache(3, clock=self.clock, key_on_argument=True)
        cache.insert(Request("x", "y", {"level": 10}), "ten")

        assert cache.get(Request("x", "y", {"level": 90})) is None
        assert cache.get(Request("x", "y", {"level": 10})) == "ten"

    def test_key_on_argument_none_matches_empty(self):
        cache = ResponseCache(3, clock=self.clock, key_on_argument=True)
        cache.insert(Request("system", "get_sysinfo", None), "sysinfo")

        assert cache.get(Request("system", "get_sysinfo", {})) == "sysinfo"

    def test_key_on_argument_unserialisable(self):
        cache = ResponseCache(3, clock=self.clock, key_on_argument=True)

        with self.assertRaises(TPLinkSerializationException):
            cache.get_or_insert_with(Request("system", "x", {"a": object()}),
                                     lambda request: "never")

        assert len(cache) == 0

    def test_get_returns_copy(self):
        request = Request("system", "get_sysinfo")
        self.cache.insert(request, {"alias": "Lamp"})

        self.cache.get(request)["alias"] = "changed"

        assert self.cache.get(request) == {"alias": "Lamp"}

    def test_get_or_insert_with(self):
        calls = []

        def producer(request):
            calls.append(request)
            return {"relay_state": 1}

        request = Request("system", "get_sysinfo")

        assert self.cache.get_or_insert_with(request, producer) == {"relay_state": 1}
        assert self.cache.get_or_insert_with(request, producer) == {"relay_state": 1}
        assert calls == [request]
        assert self.cache.hits == 1
        assert self.cache.misses == 1

    def test_get_or_insert_with_caches_none(self):
        calls = []

        def producer(request):
            calls.append(request)
            return None

        request = Request("time", "get_time")
        self.cache.get_or_insert_with(request, producer)
        self.cache.get_or_insert_with(request, producer)

        assert len(calls) == 1

    def test_get_or_insert_with_failure_not_cached(self):

        def producer(request):
            raise RuntimeError("no route to host")

        request = Request("system", "get_sysinfo")

        with self.assertRaises(RuntimeError):
            self.cache.get_or_insert_with(request, producer)

        assert request not in self.cache
        assert len(self.cache) == 0

    def test_retain_by_namespace(self):
        self.cache.insert(Request("a", "one"), 1)
        self.cache.insert(Request("a", "two"), 2)
        self.cache.insert(Request("b", "one"), 3)

        self.cache.retain(lambda request, value: request.namespace != "a")

        assert Request("a", "one") not in self.cache
        assert Request("a", "two") not in self.cache
        assert self.cache.get(Request("b", "one")) == 3

    def test_invalidate_namespace_and_clear(self):
        self.cache.insert(Request("a", "one"), 1)
        self.cache.insert(Request("b", "one"), 2)

        self.cache.invalidate_namespace("b")
        assert len(self.cache) == 1

        self.cache.clear()
        assert len(self.cache) == 0

    def test_retain_everything_false_clears(self):
        self.cache.insert(Request("a", "one"), 1)
        self.cache.insert(Request("b", "one"), 2)

        self.cache.retain(lambda request, value: False)

        assert len(self.cache) == 0

    def test_counters_survive_eviction(self):
        request = Request("system", "get_sysinfo")
        self.cache.insert(request, 1)
        self.cache.get(request)
        self.cache.clear()
        self.cache.get(request)

        assert self.cache.hits == 1
        assert self.cache.misses == 1

    def test_remove(self):
        request = Request("system", "get_sysinfo")
        self.cache.insert(request, 1)

        assert self.cache.remove(request) == 1
        assert self.cache.remove(request) is None

    def test_repr(self):
        assert "ttl=3" in repr(self.cache)


if __name__ == '__main__':
    unittest.main()
