"""Caching mapper tests: results are identical to the wrapped mapper's."""

from __future__ import annotations

import threading

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_relaxed_config.adapters.mappers.caching import CachingPropertyMapper
from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
from lib_relaxed_config.adapters.mappers.environment import EnvironmentPropertyMapper
from lib_relaxed_config.domain.name import ConfigurationPropertyName

KEYS = st.sampled_from(["server.port", "SERVER_PORT", "list[0].value", "list.0.value", "a..b", "Server.ContextPath", "X_"])


class CountingMapper:
    """Dotted mapper that records how often it is consulted."""

    dialect = "dotted"

    def __init__(self) -> None:
        self.inner = DottedPropertyMapper()
        self.calls = 0

    def map_to_source_candidates(self, name):
        self.calls += 1
        return self.inner.map_to_source_candidates(name)

    def map_to_name(self, key):
        return self.inner.map_to_name(key)

    def map_from_source(self, key):
        self.calls += 1
        return self.inner.map_from_source(key)


@given(KEYS)
def test_cached_answers_match_uncached(key: str) -> None:
    for plain in (DottedPropertyMapper(), EnvironmentPropertyMapper()):
        cached = CachingPropertyMapper(plain)
        assert cached.map_from_source(key) == plain.map_from_source(key)
        assert cached.map_from_source(key) == plain.map_from_source(key)
        assert cached.map_to_name(key) == plain.map_to_name(key)
        name = plain.map_to_name(key)
        if name is not None:
            assert list(cached.map_to_source_candidates(name)) == list(plain.map_to_source_candidates(name))


def test_repeated_queries_hit_the_cache() -> None:
    counting = CountingMapper()
    cached = CachingPropertyMapper(counting)
    name = ConfigurationPropertyName.parse("server.port")
    cached.map_to_source_candidates(name)
    cached.map_to_source_candidates(name)
    cached.map_from_source("a..b")
    cached.map_from_source("a..b")
    assert counting.calls == 2
    assert cached.cache_info() == {"forward": 1, "reverse": 1}


def test_full_cache_is_cleared_before_next_write() -> None:
    cached = CachingPropertyMapper(DottedPropertyMapper(), max_size=2)
    for key in ("a", "b", "c"):
        cached.map_from_source(key)
    assert cached.cache_info()["reverse"] == 1
    assert cached.map_to_name("a") == ConfigurationPropertyName.parse("a")


def test_invalid_max_size_rejected() -> None:
    with pytest.raises(ValueError):
        CachingPropertyMapper(DottedPropertyMapper(), max_size=0)


def test_concurrent_use_returns_consistent_results() -> None:
    cached = CachingPropertyMapper(EnvironmentPropertyMapper(), max_size=8)
    expected = {f"KEY_{n}": ConfigurationPropertyName.of(["key", n]) for n in range(50)}
    failures: list[str] = []

    def worker() -> None:
        for key, name in expected.items():
            if cached.map_to_name(key) != name:
                failures.append(key)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert failures == []
    assert cached.dialect == "environment"


def test_equal_names_spelled_differently_keep_their_own_candidates() -> None:
    plain = DottedPropertyMapper()
    cached = CachingPropertyMapper(plain)
    flat = ConfigurationPropertyName.parse("server.contextpath")
    dashed = ConfigurationPropertyName.parse("server.context-path")
    assert flat == dashed
    cached.map_to_source_candidates(flat)
    assert cached.map_to_source_candidates(dashed) == tuple(plain.map_to_source_candidates(dashed))
    assert cached.map_to_source_candidates(flat) == tuple(plain.map_to_source_candidates(flat))
