"""Resolver tests: precedence, short-circuit, isolation, descendant aggregation."""

from __future__ import annotations

import logging

import pytest

from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
from lib_relaxed_config.adapters.providers.mapping import MapProvider
from lib_relaxed_config.application.chain import SourceChain
from lib_relaxed_config.application.resolver import Resolver
from lib_relaxed_config.application.source import ConfigurationPropertySource
from lib_relaxed_config.core import environment_source, lookup_source, map_source
from lib_relaxed_config.domain.errors import MalformedNameError
from lib_relaxed_config.domain.name import ConfigurationPropertyName
from lib_relaxed_config.domain.property import Origin, PropertyState


class _RecordingProvider(MapProvider):
    def __init__(self, data) -> None:
        super().__init__(data)
        self.requested: list[str] = []

    def get(self, key):
        self.requested.append(key)
        return super().get(key)


class _BrokenProvider:
    def get(self, key):
        raise OSError("backend unavailable")

    def keys(self):
        raise OSError("backend unavailable")


def test_environment_overrides_file_values() -> None:
    chain = SourceChain(
        [
            environment_source(environ={"SERVER_PORT": "9090"}),
            map_source("application", {"server": {"port": 8080, "address": "0.0.0.0"}}),
        ]
    )
    resolver = Resolver(chain)
    port = resolver.resolve("server.port")
    assert port.value == "9090"
    assert port.origin.source == "environment"
    assert port.origin.key == "SERVER_PORT"
    assert resolver.resolve_value("server.address") == "0.0.0.0"


def test_removing_a_source_exposes_the_next_one() -> None:
    chain = SourceChain([map_source("high", {"a": 1}), map_source("low", {"a": 2})])
    resolver = Resolver(chain)
    assert resolver.resolve_value("a") == 1
    chain.remove("high")
    assert resolver.resolve_value("a") == 2
    chain.remove("low")
    assert resolver.resolve("a") is None
    assert resolver.resolve_value("a", default=3) == 3


def test_later_sources_are_not_consulted_after_a_match() -> None:
    recorder = _RecordingProvider({"a": 2})
    chain = SourceChain(
        [map_source("first", {"a": 1}), ConfigurationPropertySource("second", recorder, DottedPropertyMapper())]
    )
    assert Resolver(chain).resolve_value("a") == 1
    assert recorder.requested == []


def test_failing_source_is_skipped_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_relaxed_config")
    chain = SourceChain(
        [ConfigurationPropertySource("broken", _BrokenProvider(), DottedPropertyMapper()), map_source("ok", {"a": 1})]
    )
    resolver = Resolver(chain)
    assert resolver.resolve_value("a") == 1
    failures = [record for record in caplog.records if record.getMessage() == "source_failed"]
    assert failures and failures[0].context["source"] == "broken"
    assert resolver.contains_descendant_of("a") in {PropertyState.ABSENT, PropertyState.UNKNOWN}


def test_indexed_names_match_either_notation() -> None:
    resolver = Resolver(SourceChain([map_source("app", {"list.0.value": "dotted", "servers": [{"host": "a"}]})]))
    assert resolver.resolve_value("list[0].value") == "dotted"
    assert resolver.resolve_value("servers.0.host") == "a"
    assert resolver.resolve_value(ConfigurationPropertyName.parse("servers[0].host")) == "a"


def test_malformed_names_propagate() -> None:
    with pytest.raises(MalformedNameError):
        Resolver(SourceChain()).resolve("a..b")


def test_descendant_state_aggregates_over_sources() -> None:
    restricted = lookup_source("restricted", {"SERVER_PORT": "1"}.get, dialect="environment")
    present = Resolver(SourceChain([restricted, map_source("app", {"server": {"port": 1}})]))
    assert present.contains_descendant_of("server") is PropertyState.PRESENT
    unknown = Resolver(SourceChain([restricted, map_source("app", {"other": 1})]))
    assert unknown.contains_descendant_of("server") is PropertyState.UNKNOWN
    absent = Resolver(SourceChain([map_source("app", {"other": 1})]))
    assert absent.contains_descendant_of("server") is PropertyState.ABSENT


def test_lookup_only_environment_still_resolves() -> None:
    chain = SourceChain([lookup_source("restricted", {"SERVER_PORT": "9090"}.get, dialect="environment")])
    assert Resolver(chain).resolve_value("server.port") == "9090"


def test_lookup_only_dotted_source_ignores_query_history() -> None:
    chain = SourceChain([lookup_source("remote", {"server.context-path": "/app"}.get)])
    resolver = Resolver(chain)
    assert resolver.resolve("server.contextpath") is None
    assert resolver.resolve_value("server.context-path") == "/app"


def test_file_value_overrides_lower_environment() -> None:
    chain = SourceChain(
        [
            map_source(
                "application",
                {"server.port": 8080},
                origins={"server.port": Origin("application", "server.port", "app.toml")},
            ),
            environment_source(environ={"SERVER_PORT": "9090"}),
        ]
    )
    found = Resolver(chain).resolve("server.port")
    assert found.value == 8080
    assert found.origin.source == "application"
    assert found.origin.locator == "app.toml"
