"""Property source tests: lookup order, relaxed scan, capabilities, isolation."""

from __future__ import annotations

import logging

import pytest

from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
from lib_relaxed_config.adapters.mappers.environment import EnvironmentPropertyMapper
from lib_relaxed_config.adapters.providers.mapping import LookupProvider, MapProvider
from lib_relaxed_config.application.source import ConfigurationPropertySource, SourceCapability
from lib_relaxed_config.domain.mapping import PropertyMapping
from lib_relaxed_config.domain.name import ConfigurationPropertyName
from lib_relaxed_config.domain.property import Origin, PropertyState

parse = ConfigurationPropertyName.parse


def _dotted(data: dict, **kwargs) -> ConfigurationPropertySource:
    return ConfigurationPropertySource("defaults", MapProvider(data), DottedPropertyMapper(), **kwargs)


def test_exact_candidate_wins_with_default_origin() -> None:
    found = _dotted({"server.port": 8080}).get_configuration_property(parse("server.port"))
    assert found is not None
    assert found.value == 8080
    assert found.origin == Origin("defaults", "server.port")


def test_camel_case_candidate_is_found() -> None:
    found = _dotted({"server.contextPath": "/app"}).get_configuration_property(parse("server.context-path"))
    assert found is not None and found.origin.key == "server.contextPath"


def test_relaxed_scan_finds_unusual_spellings() -> None:
    source = _dotted({"Server.Context_Path": "/app"})
    found = source.get_configuration_property(parse("server.context-path"))
    assert found is not None
    assert found.value == "/app"
    assert found.origin.key == "Server.Context_Path"


def test_dotted_indices_resolve_bracket_names() -> None:
    source = _dotted({"list.0.value": "first", "list[1].value": "second"})
    assert source.get_configuration_property(parse("list[0].value")).value == "first"
    assert source.get_configuration_property(parse("list.1.value")).value == "second"


def test_none_is_absent_but_empty_string_is_present() -> None:
    source = _dotted({"a": None, "b": ""})
    assert source.get_configuration_property(parse("a")) is None
    assert source.get_configuration_property(parse("b")).value == ""


def test_origin_tracking_provider_supplies_locator() -> None:
    origin = Origin("file", "server.port", "/etc/app.toml")
    source = ConfigurationPropertySource("file", MapProvider({"server.port": 1}, origins={"server.port": origin}), DottedPropertyMapper())
    assert source.get_configuration_property(parse("server.port")).origin is origin


def test_lookup_only_source_resolves_but_cannot_enumerate() -> None:
    environ = {"SERVER_PORT": "9090"}
    source = ConfigurationPropertySource("restricted", LookupProvider(environ.get), EnvironmentPropertyMapper())
    assert source.capability is SourceCapability.LOOKUP_ONLY
    assert source.get_configuration_property(parse("server.port")).value == "9090"
    assert source.contains_descendant_of(parse("server")) is PropertyState.UNKNOWN


def test_enumerable_can_be_forced_off_but_not_on() -> None:
    forced = _dotted({"server.port": 1}, enumerable=False)
    assert forced.capability is SourceCapability.LOOKUP_ONLY
    assert forced.contains_descendant_of(parse("server")) is PropertyState.UNKNOWN
    with pytest.raises(ValueError):
        ConfigurationPropertySource("x", LookupProvider(lambda key: None), DottedPropertyMapper(), enumerable=True)
    with pytest.raises(ValueError):
        ConfigurationPropertySource("", MapProvider({}), DottedPropertyMapper())


def test_descendant_states() -> None:
    source = _dotted({"server.ssl.enabled": True, "name": "demo"})
    assert source.contains_descendant_of(parse("server")) is PropertyState.PRESENT
    assert source.contains_descendant_of(parse("server.ssl")) is PropertyState.PRESENT
    assert source.contains_descendant_of(parse("server.ssl.enabled")) is PropertyState.ABSENT
    assert source.contains_descendant_of(parse("client")) is PropertyState.ABSENT


def test_scan_limit_answers_unknown() -> None:
    source = _dotted({"a.b": 1, "a.c": 2}, scan_limit=1)
    assert source.contains_descendant_of(parse("a")) is PropertyState.UNKNOWN


class _FailingExtractorMapper(DottedPropertyMapper):
    def map_to_source_candidates(self, name):
        return (PropertyMapping(str(name), name, extractor=int),)


def test_extractor_failure_degrades_to_absence(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_relaxed_config")
    source = ConfigurationPropertySource("typed", MapProvider({"server.port": "abc"}), _FailingExtractorMapper(), enumerable=False)
    assert source.get_configuration_property(parse("server.port")) is None
    assert any(record.getMessage() == "extractor_failed" for record in caplog.records)


class _ExplodingMapper(DottedPropertyMapper):
    def map_to_source_candidates(self, name):
        raise RuntimeError("mapper bug")


def test_mapper_failure_degrades_to_absence(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_relaxed_config")
    source = ConfigurationPropertySource("broken", MapProvider({}), _ExplodingMapper())
    assert source.get_configuration_property(parse("server.port")) is None
    assert any(record.getMessage() == "mapping_failed" for record in caplog.records)


def test_predicate_rejection_skips_candidate() -> None:
    class _Picky(DottedPropertyMapper):
        def map_to_source_candidates(self, name):
            return (PropertyMapping(str(name), name, predicate=lambda _: False),)

    source = ConfigurationPropertySource("picky", MapProvider({"a": 1}), _Picky(), enumerable=False)
    assert source.get_configuration_property(parse("a")) is None
