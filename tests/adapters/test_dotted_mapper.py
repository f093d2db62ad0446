"""Dotted dialect mapper tests: candidate order and soundness."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
from lib_relaxed_config.domain.name import ConfigurationPropertyName

TOKENS = st.from_regex(r"[a-z][a-zA-Z0-9]{0,7}(-[a-z0-9]{1,4})?", fullmatch=True)
NAMES = st.lists(st.one_of(TOKENS, st.integers(0, 99)), min_size=1, max_size=5).map(ConfigurationPropertyName.of)


def _keys(name: str) -> list[str]:
    return [mapping.key for mapping in DottedPropertyMapper().map_to_source_candidates(ConfigurationPropertyName.parse(name))]


def test_simple_name_yields_single_candidate() -> None:
    assert _keys("server.port") == ["server.port"]


def test_candidates_follow_canonical_camel_then_dotted_index_order() -> None:
    assert _keys("list[0].context-path") == ["list[0].context-path", "list[0].contextPath", "list.0.context-path"]


def test_reverse_mapping_of_malformed_key_is_none() -> None:
    mapper = DottedPropertyMapper()
    assert mapper.map_to_name("server..port") is None
    assert mapper.map_from_source("a[") is None


def test_reverse_mapping_keeps_raw_key() -> None:
    mapping = DottedPropertyMapper().map_from_source("Server.ContextPath")
    assert mapping is not None
    assert mapping.key == "Server.ContextPath"
    assert str(mapping.name) == "server.context-path"


@given(NAMES)
def test_every_candidate_maps_back_to_the_name(name: ConfigurationPropertyName) -> None:
    mapper = DottedPropertyMapper()
    candidates = mapper.map_to_source_candidates(name)
    assert candidates
    assert len({mapping.key for mapping in candidates}) == len(candidates)
    for mapping in candidates:
        assert mapper.map_to_name(mapping.key) == name
        assert mapping.is_applicable(name)
