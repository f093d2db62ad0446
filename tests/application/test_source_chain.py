"""Source chain tests: ordering, idempotent edits, and anchor errors."""

from __future__ import annotations

import pytest

from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
from lib_relaxed_config.adapters.providers.mapping import MapProvider
from lib_relaxed_config.application.chain import SourceChain
from lib_relaxed_config.application.source import ConfigurationPropertySource
from lib_relaxed_config.domain.errors import SourceNotFoundError


def _source(name: str) -> ConfigurationPropertySource:
    return ConfigurationPropertySource(name, MapProvider({}), DottedPropertyMapper())


def test_add_first_and_last() -> None:
    chain = SourceChain([_source("b")])
    chain.add_first(_source("a"))
    chain.add_last(_source("c"))
    assert chain.names() == ["a", "b", "c"]
    assert len(chain) == 3
    assert "b" in chain and "z" not in chain


def test_insert_before_and_after_anchor() -> None:
    chain = SourceChain([_source("a"), _source("d")])
    chain.insert_after("a", _source("b"))
    chain.insert_before("d", _source("c"))
    assert chain.names() == ["a", "b", "c", "d"]


def test_repeated_edits_are_idempotent() -> None:
    chain = SourceChain([_source("a"), _source("c")])
    for _ in range(3):
        chain.insert_after("a", _source("b"))
        chain.add_last(_source("c"))
    assert chain.names() == ["a", "b", "c"]


def test_re_adding_moves_the_source() -> None:
    chain = SourceChain([_source("a"), _source("b"), _source("c")])
    chain.add_first(_source("c"))
    assert chain.names() == ["c", "a", "b"]


def test_unknown_anchor_raises() -> None:
    chain = SourceChain([_source("a")])
    with pytest.raises(SourceNotFoundError):
        chain.insert_after("missing", _source("b"))
    with pytest.raises(SourceNotFoundError):
        chain.insert_before("missing", _source("b"))
    with pytest.raises(SourceNotFoundError):
        chain.replace("missing", _source("b"))
    assert chain.names() == ["a"]


def test_positioning_relative_to_itself_is_rejected() -> None:
    chain = SourceChain([_source("a")])
    with pytest.raises(ValueError):
        chain.insert_after("a", _source("a"))


def test_remove_unknown_is_noop() -> None:
    chain = SourceChain([_source("a")])
    assert chain.remove("missing") is None
    removed = chain.remove("a")
    assert removed is not None and removed.name == "a"
    assert chain.names() == []


def test_replace_keeps_position() -> None:
    chain = SourceChain([_source("a"), _source("b"), _source("c")])
    previous = chain.replace("b", _source("x"))
    assert previous.name == "b"
    assert chain.names() == ["a", "x", "c"]
    chain.replace("x", _source("c"))
    assert chain.names() == ["a", "c"]


def test_iteration_uses_a_snapshot() -> None:
    chain = SourceChain([_source("a"), _source("b")])
    seen = []
    for source in chain:
        seen.append(source.name)
        chain.add_last(_source("late"))
    assert seen == ["a", "b"]
    assert chain.get("late") is not None
