"""In-memory provider and flattening tests."""

from __future__ import annotations

from lib_relaxed_config.adapters.providers.mapping import LookupProvider, MapProvider, flatten
from lib_relaxed_config.domain.property import Origin


def test_map_provider_snapshot_is_immutable() -> None:
    data = {"server.port": 8080}
    provider = MapProvider(data)
    data["server.port"] = 1
    assert provider.get("server.port") == 8080
    assert len(provider) == 1


def test_map_provider_returns_origins_when_known() -> None:
    origin = Origin("file", "server.port", "/etc/app.toml")
    provider = MapProvider({"server.port": 1, "other": 2}, origins={"server.port": origin})
    assert provider.origin_of("server.port") is origin
    assert provider.origin_of("other") is None
    assert list(provider.keys()) == ["server.port", "other"]


def test_lookup_provider_cannot_enumerate() -> None:
    calls: list[str] = []

    def lookup(key: str) -> str | None:
        calls.append(key)
        return "x" if key == "A" else None

    provider = LookupProvider(lookup)
    assert provider.get("A") == "x"
    assert provider.get("B") is None
    assert calls == ["A", "B"]
    assert not hasattr(provider, "keys")


def test_flatten_preserves_spelling_and_indexes_lists() -> None:
    nested = {"server": {"contextPath": "/app", "ports": [80, 443]}, "empty": {}, "flag": False}
    assert flatten(nested) == {
        "server.contextPath": "/app",
        "server.ports[0]": 80,
        "server.ports[1]": 443,
        "flag": False,
    }


def test_flatten_keeps_none_leaves() -> None:
    assert flatten({"a": None}) == {"a": None}
