"""In-memory raw property providers.

Purpose
-------
Offer the two provider capabilities the engine distinguishes:

* :class:`MapProvider` – enumerable provider over an already-parsed mapping,
  optionally carrying per-key origins (file path, line number).
* :class:`LookupProvider` – lookup-only provider around a callable, for
  restricted or virtualised backends that must not be enumerated.

Contents
--------
* :func:`flatten` – turn nested mappings/lists produced by file loaders into
  dotted raw keys (``list[0].value``) while keeping the original spelling of
  every key segment.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Iterator

from ...domain.property import Origin


class MapProvider:
    """Enumerable provider backed by an immutable snapshot of *data*.

    Parameters
    ----------
    data:
        Flat mapping of raw keys to values. Keys keep insertion order, which
        defines relaxed-scan order.
    origins:
        Optional per-key :class:`Origin` overrides (used by file sources and
        synthetic migration sources).

    Examples
    --------
    >>> provider = MapProvider({"server.port": 8080})
    >>> provider.get("server.port"), provider.get("missing")
    (8080, None)
    >>> list(provider.keys())
    ['server.port']
    """

    def __init__(self, data: Mapping[str, Any], *, origins: Mapping[str, Origin] | None = None) -> None:
        self._data = MappingProxyType(dict(data))
        self._origins = MappingProxyType(dict(origins or {}))

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def keys(self) -> Iterator[str]:
        return iter(self._data)

    def origin_of(self, key: str) -> Origin | None:
        return self._origins.get(key)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MapProvider(keys={len(self._data)})"


class LookupProvider:
    """Lookup-only provider; deliberately exposes no ``keys`` method.

    Examples
    --------
    >>> provider = LookupProvider({"SERVER_PORT": "9090"}.get)
    >>> provider.get("SERVER_PORT")
    '9090'
    >>> hasattr(provider, "keys")
    False
    """

    def __init__(self, lookup: Callable[[str], Any | None]) -> None:
        self._lookup = lookup

    def get(self, key: str) -> Any | None:
        return self._lookup(key)

    def __repr__(self) -> str:
        return f"LookupProvider({self._lookup!r})"


def flatten(data: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten nested mappings and lists into dotted raw keys.

    Why
    ----
    Structured loaders return nested trees; the dotted dialect addresses
    leaves by path. Segment spelling is preserved (``contextPath`` stays
    ``contextPath``) so origins quote the key as written.

    Empty mappings and empty lists produce no keys.

    Examples
    --------
    >>> flatten({"server": {"port": 8080, "contextPath": "/app"}, "hosts": [{"name": "a"}, "b"]})
    {'server.port': 8080, 'server.contextPath': '/app', 'hosts[0].name': 'a', 'hosts[1]': 'b'}
    """

    flat: dict[str, Any] = {}
    _flatten_into(flat, data, "")
    return flat


def _flatten_into(target: dict[str, Any], value: Any, prefix: str) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            _flatten_into(target, child, f"{prefix}.{key}" if prefix else str(key))
    elif isinstance(value, list) and prefix:
        for position, child in enumerate(value):
            _flatten_into(target, child, f"{prefix}[{position}]")
    elif prefix:
        target[prefix] = value
