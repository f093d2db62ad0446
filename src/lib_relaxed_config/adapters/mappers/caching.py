"""Memoizing wrapper around any :class:`PropertyMapper`.

Mapping is a pure function of the name as spelled (or the raw key) and the
mapper's fixed dialect configuration, so results can be shared across
threads. Reads are lock-free dictionary lookups; writes take a lock. Two
threads racing to fill the same entry compute the same value, so the last
writer winning is harmless. The cache is an optimisation only: wrapping a
mapper never changes its answers.
"""

from __future__ import annotations

import threading
from typing import Hashable, TypeVar

from ...application.ports import PropertyMapper
from ...domain.mapping import PropertyMapping
from ...domain.name import ConfigurationPropertyName

V = TypeVar("V")

_MISSING = object()


class CachingPropertyMapper:
    """Cache forward candidates and reverse mappings of a wrapped mapper.

    Parameters
    ----------
    mapper:
        The dialect mapper to memoize.
    max_size:
        Entry limit per direction; a full cache is cleared before the next
        write so memory stays bounded for sources with unbounded key sets.
    """

    def __init__(self, mapper: PropertyMapper, *, max_size: int = 4096) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._mapper = mapper
        self._max_size = max_size
        self._forward: dict[Hashable, tuple[PropertyMapping, ...]] = {}
        self._reverse: dict[Hashable, PropertyMapping | None] = {}
        self._lock = threading.Lock()

    @property
    def dialect(self) -> str:
        return self._mapper.dialect

    @property
    def wrapped(self) -> PropertyMapper:
        return self._mapper

    def map_to_source_candidates(self, name: ConfigurationPropertyName) -> tuple[PropertyMapping, ...]:
        cache_key = (self.dialect, _spelling(name))
        cached = self._forward.get(cache_key)
        if cached is None:
            cached = tuple(self._mapper.map_to_source_candidates(name))
            self._store(self._forward, cache_key, cached)
        return cached

    def map_from_source(self, key: str) -> PropertyMapping | None:
        cache_key = (self.dialect, key)
        cached = self._reverse.get(cache_key, _MISSING)
        if cached is _MISSING:
            cached = self._mapper.map_from_source(key)
            self._store(self._reverse, cache_key, cached)
        return cached  # type: ignore[return-value]

    def map_to_name(self, key: str) -> ConfigurationPropertyName | None:
        mapping = self.map_from_source(key)
        return None if mapping is None else mapping.name

    def cache_info(self) -> dict[str, int]:
        """Return entry counts per direction (diagnostics and tests)."""

        return {"forward": len(self._forward), "reverse": len(self._reverse)}

    def _store(self, cache: dict[Hashable, V], key: Hashable, value: V) -> None:
        with self._lock:
            if len(cache) >= self._max_size:
                cache.clear()
            cache[key] = value

    def __repr__(self) -> str:
        return f"CachingPropertyMapper({self._mapper!r})"


def _spelling(name: ConfigurationPropertyName) -> tuple[tuple[str, int | None], ...]:
    """Return the element spellings of *name*; equal names may still map differently."""

    return tuple((element.original, element.index) for element in name)
