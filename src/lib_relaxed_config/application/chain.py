"""Precedence-ordered chain of configuration property sources.

Purpose
-------
Hold the ordered, uniquely-named sources the resolver walks front to back.
The first source (by position) that yields a property wins.

Key behaviours
--------------
* Structural edits (``add_first``, ``add_last``, ``insert_before``,
  ``insert_after``) first remove any existing source with the same name, so
  repeating an identical edit leaves the chain unchanged.
* Edits relative to an unknown anchor raise
  :class:`~lib_relaxed_config.domain.errors.SourceNotFoundError`; removing an
  unknown source is a no-op.
* Storage is a tuple replaced on every edit; iteration works on an immutable
  snapshot, so readers never observe a half-applied edit.

Edits are expected during single-threaded bootstrap only.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from ..domain.errors import SourceNotFoundError
from .source import ConfigurationPropertySource


class SourceChain:
    """Ordered, mutable list of :class:`ConfigurationPropertySource` objects.

    Examples
    --------
    >>> from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
    >>> from lib_relaxed_config.adapters.providers.mapping import MapProvider
    >>> def make(name):
    ...     return ConfigurationPropertySource(name, MapProvider({}), DottedPropertyMapper())
    >>> chain = SourceChain([make("a"), make("c")])
    >>> chain.insert_after("a", make("b"))
    >>> chain.names()
    ['a', 'b', 'c']
    >>> chain.insert_after("a", make("b"))
    >>> chain.names()
    ['a', 'b', 'c']
    """

    def __init__(self, sources: Iterable[ConfigurationPropertySource] = ()) -> None:
        self._sources: tuple[ConfigurationPropertySource, ...] = ()
        for source in sources:
            self.add_last(source)

    def __iter__(self) -> Iterator[ConfigurationPropertySource]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._index_of(name) is not None

    def __repr__(self) -> str:
        return f"SourceChain({self.names()!r})"

    def names(self) -> list[str]:
        return [source.name for source in self._sources]

    def get(self, name: str) -> ConfigurationPropertySource | None:
        position = self._index_of(name)
        return None if position is None else self._sources[position]

    def add_first(self, source: ConfigurationPropertySource) -> None:
        """Register *source* with the highest precedence."""

        remaining = self._without(source.name)
        self._sources = (source, *remaining)

    def add_last(self, source: ConfigurationPropertySource) -> None:
        """Register *source* with the lowest precedence."""

        remaining = self._without(source.name)
        self._sources = (*remaining, source)

    def insert_before(self, anchor: str, source: ConfigurationPropertySource) -> None:
        """Splice *source* immediately before the source named *anchor*.

        Raises
        ------
        SourceNotFoundError
            When no source is named *anchor*.
        ValueError
            When *source* would be positioned relative to itself.
        """

        self._insert(anchor, source, offset=0)

    def insert_after(self, anchor: str, source: ConfigurationPropertySource) -> None:
        """Splice *source* immediately after the source named *anchor* (see :meth:`insert_before`)."""

        self._insert(anchor, source, offset=1)

    def remove(self, name: str) -> ConfigurationPropertySource | None:
        """Remove and return the source called *name*; unknown names are ignored."""

        position = self._index_of(name)
        if position is None:
            return None
        removed = self._sources[position]
        self._sources = self._sources[:position] + self._sources[position + 1 :]
        return removed

    def replace(self, name: str, source: ConfigurationPropertySource) -> ConfigurationPropertySource:
        """Swap the source called *name* for *source* in place and return the old one.

        Raises
        ------
        SourceNotFoundError
            When no source is named *name*.
        """

        position = self._index_of(name)
        if position is None:
            raise SourceNotFoundError(name)
        previous = self._sources[position]
        entries = list(self._sources)
        entries[position] = source
        if source.name != name:
            duplicate = self._index_of(source.name)
            if duplicate is not None:
                del entries[duplicate]
        self._sources = tuple(entries)
        return previous

    def _insert(self, anchor: str, source: ConfigurationPropertySource, *, offset: int) -> None:
        if anchor == source.name:
            raise ValueError(f"Property source {anchor!r} cannot be positioned relative to itself")
        if self._index_of(anchor) is None:
            raise SourceNotFoundError(anchor)
        remaining = self._without(source.name)
        position = next(index for index, entry in enumerate(remaining) if entry.name == anchor) + offset
        self._sources = (*remaining[:position], source, *remaining[position:])

    def _without(self, name: str) -> tuple[ConfigurationPropertySource, ...]:
        return tuple(source for source in self._sources if source.name != name)

    def _index_of(self, name: str) -> int | None:
        for position, source in enumerate(self._sources):
            if source.name == name:
                return position
        return None
