"""Property mapping value object shared by all mapper dialects.

A :class:`PropertyMapping` pairs a raw source key with the canonical name it
answers, an applicability predicate, and a value extractor. Mappers produce
them; property sources consume them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .errors import MappingFailure
from .name import ConfigurationPropertyName

Extractor = Callable[[Any], Any]
Applicability = Callable[[ConfigurationPropertyName], bool]


def identity(value: Any) -> Any:
    return value


@dataclass(frozen=True, slots=True)
class PropertyMapping:
    """Raw key candidate produced for one ``(dialect, name)`` query.

    Why
    ----
    One raw key can answer a family of names (indexed variants); the predicate
    lets the source ask "does this mapping answer *this* name" before paying
    for a provider lookup.

    What
    ----
    Equality covers ``key`` and ``name`` only so memoized and recomputed
    candidate lists compare equal.

    Examples
    --------
    >>> mapping = PropertyMapping("SERVER_PORT", ConfigurationPropertyName.parse("server.port"), int)
    >>> mapping.is_applicable(ConfigurationPropertyName.parse("server.port"))
    True
    >>> mapping.extract("8080")
    8080
    """

    key: str
    name: ConfigurationPropertyName
    extractor: Extractor = field(default=identity, compare=False, repr=False)
    predicate: Applicability | None = field(default=None, compare=False, repr=False)

    def is_applicable(self, name: ConfigurationPropertyName) -> bool:
        if self.predicate is None:
            return self.name == name
        return self.predicate(name)

    def extract(self, value: Any) -> Any:
        """Run the extractor, converting any failure into :class:`MappingFailure`."""

        try:
            return self.extractor(value)
        except Exception as exc:
            raise MappingFailure(f"Value extraction failed for key {self.key!r}: {exc}") from exc
