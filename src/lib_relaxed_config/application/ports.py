"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts that raw providers and mapper dialects must
satisfy so property sources, the resolver, and the migration analyzer can
orchestrate behaviour without depending on concrete implementations.

Contents
--------
* :class:`RawPropertyProvider` – point lookups by raw key (required).
* :class:`EnumerableRawPropertyProvider` – adds key enumeration.
* :class:`OriginTrackingProvider` – optional hook returning per-key origins.
* :class:`PropertyMapper` – dialect rules translating canonical names to raw
  keys and back.

System Role
-----------
These protocols enforce Dependency Inversion. Adapters implement them; the
application layer only ever branches on declared *capability* (see
:class:`lib_relaxed_config.application.source.SourceCapability`), never on
concrete adapter types.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, Sequence, runtime_checkable

from ..domain.mapping import PropertyMapping
from ..domain.name import ConfigurationPropertyName
from ..domain.property import Origin


@runtime_checkable
class RawPropertyProvider(Protocol):
    """Answer "what is the value of raw key K".

    Why
    ----
    Restricted or virtualised environments (security-managed process
    environments, remote metadata services) may forbid enumeration; point
    lookups are the only capability every provider must offer.
    """

    def get(self, key: str) -> Any | None:
        """Return the stored value for *key* or ``None`` when absent."""


@runtime_checkable
class EnumerableRawPropertyProvider(RawPropertyProvider, Protocol):
    """Provider that can also list all of its raw keys."""

    def keys(self) -> Iterable[str]:
        """Yield every raw key in a stable order."""


@runtime_checkable
class OriginTrackingProvider(Protocol):
    """Provider that knows richer provenance than ``(source, key)``."""

    def origin_of(self, key: str) -> Origin | None:
        """Return the recorded origin for *key*, if any."""


@runtime_checkable
class PropertyMapper(Protocol):
    """Translate between canonical names and the raw keys of one dialect.

    Why
    ----
    Each class of provider follows its own naming convention. Keeping the
    rules in a pure, cacheable object lets sources stay dialect-agnostic.

    Contract
    --------
    For every name ``N`` and every candidate ``C`` in
    ``map_to_source_candidates(N)``, ``map_to_name(C.key) == N``.
    """

    dialect: str

    def map_to_source_candidates(self, name: ConfigurationPropertyName) -> Sequence[PropertyMapping]:
        """Return raw key candidates for *name* in trial order."""

    def map_to_name(self, key: str) -> ConfigurationPropertyName | None:
        """Return the canonical name *key* stands for, or ``None`` when it maps to none."""

    def map_from_source(self, key: str) -> PropertyMapping | None:
        """Return the reverse mapping for *key* (used by relaxed scans)."""
