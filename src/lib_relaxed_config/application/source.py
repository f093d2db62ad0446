"""Configuration property sources.

Purpose
-------
Wrap one raw provider and one dialect mapper so the rest of the engine can
ask "does this source have a value for this canonical name" without knowing
the provider's naming convention or capabilities.

Contents
--------
* :class:`SourceCapability` – explicit capability flag (enumerable vs.
  lookup-only).
* :class:`ConfigurationPropertySource` – lookup algorithm, relaxed scan, and
  descendant queries.

System Role
-----------
Sources are built once at bootstrap (see :mod:`lib_relaxed_config.core`),
registered in a :class:`lib_relaxed_config.application.chain.SourceChain`, and
queried by the resolver and the migration analyzer. Mapping and extraction
failures stop here: they are logged and degrade to "absent for this source".
Provider failures propagate so the resolver can isolate the whole source.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from ..domain.errors import MappingFailure
from ..domain.mapping import PropertyMapping
from ..domain.name import ConfigurationPropertyName
from ..domain.property import ConfigurationProperty, Origin, PropertyState
from ..observability import log_debug, make_event
from .ports import OriginTrackingProvider, PropertyMapper, RawPropertyProvider


class SourceCapability(Enum):
    """Whether a source may enumerate its provider's keys."""

    ENUMERABLE = "enumerable"
    LOOKUP_ONLY = "lookup-only"


class ConfigurationPropertySource:
    """Answer canonical-name lookups against one raw provider.

    Why
    ----
    Providers speak raw keys in their own dialect; consumers speak canonical
    names. The source owns the translation and the failure isolation between
    the two.

    What
    ----
    :meth:`get_configuration_property` tries the mapper's candidates in order,
    skipping candidates whose applicability predicate rejects the name, and
    returns the first candidate with a non-``None`` raw value after running
    the value extractor. Enumerable sources that miss on every candidate then
    perform a *relaxed scan*: every raw key is reverse-mapped and the first
    one answering the name wins, so ``server.context_path`` or
    ``Server.ContextPath`` still answer ``server.context-path``.

    Parameters
    ----------
    name:
        Unique name used by the chain and recorded in origins.
    provider:
        Raw provider; must offer ``get`` and may offer ``keys``.
    mapper:
        Dialect rules (optionally wrapped in a caching mapper).
    enumerable:
        Capability override. ``None`` infers it from the provider; ``False``
        forces lookup-only behaviour even when the provider could enumerate
        (restricted environments).
    scan_limit:
        Maximum number of keys a descendant query will inspect before
        answering :attr:`PropertyState.UNKNOWN`.

    Examples
    --------
    >>> from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
    >>> from lib_relaxed_config.adapters.providers.mapping import MapProvider
    >>> source = ConfigurationPropertySource("defaults", MapProvider({"server.contextPath": "/app"}), DottedPropertyMapper())
    >>> source.get_configuration_property(ConfigurationPropertyName.parse("server.context-path")).value
    '/app'
    >>> source.contains_descendant_of(ConfigurationPropertyName.parse("server"))
    <PropertyState.PRESENT: 'present'>
    """

    def __init__(
        self,
        name: str,
        provider: RawPropertyProvider,
        mapper: PropertyMapper,
        *,
        enumerable: bool | None = None,
        scan_limit: int | None = None,
    ) -> None:
        if not name:
            raise ValueError("property sources need a non-empty name")
        can_enumerate = callable(getattr(provider, "keys", None))
        if enumerable is None:
            enumerable = can_enumerate
        elif enumerable and not can_enumerate:
            raise ValueError(f"provider of source {name!r} cannot enumerate its keys")
        self._name = name
        self._provider = provider
        self._mapper = mapper
        self._scan_limit = scan_limit
        self.capability = SourceCapability.ENUMERABLE if enumerable else SourceCapability.LOOKUP_ONLY

    @property
    def name(self) -> str:
        return self._name

    @property
    def provider(self) -> RawPropertyProvider:
        return self._provider

    @property
    def mapper(self) -> PropertyMapper:
        return self._mapper

    @property
    def is_enumerable(self) -> bool:
        return self.capability is SourceCapability.ENUMERABLE

    def get_configuration_property(self, name: ConfigurationPropertyName) -> ConfigurationProperty | None:
        """Return the property this source holds for *name*, or ``None``.

        Absence is a regular result. A stored empty string is present; only a
        ``None`` raw value counts as missing.
        """

        tried: set[str] = set()
        for mapping in self._candidates(name):
            tried.add(mapping.key)
            if not self._applies(mapping, name):
                continue
            found = self._find(mapping, name)
            if found is not None:
                return found
        if self.is_enumerable:
            return self._find_relaxed(name, tried)
        return None

    def contains_descendant_of(self, name: ConfigurationPropertyName) -> PropertyState:
        """Report whether any raw key maps to a descendant of *name*.

        Lookup-only sources, failing enumerations, and key sets larger than
        ``scan_limit`` answer :attr:`PropertyState.UNKNOWN`.
        """

        if not self.is_enumerable:
            return PropertyState.UNKNOWN
        try:
            keys = list(self._keys())
        except Exception as exc:  # noqa: BLE001 - enumeration failure means "cannot tell"
            log_debug("descendant_scan_skipped", **make_event(self._name, str(name), {"error": str(exc)}))
            return PropertyState.UNKNOWN
        if self._scan_limit is not None and len(keys) > self._scan_limit:
            log_debug(
                "descendant_scan_skipped",
                **make_event(self._name, str(name), {"keys": len(keys), "scan_limit": self._scan_limit}),
            )
            return PropertyState.UNKNOWN
        for key in keys:
            mapping = self._reverse(key)
            if mapping is not None and name.is_ancestor_of(mapping.name):
                return PropertyState.PRESENT
        return PropertyState.ABSENT

    def _candidates(self, name: ConfigurationPropertyName) -> Iterable[PropertyMapping]:
        try:
            return self._mapper.map_to_source_candidates(name)
        except Exception as exc:  # noqa: BLE001 - mapper failures degrade to absence
            log_debug("mapping_failed", **make_event(self._name, str(name), {"error": str(exc)}))
            return ()

    def _reverse(self, key: str) -> PropertyMapping | None:
        try:
            return self._mapper.map_from_source(key)
        except Exception as exc:  # noqa: BLE001 - a malformed raw key maps to nothing
            log_debug("mapping_failed", **make_event(self._name, key, {"error": str(exc)}))
            return None

    def _applies(self, mapping: PropertyMapping, name: ConfigurationPropertyName) -> bool:
        try:
            return mapping.is_applicable(name)
        except Exception as exc:  # noqa: BLE001 - a failing predicate rejects the candidate
            log_debug("mapping_failed", **make_event(self._name, mapping.key, {"error": str(exc)}))
            return False

    def _find(self, mapping: PropertyMapping, name: ConfigurationPropertyName) -> ConfigurationProperty | None:
        raw = self._provider.get(mapping.key)
        if raw is None:
            return None
        try:
            value = mapping.extract(raw)
        except MappingFailure as exc:
            log_debug("extractor_failed", **make_event(self._name, mapping.key, {"error": str(exc)}))
            return None
        return ConfigurationProperty(name, value, self._origin(mapping.key))

    def _find_relaxed(self, name: ConfigurationPropertyName, tried: set[str]) -> ConfigurationProperty | None:
        for key in self._keys():
            if key in tried:
                continue
            mapping = self._reverse(key)
            if mapping is None or not self._applies(mapping, name):
                continue
            found = self._find(mapping, name)
            if found is not None:
                return found
        return None

    def _keys(self) -> Iterable[str]:
        return self._provider.keys()  # type: ignore[attr-defined]

    def _origin(self, key: str) -> Origin:
        if isinstance(self._provider, OriginTrackingProvider):
            tracked = self._provider.origin_of(key)
            if tracked is not None:
                return tracked
        return Origin(self._name, key)

    def __repr__(self) -> str:
        return f"ConfigurationPropertySource(name={self._name!r}, capability={self.capability.value!r}, mapper={self._mapper!r})"
