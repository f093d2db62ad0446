"""Deprecated-key migration analysis.

Purpose
-------
Detect configuration keys that were renamed, report them for operator action,
and bridge each compatible rename with a synthetic property source so old and
new spellings coexist without breaking deployments.

Contents
--------
* :class:`DeprecationLevel`, :class:`Deprecation`, :class:`PropertyMetadata` –
  metadata describing known properties and their replacements.
* :class:`MetadataTable` – immutable lookup by canonical name, buildable from
  plain records.
* :class:`MigrationStatus`, :class:`MigrationEntry`, :class:`SourceReport`,
  :class:`MigrationReport` – structured, machine-readable results.
* :class:`MigrationAnalyzer` – the analysis itself.

System Role
-----------
Runs during bootstrap, after the chain is assembled. For every source it
classifies each deprecated key holding a value as MATCHED (compatible
replacement) or UNHANDLED, then splices a ``migrate-<source>`` source
immediately *after* the original. Placing it after means a key already
spelled the new way, in the same source or in any source of higher
precedence, keeps priority over the migrated value.
"""

from __future__ import annotations

import re
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping

from ..domain.errors import InvalidFormat, MalformedNameError
from ..domain.name import ConfigurationPropertyName
from ..domain.property import ConfigurationProperty, Origin
from ..observability import log_info, log_warning, make_event
from .chain import SourceChain
from .source import ConfigurationPropertySource

SYNTHETIC_PREFIX = "migrate-"

BridgeFactory = Callable[..., ConfigurationPropertySource]

_MAP_TYPE = re.compile(
    r"^(?:dict|Dict|typing\.Dict|Mapping|typing\.Mapping|MutableMapping|collections\.abc\.Mapping|java\.util\.Map)"
    r"\s*[\[<]\s*(?P<key>[^,]+?)\s*,\s*(?P<value>.+?)\s*[\]>]$"
)


class DeprecationLevel(Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Deprecation:
    """Deprecation record attached to a property's metadata.

    ``replacement_type`` declares the replacement's type when the table holds
    no entry for the replacement itself.
    """

    replacement: ConfigurationPropertyName | None = None
    reason: str | None = None
    level: DeprecationLevel = DeprecationLevel.ERROR
    replacement_type: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.replacement, str):
            object.__setattr__(self, "replacement", ConfigurationPropertyName.parse(self.replacement))
        if isinstance(self.level, str):
            object.__setattr__(self, "level", DeprecationLevel(self.level.lower()))


@dataclass(frozen=True, slots=True)
class PropertyMetadata:
    """Declared type (and optional deprecation) of one known property.

    Examples
    --------
    >>> meta = PropertyMetadata("server.context-path", "str", Deprecation("server.servlet.context-path"))
    >>> str(meta.name), str(meta.deprecation.replacement)
    ('server.context-path', 'server.servlet.context-path')
    """

    name: ConfigurationPropertyName
    type: str | None = None
    deprecation: Deprecation | None = None

    def __post_init__(self) -> None:
        if isinstance(self.name, str):
            object.__setattr__(self, "name", ConfigurationPropertyName.parse(self.name))

    @property
    def is_deprecated(self) -> bool:
        return self.deprecation is not None


class MetadataTable(MappingABC[ConfigurationPropertyName, PropertyMetadata]):
    """Immutable mapping from canonical name to :class:`PropertyMetadata`.

    Examples
    --------
    >>> table = MetadataTable.from_records([
    ...     {"name": "server.context-path", "type": "str",
    ...      "deprecation": {"replacement": "server.servlet.context-path"}},
    ...     {"name": "server.servlet.context-path", "type": "str"},
    ... ])
    >>> [str(meta.name) for meta in table.deprecated()]
    ['server.context-path']
    >>> table.get(ConfigurationPropertyName.parse("server.servlet.contextPath")).type
    'str'
    """

    def __init__(self, entries: Iterable[PropertyMetadata] = ()) -> None:
        self._entries: Mapping[ConfigurationPropertyName, PropertyMetadata] = MappingProxyType(
            {entry.name: entry for entry in entries}
        )

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> MetadataTable:
        """Build a table from plain records (as found in metadata files).

        Raises
        ------
        InvalidFormat
            When a record is not a mapping, lacks a name, carries a malformed
            name, or declares an unknown deprecation level.
        """

        return cls(_metadata_from_record(record, position) for position, record in enumerate(records))

    def __getitem__(self, name: ConfigurationPropertyName) -> PropertyMetadata:
        return self._entries[name]

    def __iter__(self) -> Iterator[ConfigurationPropertyName]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def deprecated(self) -> list[PropertyMetadata]:
        return [entry for entry in self._entries.values() if entry.is_deprecated]


class MigrationStatus(Enum):
    MATCHED = "matched"
    UNHANDLED = "unhandled"


@dataclass(frozen=True, slots=True)
class MigrationEntry:
    """One deprecated key found with a value in one source."""

    name: ConfigurationPropertyName
    replacement: ConfigurationPropertyName | None
    value: Any
    origin: Origin
    status: MigrationStatus
    reason: str | None = None
    level: DeprecationLevel = DeprecationLevel.ERROR

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": str(self.name),
            "replacement": None if self.replacement is None else str(self.replacement),
            "value": self.value,
            "origin": self.origin.as_dict(),
            "status": self.status.value,
            "reason": self.reason,
            "level": self.level.value,
        }


@dataclass(frozen=True, slots=True)
class SourceReport:
    """Findings for one inspected source.

    ``synthetic_source`` is the ``migrate-<source>`` bridge built from the
    matched entries (``None`` when nothing matched); it is spliced into the
    chain only when the analysis runs with ``apply=True``.
    """

    source: str
    matched: tuple[MigrationEntry, ...] = ()
    unhandled: tuple[MigrationEntry, ...] = ()
    synthetic_source: ConfigurationPropertySource | None = field(default=None, compare=False)

    @property
    def has_findings(self) -> bool:
        return bool(self.matched or self.unhandled)

    def as_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "matched": [entry.as_dict() for entry in self.matched],
            "unhandled": [entry.as_dict() for entry in self.unhandled],
            "synthetic_source": None if self.synthetic_source is None else self.synthetic_source.name,
        }


@dataclass(frozen=True, slots=True)
class MigrationReport:
    """Structured analysis result listing every inspected source in chain order."""

    sources: tuple[SourceReport, ...] = ()

    @property
    def has_findings(self) -> bool:
        return any(report.has_findings for report in self.sources)

    def for_source(self, name: str) -> SourceReport | None:
        for report in self.sources:
            if report.source == name:
                return report
        return None

    def matched(self) -> list[MigrationEntry]:
        return [entry for report in self.sources for entry in report.matched]

    def unhandled(self) -> list[MigrationEntry]:
        return [entry for report in self.sources for entry in report.unhandled]

    def as_dict(self) -> dict[str, Any]:
        return {"sources": [report.as_dict() for report in self.sources]}


class MigrationAnalyzer:
    """Classify deprecated keys per source and bridge compatible renames.

    Why
    ----
    Renaming a key must not break deployments that still use the old
    spelling, yet operators need to see every deprecated key they rely on.

    What
    ----
    For each non-synthetic source in chain order and each deprecated metadata
    entry, the source is queried directly. Keys with a value become MATCHED
    when the replacement is type-compatible and UNHANDLED otherwise. MATCHED
    values are copied under their replacement names into a synthetic
    ``migrate-<source>`` source that keeps the original origins.

    Parameters
    ----------
    chain:
        The live chain; edited in place when analysing with ``apply=True``.
    metadata:
        :class:`MetadataTable` or an iterable of :class:`PropertyMetadata`.
    bridge_factory:
        Called as ``bridge_factory(name, data, origins=origins)`` with flat
        canonical keys; returns the synthetic source (for example
        :func:`lib_relaxed_config.core.map_source`).
    """

    def __init__(
        self,
        chain: SourceChain,
        metadata: MetadataTable | Iterable[PropertyMetadata],
        bridge_factory: BridgeFactory,
    ) -> None:
        self._chain = chain
        self._bridge_factory = bridge_factory
        self._metadata = metadata if isinstance(metadata, MetadataTable) else MetadataTable(metadata)

    def analyze(self, *, apply: bool = True) -> MigrationReport:
        """Inspect every source and, when *apply*, splice synthetic sources.

        Raises
        ------
        SourceNotFoundError
            When a source disappears from the chain while its bridge is being
            spliced in (a bootstrap-ordering bug).
        """

        deprecated = self._metadata.deprecated()
        reports: list[SourceReport] = []
        for source in list(self._chain):
            if source.name.startswith(SYNTHETIC_PREFIX):
                continue
            report = self._analyze_source(source, deprecated)
            synthetic_name = SYNTHETIC_PREFIX + source.name
            if apply and report.synthetic_source is not None:
                self._chain.insert_after(source.name, report.synthetic_source)
            elif apply:
                self._chain.remove(synthetic_name)
            reports.append(report)
        return MigrationReport(tuple(reports))

    def is_compatible(self, metadata: PropertyMetadata) -> bool:
        """Return ``True`` when *metadata*'s replacement can receive its value.

        Compatible means the replacement's declared type equals the deprecated
        type, or the replacement (or its parent, for map entries such as
        ``logging.level.web``) is a map whose value type equals it.
        """

        deprecation = metadata.deprecation
        if deprecation is None or deprecation.replacement is None or metadata.type is None:
            return False
        expected = _normalise(metadata.type)
        replacement = deprecation.replacement
        known = self._metadata.get(replacement)
        declared = known.type if known is not None else deprecation.replacement_type
        if declared is not None:
            return _normalise(declared) == expected or _map_value_type(declared) == expected
        parent = replacement.parent
        container = None if parent is None else self._metadata.get(parent)
        if container is None or container.type is None:
            return False
        return _map_value_type(container.type) == expected

    def _analyze_source(self, source: ConfigurationPropertySource, deprecated: list[PropertyMetadata]) -> SourceReport:
        matched: list[MigrationEntry] = []
        unhandled: list[MigrationEntry] = []
        for metadata in deprecated:
            deprecation = metadata.deprecation
            found = self._lookup(source, metadata.name)
            if deprecation is None or found is None:
                continue
            if self.is_compatible(metadata):
                entry = _entry(metadata, deprecation, found, MigrationStatus.MATCHED)
                matched.append(entry)
                log_info(
                    "migration_matched",
                    **make_event(source.name, str(metadata.name), {"replacement": str(entry.replacement)}),
                )
            else:
                entry = _entry(metadata, deprecation, found, MigrationStatus.UNHANDLED)
                unhandled.append(entry)
                log_warning(
                    "migration_unhandled",
                    **make_event(
                        source.name,
                        str(metadata.name),
                        {"replacement": None if entry.replacement is None else str(entry.replacement)},
                    ),
                )
        synthetic = self._bridge(source.name, matched) if matched else None
        return SourceReport(source.name, tuple(matched), tuple(unhandled), synthetic)

    def _lookup(self, source: ConfigurationPropertySource, name: ConfigurationPropertyName) -> ConfigurationProperty | None:
        try:
            return source.get_configuration_property(name)
        except Exception as exc:  # noqa: BLE001 - isolate faulty sources like the resolver does
            log_warning("source_failed", **make_event(source.name, str(name), {"error": f"{type(exc).__name__}: {exc}"}))
            return None

    def _bridge(self, source_name: str, matched: list[MigrationEntry]) -> ConfigurationPropertySource:
        """Build the ``migrate-<source>`` bridge keyed by canonical replacement names."""

        data: dict[str, Any] = {}
        origins: dict[str, Origin] = {}
        for entry in matched:
            key = str(entry.replacement)
            if key in data:
                continue
            data[key] = entry.value
            origins[key] = entry.origin
        return self._bridge_factory(SYNTHETIC_PREFIX + source_name, data, origins=origins)


def _entry(
    metadata: PropertyMetadata,
    deprecation: Deprecation,
    found: ConfigurationProperty,
    status: MigrationStatus,
) -> MigrationEntry:
    return MigrationEntry(
        name=metadata.name,
        replacement=deprecation.replacement,
        value=found.value,
        origin=found.origin,
        status=status,
        reason=deprecation.reason,
        level=deprecation.level,
    )


def _metadata_from_record(record: Any, position: int) -> PropertyMetadata:
    if not isinstance(record, MappingABC):
        raise InvalidFormat(f"Metadata record #{position} is not a mapping")
    name = record.get("name")
    if not isinstance(name, str) or not name:
        raise InvalidFormat(f"Metadata record #{position} has no name")
    raw_deprecation = record.get("deprecation")
    try:
        deprecation = None
        if raw_deprecation is not None:
            if not isinstance(raw_deprecation, MappingABC):
                raise InvalidFormat(f"Metadata record {name!r} has a malformed deprecation entry")
            deprecation = Deprecation(
                replacement=raw_deprecation.get("replacement") or None,
                reason=raw_deprecation.get("reason"),
                level=raw_deprecation.get("level", DeprecationLevel.ERROR.value),
                replacement_type=raw_deprecation.get("replacement_type"),
            )
        return PropertyMetadata(name=name, type=record.get("type"), deprecation=deprecation)
    except (MalformedNameError, ValueError) as exc:
        raise InvalidFormat(f"Metadata record {name!r} is invalid: {exc}") from exc


def _normalise(type_name: str) -> str:
    return re.sub(r"\s+", "", type_name)


def _map_value_type(type_name: str) -> str | None:
    """Return the value type of a map declaration, or ``None`` for non-map types.

    Examples
    --------
    >>> _map_value_type("dict[str, LogLevel]"), _map_value_type("java.util.Map<java.lang.String,java.lang.Integer>")
    ('LogLevel', 'java.lang.Integer')
    >>> _map_value_type("str") is None
    True
    """

    match = _MAP_TYPE.match(type_name.strip())
    if match is None:
        return None
    return _normalise(match.group("value"))
