"""Composition root for ``lib_relaxed_config``.

Purpose
-------
Wire providers, dialect mappers, caching, and sources into a ready-to-use
:class:`~lib_relaxed_config.application.chain.SourceChain` and
:class:`~lib_relaxed_config.application.resolver.Resolver`, and run the
migration analysis when deprecation metadata is supplied.

Contents
--------
* :class:`SourceLoadError` – a file source could not be materialised.
* :func:`map_source`, :func:`lookup_source`, :func:`environment_source`,
  :func:`file_source` – source factories (all mappers cached).
* :func:`load_metadata` – read a metadata table from a structured file.
* :class:`Bootstrap` / :func:`bootstrap` – assemble the whole chain.

System Role
-----------
The only module that knows about concrete adapters. The CLI and consuming
applications call in here; the application layer never imports adapters
except to build synthetic migration sources.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence

from .adapters.dotenv.default import load_dotenv
from .adapters.env.default import EnvironmentProvider, default_env_prefix
from .adapters.file_loaders.structured import loader_for
from .adapters.mappers.caching import CachingPropertyMapper
from .adapters.mappers.dotted import DottedPropertyMapper
from .adapters.mappers.environment import EnvironmentPropertyMapper
from .adapters.providers.mapping import LookupProvider, MapProvider, flatten
from .application.chain import SourceChain
from .application.migration import MetadataTable, MigrationAnalyzer, MigrationReport, PropertyMetadata
from .application.ports import PropertyMapper
from .application.resolver import Resolver
from .application.source import ConfigurationPropertySource
from .domain.errors import ConfigError, InvalidFormat, NotFound
from .domain.property import Origin
from .observability import bind_trace_id, log_debug, log_info, make_event

DIALECTS = ("dotted", "environment")


class SourceLoadError(ConfigError):
    """Raised when a configuration file cannot be turned into a property source.

    Why
    ----
    Callers catch one exception family; the wrapped :class:`InvalidFormat`
    stays available as ``__cause__`` and the failing path as :attr:`path`.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


def make_mapper(dialect: str = "dotted", *, prefix: str | None = None, coerce: bool = False) -> CachingPropertyMapper:
    """Return a cached mapper for *dialect* (``dotted`` or ``environment``).

    Examples
    --------
    >>> make_mapper("environment", prefix="demo").dialect
    'environment'
    >>> make_mapper("yaml")
    Traceback (most recent call last):
    ...
    ValueError: Unknown dialect 'yaml'; expected one of dotted, environment
    """

    mapper: PropertyMapper
    if dialect == "dotted":
        mapper = DottedPropertyMapper()
    elif dialect == "environment":
        mapper = EnvironmentPropertyMapper(prefix=prefix, coerce=coerce)
    else:
        raise ValueError(f"Unknown dialect {dialect!r}; expected one of {', '.join(DIALECTS)}")
    return CachingPropertyMapper(mapper)


def map_source(
    name: str,
    data: Mapping[str, Any],
    *,
    origins: Mapping[str, Origin] | None = None,
    enumerable: bool = True,
) -> ConfigurationPropertySource:
    """Return a dotted-dialect source over in-memory *data*.

    Nested mappings and lists are flattened to dotted raw keys first.

    Examples
    --------
    >>> source = map_source("defaults", {"server": {"contextPath": "/app"}})
    >>> from lib_relaxed_config.domain.name import ConfigurationPropertyName
    >>> found = source.get_configuration_property(ConfigurationPropertyName.parse("server.context-path"))
    >>> found.value, found.origin.key
    ('/app', 'server.contextPath')
    """

    source = ConfigurationPropertySource(
        name,
        MapProvider(flatten(data), origins=origins),
        make_mapper("dotted"),
        enumerable=enumerable,
    )
    _registered(source)
    return source


def lookup_source(
    name: str,
    lookup: Callable[[str], Any | None],
    *,
    dialect: str = "dotted",
    prefix: str | None = None,
) -> ConfigurationPropertySource:
    """Return a lookup-only source around *lookup*; descendant queries answer UNKNOWN."""

    source = ConfigurationPropertySource(name, LookupProvider(lookup), make_mapper(dialect, prefix=prefix))
    _registered(source)
    return source


def environment_source(
    name: str = "environment",
    *,
    environ: Mapping[str, str] | None = None,
    prefix: str | None = None,
    enumerable: bool = True,
    coerce: bool = False,
) -> ConfigurationPropertySource:
    """Return an environment-dialect source over *environ* (default :data:`os.environ`).

    Examples
    --------
    >>> source = environment_source(environ={"DEMO_SERVER_PORT": "9090"}, prefix="demo", coerce=True)
    >>> from lib_relaxed_config.domain.name import ConfigurationPropertyName
    >>> source.get_configuration_property(ConfigurationPropertyName.parse("server.port")).value
    9090
    """

    source = ConfigurationPropertySource(
        name,
        EnvironmentProvider(environ=environ, prefix=prefix),
        make_mapper("environment", prefix=prefix, coerce=coerce),
        enumerable=enumerable,
    )
    _registered(source)
    return source


def file_source(path: str | Path, *, name: str | None = None) -> ConfigurationPropertySource:
    """Return a source for the configuration file at *path*.

    ``.env`` files use the environment dialect and record ``path:line``
    locators; structured files use the dotted dialect with the path as
    locator. The source name defaults to the path.

    Raises
    ------
    NotFound
        When *path* does not exist.
    SourceLoadError
        When the file is malformed or of an unsupported type.
    """

    location = str(path)
    source_name = name or location
    try:
        if Path(location).name == ".env" or Path(location).suffix.lower() == ".env":
            parsed = load_dotenv(location, source=source_name)
            source = ConfigurationPropertySource(
                source_name,
                MapProvider(parsed.values, origins=parsed.origins),
                make_mapper("environment"),
            )
        else:
            flat = flatten(loader_for(location).load(location))
            origins = {key: Origin(source_name, key, location) for key in flat}
            source = ConfigurationPropertySource(source_name, MapProvider(flat, origins=origins), make_mapper("dotted"))
    except InvalidFormat as exc:
        log_debug("source_load_failed", **make_event(source_name, None, {"path": location, "error": str(exc)}))
        raise SourceLoadError(location, f"Failed to load configuration file {location}: {exc}") from exc
    _registered(source)
    return source


def load_metadata(path: str | Path) -> MetadataTable:
    """Read a metadata table from a TOML/JSON/YAML file.

    The document holds a ``properties`` list of records shaped like
    ``{"name": ..., "type": ..., "deprecation": {"replacement": ..., "reason": ..., "level": ...}}``.

    Raises
    ------
    NotFound
        When *path* does not exist.
    InvalidFormat
        When the document or one of its records is malformed.
    """

    location = str(path)
    document = loader_for(location).load(location)
    records = document.get("properties", [])
    if not isinstance(records, list):
        raise InvalidFormat(f"Metadata file {location} must hold a 'properties' list")
    table = MetadataTable.from_records(records)
    log_debug("metadata_loaded", source="metadata", key=None, path=location, properties=len(table))
    return table


@dataclass(frozen=True)
class Bootstrap:
    """Everything :func:`bootstrap` assembled."""

    chain: SourceChain
    resolver: Resolver
    report: MigrationReport | None = None


def bootstrap(
    files: Iterable[str | Path] = (),
    *,
    environ: Mapping[str, str] | None = None,
    env_prefix: str | None = None,
    include_environment: bool = True,
    metadata: MetadataTable | Iterable[PropertyMetadata] | str | Path | None = None,
    apply_migrations: bool = True,
) -> Bootstrap:
    """Assemble the chain, resolver, and (optionally) the migration report.

    Why
    ----
    Most applications want the same shape: environment overrides first, then
    configuration files in decreasing precedence, with deprecated keys
    bridged to their replacements.

    What
    ----
    Clears the trace binding, registers the environment source (unless
    disabled), then one source per file in the order given (first file wins
    over later ones), and runs :class:`MigrationAnalyzer` when *metadata* is
    supplied (a table, metadata objects, or a path for :func:`load_metadata`).

    Examples
    --------
    >>> result = bootstrap(environ={"SERVER_PORT": "9090"})
    >>> result.chain.names(), result.resolver.resolve_value("server.port")
    (['environment'], '9090')
    """

    bind_trace_id(None)
    chain = SourceChain()
    if include_environment:
        chain.add_last(environment_source(environ=environ, prefix=env_prefix))
    for path in _ordered_unique(files):
        chain.add_last(file_source(path))

    report = None
    if metadata is not None:
        table = load_metadata(metadata) if isinstance(metadata, (str, Path)) else metadata
        report = MigrationAnalyzer(chain, table, map_source).analyze(apply=apply_migrations)

    log_info(
        "configuration_bootstrapped",
        source=None,
        key=None,
        sources=chain.names(),
        migrations=None if report is None else len(report.matched()),
    )
    return Bootstrap(chain=chain, resolver=Resolver(chain), report=report)


def _ordered_unique(paths: Iterable[str | Path]) -> Sequence[str]:
    """Return *paths* as strings, dropping repeats while keeping first positions.

    Examples
    --------
    >>> _ordered_unique(["a.toml", Path("b.json"), "a.toml"])
    ['a.toml', 'b.json']
    """

    return list(dict.fromkeys(str(path) for path in paths))


def _registered(source: ConfigurationPropertySource) -> None:
    log_debug(
        "source_registered",
        **make_event(source.name, None, {"capability": source.capability.value, "dialect": source.mapper.dialect}),
    )


__all__ = [
    "Bootstrap",
    "ConfigError",
    "DIALECTS",
    "InvalidFormat",
    "NotFound",
    "SourceLoadError",
    "bootstrap",
    "default_env_prefix",
    "environment_source",
    "file_source",
    "load_metadata",
    "lookup_source",
    "make_mapper",
    "map_source",
]
