"""Relaxed configuration property resolution.

Canonical property names are resolved against an ordered chain of sources
that each speak their own naming dialect (dotted keys, environment
variables, ``.env`` files), and deprecated keys are reported and bridged to
their replacements.
"""

from __future__ import annotations

from .application.chain import SourceChain
from .application.migration import (
    Deprecation,
    DeprecationLevel,
    MetadataTable,
    MigrationAnalyzer,
    MigrationEntry,
    MigrationReport,
    MigrationStatus,
    PropertyMetadata,
    SourceReport,
)
from .application.resolver import Resolver
from .application.source import ConfigurationPropertySource, SourceCapability
from .core import (
    Bootstrap,
    SourceLoadError,
    bootstrap,
    default_env_prefix,
    environment_source,
    file_source,
    load_metadata,
    lookup_source,
    make_mapper,
    map_source,
)
from .domain.errors import (
    ConfigError,
    InvalidFormat,
    MalformedNameError,
    MappingFailure,
    NotFound,
    SourceNotFoundError,
)
from .domain.mapping import PropertyMapping
from .domain.name import ConfigurationPropertyName
from .domain.property import ConfigurationProperty, Origin, PropertyState
from .observability import bind_trace_id, get_logger

__all__ = [
    "Bootstrap",
    "ConfigError",
    "ConfigurationProperty",
    "ConfigurationPropertyName",
    "ConfigurationPropertySource",
    "Deprecation",
    "DeprecationLevel",
    "InvalidFormat",
    "MalformedNameError",
    "MappingFailure",
    "MetadataTable",
    "MigrationAnalyzer",
    "MigrationEntry",
    "MigrationReport",
    "MigrationStatus",
    "NotFound",
    "Origin",
    "PropertyMapping",
    "PropertyMetadata",
    "PropertyState",
    "Resolver",
    "SourceCapability",
    "SourceChain",
    "SourceLoadError",
    "SourceNotFoundError",
    "SourceReport",
    "bind_trace_id",
    "bootstrap",
    "default_env_prefix",
    "environment_source",
    "file_source",
    "get_logger",
    "load_metadata",
    "lookup_source",
    "make_mapper",
    "map_source",
]
