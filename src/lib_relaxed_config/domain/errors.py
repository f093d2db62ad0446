"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the name parser, property sources,
the source chain, the composition root, and consuming applications. The
hierarchy lives in the domain layer so every outer layer can depend on it
without creating cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for all library failures.
* :class:`MalformedNameError` – a canonical property name could not be parsed.
* :class:`SourceNotFoundError` – a structural chain edit referenced an unknown
  source.
* :class:`MappingFailure` – internal signal raised by value extractors; always
  caught at the property-source boundary.
* :class:`InvalidFormat` – parsing problems while reading files or dotenv data.
* :class:`NotFound` – an expected configuration artifact is missing.

System Role
-----------
Only programmer errors (:class:`MalformedNameError`,
:class:`SourceNotFoundError`) and artifact loading errors reach callers. Data
errors inside a single source degrade to "absent for this source".
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_relaxed_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class MalformedNameError(ConfigError, ValueError):
    """Raised when a canonical property name cannot be parsed or built.

    Why
    ----
    Canonical names are written by developers (binding code, metadata tables);
    a malformed one is a programming error and must surface immediately.

    Typical Sources
    ---------------
    :meth:`lib_relaxed_config.domain.name.ConfigurationPropertyName.parse`,
    ``append`` and ``chop``.
    """

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Malformed configuration property name {value!r}: {reason}")
        self.value = value
        self.reason = reason


class SourceNotFoundError(ConfigError, LookupError):
    """Raised when a chain edit targets a source name that is not registered.

    Why
    ----
    Silently ignoring an unknown anchor would hide bootstrap-ordering bugs
    (for example a migration source spliced next to a source that was already
    removed).
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Property source {name!r} is not registered in the chain")
        self.name = name


class MappingFailure(ConfigError):
    """Internal signal that a raw value could not be mapped or extracted.

    Never propagated past
    :class:`lib_relaxed_config.application.source.ConfigurationPropertySource`.
    """


class InvalidFormat(ConfigError):
    """Raised when an input artifact cannot be parsed into structured data.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`), dotenv
    parsing, and metadata table records.
    """


class NotFound(ConfigError):
    """Represents a missing configuration artifact (file, optional parser)."""
