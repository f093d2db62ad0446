"""Resolved configuration property value objects.

Purpose
-------
Carry a resolved value together with its provenance so tooling can explain
*which* source and *which* raw key supplied it.

Contents
--------
* :class:`OriginInfo` – typed dictionary used for JSON-friendly exports.
* :class:`Origin` – diagnostic provenance (source identity + raw key +
  optional locator).
* :class:`ConfigurationProperty` – immutable ``(name, value, origin)`` triple.
* :class:`PropertyState` – tri-state answer for descendant queries.

System Role
-----------
Produced by property sources, returned by the resolver, and reused by the
migration analyzer so synthetic values keep pointing at the original file and
line.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypedDict

from .name import ConfigurationPropertyName


class OriginInfo(TypedDict):
    """Describe the origin of a resolved configuration key.

    Attributes
    ----------
    source:
        Name of the property source that supplied the value.
    key:
        Raw key as spelled inside that source (``SERVER_PORT``,
        ``server.contextPath``).
    locator:
        Optional ``path`` or ``path:line`` pointing at the artifact.
    """

    source: str
    key: str
    locator: str | None


@dataclass(frozen=True, slots=True)
class Origin:
    """Where a value came from; never consulted by resolution logic.

    The source is referenced by name only, so an origin never keeps a source
    (or its provider) alive.

    Examples
    --------
    >>> str(Origin("application.toml", "server.port", "/etc/demo/application.toml"))
    "key 'server.port' from source 'application.toml' (/etc/demo/application.toml)"
    >>> str(Origin("environment", "SERVER_PORT"))
    "key 'SERVER_PORT' from source 'environment'"
    """

    source: str
    key: str
    locator: str | None = None

    def __str__(self) -> str:
        text = f"key {self.key!r} from source {self.source!r}"
        if self.locator:
            text += f" ({self.locator})"
        return text

    def as_dict(self) -> OriginInfo:
        return OriginInfo(source=self.source, key=self.key, locator=self.locator)


@dataclass(frozen=True, slots=True)
class ConfigurationProperty:
    """A single resolved property: canonical name, extracted value, and origin.

    Examples
    --------
    >>> prop = ConfigurationProperty(
    ...     ConfigurationPropertyName.parse("server.port"), 8080, Origin("defaults", "server.port")
    ... )
    >>> prop.value, prop.origin.source
    (8080, 'defaults')
    """

    name: ConfigurationPropertyName
    value: Any
    origin: Origin

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly view used by the CLI and reports."""

        return {"name": str(self.name), "value": self.value, "origin": self.origin.as_dict()}


class PropertyState(Enum):
    """Answer to "does anything live under this name?".

    ``UNKNOWN`` is returned (never guessed) when a source cannot enumerate its
    keys, letting callers fall back to direct lookups.
    """

    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"
