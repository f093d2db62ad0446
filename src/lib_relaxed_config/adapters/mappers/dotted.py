"""Dotted-map dialect mapper.

Purpose
-------
Implement :class:`lib_relaxed_config.application.ports.PropertyMapper` for
providers whose keys follow the dotted convention used by structured files
and in-memory maps (``server.port``, ``server.contextPath``,
``list[0].value``, ``list.0.value``).

Key behaviours
--------------
* Forward candidates, in trial order: canonical dotted form, camelCase
  variant, index elements rendered as ``.N``. Duplicates are dropped while
  keeping order, so simple names yield a single candidate.
* The reverse direction parses the raw key; malformed keys map to ``None``.
"""

from __future__ import annotations

from ...domain.errors import MalformedNameError
from ...domain.mapping import PropertyMapping
from ...domain.name import ConfigurationPropertyName


class DottedPropertyMapper:
    """Map canonical names onto dotted/camelCase/indexed raw keys.

    Examples
    --------
    >>> mapper = DottedPropertyMapper()
    >>> name = ConfigurationPropertyName.parse("servers[0].context-path")
    >>> [m.key for m in mapper.map_to_source_candidates(name)]
    ['servers[0].context-path', 'servers[0].contextPath', 'servers.0.context-path']
    >>> mapper.map_to_name("servers.0.contextPath") == name
    True
    """

    dialect = "dotted"

    def map_to_source_candidates(self, name: ConfigurationPropertyName) -> tuple[PropertyMapping, ...]:
        keys = (
            str(name),
            _render(name, camel=True, dotted_index=False),
            _render(name, camel=False, dotted_index=True),
        )
        return tuple(PropertyMapping(key, name) for key in dict.fromkeys(keys))

    def map_to_name(self, key: str) -> ConfigurationPropertyName | None:
        try:
            return ConfigurationPropertyName.parse(key)
        except MalformedNameError:
            return None

    def map_from_source(self, key: str) -> PropertyMapping | None:
        name = self.map_to_name(key)
        if name is None:
            return None
        return PropertyMapping(key, name)

    def __repr__(self) -> str:
        return "DottedPropertyMapper()"


def _render(name: ConfigurationPropertyName, *, camel: bool, dotted_index: bool) -> str:
    """Render *name* with camelCase tokens and/or ``.N`` indices."""

    parts: list[str] = []
    for position, element in enumerate(name):
        if element.is_index and not dotted_index:
            parts.append(f"[{element.index}]")
            continue
        text = element.camel if camel else element.dashed
        parts.append(text if position == 0 else "." + text)
    return "".join(parts)
