"""Process environment dialect mapper.

Purpose
-------
Map canonical names onto SCREAMING_SNAKE_CASE variable names: uniform
element forms upper-cased and joined by ``_`` (``server.context-path`` →
``SERVER_CONTEXTPATH``, ``list[0].value`` → ``LIST_0_VALUE``). At most one
candidate is produced per name; there is no fuzzy retry. Names whose
upper-cased form does not lower-case back to the same element (``straße``)
have no environment spelling and get no candidate.

Key behaviours
--------------
* Optional ``prefix`` (normalised through
  :func:`lib_relaxed_config.adapters.env.default.default_env_prefix`) is
  prepended as ``PREFIX_`` and required on the reverse path.
* Optional ``coerce=True`` installs
  :func:`lib_relaxed_config.adapters.env.default.coerce_value` as the value
  extractor.
"""

from __future__ import annotations

from ...domain.errors import MalformedNameError
from ...domain.mapping import Extractor, PropertyMapping, identity
from ...domain.name import ConfigurationPropertyName
from ..env.default import coerce_value, default_env_prefix


class EnvironmentPropertyMapper:
    """Environment-variable naming rules.

    Examples
    --------
    >>> mapper = EnvironmentPropertyMapper(prefix="demo")
    >>> [m.key for m in mapper.map_to_source_candidates(ConfigurationPropertyName.parse("server.context-path"))]
    ['DEMO_SERVER_CONTEXTPATH']
    >>> str(mapper.map_to_name("DEMO_SERVER_PORT"))
    'server.port'
    >>> mapper.map_to_name("SERVER_PORT") is None
    True
    """

    dialect = "environment"

    def __init__(self, *, prefix: str | None = None, coerce: bool = False) -> None:
        self.prefix = default_env_prefix(prefix) if prefix else ""
        self.coerce = coerce
        self._extractor: Extractor = coerce_value if coerce else identity

    def map_to_source_candidates(self, name: ConfigurationPropertyName) -> tuple[PropertyMapping, ...]:
        parts = [element.uniform.upper() for element in name]
        if any(part.lower() != element.uniform for part, element in zip(parts, name)):
            return ()
        body = "_".join(parts)
        return (PropertyMapping(self._with_prefix(body), name, self._extractor),)

    def map_to_name(self, key: str) -> ConfigurationPropertyName | None:
        body = self._without_prefix(key)
        if not body:
            return None
        try:
            return ConfigurationPropertyName.of(part.lower() for part in body.split("_"))
        except MalformedNameError:
            return None

    def map_from_source(self, key: str) -> PropertyMapping | None:
        name = self.map_to_name(key)
        if name is None:
            return None
        return PropertyMapping(key, name, self._extractor)

    def _with_prefix(self, body: str) -> str:
        return f"{self.prefix}_{body}" if self.prefix else body

    def _without_prefix(self, key: str) -> str | None:
        if not self.prefix:
            return key
        marker = f"{self.prefix}_"
        if key[: len(marker)].upper() != marker:
            return None
        return key[len(marker) :]

    def __repr__(self) -> str:
        return f"EnvironmentPropertyMapper(prefix={self.prefix or None!r}, coerce={self.coerce!r})"
