"""Resolver facade: the single read entry point for consumers.

The resolver walks a :class:`~lib_relaxed_config.application.chain.SourceChain`
front to back and stops at the first source that yields a property. Later
sources may be expensive or remote, so they are never consulted once a match
is found. A source that raises is logged and skipped; one misconfigured
source must not take down resolution of unrelated keys.
"""

from __future__ import annotations

from typing import Any, Union

from ..domain.name import ConfigurationPropertyName
from ..domain.property import ConfigurationProperty, PropertyState
from ..observability import log_warning, make_event
from .chain import SourceChain

NameLike = Union[ConfigurationPropertyName, str]


def as_name(name: NameLike) -> ConfigurationPropertyName:
    """Return *name* as a canonical name, parsing strings (errors propagate)."""

    if isinstance(name, ConfigurationPropertyName):
        return name
    return ConfigurationPropertyName.parse(name)


class Resolver:
    """Resolve canonical names against a source chain in precedence order.

    Examples
    --------
    >>> from lib_relaxed_config.core import environment_source, map_source
    >>> chain = SourceChain([
    ...     map_source("application", {"server": {"port": 8080}}),
    ...     environment_source(environ={"SERVER_PORT": "9090"}),
    ... ])
    >>> found = Resolver(chain).resolve("server.port")
    >>> found.value, found.origin.source
    (8080, 'application')
    """

    def __init__(self, chain: SourceChain) -> None:
        self._chain = chain

    @property
    def chain(self) -> SourceChain:
        return self._chain

    def resolve(self, name: NameLike) -> ConfigurationProperty | None:
        """Return the first property any source holds for *name*, or ``None``.

        Raises
        ------
        MalformedNameError
            When *name* is a string that is not a valid canonical name.
        """

        canonical = as_name(name)
        for source in self._chain:
            try:
                found = source.get_configuration_property(canonical)
            except Exception as exc:  # noqa: BLE001 - isolate faulty sources
                log_warning(
                    "source_failed",
                    **make_event(source.name, str(canonical), {"error": f"{type(exc).__name__}: {exc}"}),
                )
                continue
            if found is not None:
                return found
        return None

    def resolve_value(self, name: NameLike, default: Any = None) -> Any:
        """Return the resolved value for *name* or *default* when absent."""

        found = self.resolve(name)
        return default if found is None else found.value

    def contains_descendant_of(self, name: NameLike) -> PropertyState:
        """Aggregate descendant state over the chain.

        ``PRESENT`` wins as soon as one source reports it; otherwise
        ``UNKNOWN`` if any source could not tell (including failing sources),
        else ``ABSENT``.
        """

        canonical = as_name(name)
        state = PropertyState.ABSENT
        for source in self._chain:
            try:
                answer = source.contains_descendant_of(canonical)
            except Exception as exc:  # noqa: BLE001 - isolate faulty sources
                log_warning(
                    "source_failed",
                    **make_event(source.name, str(canonical), {"error": f"{type(exc).__name__}: {exc}"}),
                )
                answer = PropertyState.UNKNOWN
            if answer is PropertyState.PRESENT:
                return answer
            if answer is PropertyState.UNKNOWN:
                state = PropertyState.UNKNOWN
        return state
