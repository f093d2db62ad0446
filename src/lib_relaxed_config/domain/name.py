"""Canonical configuration property names.

Purpose
-------
Model the normalised, hierarchical representation of a configuration key so
that ``server.port``, ``Server.Port``, ``server_port`` and ``serverPort``
compare equal while ``list[0].value`` and ``list.0.value`` address the same
indexed element.

Contents
--------
* :class:`Element` – one token or numeric index together with its uniform
  comparison form.
* :class:`ConfigurationPropertyName` – immutable, ordered, non-empty sequence
  of elements with parsing, ancestry, and pure editing helpers.

System Role
-----------
Every other layer speaks in canonical names: mappers translate them into raw
source keys, sources answer lookups for them, and the migration analyzer
indexes its metadata table by them. The module is free of I/O and logging.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Iterable, Iterator, Union

from .errors import MalformedNameError

ElementValue = Union[str, int]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_DASH_RUNS = re.compile(r"-{2,}")
_SEPARATORS = str.maketrans("", "", "-_")
_RESERVED = frozenset(".[]")


@dataclass(frozen=True, slots=True)
class Element:
    """Single name element compared through its uniform form.

    Why
    ----
    Tokens differ lexically between dialects (``contextPath`` vs
    ``context-path`` vs ``CONTEXT_PATH``); comparing the lower-cased,
    separator-free form makes them interchangeable.

    What
    ----
    ``original`` keeps the spelling that produced the element (diagnostics
    only), ``uniform`` drives equality and hashing, and ``index`` is set for
    numeric elements. An element whose uniform form is made of ASCII digits is
    always an index, whichever notation supplied it.
    """

    original: str = field(compare=False)
    uniform: str
    index: int | None = None

    @property
    def is_index(self) -> bool:
        return self.index is not None

    @property
    def dashed(self) -> str:
        """Return the lower-kebab rendering used by the canonical string form.

        Examples
        --------
        >>> token("contextPath").dashed
        'context-path'
        >>> token("URLPath").dashed
        'url-path'
        >>> token("max_pool__size").dashed
        'max-pool-size'
        """

        if self.index is not None:
            return str(self.index)
        spaced = _CAMEL_BOUNDARY.sub("-", self.original).replace("_", "-").lower()
        return _DASH_RUNS.sub("-", spaced).strip("-")

    @property
    def camel(self) -> str:
        """Return the camelCase rendering (``context-path`` → ``contextPath``)."""

        if self.index is not None:
            return str(self.index)
        head, *tail = self.dashed.split("-")
        return head + "".join(part[:1].upper() + part[1:] for part in tail)

    def sort_key(self) -> tuple[int, int, str]:
        if self.index is not None:
            return (0, self.index, "")
        return (1, 0, self.uniform)


def token(value: str, *, name: str | None = None) -> Element:
    """Build an element from a textual token, raising on structural characters.

    ``name`` is the full name being parsed and only enriches error messages.

    Examples
    --------
    >>> token("Server_Port").uniform
    'serverport'
    >>> token("007").index
    7
    """

    context = value if name is None else name
    if any(char in _RESERVED for char in value):
        raise MalformedNameError(context, f"element {value!r} must not contain '.', '[' or ']'")
    uniform = value.lower().translate(_SEPARATORS)
    if not uniform:
        raise MalformedNameError(context, f"element {value!r} is empty once separators are removed")
    if uniform.isascii() and uniform.isdigit():
        number = int(uniform)
        return Element(original=value, uniform=str(number), index=number)
    return Element(original=value, uniform=uniform)


def index(value: int) -> Element:
    """Build a numeric index element."""

    if isinstance(value, bool) or value < 0:
        raise MalformedNameError(str(value), "index elements must be non-negative integers")
    return Element(original=str(value), uniform=str(value), index=value)


def _element(value: ElementValue) -> Element:
    if isinstance(value, Element):
        return value
    if isinstance(value, int):
        return index(value)
    return token(value)


@total_ordering
@dataclass(frozen=True, slots=True)
class ConfigurationPropertyName:
    """Immutable canonical configuration key.

    Why
    ----
    Resolution must be deterministic across lexical conventions; a shared
    value object gives every layer the same equality, hashing, and ordering.

    What
    ----
    Wraps a non-empty tuple of :class:`Element` values. Equality, hashing, and
    ordering use the uniform forms; ``str(name)`` returns the canonical dotted
    form (lower-kebab tokens, ``[N]`` indices) which parses back to an equal
    name.

    Examples
    --------
    >>> name = ConfigurationPropertyName.parse("Server.contextPath")
    >>> str(name)
    'server.context-path'
    >>> name == ConfigurationPropertyName.parse("server.context_path")
    True
    >>> str(ConfigurationPropertyName.parse("list.0.value"))
    'list[0].value'
    """

    elements: tuple[Element, ...]

    def __post_init__(self) -> None:
        if not self.elements:
            raise MalformedNameError("", "a name needs at least one element")

    @classmethod
    def parse(cls, value: str) -> ConfigurationPropertyName:
        """Parse a dotted name with optional ``[N]`` index markers.

        Raises
        ------
        MalformedNameError
            On empty input, empty elements, unbalanced or nested brackets,
            non-numeric bracket content, or text glued to a closing bracket.

        Examples
        --------
        >>> [str(e.index) if e.is_index else e.dashed for e in ConfigurationPropertyName.parse("a[0].b").elements]
        ['a', '0', 'b']
        """

        return cls(tuple(_parse_elements(value)))

    @classmethod
    def of(cls, values: Iterable[ElementValue]) -> ConfigurationPropertyName:
        """Build a name from raw element values (``str`` tokens, ``int`` indices)."""

        return cls(tuple(_element(value) for value in values))

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Return ``True`` when *value* parses without error.

        Examples
        --------
        >>> ConfigurationPropertyName.is_valid("server.port"), ConfigurationPropertyName.is_valid("server..port")
        (True, False)
        """

        try:
            cls.parse(value)
        except MalformedNameError:
            return False
        return True

    def __str__(self) -> str:
        parts: list[str] = []
        for position, element in enumerate(self.elements):
            if element.is_index:
                parts.append(f"[{element.index}]")
            elif position == 0:
                parts.append(element.dashed)
            else:
                parts.append("." + element.dashed)
        return "".join(parts)

    def __repr__(self) -> str:
        return f"ConfigurationPropertyName({str(self)!r})"

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ConfigurationPropertyName):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _sort_key(self) -> tuple[tuple[int, int, str], ...]:
        return tuple(element.sort_key() for element in self.elements)

    @property
    def last_element(self) -> Element:
        return self.elements[-1]

    @property
    def is_last_element_indexed(self) -> bool:
        return self.last_element.is_index

    @property
    def parent(self) -> ConfigurationPropertyName | None:
        """Return the name without its last element, or ``None`` for single-element names."""

        if len(self.elements) == 1:
            return None
        return ConfigurationPropertyName(self.elements[:-1])

    def is_ancestor_of(self, other: ConfigurationPropertyName) -> bool:
        """Return ``True`` when *other* is strictly longer and starts with this name.

        Examples
        --------
        >>> server = ConfigurationPropertyName.parse("server")
        >>> server.is_ancestor_of(ConfigurationPropertyName.parse("SERVER.ssl.enabled"))
        True
        >>> server.is_ancestor_of(server)
        False
        """

        size = len(self.elements)
        return len(other.elements) > size and other.elements[:size] == self.elements

    def is_parent_of(self, other: ConfigurationPropertyName) -> bool:
        return len(other.elements) == len(self.elements) + 1 and self.is_ancestor_of(other)

    def append(self, element: ElementValue) -> ConfigurationPropertyName:
        """Return a new name with *element* (token or index) added at the end.

        Examples
        --------
        >>> str(ConfigurationPropertyName.parse("servers").append(2).append("hostName"))
        'servers[2].host-name'
        """

        return ConfigurationPropertyName(self.elements + (_element(element),))

    def chop(self, count: int) -> ConfigurationPropertyName:
        """Return a new name without the last *count* elements.

        Raises
        ------
        ValueError
            When *count* is negative.
        MalformedNameError
            When chopping would leave an empty name.
        """

        if count < 0:
            raise ValueError(f"chop count must be non-negative, got {count}")
        if count >= len(self.elements):
            raise MalformedNameError(str(self), f"chopping {count} element(s) would leave an empty name")
        if count == 0:
            return self
        return ConfigurationPropertyName(self.elements[:-count])


def _parse_elements(value: str) -> list[Element]:
    """Tokenise *value* into elements following the dotted/bracket grammar."""

    if not value:
        raise MalformedNameError(value, "name must not be empty")
    elements: list[Element] = []
    position = 0
    length = len(value)
    after_dot = False
    while position < length:
        char = value[position]
        if char == "[":
            if after_dot:
                raise MalformedNameError(value, f"empty element before '[' at position {position}")
            position = _parse_index(value, position, elements)
        elif char == "]":
            raise MalformedNameError(value, f"unbalanced ']' at position {position}")
        elif char == ".":
            raise MalformedNameError(value, f"empty element at position {position}")
        else:
            end = position
            while end < length and value[end] not in _RESERVED:
                end += 1
            elements.append(token(value[position:end], name=value))
            position = end
            if position < length and value[position] == "]":
                raise MalformedNameError(value, f"unbalanced ']' at position {position}")
        after_dot = False
        if position < length and value[position] == ".":
            position += 1
            after_dot = True
            if position == length:
                raise MalformedNameError(value, "name must not end with '.'")
    return elements


def _parse_index(value: str, start: int, elements: list[Element]) -> int:
    """Consume ``[N]`` starting at *start*, append the index, return the next position."""

    closing = value.find("]", start + 1)
    if closing == -1:
        raise MalformedNameError(value, f"unbalanced '[' at position {start}")
    content = value[start + 1 : closing]
    if "[" in content:
        raise MalformedNameError(value, f"nested '[' inside index at position {start}")
    if not (content.isascii() and content.isdigit()):
        raise MalformedNameError(value, f"index {content!r} is not a non-negative integer")
    number = int(content)
    elements.append(Element(original=content, uniform=str(number), index=number))
    position = closing + 1
    if position < len(value) and value[position] not in ".[":
        raise MalformedNameError(value, f"expected '.' or '[' after ']' at position {position}")
    return position
