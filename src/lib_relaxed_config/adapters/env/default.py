"""Process environment provider.

Purpose
-------
Expose process environment variables as a raw property provider. Variables
are handed to the engine untouched (``SERVER_PORT``); the environment dialect
mapper (:mod:`lib_relaxed_config.adapters.mappers.environment`) decides which
variable answers which canonical name.

Key behaviours
--------------
* Point lookups straight against the wrapped mapping (defaults to
  :data:`os.environ`), so later changes to the process environment are seen.
* Enumeration in stable, sorted order; optionally narrowed to a prefix
  (``default_env_prefix``) so unrelated variables stay out of relaxed scans.
* ``coerce_value`` performs light scalar coercion (bools, ints, floats,
  ``null``/``none``) for mappers that opt into it.
"""

from __future__ import annotations

import os
from typing import Iterator, Mapping

from ...observability import log_debug


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Why
    ----
    Namespacing prevents unrelated environment variables from answering
    configuration lookups.

    Examples
    --------
    >>> default_env_prefix('lib-relaxed-config')
    'LIB_RELAXED_CONFIG'
    >>> default_env_prefix('Demo.App')
    'DEMO_APP'
    """

    return slug.replace("-", "_").replace(".", "_").upper().strip("_")


class EnvironmentProvider:
    """Raw provider over a process environment mapping.

    Parameters
    ----------
    environ:
        Mapping to read from. Defaults to :data:`os.environ`.
    prefix:
        Optional prefix restricting :meth:`keys`. Point lookups are not
        filtered; the mapper already asks for prefixed keys.
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None, prefix: str | None = None) -> None:
        self._environ = os.environ if environ is None else environ
        self._prefix = f"{default_env_prefix(prefix)}_" if prefix else ""

    def get(self, key: str) -> str | None:
        return self._environ.get(key)

    def keys(self) -> Iterator[str]:
        """Yield variable names (sorted, prefix-filtered) for relaxed scans.

        Examples
        --------
        >>> provider = EnvironmentProvider(environ={'DEMO_B': '1', 'DEMO_A': '2', 'OTHER': '3'}, prefix='demo')
        >>> list(provider.keys())
        ['DEMO_A', 'DEMO_B']
        """

        selected = sorted(key for key in self._environ if key.upper().startswith(self._prefix))
        log_debug("env_variables_scanned", source="environment", key=None, prefix=self._prefix or None, count=len(selected))
        return iter(selected)

    def __repr__(self) -> str:
        return f"EnvironmentProvider(prefix={self._prefix.rstrip('_') or None!r})"


def coerce_value(value: object) -> object:
    """Coerce textual environment values to Python primitives where possible.

    Why
    ----
    Convert human-friendly strings (``true``, ``5``, ``3.14``) into their Python
    equivalents when the environment dialect is configured with ``coerce=True``.
    Non-string values pass through unchanged.

    Examples
    --------
    >>> coerce_value('true'), coerce_value('10'), coerce_value('3.5'), coerce_value('hello')
    (True, 10, 3.5, 'hello')
    >>> coerce_value('null') is None
    True
    """

    if not isinstance(value, str):
        return value
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    try:
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        return float(value)
    except ValueError:
        return value
