"""Structured configuration file loaders.

Purpose
-------
Turn TOML, JSON, and YAML documents into mappings that file property sources
flatten into dotted raw keys, and that the migration analyzer reads its
metadata tables from.

Contents
--------
* :class:`BaseFileLoader` – reading, existence checks, and mapping validation.
* :class:`TOMLFileLoader`, :class:`JSONFileLoader`, :class:`YAMLFileLoader` –
  one loader per format.
* :func:`loader_for` – pick a loader from a file suffix.

System Role
-----------
Invoked by :func:`lib_relaxed_config.core.file_source` and
:func:`lib_relaxed_config.core.load_metadata`. Missing files raise
:class:`NotFound`; unparsable ones raise :class:`InvalidFormat`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11
    import tomli as tomllib  # type: ignore[assignment]

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Shared helpers for the structured loaders."""

    format_name = "structured"

    def load(self, path: str | Path) -> Mapping[str, object]:
        """Return the mapping stored at *path*.

        Raises
        ------
        NotFound
            When *path* is not an existing file.
        InvalidFormat
            When the document cannot be parsed or its root is not a mapping.
        """

        location = str(path)
        payload = self._read(location)
        try:
            data = self._parse(payload)
        except (ValueError, yaml.YAMLError) as exc:
            log_error("config_file_invalid", source="file", key=None, path=location, format=self.format_name, error=str(exc))
            raise InvalidFormat(f"Invalid {self.format_name.upper()} in {location}: {exc}") from exc
        result = self._ensure_mapping(data, path=location)
        log_debug("config_file_loaded", source="file", key=None, path=location, format=self.format_name, keys=len(result))
        return result

    def _parse(self, payload: bytes) -> object:
        raise NotImplementedError

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when it is missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"port = 8080")
        >>> tmp.close()
        >>> BaseFileLoader()._read(tmp.name)[:4]
        b'port'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("config_file_read", source="file", key=None, path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Return *data* when it is a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"server": {"port": 8080}}, path="demo")
        {'server': {'port': 8080}}
        >>> BaseFileLoader._ensure_mapping([1, 2], path="demo")
        Traceback (most recent call last):
        ...
        lib_relaxed_config.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data  # type: ignore[return-value]


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents with :mod:`tomllib` (``tomli`` before 3.11).

    Examples
    --------
    >>> from tempfile import NamedTemporaryFile
    >>> tmp = NamedTemporaryFile('w', suffix='.toml', delete=False, encoding='utf-8')
    >>> _ = tmp.write('[server]\\ncontext-path = "/app"')
    >>> tmp.close()
    >>> TOMLFileLoader().load(tmp.name)["server"]["context-path"]
    '/app'
    >>> Path(tmp.name).unlink()
    """

    format_name = "toml"

    def _parse(self, payload: bytes) -> object:
        # TOMLDecodeError and UnicodeDecodeError both derive from ValueError.
        return tomllib.loads(payload.decode("utf-8"))


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format_name = "json"

    def _parse(self, payload: bytes) -> object:
        return json.loads(payload)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents with ``yaml.safe_load``; an empty document is an empty mapping."""

    format_name = "yaml"

    def _parse(self, payload: bytes) -> object:
        data = yaml.safe_load(payload)
        return {} if data is None else data


_LOADERS: dict[str, type[BaseFileLoader]] = {
    ".toml": TOMLFileLoader,
    ".json": JSONFileLoader,
    ".yaml": YAMLFileLoader,
    ".yml": YAMLFileLoader,
}


def loader_for(path: str | Path) -> BaseFileLoader:
    """Return the loader matching *path*'s suffix.

    Raises
    ------
    InvalidFormat
        When the suffix is not a supported structured format.

    Examples
    --------
    >>> type(loader_for("config/app.YML")).__name__
    'YAMLFileLoader'
    """

    suffix = Path(path).suffix.lower()
    try:
        return _LOADERS[suffix]()
    except KeyError:
        raise InvalidFormat(f"Unsupported configuration file type: {path}") from None
