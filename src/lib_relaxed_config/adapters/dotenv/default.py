"""`.env` file adapter.

Purpose
-------
Read a dotenv file into flat raw keys (``SERVER_PORT``) so it can be served
through the environment dialect, exactly like process variables, while every
key remembers the file line it came from.

Contents
--------
* :class:`DotEnvFile` – parsed result (values plus per-key origins).
* :func:`load_dotenv` – parse a file, raising on malformed lines.
* :func:`_strip_quotes` – quoting and inline comment handling.

System Role
-----------
Used by :func:`lib_relaxed_config.core.file_source` for ``.env`` paths. The
result feeds a :class:`~lib_relaxed_config.adapters.providers.mapping.MapProvider`
whose origins carry ``path:line`` locators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ...domain.errors import InvalidFormat, NotFound
from ...domain.property import Origin
from ...observability import log_debug, log_error


@dataclass(frozen=True)
class DotEnvFile:
    """Flat key/value pairs parsed from one dotenv file."""

    path: str
    values: dict[str, str] = field(default_factory=dict)
    origins: dict[str, Origin] = field(default_factory=dict)


def load_dotenv(path: str | Path, *, source: str | None = None) -> DotEnvFile:
    """Parse the dotenv file at *path*.

    Why
    ----
    `.env` files supply secrets and developer overrides. They must stay
    strict (a malformed line is an error, not a silent skip) and traceable
    back to the line that set a value.

    Parameters
    ----------
    path:
        File to parse.
    source:
        Source name recorded in origins; defaults to the path itself.

    Returns
    -------
    DotEnvFile
        Values keyed by raw variable name. Later lines override earlier ones;
        an optional ``export`` prefix is ignored.

    Raises
    ------
    NotFound
        When *path* is not an existing file.
    InvalidFormat
        When the file is not valid UTF-8, or a non-comment line has no ``=``
        or an empty key.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / '.env'
    >>> _ = target.write_text('# comment\\nSERVER_PORT=9090\\nexport TOKEN="s3cret" # inline\\n', encoding='utf-8')
    >>> parsed = load_dotenv(target, source='dotenv')
    >>> parsed.values
    {'SERVER_PORT': '9090', 'TOKEN': 's3cret'}
    >>> parsed.origins['TOKEN'].locator.endswith('.env:3')
    True
    >>> tmp.cleanup()
    """

    file_path = Path(path)
    location = str(file_path)
    if not file_path.is_file():
        raise NotFound(f"Dotenv file not found: {location}")
    source_name = source or location
    values: dict[str, str] = {}
    origins: dict[str, Origin] = {}
    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        log_error("dotenv_invalid_encoding", source=source_name, key=None, path=location, error=str(exc))
        raise InvalidFormat(f"Dotenv file {location} is not valid UTF-8: {exc}") from exc
    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, separator, value = line.partition("=")
        key = key.strip()
        if not separator or not key:
            log_error("dotenv_invalid_line", source=source_name, key=None, path=location, line=line_number)
            raise InvalidFormat(f"Malformed line {line_number} in {location}")
        values[key] = _strip_quotes(value.strip())
        origins[key] = Origin(source_name, key, f"{location}:{line_number}")
    log_debug("dotenv_loaded", source=source_name, key=None, path=location, keys=sorted(values))
    return DotEnvFile(location, values, origins)


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from *value*.

    Examples
    --------
    >>> _strip_quotes('"token"')
    'token'
    >>> _strip_quotes("value # comment")
    'value'
    >>> _strip_quotes("'a # b'")
    'a # b'
    >>> _strip_quotes('"s3cret" # inline')
    's3cret'
    """

    if value[:1] in {'"', "'"}:
        closing = value.find(value[0], 1)
        if closing != -1:
            rest = value[closing + 1 :].strip()
            if not rest or rest.startswith("#"):
                return value[1:closing]
    if value.startswith("#"):
        return ""
    if " #" in value:
        return value.split(" #", 1)[0].strip()
    return value
