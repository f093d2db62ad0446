"""CLI adapter for ``lib_relaxed_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators ask "which value wins for this key, and where did it come
from" and "which deprecated keys am I still using" without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – distribution metadata.
* :func:`cli_resolve` – resolve one key against environment and files.
* :func:`cli_candidates` – show the raw keys a dialect would try.
* :func:`cli_migrate` – print the migration report for deprecated keys.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer. Commands call :mod:`lib_relaxed_config.core` only; exit codes
and error rendering go through ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import DIALECTS, bootstrap, make_mapper
from .domain.name import ConfigurationPropertyName

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lib_relaxed_config"

_FILE_OPTION = click.option(
    "--file",
    "files",
    multiple=True,
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    help="Configuration file (TOML/JSON/YAML/.env); repeat in decreasing precedence",
)
_ENV_OPTION = click.option(
    "--env/--no-env",
    "include_environment",
    default=True,
    show_default=True,
    help="Consult process environment variables (highest precedence)",
)
_PREFIX_OPTION = click.option("--prefix", default=None, help="Environment variable prefix (e.g. MYAPP)")


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Relaxed configuration property resolution and migration analysis",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lib_relaxed_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo(f"{_DIST_NAME} (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("resolve", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@_FILE_OPTION
@_ENV_OPTION
@_PREFIX_OPTION
@click.option(
    "--metadata",
    "metadata_path",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    default=None,
    help="Deprecation metadata file; bridges renamed keys before resolving",
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_resolve(
    key: str,
    files: Sequence[Path],
    include_environment: bool,
    prefix: Optional[str],
    metadata_path: Optional[Path],
    indent: Optional[int],
) -> None:
    """Resolve KEY (a canonical name such as ``server.context-path``) and print JSON.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["resolve", "server.port", "--no-env"])
    >>> json.loads(result.output)["found"]
    False
    """

    name = ConfigurationPropertyName.parse(key)
    result = bootstrap(
        files,
        include_environment=include_environment,
        env_prefix=prefix,
        metadata=metadata_path,
    )
    found = result.resolver.resolve(name)
    payload: dict[str, Any] = {
        "name": str(name),
        "found": found is not None,
        "value": None if found is None else found.value,
        "origin": None if found is None else found.origin.as_dict(),
    }
    click.echo(_dump(payload, indent))


@cli.command("candidates", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.option(
    "--dialect",
    type=click.Choice(DIALECTS, case_sensitive=False),
    default="dotted",
    show_default=True,
    help="Naming dialect whose raw keys should be listed",
)
@_PREFIX_OPTION
def cli_candidates(key: str, dialect: str, prefix: Optional[str]) -> None:
    """Print the raw keys DIALECT would try for KEY, in order.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["candidates", "server.context-path", "--dialect", "environment"])
    >>> json.loads(result.output)
    ['SERVER_CONTEXTPATH']
    """

    name = ConfigurationPropertyName.parse(key)
    mapper = make_mapper(dialect.lower(), prefix=prefix)
    click.echo(json.dumps([mapping.key for mapping in mapper.map_to_source_candidates(name)]))


@cli.command("migrate", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--metadata",
    "metadata_path",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    required=True,
    help="Deprecation metadata file (TOML/JSON/YAML with a 'properties' list)",
)
@_FILE_OPTION
@_ENV_OPTION
@_PREFIX_OPTION
@click.option("--indent", type=int, default=2, show_default=True, help="JSON indent size")
def cli_migrate(
    metadata_path: Path,
    files: Sequence[Path],
    include_environment: bool,
    prefix: Optional[str],
    indent: Optional[int],
) -> None:
    """Report deprecated keys per source as MATCHED or UNHANDLED (JSON)."""

    result = bootstrap(
        files,
        include_environment=include_environment,
        env_prefix=prefix,
        metadata=metadata_path,
    )
    payload = {"sources": []} if result.report is None else result.report.as_dict()
    click.echo(_dump(payload, indent))


def _dump(payload: Any, indent: Optional[int]) -> str:
    return json.dumps(payload, indent=indent, default=str)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
