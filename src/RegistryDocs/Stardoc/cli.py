# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.cli",
#   "purpose": "Typer CLI for building and inspecting Stardoc API documentation",
#   "sections": [
#     {"id": "clicontext", "name": "CliContext", "anchor": "class-clicontext", "kind": "class"},
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"},
#     {"id": "build", "name": "build", "anchor": "function-build", "kind": "function"},
#     {"id": "inspect", "name": "inspect", "anchor": "function-inspect", "kind": "function"},
#     {"id": "config-show", "name": "config_show", "anchor": "function-config-show", "kind": "function"},
#     {"id": "version-cmd", "name": "version_cmd", "anchor": "function-version-cmd", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Command line interface for the Stardoc documentation pipeline.

Examples:
    registrydocs build rules_foo --docs 1.2.0=https://example.org/docs.tar.gz --docs 1.1.0=
    registrydocs inspect ./docs.tar.gz --nav
    registrydocs --config stardoc.yaml config show
"""

import json
from pathlib import Path
from typing import Annotated, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .collection import collection_to_json, ingest_archive
from .errors import StardocError, UserConfigError
from .logging_utils import setup_logging
from .navigation import build_nav_index, nav_to_json
from .net import download_archive
from .settings import LogFormat, StardocSettings, load_settings
from .site import build_module_site

__all__ = ["app", "CliContext", "parse_docs_options", "main"]

_console = Console()
_err_console = Console(stderr=True)

app = typer.Typer(
    name="registrydocs",
    help="Build and inspect Stardoc API documentation for registry modules.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
config_app = typer.Typer(help="Inspect effective configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")


class CliContext:
    """Per-invocation state shared by subcommands."""

    def __init__(self, settings: StardocSettings, *, verbosity: int = 0) -> None:
        self.settings = settings
        self.verbosity = verbosity
        self.console = _console


def _context(ctx: typer.Context) -> CliContext:
    obj = ctx.obj
    if not isinstance(obj, CliContext):
        raise RuntimeError("CLI context not initialized")
    return obj


def _fail(exc: StardocError) -> typer.Exit:
    _err_console.print(f"[red]✗ {exc.error_code}: {escape(str(exc))}[/red]", highlight=False)
    return typer.Exit(1)


def parse_docs_options(values: List[str]) -> Dict[str, Optional[str]]:
    """Parse repeated ``VERSION=URL`` options preserving order.

    An empty URL (``1.0.0=``) marks a version without documentation.

    Raises:
        UserConfigError: On a malformed or duplicated entry.
    """

    docs: Dict[str, Optional[str]] = {}
    for raw in values:
        version, sep, url = raw.partition("=")
        version = version.strip()
        if not sep or not version:
            raise UserConfigError(f"Expected VERSION=URL, got {raw!r}")
        if version in docs:
            raise UserConfigError(f"Version {version} given more than once")
        docs[version] = url.strip() or None
    return docs


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", envvar="REGISTRYDOCS_CONFIG", help="YAML settings file"),
    ] = None,
    log_level: Annotated[
        Optional[str], typer.Option("--log-level", help="Logging level (DEBUG, INFO, ...)")
    ] = None,
    log_format: Annotated[
        Optional[LogFormat], typer.Option("--log-format", help="console or json")
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="-v enables DEBUG logging")
    ] = 0,
) -> None:
    """Global options apply to every subcommand and go before it."""

    level = "DEBUG" if verbose and not log_level else log_level
    try:
        settings = load_settings(
            config,
            logging={"level": level, "format": log_format.value if log_format else None},
        )
    except StardocError as exc:
        raise _fail(exc) from exc
    setup_logging(
        level=settings.logging.level,
        log_format=settings.logging.format.value,
        log_dir=settings.logging.log_dir,
    )
    ctx.obj = CliContext(settings, verbosity=verbose)


@app.command()
def build(
    ctx: typer.Context,
    module: Annotated[str, typer.Argument(help="Registry module name")],
    docs: Annotated[
        List[str],
        typer.Option(
            "--docs",
            "-d",
            help="VERSION=URL of a docs archive; repeat latest first, empty URL for no docs",
        ),
    ],
    version: Annotated[
        Optional[str], typer.Option("--version", help="Version shown on the module index page")
    ] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output directory")] = None,
    workers: Annotated[
        Optional[int], typer.Option("--workers", "-w", min=1, help="Versions built in parallel")
    ] = None,
) -> None:
    """Build the API documentation pages of MODULE."""

    cli = _context(ctx)
    settings = cli.settings
    if workers is not None:
        settings = settings.model_copy(
            update={"build": settings.build.model_copy(update={"workers": workers})}
        )
    try:
        result = build_module_site(
            module,
            parse_docs_options(docs),
            selected=version,
            settings=settings,
            output_dir=output,
        )
    except StardocError as exc:
        raise _fail(exc) from exc

    with_docs = sum(1 for page in result.pages if page.has_docs)
    cli.console.print(
        f"[green]✓[/green] {module}: {len(result.pages)} version(s), "
        f"{with_docs} with API docs, index shows {result.selected_version}"
    )
    cli.console.print(f"  written to {result.module_dir}", highlight=False)


@app.command()
def inspect(
    ctx: typer.Context,
    source: Annotated[str, typer.Argument(help="Local .tar.gz path or http(s) URL")],
    nav: Annotated[bool, typer.Option("--nav", help="Print the navigation tree instead")] = False,
) -> None:
    """Decode a docs archive and print its normalized documents as JSON."""

    cli = _context(ctx)
    settings = cli.settings
    try:
        if source.startswith(("http://", "https://")):
            payload = download_archive(source, config=settings.http)
        else:
            path = Path(source).expanduser()
            if not path.is_file():
                raise UserConfigError(f"Archive not found: {path}")
            payload = path.read_bytes()
        collection = ingest_archive(payload, settings=settings)
    except StardocError as exc:
        raise _fail(exc) from exc

    data = nav_to_json(build_nav_index(collection)) if nav else collection_to_json(collection)
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Print the effective settings (secrets masked) as JSON."""

    cli = _context(ctx)
    typer.echo(json.dumps(cli.settings.model_dump_redacted(), indent=2, sort_keys=True))


@app.command("version")
def version_cmd() -> None:
    """Print the package version."""

    typer.echo(f"registrydocs {__version__}")
