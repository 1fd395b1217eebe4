"""
Click-based CLI commands for epubclean.

Each pipeline component is exposed as its own subcommand, plus ``process``
which runs the whole pipeline on an EPUB file. Every failure is reported as
``Error: <message>`` with exit status 1.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..display import get_logger, get_valid_log_levels, setup_rich_logger
from ..epub import create_epub_zip, extract_epub
from ..models import EpubCleanConfig
from ..parser import clean_epub, decode_epub_entities
from ..pipeline import fetch_epub_cover, process_epub
from ..utils.exceptions import EpubCleanError


# Initialize Rich console for pretty output
console = Console()

PATH_ARG = click.Path(path_type=Path)


def _fail(error: Exception) -> NoReturn:
    console.print(
        f"[bold red]Error:[/bold red] {escape(str(error))}", style="red", soft_wrap=True
    )
    sys.exit(1)


def _run(operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call ``operation`` and turn any error into exit status 1."""
    logger = get_logger("CLI")
    try:
        return operation(*args, **kwargs)
    except (EpubCleanError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        _fail(e)


def _config(ctx: click.Context) -> EpubCleanConfig:
    return ctx.ensure_object(dict)["config"]


@click.group(invoke_without_command=True)
@click.option(
    "--log-level",
    type=click.Choice(get_valid_log_levels(), case_sensitive=False),
    default=None,
    help="Set the logging level for detailed output.  [default: INFO]",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log output to this file (created if it doesn't exist).",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress all output except errors.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_file: Path | None, quiet: bool) -> None:
    """
    epubclean - Strip formatting artifacts from EPUB files.

    Removes class and style attributes, stylesheet links, bare <span>
    wrappers and CSS files, and can replace the cover with one fetched by ISBN.

    \b
    Examples:
      # Clean a book, writing book.cleaned.epub
      epubclean process book.epub

      # Clean a book and fetch a fresh cover
      epubclean process book.epub --fetch-cover

      # Work step by step
      epubclean extract book.epub
      epubclean clean extracted/book
      epubclean pack extracted/book book.cleaned.epub
    """
    try:
        config = EpubCleanConfig()
    except ValueError as e:
        _fail(e)

    level = "ERROR" if quiet else (log_level or config.log_level)
    setup_rich_logger(level=level, log_file=log_file or config.log_file)
    ctx.ensure_object(dict)["config"] = config

    # If no subcommand is given, show help
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("epub_file", type=PATH_ARG)
@click.pass_context
def extract(ctx: click.Context, epub_file: Path) -> None:
    """Extract EPUB_FILE to extracted/<name>/."""
    output_dir = _run(extract_epub, epub_file, _config(ctx))
    console.print(
        f"[bold green]✓ Extracted to[/bold green] [cyan]{escape(str(output_dir))}[/cyan]",
        soft_wrap=True,
    )


@cli.command()
@click.argument("directory", type=PATH_ARG)
@click.pass_context
def clean(ctx: click.Context, directory: Path) -> None:
    """Strip classes, styles, stylesheet links and CSS files from an extracted EPUB."""
    result = _run(clean_epub, directory, _config(ctx))
    console.print(
        f"[bold green]✓ Cleaned {len(result.cleaned_files)} file(s)[/bold green], "
        f"deleted {len(result.deleted_stylesheets)} stylesheet(s)"
    )


@cli.command("decode-entities")
@click.argument("directory", type=PATH_ARG)
@click.pass_context
def decode_entities(ctx: click.Context, directory: Path) -> None:
    """Decode numeric character references (&#233; &#xe9;) in an extracted EPUB."""
    changed = _run(decode_epub_entities, directory, _config(ctx))
    console.print(f"[bold green]✓ Decoded entities in {changed} file(s)[/bold green]")


@cli.command()
@click.argument("epub_file", type=PATH_ARG)
@click.option(
    "--fetch-cover",
    is_flag=True,
    default=False,
    help="Replace the cover image with one fetched by ISBN from Open Library.",
)
@click.option(
    "--decode-entities",
    is_flag=True,
    default=False,
    help="Decode numeric character references before cleaning.",
)
@click.option(
    "--keep-extracted",
    is_flag=True,
    default=False,
    help="Keep the extracted/<name>/ working directory.",
)
@click.pass_context
def process(
    ctx: click.Context,
    epub_file: Path,
    fetch_cover: bool,
    decode_entities: bool,
    keep_extracted: bool,
) -> None:
    """
    Run the full pipeline on EPUB_FILE and write <name>.cleaned.epub.

    \b
    Steps:
    1. Extract to extracted/<name>/
    2. Optionally fetch a new cover and decode entities
    3. Clean markup and delete stylesheets
    4. Repack and delete the working directory
    """
    output = _run(
        process_epub,
        epub_file,
        fetch_cover=fetch_cover,
        decode_entities=decode_entities,
        keep_extracted=keep_extracted,
        config=_config(ctx),
    )
    console.print(
        f"[bold green]✓ Created[/bold green] [green]{escape(str(output))}[/green]", soft_wrap=True
    )


@cli.command()
@click.argument("directory", type=PATH_ARG)
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
def pack(directory: Path, output: Path) -> None:
    """Pack DIRECTORY into the EPUB file OUTPUT (mimetype first, uncompressed)."""
    _run(create_epub_zip, directory, output)
    console.print(
        f"[bold green]✓ Created[/bold green] [green]{escape(str(output))}[/green]", soft_wrap=True
    )


@cli.command("fetch-cover")
@click.argument("directory", type=PATH_ARG)
@click.pass_context
def fetch_cover(ctx: click.Context, directory: Path) -> None:
    """Replace the cover of an extracted EPUB with one fetched by ISBN."""
    if _run(fetch_epub_cover, directory, _config(ctx)):
        console.print("[bold green]✓ Cover updated[/bold green]")
    else:
        console.print("[yellow]No cover found, original left untouched[/yellow]")


@cli.command()
def version() -> None:
    """Display the version of epubclean."""
    console.print(f"[bold cyan]epubclean[/bold cyan] version {__version__}")


# Entry point for the CLI
def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
