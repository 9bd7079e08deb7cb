"""Command line interface for the Gerrit digest toolkit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.markup import escape
from rich.table import Table

from .config import CONFIG_FILE, Config
from .console import Console
from .exceptions import ApiError, ConfigurationError
from .workflow import resolve_credentials, run_digest

app = typer.Typer(help="Collect your merged Gerrit changes into a Markdown digest.")
config_app = typer.Typer(help="Manage configuration settings")
app.add_typer(config_app, name="config")

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _print_error(title: str, exc: Exception) -> None:
    err_console.print(f"[danger]{title}[/]")
    err_console.print(escape(str(exc)))


def _load_config(config_path: Path, **overrides) -> Config:
    """Load the config file, apply CLI overrides, and check required fields."""
    try:
        config = Config.load(config_path).with_overrides(**overrides)
        config.validate_required_fields()
        return config
    except ConfigurationError as exc:
        _print_error("Configuration error:", exc)
        err_console.print("[info]Run [accent]gerrit-digest init[/] to set up your configuration")
        raise typer.Exit(code=1) from exc


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output for debugging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-essential output",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """CLI entry-point callback for shared initialisation."""
    console.set_verbose(verbose)
    console.set_quiet(quiet)

    if no_color:
        console.no_color = True
        err_console.no_color = True

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def run(
    owner: Optional[str] = typer.Option(None, "--owner", help="Gerrit change owner (usually your email)"),
    server: Optional[str] = typer.Option(None, "--server", help="Gerrit server URL"),
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Number of days to look back"),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Changes requested per API page"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Markdown output file"),
    gitcookies: Optional[Path] = typer.Option(
        None,
        "--gitcookies",
        help="gitcookies file holding the Gerrit credential (default: ~/.gitcookies)",
    ),
    config_path: Path = typer.Option(CONFIG_FILE, "--config", help="Configuration file"),
) -> None:
    """Fetch merged changes and write their commit messages to Markdown."""
    config = _load_config(
        config_path,
        query__owner=owner,
        server__url=server,
        query__days_to_look_back=days,
        query__page_size=page_size,
        output__filename=output,
    )

    try:
        credential = resolve_credentials(config, gitcookies)
    except ConfigurationError as exc:
        _print_error("FATAL: Could not load Gerrit credentials from .gitcookies.", exc)
        raise typer.Exit(code=1) from exc

    console.print(f"[success]Loaded credentials for user:[/] {escape(credential.username)}")

    try:
        result = run_digest(config, credential, console)
    except ApiError as exc:
        logger.debug("Gerrit API failure", exc_info=True)
        _print_error("Error fetching changes from Gerrit API:", exc)
        raise typer.Exit(code=1) from exc
    except Exception as exc:
        logger.exception("Unexpected error while generating the digest")
        _print_error("An unexpected error occurred:", exc)
        raise typer.Exit(code=1) from exc

    console.print(
        f"[success]✓ Process completed successfully![/] "
        f"{result.change_count} commit message(s) saved to [accent]{escape(str(result.output_path))}[/]"
    )


@app.command()
def init(
    owner: str = typer.Option(..., "--owner", help="Gerrit change owner (usually your email)"),
    server: Optional[str] = typer.Option(None, "--server", help="Gerrit server URL"),
    days: Optional[int] = typer.Option(None, "--days", help="Default number of days to look back"),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Changes requested per API page"),
    output: Optional[str] = typer.Option(None, "--output", help="Default Markdown output file"),
    config_path: Path = typer.Option(CONFIG_FILE, "--config", help="Configuration file to write"),
) -> None:
    """Write a configuration file for later runs."""
    try:
        config = Config().with_overrides(
            query__owner=owner,
            server__url=server,
            query__days_to_look_back=days,
            query__page_size=page_size,
            output__filename=output,
        )
        config.validate_required_fields()
        config.dump(config_path)
    except ConfigurationError as exc:
        _print_error("Configuration error:", exc)
        raise typer.Exit(code=1) from exc

    console.print(f"[success]✓ Configuration saved to[/] [accent]{escape(str(config_path))}[/]")


@config_app.command("show")
def show_config(
    config_path: Path = typer.Option(CONFIG_FILE, "--config", help="Configuration file"),
) -> None:
    """Display current configuration settings."""
    try:
        config = Config.load(config_path)
    except ConfigurationError as exc:
        _print_error("Configuration error:", exc)
        raise typer.Exit(code=1) from exc

    table = Table(
        title="Gerrit Digest Configuration",
        box=box.ROUNDED,
        title_style="title",
        border_style="frame",
        expand=True,
        show_lines=True,
    )
    table.add_column("Section", style="label", no_wrap=True)
    table.add_column("Values")

    for section, values in config.to_display_dict().items():
        rendered_values = "\n".join(f"[label]{k}[/]: {escape(str(v))}" for k, v in values.items())
        table.add_row(f"[accent]{section}[/]", rendered_values)

    console.print(table)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
