"""
restwalk CLI - Main entry point.

Fetches paginated REST collections under a requests-per-second ceiling.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from restwalk import __app_name__, __version__
from restwalk.core.config import DEFAULT_CONFIG_PATH

# Load environment variables from .env (if present)
load_dotenv()

console = Console()
err_console = Console(stderr=True)

# Create main app
app = typer.Typer(
    name=__app_name__,
    help="Rate-limited fetching of paginated REST collections",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """restwalk - paginated REST collection fetcher."""
    pass


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import pages  # noqa: E402

app.add_typer(pages.app, name="pages", help="Fetch paginated collection resources")


# =============================================================================
# Init Command
# =============================================================================


DEFAULT_CONFIG = """\
# restwalk configuration
# Values may reference environment variables: ${VAR} or ${VAR:-default}

client:
  base_url: ${RESTWALK_BASE_URL:-}
  max_requests_per_second: 10
  timeout_seconds: 30
  buffered_pages: 3
  # Sent with every request, e.g. an access token header
  headers: {}

logging:
  level: INFO
  file: null
  json_format: true
  rich_console: true
"""


@app.command()
def init(
    path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--path",
        "-p",
        help="Where to write the configuration file",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Write a default configuration file."""
    if path.exists() and not force:
        err_console.print(f"[red]{path} already exists.[/red] Use --force to overwrite")
        raise typer.Exit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG, encoding="utf-8")

    console.print(Panel.fit(
        f"[bold green]Created[/bold green] [cyan]{path}[/cyan]\n\n"
        "Next steps:\n"
        "  1. Set [yellow]RESTWALK_BASE_URL[/yellow] or edit the file\n"
        "  2. Check a collection: [yellow]restwalk pages probe <url>[/yellow]\n"
        "  3. Fetch it: [yellow]restwalk pages fetch <url>[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
