"""
Page commands for fetching collection resources.
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import nullcontext
from pathlib import Path
from typing import IO, Any, Optional

import orjson
import typer
from rich.console import Console
from rich.table import Table

from restwalk.client import ApiClient
from restwalk.core.config import AppConfig, ClientConfig, ConfigError, load_app_config
from restwalk.core.http import (
    InvalidArgumentError,
    RemoteError,
    first_header_value,
    select_strategy,
)
from restwalk.core.http.paged import NEXT_PAGE_HEADER, TOTAL_PAGES_HEADER, paged_url
from restwalk.core.logging import setup_logging

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Fetch paginated collection resources",
    no_args_is_help=True,
)


def create_client(config: ClientConfig) -> ApiClient:
    """Build the API client used by the commands."""
    return ApiClient.from_config(config)


def _load_config(path: Optional[Path], rps: Optional[int]) -> AppConfig:
    """Load configuration and apply command line overrides."""
    try:
        config = load_app_config(path)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    if rps is not None:
        config.client = config.client.model_copy(
            update={"max_requests_per_second": rps}
        )

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    return config


def _run(coro: Any) -> Any:
    """Run a command coroutine and turn request failures into exit codes."""
    try:
        return asyncio.run(coro)
    except RemoteError as e:
        err_console.print(f"[red]Request failed with status {e.status_code}:[/red] {e.url}")
        if e.body:
            err_console.print(f"[dim]{e.body}[/dim]")
        raise typer.Exit(1)
    except InvalidArgumentError as e:
        err_console.print(f"[red]Invalid argument:[/red] {e}")
        raise typer.Exit(2)


def _open_output(output: Optional[Path]) -> Any:
    if output is None:
        return nullcontext(sys.stdout)
    output.parent.mkdir(parents=True, exist_ok=True)
    return open(output, "w", encoding="utf-8")


def _write_json(out: IO[str], value: Any, indent: bool = False) -> None:
    option = orjson.OPT_INDENT_2 if indent else 0
    out.write(orjson.dumps(value, option=option).decode("utf-8"))
    out.write("\n")


@app.command("fetch")
def fetch_pages(
    url: str = typer.Argument(..., help="Collection resource URL"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: ./restwalk.yaml)",
    ),
    rps: Optional[int] = typer.Option(
        None,
        "--rps",
        min=1,
        help="Maximum requests per second",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write items to a JSON file instead of stdout",
    ),
) -> None:
    """Fetch every page of a collection and print all items as one JSON array.

    Examples:
        restwalk pages fetch https://gitlab.example.com/api/v4/projects
        restwalk pages fetch projects -c restwalk.yaml --rps 5 -o projects.json
    """
    config = _load_config(config_path, rps)
    items = _run(_fetch_all(config.client, url))

    with _open_output(output) as out:
        _write_json(out, items, indent=True)

    if output:
        console.print(f"[green]Saved {len(items)} items to[/green] {output}")


async def _fetch_all(config: ClientConfig, url: str) -> list[Any]:
    async with create_client(config) as api:
        return await api.pages.fetch_all(url)


@app.command("stream")
def stream_pages(
    url: str = typer.Argument(..., help="Collection resource URL"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: ./restwalk.yaml)",
    ),
    rps: Optional[int] = typer.Option(
        None,
        "--rps",
        min=1,
        help="Maximum requests per second",
    ),
    buffered_pages: Optional[int] = typer.Option(
        None,
        "--buffered-pages",
        "-b",
        help="Pages fetched ahead of output (default from config)",
    ),
    first_page: int = typer.Option(
        1,
        "--first-page",
        "-f",
        help="Page to start from",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write items to a JSON lines file instead of stdout",
    ),
) -> None:
    """Stream a collection page by page, one JSON line per item.

    Examples:
        restwalk pages stream projects --buffered-pages 5
        restwalk pages stream "projects?archived=false" -f 3 -o projects.jsonl
    """
    config = _load_config(config_path, rps)
    if buffered_pages is None:
        buffered_pages = config.client.buffered_pages

    with _open_output(output) as out:
        total = _run(_stream(config.client, url, buffered_pages, first_page, out))

    err_console.print(f"[green]Done:[/green] {total} items")


async def _stream(
    config: ClientConfig,
    url: str,
    buffered_pages: int,
    first_page: int,
    out: IO[str],
) -> int:
    total = 0
    async with create_client(config) as api:
        pages = api.pages.fetch_paged(
            url,
            buffered_pages=buffered_pages,
            first_page=first_page,
        )
        page_number = first_page
        async for items in pages:
            for item in items:
                _write_json(out, item)
            total += len(items)
            err_console.print(f"[dim]page {page_number}: {len(items)} items[/dim]")
            page_number += 1
    return total


@app.command("probe")
def probe(
    url: str = typer.Argument(..., help="Collection resource URL"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: ./restwalk.yaml)",
    ),
) -> None:
    """Request the first page and show which fetch strategy it leads to."""
    config = _load_config(config_path, None)
    items, headers = _run(_probe(config.client, url))

    strategy, total_pages = select_strategy(headers)

    table = Table(title="Pagination", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Items on first page", str(len(items)))
    table.add_row(TOTAL_PAGES_HEADER, str(first_header_value(headers, TOTAL_PAGES_HEADER)))
    table.add_row(NEXT_PAGE_HEADER, str(first_header_value(headers, NEXT_PAGE_HEADER)))
    table.add_row("Strategy", f"[green]{strategy.value}[/green]")
    if total_pages is not None:
        table.add_row("Total pages", str(total_pages))

    console.print(table)


async def _probe(config: ClientConfig, url: str) -> tuple[list[Any], Any]:
    async with create_client(config) as api:
        return await api.requestor.get_with_headers(paged_url(url, 1), list[Any])
