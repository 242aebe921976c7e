"""Command-line interface for OmniXRay."""

import json
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from omnixray.config import DEFAULT_CONFIG_PATH, Config
from omnixray.formats import YouTubeFormat
from omnixray.http import HTTPClient
from omnixray.models import FetchError


console = Console()


def get_http_client(config: Config) -> HTTPClient:
    """Get the HTTP client used for upstream requests."""
    return config.create_http_client()


def _credentials(config: Config, api_key: str | None, referer: str | None) -> dict[str, str]:
    """Configured credentials with command-line overrides applied."""
    creds = config.get_credentials()
    if api_key:
        creds["youtube_api_key"] = api_key
    if referer:
        creds["youtube_api_referer"] = referer
    return creds


def _print_error(result: FetchError) -> None:
    console.print(f"[red]{result.error} ({result.error_code}): {escape(result.error_description)}[/red]")


@click.group()
@click.version_option()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, help="Path to config.json.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool) -> None:
    """OmniXRay - normalize YouTube URLs into h-entries."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = Config.load(config_path)


@main.command("match")
@click.argument("url")
def match(url: str) -> None:
    """Show how a URL is classified, without network access."""
    youtube = YouTubeFormat()

    if not youtube.matches_host(url):
        console.print(f"[yellow]Not a YouTube host: {url}[/yellow]")
        sys.exit(1)

    resource = youtube.matches(url)
    if not resource.is_known:
        console.print(f"[yellow]Unsupported YouTube URL: {url}[/yellow]")
        sys.exit(1)

    console.print(f"[bold]Type:[/bold] {resource.kind.value}")
    console.print(f"[bold]ID:[/bold] {resource.id}")


@main.command("fetch")
@click.argument("url")
@click.option("--api-key", help="YouTube Data API key.")
@click.option("--referer", help="Referer header sent with API requests.")
@click.option("--raw", is_flag=True, help="Print the raw aggregate body.")
@click.pass_obj
def fetch(config: Config, url: str, api_key: str | None, referer: str | None, raw: bool) -> None:
    """Fetch upstream metadata for a URL."""
    creds = _credentials(config, api_key, referer)

    with get_http_client(config) as http:
        result = YouTubeFormat().fetch(http, url, creds)
    if isinstance(result, FetchError):
        _print_error(result)
        sys.exit(1)

    if raw:
        click.echo(result.body)
        return

    aggregate = json.loads(result.body)
    if aggregate.get("feed"):
        console.print(f"[bold]Playlist:[/bold] {aggregate['feed'].get('title', '')}")

    table = Table(show_header=True)
    table.add_column("Video ID", style="dim")
    table.add_column("Title")
    table.add_column("Channel")
    table.add_column("Published")

    for video in aggregate.get("videos", []):
        table.add_row(
            video.get("id", ""),
            video.get("title", ""),
            video.get("channelTitle", ""),
            video.get("publishedAt", ""),
        )

    console.print(table)
    console.print(f"[dim]{len(aggregate.get('channels', []))} channel(s) resolved[/dim]")


@main.command("parse")
@click.argument("url")
@click.option("--api-key", help="YouTube Data API key.")
@click.option("--referer", help="Referer header sent with API requests.")
@click.option("--json", "as_json", is_flag=True, help="Print the entry as JSON.")
@click.pass_obj
def parse(config: Config, url: str, api_key: str | None, referer: str | None, as_json: bool) -> None:
    """Fetch a URL and print its normalized h-entry."""
    youtube = YouTubeFormat()
    creds = _credentials(config, api_key, referer)

    with get_http_client(config) as http:
        result = youtube.fetch(http, url, creds)
    if isinstance(result, FetchError):
        _print_error(result)
        sys.exit(1)

    parsed = youtube.parse(result.body, url)

    if as_json:
        click.echo(json.dumps(parsed.data, indent=2))
        return

    if parsed.is_unknown:
        console.print("[yellow]Could not normalize the response.[/yellow]")
        sys.exit(1)

    entry = parsed.data
    console.print()
    console.print(f"[bold]Name:[/bold] {entry['name']}")
    console.print(f"[bold]URL:[/bold] {entry['url']}")
    console.print(f"[bold]Published:[/bold] {entry['published']}")
    console.print(f"[bold]Author:[/bold] {entry['author']['name']} ({entry['author']['url']})")
    console.print(f"[bold]Embed:[/bold] {entry['video'][0]['url']}")
    if entry.get("photo"):
        console.print(f"[bold]Photo:[/bold] {entry['photo'][0]}")
    if entry.get("category"):
        console.print(f"[bold]Tags:[/bold] {', '.join(entry['category'])}")
    if entry.get("content"):
        console.print(f"[bold]Content:[/bold] {entry['content'][:100]}...")
    console.print()


if __name__ == "__main__":
    main()
