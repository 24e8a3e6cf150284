"""Main CLI entry point for the search query analyzer."""

import logging
from datetime import datetime
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Load environment variables from .env file
load_dotenv()

from query_analyzer import __version__
from query_analyzer.config import Settings, build_analyzer
from query_analyzer.errors import DataLoadError, MissingQueryError
from query_analyzer.result import AnalysisResult, KeywordFacet, format_instant
from query_analyzer.words import QueryManager

console = Console()

app = typer.Typer(
    name="query-analyzer",
    help="Turn free-text search queries into what/when/where facets.",
    no_args_is_help=True,
)


def _settings(
    language: str | None,
    dictionary: Path | None,
    gazetteer: Path | None = None,
    gazetteer_url: str | None = None,
) -> Settings:
    """Settings from the environment, overridden by command line options."""
    overrides = {
        "language": language,
        "dictionary_path": dictionary,
        "gazetteer_path": gazetteer,
        "gazetteer_url": gazetteer_url,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def _print_result(result: AnalysisResult) -> None:
    console.print(f"[bold]Query:[/bold] {escape(result.query)}  [dim]({result.language})[/dim]")

    if result.what:
        table = Table(title="What")
        table.add_column("Facet")
        table.add_column("Value")
        table.add_column("Words", style="dim")
        for facet in result.what:
            if isinstance(facet, KeywordFacet):
                value = facet.search_term
            else:
                unit = f" {facet.unit}" if facet.unit else ""
                value = f"{facet.quantity} {facet.comparator.value} {facet.value}{unit}"
            table.add_row(type(facet).__name__, value, str(facet.positions))
        console.print(table)

    if result.when:
        table = Table(title="When")
        table.add_column("Start")
        table.add_column("End")
        table.add_column("Words", style="dim")
        for facet in result.when:
            table.add_row(
                format_instant(facet.start) or "-",
                format_instant(facet.end) or "-",
                str(facet.positions),
            )
        console.print(table)

    if result.where:
        table = Table(title="Where")
        table.add_column("Name")
        table.add_column("Query")
        table.add_column("Words", style="dim")
        for facet in result.where:
            table.add_row(facet.name, facet.query, str(facet.positions))
        console.print(table)

    if result.errors:
        console.print("\n[red]Errors:[/red]")
        for error in result.errors:
            console.print(f"  {error.code.value} at {error.position}: {escape(repr(error.context))}")

    remaining = result.remaining_words
    if remaining:
        console.print(f"\n[dim]Remaining words: {escape(' '.join(remaining))}[/dim]")
    console.print(f"[dim]Analyzed in {result.processing_time_s * 1000:.1f}ms[/dim]")


@app.command()
def analyze(
    query: str = typer.Argument("", help="Search query to analyze"),
    language: str = typer.Option(None, "--language", "-l", help="Dictionary language (en, fr)"),
    dictionary: Path = typer.Option(None, "--dictionary", help="Dictionary YAML file"),
    gazetteer: Path = typer.Option(None, "--gazetteer", help="Gazetteer YAML file"),
    gazetteer_url: str = typer.Option(None, "--gazetteer-url", help="Gazetteer service URL"),
    now: str = typer.Option(None, "--now", help="Anchor for relative dates (ISO-8601)"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Analyze a search query."""
    settings = _settings(language, dictionary, gazetteer, gazetteer_url)
    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level.upper())

    anchor = None
    if now:
        try:
            anchor = datetime.fromisoformat(now.replace("Z", "+00:00"))
        except ValueError:
            console.print(f"[red]Error: invalid --now value {escape(repr(now))}[/red]")
            raise typer.Exit(1)

    try:
        analyzer = build_analyzer(settings)
        result = analyzer.analyze(query, now=anchor)
    except (MissingQueryError, DataLoadError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if as_json:
        print(result.to_json())
    else:
        _print_result(result)


@app.command()
def tokenize(
    query: str = typer.Argument(..., help="Search query to tokenize"),
    language: str = typer.Option(None, "--language", "-l", help="Dictionary language (en, fr)"),
    dictionary: Path = typer.Option(None, "--dictionary", help="Dictionary YAML file"),
) -> None:
    """Print the normalized words of a query."""
    settings = _settings(language, dictionary)
    try:
        analyzer = build_analyzer(settings)
    except DataLoadError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    for word in QueryManager(analyzer.dictionary).tokenize(query):
        print(f"{word.position}\t{word.text}")


@app.callback(invoke_without_command=True)
def main(
    version: bool = typer.Option(False, "--version", help="Show version"),
) -> None:
    """Search query analyzer CLI."""
    if version:
        print(f"query-analyzer {__version__}")
        raise typer.Exit()


if __name__ == "__main__":
    app()
