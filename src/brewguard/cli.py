"""CLI interface for brewguard.

A developer harness around the library: validate a saved AI extraction,
probe the matcher with a single name, or list completion suggestions.
Nothing is persisted.
"""

import json
import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from brewguard.config import BrewguardConfig
from brewguard.matching.models import MatchAux, MatchResult
from brewguard.rules.models import Rules
from brewguard.validate.models import EntityValidation, ValidationOutcome

app = typer.Typer(
    name="brewguard",
    help="Entity resolution and anti-hallucination checks for AI-extracted breweries and beers",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()

_FLOW_STYLES = {
    "DIRECT_SAVE": "green",
    "REQUIRES_CONFIRMATION": "yellow",
    "REQUIRES_COMPLETION": "cyan",
    "BLOCKED": "red",
}


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _load_rules(config: BrewguardConfig, rules: str | None) -> Rules:
    if rules:
        config.rules_path = Path(rules).expanduser().resolve()
    try:
        return config.load_rules()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _require_file(path: str, what: str) -> Path:
    p = Path(path)
    if not p.is_file():
        console.print(f"[red]Error:[/red] {what} not found: {path}")
        raise typer.Exit(1)
    return p


def _conf_style(confidence: float) -> str:
    return "green" if confidence >= 0.8 else "yellow" if confidence >= 0.5 else "red"


def _validation_rows(table: Table, validations: list[EntityValidation], verified: bool) -> None:
    for v in validations:
        status = "[green]✓[/green]" if verified else "[red]✗[/red]"
        detail = v.action if verified else (v.user_action.type if v.user_action else "")
        if v.existing_match is not None:
            detail += f" → {escape(v.existing_match.name or '')} ({v.existing_match.id})"
        if v.brewery_name:
            detail += f" [dim]of {escape(v.brewery_name)}[/dim]"
        style = _conf_style(v.confidence)
        table.add_row(
            status,
            v.kind,
            escape(v.name) if v.name else "[dim]unnamed[/dim]",
            f"[{style}]{v.confidence:.0%}[/{style}]",
            detail,
        )


def _print_outcome(outcome: ValidationOutcome) -> None:
    style = _FLOW_STYLES.get(outcome.flow, "white")
    console.print(Panel(
        outcome.message or outcome.flow,
        title=f"[bold {style}]{outcome.flow}[/bold {style}]",
        border_style=style,
    ))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("", width=2)
    table.add_column("Kind", style="dim")
    table.add_column("Name")
    table.add_column("Confidence", justify="right")
    table.add_column("Decision")
    _validation_rows(table, outcome.verified_breweries, True)
    _validation_rows(table, outcome.unverified_breweries, False)
    _validation_rows(table, outcome.verified_beers, True)
    _validation_rows(table, outcome.unverified_beers, False)
    console.print(table)

    if outcome.user_actions:
        console.print()
        console.print("[bold]User actions[/bold]")
        for action in outcome.user_actions:
            console.print(f"  \\[{action.priority}] [bold]{action.type}[/bold] {escape(action.title)}")
            if action.description:
                console.print(f"      [dim]{escape(action.description)}[/dim]")


def _print_match(name: str, result: MatchResult) -> None:
    if result.matched is not None:
        console.print(
            f"[green]{result.match_type}[/green] '{escape(name)}' → "
            f"[bold]{escape(result.matched.name or '')}[/bold] ({result.matched.id}), confidence {result.confidence:.0%}"
        )
        return
    if not result.needs_disambiguation:
        console.print(f"[cyan]No match[/cyan] for '{escape(name)}': treated as a new brewery")
        return

    table = Table(
        title=f"Disambiguation needed: {result.disambiguation_reason}",
        show_header=True, header_style="bold yellow",
    )
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Confidence", justify="right")
    table.add_column("Keyword", justify="center")
    for a in result.ambiguities:
        style = _conf_style(a.confidence)
        table.add_row(
            a.entity.id,
            escape(a.entity.name or ""),
            a.reason,
            f"[{style}]{a.confidence:.0%}[/{style}]",
            "✓" if a.keyword_match else "",
        )
    console.print(table)


# ============================================================================
# Commands
# ============================================================================


@app.command()
def validate(
    extraction: str = typer.Argument(..., help="AI extraction result (JSON or YAML)"),
    canonical: str = typer.Option(..., "--canonical", "-c", help="Canonical brewery snapshot (JSON or YAML)"),
    strict: bool | None = typer.Option(None, "--strict/--no-strict", help="Strict grounding mode (default from config)"),
    rules: str | None = typer.Option(None, help="Path to tuning rules YAML"),
    concurrency: int | None = typer.Option(None, "--concurrency", help="Candidates validated at once per stage"),
    output: str | None = typer.Option(None, "-o", help="Write the outcome to this JSON/YAML file"),
    as_json: bool = typer.Option(False, "--json", help="Print the outcome as JSON"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """Validate an AI extraction and print the flow decision."""
    _setup_logging(verbose)
    config = BrewguardConfig()
    tuning = _load_rules(config, rules)
    extraction_path = _require_file(extraction, "Extraction file")
    canonical_path = _require_file(canonical, "Canonical snapshot")

    from brewguard.pipeline import run_validate

    try:
        outcome = run_validate(
            extraction_path,
            canonical_path,
            strict_grounding_mode=config.strict_grounding_mode if strict is None else strict,
            rules=tuning,
            concurrency=concurrency or config.concurrency,
            output_path=Path(output) if output else None,
        )
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] Invalid extraction: {escape(str(e))}")
        raise typer.Exit(1) from None

    if as_json:
        typer.echo(json.dumps(outcome.model_dump(mode="json", exclude_none=True), indent=2, ensure_ascii=False))
    else:
        _print_outcome(outcome)
        if output:
            console.print(f"\n  Output: {output}")

    raise typer.Exit(2 if outcome.blocked_by_validation else 0)


@app.command()
def match(
    name: str = typer.Argument(..., help="Candidate brewery name"),
    canonical: str = typer.Option(..., "--canonical", "-c", help="Canonical brewery snapshot (JSON or YAML)"),
    website: str | None = typer.Option(None, help="Claimed website"),
    email: str | None = typer.Option(None, help="Claimed email"),
    address: str | None = typer.Option(None, help="Claimed legal address"),
    rules: str | None = typer.Option(None, help="Path to tuning rules YAML"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """Match one brewery name against the canonical snapshot."""
    _setup_logging(verbose)
    config = BrewguardConfig()
    tuning = _load_rules(config, rules)
    canonical_path = _require_file(canonical, "Canonical snapshot")

    from brewguard.pipeline import run_match

    aux = MatchAux(website=website, email=email, legal_address=address)
    try:
        result = run_match(name, canonical_path, aux=aux, rules=tuning)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] Invalid canonical snapshot: {escape(str(e))}")
        raise typer.Exit(1) from None
    _print_match(name, result)


@app.command()
def suggest(
    query: str = typer.Argument(..., help="Name typed by the user"),
    canonical: str = typer.Option(..., "--canonical", "-c", help="Canonical brewery snapshot (JSON or YAML)"),
    beer: bool = typer.Option(False, "--beer", help="Suggest beers instead of breweries"),
) -> None:
    """List completion suggestions from the canonical snapshot."""
    _setup_logging()
    canonical_path = _require_file(canonical, "Canonical snapshot")

    from brewguard.pipeline import run_suggest

    suggestions = run_suggest("beer" if beer else "brewery", query, canonical_path)
    if not suggestions:
        console.print(f"[yellow]No suggestions for '{escape(query)}'[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Suggestions for '{escape(query)}'", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Brewery")
    table.add_column("Source", style="dim")
    table.add_column("Confidence", justify="right")
    for s in suggestions:
        table.add_row(escape(s.name), escape(s.brewery_name or ""), s.source, f"{s.confidence:.0%}")
    console.print(table)


@app.command()
def info() -> None:
    """Display effective configuration and tuning rules."""
    config = BrewguardConfig()
    tuning = _load_rules(config, None)

    table = Table(title="brewguard Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Strict Grounding Mode", "Yes" if config.strict_grounding_mode else "No")
    table.add_row("Concurrency", str(config.concurrency))
    table.add_row("Rules", str(config.rules_path) if config.rules_path else f"built-in ({tuning.name})")
    m = tuning.match
    table.add_row(
        "Match Thresholds",
        f"candidate > {m.candidate}, similar > {m.similar}, high > {m.high_confidence}",
    )
    table.add_row("Brewery Quality Bar", str(tuning.pipeline.brewery_quality))
    table.add_row("Beer Quality Bar", str(tuning.pipeline.beer_quality))
    table.add_row("Keywords", ", ".join(tuning.lexicon.keywords))

    console.print(table)
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
