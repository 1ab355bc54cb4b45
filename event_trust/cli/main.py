"""Event Trust CLI using Typer and Rich."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from event_trust import __version__
from event_trust.config.logging import get_logger
from event_trust.config.settings import settings

# Initialize CLI app
app = typer.Typer(
    help="Event Trust CLI - classify, score and corroborate candidate events",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")


def load_candidates(path: Path) -> List[Any]:
    """
    Read candidates from a JSON file.

    Accepts a list of candidate objects or an object with an "events" list.
    Entries that fail validation are skipped with a warning.
    """
    from event_trust.data_management.schemas import EventCandidate

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]✗[/red] Cannot read {path}: {e}")
        raise typer.Exit(1)

    if isinstance(raw, dict):
        raw = raw.get("events", [])
    if not isinstance(raw, list):
        console.print(f"[red]✗[/red] {path} does not contain a list of events")
        raise typer.Exit(1)

    candidates = []
    for index, item in enumerate(raw):
        try:
            candidates.append(EventCandidate.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid candidate #{index}: {e.error_count()} errors")
    logger.info(f"Loaded {len(candidates)} candidates from {path}")
    return candidates


@app.command()
def verify(
    input_path: Path = typer.Argument(..., help="JSON file of candidate events"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write annotated events here"),
    max_checks: Optional[int] = typer.Option(
        None, "--max", min=0, help="Candidates corroborated this run"
    ),
    min_score: Optional[int] = typer.Option(None, "--min-score", help="Quality gate threshold"),
    no_llm: bool = typer.Option(False, "--no-llm", help="Classification and quality gate only"),
) -> None:
    """
    Run the full trust pipeline on a file of candidates.

    Prints the run report. With --output, writes the annotated events as JSON.
    """
    from event_trust.pipeline import build_default_pipeline

    candidates = load_candidates(input_path)
    pipeline = build_default_pipeline()

    async def _run():
        try:
            return await pipeline.run(
                candidates,
                max_checks=max_checks,
                min_score=min_score,
                verify=not no_llm,
            )
        finally:
            await pipeline.aclose()

    outcome = asyncio.run(_run())
    report = outcome.report

    table = Table(title="Trust Pipeline Report", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Input", str(report.total_in))
    for tier, count in report.tier_counts.items():
        table.add_row(f"  tier {tier}", str(count))
    table.add_row("Quality rejected", str(report.quality_rejected))
    for name, value in report.verifier.model_dump().items():
        table.add_row(f"  {name}", str(value))
    table.add_row("Output", str(report.total_out))
    console.print(table)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        payload = [event.model_dump(mode="json", by_alias=True) for event in outcome.events]
        output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {len(payload)} events to {output}")


@app.command()
def score(
    input_path: Path = typer.Argument(..., help="JSON file of candidate events"),
    limit: int = typer.Option(50, "--limit", "-n", help="Rows to display"),
) -> None:
    """Show tier, quality score and fired rules per candidate."""
    from event_trust.agents.sifters.quality import QualityScorer
    from event_trust.config.trust_policy import load_policy

    candidates = load_candidates(input_path)
    scorer = QualityScorer(policy=load_policy(settings.policy_dir))

    table = Table(title="Quality Scores", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("Source", style="yellow")
    table.add_column("Tier")
    table.add_column("Score", justify="right")
    table.add_column("Rules")

    for candidate in candidates[:limit]:
        assessment = scorer.evaluate(candidate)
        if assessment.rejected:
            rules = ", ".join(assessment.rejections)
            score_text = f"[red]{assessment.score}[/red]"
        else:
            rules = ", ".join(f"{name} {delta:+d}" for name, delta in assessment.adjustments)
            score_text = f"[green]{assessment.score}[/green]"
        table.add_row(
            candidate.title,
            candidate.source_name,
            assessment.tier.value,
            score_text,
            rules,
        )

    console.print(table)
    if len(candidates) > limit:
        console.print(f"[dim]... and {len(candidates) - limit} more[/dim]")


@app.command()
def classify(source_name: str = typer.Argument(..., help="Source name, exactly as emitted")) -> None:
    """Print the confidence tier of a source and whether it skips corroboration."""
    from event_trust.agents.sifters.credibility import SourceConfidenceRegistry
    from event_trust.config.trust_policy import load_policy

    registry = SourceConfidenceRegistry(load_policy(settings.policy_dir))
    tier = registry.classify(source_name)
    trusted = registry.is_trusted(source_name)

    console.print(f"[bold cyan]Source:[/bold cyan] {source_name}")
    console.print(f"[bold yellow]Tier:[/bold yellow] {tier.value}")
    console.print(f"[bold yellow]Trusted:[/bold yellow] {'yes' if trusted else 'no'}")


@app.command("cache-stats")
def cache_stats() -> None:
    """Show verification cache entry counts."""
    from event_trust.data_management import PersistentVerificationCache

    cache = PersistentVerificationCache(settings.cache_path, ttl_days=settings.cache_ttl_days)
    stats = cache.stats()

    table = Table(title="Verification Cache", show_header=True, header_style="bold magenta")
    table.add_column("Entries", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Total", str(stats.total))
    table.add_row("Valid", str(stats.valid))
    table.add_row("Expired", str(stats.expired))
    console.print(table)
    console.print(f"[dim]{settings.cache_path} (TTL {settings.cache_ttl_days} days)[/dim]")


@app.command()
def status() -> None:
    """
    Display configuration.

    Shows LLM, search, cache, gate and logging settings.
    """
    logger.info("Displaying system status")

    table = Table(title="Event Trust Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", style="green", width=15)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", python_version)

    api_status = "✓ Configured" if settings.gemini_api_key else "⚠ Not Configured"
    table.add_row(
        "Gemini API",
        api_status,
        f"{settings.gemini_model} (max turns: {settings.agent_max_turns})",
    )
    table.add_row(
        "Web Search",
        "✓ Active",
        f"{settings.search_endpoint} (timeout {settings.search_timeout:.0f}s, RPM {settings.search_rpm})",
    )
    table.add_row(
        "Cache",
        "✓ Active",
        f"{settings.cache_path} (TTL {settings.cache_ttl_days} days)",
    )
    table.add_row(
        "Quality Gate",
        "✓ Active",
        f"min score {settings.min_quality_score}, verify max {settings.verify_max}",
    )
    table.add_row("Recovery", "✓ Active", settings.recovery_policy)
    table.add_row(
        "Trust Policy",
        "✓ Custom" if settings.policy_dir else "✓ Default",
        settings.policy_dir or "shipped tables",
    )
    table.add_row("Logging", "✓ Active", f"Level: {settings.log_level}, Format: {settings.log_format}")

    console.print(table)


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]Event Trust[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
