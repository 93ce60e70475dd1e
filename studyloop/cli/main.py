"""
StudyLoop CLI - inspect a learner's history from the terminal.

Usage:
    studyloop proficiency history.json        # Topic mastery table
    studyloop recommend history.json          # Ranked study suggestions
    studyloop insights history.json           # Insights from recorded sessions
    studyloop select history.json -n 5 -c swift-basics
    studyloop streak history.json             # Streak rebuilt from answer days
"""

from __future__ import annotations

import random
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from studyloop.adaptive.insight_engine import InsightEngine
from studyloop.adaptive.recommendation_engine import RecommendationEngine
from studyloop.cli.snapshot import Snapshot
from studyloop.core.exceptions import NoQuestionsAvailable
from studyloop.core.logging import configure_logging
from studyloop.regimen.streak_tracker import StreakTracker, reconstruct_streak
from studyloop.study.proficiency_calculator import ProficiencyCalculator
from studyloop.study.question_selector import QuestionPoolSelector

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="studyloop",
    help="StudyLoop - adaptive study analytics over a history snapshot",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

SnapshotArg = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="History snapshot JSON"),
]
NowOption = Annotated[
    datetime | None,
    typer.Option("--now", help="Evaluate as of this local time (default: now)"),
]


@app.callback()
def _main(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Console log level (default from settings)")
    ] = None,
) -> None:
    settings = get_settings()
    configure_logging(level=(log_level or settings.log_level).upper(), log_file=settings.log_file)


def _load(path: Path) -> Snapshot:
    try:
        return Snapshot.load(path)
    except ValidationError as exc:
        console.print(f"[red]Invalid snapshot {escape(str(path))}:[/red]\n{escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def format_progress_bar(level: float, width: int = 10) -> str:
    """Text progress bar for a 0-1 level, e.g. ``████████░░``."""
    filled = int(max(0.0, min(1.0, level)) * width)
    return "█" * filled + "░" * (width - filled)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def proficiency(snapshot: SnapshotArg, now: NowOption = None) -> None:
    """Show per-topic proficiency grouped by category."""
    data = _load(snapshot)
    now = now or datetime.now()
    taxonomy = data.to_taxonomy()
    performances = ProficiencyCalculator().calculate_all_category_performances(
        taxonomy, data.to_answers(), now
    )

    table = Table(title="Topic Proficiency")
    table.add_column("Category")
    table.add_column("Topic")
    table.add_column("Level")
    table.add_column("Status")
    table.add_column("Attempted", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Review")

    for performance in performances:
        table.add_row(
            f"[bold]{performance.category.name}[/bold]",
            "",
            f"{format_progress_bar(performance.overall_proficiency)} "
            f"{performance.overall_proficiency:.0%}",
            "",
            str(performance.questions_attempted),
            f"{performance.accuracy:.0%}",
            "",
        )
        for topic in performance.topic_proficiencies:
            status = topic.status
            table.add_row(
                "",
                topic.topic.name,
                f"{format_progress_bar(topic.proficiency_level)} {topic.proficiency_level:.0%}",
                f"[{status.color}]{status.display_name}[/{status.color}]",
                str(topic.questions_attempted),
                f"{topic.accuracy:.0%}",
                "[yellow]due[/yellow]" if topic.needs_review else "",
            )

    console.print(table)


@app.command()
def recommend(snapshot: SnapshotArg, now: NowOption = None) -> None:
    """Show ranked study recommendations."""
    data = _load(snapshot)
    now = now or datetime.now()
    taxonomy = data.to_taxonomy()
    performances = ProficiencyCalculator().calculate_all_category_performances(
        taxonomy, data.to_answers(), now
    )
    recommendations = RecommendationEngine().generate(performances, taxonomy)

    if not recommendations:
        console.print("[dim]No recommendations yet - answer a few questions first.[/dim]")
        return

    table = Table(title="Study Recommendations")
    table.add_column("Priority")
    table.add_column("Recommendation")
    table.add_column("Details")
    table.add_column("Minutes", justify="right")
    for rec in recommendations:
        color = rec.priority.color
        table.add_row(
            f"[{color}]{rec.priority.value.upper()}[/{color}]",
            rec.title,
            rec.description,
            str(rec.estimated_minutes),
        )
    console.print(table)


@app.command()
def insights(snapshot: SnapshotArg, now: NowOption = None) -> None:
    """Generate insights from recorded daily sessions."""
    data = _load(snapshot)
    now = now or datetime.now()
    taxonomy = data.to_taxonomy()
    performances = ProficiencyCalculator().calculate_all_category_performances(
        taxonomy, data.to_answers(), now
    )
    generated = InsightEngine().generate(data.to_sessions(), [], now, performances)

    if not generated:
        console.print("[dim]No insights yet.[/dim]")
        return
    for insight in generated:
        border = "yellow" if insight.actionable else "cyan"
        console.print(Panel(insight.description, title=insight.title, border_style=border))


@app.command()
def select(
    snapshot: SnapshotArg,
    count: Annotated[
        int, typer.Option("--count", "-n", help="Questions to select (clamped to 1-10)")
    ] = 5,
    category: Annotated[
        list[str] | None, typer.Option("--category", "-c", help="Restrict to category id")
    ] = None,
    seed: Annotated[
        int | None, typer.Option("--seed", help="Seed for reproducible sampling")
    ] = None,
    now: NowOption = None,
) -> None:
    """Select question ids for a new quiz."""
    data = _load(snapshot)
    selector = QuestionPoolSelector(
        data.to_taxonomy(),
        data.to_answers(),
        sampler=random.Random(seed),
    )
    try:
        question_ids = selector.select_quiz_questions(count, category, now or datetime.now())
    except NoQuestionsAvailable as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    for question_id in question_ids:
        console.print(question_id)


@app.command()
def streak(snapshot: SnapshotArg, now: NowOption = None) -> None:
    """Rebuild the study streak from answer days."""
    data = _load(snapshot)
    now = now or datetime.now()
    settings = get_settings()
    days = [a.answered_at for a in data.to_answers() if a.answered_at is not None]
    rebuilt = reconstruct_streak(days, now, settings.streak_grace_period_days)
    tracker = StreakTracker(rebuilt)

    active = tracker.is_streak_active(now)
    lines = [
        f"Current streak: [bold]{rebuilt.current_streak}[/bold] days",
        f"Longest streak: {rebuilt.longest_streak} days",
        f"Last study day: {rebuilt.last_study_date or '-'}",
        f"Status: {'[green]active[/green]' if active else '[dim]inactive[/dim]'}",
    ]
    if tracker.should_offer_streak_recovery(now):
        lines.append("[yellow]Streak recovery available[/yellow]")
    console.print(Panel("\n".join(lines), title="Study Streak", border_style="cyan"))


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    try:
        app()
    except Exception:
        logger.exception("Unhandled error")
        raise


if __name__ == "__main__":
    main()
