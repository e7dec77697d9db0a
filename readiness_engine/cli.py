"""
Typer CLI for the GLO readiness engine.

Commands:
    readiness init-db                         - Create database tables
    readiness predict LEARNER ASSESSMENT      - Predict and store readiness
    readiness practice LEARNER                - Summarize recent practice
    readiness check LEARNER ASSESSMENT        - Generate a readiness check
    readiness matrix LEARNER                  - Show mastery per cognitive level

Usage:
    readiness --help
    readiness predict student-1 final-exam
    readiness practice student-1 --objective 3C --days 14
    readiness check student-1 final-exam --questions 8 --difficulty hard
    readiness matrix student-1 --database-url sqlite:///readiness.db
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from contextlib import contextmanager

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from config import Settings, get_settings
from readiness_engine.db import Database
from readiness_engine.errors import ReadinessEngineError
from readiness_engine.models import ReadinessPrediction
from readiness_engine.practice_history import PracticeHistoryAggregator
from readiness_engine.predictor import PredictionPolicy, ReadinessPredictor
from readiness_engine.question_bank import TemplateQuestionBank
from readiness_engine.readiness_check import ReadinessCheckOrchestrator
from readiness_engine.recommendations import RecommendationRanker
from readiness_engine.stores import (
    SqlAssessmentLookup,
    SqlMasteryStore,
    SqlPracticeSessionStore,
    SqlPredictionStore,
    SqlReadinessCheckConfigStore,
)
from readiness_engine.taxonomy import LevelStatus, summarize_levels

app = typer.Typer(
    help="GLO readiness engine: mastery + practice history -> assessment readiness",
    no_args_is_help=True,
)

console = Console()

_STATUS_COLORS = {
    LevelStatus.MASTERED: "green",
    LevelStatus.PROFICIENT: "cyan",
    LevelStatus.DEVELOPING: "yellow",
    LevelStatus.NOT_STARTED: "dim",
}


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class EngineContext:
    """Wires settings, database, stores and services for one CLI invocation."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.db = Database.from_settings(settings)

        self.assessments = SqlAssessmentLookup(self.db)
        self.mastery = SqlMasteryStore(self.db)
        self.practice = PracticeHistoryAggregator(
            SqlPracticeSessionStore(self.db),
            default_window_days=settings.practice_window_days,
        )
        self.predictor = ReadinessPredictor(
            assessments=self.assessments,
            mastery=self.mastery,
            practice=self.practice,
            predictions=SqlPredictionStore(self.db),
            ranker=RecommendationRanker.from_settings(settings),
            policy=PredictionPolicy.from_settings(settings),
        )
        self.orchestrator = ReadinessCheckOrchestrator(
            predictor=self.predictor,
            question_bank=TemplateQuestionBank(),
            config_store=SqlReadinessCheckConfigStore(self.db),
            practice=self.practice,
            assessments=self.assessments,
            mastery=self.mastery,
            expiry_hours=settings.readiness_check_expiry_hours,
            time_limit_minutes=settings.readiness_check_time_limit_minutes,
        )


def _build_context(database_url: str | None = None) -> EngineContext:
    """Build the engine context, optionally overriding the database URL."""
    settings = get_settings()
    if database_url:
        settings = settings.model_copy(update={"database_url": database_url})
    return EngineContext(settings)


@contextmanager
def _engine_errors() -> Generator[None, None, None]:
    """Turn engine and argument errors into a red message and exit code 1."""
    try:
        yield
    except (ReadinessEngineError, ValueError) as exc:
        rprint(f"[red]✗[/red] {exc}")
        raise typer.Exit(code=1) from exc


DatabaseUrlOption = typer.Option(
    None, "--database-url", help="Override DATABASE_URL from settings"
)


def _print_prediction(prediction: ReadinessPrediction) -> None:
    level = prediction.readiness_level
    table = Table(title=f"Readiness: {prediction.learner_id} → {prediction.assessment_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Readiness", f"[{level.color}]{level.display_name}[/{level.color}]")
    table.add_row("Predicted score", f"{prediction.predicted_points:.1f}%")
    table.add_row("Confidence", f"{prediction.confidence_percentage:.0f}%")
    table.add_row("Average mastery", f"{prediction.factors.avg_mastery:.1f}")
    table.add_row("Recent success rate", f"{prediction.factors.recent_success_rate:.0%}")
    table.add_row("Practice sessions", str(prediction.factors.practice_count))
    table.add_row("Estimated prep", f"{prediction.estimated_prep_minutes} min")
    console.print(table)

    if prediction.recommendations:
        recs = Table(title="Recommendations", show_header=True)
        recs.add_column("Objective", style="yellow")
        recs.add_column("Reason")
        recs.add_column("Practice")
        recs.add_column("Minutes", justify="right")
        for item in prediction.recommendations:
            recs.add_row(
                item.objective_id,
                item.reason,
                item.suggested_practice,
                str(item.estimated_minutes),
            )
        console.print(recs)

    rprint(f"\n{prediction.recommendation}")


# ========================================
# COMMANDS
# ========================================


@app.command("init-db")
def init_db(database_url: str | None = DatabaseUrlOption) -> None:
    """
    Create the readiness engine tables.

    Safe to run multiple times (idempotent).
    """
    ctx = _build_context(database_url)
    try:
        ctx.db.init_db()
    except SQLAlchemyError as exc:
        logger.error(f"Database initialization failed: {exc}")
        rprint(f"[red]✗[/red] Database initialization failed: {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        ctx.db.dispose()
    rprint("[green]✓[/green] Database initialized!")


@app.command("predict")
def predict(
    learner_id: str = typer.Argument(..., help="Learner identifier"),
    assessment_id: str = typer.Argument(..., help="Assessment identifier"),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Predict readiness for an assessment and store the result."""
    ctx = _build_context(database_url)
    try:
        with _engine_errors():
            prediction = ctx.predictor.predict(learner_id, assessment_id)
    finally:
        ctx.db.dispose()
    _print_prediction(prediction)


@app.command("practice")
def practice(
    learner_id: str = typer.Argument(..., help="Learner identifier"),
    objective: str | None = typer.Option(
        None, "--objective", "-o", help="Limit to one objective (default: all)"
    ),
    days: int = typer.Option(30, "--days", "-d", help="Trailing window in days"),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Summarize a learner's recent practice."""
    ctx = _build_context(database_url)
    try:
        with _engine_errors():
            summary = ctx.practice.summarize(learner_id, objective, days)
    finally:
        ctx.db.dispose()

    if summary.is_empty:
        rprint(f"[dim]No practice sessions in the last {days} days.[/dim]")
        return

    table = Table(title=f"Practice: {learner_id} (last {days} days)")
    table.add_column("Objective", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Avg score", justify="right")
    table.add_column("Last practiced")
    for stats in sorted(summary.by_objective.values(), key=lambda s: s.objective_id):
        table.add_row(
            stats.objective_id,
            str(stats.count),
            f"{stats.average_score:.0%}",
            stats.last_practiced.strftime("%Y-%m-%d %H:%M") if stats.last_practiced else "-",
        )
    console.print(table)

    rprint(f"  Total sessions: [bold]{summary.total_sessions}[/bold]")
    rprint(f"  Average score:  [bold]{summary.average_score:.0%}[/bold]")
    rprint(f"  Streak:         [bold]{summary.streak_days}[/bold] day(s)")


@app.command("check")
def check(
    learner_id: str = typer.Argument(..., help="Learner identifier"),
    assessment_id: str = typer.Argument(..., help="Assessment identifier"),
    questions: int | None = typer.Option(
        None, "--questions", "-n", help="Number of questions (default from settings)"
    ),
    difficulty: str | None = typer.Option(
        None, "--difficulty", help="easy, medium, hard or adaptive (default from settings)"
    ),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Generate a readiness check for an upcoming assessment."""
    ctx = _build_context(database_url)
    settings = ctx.settings
    try:
        with _engine_errors():
            result = ctx.orchestrator.generate_readiness_check(
                learner_id,
                assessment_id,
                num_questions=questions if questions is not None else settings.readiness_check_default_questions,
                difficulty_level=difficulty or settings.readiness_check_default_difficulty,
            )
    finally:
        ctx.db.dispose()

    _print_prediction(result.prediction)

    config = result.config
    rprint(f"\n[bold cyan]Readiness check {config.config_id}[/bold cyan]")
    rprint(f"  Difficulty: {config.difficulty_level.value}")
    rprint(f"  Time limit: {config.time_limit_minutes} min")
    rprint(f"  Expires:    {config.expires_at.strftime('%Y-%m-%d %H:%M UTC')}\n")

    table = Table(title="Questions", show_header=True)
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("Prompt")
    table.add_column("Bloom", style="cyan")
    table.add_column("Points", justify="right")
    for question in result.questions:
        table.add_row(question.question_id, question.prompt, question.bloom_level, str(question.points))
    console.print(table)


@app.command("matrix")
def matrix(
    learner_id: str = typer.Argument(..., help="Learner identifier"),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Show a learner's mastery rolled up per cognitive level."""
    ctx = _build_context(database_url)
    try:
        with _engine_errors():
            records = ctx.mastery.list_mastery(learner_id)
    finally:
        ctx.db.dispose()

    # Several objectives can share a cell; the cell shows their mean
    by_cell: dict[str, list[float]] = {}
    for record in records:
        by_cell.setdefault(record.cell_code, []).append(record.mastery_score)
    with _engine_errors():
        levels = summarize_levels(
            {code: sum(scores) / len(scores) for code, scores in by_cell.items()}
        )

    table = Table(title=f"Mastery matrix: {learner_id}")
    table.add_column("Level", style="cyan")
    table.add_column("Average", justify="right")
    table.add_column("Mastered", justify="right")
    table.add_column("Started", justify="right")
    table.add_column("Status", no_wrap=True)
    for level in levels:
        color = _STATUS_COLORS[level.status]
        table.add_row(
            f"{level.level.value}. {level.name}",
            f"{level.average_score:.1f}",
            f"{level.cells_mastered}/{level.total_cells}",
            f"{level.cells_started}/{level.total_cells}",
            f"[{color}]{level.status.value}[/{color}]",
        )
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB")

    app()


if __name__ == "__main__":
    main()
