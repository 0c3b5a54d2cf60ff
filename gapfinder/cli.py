"""Typer CLI application for GapFinder.

Provides commands to seed categories and posts, run content gap analyses,
and manage stored results and recommendations.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from gapfinder.app import DEFAULT_CONFIG_PATH, GapFinderApp
from gapfinder.errors import AnalysisFailure, CategoryNotFound, RecordNotFound
from gapfinder.utils.helpers import format_number

console = Console()
app = typer.Typer(
    name="gapfinder",
    help="GapFinder -- content gap analysis and content recommendations.",
    add_completion=False,
    no_args_is_help=True,
)

PRIORITY_STYLES = {"high": "bold green", "medium": "yellow", "low": "dim"}

ConfigOption = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to settings.yaml.")
DatabaseOption = typer.Option(None, "--db", help="Database URL (overrides config and DATABASE_URL).")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level and format."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _get_app(config: str, db: Optional[str], seed: Optional[int] = None) -> GapFinderApp:
    gap_app = GapFinderApp(config_path=config, database_url=db)
    gap_app.initialize(seed=seed)
    return gap_app


def _fail(message: str, code: int) -> None:
    console.print(f"[red]✘[/red] {message}")
    raise typer.Exit(code=code)


def _priority(value: str) -> str:
    style = PRIORITY_STYLES.get(value, "")
    return f"[{style}]{value}[/{style}]" if style else value


def _gap_table(rows: list[dict], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Keyword", style="cyan", min_width=25)
    table.add_column("Volume", justify="right")
    table.add_column("Diff", justify="right")
    table.add_column("Comp", justify="right")
    table.add_column("Opportunity", justify="right")
    table.add_column("Type")
    table.add_column("Priority")
    table.add_column("Traffic", justify="right")
    table.add_column("Revenue", justify="right")
    for row in rows:
        table.add_row(
            str(row.get("id", "")),
            row["keyword"],
            format_number(row["search_volume"]),
            str(row["difficulty"]),
            str(row["competition"]),
            f"{row['opportunity']:.1f}",
            row["recommended_type"],
            _priority(row["priority"]),
            format_number(row["estimated_traffic"]),
            f"${row['estimated_revenue']:,.2f}",
        )
    return table


def _recommendation_table(rows: list[dict], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("Type")
    table.add_column("Words", justify="right")
    table.add_column("Minutes", justify="right")
    table.add_column("Priority")
    table.add_column("Status")
    table.add_column("Assignee")
    for row in rows:
        table.add_row(
            str(row.get("id", "")),
            row["title"],
            row["content_type"],
            str(row["estimated_word_count"]),
            str(row["estimated_time"]),
            _priority(row["priority"]),
            row.get("status", "pending"),
            row.get("assigned_to") or "",
        )
    return table


# ------------------------------------------------------------------
# init / seeding
# ------------------------------------------------------------------
@app.command()
def init(
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Create the database tables."""
    _setup_logging(verbose)
    _get_app(config, db)
    console.print("[green]✔[/green] Database ready.")


@app.command("add-category")
def add_category(
    name: str = typer.Argument(..., help="Category display name."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Create a content category."""
    _setup_logging(verbose)
    try:
        category_id = _get_app(config, db).store.add_category(name)
    except ValueError as exc:
        _fail(str(exc), 1)
    console.print(f"[green]✔[/green] Category {category_id}: {name}")


@app.command("add-post")
def add_post(
    category_id: int = typer.Argument(..., help="Category the post belongs to."),
    title: str = typer.Argument(..., help="Post title."),
    body: str = typer.Option("", "--body", "-b", help="Post body text."),
    views: int = typer.Option(0, "--views", help="View count."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Add an existing post to a category."""
    _setup_logging(verbose)
    try:
        post_id = _get_app(config, db).store.add_post(category_id, title, body=body, view_count=views)
    except CategoryNotFound as exc:
        _fail(str(exc), 2)
    console.print(f"[green]✔[/green] Post {post_id}: {title}")


# ------------------------------------------------------------------
# analyze
# ------------------------------------------------------------------
@app.command()
def analyze(
    category_id: int = typer.Argument(..., help="Category to analyse."),
    user: str = typer.Option("cli", "--user", "-u", help="User recorded as the creator."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the simulated estimator."),
    top: int = typer.Option(20, "--top", help="Number of gaps to display."),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Run content gap analysis for a category and store the results."""
    _setup_logging(verbose)
    gap_app = _get_app(config, db, seed=seed)

    try:
        if as_json:
            result = gap_app.service.analyze_category_gaps(category_id, user)
        else:
            console.print(Panel(f"[bold cyan]Content Gap Analysis: category {category_id}[/bold cyan]"))
            with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
                progress.add_task(description="Scoring keyword opportunities...", total=None)
                result = gap_app.service.analyze_category_gaps(category_id, user)
    except CategoryNotFound as exc:
        _fail(str(exc), 2)
    except AnalysisFailure as exc:
        _fail(f"{exc}: {exc.__cause__}", 1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    console.print(_gap_table([g.to_dict() for g in result.gaps[:top]], title="Top Gaps: " + result.category_name))
    console.print(_recommendation_table([r.to_dict() for r in result.recommendations], title="Recommendations"))

    summary = result.summary
    breakdown = ", ".join(f"{k}={v}" for k, v in summary.priority_breakdown.items())
    console.print(
        f"\n[bold]{summary.total_opportunities} opportunities[/bold] | "
        f"avg difficulty {summary.average_difficulty} | "
        f"traffic {format_number(summary.total_estimated_traffic)} | "
        f"revenue ${summary.total_estimated_revenue:,} | {breakdown}"
    )
    console.print(f"Run id: {result.run_id}")
    console.print("[green]✔[/green] Analysis complete.")


# ------------------------------------------------------------------
# stored results
# ------------------------------------------------------------------
@app.command()
def results(
    category: Optional[int] = typer.Option(None, "--category", help="Filter by category id."),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum rows."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show stored gap records, highest opportunity first."""
    _setup_logging(verbose)
    try:
        rows = _get_app(config, db).service.get_stored_analysis(category, limit)
    except ValueError as exc:
        _fail(str(exc), 1)
    if not rows:
        console.print("[yellow]No stored analysis results.[/yellow]")
        return
    console.print(_gap_table(rows, title="Stored Gap Analysis"))


@app.command("delete-results")
def delete_results(
    ids: list[int] = typer.Argument(..., help="Gap record ids to delete."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Delete stored gap records (and their recommendations)."""
    _setup_logging(verbose)
    service = _get_app(config, db).service
    try:
        if len(ids) == 1:
            service.delete_analysis_result(ids[0])
            removed = 1
        else:
            removed = service.bulk_delete_analysis_results(ids)
    except RecordNotFound as exc:
        _fail(str(exc), 2)
    console.print(f"[green]✔[/green] {removed} analysis results deleted.")


@app.command()
def stats(
    category: Optional[int] = typer.Option(None, "--category", help="Filter by category id."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show statistics over stored analyses and recommendations."""
    _setup_logging(verbose)
    data = _get_app(config, db).service.get_analysis_statistics(category)
    table = Table(title="Gap Analysis Statistics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", min_width=28)
    table.add_column("Value", justify="right")
    for key, value in data.items():
        display = f"{value}%" if key == "completion_rate" else str(value)
        table.add_row(key.replace("_", " ").title(), display)
    console.print(table)


@app.command()
def export(
    output: Path = typer.Option(..., "--output", "-o", help="CSV file to write."),
    category: Optional[int] = typer.Option(None, "--category", help="Filter by category id."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Export stored gap records to CSV."""
    _setup_logging(verbose)
    csv_text = _get_app(config, db).service.export_analysis_csv(category)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(csv_text, encoding="utf-8")
    console.print(f"[green]✔[/green] Exported to {output}")


# ------------------------------------------------------------------
# recommendations
# ------------------------------------------------------------------
@app.command()
def promote(
    gap_id: int = typer.Argument(..., help="Stored gap record to turn into a recommendation."),
    assign: Optional[str] = typer.Option(None, "--assign", "-a", help="Assignee."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Create a content recommendation from a stored gap record."""
    _setup_logging(verbose)
    try:
        rec = _get_app(config, db).service.promote_gap(gap_id, assigned_to=assign)
    except RecordNotFound as exc:
        _fail(str(exc), 2)
    console.print(_recommendation_table([rec], title="Recommendation Created"))


@app.command()
def recommendations(
    status: Optional[str] = typer.Option(None, "--status", help="Filter by status."),
    priority: Optional[str] = typer.Option(None, "--priority", help="Filter by priority."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """List stored content recommendations."""
    _setup_logging(verbose)
    rows = _get_app(config, db).service.get_recommendations(status, priority)
    if not rows:
        console.print("[yellow]No recommendations found.[/yellow]")
        return
    console.print(_recommendation_table(rows, title="Content Recommendations"))


@app.command("update-recommendation")
def update_recommendation(
    recommendation_id: int = typer.Argument(..., help="Recommendation id."),
    status: Optional[str] = typer.Option(None, "--status", help="pending, in_progress, completed, cancelled."),
    assign: Optional[str] = typer.Option(None, "--assign", "-a", help="Assignee."),
    config: str = ConfigOption,
    db: Optional[str] = DatabaseOption,
    verbose: bool = VerboseOption,
) -> None:
    """Update the status or assignee of a recommendation."""
    _setup_logging(verbose)
    try:
        rec = _get_app(config, db).service.update_recommendation_status(
            recommendation_id, status=status, assigned_to=assign,
        )
    except RecordNotFound as exc:
        _fail(str(exc), 2)
    except ValueError as exc:
        _fail(str(exc), 1)
    console.print(_recommendation_table([rec], title="Recommendation Updated"))


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
