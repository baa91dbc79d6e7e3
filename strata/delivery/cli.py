"""
Strata CLI: inspect and manage a study profile from the terminal.

Commands:
- strata plan      - Preview the items a session would present
- strata stats     - Show category mastery, title, streak and minerals
- strata report    - Show layers most in need of work, kanji specimens and bookmarks
- strata bookmark  - Toggle a bookmark on an answered item
- strata name      - Set the profile name
- strata export    - Write a JSON backup of the profile
- strata import    - Replace the profile with a JSON backup
- strata reset     - Clear the profile
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from strata.config import get_settings
from strata.core.categories import ALL_CATEGORIES, LAYER_BY_CATEGORY, QuizMode
from strata.study.insights import SpecimenStatus, overall_rate, weakest_layer
from strata.study.rewards import MINERAL_BY_TYPE
from strata.study.study_service import StudyService

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="strata",
    help="Strata: adaptive kanji study",
    no_args_is_help=True,
)
console = Console()


def _service() -> StudyService:
    settings = get_settings()
    try:
        return StudyService.from_settings(settings)
    except FileNotFoundError:
        console.print(f"[bold red]Question bank not found:[/bold red] {settings.catalog_path}")
        console.print("[dim]Set STRATA_CATALOG_PATH to a questions.json file.[/dim]")
        raise typer.Exit(1)


def _pct(rate: float) -> str:
    return f"{rate * 100:.0f}%"


# =============================================================================
# Commands
# =============================================================================


@app.command()
def plan(
    mode: QuizMode = typer.Argument(QuizMode.DAILY, help="Quiz mode"),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", help="Layer depth for layer mode"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category for category mode"),
) -> None:
    """Preview the items a session of MODE would present."""
    service = _service()
    try:
        driver = service.start_session(mode, depth=depth, category=category)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(1)

    if not driver.items:
        console.print(f"[yellow]No items available for {mode.value}.[/yellow]")
        return

    table = Table(title=f"{mode.value} ({len(driver.items)} items)")
    table.add_column("#", style="dim")
    table.add_column("Item")
    table.add_column("Category", style="cyan")
    table.add_column("Priority", justify="right")

    priority_model = service.builder().priority_model
    for i, item in enumerate(driver.items, 1):
        table.add_row(str(i), item.id, item.category.label, f"{priority_model.priority(item):.2f}")
    console.print(table)


@app.command()
def stats() -> None:
    """Show category mastery, title, streak and minerals."""
    service = _service()
    state = service.state

    console.print(f"\n[bold cyan]{state.profile.name or 'Profile'}[/bold cyan] - {state.profile.title.value}")
    console.print(f"Study streak: {state.profile.streak} days | Overall: {_pct(overall_rate(state))}")

    table = Table(show_header=True)
    table.add_column("Category")
    table.add_column("Layer", justify="right", style="dim")
    table.add_column("Correct", justify="right")
    table.add_column("Miss", justify="right")
    table.add_column("Rate", justify="right", style="bold")
    for category in ALL_CATEGORIES:
        s = state.stats_for(category)
        table.add_row(
            category.label,
            str(LAYER_BY_CATEGORY[category].depth),
            str(s.correct),
            str(s.miss),
            _pct(s.correct_rate) if s.attempts else "-",
        )
    console.print(table)

    owned = [(t, n) for t, n in state.minerals.items() if n > 0]
    if owned:
        console.print("\n[bold]Minerals[/bold]")
        for mineral_type, count in owned:
            mineral = MINERAL_BY_TYPE.get(mineral_type)
            console.print(f"  {mineral.name if mineral else mineral_type} x{count}")
    if state.badges:
        console.print(f"\n[bold]Badges[/bold]: {', '.join(state.badges)}")


@app.command()
def report() -> None:
    """Show layers most in need of work, kanji specimens and bookmarked items."""
    service = _service()
    insights = service.layer_insights()

    if not insights:
        console.print("[dim]No answers recorded yet.[/dim]")
    else:
        table = Table(title="Layers by priority")
        table.add_column("Depth", justify="right")
        table.add_column("Layer")
        table.add_column("Rate", justify="right")
        table.add_column("Target", justify="right", style="dim")
        table.add_column("Missed items", justify="right")
        table.add_column("Priority", justify="right", style="bold")
        for insight in insights:
            table.add_row(
                str(insight.layer.depth),
                insight.layer.name,
                _pct(insight.rate),
                _pct(insight.layer.target_rate),
                str(insight.missed_items),
                f"{insight.priority:.0f}",
            )
        console.print(table)

        weakest = weakest_layer(insights)
        if weakest is not None:
            console.print(f"Weakest layer: [bold red]{weakest.layer.name}[/bold red] ({_pct(weakest.rate)})")

    specimens = service.kanji_specimens()
    if specimens:
        gold = [s.kanji for s in specimens if s.status is SpecimenStatus.GOLD]
        console.print(f"\n[bold]Kanji specimens[/bold]: {len(gold)} / {len(specimens)} complete")
        if gold:
            console.print(f"  [yellow]{''.join(gold)}[/yellow]")

    bookmarks = service.ledger.bookmarked_ids()
    if bookmarks:
        console.print(f"\n[bold]Bookmarked[/bold]: {', '.join(bookmarks)}")


@app.command()
def bookmark(item_id: str = typer.Argument(..., help="Item identifier")) -> None:
    """Toggle the bookmark on an answered item."""
    service = _service()
    if service.ledger.get(item_id) is None:
        console.print(f"[yellow]{item_id} has not been answered yet; nothing to bookmark.[/yellow]")
        return
    service.toggle_bookmark(item_id)
    state = "on" if service.ledger.get(item_id).bookmarked else "off"
    console.print(f"Bookmark {state} for {item_id}")


@app.command()
def name(new_name: str = typer.Argument(..., help="Profile name (max 12 characters)")) -> None:
    """Set the profile name."""
    saved = _service().set_profile_name(new_name)
    console.print(f"Profile name set to [bold]{saved}[/bold]")


@app.command("export")
def export_backup(path: Path = typer.Argument(..., help="Destination JSON file")) -> None:
    """Write a JSON backup of the profile."""
    path.write_text(_service().export_json(), encoding="utf-8")
    console.print(f"Backup written to {path}")


@app.command("import")
def import_backup(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Backup JSON file"),
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Replace the profile with a JSON backup."""
    if not confirm and not Confirm.ask("Overwrite the current profile?", default=False):
        raise typer.Exit(0)
    try:
        state = _service().import_json(path.read_text(encoding="utf-8"))
    except (ValueError, ValidationError) as e:
        console.print(f"[bold red]Could not import backup:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(f"Imported {len(state.history)} item records")


@app.command()
def reset(
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Clear the profile for a fresh start."""
    if not confirm and not Confirm.ask("Reset ALL progress? This cannot be undone!", default=False):
        raise typer.Exit(0)
    _service().reset()
    console.print("[green]Profile reset.[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
