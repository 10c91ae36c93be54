import typer
from rich.console import Console
from rich.table import Table
from typing import Optional, List
from datetime import datetime, date
import time
from contextlib import contextmanager

from pydantic import ValidationError

from studyplan.config import settings
from studyplan.database import SessionLocal, init_db, store_errors
from studyplan.crud import (
    create_plan, require_plan, list_plans, update_plan, end_plan, delete_plan,
    list_categories, get_todays_plans, get_plan_statuses,
    update_session_status, record_completion, get_weekly_study_minutes,
    sweep_all_plans, repair_streaks
)
from studyplan.day_watcher import get_day_watcher, run_daily_sweep
from studyplan.duration import Duration, parse_duration_string, format_duration_string, to_minutes
from studyplan.exceptions import StudyPlanError
from studyplan.logging_config import configure_logging
from studyplan.schedule import DAY_NAMES, schedule_to_sentence
from studyplan.schemas import PlanCreate, PlanUpdate, SessionStatus

app = typer.Typer(help="Study Plan Tracker CLI - recurring study plans with streaks")
console = Console()

DAY_ALIASES = {name[:3].lower(): idx for idx, name in enumerate(DAY_NAMES)}

@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """Configure logging before any command runs"""
    configure_logging("DEBUG" if verbose else settings.log_level)

def _parse_date(value: Optional[str]) -> date:
    """Parse YYYY-MM-DD, defaulting to today"""
    if not value:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"Invalid date '{value}', use YYYY-MM-DD") from None

def _parse_days(value: str) -> List[bool]:
    """Turn 'Mon,Wed,Fri', 'daily', 'weekdays' or 'weekends' into a schedule"""
    value = value.strip().lower()
    if value in ("daily", "every day", "all"):
        return [True] * 7
    if value == "weekdays":
        return [True] * 5 + [False] * 2
    if value == "weekends":
        return [False] * 5 + [True] * 2

    schedule = [False] * 7
    for part in value.split(","):
        key = part.strip()[:3]
        if key not in DAY_ALIASES:
            raise typer.BadParameter(f"Unknown day '{part.strip()}'")
        schedule[DAY_ALIASES[key]] = True
    return schedule

def _fail(message: str):
    console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(code=1)

@contextmanager
def _session():
    """Open a session for one command; store and domain errors end the command with a message"""
    db = SessionLocal()
    try:
        with store_errors(db):
            yield db
    except StudyPlanError as e:
        _fail(str(e))
    finally:
        db.close()

def _plans_table(plans, show_status: bool = False) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Title", style="green")
    table.add_column("Category")
    table.add_column("Schedule", style="yellow")
    table.add_column("Duration", style="blue", justify="right")
    table.add_column("Streak", justify="right")
    if show_status:
        table.add_column("Status")
    else:
        table.add_column("Ended")

    for plan in plans:
        duration = plan.duration if isinstance(plan.duration, Duration) else parse_duration_string(plan.duration)
        row = [
            str(plan.id),
            plan.title,
            plan.category,
            schedule_to_sentence(plan.schedule) or "Every day",
            format_duration_string(duration),
            f"🔥 {plan.streak}" if plan.streak else "0",
        ]
        if show_status:
            row.append(SessionStatus(plan.status).value)
        else:
            row.append("yes" if plan.is_ended else "")
        table.add_row(*row)
    return table

@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")

@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    from studyplan.database import engine, Base
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    init_db()
    console.print("[green]✓[/green] Database reset complete! All data deleted.")

@app.command(name="create-plan")
def create_plan_cmd(
    title: str = typer.Option(..., prompt="Plan title"),
    category: str = typer.Option(..., prompt="Category"),
    days: str = typer.Option(..., prompt="Study days (e.g. Mon,Wed,Fri or daily)"),
    duration: str = typer.Option("", prompt="Session duration (e.g. 1h 30m, blank to derive from total hours)"),
    start_date: Optional[str] = typer.Option(None, help="Start date (YYYY-MM-DD), default: today"),
    end_date: Optional[str] = typer.Option(None, help="End date (YYYY-MM-DD)"),
    total_hours: Optional[float] = typer.Option(None, help="Total hours to spread across the plan"),
    description: Optional[str] = typer.Option(None, help="Optional description")
):
    """Create a new study plan"""
    with _session() as db:
        try:
            plan_data = PlanCreate(
                title=title,
                category=category,
                description=description,
                schedule=_parse_days(days),
                start_date=_parse_date(start_date),
                end_date=_parse_date(end_date) if end_date else None,
                duration=parse_duration_string(duration),
                total_hours_target=total_hours
            )
            plan = create_plan(db, plan_data)
            console.print(f"[green]✓[/green] Plan created successfully! Plan ID: {plan.id}")
            console.print(f"  Title: {plan.title} ({plan.category})")
            console.print(f"  Schedule: {schedule_to_sentence(plan.schedule)}")
            console.print(f"  Session: {plan.duration}")
            if plan.end_date:
                console.print(f"  Runs: {plan.start_date} to {plan.end_date}")
        except ValidationError as e:
            _fail(f"Invalid plan: {e.errors()[0]['msg']}")

@app.command(name="list-plans")
def list_plans_cmd(all_plans: bool = typer.Option(False, "--all", help="Include ended plans")):
    """List study plans"""
    with _session() as db:
        plans = list_plans(db, include_ended=all_plans)
        if not plans:
            console.print("[yellow]No plans yet. Create one with create-plan.[/yellow]")
            return
        console.print(_plans_table(plans))

@app.command()
def view_plan(plan_id: int, history: int = typer.Option(10, help="Number of recent days to show")):
    """View a plan and its recent session history"""
    with _session() as db:
        plan = require_plan(db, plan_id)
        console.print(f"\n[bold]{plan.title}[/bold]")
        if plan.description:
            console.print(f"  {plan.description}")
        console.print(f"  Category: {plan.category}")
        console.print(f"  Schedule: {schedule_to_sentence(plan.schedule) or 'Every day'}")
        console.print(f"  Session: {plan.duration}")
        console.print(f"  Start: {plan.start_date}  End: {plan.end_date or '-'}")
        if plan.total_hours_target:
            console.print(f"  Total hours target: {plan.total_hours_target}")
        console.print(f"  Streak: {plan.streak} day{'s' if plan.streak != 1 else ''}")
        if plan.is_ended:
            console.print("  [yellow]This plan has ended[/yellow]")

        statuses = get_plan_statuses(db, plan_id)[-history:]
        if statuses:
            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("Date", style="cyan")
            table.add_column("Status", style="green")
            table.add_column("Minutes", justify="right")
            for row in reversed(statuses):
                table.add_row(str(row.date), row.status, str(row.passed_time or ""))
            console.print(table)

@app.command()
def edit_plan(
    plan_id: int,
    title: Optional[str] = typer.Option(None, help="New title"),
    category: Optional[str] = typer.Option(None, help="New category"),
    days: Optional[str] = typer.Option(None, help="New study days (e.g. Mon,Wed,Fri)"),
    duration: Optional[str] = typer.Option(None, help="New session duration (e.g. 45m)"),
    end_date: Optional[str] = typer.Option(None, help="New end date (YYYY-MM-DD)"),
    total_hours: Optional[float] = typer.Option(None, help="New total hours target")
):
    """Update plan settings"""
    with _session() as db:
        try:
            updates = {}
            if title:
                updates["title"] = title
            if category:
                updates["category"] = category
            if days:
                updates["schedule"] = _parse_days(days)
            if duration:
                updates["duration"] = parse_duration_string(duration)
            if end_date:
                updates["end_date"] = _parse_date(end_date)
            if total_hours:
                updates["total_hours_target"] = total_hours

            plan = update_plan(db, plan_id, PlanUpdate(**updates))
            console.print(f"[green]✓[/green] Plan {plan.id} updated successfully!")
        except ValidationError as e:
            _fail(f"Invalid update: {e.errors()[0]['msg']}")
        except (StudyPlanError, ValueError) as e:
            _fail(str(e))

@app.command(name="end-plan")
def end_plan_cmd(plan_id: int):
    """End a plan; it will no longer be due and its streak is frozen"""
    with _session() as db:
        plan = end_plan(db, plan_id)
        console.print(f"[green]✓[/green] Plan '{plan.title}' ended with a streak of {plan.streak}")

@app.command(name="delete-plan")
def delete_plan_cmd(plan_id: int, yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")):
    """Delete a plan and all of its history"""
    if not yes and not typer.confirm(f"Delete plan {plan_id} and its history?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return
    with _session() as db:
        delete_plan(db, plan_id)
        console.print(f"[green]✓[/green] Plan {plan_id} deleted")

@app.command()
def categories():
    """List category suggestions"""
    with _session() as db:
        console.print("\n[bold]Categories:[/bold]")
        for category in list_categories(db):
            console.print(f"  - {category}")

@app.command()
def today(day: Optional[str] = typer.Option(None, help="Date to check (YYYY-MM-DD), default: today")):
    """Show plans due today with their session status"""
    with _session() as db:
        check_day = _parse_date(day)
        plans = get_todays_plans(db, check_day)
        if not plans:
            console.print(f"[yellow]Nothing scheduled for {check_day}[/yellow]")
            return
        console.print(f"\n[bold]Plans for {check_day:%A, %B %d}[/bold]")
        console.print(_plans_table(plans, show_status=True))

def _set_status(plan_id: int, day: Optional[str], status: SessionStatus, verb: str):
    with _session() as db:
        row = update_session_status(db, plan_id, _parse_date(day), status)
        if row.status == SessionStatus.COMPLETED.value:
            console.print(f"[yellow]Plan {plan_id} is already completed for {row.date}[/yellow]")
        else:
            console.print(f"[green]✓[/green] Session {verb} for plan {plan_id} on {row.date}")

@app.command()
def start(plan_id: int, day: Optional[str] = typer.Option(None, help="Session date (YYYY-MM-DD)")):
    """Start a study session"""
    _set_status(plan_id, day, SessionStatus.RUNNING, "started")

@app.command()
def pause(plan_id: int, day: Optional[str] = typer.Option(None, help="Session date (YYYY-MM-DD)")):
    """Pause a running study session"""
    _set_status(plan_id, day, SessionStatus.PAUSED, "paused")

@app.command()
def complete(
    plan_id: int,
    minutes: Optional[int] = typer.Option(None, help="Minutes studied, default: the plan's session length"),
    day: Optional[str] = typer.Option(None, help="Session date (YYYY-MM-DD), default: today")
):
    """Mark a study session as completed and update the streak"""
    with _session() as db:
        plan = require_plan(db, plan_id)
        studied = minutes if minutes is not None else to_minutes(plan.duration_target)
        row = record_completion(db, plan_id, _parse_date(day), studied)
        console.print(f"[green]✓[/green] Session completed!")
        console.print(f"  Plan: {plan.title}")
        console.print(f"  Date: {row.date}")
        console.print(f"  Studied: {row.passed_time} min")
        console.print(f"  Streak: 🔥 {plan.streak}")

@app.command()
def sweep(day: Optional[str] = typer.Option(None, help="Day to sweep (YYYY-MM-DD), default: today")):
    """Reset streaks of plans whose last scheduled day was missed"""
    with _session() as db:
        result = sweep_all_plans(db, _parse_date(day))
        console.print(f"[green]✓[/green] Sweep done: {result.examined} plans examined, {result.reset} streaks reset")
        if result.invalid:
            console.print(f"[yellow]{result.invalid} plans have no study days and were skipped[/yellow]")

@app.command(name="repair-streaks")
def repair_streaks_cmd(day: Optional[str] = typer.Option(None, help="Recompute as of (YYYY-MM-DD), default: today")):
    """Recompute all streaks from session history"""
    with _session() as db:
        changed = repair_streaks(db, _parse_date(day))
        console.print(f"[green]✓[/green] Streaks recomputed, {changed} corrected")

@app.command()
def weekly_progress(day: Optional[str] = typer.Option(None, help="Any date in the week (YYYY-MM-DD)")):
    """Show minutes studied per day for a week"""
    with _session() as db:
        totals = get_weekly_study_minutes(db, _parse_date(day))
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Day", style="cyan")
        table.add_column("Studied", style="green", justify="right")
        for name, minutes in zip(DAY_NAMES, totals):
            table.add_row(name, format_duration_string(Duration(hours=minutes // 60, minutes=minutes % 60)))
        console.print(table)
        total = sum(totals)
        console.print(f"Total: {format_duration_string(Duration(hours=total // 60, minutes=total % 60))}")

@app.command()
def watch():
    """Run the daily streak sweep whenever the calendar day changes"""
    watcher = get_day_watcher()
    watcher.subscribe(run_daily_sweep)
    run_daily_sweep(watcher.current_day)
    watcher.start()
    console.print(f"[green]✓[/green] Watching for day changes every {watcher.interval_seconds}s (Ctrl+C to stop)")
    try:
        while watcher.running:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("[yellow]Stopping...[/yellow]")
    finally:
        watcher.stop()

if __name__ == "__main__":
    app()
