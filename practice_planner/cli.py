"""Command-line interface for the practice planner."""

from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import config
from .errors import IncompleteSessionError, PlannerError
from .library import BalletClassType, BalletLevel, gzclp_exercises_by_tier
from .models import (
    Activity,
    FlexibleSchedule,
    IntervalSchedule,
    ProgramType,
    SessionStatus,
    TrackingType,
    WeeklySchedule,
    parse_date,
)
from .planner import PracticePlanner
from .planning.ballet import default_program_name, default_routines
from .planning.calendar import count_by_status
from .planning.import_export import IMPORTABLE_TYPES, export_filename
from .planning.rotation import next_day
from .planning.schedule import DAY_NAMES, describe_schedule

console = Console()

STATUS_STYLES = {
    None: ("○ not started", "white"),
    SessionStatus.IN_PROGRESS: ("▶ in progress", "yellow"),
    SessionStatus.COMPLETED: ("✓ completed", "green"),
    SessionStatus.SKIPPED: ("– skipped", "magenta"),
    SessionStatus.PARTIAL: ("◐ partial", "yellow"),
}


def get_planner(ctx: click.Context) -> PracticePlanner:
    """Planner for this invocation, created on first use."""
    ctx.ensure_object(dict)
    if ctx.obj.get("planner") is None:
        ctx.obj["planner"] = PracticePlanner()
    return ctx.obj["planner"]


def print_error(error: Exception) -> None:
    console.print(f"[red]❌ {escape(str(error))}[/red]")


def _date_option(value: Optional[str]) -> Optional[date]:
    return parse_date(value) if value else None


def _weight(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:g} {config.WEIGHT_UNIT}"


@click.group()
@click.pass_context
def cli(ctx):
    """Practice Planner: recurring practice programs and GZCLP tracking."""
    ctx.ensure_object(dict)


@cli.command()
@click.pass_context
def programs(ctx):
    """List programs."""
    planner = get_planner(ctx)
    try:
        all_programs = planner.list_programs()
    except PlannerError as e:
        print_error(e)
        return

    if not all_programs:
        console.print("[yellow]No programs yet. Create one with 'create', 'gzclp-setup', 'ballet-setup' or 'import'.[/yellow]")
        return

    table = Table(title="Programs", box=box.ROUNDED)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Schedule")
    table.add_column("Active")

    for program in all_programs:
        schedule = describe_schedule(program.schedule)
        if program.is_gzclp:
            schedule += f" (week {program.current_week or 1}, next day {next_day(program)})"
        table.add_row(
            program.id,
            program.name,
            program.type.value,
            schedule,
            "yes" if program.is_active else "no",
        )
    console.print(table)


DEFAULT_TRACKING = {
    ProgramType.WEIGHTLIFTING: TrackingType.SETS_REPS_WEIGHT,
    ProgramType.CARDIO: TrackingType.DURATION,
}


def _schedule(days, every, flexible=False):
    if sum([bool(days), every is not None, flexible]) > 1:
        raise click.UsageError("Use only one of --day, --every and --flexible")
    if every is not None:
        return IntervalSchedule(every)
    if days:
        return WeeklySchedule(frozenset(days))
    return FlexibleSchedule()


def _tracking_type(value: str, tracking: Optional[str], program_type: ProgramType) -> TrackingType:
    if not tracking:
        return DEFAULT_TRACKING.get(program_type, TrackingType.COMPLETION)
    try:
        return TrackingType(tracking.strip())
    except ValueError:
        choices = ", ".join(t.value for t in TrackingType)
        raise click.BadParameter(f"unknown tracking in {value!r} (choose from {choices})",
                                 param_hint="--activity")


def _parse_activities(values, program_type: ProgramType) -> List[Activity]:
    activities = []
    for value in values:
        name, tracking = value, None
        if ":" in value:
            name, tracking = value.rsplit(":", 1)
        if not name.strip():
            raise click.BadParameter(f"missing activity name in {value!r}", param_hint="--activity")
        activities.append(Activity(
            id="",
            name=name.strip(),
            program_id="",
            tracking_type=_tracking_type(value, tracking, program_type),
        ))
    return activities


@cli.command()
@click.argument("name")
@click.option("--type", "program_type", type=click.Choice(list(IMPORTABLE_TYPES)), default="custom",
              help="Program type")
@click.option("--day", "days", multiple=True, type=click.IntRange(0, 6), help="Weekday (0 = Sunday)")
@click.option("--every", type=click.IntRange(min=1), help="Every N days from today")
@click.option("--flexible", is_flag=True, help="No fixed schedule")
@click.option("--activity", "activities", multiple=True,
              help="Activity as NAME[:TRACKING], e.g. 'Squat:sets-reps-weight'")
@click.pass_context
def create(ctx, name, program_type, days, every, flexible, activities):
    """Create a weightlifting, skill, cardio or custom program."""
    planner = get_planner(ctx)
    program_type = ProgramType(program_type)
    schedule = _schedule(days, every, flexible)
    parsed = _parse_activities(activities, program_type)
    try:
        program = planner.create_program(name, program_type, schedule, activities=parsed)
    except PlannerError as e:
        print_error(e)
        return
    console.print(f"[green]✅ Created {program.type.value} program {escape(program.name)} ({program.id})[/green]")
    console.print(f"Schedule: {describe_schedule(program.schedule)}, {len(parsed)} activities")


def _set_active(ctx, program_id: str, is_active: bool) -> None:
    planner = get_planner(ctx)
    try:
        program = planner.set_active(program_id, is_active)
    except PlannerError as e:
        print_error(e)
        return
    state = "active" if program.is_active else "inactive"
    console.print(f"[green]✅ {escape(program.name)} is now {state}[/green]")


@cli.command()
@click.argument("program_id")
@click.pass_context
def activate(ctx, program_id):
    """Show a program in the agenda again."""
    _set_active(ctx, program_id, True)


@cli.command()
@click.argument("program_id")
@click.pass_context
def deactivate(ctx, program_id):
    """Hide a program from the agenda without deleting it."""
    _set_active(ctx, program_id, False)


@cli.command()
def exercises():
    """List the GZCLP exercise library by tier."""
    table = Table(title="GZCLP Exercises", box=box.ROUNDED)
    table.add_column("Tier", style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Equipment")
    for tier, tier_exercises in gzclp_exercises_by_tier().items():
        for exercise in tier_exercises:
            table.add_row(tier.value, exercise.id, exercise.name, exercise.equipment or "-")
    console.print(table)


@cli.command()
@click.option("--days", default=None, type=int, help="Number of days to show (default CALENDAR_DAYS)")
@click.option("--date", "start_date", help="First date (YYYY-MM-DD), defaults to today")
@click.pass_context
def agenda(ctx, days, start_date):
    """Show scheduled sessions for the coming days."""
    planner = get_planner(ctx)
    try:
        days_agenda = planner.agenda(today=_date_option(start_date), num_days=days)
    except PlannerError as e:
        print_error(e)
        return

    num_days = config.CALENDAR_DAYS if days is None else days
    console.print(Panel.fit(f"📅 Agenda ({num_days} days)", style="bold blue"))

    if not days_agenda:
        console.print("[yellow]Nothing scheduled.[/yellow]")
        return

    for day in days_agenda:
        weekday = DAY_NAMES[(day.date.weekday() + 1) % 7]
        console.print(f"\n[bold]{weekday} {day.date.isoformat()}[/bold]")
        for scheduled in day.sessions:
            label, style = STATUS_STYLES[scheduled.status]
            line = f"  [{style}]{label}[/{style}]  {escape(scheduled.program_name)}"
            if scheduled.next_workout_day:
                day_number = (scheduled.session.workout_day if scheduled.session and scheduled.session.workout_day
                              else scheduled.next_workout_day)
                line += f" (Day {day_number})"
            line += f" · {len(scheduled.activities)} activities"
            console.print(line)

    counts = count_by_status(days_agenda)
    summary = ", ".join(f"{count} {label}" for label, count in sorted(counts.items()))
    console.print(f"\n[black]{summary}[/black]")


@cli.command()
@click.argument("program_id")
@click.option("--date", "on_date", help="Session date (YYYY-MM-DD), defaults to today")
@click.pass_context
def start(ctx, program_id, on_date):
    """Start (or resume) a session."""
    planner = get_planner(ctx)
    try:
        session = planner.start_session(program_id, _date_option(on_date))
        program = planner.get_program(program_id)
        activities = planner.session_activities(program, session)
    except PlannerError as e:
        print_error(e)
        return

    label, style = STATUS_STYLES[session.status]
    console.print(f"[green]✅ {escape(program.name)} on {session.date.isoformat()}[/green] [{style}]{label}[/{style}]")
    if session.workout_day:
        console.print(f"[bold]Day {session.workout_day}[/bold]")

    notes = planner.last_practice_notes(program_id, before=session.date)
    if notes:
        console.print(Panel(escape(notes), title="Practice next", box=box.ROUNDED))

    table = Table(box=box.SIMPLE)
    table.add_column("Activity ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Tracking")
    for activity in activities:
        table.add_row(activity.id, activity.name, activity.tracking_type.value)
    console.print(table)


@cli.command()
@click.argument("program_id")
@click.option("--date", "on_date", help="Session date (YYYY-MM-DD), defaults to today")
@click.option("--reason", help="Why the session was skipped")
@click.pass_context
def skip(ctx, program_id, on_date, reason):
    """Skip a session."""
    planner = get_planner(ctx)
    try:
        session = planner.skip_session(program_id, _date_option(on_date), reason=reason)
    except PlannerError as e:
        print_error(e)
        return
    console.print(f"[magenta]Skipped session on {session.date.isoformat()}[/magenta]")


@cli.command("log-set")
@click.argument("program_id")
@click.argument("activity_id")
@click.option("--weight", type=float, required=True, help="Weight lifted")
@click.option("--reps", type=int, required=True, help="Reps performed")
@click.option("--warmup", is_flag=True, help="Warm-up set (ignored for progression)")
@click.option("--amrap", is_flag=True, help="AMRAP set")
@click.option("--rpe", type=float, help="Rate of perceived exertion (1-10)")
@click.option("--date", "on_date", help="Session date (YYYY-MM-DD), defaults to today")
@click.pass_context
def log_set(ctx, program_id, activity_id, weight, reps, warmup, amrap, rpe, on_date):
    """Log one set of a weightlifting activity."""
    planner = get_planner(ctx)
    try:
        session = planner.log_set(
            program_id, activity_id, weight, reps,
            on_date=_date_option(on_date), is_warmup=warmup, is_amrap=amrap, rpe=rpe,
        )
    except PlannerError as e:
        print_error(e)
        return

    logged = session.get_log(activity_id).sets[-1]
    kind = " (warm-up)" if logged.is_warmup else " (AMRAP)" if logged.is_amrap else ""
    console.print(f"[green]Set {logged.set_number}: {_weight(logged.weight)} x {logged.reps}{kind}[/green]")


@cli.command("done-activity")
@click.argument("program_id")
@click.argument("activity_id")
@click.option("--duration", type=int, help="Minutes spent")
@click.option("--date", "on_date", help="Session date (YYYY-MM-DD), defaults to today")
@click.pass_context
def done_activity(ctx, program_id, activity_id, duration, on_date):
    """Mark a duration/completion activity as done."""
    planner = get_planner(ctx)
    try:
        planner.mark_activity_complete(program_id, activity_id, _date_option(on_date), duration=duration)
    except PlannerError as e:
        print_error(e)
        return
    console.print(f"[green]✓ {escape(activity_id)} done[/green]")


@cli.command()
@click.argument("program_id")
@click.option("--notes", help="Session notes")
@click.option("--practice-next", help="What to practice next time")
@click.option("--date", "on_date", help="Session date (YYYY-MM-DD), defaults to today")
@click.pass_context
def complete(ctx, program_id, notes, practice_next, on_date):
    """Complete a session."""
    planner = get_planner(ctx)
    try:
        session = planner.complete_session(
            program_id, _date_option(on_date), notes=notes, practice_next=practice_next
        )
    except IncompleteSessionError as e:
        console.print("[red]❌ Cannot complete the session yet. Unfinished activities:[/red]")
        for activity_id in e.missing_activity_ids:
            console.print(f"  • {escape(activity_id)}")
        return
    except PlannerError as e:
        print_error(e)
        return

    console.print(f"[green]✅ Session completed in {session.duration} min[/green]")
    program = planner.get_program(program_id)
    if program.is_gzclp:
        console.print(f"Next: Day {next_day(program)} (week {program.current_week})")


@cli.command("next-weight")
@click.argument("program_id")
@click.pass_context
def next_weight(ctx, program_id):
    """Show prescribed weights for the next GZCLP session."""
    planner = get_planner(ctx)
    try:
        program = planner.get_program(program_id)
        prescriptions = planner.prescriptions(program_id)
        activities = {a.id: a for a in planner.get_activities(program_id)}
    except PlannerError as e:
        print_error(e)
        return

    if not prescriptions:
        console.print("[yellow]No tiered exercises to prescribe.[/yellow]")
        return

    table = Table(title=f"{program.name}: Day {next_day(program)}", box=box.ROUNDED)
    table.add_column("Exercise", style="bold")
    table.add_column("Tier")
    table.add_column("Scheme")
    table.add_column("Weight", style="green")
    for activity_id, prescription in prescriptions.items():
        activity = activities[activity_id]
        tier = prescription.tier or activity.tier
        table.add_row(activity.name, tier.value, prescription.scheme, _weight(prescription.weight))
    console.print(table)


def _parse_weights(values) -> Dict[str, float]:
    weights = {}
    for value in values:
        exercise_id, sep, amount = value.partition("=")
        if not sep:
            raise click.BadParameter(f"expected EXERCISE=WEIGHT, got {value!r}", param_hint="--weight")
        try:
            weights[exercise_id.strip()] = float(amount)
        except ValueError:
            raise click.BadParameter(f"invalid weight {amount!r}", param_hint="--weight")
    return weights


@cli.command("gzclp-setup")
@click.argument("name")
@click.option("--weight", "weights", multiple=True, help="Starting weight as EXERCISE=WEIGHT, e.g. squat=135")
@click.pass_context
def gzclp_setup(ctx, name, weights):
    """Create a GZCLP program with the default 4-day split."""
    planner = get_planner(ctx)
    try:
        program = planner.create_gzclp_program(name, _parse_weights(weights))
    except PlannerError as e:
        print_error(e)
        return
    console.print(f"[green]✅ Created GZCLP program {escape(program.name)} ({program.id})[/green]")


@cli.command("ballet-setup")
@click.option("--class-type", type=click.Choice([c.value for c in BalletClassType]), default="full")
@click.option("--level", type=click.Choice([lvl.value for lvl in BalletLevel]), default="beginner")
@click.option("--name", help="Program name (default from class type and level)")
@click.option("--day", "days", multiple=True, type=click.IntRange(0, 6), help="Weekday (0 = Sunday)")
@click.option("--every", type=click.IntRange(min=1), help="Every N days instead of fixed weekdays")
@click.pass_context
def ballet_setup(ctx, class_type, level, name, days, every):
    """Create a ballet class program."""
    planner = get_planner(ctx)
    schedule = _schedule(days, every)
    try:
        program = planner.create_ballet_program(
            name or default_program_name(class_type, level),
            default_routines(class_type, level),
            schedule,
        )
    except PlannerError as e:
        print_error(e)
        return
    console.print(f"[green]✅ Created ballet program {escape(program.name)} ({program.id})[/green]")


@cli.command()
@click.argument("program_id")
@click.option("--output", type=click.Path(dir_okay=False), help="Output file (default from program name)")
@click.pass_context
def export(ctx, program_id, output):
    """Export a program to a JSON file."""
    planner = get_planner(ctx)
    try:
        program = planner.get_program(program_id)
        text = planner.export_program(program_id)
    except PlannerError as e:
        print_error(e)
        return

    path = Path(output or export_filename(program))
    path.write_text(text, encoding="utf-8")
    console.print(f"[green]✅ Exported {escape(program.name)} to {path}[/green]")


@cli.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_(ctx, file):
    """Import a program from a JSON export file."""
    planner = get_planner(ctx)
    try:
        text = Path(file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]❌ Failed to read file: {escape(str(e))}[/red]")
        return

    try:
        program = planner.import_program(text)
    except PlannerError as e:
        print_error(e)
        return
    console.print(f"[green]✅ Imported {escape(program.name)} ({program.id})[/green]")


@cli.command()
@click.argument("program_id")
@click.pass_context
def delete(ctx, program_id):
    """Delete a program (its session history is kept)."""
    planner = get_planner(ctx)
    if not click.confirm(f"Delete program {program_id}?"):
        console.print("[black]Operation cancelled.[/black]")
        return
    try:
        planner.delete_program(program_id)
    except PlannerError as e:
        print_error(e)
        return
    console.print("[green]✅ Program deleted[/green]")


@cli.command()
@click.pass_context
def reset(ctx):
    """Delete all programs and sessions."""
    console.print(Panel.fit("⚠️  Reset Practice Planner", style="bold yellow"))

    if not click.confirm("This will delete all data. Are you sure?"):
        console.print("[black]Operation cancelled.[/black]")
        return

    try:
        get_planner(ctx).reset()
    except PlannerError as e:
        print_error(e)
        return
    console.print("[green]✅ All data deleted[/green]")


def main():
    """Main entry point."""
    try:
        config.configure_logging()
        config.ensure_dirs()
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user.[/yellow]")


if __name__ == "__main__":
    main()
