"""Command-line interface for the daily email task digest."""

import asyncio
import sys

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from taskdigest.config import Settings, get_settings
from taskdigest.dashboard.controller import DashboardController, create_controller
from taskdigest.dashboard.formatting import cron_to_human, format_date, format_next_run
from taskdigest.dashboard.store import HistoryStore, LocalStore, Preferences, PreferencesStore
from taskdigest.dashboard.web import DashboardWebServer
from taskdigest.utils.logging_setup import configure_logging

console = Console()

TIME_FORMAT_HELP = "Time of day as HH:MM (24-hour)"


def _priority_style(priority: str) -> str:
    return {"High": "red", "Medium": "yellow", "Low": "green"}.get(priority, "dim")


def _run_with_controller(action, settings: Settings | None = None):
    """Run an async action against a fresh controller, closing its clients after."""
    settings = settings or get_settings()
    controller = create_controller(settings)

    async def _run():
        try:
            return await action(controller)
        finally:
            await controller.aclose()

    return asyncio.run(_run())


@click.group()
@click.version_option()
def main():
    """Daily Email Task Agent.

    Shows tasks the email agent extracted, runs the agent on demand and
    manages its daily schedule.
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)


@main.command()
@click.option("--host", default=None, help="Host to bind to (default from settings)")
@click.option("--port", default=None, type=int, help="Port to bind to (default from settings)")
def serve(host: str | None, port: int | None):
    """Start the dashboard web server."""
    settings = get_settings()
    server = DashboardWebServer(
        create_controller(settings),
        host=host or settings.web_host,
        port=port or settings.web_port,
    )

    console.print(f"[bold cyan]Web Dashboard: {server.get_url()}[/bold cyan]")
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        console.print("\n[yellow]Dashboard stopped.[/yellow]")


@main.command()
def run():
    """Analyze emails now and record the result in history."""
    console.print("[bold]Running email task agent...[/bold]")

    async def _run(controller: DashboardController):
        controller.load_history()
        if not await controller.run_now():
            return None
        return controller.current_run

    result = _run_with_controller(_run)
    if result is None:
        console.print("[bold red]Agent run failed:[/bold red] the agent service could not be reached")
        sys.exit(1)

    table = Table(title=f"Tasks ({result.emails_processed} emails processed)")
    table.add_column("Priority")
    table.add_column("Task")
    table.add_column("From")
    table.add_column("Deadline")

    for task in result.tasks:
        source = task.source_email
        table.add_row(
            f"[{_priority_style(task.priority)}]{task.priority}[/]",
            task.description,
            (source.sender if source else None) or "Unknown",
            task.deadline or "",
        )

    console.print(table)
    console.print(
        f"[dim]Generated {format_date(result.generated_at, get_settings().display_timezone)} "
        f"(status: {result.status})[/dim]"
    )


@main.command()
@click.option("--limit", default=10, show_default=True, help="Number of entries to show")
def history(limit: int):
    """Show previous daily summaries."""
    settings = get_settings()
    entries = HistoryStore(LocalStore(settings.storage_dir), limit=settings.history_limit).load()

    if not entries:
        console.print("[yellow]No history available.[/yellow]")
        return

    table = Table(title="Task History")
    table.add_column("Date")
    table.add_column("Emails", justify="right")
    table.add_column("Tasks", justify="right")
    table.add_column("Status")

    for entry in entries[:limit]:
        status_style = "green" if entry.status == "success" else "red"
        table.add_row(
            format_date(entry.date, settings.display_timezone),
            str(entry.emails_processed),
            str(len(entry.tasks)),
            f"[{status_style}]{entry.status}[/]",
        )

    console.print(table)


@main.group()
def schedule():
    """Inspect and control the daily schedule."""
    pass


def _print_schedule(controller: DashboardController) -> bool:
    info = controller.schedule_info
    if info is None:
        console.print("[bold red]Schedule unavailable.[/bold red]")
        return False

    tz = controller.settings.display_timezone
    status_color = "green" if info.is_active else "yellow"
    console.print(f"[bold]Schedule {info.id}[/bold]")
    console.print(f"  Status: [{status_color}]{info.status}[/]")
    console.print(
        f"  Schedule: {cron_to_human(info.cron_expression) if info.cron_expression else 'Not set'}"
    )
    console.print(f"  Timezone: {info.timezone or 'Not set'}")
    console.print(f"  Next run: {format_next_run(info.next_run, tz)}")
    return True


@schedule.command(name="status")
def schedule_status():
    """Show the schedule's state and next run."""

    async def _status(controller: DashboardController) -> bool:
        await controller.load_schedule_info()
        return _print_schedule(controller)

    if not _run_with_controller(_status):
        sys.exit(1)


@schedule.command(name="pause")
def schedule_pause():
    """Pause the schedule."""
    _set_schedule_active(False)


@schedule.command(name="resume")
def schedule_resume():
    """Resume the schedule."""
    _set_schedule_active(True)


def _set_schedule_active(active: bool):
    async def _toggle(controller: DashboardController) -> bool:
        await controller.load_schedule_info()
        if controller.schedule_info is None:
            return _print_schedule(controller)
        if controller.schedule_info.is_active != active:
            if not await controller.toggle_schedule():
                action = "resume" if active else "pause"
                console.print(f"[bold red]Failed to {action} schedule.[/bold red]")
                return False
        return _print_schedule(controller)

    if not _run_with_controller(_toggle):
        sys.exit(1)


@schedule.command(name="trigger")
def schedule_trigger():
    """Trigger a scheduled run immediately."""

    async def _trigger(controller: DashboardController) -> bool:
        return await controller.trigger_schedule_now()

    if _run_with_controller(_trigger):
        console.print("[green]Scheduled run triggered.[/green]")
    else:
        console.print("[bold red]Failed to trigger scheduled run.[/bold red]")
        sys.exit(1)


@schedule.command(name="runs")
@click.option("--limit", default=None, type=int, help="Number of executions to show")
def schedule_runs(limit: int | None):
    """Show recent scheduled executions."""
    settings = get_settings()
    if limit is not None:
        settings = settings.model_copy(update={"schedule_log_limit": limit})

    async def _runs(controller: DashboardController):
        if not await controller.load_schedule_runs():
            return None
        return controller.snapshot()["runs"]

    rows = _run_with_controller(_runs, settings)
    if rows is None:
        console.print("[bold red]Failed to load scheduled runs.[/bold red]")
        sys.exit(1)

    if not rows:
        console.print("[yellow]No run history available.[/yellow]")
        return

    table = Table(title="Recent Runs")
    table.add_column("Started")
    table.add_column("Status")
    for row in rows:
        style = {"default": "green", "destructive": "red"}.get(row["badge"], "dim")
        table.add_row(row["started"], f"[{style}]{row['status']}[/]")
    console.print(table)


@main.command()
@click.option("--email", default=None, help="Recipient email address")
@click.option("--time", "scheduled_time", default=None, help=TIME_FORMAT_HELP)
def settings(email: str | None, scheduled_time: str | None):
    """Show or update the digest preferences."""
    app_settings = get_settings()
    store = PreferencesStore(
        LocalStore(app_settings.storage_dir),
        default_scheduled_time=app_settings.default_scheduled_time,
    )
    preferences = store.load()

    if email is not None or scheduled_time is not None:
        try:
            preferences = Preferences(
                recipient_email=email if email is not None else preferences.recipient_email,
                scheduled_time=scheduled_time if scheduled_time is not None else preferences.scheduled_time,
            )
        except ValidationError:
            console.print(f"[bold red]Invalid time:[/bold red] {scheduled_time} ({TIME_FORMAT_HELP})")
            sys.exit(1)
        store.save(preferences)
        console.print("[green]Settings saved.[/green]")

    console.print(f"Recipient Email: {preferences.recipient_email or '[dim]not set[/dim]'}")
    console.print(f"Scheduled Time: {preferences.scheduled_time}")
    console.print(f"[dim]Timezone: {app_settings.display_timezone}[/dim]")


if __name__ == "__main__":
    main()
