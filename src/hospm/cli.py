"""CLI: init, show, stats, search, import, export, validate, reset, templates, item."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hospm.config import Config
from hospm.core import dashboard, interchange
from hospm.core.items import ItemService
from hospm.core.projects import ProjectStore
from hospm.core.templates import TEMPLATES
from hospm.errors import HospmError, SchemaValidationError
from hospm.models import VALID_PRIORITIES, VALID_STATUSES, Project
from hospm.storage.sqlite_store import SQLiteStore

console = Console()

STATUS_STYLES = {"todo": "white", "in-progress": "cyan", "done": "green"}


class Session:
    """Config, store and services shared by the commands of one invocation."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self._backend: SQLiteStore | None = None
        self._projects: ProjectStore | None = None

    @property
    def projects(self) -> ProjectStore:
        if self._projects is None:
            self._backend = SQLiteStore(self.config.db_path, wal_mode=self.config.wal_mode)
            self._backend.initialize()
            self._projects = ProjectStore(
                self._backend,
                storage_key=self.config.storage_key,
                json_indent=self.config.json_indent,
            )
            self._projects.get_current_project()
        return self._projects

    @property
    def items(self) -> ItemService:
        return ItemService(self.projects)

    def close(self) -> None:
        if self._backend is not None:
            self._backend.close()


pass_session = click.make_pass_decorator(Session)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="hospm")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory (default: $HOSPM_HOME or ~/.hospm)",
)
@click.pass_context
def main(ctx: click.Context, home: Path | None) -> None:
    """hospm: hospital construction project tracking."""
    config = Config.load(home.expanduser().resolve() if home else None)
    logging.basicConfig(level=config.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    session = Session(config)
    ctx.obj = session
    ctx.call_on_close(session.close)


@main.command()
@pass_session
def init(session: Session) -> None:
    """Create the data directory and a default project."""
    session.config.save()
    project = session.projects.get_current_project()
    click.echo(f"Initialized {session.config.home}")
    click.echo(f"Database: {session.config.db_path}")
    click.echo(f"Project: {project.name} ({len(project.stages)} stages)")


@main.command()
@click.option("--ids", is_flag=True, help="Show stage and link ids")
@pass_session
def show(session: Session, ids: bool) -> None:
    """Show the stage × link board with item counts."""
    project = session.projects.get_current_project()
    _print_board(project, ids=ids)


def _print_board(project: Project, *, ids: bool = False) -> None:
    link_names: list[str] = []
    for stage in project.stages:
        for link in stage.links:
            if link.name not in link_names:
                link_names.append(link.name)

    table = Table(title=project.name, show_lines=True)
    table.add_column("Stage", style="bold")
    for name in link_names:
        table.add_column(name, justify="center")

    for stage in project.stages:
        label = f"{stage.name}\n[dim]{stage.id}[/dim]" if ids else stage.name
        cells = []
        for name in link_names:
            link = stage.find_link_by_name(name)
            if link is None:
                cells.append("")
                continue
            done = sum(1 for item in link.items if item.status == "done")
            cell = f"{done}/{len(link.items)}" if link.items else "·"
            if ids:
                cell += f"\n[dim]{link.id}[/dim]"
            cells.append(cell)
        table.add_row(label, *cells)

    console.print(table)


@main.command()
@pass_session
def stats(session: Session) -> None:
    """Show item statistics and stage / link progress."""
    project = session.projects.get_current_project()
    summary = session.items.get_item_statistics()

    console.print(
        Panel(
            f"Total items: {summary.total}\n"
            f"Todo: {summary.by_status['todo']}  "
            f"In progress: {summary.by_status['in-progress']}  "
            f"Done: {summary.by_status['done']}\n"
            f"High: {summary.by_priority['high']}  "
            f"Medium: {summary.by_priority['medium']}  "
            f"Low: {summary.by_priority['low']}\n"
            f"Completion: {summary.completion_rate}%",
            title=project.name,
        )
    )

    for title, rows in (
        ("Stages", dashboard.stage_statistics(project)),
        ("Links", dashboard.link_statistics(project)),
    ):
        table = Table(title=title)
        table.add_column("Name", style="cyan")
        table.add_column("Total", justify="right")
        table.add_column("Todo", justify="right")
        table.add_column("In progress", justify="right")
        table.add_column("Done", justify="right")
        table.add_column("Progress", justify="right", style="green")
        for row in rows:
            table.add_row(row.name, str(row.total), str(row.todo), str(row.in_progress), str(row.done), f"{row.progress}%")
        console.print(table)


@main.command()
@click.argument("keyword", default="")
@pass_session
def search(session: Session, keyword: str) -> None:
    """Search items by description, participant or notes."""
    items = session.items.search_items(keyword)
    table = Table(title=f"{len(items)} item(s)")
    table.add_column("ID", style="dim")
    table.add_column("Description")
    table.add_column("Participants")
    table.add_column("Status")
    table.add_column("Priority")
    for item in items:
        style = STATUS_STYLES.get(item.status, "white")
        table.add_row(
            item.id,
            item.description,
            ", ".join(item.participants),
            f"[{style}]{item.status}[/{style}]",
            item.priority,
        )
    console.print(table)


@main.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--merge", is_flag=True, help="Merge into the current project by stage / link name")
@pass_session
def import_(session: Session, path: Path, merge: bool) -> None:
    """Import a project JSON file."""
    try:
        data = asyncio.run(interchange.read_from_file(path))
        project = session.projects.import_project(data, merge=merge)
    except SchemaValidationError as e:
        for error in e.errors:
            click.echo(f"  {error}", err=True)
        _fail(f"{path.name} is not a valid project file")
    except HospmError as e:
        _fail(str(e))
    else:
        counts = interchange.preview_statistics(project.to_json())
        click.echo(
            f"{'Merged' if merge else 'Imported'} {path.name}: "
            f"{counts['stages']} stages, {counts['links']} links, {counts['items']} items"
        )


@main.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
@pass_session
def export(session: Session, output: Path | None) -> None:
    """Export the current project as JSON."""
    project = session.projects.get_current_project()
    target = output or Path(interchange.generate_file_name(session.config.export_basename))
    try:
        written = interchange.download_as_file(project.to_json(), target, indent=session.config.json_indent)
    except HospmError as e:
        _fail(str(e))
    else:
        size = interchange.format_file_size(written.stat().st_size)
        click.echo(f"Exported to {written} ({size})")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(path: Path) -> None:
    """Check a project JSON file without importing it."""
    try:
        data = asyncio.run(interchange.read_from_file(path))
    except HospmError as e:
        _fail(str(e))
        return

    result = interchange.validate_project_data(data)
    if not result.is_valid:
        for error in result.errors:
            click.echo(f"  {error}", err=True)
        _fail(f"{len(result.errors)} problem(s) found")

    counts = interchange.preview_statistics(data)
    click.echo(f"Valid: {counts['stages']} stages, {counts['links']} links, {counts['items']} items")


@main.command()
@click.confirmation_option(prompt="Discard the current project and start over?")
@pass_session
def reset(session: Session) -> None:
    """Replace the current project with the default project."""
    project = session.projects.reset_project()
    click.echo(f"Reset to default project ({len(project.stages)} stages)")


@main.group()
def templates() -> None:
    """List and apply project templates."""


@templates.command(name="list")
def list_templates() -> None:
    """List available templates."""
    table = Table(title="Templates")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Stages", justify="right")
    table.add_column("Links", justify="right")
    for template in TEMPLATES.values():
        table.add_row(template.id, template.name, template.category, str(len(template.stages)), str(template.link_count))
    console.print(table)


@templates.command(name="apply")
@click.argument("template_id")
@pass_session
def apply_template(session: Session, template_id: str) -> None:
    """Replace the current project with a template."""
    try:
        project = session.projects.apply_template(template_id)
    except HospmError as e:
        _fail(str(e))
    else:
        click.echo(f"Applied template {template_id}: {project.name}")


@main.group()
def item() -> None:
    """Add, update, move and delete items."""


@item.command(name="add")
@click.argument("stage_id")
@click.argument("link_id")
@click.argument("description")
@click.option("--participant", "-p", "participants", multiple=True, help="Repeat for each participant")
@click.option("--status", type=click.Choice(sorted(VALID_STATUSES)), default="todo")
@click.option("--priority", type=click.Choice(sorted(VALID_PRIORITIES)), default="medium")
@click.option("--start", "start_date", default=None, help="Start date (YYYY-MM-DD)")
@click.option("--end", "end_date", default=None, help="End date (YYYY-MM-DD)")
@click.option("--notes", default="")
@pass_session
def add_item(
    session: Session,
    stage_id: str,
    link_id: str,
    description: str,
    participants: tuple[str, ...],
    status: str,
    priority: str,
    start_date: str | None,
    end_date: str | None,
    notes: str,
) -> None:
    """Add an item to a link."""
    data = {
        "description": description,
        "participants": list(participants),
        "status": status,
        "priority": priority,
        "startDate": start_date,
        "endDate": end_date,
        "notes": notes,
    }
    service = session.items
    result = service.validate_item(data)
    if not result.is_valid:
        _fail("; ".join(result.errors))

    try:
        created = service.add_item(stage_id, link_id, data)
    except HospmError as e:
        _fail(str(e))
    else:
        click.echo(f"Added {created.id}")


@item.command(name="status")
@click.argument("stage_id")
@click.argument("link_id")
@click.argument("item_id")
@click.argument("new_status")
@pass_session
def set_status(session: Session, stage_id: str, link_id: str, item_id: str, new_status: str) -> None:
    """Change an item's status."""
    try:
        updated = session.items.update_item_status(stage_id, link_id, item_id, new_status)
    except HospmError as e:
        _fail(str(e))
    else:
        click.echo(f"{updated.id}: {updated.status}")


@item.command(name="move")
@click.argument("stage_id")
@click.argument("link_id")
@click.argument("item_id")
@click.argument("target_stage_id")
@click.argument("target_link_id")
@click.option("--copy", "copy_only", is_flag=True, help="Keep the original item")
@pass_session
def move(
    session: Session,
    stage_id: str,
    link_id: str,
    item_id: str,
    target_stage_id: str,
    target_link_id: str,
    copy_only: bool,
) -> None:
    """Move (or copy) an item to another link."""
    service = session.items
    operation = service.copy_item if copy_only else service.move_item
    try:
        result = operation(stage_id, link_id, item_id, target_stage_id, target_link_id)
    except HospmError as e:
        _fail(str(e))
    else:
        click.echo(f"{'Copied' if copy_only else 'Moved'} {item_id} -> {result.id}")


@item.command(name="delete")
@click.argument("stage_id")
@click.argument("link_id")
@click.argument("item_id")
@pass_session
def delete(session: Session, stage_id: str, link_id: str, item_id: str) -> None:
    """Delete an item."""
    try:
        session.items.delete_item(stage_id, link_id, item_id)
    except HospmError as e:
        _fail(str(e))
    else:
        click.echo(f"Deleted {item_id}")
