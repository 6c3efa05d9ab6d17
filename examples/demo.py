"""Walkthrough of hospm: default project, items, statistics, export and merge.

Builds a project in a temporary workspace, adds and moves work items,
then exports the project and merges a second document back in.
"""

import asyncio
import json
import tempfile
from pathlib import Path

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from hospm.core import dashboard, interchange
from hospm.core.items import ItemRef, ItemService
from hospm.core.projects import ProjectStore
from hospm.events.bus import EventBus
from hospm.storage.sqlite_store import SQLiteStore

console = Console()


def step_header(num: int, title: str) -> None:
    """Display a colorful step header."""
    console.print()
    console.print(
        Panel(
            f"[bold cyan]Step {num}:[/bold cyan] [yellow]{title}[/yellow]",
            border_style="cyan",
        )
    )


def display_json(data: dict | list, title: str | None = None) -> None:
    """Display JSON data in a panel."""
    json_str = json.dumps(data, indent=2, ensure_ascii=False)
    console.print(Panel(JSON(json_str), title=title, border_style="green"))


async def demo() -> None:
    """Run the walkthrough."""
    console.print("[bold magenta]HOSPM DEMO: Stages → Links → Items[/bold magenta]")

    temp_dir = Path(tempfile.mkdtemp())
    db_path = temp_dir / "hospm.db"
    console.print(f"[dim]Workspace: {db_path}[/dim]\n")

    backend = SQLiteStore(db_path)
    backend.initialize()
    bus = EventBus()
    changes: list[str] = []
    bus.on_all(lambda event, data: changes.append(str(event)))

    store = ProjectStore(backend, bus)
    items = ItemService(store)

    # Step 1: Default project
    step_header(1, "Default Project")
    project = store.get_current_project()
    console.print(f"[green]✓[/green] {project.name}: {len(project.stages)} stages")
    for stage in project.stages[:3]:
        console.print(f"    {stage.name}: {', '.join(link.name for link in stage.links)}")

    # Step 2: Add items
    step_header(2, "Adding Items")
    drawings = project.stages[3]
    design, procurement = drawings.links[1], drawings.links[2]

    gas = items.add_item(
        drawings.id,
        design.id,
        {
            "description": "Medical gas system design",
            "participants": ["MEP", "Medical Process"],
            "priority": "high",
            "startDate": "2024-03-01",
            "endDate": "2024-04-15",
        },
    )
    console.print(f"[green]✓[/green] Added: {gas.description}")

    theatre = items.add_item(
        drawings.id,
        design.id,
        {
            "description": "Clean operating theatre design",
            "participants": ["Architecture", "Cleanroom Specialist"],
            "notes": "ISO class 5 for orthopaedic theatres",
        },
    )
    console.print(f"[green]✓[/green] Added: {theatre.description}")

    rejected = items.validate_item({"description": " ", "participants": "MEP", "status": "later"})
    display_json(rejected.to_dict(), "Validation of a bad item")

    # Step 3: Status and moves
    step_header(3, "Status Changes and Moves")
    items.batch_update_item_status(
        [ItemRef(drawings.id, design.id, gas.id), ItemRef(drawings.id, design.id, "missing")],
        "done",
    )
    console.print("[green]✓[/green] Marked gas design done (missing item skipped)")

    moved = items.move_item(drawings.id, design.id, theatre.id, drawings.id, procurement.id)
    console.print(f"[green]✓[/green] Moved theatre design to {procurement.name} as {moved.id}")

    # Step 4: Search
    step_header(4, "Searching Items")
    table = Table(title="Results for 'mep'", show_lines=True)
    table.add_column("Description", style="cyan")
    table.add_column("Participants", style="green")
    table.add_column("Status", style="yellow")
    for item in items.search_items("mep"):
        table.add_row(item.description, ", ".join(item.participants), item.status)
    console.print(table)

    # Step 5: Statistics
    step_header(5, "Statistics")
    stats = items.get_item_statistics()
    display_json({**stats.model_dump(), "completionRate": stats.completion_rate}, "Item Statistics")

    progress = Table(title="Stage Progress")
    progress.add_column("Stage", style="cyan")
    progress.add_column("Items", justify="right")
    progress.add_column("Done", justify="right", style="green")
    for row in dashboard.stage_statistics(project):
        if row.total:
            progress.add_row(row.name, str(row.total), f"{row.progress}%")
    console.print(progress)

    # Step 6: Export and merge
    step_header(6, "Export and Merge")
    exported = interchange.download_as_file(project.to_json(), temp_dir / interchange.generate_file_name())
    console.print(
        f"[green]✓[/green] Exported {exported.name} "
        f"({interchange.format_file_size(exported.stat().st_size)})"
    )

    data = await interchange.read_from_file(exported)
    display_json(interchange.preview_statistics(data), "Export Preview")

    incoming = {
        "stages": [
            {
                "id": "handover",
                "name": "Handover",
                "links": [
                    {
                        "id": "handover-ops",
                        "name": "Operations Handoff",
                        "items": [{"id": "h1", "description": "Train ward staff on the nurse call system"}],
                    }
                ],
            }
        ]
    }
    merged = store.import_project(incoming, merge=True)
    console.print(f"[green]✓[/green] Merged: {len(merged.stages)} stages, {len(items.get_all_items())} items")

    console.print(f"\n[dim]{len(changes)} change events emitted[/dim]")
    backend.close()

    console.print(
        "\n[bold green]✓ Demo complete![/bold green] "
        "[dim]Temporary workspace will be cleaned up.[/dim]\n"
    )


if __name__ == "__main__":
    asyncio.run(demo())
