from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table

from .models import MergePlan, TimeAggregate


def build_plan_table(plan: MergePlan, aggregate: Optional[TimeAggregate] = None) -> Table:
    """Build a table of the chapters in playback order."""
    table = Table(title="Merge Plan", show_lines=False, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("File", justify="right")
    table.add_column("Chapter", justify="right")
    table.add_column("Path", overflow="fold")

    for index, item in enumerate(plan, start=1):
        table.add_row(str(index), f"{item.file_number:04d}", f"{item.chapter_number:02d}", str(item.path))

    if aggregate is not None:
        table.caption = (
            f"Created {aggregate.earliest_creation.astimezone():%Y-%m-%d %H:%M:%S} · "
            f"Modified {aggregate.latest_modification.astimezone():%Y-%m-%d %H:%M:%S}"
        )
    return table


def print_plan(plan: MergePlan, console: Console, aggregate: Optional[TimeAggregate] = None) -> None:
    console.print(build_plan_table(plan, aggregate))
