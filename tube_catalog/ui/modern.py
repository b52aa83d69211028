"""A Rich-powered console front-end for browsing the catalog."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from rich import box
from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from ..services.catalog import CatalogServices
from ..services.records import Video
from .overview import OverviewSnapshot, TeacherOverview, collect_overview


STATUS_LABELS: Dict[str, str] = {
    "pending": "⏳ Pending",
    "approved": "✅ Approved",
    "declined": "✖ Declined",
}


class ModernUI:
    """Render the catalog overview using Rich widgets."""

    def __init__(self, services: CatalogServices, *, console: Optional[Console] = None) -> None:
        self._services = services
        self._console = console or Console()

    def run(self) -> None:
        snapshot = collect_overview(self._services)
        console = self._console

        console.rule("[bold magenta]Tube Catalog Overview")

        if snapshot.teacher_count == 0:
            console.print(
                Panel(
                    "No teachers are registered yet.\n"
                    "Approve a request with [bold]python run.py approve ID[/bold].",
                    border_style="yellow",
                    box=box.ROUNDED,
                )
            )
            return

        tree_panel = Panel(
            self._build_tree(snapshot.teachers),
            title="Teachers",
            border_style="cyan",
            box=box.ROUNDED,
        )
        console.print(Columns([tree_panel, self._build_stats_panel(snapshot)], expand=True, equal=True))

    def _build_tree(self, teachers: Iterable[TeacherOverview]) -> Tree:
        tree = Tree("[bold cyan]Teachers", guide_style="cyan")
        for overview in teachers:
            teacher = overview.summary.teacher
            label = Text(teacher.name, style="bold")
            label.append(f"  {teacher.subject}", style="bright_cyan")
            if teacher.nickname:
                label.append(f"  ({teacher.nickname})", style="dim")
            node = tree.add(label)
            if not overview.videos:
                node.add("[dim]No videos yet")
                continue
            for video in overview.videos:
                node.add(self._build_video_label(video))
        return tree

    @staticmethod
    def _build_video_label(video: Video) -> Text:
        label = Text(video.title or video.file_name, style="white")
        label.append(f"  {video.url}", style="green")
        if video.description:
            label.append("\n")
            label.append(video.description, style="dim")
        return label

    def _build_stats_panel(self, snapshot: OverviewSnapshot) -> Panel:
        metrics = Table.grid(expand=True, padding=(0, 1))
        metrics.add_column(style="dim")
        metrics.add_column(justify="right", style="bold")
        metrics.add_row("Teachers", str(snapshot.teacher_count))
        metrics.add_row("Videos", str(snapshot.video_count))

        requests = Table.grid(expand=True, padding=(0, 1))
        requests.add_column(style="dim")
        requests.add_column(justify="right", style="bold")
        for key, label in STATUS_LABELS.items():
            requests.add_row(label, str(snapshot.request_totals.get(key, 0)))

        body = Group(metrics, Rule(style="magenta"), requests)
        return Panel(body, title="At a glance", border_style="magenta", box=box.ROUNDED)


__all__ = ["ModernUI"]
