# -*- coding: utf-8 -*-
"""
Console rendering for air-fetch

- Parsed URN summary
- One progress bar per file (bytes, speed, ETA) fed by the reconciler
- Per-file outcome table and error messages
"""

from __future__ import annotations
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn, DownloadColumn, Progress, TaskID, TextColumn, TimeRemainingColumn, TransferSpeedColumn
)
from rich.table import Table

from .core.errors import AirFetchError
from .core.models import DOWNLOADED, UP_TO_DATE, UPDATED, Identifier, Outcome
from .core.utils import human_size

console = Console()
err_console = Console(stderr=True)

ACTION_LABELS = {
    UP_TO_DATE: "[green]up to date[/]",
    DOWNLOADED: "[cyan]downloaded[/]",
    UPDATED: "[yellow]updated (hash mismatch)[/]",
}


def show_identifier(ident: Identifier) -> None:
    lines = [
        f"[bold]Ecosystem[/]: {ident.ecosystem}",
        f"[bold]Type[/]:      {ident.resource_type}",
        f"[bold]Source[/]:    {ident.source}",
        f"[bold]Model ID[/]:  {ident.model_id}",
        f"[bold]Version[/]:   {ident.version_id}",
    ]
    if ident.layer:
        lines.append(f"[bold]Layer[/]:     {ident.layer}")
    if ident.format:
        lines.append(f"[bold]Format[/]:    {ident.format}")
    console.print(Panel.fit("\n".join(lines), title=ident.urn, border_style="cyan"))


class DownloadProgress:
    """Callable progress observer: (name, downloaded, total) -> bar per file name."""

    def __init__(self, out: Optional[Console] = None):
        self.progress = Progress(
            TextColumn("[bold]Downloading[/] {task.description}", justify="left"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=out or console,
            transient=False,
        )
        self.tasks: Dict[str, TaskID] = {}

    def __enter__(self) -> "DownloadProgress":
        self.progress.start()
        return self

    def __exit__(self, *exc) -> None:
        self.progress.stop()

    def __call__(self, name: str, downloaded: int, total: int) -> None:
        task_id = self.tasks.get(name)
        if task_id is None:
            task_id = self.tasks[name] = self.progress.add_task(name, total=total)
        self.progress.update(task_id, completed=downloaded, total=total)


def show_outcomes(outcomes: List[Outcome]) -> None:
    table = Table(header_style="bold magenta", box=box.SIMPLE_HEAVY)
    table.add_column("File", overflow="fold")
    table.add_column("Size", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Path", overflow="fold")
    for o in outcomes:
        size = o.path.stat().st_size if o.path.exists() else None
        table.add_row(o.entry.name, human_size(size), ACTION_LABELS.get(o.action, o.action), str(o.path))
    console.print(table)
    fetched = sum(1 for o in outcomes if o.fetched)
    console.print(f"[dim]{fetched} fetched, {len(outcomes) - fetched} already up to date[/]")


def show_error(exc: AirFetchError) -> None:
    err_console.print(f"[bold red]Error[/] ({type(exc).__name__}): {exc}")
