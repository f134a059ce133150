"""Watch command - regenerate validations whenever the source changes."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..config import GenerateConfig
from ..log import BoundLogger
from ..watcher import run_watch_loop
from .generate import run_generate


def run_watch(config: GenerateConfig, *, log: BoundLogger | None = None) -> int:
    """
    Generate once, then again on every change to the source file.

    This is a blocking command that runs until interrupted (Ctrl+C). A failed
    regeneration is reported and leaves the previous output in place.
    """
    console = Console(stderr=True)

    console.print(f"[bold]Watching[/bold] {config.source}")
    console.print(f"  Output: {config.output} (package {config.package})")
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    runs = 0
    failures = 0

    def on_change(path: Path) -> None:
        nonlocal runs, failures
        runs += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{timestamp}[/dim] {path.name} changed")
        if run_generate(config, log=log, console=console) != 0:
            failures += 1

    on_change(config.source)
    run_watch_loop(config.source, on_change)

    console.print()
    console.print(f"[bold]Stopped.[/bold] Ran {runs} generation(s), {failures} failed.")
    return 0
