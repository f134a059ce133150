"""Generate command implementation - Validate() methods from struct tags."""

from __future__ import annotations

import difflib

from rich.console import Console
from rich.syntax import Syntax

from ..config import GenerateConfig
from ..errors import ValidgenError
from ..golang.emit import render_file
from ..golang.scanner import scan_file
from ..log import BoundLogger, get_logger
from ..planning import GeneratePlan, GenerateResult
from ..records import find_records
from ..rules.engine import assemble_all


# -----------------------------------------------------------------------------
# compute (pure) / execute (writes)
# -----------------------------------------------------------------------------


def compute_generate_plan(config: GenerateConfig, log: BoundLogger | None = None) -> GeneratePlan:
    """
    Scan, compile and render without writing anything.

    Raises:
        ValidgenError: any directive, tag or record error; the batch is aborted.
        OSError: the source file cannot be read.
        ValueError: the source file is not lexically valid Go.
    """
    log = get_logger(log).bind(source=str(config.source))
    log.debug("scanning source")

    scanned = scan_file(config.source)
    records = find_records(scanned.records, log)
    procedures = assemble_all(records, log)
    content = render_file(procedures, config.package, source=config.source)

    existing = None
    if config.output.exists():
        existing = config.output.read_text(encoding="utf-8")

    log.bind(records=len(records)).debug("computed plan")
    return GeneratePlan(
        source=config.source,
        output=config.output,
        package=config.package,
        scanned=scanned,
        records=records,
        procedures=procedures,
        content=content,
        existing_content=existing,
    )


def execute_generate_plan(plan: GeneratePlan) -> GenerateResult:
    """Write the rendered file; unchanged files are left untouched."""
    if plan.unchanged:
        return GenerateResult(success=True, output_path=plan.output)

    try:
        plan.output.parent.mkdir(parents=True, exist_ok=True)
        plan.output.write_text(plan.content, encoding="utf-8")
    except OSError as e:
        return GenerateResult(success=False, error=f"writing {plan.output}: {e}")

    return GenerateResult(
        success=True,
        output_path=plan.output,
        bytes_written=len(plan.content.encode("utf-8")),
    )


def render_diff(plan: GeneratePlan) -> str:
    before = (plan.existing_content or "").splitlines(keepends=True)
    after = plan.content.splitlines(keepends=True)
    return "".join(
        difflib.unified_diff(before, after, fromfile=str(plan.output), tofile=f"{plan.output} (generated)")
    )


def run_generate(
    config: GenerateConfig,
    *,
    dry_run: bool = False,
    log: BoundLogger | None = None,
    console: Console | None = None,
) -> int:
    """Generate the validation file.

    Args:
        config: Resolved source/output/package settings
        dry_run: Print the plan and the generated source instead of writing
        log: Diagnostics logger
        console: Console for user-facing output

    Returns:
        Exit code (0 = success, 1 = failure)
    """
    console = console or Console(stderr=True)

    # Phase 1: Compute - pure, no side effects
    try:
        plan = compute_generate_plan(config, log)
    except ValidgenError as e:
        console.print(f"generation failed: {e}", style="bold red", markup=False)
        return 1
    except (OSError, ValueError) as e:
        console.print(f"cannot read {config.source}: {e}", style="bold red", markup=False)
        return 1

    if dry_run:
        console.print("\n[bold]DRY RUN[/bold] - No changes will be made\n")
        console.print(plan.summary(), markup=False)
        diff = render_diff(plan)
        if diff:
            console.print(Syntax(diff, "diff", theme="ansi_dark"))
        else:
            console.print("No differences.", style="dim")
        return 0

    # Phase 2: Execute - writes
    result = execute_generate_plan(plan)
    if not result.success:
        console.print(str(result.error), style="red", markup=False)
        return 1

    if result.bytes_written:
        console.print(
            f"Wrote {len(plan.procedures)} Validate method(s) to {result.output_path}",
            style="green",
            markup=False,
        )
    else:
        console.print(f"{result.output_path} is up to date", style="dim", markup=False)
    return 0
