"""Inspection commands: parse a single tag, list registered directives."""

from __future__ import annotations

import json
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..errors import TagFormatError
from ..log import BoundLogger
from ..models import TypeKind
from ..rules.directives import DIRECTIVES
from ..tags import parse_tag


def run_tags(raw: str, *, output_json: bool = False, log: BoundLogger | None = None) -> int:
    """Parse ``raw`` and print its directives.

    Returns:
        Exit code (0 = parsed, 1 = malformed tag)
    """
    console = Console(stderr=True)

    try:
        vals = parse_tag(raw, log)
    except TagFormatError as e:
        console.print(str(e), style="bold red", markup=False)
        return 1

    if output_json:
        print(json.dumps(vals, indent=2))
        return 0

    if not vals:
        console.print("No validate directives.", style="dim")
        return 0

    table = Table(title="Directives")
    table.add_column("Directive", style="cyan")
    table.add_column("Arguments")
    table.add_column("Registered", justify="center")
    for name, args in vals.items():
        table.add_row(
            escape(name),
            escape(", ".join(repr(a) for a in args)) if args else "-",
            "yes" if name in DIRECTIVES else "[red]no[/red]",
        )
    Console(file=sys.stdout).print(table)
    return 0


def run_directives(*, output_json: bool = False) -> int:
    """List the directive registry."""
    rows = []
    for rule in DIRECTIVES.values():
        kinds = sorted(k.value for k in rule.kinds) if rule.kinds is not None else [k.value for k in TypeKind]
        rows.append({"name": rule.name, "arity": rule.arity, "kinds": kinds, "description": rule.description})

    if output_json:
        print(json.dumps(rows, indent=2))
        return 0

    table = Table(title="Registered directives")
    table.add_column("Directive", style="cyan")
    table.add_column("Arguments", justify="right")
    table.add_column("Field kinds")
    table.add_column("Description", style="dim")
    for row in rows:
        table.add_row(row["name"], str(row["arity"]), ", ".join(row["kinds"]), row["description"])
    Console(file=sys.stdout).print(table)
    return 0
