"""Render generated procedures as Go source."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from ..models import Record
from ..rules.schema import Check, Comparison, Const, FieldRef, GeneratedProcedure, Length, NoError, Operand, Widen

HEADER = "// Code generated by validgen. DO NOT EDIT."
INDENT = "\t"


def receiver_name(record: Record) -> str:
    return record.name[:1].lower()


def receiver(record: Record) -> str:
    """Receiver clause; generic types repeat their type parameter names."""
    params = f"[{', '.join(record.type_params)}]" if record.type_params else ""
    return f"{receiver_name(record)} {record.name}{params}"


def go_string(value: str) -> str:
    """Quote a Go interpreted string literal."""
    # JSON string escapes are a subset of Go's.
    return json.dumps(value)


def render_operand(operand: Operand, recv: str) -> str:
    if isinstance(operand, FieldRef):
        return f"{recv}.{operand.name}"
    if isinstance(operand, Const):
        if operand.value is None:
            return "nil"
        if isinstance(operand.value, str):
            return go_string(operand.value)
        return str(operand.value)
    if isinstance(operand, Length):
        return f"len({render_operand(operand.operand, recv)})"
    if isinstance(operand, Widen):
        return f"float64({render_operand(operand.operand, recv)})"
    raise TypeError(f"unknown operand: {operand!r}")


def render_condition(cond: Comparison, recv: str) -> str:
    return f"{render_operand(cond.left, recv)} {cond.op} {render_operand(cond.right, recv)}"


def render_check(check: Check, recv: str) -> list[str]:
    return [
        f"{INDENT}if {render_condition(check.condition, recv)} {{",
        f"{INDENT * 2}return errors.New({go_string(check.message)})",
        f"{INDENT}}}",
    ]


def render_procedure(proc: GeneratedProcedure) -> str:
    recv = receiver_name(proc.record)
    lines = [
        "// Validate implements Validator.",
        f"func ({receiver(proc.record)}) Validate() error {{",
    ]
    for stmt in proc.body:
        if isinstance(stmt, NoError):
            lines.append(f"{INDENT}return nil")
        else:
            lines.extend(render_check(stmt, recv))
    lines.append("}")
    return "\n".join(lines)


def render_imports(imports: Iterable[str]) -> list[str]:
    names = sorted(set(imports))
    if not names:
        return []
    if len(names) == 1:
        return [f"import {go_string(names[0])}", ""]
    return ["import (", *[f"{INDENT}{go_string(n)}" for n in names], ")", ""]


def render_file(
    procedures: Iterable[GeneratedProcedure],
    package: str,
    source: Path | None = None,
) -> str:
    """Render a complete Go file holding one Validate method per procedure."""
    procs = list(procedures)
    imports: set[str] = set()
    for proc in procs:
        imports |= proc.imports

    lines = [HEADER]
    if source is not None:
        lines.append(f"// Source: {source.name}")
    lines += ["", f"package {package}", ""]
    lines += render_imports(imports)

    for proc in procs:
        lines.append(render_procedure(proc))
        lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"
