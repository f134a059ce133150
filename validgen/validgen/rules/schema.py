from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

from ..models import Record

CompareOp = Literal["==", "!=", "<"]

_OPS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
}


@dataclass(frozen=True)
class FieldRef:
    """Access to a field (or a sibling field) of the record being validated."""

    name: str


@dataclass(frozen=True)
class Const:
    """A literal; None stands for the null reference."""

    value: Any


@dataclass(frozen=True)
class Length:
    """Length of a string or container; null counts as empty."""

    operand: Operand


@dataclass(frozen=True)
class Widen:
    """Conversion to the common floating point representation."""

    operand: Operand


Operand = Union[FieldRef, Const, Length, Widen]


def resolve(operand: Operand, values: Mapping[str, Any]) -> Any:
    if isinstance(operand, FieldRef):
        return values[operand.name]
    if isinstance(operand, Const):
        return operand.value
    if isinstance(operand, Length):
        inner = resolve(operand.operand, values)
        return 0 if inner is None else len(inner)
    if isinstance(operand, Widen):
        return float(resolve(operand.operand, values))
    raise TypeError(f"unknown operand: {operand!r}")


@dataclass(frozen=True)
class Comparison:
    left: Operand
    op: CompareOp
    right: Operand

    def holds(self, values: Mapping[str, Any]) -> bool:
        lhs = resolve(self.left, values)
        rhs = resolve(self.right, values)
        if isinstance(self.right, Const) and self.right.value is None:
            # null comparisons are identity, not equality
            same = lhs is None
            return same if self.op == "==" else not same
        return bool(_OPS[self.op](lhs, rhs))


@dataclass(frozen=True)
class Check:
    """One compiled directive: fails when ``condition`` holds."""

    directive: str
    field: str
    condition: Comparison
    template: str
    args: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        return self.template.format(*self.args)

    def failed(self, values: Mapping[str, Any]) -> bool:
        return self.condition.holds(values)


@dataclass(frozen=True)
class NoError:
    """Unconditional success terminator."""


Statement = Union[Check, NoError]


@dataclass(frozen=True)
class GeneratedProcedure:
    """Complete validation logic for one record."""

    record: Record
    body: tuple[Statement, ...] = (NoError(),)
    imports: frozenset[str] = field(default_factory=frozenset)

    @property
    def checks(self) -> list[Check]:
        return [s for s in self.body if isinstance(s, Check)]

    def run(self, values: Mapping[str, Any]) -> str | None:
        """Evaluate the procedure against field values.

        Returns the message of the first failed check, or None.
        """
        for stmt in self.body:
            if isinstance(stmt, NoError):
                return None
            if stmt.failed(values):
                return stmt.message
        return None
