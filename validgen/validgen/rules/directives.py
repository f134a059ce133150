from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from ..errors import ArityError, InvalidArgumentError, UnsupportedDirectiveError, UnsupportedTypeError
from ..log import BoundLogger, get_logger
from ..models import Field, Record, TypeKind
from .schema import Check, Comparison, Const, FieldRef, Length, Widen

REQUIRED = "required"
EQFIELD = "eqfield"
GTE = "gte"

BuildFn = Callable[[str, Record, Field, BoundLogger], Check]

# Sibling field references end up verbatim in generated code.
FIELD_NAME_PATTERN = re.compile(r"[A-Za-z_]\w*")


@dataclass(frozen=True)
class DirectiveRule:
    """A registered directive with its argument and type contract."""

    name: str
    arity: int
    build: BuildFn
    kinds: frozenset[TypeKind] | None = None  # None: any kind
    description: str = ""
    field_args: bool = False

    def generate(self, key: str, record: Record, field: Field, log: BoundLogger | None = None) -> Check:
        log = get_logger(log).bind(directive=key, field=field.name)
        if key != self.name:
            raise UnsupportedDirectiveError(key, record.name, field.name)

        args = field.validations.get(key, [])
        if len(args) != self.arity:
            raise ArityError(key, self.arity, len(args), args, record.name, field.name)

        if self.field_args:
            for arg in args:
                if not FIELD_NAME_PATTERN.fullmatch(arg):
                    raise InvalidArgumentError(key, arg, "a field name", record.name, field.name)

        if self.kinds is not None and field.type.kind not in self.kinds:
            raise UnsupportedTypeError(key, field.type.text, field.type.kind.value, record.name, field.name)

        log.debug("generating check")
        return self.build(key, record, field, log)


def _required(key: str, record: Record, field: Field, log: BoundLogger) -> Check:
    template = 'field "{}" is required'
    kind = field.type.kind
    log.bind(kind=kind.value).debug("validating")

    if kind is TypeKind.OPTIONAL_REFERENCE:
        cond = Comparison(FieldRef(field.name), "==", Const(None))
    else:
        cond = Comparison(Length(FieldRef(field.name)), "==", Const(0))
    return Check(directive=key, field=field.name, condition=cond, template=template, args=(field.name,))


def _eqfield(key: str, record: Record, field: Field, log: BoundLogger) -> Check:
    eq_to = field.validations[key][0]
    return Check(
        directive=key,
        field=field.name,
        condition=Comparison(FieldRef(field.name), "!=", FieldRef(eq_to)),
        template='field "{}" must be equal to "{}"',
        args=(field.name, eq_to),
    )


def _gte(key: str, record: Record, field: Field, log: BoundLogger) -> Check:
    # Both sides are always widened, even when they already share a type.
    # Integers beyond 2**53 lose precision here.
    than = field.validations[key][0]
    return Check(
        directive=key,
        field=field.name,
        condition=Comparison(Widen(FieldRef(field.name)), "<", Widen(FieldRef(than))),
        template='field "{}" must greater or equal than "{}"',
        args=(field.name, than),
    )


DIRECTIVES: dict[str, DirectiveRule] = {
    REQUIRED: DirectiveRule(
        name=REQUIRED,
        arity=0,
        build=_required,
        kinds=frozenset({TypeKind.STRING, TypeKind.SEQUENCE, TypeKind.MAPPING, TypeKind.OPTIONAL_REFERENCE}),
        description="Non-empty string, slice or map; non-nil pointer.",
    ),
    EQFIELD: DirectiveRule(
        name=EQFIELD,
        arity=1,
        build=_eqfield,
        field_args=True,
        description="Equal to the named sibling field.",
    ),
    GTE: DirectiveRule(
        name=GTE,
        arity=1,
        build=_gte,
        field_args=True,
        kinds=frozenset({TypeKind.OTHER}),
        description="Numerically greater than or equal to the named sibling field.",
    ),
}


def lookup(name: str, record: Record | None = None, field: Field | None = None) -> DirectiveRule:
    rule = DIRECTIVES.get(name)
    if rule is None:
        raise UnsupportedDirectiveError(name, record.name if record else None, field.name if field else None)
    return rule


def generate(name: str, record: Record, field: Field, log: BoundLogger | None = None) -> Check:
    """Compile one directive of ``field`` into a Check."""
    return lookup(name, record, field).generate(name, record, field, log)
