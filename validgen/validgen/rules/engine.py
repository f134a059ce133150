from __future__ import annotations

from typing import Iterable

from ..log import BoundLogger, get_logger
from ..models import Record
from .directives import generate
from .schema import GeneratedProcedure, NoError, Statement

# Support symbols every non-trivial procedure needs from the emitter.
ERROR_IMPORTS = frozenset({"errors"})


def assemble(record: Record, log: BoundLogger | None = None) -> GeneratedProcedure:
    """
    Compile every directive of ``record`` into one procedure.

    Fields are visited in declaration order and each directive exactly once.
    Any error from the directive registry propagates unchanged.
    """
    log = get_logger(log).bind(record=record.name)
    body: list[Statement] = []
    imports: set[str] = set()

    for field in record.fields:
        if not field.validations:
            raise ValueError(f"field {record.name}.{field.name} has no validations to compile")

        produced = 0
        for directive in field.validations:
            check = generate(directive, record, field, log)
            body.append(check)
            produced += 1

        log.bind(field=field.name, checks=produced).debug("compiled field")

    if body:
        imports |= ERROR_IMPORTS
    body.append(NoError())

    return GeneratedProcedure(record=record, body=tuple(body), imports=frozenset(imports))


def assemble_all(records: Iterable[Record], log: BoundLogger | None = None) -> list[GeneratedProcedure]:
    """Assemble a whole batch; the first failure aborts it."""
    return [assemble(record, log) for record in records]
