"""Record model building: turn scanned declarations into annotated records."""

from __future__ import annotations

from typing import Iterable

from .errors import DuplicateFieldError, RecordNameMismatchError, TagFormatError
from .log import BoundLogger, get_logger
from .models import Field, FieldDecl, FieldType, Record, RecordDecl
from .tags import parse_tag


def build_field(decl: FieldDecl, log: BoundLogger | None = None) -> Field | None:
    """Build a Field from its declaration.

    Returns None when the field has no tag or its tag carries no directives.
    Raises TagFormatError when the tag is malformed.
    """
    log = get_logger(log).bind(field=decl.name)
    if not decl.tag:
        log.debug("no tag found, skipping")
        return None

    vals = parse_tag(decl.tag, log)
    if not vals:
        log.debug("no validations found")
        return None

    log.bind(validations=vals).debug("found validations")
    return Field(name=decl.name, type=FieldType.parse(decl.type), validations=vals)


def merge_records(a: Record | None, b: Record) -> Record:
    """Merge two sightings of the same record.

    Fields of ``b`` are appended after those of ``a``; the field name sets
    must be disjoint.
    """
    if a is None:
        return b
    if a.name != b.name:
        raise RecordNameMismatchError(a.name, b.name)

    existing = set(a.field_names())
    for f in b.fields:
        if f.name in existing:
            raise DuplicateFieldError(a.name, f.name)

    return Record(name=a.name, fields=a.fields + b.fields, type_params=a.type_params)


def find_records(decls: Iterable[RecordDecl], log: BoundLogger | None = None) -> list[Record]:
    """Collect every record having at least one annotated field.

    Records come back in first-seen order; repeated declarations of the same
    name are merged.
    """
    log = get_logger(log)
    records: dict[str, Record] = {}

    for decl in decls:
        rlog = log.bind(type=decl.name)
        rlog.debug("current type")
        for field_decl in decl.fields:
            try:
                field = build_field(field_decl, rlog)
            except TagFormatError as e:
                raise TagFormatError(
                    f"{e.reason} (record {decl.name!r}, field {field_decl.name!r})",
                    e.tag,
                    e.index,
                    e.state,
                    e.char,
                ) from e
            if field is None:
                continue

            sighting = Record(name=decl.name, fields=(field,), type_params=decl.type_params)
            records[decl.name] = merge_records(records.get(decl.name), sighting)

    log.bind(records=list(records)).debug("finished finding records")
    return list(records.values())
