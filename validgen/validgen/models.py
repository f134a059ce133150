"""Data models for records, fields and their validation directives."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Parsed `validate` pair: directive name -> ordered arguments.
#
#   Name string `validate:"required,oneof=red green blue,oneof=r g b"`
#
# parses to {"required": [], "oneof": ["red green blue", "r g b"]}
Validations = dict[str, list[str]]


class TypeKind(Enum):
    """Classification of a declared field type."""

    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OPTIONAL_REFERENCE = "optional reference"
    OTHER = "other"


def classify_type(text: str) -> TypeKind:
    """Classify a textual Go type expression."""
    t = text.strip()
    if t.startswith("[]"):
        return TypeKind.SEQUENCE
    if t.startswith("map["):
        return TypeKind.MAPPING
    if t.startswith("*"):
        return TypeKind.OPTIONAL_REFERENCE
    if t == "string":
        return TypeKind.STRING
    return TypeKind.OTHER


@dataclass(frozen=True)
class FieldType:
    """A declared type as written in source, with its kind."""

    text: str
    kind: TypeKind

    @classmethod
    def parse(cls, text: str) -> FieldType:
        return cls(text=text.strip(), kind=classify_type(text))

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Field:
    """A record field carrying at least one directive."""

    name: str
    type: FieldType
    validations: Validations = field(default_factory=dict)


@dataclass(frozen=True)
class Record:
    """A named struct type and its annotated fields in declaration order."""

    name: str
    fields: tuple[Field, ...] = ()
    type_params: tuple[str, ...] = ()  # names only, e.g. ("K", "V") for [K comparable, V any]

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


# -----------------------------------------------------------------------------
# Scanner-side declarations (input to the record model builder)
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldDecl:
    """A struct field as declared in source, tag kept verbatim."""

    name: str
    type: str
    tag: str | None = None
    line: int | None = None


@dataclass(frozen=True)
class RecordDecl:
    """A struct type declaration."""

    name: str
    fields: tuple[FieldDecl, ...] = ()
    line: int | None = None
    type_params: tuple[str, ...] = ()
