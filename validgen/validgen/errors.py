"""Exceptions raised while generating validation procedures.

Every error here is fatal for a generation run: the caller either surfaces
it or aborts, but never emits partial output.
"""

from __future__ import annotations


class ValidgenError(Exception):
    """Base class for all validgen errors."""


class TagFormatError(ValidgenError):
    """A raw struct tag does not follow the annotation grammar."""

    def __init__(self, reason: str, tag: str, index: int, state: str, char: str | None = None) -> None:
        where = f"at index {index}"
        if char is not None:
            where += f" (char {char!r}, state {state})"
        else:
            where += f" (state {state})"
        super().__init__(f"malformed tag {tag!r}: {reason} {where}")
        self.reason = reason
        self.tag = tag
        self.index = index
        self.state = state
        self.char = char


class UnsupportedDirectiveError(ValidgenError):
    """The directive name is not registered."""

    def __init__(self, directive: str, record: str | None = None, field: str | None = None) -> None:
        super().__init__(f"unsupported directive {directive!r}{_location(record, field)}")
        self.directive = directive
        self.record = record
        self.field = field


class ArityError(ValidgenError):
    """The directive got a different number of arguments than it takes."""

    def __init__(
        self,
        directive: str,
        expected: int,
        got: int,
        args: list[str],
        record: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(
            f"directive {directive!r} expects exactly {expected} argument(s), "
            f"got {got}: {args!r}{_location(record, field)}"
        )
        self.directive = directive
        self.expected = expected
        self.got = got
        self.args = list(args)
        self.record = record
        self.field = field


class InvalidArgumentError(ValidgenError):
    """A directive argument does not have the shape the directive needs."""

    def __init__(
        self,
        directive: str,
        argument: str,
        expected: str,
        record: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(
            f"directive {directive!r} argument {argument!r} is not {expected}{_location(record, field)}"
        )
        self.directive = directive
        self.argument = argument
        self.expected = expected
        self.record = record
        self.field = field


class UnsupportedTypeError(ValidgenError):
    """The directive has no semantics for the field's type."""

    def __init__(
        self,
        directive: str,
        type_text: str,
        kind: str,
        record: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(
            f"directive {directive!r} does not support type {type_text!r} ({kind}){_location(record, field)}"
        )
        self.directive = directive
        self.type_text = type_text
        self.kind = kind
        self.record = record
        self.field = field


class DuplicateFieldError(ValidgenError):
    """The same field was seen twice while building a record."""

    def __init__(self, record: str, field: str) -> None:
        super().__init__(f"field already exists: {record}.{field}")
        self.record = record
        self.field = field


class RecordNameMismatchError(ValidgenError):
    """Two differently named records were merged."""

    def __init__(self, expected: str, got: str) -> None:
        super().__init__(f"record names do not match: {expected!r} != {got!r}")
        self.expected = expected
        self.got = got


def _location(record: str | None, field: str | None) -> str:
    if record and field:
        return f" (record {record!r}, field {field!r})"
    if field:
        return f" (field {field!r})"
    return ""
