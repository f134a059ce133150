"""Go source scanning: find struct declarations and their field tags.

This is a scanner, not a Go parser. It understands enough of the lexical
structure (comments, string literals, bracket nesting) to locate
``type X struct { ... }`` declarations, including those inside
``type ( ... )`` groups, and split their bodies into fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from ..models import FieldDecl, RecordDecl

PACKAGE_PATTERN = re.compile(r"^\s*package\s+([A-Za-z_]\w*)", re.MULTILINE)
# optional type parameter list, one level of nested brackets
_TYPE_PARAMS = r"(?:\s*\[((?:[^\[\]]|\[[^\[\]]*\])*)\])?"
TYPE_STRUCT_PATTERN = re.compile(r"\btype\s+([A-Za-z_]\w*)" + _TYPE_PARAMS + r"\s+struct\s*\{")
TYPE_GROUP_PATTERN = re.compile(r"\btype\s*\(")
GROUP_STRUCT_PATTERN = re.compile(r"([A-Za-z_]\w*)" + _TYPE_PARAMS + r"\s+struct\s*\{")
IDENT_PATTERN = re.compile(r"[A-Za-z_]\w*")
FIELD_PATTERN = re.compile(r"^([A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s+(\S.*)$", re.DOTALL)

_OPENERS = {"{": "}", "(": ")", "[": "]"}


@dataclass
class SourceFile:
    """Struct declarations found in one Go source file."""

    package: str | None
    records: list[RecordDecl] = field(default_factory=list)
    path: Path | None = None


def _skip_string(text: str, i: int) -> int:
    """Return the index just past the string/rune literal starting at i."""
    quote = text[i]
    j = i + 1
    while j < len(text):
        c = text[j]
        if quote != "`" and c == "\\":
            j += 2
            continue
        if c == quote:
            return j + 1
        if quote != "`" and c == "\n":
            break
        j += 1
    raise ValueError(f"unterminated literal starting at offset {i}")


def strip_comments(text: str) -> str:
    """Blank out comments, keeping string literals and newlines intact."""
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c in "\"'`":
            end = _skip_string(text, i)
            out.append(text[i:end])
            i = end
        elif text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
            out.append(" " * (end - i))
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ValueError(f"unterminated block comment starting at offset {i}")
            end += 2
            out.append("".join(ch if ch == "\n" else " " for ch in text[i:end]))
            i = end
        else:
            out.append(c)
            i += 1
    return "".join(out)


def mask_literals(text: str) -> str:
    """Blank out the contents of string and rune literals.

    Quotes, newlines and offsets are kept, so positions found in the masked
    text index the same characters of ``text``.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c in "\"'`":
            end = _skip_string(text, i)
            body = text[i + 1 : end - 1]
            out.append(c + "".join(ch if ch == "\n" else " " for ch in body) + c)
            i = end
        else:
            out.append(c)
            i += 1
    return "".join(out)


def _match_close(text: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index``."""
    stack = [_OPENERS[text[open_index]]]
    i = open_index + 1
    while i < len(text):
        c = text[i]
        if c in "\"'`":
            i = _skip_string(text, i)
            continue
        if c in _OPENERS:
            stack.append(_OPENERS[c])
        elif stack and c == stack[-1]:
            stack.pop()
            if not stack:
                return i
        i += 1
    raise ValueError(f"unbalanced {text[open_index]!r} at offset {open_index}")


def _split_entries(body: str, offset: int) -> list[tuple[str, int]]:
    """Split a struct body into field entries at top-level newlines and ';'."""
    entries: list[tuple[str, int]] = []
    depth = 0
    start = 0
    i = 0
    while i < len(body):
        c = body[i]
        if c in "\"'`":
            i = _skip_string(body, i)
            continue
        if c in _OPENERS:
            depth += 1
        elif c in _OPENERS.values():
            depth -= 1
        elif depth == 0 and c in "\n;":
            entries.append((body[start:i], offset + start))
            start = i + 1
        i += 1
    entries.append((body[start:], offset + start))
    return [(e, pos) for e, pos in entries if e.strip()]


def _split_tag(entry: str) -> tuple[str, str | None]:
    """Separate a trailing tag literal from a field entry."""
    depth = 0
    last_literal: tuple[int, int] | None = None
    i = 0
    while i < len(entry):
        c = entry[i]
        if c in "\"`":
            end = _skip_string(entry, i)
            if depth == 0:
                last_literal = (i, end)
            i = end
            continue
        if c == "'":
            i = _skip_string(entry, i)
            continue
        if c in _OPENERS:
            depth += 1
        elif c in _OPENERS.values():
            depth -= 1
        i += 1

    stripped = entry.rstrip()
    if last_literal is not None and last_literal[1] == len(stripped):
        start, end = last_literal
        return entry[:start].strip(), entry[start:end]
    return stripped.strip(), None


def _line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def _parse_fields(text: str, open_index: int, close_index: int) -> list[FieldDecl]:
    fields: list[FieldDecl] = []
    body = text[open_index + 1 : close_index]
    for entry, pos in _split_entries(body, open_index + 1):
        decl, tag = _split_tag(entry)
        m = FIELD_PATTERN.match(decl)
        if m is None:
            # embedded field, no name of its own
            continue
        names = [n.strip() for n in m.group(1).split(",")]
        type_text = " ".join(m.group(2).split())
        line = _line_of(text, pos + len(entry) - len(entry.lstrip()))
        for name in names:
            fields.append(FieldDecl(name=name, type=type_text, tag=tag, line=line))
    return fields


def _type_param_names(params: str | None) -> tuple[str, ...]:
    """Names declared by a type parameter list, e.g. ``K comparable, V any``."""
    if not params:
        return ()
    names: list[str] = []
    depth = 0
    start = 0
    for i, c in enumerate(params + ","):
        if c in _OPENERS:
            depth += 1
        elif c in _OPENERS.values():
            depth -= 1
        elif c == "," and depth == 0:
            part = params[start:i].split()
            start = i + 1
            if not part:
                continue
            if not IDENT_PATTERN.fullmatch(part[0]):
                raise ValueError(f"invalid type parameter list: [{params}]")
            names.append(part[0])
    return tuple(names)


def _record_decl(text: str, masked: str, m: re.Match[str]) -> tuple[RecordDecl, int]:
    """Build the declaration matched by ``m``; also return its closing index."""
    open_index = m.end() - 1
    close_index = _match_close(masked, open_index)
    decl = RecordDecl(
        name=m.group(1),
        fields=tuple(_parse_fields(text, open_index, close_index)),
        line=_line_of(text, m.start(1)),
        type_params=_type_param_names(m.group(2)),
    )
    return decl, close_index


def _scan_structs(text: str, masked: str, start: int, end: int) -> list[RecordDecl]:
    records: list[RecordDecl] = []
    pos = start
    while True:
        m = GROUP_STRUCT_PATTERN.search(masked, pos, end)
        if m is None:
            return records
        decl, close_index = _record_decl(text, masked, m)
        records.append(decl)
        pos = close_index + 1


def scan_source(source: str, path: Path | None = None) -> SourceFile:
    """Extract the package name and struct declarations from Go source."""
    text = strip_comments(source)
    # declarations are searched for in code only, never inside literals
    masked = mask_literals(text)
    pkg = PACKAGE_PATTERN.search(masked)

    found: list[RecordDecl] = []
    pos = 0
    while True:
        single = TYPE_STRUCT_PATTERN.search(masked, pos)
        group = TYPE_GROUP_PATTERN.search(masked, pos)
        if single is None and group is None:
            break

        if group is not None and (single is None or group.start() < single.start()):
            open_index = group.end() - 1
            close_index = _match_close(masked, open_index)
            found.extend(_scan_structs(text, masked, open_index + 1, close_index))
            pos = close_index + 1
            continue

        decl, close_index = _record_decl(text, masked, single)
        found.append(decl)
        pos = close_index + 1

    return SourceFile(
        package=pkg.group(1) if pkg else None,
        records=found,
        path=path,
    )


def scan_file(path: Path) -> SourceFile:
    """Read and scan a Go source file."""
    return scan_source(path.read_text(encoding="utf-8"), path=path)
