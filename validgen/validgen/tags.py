"""Struct tag parsing: extract `validate` directives from a raw tag.

For the tag

    `validate:"required,oneof=red green blue,oneof=r g b" json:"name"`

the whole expression is delimited by raw quotes (backticks) and made of
space separated ``key:"value"`` pairs. Only the ``validate`` pair is decoded;
its value is a comma separated list of directives, each either a bare name
(``required``) or ``name=argument`` (``oneof=red green blue``).

Parsing is a small state machine driven by an explicit transition table
keyed by ``(State, Char)``:

    begin        -> tagKey          first rune of a tag key
    tagKey       -> tagSeparator    ':' closes the key
    tagSeparator -> tagValue        '"' opens the value
    tagValue     -> pairKey         first rune of a directive name
    pairKey      -> pairKeyValueSeparator | pairSeparator | begin
    pairKeyValueSeparator -> pairValue
    pairValue    -> pairSeparator | begin
    pairSeparator -> pairKey
    begin        -> end             closing raw quote

Values of other pairs (``json:"name"``) are consumed without accumulation.
There is no escaping: an argument cannot contain ``,``, ``=`` or ``"``.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from .errors import TagFormatError
from .log import BoundLogger, get_logger
from .models import Validations

RAW_QUOTE = "`"
VALIDATE_KEY = "validate"


class State(Enum):
    BEGIN = "begin"
    TAG_KEY = "tagKey"
    TAG_SEPARATOR = "tagSeparator"
    TAG_VALUE = "tagValue"
    PAIR_KEY = "pairKey"
    PAIR_KEY_VALUE_SEPARATOR = "pairKeyValueSeparator"
    PAIR_VALUE = "pairValue"
    PAIR_SEPARATOR = "pairSeparator"
    END = "end"


class Char(Enum):
    RAW_QUOTE = "raw quote '`'"
    SPACE = "space"
    COLON = "colon ':'"
    QUOTE = "quote '\"'"
    COMMA = "comma ','"
    EQUALS = "equal sign '='"
    OTHER = "name character"


_SPECIAL = {
    "`": Char.RAW_QUOTE,
    ":": Char.COLON,
    '"': Char.QUOTE,
    ",": Char.COMMA,
    "=": Char.EQUALS,
}


def classify_char(c: str) -> Char:
    if c.isspace():
        return Char.SPACE
    return _SPECIAL.get(c, Char.OTHER)


class _TagParser:
    """Accumulator for one tag; fed one rune at a time."""

    def __init__(self, tag: str, log: BoundLogger):
        self.tag = tag
        self.log = log
        self.state = State.BEGIN
        self.index = 0
        # True while inside a pair whose key is not `validate`
        self.skip = False
        self.buf: list[str] = []
        self.tag_key = ""
        self.key: str | None = None
        self.vals: Validations = {}

    def feed(self, index: int, c: str) -> None:
        self.index = index
        char = classify_char(c)
        action = _TRANSITIONS.get((self.state, char))
        if action is None:
            raise self.error(f"unexpected {char.value}, expected {_expected(self.state)}", c)
        self.state = action(self, c)

    def finish(self) -> Validations:
        """Consume the closing raw quote."""
        self.index = len(self.tag) - 1
        if self.state is not State.BEGIN:
            if self.state is State.TAG_KEY and "".join(self.buf) == VALIDATE_KEY:
                raise self.error("tag 'validate' must be followed by quoted validations", RAW_QUOTE)
            if self.state is State.TAG_KEY:
                raise self.error("tag key must be followed by ':'", RAW_QUOTE)
            if self.state is State.TAG_SEPARATOR:
                raise self.error(f"tag {self.tag_key!r} must be followed by a quoted value", RAW_QUOTE)
            raise self.error("unterminated tag value, expected closing quote '\"'", RAW_QUOTE)
        self.state = State.END
        return self.vals

    def error(self, reason: str, c: str | None = None) -> TagFormatError:
        return TagFormatError(reason, self.tag, self.index, self.state.value, c)

    # -- accumulation ------------------------------------------------------

    def store_key(self) -> None:
        self.key = "".join(self.buf)
        self.buf = []
        self.vals.setdefault(self.key, [])
        self.log.bind(directive=self.key).debug("closed directive")

    def store_value(self) -> None:
        value = "".join(self.buf)
        self.buf = []
        if self.key is None:
            raise self.error("argument without a directive name")
        self.vals[self.key].append(value)
        self.log.bind(directive=self.key, argument=value).debug("closed argument")


# -----------------------------------------------------------------------------
# Transition actions: each returns the next state or raises TagFormatError.
# -----------------------------------------------------------------------------

Action = Callable[[_TagParser, str], State]


def _stay(p: _TagParser, c: str) -> State:
    return p.state


def _append(p: _TagParser, c: str) -> State:
    p.buf.append(c)
    return p.state


def _start_tag_key(p: _TagParser, c: str) -> State:
    p.buf = [c]
    return State.TAG_KEY


def _rejecting(action: Action) -> Action:
    action.rejects = True  # type: ignore[attr-defined]
    return action


@_rejecting
def _space_in_tag_key(p: _TagParser, c: str) -> State:
    raise p.error(f"space in tag key {''.join(p.buf)!r} not allowed", c)


def _close_tag_key(p: _TagParser, c: str) -> State:
    p.tag_key = "".join(p.buf)
    p.buf = []
    p.skip = p.tag_key != VALIDATE_KEY
    if p.skip:
        p.log.bind(key=p.tag_key).debug("tag is not 'validate', skipping value")
    return State.TAG_SEPARATOR


def _open_tag_value(p: _TagParser, c: str) -> State:
    return State.TAG_VALUE


@_rejecting
def _space_after_separator(p: _TagParser, c: str) -> State:
    raise p.error(f"space not allowed after {p.tag_key!r}:, expected quote '\"'", c)


def _unquoted_tag_value(p: _TagParser, c: str) -> State:
    if not p.skip:
        raise p.error("tag 'validate' must be followed by a quoted value", c)
    return State.TAG_VALUE


def _tag_value_name(p: _TagParser, c: str) -> State:
    if p.skip:
        return State.TAG_VALUE
    p.buf = [c]
    return State.PAIR_KEY


def _tag_value_only_skipped(reason: str) -> Action:
    def action(p: _TagParser, c: str) -> State:
        if p.skip:
            return State.TAG_VALUE
        raise p.error(reason, c)

    return action


def _close_tag_value(p: _TagParser, c: str) -> State:
    p.skip = False
    return State.BEGIN


def _key_then(nxt: State) -> Action:
    def action(p: _TagParser, c: str) -> State:
        p.store_key()
        return nxt

    return action


def _value_then(nxt: State) -> Action:
    def action(p: _TagParser, c: str) -> State:
        p.store_value()
        return nxt

    return action


def _start_pair_value(p: _TagParser, c: str) -> State:
    p.buf = [c]
    return State.PAIR_VALUE


def _start_pair_key(p: _TagParser, c: str) -> State:
    p.buf = [c]
    return State.PAIR_KEY


def _reject(reason: str) -> Action:
    def action(p: _TagParser, c: str) -> State:
        raise p.error(reason, c)

    return _rejecting(action)


_TRANSITIONS: dict[tuple[State, Char], Action] = {
    # between pairs
    (State.BEGIN, Char.SPACE): _stay,
    (State.BEGIN, Char.OTHER): _start_tag_key,
    # tag key, e.g. `validate` or `json`
    (State.TAG_KEY, Char.OTHER): _append,
    (State.TAG_KEY, Char.COLON): _close_tag_key,
    (State.TAG_KEY, Char.SPACE): _space_in_tag_key,
    # right after ':'
    (State.TAG_SEPARATOR, Char.QUOTE): _open_tag_value,
    (State.TAG_SEPARATOR, Char.SPACE): _space_after_separator,
    (State.TAG_SEPARATOR, Char.OTHER): _unquoted_tag_value,
    (State.TAG_SEPARATOR, Char.COLON): _unquoted_tag_value,
    (State.TAG_SEPARATOR, Char.COMMA): _unquoted_tag_value,
    (State.TAG_SEPARATOR, Char.EQUALS): _unquoted_tag_value,
    # inside quotes, before any directive structure
    (State.TAG_VALUE, Char.OTHER): _tag_value_name,
    (State.TAG_VALUE, Char.COLON): _tag_value_name,
    (State.TAG_VALUE, Char.SPACE): _tag_value_only_skipped("space not allowed before directive name"),
    (State.TAG_VALUE, Char.COMMA): _tag_value_only_skipped("empty directive name before ','"),
    (State.TAG_VALUE, Char.EQUALS): _tag_value_only_skipped("empty directive name before '='"),
    (State.TAG_VALUE, Char.QUOTE): _close_tag_value,
    # directive name
    (State.PAIR_KEY, Char.OTHER): _append,
    (State.PAIR_KEY, Char.COLON): _append,
    (State.PAIR_KEY, Char.EQUALS): _key_then(State.PAIR_KEY_VALUE_SEPARATOR),
    (State.PAIR_KEY, Char.COMMA): _key_then(State.PAIR_SEPARATOR),
    (State.PAIR_KEY, Char.QUOTE): _key_then(State.BEGIN),
    (State.PAIR_KEY, Char.SPACE): _reject("space in directive name not allowed"),
    # right after '='
    (State.PAIR_KEY_VALUE_SEPARATOR, Char.OTHER): _start_pair_value,
    (State.PAIR_KEY_VALUE_SEPARATOR, Char.COLON): _start_pair_value,
    (State.PAIR_KEY_VALUE_SEPARATOR, Char.SPACE): _start_pair_value,
    (State.PAIR_KEY_VALUE_SEPARATOR, Char.QUOTE): _reject("expected argument after '=', got closing quote"),
    (State.PAIR_KEY_VALUE_SEPARATOR, Char.COMMA): _reject("expected argument after '=', got ','"),
    (State.PAIR_KEY_VALUE_SEPARATOR, Char.EQUALS): _reject("expected argument after '=', got '='"),
    # directive argument, spaces allowed
    (State.PAIR_VALUE, Char.OTHER): _append,
    (State.PAIR_VALUE, Char.COLON): _append,
    (State.PAIR_VALUE, Char.SPACE): _append,
    (State.PAIR_VALUE, Char.COMMA): _value_then(State.PAIR_SEPARATOR),
    (State.PAIR_VALUE, Char.QUOTE): _value_then(State.BEGIN),
    (State.PAIR_VALUE, Char.EQUALS): _reject("'=' is only allowed after a directive name"),
    # right after ','
    (State.PAIR_SEPARATOR, Char.OTHER): _start_pair_key,
    (State.PAIR_SEPARATOR, Char.COLON): _start_pair_key,
    (State.PAIR_SEPARATOR, Char.COMMA): _reject("empty directive name between ','"),
    (State.PAIR_SEPARATOR, Char.QUOTE): _reject("dangling ',' before closing quote"),
    (State.PAIR_SEPARATOR, Char.SPACE): _reject("space not allowed after ','"),
    (State.PAIR_SEPARATOR, Char.EQUALS): _reject("empty directive name before '='"),
}


def _expected(state: State) -> str:
    accepted = [
        char.value
        for (s, char), action in _TRANSITIONS.items()
        if s is state and not getattr(action, "rejects", False)
    ]
    return ", ".join(accepted) if accepted else "nothing"


def parse_tag(raw: str, log: BoundLogger | None = None) -> Validations:
    """Parse the `validate` directives out of a raw struct tag.

    Returns an empty mapping when the tag has no `validate` pair.

    Raises:
        TagFormatError: the tag does not follow the annotation grammar.
    """
    log = get_logger(log).bind(tag=raw)
    log.debug("parsing validations")

    if len(raw) < 2 or raw[0] != RAW_QUOTE or raw[-1] != RAW_QUOTE:
        index = len(raw) - 1 if raw[:1] == RAW_QUOTE else 0
        char = raw[index] if raw else None
        raise TagFormatError("tag must be a raw string delimited by '`'", raw, max(index, 0), State.BEGIN.value, char)

    parser = _TagParser(raw, log)
    for index in range(1, len(raw) - 1):
        parser.feed(index, raw[index])
    vals = parser.finish()

    log.bind(validations=vals).debug("parsed validations")
    return vals


def format_tag(validations: Validations, extra: dict[str, str] | None = None) -> str:
    """Render directives (and optional other pairs) as a raw struct tag.

    Raises:
        ValueError: a name or argument cannot be expressed in the grammar.
    """
    specs: list[str] = []
    for name, args in validations.items():
        if not name or any(classify_char(c) is not Char.OTHER and c != ":" for c in name):
            raise ValueError(f"directive name not expressible in a tag: {name!r}")
        if not args:
            specs.append(name)
            continue
        for arg in args:
            if not arg or any(c in ',="`' for c in arg):
                raise ValueError(f"argument of {name!r} not expressible in a tag: {arg!r}")
            specs.append(f"{name}={arg}")

    pairs: list[str] = []
    if specs:
        pairs.append(f'{VALIDATE_KEY}:"{",".join(specs)}"')
    for key, value in (extra or {}).items():
        pairs.append(f'{key}:"{value}"')
    return RAW_QUOTE + " ".join(pairs) + RAW_QUOTE
