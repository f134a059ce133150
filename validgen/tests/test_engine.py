"""Tests for procedure assembly and end-to-end check semantics."""

import pytest

from validgen.errors import ArityError, UnsupportedDirectiveError
from validgen.models import Field, FieldType, Record
from validgen.rules.engine import ERROR_IMPORTS, assemble, assemble_all
from validgen.rules.schema import Check, NoError


def _field(name: str, type_text: str, validations: dict[str, list[str]]) -> Field:
    return Field(name=name, type=FieldType.parse(type_text), validations=validations)


def test_assemble_orders_checks_by_field_then_terminates(fixture_records: dict[str, Record]) -> None:
    proc = assemble(fixture_records["Required"])

    assert [c.field for c in proc.checks] == ["String", "StringPointer", "Slice", "Map"]
    assert isinstance(proc.body[-1], NoError)
    assert sum(isinstance(s, NoError) for s in proc.body) == 1
    assert proc.imports == ERROR_IMPORTS


def test_every_directive_of_a_field_is_compiled_once() -> None:
    record = Record(
        name="Pair",
        fields=(_field("B", "string", {"required": [], "eqfield": ["A"]}),),
    )
    proc = assemble(record)
    assert sorted(c.directive for c in proc.checks) == ["eqfield", "required"]


def test_record_without_fields_yields_terminator_only() -> None:
    proc = assemble(Record(name="Empty"))
    assert proc.body == (NoError(),)
    assert proc.imports == frozenset()
    assert proc.run({}) is None


def test_field_without_validations_is_not_dropped_silently() -> None:
    record = Record(name="Bad", fields=(_field("A", "string", {}),))
    with pytest.raises(ValueError):
        assemble(record)


def test_assemble_all_aborts_whole_batch() -> None:
    good = Record(name="Good", fields=(_field("A", "string", {"required": []}),))
    bad = Record(name="Bad", fields=(_field("A", "string", {"oneof": ["x"]}),))
    with pytest.raises(UnsupportedDirectiveError):
        assemble_all([good, bad])


def test_assemble_all_reports_arity_errors() -> None:
    bad = Record(name="Bad", fields=(_field("A", "int", {"eqfield": ["B", "C"]}),))
    with pytest.raises(ArityError):
        assemble_all([bad])


# -----------------------------------------------------------------------------
# End-to-end scenarios over the Go fixture
# -----------------------------------------------------------------------------


VALID_REQUIRED = {
    "String": "string",
    "StringPointer": "",
    "Slice": [{}],
    "Map": {"key": {}},
}


def test_required_valid(fixture_records: dict[str, Record]) -> None:
    proc = assemble(fixture_records["Required"])
    assert proc.run(VALID_REQUIRED) is None


@pytest.mark.parametrize(
    "mutation, message",
    [
        ({"String": ""}, 'field "String" is required'),
        ({"StringPointer": None}, 'field "StringPointer" is required'),
        ({"Slice": []}, 'field "Slice" is required'),
        ({"Slice": None}, 'field "Slice" is required'),
        ({"Map": {}}, 'field "Map" is required'),
        ({"Map": None}, 'field "Map" is required'),
    ],
)
def test_required_invalid(fixture_records: dict[str, Record], mutation: dict, message: str) -> None:
    proc = assemble(fixture_records["Required"])
    assert proc.run({**VALID_REQUIRED, **mutation}) == message


def test_required_pointer_to_empty_string_passes(fixture_records: dict[str, Record]) -> None:
    proc = assemble(fixture_records["Required"])
    assert proc.run({**VALID_REQUIRED, "StringPointer": ""}) is None


def test_first_violation_wins(fixture_records: dict[str, Record]) -> None:
    proc = assemble(fixture_records["Required"])
    assert proc.run({**VALID_REQUIRED, "String": "", "Map": {}}) == 'field "String" is required'


def test_eqfield(fixture_records: dict[str, Record]) -> None:
    proc = assemble(fixture_records["Eqfield"])
    assert proc.run({"Field1": "foo", "Field2": "foo"}) is None
    assert proc.run({"Field1": "foo", "Field2": "bar"}) == 'field "Field2" must be equal to "Field1"'


def test_gte(fixture_records: dict[str, Record]) -> None:
    proc = assemble(fixture_records["Gte"])
    assert proc.run({"One": 1, "Two": 1.2}) is None
    assert proc.run({"One": 2, "Two": -0.3}) == 'field "Two" must greater or equal than "One"'
    assert proc.run({"One": 3, "Two": 3.0}) is None


def test_checks_are_immutable(fixture_records: dict[str, Record]) -> None:
    check = assemble(fixture_records["Eqfield"]).checks[0]
    assert isinstance(check, Check)
    with pytest.raises(AttributeError):
        check.template = "changed"  # type: ignore[misc]
