"""Tests for Go source scanning."""

import pytest

from validgen.golang.scanner import SourceFile, mask_literals, scan_source, strip_comments


def test_scan_fixture(fixture_source: SourceFile) -> None:
    assert fixture_source.package == "main_test"
    assert [r.name for r in fixture_source.records] == ["Required", "Eqfield", "Gte", "Plain"]

    required = fixture_source.records[0]
    assert [(f.name, f.type) for f in required.fields] == [
        ("String", "string"),
        ("StringPointer", "*string"),
        ("Slice", "[]struct{}"),
        ("Map", "map[string]struct{}"),
    ]
    assert all(f.tag == '`validate:"required"`' for f in required.fields)

    eq = fixture_source.records[1]
    assert eq.fields[0].tag is None
    assert eq.fields[1].tag == '`validate:"eqfield=Field1"`'


def test_scan_records_line_numbers(fixture_source: SourceFile) -> None:
    required = fixture_source.records[0]
    assert required.line == 6
    assert required.fields[0].line == 7


def test_scan_type_group_and_shared_names() -> None:
    src = """package models

type (
	ID int

	Range struct {
		Min, Max float64 `validate:"gte=Floor"`
		Floor    float64
	}
)
"""
    scanned = scan_source(src)
    assert [r.name for r in scanned.records] == ["Range"]
    fields = scanned.records[0].fields
    assert [f.name for f in fields] == ["Min", "Max", "Floor"]
    assert fields[0].tag == fields[1].tag == '`validate:"gte=Floor"`'
    assert fields[2].tag is None


def test_scan_ignores_comments_and_embedded_fields() -> None:
    src = """package models

// type Fake struct { X string `validate:"required"` }
/* type Other struct {
	Y string
} */
type User struct {
	Base // embedded
	*Audit
	Name string `validate:"required"` // trailing comment
	Note string "plain string tag"
	Tags []string; Meta map[string]string `validate:"required"`
}
"""
    scanned = scan_source(src)
    assert [r.name for r in scanned.records] == ["User"]
    fields = {f.name: f for f in scanned.records[0].fields}
    assert list(fields) == ["Name", "Note", "Tags", "Meta"]
    assert fields["Name"].tag == '`validate:"required"`'
    assert fields["Note"].tag == '"plain string tag"'
    assert fields["Tags"].tag is None
    assert fields["Meta"].type == "map[string]string"


def test_scan_nested_struct_type_is_one_field() -> None:
    src = """package models

type Outer struct {
	Inner struct {
		Deep string `validate:"required"`
	} `validate:"required"`
	After string
}

func (o Outer) String() string { return "}" }
"""
    scanned = scan_source(src)
    outer = scanned.records[0]
    assert [f.name for f in outer.fields] == ["Inner", "After"]
    assert outer.fields[0].type.startswith("struct {")
    assert outer.fields[0].tag == '`validate:"required"`'


def test_scan_generic_struct() -> None:
    scanned = scan_source('package p\n\ntype Box[T any] struct {\n\tItems []T `validate:"required"`\n}\n')
    assert scanned.records[0].name == "Box"
    assert scanned.records[0].type_params == ("T",)
    assert scanned.records[0].fields[0].type == "[]T"


def test_scan_type_parameter_names() -> None:
    src = """package p

type Pair[K comparable, V any] struct {
	Keys []K `validate:"required"`
}

type Set[S ~[]E, E interface{ ~int | ~string }] struct {
	Items S
}
"""
    pair, set_ = scan_source(src).records
    assert pair.type_params == ("K", "V")
    assert set_.type_params == ("S", "E")


def test_scan_non_generic_struct_has_no_type_params(fixture_source: SourceFile) -> None:
    assert all(r.type_params == () for r in fixture_source.records)


def test_strip_comments_keeps_strings_and_lines() -> None:
    src = 'a := "// not a comment" // real\nb := `/* raw */`\n/* x\ny */ c'
    stripped = strip_comments(src)
    assert '"// not a comment"' in stripped
    assert "`/* raw */`" in stripped
    assert "real" not in stripped
    assert stripped.count("\n") == src.count("\n")


def test_unbalanced_struct_is_an_error() -> None:
    with pytest.raises(ValueError):
        scan_source("package p\ntype A struct {\n\tX string\n")


def test_declarations_inside_string_literals_are_ignored() -> None:
    src = """package models

var s = "type Fake struct {"
var r = `type Raw struct {
	X string
`

type User struct {
	Name string `validate:"required"`
}
"""
    scanned = scan_source(src)
    assert [r.name for r in scanned.records] == ["User"]
    assert scanned.records[0].fields[0].tag == '`validate:"required"`'
    assert scanned.records[0].line == 8


def test_mask_literals_keeps_offsets() -> None:
    src = 'a := "x{y"\nb := `p\nq`\nc := \'}\''
    masked = mask_literals(src)
    assert len(masked) == len(src)
    assert masked == 'a := "   "\nb := ` \n `\nc := \' \''
