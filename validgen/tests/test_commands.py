"""Tests for the generate and inspection commands."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from validgen.commands.generate import compute_generate_plan, execute_generate_plan, run_generate
from validgen.commands.tags_cmd import run_directives, run_tags
from validgen.config import GenerateConfig


@pytest.fixture
def workspace(tmp_path: Path, fixture_models_path: Path) -> GenerateConfig:
    source = tmp_path / "models.go"
    shutil.copy(fixture_models_path, source)
    return GenerateConfig(source=source, output=tmp_path / "out" / "models_validate.go", package="main_test")


def test_generate_writes_file(workspace: GenerateConfig, capsys) -> None:
    exit_code = run_generate(workspace)

    assert exit_code == 0
    content = workspace.output.read_text(encoding="utf-8")
    assert content.startswith("// Code generated by validgen. DO NOT EDIT.\n")
    assert "package main_test\n" in content
    assert "func (g Gte) Validate() error {" in content

    captured = capsys.readouterr()
    assert "Wrote 3 Validate method(s)" in captured.err


def test_generate_twice_is_up_to_date(workspace: GenerateConfig, capsys) -> None:
    assert run_generate(workspace) == 0
    mtime = workspace.output.stat().st_mtime_ns
    capsys.readouterr()

    assert run_generate(workspace) == 0
    assert workspace.output.stat().st_mtime_ns == mtime
    assert "up to date" in capsys.readouterr().err


def test_generate_failure_writes_nothing(workspace: GenerateConfig, capsys) -> None:
    text = workspace.source.read_text(encoding="utf-8")
    workspace.source.write_text(text.replace('`validate:"eqfield=Field1"`', '`validate:"oneof=a"`'))

    assert run_generate(workspace) == 1
    assert not workspace.output.exists()
    assert "oneof" in capsys.readouterr().err


def test_generate_malformed_tag_fails(workspace: GenerateConfig, capsys) -> None:
    text = workspace.source.read_text(encoding="utf-8")
    workspace.source.write_text(text.replace('`validate:"eqfield=Field1"`', '`validate:eqfield`'))

    assert run_generate(workspace) == 1
    assert not workspace.output.exists()
    assert "malformed tag" in capsys.readouterr().err


def test_generate_missing_source(tmp_path: Path, capsys) -> None:
    config = GenerateConfig(source=tmp_path / "missing.go", output=tmp_path / "out.go")
    assert run_generate(config) == 1
    assert "cannot read" in capsys.readouterr().err


def test_dry_run_does_not_write(workspace: GenerateConfig, capsys) -> None:
    assert run_generate(workspace, dry_run=True) == 0
    assert not workspace.output.exists()

    err = capsys.readouterr().err
    assert "DRY RUN" in err
    assert "Records with validations: 3" in err
    assert "Output file will be created" in err


def test_plan_is_pure_then_executes(workspace: GenerateConfig) -> None:
    plan = compute_generate_plan(workspace)

    assert not workspace.output.exists()
    assert [p.record.name for p in plan.procedures] == ["Required", "Eqfield", "Gte"]
    assert plan.check_count == 6
    assert len(plan.scanned.records) == 4

    result = execute_generate_plan(plan)
    assert result.success
    assert result.bytes_written == len(plan.content.encode("utf-8"))
    assert workspace.output.read_text(encoding="utf-8") == plan.content


def test_tags_table(capsys) -> None:
    assert run_tags('`validate:"required,gte=Min" json:"n"`') == 0
    out = capsys.readouterr().out
    assert "required" in out
    assert "'Min'" in out


def test_tags_json(capsys) -> None:
    assert run_tags('`validate:"required,eqfield=Other"`', output_json=True) == 0
    assert json.loads(capsys.readouterr().out) == {"required": [], "eqfield": ["Other"]}


def test_tags_malformed(capsys) -> None:
    assert run_tags('`validate:"required`') == 1
    assert "malformed tag" in capsys.readouterr().err


def test_directives_json(capsys) -> None:
    assert run_directives(output_json=True) == 0
    rows = {row["name"]: row for row in json.loads(capsys.readouterr().out)}
    assert set(rows) == {"required", "eqfield", "gte"}
    assert rows["required"]["arity"] == 0
    assert rows["gte"]["kinds"] == ["other"]
