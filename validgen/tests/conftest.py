"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from validgen.golang.scanner import SourceFile, scan_file
from validgen.models import Record
from validgen.records import find_records


@pytest.fixture
def fixture_models_path() -> Path:
    """Path to the Go fixture with Required, Eqfield, Gte and Plain structs."""
    return Path(__file__).parent / "fixtures" / "models.go"


@pytest.fixture
def fixture_source(fixture_models_path: Path) -> SourceFile:
    """Scan the Go fixture."""
    return scan_file(fixture_models_path)


@pytest.fixture
def fixture_records(fixture_source: SourceFile) -> dict[str, Record]:
    """Records built from the Go fixture, keyed by name."""
    return {r.name: r for r in find_records(fixture_source.records)}
