"""
Plan/result objects separating computation from writing.

A plan is produced by a pure pass over the inputs; only executing it touches
the filesystem. A failed computation therefore never leaves partial output.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from .golang.scanner import SourceFile
from .models import Record
from .rules.schema import GeneratedProcedure


@dataclass
class BasePlan(ABC):
    """Base class for generation plans."""
    source: Path

    @abstractmethod
    def summary(self) -> str:
        """Human-readable summary of what would be done."""
        ...


@dataclass
class BaseResult:
    """Base class for plan execution results."""
    success: bool = True
    error: str | None = None
    bytes_written: int = 0


@dataclass
class GeneratePlan(BasePlan):
    """Plan for writing one generated Go file."""
    output: Path
    package: str
    scanned: SourceFile | None = None
    records: list[Record] = field(default_factory=list)
    procedures: list[GeneratedProcedure] = field(default_factory=list)
    content: str = ""
    existing_content: str | None = None

    @property
    def check_count(self) -> int:
        return sum(len(p.checks) for p in self.procedures)

    @property
    def unchanged(self) -> bool:
        return self.existing_content == self.content

    def summary(self) -> str:
        declared = len(self.scanned.records) if self.scanned else 0
        lines = [
            "Generate Plan",
            f"  Source: {self.source}",
            f"  Output: {self.output} (package {self.package})",
            f"  Struct types scanned: {declared}",
            f"  Records with validations: {len(self.records)}",
            f"  Checks: {self.check_count}",
        ]
        if self.existing_content is None:
            lines.append("  Output file will be created")
        elif self.unchanged:
            lines.append("  Output file is up to date")
        else:
            before = len(self.existing_content.encode("utf-8"))
            after = len(self.content.encode("utf-8"))
            lines.append(f"  Size change: {before} -> {after} bytes")
        return "\n".join(lines)


@dataclass
class GenerateResult(BaseResult):
    """Result of writing a generated file."""
    output_path: Path | None = None
