"""Go source scanning and emission."""

from .emit import render_file
from .scanner import SourceFile, scan_file, scan_source

__all__ = ["render_file", "SourceFile", "scan_file", "scan_source"]
