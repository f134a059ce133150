"""Directive registry and procedure assembly (directives as data, checks as code)."""

from .directives import DIRECTIVES, DirectiveRule, generate, lookup
from .engine import assemble, assemble_all
from .schema import Check, GeneratedProcedure, NoError

__all__ = [
    "DIRECTIVES",
    "DirectiveRule",
    "generate",
    "lookup",
    "assemble",
    "assemble_all",
    "Check",
    "GeneratedProcedure",
    "NoError",
]
