"""
Scanner for `/// nif:` annotated Zig source.

`parse` turns an annotated Zig block into the code to compile plus the list of
validated NIF declarations found in it.
"""

from .ast import Declaration, Located, NifOption, ParseOutcome
from .diagnostics import Diagnostic, NifParseError, Span
from .parser import parse
from .types import TypeSpelling, recognize_type

__all__ = [
    "Declaration",
    "Diagnostic",
    "Located",
    "NifOption",
    "NifParseError",
    "ParseOutcome",
    "Span",
    "TypeSpelling",
    "parse",
    "recognize_type",
]
