"""
Located errors for NIF declaration scanning.

`NifParseError` is the hard failure channel of the parser: it aborts the whole
parse. Front ends convert it into a `Diagnostic` for reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
    """Best-effort source location (file + 1-based line)."""

    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    @classmethod
    def from_loc(cls, loc: Any) -> "Span":
        if loc is None:
            return cls()
        if isinstance(loc, cls):
            return loc
        return cls(
            file=getattr(loc, "file", None),
            line=getattr(loc, "line", None),
            column=getattr(loc, "column", None),
        )

    def __str__(self) -> str:
        file = self.file or "<unknown>"
        if self.line is None:
            return file
        return f"{file}:{self.line}"


@dataclass
class Diagnostic:
    """Represents a compiler diagnostic (error/warning/etc.)."""

    message: str
    phase: str | None = None
    severity: str = "error"
    span: Span = field(default_factory=Span)
    notes: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.span is None:  # type: ignore[unreachable]
            self.span = Span()

    def to_json(self) -> dict:
        return {
            "phase": self.phase,
            "message": self.message,
            "severity": self.severity,
            "file": self.span.file,
            "line": self.span.line,
            "column": self.span.column,
            "notes": list(self.notes),
        }

    def render(self) -> str:
        return f"{self.span}: {self.severity}: {self.message}"


class NifParseError(ValueError):
    """
    Unrecoverable error in an annotated Zig source block.

    Carries the originating file, the 1-based line of the earliest structural
    problem, and a human-readable description. The host build is expected to
    surface it as a compile-time failure.
    """

    def __init__(self, description: str, *, loc: Any) -> None:
        self.span = Span.from_loc(loc)
        self.description = description
        super().__init__(f"{self.span}: {description}")

    @property
    def file(self) -> Optional[str]:
        return self.span.file

    @property
    def line(self) -> Optional[int]:
        return self.span.line

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(message=self.description, phase="parser", span=self.span)


__all__ = ["Span", "Diagnostic", "NifParseError"]
