from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional


class TypeSpelling(str, Enum):
    """Closed vocabulary of Zig types accepted in a NIF signature."""

    BOOL = "bool"
    VOID = "void"

    U8 = "u8"
    I32 = "i32"
    I64 = "i64"
    C_INT = "c_int"
    C_LONG = "c_long"
    ISIZE = "isize"
    USIZE = "usize"

    F16 = "f16"
    F32 = "f32"
    F64 = "f64"

    BEAM_ENV = "beam.env"
    BEAM_PID = "beam.pid"
    BEAM_ATOM = "beam.atom"
    BEAM_TERM = "beam.term"
    BEAM_BINARY = "beam.binary"
    BEAM_RES = "beam.res"

    ERL_NIF_ENV = "?*e.ErlNifEnv"
    ERL_NIF_TERM = "e.ErlNifTerm"
    ERL_NIF_PID = "e.ErlNifPid"
    ERL_NIF_BINARY = "e.ErlNifBinary"

    SLICE_U8 = "[]u8"
    SLICE_C_INT = "[]c_int"
    SLICE_C_LONG = "[]c_long"
    SLICE_I32 = "[]i32"
    SLICE_I64 = "[]i64"
    SLICE_F16 = "[]f16"
    SLICE_F32 = "[]f32"
    SLICE_F64 = "[]f64"
    SLICE_BEAM_TERM = "[]beam.term"

    C_STRING = "[*c]u8"

    def __str__(self) -> str:  # pragma: no cover - trivial repr
        return self.value

    @property
    def is_slice(self) -> bool:
        return self.value.startswith("[]")

    @property
    def element(self) -> Optional["TypeSpelling"]:
        """Element type of a slice, None for everything else."""
        if not self.is_slice:
            return None
        return TypeSpelling(self.value[2:])


_SCALARS: Dict[str, TypeSpelling] = {
    t.value: t for t in TypeSpelling if not t.value.startswith("[")
}

_SLICES: Dict[str, TypeSpelling] = {
    t.value[2:]: t for t in TypeSpelling if t.is_slice
}

ENV_HANDLES = frozenset({TypeSpelling.BEAM_ENV, TypeSpelling.ERL_NIF_ENV})

# `[*c]` must be tried before `[]`: both open with a bracket.
_C_STRING_RE = re.compile(r"\[\s*\*\s*c\s*\]\s*u8")
_SLICE_RE = re.compile(r"\[\s*\]\s*(\S+)")


def recognize_type(text: str) -> Optional[TypeSpelling]:
    """
    Map a type as written in Zig source to its canonical spelling.

    Surrounding whitespace is ignored, as is whitespace inside and after the
    brackets of pointer/slice forms (`[ * c ] u8`, `[ ] i64`). Returns None for
    anything outside the vocabulary; callers decide whether that is an error.
    """
    text = text.strip()
    if not text:
        return None
    if _C_STRING_RE.fullmatch(text):
        return TypeSpelling.C_STRING
    m = _SLICE_RE.fullmatch(text)
    if m:
        return _SLICES.get(m.group(1))
    return _SCALARS.get(text)


def is_env_handle(t: TypeSpelling) -> bool:
    return t in ENV_HANDLES


__all__ = ["TypeSpelling", "ENV_HANDLES", "recognize_type", "is_env_handle"]
