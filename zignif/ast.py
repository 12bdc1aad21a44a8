from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .types import TypeSpelling


@dataclass(frozen=True)
class Located:
    file: str
    line: int


@dataclass(frozen=True)
class SourceLine:
    text: str
    loc: Located


class NifOption(str, Enum):
    """Execution strategy flags accepted after `name/arity`."""

    LONG = "long"
    DIRTY = "dirty"
    THREADED = "threaded"

    def __str__(self) -> str:  # pragma: no cover - trivial repr
        return self.value


@dataclass(frozen=True)
class PendingAnnotation:
    name: str
    arity: int
    opts: Tuple[NifOption, ...]
    loc: Located


@dataclass(frozen=True)
class Declaration:
    name: str
    arity: int
    params: Tuple[TypeSpelling, ...]
    retval: TypeSpelling
    doc: Optional[str] = None
    opts: Tuple[NifOption, ...] = ()
    # Leading `beam.env` / `?*e.ErlNifEnv` parameter. The runtime supplies it,
    # so it is neither in `params` nor counted in `arity`.
    env: Optional[TypeSpelling] = None
    loc: Optional[Located] = field(default=None, compare=False)

    @property
    def signature(self) -> str:
        params = [str(t) for t in self.params]
        if self.env is not None:
            params.insert(0, str(self.env))
        return f"{self.name}({', '.join(params)}) {self.retval}"


@dataclass
class ParseOutcome:
    code: str
    declarations: List[Declaration] = field(default_factory=list)
