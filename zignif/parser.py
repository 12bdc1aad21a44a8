from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from .ast import (
    Declaration,
    Located,
    NifOption,
    ParseOutcome,
    PendingAnnotation,
    SourceLine,
)
from .diagnostics import NifParseError
from .types import TypeSpelling, is_env_handle, recognize_type

log = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    start=["annotation_line", "doc_line", "fn_header"],
    maybe_placeholders=False,
)

# Items produced by the line driver: raw source text to keep, or a finished NIF.
Emitted = Union[str, Declaration]


@dataclass
class ScanContext:
    """
    Mutable state threaded through every line of one parse call.

    `held` keeps the raw doc/annotation lines of the current block. They are
    dropped when the block turns into a declaration and released verbatim
    otherwise, so ordinary doc comments survive in the reconstructed code.
    """

    file: str
    nif: Optional[PendingAnnotation] = None
    docstring: Optional[str] = None
    params: List[TypeSpelling] = field(default_factory=list)
    retval: Optional[TypeSpelling] = None
    held: List[SourceLine] = field(default_factory=list)

    def release(self) -> Iterator[str]:
        """Give back the held block lines and forget the block."""
        held, self.held = self.held, []
        self.docstring = None
        self.params = []
        self.retval = None
        for src in held:
            yield src.text

    def reset(self) -> None:
        self.nif = None
        self.docstring = None
        self.params = []
        self.retval = None
        self.held = []


def _try_parse(text: str, start: str) -> Optional[Tree]:
    # A grammar mismatch is never an error by itself: the caller tries the next
    # kind of line.
    try:
        return _PARSER.parse(text, start=start)
    except UnexpectedInput:
        return None


def _terminated(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"


def _source_lines(code: str, file: str, start: int) -> Iterator[SourceLine]:
    pos = 0
    lineno = start
    while pos < len(code):
        end = code.find("\n", pos)
        end = len(code) if end == -1 else end + 1
        yield SourceLine(text=code[pos:end], loc=Located(file=file, line=lineno))
        pos = end
        lineno += 1


###############################################################################
## annotation lines


def _build_annotation(tree: Tree, loc: Located) -> PendingAnnotation:
    name_tok = _token(tree, "NAME")
    arity_tok = _token(tree, "ARITY")
    opts: List[NifOption] = []
    for child in tree.children:
        if isinstance(child, Tree) and _name(child) == "nif_option":
            opts.append(NifOption(_token(child, "OPTION").value))
    return PendingAnnotation(
        name=name_tok.value,
        arity=int(arity_tok.value),
        opts=tuple(opts),
        loc=loc,
    )


def _missing_header(nif: PendingAnnotation) -> NifParseError:
    return NifParseError(f"missing function header for nif {nif.name}", loc=nif.loc)


def _annotation_line(src: SourceLine, ctx: ScanContext) -> None:
    try:
        tree = _PARSER.parse(_terminated(src.text), start="annotation_line")
    except UnexpectedInput as err:
        raise NifParseError(
            f"malformed nif declaration: {src.text.strip()}", loc=src.loc
        ) from err
    if ctx.nif is not None:
        raise _missing_header(ctx.nif)
    ctx.nif = _build_annotation(tree, src.loc)
    log.debug("%s:%d: nif %s/%d pending", src.loc.file, src.loc.line, ctx.nif.name, ctx.nif.arity)


###############################################################################
## docstrings


def _docstring_line(text: str, ctx: ScanContext) -> None:
    content = text.strip()
    if not content:
        # Blank doc lines keep paragraph breaks, but never start a docstring.
        if ctx.docstring is not None:
            ctx.docstring += "\n"
        return
    if ctx.docstring is None:
        ctx.docstring = content
    else:
        ctx.docstring = f"{ctx.docstring}\n{content}"


def _doc_block_line(src: SourceLine, ctx: ScanContext) -> bool:
    """Consume a `///` line (doc text or nif annotation); False if it is neither."""
    tree = _try_parse(_terminated(src.text), "doc_line")
    if tree is None:
        return False
    text_tok = _token(tree, "DOC_TEXT", required=False)
    body = text_tok.value.strip() if text_tok is not None else ""
    if body.startswith("nif:"):
        _annotation_line(src, ctx)
    else:
        _docstring_line(body, ctx)
    ctx.held.append(src)
    return True


###############################################################################
## function headers


def _build_header(tree: Tree) -> Tuple[str, List[str], str]:
    """Return (function name, raw parameter type texts, raw return type text)."""
    name_tok = _token(tree, "NAME")
    param_types: List[str] = []
    params_node = next(
        (c for c in tree.children if isinstance(c, Tree) and _name(c) == "param_list"),
        None,
    )
    if params_node is not None:
        for param in params_node.children:
            if isinstance(param, Tree) and _name(param) == "param":
                param_types.append(_token(param, "PARAM_TYPE").value.strip())
    ret_tok = _token(tree, "RET_TYPE")
    return name_tok.value, param_types, ret_tok.value.strip()


def _store_parameter(text: str, nif: PendingAnnotation, loc: Located, ctx: ScanContext) -> None:
    t = recognize_type(text)
    if t is None:
        raise NifParseError(
            f'nif "{nif.name}" has unsupported parameter type {text}', loc=loc
        )
    ctx.params.append(t)


def _store_retval(text: str, nif: PendingAnnotation, loc: Located, ctx: ScanContext) -> None:
    t = recognize_type(text)
    if t is None:
        raise NifParseError(f'nif "{nif.name}" has unsupported retval type {text}', loc=loc)
    ctx.retval = t


def _split_env(params: List[TypeSpelling]) -> Tuple[Optional[TypeSpelling], Tuple[TypeSpelling, ...]]:
    if params and is_env_handle(params[0]):
        return params[0], tuple(params[1:])
    return None, tuple(params)


def _function_header(tree: Tree, src: SourceLine, ctx: ScanContext) -> Iterator[Emitted]:
    fn_name, param_texts, ret_text = _build_header(tree)
    nif = ctx.nif
    if nif is None:
        # plain zig function, nothing to check
        log.debug("%s:%d: passing through fn %s", src.loc.file, src.loc.line, fn_name)
        yield from ctx.release()
        yield src.text
        return

    if fn_name != nif.name:
        raise NifParseError(
            f'nif docstring expecting "{nif.name}" not adjacent to function (next to "{fn_name}")',
            loc=src.loc,
        )
    for text in param_texts:
        _store_parameter(text, nif, src.loc, ctx)
    _store_retval(ret_text, nif, src.loc, ctx)

    env, params = _split_env(ctx.params)
    found_arity = len(params)
    if found_arity != nif.arity:
        raise NifParseError(
            f"mismatched arity declaration, expected {nif.arity}, got {found_arity}",
            loc=src.loc,
        )

    decl = Declaration(
        name=nif.name,
        arity=nif.arity,
        params=params,
        retval=ctx.retval,
        doc=ctx.docstring,
        opts=nif.opts,
        env=env,
        loc=src.loc,
    )
    log.debug("%s:%d: nif %s", src.loc.file, src.loc.line, decl.signature)
    # The annotation and its docs are consumed; the header opens the body and stays.
    ctx.reset()
    yield src.text
    yield decl


###############################################################################
## line driver


def scan_lines(code: str, ctx: ScanContext, line: int = 1) -> Iterator[Emitted]:
    """
    Walk `code` line by line, yielding kept source text and declarations in
    source order. Raises NifParseError on the first hard error.
    """
    for src in _source_lines(code, ctx.file, line):
        if _doc_block_line(src, ctx):
            continue
        header = _try_parse(_terminated(src.text), "fn_header")
        if header is not None:
            yield from _function_header(header, src, ctx)
            continue
        # Opaque code or a blank line: any pending nif has lost its header.
        if ctx.nif is not None:
            raise _missing_header(ctx.nif)
        yield from ctx.release()
        yield src.text
    if ctx.nif is not None:
        raise _missing_header(ctx.nif)
    yield from ctx.release()


def parse(code: str, file: str, line: int = 1) -> ParseOutcome:
    """
    Extract NIF declarations from an annotated Zig block.

    `line` is the absolute line number of the first line of `code` inside
    `file`, so diagnostics point into the host file.
    """
    marker_comment = f"// {file} line: {line}\n"
    ctx = ScanContext(file=file)
    chunks: List[str] = [marker_comment]
    declarations: List[Declaration] = []
    for item in scan_lines(code, ctx, line):
        if isinstance(item, Declaration):
            declarations.append(item)
        else:
            chunks.append(item)
    return ParseOutcome(code="".join(chunks), declarations=declarations)


###############################################################################
## tree helpers


def _token(tree: Tree, ttype: str, required: bool = True) -> Optional[Token]:
    tok = next((c for c in tree.children if isinstance(c, Token) and c.type == ttype), None)
    if tok is None and required:
        raise ValueError(f"{_name(tree)} node missing {ttype} token")
    return tok


def _name(node: Tree | Token) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)
