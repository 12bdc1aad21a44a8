#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .ast import Declaration, ParseOutcome
from .diagnostics import NifParseError
from .parser import parse

log = logging.getLogger(__name__)

LOG_LEVEL_ENV = "ZIGNIF_LOG_LEVEL"


def _declaration_to_json(decl: Declaration) -> dict:
    """Render a Declaration to a structured JSON-friendly dict."""
    return {
        "name": decl.name,
        "arity": decl.arity,
        "params": [str(t) for t in decl.params],
        "retval": str(decl.retval),
        "env": str(decl.env) if decl.env is not None else None,
        "opts": [str(o) for o in decl.opts],
        "doc": decl.doc,
        "line": decl.loc.line if decl.loc is not None else None,
    }


def _print_table(outcome: ParseOutcome, file=None) -> None:
    if file is None:
        file = sys.stdout
    for decl in outcome.declarations:
        opts = " ".join(str(o) for o in decl.opts)
        suffix = f" [{opts}]" if opts else ""
        print(f"{decl.name}/{decl.arity}: {decl.signature}{suffix}", file=file)


def scan_file(source_path: Path, file: str | None, line: int) -> ParseOutcome:
    source = source_path.read_text()
    return parse(source, file or str(source_path), line)


def main(argv: list[str] | None = None) -> int:
    """
    Parse an annotated Zig file and list its NIF declarations.

    With --json, prints {"exit_code", "declarations"} or {"exit_code",
    "diagnostics"}; otherwise prints one line per NIF to stdout and errors to
    stderr as `file:line: error: message`.
    """
    ap = argparse.ArgumentParser(description="zignifc: extract NIF declarations from annotated Zig source")
    ap.add_argument("source", type=Path, help="Annotated Zig source file")
    ap.add_argument("--file", help="File name to report in diagnostics (default: SOURCE)")
    ap.add_argument(
        "--line",
        type=int,
        default=1,
        help="Line number of the first line of SOURCE inside its host file (default: 1)",
    )
    ap.add_argument("-o", "--output", type=Path, help="Write the reconstructed Zig code to this path")
    ap.add_argument(
        "--json",
        action="store_true",
        help="Emit declarations or diagnostics as JSON",
    )
    ap.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or WARNING)",
    )
    args = ap.parse_args(argv)
    if args.line < 0:
        ap.error("--line must be non-negative")

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        outcome = scan_file(args.source, args.file, args.line)
    except NifParseError as err:
        diag = err.to_diagnostic()
        if args.json:
            print(json.dumps({"exit_code": 1, "diagnostics": [diag.to_json()]}))
        else:
            print(diag.render(), file=sys.stderr)
        return 1

    log.info("%s: %d nif(s)", args.source, len(outcome.declarations))
    if args.output is not None:
        args.output.write_text(outcome.code)
    if args.json:
        print(
            json.dumps(
                {
                    "exit_code": 0,
                    "declarations": [_declaration_to_json(d) for d in outcome.declarations],
                }
            )
        )
    else:
        _print_table(outcome)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
