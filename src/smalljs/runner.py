from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .evaluator import interpret
from .parser import parse_source
from .types import JSValue, SmallJSError

def run(source: str, out: Optional[TextIO] = None, *, trace: bool = False, grammar_path: Optional[str] = None) -> JSValue:
    script = parse_source(source, grammar_path=grammar_path)

    return interpret(script, out, trace=trace)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    if os.path.isfile(arg):
        return Path(arg).read_text(encoding="utf-8")

    return arg

def main(argv: Optional[List[str]] = None) -> None:
    trace = False
    grammar_path = None
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--trace":
            trace = True
            continue

        if token.startswith("--grammar="):
            grammar_path = token.split("=", 1)[1]
            continue

        if token == "--grammar":
            try:
                grammar_path = next(it)
            except StopIteration:
                raise SystemExit("--grammar flag requires a path") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    source = _load_source(arg)

    try:
        run(source, sys.stdout, trace=trace, grammar_path=grammar_path)
    except SmallJSError as exc:
        sys.stdout.flush()
        sys.stderr.write(f"error: {exc}\n")
        raise SystemExit(1) from None

if __name__ == "__main__":
    main()
