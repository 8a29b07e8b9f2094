"""Evaluate J-style array expressions from the command line or interactively."""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from .errors import APLError, causal_chain
from .interpreter import Environment, evaluate, format_noun
from .verbs import VerbRegistry, default_registry

PROMPT = "    "


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apl-jax", description=__doc__)
    parser.add_argument(
        "-e",
        "--eval",
        dest="expressions",
        action="append",
        default=[],
        metavar="EXPR",
        help="evaluate EXPR and print the result (repeatable; names persist across expressions)",
    )
    return parser


def run_line(line: str, env: Environment, registry: VerbRegistry, *, out: TextIO, err: TextIO) -> bool:
    """Evaluate one line, printing its value or its error chain. Returns success."""
    try:
        result = evaluate(line, env, registry)
    except APLError as exc:
        messages = causal_chain(exc)
        print(f"error: {messages[0]}", file=err)
        for message in messages[1:]:
            print(f"  caused by: {message}", file=err)
        return False
    if result is not None:
        print(format_noun(result), file=out)
    return True


def repl(env: Environment, registry: VerbRegistry, *, stdin: TextIO, out: TextIO, err: TextIO) -> None:
    while True:
        out.write(PROMPT)
        out.flush()
        line = stdin.readline()
        if not line:
            out.write("\n")
            return
        run_line(line, env, registry, out=out, err=err)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    env = Environment()
    registry = default_registry()

    if args.expressions:
        results = [run_line(expr, env, registry, out=sys.stdout, err=sys.stderr) for expr in args.expressions]
        return 0 if all(results) else 1

    try:
        repl(env, registry, stdin=sys.stdin, out=sys.stdout, err=sys.stderr)
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
