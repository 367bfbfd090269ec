"""Command-line front end: convert Groovy lambdas to closures in a file."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .document import Document
from .intentions import ConvertLambdaToClosureAction, convert_all
from .lexer_rd import LexError
from .messages import message
from .parser_rd import ParseError
from .tree import pretty

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="groovy-closure",
        description="Rewrite Groovy lambda expressions as closure literals.",
    )
    ap.add_argument("path", nargs="?", default="-", help="Source file, or '-' for stdin")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--offset", type=int, help="Convert only the innermost lambda covering this offset")
    mode.add_argument("--all", action="store_true", help="Convert every lambda (default)")
    mode.add_argument("--tree", action="store_true", help="Print the parse tree instead of converting")
    ap.add_argument("-i", "--in-place", action="store_true", help="Write the result back to the file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.in_place and args.path == "-":
        ap.error("--in-place requires a file path")

    if args.path == "-":
        source = sys.stdin.read()
    else:
        source = Path(args.path).read_text(encoding="utf-8")

    try:
        document = Document(source)

        if args.tree:
            print(pretty(document.tree), end="")
            return 0

        if args.offset is not None:
            node = document.lambda_at(args.offset)
            if node is None or not ConvertLambdaToClosureAction(document, node).invoke():
                print(message("cli.no.lambda.at.offset", args.offset), file=sys.stderr)
                return 2
        else:
            logger.info(message("cli.converted"), convert_all(document))
    except (LexError, ParseError) as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    if args.in_place:
        Path(args.path).write_text(document.text, encoding="utf-8")
    else:
        sys.stdout.write(document.text)
    return 0
