"""Command-line entry point: ``python -m sqlfn INPUT -o OUTPUT``."""
from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from sqlfn import compile_file
from sqlfn.config import GeneratorConfig
from sqlfn.errors import SqlFnError

logger = logging.getLogger("sqlfn")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlfn",
        description="Compile named SQL query declarations into a typed Python module.",
    )
    parser.add_argument("input", help="DSL file with query declarations")
    parser.add_argument(
        "-o", "--output", help="file to write the generated module to (default: stdout)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="reject :name placeholders that match no parameter in named queries",
    )
    parser.add_argument(
        "--no-tests",
        action="store_true",
        help="do not generate test setup routines or entry points",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the compiler; return the process exit status."""
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = GeneratorConfig(strict_placeholders=args.strict, emit_tests=not args.no_tests)
    try:
        generated = compile_file(args.input, config)
    except OSError as exc:
        logger.error("cannot read %s: %s", args.input, exc)
        return 2
    except SqlFnError as exc:
        logger.error("%s: %s", args.input, exc)
        return 1

    if args.output:
        generated.write(args.output)
        logger.info("wrote %s", args.output)
    else:
        sys.stdout.write(generated.source)
    return 0


if __name__ == "__main__":
    sys.exit(main())
