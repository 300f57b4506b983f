"""
Render a template file from the command line.

Usage:
  python -m logical TEMPLATE [--data FILE|-] [--no-sandbox] [--no-sugar]
                             [--start MARKER] [--end MARKER] [--code]

Data is read as JSON; a JSON array renders the template once per element.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from logical import instance
from logical.core.config import settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logical",
        description="Compile a template and render it against JSON data.",
    )
    parser.add_argument("template", help="Template file, or '-' for stdin")
    parser.add_argument(
        "--data",
        default=None,
        help="JSON data file, or '-' for stdin (default: empty record)",
    )
    parser.add_argument("--no-sandbox", action="store_true", help="Evaluate without RestrictedPython")
    parser.add_argument("--no-sugar", action="store_true", help="Disable block sugar (end/else/each)")
    parser.add_argument("--start", default=None, help="Tag start marker (default: <%%)")
    parser.add_argument("--end", default=None, help="Tag end marker (default: %%>)")
    parser.add_argument("--code", action="store_true", help="Print the compiled body instead of rendering")
    return parser


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    if args.template == "-" and args.data == "-":
        print("template and data cannot both come from stdin", file=sys.stderr)
        return 2

    registry = instance()
    if args.no_sandbox:
        registry.config("sandbox", False)
    if args.no_sugar:
        registry.config("sugar", False)
    if args.start:
        registry.config("expression_start", args.start)
    if args.end:
        registry.config("expression_end", args.end)

    template = registry.compile(_read(args.template))
    if args.code:
        sys.stdout.write(template.code)
        return 0

    data: Any = json.loads(_read(args.data)) if args.data else {}
    sys.stdout.write(template.render(data))
    return 0


if __name__ == "__main__":
    sys.exit(main())
