"""
Command line entry point (``python -m stylus_converter``).

Converts Stylus files to SCSS and writes the result to stdout or to a file.
"""

import argparse
import logging
import sys

from stylus_converter.ast import StylusSyntaxError, ast_from_json
from stylus_converter.scss import converter, visitor

logger = logging.getLogger("stylus_converter")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stylus_converter",
        description="Convert Stylus stylesheets to SCSS, keeping the original line layout.",
    )
    parser.add_argument("files", nargs="+", help="Stylus files to convert, '-' reads stdin")
    parser.add_argument("-o", "--output", help="Write the SCSS here instead of stdout")
    parser.add_argument(
        "--from-json", action="store_true",
        help="Inputs are exported syntax trees (JSON) rather than Stylus source",
    )
    parser.add_argument("--target", default="scss", help="Target dialect (only 'scss' is produced)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug information to stderr")
    return parser


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def convert_file(path: str, from_json: bool = False, target: str = "scss") -> str:
    """Convert one input file and return the SCSS text."""
    text = _read(path)
    if from_json:
        return visitor(ast_from_json(text), target)
    origin = "<stdin>" if path == "-" else path
    return converter(text, target, origin=origin)


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    outputs = []
    for path in args.files:
        logger.debug("converting %s", path)
        try:
            outputs.append(convert_file(path, from_json=args.from_json, target=args.target))
        except StylusSyntaxError as e:
            print(str(e), file=sys.stderr)
            print(e.caret(), file=sys.stderr)
            return 1
        except (OSError, ValueError) as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return 1

    result = "\n".join(outputs) + "\n"
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result)
    else:
        sys.stdout.write(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
