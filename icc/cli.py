"""Command-line interface for the IC compiler front end."""

import argparse
import logging
import sys
from pathlib import Path

from icc import __version__


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="icc",
        description="IC compiler front end: parses .ic files and builds their symbol tables",
    )
    parser.add_argument("input", nargs="?", help="Input .ic file")
    parser.add_argument(
        "-L", "--library", type=Path, default=None, metavar="PATH",
        help="Library signature file (default: bundled libic.sig)",
    )
    parser.add_argument(
        "--no-library", action="store_true",
        help="Do not add the Library class to the program",
    )
    parser.add_argument(
        "--dump-ast", action="store_true", help="Dump the AST as JSON"
    )
    parser.add_argument(
        "--dump-symtab", action="store_true",
        help="Print the symbol tables and the type table",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"icc {__version__}"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    if args.input is None:
        parser.print_help()
        sys.exit(0)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    source = input_path.read_text(encoding="utf-8")

    from icc.compiler import compile_source

    try:
        tables = compile_source(
            source,
            file_name=input_path.name,
            library_path=args.library,
            use_library=not args.no_library,
            dump_ast=args.dump_ast,
            dump_symtab=args.dump_symtab,
        )
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if tables.diagnostics:
        for diagnostic in tables.diagnostics:
            print(diagnostic, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
