"""Top-level compiler orchestration."""

from __future__ import annotations
import logging
from pathlib import Path

from icc.parser.ast_nodes import ICClass, LibraryMethod
from icc.parser.tree_builder import parse_ic
from icc.analysis.table_builder import SymbolTables, build_symbol_tables
from icc.analysis.table_printer import format_symbol_tables, format_type_table

logger = logging.getLogger(__name__)

# Standard library signatures
_STDLIB_DIR = Path(__file__).parent / "stdlib"
LIBRARY_SIGNATURE_PATH = _STDLIB_DIR / "libic.sig"
LIBRARY_CLASS_NAME = "Library"


class LibraryError(Exception):
    pass


def load_library(path: Path | None = None) -> ICClass:
    """Parse a library signature file into its single ``Library`` class.

    The file must declare exactly one class, named Library, and every method
    in it must be a body-less static (library) method.
    """
    path = path or LIBRARY_SIGNATURE_PATH
    if not path.exists():
        raise LibraryError(f"Cannot find library signature file '{path}'")
    program = parse_ic(path.read_text(encoding="utf-8"))
    if len(program.classes) != 1 or program.classes[0].name != LIBRARY_CLASS_NAME:
        raise LibraryError(f"{path} must declare exactly one class named {LIBRARY_CLASS_NAME}")
    library = program.classes[0]
    if library.has_super_class or library.fields:
        raise LibraryError(f"{LIBRARY_CLASS_NAME} may only declare library methods")
    for method in library.methods:
        if not isinstance(method, LibraryMethod):
            raise LibraryError(f"{LIBRARY_CLASS_NAME} method '{method.name}' must not have a body")
    logger.debug("loaded %d library methods from %s", len(library.methods), path)
    return library


def compile_source(
    source: str,
    file_name: str = "",
    library_path: Path | None = None,
    use_library: bool = True,
    dump_ast: bool = False,
    dump_symtab: bool = False,
) -> SymbolTables:
    program = parse_ic(source)

    # The library class comes first so user classes see it in the global scope.
    if use_library:
        program.classes.insert(0, load_library(library_path))

    if dump_ast:
        _dump_ast(program)

    tables = build_symbol_tables(program, file_name)
    logger.debug(
        "%s: %d scopes, %d types, %d diagnostics",
        file_name or "<source>", len(tables.scopes), len(tables.type_table), len(tables.diagnostics),
    )

    if dump_symtab:
        print(format_symbol_tables(tables))
        print(format_type_table(tables.type_table), end="")

    return tables


def _dump_ast(program):
    import dataclasses, json

    def _ser(obj):
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            d = {"_type": type(obj).__name__}
            for f in dataclasses.fields(obj):
                d[f.name] = _ser(getattr(obj, f.name))
            return d
        if isinstance(obj, list):
            return [_ser(x) for x in obj]
        return obj

    print(json.dumps(_ser(program), indent=2, default=str))
