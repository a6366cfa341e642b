"""End-to-end tests: library loading, compile_source and the CLI."""

import json
import pytest
from icc.analysis.symbols import SymbolKind
from icc.cli import main
from icc.compiler import LibraryError, compile_source, load_library
from icc.parser.ast_nodes import LibraryMethod
from icc.parser.tree_builder import ICSyntaxError

PROGRAM = """
class Main {
    static void main(string[] args) {
        Library.println("hello");
    }
}
"""


class TestLibrary:
    def test_bundled_signatures(self):
        lib = load_library()
        assert lib.name == "Library"
        assert not lib.has_super_class
        assert all(isinstance(m, LibraryMethod) for m in lib.methods)
        names = [m.name for m in lib.methods]
        assert "println" in names
        assert "stoi" in names

    def test_custom_signature_file(self, tmp_path):
        sig = tmp_path / "lib.sig"
        sig.write_text("class Library { static int answer(); }")
        lib = load_library(sig)
        assert [m.name for m in lib.methods] == ["answer"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(LibraryError, match="Cannot find"):
            load_library(tmp_path / "nope.sig")

    @pytest.mark.parametrize("src,msg", [
        ("class Lib { static void f(); }", "exactly one class"),
        ("class Library { } class Other { }", "exactly one class"),
        ("class Library { int x; }", "only declare library methods"),
        ("class Library { static void f() { } }", "must not have a body"),
    ])
    def test_invalid_library(self, tmp_path, src, msg):
        sig = tmp_path / "lib.sig"
        sig.write_text(src)
        with pytest.raises(LibraryError, match=msg):
            load_library(sig)


class TestCompileSource:
    def test_library_added_first(self):
        t = compile_source(PROGRAM, "hello.ic")
        assert not t.has_errors
        assert list(t.global_scope.symbols) == ["Library", "Main"]
        lib = t.class_scope("Library")
        assert all(s.kind is SymbolKind.STATIC_METHOD for s in lib.symbols.values())
        method_scopes = t.scopes.children_of(lib)
        assert [s.name for s in method_scopes] == list(lib.symbols)
        assert all(s.children == [] for s in method_scopes)
        assert t.type_table.describe(lib.symbols["stoi"].type_id) == "{string, int -> int}"
        assert t.type_table.describe(lib.symbols["stoa"].type_id) == "{string -> int[]}"

    def test_without_library(self):
        t = compile_source(PROGRAM, "hello.ic", use_library=False)
        assert list(t.global_scope.symbols) == ["Main"]

    def test_user_class_named_library(self):
        t = compile_source("class Library { }", "t.ic")
        assert len(t.diagnostics) == 1
        assert "'Library'" in t.diagnostics[0].message

    def test_syntax_error_propagates(self):
        with pytest.raises(ICSyntaxError):
            compile_source("class { }", use_library=False)

    def test_dump_symtab(self, capsys):
        compile_source(PROGRAM, "hello.ic", use_library=False, dump_symtab=True)
        out = capsys.readouterr().out
        assert out.startswith("Global Symbol Table: hello.ic\n    Class: Main\n")
        assert "Static method: main {string[] -> void}" in out
        assert "Type Table: hello.ic" in out

    def test_dump_ast(self, capsys):
        compile_source(PROGRAM, use_library=False, dump_ast=True)
        data = json.loads(capsys.readouterr().out)
        assert data["_type"] == "Program"
        assert data["classes"][0]["name"] == "Main"


class TestCli:
    def test_clean_program(self, tmp_path, capsys):
        src = tmp_path / "hello.ic"
        src.write_text(PROGRAM)
        main([str(src)])
        assert capsys.readouterr().err == ""

    def test_dump_symtab(self, tmp_path, capsys):
        src = tmp_path / "hello.ic"
        src.write_text(PROGRAM)
        main([str(src), "--dump-symtab"])
        out = capsys.readouterr().out
        assert "Global Symbol Table: hello.ic" in out
        assert "Class Symbol Table: Library" in out

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing.ic")])
        assert exc.value.code == 1
        assert "file not found" in capsys.readouterr().err

    def test_semantic_errors(self, tmp_path, capsys):
        src = tmp_path / "bad.ic"
        src.write_text("class A {\n int x;\n int x;\n}")
        with pytest.raises(SystemExit) as exc:
            main([str(src), "--no-library"])
        assert exc.value.code == 1
        assert "semantic error at line 3" in capsys.readouterr().err

    def test_syntax_error(self, tmp_path, capsys):
        src = tmp_path / "bad.ic"
        src.write_text("class A {")
        with pytest.raises(SystemExit) as exc:
            main([str(src)])
        assert exc.value.code == 1
        assert "Error: syntax error" in capsys.readouterr().err

    def test_bad_library_path(self, tmp_path, capsys):
        src = tmp_path / "hello.ic"
        src.write_text(PROGRAM)
        with pytest.raises(SystemExit) as exc:
            main([str(src), "-L", str(tmp_path / "none.sig")])
        assert exc.value.code == 1
        assert "Cannot find library signature file" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "icc 0.1.0" in capsys.readouterr().out
