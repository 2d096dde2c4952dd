# =============================================================================
# test_cli.py - cdump Command-Line Tests
# =============================================================================
# Tests for the cdump tool: declaration output, -D/-T options, the -E and
# --tokens modes, --explain and --locals, and exit codes.
# =============================================================================

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from cdeclkit import __version__, CDeclError
from cdeclkit.cli.cdump import main, parse_define
from cdeclkit.cli.errors import ExitCode, exit_code_for, handle_cli_exception
from cdeclkit.cparse.errors import MissingSemicolonError


# =============================================================================
# Helper Functions
# =============================================================================

FIXTURE = Path(__file__).parent / "fixtures" / "main.c"


def run_cdump(source: str, *args: str):
    """Write source to a temporary file and run cdump on it."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("input.c").write_text(source, encoding="utf-8")
        return runner.invoke(main, [*args, "input.c"])


def output_lines(result) -> list[str]:
    return result.output.splitlines()


# =============================================================================
# Declaration Output Tests
# =============================================================================

class TestDump:
    """Test the default declaration listing."""

    def test_fixture(self):
        """The sample file lists every declaration canonically."""
        result = CliRunner().invoke(main, [str(FIXTURE)])
        assert result.exit_code == 0, f"cdump failed: {result.output}"
        lines = output_lines(result)
        for expected in [
            "struct S { int in; int out; };",
            "typedef struct S S;",
            "typedef struct T T;",
            "unsigned long long x4;",
            "const char *p1;",
            "char *const p2;",
            "int (*a2)[3];",
            "int *a4[6][7];",
            "void (*f[4])(void)[5];",
            "extern inline int e0;",
            "static float x[8] = {0.5, 2.5};",
            "int main(void) { ... }",
            "void foo(int x[], int (*y)(void)) { ... }",
        ]:
            assert expected in lines

    def test_one_name_per_line(self):
        """Declarators sharing specifiers are split."""
        result = run_cdump("int *z, y;\n")
        assert output_lines(result) == ["int *z;", "int y;"]

    def test_explain(self):
        """--explain appends an English description."""
        result = run_cdump("int (*a2)[3];\n", "--explain")
        assert output_lines(result) == ["int (*a2)[3];  // a2: pointer to array[3] of int"]

    def test_locals(self):
        """--locals adds indented local declarations."""
        result = CliRunner().invoke(main, ["--locals", str(FIXTURE)])
        assert result.exit_code == 0
        lines = output_lines(result)
        assert "    static register int xx;" in lines
        assert "    int *z;" in lines

    def test_define(self):
        """-D selects conditional branches."""
        source = "#ifdef FOO\nint foo;\n#else\nint bar;\n#endif\n"
        assert output_lines(run_cdump(source, "-DFOO")) == ["int foo;"]
        assert output_lines(run_cdump(source)) == ["int bar;"]

    def test_define_with_value(self):
        """-D NAME=VALUE gives the macro a value."""
        source = "#if LEVEL == 2\nint two;\n#endif\n"
        assert output_lines(run_cdump(source, "-D", "LEVEL=2")) == ["int two;"]

    def test_typedef_option(self):
        """-T declares typedef names from unread headers."""
        result = run_cdump("size_t n;\n", "-T", "size_t")
        assert result.exit_code == 0
        assert output_lines(result) == ["size_t n;"]


# =============================================================================
# Preprocessor Output Tests
# =============================================================================

class TestPreprocessOnly:
    """Test -E and --tokens."""

    def test_preprocess_only(self):
        """-E prints the expanded source without directives."""
        result = run_cdump("#define N 4\nint a[N];\n", "-E")
        assert result.exit_code == 0
        assert result.output.strip() == "int a[4];"

    def test_fixture_preprocessed(self):
        """Directives and comments are gone from -E output."""
        result = CliRunner().invoke(main, ["-E", str(FIXTURE)])
        assert result.exit_code == 0
        assert "#" not in result.output
        assert "whoo" not in result.output

    def test_tokens(self):
        """--tokens prints position, kind and text."""
        result = run_cdump("int x;\n", "--tokens")
        assert output_lines(result) == [
            "1:1\tKEYWORD\tint",
            "1:5\tIDENTIFIER\tx",
            "1:6\tPUNCTUATOR\t;",
        ]

    def test_preprocess_error(self):
        """Preprocessor errors fail -E as well."""
        result = run_cdump("#if 1\n", "-E")
        assert result.exit_code == ExitCode.INPUT_ERROR
        assert "unterminated #if" in result.output


# =============================================================================
# Exit Code Tests
# =============================================================================

class TestExitCodes:
    """Test exit codes and error output."""

    def test_parse_error(self):
        """Input errors exit with 1 and a located message."""
        result = run_cdump("int a int b;\n")
        assert result.exit_code == ExitCode.INPUT_ERROR
        assert "input.c:1:7: error: expected ';' before 'int'" in result.output

    def test_invalid_define(self):
        """A bad -D name is a usage error."""
        result = run_cdump("int x;\n", "-D", "1X")
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_missing_file(self):
        """A missing input file is a usage error."""
        result = CliRunner().invoke(main, ["does-not-exist.c"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_version(self):
        """--version prints the package version."""
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# Helper Tests
# =============================================================================

class TestHelpers:
    """Test argument parsing and the shared error handler."""

    @pytest.mark.parametrize("text,expected", [
        ("TEST", ("TEST", "")),
        ("LEVEL=2", ("LEVEL", "2")),
        ("EMPTY=", ("EMPTY", "")),
        ("EXPR=a=b", ("EXPR", "a=b")),
    ])
    def test_parse_define(self, text, expected):
        """NAME and NAME=VALUE forms split at the first '='."""
        assert parse_define(text) == expected

    def test_handler_input_error(self, capsys):
        """Front end errors exit with INPUT_ERROR."""
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(MissingSemicolonError("int"))
        assert exc_info.value.code == ExitCode.INPUT_ERROR
        assert "expected ';' before 'int'" in capsys.readouterr().err

    def test_handler_missing_file(self):
        """Unreadable files exit with INVALID_ARGS."""
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(FileNotFoundError("gone.c"))
        assert exc_info.value.code == ExitCode.INVALID_ARGS

    @pytest.mark.parametrize("error,code", [
        (MissingSemicolonError("int"), ExitCode.INPUT_ERROR),
        (CDeclError("bad input"), ExitCode.INPUT_ERROR),
        (click.BadParameter("bad -D"), ExitCode.INVALID_ARGS),
        (IsADirectoryError("src"), ExitCode.INVALID_ARGS),
        (UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"), ExitCode.INVALID_ARGS),
        (KeyError("oops"), ExitCode.INTERNAL_ERROR),
    ])
    def test_exit_code_for(self, error, code):
        """Exceptions map to the documented exit statuses."""
        assert exit_code_for(error) == code

    def test_handler_plain_input_error(self, capsys):
        """Other input errors get an Error: prefix."""
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(CDeclError("bad input"))
        assert exc_info.value.code == ExitCode.INPUT_ERROR
        assert capsys.readouterr().err.strip() == "Error: bad input"

    def test_handler_internal_error(self, capsys):
        """Anything else is an internal error."""
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(RuntimeError("boom"))
        assert exc_info.value.code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in capsys.readouterr().err
