# =============================================================================
# test_frontend.py - Front End Pipeline Tests
# =============================================================================
# End-to-end tests running lexer, preprocessor, parser and builder over
# whole translation units, including the sample file in fixtures/.
# =============================================================================

import logging
from pathlib import Path

import pytest
from cdeclkit import CDeclError
from cdeclkit.cparse import (
    CFrontend,
    FrontendOptions,
    parse_declarations,
    parse_file,
)
from cdeclkit.cparse.types import (
    NamedType,
    PointerType,
    ArrayType,
    FunctionType,
    Parameter,
)
from cdeclkit.cparse.errors import (
    MissingSemicolonError,
    UnterminatedConditionalError,
    UnterminatedStringError,
    ConflictingSpecifiersError,
    MacroRecursionLimitError,
)


# =============================================================================
# Helper Functions
# =============================================================================

FIXTURE = Path(__file__).parent / "fixtures" / "main.c"

FIXTURE_NAMES = [
    "S", "T",
    "x0", "x1", "x2", "x3", "x4", "x5", "x6", "x7", "x8", "x9", "xA",
    "p0", "p1", "p2",
    "a0", "a1", "a2", "a3", "a4", "a5", "a6",
    "f", "f",
    "e0", "x", "z",
    "main", "foo",
]

INT = NamedType("int")


def run_fixture(**options):
    """Run the front end over the sample file."""
    return CFrontend(FrontendOptions(**options)).parse_file(FIXTURE)


def types_by_name(result) -> dict:
    """Map names to types (the last declaration of a name wins)."""
    return {decl.name: decl.type for decl in result.declarations}


# =============================================================================
# Sample File Tests
# =============================================================================

class TestFixture:
    """Test the sample translation unit end to end."""

    def test_parses(self):
        """The whole file parses without error."""
        result = run_fixture()
        assert result.success
        assert result.error is None
        assert result.token_count > 0

    def test_names_in_order(self):
        """Every file-scope name is reported in source order."""
        assert [d.name for d in run_fixture().declarations] == FIXTURE_NAMES

    def test_macros(self):
        """The macro table reflects the branches taken."""
        macros = run_fixture().macros
        assert macros["CUTE_TIME_PLATFORM"].text == "CUTE_TIME_UNIX"
        assert macros["PI"].text == "3.14159265"
        assert macros["SQR"].is_function_like
        assert "TEST" in macros

    @pytest.mark.parametrize("defines,platform", [
        ({"_WIN32": ""}, "CUTE_TIME_WINDOWS"),
        ({"__APPLE__": "1"}, "CUTE_TIME_MAC"),
    ])
    def test_platform_defines(self, defines, platform):
        """Predefined macros select other branches."""
        assert run_fixture(defines=defines).macros["CUTE_TIME_PLATFORM"].text == platform

    def test_includes(self):
        """Includes are recorded in order."""
        includes = [(inc.header, inc.system) for inc in run_fixture().includes]
        assert includes == [
            ("assert.h", True),
            ("string.h", True),
            ("stdio.h", True),
            ("../include/glfw.h", False),
        ]

    def test_base_types(self):
        """Scalar declarations get canonical base types."""
        types = types_by_name(run_fixture())
        assert types["x0"] == NamedType("unsigned int")
        assert types["x2"] == NamedType("unsigned long")
        assert types["x5"] == NamedType("unsigned long")
        assert types["x8"] == NamedType("long double")
        assert types["x9"] == NamedType("struct S")
        assert types["xA"] == NamedType("S")

    def test_derived_types(self):
        """The pointer and array puzzles resolve as C reads them."""
        types = types_by_name(run_fixture())
        assert types["a2"] == PointerType(ArrayType(INT, 3))
        assert types["a4"] == ArrayType(ArrayType(PointerType(INT), 7), 6)
        assert types["p0"] == types["p1"]
        assert types["p2"] == PointerType(NamedType("char"), {"const"})
        assert types["z"] == ArrayType(ArrayType(NamedType("double"), 3), 4)

    def test_both_f_declarations(self):
        """Redeclaring a name gives two records."""
        fs = [d.type for d in run_fixture().declarations if d.name == "f"]
        assert fs[0] == PointerType(FunctionType(
            NamedType("void"), (Parameter(INT, "x"), Parameter(NamedType("float"))),
        ))
        assert fs[1] == ArrayType(PointerType(FunctionType(ArrayType(NamedType("void"), 5), ())), 4)

    def test_definitions(self):
        """main and foo are function definitions."""
        decls = {d.name: d for d in run_fixture().declarations}
        assert decls["main"].is_definition
        assert decls["foo"].type == FunctionType(NamedType("void"), (
            Parameter(ArrayType(INT), "x"),
            Parameter(PointerType(FunctionType(INT, ())), "y"),
        ))
        assert not decls["x"].is_definition

    def test_locals(self):
        """Local declarations follow their function when requested."""
        names = [d.name for d in run_fixture(include_locals=True).declarations]
        assert names[-7:] == ["main", "xx", "x", "a", "foo", "z", "y"]

    def test_typedef_names(self):
        """Typedef names declared by the file are collected."""
        assert run_fixture().unit.typedef_names == {"S", "T"}


# =============================================================================
# Error Result Tests
# =============================================================================

class TestErrorResults:
    """Test that errors are returned rather than raised."""

    def test_parse_error(self):
        """A parse error is stored with its offset."""
        result = CFrontend().parse_source("int a int b;")
        assert not result.success
        assert isinstance(result.error, MissingSemicolonError)
        assert result.error.offset == 6
        assert result.declarations == []

    def test_preprocess_error(self):
        """A preprocessing error stops before parsing."""
        result = CFrontend().parse_source("#if 1\nint x;")
        assert isinstance(result.error, UnterminatedConditionalError)
        assert result.unit is None

    def test_lex_error(self):
        """A lexer error reports the literal's start."""
        result = CFrontend().parse_source('char *s = "abc;')
        assert isinstance(result.error, UnterminatedStringError)
        assert result.error.offset == 10

    def test_dead_region_text_ignored(self):
        """Prose inside #if 0 is not lexed as C."""
        decls = parse_declarations("#if 0\nThis isn't C at all\n#endif\nint x;")
        assert [d.name for d in decls] == ["x"]

    def test_raise_for_error(self):
        """raise_for_error re-raises the stored error, or does nothing."""
        result = CFrontend().parse_source("long float x;")
        with pytest.raises(ConflictingSpecifiersError):
            result.raise_for_error()
        CFrontend().parse_source("int x;").raise_for_error()

    def test_convenience_function_raises(self):
        """parse_declarations raises instead of returning a result."""
        with pytest.raises(ConflictingSpecifiersError):
            parse_declarations("long float x;")

    @pytest.mark.parametrize("source", ["int @;", "#endif", "int x"])
    def test_errors_share_root(self, source):
        """Every input error is a CDeclError."""
        with pytest.raises(CDeclError):
            parse_declarations(source)


# =============================================================================
# Option Tests
# =============================================================================

class TestOptions:
    """Test front end configuration."""

    def test_defaults(self):
        """Options default to empty collections."""
        options = FrontendOptions()
        assert options.defines == {}
        assert options.typedef_names == []
        assert options.filename == "<input>"
        assert not options.include_locals

    def test_invalid_depth(self):
        """The expansion limit must be positive."""
        with pytest.raises(ValueError):
            FrontendOptions(max_expansion_depth=0)

    def test_filename_in_locations(self):
        """The configured filename appears in locations."""
        result = CFrontend(FrontendOptions(filename="decls.h")).parse_source("int x;")
        assert result.declarations[0].location.filename == "decls.h"

    def test_typedef_names_option(self):
        """Typedef names from headers that are not read can be supplied."""
        result = CFrontend(FrontendOptions(typedef_names=["size_t"])).parse_source("size_t n;")
        assert result.success
        assert result.declarations[0].type == NamedType("size_t")

    def test_expansion_limit(self):
        """The expansion limit reaches the preprocessor."""
        source = "#define A B\n#define B C\n#define C D\nA"
        result = CFrontend(FrontendOptions(max_expansion_depth=2)).parse_source(source)
        assert isinstance(result.error, MacroRecursionLimitError)

    def test_defines_option(self):
        """Defines select branches."""
        source = "#ifdef WIDE\nlong n;\n#else\nint n;\n#endif"
        decls = parse_declarations(source, defines={"WIDE": ""})
        assert decls[0].type == NamedType("long")

    def test_summary_logged(self, caplog):
        """A summary line is logged at INFO level."""
        with caplog.at_level(logging.INFO, logger="cdeclkit.cparse.frontend"):
            CFrontend().parse_source("int x;")
        assert "1 declarations" in caplog.text


# =============================================================================
# File Tests
# =============================================================================

class TestFiles:
    """Test reading source files."""

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            CFrontend().parse_file(tmp_path / "missing.c")

    def test_parse_file_function(self, tmp_path):
        """parse_file reads and resolves a file."""
        path = tmp_path / "decls.h"
        path.write_text("#define N 3\nint (*a2)[N];\n", encoding="utf-8")
        decls = parse_file(path)
        assert decls[0].type == PointerType(ArrayType(INT, 3))
        assert decls[0].location.filename == str(path)
