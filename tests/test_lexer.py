# =============================================================================
# test_lexer.py - C Lexer Unit Tests
# =============================================================================
# Tests for the C front end lexer/tokenizer.
#
# Test coverage includes:
#   - Keywords versus identifiers
#   - Number lexemes kept verbatim with their suffixes
#   - String and character literals, including prefixed ones
#   - Punctuators by maximal munch
#   - Comments, line splices and whitespace tracking
#   - Positions, offsets and restarting from a saved offset
#   - Error conditions with source locations
# =============================================================================

import pytest
from cdeclkit.cparse.lexer import (
    CLexer,
    CTokenType,
    integer_value,
    join_tokens,
    tokenize,
)
from cdeclkit.cparse.errors import (
    LexError,
    UnterminatedCommentError,
    UnterminatedStringError,
    InvalidCharacterError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def lex(source: str) -> list:
    """
    Helper to tokenize and drop the EOF token.
    Tests are focused on meaningful tokens, not structural ones.
    """
    return [t for t in CLexer(source, "<test>").tokenize() if t.type != CTokenType.EOF]


def values(source: str) -> list[str]:
    """Token texts only."""
    return [t.value for t in lex(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source produces no meaningful tokens."""
        assert lex("") == []

    def test_eof_always_last(self):
        """The stream ends with exactly one EOF token."""
        tokens = list(CLexer("int x;").tokenize())
        assert tokens[-1].type == CTokenType.EOF
        assert [t.type for t in tokens].count(CTokenType.EOF) == 1

    def test_keyword_and_identifier(self):
        """Keywords are told apart from identifiers that start with them."""
        tokens = lex("int integer")
        assert tokens[0].type == CTokenType.KEYWORD
        assert tokens[1].type == CTokenType.IDENTIFIER
        assert tokens[1].value == "integer"

    @pytest.mark.parametrize("keyword", ["restrict", "inline", "_Bool", "_Atomic", "typedef", "volatile"])
    def test_c99_keywords(self, keyword):
        """C99 keywords plus _Atomic are keywords."""
        assert lex(keyword)[0].type == CTokenType.KEYWORD

    def test_identifier_with_underscore_and_digits(self):
        """Identifiers may start with an underscore and contain digits."""
        tokens = lex("_x1")
        assert tokens[0].type == CTokenType.IDENTIFIER
        assert tokens[0].value == "_x1"

    def test_declaration_tokens(self):
        """A whole declaration splits as expected."""
        assert values("int (*a2)[3];") == ["int", "(", "*", "a2", ")", "[", "3", "]", ";"]


# =============================================================================
# Number Tests
# =============================================================================

class TestNumbers:
    """Test numeric constants are kept exactly as written."""

    @pytest.mark.parametrize("text", [
        "0", "42", "017", "0x1F", "3.14159265", ".5", "1e-3", "1E+10",
        "0x1p3", "10UL", "2.5f", "0x1Fll", "123LL", "1ULL", "1.0L",
    ])
    def test_number_lexeme(self, text):
        """Each number form is one NUMBER token with the exact text."""
        tokens = lex(text)
        assert len(tokens) == 1
        assert tokens[0].type == CTokenType.NUMBER
        assert tokens[0].value == text

    def test_number_inside_brackets(self):
        """Numbers stop at punctuators."""
        assert values("a[10];") == ["a", "[", "10", "]", ";"]

    def test_sign_only_after_exponent(self):
        """A '+' after a digit is an operator, not part of the number."""
        assert values("1+2") == ["1", "+", "2"]


# =============================================================================
# String and Character Literal Tests
# =============================================================================

class TestLiterals:
    """Test string and character literals keep their raw text."""

    def test_string(self):
        """Strings keep their quotes."""
        tokens = lex('"hello"')
        assert tokens[0].type == CTokenType.STRING
        assert tokens[0].value == '"hello"'

    def test_string_with_escaped_quote(self):
        """An escaped quote does not end the string."""
        tokens = lex(r'"a\"b"')
        assert len(tokens) == 1
        assert tokens[0].value == r'"a\"b"'

    def test_char_literal(self):
        """Character literals have their own kind."""
        tokens = lex("'a'")
        assert tokens[0].type == CTokenType.CHAR_LITERAL
        assert tokens[0].value == "'a'"

    def test_char_escape(self):
        """Escapes in character literals are kept, not decoded."""
        assert values(r"'\n'") == [r"'\n'"]

    def test_wide_string_prefix(self):
        """L and u8 prefixes belong to the literal."""
        assert values('L"wide"') == ['L"wide"']
        assert lex('u8"x"')[0].type == CTokenType.STRING
        assert lex("L'a'")[0].type == CTokenType.CHAR_LITERAL

    def test_prefix_letter_alone_is_identifier(self):
        """L not followed by a quote is an ordinary identifier."""
        tokens = lex("L x")
        assert tokens[0].type == CTokenType.IDENTIFIER


# =============================================================================
# Punctuator Tests
# =============================================================================

class TestPunctuators:
    """Test punctuators use the longest match."""

    @pytest.mark.parametrize("source,expected", [
        ("a<<=b", ["a", "<<=", "b"]),
        ("f(...)", ["f", "(", "...", ")"]),
        ("p->x", ["p", "->", "x"]),
        ("a+++b", ["a", "++", "+", "b"]),
        ("a##b", ["a", "##", "b"]),
        ("x>>=1", ["x", ">>=", "1"]),
        ("a..b", ["a", ".", ".", "b"]),
    ])
    def test_maximal_munch(self, source, expected):
        """The longest punctuator wins at each position."""
        assert values(source) == expected

    def test_punctuator_kind(self):
        """All operators and delimiters share the PUNCTUATOR kind."""
        assert {t.type for t in lex("{ } [ ] ( ) ; , * = ?:")} == {CTokenType.PUNCTUATOR}


# =============================================================================
# Comments and Whitespace Tests
# =============================================================================

class TestCommentsAndWhitespace:
    """Test comments, splices and whitespace handling."""

    def test_comments_are_whitespace(self):
        """Both comment forms are skipped."""
        assert values("int /* c */ x; // tail") == ["int", "x", ";"]

    def test_multiline_comment_line_tracking(self):
        """Lines inside a block comment are counted."""
        tokens = lex("/* a\nb */ x")
        assert tokens[0].line == 2

    def test_leading_space_flag(self):
        """Tokens record whether whitespace preceded them."""
        assert lex("a b")[1].leading_space is True
        assert lex("a(b")[1].leading_space is False
        assert lex("a/**/b")[1].leading_space is True

    def test_line_splice_joins_lines(self):
        """A backslash-newline does not end the line."""
        tokens = list(CLexer("#define X \\\n 1\nY", emit_newlines=True).tokenize())
        kinds = [t.type for t in tokens]
        assert [t.value for t in tokens[:4]] == ["#", "define", "X", "1"]
        assert kinds[4] == CTokenType.NEWLINE

    def test_newlines_only_when_requested(self):
        """NEWLINE tokens appear only with emit_newlines."""
        with_newlines = [t.type for t in CLexer("a\nb", emit_newlines=True).tokenize()]
        assert with_newlines == [
            CTokenType.IDENTIFIER, CTokenType.NEWLINE, CTokenType.IDENTIFIER, CTokenType.EOF,
        ]
        assert CTokenType.NEWLINE not in [t.type for t in CLexer("a\nb").tokenize()]


# =============================================================================
# Position Tests
# =============================================================================

class TestPositions:
    """Test line, column and offset tracking."""

    def test_line_and_column(self):
        """Line and column are 1-indexed."""
        tokens = lex("int\n  x;")
        assert (tokens[1].line, tokens[1].column) == (2, 3)

    def test_offsets(self):
        """Offsets are 0-indexed character positions."""
        assert [t.offset for t in lex("int *p;")] == [0, 4, 5, 6]

    def test_location_includes_offset(self):
        """A token's SourceLocation carries filename and offset."""
        location = lex("int x;")[1].location
        assert location.filename == "<test>"
        assert location.offset == 4
        assert str(location) == "<test>:1:5"

    def test_restart_from_saved_offset(self):
        """A new lexer resumes right after a saved token."""
        source = "int a; char b;"
        semicolon = lex(source)[2]
        resumed = [t for t in CLexer(source, "<test>", start=semicolon.end_offset).tokenize()]
        assert [t.value for t in resumed[:-1]] == ["char", "b", ";"]
        assert resumed[0].column == 8

    def test_restart_tracks_lines(self):
        """Restarting on a later line keeps line numbers right."""
        tokens = list(tokenize("int a;\nchar b;", "<test>", start=7))
        assert (tokens[0].value, tokens[0].line, tokens[0].column) == ("char", 2, 1)

    def test_restart_offset_out_of_range(self):
        """A start offset outside the source is rejected."""
        with pytest.raises(ValueError):
            CLexer("int", start=10)

    def test_tokenizing_is_lazy(self):
        """Tokens before an error are produced before the error is raised."""
        stream = CLexer("int x; @").tokenize()
        assert next(stream).value == "int"
        with pytest.raises(InvalidCharacterError):
            list(stream)


# =============================================================================
# Error Tests
# =============================================================================

class TestLexErrors:
    """Test lexer error conditions."""

    def test_unterminated_comment(self):
        """An open block comment is reported where it starts."""
        with pytest.raises(UnterminatedCommentError) as exc_info:
            lex("int x; /* open")
        location = exc_info.value.location
        assert (location.line, location.column, location.offset) == (1, 8, 7)

    def test_unterminated_string(self):
        """A string ending at the newline is unterminated."""
        with pytest.raises(UnterminatedStringError) as exc_info:
            lex('char *s = "abc;\nint y;')
        assert "unterminated string literal" in str(exc_info.value)
        assert exc_info.value.offset == 10

    def test_unterminated_char(self):
        """Character literals are checked the same way."""
        with pytest.raises(UnterminatedStringError) as exc_info:
            lex("'a")
        assert exc_info.value.quote == "'"
        assert "unterminated character literal" in str(exc_info.value)

    def test_invalid_character(self):
        """Characters outside the C source set are rejected."""
        with pytest.raises(InvalidCharacterError) as exc_info:
            lex("int @x;")
        assert exc_info.value.char == "@"
        assert exc_info.value.offset == 4

    def test_error_message_format(self):
        """Errors show location, source line and a caret."""
        with pytest.raises(InvalidCharacterError) as exc_info:
            lex("int @x;")
        lines = str(exc_info.value).splitlines()
        assert lines[0].startswith("<test>:1:5: error: invalid character '@'")
        assert lines[1] == "    int @x;"
        assert lines[2] == "        ^"

    def test_unclosed_quote_while_skipping(self):
        """In skipping mode an unclosed literal ends at the newline."""
        lexer = CLexer("isn't C\nint", "<test>", emit_newlines=True)
        lexer.skipping = True
        tokens = list(lexer.tokenize())
        assert [t.value for t in tokens[:3]] == ["isn", "'t C", None]
        assert tokens[2].type == CTokenType.NEWLINE
        assert tokens[3].value == "int"

    def test_unclosed_comment_while_skipping(self):
        """Skipping mode does not excuse an open block comment."""
        lexer = CLexer("/* open", "<test>")
        lexer.skipping = True
        with pytest.raises(UnterminatedCommentError):
            list(lexer.tokenize())

    @pytest.mark.parametrize("source", ["/* x", '"x', "'x", "$"])
    def test_errors_are_lex_errors(self, source):
        """All lexer errors share the LexError category."""
        with pytest.raises(LexError):
            lex(source)


# =============================================================================
# Helper Function Tests
# =============================================================================

class TestHelpers:
    """Test module-level helpers."""

    @pytest.mark.parametrize("text,expected", [
        ("10", 10), ("0x1F", 31), ("017", 15), ("0b101", 5), ("10UL", 10),
        ("0x1Fll", 31), ("0", 0), ("3.5", None), ("1e3", None), ("08", None),
    ])
    def test_integer_value(self, text, expected):
        """Integer constants are interpreted, anything else gives None."""
        assert integer_value(text) == expected

    def test_join_tokens(self):
        """Whitespace collapses to single spaces where the source had some."""
        assert join_tokens(lex("int  *  p ;")) == "int * p ;"
        assert join_tokens(lex("{0.5,2.5}")) == "{0.5,2.5}"

    def test_tokenize_helper(self):
        """The convenience function yields no NEWLINE tokens."""
        kinds = [t.type for t in tokenize("a\nb")]
        assert kinds == [CTokenType.IDENTIFIER, CTokenType.IDENTIFIER, CTokenType.EOF]
