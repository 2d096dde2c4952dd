"""
C Lexer (Tokenizer)
===================

This module implements the lexer for the C declaration front end.
It converts source text into a lazy stream of tokens for the
preprocessor and the parser.

Token Categories
----------------
- Keywords: int, char, const, static, struct, typedef, etc.
- Identifiers: variable, function, macro and typedef names
- Numbers: integer and floating constants, with their suffixes
- Strings: "double quoted", optionally prefixed (L"wide")
- Characters: 'single quoted'
- Punctuators: ( ) [ ] { } * , ; = -> <<= ... and the rest of C's set
- Newlines: only when requested, for the preprocessor's directive lines

Number Lexemes
--------------
Numbers are kept as the exact text written in the source. Suffix letters
belong to the token and are not interpreted here:

| Source      | Token value  |
|-------------|--------------|
| 3.14159265  | '3.14159265' |
| 10UL        | '10UL'       |
| 0x1Fll      | '0x1Fll'     |
| 2.5f        | '2.5f'       |

Comments
--------
- Single-line: // comment
- Multi-line: /* comment */
Both are treated as whitespace. A backslash at the end of a line joins
it with the next one.

Example Usage
-------------
>>> from cdeclkit.cparse.lexer import CLexer
>>> for token in CLexer("int *p;", "test.c").tokenize():
...     print(token)
Token(KEYWORD, 'int', 1:1)
Token(PUNCTUATOR, '*', 1:5)
Token(IDENTIFIER, 'p', 1:6)
Token(PUNCTUATOR, ';', 1:7)
Token(EOF, 1:8)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Iterator, Optional
import string

from cdeclkit.errors import SourceLocation
from cdeclkit.cparse.errors import (
    UnterminatedCommentError,
    UnterminatedStringError,
    InvalidCharacterError,
)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class CTokenType(Enum):
    """
    Token kinds produced by the lexer.

    Punctuators share one kind; the parser tells them apart by their
    text. Keywords are distinguished from identifiers so the declaration
    parser can recognize specifiers without a lookup table of its own.
    """

    EOF = auto()            # End of input
    NEWLINE = auto()        # End of a logical line (preprocessor only)

    IDENTIFIER = auto()
    KEYWORD = auto()
    NUMBER = auto()
    STRING = auto()
    CHAR_LITERAL = auto()
    PUNCTUATOR = auto()


# =============================================================================
# Keyword and Punctuator Tables
# =============================================================================

KEYWORDS: frozenset[str] = frozenset({
    # Type specifiers
    "void", "char", "short", "int", "long", "float", "double",
    "signed", "unsigned", "_Bool", "_Complex",
    "struct", "union", "enum",

    # Storage classes
    "typedef", "extern", "static", "auto", "register",

    # Qualifiers and function specifiers
    "const", "volatile", "restrict", "_Atomic", "inline",

    # Statements and operators
    "if", "else", "while", "for", "do", "switch", "case", "default",
    "break", "continue", "return", "goto", "sizeof",
})

# Ordered longest first so the scanner can apply maximal munch
PUNCTUATORS: tuple[str, ...] = (
    "...", "<<=", ">>=",
    "->", "++", "--", "<<", ">>", "<=", ">=", "==", "!=", "&&", "||",
    "*=", "/=", "%=", "+=", "-=", "&=", "^=", "|=", "##",
    "[", "]", "(", ")", "{", "}", ".", "&", "*", "+", "-", "~", "!",
    "/", "%", "<", ">", "^", "|", "?", ":", ";", "=", ",", "#",
)

# Identifiers that turn a following quote into a prefixed literal
STRING_PREFIXES = frozenset({"L", "u", "U", "u8"})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class CToken:
    """
    Represents a single token from C source code.

    This immutable class stores the token kind, its exact lexeme and
    where it starts. The offset allows a new lexer to resume right after
    any token.

    Attributes:
        type: The CTokenType classification
        value: The lexeme text exactly as written (None for EOF/NEWLINE)
        offset: Character offset of the first character (0-indexed)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
        leading_space: True if whitespace or a comment preceded the token
    """
    type: CTokenType
    value: Optional[str]
    offset: int
    line: int
    column: int
    filename: str = "<input>"
    leading_space: bool = field(default=False, compare=False)

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column, self.offset)

    @property
    def end_offset(self) -> int:
        """Offset just past the token's lexeme."""
        return self.offset + len(self.value or "")

    def is_punct(self, *values: str) -> bool:
        """Return True if this is a punctuator with one of the given texts."""
        return self.type == CTokenType.PUNCTUATOR and self.value in values

    def is_keyword(self, *values: str) -> bool:
        """Return True if this is a keyword with one of the given texts."""
        return self.type == CTokenType.KEYWORD and self.value in values

    def is_name(self) -> bool:
        """Return True for identifiers and keywords (macro names may be either)."""
        return self.type in (CTokenType.IDENTIFIER, CTokenType.KEYWORD)

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        if self.type == CTokenType.EOF:
            return "end of input"
        if self.type == CTokenType.NEWLINE:
            return "end of line"
        return self.value or ""


# =============================================================================
# Lexer Implementation
# =============================================================================

class CLexer:
    """
    Tokenizes C source code.

    The lexer handles the lexical elements needed by the declaration
    front end:
    - Keywords and identifiers
    - Numeric constants with suffixes, kept verbatim
    - String and character literals, kept verbatim with their quotes
    - All C punctuators, longest match first
    - Comments (// and /* */) and line splices

    Tokenizing is lazy: tokens are produced as the caller pulls them.
    Restarting from a saved token is done by building a new lexer with
    start=token.end_offset.

    Usage:
        lexer = CLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
        emit_newlines: Produce NEWLINE tokens at line ends
        skipping: Lines are being discarded; a lone quote or stray
            character is not an error
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Horizontal whitespace; "\n" is handled separately
    BLANKS = " \t\r\f\v"

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        start: int = 0,
        emit_newlines: bool = False,
    ):
        """
        Initialize the lexer with source code.

        Args:
            source: The C source code to tokenize
            filename: Name of the source file (for error messages)
            start: Offset to begin scanning at
            emit_newlines: Yield NEWLINE tokens (used by the preprocessor)
        """
        if start < 0 or start > len(source):
            raise ValueError(f"start offset {start} outside source of length {len(source)}")

        self.source = source
        self.filename = filename
        self.emit_newlines = emit_newlines

        # Set by the preprocessor while inside a false conditional branch
        self.skipping = False

        self._pos = start
        self._line = source.count("\n", 0, start) + 1
        self._line_start_pos = source.rfind("\n", 0, start) + 1
        self._column = start - self._line_start_pos + 1

    def tokenize(self) -> Iterator[CToken]:
        """
        Generate tokens from the source code.

        Yields:
            CToken objects, always ending with a single EOF token

        Raises:
            LexError: If a comment or literal is not terminated, or an
                invalid character is found
        """
        while True:
            skipped = self._skip_whitespace_and_comments()

            if self._at_end():
                break

            if self._peek() == "\n":
                token = self._make_token(CTokenType.NEWLINE, None, self._pos, self._line, self._column)
                self._advance()
                if self.emit_newlines:
                    yield token
                continue

            yield self._scan_token(skipped)

        yield self._make_token(CTokenType.EOF, None, self._pos, self._line, self._column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        Updates line and column tracking for error reporting.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: CTokenType,
        value: Optional[str],
        offset: int,
        line: int,
        column: int,
        leading_space: bool = False,
    ) -> CToken:
        """Create a token starting at the given position."""
        return CToken(
            type=token_type,
            value=value,
            offset=offset,
            line=line,
            column=column,
            filename=self.filename,
            leading_space=leading_space,
        )

    def _location(self, offset: int, line: int, column: int) -> SourceLocation:
        return SourceLocation(self.filename, line, column, offset)

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> bool:
        """
        Skip blanks, comments and line splices, stopping at a newline.

        Returns:
            True if anything was skipped
        """
        start = self._pos
        while not self._at_end():
            char = self._peek()

            if char in self.BLANKS:
                self._advance()
                continue

            # Line splice: backslash immediately before the newline
            if char == "\\" and self._peek(1) == "\n":
                self._advance()
                self._advance()
                continue
            if char == "\\" and self._peek(1) == "\r" and self._peek(2) == "\n":
                self._advance()
                self._advance()
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                self._skip_single_line_comment()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_multi_line_comment()
                continue

            break

        return self._pos != start

    def _skip_single_line_comment(self) -> None:
        """Skip a single-line comment, leaving the newline in place."""
        while not self._at_end() and self._peek() != "\n":
            self._advance()

    def _skip_multi_line_comment(self) -> None:
        """
        Skip a multi-line comment (/* ... */).

        Raises:
            UnterminatedCommentError: If the comment is not terminated
        """
        start = (self._pos, self._line, self._column)
        source_line = self._get_current_line()

        self._advance()
        self._advance()

        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

        raise UnterminatedCommentError(self._location(*start), source_line)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self, leading_space: bool) -> CToken:
        """Scan the next token from source."""
        start = (self._pos, self._line, self._column)
        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start, leading_space)

        if char.isdigit() or (char == "." and self._peek(1).isdigit()):
            return self._scan_number(start, leading_space)

        if char in "\"'":
            return self._scan_quoted(start, leading_space, "")

        return self._scan_punctuator(start, leading_space)

    def _scan_identifier(self, start: tuple[int, int, int], leading_space: bool) -> CToken:
        """
        Scan an identifier or keyword.

        An identifier that is a string prefix (L, u, U, u8) immediately
        followed by a quote starts a prefixed literal instead.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)

        if name in STRING_PREFIXES and self._peek() in ("\"", "'"):
            return self._scan_quoted(start, leading_space, name)

        token_type = CTokenType.KEYWORD if name in KEYWORDS else CTokenType.IDENTIFIER
        return self._make_token(token_type, name, *start, leading_space=leading_space)

    def _scan_number(self, start: tuple[int, int, int], leading_space: bool) -> CToken:
        """
        Scan a numeric constant as a preprocessing number.

        Digits, letters, underscores and dots are consumed, plus a sign
        right after an exponent letter (e, E, p, P). This covers
        decimal, octal, hex and floating forms together with suffixes.
        """
        chars = [self._advance()]
        while not self._at_end():
            char = self._peek()
            if char in "+-" and chars[-1] in "eEpP":
                chars.append(self._advance())
            elif char in self.IDENT_CHARS or char == ".":
                chars.append(self._advance())
            else:
                break

        return self._make_token(CTokenType.NUMBER, "".join(chars), *start, leading_space=leading_space)

    def _scan_quoted(self, start: tuple[int, int, int], leading_space: bool, prefix: str) -> CToken:
        """
        Scan a string or character literal, keeping its raw text.

        Escape sequences are skipped over but not decoded; the declaration
        front end never needs literal values.

        While skipping, an unclosed literal ends at the end of the line
        instead, so discarded text may hold stray apostrophes.

        Raises:
            UnterminatedStringError: At a newline or end of input before
                the closing quote
        """
        quote = self._advance()
        token_type = CTokenType.STRING if quote == '"' else CTokenType.CHAR_LITERAL
        chars = [prefix, quote]

        while not self._at_end():
            char = self._peek()

            if char == quote:
                chars.append(self._advance())
                return self._make_token(token_type, "".join(chars), *start, leading_space=leading_space)

            if char == "\n":
                break

            if char == "\\":
                chars.append(self._advance())
                if self._at_end():
                    break
            chars.append(self._advance())

        if self.skipping:
            return self._make_token(token_type, "".join(chars), *start, leading_space=leading_space)

        raise UnterminatedStringError(
            self._location(*start),
            self._get_line_at(start[0]),
            quote=quote,
        )

    def _scan_punctuator(self, start: tuple[int, int, int], leading_space: bool) -> CToken:
        """
        Scan an operator or delimiter using the longest match.

        Raises:
            InvalidCharacterError: If no punctuator starts here and the
                lexer is not skipping
        """
        for punct in PUNCTUATORS:
            if self.source.startswith(punct, self._pos):
                for _ in punct:
                    self._advance()
                return self._make_token(CTokenType.PUNCTUATOR, punct, *start, leading_space=leading_space)

        if self.skipping:
            return self._make_token(CTokenType.PUNCTUATOR, self._advance(), *start, leading_space=leading_space)

        raise InvalidCharacterError(
            self._peek(),
            self._location(*start),
            self._get_current_line(),
        )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        return self._get_line_at(self._pos)

    def _get_line_at(self, offset: int) -> str:
        line_start = self.source.rfind("\n", 0, offset) + 1
        line_end = self.source.find("\n", offset)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[line_start:line_end]


# =============================================================================
# Convenience Functions
# =============================================================================

def integer_value(text: str) -> Optional[int]:
    """
    Interpret an integer constant lexeme, ignoring u/U/l/L suffixes.

    Returns:
        The value, or None if the text is not an integer constant
        (floating constants, malformed digits)
    """
    digits = text.rstrip("uUlL")
    if not digits or "_" in digits:
        return None
    lowered = digits.lower()
    try:
        if lowered.startswith("0x"):
            return int(digits[2:], 16)
        if lowered.startswith("0b"):
            return int(digits[2:], 2)
        if len(digits) > 1 and digits.startswith("0"):
            return int(digits[1:], 8)
        return int(digits, 10)
    except ValueError:
        return None


def join_tokens(tokens: Iterable[CToken]) -> str:
    """
    Render tokens back to text, keeping a single space wherever the
    source had whitespace before a token.
    """
    parts: list[str] = []
    for token in tokens:
        if token.value is None:
            continue
        if parts and token.leading_space:
            parts.append(" ")
        parts.append(token.value)
    return "".join(parts)


def tokenize(source: str, filename: str = "<input>", start: int = 0) -> Iterator[CToken]:
    """
    Tokenize C source text without newline tokens.

    Args:
        source: Source code to tokenize
        filename: Source filename for error reporting
        start: Offset to resume scanning at

    Returns:
        Lazy iterator of tokens ending with EOF
    """
    return CLexer(source, filename, start=start).tokenize()
