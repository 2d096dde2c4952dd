"""
C Front End Error Hierarchy
===========================

This module defines the exception hierarchy for the C declaration front
end. All exceptions inherit from CFrontendError, which itself inherits
from the base CDeclError for consistent error handling across the toolkit.

Exception Hierarchy
-------------------
CFrontendError (base for all front end errors)
├── LexError - tokenization errors
│   ├── UnterminatedCommentError - missing closing */
│   ├── UnterminatedStringError - missing closing quote
│   └── InvalidCharacterError - character outside the C source set
├── PreprocessError - directive and macro errors
│   ├── UnmatchedEndifError - #endif/#else/#elif without #if
│   ├── UnterminatedConditionalError - #if still open at end of input
│   ├── ElifAfterElseError - #elif following #else
│   ├── DuplicateElseError - second #else in one chain
│   ├── MacroRecursionLimitError - expansion nested too deeply
│   ├── DirectiveSyntaxError - malformed directive or #if expression
│   └── ErrorDirectiveError - #error in an active region
└── ParseError - declaration grammar errors
    ├── UnexpectedTokenError - token does not fit the grammar
    ├── MissingSemicolonError - declaration not terminated
    ├── UnbalancedParensError - (), [] or {} do not pair up
    ├── ConflictingSpecifiersError - e.g. 'float int'
    └── InvalidArraySizeError - negative literal array bound

Error Message Format
--------------------
    main.c:12:9: error: unexpected token 'float'
        long float x;
             ^
    hint: expected identifier or '('
"""

from typing import Optional

from cdeclkit.errors import CDeclError, SourceLocation


# =============================================================================
# Base Front End Exception
# =============================================================================

class CFrontendError(CDeclError):
    """
    Base exception for all C front end errors.

    This class provides common functionality for error messages including
    source location tracking, source line context, and helpful hints.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def offset(self) -> Optional[int]:
        """Character offset of the error, or None when unknown."""
        if self.location is None:
            return None
        return self.location.offset

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            main.c:5:12: error: unterminated string literal
                char *s = "abc;
                          ^
            hint: add closing '"' to complete the string
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexer Errors
# =============================================================================

class LexError(CFrontendError):
    """
    Error while converting source text into tokens.

    Examples:
        - Comment or string not closed before end of input
        - Character that cannot start any C token
    """
    pass


class UnterminatedCommentError(LexError):
    """
    Block comment without a closing */.

    Example:
        /* starts here and never ends
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unterminated comment",
            location=location,
            hint="add closing */ to terminate the comment",
            source_line=source_line,
        )


class UnterminatedStringError(LexError):
    """
    String or character literal without a closing quote.

    Raised when the literal is not closed before the end of the line
    or the end of input.
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        quote: str = '"',
    ):
        self.quote = quote
        kind = "string" if quote == '"' else "character"
        super().__init__(
            f"unterminated {kind} literal",
            location=location,
            hint=f"add closing {quote} to complete the literal",
            source_line=source_line,
        )


class InvalidCharacterError(LexError):
    """Character that is not part of the C source character set."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Preprocessor Errors
# =============================================================================

class PreprocessError(CFrontendError):
    """
    Error during preprocessing.

    Raised when the preprocessor encounters an error processing
    directives like #define, #if, #elif, #endif, or expanding macros.
    """
    pass


class UnmatchedEndifError(PreprocessError):
    """
    Conditional directive with no open #if.

    Raised for #endif, and also for #else or #elif, when the
    conditional stack is empty.
    """

    def __init__(
        self,
        directive: str = "endif",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.directive = directive
        super().__init__(
            f"#{directive} without matching #if",
            location=location,
            source_line=source_line,
        )


class UnterminatedConditionalError(PreprocessError):
    """
    Conditional block still open at end of input.

    The location points at the directive that opened the innermost
    unclosed frame.
    """

    def __init__(
        self,
        directive: str = "if",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.directive = directive
        super().__init__(
            f"unterminated #{directive}",
            location=location,
            hint="add a matching #endif",
            source_line=source_line,
        )


class ElifAfterElseError(PreprocessError):
    """#elif appearing after the #else of the same chain."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "#elif after #else",
            location=location,
            source_line=source_line,
        )


class DuplicateElseError(PreprocessError):
    """Second #else in the same conditional chain."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "#else after #else",
            location=location,
            source_line=source_line,
        )


class MacroRecursionLimitError(PreprocessError):
    """
    Macro expansion nested deeper than the configured limit.

    Self-reference is normally stopped by the hide set, so this only
    fires for very long chains of macros naming other macros.
    """

    def __init__(
        self,
        macro_name: str,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.macro_name = macro_name
        self.limit = limit
        super().__init__(
            f"macro expansion of '{macro_name}' exceeds depth limit {limit}",
            location=location,
            source_line=source_line,
        )


class DirectiveSyntaxError(PreprocessError):
    """Malformed directive, or a #if expression that cannot be evaluated."""
    pass


class ErrorDirectiveError(PreprocessError):
    """#error reached in an active region."""

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"#error {text}".rstrip(),
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Parser Errors
# =============================================================================

class ParseError(CFrontendError):
    """
    Declaration does not follow C declaration grammar.

    Examples:
        - Missing semicolon
        - Mismatched parentheses
        - Incompatible type specifiers
    """
    pass


class UnexpectedTokenError(ParseError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that doesn't match
    the expected grammar rule.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingSemicolonError(ParseError):
    """Declaration or statement not terminated with ';'."""

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"expected ';' before '{found}'",
            location=location,
            source_line=source_line,
        )


class UnbalancedParensError(ParseError):
    """Opening bracket without its partner, or a stray closing one."""

    def __init__(
        self,
        opener: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.opener = opener
        self.found = found
        super().__init__(
            f"unbalanced '{opener}': found '{found}'",
            location=location,
            source_line=source_line,
        )


class ConflictingSpecifiersError(ParseError):
    """
    Type specifiers that cannot be combined.

    Example:
        long float x;      // 'long' only combines with int and double
    """

    def __init__(
        self,
        specifiers: list[str],
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.specifiers = list(specifiers)
        super().__init__(
            f"conflicting type specifiers '{' '.join(specifiers)}'",
            location=location,
            source_line=source_line,
        )


class InvalidArraySizeError(ParseError):
    """Array bound given as a negative integer literal."""

    def __init__(
        self,
        size: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.size = size
        super().__init__(
            f"array size '{size}' is negative",
            location=location,
            source_line=source_line,
        )
