"""
cdeclkit Error Hierarchy
========================

This module defines the root of the exception hierarchy for cdeclkit.
All exceptions raised for bad input inherit from CDeclError, allowing
callers to catch everything the toolkit reports with a single except
clause if desired.

Exception Hierarchy
-------------------
CDeclError (base)
└── CFrontendError (see cdeclkit.cparse.errors)
    ├── LexError - tokenization errors
    ├── PreprocessError - directive and macro errors
    └── ParseError - declaration grammar errors

Design Philosophy
-----------------
Each exception captures the source location (filename, line, column and
character offset) where the problem was detected. Errors are ordinary
exceptions: the front end stops at the first one and hands it back to the
caller, who decides whether to continue with other files.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class CDeclError(Exception):
    """
    Base exception for all cdeclkit errors.

    All input-related exceptions in the toolkit inherit from this class:

        try:
            parse_declarations(source)
        except CDeclError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens, declarations and errors all carry one of these. The immutable
    (frozen) design ensures locations cannot be accidentally modified
    after a token has been produced.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        offset: Character offset from the start of the buffer (0-indexed)
    """
    filename: str
    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
