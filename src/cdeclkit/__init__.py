"""
cdeclkit - C Declaration and Preprocessor Front End
===================================================

This package reads a C translation unit and reports the structure of
every declaration in it: what each name is, as a tree of pointers, arrays
and functions around a base type.

Main Components
---------------
- **cparse**: the front end
    Lexer, token-level preprocessor, declarator parser and type tree builder

- **cli**: command-line tool (cdump)
    Prints each declaration of a file in canonical C, or the
    preprocessed token stream

Quick Start
-----------
Resolve declarations:
    >>> from cdeclkit import parse_declarations
    >>> decl = parse_declarations('int *a4[6][7];')[0]
    >>> decl.type.describe()
    'array[6] of array[7] of pointer to int'

Run the whole front end with options:
    >>> from cdeclkit import CFrontend, FrontendOptions
    >>> result = CFrontend(FrontendOptions(defines={"TEST": ""})).parse_file("main.c")
    >>> result.success
    True

Or use the command-line tool:
    $ cdump main.c -DTEST
    $ cdump main.c -E
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from cdeclkit.errors import CDeclError, SourceLocation
from cdeclkit.cparse import (
    CFrontend,
    FrontendOptions,
    FrontendResult,
    parse_declarations,
    parse_file,
    CFrontendError,
    LexError,
    PreprocessError,
    ParseError,
    CType,
    NamedType,
    PointerType,
    ArrayType,
    FunctionType,
    ResolvedDeclaration,
)

__all__ = [
    # Version info
    "__version__",
    # Front end
    "CFrontend",
    "FrontendOptions",
    "FrontendResult",
    "parse_declarations",
    "parse_file",
    # Exception hierarchy
    "CDeclError",
    "SourceLocation",
    "CFrontendError",
    "LexError",
    "PreprocessError",
    "ParseError",
    # Types
    "CType",
    "NamedType",
    "PointerType",
    "ArrayType",
    "FunctionType",
    "ResolvedDeclaration",
]
