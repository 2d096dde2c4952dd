"""
C Declaration Front End
=======================

This package implements a front end for C declarations. It provides:

- A lexer producing a lazy, restartable token stream
- A token-level preprocessor (object-like macros, conditional compilation)
- A recursive descent parser for declarations and declarators
- A builder folding declarators into immutable type trees

Pipeline
--------
    C Source → Lexer → Preprocessor → Parser → Type Builder → Declarations

Usage
-----
>>> from cdeclkit.cparse import parse_declarations
>>> for decl in parse_declarations('''
... #define N 3
... int (*a2)[N], *a1[4];
... '''):
...     print(decl.name, '-', decl.type.describe())
a2 - pointer to array[3] of int
a1 - array[4] of pointer to int

Language Subset
---------------
Supported:
- All C99 declaration specifiers, in any order
- Pointers, arrays and function declarators nested arbitrarily
- struct, union and enum bodies, typedef names, bit-fields
- Function definitions (bodies kept as declarations + opaque statements)

Not supported:
- Function-like macro expansion, token pasting, stringizing
- Reading #include files
- Expression evaluation beyond #if conditions
"""

from cdeclkit.cparse.frontend import (
    CFrontend,
    FrontendOptions,
    FrontendResult,
    parse_declarations,
    parse_file,
)
from cdeclkit.cparse.errors import (
    CFrontendError,
    LexError,
    UnterminatedCommentError,
    UnterminatedStringError,
    InvalidCharacterError,
    PreprocessError,
    UnmatchedEndifError,
    UnterminatedConditionalError,
    ElifAfterElseError,
    DuplicateElseError,
    MacroRecursionLimitError,
    DirectiveSyntaxError,
    ErrorDirectiveError,
    ParseError,
    UnexpectedTokenError,
    MissingSemicolonError,
    UnbalancedParensError,
    ConflictingSpecifiersError,
    InvalidArraySizeError,
)
from cdeclkit.cparse.lexer import CLexer, CTokenType, CToken
from cdeclkit.cparse.preprocessor import Preprocessor, Macro, IncludeDirective, preprocess
from cdeclkit.cparse.parser import CParser
from cdeclkit.cparse.builder import TypeBuilder, ResolvedDeclaration
from cdeclkit.cparse.types import (
    SpecifierSet,
    TagSpecifier,
    Enumerator,
    CType,
    NamedType,
    PointerType,
    ArrayType,
    FunctionType,
    Parameter,
)
from cdeclkit.cparse.ast import (
    TranslationUnit,
    Declaration,
    InitDeclarator,
    FunctionDefinition,
    Block,
    Statement,
    NameDeclarator,
    PointerDeclarator,
    ArrayDeclarator,
    FunctionDeclarator,
)

__all__ = [
    # Main API
    "CFrontend",
    "FrontendOptions",
    "FrontendResult",
    "parse_declarations",
    "parse_file",
    # Errors
    "CFrontendError",
    "LexError",
    "UnterminatedCommentError",
    "UnterminatedStringError",
    "InvalidCharacterError",
    "PreprocessError",
    "UnmatchedEndifError",
    "UnterminatedConditionalError",
    "ElifAfterElseError",
    "DuplicateElseError",
    "MacroRecursionLimitError",
    "DirectiveSyntaxError",
    "ErrorDirectiveError",
    "ParseError",
    "UnexpectedTokenError",
    "MissingSemicolonError",
    "UnbalancedParensError",
    "ConflictingSpecifiersError",
    "InvalidArraySizeError",
    # Lexer
    "CLexer",
    "CTokenType",
    "CToken",
    # Preprocessor
    "Preprocessor",
    "Macro",
    "IncludeDirective",
    "preprocess",
    # Parser and builder
    "CParser",
    "TypeBuilder",
    "ResolvedDeclaration",
    # Types
    "SpecifierSet",
    "TagSpecifier",
    "Enumerator",
    "CType",
    "NamedType",
    "PointerType",
    "ArrayType",
    "FunctionType",
    "Parameter",
    # Syntax tree
    "TranslationUnit",
    "Declaration",
    "InitDeclarator",
    "FunctionDefinition",
    "Block",
    "Statement",
    "NameDeclarator",
    "PointerDeclarator",
    "ArrayDeclarator",
    "FunctionDeclarator",
]
