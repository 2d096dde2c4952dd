"""
C Front End Main Module
=======================

This module provides the main interface of the C declaration front end.
It runs the complete pipeline over one in-memory translation unit:

    Source → Lex → Preprocess → Parse → Build types → Declarations

Usage
-----
Command line:
    $ cdump main.c -DTEST

Programmatic:
    >>> from cdeclkit.cparse import parse_declarations
    >>> [d.to_c() for d in parse_declarations('int (*a2)[3], *a1[4];')]
    ['int (*a2)[3];', 'int *a1[4];']

Error Handling
--------------
CFrontend.parse_source() never raises for bad input: the first lexer,
preprocessor or parser error is stored in FrontendResult.error and
success is False. The module-level parse_declarations() raises that
error instead.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cdeclkit.cparse.lexer import CLexer, CToken
from cdeclkit.cparse.preprocessor import (
    DEFAULT_MAX_EXPANSION_DEPTH,
    IncludeDirective,
    Macro,
    Preprocessor,
)
from cdeclkit.cparse.parser import CParser
from cdeclkit.cparse.builder import ResolvedDeclaration, TypeBuilder
from cdeclkit.cparse.ast import TranslationUnit
from cdeclkit.cparse.errors import CFrontendError


logger = logging.getLogger(__name__)


@dataclass
class FrontendOptions:
    """
    Front end configuration options.

    Attributes:
        filename: Name used in locations when parsing a string
        defines: Predefined macros, name -> replacement text ("" means 1)
        max_expansion_depth: Limit on nested macro expansion
        typedef_names: Names treated as typedefs before parsing starts,
                       for types declared in headers that are not read
        include_locals: Also resolve declarations inside function bodies
    """
    filename: str = "<input>"
    defines: dict[str, str] = None
    max_expansion_depth: int = DEFAULT_MAX_EXPANSION_DEPTH
    typedef_names: list[str] = None
    include_locals: bool = False

    def __post_init__(self):
        if self.defines is None:
            self.defines = {}
        if self.typedef_names is None:
            self.typedef_names = []
        if self.max_expansion_depth < 1:
            raise ValueError("max_expansion_depth must be at least 1")


@dataclass
class FrontendResult:
    """
    Result of running the front end over one translation unit.

    Attributes:
        filename: Source filename
        success: True if every stage completed
        declarations: Resolved declarations in source order
        unit: The parsed translation unit (if parsing succeeded)
        tokens: Preprocessed tokens, ending with EOF
        includes: #include directives seen in active regions
        macros: Macro table at the end of preprocessing
        token_count: Number of preprocessed tokens, EOF excluded
        error: The first error encountered, if any
    """
    filename: str = ""
    success: bool = False
    declarations: list[ResolvedDeclaration] = None
    unit: Optional[TranslationUnit] = None
    tokens: list[CToken] = None
    includes: list[IncludeDirective] = None
    macros: dict[str, Macro] = None
    token_count: int = 0
    error: Optional[CFrontendError] = None

    def __post_init__(self):
        if self.declarations is None:
            self.declarations = []
        if self.tokens is None:
            self.tokens = []
        if self.includes is None:
            self.includes = []
        if self.macros is None:
            self.macros = {}

    def raise_for_error(self) -> None:
        """Re-raise the stored error, if there is one."""
        if self.error is not None:
            raise self.error


class CFrontend:
    """
    C declaration front end.

    Example:
        frontend = CFrontend(FrontendOptions(defines={"TEST": ""}))
        result = frontend.parse_file("main.c")
        for decl in result.declarations:
            print(decl.to_c())

    Attributes:
        options: Front end configuration options
    """

    def __init__(self, options: Optional[FrontendOptions] = None):
        """
        Initialize the front end.

        Args:
            options: Configuration (uses defaults if None)
        """
        self.options = options or FrontendOptions()

    def parse_source(self, source: str, filename: Optional[str] = None) -> FrontendResult:
        """
        Parse C source code into resolved declarations.

        Args:
            source: C source code string
            filename: Source filename for locations (defaults to options)

        Returns:
            FrontendResult; on bad input success is False and error is set
        """
        filename = filename or self.options.filename
        source_lines = source.splitlines()
        result = FrontendResult(filename=filename)

        try:
            # Stage 1: lexing and preprocessing
            preprocessor = Preprocessor(
                filename,
                self.options.defines,
                self.options.max_expansion_depth,
                source_lines,
            )
            lexer = CLexer(source, filename, emit_newlines=True)
            result.tokens = preprocessor.process(lexer)
            result.token_count = len(result.tokens) - 1
            result.macros = preprocessor.macros
            result.includes = preprocessor.includes

            # Stage 2: parsing
            parser = CParser(
                result.tokens,
                filename,
                source_lines,
                self.options.typedef_names,
            )
            result.unit = parser.parse()

            # Stage 3: type trees
            builder = TypeBuilder(source_lines)
            result.declarations = builder.build_unit(
                result.unit,
                include_locals=self.options.include_locals,
            )
            result.success = True

        except CFrontendError as e:
            logger.debug(f"{filename}: {e.message}")
            result.error = e
            result.success = False

        logger.info(
            f"{filename}: {result.token_count} tokens, "
            f"{len(result.declarations)} declarations, "
            f"{len(result.macros)} macros"
            + ("" if result.success else " (failed)")
        )
        return result

    def parse_file(self, filepath: str | Path) -> FrontendResult:
        """
        Parse a C source file.

        Args:
            filepath: Path to the C source file (read as UTF-8)

        Returns:
            FrontendResult for the file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.parse_source(source, str(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_declarations(
    source: str,
    filename: str = "<input>",
    defines: Optional[dict[str, str]] = None,
    typedef_names: Optional[list[str]] = None,
) -> list[ResolvedDeclaration]:
    """
    Parse C source and return its resolved file-scope declarations.

    This is the primary high-level interface of the front end.

    Args:
        source: C source code
        filename: Source filename for error messages
        defines: Predefined macros
        typedef_names: Names to treat as typedefs up front

    Returns:
        Resolved declarations in source order

    Raises:
        CFrontendError: The first lexer, preprocessor or parser error

    Example:
        >>> decls = parse_declarations('char *const p2;')
        >>> decls[0].type.describe()
        'const pointer to char'
    """
    options = FrontendOptions(
        filename=filename,
        defines=defines,
        typedef_names=typedef_names,
    )
    result = CFrontend(options).parse_source(source)
    result.raise_for_error()
    return result.declarations


def parse_file(
    filepath: str | Path,
    defines: Optional[dict[str, str]] = None,
) -> list[ResolvedDeclaration]:
    """
    Parse a C source file and return its resolved declarations.

    Raises:
        CFrontendError: The first lexer, preprocessor or parser error
        FileNotFoundError: If the file does not exist
    """
    result = CFrontend(FrontendOptions(defines=defines)).parse_file(filepath)
    result.raise_for_error()
    return result.declarations
