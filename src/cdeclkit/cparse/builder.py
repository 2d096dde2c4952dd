"""
Type Tree Builder
=================

This module turns parsed declarations into resolved ones: one record per
declared identifier, carrying the identifier's complete type tree.

Folding a Declarator
--------------------
The declarator tree is walked from its outermost node toward the name,
wrapping the type built so far. The walk starts with the base type named
by the specifier set:

    int (*a2)[3]
        syntax:  Array(3) -> Pointer -> a2
        fold:    int
                 array[3] of int
                 pointer to array[3] of int

    int *a4[6][7]
        syntax:  Pointer -> Array(7) -> Array(6) -> a4
        fold:    int
                 pointer to int
                 array[7] of pointer to int
                 array[6] of array[7] of pointer to int

Array Bounds
------------
| Written     | ArrayType                   |
|-------------|-----------------------------|
| [10]        | size=10                     |
| [0x10]      | size=16                     |
| []          | size=None, size_expr=None   |
| [N * 2]     | size=None, size_expr='N * 2' |
| [-1]        | InvalidArraySizeError       |
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from cdeclkit.errors import SourceLocation
from cdeclkit.cparse.lexer import CTokenType, integer_value, join_tokens
from cdeclkit.cparse.types import (
    ArrayType,
    CType,
    FunctionType,
    NamedType,
    Parameter,
    PointerType,
    SpecifierSet,
)
from cdeclkit.cparse.ast import (
    ArrayDeclarator,
    Declaration,
    Declarator,
    FunctionDeclarator,
    FunctionDefinition,
    InitDeclarator,
    NameDeclarator,
    ParameterDeclaration,
    PointerDeclarator,
    TranslationUnit,
)
from cdeclkit.cparse.errors import InvalidArraySizeError


logger = logging.getLogger(__name__)


# =============================================================================
# Resolved Declaration
# =============================================================================

@dataclass
class ResolvedDeclaration:
    """
    One declared identifier with its type.

    Attributes:
        name: The identifier (None for an abstract member such as `int : 3`)
        type: Complete type tree, base type qualifiers included
        specifiers: The declaration's specifier set
        location: Where the declaration starts
        initializer: Initializer text, if any
        bit_width: Bit-field width text (struct members only)
        is_definition: True for a function definition with a body
    """
    name: Optional[str]
    type: CType
    specifiers: SpecifierSet
    location: SourceLocation = field(compare=False)
    initializer: Optional[str] = None
    bit_width: Optional[str] = None
    is_definition: bool = False

    @property
    def storage_classes(self) -> frozenset[str]:
        return self.specifiers.storage_classes

    @property
    def function_specifiers(self) -> frozenset[str]:
        return self.specifiers.function_specifiers

    @property
    def is_typedef(self) -> bool:
        return self.specifiers.is_typedef

    @property
    def is_function(self) -> bool:
        return isinstance(self.type, FunctionType)

    def to_c(self) -> str:
        """
        Canonical C text for this one identifier, ending with ';'.

            static const char *const names[4] = {"a", "b"};
        """
        text = self.type.to_c(self.name or "")
        if self.bit_width is not None:
            text = f"{text} : {self.bit_width}"
        if self.initializer is not None:
            text = f"{text} = {self.initializer}"
        prefix = self.specifiers.prefix()
        return f"{prefix} {text};" if prefix else f"{text};"

    def __str__(self) -> str:
        return self.to_c()


# =============================================================================
# Builder
# =============================================================================

class TypeBuilder:
    """
    Folds specifiers and declarators into type trees.

    The builder keeps no state between calls other than the source lines
    used for error context.

    Usage:
        builder = TypeBuilder()
        for resolved in builder.build_unit(unit):
            print(resolved.name, resolved.type.describe())
    """

    def __init__(self, source_lines: Optional[list[str]] = None):
        """
        Initialize the builder.

        Args:
            source_lines: Original source lines for error context
        """
        self.source_lines = source_lines or []

    def build_unit(
        self,
        unit: TranslationUnit,
        include_locals: bool = False,
    ) -> list[ResolvedDeclaration]:
        """
        Resolve every file-scope declaration of a translation unit.

        Args:
            unit: The parsed translation unit
            include_locals: Also resolve declarations inside function
                bodies, listed right after their function

        Returns:
            Resolved declarations in source order
        """
        resolved = []
        for item in unit.items:
            if isinstance(item, FunctionDefinition):
                resolved.append(self.build_definition(item))
                if include_locals:
                    for local in item.body.declarations():
                        resolved.extend(self.build(local))
            else:
                resolved.extend(self.build(item))
        return resolved

    def build(self, declaration: Declaration) -> list[ResolvedDeclaration]:
        """
        Resolve one declaration, one record per declarator.

        A declaration that only declares a tag yields nothing.

        Raises:
            InvalidArraySizeError: For a negative literal array bound
        """
        return [
            self._resolve_init_declarator(declaration, init)
            for init in declaration.declarators
        ]

    def build_definition(self, definition: FunctionDefinition) -> ResolvedDeclaration:
        """Resolve the function declared by a definition."""
        declaration = definition.declaration
        resolved = self._resolve_init_declarator(declaration, declaration.declarators[0])
        resolved.is_definition = True
        return resolved

    def base_type(self, specifiers: SpecifierSet) -> NamedType:
        """The innermost type named by a specifier set."""
        return NamedType(specifiers.base_type, specifiers.qualifiers)

    def resolve(
        self,
        specifiers: SpecifierSet,
        declarator: Declarator,
    ) -> tuple[Optional[str], CType]:
        """
        Fold a declarator around the specifiers' base type.

        Returns:
            (declared name or None, type tree)
        """
        ctype: CType = self.base_type(specifiers)
        node = declarator

        while not isinstance(node, NameDeclarator):
            if isinstance(node, PointerDeclarator):
                ctype = PointerType(ctype, node.qualifiers)
            elif isinstance(node, ArrayDeclarator):
                size, size_expr = self._array_bound(node)
                ctype = ArrayType(ctype, size, size_expr)
            elif isinstance(node, FunctionDeclarator):
                ctype = FunctionType(
                    ctype,
                    tuple(self._resolve_parameter(param) for param in node.parameters),
                    node.variadic,
                    node.has_prototype,
                )
            else:
                raise TypeError(f"unknown declarator node {node!r}")
            node = node.inner

        return node.name, ctype

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve_init_declarator(
        self,
        declaration: Declaration,
        init: InitDeclarator,
    ) -> ResolvedDeclaration:
        name, ctype = self.resolve(declaration.specifiers, init.declarator)
        resolved = ResolvedDeclaration(
            name=name,
            type=ctype,
            specifiers=declaration.specifiers,
            location=init.location,
            initializer=init.initializer.text if init.initializer is not None else None,
            bit_width=join_tokens(init.bit_width) if init.bit_width is not None else None,
        )
        logger.debug(f"Resolved {name}: {ctype.describe()}")
        return resolved

    def _resolve_parameter(self, param: ParameterDeclaration) -> Parameter:
        name, ctype = self.resolve(param.specifiers, param.declarator)
        return Parameter(ctype, name, param.specifiers.storage_classes)

    def _array_bound(self, node: ArrayDeclarator) -> tuple[Optional[int], Optional[str]]:
        """
        Interpret an array bound.

        Returns:
            (size, None) for an integer literal, (None, text) for any
            other expression, (None, None) for []

        Raises:
            InvalidArraySizeError: If the literal is negative
        """
        tokens = node.size
        if not tokens:
            return None, None

        sign = 1
        digits = tokens
        if len(tokens) == 2 and tokens[0].is_punct("+", "-"):
            sign = -1 if tokens[0].value == "-" else 1
            digits = tokens[1:]

        if len(digits) == 1 and digits[0].type == CTokenType.NUMBER:
            value = integer_value(digits[0].value)
            if value is not None:
                value *= sign
                if value < 0:
                    raise InvalidArraySizeError(
                        node.size_text,
                        tokens[0].location,
                        self._get_source_line(tokens[0].line),
                    )
                return value, None

        return None, node.size_text

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None
