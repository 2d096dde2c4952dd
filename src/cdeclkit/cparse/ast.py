"""
C Declaration Syntax Tree
=========================

This module defines the nodes produced by the declaration parser. They
record what was written, before any type is computed: the specifier set,
and for each declared name a declarator tree built from the name outward.

Node Hierarchy
--------------
ASTNode (base)
├── TranslationUnit - root node, file-scope declarations in order
├── Declaration - specifiers + init-declarators
├── InitDeclarator - declarator + optional initializer / bit-field width
├── ParameterDeclaration - one entry of a parameter list
├── FunctionDefinition - declaration followed by a body
├── Block - { ... } of local declarations, blocks and statements
├── Statement - opaque token span ending in ';' or before a block
├── Initializer - opaque balanced token span after '='
└── Declarator
    ├── NameDeclarator - the identifier (None in abstract declarators)
    ├── PointerDeclarator - '*' with qualifiers
    ├── ArrayDeclarator - '[size]'
    └── FunctionDeclarator - '(parameters)'

Declarator Shape
----------------
Each derivation node holds an `inner` declarator pointing toward the
identifier. The outermost node is the derivation applied first to the
base type:

    int (*a2)[3]    ArrayDeclarator(3, PointerDeclarator(NameDeclarator(a2)))
    int *a4[6][7]   PointerDeclarator(ArrayDeclarator(7, ArrayDeclarator(6, a4)))

The type builder folds this tree into a CType.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from cdeclkit.errors import SourceLocation
from cdeclkit.cparse.lexer import CToken, join_tokens
from cdeclkit.cparse.types import SpecifierSet, TYPE_QUALIFIERS


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all syntax tree nodes.

    Attributes:
        location: Source location where this node starts
    """
    location: SourceLocation = field(compare=False)

    def __repr__(self) -> str:
        """Default representation showing node type."""
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


# =============================================================================
# Declarators
# =============================================================================

@dataclass
class Declarator(ASTNode):
    """Base class for declarator nodes."""

    @property
    def identifier(self) -> Optional[str]:
        """The declared name, found by following inner links."""
        node = self
        while not isinstance(node, NameDeclarator):
            node = node.inner
        return node.name

    @property
    def declares_function(self) -> bool:
        """
        True if the name itself is declared as a function.

        That is decided by the derivation closest to the name, so
        `(*fp)(void)` declares a pointer and `*f(void)` a function.
        """
        node = self
        closest = None
        while not isinstance(node, NameDeclarator):
            closest = node
            node = node.inner
        return isinstance(closest, FunctionDeclarator)

    def to_c(self) -> str:
        """Render the declarator as written, with only necessary parens."""
        raise NotImplementedError


@dataclass
class NameDeclarator(Declarator):
    """
    The innermost declarator: the identifier being declared.

    Attributes:
        name: The identifier, or None in an abstract declarator
    """
    name: Optional[str] = None

    def to_c(self) -> str:
        return self.name or ""


@dataclass
class PointerDeclarator(Declarator):
    """
    '*' followed by qualifiers applying to the pointer itself.

    Attributes:
        inner: The declarator the pointer prefix was written before
        qualifiers: Pointer qualifiers (const in `*const p`)
    """
    inner: Declarator = None
    qualifiers: frozenset[str] = frozenset()

    def __post_init__(self):
        self.qualifiers = frozenset(self.qualifiers)

    def to_c(self) -> str:
        inner = self.inner.to_c()
        quals = " ".join(sorted(self.qualifiers, key=TYPE_QUALIFIERS.index))
        if quals:
            return f"*{quals} {inner}" if inner else f"*{quals}"
        return f"*{inner}"


def _suffix_operand(inner: Declarator) -> str:
    text = inner.to_c()
    if isinstance(inner, PointerDeclarator):
        return f"({text})"
    return text


@dataclass
class ArrayDeclarator(Declarator):
    """
    '[size]' suffix.

    Attributes:
        inner: The declarator the suffix was written after
        size: Tokens of the bound expression; empty for []
    """
    inner: Declarator = None
    size: tuple[CToken, ...] = ()

    def __post_init__(self):
        self.size = tuple(self.size)

    @property
    def size_text(self) -> str:
        return join_tokens(self.size)

    def to_c(self) -> str:
        return f"{_suffix_operand(self.inner)}[{self.size_text}]"


@dataclass
class ParameterDeclaration(ASTNode):
    """
    One parameter: specifiers and a possibly abstract declarator.

    Attributes:
        specifiers: The parameter's specifier set
        declarator: Its declarator (NameDeclarator(None) when only a type)
    """
    specifiers: SpecifierSet = None
    declarator: Declarator = None

    @property
    def name(self) -> Optional[str]:
        return self.declarator.identifier

    def to_c(self) -> str:
        declarator = self.declarator.to_c()
        specifiers = self.specifiers.to_c()
        return f"{specifiers} {declarator}" if declarator else specifiers


@dataclass
class FunctionDeclarator(Declarator):
    """
    '(parameters)' suffix.

    Attributes:
        inner: The declarator the suffix was written after
        parameters: Parameters in order; empty for (void) and ()
        variadic: True if the list ends with ...
        has_prototype: False for an empty () list
    """
    inner: Declarator = None
    parameters: list[ParameterDeclaration] = field(default_factory=list)
    variadic: bool = False
    has_prototype: bool = True

    def to_c(self) -> str:
        if not self.has_prototype:
            params = ""
        else:
            parts = [param.to_c() for param in self.parameters]
            if self.variadic:
                parts.append("...")
            params = ", ".join(parts) or "void"
        return f"{_suffix_operand(self.inner)}({params})"


# =============================================================================
# Declarations
# =============================================================================

@dataclass
class Initializer(ASTNode):
    """
    The text after '=' in an init-declarator.

    Kept as an opaque balanced token span; its value is never evaluated.

    Attributes:
        tokens: Tokens up to (not including) the next top-level ',' or ';'
    """
    tokens: tuple[CToken, ...] = ()

    @property
    def text(self) -> str:
        return join_tokens(self.tokens)


@dataclass
class InitDeclarator(ASTNode):
    """
    One declarator of a declaration with what follows it.

    Attributes:
        declarator: The declarator tree
        initializer: Initializer after '=', if any
        bit_width: Tokens of the bit-field width (struct members only)
    """
    declarator: Declarator = None
    initializer: Optional[Initializer] = None
    bit_width: Optional[tuple[CToken, ...]] = None

    @property
    def name(self) -> Optional[str]:
        return self.declarator.identifier

    def to_c(self) -> str:
        text = self.declarator.to_c()
        if self.bit_width is not None:
            width = join_tokens(self.bit_width)
            text = f"{text} : {width}" if text else f": {width}"
        if self.initializer is not None:
            text = f"{text} = {self.initializer.text}"
        return text


@dataclass
class Declaration(ASTNode):
    """
    A declaration: specifiers shared by a list of init-declarators.

    A declaration with no declarators only declares a tag
    (`struct S { int in; };`).

    Attributes:
        specifiers: The specifier set
        declarators: Init-declarators in source order
    """
    specifiers: SpecifierSet = None
    declarators: list[InitDeclarator] = field(default_factory=list)

    @property
    def names(self) -> list[Optional[str]]:
        return [init.name for init in self.declarators]

    def to_c(self) -> str:
        """Render as C text ending with ';', including any tag body."""
        specifiers = self.specifiers.to_c(include_body=True)
        if not self.declarators:
            return f"{specifiers};"
        declarators = ", ".join(init.to_c() for init in self.declarators)
        return f"{specifiers} {declarators};"


# =============================================================================
# Function Bodies
# =============================================================================

@dataclass
class Statement(ASTNode):
    """
    A statement kept as an opaque token span.

    A statement ends at its ';' (not included), or just before a '{'
    that opens a nested block (`if (x)`, `else`, `do`).

    Attributes:
        tokens: The statement's tokens
    """
    tokens: tuple[CToken, ...] = ()

    @property
    def text(self) -> str:
        return join_tokens(self.tokens)


BlockItem = Union[Declaration, "Block", Statement]


@dataclass
class Block(ASTNode):
    """
    A compound statement { ... }.

    Attributes:
        items: Local declarations, nested blocks and statements in order
    """
    items: list[BlockItem] = field(default_factory=list)

    def declarations(self) -> Iterator[Declaration]:
        """Yield local declarations, including those of nested blocks."""
        for item in self.items:
            if isinstance(item, Declaration):
                yield item
            elif isinstance(item, Block):
                yield from item.declarations()


@dataclass
class FunctionDefinition(ASTNode):
    """
    A function definition.

    Attributes:
        declaration: Specifiers and the single function declarator
        body: The function body
    """
    declaration: Declaration = None
    body: Block = None

    @property
    def name(self) -> Optional[str]:
        return self.declaration.declarators[0].name


ExternalDeclaration = Union[Declaration, FunctionDefinition]


# =============================================================================
# Translation Unit
# =============================================================================

@dataclass
class TranslationUnit(ASTNode):
    """
    Root node: everything declared at file scope, in order.

    Attributes:
        items: Declarations and function definitions
        typedef_names: Typedef names known at the end of parsing
    """
    items: list[ExternalDeclaration] = field(default_factory=list)
    typedef_names: frozenset[str] = field(default=frozenset(), compare=False)

    @property
    def declarations(self) -> list[Declaration]:
        """File-scope declarations, with each function definition's own."""
        result = []
        for item in self.items:
            if isinstance(item, FunctionDefinition):
                result.append(item.declaration)
            else:
                result.append(item)
        return result

    @property
    def functions(self) -> list[FunctionDefinition]:
        return [item for item in self.items if isinstance(item, FunctionDefinition)]
