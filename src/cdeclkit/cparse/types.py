"""
C Type System
=============

This module implements the type model of the C declaration front end:
the specifier set collected from the front of a declaration, and the
immutable type trees produced by folding a declarator around it.

Type Tree
---------
A type is a chain of derivations ending in a named base type:

    NamedType      - base type ("int", "unsigned long", "struct S", "T")
    PointerType    - pointer to target, with its own qualifiers
    ArrayType      - array of element, bounded or not
    FunctionType   - function returning return_type with parameters

Reading the chain from the top gives the English description:

| Declaration          | Type tree                          |
|----------------------|------------------------------------|
| int *a1[4]           | Array(4) -> Pointer -> int         |
| int (*a2)[3]         | Pointer -> Array(3) -> int         |
| int *a4[6][7]        | Array(6) -> Array(7) -> Pointer -> int |
| char *const p2       | const Pointer -> char              |
| void (*fp)(int)      | Pointer -> Function(int) -> void   |

Base Type Merging
-----------------
Base-type keywords may be written in any order and combine by a fixed
table: `long unsigned int long` is `unsigned long long`, `signed` alone
is `int`. Anything not in the table (`long float`, `char int`) is a
conflict.

Trees are frozen dataclasses, so they hash and compare by structure.
CType.to_c() writes a tree back as canonical C, parenthesizing a pointer
whenever it points to an array or function.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional


# =============================================================================
# Specifier Keywords
# =============================================================================

STORAGE_CLASSES: tuple[str, ...] = ("typedef", "extern", "static", "auto", "register")
FUNCTION_SPECIFIERS: tuple[str, ...] = ("inline",)
TYPE_QUALIFIERS: tuple[str, ...] = ("const", "volatile", "restrict", "_Atomic")
TAG_KEYWORDS: tuple[str, ...] = ("struct", "union", "enum")

BASE_TYPE_KEYWORDS = frozenset({
    "void", "char", "short", "int", "long", "float", "double",
    "signed", "unsigned", "_Bool", "_Complex",
})

# Every accepted spelling of each canonical base type
_BASE_TYPE_SPELLINGS: dict[str, tuple[str, ...]] = {
    "void": ("void",),
    "_Bool": ("_Bool",),
    "char": ("char",),
    "signed char": ("signed char",),
    "unsigned char": ("unsigned char",),
    "short": ("short", "signed short", "short int", "signed short int"),
    "unsigned short": ("unsigned short", "unsigned short int"),
    "int": ("int", "signed", "signed int"),
    "unsigned int": ("unsigned", "unsigned int"),
    "long": ("long", "signed long", "long int", "signed long int"),
    "unsigned long": ("unsigned long", "unsigned long int"),
    "long long": (
        "long long", "signed long long", "long long int", "signed long long int",
    ),
    "unsigned long long": ("unsigned long long", "unsigned long long int"),
    "float": ("float",),
    "double": ("double",),
    "long double": ("long double",),
    "float _Complex": ("float _Complex",),
    "double _Complex": ("double _Complex",),
    "long double _Complex": ("long double _Complex",),
}

# Sorted keyword tuple -> canonical name
BASE_TYPE_TABLE: dict[tuple[str, ...], str] = {
    tuple(sorted(spelling.split())): canonical
    for canonical, spellings in _BASE_TYPE_SPELLINGS.items()
    for spelling in spellings
}


def merge_base_type(keywords: Iterable[str]) -> Optional[str]:
    """
    Combine base-type keywords written in any order.

    Args:
        keywords: Keywords as they appeared, e.g. ["long", "unsigned", "long"]

    Returns:
        The canonical type name, or None if the combination is invalid
    """
    return BASE_TYPE_TABLE.get(tuple(sorted(keywords)))


def _ordered(words: Iterable[str], order: tuple[str, ...]) -> list[str]:
    """Sort words by their position in a keyword table."""
    return sorted(words, key=order.index)


# =============================================================================
# Specifier Set
# =============================================================================

@dataclass(frozen=True)
class Enumerator:
    """
    One constant of an enum body.

    Attributes:
        name: The enumeration constant
        value: Text of the explicit value expression, if any
    """
    name: str
    value: Optional[str] = None

    def to_c(self) -> str:
        if self.value is None:
            return self.name
        return f"{self.name} = {self.value}"


@dataclass
class TagSpecifier:
    """
    A struct, union or enum specifier.

    Attributes:
        kind: "struct", "union" or "enum"
        name: The tag, or None for an anonymous type
        members: Member declarations (struct/union) or Enumerators (enum);
                 None when no body was written
    """
    kind: str
    name: Optional[str] = None
    members: Optional[list[Any]] = None

    @property
    def has_body(self) -> bool:
        return self.members is not None

    def to_c(self, include_body: bool = False) -> str:
        """
        Render the specifier.

        The body is only written when asked for, or when there is no tag
        to refer to the type by.
        """
        text = self.kind if self.name is None else f"{self.kind} {self.name}"
        if self.members is None or (self.name is not None and not include_body):
            return text
        if self.kind == "enum":
            body = ", ".join(member.to_c() for member in self.members)
            return f"{text} {{ {body} }}"
        body = " ".join(member.to_c() for member in self.members)
        return f"{text} {{ {body} }}" if body else f"{text} {{ }}"


@dataclass
class SpecifierSet:
    """
    Everything written before the declarators of a declaration.

    Attributes:
        base_type: Canonical base type ("unsigned long", "struct S", "T")
        storage_classes: typedef, extern, static, auto, register
        qualifiers: const, volatile, restrict, _Atomic
        function_specifiers: inline
        tag: The struct/union/enum specifier, if the base type is one
        typedef_name: The typedef name, if the base type is one

    Examples:
        - const char         : SpecifierSet("char", qualifiers={"const"})
        - char const         : same as above
        - static unsigned    : SpecifierSet("unsigned int", storage_classes={"static"})
    """
    base_type: str
    storage_classes: frozenset[str] = frozenset()
    qualifiers: frozenset[str] = frozenset()
    function_specifiers: frozenset[str] = frozenset()
    tag: Optional[TagSpecifier] = None
    typedef_name: Optional[str] = None

    def __post_init__(self):
        self.storage_classes = frozenset(self.storage_classes)
        self.qualifiers = frozenset(self.qualifiers)
        self.function_specifiers = frozenset(self.function_specifiers)

    @property
    def is_typedef(self) -> bool:
        return "typedef" in self.storage_classes

    def prefix(self) -> str:
        """Storage classes and function specifiers in canonical order."""
        words = _ordered(self.storage_classes, STORAGE_CLASSES)
        words += _ordered(self.function_specifiers, FUNCTION_SPECIFIERS)
        return " ".join(words)

    def base_text(self, include_body: bool = False) -> str:
        """Qualifiers followed by the base type."""
        if self.tag is not None:
            base = self.tag.to_c(include_body)
        else:
            base = self.base_type
        return " ".join(_ordered(self.qualifiers, TYPE_QUALIFIERS) + [base])

    def to_c(self, include_body: bool = False) -> str:
        """Render the whole specifier set in canonical order."""
        prefix = self.prefix()
        base = self.base_text(include_body)
        return f"{prefix} {base}" if prefix else base


# =============================================================================
# Type Tree
# =============================================================================

class CType:
    """
    Base class of all type tree nodes.

    Subclasses are frozen dataclasses; two trees are equal exactly when
    they have the same shape, sizes, qualifiers and base types.
    """

    def to_c(self, name: str = "") -> str:
        """
        Write the type as a C declaration of name.

        Args:
            name: Identifier to declare; empty for an abstract type name

        Returns:
            Canonical C text, e.g. "int (*a2)[3]" or "char *const"
        """
        return _declare(self, name).strip()

    def describe(self) -> str:
        """English description, e.g. 'pointer to array[3] of int'."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_c()


def _qualified(qualifiers: frozenset[str]) -> str:
    return " ".join(_ordered(qualifiers, TYPE_QUALIFIERS))


@dataclass(frozen=True)
class NamedType(CType):
    """
    A base type by name.

    Attributes:
        name: Canonical base type, tag ("struct S") or typedef name
        qualifiers: Qualifiers applied to the base type
    """
    name: str
    qualifiers: frozenset[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "qualifiers", frozenset(self.qualifiers))

    def describe(self) -> str:
        quals = _qualified(self.qualifiers)
        return f"{quals} {self.name}" if quals else self.name


@dataclass(frozen=True)
class PointerType(CType):
    """
    Pointer to target.

    Attributes:
        target: The pointed-to type
        qualifiers: Qualifiers of the pointer itself (char *const p)
    """
    target: CType
    qualifiers: frozenset[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "qualifiers", frozenset(self.qualifiers))

    def describe(self) -> str:
        quals = _qualified(self.qualifiers)
        text = f"pointer to {self.target.describe()}"
        return f"{quals} {text}" if quals else text


@dataclass(frozen=True)
class ArrayType(CType):
    """
    Array of element.

    Attributes:
        element: Element type
        size: Bound when written as an integer literal; None otherwise
        size_expr: Bound expression text when not a plain literal
    """
    element: CType
    size: Optional[int] = None
    size_expr: Optional[str] = None

    @property
    def is_unbounded(self) -> bool:
        return self.size is None and self.size_expr is None

    def bound_text(self) -> str:
        if self.size is not None:
            return str(self.size)
        return self.size_expr or ""

    def describe(self) -> str:
        return f"array[{self.bound_text()}] of {self.element.describe()}"


@dataclass(frozen=True)
class Parameter:
    """
    One parameter of a function type.

    Attributes:
        type: The parameter's type, as written (arrays are not adjusted)
        name: Parameter name, None when abstract
        storage_classes: Only "register" is meaningful here
    """
    type: CType
    name: Optional[str] = None
    storage_classes: frozenset[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "storage_classes", frozenset(self.storage_classes))

    def to_c(self) -> str:
        text = self.type.to_c(self.name or "")
        storage = " ".join(_ordered(self.storage_classes, STORAGE_CLASSES))
        return f"{storage} {text}" if storage else text


@dataclass(frozen=True)
class FunctionType(CType):
    """
    Function returning return_type.

    Attributes:
        return_type: The result type
        parameters: Parameters in order; empty for (void) and for ()
        variadic: True if the list ends with ...
        has_prototype: False for an empty () list
    """
    return_type: CType
    parameters: tuple[Parameter, ...] = ()
    variadic: bool = False
    has_prototype: bool = True

    def __post_init__(self):
        object.__setattr__(self, "parameters", tuple(self.parameters))

    def parameter_text(self) -> str:
        if not self.has_prototype:
            return "()"
        params = [param.to_c() for param in self.parameters]
        if self.variadic:
            params.append("...")
        return f"({', '.join(params) or 'void'})"

    def describe(self) -> str:
        if not self.has_prototype:
            params = ""
        else:
            parts = [param.type.describe() if param.name is None
                     else f"{param.name}: {param.type.describe()}"
                     for param in self.parameters]
            if self.variadic:
                parts.append("...")
            params = ", ".join(parts) or "void"
        return f"function({params}) returning {self.return_type.describe()}"


def _declare(ctype: CType, inner: str) -> str:
    """
    Build the declaration text of ctype around the declarator inner.

    Walks from the outermost derivation down to the base type, so the
    declarator grows outward from the name the same way C reads it.
    """
    while True:
        if isinstance(ctype, NamedType):
            base = ctype.describe()
            return f"{base} {inner}" if inner else base

        if isinstance(ctype, PointerType):
            quals = _qualified(ctype.qualifiers)
            if quals:
                inner = f"*{quals} {inner}" if inner else f"*{quals}"
            else:
                inner = f"*{inner}"
            if isinstance(ctype.target, (ArrayType, FunctionType)):
                inner = f"({inner})"
            ctype = ctype.target

        elif isinstance(ctype, ArrayType):
            inner = f"{inner}[{ctype.bound_text()}]"
            ctype = ctype.element

        elif isinstance(ctype, FunctionType):
            inner = f"{inner}{ctype.parameter_text()}"
            ctype = ctype.return_type

        else:
            raise TypeError(f"not a type tree node: {ctype!r}")
