"""
C Declaration Parser
====================

This module implements a recursive descent parser for C declarations.
It takes the preprocessed token stream and builds the declaration syntax
tree defined in cdeclkit.cparse.ast.

Grammar (Simplified EBNF)
-------------------------
unit            ::= (declaration | function_def | ';')*
declaration     ::= specifiers (init_declarator (',' init_declarator)*)? ';'
function_def    ::= specifiers declarator block
specifiers      ::= (storage | qualifier | 'inline' | type_spec)+
type_spec       ::= base_keyword | tag_spec | TYPEDEF_NAME
tag_spec        ::= ('struct' | 'union' | 'enum') IDENTIFIER? ('{' body '}')?
init_declarator ::= declarator ('=' initializer)?
declarator      ::= ('*' qualifier*)* direct
direct          ::= (IDENTIFIER | '(' declarator ')' | <abstract>) suffix*
suffix          ::= '[' tokens? ']' | '(' params ')'
params          ::= <empty> | 'void' | param (',' param)* (',' '...')?
param           ::= specifiers declarator     (declarator may be abstract)

Declarators
-----------
A declarator is read left to right but describes the type from the name
outward: prefix '*' binds looser than the postfix '[]' and '()', and
parentheses regroup. Each construct wraps the declarator parsed so far:

    *a1[4]      Pointer(Array(4, a1))       array of pointers
    (*a2)[3]    Array(3, Pointer(a2))       pointer to array

Typedef Names
-------------
An identifier is a type name only if an earlier typedef declared it. It
counts as a type specifier only while no other base type has been seen,
so `typedef struct S S;` and `int S;` both parse.

Opaque Spans
------------
Initializers, array bounds, bit-field widths, enum values and statements
in function bodies are kept as balanced token spans and never evaluated.

Example Usage
-------------
>>> from cdeclkit.cparse.lexer import CLexer
>>> from cdeclkit.cparse.parser import CParser
>>> tokens = list(CLexer("int (*a2)[3];", "test.c").tokenize())
>>> unit = CParser(tokens, "test.c").parse()
>>> decl = unit.items[0].declarators[0]
>>> decl.name, type(decl.declarator).__name__
('a2', 'ArrayDeclarator')
"""

import logging
from typing import Iterable, Optional

from cdeclkit.errors import SourceLocation
from cdeclkit.cparse.lexer import CToken, CTokenType, join_tokens
from cdeclkit.cparse.types import (
    BASE_TYPE_KEYWORDS,
    FUNCTION_SPECIFIERS,
    STORAGE_CLASSES,
    TAG_KEYWORDS,
    TYPE_QUALIFIERS,
    Enumerator,
    SpecifierSet,
    TagSpecifier,
    merge_base_type,
)
from cdeclkit.cparse.ast import (
    ArrayDeclarator,
    Block,
    Declaration,
    Declarator,
    FunctionDeclarator,
    FunctionDefinition,
    InitDeclarator,
    Initializer,
    NameDeclarator,
    ParameterDeclaration,
    PointerDeclarator,
    Statement,
    TranslationUnit,
)
from cdeclkit.cparse.errors import (
    ConflictingSpecifiersError,
    MissingSemicolonError,
    UnbalancedParensError,
    UnexpectedTokenError,
)


logger = logging.getLogger(__name__)

BRACKET_PAIRS = {"(": ")", "[": "]", "{": "}"}
CLOSING_BRACKETS = frozenset(BRACKET_PAIRS.values())

# Statement keywords after whose (...) a '{' opens a nested block
_BLOCK_HEAD_KEYWORDS = ("if", "while", "for", "switch")


class CParser:
    """
    Parses a token stream into a TranslationUnit.

    The parser stops at the first error. Typedef names declared while
    parsing are remembered for the rest of the input.

    Attributes:
        tokens: List of tokens to parse (EOF-terminated)
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[CToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        typedef_names: Iterable[str] = (),
    ):
        """
        Initialize the parser.

        Args:
            tokens: Tokens from the lexer or preprocessor
            filename: Source filename for error messages
            source_lines: Original source lines for error context
            typedef_names: Type names to treat as declared by typedef
        """
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != CTokenType.EOF:
            end = self.tokens[-1].end_offset if self.tokens else 0
            self.tokens.append(CToken(CTokenType.EOF, None, end, 1, 1, filename))
        self.filename = filename
        self.source_lines = source_lines or []

        # Current position in token stream
        self._pos = 0

        self._typedefs: set[str] = set(typedef_names)

    @property
    def typedef_names(self) -> frozenset[str]:
        """Typedef names known so far."""
        return frozenset(self._typedefs)

    # =========================================================================
    # Public Interface
    # =========================================================================

    def parse(self) -> TranslationUnit:
        """
        Parse the whole token stream.

        Returns:
            TranslationUnit with declarations and function definitions
            in source order

        Raises:
            ParseError: At the first grammar error
        """
        items = []

        while not self._at_end():
            # Empty declaration at file scope
            if self._match_punct(";"):
                continue
            items.append(self._parse_external_declaration())

        return TranslationUnit(
            location=SourceLocation(self.filename, 1, 1),
            items=items,
            typedef_names=frozenset(self._typedefs),
        )

    def parse_declaration(self) -> Declaration:
        """
        Parse a single declaration ending with ';'.

        Raises:
            ParseError: If the tokens do not start with a declaration
        """
        return self._parse_declaration(allow_definition=False)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._peek().type == CTokenType.EOF

    def _peek(self, offset: int = 0) -> CToken:
        """Look at token at current position + offset."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def _advance(self) -> CToken:
        """Consume and return the current token."""
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]  # Return EOF

    def _check_punct(self, *values: str) -> bool:
        return self._peek().is_punct(*values)

    def _match_punct(self, *values: str) -> Optional[CToken]:
        """
        Consume current token if it is one of the punctuators.

        Returns:
            The consumed token, or None if no match
        """
        if self._check_punct(*values):
            return self._advance()
        return None

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Error Helpers
    # =========================================================================

    def _unexpected(self, token: CToken, expected: Optional[str] = None) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            token.describe(),
            expected,
            token.location,
            self._get_source_line(token.line),
        )

    def _expect_closing(self, closer: str, opener: CToken) -> CToken:
        """
        Consume the bracket closing opener.

        Raises:
            UnbalancedParensError: If anything else comes first
        """
        if self._check_punct(closer):
            return self._advance()
        found = self._peek()
        raise UnbalancedParensError(
            opener.value,
            found.describe(),
            found.location,
            self._get_source_line(found.line),
        )

    def _expect_semicolon(self) -> CToken:
        if self._check_punct(";"):
            return self._advance()
        found = self._peek()
        raise MissingSemicolonError(
            found.describe(),
            found.location,
            self._get_source_line(found.line),
        )

    # =========================================================================
    # Declarations
    # =========================================================================

    def _parse_external_declaration(self) -> Declaration | FunctionDefinition:
        return self._parse_declaration(allow_definition=True)

    def _parse_declaration(self, allow_definition: bool) -> Declaration | FunctionDefinition:
        """
        Parse specifiers and init-declarators up to ';'.

        With allow_definition, a single function declarator followed by
        '{' turns the declaration into a FunctionDefinition.
        """
        start = self._peek()
        specifiers = self._parse_specifiers()

        if self._check_punct(";"):
            if specifiers.tag is None:
                raise self._unexpected(self._peek(), "declarator")
            self._advance()
            return Declaration(start.location, specifiers, [])

        first = self._parse_init_declarator()

        if (
            allow_definition
            and self._check_punct("{")
            and first.initializer is None
            and first.declarator.declares_function
        ):
            declaration = Declaration(start.location, specifiers, [first])
            logger.debug(f"Function definition: {first.name}")
            body = self._parse_block()
            return FunctionDefinition(start.location, declaration, body)

        declarators = [first]
        while self._match_punct(","):
            declarators.append(self._parse_init_declarator())
        self._expect_semicolon()

        declaration = Declaration(start.location, specifiers, declarators)
        if specifiers.is_typedef:
            self._register_typedefs(declaration)
        return declaration

    def _register_typedefs(self, declaration: Declaration) -> None:
        for name in declaration.names:
            if name is not None:
                logger.debug(f"Registered typedef name: {name}")
                self._typedefs.add(name)

    def _parse_init_declarator(self) -> InitDeclarator:
        start = self._peek()
        declarator = self._parse_declarator(abstract=False)

        initializer = None
        if self._check_punct("="):
            equals = self._advance()
            tokens = self._consume_balanced((",", ";"))
            if not tokens:
                raise self._unexpected(self._peek(), "initializer")
            initializer = Initializer(equals.location, tuple(tokens))

        return InitDeclarator(start.location, declarator, initializer)

    # =========================================================================
    # Specifiers
    # =========================================================================

    def _starts_specifiers(self, offset: int = 0) -> bool:
        """Check if the token at offset can begin a declaration."""
        token = self._peek(offset)
        if token.type == CTokenType.KEYWORD:
            return (
                token.value in STORAGE_CLASSES
                or token.value in TYPE_QUALIFIERS
                or token.value in FUNCTION_SPECIFIERS
                or token.value in BASE_TYPE_KEYWORDS
                or token.value in TAG_KEYWORDS
            )
        return token.type == CTokenType.IDENTIFIER and token.value in self._typedefs

    def _parse_specifiers(self) -> SpecifierSet:
        """
        Parse declaration specifiers in any order.

        Raises:
            UnexpectedTokenError: If no type specifier is present
            ConflictingSpecifiersError: If base-type keywords do not combine
        """
        start = self._peek()
        storage: list[str] = []
        qualifiers: set[str] = set()
        function_specs: set[str] = set()
        base_keywords: list[str] = []
        base_token: Optional[CToken] = None
        tag: Optional[TagSpecifier] = None
        typedef_name: Optional[str] = None

        while True:
            token = self._peek()
            value = token.value

            if token.type == CTokenType.KEYWORD:
                if value in STORAGE_CLASSES:
                    if value not in storage:
                        storage.append(value)
                    self._advance()
                    continue
                if value in TYPE_QUALIFIERS:
                    qualifiers.add(value)
                    self._advance()
                    continue
                if value in FUNCTION_SPECIFIERS:
                    function_specs.add(value)
                    self._advance()
                    continue
                if value in TAG_KEYWORDS or value in BASE_TYPE_KEYWORDS:
                    if tag is not None or typedef_name is not None or (
                        value in TAG_KEYWORDS and base_keywords
                    ):
                        earlier = base_keywords + [tag.to_c() if tag else typedef_name]
                        raise ConflictingSpecifiersError(
                            [word for word in earlier if word] + [value],
                            token.location,
                            self._get_source_line(token.line),
                        )
                    if value in TAG_KEYWORDS:
                        tag = self._parse_tag_specifier()
                    else:
                        base_keywords.append(value)
                        base_token = base_token or token
                        self._advance()
                    continue
                break

            if (
                token.type == CTokenType.IDENTIFIER
                and value in self._typedefs
                and not base_keywords
                and tag is None
                and typedef_name is None
            ):
                typedef_name = value
                self._advance()
                continue

            break

        if tag is not None:
            base_type = tag.to_c(include_body=tag.name is None)
        elif typedef_name is not None:
            base_type = typedef_name
        elif base_keywords:
            base_type = merge_base_type(base_keywords)
            if base_type is None:
                raise ConflictingSpecifiersError(
                    base_keywords,
                    base_token.location,
                    self._get_source_line(base_token.line),
                )
        else:
            raise self._unexpected(self._peek(), "type specifier")

        return SpecifierSet(
            base_type=base_type,
            storage_classes=frozenset(storage),
            qualifiers=frozenset(qualifiers),
            function_specifiers=frozenset(function_specs),
            tag=tag,
            typedef_name=typedef_name,
        )

    def _parse_tag_specifier(self) -> TagSpecifier:
        """
        Parse struct/union/enum with optional tag and body.

        Examples:
            struct S
            struct S { int in; int out; }
            enum { RED, GREEN = 2 }
        """
        keyword = self._advance()
        name = None
        if self._peek().type == CTokenType.IDENTIFIER:
            name = self._advance().value

        members = None
        if self._check_punct("{"):
            opener = self._advance()
            if keyword.value == "enum":
                members = self._parse_enumerators(opener)
            else:
                members = self._parse_members(opener)
        elif name is None:
            raise self._unexpected(self._peek(), f"{keyword.value} tag or '{{'")

        return TagSpecifier(keyword.value, name, members)

    def _parse_members(self, opener: CToken) -> list[Declaration]:
        """Parse struct/union member declarations up to the closing brace."""
        members = []
        while not self._check_punct("}"):
            if self._at_end():
                self._expect_closing("}", opener)
            if self._match_punct(";"):
                continue

            start = self._peek()
            specifiers = self._parse_specifiers()
            declarators = []
            if not self._check_punct(";"):
                declarators.append(self._parse_member_declarator())
                while self._match_punct(","):
                    declarators.append(self._parse_member_declarator())
            elif specifiers.tag is None:
                raise self._unexpected(self._peek(), "member declarator")
            self._expect_semicolon()
            members.append(Declaration(start.location, specifiers, declarators))

        self._advance()
        return members

    def _parse_member_declarator(self) -> InitDeclarator:
        """Member declarator with optional ': width' (unnamed if only a width)."""
        start = self._peek()
        if self._check_punct(":"):
            declarator = NameDeclarator(start.location, None)
        else:
            declarator = self._parse_declarator(abstract=False)

        bit_width = None
        if self._match_punct(":"):
            bit_width = tuple(self._consume_balanced((",", ";")))
            if not bit_width:
                raise self._unexpected(self._peek(), "bit-field width")

        return InitDeclarator(start.location, declarator, None, bit_width)

    def _parse_enumerators(self, opener: CToken) -> list[Enumerator]:
        """Parse NAME [= value] list, trailing comma allowed."""
        enumerators = []
        while not self._check_punct("}"):
            token = self._peek()
            if token.type != CTokenType.IDENTIFIER:
                if self._at_end():
                    self._expect_closing("}", opener)
                raise self._unexpected(token, "enumerator name")
            self._advance()

            value = None
            if self._match_punct("="):
                tokens = self._consume_balanced((",", "}"))
                if not tokens:
                    raise self._unexpected(self._peek(), "enumerator value")
                value = join_tokens(tokens)
            enumerators.append(Enumerator(token.value, value))

            if not self._match_punct(","):
                break

        self._expect_closing("}", opener)
        return enumerators

    # =========================================================================
    # Declarators
    # =========================================================================

    def _parse_declarator(self, abstract: bool) -> Declarator:
        """
        Parse a (possibly abstract) declarator.

        Each '*' wraps the declarator that follows it, so in `**p`
        the outer node is the first star.
        """
        start = self._peek()
        if start.is_punct("*"):
            self._advance()
            qualifiers = set()
            while self._peek().is_keyword(*TYPE_QUALIFIERS):
                qualifiers.add(self._advance().value)
            inner = self._parse_declarator(abstract)
            return PointerDeclarator(start.location, inner, frozenset(qualifiers))
        return self._parse_direct_declarator(abstract)

    def _parse_direct_declarator(self, abstract: bool) -> Declarator:
        token = self._peek()

        if token.type == CTokenType.IDENTIFIER:
            self._advance()
            node: Declarator = NameDeclarator(token.location, token.value)
        elif token.is_punct("(") and self._paren_starts_declarator():
            self._advance()
            node = self._parse_declarator(abstract)
            self._expect_closing(")", token)
        elif abstract:
            node = NameDeclarator(token.location, None)
        else:
            raise self._unexpected(token, "identifier or '('")

        return self._parse_declarator_suffixes(node)

    def _paren_starts_declarator(self) -> bool:
        """
        Decide whether '(' groups a nested declarator.

        Otherwise it starts the parameter list of an abstract function
        declarator, as in `int (*)(int)` versus `int (int)`.
        """
        following = self._peek(1)
        if following.is_punct("*", "(", "["):
            return True
        return following.type == CTokenType.IDENTIFIER and following.value not in self._typedefs

    def _parse_declarator_suffixes(self, node: Declarator) -> Declarator:
        """Apply '[size]' and '(params)' suffixes, left to right."""
        while True:
            token = self._peek()
            if token.is_punct("["):
                self._advance()
                size = self._consume_balanced(("]",))
                self._expect_closing("]", token)
                node = ArrayDeclarator(token.location, node, tuple(size))
            elif token.is_punct("("):
                self._advance()
                node = self._parse_parameter_list(token, node)
            else:
                return node

    def _parse_parameter_list(self, opener: CToken, inner: Declarator) -> FunctionDeclarator:
        """
        Parse parameters after '('.

        () has no prototype, (void) is an empty prototype, and a
        trailing ... marks a variadic function.
        """
        if self._match_punct(")"):
            return FunctionDeclarator(opener.location, inner, [], False, False)

        if self._peek().is_keyword("void") and self._peek(1).is_punct(")"):
            self._advance()
            self._advance()
            return FunctionDeclarator(opener.location, inner, [], False, True)

        parameters = []
        variadic = False
        while True:
            if self._match_punct("..."):
                variadic = True
                break
            parameters.append(self._parse_parameter())
            if not self._match_punct(","):
                break

        self._expect_closing(")", opener)
        return FunctionDeclarator(opener.location, inner, parameters, variadic, True)

    def _parse_parameter(self) -> ParameterDeclaration:
        start = self._peek()
        specifiers = self._parse_specifiers()
        declarator = self._parse_declarator(abstract=True)
        return ParameterDeclaration(start.location, specifiers, declarator)

    # =========================================================================
    # Opaque Token Spans
    # =========================================================================

    def _consume_balanced(self, stops: tuple[str, ...]) -> list[CToken]:
        """
        Collect tokens up to a stop punctuator outside any brackets.

        The stop token is left in place. End of input also ends the span;
        the caller reports what was missing.

        Raises:
            UnbalancedParensError: On a closing bracket that does not
                match, or input ending inside brackets
        """
        tokens: list[CToken] = []
        stack: list[CToken] = []

        while True:
            token = self._peek()

            if token.type == CTokenType.EOF:
                if stack:
                    raise UnbalancedParensError(
                        stack[-1].value,
                        token.describe(),
                        token.location,
                        self._get_source_line(token.line),
                    )
                return tokens

            if not stack and token.is_punct(*stops):
                return tokens

            self._track_bracket(stack, token)
            tokens.append(self._advance())

    def _track_bracket(self, stack: list[CToken], token: CToken) -> None:
        """Push openers and pop matching closers."""
        if token.type != CTokenType.PUNCTUATOR:
            return
        if token.value in BRACKET_PAIRS:
            stack.append(token)
        elif token.value in CLOSING_BRACKETS:
            if not stack or BRACKET_PAIRS[stack[-1].value] != token.value:
                opener = stack[-1].value if stack else token.value
                raise UnbalancedParensError(
                    opener,
                    token.value,
                    token.location,
                    self._get_source_line(token.line),
                )
            stack.pop()

    # =========================================================================
    # Function Bodies
    # =========================================================================

    def _parse_block(self) -> Block:
        """
        Parse { ... } into local declarations, nested blocks and
        opaque statements.
        """
        opener = self._advance()
        items = []

        while not self._check_punct("}"):
            if self._at_end():
                self._expect_closing("}", opener)

            if self._check_punct("{"):
                items.append(self._parse_block())
            elif self._match_punct(";"):
                continue
            elif self._starts_local_declaration():
                items.append(self._parse_declaration(allow_definition=False))
            else:
                items.append(self._parse_statement())

        self._advance()
        return Block(opener.location, items)

    def _starts_local_declaration(self) -> bool:
        """
        Check if a block item is a declaration.

        A typedef name starts one only when followed by something that
        can begin a declarator; `T(x);` or `T = 1;` are statements.
        """
        token = self._peek()
        if token.type == CTokenType.KEYWORD:
            return self._starts_specifiers()
        if token.type == CTokenType.IDENTIFIER and token.value in self._typedefs:
            following = self._peek(1)
            return (
                following.type == CTokenType.IDENTIFIER
                or following.is_punct("*")
                or following.is_keyword(*TYPE_QUALIFIERS)
            )
        return False

    def _parse_statement(self) -> Statement:
        """
        Collect one statement's tokens.

        The statement ends at ';' (consumed, not kept) or right before a
        '{' that opens a nested block.

        Raises:
            MissingSemicolonError: If the block closes first
        """
        start = self._peek()
        tokens: list[CToken] = []
        stack: list[CToken] = []

        while True:
            token = self._peek()

            if token.type == CTokenType.EOF:
                if stack:
                    raise UnbalancedParensError(
                        stack[-1].value,
                        token.describe(),
                        token.location,
                        self._get_source_line(token.line),
                    )
                self._expect_semicolon()

            if not stack:
                if token.is_punct(";"):
                    self._advance()
                    break
                if token.is_punct("}"):
                    self._expect_semicolon()
                if token.is_punct("{") and self._opens_nested_block(tokens):
                    break

            self._track_bracket(stack, token)
            tokens.append(self._advance())

        return Statement(start.location, tuple(tokens))

    def _opens_nested_block(self, head: list[CToken]) -> bool:
        """
        Check if a '{' after the statement head starts a block.

        True after `if (...)`, `while (...)`, `for (...)`, `switch (...)`,
        after `else` and `do`, and after a label's ':'. The keyword is
        the one before the '(' matching the final ')', so `else if (c)`
        opens a block and a compound literal such as `x = (struct S)` does
        not.
        """
        if not head:
            return True
        last = head[-1]
        if last.is_keyword("else", "do") or last.is_punct(":"):
            return True
        if not last.is_punct(")"):
            return False

        depth = 0
        for index in range(len(head) - 1, -1, -1):
            token = head[index]
            if token.is_punct(")"):
                depth += 1
            elif token.is_punct("("):
                depth -= 1
                if depth == 0:
                    return index > 0 and head[index - 1].is_keyword(*_BLOCK_HEAD_KEYWORDS)
        return False
