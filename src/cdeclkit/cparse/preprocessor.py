"""
C Preprocessor
==============

This module implements a token-level C preprocessor for the declaration
front end. It consumes the lexer's token stream (with NEWLINE tokens),
executes directives, expands object-like macros and drops every token
inside an inactive conditional branch.

Supported Directives
--------------------
#define NAME tokens...      - Object-like macro
#define NAME(args) body     - Function-like macro (recorded, not expanded)
#undef NAME                 - Remove a macro
#if expression              - Conditional on a constant expression
#ifdef NAME / #ifndef NAME  - Conditional on macro definition
#elif expression            - Else-if, evaluated only if nothing was taken
#else                       - Taken only if nothing earlier was taken
#endif                      - Close the innermost conditional
#include <h> / "h"          - Recorded as an IncludeDirective, not read
#pragma, #line              - Ignored
#warning text               - Logged as a warning
#error text                 - Raises ErrorDirectiveError

#if Expressions
---------------
Integer and character constants (suffixes allowed), defined NAME,
defined(NAME), macro names (expanded first), and the C operators
! ~ + - * / % << >> < > <= >= == != & ^ | && || ?: with parentheses.
Identifiers left after expansion evaluate to 0. && and || short-circuit,
so `0 && 1/0` is fine.

Example Usage
-------------
>>> from cdeclkit.cparse.preprocessor import preprocess
>>> tokens = preprocess('''
... #define N 4
... #if defined(N) && N > 2
... int arr[N];
... #endif
... ''')
>>> [t.value for t in tokens[:-1]]
['int', 'arr', '[', '4', ']', ';']
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from cdeclkit.errors import SourceLocation
from cdeclkit.cparse.lexer import CLexer, CToken, CTokenType, integer_value, join_tokens
from cdeclkit.cparse.errors import (
    UnmatchedEndifError,
    UnterminatedConditionalError,
    ElifAfterElseError,
    DuplicateElseError,
    MacroRecursionLimitError,
    DirectiveSyntaxError,
    ErrorDirectiveError,
)


logger = logging.getLogger(__name__)

DEFAULT_MAX_EXPANSION_DEPTH = 64


@dataclass
class Macro:
    """
    Represents a preprocessor macro.

    Attributes:
        name: Macro name
        body: Replacement tokens
        parameters: Parameter names for function-like macros (None for simple)
        location: Where the macro was defined (None for predefined macros)
    """
    name: str
    body: tuple[CToken, ...] = ()
    parameters: Optional[list[str]] = None
    location: Optional[SourceLocation] = None

    @property
    def is_function_like(self) -> bool:
        """Return True if this is a function-like macro."""
        return self.parameters is not None

    @property
    def text(self) -> str:
        """Replacement list as source text."""
        return join_tokens(self.body)


@dataclass
class ConditionalFrame:
    """
    One open #if/#ifdef/#ifndef region.

    Attributes:
        directive: The directive that opened the region (if, ifdef, ifndef)
        active: Tokens in the current branch are emitted
        taken: Some branch of this chain has already been selected
        parent: Enclosing frame, or None at top level
        location: Where the opening directive appeared
        seen_else: The #else of this chain has been processed
    """
    directive: str
    active: bool
    taken: bool
    parent: Optional["ConditionalFrame"] = field(default=None, repr=False)
    location: Optional[SourceLocation] = None
    seen_else: bool = False

    @property
    def enclosing_active(self) -> bool:
        """True if the region containing this frame is emitting tokens."""
        return self.parent is None or self.parent.active


@dataclass(frozen=True)
class IncludeDirective:
    """
    An #include seen in an active region.

    Attributes:
        header: Header name without delimiters (e.g. "stdio.h")
        system: True for <header>, False for "header"
        location: Where the directive appeared
    """
    header: str
    system: bool
    location: SourceLocation


class Preprocessor:
    """
    Token-level C preprocessor.

    All state (macro table, conditional stack, recorded includes) belongs
    to one process() call; calling process() again starts from the
    predefined macros only.

    Attributes:
        filename: Source filename for error reporting
        predefined: Macros defined before processing starts (name -> text)
        max_expansion_depth: Deepest allowed chain of nested expansions
    """

    CONDITIONAL_DIRECTIVES = frozenset({"if", "ifdef", "ifndef", "elif", "else", "endif"})

    def __init__(
        self,
        filename: str = "<input>",
        predefined: Optional[dict[str, str]] = None,
        max_expansion_depth: int = DEFAULT_MAX_EXPANSION_DEPTH,
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the preprocessor.

        Args:
            filename: Source filename for error reporting
            predefined: Macros to define up front, like -DNAME=VALUE
            max_expansion_depth: Limit on nested macro expansion
            source_lines: Original source lines for error context
        """
        if max_expansion_depth < 1:
            raise ValueError("max_expansion_depth must be at least 1")

        self.filename = filename
        self.predefined = dict(predefined or {})
        self.max_expansion_depth = max_expansion_depth
        self.source_lines = source_lines or []

        self._macros: dict[str, Macro] = {}
        self._frame: Optional[ConditionalFrame] = None
        self._includes: list[IncludeDirective] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    def process(self, tokens: CLexer | Iterable[CToken]) -> list[CToken]:
        """
        Preprocess a token stream.

        Given the CLexer itself rather than its tokens, the lexer is put
        in skipping mode inside false branches, so discarded lines may
        contain text that is not valid C.

        Args:
            tokens: A CLexer created with emit_newlines=True, or tokens
                from one

        Returns:
            Tokens of the active regions with macros expanded, without
            NEWLINE tokens, ending with EOF

        Raises:
            PreprocessError: On malformed directives, unbalanced
                conditionals or runaway macro expansion
        """
        self._macros = {}
        self._frame = None
        self._includes = []
        self._init_predefined_macros()

        lexer = tokens if isinstance(tokens, CLexer) else None
        if lexer is not None:
            lexer.skipping = False
            tokens = lexer.tokenize()

        output: list[CToken] = []
        eof: Optional[CToken] = None

        for line, end in self._split_lines(tokens):
            if end.type == CTokenType.EOF:
                eof = end
            if not line:
                continue
            if line[0].is_punct("#"):
                self._process_directive(line)
                if lexer is not None:
                    lexer.skipping = not self._is_active()
            elif self._is_active():
                output.extend(self._expand(line))

        if self._frame is not None:
            frame = self._frame
            raise UnterminatedConditionalError(
                frame.directive,
                frame.location,
                self._get_source_line(frame.location),
            )

        if eof is None:
            eof = CToken(CTokenType.EOF, None, 0, 1, 1, self.filename)
        output.append(eof)
        return output

    @property
    def macros(self) -> dict[str, Macro]:
        """Macro table as left by the last process() call."""
        return dict(self._macros)

    @property
    def includes(self) -> list[IncludeDirective]:
        """#include directives seen in active regions by the last process() call."""
        return list(self._includes)

    @property
    def open_conditionals(self) -> int:
        """Number of conditional frames currently open."""
        depth = 0
        frame = self._frame
        while frame is not None:
            depth += 1
            frame = frame.parent
        return depth

    def is_defined(self, name: str) -> bool:
        """Return True if a macro with this name is currently defined."""
        return name in self._macros

    # =========================================================================
    # Setup and Line Handling
    # =========================================================================

    def _init_predefined_macros(self) -> None:
        """Lex and install the predefined macros (value "1" when empty)."""
        for name, value in self.predefined.items():
            text = "1" if value is None or value == "" else str(value)
            body = tuple(
                token for token in CLexer(text, "<command line>").tokenize()
                if token.type != CTokenType.EOF
            )
            self._macros[name] = Macro(name, body)

    def _split_lines(self, tokens: Iterable[CToken]) -> Iterator[tuple[list[CToken], CToken]]:
        """
        Group tokens into logical lines.

        Yields:
            (tokens of the line, the NEWLINE or EOF token that ended it)
        """
        line: list[CToken] = []
        for token in tokens:
            if token.type in (CTokenType.NEWLINE, CTokenType.EOF):
                yield line, token
                line = []
                if token.type == CTokenType.EOF:
                    return
            else:
                line.append(token)

        # Stream without EOF: close the last line with a synthetic one
        position = line[-1].end_offset if line else 0
        yield line, CToken(CTokenType.EOF, None, position, 1, 1, self.filename)

    def _is_active(self) -> bool:
        """Check if tokens at this point are emitted."""
        return self._frame is None or self._frame.active

    def _get_source_line(self, location: Optional[SourceLocation]) -> Optional[str]:
        """Get source line for error reporting."""
        if location is not None and 0 < location.line <= len(self.source_lines):
            return self.source_lines[location.line - 1]
        return None

    def _error_context(self, token: CToken) -> tuple[SourceLocation, Optional[str]]:
        location = token.location
        return location, self._get_source_line(location)

    # =========================================================================
    # Directive Dispatch
    # =========================================================================

    def _process_directive(self, line: list[CToken]) -> None:
        """Process one directive line (line[0] is the '#')."""
        if len(line) == 1:
            return  # Null directive

        name_token = line[1]
        if name_token.type == CTokenType.NUMBER:
            return  # Line marker: # 12 "file.c"
        if not name_token.is_name():
            if not self._is_active():
                return
            raise DirectiveSyntaxError(
                f"invalid preprocessing directive '#{name_token.describe()}'",
                *self._error_context(name_token),
            )

        directive = name_token.value
        args = line[2:]

        # Conditional directives are always processed
        if directive in self.CONDITIONAL_DIRECTIVES:
            self._process_conditional(directive, name_token, args)
            return

        # Other directives only processed if not skipping
        if not self._is_active():
            return

        if directive == "define":
            self._process_define(name_token, args)
        elif directive == "undef":
            self._process_undef(name_token, args)
        elif directive == "include":
            self._process_include(name_token, args)
        elif directive == "error":
            raise ErrorDirectiveError(join_tokens(args), *self._error_context(name_token))
        elif directive == "warning":
            logger.warning(f"{name_token.location}: #warning {join_tokens(args)}")
        elif directive == "pragma":
            logger.debug(f"{name_token.location}: ignoring #pragma {join_tokens(args)}")
        elif directive == "line":
            pass
        else:
            raise DirectiveSyntaxError(
                f"unknown preprocessor directive '#{directive}'",
                *self._error_context(name_token),
            )

    # =========================================================================
    # Macro Definitions
    # =========================================================================

    def _process_define(self, directive: CToken, args: list[CToken]) -> None:
        """Process #define directive."""
        if not args or not args[0].is_name():
            raise DirectiveSyntaxError(
                "macro name missing in #define",
                *self._error_context(args[0] if args else directive),
            )

        name_token = args[0]
        name = name_token.value
        if name == "defined":
            raise DirectiveSyntaxError(
                "'defined' cannot be used as a macro name",
                *self._error_context(name_token),
            )

        parameters = None
        body = args[1:]

        # A '(' glued to the name starts a parameter list
        if body and body[0].is_punct("(") and not body[0].leading_space:
            parameters, body = self._parse_macro_parameters(name_token, body)

        macro = Macro(
            name=name,
            body=tuple(body),
            parameters=parameters,
            location=name_token.location,
        )

        previous = self._macros.get(name)
        if previous is not None and (previous.text, previous.parameters) != (macro.text, macro.parameters):
            logger.warning(f"{name_token.location}: macro '{name}' redefined")

        self._macros[name] = macro
        signature = f"{name}({', '.join(parameters)})" if parameters is not None else name
        logger.debug(f"Defined macro {signature} = {macro.text!r}")

    def _parse_macro_parameters(
        self,
        name_token: CToken,
        tokens: list[CToken],
    ) -> tuple[list[str], list[CToken]]:
        """
        Parse the parameter list of a function-like macro.

        Returns:
            (parameter names, remaining body tokens)
        """
        parameters: list[str] = []
        pos = 1
        expect_name = True

        while pos < len(tokens):
            token = tokens[pos]
            if token.is_punct(")"):
                if expect_name and parameters:
                    break
                return parameters, tokens[pos + 1:]
            if expect_name and (token.is_name() or token.is_punct("...")):
                parameters.append(token.value)
                expect_name = False
            elif not expect_name and token.is_punct(","):
                expect_name = True
            else:
                break
            pos += 1

        raise DirectiveSyntaxError(
            f"malformed parameter list for macro '{name_token.value}'",
            *self._error_context(name_token),
        )

    def _process_undef(self, directive: CToken, args: list[CToken]) -> None:
        """Process #undef directive."""
        if not args or not args[0].is_name():
            raise DirectiveSyntaxError(
                "macro name missing in #undef",
                *self._error_context(args[0] if args else directive),
            )
        if self._macros.pop(args[0].value, None) is not None:
            logger.debug(f"Undefined macro {args[0].value}")

    def _process_include(self, directive: CToken, args: list[CToken]) -> None:
        """Record an #include directive without reading the header."""
        tokens = self._expand(args) if args and args[0].type == CTokenType.IDENTIFIER else args

        if len(tokens) == 1 and tokens[0].type == CTokenType.STRING and tokens[0].value.startswith('"'):
            include = IncludeDirective(tokens[0].value[1:-1], False, directive.location)
        elif tokens and tokens[0].is_punct("<") and tokens[-1].is_punct(">") and len(tokens) > 2:
            header = "".join(token.value for token in tokens[1:-1])
            include = IncludeDirective(header, True, directive.location)
        else:
            raise DirectiveSyntaxError(
                "#include expects \"FILENAME\" or <FILENAME>",
                *self._error_context(directive),
            )

        self._includes.append(include)
        header = f"<{include.header}>" if include.system else f'"{include.header}"'
        logger.debug(f"{directive.location}: include {header}")

    # =========================================================================
    # Conditional Compilation
    # =========================================================================

    def _process_conditional(self, directive: str, token: CToken, args: list[CToken]) -> None:
        """Process conditional compilation directives."""
        if directive in ("if", "ifdef", "ifndef"):
            enclosing_active = self._is_active()
            if not enclosing_active:
                # Nested inside a dead branch: nothing here can be taken
                condition, taken = False, True
            elif directive == "if":
                condition = self._evaluate_condition(token, args)
                taken = condition
            else:
                defined = self._macro_name_for_ifdef(directive, token, args) in self._macros
                condition = defined if directive == "ifdef" else not defined
                taken = condition

            self._frame = ConditionalFrame(
                directive=directive,
                active=enclosing_active and condition,
                taken=taken,
                parent=self._frame,
                location=token.location,
            )
            logger.debug(f"{token.location}: #{directive} -> {self._frame.active}")
            return

        frame = self._frame
        if frame is None:
            raise UnmatchedEndifError(directive, *self._error_context(token))

        if directive == "elif":
            if frame.seen_else:
                raise ElifAfterElseError(*self._error_context(token))
            if frame.taken or not frame.enclosing_active:
                frame.active = False
            else:
                frame.active = self._evaluate_condition(token, args)
                frame.taken = frame.active
            logger.debug(f"{token.location}: #elif -> {frame.active}")

        elif directive == "else":
            if frame.seen_else:
                raise DuplicateElseError(*self._error_context(token))
            frame.seen_else = True
            frame.active = frame.enclosing_active and not frame.taken
            frame.taken = True
            logger.debug(f"{token.location}: #else -> {frame.active}")

        elif directive == "endif":
            self._frame = frame.parent

    def _macro_name_for_ifdef(self, directive: str, token: CToken, args: list[CToken]) -> str:
        if not args or not args[0].is_name():
            raise DirectiveSyntaxError(
                f"no macro name given in #{directive} directive",
                *self._error_context(args[0] if args else token),
            )
        return args[0].value

    def _evaluate_condition(self, directive: CToken, args: list[CToken]) -> bool:
        """
        Evaluate the expression of an #if or #elif.

        defined operators are resolved before macro expansion so that
        `defined(X)` tests X itself, not what X expands to.
        """
        if not args:
            raise DirectiveSyntaxError(
                f"#{directive.value} with no expression",
                *self._error_context(directive),
            )

        resolved = self._resolve_defined(args)
        expanded = self._expand(resolved)
        evaluator = _ConditionEvaluator(expanded, directive, self)
        return evaluator.evaluate() != 0

    def _resolve_defined(self, tokens: list[CToken]) -> list[CToken]:
        """Replace defined NAME / defined(NAME) with 1 or 0."""
        result: list[CToken] = []
        pos = 0
        while pos < len(tokens):
            token = tokens[pos]
            if not (token.type == CTokenType.IDENTIFIER and token.value == "defined"):
                result.append(token)
                pos += 1
                continue

            if pos + 1 < len(tokens) and tokens[pos + 1].is_name():
                name = tokens[pos + 1].value
                pos += 2
            elif (pos + 3 < len(tokens) and tokens[pos + 1].is_punct("(")
                  and tokens[pos + 2].is_name() and tokens[pos + 3].is_punct(")")):
                name = tokens[pos + 2].value
                pos += 4
            else:
                raise DirectiveSyntaxError(
                    "operator 'defined' requires an identifier",
                    *self._error_context(token),
                )

            value = "1" if name in self._macros else "0"
            result.append(dataclasses.replace(token, type=CTokenType.NUMBER, value=value))
        return result

    # =========================================================================
    # Macro Expansion
    # =========================================================================

    def _expand(self, tokens: list[CToken]) -> list[CToken]:
        """Expand all object-like macros in a token list."""
        return self._expand_tokens(tokens, frozenset(), 0)

    def _expand_tokens(
        self,
        tokens: list[CToken],
        hide_set: frozenset[str],
        depth: int,
    ) -> list[CToken]:
        """
        Implementation of macro expansion.

        Each replacement is rescanned with the macro's name added to the
        hide set, so a macro never expands inside its own replacement.
        depth counts nested replacements and is checked against
        max_expansion_depth.
        """
        result: list[CToken] = []

        for token in tokens:
            macro = self._macros.get(token.value) if token.is_name() else None
            if macro is None or macro.is_function_like or token.value in hide_set:
                result.append(token)
                continue

            if depth >= self.max_expansion_depth:
                raise MacroRecursionLimitError(
                    token.value,
                    self.max_expansion_depth,
                    *self._error_context(token),
                )

            replacement = [
                dataclasses.replace(
                    body_token,
                    offset=token.offset,
                    line=token.line,
                    column=token.column,
                    filename=token.filename,
                    leading_space=token.leading_space if index == 0 else body_token.leading_space,
                )
                for index, body_token in enumerate(macro.body)
            ]
            result.extend(self._expand_tokens(replacement, hide_set | {token.value}, depth + 1))

        return result


# =============================================================================
# #if Expression Evaluation
# =============================================================================

class _ConditionEvaluator:
    """
    Recursive descent evaluator for #if expressions.

    Works on tokens that have already had defined() resolved and macros
    expanded. `live` is False on the unevaluated side of && || and ?:,
    where division by zero is not an error.
    """

    CHAR_ESCAPES = {
        "n": 10, "t": 9, "r": 13, "0": 0, "a": 7, "b": 8, "f": 12, "v": 11,
        "\\": 92, "'": 39, '"': 34, "?": 63,
    }

    def __init__(self, tokens: list[CToken], directive: CToken, owner: Preprocessor):
        self.tokens = tokens
        self.directive = directive
        self.owner = owner
        self._pos = 0

    def evaluate(self) -> int:
        value = self._conditional(True)
        if self._pos < len(self.tokens):
            self._fail(f"unexpected '{self.tokens[self._pos].describe()}' in #{self.directive.value} expression")
        return value

    def _fail(self, message: str, token: Optional[CToken] = None) -> None:
        raise DirectiveSyntaxError(message, *self.owner._error_context(token or self.directive))

    def _peek(self) -> Optional[CToken]:
        if self._pos < len(self.tokens):
            return self.tokens[self._pos]
        return None

    def _match(self, *values: str) -> Optional[str]:
        token = self._peek()
        if token is not None and token.is_punct(*values):
            self._pos += 1
            return token.value
        return None

    # Precedence levels, lowest first

    def _conditional(self, live: bool) -> int:
        condition = self._logical_or(live)
        if self._match("?") is None:
            return condition
        when_true = self._conditional(live and condition != 0)
        if self._match(":") is None:
            self._fail(f"expected ':' in #{self.directive.value} expression")
        when_false = self._conditional(live and condition == 0)
        return when_true if condition else when_false

    def _logical_or(self, live: bool) -> int:
        value = self._logical_and(live)
        while self._match("||"):
            right = self._logical_and(live and not value)
            value = 1 if (value or right) else 0
        return value

    def _logical_and(self, live: bool) -> int:
        value = self._binary(0, live)
        while self._match("&&"):
            right = self._binary(0, live and bool(value))
            value = 1 if (value and right) else 0
        return value

    BINARY_LEVELS: tuple[tuple[str, ...], ...] = (
        ("|",),
        ("^",),
        ("&",),
        ("==", "!="),
        ("<", ">", "<=", ">="),
        ("<<", ">>"),
        ("+", "-"),
        ("*", "/", "%"),
    )

    def _binary(self, level: int, live: bool) -> int:
        if level == len(self.BINARY_LEVELS):
            return self._unary(live)

        value = self._binary(level + 1, live)
        while True:
            operator_token = self._peek()
            operator = self._match(*self.BINARY_LEVELS[level])
            if operator is None:
                return value
            right = self._binary(level + 1, live)
            value = self._apply(operator, value, right, live, operator_token)

    def _apply(self, operator: str, left: int, right: int, live: bool, token: CToken) -> int:
        if operator in ("/", "%"):
            if right == 0:
                if live:
                    self._fail("division by zero in preprocessor expression", token)
                return 0
            quotient = abs(left) // abs(right)
            if (left < 0) != (right < 0):
                quotient = -quotient
            return quotient if operator == "/" else left - right * quotient
        if operator in ("<<", ">>") and right < 0:
            operator, right = ("<<" if operator == ">>" else ">>"), -right
        return {
            "|": lambda: left | right,
            "^": lambda: left ^ right,
            "&": lambda: left & right,
            "==": lambda: int(left == right),
            "!=": lambda: int(left != right),
            "<": lambda: int(left < right),
            ">": lambda: int(left > right),
            "<=": lambda: int(left <= right),
            ">=": lambda: int(left >= right),
            "<<": lambda: left << right,
            ">>": lambda: left >> right,
            "+": lambda: left + right,
            "-": lambda: left - right,
            "*": lambda: left * right,
        }[operator]()

    def _unary(self, live: bool) -> int:
        operator = self._match("!", "~", "-", "+")
        if operator is not None:
            value = self._unary(live)
            if operator == "!":
                return int(value == 0)
            if operator == "~":
                return ~value
            return -value if operator == "-" else value
        return self._primary(live)

    def _primary(self, live: bool) -> int:
        token = self._peek()
        if token is None:
            self._fail(f"unexpected end of #{self.directive.value} expression")

        if token.is_punct("("):
            self._pos += 1
            value = self._conditional(live)
            if self._match(")") is None:
                self._fail(f"missing ')' in #{self.directive.value} expression", token)
            return value

        self._pos += 1
        if token.type == CTokenType.NUMBER:
            return self._integer_value(token)
        if token.type == CTokenType.CHAR_LITERAL:
            return self._char_value(token)
        if token.is_name():
            return 0  # Identifiers that survive expansion are 0

        self._fail(f"unexpected '{token.describe()}' in #{self.directive.value} expression", token)

    def _integer_value(self, token: CToken) -> int:
        value = integer_value(token.value)
        if value is None:
            self._fail(f"invalid integer constant '{token.value}' in preprocessor expression", token)
        return value

    def _char_value(self, token: CToken) -> int:
        body = token.value[token.value.index("'") + 1:-1]
        if not body:
            self._fail("empty character constant", token)
        if body[0] != "\\":
            return ord(body[0])
        escape = body[1:]
        try:
            if escape[:1] == "x":
                return int(escape[1:], 16)
            if escape[:1] in "01234567":
                return int(escape, 8)
        except ValueError:
            self._fail(f"invalid escape in character constant {token.value}", token)
        if escape in self.CHAR_ESCAPES:
            return self.CHAR_ESCAPES[escape]
        self._fail(f"invalid escape in character constant {token.value}", token)


# =============================================================================
# Convenience Function
# =============================================================================

def preprocess(
    source: str,
    filename: str = "<input>",
    predefined: Optional[dict[str, str]] = None,
    max_expansion_depth: int = DEFAULT_MAX_EXPANSION_DEPTH,
) -> list[CToken]:
    """
    Lex and preprocess C source code.

    Args:
        source: Source code to preprocess
        filename: Source filename for error reporting
        predefined: Macros to define before processing
        max_expansion_depth: Limit on nested macro expansion

    Returns:
        Preprocessed tokens ending with EOF
    """
    lexer = CLexer(source, filename, emit_newlines=True)
    pp = Preprocessor(filename, predefined, max_expansion_depth, source.splitlines())
    return pp.process(lexer)
