"""
cdump - C Declaration Dump Command-Line Interface
=================================================

This module implements the command-line interface of the C declaration
front end. It prints every declaration of a C file in canonical form,
one declared name per line, so the type of each name can be read off
directly.

Usage Examples
--------------
Basic dump:
    $ cdump main.c

With predefined macros:
    $ cdump main.c -DTEST -DLEVEL=2

Describe each type in English:
    $ cdump --explain main.c

Preprocess only:
    $ cdump -E main.c

Verbose mode (debug logging to stderr):
    $ cdump -v main.c
"""

import logging
from pathlib import Path
from typing import Iterator

import click

from cdeclkit import __version__
from cdeclkit.cparse import CFrontend, FrontendOptions, FrontendResult, preprocess
from cdeclkit.cparse.ast import FunctionDefinition
from cdeclkit.cparse.builder import ResolvedDeclaration, TypeBuilder
from cdeclkit.cparse.lexer import CToken, CTokenType, join_tokens
from cdeclkit.cli.errors import handle_cli_exception


# =============================================================================
# Argument and Output Helpers
# =============================================================================

def parse_define(text: str) -> tuple[str, str]:
    """
    Split a -D argument into name and value.

    NAME defines the macro as 1; NAME=VALUE uses VALUE.

    Raises:
        click.BadParameter: If the name is empty or not an identifier
    """
    name, _, value = text.partition("=")
    if not name.isidentifier():
        raise click.BadParameter(f"invalid macro name in '{text}'")
    return name, value


def _collect_defines(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str]:
    return dict(parse_define(value) for value in values)


def format_preprocessed(tokens: list[CToken]) -> str:
    """Render preprocessed tokens, one output line per source line."""
    lines = []
    current: list[CToken] = []
    line = None

    for token in tokens:
        if token.type == CTokenType.EOF:
            break
        if token.line != line and current:
            lines.append(join_tokens(current))
            current = []
        line = token.line
        current.append(token)

    if current:
        lines.append(join_tokens(current))
    return "\n".join(lines)


def format_tokens(tokens: list[CToken]) -> str:
    """One token per line: position, kind and text."""
    return "\n".join(
        f"{token.line}:{token.column}\t{token.type.name}\t{token.value or ''}"
        for token in tokens
        if token.type != CTokenType.EOF
    )


def format_declaration(decl: ResolvedDeclaration, explain: bool = False) -> str:
    text = decl.to_c()
    if decl.is_definition:
        text = f"{text[:-1]} {{ ... }}"
    if explain:
        text = f"{text}  // {decl.name or '<unnamed>'}: {decl.type.describe()}"
    return text


def declaration_lines(
    result: FrontendResult,
    explain: bool = False,
    include_locals: bool = False,
) -> Iterator[str]:
    """
    Output lines for a parsed file in source order.

    Declarations that only define a tag (struct S { ... };) have no
    resolved names and are printed as written.
    """
    builder = TypeBuilder()
    for item in result.unit.items:
        if isinstance(item, FunctionDefinition):
            yield format_declaration(builder.build_definition(item), explain)
            if include_locals:
                for local in item.body.declarations():
                    for decl in builder.build(local):
                        yield "    " + format_declaration(decl, explain)
        elif not item.declarators:
            yield item.to_c()
        else:
            for decl in builder.build(item):
                yield format_declaration(decl, explain)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-D", "--define",
    "defines",
    multiple=True,
    callback=_collect_defines,
    metavar="NAME[=VALUE]",
    help="Predefine a macro (can be repeated)",
)
@click.option(
    "-T", "--typedef",
    "typedefs",
    multiple=True,
    help="Treat NAME as a typedef name declared elsewhere (can be repeated)",
)
@click.option(
    "-E", "--preprocess-only",
    is_flag=True,
    help="Preprocess only, output to stdout",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the preprocessed token stream and exit",
)
@click.option(
    "--explain",
    is_flag=True,
    help="Describe each declared type in English",
)
@click.option(
    "--locals", "include_locals",
    is_flag=True,
    help="Also print declarations inside function bodies",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@click.version_option(version=__version__, prog_name="cdump")
def main(
    input_file: Path,
    defines: dict[str, str],
    typedefs: tuple[str, ...],
    preprocess_only: bool,
    tokens: bool,
    explain: bool,
    include_locals: bool,
    verbose: bool,
) -> None:
    """
    Print the declarations of a C source file in canonical form.

    INPUT_FILE is the C source file to read. #include directives are
    recorded but not followed.

    \b
    Examples:
        cdump main.c                 # One line per declared name
        cdump main.c -DTEST          # Define TEST before preprocessing
        cdump --explain main.c       # Add an English description
        cdump -E main.c              # Preprocess only
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )

    options = FrontendOptions(
        filename=str(input_file),
        defines=defines,
        typedef_names=list(typedefs),
        include_locals=include_locals,
    )

    try:
        # Preprocess only: the parser never runs
        if preprocess_only or tokens:
            source = input_file.read_text(encoding="utf-8")
            stream = preprocess(source, str(input_file), defines)
            click.echo(format_tokens(stream) if tokens else format_preprocessed(stream))
            return

        result = CFrontend(options).parse_file(input_file)
        if not result.success:
            handle_cli_exception(result.error, verbose)

        for line in declaration_lines(result, explain, include_locals):
            click.echo(line)

        if verbose:
            click.echo(
                f"{input_file}: {result.token_count} tokens, "
                f"{len(result.declarations)} declarations",
                err=True,
            )

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
