"""
cdeclkit Command-Line Interface
===============================

This package provides the command-line tool of the toolkit:

- **cdump**: print the declarations of a C file in canonical form

The tool is a Click-based CLI application with error reporting shared
through cdeclkit.cli.errors.
"""

__all__ = ["cdump"]
