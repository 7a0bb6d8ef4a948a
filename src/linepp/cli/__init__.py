"""
linepp Command-Line Interface
=============================

This package provides the command-line front end for the preprocessor:

- **lpp**: preprocess a file (or stdin) to a file (or stdout)

The tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["lpp"]
