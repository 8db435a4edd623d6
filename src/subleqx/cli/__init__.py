"""
Subleqx Command-Line Interface
==============================

This package provides the command-line tool for the Subleqx assembler:

- **sxasm**: SUBLEQX assembler

The tool is a Click-based CLI application with help text and consistent
error reporting through cli.errors.
"""

__all__ = ["sxasm"]
