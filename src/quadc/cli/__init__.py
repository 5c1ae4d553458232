"""
quadc Command-Line Interface
============================

This package provides the `quadc` command, a Click-based front end to
the compiler.
"""

__all__ = ["quadc"]
