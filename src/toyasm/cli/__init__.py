"""
toyasm Command-Line Interface
=============================

This package provides the ``toyasm`` command-line tool, a Click-based
wrapper that reads a source file, runs the assembly pipeline and prints
or writes the resulting bytes.
"""

__all__ = ["toyasm"]
