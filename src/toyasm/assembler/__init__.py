"""
Toy CPU Assembler
=================

This package provides the three-stage assembler for the toy 8-bit CPU.

Main Components
---------------
- **Assembler**: Facade that chains the stages for one source unit
- **Lexer**: Tokenizes assembly source into tokens
- **Resolver**: Resolves statements and operands into records
- **Finalizer**: Encodes records into bytes

Assembly Process
----------------
The stages form a lazy, pull-based pipeline:

1. **Lexing (Lexer)**: strips whitespace and comments and classifies
   names, keywords and numerals.

2. **Resolution (Resolver)**: tracks variables and the output offset,
   parses the operand grammar and composes addressing modes. Yields an
   Operation or Preload record per output statement.

3. **Finalization (Finalizer)**: looks up opcode bytes, range-checks
   operands and yields the bytes.

No stage builds a full list of its output; each advances only when the
next stage asks for more.
"""

from toyasm.assembler.assembler import Assembler, assemble, assemble_file
from toyasm.assembler.lexer import Lexer, Token, TokenType, tokenize
from toyasm.assembler.resolver import (
    Operation,
    Preload,
    PreloadByte,
    Record,
    Resolver,
    TokenCursor,
    resolve,
)
from toyasm.assembler.finalizer import Finalizer, finalize

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Resolver
    "Operation",
    "Preload",
    "PreloadByte",
    "Record",
    "Resolver",
    "TokenCursor",
    "resolve",
    # Finalizer
    "Finalizer",
    "finalize",
]
