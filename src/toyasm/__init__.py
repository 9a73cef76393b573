"""
toyasm - Assembler for a Toy 8-bit CPU
======================================

This package translates assembly source for a small fictional CPU into a
linear byte stream, through a lazy three-stage pipeline (lexer, resolver,
finalizer).

Main Components
---------------
- **assembler**: The pipeline stages and the Assembler facade
- **cpu**: Instruction set, addressing modes, constants and radixes
- **cli**: The ``toyasm`` command-line tool

Quick Start
-----------
Assemble a program:
    >>> from toyasm import assemble
    >>> assemble("x = 05\\nTMA x").hex(" ")
    '11 05 00'

Stream it instead:
    >>> from toyasm import Assembler
    >>> for byte in Assembler().finalize("TMA ! 0A"):
    ...     print(f"{byte:02X}")
    10
    0A

Or use the command-line tool:
    $ toyasm program.asm
    $ toyasm program.asm -o program.bin
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from toyasm.assembler import (
    Assembler,
    assemble,
    assemble_file,
    Lexer,
    Token,
    TokenType,
    Resolver,
    Operation,
    Preload,
    PreloadByte,
    Finalizer,
)
from toyasm.config import AssemblerConfig
from toyasm.cpu import (
    AddressingMode,
    ImplicitDefinition,
    ExplicitDefinition,
    INSTRUCTIONS,
    CONSTANTS,
    RADIXES,
    PRELOAD_MARKER,
)
from toyasm.errors import (
    ToyAsmError,
    AssemblerError,
    ErrorKind,
    SourceLocation,
    LexicalError,
    AssemblySyntaxError,
    UndefinedSymbolError,
    DuplicateSymbolError,
    ValueRangeError,
    PreloadSizeError,
    PreloadAddressError,
    AddressingModeError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    "AssemblerConfig",
    # Pipeline stages
    "Lexer",
    "Token",
    "TokenType",
    "Resolver",
    "Operation",
    "Preload",
    "PreloadByte",
    "Finalizer",
    # CPU definitions
    "AddressingMode",
    "ImplicitDefinition",
    "ExplicitDefinition",
    "INSTRUCTIONS",
    "CONSTANTS",
    "RADIXES",
    "PRELOAD_MARKER",
    # Exception hierarchy
    "ToyAsmError",
    "AssemblerError",
    "ErrorKind",
    "SourceLocation",
    "LexicalError",
    "AssemblySyntaxError",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "ValueRangeError",
    "PreloadSizeError",
    "PreloadAddressError",
    "AddressingModeError",
]
