"""
toyasm CPU Package
==================

This package contains the toy CPU's architecture definitions. The lexer,
resolver and finalizer all read the same tables, so an opcode name is
classified, parsed and encoded consistently.

Modules:
    isa: Addressing modes, opcode table, named constants and radixes.

Usage:
    from toyasm.cpu import (
        AddressingMode,
        INSTRUCTIONS,
        get_opcode,
    )
"""

from toyasm.cpu.isa import (
    # Core types
    AddressingMode,
    ImplicitDefinition,
    ExplicitDefinition,
    InstructionDefinition,
    InstructionTable,
    # Static tables
    INSTRUCTIONS,
    CONSTANTS,
    RADIXES,
    DEFAULT_RADIX,
    PRELOAD_MARKER,
    # Mode composition
    indirect_mode,
    indexed_mode,
    # Lookup functions
    is_implicit,
    get_valid_modes,
    get_opcode,
)

__all__ = [
    "AddressingMode",
    "ImplicitDefinition",
    "ExplicitDefinition",
    "InstructionDefinition",
    "InstructionTable",
    "INSTRUCTIONS",
    "CONSTANTS",
    "RADIXES",
    "DEFAULT_RADIX",
    "PRELOAD_MARKER",
    "indirect_mode",
    "indexed_mode",
    "is_implicit",
    "get_valid_modes",
    "get_opcode",
]
