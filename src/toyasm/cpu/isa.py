"""
Toy CPU Instruction Set Definition
==================================

This module defines the instruction set of the toy 8-bit CPU that toyasm
targets: its addressing modes, the opcode byte for every supported
(mnemonic, mode) pair, the named constants and the radix keywords.

Everything here is built once at import time and exposed through
read-only mappings, so independent assembly runs can share it.

Addressing Modes
----------------
| Syntax        | Mode              | Length |
|---------------|-------------------|--------|
| (none)        | implicit          | 1      |
| ! value       | immediate         | 2      |
| value         | absolute          | 3      |
| [value]       | indirect          | 3      |
| value, X      | indexedX          | 3      |
| [value, X]    | indexedXindirect  | 3      |
| [value], X    | indirectindexedX  | 3      |

The Y register forms mirror the X forms. Operands wider than one byte are
stored little-endian (low byte first).

Memory Map
----------
The CPU has 256 bytes of RAM. Execution starts at $10 and the top 100
bytes ($9C-$FF) are video memory.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union


# =============================================================================
# Addressing Mode Enumeration
# =============================================================================

class AddressingMode(Enum):
    """
    Operand addressing modes.

    The value of each member is the mode's canonical name. Compound modes
    are named by concatenating the simpler ones in the order they were
    applied, which is how the resolver composes them.
    """
    IMPLICIT = "implicit"
    IMMEDIATE = "immediate"
    ABSOLUTE = "absolute"
    INDIRECT = "indirect"
    INDEXED_X = "indexedX"
    INDEXED_Y = "indexedY"
    INDEXED_X_INDIRECT = "indexedXindirect"
    INDEXED_Y_INDIRECT = "indexedYindirect"
    INDIRECT_INDEXED_X = "indirectindexedX"
    INDIRECT_INDEXED_Y = "indirectindexedY"

    def __str__(self) -> str:
        return self.value

    @property
    def length(self) -> int:
        """Total instruction size in bytes when encoded in this mode."""
        if self is AddressingMode.IMPLICIT:
            return 1
        if self is AddressingMode.IMMEDIATE:
            return 2
        return 3


def indirect_mode(inner: AddressingMode) -> AddressingMode:
    """
    Mode of a bracketed operand whose contents resolved to `inner`.

    Raises:
        ValueError: If the composition is not a real addressing mode
    """
    if inner is AddressingMode.ABSOLUTE:
        return AddressingMode.INDIRECT
    return AddressingMode(f"{inner.value}indirect")


def indexed_mode(mode: AddressingMode, register: str) -> AddressingMode:
    """
    Mode after applying a `, X` or `, Y` suffix to an operand in `mode`.

    Raises:
        ValueError: If the composition is not a real addressing mode
    """
    if mode is AddressingMode.ABSOLUTE:
        return AddressingMode(f"indexed{register}")
    return AddressingMode(f"{mode.value}indexed{register}")


# =============================================================================
# Instruction Definitions
# =============================================================================

@dataclass(frozen=True)
class ImplicitDefinition:
    """An instruction that takes no operand."""
    opcode: int

    def __repr__(self) -> str:
        return f"ImplicitDefinition(opcode=${self.opcode:02X})"


@dataclass(frozen=True)
class ExplicitDefinition:
    """An instruction that takes an operand, with one opcode per mode."""
    modes: Mapping[AddressingMode, int]

    def __post_init__(self):
        object.__setattr__(self, "modes", MappingProxyType(dict(self.modes)))

    def __repr__(self) -> str:
        modes = ", ".join(f"{mode}=${op:02X}" for mode, op in self.modes.items())
        return f"ExplicitDefinition({modes})"


InstructionDefinition = Union[ImplicitDefinition, ExplicitDefinition]
InstructionTable = Mapping[str, InstructionDefinition]


def _memory_modes(base: int, immediate: bool) -> ExplicitDefinition:
    """
    Build the definition for a memory instruction.

    Opcodes are allocated consecutively from `base`, in enum order, skipping
    the immediate slot for instructions that cannot take one.
    """
    modes = {}
    opcode = base
    for mode in AddressingMode:
        if mode is AddressingMode.IMPLICIT:
            continue
        if mode is AddressingMode.IMMEDIATE and not immediate:
            opcode += 1
            continue
        modes[mode] = opcode
        opcode += 1
    return ExplicitDefinition(modes)


# =============================================================================
# Opcode Table
# =============================================================================
# Key: mnemonic
# Value: ImplicitDefinition or ExplicitDefinition
#
# $01 is reserved for the PRELOAD marker and is never an instruction.
# =============================================================================

PRELOAD_MARKER = 0x01

INSTRUCTIONS: InstructionTable = MappingProxyType({
    "BRK": ImplicitDefinition(0x00),   # Stop, reset PC to $10
    "AOA": ImplicitDefinition(0x03),   # Add one to accumulator
    "SOA": ImplicitDefinition(0x04),   # Subtract one from accumulator
    "TMA": _memory_modes(0x10, immediate=True),    # Memory to accumulator
    "TAM": _memory_modes(0x20, immediate=False),   # Accumulator to memory
})


# =============================================================================
# Named Constants
# =============================================================================

CONSTANTS: Mapping[str, int] = MappingProxyType({
    "$ENTRY": 0x10,     # Program counter after reset
    "$VRAM": 0x9C,      # Start of video memory
    "$TOP": 0xFF,       # Last byte of RAM
})


# =============================================================================
# Radix Keywords
# =============================================================================

DEFAULT_RADIX = "HEX"

RADIXES: Mapping[str, int] = MappingProxyType({
    "BIN": 2,
    "OCT": 8,
    "DEC": 10,
    "HEX": 16,
    "BINARY": 2,
    "OCTAL": 8,
    "DECIMAL": 10,
    "HEXADECIMAL": 16,
})


# =============================================================================
# Lookup Functions
# =============================================================================

def is_implicit(mnemonic: str, instructions: InstructionTable = INSTRUCTIONS) -> bool:
    """Check whether an instruction takes no operand."""
    return isinstance(instructions[mnemonic], ImplicitDefinition)


def get_valid_modes(
    mnemonic: str, instructions: InstructionTable = INSTRUCTIONS
) -> list[AddressingMode]:
    """
    Get all valid addressing modes for an instruction.

    Returns an empty list for unknown mnemonics.
    """
    definition = instructions.get(mnemonic)
    if definition is None:
        return []
    if isinstance(definition, ImplicitDefinition):
        return [AddressingMode.IMPLICIT]
    return list(definition.modes)


def get_opcode(
    mnemonic: str,
    mode: AddressingMode,
    instructions: InstructionTable = INSTRUCTIONS,
) -> int | None:
    """
    Get the opcode byte for a (mnemonic, mode) pair.

    Returns None if the instruction does not support the mode.
    """
    definition = instructions.get(mnemonic)
    if definition is None:
        return None
    if isinstance(definition, ImplicitDefinition):
        return definition.opcode if mode is AddressingMode.IMPLICIT else None
    return definition.modes.get(mode)
