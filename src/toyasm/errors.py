"""
toyasm Error Hierarchy
======================

This module defines the exception hierarchy for the toyasm assembler.
All exceptions inherit from ToyAsmError, allowing callers to catch every
assembler error with a single except clause if desired.

Exception Hierarchy
-------------------
ToyAsmError (base)
└── AssemblerError (carries an ErrorKind and a SourceLocation)
    ├── LexicalError - unrecognized character or malformed numeral
    ├── AssemblySyntaxError - unexpected token in a grammar position
    ├── UndefinedSymbolError - reference to an unbound variable
    ├── DuplicateSymbolError - rebinding a name in strict mode
    ├── ValueRangeError - operand or preload byte too wide for its slot
    ├── PreloadSizeError - preload block longer than 255 bytes
    ├── PreloadAddressError - preload start address beyond 16 bits
    └── AddressingModeError - opcode has no encoding for the resolved mode

Every assembler error is fatal for the current run. Callers branch on
``error.kind`` rather than parsing the rendered message.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ToyAsmError(Exception):
    """
    Base exception for all toyasm errors.

        try:
            assemble(source)
        except ToyAsmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


class ErrorKind(Enum):
    """Tag identifying which class of failure aborted the run."""

    LEXICAL = "LexicalError"
    SYNTAX = "SyntaxError"
    REFERENCE = "ReferenceError"
    REDEFINITION = "RedefinitionError"
    VALUE_RANGE = "ValueRangeError"
    PRELOAD_SIZE = "PreloadSizeError"
    PRELOAD_ADDRESS = "PreloadAddressError"
    ADDRESSING_MODE = "AddressingModeError"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(ToyAsmError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        kind: The ErrorKind tag (set by each subclass)
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    kind: ErrorKind = ErrorKind.SYNTAX

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        return self.location.line if self.location else None

    @property
    def column(self) -> Optional[int]:
        return self.location.column if self.location else None

    def attach_source(self, source_line: str) -> None:
        """
        Attach the offending source line after the fact.

        The resolver and finalizer never see raw text, so the pipeline
        facade fills this in once the error reaches it.
        """
        self.source_line = source_line
        self.args = (self._format_message(),)

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.asm:3:9: error: undefined symbol 'countr'
                TMA countr
                    ^
            hint: did you mean 'counter'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class LexicalError(AssemblerError):
    """
    Lexical error in assembly source code.

    Raised when the lexer meets a character it cannot start a token with,
    or a capitalized run that is neither a keyword nor a hexadecimal
    numeral. The resolver also raises it for numerals whose digits are
    invalid in the active radix (e.g. ``BIN 102``).
    """

    kind = ErrorKind.LEXICAL


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Raised when the resolver encounters a token that is not valid in the
    current grammar position, runs out of tokens mid-statement, or
    composes an addressing mode the CPU does not have.
    """

    kind = ErrorKind.SYNTAX


class UndefinedSymbolError(AssemblerError):
    """
    Reference to an unbound variable.

    The assembler is single-pass, so a variable must be bound (by a label
    or a let-assignment) before it is used.
    """

    kind = ErrorKind.REFERENCE

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Variable bound more than once.

    Only raised when strict redefinition checking is enabled; by default
    a later binding silently replaces the earlier one.
    """

    kind = ErrorKind.REDEFINITION

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"duplicate symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class ValueRangeError(AssemblerError):
    """
    Operand or preload byte exceeds its bit width.

    Immediate operands and preload bytes must fit 8 bits; every other
    operand must fit 16 bits.
    """

    kind = ErrorKind.VALUE_RANGE

    def __init__(
        self,
        value: int,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        self.limit = limit
        super().__init__(
            f"value ${value:X} is over ${limit:X}",
            location=location,
            source_line=source_line,
        )


class PreloadSizeError(AssemblerError):
    """Preload block has more bytes than its one-byte count can describe."""

    kind = ErrorKind.PRELOAD_SIZE

    def __init__(
        self,
        size: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.size = size
        super().__init__(
            f"too many ({size}) bytes in preload",
            location=location,
            hint="a preload block holds at most 255 bytes; split it in two",
            source_line=source_line,
        )


class PreloadAddressError(AssemblerError):
    """Preload start address does not fit 16 bits."""

    kind = ErrorKind.PRELOAD_ADDRESS

    def __init__(
        self,
        address: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.address = address
        super().__init__(
            f"bad preload address (${address:X})",
            location=location,
            source_line=source_line,
        )


class AddressingModeError(AssemblerError):
    """
    Invalid addressing mode for instruction.

    Example:
        TAM ! 05  ; Error: TAM cannot store to an immediate value
    """

    kind = ErrorKind.ADDRESSING_MODE

    def __init__(
        self,
        mnemonic: str,
        mode: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        valid_modes: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.mode = mode
        self.valid_modes = valid_modes or []

        hint = None
        if self.valid_modes:
            modes_str = ", ".join(self.valid_modes)
            hint = f"{mnemonic} supports: {modes_str}"

        super().__init__(
            f"'{mnemonic}' does not support {mode} addressing mode",
            location=location,
            hint=hint,
            source_line=source_line,
        )
