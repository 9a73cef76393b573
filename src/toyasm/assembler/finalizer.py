"""
Toy CPU Code Finalizer
======================

This module implements the finalizer, the last of the three assembly
stages. It pulls records from the resolver and yields the individual
bytes of the program as ints between 0 and 255 (inclusive).

Operation Encoding
------------------
```
Mode        Bytes
----------  -------------------------------
implicit    opcode
immediate   opcode, value
(other)     opcode, value low, value high
```

Preload Encoding
----------------
```
Offset  Size  Description
------  ----  -----------
0       1     PRELOAD marker ($01)
1       2     Start address (little-endian)
3       1     Byte count
4       n     Data bytes
```

Preloads are emitted where they appear in the program; the loader, not
the finalizer, places them at their target address.

Every record is range-checked before any of its bytes are yielded, so a
failing record never leaves a partial encoding in the output.
"""

from typing import Iterable, Iterator
import logging

from toyasm.assembler.resolver import Operation, Preload, Record
from toyasm.cpu import (
    AddressingMode,
    INSTRUCTIONS,
    PRELOAD_MARKER,
    InstructionTable,
    get_opcode,
    get_valid_modes,
)
from toyasm.errors import (
    AddressingModeError,
    PreloadAddressError,
    PreloadSizeError,
    ValueRangeError,
)

logger = logging.getLogger(__name__)

BYTE_LIMIT = 0xFF
WORD_LIMIT = 0xFFFF


class Finalizer:
    """
    Encodes resolved records into bytes.

    Usage:
        finalizer = Finalizer(resolver.resolve())
        code = bytes(finalizer.finalize())
    """

    def __init__(
        self,
        records: Iterable[Record],
        instructions: InstructionTable = INSTRUCTIONS,
    ):
        """
        Initialize the finalizer.

        Args:
            records: Record stream from the resolver
            instructions: Opcode table (must match the resolver's)
        """
        self._records = records
        self._instructions = instructions

    def finalize(self) -> Iterator[int]:
        """
        Generate the program's bytes.

        Raises:
            ValueRangeError: If an operand or preload byte is too wide
            PreloadAddressError: If a preload starts beyond $FFFF
            PreloadSizeError: If a preload holds more than 255 bytes
            AddressingModeError: If an opcode has no encoding for a mode
        """
        for record in self._records:
            if isinstance(record, Preload):
                encoded = self._encode_preload(record)
            else:
                encoded = self._encode_operation(record)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"{record.location}: {' '.join(f'{b:02X}' for b in encoded)}")
            yield from encoded

    def _encode_preload(self, preload: Preload) -> list[int]:
        if preload.start > WORD_LIMIT:
            raise PreloadAddressError(preload.start, preload.location)
        if preload.size > BYTE_LIMIT:
            raise PreloadSizeError(preload.size, preload.location)

        encoded = [PRELOAD_MARKER, preload.start % 256, preload.start // 256, preload.size]
        for byte in preload.bytes:
            if byte.value > BYTE_LIMIT:
                raise ValueRangeError(byte.value, BYTE_LIMIT, byte.location)
            encoded.append(byte.value)
        return encoded

    def _encode_operation(self, operation: Operation) -> list[int]:
        opcode = get_opcode(operation.opcode, operation.mode, self._instructions)
        if opcode is None:
            raise AddressingModeError(
                operation.opcode,
                str(operation.mode),
                operation.location,
                valid_modes=[
                    str(mode) for mode in get_valid_modes(operation.opcode, self._instructions)
                ],
            )

        if operation.mode is AddressingMode.IMPLICIT:
            return [opcode]

        value = operation.value
        if operation.mode is AddressingMode.IMMEDIATE:
            if value > BYTE_LIMIT:
                raise ValueRangeError(value, BYTE_LIMIT, operation.location)
            return [opcode, value]

        if value > WORD_LIMIT:
            raise ValueRangeError(value, WORD_LIMIT, operation.location)
        return [opcode, value % 256, value // 256]


def finalize(records: Iterable[Record], **options) -> Iterator[int]:
    """Convenience wrapper returning a fresh byte stream for `records`."""
    return Finalizer(records, **options).finalize()
