# =============================================================================
# test_finalizer.py - Finalizer Unit Tests
# =============================================================================
# Tests for the byte encoding stage of the toy CPU assembler.
#
# Test coverage includes:
#   - Implicit, immediate and word-operand encodings
#   - Little-endian value splitting
#   - Preload block layout
#   - Range checks on operands, preload bytes, sizes and addresses
#   - Unsupported addressing modes
#   - Record-at-a-time delivery
# =============================================================================

import logging

import pytest
from toyasm.assembler.finalizer import Finalizer, finalize
from toyasm.assembler.resolver import Operation, Preload, PreloadByte
from toyasm.cpu import AddressingMode, PRELOAD_MARKER
from toyasm.errors import (
    AddressingModeError,
    ErrorKind,
    PreloadAddressError,
    PreloadSizeError,
    SourceLocation,
    ValueRangeError,
)


# =============================================================================
# Helper Functions
# =============================================================================

HERE = SourceLocation("<test>", 1, 1)


def op(opcode: str, mode: AddressingMode, value=None) -> Operation:
    return Operation(opcode, mode, value, mode.length, HERE)


def preload(start: int, values) -> Preload:
    return Preload(start, tuple(PreloadByte(v, HERE) for v in values), HERE)


def encode(*records, instructions=None) -> list:
    """Helper to finalize a handful of records into a list of ints."""
    if instructions is None:
        return list(finalize(records))
    return list(finalize(records, instructions=instructions))


# =============================================================================
# Operation Encoding Tests
# =============================================================================

class TestOperations:
    """Test encoding of Operation records."""

    def test_implicit(self):
        assert encode(op("BRK", AddressingMode.IMPLICIT)) == [0x00]

    def test_immediate(self):
        assert encode(op("TMA", AddressingMode.IMMEDIATE, 0x0A)) == [0x10, 0x0A]

    def test_absolute_is_little_endian(self):
        """Word operands are emitted low byte first."""
        assert encode(op("TMA", AddressingMode.ABSOLUTE, 0x1234)) == [0x11, 0x34, 0x12]

    def test_absolute_small_value(self):
        assert encode(op("TMA", AddressingMode.ABSOLUTE, 5)) == [0x11, 0x05, 0x00]

    @pytest.mark.parametrize("mode,opcode", [
        (AddressingMode.INDIRECT, 0x12),
        (AddressingMode.INDEXED_X, 0x13),
        (AddressingMode.INDEXED_Y, 0x14),
        (AddressingMode.INDEXED_X_INDIRECT, 0x15),
        (AddressingMode.INDEXED_Y_INDIRECT, 0x16),
        (AddressingMode.INDIRECT_INDEXED_X, 0x17),
        (AddressingMode.INDIRECT_INDEXED_Y, 0x18),
    ])
    def test_word_modes(self, mode, opcode):
        """Every non-immediate explicit mode takes a 16-bit operand."""
        assert encode(op("TMA", mode, 0x9C)) == [opcode, 0x9C, 0x00]

    def test_custom_table(self, opc_table):
        record = op("OPC", AddressingMode.INDIRECT_INDEXED_Y, 0x30)
        assert encode(record, instructions=opc_table) == [0x16, 0x30, 0x00]

    def test_output_length_matches_record(self):
        records = [
            op("AOA", AddressingMode.IMPLICIT),
            op("TMA", AddressingMode.IMMEDIATE, 1),
            op("TAM", AddressingMode.INDEXED_Y, 1),
        ]
        assert len(encode(*records)) == sum(r.length for r in records)


# =============================================================================
# Preload Encoding Tests
# =============================================================================

class TestPreloads:
    """Test encoding of Preload records."""

    def test_layout(self):
        """Marker, address low, address high, count, then the data."""
        assert encode(preload(0x20, [1, 2, 3])) == [PRELOAD_MARKER, 0x20, 0x00, 3, 1, 2, 3]

    def test_high_address(self):
        assert encode(preload(0xABCD, [0xFF])) == [0x01, 0xCD, 0xAB, 1, 0xFF]

    def test_max_size(self):
        encoded = encode(preload(0, [0] * 255))
        assert encoded[3] == 255
        assert len(encoded) == 4 + 255

    def test_max_address(self):
        assert encode(preload(0xFFFF, [7]))[:3] == [0x01, 0xFF, 0xFF]

    def test_mixed_records_in_order(self):
        """Preloads are emitted in place, between operations."""
        encoded = encode(
            op("BRK", AddressingMode.IMPLICIT),
            preload(0x10, [0xAA]),
            op("AOA", AddressingMode.IMPLICIT),
        )
        assert encoded == [0x00, 0x01, 0x10, 0x00, 1, 0xAA, 0x03]


# =============================================================================
# Range Check Tests
# =============================================================================

class TestRangeChecks:
    """Test the 8-bit and 16-bit limits."""

    def test_immediate_limit(self):
        assert encode(op("TMA", AddressingMode.IMMEDIATE, 0xFF)) == [0x10, 0xFF]
        with pytest.raises(ValueRangeError) as exc_info:
            encode(op("TMA", AddressingMode.IMMEDIATE, 0x100))
        error = exc_info.value
        assert error.kind is ErrorKind.VALUE_RANGE
        assert error.message == "value $100 is over $FF"

    def test_word_limit(self):
        assert encode(op("TMA", AddressingMode.ABSOLUTE, 0xFFFF)) == [0x11, 0xFF, 0xFF]
        with pytest.raises(ValueRangeError) as exc_info:
            encode(op("TMA", AddressingMode.ABSOLUTE, 0x10000))
        assert exc_info.value.limit == 0xFFFF

    def test_preload_byte_limit(self):
        with pytest.raises(ValueRangeError) as exc_info:
            encode(preload(0x20, [0x01, 0x1FF]))
        assert exc_info.value.value == 0x1FF

    def test_preload_size_limit(self):
        with pytest.raises(PreloadSizeError) as exc_info:
            encode(preload(0x20, [0] * 256))
        error = exc_info.value
        assert error.kind is ErrorKind.PRELOAD_SIZE
        assert error.message == "too many (256) bytes in preload"

    def test_preload_address_limit(self):
        with pytest.raises(PreloadAddressError) as exc_info:
            encode(preload(0x10000, [0]))
        error = exc_info.value
        assert error.kind is ErrorKind.PRELOAD_ADDRESS
        assert error.message == "bad preload address ($10000)"

    def test_address_checked_before_size(self):
        with pytest.raises(PreloadAddressError):
            encode(preload(0x10000, [0] * 300))


# =============================================================================
# Addressing Mode Tests
# =============================================================================

class TestAddressingModes:
    """Test modes that an opcode has no encoding for."""

    def test_unsupported_mode(self):
        """TAM cannot store to an immediate value."""
        with pytest.raises(AddressingModeError) as exc_info:
            encode(op("TAM", AddressingMode.IMMEDIATE, 5))
        error = exc_info.value
        assert error.kind is ErrorKind.ADDRESSING_MODE
        assert error.mnemonic == "TAM"
        assert "absolute" in error.hint
        assert "immediate" not in error.valid_modes

    def test_implicit_opcode_with_operand_mode(self):
        with pytest.raises(AddressingModeError):
            encode(op("BRK", AddressingMode.ABSOLUTE, 0))

    def test_mode_missing_from_custom_table(self, opc_table):
        with pytest.raises(AddressingModeError):
            encode(op("OPC", AddressingMode.INDEXED_X_INDIRECT, 0), instructions=opc_table)


# =============================================================================
# Laziness Tests
# =============================================================================

class TestLaziness:
    """Test the finalizer's pull-based behavior."""

    def test_bytes_before_error_are_delivered(self):
        """Earlier records are fully delivered before a later one fails."""
        records = [
            op("TMA", AddressingMode.IMMEDIATE, 1),
            op("TMA", AddressingMode.IMMEDIATE, 0x100),
        ]
        stream = Finalizer(records).finalize()
        assert [next(stream), next(stream)] == [0x10, 0x01]
        with pytest.raises(ValueRangeError):
            next(stream)

    def test_failing_preload_yields_nothing(self):
        """A record is checked whole before any of its bytes are yielded."""
        stream = Finalizer([preload(0x20, [0x01, 0x02, 0x100])]).finalize()
        with pytest.raises(ValueRangeError):
            next(stream)

    def test_debug_log_per_record(self, caplog):
        """Each record's bytes are logged only when DEBUG is enabled."""
        records = [op("TMA", AddressingMode.IMMEDIATE, 0x0A)]
        with caplog.at_level(logging.INFO, logger="toyasm.assembler.finalizer"):
            encode(*records)
        assert caplog.records == []
        with caplog.at_level(logging.DEBUG, logger="toyasm.assembler.finalizer"):
            encode(*records)
        assert caplog.messages == ["<test>:1:1: 10 0A"]

    def test_pulls_one_record_at_a_time(self):
        pulled = []

        def records():
            for record in [op("BRK", AddressingMode.IMPLICIT), op("AOA", AddressingMode.IMPLICIT)]:
                pulled.append(record.opcode)
                yield record

        stream = Finalizer(records()).finalize()
        assert next(stream) == 0x00
        assert pulled == ["BRK"]
