# =============================================================================
# conftest.py - Shared Fixtures
# =============================================================================
# Provides a minimal instruction set with a single operand-taking opcode
# (OPC) so pipeline behavior can be checked against fixed opcode bytes,
# independent of the built-in toy CPU table.
# =============================================================================

from types import MappingProxyType

import pytest

from toyasm.cpu import AddressingMode, ExplicitDefinition, ImplicitDefinition


OPC_TABLE = MappingProxyType({
    "NOP": ImplicitDefinition(0x00),
    "OPC": ExplicitDefinition({
        AddressingMode.ABSOLUTE: 0x10,
        AddressingMode.IMMEDIATE: 0x11,
        AddressingMode.INDIRECT: 0x12,
        AddressingMode.INDEXED_X: 0x13,
        AddressingMode.INDEXED_Y: 0x14,
        AddressingMode.INDEXED_Y_INDIRECT: 0x15,
        AddressingMode.INDIRECT_INDEXED_Y: 0x16,
    }),
})


@pytest.fixture
def opc_table():
    """Instruction table with NOP (implicit) and OPC (absolute=$10, immediate=$11)."""
    return OPC_TABLE
