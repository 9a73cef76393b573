"""
Toy CPU Assembler - Main Interface
==================================

This module provides the Assembler class, the primary interface for
assembling toy CPU source code. It chains the three stages:

    source -> Lexer -> tokens -> Resolver -> records -> Finalizer -> bytes

Each stage is a generator that pulls from the one before it, so the
pipeline only ever does the work of one statement ahead of its consumer.
The streaming methods (tokenize, resolve, finalize) hand those generators
straight to the caller; assemble() drains the byte stream into `bytes`.

Example Usage
-------------
>>> from toyasm.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble('''
... eyes = BIN 100
... start:
...     TMA ! eyes
...     TAM [eyes], Y
... ''').hex(" ")
'10 04 28 04 00'
>>> asm.get_symbols()
{'eyes': 4, 'start': 0}
"""

from pathlib import Path
from typing import Iterator, Mapping, Optional
import logging

from toyasm.assembler.finalizer import Finalizer
from toyasm.assembler.lexer import Lexer, Token
from toyasm.assembler.resolver import Record, Resolver
from toyasm.config import AssemblerConfig
from toyasm.cpu import CONSTANTS, INSTRUCTIONS, RADIXES, InstructionTable
from toyasm.errors import AssemblerError

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main toy CPU assembler class.

    An Assembler holds configuration and tables only; every call starts a
    fresh, independent pipeline with its own symbol table. The symbol
    table of the most recent run is kept for inspection.

    Attributes:
        config: Options applied to every run
    """

    def __init__(
        self,
        config: Optional[AssemblerConfig] = None,
        instructions: InstructionTable = INSTRUCTIONS,
        constants: Mapping[str, int] = CONSTANTS,
        radixes: Mapping[str, int] = RADIXES,
    ):
        """
        Initialize the assembler.

        Args:
            config: Run options (default: AssemblerConfig())
            instructions: Opcode table for all three stages
            constants: Named constants table
            radixes: Radix keyword table
        """
        self.config = config or AssemblerConfig()
        self._instructions = instructions
        self._constants = constants
        self._radixes = radixes
        self._resolver: Optional[Resolver] = None

    # =========================================================================
    # Streaming Stages
    # =========================================================================

    def tokenize(self, source: str, filename: Optional[str] = None) -> Iterator[Token]:
        """Lex `source` into a lazy token stream."""
        lexer = Lexer(
            source,
            filename or self.config.filename,
            instructions=self._instructions,
            constants=self._constants,
            radixes=self._radixes,
        )
        return self._with_source(lexer.tokenize(), source)

    def resolve(self, source: str, filename: Optional[str] = None) -> Iterator[Record]:
        """Lex and resolve `source` into a lazy record stream."""
        lexer = Lexer(
            source,
            filename or self.config.filename,
            instructions=self._instructions,
            constants=self._constants,
            radixes=self._radixes,
        )
        self._resolver = Resolver(
            lexer.tokenize(),
            instructions=self._instructions,
            constants=self._constants,
            radixes=self._radixes,
            origin=self.config.origin,
            strict_redefinition=self.config.strict_redefinition,
        )
        return self._with_source(self._resolver.resolve(), source)

    def finalize(self, source: str, filename: Optional[str] = None) -> Iterator[int]:
        """Run the whole pipeline over `source`, yielding bytes lazily."""
        records = self.resolve(source, filename)
        finalizer = Finalizer(records, instructions=self._instructions)
        return self._with_source(finalizer.finalize(), source)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: Optional[str] = None) -> bytes:
        """
        Assemble source code from a string.

        Returns:
            The complete byte stream

        Raises:
            AssemblerError: If assembly fails
        """
        logger.debug(f"Assembling {filename or self.config.filename}...")
        code = bytes(self.finalize(source, filename))
        logger.debug(f"Generated {len(code)} bytes")
        return code

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        return self.assemble(filepath.read_text(), str(filepath))

    def get_symbols(self) -> dict[str, int]:
        """Symbol table of the most recent run (empty before any run)."""
        if self._resolver is None:
            return {}
        return dict(self._resolver.symbols)

    # =========================================================================
    # Error Context
    # =========================================================================

    @staticmethod
    def _with_source(stream: Iterator, source: str) -> Iterator:
        """Re-raise assembler errors with their source line attached."""
        try:
            yield from stream
        except AssemblerError as e:
            if e.source_line is None and e.location is not None:
                lines = source.splitlines()
                if 0 < e.location.line <= len(lines):
                    e.attach_source(lines[e.location.line - 1])
            raise


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", origin: int = 0) -> bytes:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(AssemblerConfig(origin=origin, filename=filename))
    return asm.assemble(source)


def assemble_file(filepath: str | Path, origin: int = 0) -> bytes:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(AssemblerConfig(origin=origin))
    return asm.assemble_file(filepath)
