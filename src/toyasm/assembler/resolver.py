"""
Toy CPU Assembly Resolver
=========================

This module implements the resolver, the second of the three assembly
stages and the one that handles the actual grammar of the language. It
pulls tokens from the lexer as it needs them and yields one record per
statement that produces output.

Statement Types
---------------
1. **Label**: binds the current output offset to a name
   ```
   loop:
   ```

2. **Let-assignment**: binds a literal value to a name
   ```
   eyes = BIN 100
   ```

3. **Preload**: places literal bytes at an address at load time
   ```
   eyes <- 00 | FF
   OCT 10 <- 00FF | DEC 30
   ```

4. **Operation**: an instruction with an optional operand
   ```
   TMA HEX ! 80
   TAM [eyes, X]
   ```

Labels and assignments produce no record. Preloads produce a Preload
record and operations produce an Operation record.

Operand Grammar
---------------
Operands are parsed by recursive descent, threading the radix and the
addressing mode through each call:

| Prefix / form | Effect                                           |
|---------------|--------------------------------------------------|
| BIN/OCT/...   | switch the radix (repeatable, last one wins)     |
| !             | switch to immediate mode                         |
| [ operand ]   | indirect (or <inner>indirect)                    |
| operand, X    | indexedX (or <mode>indexedX)                     |

Because the assembler is single-pass, variables must be bound before
they are used.
"""

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Callable, Iterable, Iterator, Mapping, Optional, Union
import logging

from toyasm.assembler.lexer import Token, TokenType
from toyasm.cpu import (
    AddressingMode,
    CONSTANTS,
    DEFAULT_RADIX,
    INSTRUCTIONS,
    RADIXES,
    InstructionTable,
    is_implicit,
    indexed_mode,
    indirect_mode,
)
from toyasm.errors import (
    AssemblySyntaxError,
    DuplicateSymbolError,
    LexicalError,
    SourceLocation,
    UndefinedSymbolError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Record Data Classes
# =============================================================================

@dataclass(frozen=True)
class Operation:
    """
    A resolved machine instruction.

    Attributes:
        opcode: The instruction mnemonic
        mode: The resolved addressing mode
        value: The operand value (None for implicit mode)
        length: Encoded size in bytes (1, 2 or 3)
        location: Position of the operand (or the mnemonic, if implicit)
    """
    opcode: str
    mode: AddressingMode
    value: Optional[int]
    length: int
    location: SourceLocation


@dataclass(frozen=True)
class PreloadByte:
    """One literal byte of a preload block, with its own position."""
    value: int
    location: SourceLocation


@dataclass(frozen=True)
class Preload:
    """
    A block of literal bytes to place at a fixed address at load time.

    Attributes:
        start: Target address of the first byte
        bytes: The bytes, in order
        location: Position of the statement's first token
    """
    start: int
    bytes: tuple[PreloadByte, ...]
    location: SourceLocation

    @property
    def size(self) -> int:
        """Number of bytes in the block."""
        return len(self.bytes)


Record = Union[Operation, Preload]


# =============================================================================
# Token Cursor
# =============================================================================

class TokenCursor:
    """
    Single-pass cursor over a token stream with one token of lookahead.

    The lookahead token is only pulled from the underlying iterator when
    something asks for it, so advancing onto a token never lexes the one
    after it. A statement that needs no lookahead is therefore complete
    before any later text is scanned.
    """

    def __init__(self, tokens: Iterable[Token]):
        self._tokens = iter(tokens)
        self._next: Optional[Token] = None
        self._pending = False
        self.token: Optional[Token] = None

    @property
    def next(self) -> Optional[Token]:
        """The lookahead token (None at end of input), read on first use."""
        if not self._pending:
            self._next = next(self._tokens, None)
            self._pending = True
        return self._next

    def advance(self, *types: TokenType) -> Optional[Token]:
        """
        Move forward one token and check it is one of `types`.

        Returns:
            The new current token, or None at end of input

        Raises:
            AssemblySyntaxError: If the token is not one of `types`
        """
        token = self.next
        self._pending = False

        if token is None:
            # keep the last real token so end-of-input errors can point at it
            return None
        self.token = token
        if token.type in types:
            return token

        expected = ", ".join(t.name.lower() for t in types)
        raise AssemblySyntaxError(
            f"unexpected token ({token.value})",
            token.location,
            hint=f"expected {expected}",
        )

    def expect(self, *types: TokenType) -> Token:
        """Like advance(), but running out of tokens is a syntax error."""
        last = self.token
        token = self.advance(*types)
        if token is None:
            raise AssemblySyntaxError(
                "unexpected end of input",
                last.location if last else None,
            )
        return token

    def peek(self, token_type: TokenType) -> bool:
        """Check whether the lookahead token has the given type."""
        return self.next is not None and self.next.type is token_type


# =============================================================================
# Resolver Implementation
# =============================================================================

class Resolver:
    """
    Resolves a token stream into Operation and Preload records.

    A Resolver owns the symbol table and the running output offset for one
    assembly run. It consumes its token stream, so call resolve() once and
    create a new Resolver for every run.

    Usage:
        resolver = Resolver(Lexer(source).tokenize())
        for record in resolver.resolve():
            ...

    Attributes:
        symbols: Variable name to bound value
        offset: Output offset of the next operation
    """

    DIGITS = "0123456789ABCDEF"

    def __init__(
        self,
        tokens: Iterable[Token],
        instructions: InstructionTable = INSTRUCTIONS,
        constants: Mapping[str, int] = CONSTANTS,
        radixes: Mapping[str, int] = RADIXES,
        origin: int = 0,
        strict_redefinition: bool = False,
    ):
        """
        Initialize the resolver.

        Args:
            tokens: Token stream from the lexer
            instructions: Opcode table (must match the lexer's)
            constants: Named constants table
            radixes: Radix keyword table
            origin: Output offset of the first operation
            strict_redefinition: Raise DuplicateSymbolError when a name is
                                 bound twice instead of overwriting it
        """
        self._tokens = tokens
        self._instructions = instructions
        self._constants = constants
        self._radixes = radixes
        self._strict = strict_redefinition
        self._cursor: Optional[TokenCursor] = None
        self._definitions: dict[str, SourceLocation] = {}

        self.symbols: dict[str, int] = {}
        self.offset = origin

    def resolve(self) -> Iterator[Record]:
        """
        Generate records from the token stream.

        Yields:
            Operation and Preload records, one per output statement

        Raises:
            AssemblerError: On the first malformed statement
        """
        self._cursor = cursor = TokenCursor(self._tokens)

        while token := cursor.advance(
            TokenType.VARIABLE, TokenType.OPCODE, TokenType.NUMBER, TokenType.DECLARATOR
        ):
            if token.type is TokenType.VARIABLE:
                record = self._variable_statement(token)
            elif token.type is TokenType.OPCODE:
                record = self._operation(token)
            else:
                record = self._literal_preload(token)

            if record is not None:
                logger.debug("%s: %s", token.location, record)
                yield record

    # =========================================================================
    # Statements
    # =========================================================================

    def _variable_statement(self, name: Token) -> Optional[Record]:
        """Handle `name:`, `name = value` and `name <- bytes`."""
        operator = self._cursor.expect(TokenType.LABEL, TokenType.LET, TokenType.PRELOAD)

        if operator.type is TokenType.LABEL:
            self._bind(name, self.offset)
            return None

        if operator.type is TokenType.LET:
            first = self._cursor.expect(TokenType.DECLARATOR, TokenType.NUMBER)
            self._bind(name, self._simple_operand(first))
            return None

        return self._preload(self._lookup(name), name)

    def _literal_preload(self, first: Token) -> Preload:
        """Handle `[radix] address <- bytes`."""
        start = self._simple_operand(first)
        self._cursor.expect(TokenType.PRELOAD)
        return self._preload(start, first)

    def _preload(self, start: int, lead: Token) -> Preload:
        """Gather one or more bar-separated bytes after a `<-`."""
        items = [self._preload_byte()]
        while self._cursor.peek(TokenType.CAT):
            self._cursor.expect(TokenType.CAT)
            items.append(self._preload_byte())
        return Preload(start=start, bytes=tuple(items), location=lead.location)

    def _preload_byte(self) -> PreloadByte:
        token = self._cursor.expect(
            TokenType.DECLARATOR, TokenType.NUMBER, TokenType.VARIABLE, TokenType.CONSTANT
        )
        return PreloadByte(self._simple_operand(token), token.location)

    def _operation(self, opcode: Token) -> Operation:
        """Handle an instruction, advancing the offset by its length."""
        if is_implicit(opcode.value, self._instructions):
            record = Operation(
                opcode.value, AddressingMode.IMPLICIT, None, 1, opcode.location
            )
        else:
            record = self._operand(opcode.value)

        self.offset += record.length
        return record

    # =========================================================================
    # Operands
    # =========================================================================

    OPERAND_START = (
        TokenType.DECLARATOR, TokenType.NUMBER, TokenType.VARIABLE,
        TokenType.OPENER, TokenType.BANG, TokenType.CONSTANT,
    )

    def _operand(
        self,
        opcode: str,
        radix: str = DEFAULT_RADIX,
        mode: AddressingMode = AddressingMode.ABSOLUTE,
        bracketed: bool = False,
    ) -> Operation:
        """
        Parse one operand expression.

        Prefixes (radix keywords and `!`) are consumed first, updating the
        radix or the mode; any number of them may precede the base value.
        The base value is then resolved, recursing once for a bracketed
        operand, followed by an optional index suffix.
        """
        cursor = self._cursor
        token = cursor.expect(*self.OPERAND_START)

        while token.type in (TokenType.DECLARATOR, TokenType.BANG):
            if token.type is TokenType.DECLARATOR:
                radix = token.value
            else:
                mode = AddressingMode.IMMEDIATE
            token = cursor.expect(*self.OPERAND_START)

        location = token.location

        if token.type is TokenType.VARIABLE:
            value = self._lookup(token)
        elif token.type is TokenType.CONSTANT:
            value = self._constants[token.value]
        elif token.type is TokenType.OPENER:
            if bracketed:
                # the inner operand would be indirect, which never composes
                raise AssemblySyntaxError(
                    f"cannot apply '[' to an operand in {AddressingMode.INDIRECT} mode",
                    token.location,
                )
            inner = self._operand(opcode, radix, mode, bracketed=True)
            cursor.expect(TokenType.CLOSER)
            mode = self._compose(indirect_mode, token, inner.mode)
            value = inner.value
        else:
            value = self._convert(token, radix)

        if cursor.peek(TokenType.COMMA):
            cursor.expect(TokenType.COMMA)
            register = cursor.expect(TokenType.INDEX)
            mode = self._compose(indexed_mode, register, mode, register.value)

        return Operation(opcode, mode, value, mode.length, location)

    def _simple_operand(self, token: Token) -> int:
        """
        Resolve `[radix] numeral`, a variable or a constant to an integer.

        `token` is the already-consumed first token of the operand.
        """
        if token.type is TokenType.VARIABLE:
            return self._lookup(token)
        if token.type is TokenType.CONSTANT:
            return self._constants[token.value]

        radix = DEFAULT_RADIX
        if token.type is TokenType.DECLARATOR:
            radix = token.value
            token = self._cursor.expect(TokenType.NUMBER)

        return self._convert(token, radix)

    def _compose(
        self,
        compose: Callable[..., AddressingMode],
        token: Token,
        *args,
    ) -> AddressingMode:
        try:
            return compose(*args)
        except ValueError:
            raise AssemblySyntaxError(
                f"cannot apply '{token.value}' to an operand in {args[0]} mode",
                token.location,
            ) from None

    def _convert(self, token: Token, radix: str) -> int:
        """Convert a numeral under the given radix keyword."""
        base = self._radixes[radix]
        if not all(digit in self.DIGITS[:base] for digit in token.value):
            raise LexicalError(
                f"invalid {radix} numeral ({token.value})", token.location
            )
        return int(token.value, base)

    # =========================================================================
    # Symbol Table
    # =========================================================================

    def _lookup(self, name: Token) -> int:
        if name.value not in self.symbols:
            raise UndefinedSymbolError(
                name.value,
                name.location,
                similar_symbols=get_close_matches(name.value, list(self.symbols)),
            )
        return self.symbols[name.value]

    def _bind(self, name: Token, value: int) -> None:
        if name.value in self.symbols:
            if self._strict:
                raise DuplicateSymbolError(
                    name.value,
                    name.location,
                    original_location=self._definitions[name.value],
                )
            logger.debug(
                f"{name.location}: redefining '{name.value}' "
                f"(${self.symbols[name.value]:X} -> ${value:X})"
            )
        else:
            logger.debug(f"{name.location}: binding '{name.value}' = ${value:X}")

        self.symbols[name.value] = value
        self._definitions[name.value] = name.location


def resolve(tokens: Iterable[Token], **options) -> Iterator[Record]:
    """Convenience wrapper returning a fresh record stream for `tokens`."""
    return Resolver(tokens, **options).resolve()
