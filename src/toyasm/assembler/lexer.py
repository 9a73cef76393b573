"""
Toy CPU Assembly Language Lexer
===============================

This module implements the lexer (tokenizer) for toy CPU assembly
language, the first of the three assembly stages. It converts source text
into a lazy stream of tokens that the resolver pulls from one at a time.

Token Types
-----------
- VARIABLE: lowercase-initial names (labels and let-bound values)
- OPCODE: instruction mnemonics (TMA, TAM, BRK, ...)
- DECLARATOR: radix keywords (BIN, OCT, DEC, HEX)
- CONSTANT: named constants ($VRAM, $TOP, ...)
- INDEX: the index registers X and Y
- NUMBER: numerals, kept as text until the resolver knows their radix
- Operators: ``:`` ``=`` ``<-`` ``!`` ``[`` ``]`` ``,`` ``|``

Capitalized Runs
----------------
A run starting with an uppercase letter, digit or ``$`` is classified in
priority order: index register, opcode, declarator, constant, numeral.
Numerals may only contain hexadecimal digits regardless of the radix
they will eventually be read in, so ``DEC`` is always a declarator and
``0DEC`` is always a numeral.

Comments
--------
``#`` starts a comment that runs to the end of the line.

Example
-------
>>> from toyasm.assembler.lexer import Lexer
>>> for token in Lexer("x = 05").tokenize():
...     print(token)
Token(VARIABLE, 'x', 1:1)
Token(LET, '=', 1:3)
Token(NUMBER, '05', 1:5)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Mapping, Optional
import string

from toyasm.cpu import CONSTANTS, INSTRUCTIONS, RADIXES, InstructionTable
from toyasm.errors import LexicalError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for toy CPU assembly language."""

    # Names
    VARIABLE = auto()    # lowercase-initial name
    OPCODE = auto()      # instruction mnemonic
    DECLARATOR = auto()  # radix keyword
    CONSTANT = auto()    # named constant
    INDEX = auto()       # X or Y

    # Values
    NUMBER = auto()      # numeral text, radix applied later

    # Operators
    LABEL = auto()       # :
    LET = auto()         # =
    PRELOAD = auto()     # <-
    BANG = auto()        # ! (immediate mode indicator)

    # Delimiters
    OPENER = auto()      # [
    CLOSER = auto()      # ]
    COMMA = auto()       # ,
    CAT = auto()         # | (separates preload bytes)


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: The token's source text
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes toy CPU assembly source code.

    Tokens are produced lazily: the lexer only scans as far as its consumer
    has asked. Every call to tokenize() starts an independent scan from the
    beginning of the source, so several streams over one Lexer may be
    consumed side by side.

    Usage:
        lexer = Lexer(source_text, filename)
        for token in lexer.tokenize():
            ...

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    WHITESPACE = " \t\r\n"

    # Characters that can start and continue a variable name
    VARIABLE_START = string.ascii_lowercase
    VARIABLE_CHARS = string.ascii_letters + string.digits + "_"

    # Characters that can start and continue a capitalized run
    CAPITAL_START = string.ascii_uppercase + string.digits + "$"
    CAPITAL_CHARS = string.ascii_uppercase + string.digits + "$"

    HEX_DIGITS = string.digits + "ABCDEF"

    SINGLE_CHAR_TOKENS = {
        "[": TokenType.OPENER,
        "]": TokenType.CLOSER,
        ",": TokenType.COMMA,
        "!": TokenType.BANG,
        ":": TokenType.LABEL,
        "=": TokenType.LET,
        "|": TokenType.CAT,
    }

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        instructions: InstructionTable = INSTRUCTIONS,
        constants: Mapping[str, int] = CONSTANTS,
        radixes: Mapping[str, int] = RADIXES,
    ):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
            instructions: Opcode table used to recognize mnemonics
            constants: Named constants table
            radixes: Radix keyword table
        """
        self.source = source
        self.filename = filename
        self.instructions = instructions
        self.constants = constants
        self.radixes = radixes

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects representing each lexical element

        Raises:
            LexicalError: If an invalid character or run is encountered
        """
        return _Scanner(self).scan()

    def classify(self, value: str) -> Optional[TokenType]:
        """
        Classify an uppercase/digit/$ run.

        Priority: index register, opcode, declarator, constant, numeral.

        Returns:
            The run's TokenType, or None if the run is not a valid token
        """
        if value in ("X", "Y"):
            return TokenType.INDEX
        if value in self.instructions:
            return TokenType.OPCODE
        if value in self.radixes:
            return TokenType.DECLARATOR
        if value in self.constants:
            return TokenType.CONSTANT
        if all(digit in self.HEX_DIGITS for digit in value):
            return TokenType.NUMBER
        return None


class _Scanner:
    """Position state for one pass of a Lexer over its source."""

    def __init__(self, lexer: Lexer):
        self._lexer = lexer
        self._source = lexer.source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def scan(self) -> Iterator[Token]:
        lexer = self._lexer
        while not self._at_end():
            char = self._peek()

            if char in lexer.WHITESPACE:
                self._advance()
                continue

            if char == "#":
                self._skip_comment()
                continue

            yield self._scan_token()

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self._source):
            return ""
        return self._source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, updating line/column."""
        if self._at_end():
            return ""

        char = self._source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _gather(self, allowed: str) -> str:
        chars = []
        # '' in allowed is True, so guard against end of input
        while self._peek() and self._peek() in allowed:
            chars.append(self._advance())
        return "".join(chars)

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(self, token_type: TokenType, value: str,
                    start_line: int, start_column: int) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line,
            column=start_column,
            filename=self._lexer.filename,
        )

    def _error(self, message: str, line: Optional[int] = None,
               column: Optional[int] = None) -> LexicalError:
        """
        Create a lexical error at the given (or current) location.

        The current line's text is attached for caret display.
        """
        location = SourceLocation(
            self._lexer.filename,
            line or self._line,
            column or self._column,
        )
        return LexicalError(message, location, source_line=self.get_current_line())

    # =========================================================================
    # Comment Handling
    # =========================================================================

    def _skip_comment(self) -> None:
        """Skip a # comment up to (not including) the newline."""
        while not self._at_end() and self._peek() != "\n":
            self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        lexer = self._lexer
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in lexer.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(
                lexer.SINGLE_CHAR_TOKENS[char], char, start_line, start_column
            )

        if char == "<":
            self._advance()
            if self._peek() == "-":
                self._advance()
                return self._make_token(TokenType.PRELOAD, "<-", start_line, start_column)
            raise self._error("expected '-' after '<'", start_line, start_column)

        if char in lexer.VARIABLE_START:
            name = self._gather(lexer.VARIABLE_CHARS)
            return self._make_token(TokenType.VARIABLE, name, start_line, start_column)

        if char in lexer.CAPITAL_START:
            value = self._gather(lexer.CAPITAL_CHARS)
            token_type = lexer.classify(value)
            if token_type is None:
                raise self._error(f"invalid token ({value})", start_line, start_column)
            return self._make_token(token_type, value, start_line, start_column)

        raise self._error(f"unexpected character ({char!r})", start_line, start_column)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_current_line(self) -> str:
        """Get the current line of source text."""
        line_end = self._source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self._source)
        return self._source[self._line_start_pos:line_end]


def tokenize(source: str, filename: str = "<input>", **tables) -> Iterator[Token]:
    """Convenience wrapper returning a fresh token stream for `source`."""
    return Lexer(source, filename, **tables).tokenize()
