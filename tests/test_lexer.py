# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the toy CPU assembler lexer/tokenizer.
#
# Test coverage includes:
#   - Single-character and two-character operators
#   - Classification of capitalized runs (index, opcode, declarator,
#     constant, numeral)
#   - Variable names
#   - Comments and whitespace handling
#   - Line/column tracking
#   - Laziness and restartability
#   - Error conditions
# =============================================================================

import pytest
from toyasm.assembler.lexer import Lexer, TokenType, Token
from toyasm.errors import ErrorKind, LexicalError


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str, **tables) -> list:
    """Helper to tokenize a whole source string into a list."""
    return list(Lexer(source, "<test>", **tables).tokenize())


def types(source: str, **tables) -> list:
    return [t.type for t in tokenize(source, **tables)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source produces no tokens."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Spaces, tabs and newlines produce no tokens."""
        assert tokenize("  \n\t \r\n ") == []

    def test_single_char_operators(self):
        """Each single-character operator maps to its own type."""
        assert types("[ ] , ! : = |") == [
            TokenType.OPENER,
            TokenType.CLOSER,
            TokenType.COMMA,
            TokenType.BANG,
            TokenType.LABEL,
            TokenType.LET,
            TokenType.CAT,
        ]

    def test_preload_operator(self):
        """<- is a single two-character token."""
        tokens = tokenize("p <- 01")
        assert tokens[1].type == TokenType.PRELOAD
        assert tokens[1].value == "<-"

    def test_operators_need_no_spacing(self):
        """Operators split runs without surrounding whitespace."""
        assert types("[x,Y]") == [
            TokenType.OPENER,
            TokenType.VARIABLE,
            TokenType.COMMA,
            TokenType.INDEX,
            TokenType.CLOSER,
        ]

    def test_token_repr(self):
        """Token repr shows type, text and position."""
        token = tokenize("x")[0]
        assert repr(token) == "Token(VARIABLE, 'x', 1:1)"


# =============================================================================
# Name Classification Tests
# =============================================================================

class TestClassification:
    """Test classification of names and numerals."""

    def test_variable(self):
        """Lowercase-initial runs are variables."""
        token = tokenize("snakeEyes")[0]
        assert token.type == TokenType.VARIABLE
        assert token.value == "snakeEyes"

    def test_variable_with_digits_and_underscores(self):
        """Digits and underscores may follow the first letter."""
        token = tokenize("undefined_name2")[0]
        assert token.type == TokenType.VARIABLE
        assert token.value == "undefined_name2"

    @pytest.mark.parametrize("text", ["X", "Y"])
    def test_index_registers(self, text):
        """X and Y are index registers."""
        assert types(text) == [TokenType.INDEX]

    @pytest.mark.parametrize("text", ["TMA", "TAM", "BRK", "AOA", "SOA"])
    def test_opcodes(self, text):
        """Mnemonics from the instruction table are opcodes."""
        assert types(text) == [TokenType.OPCODE]

    @pytest.mark.parametrize("text", ["BIN", "OCT", "DEC", "HEX", "BINARY", "DECIMAL"])
    def test_declarators(self, text):
        """Radix keywords are declarators."""
        assert types(text) == [TokenType.DECLARATOR]

    @pytest.mark.parametrize("text", ["$VRAM", "$ENTRY", "$TOP"])
    def test_constants(self, text):
        """Named constants are recognized."""
        assert types(text) == [TokenType.CONSTANT]

    @pytest.mark.parametrize("text", ["05", "FF", "00000100", "1FF", "0DEC", "A"])
    def test_numerals(self, text):
        """Runs of hexadecimal digits are numerals, kept as text."""
        token = tokenize(text)[0]
        assert token.type == TokenType.NUMBER
        assert token.value == text

    def test_declarator_beats_numeral(self):
        """DEC is valid hex but classifies as a declarator first."""
        assert types("DEC") == [TokenType.DECLARATOR]

    def test_custom_instruction_table(self, opc_table):
        """Opcodes come from the table passed to the lexer."""
        assert types("OPC", instructions=opc_table) == [TokenType.OPCODE]
        with pytest.raises(LexicalError):
            tokenize("TMA", instructions=opc_table)

    def test_lowercase_hex_splits(self):
        """Lowercase letters start a new variable run."""
        tokens = tokenize("0a")
        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.NUMBER, "0"),
            (TokenType.VARIABLE, "a"),
        ]


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test # comment handling."""

    def test_comment_only(self):
        """A comment line produces no tokens."""
        assert tokenize("# nothing here") == []

    def test_trailing_comment(self):
        """Comments after code are dropped."""
        assert types("BRK # stop") == [TokenType.OPCODE]

    def test_comment_may_contain_anything(self):
        """Characters that would be errors are fine inside comments."""
        assert types("# @@ ~~ <<\nBRK") == [TokenType.OPCODE]


# =============================================================================
# Position Tracking Tests
# =============================================================================

class TestPositions:
    """Test line and column tracking."""

    def test_columns_on_first_line(self):
        """Columns are 1-based offsets in the line."""
        tokens = tokenize("x = 05")
        assert [(t.line, t.column) for t in tokens] == [(1, 1), (1, 3), (1, 5)]

    def test_lines_after_comments(self):
        """Lines keep counting through comment lines."""
        tokens = tokenize("# header\n\n  TMA ! 0A")
        assert (tokens[0].line, tokens[0].column) == (3, 3)
        assert (tokens[2].line, tokens[2].column) == (3, 9)

    def test_filename_in_location(self):
        """Token locations carry the lexer's filename."""
        location = tokenize("BRK")[0].location
        assert str(location) == "<test>:1:1"


# =============================================================================
# Laziness Tests
# =============================================================================

class TestLaziness:
    """Test the lexer's pull-based behavior."""

    def test_tokens_before_error_are_delivered(self):
        """Tokens are yielded before a later lexical error is reached."""
        stream = Lexer("BRK\n@").tokenize()
        assert next(stream).value == "BRK"
        with pytest.raises(LexicalError):
            next(stream)

    def test_tokenize_restarts(self):
        """Calling tokenize() again restarts from the beginning."""
        lexer = Lexer("x = 05")
        first = list(lexer.tokenize())
        second = list(lexer.tokenize())
        assert first == second

    def test_interleaved_streams_are_independent(self):
        """Starting a second stream does not disturb one already running."""
        lexer = Lexer("BRK\nAOA\nSOA")
        first = lexer.tokenize()
        assert next(first).value == "BRK"
        second = lexer.tokenize()
        assert [t.value for t in second] == ["BRK", "AOA", "SOA"]
        assert [t.value for t in first] == ["AOA", "SOA"]

    def test_interleaved_positions(self):
        """Line tracking is kept per stream."""
        lexer = Lexer("BRK\nAOA")
        first = lexer.tokenize()
        second = lexer.tokenize()
        next(first)
        next(first)
        assert next(second).line == 1


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestErrors:
    """Test lexical error conditions."""

    def test_unexpected_character(self):
        """Unknown characters raise LexicalError at their position."""
        with pytest.raises(LexicalError) as exc_info:
            tokenize("BRK @")
        error = exc_info.value
        assert error.kind is ErrorKind.LEXICAL
        assert (error.line, error.column) == (1, 5)
        assert "'@'" in error.message

    def test_invalid_capitalized_run(self):
        """A capitalized run that is not a keyword or hex numeral is invalid."""
        with pytest.raises(LexicalError) as exc_info:
            tokenize("TMA 0G")
        assert "0G" in exc_info.value.message
        assert exc_info.value.column == 5

    def test_unknown_constant(self):
        """$-prefixed names must be in the constant table."""
        with pytest.raises(LexicalError):
            tokenize("TMA $NOPE")

    def test_lone_less_than(self):
        """< must be followed by - to form the preload operator."""
        with pytest.raises(LexicalError):
            tokenize("p < 01")

    def test_error_carries_source_line(self):
        """Lexical errors include the offending line for caret display."""
        with pytest.raises(LexicalError) as exc_info:
            tokenize("BRK\nTMA ~")
        assert exc_info.value.source_line == "TMA ~"
        assert "^" in str(exc_info.value)


def test_token_is_immutable():
    """Tokens are frozen dataclasses."""
    token = Token(TokenType.NUMBER, "05", 1, 1)
    with pytest.raises(AttributeError):
        token.value = "06"
