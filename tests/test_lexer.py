# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the 6502 assembler lexer/tokenizer.
#
# Test coverage includes:
#   - Number formats: decimal, hexadecimal ($), binary (%), character
#   - String literals with escape sequences
#   - Identifiers, local labels and directive names
#   - Punctuation tokens
#   - Comments and comment stripping
#   - Error conditions
# =============================================================================

import pytest
from asm6502.assembler.lexer import Lexer, TokenType, strip_comment
from asm6502.errors import AssemblySyntaxError


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str, line_number: int = 1) -> list:
    """Tokenize source, dropping the trailing EOF token."""
    lexer = Lexer(source, "<test>", line_number=line_number)
    return [t for t in lexer.tokenize() if t.type is not TokenType.EOF]


def types(source: str) -> list:
    return [t.type for t in tokenize(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_line(self):
        """Empty input produces no tokens."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Whitespace alone produces no tokens."""
        assert tokenize("   \t  ") == []

    def test_identifier(self):
        """Identifiers keep their case."""
        tokens = tokenize("Loop_1")
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.IDENTIFIER
        assert tokens[0].value == "Loop_1"

    def test_local_label(self):
        """@name is a local label; the value drops the '@'."""
        tokens = tokenize("@loop")
        assert tokens[0].type is TokenType.LOCAL_LABEL
        assert tokens[0].value == "loop"

    def test_command(self):
        """.name is a directive; the value drops the '.'."""
        tokens = tokenize(".org")
        assert tokens[0].type is TokenType.COMMAND
        assert tokens[0].value == "org"

    def test_punctuation(self):
        """Each punctuation character has its own token type."""
        assert types("# , : ( ) * + - =") == [
            TokenType.HASH,
            TokenType.COMMA,
            TokenType.COLON,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.STAR,
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.EQUALS,
        ]

    def test_newline_is_a_token(self):
        """Newlines separate statements."""
        assert types("nop\nrts") == [
            TokenType.IDENTIFIER,
            TokenType.NEWLINE,
            TokenType.IDENTIFIER,
        ]

    def test_instruction_line(self):
        """A typical instruction line."""
        assert types("lda ($20),y") == [
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.NUMBER,
            TokenType.RPAREN,
            TokenType.COMMA,
            TokenType.IDENTIFIER,
        ]


# =============================================================================
# Number Format Tests
# =============================================================================

class TestNumbers:
    """Test all supported number formats."""

    @pytest.mark.parametrize("text,value", [
        ("0", 0),
        ("123", 123),
        ("$FF", 255),
        ("$ff", 255),
        ("$0600", 0x600),
        ("%1010", 10),
        ("%11111111", 255),
        ("'A'", 65),
        ("' '", 32),
        ("'\\n'", 10),
    ])
    def test_number_formats(self, text, value):
        """Each format yields a NUMBER with the right value."""
        tokens = tokenize(text)
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.NUMBER
        assert tokens[0].value == value

    def test_dollar_without_digits(self):
        """A lone '$' is an error."""
        with pytest.raises(AssemblySyntaxError, match="hexadecimal"):
            tokenize("$")

    def test_percent_without_digits(self):
        """A lone '%' is an error."""
        with pytest.raises(AssemblySyntaxError, match="binary"):
            tokenize("%")

    def test_digits_run_into_letters(self):
        """12ab is neither a number nor an identifier."""
        with pytest.raises(AssemblySyntaxError, match="invalid decimal digit"):
            tokenize("12ab")

    def test_unterminated_char(self):
        """A character literal needs its closing quote."""
        with pytest.raises(AssemblySyntaxError):
            tokenize("'AB'")


# =============================================================================
# String Literal Tests
# =============================================================================

class TestStrings:
    """Test string literal scanning."""

    def test_simple_string(self):
        """Double-quoted text is a STRING token."""
        tokens = tokenize('"HELLO"')
        assert tokens[0].type is TokenType.STRING
        assert tokens[0].value == "HELLO"

    def test_escapes(self):
        """Escape sequences are decoded."""
        tokens = tokenize(r'"A\tB\x41\"\\"')
        assert tokens[0].value == 'A\tBA"\\'

    def test_semicolon_inside_string(self):
        """A ';' inside a string does not start a comment."""
        tokens = tokenize('"a;b" ; comment')
        assert len(tokens) == 1
        assert tokens[0].value == "a;b"

    def test_unterminated_string(self):
        """A string must close on the same line."""
        with pytest.raises(AssemblySyntaxError, match="unterminated"):
            tokenize('"abc')


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test comment handling."""

    def test_comment_skipped(self):
        """Everything after ';' is ignored."""
        assert types("nop ; do nothing") == [TokenType.IDENTIFIER]

    def test_comment_only_line(self):
        """A comment line produces no tokens."""
        assert tokenize("; just a comment") == []

    @pytest.mark.parametrize("text,stripped", [
        ("lda #1 ; load", "lda #1 "),
        ("; all comment", ""),
        ("nop", "nop"),
        ('.byte "a;b" ; c', '.byte "a;b" '),
        ("lda #';' ; c", "lda #';' "),
    ])
    def test_strip_comment(self, text, stripped):
        """strip_comment respects quotes."""
        assert strip_comment(text) == stripped


# =============================================================================
# Position and Error Tests
# =============================================================================

class TestPositions:
    """Test line and column tracking."""

    def test_columns(self):
        """Columns are 1-indexed from the start of the line."""
        tokens = tokenize("loop: lda #$41")
        assert [(t.value, t.column) for t in tokens] == [
            ("loop", 1), (":", 5), ("lda", 7), ("#", 11), (0x41, 12),
        ]

    def test_starting_line_number(self):
        """Tokens carry the starting line number."""
        tokens = tokenize("nop", line_number=42)
        assert tokens[0].line == 42

    def test_unexpected_character(self):
        """Unknown characters are reported with their line."""
        with pytest.raises(AssemblySyntaxError) as exc_info:
            tokenize("lda !", line_number=7)
        error = exc_info.value
        assert "unexpected character '!'" in str(error)
        assert error.line.line_number == 7
        assert error.line.assembly == "lda !"

    def test_bare_at_sign(self):
        """'@' must be followed by a name."""
        with pytest.raises(AssemblySyntaxError, match="label name"):
            tokenize("bne @")
