"""
6502 Assembly Language Lexer
============================

This module implements a lexer (tokenizer) for 6502 assembly source. It
converts source text into a stream of tokens that the parser can process.

Token Types
-----------
- IDENTIFIER: Labels, mnemonics, constant names, index registers
- LOCAL_LABEL: ``@name`` (value is the name without ``@``)
- COMMAND: ``.name`` directives (value is the name without ``.``)
- NUMBER: Decimal, hex ($FF), binary (%1010) or character ('A')
- STRING: Double-quoted strings ("hello")
- Punctuation: # , : ( ) * + - =
- NEWLINE: End of line
- EOF: End of file

Number Formats
--------------
| Format      | Prefix   | Example  | Value |
|-------------|----------|----------|-------|
| Decimal     | (none)   | 123      | 123   |
| Hexadecimal | $        | $7F      | 127   |
| Binary      | %        | %1010    | 10    |
| Character   | '        | 'A'      | 65    |

Comments
--------
A semicolon starts a comment that runs to the end of the line.

Example
-------
>>> from asm6502.assembler.lexer import Lexer
>>> for token in Lexer("loop: lda #$41 ; load 'A'").tokenize():
...     print(token)
Token(IDENTIFIER, 'loop', 1:1)
Token(COLON, ':', 1:5)
Token(IDENTIFIER, 'lda', 1:7)
Token(HASH, '#', 1:11)
Token(NUMBER, $41, 1:12)
Token(EOF, 1:26)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from asm6502.errors import AssemblySyntaxError, SourceLine


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for 6502 assembly source."""

    # Structural tokens
    NEWLINE = auto()      # End of line (significant for statement boundaries)
    EOF = auto()          # End of input

    # Values
    IDENTIFIER = auto()   # Labels, mnemonics, symbols
    LOCAL_LABEL = auto()  # @name
    COMMAND = auto()      # .name
    NUMBER = auto()       # Numeric literals (all formats)
    STRING = auto()       # Double-quoted string "..."

    # Punctuation
    HASH = auto()         # # (immediate mode indicator)
    COMMA = auto()        # ,
    COLON = auto()        # :
    LPAREN = auto()       # (
    RPAREN = auto()       # )
    STAR = auto()         # * (current instruction, for *+N branches)
    PLUS = auto()         # +
    MINUS = auto()        # -
    EQUALS = auto()       # = (constant assignment)


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source.

    Attributes:
        type: The TokenType classification
        value: The token value (string for names, int for numbers, etc.)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, ${self.value:X}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes 6502 assembly source.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    SINGLE_CHAR_TOKENS = {
        "#": TokenType.HASH,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "*": TokenType.STAR,
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "=": TokenType.EQUALS,
    }

    # Escape sequences in strings and character literals
    ESCAPE_SEQUENCES = {
        "n": "\n",
        "r": "\r",
        "t": "\t",
        "\\": "\\",
        '"': '"',
        "'": "'",
        "0": "\0",
    }

    def __init__(self, source: str, filename: str = "<input>", line_number: int = 1):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
            line_number: Line number of the first line of source
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects representing each lexical element

        Raises:
            AssemblySyntaxError: If invalid syntax is encountered
        """
        while not self._at_end():
            if self._skip_whitespace():
                continue

            if self._skip_comment():
                continue

            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line and column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(self, message: str) -> AssemblySyntaxError:
        """Create a syntax error pointing at the current line and column."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        text = self.source[self._line_start_pos:line_end]

        line = SourceLine(self.filename, self._line, strip_comment(text).strip(), text)
        return AssemblySyntaxError(f"{message} (column {self._column})", line=line)

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace(self) -> bool:
        """Skip spaces, tabs and carriage returns, but not newlines."""
        skipped = False
        # '' in ' \t' is True, so check for end of input first
        while self._peek() and self._peek() in " \t\r":
            self._advance()
            skipped = True
        return skipped

    def _skip_comment(self) -> bool:
        """Skip a ';' comment up to (not including) the newline."""
        if self._peek() == ";":
            while not self._at_end() and self._peek() != "\n":
                self._advance()
            return True
        return False

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char in self.IDENT_START:
            name = self._scan_name()
            return self._make_token(TokenType.IDENTIFIER, name, start_line, start_column)

        if char == "@":
            self._advance()
            name = self._scan_name()
            if not name:
                raise self._error("expected label name after '@'")
            return self._make_token(TokenType.LOCAL_LABEL, name, start_line, start_column)

        if char == ".":
            self._advance()
            name = self._scan_name()
            if not name:
                raise self._error("expected directive name after '.'")
            return self._make_token(TokenType.COMMAND, name, start_line, start_column)

        if char.isdigit():
            return self._scan_digits(string.digits, 10, "decimal", start_line, start_column)

        if char == "$":
            self._advance()
            return self._scan_digits(string.hexdigits, 16, "hexadecimal", start_line, start_column)

        if char == "%":
            self._advance()
            return self._scan_digits("01", 2, "binary", start_line, start_column)

        if char == '"':
            return self._scan_string(start_line, start_column)

        if char == "'":
            return self._scan_char(start_line, start_column)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(
                self.SINGLE_CHAR_TOKENS[char],
                char,
                start_line,
                start_column,
            )

        raise self._error(f"unexpected character '{char}'")

    def _scan_name(self) -> str:
        chars = []
        if self._peek() and self._peek() in self.IDENT_START:
            while self._peek() and self._peek() in self.IDENT_CHARS:
                chars.append(self._advance())
        return "".join(chars)

    def _scan_digits(
        self,
        digits: str,
        base: int,
        kind: str,
        start_line: int,
        start_column: int,
    ) -> Token:
        chars = []
        while self._peek() and self._peek() in digits:
            chars.append(self._advance())

        if not chars:
            raise self._error(f"expected {kind} digits")

        # 12ab is neither a number nor a name
        if self._peek() and self._peek() in self.IDENT_CHARS:
            raise self._error(f"invalid {kind} digit '{self._peek()}'")

        value = int("".join(chars), base)
        return self._make_token(TokenType.NUMBER, value, start_line, start_column)

    def _scan_string(self, start_line: int, start_column: int) -> Token:
        """
        Scan a double-quoted string literal.

        Supports escape sequences: \\n, \\r, \\t, \\\\, \\", \\', \\0, \\xNN
        """
        self._advance()  # consume opening "

        chars = []
        while not self._at_end():
            char = self._peek()

            if char == '"':
                self._advance()
                return self._make_token(
                    TokenType.STRING,
                    "".join(chars),
                    start_line,
                    start_column,
                )

            if char == "\n":
                break

            if char == "\\":
                self._advance()
                chars.append(self._scan_escape_sequence())
            else:
                chars.append(self._advance())

        raise self._error("unterminated string literal")

    def _scan_char(self, start_line: int, start_column: int) -> Token:
        """Scan a character literal, returning its code as a NUMBER token."""
        self._advance()  # consume opening '

        if self._at_end() or self._peek() == "\n":
            raise self._error("unterminated character literal")

        if self._peek() == "\\":
            self._advance()
            char = self._scan_escape_sequence()
        else:
            char = self._advance()

        if self._peek() != "'":
            raise self._error("expected closing quote for character literal")
        self._advance()

        return self._make_token(TokenType.NUMBER, ord(char), start_line, start_column)

    def _scan_escape_sequence(self) -> str:
        if self._at_end():
            raise self._error("unexpected end of input in escape sequence")

        char = self._advance()

        if char in self.ESCAPE_SEQUENCES:
            return self.ESCAPE_SEQUENCES[char]

        # Hex escape: \xNN
        if char == "x":
            hex_chars = []
            for _ in range(2):
                if self._peek() and self._peek() in string.hexdigits:
                    hex_chars.append(self._advance())
                else:
                    break

            if not hex_chars:
                raise self._error("expected hexadecimal digits after \\x")

            return chr(int("".join(hex_chars), 16))

        # Unknown escape: keep the character as written
        return char


# =============================================================================
# Helpers
# =============================================================================

def strip_comment(text: str) -> str:
    """
    Remove a trailing ';' comment from a line of source.

    Semicolons inside string or character literals are kept.
    """
    quote = None
    escaped = False
    for i, char in enumerate(text):
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == ";":
            return text[:i]
    return text
