"""
6502 Assembly Language Parser
=============================

This module builds the parse tree for a 6502 assembly source. The grammar
is line oriented: every line holds at most one label definition and one
statement, and the whole source becomes a single ``statementList`` node.

Line Grammar
------------
    line        := [label ":"] [statement]
    label       := IDENTIFIER | "@" IDENTIFIER
    statement   := assignment | command | instruction
    assignment  := IDENTIFIER "=" value
    command     := "." IDENTIFIER [arguments | "(" [arguments] ")"]
    arguments   := value ("," value)*
    value       := NUMBER | STRING | IDENTIFIER | "#" NUMBER
    instruction := IDENTIFIER [operand]

Operand Syntax
--------------
| Syntax          | Example         | OperandSyntax  |
|-----------------|-----------------|----------------|
| (none)          | nop             | IMPLICIT       |
| A               | asl a           | ACCUMULATOR    |
| #value          | lda #$41        | EXPRESSION     |
| value           | lda $40         | EXPRESSION     |
| value,X         | lda $1234,x     | X_INDEX        |
| value,Y         | lda $1234,y     | Y_INDEX        |
| (value)         | jmp ($fffc)     | INDIRECT       |
| (value,X)       | lda ($20,x)     | INDIRECT_X     |
| (value),Y       | lda ($20),y     | INDIRECT_Y     |
| @name           | bne @loop       | LOCAL_LABEL    |
| *+N / *-N       | bne *+4         | RELATIVE       |

Error Handling
--------------
A line with a syntax error is skipped and parsing continues with the next
line. All errors are collected and raised together as a ``ParseError``,
or earlier as ``TooManyErrors`` once the configured limit is hit.
"""

import logging
from typing import Optional

from asm6502.assembler.lexer import Lexer, Token, TokenType, strip_comment
from asm6502.assembler.parsetree import OperandSyntax, ParseNode
from asm6502.errors import (
    AssemblySyntaxError,
    ErrorCollector,
    ParseError,
    SourceLine,
)

logger = logging.getLogger(__name__)


# Identifier that selects accumulator addressing when it is the only operand
ACCUMULATOR_REGISTER = "a"

INDEX_REGISTERS = ("x", "y")


class Parser:
    """
    Parses 6502 assembly source into a parse tree.

    Usage:
        parser = Parser(source, "program.asm")
        root = parser.parse()

    Attributes:
        source: The source text
        filename: Name of the source file (for error reporting)
        errors: Collector for syntax errors
    """

    def __init__(self, source: str, filename: str = "<input>", max_errors: int = 100):
        self.source = source
        self.filename = filename
        self.errors = ErrorCollector(max_errors=max_errors)

        # State for the line being parsed
        self._tokens: list[Token] = []
        self._pos = 0
        self._line: Optional[SourceLine] = None

    def parse(self) -> ParseNode:
        """
        Parse the whole source.

        Returns:
            A statementList node

        Raises:
            ParseError: If any line has a syntax error
            TooManyErrors: If max_errors syntax errors are found
        """
        statements: list[ParseNode] = []

        for number, text in enumerate(self.source.split("\n"), start=1):
            assembly = strip_comment(text).strip()
            if not assembly:
                continue

            line = SourceLine(self.filename, number, assembly, text)
            try:
                nodes = self._parse_line(line)
            except AssemblySyntaxError as e:
                self.errors.add(e)
                continue

            for node in nodes:
                node.set_line(line)
                statements.append(node)

        if self.errors.has_errors():
            raise ParseError(self.errors.errors, self.errors.report())

        logger.debug("parsed %d statements from %s", len(statements), self.filename)
        return ParseNode.statement_list(statements)

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        return self._tokens[min(self._pos, len(self._tokens) - 1)]

    def _peek(self, offset: int = 0) -> Token:
        return self._tokens[min(self._pos + offset, len(self._tokens) - 1)]

    def _advance(self) -> Token:
        token = self._current()
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if not self._check(token_type):
            raise self._error(message)
        return self._advance()

    def _at_end_of_line(self) -> bool:
        return self._check(TokenType.EOF, TokenType.NEWLINE)

    def _error(self, message: str) -> AssemblySyntaxError:
        token = self._current()
        if token.type is TokenType.EOF:
            found = "end of line"
        elif token.value is not None:
            found = f"'{token.value}'"
        else:
            found = token.type.name.lower()
        return AssemblySyntaxError(
            f"{message}, found {found} (column {token.column})",
            line=self._line,
        )

    def _check_register(self, name: str) -> bool:
        token = self._current()
        return (
            token.type is TokenType.IDENTIFIER
            and token.value.lower() == name
        )

    # =========================================================================
    # Line Parsing
    # =========================================================================

    def _parse_line(self, line: SourceLine) -> list[ParseNode]:
        """
        Parse one line into its label node and statement node.

        Returns:
            Zero, one or two nodes, in source order
        """
        self._line = line
        self._tokens = list(Lexer(line.assembly, line.filename, line.line_number).tokenize())
        self._pos = 0

        nodes: list[ParseNode] = []

        label = self._try_parse_label()
        if label is not None:
            nodes.append(label)

        if not self._at_end_of_line():
            nodes.append(self._parse_statement())

        if not self._at_end_of_line():
            raise self._error("expected end of line")

        return nodes

    def _try_parse_label(self) -> Optional[ParseNode]:
        """Parse ``name:`` or ``@name:`` at the start of a line."""
        if self._peek(1).type is not TokenType.COLON:
            return None

        if self._check(TokenType.IDENTIFIER):
            name = self._advance().value
            self._advance()  # consume ':'
            return ParseNode.label(name)

        if self._check(TokenType.LOCAL_LABEL):
            name = self._advance().value
            self._advance()
            return ParseNode.local_label(name)

        return None

    def _parse_statement(self) -> ParseNode:
        if self._check(TokenType.COMMAND):
            return self._parse_command()

        if self._check(TokenType.IDENTIFIER):
            if self._peek(1).type is TokenType.EQUALS:
                return self._parse_assignment()
            return self._parse_instruction()

        raise self._error("expected instruction, directive or assignment")

    def _parse_assignment(self) -> ParseNode:
        identifier = ParseNode.identifier(self._advance().value)
        self._advance()  # consume '='
        return ParseNode.assignment(identifier, self._parse_value())

    def _parse_command(self) -> ParseNode:
        """
        Parse a directive invocation.

        The parenthesized form ``.name(a, b)`` keeps its arguments grouped in
        an expressionList node; the bare form lists them directly.
        """
        name = self._advance().value

        if self._match(TokenType.LPAREN):
            args = []
            if not self._check(TokenType.RPAREN):
                args = self._parse_arguments()
            self._expect(TokenType.RPAREN, "expected ')' after directive arguments")
            return ParseNode.command(name, [ParseNode.expression_list(args)])

        if self._at_end_of_line():
            return ParseNode.command(name)

        return ParseNode.command(name, self._parse_arguments())

    def _parse_arguments(self) -> list[ParseNode]:
        args = [self._parse_value()]
        while self._match(TokenType.COMMA):
            args.append(self._parse_value())
        return args

    # =========================================================================
    # Values
    # =========================================================================

    def _parse_value(self) -> ParseNode:
        """Parse a number, string, identifier or immediate."""
        if self._match(TokenType.HASH):
            number = self._expect(TokenType.NUMBER, "expected number after '#'")
            return ParseNode.immediate(number.value)

        return self._parse_expression()

    def _parse_expression(self) -> ParseNode:
        token = self._current()

        if token.type is TokenType.NUMBER:
            self._advance()
            return ParseNode.number(token.value)

        if token.type is TokenType.IDENTIFIER:
            self._advance()
            return ParseNode.identifier(token.value)

        if token.type is TokenType.STRING:
            self._advance()
            return ParseNode.string_literal(token.value)

        raise self._error("expected number, string or name")

    # =========================================================================
    # Instructions
    # =========================================================================

    def _parse_instruction(self) -> ParseNode:
        name = self._advance().value.lower()

        if self._at_end_of_line():
            return ParseNode.instruction(name, OperandSyntax.IMPLICIT)

        # A lone 'A' is the accumulator, not a label named 'a'
        if (
            self._check_register(ACCUMULATOR_REGISTER)
            and self._peek(1).type in (TokenType.EOF, TokenType.NEWLINE)
        ):
            self._advance()
            return ParseNode.instruction(name, OperandSyntax.ACCUMULATOR)

        if self._check(TokenType.HASH):
            return ParseNode.instruction(name, OperandSyntax.EXPRESSION, self._parse_value())

        if self._check(TokenType.LOCAL_LABEL):
            target = ParseNode.identifier(self._advance().value)
            return ParseNode.instruction(name, OperandSyntax.LOCAL_LABEL, target)

        if self._match(TokenType.STAR):
            return ParseNode.instruction(name, OperandSyntax.RELATIVE, self._parse_relative())

        if self._match(TokenType.LPAREN):
            return self._parse_indirect(name)

        operand = self._parse_expression()
        if self._match(TokenType.COMMA):
            register = self._parse_index_register()
            syntax = OperandSyntax.X_INDEX if register == "x" else OperandSyntax.Y_INDEX
            return ParseNode.instruction(name, syntax, operand)

        return ParseNode.instruction(name, OperandSyntax.EXPRESSION, operand)

    def _parse_relative(self) -> ParseNode:
        """Parse the ``+N`` / ``-N`` after ``*`` as a signed number."""
        if self._match(TokenType.PLUS):
            sign = 1
        elif self._match(TokenType.MINUS):
            sign = -1
        else:
            raise self._error("expected '+' or '-' after '*'")

        number = self._expect(TokenType.NUMBER, "expected number in relative operand")
        return ParseNode.number(sign * number.value)

    def _parse_indirect(self, name: str) -> ParseNode:
        """Parse ``(value)``, ``(value,X)`` or ``(value),Y`` after the '('."""
        operand = self._parse_expression()

        if self._match(TokenType.COMMA):
            if not self._check_register("x"):
                raise self._error("expected 'x' in indexed indirect operand")
            self._advance()
            self._expect(TokenType.RPAREN, "expected ')'")
            return ParseNode.instruction(name, OperandSyntax.INDIRECT_X, operand)

        self._expect(TokenType.RPAREN, "expected ')'")

        if self._match(TokenType.COMMA):
            if not self._check_register("y"):
                raise self._error("expected 'y' in indirect indexed operand")
            self._advance()
            return ParseNode.instruction(name, OperandSyntax.INDIRECT_Y, operand)

        return ParseNode.instruction(name, OperandSyntax.INDIRECT, operand)

    def _parse_index_register(self) -> str:
        for register in INDEX_REGISTERS:
            if self._check_register(register):
                self._advance()
                return register
        raise self._error("expected index register 'x' or 'y'")


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>", max_errors: int = 100) -> ParseNode:
    """
    Parse assembly source into a statementList node.

    Args:
        source: Assembly source text
        filename: Name used in error messages
        max_errors: Stop after this many syntax errors

    Returns:
        The root parse node

    Raises:
        ParseError: If the source has syntax errors
    """
    return Parser(source, filename, max_errors).parse()
