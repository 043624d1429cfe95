"""
Parse Tree Model
================

Tagged parse nodes produced by the line grammar and consumed by the
translator. A node has a type, an ordered tuple of children (the arity is
fixed per type), a small type-specific payload and a back-reference to the
source line it came from. Nodes are not modified after construction except
for that line reference, which the parser attaches once a line is parsed.

Node Shapes
-----------
=============== ======================== =====================================
Type            Payload                  Children
=============== ======================== =====================================
statementList   -                        statements, in source order
assignment      -                        (identifier, value expression)
command         name                     parameter expressions
label           name                     -
localLabel      name                     -
instruction     name, mode               () or (operand expression,)
identifier      name                     -
immediate       value (int)              -
number          value (int)              -
stringLiteral   value (str)              -
expressionList  -                        expressions
=============== ======================== =====================================

The instruction ``mode`` is an ``OperandSyntax``: the shape the operand was
written in, before any addressing mode is inferred from it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from asm6502.errors import SourceLine


class NodeType(Enum):
    """Kinds of parse node."""
    STATEMENT_LIST = "statementList"
    ASSIGNMENT = "assignment"
    COMMAND = "command"
    LABEL = "label"
    LOCAL_LABEL = "localLabel"
    INSTRUCTION = "instruction"
    IDENTIFIER = "identifier"
    IMMEDIATE = "immediate"
    NUMBER = "number"
    STRING_LITERAL = "stringLiteral"
    EXPRESSION_LIST = "expressionList"


class OperandSyntax(Enum):
    """How an instruction operand was written in the source."""
    IMPLICIT = "implicit"          # nop
    ACCUMULATOR = "accumulator"    # asl a
    EXPRESSION = "expression"      # lda $40 / lda #$40 / jmp start
    INDIRECT = "indirect"          # jmp ($fffc)
    INDIRECT_X = "indirect_x"      # lda ($20,x)
    INDIRECT_Y = "indirect_y"      # lda ($20),y
    LOCAL_LABEL = "local_label"    # bne @loop
    RELATIVE = "relative"          # bne *+4
    X_INDEX = "x_index"            # lda $1234,x
    Y_INDEX = "y_index"            # lda $1234,y


@dataclass
class ParseNode:
    """
    A node in the parse tree.

    Attributes:
        type: The node kind
        children: Child nodes, in order
        name: Name payload (identifiers, labels, commands, instructions)
        value: Value payload (numbers, immediates, string literals)
        mode: Operand syntax for instruction nodes
        line: The source line this node was parsed from
    """
    type: NodeType
    children: tuple["ParseNode", ...] = ()
    name: Optional[str] = None
    value: Optional[int | str] = None
    mode: Optional[OperandSyntax] = None
    line: Optional[SourceLine] = field(default=None, compare=False, repr=False)

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def statement_list(cls, statements) -> "ParseNode":
        return cls(NodeType.STATEMENT_LIST, tuple(statements))

    @classmethod
    def assignment(cls, identifier: "ParseNode", value: "ParseNode") -> "ParseNode":
        return cls(NodeType.ASSIGNMENT, (identifier, value))

    @classmethod
    def command(cls, name: str, params=()) -> "ParseNode":
        return cls(NodeType.COMMAND, tuple(params), name=name)

    @classmethod
    def label(cls, name: str) -> "ParseNode":
        return cls(NodeType.LABEL, name=name)

    @classmethod
    def local_label(cls, name: str) -> "ParseNode":
        return cls(NodeType.LOCAL_LABEL, name=name)

    @classmethod
    def instruction(
        cls,
        name: str,
        mode: OperandSyntax,
        operand: Optional["ParseNode"] = None,
    ) -> "ParseNode":
        children = (operand,) if operand is not None else ()
        return cls(NodeType.INSTRUCTION, children, name=name, mode=mode)

    @classmethod
    def identifier(cls, name: str) -> "ParseNode":
        return cls(NodeType.IDENTIFIER, name=name)

    @classmethod
    def immediate(cls, value: int) -> "ParseNode":
        return cls(NodeType.IMMEDIATE, value=value)

    @classmethod
    def number(cls, value: int) -> "ParseNode":
        return cls(NodeType.NUMBER, value=value)

    @classmethod
    def string_literal(cls, value: str) -> "ParseNode":
        return cls(NodeType.STRING_LITERAL, value=value)

    @classmethod
    def expression_list(cls, expressions) -> "ParseNode":
        return cls(NodeType.EXPRESSION_LIST, tuple(expressions))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_number(self) -> bool:
        return self.type is NodeType.NUMBER

    def is_immediate(self) -> bool:
        return self.type is NodeType.IMMEDIATE

    def is_string(self) -> bool:
        return self.type is NodeType.STRING_LITERAL

    def set_line(self, line: SourceLine) -> None:
        """Attach the source line to this node and all of its children."""
        self.line = line
        for child in self.children:
            child.set_line(line)
