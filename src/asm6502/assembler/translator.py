"""
Parse Tree Translator
=====================

Lowers a parse tree into the linear IR. This is where addressing modes are
inferred: the parse tree only records how an operand was *written*
(``OperandSyntax``), and the translator decides which 6502 addressing mode
that shape means once constants have been folded in.

Addressing Mode Inference
-------------------------
=============== ============================================================
Operand syntax  Addressing mode
=============== ============================================================
implicit        implied
accumulator     accumulator
expression      number <= $FF: zero page, number > $FF: absolute,
                immediate: immediate, unresolved name: absolute
                (relative for branch instructions)
x_index         zero page,X or absolute,X by the same rule
y_index         zero page,Y or absolute,Y by the same rule
indirect        indirect (JMP only)
indirect_x      (zp,X)
indirect_y      (zp),Y
local_label     absolute for JMP/JSR, otherwise relative
relative        relative (``*+N`` / ``*-N``)
=============== ============================================================

A name that is not a constant is assumed to be a forward-referenced label,
so it selects an absolute-width mode (or relative for a branch). Zero-page
forms are only chosen for values known at translation time.

Expression Results
------------------
Translating an expression yields exactly one of:
- a value ``ParseNode`` (number, immediate or string literal), or
- ``Unresolved(name)`` for a name that is not a bound constant.
Every call site handles both cases explicitly.
"""

import logging
from typing import Callable, Optional

from asm6502.assembler.ir import (
    Command,
    Instruction,
    IRNode,
    Label,
    Operand,
    Unresolved,
    Value,
)
from asm6502.assembler.parsetree import NodeType, OperandSyntax, ParseNode
from asm6502.assembler.scope import Scope
from asm6502.cpu import (
    ABSOLUTE_TARGET_INSTRUCTIONS,
    OPCODE_TABLE,
    AddressingMode,
    InstructionInfo,
    is_branch_instruction,
    lookup_instruction,
)
from asm6502.errors import (
    InternalConsistencyError,
    InvalidAddressingModeError,
    OperandRangeError,
    UndefinedIdentifierError,
)

logger = logging.getLogger(__name__)


# Largest value that selects a zero-page form
ZERO_PAGE_MAX = 0xFF

# Operand syntax with a fixed addressing mode and no operand
_NO_OPERAND_SYNTAX = {
    OperandSyntax.IMPLICIT: AddressingMode.IMPLIED,
    OperandSyntax.ACCUMULATOR: AddressingMode.ACCUMULATOR,
}

# Operand syntax with a fixed addressing mode and an address operand
_FIXED_MODE_SYNTAX = {
    OperandSyntax.INDIRECT: AddressingMode.INDIRECT,
    OperandSyntax.INDIRECT_X: AddressingMode.INDIRECT_X,
    OperandSyntax.INDIRECT_Y: AddressingMode.INDIRECT_Y,
}

# Operand syntax whose mode depends on the operand value:
# (zero-page mode, absolute mode)
_SIZED_SYNTAX = {
    OperandSyntax.EXPRESSION: (AddressingMode.ZERO_PAGE, AddressingMode.ABSOLUTE),
    OperandSyntax.X_INDEX: (AddressingMode.ZERO_PAGE_X, AddressingMode.ABSOLUTE_X),
    OperandSyntax.Y_INDEX: (AddressingMode.ZERO_PAGE_Y, AddressingMode.ABSOLUTE_Y),
}


class Translator:
    """
    Recursive parse-tree to IR translator.

    A translator holds the constant scope for one assembly. Create a new
    one (with a fresh Scope) for every program.

    Attributes:
        scope: Constant bindings made by assignments so far
        opcode_table: Opcode table used to choose encodings
    """

    def __init__(
        self,
        scope: Optional[Scope] = None,
        opcode_table: Optional[dict[tuple[str, AddressingMode], InstructionInfo]] = None,
    ):
        self.scope = scope if scope is not None else Scope()
        self.opcode_table = opcode_table if opcode_table is not None else OPCODE_TABLE

        # One handler per node type; a missing entry is a bug, caught by
        # translate() rather than silently skipped
        self._handlers: dict[NodeType, Callable[[ParseNode], object]] = {
            NodeType.STATEMENT_LIST: self._translate_statement_list,
            NodeType.ASSIGNMENT: self._translate_assignment,
            NodeType.COMMAND: self._translate_command,
            NodeType.LABEL: self._translate_label,
            NodeType.LOCAL_LABEL: self._translate_local_label,
            NodeType.INSTRUCTION: self._translate_instruction,
            NodeType.IDENTIFIER: self._translate_identifier,
            NodeType.IMMEDIATE: self._translate_immediate,
            NodeType.NUMBER: self._translate_literal,
            NodeType.STRING_LITERAL: self._translate_literal,
            NodeType.EXPRESSION_LIST: self._translate_expression_list,
        }

    # =========================================================================
    # Public Interface
    # =========================================================================

    def translate_program(self, root: ParseNode) -> list[IRNode]:
        """
        Translate a whole program.

        Args:
            root: The statementList node for the program

        Returns:
            The linear IR, in source order

        Raises:
            InternalConsistencyError: If root is not a statement list
            AssemblerError: On the first semantic error in the program
        """
        if root.type is not NodeType.STATEMENT_LIST:
            raise InternalConsistencyError(
                f"expected a statement list at the root, got '{root.type.value}'",
                line=root.line,
            )
        ir = self.translate(root)
        logger.debug("translated %d IR nodes, %d constants", len(ir), len(self.scope))
        return ir

    def translate(self, node: ParseNode):
        """
        Translate a single node with the handler for its type.

        Raises:
            InternalConsistencyError: If no handler exists for the node type
        """
        handler = self._handlers.get(node.type)
        if handler is None:
            raise InternalConsistencyError(
                f"unknown parse node type '{node.type}'",
                line=node.line,
            )
        return handler(node)

    def translate_expression(self, node: ParseNode) -> Value:
        """
        Translate an expression node to a value node or deferred reference.

        Raises:
            InternalConsistencyError: If node does not produce a value
        """
        result = self.translate(node)
        if not isinstance(result, (ParseNode, Unresolved)):
            raise InternalConsistencyError(
                f"'{node.type.value}' node is not an expression",
                line=node.line,
            )
        return result

    # =========================================================================
    # Statements
    # =========================================================================

    def _translate_statement_list(self, node: ParseNode) -> list[IRNode]:
        ir: list[IRNode] = []
        for child in node.children:
            result = self.translate(child)
            if result is not None:
                ir.append(result)
        return ir

    def _translate_assignment(self, node: ParseNode) -> None:
        identifier, value_node = node.children
        value = self.translate_expression(value_node)
        if isinstance(value, Unresolved):
            raise UndefinedIdentifierError(value.name, line=node.line)
        self.scope.define(identifier.name, value)
        return None

    def _translate_command(self, node: ParseNode) -> Command:
        params: list[Value] = []
        for child in node.children:
            if child.type is NodeType.EXPRESSION_LIST:
                params.extend(self._translate_expression_list(child))
            else:
                params.append(self.translate_expression(child))
        return Command(name=node.name.lower(), params=tuple(params), line=node.line)

    def _translate_label(self, node: ParseNode) -> Label:
        return Label(name=node.name, local=False, line=node.line)

    def _translate_local_label(self, node: ParseNode) -> Label:
        return Label(name=node.name, local=True, line=node.line)

    # =========================================================================
    # Instructions
    # =========================================================================

    def _translate_instruction(self, node: ParseNode) -> Instruction:
        mnemonic = node.name.lower()
        syntax = node.mode
        operand: Operand = None
        local_label = False

        if syntax in _NO_OPERAND_SYNTAX:
            mode = _NO_OPERAND_SYNTAX[syntax]

        elif syntax in _SIZED_SYNTAX:
            value = self.translate_expression(self._operand_node(node))
            zero_page_mode, absolute_mode = _SIZED_SYNTAX[syntax]
            if isinstance(value, Unresolved):
                # Assume a forward reference to a global label; branches
                # only have a relative form
                if syntax is OperandSyntax.EXPRESSION and is_branch_instruction(mnemonic):
                    mode = AddressingMode.RELATIVE
                else:
                    mode = absolute_mode
                operand = value
            elif value.is_immediate():
                if syntax is not OperandSyntax.EXPRESSION:
                    register = "x" if syntax is OperandSyntax.X_INDEX else "y"
                    raise OperandRangeError(
                        f"expected an address for {register}-indexed addressing mode",
                        line=node.line,
                    )
                mode = AddressingMode.IMMEDIATE
                operand = value.value
            else:
                operand = self._address_operand(mnemonic, value, node)
                mode = zero_page_mode if operand <= ZERO_PAGE_MAX else absolute_mode

        elif syntax in _FIXED_MODE_SYNTAX:
            mode = _FIXED_MODE_SYNTAX[syntax]
            value = self.translate_expression(self._operand_node(node))
            if isinstance(value, Unresolved):
                operand = value
            elif value.is_immediate():
                raise OperandRangeError(
                    f"expected an address for {mode} addressing mode",
                    line=node.line,
                )
            else:
                operand = self._address_operand(mnemonic, value, node)

        elif syntax is OperandSyntax.LOCAL_LABEL:
            if mnemonic in ABSOLUTE_TARGET_INSTRUCTIONS:
                mode = AddressingMode.ABSOLUTE
            else:
                mode = AddressingMode.RELATIVE
            target = self._operand_node(node)
            operand = Unresolved(target.name, line=node.line)
            local_label = True

        elif syntax is OperandSyntax.RELATIVE:
            mode = AddressingMode.RELATIVE
            value = self.translate_expression(self._operand_node(node))
            if isinstance(value, Unresolved):
                raise UndefinedIdentifierError(value.name, line=node.line)
            if not value.is_number():
                raise OperandRangeError(
                    "relative operand must be a number",
                    line=node.line,
                )
            operand = value.value

        else:
            raise InternalConsistencyError(
                f"unknown operand syntax '{syntax}'",
                line=node.line,
            )

        info = lookup_instruction(mnemonic, mode, node.line, self.opcode_table)
        return Instruction(
            mnemonic=mnemonic,
            mode=mode,
            info=info,
            operand=operand,
            local_label=local_label,
            line=node.line,
        )

    def _operand_node(self, node: ParseNode) -> ParseNode:
        if len(node.children) != 1:
            raise InternalConsistencyError(
                f"'{node.name}' expects one operand node, got {len(node.children)}",
                line=node.line,
            )
        return node.children[0]

    def _address_operand(self, mnemonic: str, value: ParseNode, node: ParseNode) -> int:
        """Extract the numeric operand from a resolved value node."""
        if value.is_string():
            raise InvalidAddressingModeError(mnemonic, "string literal", line=node.line)
        return value.value

    # =========================================================================
    # Expressions
    # =========================================================================

    def _translate_identifier(self, node: ParseNode) -> Value:
        value = self.scope.lookup(node.name)
        if value is None:
            return Unresolved(node.name, line=node.line)
        return value

    def _translate_immediate(self, node: ParseNode) -> ParseNode:
        if not 0 <= node.value <= 0xFF:
            raise OperandRangeError(
                f"immediate value {node.value} out of range (0 to 255)",
                line=node.line,
            )
        return node

    def _translate_literal(self, node: ParseNode) -> ParseNode:
        return node

    def _translate_expression_list(self, node: ParseNode) -> list[Value]:
        return [self.translate_expression(child) for child in node.children]


def translate(
    root: ParseNode,
    scope: Optional[Scope] = None,
    opcode_table: Optional[dict[tuple[str, AddressingMode], InstructionInfo]] = None,
) -> list[IRNode]:
    """
    Convenience function to translate a program with a fresh translator.

    Args:
        root: The statementList node for the program
        scope: Constant scope (default: a new, empty Scope)
        opcode_table: Opcode table (default: OPCODE_TABLE)

    Returns:
        The linear IR, in source order
    """
    return Translator(scope, opcode_table).translate_program(root)
