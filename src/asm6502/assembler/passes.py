"""
Address Assignment and Label Resolution
=======================================

The two passes that run between translation and encoding:

1. **Address assignment** walks the IR once with a program counter that
   starts at 0. Labels take the current address, instructions and data take
   the current address and advance it by their length, and directives are
   executed (moving the counter or emitting a ``ByteArray``). No
   ``Command`` survives this pass.

2. **Label resolution** builds the global and local label tables from the
   addressed labels, then substitutes label addresses into instruction
   operands. Relative-mode operands become the distance from the start of
   the instruction to the label; the encoder subtracts the instruction
   length afterwards.

Instruction sizes depend only on the addressing mode chosen during
translation, so every address is final after pass 1 even when operands
refer to labels defined further down the source.
"""

from dataclasses import dataclass, field, replace
import logging
from typing import Optional

from asm6502.assembler.commands import execute_command
from asm6502.assembler.ir import (
    ByteArray,
    Command,
    Instruction,
    IRNode,
    Label,
    Unresolved,
)
from asm6502.config import AssemblerConfig
from asm6502.cpu import AddressingMode
from asm6502.errors import InternalConsistencyError, OperandRangeError

logger = logging.getLogger(__name__)


# Size of the 6502 address space
ADDRESS_SPACE = 0x10000

# Modes whose label operand is substituted with the label's address
_ADDRESS_MODES = frozenset({
    AddressingMode.ABSOLUTE,
    AddressingMode.ABSOLUTE_X,
    AddressingMode.ABSOLUTE_Y,
    AddressingMode.INDIRECT,
    AddressingMode.INDIRECT_X,
    AddressingMode.INDIRECT_Y,
})


# =============================================================================
# Pass 1: Address Assignment
# =============================================================================

def assign_addresses(ir: list[IRNode]) -> list[IRNode]:
    """
    Assign an address to every record and execute directives.

    Args:
        ir: Translated IR in program order

    Returns:
        New IR with addresses assigned and commands replaced by their output

    Raises:
        InvalidCommandError: Unknown or malformed directive
        OperandRangeError: Code or data extends past $FFFF
        InternalConsistencyError: Unknown IR record
    """
    pc = 0
    result: list[IRNode] = []

    for node in ir:
        if isinstance(node, Label):
            result.append(replace(node, address=pc))

        elif isinstance(node, Instruction):
            _check_fits(pc, node.length, node)
            result.append(replace(node, address=pc))
            pc += node.length

        elif isinstance(node, ByteArray):
            _check_fits(pc, node.length, node)
            result.append(replace(node, address=pc))
            pc += node.length

        elif isinstance(node, Command):
            effect = execute_command(node)
            if effect.origin is not None:
                pc = effect.origin
            if effect.data is not None:
                data = ByteArray(effect.data, address=pc, line=node.line)
                _check_fits(pc, data.length, data)
                result.append(data)
                pc += data.length

        else:
            raise InternalConsistencyError(
                f"unknown IR node '{type(node).__name__}'",
                line=getattr(node, "line", None),
            )

    logger.debug("assigned addresses to %d IR nodes, final pc $%04X", len(result), pc)
    return result


def _check_fits(address: int, length: int, node) -> None:
    if address + length > ADDRESS_SPACE:
        raise OperandRangeError(
            f"code at ${address:04X} extends past $FFFF",
            line=node.line,
        )


# =============================================================================
# Label Table
# =============================================================================

@dataclass
class LabelTable:
    """
    Label addresses, with separate namespaces for global and local labels.

    Attributes:
        global_labels: Global label name -> address
        local_labels: Local label name (without '@') -> address
    """
    global_labels: dict[str, int] = field(default_factory=dict)
    local_labels: dict[str, int] = field(default_factory=dict)

    def define(self, label: Label, warn_on_duplicate: bool = True) -> None:
        """Record a label's address; a later definition replaces an earlier one."""
        table = self.local_labels if label.local else self.global_labels
        previous = table.get(label.name)
        if previous is not None and warn_on_duplicate:
            logger.warning(
                "%s: label '%s' redefined (was $%04X, now $%04X)",
                label.line if label.line is not None else "<input>",
                label.display_name,
                previous,
                label.address,
            )
        table[label.name] = label.address

    def lookup(self, name: str, local: bool = False) -> Optional[int]:
        """Return the address for name in the chosen namespace, or None."""
        table = self.local_labels if local else self.global_labels
        return table.get(name)

    def find_similar(self, name: str, local: bool = False) -> list[str]:
        """
        Find labels with similar names for error hints.

        Uses a simple edit distance heuristic.
        """
        table = self.local_labels if local else self.global_labels
        name_lower = name.lower()
        similar = []

        for label in table:
            label_lower = label.lower()
            # Simple typos: off by one or two characters, or a case difference
            if (
                label_lower == name_lower or
                abs(len(label) - len(name)) <= 1 and
                _edit_distance(name_lower, label_lower) <= 2
            ):
                similar.append(label)

        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        row = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                row.append(distances[j])
            else:
                row.append(1 + min(distances[j], distances[j + 1], row[-1]))
        distances = row

    return distances[-1]


def build_label_table(
    ir: list[IRNode],
    config: Optional[AssemblerConfig] = None,
) -> LabelTable:
    """
    Collect the addresses of all labels in addressed IR.

    Args:
        ir: IR after address assignment
        config: Controls the duplicate-label warning

    Returns:
        The populated LabelTable
    """
    config = config or AssemblerConfig()
    table = LabelTable()
    for node in ir:
        if isinstance(node, Label):
            table.define(node, warn_on_duplicate=config.warn_on_duplicate_labels)

    logger.debug(
        "label table: %d global, %d local",
        len(table.global_labels),
        len(table.local_labels),
    )
    return table


# =============================================================================
# Pass 2: Label Resolution
# =============================================================================

def resolve_labels(instruction: Instruction, labels: LabelTable) -> Instruction:
    """
    Substitute a label address into an instruction's operand.

    Instructions without a label operand are returned unchanged, and so
    are instructions whose label is not defined; the encoder leaves those
    unencoded and the caller reports them.

    Args:
        instruction: An addressed instruction
        labels: Table built from the same IR

    Returns:
        The instruction with its operand resolved where possible
    """
    operand = instruction.operand
    if not isinstance(operand, Unresolved):
        return instruction

    address = labels.lookup(operand.name, local=instruction.local_label)
    if address is None:
        logger.debug("%s: '%s' not resolved", instruction.line, operand.name)
        return instruction

    if instruction.mode is AddressingMode.RELATIVE:
        # Distance from the instruction start; the encoder subtracts the
        # instruction length
        value = address - instruction.address
    elif instruction.mode in _ADDRESS_MODES:
        value = address
    else:
        return instruction

    logger.debug("%s: '%s' resolved to %d", instruction.line, operand.name, value)
    return replace(instruction, operand=value)
