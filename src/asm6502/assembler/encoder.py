"""
Instruction Encoder
===================

Produces the final bytes for an instruction from its addressing mode:

============================= ========================================
Mode                          Bytes
============================= ========================================
implied, accumulator          opcode
immediate, zero page (,X/,Y), opcode, operand
(zp,X), (zp),Y
relative                      opcode, (operand - length) as signed byte
absolute (,X/,Y), indirect    opcode, low byte, high byte
============================= ========================================

An instruction whose operand is still an unresolved label is returned with
an empty byte buffer, which the caller treats as a dangling reference.
Operands that do not fit their encoding raise ``OperandRangeError``; they
are never truncated.
"""

from dataclasses import replace

from asm6502.assembler.ir import Instruction, Unresolved
from asm6502.cpu import (
    ABSOLUTE_MODES,
    BYTE_OPERAND_MODES,
    NO_OPERAND_MODES,
    AddressingMode,
)
from asm6502.errors import InternalConsistencyError, OperandRangeError


# Signed range of a relative branch offset
BRANCH_MIN = -128
BRANCH_MAX = 127


def encode_instruction(instruction: Instruction) -> Instruction:
    """
    Encode an addressed instruction.

    Args:
        instruction: Instruction after label resolution

    Returns:
        The instruction with ``data`` set (empty if the operand is unresolved)

    Raises:
        OperandRangeError: Operand or branch offset does not fit
        InternalConsistencyError: Missing operand or unknown mode
    """
    return replace(instruction, data=encode_bytes(instruction))


def encode_bytes(instruction: Instruction) -> bytes:
    """Return the bytes for an instruction (see encode_instruction)."""
    mode = instruction.mode
    opcode = instruction.opcode

    if mode in NO_OPERAND_MODES:
        return bytes([opcode])

    operand = instruction.operand
    if operand is None:
        raise InternalConsistencyError(
            f"'{instruction.mnemonic}' in {mode} mode has no operand",
            line=instruction.line,
        )
    if isinstance(operand, Unresolved):
        return b""

    if mode is AddressingMode.RELATIVE:
        offset = operand - instruction.length
        if not BRANCH_MIN <= offset <= BRANCH_MAX:
            raise OperandRangeError(
                f"branch offset {offset} out of range ({BRANCH_MIN} to {BRANCH_MAX})",
                line=instruction.line,
            )
        return bytes([opcode, offset & 0xFF])

    if mode in BYTE_OPERAND_MODES:
        if not 0 <= operand <= 0xFF:
            raise OperandRangeError(
                f"operand ${operand:X} does not fit in {mode} mode (0 to $FF)",
                line=instruction.line,
            )
        return bytes([opcode, operand])

    if mode in ABSOLUTE_MODES:
        if not 0 <= operand <= 0xFFFF:
            raise OperandRangeError(
                f"address {operand} out of range ($0000 to $FFFF)",
                line=instruction.line,
            )
        return bytes([opcode, operand & 0xFF, (operand >> 8) & 0xFF])

    raise InternalConsistencyError(
        f"cannot encode {mode} addressing mode",
        line=instruction.line,
    )
