"""
asm6502 CPU Package
===================

CPU architecture definitions for the MOS 6502. The assembler uses the
opcode table here to pick encodings and instruction lengths; the table
is read-only data and is passed explicitly to every assembly.

Usage:
    from asm6502.cpu import (
        AddressingMode,
        InstructionInfo,
        OPCODE_TABLE,
        lookup_instruction,
    )
"""

from asm6502.cpu.mos6502 import (
    # Core types
    AddressingMode,
    InstructionInfo,
    # Master instruction database
    OPCODE_TABLE,
    # Mode groupings
    ABSOLUTE_MODES,
    BYTE_OPERAND_MODES,
    NO_OPERAND_MODES,
    # Instruction set reference lists
    MNEMONICS,
    BRANCH_INSTRUCTIONS,
    ABSOLUTE_TARGET_INSTRUCTIONS,
    # Lookup functions
    get_instruction_info,
    get_valid_modes,
    lookup_instruction,
    is_valid_instruction,
    is_branch_instruction,
)

__all__ = [
    "AddressingMode",
    "InstructionInfo",
    "OPCODE_TABLE",
    "ABSOLUTE_MODES",
    "BYTE_OPERAND_MODES",
    "NO_OPERAND_MODES",
    "MNEMONICS",
    "BRANCH_INSTRUCTIONS",
    "ABSOLUTE_TARGET_INSTRUCTIONS",
    "get_instruction_info",
    "get_valid_modes",
    "lookup_instruction",
    "is_valid_instruction",
    "is_branch_instruction",
]
