"""
MOS 6502 Instruction Set Definition
===================================

This module defines the documented NMOS 6502 instruction set: 56 mnemonics
spread over 151 (mnemonic, addressing mode) encodings, each with its opcode
byte, total size and cycle counts. The 6502 stores 16-bit operands
little-endian (low byte first).

Addressing Modes
----------------
1. **IMPLIED**: No operand (e.g., NOP, RTS, INX) - 1 byte
2. **ACCUMULATOR**: Operates on A (e.g., ASL A) - 1 byte
3. **IMMEDIATE**: Literal value (e.g., LDA #$41) - 2 bytes
4. **ZERO_PAGE**: Address $00-$FF (e.g., LDA $40) - 2 bytes
5. **ZERO_PAGE_X / ZERO_PAGE_Y**: Zero-page address + index - 2 bytes
6. **RELATIVE**: Signed 8-bit branch offset (e.g., BNE loop) - 2 bytes
7. **ABSOLUTE**: Full 16-bit address (e.g., JMP $1234) - 3 bytes
8. **ABSOLUTE_X / ABSOLUTE_Y**: 16-bit address + index - 3 bytes
9. **INDIRECT**: JMP through a 16-bit pointer, JMP ($FFFC) - 3 bytes
10. **INDIRECT_X**: Pointer at zero-page (addr + X), LDA ($20,X) - 2 bytes
11. **INDIRECT_Y**: Zero-page pointer, then + Y, LDA ($20),Y - 2 bytes

Cycle Counts
------------
``cycles`` is the base count. ``page_cycles`` is added when an indexed or
taken-branch access crosses a page boundary. ``branch_cycles`` is added
when a branch is taken.

Reference
---------
- MOS MCS6500 Microcomputer Family Programming Manual (1976)
- http://www.6502.org/tutorials/6502opcodes.html
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from asm6502.errors import (
    InvalidAddressingModeError,
    InvalidInstructionError,
    SourceLine,
)


# =============================================================================
# Addressing Mode Enumeration
# =============================================================================

class AddressingMode(Enum):
    """
    6502 addressing modes.

    The values are the tag names used in listings and error messages.
    """
    IMPLIED = "implied"
    ACCUMULATOR = "accumulator"
    IMMEDIATE = "immediate"
    ZERO_PAGE = "zero_page"
    ZERO_PAGE_X = "zero_page_x"
    ZERO_PAGE_Y = "zero_page_y"
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    ABSOLUTE_X = "absolute_x"
    ABSOLUTE_Y = "absolute_y"
    INDIRECT = "indirect"
    INDIRECT_X = "indirect_x"
    INDIRECT_Y = "indirect_y"

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return self.value.replace("_", " ")


# Modes whose operand is a full 16-bit address
ABSOLUTE_MODES = frozenset({
    AddressingMode.ABSOLUTE,
    AddressingMode.ABSOLUTE_X,
    AddressingMode.ABSOLUTE_Y,
    AddressingMode.INDIRECT,
})

# Modes whose operand is a single byte (value, zero-page address or pointer)
BYTE_OPERAND_MODES = frozenset({
    AddressingMode.IMMEDIATE,
    AddressingMode.ZERO_PAGE,
    AddressingMode.ZERO_PAGE_X,
    AddressingMode.ZERO_PAGE_Y,
    AddressingMode.INDIRECT_X,
    AddressingMode.INDIRECT_Y,
})

# Modes with no operand at all
NO_OPERAND_MODES = frozenset({
    AddressingMode.IMPLIED,
    AddressingMode.ACCUMULATOR,
})


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Information about a specific instruction encoding.

    Attributes:
        opcode: The opcode byte
        size: Total instruction size in bytes (1, 2 or 3)
        cycles: Base number of CPU cycles
        page_cycles: Extra cycles when a page boundary is crossed
        branch_cycles: Extra cycles when a branch is taken
    """
    opcode: int
    size: int
    cycles: int
    page_cycles: int = 0
    branch_cycles: int = 0

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=${self.opcode:02X}, size={self.size}, cycles={self.cycles})"


_I = AddressingMode.IMPLIED
_ACC = AddressingMode.ACCUMULATOR
_IMM = AddressingMode.IMMEDIATE
_ZP = AddressingMode.ZERO_PAGE
_ZPX = AddressingMode.ZERO_PAGE_X
_ZPY = AddressingMode.ZERO_PAGE_Y
_REL = AddressingMode.RELATIVE
_ABS = AddressingMode.ABSOLUTE
_ABX = AddressingMode.ABSOLUTE_X
_ABY = AddressingMode.ABSOLUTE_Y
_IND = AddressingMode.INDIRECT
_INX = AddressingMode.INDIRECT_X
_INY = AddressingMode.INDIRECT_Y


# =============================================================================
# Opcode Table
# =============================================================================
# Key: (mnemonic, addressing_mode), mnemonics lowercase
# Value: InstructionInfo(opcode, size, cycles, page_cycles, branch_cycles)
# =============================================================================

OPCODE_TABLE: dict[tuple[str, AddressingMode], InstructionInfo] = {
    # =========================================================================
    # LOAD / STORE
    # =========================================================================

    ("lda", _IMM): InstructionInfo(0xA9, 2, 2),
    ("lda", _ZP): InstructionInfo(0xA5, 2, 3),
    ("lda", _ZPX): InstructionInfo(0xB5, 2, 4),
    ("lda", _ABS): InstructionInfo(0xAD, 3, 4),
    ("lda", _ABX): InstructionInfo(0xBD, 3, 4, 1),
    ("lda", _ABY): InstructionInfo(0xB9, 3, 4, 1),
    ("lda", _INX): InstructionInfo(0xA1, 2, 6),
    ("lda", _INY): InstructionInfo(0xB1, 2, 5, 1),

    ("ldx", _IMM): InstructionInfo(0xA2, 2, 2),
    ("ldx", _ZP): InstructionInfo(0xA6, 2, 3),
    ("ldx", _ZPY): InstructionInfo(0xB6, 2, 4),
    ("ldx", _ABS): InstructionInfo(0xAE, 3, 4),
    ("ldx", _ABY): InstructionInfo(0xBE, 3, 4, 1),

    ("ldy", _IMM): InstructionInfo(0xA0, 2, 2),
    ("ldy", _ZP): InstructionInfo(0xA4, 2, 3),
    ("ldy", _ZPX): InstructionInfo(0xB4, 2, 4),
    ("ldy", _ABS): InstructionInfo(0xAC, 3, 4),
    ("ldy", _ABX): InstructionInfo(0xBC, 3, 4, 1),

    # Stores never take the page-crossing penalty
    ("sta", _ZP): InstructionInfo(0x85, 2, 3),
    ("sta", _ZPX): InstructionInfo(0x95, 2, 4),
    ("sta", _ABS): InstructionInfo(0x8D, 3, 4),
    ("sta", _ABX): InstructionInfo(0x9D, 3, 5),
    ("sta", _ABY): InstructionInfo(0x99, 3, 5),
    ("sta", _INX): InstructionInfo(0x81, 2, 6),
    ("sta", _INY): InstructionInfo(0x91, 2, 6),

    ("stx", _ZP): InstructionInfo(0x86, 2, 3),
    ("stx", _ZPY): InstructionInfo(0x96, 2, 4),
    ("stx", _ABS): InstructionInfo(0x8E, 3, 4),

    ("sty", _ZP): InstructionInfo(0x84, 2, 3),
    ("sty", _ZPX): InstructionInfo(0x94, 2, 4),
    ("sty", _ABS): InstructionInfo(0x8C, 3, 4),

    # =========================================================================
    # REGISTER TRANSFERS
    # =========================================================================

    ("tax", _I): InstructionInfo(0xAA, 1, 2),
    ("tay", _I): InstructionInfo(0xA8, 1, 2),
    ("txa", _I): InstructionInfo(0x8A, 1, 2),
    ("tya", _I): InstructionInfo(0x98, 1, 2),
    ("tsx", _I): InstructionInfo(0xBA, 1, 2),
    ("txs", _I): InstructionInfo(0x9A, 1, 2),

    # =========================================================================
    # STACK
    # =========================================================================

    ("pha", _I): InstructionInfo(0x48, 1, 3),
    ("php", _I): InstructionInfo(0x08, 1, 3),
    ("pla", _I): InstructionInfo(0x68, 1, 4),
    ("plp", _I): InstructionInfo(0x28, 1, 4),

    # =========================================================================
    # LOGICAL
    # =========================================================================

    ("and", _IMM): InstructionInfo(0x29, 2, 2),
    ("and", _ZP): InstructionInfo(0x25, 2, 3),
    ("and", _ZPX): InstructionInfo(0x35, 2, 4),
    ("and", _ABS): InstructionInfo(0x2D, 3, 4),
    ("and", _ABX): InstructionInfo(0x3D, 3, 4, 1),
    ("and", _ABY): InstructionInfo(0x39, 3, 4, 1),
    ("and", _INX): InstructionInfo(0x21, 2, 6),
    ("and", _INY): InstructionInfo(0x31, 2, 5, 1),

    ("eor", _IMM): InstructionInfo(0x49, 2, 2),
    ("eor", _ZP): InstructionInfo(0x45, 2, 3),
    ("eor", _ZPX): InstructionInfo(0x55, 2, 4),
    ("eor", _ABS): InstructionInfo(0x4D, 3, 4),
    ("eor", _ABX): InstructionInfo(0x5D, 3, 4, 1),
    ("eor", _ABY): InstructionInfo(0x59, 3, 4, 1),
    ("eor", _INX): InstructionInfo(0x41, 2, 6),
    ("eor", _INY): InstructionInfo(0x51, 2, 5, 1),

    ("ora", _IMM): InstructionInfo(0x09, 2, 2),
    ("ora", _ZP): InstructionInfo(0x05, 2, 3),
    ("ora", _ZPX): InstructionInfo(0x15, 2, 4),
    ("ora", _ABS): InstructionInfo(0x0D, 3, 4),
    ("ora", _ABX): InstructionInfo(0x1D, 3, 4, 1),
    ("ora", _ABY): InstructionInfo(0x19, 3, 4, 1),
    ("ora", _INX): InstructionInfo(0x01, 2, 6),
    ("ora", _INY): InstructionInfo(0x11, 2, 5, 1),

    ("bit", _ZP): InstructionInfo(0x24, 2, 3),
    ("bit", _ABS): InstructionInfo(0x2C, 3, 4),

    # =========================================================================
    # ARITHMETIC
    # =========================================================================

    ("adc", _IMM): InstructionInfo(0x69, 2, 2),
    ("adc", _ZP): InstructionInfo(0x65, 2, 3),
    ("adc", _ZPX): InstructionInfo(0x75, 2, 4),
    ("adc", _ABS): InstructionInfo(0x6D, 3, 4),
    ("adc", _ABX): InstructionInfo(0x7D, 3, 4, 1),
    ("adc", _ABY): InstructionInfo(0x79, 3, 4, 1),
    ("adc", _INX): InstructionInfo(0x61, 2, 6),
    ("adc", _INY): InstructionInfo(0x71, 2, 5, 1),

    ("sbc", _IMM): InstructionInfo(0xE9, 2, 2),
    ("sbc", _ZP): InstructionInfo(0xE5, 2, 3),
    ("sbc", _ZPX): InstructionInfo(0xF5, 2, 4),
    ("sbc", _ABS): InstructionInfo(0xED, 3, 4),
    ("sbc", _ABX): InstructionInfo(0xFD, 3, 4, 1),
    ("sbc", _ABY): InstructionInfo(0xF9, 3, 4, 1),
    ("sbc", _INX): InstructionInfo(0xE1, 2, 6),
    ("sbc", _INY): InstructionInfo(0xF1, 2, 5, 1),

    ("cmp", _IMM): InstructionInfo(0xC9, 2, 2),
    ("cmp", _ZP): InstructionInfo(0xC5, 2, 3),
    ("cmp", _ZPX): InstructionInfo(0xD5, 2, 4),
    ("cmp", _ABS): InstructionInfo(0xCD, 3, 4),
    ("cmp", _ABX): InstructionInfo(0xDD, 3, 4, 1),
    ("cmp", _ABY): InstructionInfo(0xD9, 3, 4, 1),
    ("cmp", _INX): InstructionInfo(0xC1, 2, 6),
    ("cmp", _INY): InstructionInfo(0xD1, 2, 5, 1),

    ("cpx", _IMM): InstructionInfo(0xE0, 2, 2),
    ("cpx", _ZP): InstructionInfo(0xE4, 2, 3),
    ("cpx", _ABS): InstructionInfo(0xEC, 3, 4),

    ("cpy", _IMM): InstructionInfo(0xC0, 2, 2),
    ("cpy", _ZP): InstructionInfo(0xC4, 2, 3),
    ("cpy", _ABS): InstructionInfo(0xCC, 3, 4),

    # =========================================================================
    # INCREMENTS / DECREMENTS
    # =========================================================================

    ("inc", _ZP): InstructionInfo(0xE6, 2, 5),
    ("inc", _ZPX): InstructionInfo(0xF6, 2, 6),
    ("inc", _ABS): InstructionInfo(0xEE, 3, 6),
    ("inc", _ABX): InstructionInfo(0xFE, 3, 7),
    ("inx", _I): InstructionInfo(0xE8, 1, 2),
    ("iny", _I): InstructionInfo(0xC8, 1, 2),

    ("dec", _ZP): InstructionInfo(0xC6, 2, 5),
    ("dec", _ZPX): InstructionInfo(0xD6, 2, 6),
    ("dec", _ABS): InstructionInfo(0xCE, 3, 6),
    ("dec", _ABX): InstructionInfo(0xDE, 3, 7),
    ("dex", _I): InstructionInfo(0xCA, 1, 2),
    ("dey", _I): InstructionInfo(0x88, 1, 2),

    # =========================================================================
    # SHIFTS AND ROTATES
    # =========================================================================

    ("asl", _ACC): InstructionInfo(0x0A, 1, 2),
    ("asl", _ZP): InstructionInfo(0x06, 2, 5),
    ("asl", _ZPX): InstructionInfo(0x16, 2, 6),
    ("asl", _ABS): InstructionInfo(0x0E, 3, 6),
    ("asl", _ABX): InstructionInfo(0x1E, 3, 7),

    ("lsr", _ACC): InstructionInfo(0x4A, 1, 2),
    ("lsr", _ZP): InstructionInfo(0x46, 2, 5),
    ("lsr", _ZPX): InstructionInfo(0x56, 2, 6),
    ("lsr", _ABS): InstructionInfo(0x4E, 3, 6),
    ("lsr", _ABX): InstructionInfo(0x5E, 3, 7),

    ("rol", _ACC): InstructionInfo(0x2A, 1, 2),
    ("rol", _ZP): InstructionInfo(0x26, 2, 5),
    ("rol", _ZPX): InstructionInfo(0x36, 2, 6),
    ("rol", _ABS): InstructionInfo(0x2E, 3, 6),
    ("rol", _ABX): InstructionInfo(0x3E, 3, 7),

    ("ror", _ACC): InstructionInfo(0x6A, 1, 2),
    ("ror", _ZP): InstructionInfo(0x66, 2, 5),
    ("ror", _ZPX): InstructionInfo(0x76, 2, 6),
    ("ror", _ABS): InstructionInfo(0x6E, 3, 6),
    ("ror", _ABX): InstructionInfo(0x7E, 3, 7),

    # =========================================================================
    # JUMPS AND CALLS
    # =========================================================================

    ("jmp", _ABS): InstructionInfo(0x4C, 3, 3),
    ("jmp", _IND): InstructionInfo(0x6C, 3, 5),
    ("jsr", _ABS): InstructionInfo(0x20, 3, 6),
    ("rts", _I): InstructionInfo(0x60, 1, 6),

    # =========================================================================
    # BRANCHES
    # +1 cycle when taken, +1 more when the target is on another page
    # =========================================================================

    ("bcc", _REL): InstructionInfo(0x90, 2, 2, 1, 1),
    ("bcs", _REL): InstructionInfo(0xB0, 2, 2, 1, 1),
    ("beq", _REL): InstructionInfo(0xF0, 2, 2, 1, 1),
    ("bmi", _REL): InstructionInfo(0x30, 2, 2, 1, 1),
    ("bne", _REL): InstructionInfo(0xD0, 2, 2, 1, 1),
    ("bpl", _REL): InstructionInfo(0x10, 2, 2, 1, 1),
    ("bvc", _REL): InstructionInfo(0x50, 2, 2, 1, 1),
    ("bvs", _REL): InstructionInfo(0x70, 2, 2, 1, 1),

    # =========================================================================
    # STATUS FLAG CHANGES
    # =========================================================================

    ("clc", _I): InstructionInfo(0x18, 1, 2),
    ("cld", _I): InstructionInfo(0xD8, 1, 2),
    ("cli", _I): InstructionInfo(0x58, 1, 2),
    ("clv", _I): InstructionInfo(0xB8, 1, 2),
    ("sec", _I): InstructionInfo(0x38, 1, 2),
    ("sed", _I): InstructionInfo(0xF8, 1, 2),
    ("sei", _I): InstructionInfo(0x78, 1, 2),

    # =========================================================================
    # SYSTEM
    # =========================================================================

    ("brk", _I): InstructionInfo(0x00, 1, 7),
    ("nop", _I): InstructionInfo(0xEA, 1, 2),
    ("rti", _I): InstructionInfo(0x40, 1, 6),
}


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

MNEMONICS: frozenset[str] = frozenset(mnemonic for mnemonic, _ in OPCODE_TABLE)

BRANCH_INSTRUCTIONS: frozenset[str] = frozenset(
    mnemonic for mnemonic, mode in OPCODE_TABLE if mode is AddressingMode.RELATIVE
)

# A local-label operand on these is an absolute target, not a branch offset
ABSOLUTE_TARGET_INSTRUCTIONS: frozenset[str] = frozenset({"jmp", "jsr"})


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(
    mnemonic: str,
    mode: AddressingMode,
    table: Optional[dict[tuple[str, AddressingMode], InstructionInfo]] = None,
) -> Optional[InstructionInfo]:
    """
    Get instruction information for a mnemonic and addressing mode.

    Args:
        mnemonic: The instruction mnemonic (any case)
        mode: The addressing mode
        table: Opcode table to search (default: OPCODE_TABLE)

    Returns:
        InstructionInfo if the combination is valid, None otherwise
    """
    table = OPCODE_TABLE if table is None else table
    return table.get((mnemonic.lower(), mode))


def get_valid_modes(
    mnemonic: str,
    table: Optional[dict[tuple[str, AddressingMode], InstructionInfo]] = None,
) -> list[AddressingMode]:
    """
    Get all valid addressing modes for a mnemonic, in table order.
    """
    table = OPCODE_TABLE if table is None else table
    mnemonic = mnemonic.lower()
    return [mode for (m, mode) in table if m == mnemonic]


def lookup_instruction(
    mnemonic: str,
    mode: AddressingMode,
    line: Optional[SourceLine] = None,
    table: Optional[dict[tuple[str, AddressingMode], InstructionInfo]] = None,
) -> InstructionInfo:
    """
    Look up an encoding, failing with the specific error kind.

    Args:
        mnemonic: The instruction mnemonic (any case)
        mode: The addressing mode computed from the operand
        line: Source line for error reporting
        table: Opcode table to search (default: OPCODE_TABLE)

    Returns:
        The InstructionInfo for the pair

    Raises:
        InvalidInstructionError: The mnemonic is not in the table at all
        InvalidAddressingModeError: The mnemonic has no encoding for mode
    """
    table = OPCODE_TABLE if table is None else table
    valid_modes = get_valid_modes(mnemonic, table)
    if not valid_modes:
        raise InvalidInstructionError(mnemonic, line)

    info = table.get((mnemonic.lower(), mode))
    if info is None:
        raise InvalidAddressingModeError(
            mnemonic.lower(),
            str(mode),
            line,
            valid_modes=[str(m) for m in valid_modes],
        )
    return info


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a documented 6502 instruction."""
    return mnemonic.lower() in MNEMONICS


def is_branch_instruction(mnemonic: str) -> bool:
    """Check if an instruction is a conditional branch (relative mode)."""
    return mnemonic.lower() in BRANCH_INSTRUCTIONS
