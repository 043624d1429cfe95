# =============================================================================
# test_passes.py - Address Assignment and Label Resolution Tests
# =============================================================================
# Tests for the passes between translation and encoding.
#
# Test coverage includes:
#   - Program counter tracking and .org
#   - Data directives
#   - Label tables with separate global and local namespaces
#   - Duplicate label handling
#   - Operand substitution for absolute and relative modes
# =============================================================================

import logging

import pytest

from asm6502.assembler.commands import execute_command
from asm6502.assembler.ir import ByteArray, Command, Instruction, Label, Unresolved
from asm6502.assembler.parsetree import ParseNode
from asm6502.assembler.passes import (
    LabelTable,
    assign_addresses,
    build_label_table,
    resolve_labels,
)
from asm6502.config import AssemblerConfig
from asm6502.cpu import OPCODE_TABLE, AddressingMode
from asm6502.errors import (
    InternalConsistencyError,
    InvalidCommandError,
    OperandRangeError,
    UndefinedIdentifierError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def instruction(mnemonic, mode, operand=None, local=False, address=-1):
    return Instruction(
        mnemonic=mnemonic,
        mode=mode,
        info=OPCODE_TABLE[(mnemonic, mode)],
        operand=operand,
        local_label=local,
        address=address,
    )


def nop():
    return instruction("nop", AddressingMode.IMPLIED)


def org(address):
    return Command("org", (ParseNode.number(address),))


def byte(*params):
    return Command("byte", tuple(params))


# =============================================================================
# Address Assignment Tests
# =============================================================================

class TestAssignAddresses:
    """Test the program counter walk."""

    def test_starts_at_zero(self):
        """Without .org the first address is 0."""
        result = assign_addresses([nop(), nop()])
        assert [node.address for node in result] == [0, 1]

    def test_instruction_lengths(self):
        """Each instruction advances the counter by its size."""
        result = assign_addresses([
            instruction("lda", AddressingMode.IMMEDIATE, 1),
            instruction("jmp", AddressingMode.ABSOLUTE, 0),
            nop(),
        ])
        assert [node.address for node in result] == [0, 2, 5]

    def test_labels_take_current_address(self):
        """A label shares the address of the next instruction."""
        result = assign_addresses([nop(), Label("here"), nop()])
        assert result[1] == Label("here", address=1)
        assert result[2].address == 1

    def test_org_moves_counter(self):
        """.org sets the counter and produces no record."""
        result = assign_addresses([org(0x600), Label("start"), nop(), org(0x20), nop()])
        assert [type(node) for node in result] == [Label, Instruction, Instruction]
        assert [node.address for node in result] == [0x600, 0x600, 0x20]

    def test_byte_becomes_byte_array(self):
        """.byte emits a ByteArray and advances by its length."""
        result = assign_addresses([
            byte(ParseNode.number(1), ParseNode.string_literal("AB")),
            nop(),
        ])
        assert result[0] == ByteArray(b"\x01AB", address=0)
        assert result[1].address == 3

    def test_input_not_mutated(self):
        """The pass returns new records."""
        ir = [nop()]
        assign_addresses(ir)
        assert ir[0].address == -1

    def test_overflow_past_top_of_memory(self):
        """Code may end exactly at $FFFF but not beyond."""
        assign_addresses([org(0xFFFF), nop()])
        with pytest.raises(OperandRangeError, match=r"\$FFFE extends past"):
            assign_addresses([org(0xFFFE), instruction("jmp", AddressingMode.ABSOLUTE, 0)])

    def test_unknown_record(self):
        """Anything that is not an IR record is a defect."""
        with pytest.raises(InternalConsistencyError):
            assign_addresses([ParseNode.number(1)])


# =============================================================================
# Directive Tests
# =============================================================================

class TestCommands:
    """Test directive execution and its errors."""

    def test_org_result(self):
        """.org returns the new origin."""
        assert execute_command(org(0x1000)).origin == 0x1000

    @pytest.mark.parametrize("params", [
        (),
        (ParseNode.number(1), ParseNode.number(2)),
        (Unresolved("start"),),
        (ParseNode.string_literal("x"),),
        (ParseNode.number(0x10000),),
    ])
    def test_org_invalid(self, params):
        """.org needs one number in the address space."""
        with pytest.raises(InvalidCommandError):
            execute_command(Command("org", params))

    def test_byt_alias(self):
        """.byt is the same as .byte."""
        result = execute_command(Command("byt", (ParseNode.immediate(7),)))
        assert result.data == b"\x07"

    def test_byte_needs_values(self):
        """.byte with nothing to emit is an error."""
        with pytest.raises(InvalidCommandError):
            execute_command(byte())

    def test_byte_out_of_range(self):
        """Data values must fit in a byte."""
        with pytest.raises(OperandRangeError, match="256"):
            execute_command(byte(ParseNode.number(256)))

    def test_byte_unresolved(self):
        """Data values must be constants."""
        with pytest.raises(UndefinedIdentifierError):
            execute_command(byte(Unresolved("later")))

    def test_byte_wide_character(self):
        """Strings are limited to 8-bit characters."""
        with pytest.raises(OperandRangeError):
            execute_command(byte(ParseNode.string_literal("€")))

    def test_unknown_command(self):
        """Unknown directives are rejected by name."""
        with pytest.raises(InvalidCommandError, match=r"unknown directive '\.word'"):
            execute_command(Command("word", (ParseNode.number(1),)))


# =============================================================================
# Label Table Tests
# =============================================================================

class TestLabelTable:
    """Test label definition and lookup."""

    def test_separate_namespaces(self):
        """@x and x are different labels."""
        table = build_label_table([
            Label("x", address=0x10),
            Label("x", local=True, address=0x20),
        ])
        assert table.lookup("x") == 0x10
        assert table.lookup("x", local=True) == 0x20

    def test_label_at_address_zero(self):
        """Address 0 is a real address, not a missing label."""
        table = build_label_table([Label("start", address=0)])
        assert table.lookup("start") == 0

    def test_missing(self):
        """Unknown names give None."""
        assert LabelTable().lookup("nope") is None

    def test_duplicate_last_wins_with_warning(self, caplog):
        """A redefinition replaces the address and logs a warning."""
        with caplog.at_level(logging.WARNING, logger="asm6502"):
            table = build_label_table([
                Label("loop", local=True, address=2),
                Label("loop", local=True, address=9),
            ])
        assert table.lookup("loop", local=True) == 9
        assert "'@loop' redefined" in caplog.text

    def test_duplicate_warning_disabled(self, caplog):
        """The warning can be turned off."""
        config = AssemblerConfig(warn_on_duplicate_labels=False)
        with caplog.at_level(logging.WARNING, logger="asm6502"):
            table = build_label_table([Label("a", address=1), Label("a", address=2)], config)
        assert table.lookup("a") == 2
        assert "redefined" not in caplog.text

    def test_find_similar(self):
        """Near misses are offered as hints."""
        table = build_label_table([
            Label("loop", address=0),
            Label("done", address=1),
            Label("LOOP2", address=2),
        ])
        assert table.find_similar("lop") == ["loop"]
        assert "LOOP2" in table.find_similar("loop2")
        assert table.find_similar("zzzzzz") == []


# =============================================================================
# Label Resolution Tests
# =============================================================================

class TestResolveLabels:
    """Test operand substitution."""

    @pytest.fixture
    def labels(self):
        return build_label_table([
            Label("main", address=0x0600),
            Label("loop", local=True, address=0x0602),
            Label("ptr", address=0x0010),
        ])

    def test_absolute(self, labels):
        """Absolute operands become the label address."""
        inst = instruction("jmp", AddressingMode.ABSOLUTE, Unresolved("main"), address=0x700)
        assert resolve_labels(inst, labels).operand == 0x0600

    def test_relative(self, labels):
        """Relative operands become the distance from the instruction."""
        inst = instruction("bne", AddressingMode.RELATIVE, Unresolved("loop"),
                           local=True, address=0x0610)
        assert resolve_labels(inst, labels).operand == 0x0602 - 0x0610

    def test_local_lookup(self, labels):
        """A local reference does not see global labels."""
        inst = instruction("jmp", AddressingMode.ABSOLUTE, Unresolved("main"),
                           local=True, address=0)
        assert resolve_labels(inst, labels) is inst

    def test_indirect_y(self, labels):
        """Pointer operands may be labels."""
        inst = instruction("lda", AddressingMode.INDIRECT_Y, Unresolved("ptr"), address=0)
        assert resolve_labels(inst, labels).operand == 0x10

    def test_missing_label_unchanged(self, labels):
        """Unknown labels are left for the caller to report."""
        inst = instruction("jmp", AddressingMode.ABSOLUTE, Unresolved("nowhere"), address=0)
        assert resolve_labels(inst, labels) is inst

    def test_resolved_operand_unchanged(self, labels):
        """Instructions without a label operand pass through."""
        inst = instruction("lda", AddressingMode.IMMEDIATE, 5, address=0)
        assert resolve_labels(inst, labels) is inst
