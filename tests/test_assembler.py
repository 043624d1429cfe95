# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the complete 6502 assembler.
# These tests verify the full pipeline from source code to machine code.
#
# Test coverage includes:
#   - Complete program assembly
#   - Forward references, local and global labels, relative branches
#   - Error reporting with the specific error kind
#   - Output formats (binary, hex, listing, symbols, segments)
#   - Edge cases and boundary conditions
# =============================================================================

import pytest

from asm6502.assembler import (
    Assembler,
    ByteArray,
    Instruction,
    Label,
    assemble,
    assemble_file,
    assemble_string,
    parse_source,
)
from asm6502.errors import (
    DanglingReferenceError,
    InvalidAddressingModeError,
    InvalidCommandError,
    InvalidInstructionError,
    OperandRangeError,
    ParseError,
    UndefinedIdentifierError,
)


DEMO = """
    .org $0600
start:
    ldx #0
@loop:
    inx
    bne @loop
    jmp start
"""


def assemble_hex(source: str) -> str:
    """Assemble source and return the code as a hex string."""
    asm = Assembler()
    asm.assemble_string(source)
    return asm.to_hex_string()


# =============================================================================
# Full Assembly Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline from source to bytes."""

    def test_minimal_program(self):
        """Assemble a single instruction."""
        assert assemble_string("nop") == b"\xEA"

    def test_empty_program(self):
        """An empty source assembles to nothing."""
        assert assemble_string("; nothing here\n") == b""

    def test_demo_program(self):
        """The loop-and-jump demo."""
        assert assemble_hex(DEMO) == "A200E8D0FD4C0006"

    def test_label_at_address_zero(self):
        """A label at $0000 is found like any other."""
        assert assemble_string("start: jmp start") == bytes([0x4C, 0x00, 0x00])

    def test_forward_local_branch(self):
        """Forward and backward local references resolve exactly."""
        source = """
            ldx #3
        @loop:
            dex
            beq @done
            jmp @loop
        @done:
            rts
        """
        assert assemble_hex(source) == "A203CAF0034C020060"

    def test_local_and_global_with_same_name(self):
        """@x and x are separate labels."""
        source = """
        x:  nop
            nop
        @x: nop
            jmp @x
            jmp x
        """
        assert assemble_hex(source) == "EAEAEA4C02004C0000"

    def test_branch_to_global_label(self):
        """Branches may target global labels too."""
        assert assemble_hex("loop: dex\n bne loop") == "CAD0FD"

    def test_explicit_relative_offset(self):
        """*+N counts from the start of the branch."""
        assert assemble_hex("bne *+2\nnop") == "D000EA"

    def test_constants(self):
        """Constants choose zero page or absolute by value."""
        source = """
        zp = $20
        port = $D020
        char = #'A'
            lda char
            sta zp
            sta port
        """
        assert assemble_hex(source) == "A941" "8520" "8D20D0"

    def test_every_operand_form(self):
        """Indexed and indirect forms encode with their own opcodes."""
        source = """
            lda $10,x
            ldx $10,y
            lda $1234,x
            lda $1234,y
            lda ($20,x)
            lda ($20),y
            jmp ($FFFC)
            asl a
        """
        assert assemble_hex(source) == (
            "B510" "B610" "BD3412" "B93412" "A120" "B120" "6CFCFF" "0A"
        )

    def test_pointer_label(self):
        """Indirect operands may be labels."""
        source = """
            jmp (vector)
        vector:
            .byte $00, $06
        """
        assert assemble_hex(source) == "6C03000006"

    def test_data_directives(self):
        """.byte and .byt emit numbers and strings."""
        source = """
            .byte 2, 4, 6, 8, 10
            .byt "AB"
            .byte(1, 2)
        """
        assert assemble_hex(source) == "020406080A" "4142" "0102"

    def test_case_insensitive_mnemonics_and_directives(self):
        """Mnemonics and directive names ignore case."""
        assert assemble_hex(".ORG $10\nLDA #1\nRTS") == "A90160"

    def test_duplicate_label_last_wins(self):
        """A redefined label resolves to its last definition."""
        source = """
        here: nop
        here: nop
            jmp here
        """
        assert assemble_hex(source) == "EAEA4C0100"

    def test_idempotent(self):
        """Assembling the same source twice gives the same result."""
        assert assemble_hex(DEMO) == assemble_hex(DEMO)

    def test_assemble_parse_tree(self):
        """assemble() returns addressed, encoded IR with no commands left."""
        ir = assemble(parse_source(DEMO))
        assert [type(node) for node in ir] == [
            Label, Instruction, Label, Instruction, Instruction, Instruction,
        ]
        assert all(node.address >= 0x600 for node in ir)
        assert all(node.data for node in ir if isinstance(node, Instruction))


# =============================================================================
# Error Reporting Tests
# =============================================================================

class TestErrors:
    """Test that each invalid program raises its specific error."""

    @pytest.mark.parametrize("source,error", [
        ("lda #1 2", ParseError),
        ("frob", InvalidInstructionError),
        ("sta #1", InvalidAddressingModeError),
        ("lsr", InvalidAddressingModeError),
        ("lda #300", OperandRangeError),
        ("x = y", UndefinedIdentifierError),
        (".org start", InvalidCommandError),
        (".word 1", InvalidCommandError),
        ("jmp nowhere", DanglingReferenceError),
        ("bne *+200", OperandRangeError),
    ])
    def test_error_kind(self, source, error):
        """Each error category has its own exception type."""
        with pytest.raises(error):
            assemble_string(source)

    def test_undefined_label_hint(self):
        """Undefined labels suggest similar names."""
        with pytest.raises(DanglingReferenceError) as exc_info:
            assemble_string("loop: nop\n jmp lop", "demo.asm")
        error = exc_info.value
        assert error.name == "lop"
        assert error.similar_labels == ["loop"]
        assert "did you mean 'loop'?" in str(error)
        assert str(error.line) == "demo.asm:2"

    def test_undefined_local_label(self):
        """Local references only see local labels."""
        with pytest.raises(DanglingReferenceError, match="undefined local label '@done'"):
            assemble_string("done: nop\n bne @done")

    def test_branch_out_of_range(self):
        """A label more than 128 bytes back cannot be reached by a branch."""
        source = """
        start:
            nop
            .org $0200
            bne start
        """
        with pytest.raises(OperandRangeError, match="branch offset"):
            assemble_string(source)

    def test_zero_page_pointer_must_fit(self):
        """(zp),Y through a label above zero page is rejected."""
        source = """
            .org $0300
        ptr:
            lda (ptr),y
        """
        with pytest.raises(OperandRangeError):
            assemble_string(source)

    def test_error_message_format(self):
        """Errors show the location, the source line and a hint."""
        with pytest.raises(InvalidAddressingModeError) as exc_info:
            assemble_string("nop\n  sta #$41 ; store", "prog.asm")
        text = str(exc_info.value)
        assert text.startswith("prog.asm:2: error: 'sta' does not support immediate addressing")
        assert "    sta #$41" in text
        assert "hint: sta supports:" in text


# =============================================================================
# Assembler State Tests
# =============================================================================

class TestAssemblerState:
    """Test that each assembly starts from fresh state."""

    def test_constants_do_not_leak(self):
        """Constants from one assembly are gone in the next."""
        asm = Assembler()
        asm.assemble_string("x = 5\n lda x")
        assert asm.to_hex_string() == "A505"
        with pytest.raises(DanglingReferenceError):
            asm.assemble_string("lda x")

    def test_failed_assembly_clears_result(self):
        """A failed assembly leaves no stale output."""
        asm = Assembler()
        asm.assemble_string("nop")
        with pytest.raises(InvalidInstructionError):
            asm.assemble_string("frob")
        assert asm.get_code() == b""
        assert asm.get_ir() == []

    def test_max_errors_from_config(self):
        """The parser stops at the configured error limit."""
        from asm6502.config import AssemblerConfig
        from asm6502.errors import TooManyErrors

        asm = Assembler(AssemblerConfig(max_errors=1))
        with pytest.raises(TooManyErrors):
            asm.assemble_string("!\n!\n")


# =============================================================================
# Output Format Tests
# =============================================================================

class TestOutputs:
    """Test listing, symbols, segments and output files."""

    @pytest.fixture
    def asm(self):
        asm = Assembler()
        asm.assemble_string(DEMO, "demo.asm")
        return asm

    def test_code(self, asm):
        """get_code returns the raw bytes."""
        assert asm.get_code() == bytes.fromhex("A200E8D0FD4C0006")

    def test_symbols(self, asm):
        """Globals first, locals keyed with '@'."""
        assert asm.get_symbols() == {"start": 0x0600, "@loop": 0x0602}

    def test_listing(self, asm):
        """One line per label and instruction."""
        assert asm.get_listing().splitlines() == [
            "0600  start:",
            "0600  A2 00     ldx #0",
            "0602  @loop:",
            "0602  E8        inx",
            "0603  D0 FD     bne @loop",
            "0605  4C 00 06  jmp start",
        ]

    def test_single_segment(self, asm):
        """Contiguous code is one segment."""
        assert asm.get_segments() == [(0x0600, asm.get_code())]

    def test_segments_split_on_org(self):
        """A gap starts a new segment; get_code does not fill gaps."""
        asm = Assembler()
        asm.assemble_string(".org $10\nnop\n.org $20\nnop\n.byte 1")
        assert asm.get_segments() == [(0x10, b"\xEA"), (0x20, b"\xEA\x01")]
        assert asm.get_code() == b"\xEA\xEA\x01"

    def test_byte_array_in_ir(self):
        """Data directives appear as ByteArray records."""
        asm = Assembler()
        asm.assemble_string('.org $100\n.byte "HI"')
        assert asm.get_ir() == [ByteArray(b"HI", address=0x100)]

    def test_write_files(self, asm, tmp_path):
        """Binary, hex, listing and symbol files."""
        asm.write_binary(tmp_path / "demo.bin")
        asm.write_hex(tmp_path / "demo.hex")
        asm.write_listing(tmp_path / "demo.lst")
        asm.write_symbols(tmp_path / "demo.sym")

        assert (tmp_path / "demo.bin").read_bytes() == asm.get_code()
        assert (tmp_path / "demo.hex").read_text() == "A200E8D0FD4C0006\n"
        assert (tmp_path / "demo.lst").read_text() == asm.get_listing()
        assert (tmp_path / "demo.sym").read_text() == "start = $0600\n@loop = $0602\n"

    def test_assemble_file(self, tmp_path):
        """Files are read and named in errors."""
        source = tmp_path / "prog.asm"
        source.write_text(DEMO)
        assert assemble_file(source) == bytes.fromhex("A200E8D0FD4C0006")

        bad = tmp_path / "bad.asm"
        bad.write_text("jmp nowhere\n")
        with pytest.raises(DanglingReferenceError) as exc_info:
            assemble_file(bad)
        assert exc_info.value.line.filename == str(bad)

    def test_missing_file(self, tmp_path):
        """A missing source raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            Assembler().assemble_file(tmp_path / "missing.asm")
