"""
6502 Assembler - Main Interface
===============================

This module provides ``assemble()``, the pipeline that turns a parse tree
into final IR, and the ``Assembler`` class, which adds source parsing and
output files around it.

Pipeline
--------
Each call runs these steps with fresh state:

1. Translate the parse tree into linear IR (new constant scope)
2. Assign addresses and execute directives
3. Build the global and local label tables
4. Resolve label operands and encode every instruction
5. Check that nothing is left unencoded

Example Usage
-------------
>>> from asm6502.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
...     .org $0600
... start:
...     ldx #0
... @loop:
...     inx
...     bne @loop
...     jmp start
... ''')
>>> asm.to_hex_string()
'A200E8D0FD4C0006'
>>> asm.write_binary("demo.bin")

Command-Line Usage
------------------
    $ asm6502 demo.asm -o demo.bin -l demo.lst -s demo.sym
"""

import logging
from pathlib import Path
from typing import Optional

from asm6502.assembler.encoder import encode_instruction
from asm6502.assembler.ir import ByteArray, Instruction, IRNode, Label, Unresolved
from asm6502.assembler.listing import (
    build_segments,
    collect_symbols,
    format_listing,
    format_symbols,
    to_bytes,
    to_hex_string,
)
from asm6502.assembler.parser import parse_source
from asm6502.assembler.parsetree import ParseNode
from asm6502.assembler.passes import (
    assign_addresses,
    build_label_table,
    resolve_labels,
)
from asm6502.assembler.scope import Scope
from asm6502.assembler.translator import Translator
from asm6502.config import AssemblerConfig
from asm6502.cpu import OPCODE_TABLE, AddressingMode, InstructionInfo
from asm6502.errors import DanglingReferenceError, InternalConsistencyError

logger = logging.getLogger(__name__)


# =============================================================================
# Pipeline
# =============================================================================

def assemble(
    root: ParseNode,
    opcode_table: dict[tuple[str, AddressingMode], InstructionInfo] = OPCODE_TABLE,
    config: Optional[AssemblerConfig] = None,
) -> list[IRNode]:
    """
    Assemble a parse tree into final IR.

    Args:
        root: The statementList node for the program
        opcode_table: Opcode table to encode with
        config: Assembler configuration (default: AssemblerConfig())

    Returns:
        Labels, Instructions and ByteArrays in program order, all addressed
        and with every instruction encoded

    Raises:
        AssemblerError: The first error found; nothing is returned for a
            program with any error
    """
    config = config or AssemblerConfig()

    translator = Translator(Scope(), opcode_table)
    ir = translator.translate_program(root)
    ir = assign_addresses(ir)
    labels = build_label_table(ir, config)

    final: list[IRNode] = []
    for node in ir:
        if isinstance(node, Instruction):
            node = encode_instruction(resolve_labels(node, labels))
            if not node.data:
                operand = node.operand
                name = operand.name if isinstance(operand, Unresolved) else str(operand)
                raise DanglingReferenceError(
                    name,
                    line=node.line,
                    local=node.local_label,
                    similar_labels=labels.find_similar(name, local=node.local_label),
                )
            final.append(node)
        elif isinstance(node, (Label, ByteArray)):
            final.append(node)
        else:
            raise InternalConsistencyError(
                f"unexpected {type(node).__name__} in assembled output",
                line=getattr(node, "line", None),
            )

    logger.debug("assembled %d records", len(final))
    return final


# =============================================================================
# Assembler Facade
# =============================================================================

class Assembler:
    """
    Main 6502 assembler class.

    Parses source text, runs the pipeline and keeps the result of the most
    recent assembly for output. Every ``assemble_*`` call starts from fresh
    state, so one instance can assemble many programs in turn.

    Attributes:
        config: Assembler configuration
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config or AssemblerConfig()
        self._ir: list[IRNode] = []
        self._source_name: Optional[str] = None

    # =========================================================================
    # Assembly
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Filename for error messages

        Returns:
            Generated code as bytes

        Raises:
            ParseError: If the source has syntax errors
            AssemblerError: If assembly fails
        """
        self._ir = []
        self._source_name = filename

        root = parse_source(source, filename, max_errors=self.config.max_errors)
        self._ir = assemble(root, OPCODE_TABLE, self.config)

        logger.info("%s: %d bytes of code", filename, len(self.get_code()))
        return self.get_code()

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Generated code as bytes

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.info("assembling %s", filepath)
        return self.assemble_string(filepath.read_text(), str(filepath))

    # =========================================================================
    # Results
    # =========================================================================

    def get_ir(self) -> list[IRNode]:
        """Get the final IR of the last assembly."""
        return list(self._ir)

    def get_code(self) -> bytes:
        """
        Get the generated code.

        Returns:
            All code and data bytes in program order
        """
        return to_bytes(self._ir)

    def get_segments(self) -> list[tuple[int, bytes]]:
        """Get the code as contiguous (origin, bytes) segments."""
        return build_segments(self._ir)

    def get_symbols(self) -> dict[str, int]:
        """
        Get the label table.

        Returns:
            Label name to address; local labels are keyed as ``@name``
        """
        return collect_symbols(self._ir)

    def get_listing(self) -> str:
        """Get the assembly listing as a string."""
        return format_listing(self._ir)

    def to_hex_string(self) -> str:
        """Get the code as an uppercase hex string."""
        return to_hex_string(self._ir)

    # =========================================================================
    # Output Files
    # =========================================================================

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write raw binary output.

        Args:
            filepath: Output file path
        """
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.info("wrote %d bytes to %s", len(code), filepath)

    def write_hex(self, filepath: str | Path) -> None:
        """Write the code as a single line of hex digits."""
        Path(filepath).write_text(self.to_hex_string() + "\n")
        logger.info("wrote hex to %s", filepath)

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_listing())
        logger.info("wrote listing to %s", filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(format_symbols(self._ir))
        logger.info("wrote symbols to %s", filepath)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble_string(source: str, filename: str = "<input>") -> bytes:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Filename for error messages

    Returns:
        Generated code as bytes
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> bytes:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file

    Returns:
        Generated code as bytes
    """
    return Assembler().assemble_file(filepath)
