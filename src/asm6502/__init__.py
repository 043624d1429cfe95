"""
asm6502 - Two-Pass Assembler for the MOS 6502
=============================================

This package assembles 6502 assembly source into machine code. It handles
the full documented instruction set, global and ``@local`` labels with
forward references, constants, and the ``.org`` and ``.byte`` directives.

Main Components
---------------
- **assembler**: Parser, translator, address/label passes, encoder
- **cpu**: The 6502 opcode table (opcodes, sizes, cycle counts)
- **cli**: The ``asm6502`` command-line tool

Quick Start
-----------
Assemble a program:
    >>> from asm6502 import Assembler
    >>> asm = Assembler()
    >>> code = asm.assemble_file("demo.asm")
    >>> asm.write_binary("demo.bin")

Or use the command-line tool:
    $ asm6502 demo.asm -o demo.bin -l demo.lst

Reference Documentation
-----------------------
- 6502 Instruction Set: http://www.6502.org/tutorials/6502opcodes.html

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from asm6502.assembler import Assembler, assemble
from asm6502.config import AssemblerConfig
from asm6502.errors import (
    Asm6502Error,
    AssemblerError,
    AssemblySyntaxError,
    ParseError,
    UndefinedIdentifierError,
    InvalidInstructionError,
    InvalidAddressingModeError,
    OperandRangeError,
    InvalidCommandError,
    DanglingReferenceError,
    InternalConsistencyError,
    SourceLine,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "AssemblerConfig",
    # Exception hierarchy
    "Asm6502Error",
    "AssemblerError",
    "AssemblySyntaxError",
    "ParseError",
    "UndefinedIdentifierError",
    "InvalidInstructionError",
    "InvalidAddressingModeError",
    "OperandRangeError",
    "InvalidCommandError",
    "DanglingReferenceError",
    "InternalConsistencyError",
    "SourceLine",
]
