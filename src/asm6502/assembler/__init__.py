"""
6502 Assembler
==============

This package assembles MOS 6502 assembly source into machine code.

Main Components
---------------
- **Lexer / Parser**: Turn source text into a parse tree, one line at a time
- **Translator**: Lowers the parse tree into linear IR, folding constants
  and choosing addressing modes
- **Passes**: Address assignment (executes ``.org`` / ``.byte``) and label
  resolution (global and local label tables)
- **Encoder**: Produces the final bytes for each instruction
- **Assembler**: Runs the whole pipeline and writes output files

Assembly Process
----------------
1. **Parsing**: source lines -> ``statementList`` parse tree
2. **Translation**: parse tree -> Labels, Instructions, Commands
3. **Address assignment**: every record gets its address; directives run
4. **Resolution and encoding**: label operands are substituted, including
   relative branch distances, and each instruction is encoded

Because instruction sizes are fixed once the addressing mode is chosen,
forward references (a branch to a label further down) resolve exactly.

Example Usage
-------------
>>> from asm6502.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
...     .org $0600
... loop:
...     jmp loop
... ''')
b'L\\x00\\x06'

Supported Features
------------------
- All 56 documented 6502 instructions and 13 addressing modes
- Global labels and ``@local`` labels (separate namespaces)
- Constants (``name = value``)
- Directives: ``.org``, ``.byte`` / ``.byt``
- Listing and symbol table output
"""

from asm6502.assembler.assembler import (
    Assembler,
    assemble,
    assemble_file,
    assemble_string,
)
from asm6502.assembler.lexer import Lexer, Token, TokenType
from asm6502.assembler.parser import Parser, parse_source
from asm6502.assembler.parsetree import NodeType, OperandSyntax, ParseNode
from asm6502.assembler.ir import (
    UNASSIGNED,
    ByteArray,
    Command,
    Instruction,
    IRNode,
    Label,
    Unresolved,
)
from asm6502.assembler.scope import Scope
from asm6502.assembler.translator import Translator, translate
from asm6502.assembler.passes import (
    LabelTable,
    assign_addresses,
    build_label_table,
    resolve_labels,
)
from asm6502.assembler.encoder import encode_instruction
from asm6502.assembler.listing import (
    build_segments,
    format_listing,
    format_symbols,
    to_hex_string,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    "assemble_string",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Parser
    "Parser",
    "parse_source",
    # Parse tree
    "NodeType",
    "OperandSyntax",
    "ParseNode",
    # IR
    "UNASSIGNED",
    "ByteArray",
    "Command",
    "Instruction",
    "IRNode",
    "Label",
    "Unresolved",
    # Translation
    "Scope",
    "Translator",
    "translate",
    # Passes
    "LabelTable",
    "assign_addresses",
    "build_label_table",
    "resolve_labels",
    "encode_instruction",
    # Output
    "build_segments",
    "format_listing",
    "format_symbols",
    "to_hex_string",
]
