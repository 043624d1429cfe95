"""
asm6502 Command-Line Interface
==============================

- **asm6502**: The 6502 assembler

The tool is a Click-based CLI application with help text and unified
error reporting (see ``asm6502.cli.errors``).
"""

__all__ = ["asm6502"]
