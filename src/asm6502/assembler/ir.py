"""
Linear Intermediate Representation
==================================

The translator lowers the parse tree into a flat, ordered list of IR
records. Each later pass takes that list and returns a new one, so a
record moves through its stages by being replaced rather than mutated:

    Unassigned  ->  Addressed  ->  Resolved  ->  Encoded
    (translate)     (addresses)    (labels)      (encoder)

Records
-------
- ``Label``: a global or local (``@name``) label, address assigned later
- ``Command``: a directive invocation; consumed by address assignment
- ``Instruction``: one machine instruction with its chosen encoding
- ``ByteArray``: raw bytes emitted by a data directive

Operands
--------
An instruction operand is one of:
- ``int``: a resolved value (address, zero-page address, immediate,
  or relative distance)
- ``Unresolved``: a reference to a label that is not yet known
- ``None``: the instruction takes no operand
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from asm6502.assembler.parsetree import ParseNode
from asm6502.cpu import AddressingMode, InstructionInfo
from asm6502.errors import SourceLine


# Address of a record that has not been through address assignment yet
UNASSIGNED = -1


@dataclass(frozen=True)
class Unresolved:
    """
    A deferred reference to a name that has no value yet.

    Produced when an identifier is not a bound constant; it is expected to
    name a label and is resolved once all label addresses are known.
    """
    name: str
    line: Optional[SourceLine] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


Operand = Union[int, Unresolved, None]

# Result of translating an expression: a value node or a deferred reference
Value = Union[ParseNode, Unresolved]


def _hex(data: bytes) -> str:
    return data.hex().upper()


# =============================================================================
# IR Records
# =============================================================================

@dataclass(frozen=True)
class Label:
    """
    A label definition.

    Local and global labels live in separate namespaces, so ``@loop`` and
    ``loop`` may both exist at different addresses.
    """
    name: str
    local: bool = False
    address: int = UNASSIGNED
    line: Optional[SourceLine] = field(default=None, compare=False, repr=False)

    @property
    def display_name(self) -> str:
        """Name as written in source (``@name`` for local labels)."""
        return f"@{self.name}" if self.local else self.name


@dataclass(frozen=True)
class Command:
    """
    A directive invocation such as ``.org $0600``.

    Parameters are already translated: constants are folded and names that
    are not constants are left as ``Unresolved``.
    """
    name: str
    params: tuple[Value, ...] = ()
    line: Optional[SourceLine] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Instruction:
    """
    A machine instruction.

    Attributes:
        mnemonic: Lowercase instruction name
        mode: The addressing mode chosen by the translator
        info: Opcode table entry for (mnemonic, mode)
        operand: Resolved value, deferred reference or None
        local_label: True when the operand refers to a local label
        address: Address of the first byte (UNASSIGNED until assigned)
        data: Encoded bytes (empty until encoded)
        line: Source line the instruction came from
    """
    mnemonic: str
    mode: AddressingMode
    info: InstructionInfo
    operand: Operand = None
    local_label: bool = False
    address: int = UNASSIGNED
    data: bytes = b""
    line: Optional[SourceLine] = field(default=None, compare=False, repr=False)

    @property
    def opcode(self) -> int:
        return self.info.opcode

    @property
    def length(self) -> int:
        """Instruction size from the opcode table, encoded or not."""
        return self.info.size

    @property
    def is_resolved(self) -> bool:
        return not isinstance(self.operand, Unresolved)

    @property
    def hex(self) -> str:
        return _hex(self.data)

    @property
    def source(self) -> str:
        return self.line.assembly if self.line is not None else ""


@dataclass(frozen=True)
class ByteArray:
    """Raw bytes emitted by a data directive (``.byte``)."""
    data: bytes
    address: int = UNASSIGNED
    line: Optional[SourceLine] = field(default=None, compare=False, repr=False)

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def hex(self) -> str:
        return _hex(self.data)

    @property
    def source(self) -> str:
        return self.line.assembly if self.line is not None else ""


IRNode = Union[Label, Command, Instruction, ByteArray]
