"""
Output Formatting
=================

Renders assembled IR (Labels, Instructions and ByteArrays in program order)
as the text and binary forms the assembler writes:

- ``to_hex_string``: all code and data bytes as one uppercase hex string,
  suitable for pasting into a hex editor or emulator
- ``format_listing``: one line per record with address, bytes and source
- ``format_symbols``: label table, globals first, then locals
- ``build_segments``: contiguous (origin, bytes) runs, split wherever an
  ``.org`` leaves a gap or moves the counter backwards

Listing example::

    0600  start:
    0600  A2 00     ldx #0
    0602  @loop:
    0602  E8        inx
    0603  D0 FD     bne @loop
"""

from typing import Iterable

from asm6502.assembler.ir import ByteArray, Instruction, IRNode, Label


# Width of the byte column in listings (three bytes, space separated)
HEX_COLUMN_WIDTH = 8


def _code_records(ir: Iterable[IRNode]) -> list[Instruction | ByteArray]:
    return [node for node in ir if isinstance(node, (Instruction, ByteArray))]


def to_hex_string(ir: Iterable[IRNode]) -> str:
    """Concatenate the hex of every instruction and data record in order."""
    return "".join(node.hex for node in _code_records(ir))


def to_bytes(ir: Iterable[IRNode]) -> bytes:
    """Concatenate the bytes of every instruction and data record in order."""
    return b"".join(node.data for node in _code_records(ir))


def format_listing(ir: Iterable[IRNode]) -> str:
    """
    Format an assembly listing.

    Args:
        ir: Assembled IR

    Returns:
        The listing text, one line per record, newline terminated
    """
    lines = []
    for node in ir:
        if isinstance(node, Label):
            lines.append(f"{node.address:04X}  {node.display_name}:")
        elif isinstance(node, (Instruction, ByteArray)):
            spaced = " ".join(f"{b:02X}" for b in node.data)
            lines.append(f"{node.address:04X}  {spaced:<{HEX_COLUMN_WIDTH}}  {node.source}".rstrip())
    return "\n".join(lines) + "\n" if lines else ""


def collect_symbols(ir: Iterable[IRNode]) -> dict[str, int]:
    """
    Map label names to addresses, globals first, then locals as ``@name``.

    A label defined twice keeps its last address.
    """
    global_labels: dict[str, int] = {}
    local_labels: dict[str, int] = {}
    for node in ir:
        if isinstance(node, Label):
            table = local_labels if node.local else global_labels
            table[node.display_name] = node.address
    return {**global_labels, **local_labels}


def format_symbols(ir: Iterable[IRNode]) -> str:
    """Format the label table as ``name = $AAAA`` lines."""
    symbols = collect_symbols(ir)
    lines = [f"{name} = ${address:04X}" for name, address in symbols.items()]
    return "\n".join(lines) + "\n" if lines else ""


def build_segments(ir: Iterable[IRNode]) -> list[tuple[int, bytes]]:
    """
    Group code and data into contiguous segments.

    Returns:
        (origin, bytes) pairs in program order; empty records are skipped
    """
    segments: list[tuple[int, bytearray]] = []
    for node in _code_records(ir):
        if not node.data:
            continue
        if segments:
            origin, data = segments[-1]
            if origin + len(data) == node.address:
                data.extend(node.data)
                continue
        segments.append((node.address, bytearray(node.data)))
    return [(origin, bytes(data)) for origin, data in segments]
