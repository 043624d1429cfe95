"""
Directive Execution
===================

Directives are translated into ``Command`` records and executed during
address assignment, which is the only pass that sees them. Executing a
command can move the program counter, emit data, or both.

Supported Directives
--------------------
- ``.org ADDR``: Set the program counter (0 to $FFFF)
- ``.byte A, B, ...`` / ``.byt``: Emit bytes. Numbers (0 to 255),
  immediates and string literals (one byte per character) are accepted.

Any other directive name is an error.
"""

from dataclasses import dataclass
import logging
from typing import Callable, Optional

from asm6502.assembler.ir import Command, Unresolved, Value
from asm6502.errors import (
    InvalidCommandError,
    OperandRangeError,
    UndefinedIdentifierError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """
    Effect of executing a command.

    Attributes:
        origin: New program counter, or None to leave it unchanged
        data: Bytes to emit at the program counter, or None
    """
    origin: Optional[int] = None
    data: Optional[bytes] = None


# =============================================================================
# Executors
# =============================================================================

def execute_org(command: Command) -> CommandResult:
    """Execute ``.org``: exactly one numeric parameter."""
    params = command.params
    if (
        len(params) != 1
        or isinstance(params[0], Unresolved)
        or not params[0].is_number()
    ):
        raise InvalidCommandError(
            ".org expects a single numeric parameter",
            line=command.line,
        )

    origin = params[0].value
    if not 0 <= origin <= 0xFFFF:
        raise InvalidCommandError(
            f".org address ${origin:X} out of range ($0000 to $FFFF)",
            line=command.line,
        )
    logger.debug("origin set to $%04X", origin)
    return CommandResult(origin=origin)


def execute_byte(command: Command) -> CommandResult:
    """Execute ``.byte`` / ``.byt``: emit each parameter as raw bytes."""
    if not command.params:
        raise InvalidCommandError(
            f".{command.name} expects at least one value",
            line=command.line,
        )

    data = bytearray()
    for param in command.params:
        data.extend(_param_bytes(command, param))
    return CommandResult(data=bytes(data))


def _param_bytes(command: Command, param: Value) -> bytes:
    if isinstance(param, Unresolved):
        raise UndefinedIdentifierError(param.name, line=command.line)

    if param.is_string():
        try:
            return param.value.encode("latin-1")
        except UnicodeEncodeError:
            raise OperandRangeError(
                f"string {param.value!r} contains characters outside 8 bits",
                line=command.line,
            ) from None

    value = param.value
    if not 0 <= value <= 0xFF:
        raise OperandRangeError(
            f"byte value {value} out of range (0 to 255)",
            line=command.line,
        )
    return bytes([value])


# Master list of command executors, keyed by lowercase name
COMMAND_EXECUTORS: dict[str, Callable[[Command], CommandResult]] = {
    "org": execute_org,
    "byte": execute_byte,
    "byt": execute_byte,
}


def execute_command(command: Command) -> CommandResult:
    """
    Execute a directive.

    Args:
        command: The translated directive

    Returns:
        The command's effect on the program counter and output

    Raises:
        InvalidCommandError: Unknown directive or malformed parameters
        UndefinedIdentifierError: A data parameter names no constant
        OperandRangeError: A data value does not fit in a byte
    """
    executor = COMMAND_EXECUTORS.get(command.name.lower())
    if executor is None:
        raise InvalidCommandError(
            f"unknown directive '.{command.name}'",
            line=command.line,
        )
    return executor(command)
