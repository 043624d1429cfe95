"""
Constant scope used during translation.

There is a single flat namespace. A name bound with ``name = value`` keeps
its value for the rest of the source unless it is assigned again, in which
case the later assignment wins.
"""

import logging
from typing import Optional

from asm6502.assembler.parsetree import ParseNode

logger = logging.getLogger(__name__)


class Scope:
    """Mapping of constant names to resolved value nodes."""

    def __init__(self):
        self.constants: dict[str, ParseNode] = {}

    def define(self, name: str, value: ParseNode) -> None:
        """
        Bind a constant.

        Args:
            name: Constant name
            value: A resolved number, immediate or string literal node
        """
        if name in self.constants:
            logger.debug("constant '%s' reassigned", name)
        self.constants[name] = value

    def lookup(self, name: str) -> Optional[ParseNode]:
        """Return the value bound to name, or None if it is not a constant."""
        return self.constants.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.constants

    def __len__(self) -> int:
        return len(self.constants)
