"""
asm6502 Configuration
=====================

Assembler configuration management. Configuration can come from:
- Default values (defined here)
- Environment variables (``AssemblerConfig.from_env()``)
- Command-line options (the CLI overrides individual fields)

A configuration is plain data; every assembly receives one explicitly and
nothing here is global state.
"""

from dataclasses import dataclass
import logging
import os


# Values accepted as true/false for boolean environment variables
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AssemblerConfig:
    """
    Configuration for one assembler run.

    Attributes:
        warn_on_duplicate_labels: Log a warning when a label is defined
            twice (the last definition still wins)
        max_errors: Syntax errors collected before the parser gives up
        log_level: Level name the CLI configures the root logger with
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # DIAGNOSTICS
    # ═══════════════════════════════════════════════════════════════════════════

    warn_on_duplicate_labels: bool = True
    max_errors: int = 100  # stop collecting syntax errors after this many
    log_level: str = "WARNING"

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            ASM6502_WARN_DUPLICATES: Boolean (1/0, true/false, yes/no, on/off)
            ASM6502_MAX_ERRORS: Positive integer
            ASM6502_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if warn := os.environ.get("ASM6502_WARN_DUPLICATES"):
            warn = warn.strip().lower()
            if warn in _TRUE_VALUES:
                config.warn_on_duplicate_labels = True
            elif warn in _FALSE_VALUES:
                config.warn_on_duplicate_labels = False

        if max_errors := os.environ.get("ASM6502_MAX_ERRORS"):
            try:
                value = int(max_errors)
                if value > 0:
                    config.max_errors = value
            except ValueError:
                pass  # Ignore invalid values

        if level := os.environ.get("ASM6502_LOG_LEVEL"):
            level = level.strip().upper()
            if level in _LOG_LEVELS:
                config.log_level = level

        return config

    def log_level_value(self) -> int:
        """Return the numeric logging level for ``log_level``."""
        return getattr(logging, self.log_level, logging.WARNING)
