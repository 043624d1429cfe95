"""
asm6502 Error Hierarchy
=======================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Asm6502Error, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Asm6502Error (base)
└── AssemblerError (assembly-related, carries the offending source line)
    ├── AssemblySyntaxError - a line the grammar cannot recognise
    ├── ParseError - batch of syntax errors from one source
    ├── UndefinedIdentifierError - constant defined from an unknown name
    ├── InvalidInstructionError - unknown mnemonic
    ├── InvalidAddressingModeError - mnemonic does not support the mode
    ├── OperandRangeError - operand or branch offset does not fit
    ├── InvalidCommandError - malformed or unknown directive
    ├── DanglingReferenceError - operand never resolves to a label
    ├── InternalConsistencyError - unknown parse/IR node (always a bug)
    └── TooManyErrors - error collector limit reached

Error messages follow this format:
    filename:line: error: description
        source_line_text
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Asm6502Error(Exception):
    """
    Base exception for all asm6502 errors.

        try:
            assembler.assemble_file("program.asm")
        except Asm6502Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Line Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLine:
    """
    A line of assembly source, referenced by parse nodes and IR records.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line_number: Line number (1-indexed)
        assembly: The line with comments and surrounding whitespace removed
        original: The line exactly as it appeared in the source
    """
    filename: str
    line_number: int
    assembly: str
    original: str = ""

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line_number}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Asm6502Error):
    """
    Base exception for all assembly errors.

    Attributes:
        message: The error description
        line: The source line the error refers to (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        line: Optional[SourceLine] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source text, and hint.

        Example output:
            demo.asm:12: error: undefined label 'lop'
                bne lop
            hint: did you mean 'loop'?
        """
        parts = []

        if self.line is not None:
            parts.append(f"{self.line}: error: {self.message}")
            if self.line.assembly:
                parts.append(f"    {self.line.assembly}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    A source line that the line grammar cannot recognise.

    Examples:
        - Invalid character in source
        - Unterminated string literal
        - Operand with a malformed index register
    """
    pass


class ParseError(AssemblerError):
    """
    One or more syntax errors collected while parsing a source.

    The line grammar keeps going after a bad line so that every syntax
    error in the file is reported at once.

    Attributes:
        errors: The individual AssemblySyntaxError instances
    """

    def __init__(self, errors: list[AssemblySyntaxError], report: str = ""):
        self.errors = list(errors)
        count = len(self.errors)
        word = "error" if count == 1 else "errors"
        message = f"parsing failed with {count} syntax {word}"
        if report:
            message = f"{message}:\n\n{report}"
        super().__init__(message)


class UndefinedIdentifierError(AssemblerError):
    """
    A constant was defined from a name that is not itself defined.

    Constants must be fully resolved at the point of definition:

        foo = bar    ; error unless bar was assigned earlier
    """

    def __init__(
        self,
        identifier: str,
        line: Optional[SourceLine] = None,
        hint: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(f"'{identifier}' is not defined", line=line, hint=hint)


class InvalidInstructionError(AssemblerError):
    """Unknown instruction mnemonic."""

    def __init__(self, mnemonic: str, line: Optional[SourceLine] = None):
        self.mnemonic = mnemonic
        super().__init__(f"invalid instruction '{mnemonic}'", line=line)


class InvalidAddressingModeError(AssemblerError):
    """
    Invalid addressing mode for an instruction.

    Raised when a mnemonic is used with an operand shape it has no
    encoding for. For example STA has no immediate form:

        sta #$41   ; error: 'sta' does not support immediate addressing
    """

    def __init__(
        self,
        mnemonic: str,
        mode: str,
        line: Optional[SourceLine] = None,
        valid_modes: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.mode = mode
        self.valid_modes = valid_modes or []

        hint = None
        if self.valid_modes:
            hint = f"{mnemonic} supports: {', '.join(self.valid_modes)}"

        super().__init__(
            f"'{mnemonic}' does not support {mode} addressing",
            line=line,
            hint=hint,
        )


class OperandRangeError(AssemblerError):
    """
    An operand value does not fit its encoding.

    Raised for immediates outside 0..255, relative branch offsets
    outside -128..127, and addresses that do not fit the operand width.
    """
    pass


class InvalidCommandError(AssemblerError):
    """
    Malformed or unknown directive.

    Examples:
        - .org with no argument or a label argument
        - .frob (no such directive)
    """
    pass


class DanglingReferenceError(AssemblerError):
    """
    An instruction operand refers to a label that is never defined.

    The error carries up to three similarly named labels as a hint,
    which usually catches simple typos.
    """

    def __init__(
        self,
        name: str,
        line: Optional[SourceLine] = None,
        local: bool = False,
        similar_labels: Optional[list[str]] = None,
    ):
        self.name = name
        self.local = local
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        kind = "local label" if local else "label"
        shown = f"@{name}" if local else name
        super().__init__(f"undefined {kind} '{shown}'", line=line, hint=hint)


class InternalConsistencyError(AssemblerError):
    """
    An unrecognised parse node or IR record reached a pass.

    This always indicates a defect in the assembler, never in the
    program being assembled.
    """
    pass


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The line grammar uses this to continue after a bad line, collecting
    all syntax errors before reporting them together.

    Example:
        collector = ErrorCollector(max_errors=100)
        try:
            collector.add(AssemblySyntaxError(...))
        except TooManyErrors:
            pass

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.max_errors = max_errors

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"too many errors ({self.max_errors}), stopping")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def report(self) -> str:
        """Format all errors for display, one blank line apart."""
        return "\n\n".join(str(error) for error in self.errors)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()


class TooManyErrors(AssemblerError):
    """
    Raised when too many errors have been encountered.
    """

    def __init__(self, message: str = "too many errors"):
        super().__init__(message)
