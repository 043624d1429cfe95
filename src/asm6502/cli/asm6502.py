"""
asm6502 - 6502 Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the 6502 assembler.

Usage Examples
--------------
Basic assembly (writes demo.bin):
    $ asm6502 demo.asm

With output file:
    $ asm6502 demo.asm -o demo.bin

Generate all output files:
    $ asm6502 demo.asm -o demo.bin -x demo.hex -l demo.lst -s demo.sym

Print the code as hex instead of writing a binary:
    $ asm6502 demo.asm --print-hex

Verbose mode:
    $ asm6502 -v demo.asm

Environment
-----------
ASM6502_WARN_DUPLICATES, ASM6502_MAX_ERRORS and ASM6502_LOG_LEVEL are read
as defaults (see ``asm6502.config``).
"""

import logging
from pathlib import Path
from typing import Optional

import click

from asm6502 import __version__
from asm6502.assembler import Assembler
from asm6502.cli.errors import handle_cli_exception
from asm6502.config import AssemblerConfig

logger = logging.getLogger(__name__)


def setup_logging(config: AssemblerConfig, verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else config.log_level_value()
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output binary file (default: input.bin)",
)
@click.option(
    "-x", "--hex", "hex_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the code as a hex string",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--print-hex",
    is_flag=True,
    help="Print the code as hex to stdout instead of writing a binary "
         "(unless -o is also given)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="asm6502")
def main(
    input_file: Path,
    output: Optional[Path],
    hex_file: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    print_hex: bool,
    verbose: bool,
) -> None:
    """
    Assemble 6502 source code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    \b
    Examples:
        asm6502 demo.asm               # Outputs demo.bin
        asm6502 demo.asm -o out.bin    # Specify output file
        asm6502 demo.asm --print-hex   # Print hex, write nothing
    """
    config = AssemblerConfig.from_env()
    setup_logging(config, verbose)

    asm = Assembler(config)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)

        if print_hex:
            click.echo(asm.to_hex_string())

        if output is not None or not print_hex:
            output_file = output if output is not None else input_file.with_suffix(".bin")
            asm.write_binary(output_file)
            if verbose:
                click.echo(f"Wrote {len(asm.get_code())} bytes to {output_file}")

        # Optional auxiliary files
        if hex_file:
            asm.write_hex(hex_file)
            if verbose:
                click.echo(f"Wrote hex to {hex_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            code = asm.get_code()
            segments = asm.get_segments()
            click.echo(f"Assembly complete: {len(code)} bytes in {len(segments)} segment(s)")
            for origin, data in segments:
                click.echo(f"  ${origin:04X}-${origin + len(data) - 1:04X} ({len(data)} bytes)")
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
