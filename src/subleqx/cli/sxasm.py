"""
sxasm - Subleqx Assembler Command-Line Interface
================================================

This module implements the command-line interface for the Subleqx
assembler.

Usage Examples
--------------
Basic assembly:
    $ sxasm loop.sxa

With output file and base address:
    $ sxasm loop.sxa -o loop.bin -b 0x100

Generate all output files:
    $ sxasm loop.sxa -o loop.bin -l loop.lst -s loop.sym

Verbose mode:
    $ sxasm -v loop.sxa

Environment
-----------
SUBLEQX_BASE_ADDRESS and SUBLEQX_HEADER_MODE provide defaults for
--base-address and --header-mode.
"""

from pathlib import Path
from typing import Optional
import logging

import click

from subleqx import __version__
from subleqx.assembler import Assembler
from subleqx.assembler.expressions import parse_integer
from subleqx.cli.errors import handle_cli_exception
from subleqx.config import AssemblerConfig, HeaderMode, validate_base_address
from subleqx.errors import SubleqxError

logger = logging.getLogger(__name__)


def _parse_base_address(ctx: click.Context, param: click.Parameter,
                        value: Optional[str]) -> Optional[int]:
    """Parse --base-address with the assembler's literal grammar."""
    if value is None:
        return None
    try:
        return validate_base_address(parse_integer(value.strip()))
    except SubleqxError as e:
        raise click.BadParameter(e.message)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
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
    help="Output image file (default: input.bin)",
)
@click.option(
    "-b", "--base-address",
    type=str,
    default=None,
    callback=_parse_base_address,
    help="Initial instruction pointer in bits (decimal or 0x hex). Default: 0",
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
    "--header-mode",
    type=click.Choice([m.value for m in HeaderMode], case_sensitive=False),
    default=None,
    help="'once': the first line declares aw, dwm1w, dwm1 for the whole file. "
         "'per-instruction': every instruction line declares them. Default: once",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sxasm")
def main(
    input_file: Path,
    output: Optional[Path],
    base_address: Optional[int],
    listing: Optional[Path],
    symbols: Optional[Path],
    header_mode: Optional[str],
    verbose: bool,
) -> None:
    """
    Assemble SUBLEQX source code into a bit-packed image.

    INPUT_FILE is the assembly source file (.sxa) to assemble.

    Nothing is written when assembly fails.

    \b
    Examples:
        sxasm loop.sxa              # Outputs loop.bin
        sxasm loop.sxa -o out.bin   # Specify output file
        sxasm -b 0x100 loop.sxa     # Start addresses at bit 256
        sxasm loop.sxa -l loop.lst  # Also write a listing
    """
    setup_logging(verbose)
    output_file = output if output is not None else input_file.with_suffix(".bin")

    try:
        config = AssemblerConfig.from_env()
        asm = Assembler(
            config=config,
            base_address=base_address,
            header_mode=HeaderMode(header_mode.lower()) if header_mode else None,
        )
        logger.debug(f"Configuration: {asm.config}")

        if verbose:
            click.echo(f"Assembling {input_file}...")
            click.echo(f"Base address: {asm.config.base_address}")
            click.echo(f"Header mode: {asm.config.header_mode.value}")

        asm.assemble_file(input_file)

        asm.write_binary(output_file)
        if verbose:
            click.echo(f"Wrote {len(asm.get_code())} bytes to {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            header = asm.get_header()
            if header is not None:
                click.echo(
                    f"Header: aw={header.address_width} "
                    f"dwm1w={header.word_width_bits} "
                    f"dwm1={header.word_size_minus_one}"
                )
            click.echo(
                f"Assembly complete: {asm.get_bit_length()} bits "
                f"({len(asm.get_code())} bytes)"
            )
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
