"""
toyasm - Toy CPU Assembler Command-Line Interface
=================================================

Usage Examples
--------------
Print the assembled bytes as hex:
    $ toyasm program.asm

Write raw binary output:
    $ toyasm program.asm -o program.bin

Dump every pipeline stage (tokens, records, bytes):
    $ toyasm --tokens --instructions program.asm

Start labels at the CPU's entry point:
    $ toyasm --origin '$10' program.asm
"""

from pathlib import Path
from typing import Optional
import logging

import click

from toyasm import __version__
from toyasm.assembler import Assembler
from toyasm.cli.errors import handle_cli_exception
from toyasm.config import MAX_ORIGIN, AssemblerConfig, parse_number


def _parse_origin(ctx, param, value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        origin = parse_number(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a number") from None
    if origin > MAX_ORIGIN:
        raise click.BadParameter(f"'{value}' does not fit 16 bits")
    return origin


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
    help="Write raw binary to this file instead of printing",
)
@click.option(
    "--origin",
    callback=_parse_origin,
    help="Offset of the first instruction (decimal, $hex or 0xhex). Default: 0",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(["hex", "decimal"], case_sensitive=False),
    default="hex",
    show_default=True,
    help="How printed bytes are rendered",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the lexer's tokens before the bytes",
)
@click.option(
    "--instructions",
    is_flag=True,
    help="Print the resolver's records before the bytes",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat rebinding a variable as an error",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging on stderr)",
)
@click.version_option(version=__version__, prog_name="toyasm")
def main(
    input_file: Path,
    output: Optional[Path],
    origin: Optional[int],
    output_format: str,
    tokens: bool,
    instructions: bool,
    strict: bool,
    verbose: bool,
) -> None:
    """
    Assemble toy CPU source code into bytes.

    INPUT_FILE is the assembly source file to assemble.

    \b
    Examples:
        toyasm prog.asm                # Print bytes as hex
        toyasm prog.asm -o prog.bin    # Write raw binary
        toyasm --tokens prog.asm       # Show the token stream too
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = AssemblerConfig.from_env()
    config.filename = str(input_file)
    if origin is not None:
        config.origin = origin
    if strict:
        config.strict_redefinition = True

    asm = Assembler(config)

    try:
        source = input_file.read_text()

        if tokens:
            click.echo("TOKENS...")
            for token in asm.tokenize(source):
                click.echo(repr(token))

        if instructions:
            click.echo("INSTRUCTIONS...")
            for record in asm.resolve(source):
                click.echo(repr(record))

        code = asm.assemble(source)

        if output is not None:
            output.write_bytes(code)
            if verbose:
                click.echo(f"Wrote {len(code)} bytes to {output}")
            return

        if tokens or instructions:
            click.echo("BYTES...")
        if output_format.lower() == "decimal":
            click.echo(" ".join(str(byte) for byte in code))
        else:
            click.echo(" ".join(f"{byte:02X}" for byte in code))

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
