"""
quadc - QUAD Compiler Command-Line Interface
============================================

This module implements the command-line interface for the compiler.

Usage Examples
--------------
Basic compilation (writes program.qud):
    $ quadc program.ou

With output file:
    $ quadc program.ou -o out.qud

Compile every .ou file under a directory:
    $ quadc samples/
    $ quadc samples/ -o build/

Dump the token stream instead of compiling (writes program.tok):
    $ quadc --tokens program.ou

Verbose mode:
    $ quadc -v program.ou
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from quadc import __version__
from quadc.cli.errors import ExitCode, exit_code_for, handle_cli_exception
from quadc.compiler import CompilerOptions, QuadCompiler, format_token_dump
from quadc.errors import QuadCompilationError
from quadc.lexer import lex_tokens

logger = logging.getLogger(__name__)

TOKEN_DUMP_EXTENSION = ".tok"


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# Single File Processing
# =============================================================================

def process_file(
    compiler: QuadCompiler,
    source_path: Path,
    output_path: Path,
    dump_tokens: bool = False,
) -> ExitCode:
    """
    Compile one file (or dump its tokens) and write the result.

    Returns:
        SUCCESS, or the exit code the source's diagnostics map to

    Raises:
        OSError: If the source cannot be read or the output written
        UnicodeDecodeError: If the source is not valid UTF-8
    """
    source = source_path.read_text(encoding="utf-8")

    if dump_tokens:
        output_path.write_text(format_token_dump(lex_tokens(source)), encoding="utf-8")
        click.echo(f"Tokenized {source_path} -> {output_path}")
        return ExitCode.SUCCESS

    result = compiler.compile(source, str(source_path))
    if not result.success:
        click.echo(f"{source_path}:", err=True)
        click.echo(result.report(), err=True)
        return exit_code_for(QuadCompilationError(result.diagnostics))

    output_path.write_text(result.ir, encoding="utf-8")
    logger.debug(f"Wrote {len(result.ir)} bytes to {output_path}")
    click.echo(f"Compiled {source_path} -> {output_path}")
    return ExitCode.SUCCESS


def default_output_path(source_path: Path, options: CompilerOptions, dump_tokens: bool) -> Path:
    """Sibling of the source with the output (or token dump) extension."""
    suffix = TOKEN_DUMP_EXTENSION if dump_tokens else options.output_extension
    return source_path.with_suffix(suffix)


# =============================================================================
# Directory Processing
# =============================================================================

def process_directory(
    compiler: QuadCompiler,
    directory: Path,
    output_dir: Optional[Path] = None,
    dump_tokens: bool = False,
) -> tuple[int, int, ExitCode]:
    """
    Compile every source file under a directory tree.

    Outputs go next to their sources, or into output_dir mirroring the
    tree's layout. Files without the source extension are skipped. A file
    that cannot be read or decoded counts as a failure and the walk goes on.

    Returns:
        (files processed, failures, highest exit code among the files)
    """
    options = compiler.options
    processed = 0
    failures = 0
    worst = ExitCode.SUCCESS

    for path in sorted(directory.rglob("*")):
        if not path.is_file():
            continue
        if path.suffix != options.source_extension:
            logger.warning(f"Skipping {path}: not a {options.source_extension} file")
            continue

        target = default_output_path(path, options, dump_tokens)
        if output_dir is not None:
            target = output_dir / target.relative_to(directory)
            target.parent.mkdir(parents=True, exist_ok=True)

        processed += 1
        try:
            code = process_file(compiler, path, target, dump_tokens)
        except (OSError, UnicodeDecodeError) as e:
            click.echo(f"{path}: {e}", err=True)
            code = ExitCode.BUILD_ERROR

        if code is not ExitCode.SUCCESS:
            failures += 1
            worst = max(worst, code)

    return processed, failures, worst


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    help="Output file, or output directory when INPUT_PATH is a directory",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Write the token stream (.tok) instead of QUAD code",
)
@click.option(
    "--strict-lexing",
    is_flag=True,
    help="Fail compilation on unrecognized tokens",
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=1),
    default=100,
    show_default=True,
    help="Stop after this many diagnostics per file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="quadc")
def main(
    input_path: Path,
    output: Optional[Path],
    tokens: bool,
    strict_lexing: bool,
    max_errors: int,
    verbose: bool,
) -> None:
    """
    Compile source programs to QUAD code.

    INPUT_PATH is a source file (.ou) or a directory, which is searched
    recursively for source files.

    \b
    Examples:
        quadc prog.ou                # Outputs prog.qud
        quadc prog.ou -o out.qud     # Specify output file
        quadc samples/ -o build/     # Compile a whole tree
        quadc --tokens prog.ou       # Outputs prog.tok
    """
    setup_logging(verbose)

    options = CompilerOptions(strict_lexing=strict_lexing, max_errors=max_errors)
    compiler = QuadCompiler(options)

    try:
        if input_path.is_dir():
            if output is not None and output.exists() and not output.is_dir():
                raise click.BadParameter(
                    f"{output} is not a directory", param_hint="'-o' / '--output'"
                )

            processed, failures, code = process_directory(
                compiler, input_path, output, tokens
            )
            click.echo(f"{processed} file(s) processed, {failures} failed")
            if code is not ExitCode.SUCCESS:
                sys.exit(code)
            return

        if output is None:
            output = default_output_path(input_path, options, tokens)

        code = process_file(compiler, input_path, output, tokens)
        if code is not ExitCode.SUCCESS:
            sys.exit(code)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
