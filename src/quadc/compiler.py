"""
quadc Compiler Main Module
==========================

This module provides the main compiler interface. It runs the two stages
of a compilation:

    Source → Lex → Parse + Generate → QUAD code

Usage
-----
Command line:
    $ quadc program.ou -o program.qud

Programmatic:
    >>> from quadc import compile_quad
    >>> print(compile_quad("x: int; { input(x); output(x); }"), end="")
    IINP x
    IPRT x
    HALT

Error Handling
--------------
QuadCompiler.compile() never raises for defects in the program being
compiled. Diagnostics are returned in CompilerResult.diagnostics, in the
order they were detected. compile_quad() is the raising variant.

Lexical errors are reported separately in CompilerResult.lexing_errors and
do not fail the compilation unless CompilerOptions.strict_lexing is set.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from quadc.codegen import CodeGenerator
from quadc.errors import CompilationError, QuadCompilationError, format_report
from quadc.lexer import LexedToken, Lexer
from quadc.parser import QuadParser

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        strict_lexing: Treat lexical errors as diagnostics that fail the
                       compilation. Off by default: the lexer drops the rest
                       of the offending line and parsing carries on.
        max_errors: Stop recovering after this many diagnostics
        source_extension: Extension of source files (directory mode)
        output_extension: Extension of generated QUAD files
    """
    strict_lexing: bool = False
    max_errors: int = 100
    source_extension: str = ".ou"
    output_extension: str = ".qud"


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if no diagnostics were produced
        ir: Generated QUAD code (empty on failure)
        diagnostics: Errors that failed the compilation, in detection order
        lexing_errors: Lexical errors, whether or not they failed it
        token_count: Number of tokens lexed
    """
    filename: str = ""
    success: bool = False
    ir: str = ""
    diagnostics: list[CompilationError] = field(default_factory=list)
    lexing_errors: list[CompilationError] = field(default_factory=list)
    token_count: int = 0

    def report(self) -> str:
        """Format the diagnostics for display."""
        return format_report(self.diagnostics)


class QuadCompiler:
    """
    Compiler from the source language to QUAD code.

    Every call to compile() uses a fresh lexer, code generator and parser,
    so one QuadCompiler can compile any number of sources, and separate
    instances can run concurrently.

    Example:
        compiler = QuadCompiler()
        result = compiler.compile_file("loop.ou")
        if result.success:
            print(result.ir)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()

    def compile(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile source text to QUAD code.

        Args:
            source: Program source text
            filename: Source filename for log messages

        Returns:
            CompilerResult with the code or the diagnostics
        """
        result = CompilerResult(filename=filename)

        tokens, lexing_errors = self._lex(source)
        result.token_count = len(tokens)
        result.lexing_errors = list(lexing_errors)

        if lexing_errors and self.options.strict_lexing:
            result.diagnostics.extend(lexing_errors)

        parser = QuadParser(tokens, CodeGenerator(), self.options.max_errors)
        try:
            ir = parser.parse_program()
        except QuadCompilationError as e:
            result.diagnostics.extend(e.diagnostics)
        else:
            if not result.diagnostics:
                result.ir = ir

        result.success = not result.diagnostics
        if result.success:
            logger.debug(f"{filename}: compiled {result.token_count} tokens")
        else:
            logger.debug(f"{filename}: {len(result.diagnostics)} diagnostic(s)")
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a source file.

        Raises:
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile(source, str(filepath))

    def _lex(self, source: str) -> tuple[list[LexedToken], list[CompilationError]]:
        lexer = Lexer(source)
        tokens = list(lexer.tokenize())
        return tokens, list(lexer.errors)


# =============================================================================
# Token Dump
# =============================================================================

def format_token_dump(tokens: Iterable[LexedToken]) -> str:
    """
    Format tokens one per line as "<lexeme>: <token>".

    Example:
        >>> print(format_token_dump(lex_tokens("x = 1;")), end="")
        x: Ident
        =: Equals (Symbol)
        1: Num
        ;: SemiColon (Symbol)
    """
    return "".join(f"{tok.lexeme}: {tok.token}\n" for tok in tokens)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> CompilerResult:
    """Compile source text, returning the CompilerResult."""
    return QuadCompiler(options).compile(source, filename)


def compile_quad(source: str, options: Optional[CompilerOptions] = None) -> str:
    """
    Compile source text to QUAD code.

    This is the primary high-level interface.

    Returns:
        Generated QUAD code

    Raises:
        QuadCompilationError: If compilation produced any diagnostic

    Example:
        >>> print(compile_quad("x: int; { x = 2 + 2 * 3 + 1; }"), end="")
        IMLT _t0 2 3
        IADD _t1 _t0 1
        IADD _t2 2 _t1
        IASN x _t2
        HALT
    """
    result = compile_source(source, options=options)
    if not result.success:
        raise QuadCompilationError(result.diagnostics)
    return result.ir


def compile_file(
    filepath: str,
    output_path: Optional[str] = None,
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile a source file to QUAD code.

    Args:
        filepath: Path to the source file
        output_path: Optional path to write the code to

    Returns:
        Generated QUAD code

    Raises:
        QuadCompilationError: If compilation produced any diagnostic
        FileNotFoundError: If the source file does not exist
    """
    result = QuadCompiler(options).compile_file(filepath)
    if not result.success:
        raise QuadCompilationError(result.diagnostics)

    if output_path:
        Path(output_path).write_text(result.ir, encoding="utf-8")

    return result.ir
