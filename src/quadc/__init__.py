"""
quadc - Compiler from a Small Imperative Language to QUAD Code
==============================================================

This package translates programs written in a small typed imperative
language (int and float variables, arithmetic, boolean conditions,
if/else, while, input and output) into QUAD, a line-oriented
three-address intermediate representation.

Translation is single pass: the parser calls the code generator as it
recognizes each construct, and no syntax tree is built.

Main Components
---------------
- **lexer**: longest-match tokenizer driven by an ordered pattern table
- **parser**: recursive descent parser with statement-level error recovery
- **codegen**: symbol table, temporary and label allocation, QUAD emission
- **expression** / **boolexpr**: typed arithmetic and 0/1 boolean lowering
- **compiler**: the QuadCompiler facade and convenience functions

Quick Start
-----------
    >>> from quadc import compile_quad
    >>> print(compile_quad("a, b: int; { input(a); b = a * 2; output(b); }"), end="")
    IINP a
    IMLT _t0 a 2
    IASN b _t0
    IPRT b
    HALT

Or use the command-line tool:
    $ quadc program.ou -o program.qud
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from quadc.errors import (
    QuadError,
    CompilationError,
    InternalCompilerError,
    LexingError,
    UnrecognizedTokenError,
    ParsingError,
    UnexpectedEOFError,
    UnexpectedTokenError,
    LiteralOutOfRangeError,
    NestingTooDeepError,
    CodeGenError,
    UndeclaredVariableError,
    TypeMismatchError,
    QuadCompilationError,
    TooManyErrors,
    DiagnosticCollector,
)
from quadc.tokens import Token, TokenCategory
from quadc.lexer import Lexer, LexedToken, lex_tokens
from quadc.codegen import CodeGenerator, VarType, Label
from quadc.parser import QuadParser
from quadc.compiler import (
    QuadCompiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
    compile_quad,
    compile_file,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "QuadError",
    "CompilationError",
    "InternalCompilerError",
    "LexingError",
    "UnrecognizedTokenError",
    "ParsingError",
    "UnexpectedEOFError",
    "UnexpectedTokenError",
    "LiteralOutOfRangeError",
    "NestingTooDeepError",
    "CodeGenError",
    "UndeclaredVariableError",
    "TypeMismatchError",
    "QuadCompilationError",
    "TooManyErrors",
    "DiagnosticCollector",
    # Lexing
    "Token",
    "TokenCategory",
    "Lexer",
    "LexedToken",
    "lex_tokens",
    # Code generation
    "CodeGenerator",
    "VarType",
    "Label",
    # Compilation
    "QuadParser",
    "QuadCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    "compile_quad",
    "compile_file",
]
