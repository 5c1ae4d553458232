"""
quadc Error Hierarchy
=====================

This module defines the diagnostic taxonomy for the compiler. Every
user-facing diagnostic is a CompilationError carrying the source position
(1-based line, 0-based column) where it was detected.

Exception Hierarchy
-------------------
QuadError (base)
├── CompilationError - a single positioned diagnostic
│   ├── InternalCompilerError - compiler bug, not a user error
│   ├── LexingError - malformed character or token
│   │   └── UnrecognizedTokenError
│   ├── ParsingError - grammar violation
│   │   ├── UnexpectedEOFError
│   │   ├── UnexpectedTokenError
│   │   ├── LiteralOutOfRangeError
│   │   └── NestingTooDeepError
│   └── CodeGenError - semantic error
│       ├── UndeclaredVariableError
│       └── TypeMismatchError
├── QuadCompilationError - aggregate of all diagnostics from one compile
└── TooManyErrors - the diagnostic limit was reached

Inside the compiler, diagnostics are raised and caught at the statement
recovery boundary of the parser. Callers of QuadCompiler.compile() receive
them as data in CompilerResult.diagnostics.

Diagnostic Format
-----------------
    [Line 4, Column 8]:
      Code Generation Error: Undeclared Variable Error
        Use of undeclared variable: cnt
        Declared variables: count, total
        Fix this error by declaring the variable at the beginning of the program.
"""

from typing import Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from quadc.codegen import CodeReference, VarType
    from quadc.tokens import Token


# =============================================================================
# Base Exception Classes
# =============================================================================

class QuadError(Exception):
    """
    Base exception for all quadc errors.

    Allows callers to catch every compiler error with a single clause:

        try:
            ir = compile_quad(source)
        except QuadError as e:
            print(e)
    """
    pass


class CompilationError(QuadError):
    """
    A single diagnostic with source position.

    Subclasses set `category` and implement details(). The position may be
    attached after construction with locate(), because the code generator
    raises semantic errors without knowing where the parser is.

    Attributes:
        line: 1-based line of the offending token (0 if unknown)
        column: 0-based column of the offending token (0 if unknown)
    """

    category = "Compilation Error"

    def __init__(self, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        super().__init__(self.details())

    def locate(self, line: int, column: int) -> "CompilationError":
        """Attach a source position if none is set yet. Returns self."""
        if self.line is None:
            self.line = line
            self.column = column
        return self

    def details(self) -> str:
        """Return the human-readable description (without position)."""
        return ""

    def __str__(self) -> str:
        line = self.line if self.line is not None else 0
        column = self.column if self.column is not None else 0
        return f"[Line {line}, Column {column}]:\n  {self.category}: {self.details()}"


class QuadCompilationError(QuadError):
    """
    Aggregate error raised when a compilation produced diagnostics.

    Attributes:
        diagnostics: The diagnostics in order of detection
    """

    def __init__(self, diagnostics: Sequence[CompilationError]):
        self.diagnostics = list(diagnostics)
        super().__init__(format_report(self.diagnostics))


# =============================================================================
# Internal Errors
# =============================================================================

class InternalCompilerError(CompilationError):
    """
    Invariant violation inside the compiler itself.

    Example: a token classified as CAST whose lexeme is neither
    static_cast<int> nor static_cast<float>.
    """

    category = "Internal error"

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None):
        self.message = message
        super().__init__(line, column)

    def details(self) -> str:
        return self.message


# =============================================================================
# Lexing Errors
# =============================================================================

class LexingError(CompilationError):
    """Malformed character or token in the source text."""

    category = "Lexing Error"


class UnrecognizedTokenError(LexingError):
    """
    No token pattern matches the text at this position.

    The lexer abandons the rest of the line after reporting this.
    """

    def __init__(self, lexeme: str, line: Optional[int] = None,
                 column: Optional[int] = None):
        self.lexeme = lexeme
        super().__init__(line, column)

    def details(self) -> str:
        return f"Unrecognized Token Error\n    Unrecognized token: {self.lexeme!r}"


# =============================================================================
# Parsing Errors
# =============================================================================

class ParsingError(CompilationError):
    """Grammar violation."""

    category = "Parsing Error"


class UnexpectedEOFError(ParsingError):
    """The token stream ended while the grammar expected more input."""

    def details(self) -> str:
        return "Unexpected EOF Error\n    Unexpected reach of EOF"


class UnexpectedTokenError(ParsingError):
    """
    The lookahead token does not match any expected alternative.

    Attributes:
        expected: Every token that would have been accepted here
        found: The token actually found
        lexeme: The source text of the token found
    """

    def __init__(
        self,
        expected: Sequence["Token"],
        found: "Token",
        lexeme: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.expected = tuple(expected)
        self.found = found
        self.lexeme = lexeme
        super().__init__(line, column)

    def details(self) -> str:
        lines = ["Unexpected Token Error",
                 "    Expected one of the following tokens:"]
        lines.extend(f"\t {token}" for token in self.expected)
        lines.append("    Found:")
        if self.lexeme is not None:
            lines.append(f"\t {self.found} {self.lexeme!r}")
        else:
            lines.append(f"\t {self.found}")
        return "\n".join(lines)


class LiteralOutOfRangeError(ParsingError):
    """
    A numeric literal cannot be represented.

    Integer literals must fit in a signed 32-bit integer. Float literals must
    be finite as doubles.
    """

    def __init__(self, lexeme: str, line: Optional[int] = None,
                 column: Optional[int] = None):
        self.lexeme = lexeme
        super().__init__(line, column)

    def details(self) -> str:
        if "." in self.lexeme:
            reason = f"Float literal {self.lexeme} is too large"
        else:
            reason = f"Integer literal {self.lexeme} does not fit in 32 bits"
        return f"Literal Out Of Range Error\n    {reason}"


class NestingTooDeepError(ParsingError):
    """Parentheses or blocks nest deeper than the parser's recursion allows."""

    def details(self) -> str:
        return (
            "Nesting Too Deep Error\n"
            "    Expression or block nesting exceeds the recursion limit"
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(CompilationError):
    """Semantic error detected while generating code."""

    category = "Code Generation Error"


class UndeclaredVariableError(CodeGenError):
    """
    Reference to a variable that was never declared.

    Carries every name currently in the symbol table so the report can list
    candidates.
    """

    def __init__(
        self,
        name: str,
        known_names: Sequence[str] = (),
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.name = name
        self.known_names = tuple(known_names)
        super().__init__(line, column)

    def details(self) -> str:
        known = ", ".join(self.known_names)
        return (
            "Undeclared Variable Error\n"
            f"    Use of undeclared variable: {self.name}\n"
            f"    Declared variables: {known}\n"
            "    Fix this error by declaring the variable at the beginning of the program."
        )


class TypeMismatchError(CodeGenError):
    """
    Assignment of a value whose type differs from the target's declared type.

    Assignment performs no implicit conversion; the program must cast.
    """

    def __init__(
        self,
        expected_ref: "CodeReference",
        expected_type: "VarType",
        found_ref: "CodeReference",
        found_type: "VarType",
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.expected_ref = expected_ref
        self.expected_type = expected_type
        self.found_ref = found_ref
        self.found_type = found_type
        super().__init__(line, column)

    def details(self) -> str:
        return (
            "Provided Incorrect type in Assignment Error\n"
            f"    Expected type {self.expected_type} because {self.expected_ref} "
            f"has type {self.expected_type}\n"
            f"    But found {self.found_ref} with type {self.found_type}\n"
            f"    Fix this error by casting {self.found_ref} to {self.expected_type} "
            f"using static_cast<{self.expected_type}>."
        )


# =============================================================================
# Error Collection
# =============================================================================

def format_report(diagnostics: Sequence[CompilationError]) -> str:
    """Format diagnostics one after another, followed by a count."""
    lines = []
    for diagnostic in diagnostics:
        lines.append(str(diagnostic))
        lines.append("")

    word = "error" if len(diagnostics) == 1 else "errors"
    lines.append(f"{len(diagnostics)} {word}")
    return "\n".join(lines)


class DiagnosticCollector:
    """
    Collects diagnostics in order of detection.

    The parser adds one diagnostic per failed statement and keeps going, so
    a single compile can report several independent defects.

    Example:
        collector = DiagnosticCollector(max_errors=100)

        try:
            parse_statement()
        except CompilationError as e:
            collector.add(e)    # raises TooManyErrors at the limit

        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the collector.

        Args:
            max_errors: Number of diagnostics after which should_stop() is True
        """
        self.errors: list[CompilationError] = []
        self.max_errors = max_errors

    def add(self, error: CompilationError) -> None:
        """
        Add a diagnostic to the collection.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        if self.should_stop():
            raise TooManyErrors(self.max_errors)

    def extend(self, errors: Sequence[CompilationError]) -> None:
        """Add diagnostics without checking max_errors."""
        self.errors.extend(errors)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True once max_errors diagnostics were collected."""
        return len(self.errors) >= self.max_errors

    def report(self) -> str:
        return format_report(self.errors)

    def raise_if_errors(self) -> None:
        """Raise a QuadCompilationError if any diagnostics were collected."""
        if self.has_errors():
            raise QuadCompilationError(self.errors)


class TooManyErrors(QuadError):
    """
    Raised when the diagnostic limit has been reached.

    Stops the parser from recovering indefinitely on badly broken input.
    """

    def __init__(self, max_errors: int):
        self.max_errors = max_errors
        super().__init__(f"Too many errors ({max_errors}), stopping")
