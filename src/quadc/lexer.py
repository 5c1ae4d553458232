"""
QUAD Source Lexer
=================

This module converts source text into a sequence of LexedToken records
(lexeme, token, line, column) for the parser.

Longest Match by Shrinking
--------------------------
Source is split into lines; tokens never span lines. At each position the
lexer takes the rest of the current line as a candidate and classifies it
against the pattern table (see tokens.py). While nothing matches, the last
character is dropped and the candidate retried. The first candidate that
matches is therefore the longest prefix matching any pattern:

    "count<=10;"   ->  count | <= | 10 | ;
    "static_cast<float>(x)"  ->  static_cast<float> | ( | x | )

Comments
--------
"/*" enters comment mode and "*/" leaves it. While in a comment every
match, including unrecognized characters, is consumed without effect.
Comments do not nest.

Lexical Errors
--------------
An unrecognized character outside a comment is logged, recorded on
Lexer.errors as an UnrecognizedTokenError, and the rest of the line is
abandoned. No replacement token is produced; scanning resumes on the next
line.

Example Usage
-------------
>>> from quadc.lexer import Lexer
>>> for tok in Lexer("a = b + 1;").tokenize():
...     print(tok)
LexedToken('a', Ident, 1:0)
LexedToken('=', Equals (Symbol), 1:2)
LexedToken('b', Ident, 1:4)
LexedToken('+', ADDOP (Operator), 1:6)
LexedToken('1', Num, 1:8)
LexedToken(';', SemiColon (Symbol), 1:9)
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from quadc.errors import UnrecognizedTokenError
from quadc.tokens import NonToken, Token, classify

logger = logging.getLogger(__name__)


# =============================================================================
# Lexed Token
# =============================================================================

@dataclass(frozen=True)
class LexedToken:
    """
    A token together with the source text that produced it.

    Attributes:
        lexeme: The exact matched source text
        token: The Token classification
        line: Line number (1-indexed)
        column: Column of the first character (0-indexed)
    """
    lexeme: str
    token: Token
    line: int
    column: int

    def __repr__(self) -> str:
        return f"LexedToken({self.lexeme!r}, {self.token}, {self.line}:{self.column})"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes QUAD source code.

    Tokens can be pulled one at a time with next_token(), or all at once
    with tokenize() / lex_tokens().

    Usage:
        lexer = Lexer(source_text)
        tokens = list(lexer.tokenize())
        if lexer.errors:
            ...

    Attributes:
        errors: Lexical errors found so far, in order
    """

    def __init__(self, source: str):
        """
        Initialize the lexer with source code.

        Args:
            source: The source text to tokenize
        """
        self._lines = source.splitlines()
        self._line = 0
        self._char = 0
        self._in_comment = False
        self.errors: list[UnrecognizedTokenError] = []

    def tokenize(self) -> Iterator[LexedToken]:
        """
        Generate tokens until the end of the source.

        Yields:
            LexedToken objects in source order
        """
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token

    def next_token(self) -> Optional[LexedToken]:
        """
        Scan and return the next token.

        Returns:
            The next LexedToken, or None once the source is exhausted
        """
        while self._line < len(self._lines):
            line = self._lines[self._line]
            if self._char >= len(line):
                self._new_line()
                continue

            start = self._char
            candidate, classification = self._longest_match(line[start:])
            self._char += len(candidate)

            if classification is NonToken.START_COMMENT:
                self._in_comment = True
            elif classification is NonToken.END_COMMENT:
                self._in_comment = False
            elif self._in_comment or classification is NonToken.SPACES:
                continue
            elif classification is NonToken.ERROR:
                self._report_error(candidate, start)
                self._new_line()
            else:
                return LexedToken(candidate, classification, self._line + 1, start)

        return None

    # =========================================================================
    # Scanning Helpers
    # =========================================================================

    def _new_line(self) -> None:
        self._line += 1
        self._char = 0

    @staticmethod
    def _longest_match(text: str):
        """
        Find the longest prefix of text matching any pattern.

        A single character always matches (at worst as an error marker), so
        the loop terminates before the candidate becomes empty.
        """
        candidate = text
        classification = classify(candidate)
        while classification is None:
            candidate = candidate[:-1]
            classification = classify(candidate)
        return candidate, classification

    def _report_error(self, lexeme: str, column: int) -> None:
        error = UnrecognizedTokenError(lexeme, self._line + 1, column)
        logger.error(
            f"Error at line {self._line + 1}, column {column}: "
            f"unrecognized token {lexeme!r}"
        )
        self.errors.append(error)


# =============================================================================
# Convenience Functions
# =============================================================================

def lex_tokens(source: str) -> list[LexedToken]:
    """
    Tokenize source text in one call.

    Lexical errors are logged and otherwise dropped; construct a Lexer
    directly to inspect them.

    Example:
        >>> [t.lexeme for t in lex_tokens("x: int;")]
        ['x', ':', 'int', ';']
    """
    return list(Lexer(source).tokenize())
