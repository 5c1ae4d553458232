"""
QUAD Source Token Model
=======================

This module defines the closed set of lexical categories of the source
language and the ordered pattern table the lexer uses to classify text.

Token Categories
----------------
- Keywords: break, case, default, else, float, if, input, int, output,
  switch, while
- Symbols: ( ) { } , : ; =
- Operators: RELOP (== != < > <= >=), ADDOP (+ -), MULOP (* /),
  OR (||), AND (&&), NOT (!), CAST (static_cast<int>, static_cast<float>)
- Additional: identifiers and numbers

Some keywords (break, case, default, switch) are recognized by the lexer
but never consumed by the grammar.

Pattern Table
-------------
PATTERN_TABLE is an ordered list of (pattern, classification) pairs. A
classification is either a Token or a NonToken (whitespace, comment
delimiters, lexical error markers). Every pattern must match a candidate
string in full. When more than one pattern matches the same candidate, the
entry with the lowest index wins; this is how "int" becomes a keyword
rather than an identifier. Choosing *which* candidate to classify is the
lexer's job (longest match, see lexer.py), not the table's.
"""

import re
from enum import Enum, auto
from typing import Union


# =============================================================================
# Token Enumeration
# =============================================================================

class TokenCategory(Enum):
    """The four variants a Token can belong to."""
    KEYWORD = auto()
    SYMBOL = auto()
    OPERATOR = auto()
    ADDITIONAL = auto()

    def __str__(self) -> str:
        return self.name.capitalize()


class Token(Enum):
    """
    Lexical categories of the source language.

    Each member carries a stable numeric id used for table lookup and
    equality. Ids are grouped by category:

        10-20  keywords
        21-28  symbols
        29-35  operators
        36-37  identifiers and numbers
    """

    # === Keywords ===
    BREAK = 10
    CASE = 11
    DEFAULT = 12
    ELSE = 13
    FLOAT = 14
    IF = 15
    INPUT = 16
    INT = 17
    OUTPUT = 18
    SWITCH = 19
    WHILE = 20

    # === Symbols ===
    RPAREN = 21             # )
    LPAREN = 22             # (
    RCURLY = 23             # }
    LCURLY = 24             # {
    COMMA = 25              # ,
    COLON = 26              # :
    SEMICOLON = 27          # ;
    EQUALS = 28             # =

    # === Operators ===
    RELOP = 29              # == != < > <= >=
    ADDOP = 30              # + -
    MULOP = 31              # * /
    OR = 32                 # ||
    AND = 33                # &&
    NOT = 34                # !
    CAST = 35               # static_cast<int> / static_cast<float>

    # === Additional ===
    IDENT = 36
    NUM = 37

    @property
    def id(self) -> int:
        """Stable numeric id of this token."""
        return self.value

    @property
    def category(self) -> TokenCategory:
        """Return the variant this token belongs to."""
        if self.value <= Token.WHILE.value:
            return TokenCategory.KEYWORD
        if self.value <= Token.EQUALS.value:
            return TokenCategory.SYMBOL
        if self.value <= Token.CAST.value:
            return TokenCategory.OPERATOR
        return TokenCategory.ADDITIONAL

    def __str__(self) -> str:
        """Format as e.g. 'While (Keyword)', 'SemiColon (Symbol)' or 'Ident'."""
        name = _DISPLAY_NAMES.get(self.name, self.name.capitalize())
        if self.category is TokenCategory.ADDITIONAL:
            return name
        return f"{name} ({self.category})"


# Spellings that differ from the capitalized member name. Operators keep
# their upper-case names.
_DISPLAY_NAMES = {
    "RPAREN": "RParen",
    "LPAREN": "LParen",
    "RCURLY": "RCurly",
    "LCURLY": "LCurly",
    "SEMICOLON": "SemiColon",
    "RELOP": "RELOP",
    "ADDOP": "ADDOP",
    "MULOP": "MULOP",
    "OR": "OR",
    "AND": "AND",
    "NOT": "NOT",
    "CAST": "CAST",
}


class NonToken(Enum):
    """Pattern classifications that never reach the parser."""
    SPACES = auto()
    START_COMMENT = auto()
    END_COMMENT = auto()
    ERROR = auto()


Classification = Union[Token, NonToken]


# Tokens that can legally begin a statement. The parser uses these both to
# dispatch statements and to resynchronize after an error.
STATEMENT_STARTERS: tuple[Token, ...] = (
    Token.IDENT,
    Token.INPUT,
    Token.OUTPUT,
    Token.IF,
    Token.WHILE,
    Token.LCURLY,
)

# Tokens that can begin an arithmetic factor.
FACTOR_STARTERS: tuple[Token, ...] = (
    Token.CAST,
    Token.IDENT,
    Token.NUM,
    Token.LPAREN,
)


# =============================================================================
# Pattern Table
# =============================================================================

_RAW_TABLE: list[tuple[str, Classification]] = [
    # Keywords
    (r"break", Token.BREAK),
    (r"case", Token.CASE),
    (r"default", Token.DEFAULT),
    (r"else", Token.ELSE),
    (r"float", Token.FLOAT),
    (r"if", Token.IF),
    (r"input", Token.INPUT),
    (r"int", Token.INT),
    (r"output", Token.OUTPUT),
    (r"switch", Token.SWITCH),
    (r"while", Token.WHILE),

    # Symbols
    (r"\)", Token.RPAREN),
    (r"\(", Token.LPAREN),
    (r"\}", Token.RCURLY),
    (r"\{", Token.LCURLY),
    (r",", Token.COMMA),
    (r":", Token.COLON),
    (r";", Token.SEMICOLON),
    (r"=", Token.EQUALS),

    # Operators
    (r"==|!=|<|>|<=|>=", Token.RELOP),
    (r"\+|-", Token.ADDOP),
    (r"\*|/", Token.MULOP),
    (r"\|\|", Token.OR),
    (r"&&", Token.AND),
    (r"!", Token.NOT),
    (r"static_cast<(int|float)>", Token.CAST),

    # Identifiers and numbers
    (r"[a-zA-Z][_a-zA-Z0-9]*", Token.IDENT),
    (r"[0-9]+(\.[0-9]*)?", Token.NUM),

    # Non-tokens
    (r"[ \t]+", NonToken.SPACES),
    (r"/\*", NonToken.START_COMMENT),
    (r"\*/", NonToken.END_COMMENT),
    (r".", NonToken.ERROR),
    (r"[0-9]+(.[0-9]*)?[a-zA-Z]+", NonToken.ERROR),   # e.g. 12abc
]

PATTERN_TABLE: tuple[tuple[re.Pattern, Classification], ...] = tuple(
    (re.compile(pattern), classification)
    for pattern, classification in _RAW_TABLE
)


def classify(candidate: str) -> Classification | None:
    """
    Classify a candidate string against the pattern table.

    Args:
        candidate: Text that must be matched in full

    Returns:
        The classification of the lowest-index pattern matching the whole
        candidate, or None if no pattern matches.
    """
    for pattern, classification in PATTERN_TABLE:
        if pattern.fullmatch(candidate):
            return classification
    return None
