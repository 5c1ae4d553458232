"""
QUAD Recursive Descent Parser
=============================

This module implements a single-pass, syntax-directed translator: a
recursive descent parser with one token of lookahead that calls the code
generator and expression translators as it recognizes each construct. No
AST is built; QUAD code is accumulated directly into one output buffer.

Grammar (EBNF)
--------------
program         ::= declarations stmt_block
declarations    ::= (id_list ':' type ';')*
id_list         ::= ID (',' ID)*
type            ::= 'int' | 'float'
stmt_block      ::= '{' stmt* '}'
stmt            ::= assignment | input_stmt | output_stmt
                  | if_stmt | while_stmt | stmt_block
assignment      ::= ID '=' expression ';'
input_stmt      ::= 'input' '(' ID ')' ';'
output_stmt     ::= 'output' '(' expression ')' ';'
if_stmt         ::= 'if' '(' boolexpr ')' stmt 'else' stmt
while_stmt      ::= 'while' '(' boolexpr ')' stmt

expression      ::= term (ADDOP expression)?
term            ::= factor (MULOP term)?
factor          ::= '(' expression ')' | CAST '(' expression ')' | ID | NUM
boolexpr        ::= boolterm (OR boolexpr)?
boolterm        ::= boolfactor (AND boolterm)?
boolfactor      ::= NOT '(' boolexpr ')' | expression RELOP expression

The binary rules are right-recursive, so chains of the same precedence
group to the right: 1 - 2 - 3 is 1 - (2 - 3).

Control Flow Lowering
---------------------
    if:     <boolexpr>            while:  L_loop:
            JMPZ L_else r                 <boolexpr>
            <then stmt>                   JMPZ L_break r
            JUMP L_post                   <body stmt>
            L_else:                       JUMP L_loop
            <else stmt>                   L_break:
            L_post:

Error Recovery
--------------
Only the statement list recovers. When a statement fails, its diagnostic is
recorded and parsing resumes at the next token that can start a statement.
Failures in declarations or below a statement are fatal to that statement
(and, for declarations, to the whole parse).

Example Usage
-------------
>>> from quadc.lexer import lex_tokens
>>> from quadc.parser import QuadParser
>>> parser = QuadParser(lex_tokens("x: int; { x = 1 + 2; output(x); }"))
>>> print(parser.parse_program(), end="")
IADD _t0 1 2
IASN x _t0
IPRT x
HALT
"""

import logging
import math
from typing import Callable, Optional, Sequence, TypeVar

from quadc.boolexpr import BoolExpr, logical_and, logical_not, logical_or, relop
from quadc.codegen import BinaryOp, CodeGenerator, RelOp, VarType
from quadc.errors import (
    CompilationError,
    DiagnosticCollector,
    InternalCompilerError,
    LiteralOutOfRangeError,
    NestingTooDeepError,
    TooManyErrors,
    UnexpectedEOFError,
    UnexpectedTokenError,
)
from quadc.expression import Expression, binary_op, cast
from quadc.lexer import LexedToken, lex_tokens
from quadc.tokens import FACTOR_STARTERS, STATEMENT_STARTERS, Token

logger = logging.getLogger(__name__)

T = TypeVar("T")

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

CAST_TYPES = {
    "static_cast<int>": VarType.INT,
    "static_cast<float>": VarType.FLOAT,
}


class QuadParser:
    """
    Recursive descent parser and translator for QUAD source.

    Each parser owns the CodeGenerator (the compilation context) for one
    compilation. Use a fresh parser for every source unit.

    Attributes:
        tokens: The token stream being parsed
        codegen: Symbol table, counters and instruction emitter
    """

    def __init__(
        self,
        tokens: Sequence[LexedToken],
        codegen: Optional[CodeGenerator] = None,
        max_errors: int = 100,
    ):
        """
        Initialize the parser.

        Args:
            tokens: Tokens from the lexer
            codegen: Code generator to use (a new one if None)
            max_errors: Stop recovering after this many diagnostics
        """
        self.tokens = list(tokens)
        self.codegen = codegen or CodeGenerator()

        self._pos = 0
        self._output: list[str] = []
        self._errors = DiagnosticCollector(max_errors)

        # Position of the most recently inspected token, used for diagnostics
        self._last_line = 1
        self._last_column = 0

    @property
    def errors(self) -> list[CompilationError]:
        """Diagnostics collected so far, in order of detection."""
        return list(self._errors.errors)

    # =========================================================================
    # Program
    # =========================================================================

    def parse_program(self) -> str:
        """
        Parse a whole program and return its QUAD code.

        Returns:
            The generated code, ending with HALT

        Raises:
            QuadCompilationError: If any diagnostic was collected
        """
        try:
            self._parse_program_body()
        except TooManyErrors as e:
            logger.warning(str(e))
        except RecursionError:
            # Recorded even past max_errors
            self._errors.extend(
                [NestingTooDeepError(self._last_line, self._last_column)]
            )

        self._emit(self.codegen.gen_halt())

        if self._pos < len(self.tokens):
            extra = self.tokens[self._pos]
            logger.warning(
                f"Ignoring tokens after the program block, starting with "
                f"{extra.lexeme!r} at line {extra.line}"
            )

        self._errors.raise_if_errors()
        return "".join(self._output)

    def _parse_program_body(self) -> None:
        try:
            self.parse_declarations()
        except CompilationError as e:
            self._record(e)
            return

        try:
            self.parse_stmt_block()
        except CompilationError as e:
            self._record(e)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _lookahead(self) -> LexedToken:
        """
        Return the current token without consuming it.

        Raises:
            UnexpectedEOFError: If the token stream is exhausted
        """
        if self._pos >= len(self.tokens):
            raise UnexpectedEOFError(self._last_line, self._last_column)

        token = self.tokens[self._pos]
        self._last_line = token.line
        self._last_column = token.column
        return token

    def _check(self, token: Token) -> bool:
        """Check if the current token is `token`. False at end of input."""
        try:
            return self._lookahead().token is token
        except UnexpectedEOFError:
            return False

    def _match(self, token: Token) -> str:
        """
        Consume the current token if it is `token`.

        Returns:
            The consumed token's lexeme

        Raises:
            UnexpectedTokenError: If the current token is something else
            UnexpectedEOFError: If the token stream is exhausted
        """
        lookahead = self._lookahead()
        if lookahead.token is not token:
            raise self._unexpected((token,), lookahead)
        self._pos += 1
        return lookahead.lexeme

    def _accept(self, token: Token) -> Optional[str]:
        """Consume and return the current lexeme if it is `token`, else None."""
        if self._check(token):
            return self._match(token)
        return None

    def _unexpected(self, expected: Sequence[Token], found: LexedToken) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            expected, found.token, found.lexeme, self._last_line, self._last_column
        )

    def _generate(self, fn: Callable[..., T], *args) -> T:
        """Call a code generation step, positioning any diagnostic it raises."""
        try:
            return fn(*args)
        except CompilationError as e:
            raise e.locate(self._last_line, self._last_column)

    def _emit(self, code: str) -> None:
        self._output.append(code)

    def _record(self, error: CompilationError) -> None:
        error.locate(self._last_line, self._last_column)
        logger.debug(f"Recorded diagnostic at line {error.line}, column {error.column}")
        self._errors.add(error)

    # =========================================================================
    # Declarations
    # =========================================================================

    def parse_declarations(self) -> None:
        """declarations ::= (id_list ':' type ';')*"""
        while self._check(Token.IDENT):
            self._parse_declaration()

    def _parse_declaration(self) -> None:
        names = self._parse_id_list()
        self._match(Token.COLON)
        var_type = self._parse_type()
        for name in names:
            logger.debug(f"Declaring {name}: {var_type}")
            self.codegen.register_variable(name, var_type)
        self._match(Token.SEMICOLON)

    def _parse_id_list(self) -> list[str]:
        names = [self._match(Token.IDENT)]
        while self._accept(Token.COMMA) is not None:
            names.append(self._match(Token.IDENT))
        return names

    def _parse_type(self) -> VarType:
        lookahead = self._lookahead()
        if lookahead.token is Token.INT:
            self._match(Token.INT)
            return VarType.INT
        if lookahead.token is Token.FLOAT:
            self._match(Token.FLOAT)
            return VarType.FLOAT
        raise self._unexpected((Token.INT, Token.FLOAT), lookahead)

    # =========================================================================
    # Statements
    # =========================================================================

    def parse_stmt_block(self) -> None:
        """stmt_block ::= '{' stmt* '}'"""
        self._match(Token.LCURLY)
        self._parse_stmt_list()
        self._match(Token.RCURLY)

    def _parse_stmt_list(self) -> None:
        while not self._check(Token.RCURLY):
            try:
                self.parse_stmt()
            except CompilationError as error:
                resume = self._find_next_stmt()
                if resume is None:
                    raise
                logger.debug(
                    f"Recovering from statement error: skipping {resume - self._pos} token(s)"
                )
                self._pos = resume
                self._record(error)

    def _find_next_stmt(self) -> Optional[int]:
        """Index of the next token that can start a statement, if any."""
        for index in range(self._pos, len(self.tokens)):
            if self.tokens[index].token in STATEMENT_STARTERS:
                return index
        return None

    def parse_stmt(self) -> None:
        """stmt ::= assignment | input | output | if | while | stmt_block"""
        lookahead = self._lookahead()
        token = lookahead.token

        if token is Token.IDENT:
            self._parse_assignment_stmt()
        elif token is Token.INPUT:
            self._parse_input_stmt()
        elif token is Token.OUTPUT:
            self._parse_output_stmt()
        elif token is Token.IF:
            self._parse_if_stmt()
        elif token is Token.WHILE:
            self._parse_while_stmt()
        elif token is Token.LCURLY:
            self.parse_stmt_block()
        else:
            raise self._unexpected(STATEMENT_STARTERS, lookahead)

    def _parse_assignment_stmt(self) -> None:
        """ID '=' expression ';'"""
        target = self._parse_id_expr()
        self._match(Token.EQUALS)
        expr = self.parse_expression()
        self._match(Token.SEMICOLON)
        self._emit(self._generate(self.codegen.gen_assignment_stmt, target.code_ref.name, expr))

    def _parse_input_stmt(self) -> None:
        """'input' '(' ID ')' ';'"""
        self._match(Token.INPUT)
        self._match(Token.LPAREN)
        name = self._match(Token.IDENT)
        self._match(Token.RPAREN)
        self._match(Token.SEMICOLON)
        self._emit(self._generate(self.codegen.gen_input_stmt, name))

    def _parse_output_stmt(self) -> None:
        """'output' '(' expression ')' ';'"""
        self._match(Token.OUTPUT)
        self._match(Token.LPAREN)
        expr = self.parse_expression()
        self._match(Token.RPAREN)
        self._match(Token.SEMICOLON)
        self._emit(self._generate(self.codegen.gen_output_stmt, expr))

    def _parse_if_stmt(self) -> None:
        """'if' '(' boolexpr ')' stmt 'else' stmt"""
        self._match(Token.IF)
        self._match(Token.LPAREN)
        condition = self.parse_boolexpr()
        self._match(Token.RPAREN)

        else_label = self.codegen.new_label()
        post_label = self.codegen.new_label()

        self._emit(condition.code)
        self._emit(self.codegen.gen_jump_if_false(else_label, condition))
        self.parse_stmt()
        self._match(Token.ELSE)
        self._emit(self.codegen.gen_jump_to_label(post_label))
        self._emit(self.codegen.gen_label_declaration(else_label))
        self.parse_stmt()
        self._emit(self.codegen.gen_label_declaration(post_label))

    def _parse_while_stmt(self) -> None:
        """'while' '(' boolexpr ')' stmt"""
        self._match(Token.WHILE)
        self._match(Token.LPAREN)
        condition = self.parse_boolexpr()
        self._match(Token.RPAREN)

        loop_label = self.codegen.new_label()
        break_label = self.codegen.new_label()

        self._emit(self.codegen.gen_label_declaration(loop_label))
        self._emit(condition.code)
        self._emit(self.codegen.gen_jump_if_false(break_label, condition))
        self.parse_stmt()
        self._emit(self.codegen.gen_jump_to_label(loop_label))
        self._emit(self.codegen.gen_label_declaration(break_label))

    # =========================================================================
    # Arithmetic Expressions
    # =========================================================================

    def parse_expression(self) -> Expression:
        """expression ::= term (ADDOP expression)?"""
        term = self._parse_term()
        addop = self._accept(Token.ADDOP)
        if addop is None:
            return term
        op = self._generate(BinaryOp.from_lexeme, addop)
        return binary_op(term, self.parse_expression(), op, self.codegen)

    def _parse_term(self) -> Expression:
        """term ::= factor (MULOP term)?"""
        factor = self._parse_factor()
        mulop = self._accept(Token.MULOP)
        if mulop is None:
            return factor
        op = self._generate(BinaryOp.from_lexeme, mulop)
        return binary_op(factor, self._parse_term(), op, self.codegen)

    def _parse_factor(self) -> Expression:
        """factor ::= '(' expression ')' | CAST '(' expression ')' | ID | NUM"""
        lookahead = self._lookahead()
        token = lookahead.token

        if token is Token.CAST:
            return self._parse_cast_expr()
        if token is Token.IDENT:
            return self._parse_id_expr()
        if token is Token.NUM:
            return self._parse_num_expr()
        if token is Token.LPAREN:
            self._match(Token.LPAREN)
            expr = self.parse_expression()
            self._match(Token.RPAREN)
            return expr
        raise self._unexpected(FACTOR_STARTERS, lookahead)

    def _parse_cast_expr(self) -> Expression:
        """CAST '(' expression ')'"""
        lexeme = self._match(Token.CAST)
        target = CAST_TYPES.get(lexeme)
        if target is None:
            raise InternalCompilerError(
                f"lexer classified {lexeme!r} as a CAST token",
                self._last_line,
                self._last_column,
            )

        self._match(Token.LPAREN)
        expr = self.parse_expression()
        self._match(Token.RPAREN)
        return cast(target, expr, self.codegen)

    def _parse_id_expr(self) -> Expression:
        """ID, which must name a declared variable."""
        name = self._match(Token.IDENT)
        return self._generate(Expression.variable, name, self.codegen)

    def _parse_num_expr(self) -> Expression:
        """NUM: digits with an optional fraction. A '.' makes it a float."""
        lexeme = self._match(Token.NUM)
        if "." in lexeme:
            value = float(lexeme)
            if math.isinf(value):
                raise LiteralOutOfRangeError(lexeme, self._last_line, self._last_column)
            return Expression.float_literal(value)

        # int() refuses very long digit strings
        too_long = len(lexeme.lstrip("0")) > len(str(INT_MAX))
        if too_long or not INT_MIN <= int(lexeme) <= INT_MAX:
            raise LiteralOutOfRangeError(lexeme, self._last_line, self._last_column)
        return Expression.int_literal(int(lexeme))

    # =========================================================================
    # Boolean Expressions
    # =========================================================================

    def parse_boolexpr(self) -> BoolExpr:
        """boolexpr ::= boolterm (OR boolexpr)?"""
        term = self._parse_boolterm()
        if self._accept(Token.OR) is None:
            return term
        return logical_or(term, self.parse_boolexpr(), self.codegen)

    def _parse_boolterm(self) -> BoolExpr:
        """boolterm ::= boolfactor (AND boolterm)?"""
        factor = self._parse_boolfactor()
        if self._accept(Token.AND) is None:
            return factor
        return logical_and(factor, self._parse_boolterm(), self.codegen)

    def _parse_boolfactor(self) -> BoolExpr:
        """boolfactor ::= NOT '(' boolexpr ')' | expression RELOP expression"""
        if self._lookahead().token is Token.NOT:
            self._match(Token.NOT)
            self._match(Token.LPAREN)
            operand = self.parse_boolexpr()
            self._match(Token.RPAREN)
            return logical_not(operand, self.codegen)

        left = self.parse_expression()
        op = self._generate(RelOp.from_lexeme, self._match(Token.RELOP))
        right = self.parse_expression()
        return relop(left, right, op, self.codegen)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str) -> str:
    """
    Lex and parse source text, returning its QUAD code.

    Raises:
        QuadCompilationError: If the program has diagnostics
    """
    return QuadParser(lex_tokens(source)).parse_program()
