"""
Boolean Expression Translation
==============================

QUAD has no boolean instructions. A boolean value is an int that is 0
(false) or 1 (true), and the logical operators are arithmetic over that
encoding:

| Operator | Encoding                      |
|----------|-------------------------------|
| !a       | 1 - a                         |
| a && b   | a * b                         |
| a || b   | !(!a && !b) = 1 - (1-a)*(1-b) |
| a <= b   | !(a > b)                      |
| a >= b   | !(a < b)                      |

Neither && nor || short-circuits: the code for both operands is always
emitted.
"""

from dataclasses import dataclass

from quadc.codegen import BinaryOp, CodeGenerator, CodeReference, RelOp, VarType
from quadc.expression import Expression, binary_op, promote


@dataclass
class BoolExpr:
    """
    A translated boolean expression: an int reference holding 0 or 1.

    Attributes:
        code_ref: Where the truth value lives once `code` has run
        code: QUAD code computing the value
    """
    code_ref: CodeReference
    code: str = ""

    def as_expression(self) -> Expression:
        return Expression(VarType.INT, self.code_ref, self.code)

    @classmethod
    def from_expression(cls, expr: Expression) -> "BoolExpr":
        return cls(expr.code_ref, expr.code)


def logical_not(operand: BoolExpr, codegen: CodeGenerator) -> BoolExpr:
    """not(b) = 1 - b"""
    return BoolExpr.from_expression(
        binary_op(Expression.int_literal(1), operand.as_expression(), BinaryOp.SUB, codegen)
    )


def logical_and(left: BoolExpr, right: BoolExpr, codegen: CodeGenerator) -> BoolExpr:
    """a and b = a * b"""
    return BoolExpr.from_expression(
        binary_op(left.as_expression(), right.as_expression(), BinaryOp.MUL, codegen)
    )


def logical_or(left: BoolExpr, right: BoolExpr, codegen: CodeGenerator) -> BoolExpr:
    """a or b = not(not(a) and not(b))"""
    return logical_not(
        logical_and(
            logical_not(left, codegen),
            logical_not(right, codegen),
            codegen,
        ),
        codegen,
    )


def relop(left: Expression, right: Expression, op: RelOp, codegen: CodeGenerator) -> BoolExpr:
    """
    Compare two expressions.

    The destination temporary is allocated before any operand cast. For <=
    and >= it stays unused: the comparison is delegated to the strict
    operator and negated.
    """
    dst = codegen.new_tmp_var(VarType.INT)
    operand_type = left.type.combine(right.type)
    left, right = promote(left, right, codegen)

    if op is RelOp.LE:
        return logical_not(relop(left, right, RelOp.GT, codegen), codegen)
    if op is RelOp.GE:
        return logical_not(relop(left, right, RelOp.LT, codegen), codegen)

    return BoolExpr(
        dst,
        left.code + right.code + codegen.relop(operand_type, op, dst, left.code_ref, right.code_ref),
    )
