"""
Arithmetic Expression Translation
=================================

An Expression is the result of translating a source expression: its type,
the CodeReference where its value ends up, and the QUAD code that computes
it (empty for literals and bare variables).

Operands of mixed type are promoted: the int operand is converted with
ITOR into a fresh float temporary before the operation.

    2.0 + 2 * 3 + 1

    IMLT _t0 2 3
    IADD _t1 _t0 1
    ITOR _t2 _t1
    RADD _t3 2.0 _t2
"""

from dataclasses import dataclass

from quadc.codegen import (
    BinaryOp,
    CodeGenerator,
    CodeReference,
    FloatLiteral,
    IntLiteral,
    VarName,
    VarType,
)


@dataclass
class Expression:
    """
    A typed, translated expression.

    Attributes:
        type: The value's type
        code_ref: Where the value lives once `code` has run
        code: QUAD code computing the value
    """
    type: VarType
    code_ref: CodeReference
    code: str = ""

    @classmethod
    def int_literal(cls, value: int) -> "Expression":
        return cls(VarType.INT, IntLiteral(value))

    @classmethod
    def float_literal(cls, value: float) -> "Expression":
        return cls(VarType.FLOAT, FloatLiteral(value))

    @classmethod
    def variable(cls, name: str, codegen: CodeGenerator) -> "Expression":
        """
        Reference a declared variable.

        Raises:
            UndeclaredVariableError: If name was never declared
        """
        return cls(codegen.get_var_type(name), VarName(name))


def cast(target: VarType, expr: Expression, codegen: CodeGenerator) -> Expression:
    """
    Convert expr to target type.

    Returns expr unchanged if it already has the target type; otherwise the
    conversion into a new temporary is appended after expr's own code.
    """
    if expr.type is target:
        return expr

    dst = codegen.new_tmp_var(target)
    return Expression(
        target,
        dst,
        expr.code + codegen.gen_cast_stmt(target, dst, expr.code_ref),
    )


def promote(left: Expression, right: Expression, codegen: CodeGenerator) -> tuple[Expression, Expression]:
    """Cast whichever operand is int to float when the types differ."""
    if left.type is VarType.INT and right.type is VarType.FLOAT:
        left = cast(VarType.FLOAT, left, codegen)
    elif left.type is VarType.FLOAT and right.type is VarType.INT:
        right = cast(VarType.FLOAT, right, codegen)
    return left, right


def binary_op(left: Expression, right: Expression, op: BinaryOp, codegen: CodeGenerator) -> Expression:
    """
    Combine two expressions with an arithmetic operator.

    The left operand's code always precedes the right operand's; the
    operation itself comes last.
    """
    result_type = left.type.combine(right.type)
    left, right = promote(left, right, codegen)

    dst = codegen.new_tmp_var(result_type)
    return Expression(
        result_type,
        dst,
        left.code + right.code + codegen.bin_op(result_type, op, dst, left.code_ref, right.code_ref),
    )
