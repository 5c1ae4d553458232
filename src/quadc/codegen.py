"""
QUAD Code Generator
===================

This module owns the compilation context (symbol table, temporary and
label counters) and emits QUAD instructions for each semantic construct.

One CodeGenerator instance belongs to exactly one compilation. Nothing in
this module is global, so independent compilations can run side by side.

QUAD Instruction Set
--------------------
| Instruction              | Meaning                                  |
|--------------------------|------------------------------------------|
| {I,R}{ADD,SUB,MLT,DIV} a b c | a := b op c                          |
| {I,R}{EQL,NQL,LSS,GRT} a b c | a := 1 if b relop c else 0           |
| ITOR a b / RTOI a b      | a := float(b) / a := int(b)              |
| IINP a / RINP a          | read a                                   |
| IPRT a / RPRT a          | print a                                  |
| IASN a b / RASN a b      | a := b                                   |
| L<n>:                    | label declaration                        |
| JUMP L<n>                | unconditional jump                       |
| JMPZ L<n> a              | jump if a == 0                           |
| HALT                     | stop                                     |

The I/R prefix selects integer or real (float) arithmetic. Every emitted
line ends with a newline.

Operand Rendering
-----------------
Every computed value is denoted by a CodeReference. For (1 + 2) * 3:

    IADD _t0 1 2        the reference of (1 + 2) is _t0
    IMLT _t1 _t0 3      the reference of (1 + 2) * 3 is _t1
"""

import logging
from dataclasses import dataclass
from enum import Enum

from quadc.errors import InternalCompilerError, TypeMismatchError, UndeclaredVariableError

logger = logging.getLogger(__name__)


INPUT_INT_COMMAND = "IINP"
INPUT_FLOAT_COMMAND = "RINP"
OUTPUT_INT_COMMAND = "IPRT"
OUTPUT_FLOAT_COMMAND = "RPRT"
ASSIGN_INT_COMMAND = "IASN"
ASSIGN_FLOAT_COMMAND = "RASN"
INT_TO_FLOAT_COMMAND = "ITOR"
FLOAT_TO_INT_COMMAND = "RTOI"
JUMP_COMMAND = "JUMP"
JUMP_IF_ZERO_COMMAND = "JMPZ"
HALT_COMMAND = "HALT"

TEMP_PREFIX = "_t"


# =============================================================================
# Types
# =============================================================================

class VarType(Enum):
    """The two value types of the language."""
    INT = "int"
    FLOAT = "float"

    def combine(self, other: "VarType") -> "VarType":
        """
        Type of a binary operation's result given its operand types.

        <int> op <int> = <int>; any float operand makes the result float.
        """
        if self is VarType.INT and other is VarType.INT:
            return VarType.INT
        return VarType.FLOAT

    @property
    def prefix(self) -> str:
        """Opcode prefix: I for int, R for real."""
        return "I" if self is VarType.INT else "R"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Code References and Labels
# =============================================================================

class CodeReference:
    """Base class for the ways a computed value is named in QUAD code."""

    __slots__ = ()


@dataclass(frozen=True)
class IntLiteral(CodeReference):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FloatLiteral(CodeReference):
    value: float

    def __str__(self) -> str:
        return repr(float(self.value))


@dataclass(frozen=True)
class VarName(CodeReference):
    """A user variable or a generated temporary (_t<N>)."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Label:
    """Opaque handle for a jump target. Allocated by CodeGenerator.new_label()."""
    id: int

    def __str__(self) -> str:
        return f"L{self.id}"


# =============================================================================
# Operators
# =============================================================================

class BinaryOp(Enum):
    """Arithmetic operators with their QUAD opcode suffixes."""
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MLT"
    DIV = "DIV"

    @classmethod
    def from_lexeme(cls, lexeme: str) -> "BinaryOp":
        try:
            return _BINARY_OPS[lexeme]
        except KeyError:
            raise InternalCompilerError(
                f"could not parse lexeme {lexeme!r} as a binary operator"
            ) from None


_BINARY_OPS = {
    "+": BinaryOp.ADD,
    "-": BinaryOp.SUB,
    "*": BinaryOp.MUL,
    "/": BinaryOp.DIV,
}


class RelOp(Enum):
    """
    Relational operators.

    Only EQ, NE, LT and GT have QUAD opcodes; LE and GE are synthesized by
    the boolean expression translator as negations.
    """
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    @classmethod
    def from_lexeme(cls, lexeme: str) -> "RelOp":
        try:
            return cls(lexeme)
        except ValueError:
            raise InternalCompilerError(
                f"could not parse lexeme {lexeme!r} as a relational operator"
            ) from None

    @property
    def is_strict(self) -> bool:
        """True if QUAD has a native opcode for this operator."""
        return self in _RELOP_SUFFIXES

    @property
    def suffix(self) -> str:
        try:
            return _RELOP_SUFFIXES[self]
        except KeyError:
            raise InternalCompilerError(
                f"relational operator {self.value} has no QUAD opcode"
            ) from None


_RELOP_SUFFIXES = {
    RelOp.EQ: "EQL",
    RelOp.NE: "NQL",
    RelOp.LT: "LSS",
    RelOp.GT: "GRT",
}


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Compilation context and QUAD instruction emitter.

    Keeps track of declared variable types, temporaries and labels. The
    gen_* methods return instruction text; they never append to a buffer,
    so callers decide where each piece of code lands.

    Temporaries and labels are never reused or freed.
    """

    def __init__(self):
        self._var_types: dict[str, VarType] = {}
        self._tmp_count = 0
        self._label_count = 0

    # =========================================================================
    # Symbol Table
    # =========================================================================

    def register_variable(self, name: str, var_type: VarType) -> None:
        """Record the type of a variable. A repeated name is overwritten."""
        if name in self._var_types:
            logger.debug(f"Redeclaring {name}: {self._var_types[name]} -> {var_type}")
        self._var_types[name] = var_type

    def get_var_type(self, name: str) -> VarType:
        """
        Get the type of a registered variable.

        Raises:
            UndeclaredVariableError: If the name was never registered
        """
        try:
            return self._var_types[name]
        except KeyError:
            raise UndeclaredVariableError(name, self.variables) from None

    def is_declared(self, name: str) -> bool:
        return name in self._var_types

    @property
    def variables(self) -> tuple[str, ...]:
        """All registered names, temporaries included, in registration order."""
        return tuple(self._var_types)

    def type_of(self, ref: CodeReference) -> VarType:
        """Type of the value a reference denotes."""
        if isinstance(ref, IntLiteral):
            return VarType.INT
        if isinstance(ref, FloatLiteral):
            return VarType.FLOAT
        return self.get_var_type(ref.name)

    # =========================================================================
    # Allocation
    # =========================================================================

    def new_tmp_var(self, var_type: VarType) -> VarName:
        """Create and register the next temporary variable, named _t<N>."""
        name = f"{TEMP_PREFIX}{self._tmp_count}"
        self._tmp_count += 1
        self.register_variable(name, var_type)
        return VarName(name)

    def new_label(self) -> Label:
        """Allocate a fresh label."""
        label = Label(self._label_count)
        self._label_count += 1
        return label

    @property
    def tmp_count(self) -> int:
        return self._tmp_count

    @property
    def label_count(self) -> int:
        return self._label_count

    # =========================================================================
    # Instruction Emission
    # =========================================================================

    def gen_cast_stmt(self, var_type: VarType, dst: CodeReference, src: CodeReference) -> str:
        """ITOR dst src when converting to float, RTOI dst src when converting to int."""
        if var_type is VarType.INT:
            return f"{FLOAT_TO_INT_COMMAND} {dst} {src}\n"
        return f"{INT_TO_FLOAT_COMMAND} {dst} {src}\n"

    def bin_op(
        self,
        var_type: VarType,
        op: BinaryOp,
        dst: CodeReference,
        src1: CodeReference,
        src2: CodeReference,
    ) -> str:
        """X dst src1 src2, X in {IADD, ISUB, IMLT, IDIV, RADD, RSUB, RMLT, RDIV}."""
        return f"{var_type.prefix}{op.value} {dst} {src1} {src2}\n"

    def relop(
        self,
        var_type: VarType,
        op: RelOp,
        dst: CodeReference,
        src1: CodeReference,
        src2: CodeReference,
    ) -> str:
        """
        Put 1 into dst if src1 op src2 holds, 0 otherwise.

        Only ==, !=, < and > are accepted.
        """
        return f"{var_type.prefix}{op.suffix} {dst} {src1} {src2}\n"

    def gen_input_stmt(self, var_name: str) -> str:
        """IINP/RINP by the variable's declared type."""
        if self.get_var_type(var_name) is VarType.INT:
            command = INPUT_INT_COMMAND
        else:
            command = INPUT_FLOAT_COMMAND
        return f"{command} {var_name}\n"

    def gen_output_stmt(self, expr) -> str:
        """
        Code computing expr followed by IPRT/RPRT of its value.

        The opcode follows the type of the value itself: the literal's type,
        or the declared type of the variable holding it.
        """
        if self.type_of(expr.code_ref) is VarType.INT:
            command = OUTPUT_INT_COMMAND
        else:
            command = OUTPUT_FLOAT_COMMAND
        return f"{expr.code}{command} {expr.code_ref}\n"

    def gen_assignment_stmt(self, var_name: str, expr) -> str:
        """
        Code computing expr followed by IASN/RASN var expr.

        Raises:
            UndeclaredVariableError: If var_name was never declared
            TypeMismatchError: If expr's type differs from the variable's type
        """
        var_type = self.get_var_type(var_name)
        if expr.type is not var_type:
            raise TypeMismatchError(VarName(var_name), var_type, expr.code_ref, expr.type)

        if var_type is VarType.INT:
            command = ASSIGN_INT_COMMAND
        else:
            command = ASSIGN_FLOAT_COMMAND
        return f"{expr.code}{command} {var_name} {expr.code_ref}\n"

    def gen_label_declaration(self, label: Label) -> str:
        return f"{label}:\n"

    def gen_jump_to_label(self, label: Label) -> str:
        return f"{JUMP_COMMAND} {label}\n"

    def gen_jump_if_false(self, label: Label, boolexpr) -> str:
        """JMPZ label ref: jump when the boolean value is exactly zero."""
        return f"{JUMP_IF_ZERO_COMMAND} {label} {boolexpr.code_ref}\n"

    def gen_halt(self) -> str:
        return f"{HALT_COMMAND}\n"
