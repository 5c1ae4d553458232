# =============================================================================
# test_codegen.py - Code Generator Unit Tests
# =============================================================================
# Tests for QUAD instruction emission, the symbol table and the
# temporary/label counters.
# =============================================================================

import pytest
from quadc.codegen import (
    BinaryOp,
    CodeGenerator,
    FloatLiteral,
    IntLiteral,
    Label,
    RelOp,
    VarName,
    VarType,
)
from quadc.boolexpr import BoolExpr
from quadc.expression import Expression
from quadc.errors import (
    InternalCompilerError,
    TypeMismatchError,
    UndeclaredVariableError,
)


# =============================================================================
# Helper Function
# =============================================================================

def make_codegen(**variables) -> CodeGenerator:
    """Helper creating a code generator with variables already declared."""
    codegen = CodeGenerator()
    for name, var_type in variables.items():
        codegen.register_variable(name, var_type)
    return codegen


# =============================================================================
# Type Tests
# =============================================================================

class TestVarType:
    """Test result type of binary operations."""

    @pytest.mark.parametrize("left,right,expected", [
        (VarType.INT, VarType.INT, VarType.INT),
        (VarType.INT, VarType.FLOAT, VarType.FLOAT),
        (VarType.FLOAT, VarType.INT, VarType.FLOAT),
        (VarType.FLOAT, VarType.FLOAT, VarType.FLOAT),
    ])
    def test_combine(self, left, right, expected):
        assert left.combine(right) is expected
        assert right.combine(left) is expected

    def test_prefix(self):
        assert VarType.INT.prefix == "I"
        assert VarType.FLOAT.prefix == "R"


# =============================================================================
# Operand Rendering Tests
# =============================================================================

class TestCodeReferences:
    """Test how operands appear in QUAD text."""

    def test_int_literal(self):
        assert str(IntLiteral(42)) == "42"

    def test_float_literal(self):
        assert str(FloatLiteral(2.0)) == "2.0"
        assert str(FloatLiteral(0.5)) == "0.5"

    def test_var_name(self):
        assert str(VarName("total")) == "total"

    def test_label(self):
        assert str(Label(7)) == "L7"

    def test_references_compare_by_value(self):
        assert VarName("x") == VarName("x")
        assert IntLiteral(1) != IntLiteral(2)


# =============================================================================
# Operator Tests
# =============================================================================

class TestOperators:
    """Test lexeme to operator mapping."""

    @pytest.mark.parametrize("lexeme,op", [
        ("+", BinaryOp.ADD),
        ("-", BinaryOp.SUB),
        ("*", BinaryOp.MUL),
        ("/", BinaryOp.DIV),
    ])
    def test_binary_op_from_lexeme(self, lexeme, op):
        assert BinaryOp.from_lexeme(lexeme) is op

    def test_unknown_binary_op(self):
        with pytest.raises(InternalCompilerError):
            BinaryOp.from_lexeme("%")

    @pytest.mark.parametrize("lexeme", ["==", "!=", "<", ">", "<=", ">="])
    def test_relop_from_lexeme(self, lexeme):
        assert RelOp.from_lexeme(lexeme).value == lexeme

    def test_unknown_relop(self):
        with pytest.raises(InternalCompilerError):
            RelOp.from_lexeme("=<")

    def test_strict_relops(self):
        assert RelOp.LT.is_strict
        assert not RelOp.LE.is_strict
        assert not RelOp.GE.is_strict


# =============================================================================
# Symbol Table Tests
# =============================================================================

class TestSymbolTable:
    """Test variable registration and lookup."""

    def test_register_and_lookup(self):
        codegen = make_codegen(x=VarType.INT, y=VarType.FLOAT)
        assert codegen.get_var_type("x") is VarType.INT
        assert codegen.get_var_type("y") is VarType.FLOAT
        assert codegen.is_declared("x")
        assert not codegen.is_declared("z")

    def test_redeclaration_overwrites(self):
        codegen = make_codegen(x=VarType.INT)
        codegen.register_variable("x", VarType.FLOAT)
        assert codegen.get_var_type("x") is VarType.FLOAT

    def test_undeclared_lists_known_names(self):
        codegen = make_codegen(count=VarType.INT, total=VarType.FLOAT)
        with pytest.raises(UndeclaredVariableError) as exc_info:
            codegen.get_var_type("cnt")
        assert exc_info.value.name == "cnt"
        assert exc_info.value.known_names == ("count", "total")
        assert "Declared variables: count, total" in str(exc_info.value)

    def test_type_of_literals(self):
        codegen = CodeGenerator()
        assert codegen.type_of(IntLiteral(1)) is VarType.INT
        assert codegen.type_of(FloatLiteral(1.0)) is VarType.FLOAT


# =============================================================================
# Allocation Tests
# =============================================================================

class TestAllocation:
    """Temporaries and labels are numbered from zero and never reused."""

    def test_temporaries(self):
        codegen = CodeGenerator()
        assert codegen.new_tmp_var(VarType.INT) == VarName("_t0")
        assert codegen.new_tmp_var(VarType.FLOAT) == VarName("_t1")
        assert codegen.tmp_count == 2

    def test_temporaries_are_registered(self):
        codegen = CodeGenerator()
        tmp = codegen.new_tmp_var(VarType.FLOAT)
        assert codegen.get_var_type(tmp.name) is VarType.FLOAT

    def test_labels(self):
        codegen = CodeGenerator()
        assert str(codegen.new_label()) == "L0"
        assert str(codegen.new_label()) == "L1"
        assert codegen.label_count == 2

    def test_counters_are_independent(self):
        codegen = CodeGenerator()
        codegen.new_label()
        assert codegen.new_tmp_var(VarType.INT) == VarName("_t0")

    def test_generators_do_not_share_state(self):
        first = CodeGenerator()
        first.new_tmp_var(VarType.INT)
        first.register_variable("x", VarType.INT)

        second = CodeGenerator()
        assert second.new_tmp_var(VarType.INT) == VarName("_t0")
        assert not second.is_declared("x")


# =============================================================================
# Instruction Emission Tests
# =============================================================================

class TestEmission:
    """Test the exact text of each instruction."""

    @pytest.mark.parametrize("var_type,op,expected", [
        (VarType.INT, BinaryOp.ADD, "IADD _t0 a b\n"),
        (VarType.INT, BinaryOp.SUB, "ISUB _t0 a b\n"),
        (VarType.INT, BinaryOp.MUL, "IMLT _t0 a b\n"),
        (VarType.INT, BinaryOp.DIV, "IDIV _t0 a b\n"),
        (VarType.FLOAT, BinaryOp.ADD, "RADD _t0 a b\n"),
        (VarType.FLOAT, BinaryOp.MUL, "RMLT _t0 a b\n"),
    ])
    def test_bin_op(self, var_type, op, expected):
        codegen = CodeGenerator()
        assert codegen.bin_op(var_type, op, VarName("_t0"), VarName("a"), VarName("b")) == expected

    @pytest.mark.parametrize("var_type,op,expected", [
        (VarType.INT, RelOp.EQ, "IEQL _t0 a b\n"),
        (VarType.INT, RelOp.NE, "INQL _t0 a b\n"),
        (VarType.INT, RelOp.LT, "ILSS _t0 a b\n"),
        (VarType.INT, RelOp.GT, "IGRT _t0 a b\n"),
        (VarType.FLOAT, RelOp.LT, "RLSS _t0 a b\n"),
    ])
    def test_relop(self, var_type, op, expected):
        codegen = CodeGenerator()
        assert codegen.relop(var_type, op, VarName("_t0"), VarName("a"), VarName("b")) == expected

    @pytest.mark.parametrize("op", [RelOp.LE, RelOp.GE])
    def test_relop_rejects_non_strict(self, op):
        codegen = CodeGenerator()
        with pytest.raises(InternalCompilerError):
            codegen.relop(VarType.INT, op, VarName("_t0"), VarName("a"), VarName("b"))

    def test_casts(self):
        codegen = CodeGenerator()
        assert codegen.gen_cast_stmt(VarType.FLOAT, VarName("_t0"), VarName("i")) == "ITOR _t0 i\n"
        assert codegen.gen_cast_stmt(VarType.INT, VarName("_t1"), VarName("f")) == "RTOI _t1 f\n"

    def test_input(self):
        codegen = make_codegen(i=VarType.INT, f=VarType.FLOAT)
        assert codegen.gen_input_stmt("i") == "IINP i\n"
        assert codegen.gen_input_stmt("f") == "RINP f\n"

    def test_input_undeclared(self):
        with pytest.raises(UndeclaredVariableError):
            CodeGenerator().gen_input_stmt("x")

    def test_output_literals(self):
        codegen = CodeGenerator()
        assert codegen.gen_output_stmt(Expression.int_literal(3)) == "IPRT 3\n"
        assert codegen.gen_output_stmt(Expression.float_literal(2.5)) == "RPRT 2.5\n"

    def test_output_includes_expression_code(self):
        codegen = make_codegen(_t0=VarType.FLOAT)
        expr = Expression(VarType.FLOAT, VarName("_t0"), "RADD _t0 1.0 2.0\n")
        assert codegen.gen_output_stmt(expr) == "RADD _t0 1.0 2.0\nRPRT _t0\n"

    def test_assignment(self):
        codegen = make_codegen(x=VarType.INT, y=VarType.FLOAT)
        assert codegen.gen_assignment_stmt("x", Expression.int_literal(1)) == "IASN x 1\n"
        assert codegen.gen_assignment_stmt("y", Expression.float_literal(1.0)) == "RASN y 1.0\n"

    def test_assignment_type_mismatch(self):
        codegen = make_codegen(x=VarType.INT)
        with pytest.raises(TypeMismatchError) as exc_info:
            codegen.gen_assignment_stmt("x", Expression.float_literal(1.5))

        error = exc_info.value
        assert error.expected_type is VarType.INT
        assert error.found_type is VarType.FLOAT
        assert "static_cast<int>" in str(error)

    def test_labels_and_jumps(self):
        codegen = CodeGenerator()
        label = Label(3)
        assert codegen.gen_label_declaration(label) == "L3:\n"
        assert codegen.gen_jump_to_label(label) == "JUMP L3\n"
        assert codegen.gen_jump_if_false(label, BoolExpr(VarName("_t1"))) == "JMPZ L3 _t1\n"

    def test_halt(self):
        assert CodeGenerator().gen_halt() == "HALT\n"
