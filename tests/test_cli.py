# =============================================================================
# test_cli.py - Command-Line Interface Tests
# =============================================================================
# Tests for the quadc command: single files, directory trees, token dumps
# and exit codes.
# =============================================================================

import pytest
from click.testing import CliRunner

from quadc import __version__
from quadc.cli.errors import ExitCode, exit_code_for
from quadc.cli.quadc import main
from quadc.compiler import CompilerResult, QuadCompiler
from quadc.errors import (
    InternalCompilerError,
    QuadCompilationError,
    UndeclaredVariableError,
)


GOOD_PROGRAM = "x: int; { input(x); output(x * 2); }"
GOOD_IR = "IINP x\nIMLT _t0 x 2\nIPRT _t0\nHALT\n"
BAD_PROGRAM = "{ output(y); }"


# =============================================================================
# Helper Function
# =============================================================================

def run(*args):
    """Helper invoking the CLI in-process."""
    runner = CliRunner()
    return runner.invoke(main, [str(a) for a in args])


# =============================================================================
# Single File Tests
# =============================================================================

class TestSingleFile:
    """Test compiling one source file."""

    def test_default_output(self, tmp_path):
        source = tmp_path / "prog.ou"
        source.write_text(GOOD_PROGRAM)

        result = run(source)
        assert result.exit_code == ExitCode.SUCCESS
        assert (tmp_path / "prog.qud").read_text() == GOOD_IR
        assert "Compiled" in result.output

    def test_explicit_output(self, tmp_path):
        source = tmp_path / "prog.ou"
        source.write_text(GOOD_PROGRAM)
        output = tmp_path / "out.quad"

        result = run(source, "-o", output)
        assert result.exit_code == ExitCode.SUCCESS
        assert output.read_text() == GOOD_IR

    def test_compile_error(self, tmp_path):
        source = tmp_path / "bad.ou"
        source.write_text(BAD_PROGRAM)

        result = run(source)
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Undeclared Variable Error" in result.output
        assert not (tmp_path / "bad.qud").exists()

    def test_strict_lexing(self, tmp_path):
        source = tmp_path / "prog.ou"
        source.write_text("x: int;\n{ x = 1; } @\n")

        assert run(source).exit_code == ExitCode.SUCCESS
        assert run(source, "--strict-lexing").exit_code == ExitCode.BUILD_ERROR

    def test_max_errors(self, tmp_path):
        source = tmp_path / "bad.ou"
        source.write_text("{ a = 1; b = 2; c = 3; }")

        result = run(source, "--max-errors", 1)
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "1 error" in result.output

    def test_tokens(self, tmp_path):
        source = tmp_path / "prog.ou"
        source.write_text("x = 1;")

        result = run("--tokens", source)
        assert result.exit_code == ExitCode.SUCCESS
        assert (tmp_path / "prog.tok").read_text() == (
            "x: Ident\n=: Equals (Symbol)\n1: Num\n;: SemiColon (Symbol)\n"
        )
        assert not (tmp_path / "prog.qud").exists()

    def test_internal_error_diagnostic(self, tmp_path, monkeypatch):
        def broken_compile(self, source, filename="<input>"):
            return CompilerResult(
                filename=filename,
                diagnostics=[InternalCompilerError("unknown cast", 1, 0)],
            )

        monkeypatch.setattr(QuadCompiler, "compile", broken_compile)
        source = tmp_path / "prog.ou"
        source.write_text(GOOD_PROGRAM)

        result = run(source)
        assert result.exit_code == ExitCode.INTERNAL_ERROR
        assert "Internal error: unknown cast" in result.output

    def test_undecodable_input(self, tmp_path):
        source = tmp_path / "prog.ou"
        source.write_bytes(b"{ output(1); \xff }")

        result = run(source)
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert not (tmp_path / "prog.qud").exists()

    def test_missing_input(self, tmp_path):
        result = run(tmp_path / "missing.ou")
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_version(self):
        result = run("--version")
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# Directory Tests
# =============================================================================

class TestDirectory:
    """Test compiling a directory tree."""

    @pytest.fixture
    def tree(self, tmp_path):
        root = tmp_path / "src"
        (root / "sub").mkdir(parents=True)
        (root / "a.ou").write_text(GOOD_PROGRAM)
        (root / "sub" / "b.ou").write_text("{ output(1); }")
        (root / "notes.txt").write_text("not a program")
        return root

    def test_outputs_next_to_sources(self, tree):
        result = run(tree)
        assert result.exit_code == ExitCode.SUCCESS
        assert (tree / "a.qud").read_text() == GOOD_IR
        assert (tree / "sub" / "b.qud").read_text() == "IPRT 1\nHALT\n"
        assert not (tree / "notes.qud").exists()
        assert "2 file(s) processed, 0 failed" in result.output

    def test_output_directory_mirrors_tree(self, tree, tmp_path):
        out = tmp_path / "build"
        result = run(tree, "-o", out)
        assert result.exit_code == ExitCode.SUCCESS
        assert (out / "a.qud").read_text() == GOOD_IR
        assert (out / "sub" / "b.qud").exists()
        assert not (tree / "a.qud").exists()

    def test_failure_in_one_file(self, tree):
        (tree / "sub" / "bad.ou").write_text(BAD_PROGRAM)

        result = run(tree)
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert (tree / "a.qud").exists()
        assert not (tree / "sub" / "bad.qud").exists()
        assert "3 file(s) processed, 1 failed" in result.output

    def test_undecodable_file_does_not_stop_the_walk(self, tree):
        (tree / "sub" / "bad.ou").write_bytes(b"{ output(1); \xff }")

        result = run(tree)
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert (tree / "a.qud").read_text() == GOOD_IR
        assert (tree / "sub" / "b.qud").exists()
        assert not (tree / "sub" / "bad.qud").exists()
        assert "bad.ou: 'utf-8' codec can't decode" in result.output
        assert "3 file(s) processed, 1 failed" in result.output

    def test_internal_error_in_tree(self, tree, monkeypatch):
        real_compile = QuadCompiler.compile

        def compile_or_fail(self, source, filename="<input>"):
            if filename.endswith("b.ou"):
                return CompilerResult(
                    filename=filename,
                    diagnostics=[InternalCompilerError("unknown cast", 1, 0)],
                )
            return real_compile(self, source, filename)

        monkeypatch.setattr(QuadCompiler, "compile", compile_or_fail)
        result = run(tree)
        assert result.exit_code == ExitCode.INTERNAL_ERROR
        assert (tree / "a.qud").exists()
        assert "2 file(s) processed, 1 failed" in result.output

    def test_tokens_for_tree(self, tree):
        result = run("--tokens", tree)
        assert result.exit_code == ExitCode.SUCCESS
        assert (tree / "sub" / "b.tok").exists()

    def test_output_must_be_directory(self, tree, tmp_path):
        blocker = tmp_path / "file.qud"
        blocker.write_text("")

        result = run(tree, "-o", blocker)
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Exit Code Mapping Tests
# =============================================================================

class TestExitCodes:
    """Test exception to exit code mapping."""

    def test_compilation_error(self):
        error = QuadCompilationError([UndeclaredVariableError("x")])
        assert exit_code_for(error) is ExitCode.BUILD_ERROR

    def test_internal_compiler_error(self):
        assert exit_code_for(InternalCompilerError("bad")) is ExitCode.INTERNAL_ERROR
        wrapped = QuadCompilationError([InternalCompilerError("bad")])
        assert exit_code_for(wrapped) is ExitCode.INTERNAL_ERROR

    def test_missing_file(self):
        assert exit_code_for(FileNotFoundError("x")) is ExitCode.INVALID_ARGS

    def test_undecodable_file(self):
        error = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        assert exit_code_for(error) is ExitCode.INVALID_ARGS

    def test_unexpected_exception(self):
        assert exit_code_for(RuntimeError("boom")) is ExitCode.INTERNAL_ERROR
