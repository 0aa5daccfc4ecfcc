"""
Command line tests for marble
"""

import sys

import pytest

from marble.__main__ import Repl, main, run_file


@pytest.fixture
def program(tmp_path):
    """Write source text to a temporary program file"""

    def program(source):
        path = tmp_path / "program.mb"
        path.write_bytes(source.encode("utf-8"))
        return str(path)

    return program


class TestRunFile:
    """Test running program files"""

    def test_prints_final_value(self, program, capsys):
        assert run_file(program("var x = 2;\nx * 21\n")) == 0
        assert capsys.readouterr().out == "42\n"

    def test_program_without_value(self, program, capsys):
        assert run_file(program("var x = 2;")) == 0
        assert capsys.readouterr().out == "\n"

    def test_parse_errors(self, program, capsys):
        assert run_file(program("var = 1;")) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines()[0] == (
            "error: line 1 column 5: expected next token to be IDENTIFIER, got = instead"
        )

    def test_runtime_error(self, program, capsys):
        assert run_file(program('print("before");\n1 / 0;\nprint("after");')) == 1
        captured = capsys.readouterr()
        assert captured.out == "before\n"
        assert captured.err == "error: line 2 col 3: invalid division by zero\n"

    def test_deep_recursion(self, program, capsys):
        source = "var down = func(n) { if (n == 0) { return 0; } down(n - 1) };\ndown(100000)"
        assert run_file(program(source)) == 1
        assert capsys.readouterr().err == (
            "error: line 1 col 52: maximum recursion depth exceeded\n"
        )

    def test_missing_file(self, tmp_path, capsys):
        assert run_file(str(tmp_path / "missing.mb")) == 1
        assert capsys.readouterr().err.startswith("error: ")


class TestMain:
    """Test the argument parsing entry point"""

    def test_exit_status(self, program, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["marble", program("len([1, 2])")])
        with pytest.raises(SystemExit) as e:
            main()
        assert e.value.code == 0
        assert capsys.readouterr().out == "2\n"

    def test_exit_status_on_error(self, program, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["marble", "-v", program("nope")])
        with pytest.raises(SystemExit) as e:
            main()
        assert e.value.code == 1


class TestRepl:
    """Test the interactive loop source handling"""

    def test_evaluates_complete_input(self, capsys):
        repl = Repl()
        assert repl.runsource("1 + 2;") is False
        assert capsys.readouterr().out == "3\n"

    def test_keeps_bindings(self, capsys):
        repl = Repl()
        assert repl.runsource("var x = 5;") is False
        assert repl.runsource("x * 2\n") is False
        assert capsys.readouterr().out == "10\n"

    def test_waits_for_more_input(self, capsys):
        repl = Repl()
        assert repl.runsource("if (true) {") is True
        assert repl.runsource("if (true) { 1 }") is True
        assert capsys.readouterr().out == ""

    def test_reports_parse_errors(self, capsys):
        repl = Repl()
        assert repl.runsource("var = ;\n") is False
        assert capsys.readouterr().out.startswith("error: line 1 column 5:")

    def test_survives_deep_recursion(self, capsys):
        repl = Repl()
        source = "var loop = func() { loop() };\nloop();"
        assert repl.runsource(source) is False
        assert capsys.readouterr().out.endswith("maximum recursion depth exceeded\n")
        assert repl.runsource("1 + 1;") is False
        assert capsys.readouterr().out == "2\n"

    def test_reports_runtime_errors(self, capsys):
        repl = Repl()
        assert repl.runsource("1 / 0;") is False
        assert capsys.readouterr().out == "error: line 1 col 3: invalid division by zero\n"
