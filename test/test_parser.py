"""
Parser tests for marble
Tests canonical rendering and diagnostic collection
"""

import pytest

from marble.ast import (
    AstExpressionCall,
    AstExpressionFunction,
    AstExpressionIf,
    AstExpressionInfix,
    AstStatementExpression,
    AstStatementVar,
)
from marble.lexer import Lexer
from marble.parser import Parser


def parse(source):
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors()


class TestValidPrograms:
    """Test parsing of valid programs"""

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("5 / 5.5 * 5 + -5 - x", "((((5 / 5.5) * 5) + (-5)) - x);"),
            ('"foo" + " " + "bar"', '(("foo" + " ") + "bar");'),
            ("(true == false) != !false;", "((true == false) != (!false));"),
            (
                "(1 - 5) < 6 == 7 > 10 <= (45 >= 22)",
                "(((1 - 5) < 6) == ((7 > 10) <= (45 >= 22)));",
            ),
            (
                '[2, 5.6, "string", [true, false], func(){x + y}, []];',
                '[2, 5.6, "string", [true, false], func(){(x + y);}, []];',
            ),
            (
                "if (true) { 8 + 9 * 10; } else { false; }",
                "if (true) {(8 + (9 * 10));} else {false;};",
            ),
            ("func (x) { } (a+b)", "func(x){}((a + b));"),
            ("array[6-7]*67", "((array[(6 - 7)]) * 67);"),
            (
                'var foo = [9, 9.9, "bar", [true, false], 9 + 9.9];',
                'var foo = [9, 9.9, "bar", [true, false], (9 + 9.9)];',
            ),
            (
                "var foo = 2.3; foo; 1; var y = if (true) {true}; var bar = 6.9; return foo;",
                "var foo = 2.3;foo;1;var y = if (true) {true;};var bar = 6.9;return foo;",
            ),
            ("-a * b", "((-a) * b);"),
            ("!-a", "(!(-a));"),
            ("a + b(c) * d[0]", "(a + (b(c) * (d[0])));"),
            ("add(a, b)(c)[1][2]", "((add(a, b)(c)[1])[2]);"),
            ("func(a, b, c) { return a; }", "func(a, b, c){return a;};"),
            ("1 - 2 - 3", "((1 - 2) - 3);"),
        ],
    )
    def test_canonical_rendering(self, source, expected):
        """Programs render back to a fully parenthesized canonical form"""
        program, errors = parse(source)
        assert errors == []
        assert str(program) == expected

    def test_rendering_is_stable(self):
        """Rendered programs parse back to the same rendering"""
        source = "var f = func(x, y) { if (x < y) { return -x; } else { y * 2.5 } }; f(1, [2][0]);"
        program, errors = parse(source)
        assert errors == []
        rendered, errors = parse(str(program))
        assert errors == []
        assert str(rendered) == str(program)

    def test_node_structure(self):
        """Statements and expressions keep their tokens and children"""
        program, _ = parse("var add = func(a, b) { a + b }; add(1, 2)")
        assert len(program.statements) == 2

        statement = program.statements[0]
        assert isinstance(statement, AstStatementVar)
        assert statement.name.name == "add"
        assert statement.token.line == 1 and statement.token.column == 1
        function = statement.value
        assert isinstance(function, AstExpressionFunction)
        assert [p.name for p in function.parameters] == ["a", "b"]
        assert isinstance(function.body.statements[0].value, AstExpressionInfix)

        call = program.statements[1]
        assert isinstance(call, AstStatementExpression)
        assert isinstance(call.value, AstExpressionCall)
        assert call.value.token.literal == "("
        assert len(call.value.arguments) == 2

    def test_if_without_alternative(self):
        program, errors = parse("if (x) { y }")
        assert errors == []
        expression = program.statements[0].value
        assert isinstance(expression, AstExpressionIf)
        assert expression.alternative is None

    def test_integer_limits(self):
        program, errors = parse("9223372036854775807")
        assert errors == []
        assert program.statements[0].value.value == 2**63 - 1

    def test_empty_program(self):
        program, errors = parse("  // nothing here\n")
        assert errors == []
        assert program.statements == ()


class TestInvalidPrograms:
    """Test diagnostic collection"""

    @pytest.mark.parametrize(
        "source,issue",
        [
            ("var", "expected next token to be "),
            ("var x", "expected next token to be "),
            ("x true = 6;", "missing prefix parse function for "),
            ("92233720368547758079223372036854775807;", "could not parse "),
            ("[1, 2, 3, 4;", "expected next token to be "),
            ("(1 + 2 * 3 / 4", "expected next token to be "),
            ("if", "expected next token to be "),
            ("if (true", "expected next token to be "),
            ("if (true)", "expected next token to be "),
            ("if (true) {} else", "expected next token to be "),
            ("func", "expected next token to be "),
            ("func(", "expected next token to be "),
            ("func()", "expected next token to be "),
            ("array[0", "expected next token to be "),
            ("if (true) { 1", "expected next token to be "),
            ("func(1) {}", "expected next token to be "),
        ],
    )
    def test_diagnostics(self, source, issue):
        _, errors = parse(source)
        assert len(errors) != 0
        assert issue in errors[0]

    def test_expected_token_message(self):
        _, errors = parse("var x 5")
        assert errors[0] == "line 1 column 7: expected next token to be =, got INTEGER instead"

    def test_missing_prefix_message(self):
        _, errors = parse("1 + @")
        assert errors == ["line 1 column 5: missing prefix parse function for ILLEGAL"]

    def test_integer_overflow_message(self):
        _, errors = parse("x + 9223372036854775808")
        assert errors == [
            "line 1 column 5: could not parse 9223372036854775808 as integer"
        ]

    def test_unclosed_block(self):
        _, errors = parse("func() { 1")
        assert errors == ["line 1 column 11: expected next token to be }, got EOF instead"]

    def test_parsing_continues_after_failed_statement(self):
        """A failed statement is skipped and later statements still parse"""
        program, errors = parse("var = 5; var y = 2;")
        assert len(errors) == 2
        assert errors[0].startswith("line 1 column 5: expected next token to be IDENTIFIER")
        assert str(program) == "5;var y = 2;"

    def test_errors_accumulate_across_lines(self):
        _, errors = parse("var a = ;\nvar b = ;")
        assert len(errors) == 2
        assert errors[0].startswith("line 1 column 9:")
        assert errors[1].startswith("line 2 column 9:")
