import sys
import pytest
from loxwell import ast_nodes as ast
from loxwell.ast_printer import AstPrinter
from loxwell.errors import ErrorReporter
from loxwell.lexer import scan
from loxwell.parser import Parser, parse


def parse_src(source: str, reporter=None) -> list:
    reporter = reporter or ErrorReporter()
    return parse(scan(source, reporter), reporter)


def tree(source: str) -> str:
    """Helper: parse, assert no diagnostics, return printed tree."""
    reporter = ErrorReporter()
    statements = parse_src(source, reporter)
    assert reporter.diagnostics == []
    return AstPrinter().print(statements)


def errors(source: str) -> list:
    reporter = ErrorReporter()
    parse_src(source, reporter)
    return reporter.diagnostics


class TestPrecedence:
    def test_factor_over_term(self):
        assert tree("1 + 2 * 3;") == "(; (+ 1 (* 2 3)))"

    def test_left_associative(self):
        assert tree("1 - 2 - 3;") == "(; (- (- 1 2) 3))"

    def test_comparison_over_equality(self):
        assert tree("1 < 2 == true;") == "(; (== (< 1 2) true))"

    def test_and_over_or(self):
        assert tree("a or b and c;") == "(; (or a (and b c)))"

    def test_unary_nesting(self):
        assert tree("!!-x;") == "(; (! (! (- x))))"

    def test_grouping(self):
        assert tree("(1 + 2) * 3;") == "(; (* (group (+ 1 2)) 3))"

    def test_binary_node_is_left_leaning(self):
        stmt = parse_src("a * b / c;")[0]
        assert isinstance(stmt.expression, ast.Binary)
        assert isinstance(stmt.expression.left, ast.Binary)
        assert stmt.expression.operator.lexeme == "/"


class TestAssignment:
    def test_right_associative(self):
        assert tree("a = b = c;") == "(; (= a (= b c)))"

    def test_property_assignment_becomes_set(self):
        stmt = parse_src("a.b.c = 1;")[0]
        assert isinstance(stmt.expression, ast.Set)
        assert stmt.expression.name.lexeme == "c"
        assert isinstance(stmt.expression.object, ast.Get)

    def test_invalid_target(self):
        assert errors("1 + 2 = 3;") == ["[line 1] Error at '=': Invalid assignment target."]

    def test_invalid_target_keeps_parsing(self):
        reporter = ErrorReporter()
        statements = parse_src("(a) = 3; print 1;", reporter)
        assert len(reporter.diagnostics) == 1
        assert len(statements) == 2
        assert isinstance(statements[0].expression, ast.Grouping)


class TestCalls:
    def test_chained_calls(self):
        assert tree("f(1)(2, 3);") == "(; (call (call f 1) 2 3))"

    def test_method_chain(self):
        assert tree("a.b(1).c;") == "(; (. (call (. a b) 1) c))"

    def test_call_records_paren(self):
        expr = parse_src("f(\n1\n);")[0].expression
        assert expr.paren.line == 3

    def test_too_many_arguments_is_not_fatal(self):
        args = ", ".join(["1"] * 256)
        reporter = ErrorReporter()
        statements = parse_src(f"f({args});", reporter)
        assert reporter.diagnostics == [
            "[line 1] Error at '1': Can't have more than 255 arguments."
        ]
        assert len(statements[0].expression.arguments) == 256

    def test_255_arguments_ok(self):
        args = ", ".join(["1"] * 255)
        assert errors(f"f({args});") == []

    def test_too_many_parameters(self):
        params = ", ".join(f"p{i}" for i in range(256))
        assert errors(f"fun f({params}) {{}}") == [
            "[line 1] Error at 'p255': Can't have more than 255 parameters."
        ]


class TestStatements:
    def test_var(self):
        assert tree("var a = 1; var b;") == "(var a = 1)\n(var b)"

    def test_if_else(self):
        assert tree("if (a) print 1; else print 2;") == "(if-else a (print 1) (print 2))"

    def test_dangling_else_binds_nearest(self):
        assert tree("if (a) if (b) print 1; else print 2;") == (
            "(if a (if-else b (print 1) (print 2)))"
        )

    def test_while(self):
        assert tree("while (x) { x = x - 1; }") == "(while x (block (; (= x (- x 1)))))"

    def test_function(self):
        assert tree("fun add(a, b) { return a + b; }") == (
            "(fun add (a b) (return (+ a b)))"
        )

    def test_bare_return(self):
        assert tree("fun f() { return; }") == "(fun f () (return))"

    def test_class(self):
        assert tree("class B < A { init(x) { this.x = x; } get() { return super.get(); } }") == (
            "(class B < A (fun init (x) (; (= this x x))) "
            "(fun get () (return (call (super get)))))"
        )

    def test_class_without_superclass(self):
        stmt = parse_src("class A {}")[0]
        assert isinstance(stmt, ast.Class)
        assert stmt.superclass is None
        assert stmt.methods == []


class TestForDesugaring:
    def test_full_for(self):
        assert tree("for (var i = 0; i < 3; i = i + 1) print i;") == (
            "(block (var i = 0) (while (< i 3) (block (print i) (; (= i (+ i 1))))))"
        )

    def test_empty_clauses(self):
        assert tree("for (;;) print 1;") == "(while true (print 1))"

    def test_expression_initializer(self):
        assert tree("for (i = 0; i < 1;) print i;") == (
            "(block (; (= i 0)) (while (< i 1) (print i)))"
        )

    def test_no_for_node(self):
        stmt = parse_src("for (var i = 0; i < 1; i = i + 1) {}")[0]
        assert isinstance(stmt, ast.Block)
        assert isinstance(stmt.statements[1], ast.While)


class TestErrorRecovery:
    def test_missing_semicolon(self):
        assert errors("print 1") == ["[line 1] Error at end: Expect ';' after value."]

    def test_one_diagnostic_per_statement(self):
        reporter = ErrorReporter()
        statements = parse_src("var = 1 2 3;\nprint 4;\nvar x = ;\nprint 5;", reporter)
        assert reporter.diagnostics == [
            "[line 1] Error at '=': Expect variable name.",
            "[line 3] Error at ';': Expect expression.",
        ]
        assert [type(s) for s in statements] == [ast.Print, ast.Print]

    def test_synchronizes_at_statement_keyword(self):
        reporter = ErrorReporter()
        statements = parse_src("print + ) fun f() {} class C {}", reporter)
        assert len(reporter.diagnostics) == 1
        assert [type(s) for s in statements] == [ast.Function, ast.Class]

    def test_error_inside_block(self):
        reporter = ErrorReporter()
        statements = parse_src("{ print ; print 2; }", reporter)
        assert len(reporter.diagnostics) == 1
        assert len(statements[0].statements) == 1

    def test_unclosed_block(self):
        assert errors("{ print 1;") == ["[line 1] Error at end: Expect '}' after block."]

    def test_nesting_too_deep(self):
        depth = sys.getrecursionlimit()
        reporter = ErrorReporter()
        source = "print " + "(" * depth + "1" + ")" * depth + ";\nprint 2;"
        statements = parse_src(source, reporter)
        assert reporter.diagnostics == [
            "[line 1] Error at '(': Expression nested too deeply."
        ]
        assert len(statements) == 1
        assert statements[0].line == 2


class TestNodes:
    def test_node_ids_are_unique(self):
        statements = parse_src("a; a; a;")
        ids = {s.expression.node_id for s in statements}
        assert len(ids) == 3

    def test_nodes_are_frozen(self):
        stmt = parse_src("a;")[0]
        with pytest.raises(AttributeError):
            stmt.expression = None

    def test_nodes_compare_by_identity(self):
        first, second = parse_src("a; a;")
        assert first.expression != second.expression

    def test_statement_lines(self):
        statements = parse_src("print 1;\n\nx;\nif (a) {}\nwhile (b)\n{}\n{ }\nvar c;")
        assert [s.line for s in statements] == [1, 3, 4, 5, 7, 8]
        assert statements[3].body.line == 6

    def test_desugared_for_keeps_its_line(self):
        loop = parse_src("\nfor (var i = 0; i < 1; i = i + 1) {}")[0]
        assert loop.line == 2
        assert loop.statements[1].line == 2


class TestParseExpression:
    def test_parse_expression(self):
        expr = Parser(scan("1 + 2")).parse_expression()
        assert AstPrinter().print(expr) == "(+ 1 2)"

    def test_trailing_tokens(self):
        reporter = ErrorReporter()
        assert Parser(scan("1 2"), reporter).parse_expression() is None
        assert reporter.diagnostics == ["[line 1] Error at '2': Expect end of expression."]

    def test_nesting_too_deep(self):
        depth = sys.getrecursionlimit()
        reporter = ErrorReporter()
        expr = Parser(scan("-" + "(" * depth + "1" + ")" * depth), reporter).parse_expression()
        assert expr is None
        assert reporter.diagnostics == ["[line 1] Error at '(': Expression nested too deeply."]
