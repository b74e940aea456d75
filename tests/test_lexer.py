import pytest
from loxwell.lexer import Lexer, TokenType as TT, Token, scan
from loxwell.errors import ErrorReporter


def kinds(source: str) -> list:
    return [t.type for t in scan(source)]


class TestNumbers:
    def test_integer(self):
        tokens = Lexer("42").tokens
        assert tokens[0].type == TT.NUMBER
        assert tokens[0].literal == 42.0
        assert isinstance(tokens[0].literal, float)

    def test_fraction(self):
        tokens = Lexer("3.14").tokens
        assert tokens[0].literal == 3.14
        assert tokens[0].lexeme == "3.14"

    def test_trailing_dot_not_consumed(self):
        assert kinds("123.") == [TT.NUMBER, TT.DOT, TT.EOF]
        assert Lexer("123.").tokens[0].literal == 123.0

    def test_leading_dot_is_a_dot(self):
        assert kinds(".5") == [TT.DOT, TT.NUMBER, TT.EOF]

    def test_method_call_on_number(self):
        assert kinds("1.foo") == [TT.NUMBER, TT.DOT, TT.IDENTIFIER, TT.EOF]


class TestStrings:
    def test_string(self):
        tokens = Lexer('"hello"').tokens
        assert tokens[0].type == TT.STRING
        assert tokens[0].literal == "hello"
        assert tokens[0].lexeme == '"hello"'

    def test_empty_string(self):
        assert Lexer('""').tokens[0].literal == ""

    def test_no_escapes(self):
        assert Lexer(r'"a\nb"').tokens[0].literal == "a\\nb"

    def test_multiline_string_advances_line(self):
        tokens = Lexer('"a\nb"\nx').tokens
        assert tokens[0].line == 1
        assert tokens[0].literal == "a\nb"
        assert tokens[1].line == 3

    def test_unterminated_string(self):
        reporter = ErrorReporter()
        tokens = Lexer('var a;\n"abc\ndef', reporter).tokens
        assert reporter.diagnostics == ["[line 2] Error at end: Unterminated string."]
        assert [t.type for t in tokens] == [TT.VAR, TT.IDENTIFIER, TT.SEMICOLON, TT.EOF]


class TestOperators:
    def test_single_char(self):
        assert kinds("(){},.-+;/*") == [
            TT.LEFT_PAREN, TT.RIGHT_PAREN, TT.LEFT_BRACE, TT.RIGHT_BRACE,
            TT.COMMA, TT.DOT, TT.MINUS, TT.PLUS, TT.SEMICOLON, TT.SLASH,
            TT.STAR, TT.EOF,
        ]

    def test_maximal_munch(self):
        assert kinds("!= == <= >=") == [
            TT.BANG_EQUAL, TT.EQUAL_EQUAL, TT.LESS_EQUAL, TT.GREATER_EQUAL, TT.EOF,
        ]

    def test_one_char_prefixes(self):
        assert kinds("! = < >") == [TT.BANG, TT.EQUAL, TT.LESS, TT.GREATER, TT.EOF]

    def test_no_space_needed(self):
        assert kinds("a<=b") == [TT.IDENTIFIER, TT.LESS_EQUAL, TT.IDENTIFIER, TT.EOF]

    def test_triple_equal(self):
        assert kinds("===") == [TT.EQUAL_EQUAL, TT.EQUAL, TT.EOF]


class TestIdentifiers:
    def test_keywords(self):
        source = "and class else false for fun if nil or print return super this true var while"
        assert kinds(source)[:-1] == [
            TT.AND, TT.CLASS, TT.ELSE, TT.FALSE, TT.FOR, TT.FUN, TT.IF, TT.NIL,
            TT.OR, TT.PRINT, TT.RETURN, TT.SUPER, TT.THIS, TT.TRUE, TT.VAR,
            TT.WHILE,
        ]

    def test_identifier(self):
        tokens = Lexer("_foo_1 orchid").tokens
        assert tokens[0].type == TT.IDENTIFIER
        assert tokens[0].lexeme == "_foo_1"
        # keyword prefix does not make a keyword
        assert tokens[1].type == TT.IDENTIFIER


class TestComments:
    def test_line_comment(self):
        tokens = Lexer("// this is a comment\n42").tokens
        assert tokens[0].type == TT.NUMBER
        assert tokens[0].line == 2

    def test_comment_at_end_of_input(self):
        assert kinds("1 // trailing") == [TT.NUMBER, TT.EOF]

    def test_slash_alone(self):
        assert kinds("4 / 2") == [TT.NUMBER, TT.SLASH, TT.NUMBER, TT.EOF]


class TestErrors:
    def test_unexpected_char_continues(self):
        reporter = ErrorReporter()
        tokens = Lexer("a @ b # c", reporter).tokens
        assert [t.lexeme for t in tokens[:-1]] == ["a", "b", "c"]
        assert reporter.diagnostics == [
            "[line 1] Error: Unexpected character '@'.",
            "[line 1] Error: Unexpected character '#'.",
        ]

    def test_error_line(self):
        reporter = ErrorReporter()
        Lexer("\n\n  ?", reporter)
        assert reporter.lines == [3]


class TestTokens:
    def test_eof_always_last(self):
        tokens = Lexer("").tokens
        assert len(tokens) == 1
        assert tokens[0].type == TT.EOF
        assert tokens[0].lexeme == ""

    def test_eof_line(self):
        assert Lexer("a\nb\n").tokens[-1].line == 3

    def test_token_is_immutable(self):
        token = Lexer("x").tokens[0]
        with pytest.raises(AttributeError):
            token.lexeme = "y"

    def test_str(self):
        assert str(Token(TT.NUMBER, "1", 1.0, 1)) == "NUMBER 1 1.0"
        assert str(Token(TT.IDENTIFIER, "x", None, 1)) == "IDENTIFIER x null"


class TestRoundTrip:
    SOURCE = """
    // a comment
    class A < B { init(x) { this.x = x; } }
    var s = "two words
    and a line"; print s != nil and 1.5 >= -2; // trailing
    """

    def test_rescanning_lexemes_recovers_tokens(self):
        tokens = scan(self.SOURCE)
        rebuilt = " ".join(t.lexeme for t in tokens)
        again = scan(rebuilt)
        assert [(t.type, t.lexeme, t.literal) for t in again] == [
            (t.type, t.lexeme, t.literal) for t in tokens
        ]

    def test_lexemes_in_order(self):
        source = 'fun f(a, b) { return a <= b; } // done'
        assert [t.lexeme for t in scan(source)][:-1] == [
            "fun", "f", "(", "a", ",", "b", ")", "{", "return", "a", "<=",
            "b", ";", "}",
        ]
