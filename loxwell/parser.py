from __future__ import annotations
from .lexer import TokenType, Token
from .errors import ErrorReporter
from . import ast_nodes as ast

TT = TokenType

MAX_ARGS = 255

NESTED_TOO_DEEPLY = "Expression nested too deeply."

# Token types that begin a statement; synchronization stops in front of them.
_STATEMENT_START = (
    TT.CLASS, TT.FUN, TT.VAR, TT.FOR, TT.IF, TT.WHILE, TT.PRINT, TT.RETURN,
)


class ParseError(Exception):
    """Unwinds the parser to the enclosing declaration after a syntax error."""


class Parser:
    def __init__(self, tokens: list[Token], reporter: ErrorReporter | None = None):
        self.tokens = tokens
        self.reporter = reporter or ErrorReporter()
        self.pos = 0

    # ---- helpers ----

    def _cur(self) -> Token:
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def _at_end(self) -> bool:
        return self._cur().type == TT.EOF

    def _check(self, kind: TokenType) -> bool:
        return self._cur().type == kind

    def _advance(self) -> Token:
        if not self._at_end():
            self.pos += 1
        return self._previous()

    def _match(self, *kinds: TokenType) -> Token | None:
        for kind in kinds:
            if self._check(kind):
                return self._advance()
        return None

    def _expect(self, kind: TokenType, msg: str) -> Token:
        if self._check(kind):
            return self._advance()
        raise self._error(self._cur(), msg)

    def _error(self, token: Token, msg: str) -> ParseError:
        self.reporter.error_at(token, msg)
        return ParseError(msg)

    def _synchronize(self):
        self._advance()
        while not self._at_end():
            if self._previous().type == TT.SEMICOLON:
                return
            if self._cur().type in _STATEMENT_START:
                return
            self._advance()

    # ---- top-level ----

    def parse(self) -> list:
        statements: list = []
        while not self._at_end():
            try:
                stmt = self._declaration()
            except RecursionError:
                self._error(self._cur(), NESTED_TOO_DEEPLY)
                self._synchronize()
                continue
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_expression(self):
        """Parse a lone expression up to end of input; None on a syntax error."""
        try:
            expr = self._expression()
            self._expect(TT.EOF, "Expect end of expression.")
            return expr
        except ParseError:
            return None
        except RecursionError:
            self._error(self._cur(), NESTED_TOO_DEEPLY)
            return None

    # ---- declarations ----

    def _declaration(self):
        try:
            if self._match(TT.CLASS):
                return self._class_declaration()
            if self._match(TT.FUN):
                return self._function("function")
            if self._match(TT.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None

    def _class_declaration(self):
        name = self._expect(TT.IDENTIFIER, "Expect class name.")
        superclass = None
        if self._match(TT.LESS):
            self._expect(TT.IDENTIFIER, "Expect superclass name.")
            superclass = ast.Variable(self._previous())

        self._expect(TT.LEFT_BRACE, "Expect '{' before class body.")
        methods: list = []
        while not self._check(TT.RIGHT_BRACE) and not self._at_end():
            methods.append(self._function("method"))
        self._expect(TT.RIGHT_BRACE, "Expect '}' after class body.")
        return ast.Class(name, superclass, methods)

    def _function(self, kind: str):
        name = self._expect(TT.IDENTIFIER, f"Expect {kind} name.")
        self._expect(TT.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: list[Token] = []
        if not self._check(TT.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self._error(self._cur(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self._expect(TT.IDENTIFIER, "Expect parameter name."))
                if not self._match(TT.COMMA):
                    break
        self._expect(TT.RIGHT_PAREN, "Expect ')' after parameters.")
        self._expect(TT.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self._block()
        return ast.Function(name, params, body)

    def _var_declaration(self):
        name = self._expect(TT.IDENTIFIER, "Expect variable name.")
        initializer = None
        if self._match(TT.EQUAL):
            initializer = self._expression()
        self._expect(TT.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer)

    # ---- statements ----

    def _statement(self):
        if self._match(TT.FOR):
            return self._for_statement()
        if self._match(TT.IF):
            return self._if_statement()
        if self._match(TT.PRINT):
            return self._print_statement()
        if self._match(TT.RETURN):
            return self._return_statement()
        if self._match(TT.WHILE):
            return self._while_statement()
        if self._match(TT.LEFT_BRACE):
            line = self._previous().line
            return ast.Block(self._block(), line=line)
        return self._expression_statement()

    def _for_statement(self):
        line = self._previous().line
        self._expect(TT.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TT.SEMICOLON):
            initializer = None
        elif self._match(TT.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = None
        if not self._check(TT.SEMICOLON):
            condition = self._expression()
        self._expect(TT.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TT.RIGHT_PAREN):
            increment = self._expression()
        self._expect(TT.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()

        # Desugar to: { initializer; while (condition) { body; increment; } }
        if increment is not None:
            body = ast.Block([body, ast.Expression(increment, line=line)], line=line)
        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body, line=line)
        if initializer is not None:
            body = ast.Block([initializer, body], line=line)
        return body

    def _if_statement(self):
        line = self._previous().line
        self._expect(TT.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._expect(TT.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch = None
        if self._match(TT.ELSE):
            else_branch = self._statement()
        return ast.If(condition, then_branch, else_branch, line=line)

    def _print_statement(self):
        line = self._previous().line
        value = self._expression()
        self._expect(TT.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value, line=line)

    def _return_statement(self):
        keyword = self._previous()
        value = None
        if not self._check(TT.SEMICOLON):
            value = self._expression()
        self._expect(TT.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def _while_statement(self):
        line = self._previous().line
        self._expect(TT.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._expect(TT.RIGHT_PAREN, "Expect ')' after condition.")
        body = self._statement()
        return ast.While(condition, body, line=line)

    def _block(self) -> list:
        statements: list = []
        while not self._check(TT.RIGHT_BRACE) and not self._at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        self._expect(TT.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _expression_statement(self):
        line = self._cur().line
        expr = self._expression()
        self._expect(TT.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expr, line=line)

    # ---- expressions ----

    def _expression(self):
        return self._assignment()

    def _assignment(self):
        expr = self._or()

        equals = self._match(TT.EQUAL)
        if equals is not None:
            value = self._assignment()
            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value)
            if isinstance(expr, ast.Get):
                return ast.Set(expr.object, expr.name, value)
            # reported without unwinding
            self._error(equals, "Invalid assignment target.")
        return expr

    def _or(self):
        expr = self._and()
        while self._match(TT.OR):
            operator = self._previous()
            right = self._and()
            expr = ast.Logical(expr, operator, right)
        return expr

    def _and(self):
        expr = self._equality()
        while self._match(TT.AND):
            operator = self._previous()
            right = self._equality()
            expr = ast.Logical(expr, operator, right)
        return expr

    def _binary(self, operand, *kinds: TokenType):
        expr = operand()
        while self._match(*kinds):
            operator = self._previous()
            right = operand()
            expr = ast.Binary(expr, operator, right)
        return expr

    def _equality(self):
        return self._binary(self._comparison, TT.BANG_EQUAL, TT.EQUAL_EQUAL)

    def _comparison(self):
        return self._binary(
            self._term, TT.GREATER, TT.GREATER_EQUAL, TT.LESS, TT.LESS_EQUAL,
        )

    def _term(self):
        return self._binary(self._factor, TT.MINUS, TT.PLUS)

    def _factor(self):
        return self._binary(self._unary, TT.SLASH, TT.STAR)

    def _unary(self):
        if self._match(TT.BANG, TT.MINUS):
            operator = self._previous()
            right = self._unary()
            return ast.Unary(operator, right)
        return self._call()

    def _call(self):
        expr = self._primary()
        while True:
            if self._match(TT.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TT.DOT):
                name = self._expect(TT.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                break
        return expr

    def _finish_call(self, callee):
        arguments: list = []
        if not self._check(TT.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self._error(self._cur(), f"Can't have more than {MAX_ARGS} arguments.")
                arguments.append(self._expression())
                if not self._match(TT.COMMA):
                    break
        paren = self._expect(TT.RIGHT_PAREN, "Expect ')' after arguments.")
        return ast.Call(callee, paren, arguments)

    def _primary(self):
        if self._match(TT.FALSE):
            return ast.Literal(False)
        if self._match(TT.TRUE):
            return ast.Literal(True)
        if self._match(TT.NIL):
            return ast.Literal(None)
        if self._match(TT.NUMBER, TT.STRING):
            return ast.Literal(self._previous().literal)
        if self._match(TT.SUPER):
            keyword = self._previous()
            self._expect(TT.DOT, "Expect '.' after 'super'.")
            method = self._expect(TT.IDENTIFIER, "Expect superclass method name.")
            return ast.Super(keyword, method)
        if self._match(TT.THIS):
            return ast.This(self._previous())
        if self._match(TT.IDENTIFIER):
            return ast.Variable(self._previous())
        if self._match(TT.LEFT_PAREN):
            expr = self._expression()
            self._expect(TT.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expr)
        raise self._error(self._cur(), "Expect expression.")


def parse(tokens: list[Token], reporter: ErrorReporter | None = None) -> list:
    """Best-effort parse: malformed declarations are reported and dropped."""
    return Parser(tokens, reporter).parse()
