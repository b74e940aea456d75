from __future__ import annotations
from enum import Enum, auto
from .errors import ErrorReporter


class TokenType(Enum):
    # Single-character tokens
    LEFT_PAREN = auto()     # (
    RIGHT_PAREN = auto()    # )
    LEFT_BRACE = auto()     # {
    RIGHT_BRACE = auto()    # }
    COMMA = auto()          # ,
    DOT = auto()            # .
    MINUS = auto()          # -
    PLUS = auto()           # +
    SEMICOLON = auto()      # ;
    SLASH = auto()          # /
    STAR = auto()           # *
    # One or two character tokens
    BANG = auto()           # !
    BANG_EQUAL = auto()     # !=
    EQUAL = auto()          # =
    EQUAL_EQUAL = auto()    # ==
    GREATER = auto()        # >
    GREATER_EQUAL = auto()  # >=
    LESS = auto()           # <
    LESS_EQUAL = auto()     # <=
    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()
    EOF = auto()


TT = TokenType

KEYWORDS = {
    "and": TT.AND, "class": TT.CLASS, "else": TT.ELSE, "false": TT.FALSE,
    "for": TT.FOR, "fun": TT.FUN, "if": TT.IF, "nil": TT.NIL, "or": TT.OR,
    "print": TT.PRINT, "return": TT.RETURN, "super": TT.SUPER,
    "this": TT.THIS, "true": TT.TRUE, "var": TT.VAR, "while": TT.WHILE,
}

_SINGLE = {
    "(": TT.LEFT_PAREN, ")": TT.RIGHT_PAREN, "{": TT.LEFT_BRACE,
    "}": TT.RIGHT_BRACE, ",": TT.COMMA, ".": TT.DOT, "-": TT.MINUS,
    "+": TT.PLUS, ";": TT.SEMICOLON, "*": TT.STAR,
}

# first char -> (type when followed by '=', type otherwise)
_WITH_EQUAL = {
    "!": (TT.BANG_EQUAL, TT.BANG),
    "=": (TT.EQUAL_EQUAL, TT.EQUAL),
    "<": (TT.LESS_EQUAL, TT.LESS),
    ">": (TT.GREATER_EQUAL, TT.GREATER),
}


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Token:
    __slots__ = ("type", "lexeme", "literal", "line")

    def __init__(self, type: TokenType, lexeme: str, literal: object, line: int):
        object.__setattr__(self, "type", type)
        object.__setattr__(self, "lexeme", lexeme)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(self, "line", line)

    def __setattr__(self, name, value):
        raise AttributeError("Token is immutable")

    def __repr__(self):
        return f"Token({self.type.name}, {self.lexeme!r}, {self.literal!r}, line={self.line})"

    def __str__(self):
        literal = "null" if self.literal is None else self.literal
        return f"{self.type.name} {self.lexeme} {literal}"


class Lexer:
    def __init__(self, source: str, reporter: ErrorReporter | None = None):
        self.source = source
        self.reporter = reporter or ErrorReporter()
        self.start = 0
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []
        self._tokenize()

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _char(self) -> str:
        return self.source[self.pos] if self.pos < len(self.source) else ""

    def _peek(self, offset: int = 1) -> str:
        p = self.pos + offset
        return self.source[p] if p < len(self.source) else ""

    def _advance(self) -> str:
        ch = self.source[self.pos]
        if ch == "\n":
            self.line += 1
        self.pos += 1
        return ch

    def _match(self, expected: str) -> bool:
        if self.pos < len(self.source) and self.source[self.pos] == expected:
            self._advance()
            return True
        return False

    def _error(self, line: int, msg: str, where: str = ""):
        self.reporter.report(line, where, msg)

    def _add(self, kind: TokenType, literal: object = None, line: int | None = None):
        text = self.source[self.start : self.pos]
        self.tokens.append(Token(kind, text, literal, self.line if line is None else line))

    def _skip_whitespace_and_comments(self):
        while self.pos < len(self.source):
            ch = self._char()
            if ch in " \r\t\n":
                self._advance()
            elif ch == "/" and self._peek() == "/":
                # line comment
                while self.pos < len(self.source) and self._char() != "\n":
                    self._advance()
            else:
                break

    def _read_string(self):
        line = self.line
        self._advance()  # skip opening quote
        while self.pos < len(self.source) and self._char() != '"':
            self._advance()
        if self._at_end():
            self._error(line, "Unterminated string.", " at end")
            return
        self._advance()  # closing quote
        value = self.source[self.start + 1 : self.pos - 1]
        self._add(TT.STRING, value, line)

    def _read_number(self):
        while _is_digit(self._char()):
            self._advance()
        # a fractional part needs a digit after the '.'
        if self._char() == "." and _is_digit(self._peek()):
            self._advance()
            while _is_digit(self._char()):
                self._advance()
        self._add(TT.NUMBER, float(self.source[self.start : self.pos]))

    def _read_identifier(self):
        while _is_alpha(self._char()) or _is_digit(self._char()):
            self._advance()
        word = self.source[self.start : self.pos]
        self._add(KEYWORDS.get(word, TT.IDENTIFIER))

    def _tokenize(self):
        while True:
            self._skip_whitespace_and_comments()
            self.start = self.pos
            if self._at_end():
                self.tokens.append(Token(TT.EOF, "", None, self.line))
                return

            ch = self._char()

            if ch == '"':
                self._read_string()
                continue

            if _is_digit(ch):
                self._read_number()
                continue

            if _is_alpha(ch):
                self._read_identifier()
                continue

            self._advance()
            if ch in _SINGLE:
                self._add(_SINGLE[ch])
            elif ch in _WITH_EQUAL:
                double, single = _WITH_EQUAL[ch]
                self._add(double if self._match("=") else single)
            elif ch == "/":
                self._add(TT.SLASH)
            else:
                self._error(self.line, f"Unexpected character '{ch}'.")


def scan(source: str, reporter: ErrorReporter | None = None) -> list[Token]:
    """Tokenize ``source``; errors go to ``reporter`` and scanning goes on."""
    return Lexer(source, reporter).tokens
