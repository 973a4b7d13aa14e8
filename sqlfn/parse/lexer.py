"""Lexer for the query declaration DSL."""
from __future__ import annotations

import re

import ply.lex as lex

from sqlfn.errors import ParseError

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'", "0": "\0"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def find_column(data: str, lexpos: int) -> int:
    """Return the 1-based column of ``lexpos`` within ``data``."""
    line_start = data.rfind("\n", 0, lexpos) + 1
    return lexpos - line_start + 1


def _unescape(body: str, lineno: int) -> str:
    def replace(match: re.Match[str]) -> str:
        char = match.group(1)
        if char not in _ESCAPES:
            raise ParseError(f"Unknown escape sequence '\\{char}' in string literal", lineno)
        return _ESCAPES[char]

    return _ESCAPE_RE.sub(replace, body)


class QueryLexer:
    """Lexer for tokenizing query declarations."""

    tokens = [
        "IDENTIFIER",
        "STRING",
        "HASH",
        "ARROW",
        "LBRACE",
        "RBRACE",
        "LBRACKET",
        "RBRACKET",
        "LPAREN",
        "RPAREN",
        "COLON",
        "COMMA",
        "EQUALS",
    ]

    # Simple tokens
    t_HASH = r"\#"
    t_ARROW = r"->"
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_COLON = r":"
    t_COMMA = r","
    t_EQUALS = r"="

    # Ignored characters (spaces, tabs, carriage returns)
    t_ignore = " \t\r"

    # Comments
    t_ignore_COMMENT = r"//[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore
        self._data = ""

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"""(?:.|\n)*?"""|"(?:[^"\\\n]|\\.)*"'
        raw = t.value
        if raw.startswith('"""'):
            t.value = raw[3:-3]
        else:
            t.value = _unescape(raw[1:-1], t.lineno)
        t.lexer.lineno += raw.count("\n")
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise ParseError(
            f"Illegal character '{t.value[0]}'",
            t.lineno,
            find_column(self._data, t.lexpos),
        )

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self._data = data
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def column(self, lexpos: int) -> int:
        """Return the 1-based column of ``lexpos`` in the current input."""
        return find_column(self._data, lexpos)

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
