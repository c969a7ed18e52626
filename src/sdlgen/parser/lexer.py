# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for GraphQL SDL files.

Converts raw source text into a sequence of tokens for subsequent parsing.
The scanner never aborts: characters it cannot interpret and unterminated
strings are delivered as ``INVALID`` tokens carrying an error message, so the
parser can report them and recover at the next declaration.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the SDL lexer."""

    # Keywords (GraphQL keywords are contextual; the parser accepts them as names)
    TYPE = "type"
    ENUM = "enum"
    INTERFACE = "interface"
    EXTEND = "extend"
    IMPLEMENTS = "implements"
    SCALAR = "scalar"
    UNION = "union"
    INPUT = "input"
    DIRECTIVE = "directive"
    SCHEMA = "schema"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"

    # Punctuators
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COLON = ":"
    BANG = "!"
    EQUALS = "="
    AT = "@"
    AMP = "&"
    PIPE = "|"

    # Literals
    STRING = "STRING"
    BLOCK_STRING = "BLOCK_STRING"
    INT = "INT"
    FLOAT = "FLOAT"

    # Identifiers
    NAME = "NAME"

    # Unrecognized input
    INVALID = "INVALID"

    # End of file
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (or decoded content for string tokens).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
        end_line: 1-based line number of the token's last character.
        end_column: Column one past the token's last character.
        message: Error description, set only for ``INVALID`` tokens.
    """

    type: TokenType
    value: str
    line: int
    column: int
    end_line: int
    end_column: int
    message: str | None = None


KEYWORDS: dict[str, TokenType] = {
    "type": TokenType.TYPE,
    "enum": TokenType.ENUM,
    "interface": TokenType.INTERFACE,
    "extend": TokenType.EXTEND,
    "implements": TokenType.IMPLEMENTS,
    "scalar": TokenType.SCALAR,
    "union": TokenType.UNION,
    "input": TokenType.INPUT,
    "directive": TokenType.DIRECTIVE,
    "schema": TokenType.SCHEMA,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
}


def tokenize(source: str) -> list[Token]:
    """Tokenize SDL source text into a sequence of tokens.

    Returns a list of tokens. The final token is always an EOF token.
    Whitespace, commas and ``#`` comments are insignificant and not included
    in the output.

    Args:
        source: The full text of a ``.graphql`` file.

    Returns:
        A list of Token objects ending with a single EOF token.
    """
    return _Lexer(source).tokenize()


def dedent_block_string(raw: str) -> str:
    """Apply GraphQL block string semantics to the raw text between ``\"\"\"``.

    Removes the common indentation of all lines but the first, then drops
    leading and trailing blank lines.
    """
    lines = raw.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    common_indent: int | None = None
    for line in lines[1:]:
        stripped = line.lstrip(" \t")
        if not stripped:
            continue
        indent = len(line) - len(stripped)
        if common_indent is None or indent < common_indent:
            common_indent = indent
    if common_indent:
        lines = [lines[0]] + [line[common_indent:] for line in lines[1:]]
    while lines and not lines[0].strip(" \t"):
        lines.pop(0)
    while lines and not lines[-1].strip(" \t"):
        lines.pop()
    return "\n".join(lines)


# ################
# Implementation
# ################

_PUNCTUATORS: dict[str, TokenType] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ":": TokenType.COLON,
    "!": TokenType.BANG,
    "=": TokenType.EQUALS,
    "@": TokenType.AT,
    "&": TokenType.AMP,
    "|": TokenType.PIPE,
}

_SIMPLE_ESCAPES: dict[str, str] = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source.removeprefix("\ufeff")
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_ignored()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._line, self._column, self._line, self._column))
        return self._tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character *offset* positions ahead, or '' past end of input."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n" or (ch == "\r" and self._current() != "\n"):
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _emit(self, token_type: TokenType, value: str, line: int, col: int, message: str | None = None) -> None:
        self._tokens.append(Token(token_type, value, line, col, self._line, self._column, message))

    # ------------------------------------------------------------------
    # Ignored tokens
    # ------------------------------------------------------------------

    def _skip_ignored(self) -> None:
        """Skip whitespace, line terminators, commas and comments."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\n,":
                self._advance()
            elif ch == "#":
                while self._pos < len(self._source) and self._current() not in "\r\n":
                    self._advance()
            else:
                break

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line = self._line
        col = self._column

        if ch in _PUNCTUATORS:
            self._advance()
            self._emit(_PUNCTUATORS[ch], ch, line, col)
        elif ch == '"':
            if self._peek() == '"' and self._peek(2) == '"':
                self._scan_block_string(line, col)
            else:
                self._scan_string(line, col)
        elif ch == "-" or ch.isdigit():
            self._scan_number(line, col)
        elif ch.isascii() and (ch.isalpha() or ch == "_"):
            self._scan_name(line, col)
        else:
            self._advance()
            self._emit(TokenType.INVALID, ch, line, col, f"Unexpected character {ch!r}")

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_string(self, line: int, col: int) -> None:
        """Scan a single-line double-quoted string with escape sequences."""
        self._advance()  # opening "
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == '"':
                self._advance()  # closing "
                self._emit(TokenType.STRING, "".join(chars), line, col)
                return
            if ch in "\r\n":
                break
            if ch == "\\":
                self._advance()
                esc = self._current()
                if esc in _SIMPLE_ESCAPES:
                    chars.append(_SIMPLE_ESCAPES[esc])
                    self._advance()
                elif esc == "u":
                    self._advance()
                    digits = self._source[self._pos : self._pos + 4]
                    if len(digits) != 4 or any(c not in "0123456789abcdefABCDEF" for c in digits):
                        self._emit(TokenType.INVALID, digits, line, col, "Invalid unicode escape sequence")
                        self._skip_to_line_end()
                        return
                    for _ in range(4):
                        self._advance()
                    chars.append(chr(int(digits, 16)))
                else:
                    self._emit(TokenType.INVALID, esc, line, col, f"Invalid escape sequence: '\\{esc}'")
                    self._skip_to_line_end()
                    return
            else:
                chars.append(ch)
                self._advance()
        self._emit(TokenType.INVALID, "".join(chars), line, col, "Unterminated string literal")

    def _scan_block_string(self, line: int, col: int) -> None:
        """Scan a triple-quoted block string."""
        for _ in range(3):
            self._advance()
        chars: list[str] = []
        while self._pos < len(self._source):
            if self._current() == '"' and self._peek() == '"' and self._peek(2) == '"':
                for _ in range(3):
                    self._advance()
                self._emit(TokenType.BLOCK_STRING, dedent_block_string("".join(chars)), line, col)
                return
            if self._current() == "\\" and self._source.startswith('"""', self._pos + 1):
                for _ in range(4):
                    self._advance()
                chars.append('"""')
                continue
            chars.append(self._advance())
        self._emit(TokenType.INVALID, "".join(chars), line, col, "Unterminated block string")

    def _skip_to_line_end(self) -> None:
        while self._pos < len(self._source) and self._current() not in "\r\n":
            self._advance()

    def _scan_number(self, line: int, col: int) -> None:
        """Scan an integer or floating-point literal.

        A float has a fractional part, an exponent, or both.
        """
        start = self._pos
        if self._current() == "-":
            self._advance()
        if not self._current().isdigit():
            self._emit(TokenType.INVALID, "-", line, col, "Expected digit after '-'")
            return
        self._consume_digits()
        is_float = False
        if self._current() == "." and self._peek().isdigit():
            is_float = True
            self._advance()  # consume the '.'
            self._consume_digits()
        if self._current() in "eE" and self._current() != "":
            sign_offset = 2 if self._peek() in "+-" and self._peek() != "" else 1
            if self._peek(sign_offset).isdigit():
                is_float = True
                for _ in range(sign_offset):
                    self._advance()
                self._consume_digits()
        value = self._source[start : self._pos]
        self._emit(TokenType.FLOAT if is_float else TokenType.INT, value, line, col)

    def _consume_digits(self) -> None:
        while self._pos < len(self._source) and self._current().isdigit():
            self._advance()

    def _scan_name(self, line: int, col: int) -> None:
        """Scan a name and map it to a keyword token type if applicable."""
        start = self._pos
        while self._pos < len(self._source) and (
            self._current().isascii() and (self._current().isalnum() or self._current() == "_")
        ):
            self._advance()
        value = self._source[start : self._pos]
        self._emit(KEYWORDS.get(value, TokenType.NAME), value, line, col)
