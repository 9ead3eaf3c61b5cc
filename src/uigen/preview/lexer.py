"""Tokenizer for the generated-component JavaScript dialect."""

from dataclasses import dataclass, field
from typing import Any

from .errors import CompileError

KEYWORDS = frozenset({
    "function", "return", "const", "let", "var", "if", "else", "for", "of", "in",
    "while", "break", "continue", "new", "typeof", "true", "false", "null",
    "undefined", "this", "switch", "case", "default",
})

# Longest first so that greedy matching picks "===" over "==" over "="
PUNCTUATORS = (
    "...", "===", "!==", "**=", "??=", "&&=", "||=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--",
    "+=", "-=", "*=", "/=", "%=", "**",
    "{", "}", "(", ")", "[", "]", ";", ",", "<", ">", "+", "-", "*", "/", "%",
    "=", "!", "?", ":", ".",
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


@dataclass
class Token:
    """One lexical token; nl_before marks a line break before it."""

    type: str  # num, str, template, ident, keyword, punct, eof
    value: Any
    line: int
    nl_before: bool = False
    parts: list = field(default_factory=list)

    def is_punct(self, *values: str) -> bool:
        return self.type == "punct" and self.value in values

    def is_keyword(self, *values: str) -> bool:
        return self.type == "keyword" and self.value in values

    def describe(self) -> str:
        if self.type == "eof":
            return "end of input"
        return repr(str(self.value))


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_ident_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class Lexer:
    """Converts source text to a token list."""

    def __init__(self, source: str, line: int = 1) -> None:
        self.source = source
        self.pos = 0
        self.line = line
        self.tokens: list[Token] = []
        self._nl = False

    def error(self, message: str) -> CompileError:
        return CompileError(f"{message} (line {self.line})")

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else ""

    def tokenize(self) -> list[Token]:
        while True:
            self._skip_trivia()
            if self.pos >= len(self.source):
                self._emit("eof", None)
                return self.tokens

            ch = self.peek()
            if ch.isdigit() or (ch == "." and self.peek(1).isdigit()):
                self._read_number()
            elif _is_ident_start(ch):
                self._read_word()
            elif ch in "'\"":
                self._emit("str", self._read_string(ch))
            elif ch == "`":
                self._read_template()
            else:
                self._read_punct()

    def _emit(self, type_: str, value: Any, parts: list | None = None) -> None:
        self.tokens.append(Token(type_, value, self.line, self._nl, parts or []))
        self._nl = False

    def _skip_trivia(self) -> None:
        while self.pos < len(self.source):
            ch = self.peek()
            if ch == "\n":
                self.line += 1
                self._nl = True
                self.pos += 1
            elif ch.isspace():
                self.pos += 1
            elif ch == "/" and self.peek(1) == "/":
                while self.pos < len(self.source) and self.peek() != "\n":
                    self.pos += 1
            elif ch == "/" and self.peek(1) == "*":
                end = self.source.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("Unterminated comment")
                comment = self.source[self.pos:end]
                if "\n" in comment:
                    self.line += comment.count("\n")
                    self._nl = True
                self.pos = end + 2
            else:
                return

    def _read_number(self) -> None:
        start = self.pos
        if self.peek() == "0" and self.peek(1) and self.peek(1) in "xX":
            self.pos += 2
            while self.peek() and (self.peek() in "0123456789abcdefABCDEF_"):
                self.pos += 1
            self._emit("num", int(self.source[start + 2:self.pos].replace("_", ""), 16))
            return

        while self.peek().isdigit() or self.peek() == "_":
            self.pos += 1
        if self.peek() == "." and self.peek(1).isdigit():
            self.pos += 1
            while self.peek().isdigit() or self.peek() == "_":
                self.pos += 1
        if self.peek() and self.peek() in "eE" and self.peek(1) and (self.peek(1).isdigit() or self.peek(1) in "+-"):
            self.pos += 2
            while self.peek().isdigit():
                self.pos += 1

        text = self.source[start:self.pos].replace("_", "")
        try:
            if "." in text or "e" in text.lower():
                self._emit("num", float(text))
            else:
                self._emit("num", int(text))
        except ValueError:
            raise self.error(f"Invalid number {text!r}") from None

    def _read_word(self) -> None:
        start = self.pos
        while self.peek() and _is_ident_part(self.peek()):
            self.pos += 1
        word = self.source[start:self.pos]
        self._emit("keyword" if word in KEYWORDS else "ident", word)

    def _read_escape(self) -> str:
        ch = self.peek()
        self.pos += 1
        if ch == "u":
            if self.peek() == "{":
                end = self.source.find("}", self.pos)
                code = self.source[self.pos + 1:end]
                self.pos = end + 1
            else:
                code = self.source[self.pos:self.pos + 4]
                self.pos += 4
            try:
                return chr(int(code, 16))
            except ValueError:
                raise self.error("Invalid Unicode escape sequence") from None
        if ch == "x":
            code = self.source[self.pos:self.pos + 2]
            self.pos += 2
            try:
                return chr(int(code, 16))
            except ValueError:
                raise self.error("Invalid hexadecimal escape sequence") from None
        if ch == "\n":
            self.line += 1
            return ""
        return _ESCAPES.get(ch, ch)

    def _read_string(self, quote: str) -> str:
        self.pos += 1
        chars: list[str] = []
        while True:
            ch = self.peek()
            if not ch or ch == "\n":
                raise self.error("Unterminated string constant")
            self.pos += 1
            if ch == quote:
                return "".join(chars)
            if ch == "\\":
                chars.append(self._read_escape())
            else:
                chars.append(ch)

    def _read_template(self) -> None:
        """Template literal: cooked string parts plus token lists for each ${...}."""
        self.pos += 1
        start_line = self.line
        quasis: list[str] = []
        expressions: list[list[Token]] = []
        chars: list[str] = []

        while True:
            ch = self.peek()
            if not ch:
                raise self.error("Unterminated template literal")
            self.pos += 1
            if ch == "`":
                quasis.append("".join(chars))
                break
            if ch == "\\":
                chars.append(self._read_escape())
            elif ch == "$" and self.peek() == "{":
                self.pos += 1
                quasis.append("".join(chars))
                chars = []
                expr_line = self.line
                expressions.append(Lexer(self._read_template_expression(), expr_line).tokenize())
            else:
                if ch == "\n":
                    self.line += 1
                chars.append(ch)

        token = Token("template", quasis, start_line, self._nl, expressions)
        self.tokens.append(token)
        self._nl = False

    def _read_template_expression(self) -> str:
        depth = 0
        start = self.pos
        while True:
            ch = self.peek()
            if not ch:
                raise self.error("Unterminated template expression")
            if ch in "'\"":
                self._read_string(ch)
                continue
            if ch == "`":
                # nested template: skip to its end, honouring escapes
                self.pos += 1
                while self.peek() and self.peek() != "`":
                    self.pos += 2 if self.peek() == "\\" else 1
                self.pos += 1
                continue
            if ch == "\n":
                self.line += 1
            if ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0:
                    text = self.source[start:self.pos]
                    self.pos += 1
                    return text
                depth -= 1
            self.pos += 1

    def _read_punct(self) -> None:
        for punct in PUNCTUATORS:
            if self.source.startswith(punct, self.pos):
                # "?.5" is a conditional followed by a number
                if punct == "?." and self.peek(2).isdigit():
                    continue
                self.pos += len(punct)
                self._emit("punct", punct)
                return
        raise self.error(f"Unexpected character {self.peek()!r}")


def tokenize(source: str) -> list[Token]:
    """Tokenize source text."""
    return Lexer(source).tokenize()
