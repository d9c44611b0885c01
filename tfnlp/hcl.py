"""Lexical checking, structural checking and canonical formatting of HCL text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

_IDENT = re.compile(r"[A-Za-z_][\w-]*")
_NUMBER = re.compile(r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_HEREDOC = re.compile(r"<<(-?)([A-Za-z_][\w-]*)[ \t]*\r?\n")
_TWO_CHAR_OPS = ("==", "!=", "<=", ">=", "&&", "||", "=>")
_PAIRS = {"(": ")", "[": "]", "{": "}"}


class HCLSyntaxError(ValueError):
    """Raised when text is not well-formed HCL."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"config.tf:{line}: {message}")
        self.line = line


class _Kind(Enum):
    NEWLINE = auto()
    IDENT = auto()
    STRING = auto()
    HEREDOC = auto()
    NUMBER = auto()
    OP = auto()
    OPEN = auto()
    CLOSE = auto()
    COMMENT = auto()


@dataclass(frozen=True)
class _Token:
    kind: _Kind
    text: str
    line: int


def _scan_string(text: str, start: int, line: int) -> int:
    """Return the index just past the string literal opening at ``start``."""
    pos = start + 1
    depth = 0
    while pos < len(text):
        if text.startswith("$${", pos) or text.startswith("%%{", pos):
            pos += 3
            continue
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "\n":
            break
        if text.startswith("${", pos) or text.startswith("%{", pos):
            depth += 1
            pos += 2
            continue
        if depth:
            if char == "}":
                depth -= 1
            elif char == "{":
                depth += 1
            elif char == '"':
                pos = _scan_string(text, pos, line)
                continue
        elif char == '"':
            return pos + 1
        pos += 1
    raise HCLSyntaxError("unterminated string literal", line)


def _tokenize(text: str) -> tuple[list[_Token], set[int]]:
    """Split text into tokens; also return lines whose text must be kept verbatim."""
    tokens: list[_Token] = []
    verbatim: set[int] = set()
    pos, line, length = 0, 1, len(text)
    while pos < length:
        char = text[pos]
        if char == "\n":
            tokens.append(_Token(_Kind.NEWLINE, "\n", line))
            line += 1
            pos += 1
        elif char in " \t\r":
            pos += 1
        elif char == "#" or text.startswith("//", pos):
            end = text.find("\n", pos)
            end = length if end < 0 else end
            tokens.append(_Token(_Kind.COMMENT, text[pos:end], line))
            pos = end
        elif text.startswith("/*", pos):
            end = text.find("*/", pos + 2)
            if end < 0:
                raise HCLSyntaxError("unterminated comment", line)
            body = text[pos:end + 2]
            extra = body.count("\n")
            verbatim.update(range(line + 1, line + extra + 1))
            tokens.append(_Token(_Kind.COMMENT, body, line))
            line += extra
            pos = end + 2
        elif char == '"':
            end = _scan_string(text, pos, line)
            tokens.append(_Token(_Kind.STRING, text[pos:end], line))
            pos = end
        elif text.startswith("<<", pos):
            pos, line = _scan_heredoc(text, pos, line, tokens, verbatim)
        elif match := _IDENT.match(text, pos):
            tokens.append(_Token(_Kind.IDENT, match.group(), line))
            pos = match.end()
        elif match := _NUMBER.match(text, pos):
            tokens.append(_Token(_Kind.NUMBER, match.group(), line))
            pos = match.end()
        elif char in "([{":
            tokens.append(_Token(_Kind.OPEN, char, line))
            pos += 1
        elif char in ")]}":
            tokens.append(_Token(_Kind.CLOSE, char, line))
            pos += 1
        elif text.startswith("...", pos):
            tokens.append(_Token(_Kind.OP, "...", line))
            pos += 3
        elif text[pos:pos + 2] in _TWO_CHAR_OPS:
            tokens.append(_Token(_Kind.OP, text[pos:pos + 2], line))
            pos += 2
        else:
            tokens.append(_Token(_Kind.OP, char, line))
            pos += 1
    return tokens, verbatim


def _scan_heredoc(
    text: str, pos: int, line: int, tokens: list[_Token], verbatim: set[int]
) -> tuple[int, int]:
    match = _HEREDOC.match(text, pos)
    if not match:
        raise HCLSyntaxError("invalid heredoc introducer", line)
    marker = match.group(2)
    cursor, current = match.end(), line + 1
    while True:
        if cursor >= len(text):
            raise HCLSyntaxError(f"unterminated heredoc {marker!r}", line)
        end = text.find("\n", cursor)
        end = len(text) if end < 0 else end
        verbatim.add(current)
        if text[cursor:end].strip() == marker:
            break
        cursor, current = end + 1, current + 1
    tokens.append(_Token(_Kind.HEREDOC, text[pos:end], line))
    return end, current


class _Parser:
    def __init__(self, tokens: list[_Token]) -> None:
        self.tokens = [token for token in tokens if token.kind is not _Kind.COMMENT]
        self.pos = 0

    def _peek(self) -> _Token | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _last_line(self) -> int:
        return self.tokens[-1].line if self.tokens else 1

    def _skip_newlines(self) -> None:
        while (token := self._peek()) is not None and token.kind is _Kind.NEWLINE:
            self.pos += 1

    def body(self, nested: bool) -> None:
        while True:
            self._skip_newlines()
            token = self._peek()
            if token is None:
                if nested:
                    raise HCLSyntaxError("unclosed block", self._last_line())
                return
            if token.kind is _Kind.CLOSE and token.text == "}":
                if nested:
                    return
                raise HCLSyntaxError("unexpected '}'", token.line)
            if token.kind is not _Kind.IDENT:
                raise HCLSyntaxError(
                    f"expected an attribute or block, found {token.text!r}", token.line
                )
            self.pos += 1
            following = self._peek()
            if following is not None and following.kind is _Kind.OP and following.text == "=":
                self.pos += 1
                self._expression(token.line)
            else:
                self._block(token)
            self._end_of_statement()

    def _block(self, name: _Token) -> None:
        while (token := self._peek()) is not None and token.kind in (_Kind.IDENT, _Kind.STRING):
            self.pos += 1
        token = self._peek()
        if token is None or token.kind is not _Kind.OPEN or token.text != "{":
            line = token.line if token is not None else name.line
            raise HCLSyntaxError(f"expected '=' or '{{' after {name.text!r}", line)
        self.pos += 1
        self.body(nested=True)
        self.pos += 1

    def _expression(self, line: int) -> None:
        stack: list[_Token] = []
        count = 0
        while (token := self._peek()) is not None:
            if token.kind is _Kind.NEWLINE and not stack:
                break
            if token.kind is _Kind.CLOSE:
                if not stack:
                    if token.text == "}":
                        break
                    raise HCLSyntaxError(f"unexpected {token.text!r}", token.line)
                if _PAIRS[stack[-1].text] != token.text:
                    raise HCLSyntaxError(
                        f"mismatched {token.text!r} for {stack[-1].text!r}", token.line
                    )
                stack.pop()
            elif token.kind is _Kind.OPEN:
                stack.append(token)
            self.pos += 1
            count += 1
        if stack:
            raise HCLSyntaxError(f"unclosed {stack[-1].text!r}", stack[-1].line)
        if count == 0:
            raise HCLSyntaxError("expected an expression", line)

    def _end_of_statement(self) -> None:
        token = self._peek()
        if token is None:
            return
        if token.kind is _Kind.NEWLINE:
            self.pos += 1
        elif not (token.kind is _Kind.CLOSE and token.text == "}"):
            raise HCLSyntaxError(f"unexpected {token.text!r} after statement", token.line)


def check_syntax(text: str) -> None:
    """Raise HCLSyntaxError if text is not a well-formed HCL body."""
    tokens, _ = _tokenize(text)
    _Parser(tokens).body(nested=False)


@dataclass
class _LineInfo:
    start_depth: int
    end_depth: int
    first: _Token
    second: _Token | None = None


def _line_infos(tokens: list[_Token]) -> dict[int, _LineInfo]:
    infos: dict[int, _LineInfo] = {}
    depth = 0
    for token in tokens:
        if token.kind is _Kind.NEWLINE:
            continue
        info = infos.get(token.line)
        if info is None:
            info = infos[token.line] = _LineInfo(depth, depth, token)
        elif info.second is None:
            info.second = token
        if token.kind is _Kind.OPEN:
            depth += 1
        elif token.kind is _Kind.CLOSE:
            depth = max(0, depth - 1)
        info.end_depth = depth
    return infos


def _attribute(info: _LineInfo | None, stripped: str) -> tuple[str, str] | None:
    """Return (key, value) for a single-line attribute, else None."""
    if (
        info is None
        or info.first.kind is not _Kind.IDENT
        or info.second is None
        or info.second.kind is not _Kind.OP
        or info.second.text != "="
        or info.end_depth > info.start_depth
    ):
        return None
    key = info.first.text
    remainder = stripped[len(key):].lstrip()
    return key, remainder[1:].strip()


def format_hcl(text: str) -> str:
    """Re-indent by two spaces per level and align '=' in runs of attributes."""
    tokens, verbatim = _tokenize(text)
    infos = _line_infos(tokens)
    output: list[str] = []
    group: list[tuple[str, str, str]] = []

    def flush() -> None:
        width = max((len(key) for _, key, _ in group), default=0)
        output.extend(f"{indent}{key.ljust(width)} = {value}" for indent, key, value in group)
        group.clear()

    for number, raw in enumerate(text.split("\n"), start=1):
        if number in verbatim:
            flush()
            output.append(raw)
            continue
        stripped = raw.strip()
        info = infos.get(number)
        if not stripped or info is None:
            flush()
            output.append(stripped)
            continue
        level = info.start_depth
        if info.first.kind is _Kind.CLOSE:
            level = max(0, level - 1)
        indent = "  " * level
        attribute = _attribute(info, stripped)
        if attribute is None:
            flush()
            output.append(indent + stripped)
            continue
        if group and group[-1][0] != indent:
            flush()
        group.append((indent, *attribute))
    flush()
    return "\n".join(output)