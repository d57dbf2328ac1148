"""Position-preserving reader for `kafka_topic` resources in HCL sources.

Only the subset of the language the topic rules need is understood: the
lexer recognises every token class so unrelated blocks are skipped safely,
while the parser extracts `resource "kafka_topic"` blocks, their plain
attributes, the entries of their `config` object and every comment token.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core.errors import SourceSyntaxError
from .model import Attribute, Comment, ConfigBlock, Pos, Property, Range, TopicRecord

TOPIC_RESOURCE_TYPE = "kafka_topic"

_IDENT_RE = re.compile(r"[^\W\d][\w-]*")
_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_HEREDOC_RE = re.compile(r"<<(-?)([A-Za-z_][A-Za-z0-9_-]*)[ \t]*\r?\n")
_OPERATORS = ("==", "!=", "<=", ">=", "&&", "||", "=>", "...")
_OPENERS = {"{": "}", "[": "]", "(": ")"}
_CLOSERS = frozenset(_OPENERS.values())
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    start: Pos
    end: Pos
    value: str = ""
    interpolated: bool = False
    standalone: bool = False

    def is_punct(self, text: str) -> bool:
        return self.kind == "punct" and self.text == text


class _Lexer:
    def __init__(self, text: str, filename: str) -> None:
        self.text = text
        self.filename = filename
        self.i = 0
        self.line = 1
        self.col = 1
        self.line_start = 0

    def _pos(self) -> Pos:
        return Pos(self.line, self.col, self.i)

    def _peek(self, ahead: int = 0) -> str:
        idx = self.i + ahead
        return self.text[idx] if idx < len(self.text) else ""

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.i >= len(self.text):
                return
            if self.text[self.i] == "\n":
                self.line += 1
                self.col = 1
                self.line_start = self.i + 1
            else:
                self.col += 1
            self.i += 1

    def _error(self, message: str, pos: Pos) -> SourceSyntaxError:
        return SourceSyntaxError(f"{self.filename}:{pos.line}:{pos.column}: {message}")

    def tokens(self) -> list[Token]:
        out: list[Token] = []
        while self.i < len(self.text):
            ch = self._peek()
            start = self._pos()
            if ch in " \t\r":
                self._advance()
            elif ch == "\n":
                self._advance()
                out.append(Token("newline", "\n", start, self._pos()))
            elif ch == "#" or (ch == "/" and self._peek(1) == "/"):
                out.append(self._line_comment(start))
            elif ch == "/" and self._peek(1) == "*":
                out.append(self._block_comment(start))
            elif ch == '"':
                out.append(self._string(start))
            elif ch == "<" and self._peek(1) == "<" and _HEREDOC_RE.match(self.text, self.i):
                out.append(self._heredoc(start))
            elif ch.isalnum() or ch == "_":
                out.append(self._word(start))
            else:
                op = next((item for item in _OPERATORS if self.text.startswith(item, self.i)), ch)
                self._advance(len(op))
                out.append(Token("punct", op, start, self._pos()))
        out.append(Token("eof", "", self._pos(), self._pos()))
        return out

    def _word(self, start: Pos) -> Token:
        for kind, pattern in (("number", _NUMBER_RE), ("ident", _IDENT_RE)):
            match = pattern.match(self.text, self.i)
            if match is not None:
                self._advance(len(match.group(0)))
                return Token(kind, match.group(0), start, self._pos())
        raise self._error(f"unexpected character `{self._peek()}`", start)

    def _line_comment(self, start: Pos) -> Token:
        standalone = not self.text[self.line_start : self.i].strip()
        end = self.text.find("\n", self.i)
        end = len(self.text) if end < 0 else end
        body = self.text[self.i : end].rstrip("\r")
        self._advance(len(body))
        return Token("comment", body, start, self._pos(), standalone=standalone)

    def _block_comment(self, start: Pos) -> Token:
        standalone = not self.text[self.line_start : self.i].strip()
        end = self.text.find("*/", self.i + 2)
        if end < 0:
            raise self._error("unterminated block comment", start)
        body = self.text[self.i : end + 2]
        self._advance(len(body))
        return Token("comment", body, start, self._pos(), standalone=standalone)

    def _heredoc(self, start: Pos) -> Token:
        match = _HEREDOC_RE.match(self.text, self.i)
        if match is None:
            raise self._error("malformed heredoc marker", start)
        marker = match.group(2)
        self._advance(len(match.group(0)))
        while self.i < len(self.text):
            end = self.text.find("\n", self.i)
            end = len(self.text) if end < 0 else end
            line = self.text[self.i : end]
            if line.strip() == marker:
                self._advance(len(line))
                return Token("heredoc", self.text[start.offset : self.i], start, self._pos(), interpolated=True)
            self._advance(len(line) + 1)
        raise self._error(f"unterminated heredoc `{marker}`", start)

    def _string(self, start: Pos) -> Token:
        interpolated = self._scan_quoted(start)
        raw = self.text[start.offset : self.i]
        value = "" if interpolated else _decode(raw[1:-1])
        return Token("string", raw, start, self._pos(), value=value, interpolated=interpolated)

    def _scan_quoted(self, start: Pos) -> bool:
        self._advance()
        depth = 0
        interpolated = False
        while True:
            ch = self._peek()
            if ch == "" or (ch == "\n" and depth == 0):
                raise self._error("unterminated string literal", start)
            if ch == "\\":
                self._advance(2)
            elif depth == 0 and ch == '"':
                self._advance()
                return interpolated
            elif ch in "$%" and self._peek(1) == ch and self._peek(2) == "{":
                self._advance(3)
            elif ch in "$%" and self._peek(1) == "{":
                depth += 1
                interpolated = True
                self._advance(2)
            elif depth > 0 and ch == '"':
                self._scan_quoted(self._pos())
            else:
                if depth > 0 and ch == "{":
                    depth += 1
                elif depth > 0 and ch == "}":
                    depth -= 1
                self._advance()


def _decode(body: str) -> str:
    out: list[str] = []
    idx = 0
    while idx < len(body):
        ch = body[idx]
        if ch != "\\" or idx + 1 >= len(body):
            out.append(ch)
            idx += 1
            continue
        nxt = body[idx + 1]
        if nxt in _ESCAPES:
            out.append(_ESCAPES[nxt])
            idx += 2
        elif nxt == "u" and re.fullmatch(r"[0-9a-fA-F]{4}", body[idx + 2 : idx + 6]):
            out.append(chr(int(body[idx + 2 : idx + 6], 16)))
            idx += 6
        else:
            out.append(ch)
            idx += 1
    return "".join(out)


def tokenize(text: str, filename: str) -> list[Token]:
    return _Lexer(text, filename).tokens()


class _Parser:
    def __init__(self, text: str, filename: str) -> None:
        self.text = text
        self.filename = filename
        all_tokens = tokenize(text, filename)
        self.comments = tuple(
            Comment(text=tok.text, range=self._range(tok.start, tok.end), standalone=tok.standalone)
            for tok in all_tokens
            if tok.kind == "comment"
        )
        self.toks = [tok for tok in all_tokens if tok.kind != "comment"]

    def _range(self, start: Pos, end: Pos) -> Range:
        return Range(self.filename, start, end)

    def _error(self, message: str, tok: Token) -> SourceSyntaxError:
        return SourceSyntaxError(f"{self.filename}:{tok.start.line}:{tok.start.column}: {message}")

    def _matching(self, idx: int) -> int:
        """Index of the bracket closing the one opened at `idx`."""
        stack = [_OPENERS[self.toks[idx].text]]
        k = idx + 1
        while k < len(self.toks):
            tok = self.toks[k]
            if tok.kind == "punct" and tok.text in _OPENERS:
                stack.append(_OPENERS[tok.text])
            elif tok.kind == "punct" and tok.text in _CLOSERS:
                if tok.text != stack[-1]:
                    raise self._error(f"unexpected `{tok.text}`", tok)
                stack.pop()
                if not stack:
                    return k
            elif tok.kind == "eof":
                break
            k += 1
        raise self._error(f"unclosed `{self.toks[idx].text}`", self.toks[idx])

    def _indent_of(self, pos: Pos) -> str | None:
        line_start = self.text.rfind("\n", 0, pos.offset) + 1
        prefix = self.text[line_start : pos.offset]
        return prefix if not prefix.strip() else None

    def topics(self) -> list[TopicRecord]:
        out: list[TopicRecord] = []
        k = 0
        while self.toks[k].kind != "eof":
            tok = self.toks[k]
            if tok.kind == "ident" and tok.text == "resource":
                labels: list[Token] = []
                j = k + 1
                while self.toks[j].kind in {"string", "ident"}:
                    labels.append(self.toks[j])
                    j += 1
                if not self.toks[j].is_punct("{"):
                    raise self._error("expected `{` after resource labels", self.toks[j])
                close = self._matching(j)
                if len(labels) == 2 and _label(labels[0]) == TOPIC_RESOURCE_TYPE:
                    out.append(self._topic(tok, labels, j, close))
                k = close + 1
            elif tok.kind == "punct" and tok.text in _OPENERS:
                k = self._matching(k) + 1
            else:
                k += 1
        return out

    def _topic(self, keyword: Token, labels: list[Token], open_idx: int, close_idx: int) -> TopicRecord:
        def_range = self._range(keyword.start, labels[-1].end)
        attributes: dict[str, Attribute] = {}
        config: ConfigBlock | None = None
        config_error: str | None = None
        body_indent: str | None = None
        k = open_idx + 1
        while k < close_idx:
            tok = self.toks[k]
            if tok.kind == "newline":
                k += 1
                continue
            if tok.kind != "ident":
                raise self._error(f"unexpected `{tok.text}` in topic body", tok)
            if body_indent is None:
                body_indent = self._indent_of(tok.start)
            if self.toks[k + 1].is_punct("="):
                end = self._expression_end(k + 2, close_idx, stop_at_comma=False)
                if end <= k + 2:
                    raise self._error(f"missing value for `{tok.text}`", tok)
                value_toks = self.toks[k + 2 : end]
                if tok.text == "config":
                    if config is None and config_error is None:
                        first = self.toks[k + 2]
                        if first.is_punct("{") and self._matching(k + 2) == end - 1:
                            config = self._config(tok, k + 2, end - 1)
                        else:
                            config_error = (
                                f"{self.filename}:{first.start.line}:{first.start.column}: "
                                "config must be an object constructor of literal key/value pairs"
                            )
                elif tok.text not in attributes:
                    value, literal = self._literal(value_toks)
                    attributes[tok.text] = Attribute(
                        name=tok.text,
                        value=value,
                        range=self._range(tok.start, value_toks[-1].end),
                        value_range=self._range(value_toks[0].start, value_toks[-1].end),
                        value_literal=literal,
                    )
                k = end
                continue
            j = k + 1
            while self.toks[j].kind in {"string", "ident"}:
                j += 1
            if not self.toks[j].is_punct("{"):
                raise self._error(f"unexpected token after `{tok.text}`", self.toks[j])
            k = self._matching(j) + 1
        block_range = self._range(keyword.start, self.toks[close_idx].end)
        return TopicRecord(
            name=_label(labels[1]),
            filename=self.filename,
            def_range=def_range,
            attributes=attributes,
            config=config,
            config_error=config_error,
            comments=tuple(c for c in self.comments if block_range.contains(c.range)),
            body_indent=body_indent if body_indent is not None else "  ",
        )

    def _expression_end(self, k: int, limit: int, *, stop_at_comma: bool) -> int:
        """Index just past the expression starting at `k`."""
        while k < limit:
            tok = self.toks[k]
            if tok.kind == "newline" or (stop_at_comma and tok.is_punct(",")):
                return k
            if tok.kind == "punct" and tok.text in _OPENERS:
                k = self._matching(k) + 1
                continue
            if tok.kind == "punct" and tok.text in _CLOSERS:
                raise self._error(f"unexpected `{tok.text}`", tok)
            k += 1
        return k

    def _config(self, name_tok: Token, open_idx: int, close_idx: int) -> ConfigBlock:
        first = self.toks[open_idx]
        properties: list[Property] = []
        entry_indent: str | None = None
        k = open_idx + 1
        while k < close_idx:
            tok = self.toks[k]
            if tok.kind == "newline" or tok.is_punct(","):
                k += 1
                continue
            sep = k
            while sep < close_idx and not (self.toks[sep].is_punct("=") or self.toks[sep].is_punct(":")):
                if self.toks[sep].kind == "newline":
                    raise self._error("expected `=` after config key", self.toks[sep])
                if self.toks[sep].kind == "punct" and self.toks[sep].text in _OPENERS:
                    sep = self._matching(sep)
                sep += 1
            if sep >= close_idx:
                raise self._error("expected `=` after config key", tok)
            end = self._expression_end(sep + 1, close_idx, stop_at_comma=True)
            key_toks = self.toks[k:sep]
            value_toks_entry = self.toks[sep + 1 : end]
            if not value_toks_entry:
                raise self._error("missing config value", self.toks[sep])
            if entry_indent is None:
                entry_indent = self._indent_of(tok.start)
            key, key_resolved = self._key(key_toks)
            value, literal = self._literal(value_toks_entry)
            properties.append(
                Property(
                    key=key,
                    value=value,
                    key_range=self._range(key_toks[0].start, key_toks[-1].end),
                    value_range=self._range(value_toks_entry[0].start, value_toks_entry[-1].end),
                    key_resolved=key_resolved,
                    value_literal=literal,
                    key_indent=self._indent_of(key_toks[0].start),
                    value_ends_line=self.toks[end].kind in {"newline", "eof"},
                )
            )
            k = end
        name_indent = self._indent_of(name_tok.start) or ""
        return ConfigBlock(
            range=self._range(name_tok.start, self.toks[close_idx].end),
            open_brace=self._range(first.start, first.end),
            properties=tuple(properties),
            entry_indent=entry_indent if entry_indent is not None else name_indent + "  ",
        )

    def _raw(self, toks: list[Token]) -> str:
        return self.text[toks[0].start.offset : toks[-1].end.offset]

    def _key(self, toks: list[Token]) -> tuple[str, bool]:
        if len(toks) == 1 and toks[0].kind == "string" and not toks[0].interpolated:
            return toks[0].value, True
        if len(toks) == 1 and toks[0].kind == "ident":
            return toks[0].text, True
        return self._raw(toks), False

    def _literal(self, toks: list[Token]) -> tuple[str, bool]:
        if len(toks) == 1:
            tok = toks[0]
            if tok.kind == "string" and not tok.interpolated:
                return tok.value, True
            if tok.kind in {"number", "ident"}:
                return tok.text, True
        if len(toks) == 2 and toks[0].is_punct("-") and toks[1].kind == "number":
            return "-" + toks[1].text, True
        return self._raw(toks), False


def _label(tok: Token) -> str:
    return tok.value if tok.kind == "string" else tok.text


def read_topics(text: str, filename: str) -> list[TopicRecord]:
    """Extract every `kafka_topic` resource declared in `text`."""
    return _Parser(text, filename).topics()


__all__ = ["TOPIC_RESOURCE_TYPE", "Token", "read_topics", "tokenize"]
