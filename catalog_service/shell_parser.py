"""
Shell parser: reads MongoDB shell example text.

Two layers:

- ``parse_source`` splits an examples file into entries.  A file is a
  sequence of sections (``// --- TITLE ---``); inside a section each
  full-line comment introduces an example and the statement lines that
  follow it (up to a blank line) are the example's query text.
- ``parse_shell`` turns statement text such as
  ``db.books.find({ price: { $gt: 20 } }).sort({ price: -1 })`` into
  command dicts the executor can run::

      {
          "collection": "books",
          "method": "find",
          "args": [{"price": {"$gt": 20}}],
          "modifiers": [{"method": "sort", "args": [{"price": -1}]}],
      }

Only the JavaScript literal subset used by shell examples is accepted:
objects (bare, quoted or ``$``-prefixed keys), arrays, strings, numbers,
``true`` / ``false`` / ``null``, ``ObjectId("…")`` and ``ISODate("…")`` /
``new Date("…")``.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional

from bson import ObjectId
from bson.errors import InvalidId


class ShellSyntaxError(ValueError):
    """Statement text is not valid shell syntax."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.line = line
        self.column = column
        if line:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class CatalogParseError(ValueError):
    """An examples file does not follow the section/comment layout."""

    def __init__(self, message: str, line: int):
        self.line = line
        super().__init__(f"line {line}: {message}")


# ---------------------- SOURCE LAYOUT ----------------------

_SECTION_RE = re.compile(r"^//\s*-{2,}\s*(?P<title>.*?)\s*-{2,}\s*$")
_COMMENT_RE = re.compile(r"^//\s?(?P<text>.*)$")


def parse_source(text: str) -> List[Dict[str, Any]]:
    """Split an examples file into raw entries, in source order.

    Each entry is ``{"section", "description", "query_text", "line"}``
    where ``line`` is the 1-based line of the description comment.
    """
    entries: List[Dict[str, Any]] = []
    section: Optional[str] = None
    pending: Optional[Dict[str, Any]] = None

    def _close():
        nonlocal pending
        if pending is not None and pending["lines"]:
            entries.append({
                "section": pending["section"],
                "description": pending["description"],
                "query_text": "\n".join(pending["lines"]),
                "line": pending["line"],
            })
            pending = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        stripped = line.strip()

        if not stripped:
            _close()
            continue

        section_match = _SECTION_RE.match(stripped)
        if section_match:
            _close()
            pending = None
            section = section_match.group("title")
            continue

        comment_match = _COMMENT_RE.match(stripped)
        if comment_match:
            if section is None:
                # file preamble
                continue
            description = comment_match.group("text").strip()
            if pending is not None and not pending["lines"]:
                pending["description"] = f"{pending['description']} {description}".strip()
                continue
            _close()
            pending = {
                "section": section,
                "description": description,
                "lines": [],
                "line": lineno,
            }
            continue

        # statement line
        if section is None:
            raise CatalogParseError("statement appears before any section header", lineno)
        if pending is None:
            raise CatalogParseError("statement has no description comment", lineno)
        pending["lines"].append(line)

    _close()
    return entries


# ---------------------- TOKENIZER ----------------------

class _Token(NamedTuple):
    kind: str
    value: str
    line: int
    column: int


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>[ \t\r\n]+)
  | (?P<comment>//[^\n]*)
  | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
  | (?P<number>-?(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<ident>[A-Za-z_$][\w$]*)
  | (?P<punct>[{}\[\]():,.;])
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "0": "\0"}


def _unescape_one(match) -> str:
    if match.group("hex"):
        return chr(int(match.group("hex"), 16))
    char = match.group("char")
    return _ESCAPES.get(char, char)


def _unescape(body: str) -> str:
    return re.sub(r"\\(?:u(?P<hex>[0-9a-fA-F]{4})|(?P<char>.))", _unescape_one, body)


def _tokenize(text: str) -> List[_Token]:
    tokens: List[_Token] = []
    pos = 0
    line = 1
    line_start = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise ShellSyntaxError(
                f"unexpected character {text[pos]!r}", line, pos - line_start + 1,
            )
        kind = match.lastgroup
        value = match.group()
        if kind not in ("ws", "comment"):
            tokens.append(_Token(kind, value, line, pos - line_start + 1))
        newlines = value.count("\n")
        if newlines:
            line += newlines
            line_start = pos + value.rfind("\n") + 1
        pos = match.end()
    return tokens


# ---------------------- STATEMENT PARSER ----------------------

_LITERALS = {"true": True, "false": False, "null": None}


def _parse_iso_date(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class _ShellParser:
    def __init__(self, text: str):
        self.tokens = _tokenize(text)
        self.pos = 0

    # -- token helpers --

    def _peek(self) -> Optional[_Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _error(self, message: str) -> ShellSyntaxError:
        tok = self._peek()
        if tok is None:
            return ShellSyntaxError(f"{message}, got end of input")
        return ShellSyntaxError(f"{message}, got {tok.value!r}", tok.line, tok.column)

    def _accept(self, kind: str, value: Optional[str] = None) -> Optional[_Token]:
        tok = self._peek()
        if tok is not None and tok.kind == kind and (value is None or tok.value == value):
            self.pos += 1
            return tok
        return None

    def _expect(self, kind: str, value: Optional[str] = None) -> _Token:
        tok = self._accept(kind, value)
        if tok is None:
            raise self._error(f"expected {value or kind}")
        return tok

    # -- grammar --

    def parse_script(self) -> List[Dict[str, Any]]:
        commands = []
        while self._accept("punct", ";"):
            pass
        while self._peek() is not None:
            commands.append(self._statement())
            while self._accept("punct", ";"):
                pass
        return commands

    def _statement(self) -> Dict[str, Any]:
        self._expect("ident", "db")
        self._expect("punct", ".")
        name = self._expect("ident")
        if name.value == "getCollection" and self._accept("punct", "("):
            collection = self._value()
            if not isinstance(collection, str):
                raise ShellSyntaxError("collection name must be a string", name.line, name.column)
            self._expect("punct", ")")
        else:
            collection = name.value

        self._expect("punct", ".")
        method, args = self._call()
        modifiers = []
        while self._accept("punct", "."):
            mod_method, mod_args = self._call()
            modifiers.append({"method": mod_method, "args": mod_args})

        return {
            "collection": collection,
            "method": method,
            "args": args,
            "modifiers": modifiers,
        }

    def _call(self):
        method = self._expect("ident").value
        self._expect("punct", "(")
        args = self._sequence(")")
        return method, args

    def _sequence(self, closer: str) -> List[Any]:
        items: List[Any] = []
        if self._accept("punct", closer):
            return items
        while True:
            items.append(self._value())
            if self._accept("punct", closer):
                return items
            self._expect("punct", ",")
            # trailing comma
            if self._accept("punct", closer):
                return items

    def _value(self) -> Any:
        tok = self._peek()
        if tok is None:
            raise self._error("expected a value")

        if tok.kind == "punct" and tok.value == "{":
            self.pos += 1
            return self._object()
        if tok.kind == "punct" and tok.value == "[":
            self.pos += 1
            return self._sequence("]")
        if tok.kind == "string":
            self.pos += 1
            return _unescape(tok.value[1:-1])
        if tok.kind == "number":
            self.pos += 1
            if re.fullmatch(r"-?\d+", tok.value):
                return int(tok.value)
            return float(tok.value)
        if tok.kind == "ident":
            if tok.value in _LITERALS:
                self.pos += 1
                return _LITERALS[tok.value]
            return self._constructor()

        raise self._error("expected a value")

    def _constructor(self) -> Any:
        tok = self._expect("ident")
        name = tok.value
        if name == "new":
            name = self._expect("ident").value
        self._expect("punct", "(")
        args = self._sequence(")")

        if name == "ObjectId" and len(args) == 1 and isinstance(args[0], str):
            try:
                return ObjectId(args[0])
            except InvalidId:
                raise ShellSyntaxError(f"invalid ObjectId {args[0]!r}", tok.line, tok.column)
        if name in ("ISODate", "Date") and len(args) == 1 and isinstance(args[0], str):
            try:
                return _parse_iso_date(args[0])
            except ValueError:
                raise ShellSyntaxError(f"invalid date {args[0]!r}", tok.line, tok.column)
        raise ShellSyntaxError(f"unsupported constructor {name}()", tok.line, tok.column)

    def _object(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {}
        if self._accept("punct", "}"):
            return obj
        while True:
            key_tok = self._accept("ident") or self._accept("string")
            if key_tok is None:
                raise self._error("expected an object key")
            key = key_tok.value
            if key_tok.kind == "string":
                key = _unescape(key[1:-1])
            self._expect("punct", ":")
            obj[key] = self._value()
            if self._accept("punct", "}"):
                return obj
            self._expect("punct", ",")
            if self._accept("punct", "}"):
                return obj


def parse_shell(text: str) -> List[Dict[str, Any]]:
    """Parse one or more shell statements into command dicts.

    Raises ``ShellSyntaxError`` on malformed input or when *text*
    contains no statement at all.
    """
    commands = _ShellParser(text).parse_script()
    if not commands:
        raise ShellSyntaxError("no statement found")
    return commands
