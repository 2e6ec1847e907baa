"""
``tablit.pack.text``: Table literals
====================================

Values are written as Lua table constructors where ``T`` and ``F`` stand for
the booleans and ``_`` for an absent value::

  {1,2,_,4,name="x",[T]={},["not a name"]=1.5}

"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Final, Iterator, NamedTuple, NoReturn

from tablit import utils
from tablit.table import Table

from . import base

__all__ = (
    "dump_text",
    "load_text",
    "parse_text",
    "DecodeError",
)

logger = logging.getLogger(__name__)


def dump_text(obj: Any) -> str:
    """Serialise *obj*

    Containers that appear more than once in *obj* are only written the first
    time they are encountered; the entries where they appear again are
    dropped:

      >>> shared = [1, 2]
      >>> dump_text({"a": shared, "b": shared, "c": True})
      '{a={1,2},c=T}'

    Integer keys are written positionally as long as this makes the output
    shorter, even if it means writing holes:

      >>> dump_text(Table.array(1, None, 3, None, None, None, None, None, 9))
      '{1,_,3,[9]=9}'

    This function never fails: functions are printed as ``(_)`` and values of
    unsupported types are skipped.

    Args:
      obj: The value to serialise
    """
    # ids of the containers we've already printed
    visited: set[int] = set()

    def leaf(v: Any) -> str | None:
        if v is None:
            return None
        if isinstance(v, bool):
            return base.TRUE if v else base.FALSE
        if isinstance(v, int | float):
            return base.format_number(v)
        if isinstance(v, str):
            return base.quote(v)
        if callable(v):
            return base.FUNCTION
        logger.debug("Skipping value of type %s", type(v).__name__)
        return None

    def visit(v: Any) -> utils.Task[str | None]:
        if not base.is_container(v):
            return leaf(v)
        addr = id(v)
        if addr in visited:
            logger.debug("Skipping repeated reference to a container")
            return None
        visited.add(addr)
        res: str = yield table(v)
        return res

    def table(t: Any) -> utils.Task[str]:
        entries = list(base.iter_entries(t))
        positional: dict[int, Any] = {}
        for key, value in entries:
            idx = base.as_index(key)
            if idx is not None:
                positional[idx] = value
        split = base.split_point(positional.keys())

        out: list[str] = []
        for idx in range(1, split + 1):
            value = positional.get(idx)
            text = None if value is None else (yield visit(value))
            out.append(base.NIL if text is None else text)

        for key, value in entries:
            prefix: str | None
            if isinstance(key, str):
                prefix = base.key_text(key)
            elif isinstance(key, bool):
                prefix = "[T]" if key else "[F]"
            elif isinstance(key, int | float):
                idx = base.as_index(key)
                if idx is not None and idx <= split:
                    continue
                if isinstance(key, float) and math.isnan(key):
                    logger.debug("Skipping entry with a NaN key")
                    continue
                prefix = f"[{base.format_number(key)}]"
            elif base.is_container(key):
                ktext = yield visit(key)
                if ktext is None:
                    continue
                prefix = f"[{ktext}]"
            else:
                logger.debug(
                    "Skipping entry with a key of unsupported type %s",
                    type(key).__name__,
                )
                continue
            text = yield visit(value)
            if text is not None:
                out.append(f"{prefix}={text}")

        if not out:
            return base.EMPTY
        return "{" + ",".join(out) + "}"

    res = utils.trampoline(visit(obj))
    return base.NIL if res is None else res


class DecodeError(ValueError):
    """Raised by :func:`parse_text` when the text is not a valid literal.

    Attributes:
      msg: The unformatted error message
      doc: The text being parsed
      pos: The index in *doc* where parsing failed
      lineno: The line corresponding to *pos*
      colno: The column corresponding to *pos*
    """

    def __init__(self, msg: str, doc: str, pos: int) -> None:
        lineno = doc.count("\n", 0, pos) + 1
        colno = pos - doc.rfind("\n", 0, pos)
        super().__init__(f"{msg}: line {lineno} column {colno} (char {pos})")
        self.msg = msg
        self.doc = doc
        self.pos = pos
        self.lineno = lineno
        self.colno = colno

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (self.msg, self.doc, self.pos)


class Token(NamedTuple):
    kind: str
    value: Any
    pos: int


TOKEN: Final = re.compile(
    r"""
    (?P<space>(?:\s|--[^\n]*)+)
    |(?P<number>
        0[xX][0-9a-fA-F]+
        |(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?
    )
    |(?P<name>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<string>["'])
    |(?P<op>[{}\[\]=,;()/-])
    """,
    re.VERBOSE,
)

PLAIN_CHARS: Final = {
    '"': re.compile(r'[^\\\r\n"]+'),
    "'": re.compile(r"[^\\\r\n']+"),
}

DECIMAL_ESCAPE: Final = re.compile(r"[0-9]{1,3}")
HEX_ESCAPE: Final = re.compile(r"[0-9a-fA-F]{2}")
UNICODE_ESCAPE: Final = re.compile(r"\{([0-9a-fA-F]+)\}")
SPACES: Final = re.compile(r"\s*")

STRING_ESCAPES: Final = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "\n": "\n",
}

EOF: Final = "eof"


def is_op(tok: Token, op: str) -> bool:
    return tok.kind == "op" and tok.value == op


class Reader:
    "A recursive descent parser for table literals."

    doc: str
    tokens: list[Token]
    idx: int

    def __init__(self, doc: str) -> None:
        self.doc = doc
        self.tokens = list(self._tokenize())
        self.idx = 0

    def error(self, msg: str, pos: int) -> NoReturn:
        raise DecodeError(msg, self.doc, pos)

    # Lexing

    def _tokenize(self) -> Iterator[Token]:
        doc = self.doc
        pos = 0
        end = len(doc)
        while pos < end:
            match = TOKEN.match(doc, pos)
            if match is None:
                self.error(
                    f"Unexpected character {utils.cram(doc[pos:], 20)!r}", pos
                )
            kind = match.lastgroup
            assert kind is not None
            text = match.group()
            if kind == "string":
                value, pos = self._read_string(pos)
                yield Token("string", value, match.start())
                continue
            if kind == "number":
                yield Token(kind, self._to_number(text, pos), pos)
            elif kind != "space":
                yield Token(kind, text, pos)
            pos = match.end()
        yield Token(EOF, None, end)

    def _to_number(self, text: str, pos: int) -> int | float:
        try:
            if text[:2] in ("0x", "0X"):
                return int(text, 16)
            if any(c in text for c in ".eE"):
                return float(text)
            return base.parse_int(text)
        except ValueError as e:
            self.error(str(e), pos)

    def _read_string(self, start: int) -> tuple[str, int]:
        doc = self.doc
        quote = doc[start]
        plain = PLAIN_CHARS[quote]
        chunks: list[str] = []
        pos = start + 1
        while True:
            if pos >= len(doc):
                self.error("Unfinished string", start)
            char = doc[pos]
            if char == quote:
                return "".join(chunks), pos + 1
            if char in "\r\n":
                self.error("Unfinished string", start)
            if char != "\\":
                match = plain.match(doc, pos)
                assert match is not None
                chunks.append(match.group())
                pos = match.end()
                continue
            pos += 1
            esc = doc[pos : pos + 1]
            if esc in STRING_ESCAPES:
                chunks.append(STRING_ESCAPES[esc])
                pos += 1
            elif esc and esc in "0123456789":
                match = DECIMAL_ESCAPE.match(doc, pos)
                assert match is not None
                code = int(match.group())
                if code > 255:
                    self.error("Decimal escape too large", pos - 1)
                chunks.append(chr(code))
                pos = match.end()
            elif esc == "x":
                match = HEX_ESCAPE.match(doc, pos + 1)
                if match is None:
                    self.error("Hexadecimal digit expected", pos - 1)
                chunks.append(chr(int(match.group(), 16)))
                pos = match.end()
            elif esc == "u":
                match = UNICODE_ESCAPE.match(doc, pos + 1)
                if match is None or int(match.group(1), 16) > 0x10FFFF:
                    self.error("Invalid unicode escape", pos - 1)
                chunks.append(chr(int(match.group(1), 16)))
                pos = match.end()
            elif esc == "z":
                match = SPACES.match(doc, pos + 1)
                assert match is not None
                pos = match.end()
            else:
                self.error("Invalid escape sequence", pos - 1)

    # Parsing

    def peek(self, offset: int = 0) -> Token:
        idx = min(self.idx + offset, len(self.tokens) - 1)
        return self.tokens[idx]

    def next(self) -> Token:
        tok = self.peek()
        if tok.kind != EOF:
            self.idx += 1
        return tok

    def accept(self, op: str) -> bool:
        if is_op(self.peek(), op):
            self.idx += 1
            return True
        return False

    def expect(self, op: str) -> None:
        if not self.accept(op):
            self.unexpected(self.peek(), f"{op!r} expected")

    def unexpected(
        self, tok: Token, msg: str = "Unexpected symbol"
    ) -> NoReturn:
        if tok.kind == EOF:
            self.error(f"{msg} near end of input", tok.pos)
        near = utils.cram(self.doc[tok.pos :], 20)
        self.error(f"{msg} near {near!r}", tok.pos)

    def value(self) -> utils.Task[Any]:
        tok = self.next()
        match tok:
            case Token("number" | "string", value):
                return value
            case Token("name", base.TRUE):
                return True
            case Token("name", base.FALSE):
                return False
            case Token("name", base.NIL):
                return None
            case Token("name", name):
                self.error(f"Unbound variable {name!r}", tok.pos)
            case Token("op", "-"):
                operand = yield self.value()
                if isinstance(operand, bool) or not isinstance(
                    operand, int | float
                ):
                    self.error("Only numbers can be negated", tok.pos)
                return -operand
            case Token("op", "("):
                if self._nan():
                    return float("nan")
                inner = yield self.value()
                self.expect(")")
                return inner
            case Token("op", "{"):
                res: Table = yield self.table()
                return res
        self.unexpected(tok)

    def _nan(self) -> bool:
        "Read the ``0/0`` part of ``(0/0)``"
        match self.tokens[self.idx : self.idx + 4]:
            case [
                Token("number", 0),
                Token("op", "/"),
                Token("number", 0),
                Token("op", ")"),
            ]:
                self.idx += 4
                return True
        return False

    def table(self) -> utils.Task[Table]:
        res = Table()
        size = 0
        while not self.accept("}"):
            tok = self.peek()
            if is_op(tok, "["):
                self.idx += 1
                key = yield self.value()
                self.expect("]")
                self.expect("=")
            elif tok.kind == "name" and is_op(self.peek(1), "="):
                if tok.value in base.RESERVED:
                    self.unexpected(tok)
                self.idx += 2
                key = tok.value
            else:
                size += 1
                key = size
            value = yield self.value()
            try:
                res[key] = value
            except (TypeError, ValueError) as e:
                self.error(str(e), tok.pos)
            if not (self.accept(",") or self.accept(";")):
                self.expect("}")
                break
        return res

    def document(self) -> Any:
        res = utils.trampoline(self.value())
        tok = self.peek()
        if tok.kind != EOF:
            self.unexpected(tok, "End of input expected")
        return res


def parse_text(s: str) -> Any:
    """Read a value written by :func:`dump_text`.

    Raises:
      DecodeError: if *s* is not a valid literal.
    """
    if not isinstance(s, str):
        raise TypeError(f"Expected a str, got {type(s).__name__}")
    return Reader(s).document()


def load_text(s: str) -> Any:
    """Load a value encoded as a string

    Containers are returned as :class:`~tablit.Table`. The only names that can
    be used in the text are ``T``, ``F`` and ``_``; any error (including
    syntax errors and inputs that are not strings) results in :const:`None`
    being returned.

      >>> load_text('{1,2,x=T}')
      Table({1: 1, 2: 2, 'x': True})
      >>> load_text('{os.exit()}') is None
      True

    Args:
      s (str):
    """
    try:
        return parse_text(s)
    except (DecodeError, TypeError) as e:
        logger.debug("Failed to decode text: %s", e)
        return None
