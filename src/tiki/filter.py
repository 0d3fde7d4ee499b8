"""Lane filter expressions: parsing and evaluation.

Grammar::

    expr    := and ("or" and)*
    and     := not ("and" not)*
    not     := "not" not | primary
    primary := "(" expr ")" | atom
    atom    := "me" | "true"
             | ("status" | "tag" | "type" | "assignee") "=" VALUE
             | ("priority" | "points") OP INT
             | "age" OP INT "d"
             | "updated" "<=" INT "d"

OP is one of = < > <= >=. Keywords are case-insensitive and whitespace
is insignificant.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from tiki.errors import InvalidWorkflow
from tiki.task import TYPES, Ticket, parse_status

_OPS = {
    "=": operator.eq,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}

_TOKEN = re.compile(
    r"""\s*(?:
        (?P<lparen>\() |
        (?P<rparen>\)) |
        (?P<op><=|>=|=|<|>) |
        (?P<quoted>"[^"]*"|'[^']*') |
        (?P<word>[^\s()<>=]+)
    )""",
    re.VERBOSE,
)

_DAYS = re.compile(r"^(\d+)d$", re.IGNORECASE)


@dataclass(frozen=True)
class FilterContext:
    """Inputs a filter may read besides the ticket itself."""

    now: datetime
    current_user: str = ""

    @classmethod
    def create(cls, current_user: str = "") -> FilterContext:
        return cls(now=datetime.now(timezone.utc), current_user=current_user)


class Filter:
    """Base for filter expression nodes."""

    def matches(self, ticket: Ticket, ctx: FilterContext) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class TrueFilter(Filter):
    def matches(self, ticket, ctx):
        return True


@dataclass(frozen=True)
class Status(Filter):
    status: str

    def matches(self, ticket, ctx):
        return ticket.status == self.status


@dataclass(frozen=True)
class Tag(Filter):
    tag: str

    def matches(self, ticket, ctx):
        wanted = self.tag.lower()
        return any(t.lower() == wanted for t in ticket.tags)


@dataclass(frozen=True)
class Type(Filter):
    type: str

    def matches(self, ticket, ctx):
        return ticket.type == self.type


@dataclass(frozen=True)
class Priority(Filter):
    op: str
    value: int

    def matches(self, ticket, ctx):
        return _OPS[self.op](ticket.priority, self.value)


@dataclass(frozen=True)
class Points(Filter):
    op: str
    value: int

    def matches(self, ticket, ctx):
        return _OPS[self.op](ticket.points, self.value)


@dataclass(frozen=True)
class Assignee(Filter):
    assignee: str

    def matches(self, ticket, ctx):
        return ticket.assignee.lower() == self.assignee.lower()


@dataclass(frozen=True)
class Me(Filter):
    def matches(self, ticket, ctx):
        return bool(ctx.current_user) and ticket.assignee.lower() == ctx.current_user.lower()


@dataclass(frozen=True)
class AgeDays(Filter):
    """Compares whole days since creation."""

    op: str
    days: int

    def matches(self, ticket, ctx):
        created = ticket.created_at or ticket.updated_at
        if created is None:
            return False
        age = (ctx.now - created) / timedelta(days=1)
        return _OPS[self.op](age, self.days)


@dataclass(frozen=True)
class UpdatedWithinDays(Filter):
    days: int

    def matches(self, ticket, ctx):
        if ticket.updated_at is None:
            return False
        return ctx.now - ticket.updated_at <= timedelta(days=self.days)


@dataclass(frozen=True)
class And(Filter):
    parts: tuple[Filter, ...]

    def matches(self, ticket, ctx):
        return all(p.matches(ticket, ctx) for p in self.parts)


@dataclass(frozen=True)
class Or(Filter):
    parts: tuple[Filter, ...]

    def matches(self, ticket, ctx):
        return any(p.matches(ticket, ctx) for p in self.parts)


@dataclass(frozen=True)
class Not(Filter):
    inner: Filter

    def matches(self, ticket, ctx):
        return not self.inner.matches(ticket, ctx)


# --- Parsing ---


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    pos: int


def _tokenize(source: str) -> list[_Token]:
    tokens = []
    pos = 0
    while pos < len(source):
        if source[pos:].strip() == "":
            break
        match = _TOKEN.match(source, pos)
        if not match or match.end() == pos:
            raise InvalidWorkflow(f"unexpected character {source[pos]!r}", f"offset {pos}")
        kind = match.lastgroup
        text = match.group(kind)
        if kind == "quoted":
            kind, text = "word", text[1:-1]
        tokens.append(_Token(kind, text, match.start(kind)))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, source: str):
        self.source = source
        self.tokens = _tokenize(source)
        self.index = 0

    def _error(self, message: str, token: _Token | None = None) -> InvalidWorkflow:
        pos = token.pos if token else len(self.source)
        return InvalidWorkflow(message, f"offset {pos}")

    def _peek(self) -> _Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _next(self, expected: str) -> _Token:
        token = self._peek()
        if token is None:
            raise self._error(f"expected {expected}, got end of filter")
        self.index += 1
        return token

    def _keyword(self, word: str) -> bool:
        token = self._peek()
        if token is not None and token.kind == "word" and token.text.lower() == word:
            self.index += 1
            return True
        return False

    def parse(self) -> Filter:
        result = self._or()
        token = self._peek()
        if token is not None:
            raise self._error(f"unexpected {token.text!r}", token)
        return result

    def _or(self) -> Filter:
        parts = [self._and()]
        while self._keyword("or"):
            parts.append(self._and())
        return parts[0] if len(parts) == 1 else Or(tuple(parts))

    def _and(self) -> Filter:
        parts = [self._not()]
        while self._keyword("and"):
            parts.append(self._not())
        return parts[0] if len(parts) == 1 else And(tuple(parts))

    def _not(self) -> Filter:
        if self._keyword("not"):
            return Not(self._not())
        return self._primary()

    def _primary(self) -> Filter:
        token = self._next("a condition")
        if token.kind == "lparen":
            inner = self._or()
            closing = self._next("')'")
            if closing.kind != "rparen":
                raise self._error(f"expected ')', got {closing.text!r}", closing)
            return inner
        if token.kind != "word":
            raise self._error(f"unexpected {token.text!r}", token)
        return self._atom(token)

    def _op(self) -> _Token:
        token = self._next("an operator")
        if token.kind != "op":
            raise self._error(f"expected an operator, got {token.text!r}", token)
        return token

    def _value(self) -> _Token:
        token = self._next("a value")
        if token.kind != "word":
            raise self._error(f"expected a value, got {token.text!r}", token)
        return token

    def _int(self) -> int:
        token = self._value()
        if not token.text.isdigit():
            raise self._error(f"expected a number, got {token.text!r}", token)
        return int(token.text)

    def _days(self) -> int:
        token = self._value()
        match = _DAYS.match(token.text)
        if match:
            return int(match.group(1))
        if token.text.isdigit() and self._keyword("d"):
            return int(token.text)
        raise self._error(f"expected a day count like 7d, got {token.text!r}", token)

    def _equals(self) -> str:
        op = self._op()
        if op.text != "=":
            raise self._error(f"only '=' is supported here, got {op.text!r}", op)
        return self._value().text

    def _atom(self, token: _Token) -> Filter:
        name = token.text.lower()
        match name:
            case "me":
                return Me()
            case "true":
                return TrueFilter()
            case "status":
                value = self._equals()
                status = parse_status(value)
                if status is None:
                    raise self._error(f"unknown status {value!r}", token)
                return Status(status)
            case "tag" | "tags":
                return Tag(self._equals())
            case "type":
                value = self._equals().lower()
                if value not in TYPES:
                    raise self._error(f"unknown type {value!r}", token)
                return Type(value)
            case "assignee":
                return Assignee(self._equals())
            case "priority":
                return Priority(self._op().text, self._int())
            case "points":
                return Points(self._op().text, self._int())
            case "age":
                return AgeDays(self._op().text, self._days())
            case "updated":
                op = self._op()
                if op.text != "<=":
                    raise self._error(f"updated only supports '<=', got {op.text!r}", op)
                return UpdatedWithinDays(self._days())
        raise self._error(f"unknown field {token.text!r}", token)


def parse_filter(source: str | None) -> Filter:
    """Compile a filter string. Empty or missing filters match everything.

    Raises InvalidWorkflow with the character offset of the problem.
    """
    if source is None or not str(source).strip():
        return TrueFilter()
    return _Parser(str(source)).parse()
