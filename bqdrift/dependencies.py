"""Find the tables a SQL statement reads from."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator

_QUERY_KEYWORDS = frozenset({"SELECT", "WITH"})
_NAME_KINDS = frozenset({"ident", "quoted"})
_NOT_TABLE_NAMES = frozenset({"UNNEST", "LATERAL"})
_CREATE_MODIFIERS = frozenset(
    {"OR", "REPLACE", "TEMP", "TEMPORARY", "MATERIALIZED", "EXTERNAL", "SNAPSHOT"}
)
_FROM_LIST_END = frozenset(
    {
        "WHERE",
        "GROUP",
        "HAVING",
        "QUALIFY",
        "WINDOW",
        "ORDER",
        "LIMIT",
        "UNION",
        "INTERSECT",
        "EXCEPT",
        "SELECT",
        "ON",
        "USING",
        "PIVOT",
        "UNPIVOT",
        "TABLESAMPLE",
        "FOR",
    }
)

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?")
_PARAM_RE = re.compile(r"@@?[A-Za-z_][A-Za-z0-9_]*")
_STRING_PREFIXES = frozenset({"R", "B", "RB", "BR"})

_FALLBACK_RE = re.compile(
    r"\b(?:FROM|JOIN|INTO|UPDATE|MERGE\s+INTO)\s+`?"
    r"([a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)*)`?",
    re.IGNORECASE,
)
_FALLBACK_SKIP = frozenset({"SELECT", "WHERE", "AND", "OR", "ON", "AS", "SET"})


class _SqlSyntaxError(ValueError):
    """The statement could not be parsed structurally."""


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str

    @property
    def keyword(self) -> str | None:
        return self.text.upper() if self.kind == "ident" else None

    def is_punct(self, char: str) -> bool:
        return self.kind == "punct" and self.text == char


def _string_end(sql: str, start: int) -> int:
    """Return the index just past the string literal opening at ``start``."""
    quote = sql[start]
    triple = quote * 3
    if sql.startswith(triple, start):
        end = sql.find(triple, start + 3)
        if end < 0:
            raise _SqlSyntaxError("unterminated string literal")
        return end + 3
    i = start + 1
    while i < len(sql):
        ch = sql[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    raise _SqlSyntaxError("unterminated string literal")


def _tokenize(sql: str) -> list[_Token]:
    tokens: list[_Token] = []
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch.isspace():
            i += 1
        elif sql.startswith("--", i) or ch == "#":
            newline = sql.find("\n", i)
            i = n if newline < 0 else newline + 1
        elif sql.startswith("/*", i):
            close = sql.find("*/", i + 2)
            if close < 0:
                raise _SqlSyntaxError("unterminated comment")
            i = close + 2
        elif ch in "'\"":
            end = _string_end(sql, i)
            tokens.append(_Token("string", sql[i:end]))
            i = end
        elif ch == "`":
            close = sql.find("`", i + 1)
            if close < 0:
                raise _SqlSyntaxError("unterminated quoted identifier")
            tokens.append(_Token("quoted", sql[i : close + 1]))
            i = close + 1
        elif (match := _IDENT_RE.match(sql, i)) is not None:
            word = match.group()
            end = match.end()
            if word.upper() in _STRING_PREFIXES and end < n and sql[end] in "'\"":
                string_end = _string_end(sql, end)
                tokens.append(_Token("string", sql[i:string_end]))
                i = string_end
            else:
                tokens.append(_Token("ident", word))
                i = end
        elif (match := _NUMBER_RE.match(sql, i)) is not None:
            tokens.append(_Token("number", match.group()))
            i = match.end()
        elif (match := _PARAM_RE.match(sql, i)) is not None:
            tokens.append(_Token("param", match.group()))
            i = match.end()
        else:
            tokens.append(_Token("punct", ch))
            i += 1
    return tokens


def _match_parens(tokens: list[_Token]) -> dict[int, int]:
    pairs: dict[int, int] = {}
    stack: list[int] = []
    for index, token in enumerate(tokens):
        if token.is_punct("("):
            stack.append(index)
        elif token.is_punct(")"):
            if not stack:
                raise _SqlSyntaxError("unbalanced parenthesis")
            pairs[stack.pop()] = index
    if stack:
        raise _SqlSyntaxError("unclosed parenthesis")
    return pairs


class _Extractor:
    """Walks a token stream and collects referenced table names."""

    def __init__(self, sql: str) -> None:
        self.tokens = _tokenize(sql)
        self.close = _match_parens(self.tokens)
        self.tables: set[str] = set()

    def run(self) -> set[str]:
        start = 0
        for index in self._top_level(0, len(self.tokens)):
            if self.tokens[index].is_punct(";"):
                self._statement(start, index)
                start = index + 1
        self._statement(start, len(self.tokens))
        return self.tables

    def _top_level(self, start: int, end: int) -> Iterator[int]:
        """Yield indices in ``[start, end)`` without entering parentheses."""
        i = start
        while i < end:
            yield i
            i = self.close[i] + 1 if self.tokens[i].is_punct("(") else i + 1

    def _keyword(self, index: int, end: int) -> str | None:
        return self.tokens[index].keyword if index < end else None

    def _starts_query(self, start: int, end: int) -> bool:
        if start >= end:
            return False
        token = self.tokens[start]
        if token.keyword in _QUERY_KEYWORDS:
            return True
        if token.is_punct("("):
            return self._starts_query(start + 1, self.close[start])
        return False

    def _find_query_start(self, start: int, end: int) -> int | None:
        for index in self._top_level(start, end):
            token = self.tokens[index]
            if token.keyword in _QUERY_KEYWORDS:
                return index
            if token.is_punct("(") and self._starts_query(index + 1, self.close[index]):
                return index
        return None

    def _statement(self, start: int, end: int) -> None:
        if start >= end:
            return
        first = self.tokens[start]
        keyword = first.keyword
        if keyword in _QUERY_KEYWORDS or first.is_punct("("):
            self._query(start, end)
        elif keyword == "INSERT":
            query_start = self._find_query_start(start + 1, end)
            if query_start is not None:
                self._query(query_start, end)
        elif keyword == "CREATE":
            if self._creates_table_or_view(start, end):
                query_start = self._find_query_start(start + 1, end)
                if query_start is not None:
                    self._query(query_start, end)
        elif keyword == "MERGE":
            for index in self._top_level(start + 1, end):
                if self.tokens[index].keyword == "USING":
                    if index + 1 < end:
                        self._table_factor(index + 1, end, frozenset())
                    break

    def _creates_table_or_view(self, start: int, end: int) -> bool:
        for index in self._top_level(start + 1, end):
            keyword = self.tokens[index].keyword
            if keyword in ("TABLE", "VIEW"):
                return True
            if keyword not in _CREATE_MODIFIERS:
                return False
        return False

    def _query(self, start: int, end: int) -> None:
        while (
            start < end
            and self.tokens[start].is_punct("(")
            and self.close[start] == end - 1
        ):
            start += 1
            end -= 1

        ctes: set[str] = set()
        i = start
        if self._keyword(i, end) == "WITH":
            i += 1
            if self._keyword(i, end) == "RECURSIVE":
                i += 1
            while True:
                if i >= end or self.tokens[i].kind not in _NAME_KINDS:
                    raise _SqlSyntaxError("expected a CTE name")
                ctes.add(self.tokens[i].text.strip("`"))
                i += 1
                if i < end and self.tokens[i].is_punct("("):
                    i = self.close[i] + 1
                if self._keyword(i, end) != "AS":
                    raise _SqlSyntaxError("expected AS in CTE")
                i += 1
                if i >= end or not self.tokens[i].is_punct("("):
                    raise _SqlSyntaxError("expected a parenthesized CTE query")
                close = self.close[i]
                self._query(i + 1, close)
                i = close + 1
                if i < end and self.tokens[i].is_punct(","):
                    i += 1
                    continue
                break

        self._body(i, end, frozenset(ctes))

    def _parenthesized(self, start: int, end: int, ctes: frozenset[str]) -> None:
        if self._starts_query(start, end):
            self._query(start, end)
        else:
            self._body(start, end, ctes, expression=True)

    def _body(
        self,
        start: int,
        end: int,
        ctes: frozenset[str],
        *,
        expect_table: bool = False,
        expression: bool = False,
    ) -> None:
        in_from = expect_table
        previous: str | None = None
        i = start
        while i < end:
            token = self.tokens[i]
            if expect_table:
                expect_table = False
                i = self._table_factor(i, end, ctes)
                in_from = True
                previous = None
                continue
            if token.is_punct("("):
                close = self.close[i]
                self._parenthesized(i + 1, close, ctes)
                i = close + 1
                previous = None
                continue
            keyword = token.keyword
            if not expression:
                if keyword == "FROM" and previous != "DISTINCT":
                    expect_table = True
                elif keyword == "JOIN":
                    expect_table = True
                elif keyword in _FROM_LIST_END:
                    in_from = False
                elif token.is_punct(",") and in_from:
                    expect_table = True
            previous = keyword
            i += 1
        if expect_table:
            raise _SqlSyntaxError("expected a table after FROM or JOIN")

    def _table_factor(self, i: int, end: int, ctes: frozenset[str]) -> int:
        token = self.tokens[i]
        if token.is_punct("("):
            close = self.close[i]
            if self._starts_query(i + 1, close):
                self._query(i + 1, close)
            else:
                self._body(i + 1, close, ctes, expect_table=True)
            return close + 1
        if token.keyword == "UNNEST" and i + 1 < end and self.tokens[i + 1].is_punct("("):
            return self.close[i + 1] + 1
        if token.kind not in _NAME_KINDS or token.keyword in _NOT_TABLE_NAMES:
            return i

        parts = [token.text]
        j = i + 1
        while (
            j + 1 < end
            and self.tokens[j].is_punct(".")
            and self.tokens[j + 1].kind in _NAME_KINDS
        ):
            parts.append(self.tokens[j + 1].text)
            j += 2
        name = ".".join(parts)
        if name not in ctes:
            self.tables.add(name)
        if j < end and self.tokens[j].is_punct("("):
            j = self.close[j] + 1
        return j


def _fallback_tables(sql: str) -> set[str]:
    """Pattern-based extraction for statements the parser cannot handle."""
    found: set[str] = set()
    for match in _FALLBACK_RE.finditer(sql.upper()):
        name = match.group(1)
        if name not in _FALLBACK_SKIP:
            found.add(name.lower())
    return found


@dataclass
class SqlDependencies:
    """The set of tables a SQL text reads from; CTE names are excluded."""

    tables: set[str] = field(default_factory=set)

    @classmethod
    def extract(cls, sql: str) -> SqlDependencies:
        """Collect the source tables of every statement in ``sql``."""
        try:
            tables = _Extractor(sql).run()
        except _SqlSyntaxError:
            tables = _fallback_tables(sql)
        return cls(tables=tables)

    def has_dependency(self, table: str) -> bool:
        """True if ``table`` is a dependency, by full name or by trailing name."""
        suffix = f".{table}"
        return table in self.tables or any(t.endswith(suffix) for t in self.tables)