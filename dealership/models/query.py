"""
Select description shared by both data-service backends.

A ``Query`` only records what to select. ``Store`` evaluates it in memory
with ``Query.run``; ``RestDataService`` translates it into PostgREST-style
URL parameters with ``Query.to_params``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


def _cmp_ready(value):
    """Numbers stored as strings still compare numerically."""
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _pg_quoted(value: str) -> str:
    """Double-quote a filter value so commas and parentheses in it stay literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _pg_literal(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


@dataclass
class Query:
    table: str
    eq: dict = field(default_factory=dict)
    gte: dict = field(default_factory=dict)
    lte: dict = field(default_factory=dict)
    search: Optional[tuple] = None  # (term, columns)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None

    # ---------- builders (chainable) ----------
    def where(self, **conditions) -> "Query":
        self.eq.update(conditions)
        return self

    def between(self, column: str, low=None, high=None) -> "Query":
        """Inclusive range on one column; either bound may be omitted."""
        if low is not None:
            self.gte[column] = low
        if high is not None:
            self.lte[column] = high
        return self

    def ilike_any(self, term: str, *columns: str) -> "Query":
        """Case-insensitive substring match on at least one of ``columns``."""
        if term:
            self.search = (term, tuple(columns))
        return self

    def order(self, column: str, descending: bool = False) -> "Query":
        self.order_by = column
        self.descending = descending
        return self

    def take(self, n: Optional[int]) -> "Query":
        self.limit = n
        return self

    # ---------- in-memory evaluation ----------
    def matches(self, row: dict) -> bool:
        for col, expected in self.eq.items():
            if row.get(col) != expected:
                return False
        for col, low in self.gte.items():
            value = row.get(col)
            if value is None or _cmp_ready(value) < _cmp_ready(low):
                return False
        for col, high in self.lte.items():
            value = row.get(col)
            if value is None or _cmp_ready(value) > _cmp_ready(high):
                return False
        if self.search:
            term, columns = self.search
            kw = term.lower()
            if not any(kw in str(row.get(c) or "").lower() for c in columns):
                return False
        return True

    def run(self, rows: Iterable[dict]) -> list[dict]:
        """Filter, order (nulls last) and limit ``rows``; returns copies."""
        res = [dict(r) for r in rows if self.matches(r)]
        if self.order_by:
            col = self.order_by
            present = [r for r in res if r.get(col) is not None]
            missing = [r for r in res if r.get(col) is None]
            present.sort(key=lambda r: _cmp_ready(r[col]), reverse=self.descending)
            res = present + missing
        if self.limit is not None:
            res = res[: max(0, self.limit)]
        return res

    # ---------- PostgREST translation ----------
    def to_params(self) -> list[tuple[str, Any]]:
        params: list[tuple[str, Any]] = [("select", "*")]
        for col, value in self.eq.items():
            params.append((col, f"eq.{_pg_literal(value)}"))
        for col, value in self.gte.items():
            params.append((col, f"gte.{_pg_literal(value)}"))
        for col, value in self.lte.items():
            params.append((col, f"lte.{_pg_literal(value)}"))
        if self.search:
            term, columns = self.search
            clauses = ",".join(f"{c}.ilike.{_pg_quoted(f'*{term}*')}" for c in columns)
            params.append(("or", f"({clauses})"))
        if self.order_by:
            direction = "desc" if self.descending else "asc"
            params.append(("order", f"{self.order_by}.{direction}.nullslast"))
        if self.limit is not None:
            params.append(("limit", int(self.limit)))
        return params
