"""
SQL construction for the transaction listing.

Optional filters are collected as (fragment, value) pairs and rendered once,
so the n-th placeholder always binds the n-th value. The count statement and
the data statement share the same FROM/WHERE text and the same parameters;
only the data statement carries ORDER BY / LIMIT / OFFSET.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any

from ewallet.models.transaction import TransactionFilter

_SELECT_COLUMNS = """
    t.id, t.from_wallet_id, t.to_wallet_id, t.amount,
    t.description, t.source_of_fund_id, t.transaction_type,
    t.created_at,
    fw.wallet_number AS from_wallet_number,
    tw.wallet_number AS to_wallet_number,
    u.username AS recipient_name"""

_FROM_CLAUSE = """
FROM transactions t
LEFT JOIN wallets fw ON t.from_wallet_id = fw.id
JOIN wallets tw ON t.to_wallet_id = tw.id
JOIN users u ON tw.user_id = u.id"""

SORT_COLUMNS: dict[str, str] = {
    "date": "t.created_at",
    "amount": "t.amount",
    "recipient": "recipient_name",
}
DEFAULT_SORT_COLUMN = SORT_COLUMNS["date"]


@dataclass(frozen=True)
class Predicate:
    """One WHERE condition. `{p}` in the fragment marks where its value binds."""

    fragment: str
    value: Any


@dataclass(frozen=True)
class TransactionQuery:
    count_sql: str
    data_sql: str
    params: tuple[Any, ...]
    limit: int
    offset: int

    def bind_values(self) -> dict[str, Any]:
        """Filter parameters keyed by placeholder name (p1, p2, ...)."""
        return {param_name(i): value for i, value in enumerate(self.params, start=1)}


def param_name(position: int) -> str:
    return f"p{position}"


@dataclass
class PredicateBuilder:
    predicates: list[Predicate] = field(default_factory=list)

    def add(self, fragment: str, value: Any) -> "PredicateBuilder":
        self.predicates.append(Predicate(fragment, value))
        return self

    def render(self) -> tuple[str, tuple[Any, ...]]:
        clauses = [
            p.fragment.format(p=":" + param_name(i))
            for i, p in enumerate(self.predicates, start=1)
        ]
        return " AND ".join(clauses), tuple(p.value for p in self.predicates)


def build_predicates(f: TransactionFilter) -> PredicateBuilder:
    # Owner scope is always first so user_id is always p1.
    builder = PredicateBuilder().add("(fw.user_id = {p} OR tw.user_id = {p})", f.user_id)

    if f.search:
        builder.add("LOWER(t.description) LIKE LOWER({p})", f"%{f.search}%")

    if f.start_date:
        builder.add("t.created_at >= {p}", datetime.combine(f.start_date, time.min))

    # Exclusive bound on the next midnight keeps the whole end day.
    # date.max has no next midnight, so it leaves the range open.
    if f.end_date and f.end_date < date.max:
        builder.add("t.created_at < {p}", datetime.combine(f.end_date + timedelta(days=1), time.min))

    return builder


def order_clause(sort_by: str, sort_order: str) -> str:
    column = SORT_COLUMNS.get((sort_by or "").lower(), DEFAULT_SORT_COLUMN)
    direction = "ASC" if (sort_order or "").lower() == "asc" else "DESC"
    # t.id breaks ties so pages never overlap or skip rows.
    return f"ORDER BY {column} {direction}, t.id {direction}"


def build_transaction_query(f: TransactionFilter) -> TransactionQuery:
    where, params = build_predicates(f).render()

    count_sql = f"SELECT COUNT(*){_FROM_CLAUSE}\nWHERE {where}"
    data_sql = (
        f"SELECT {_SELECT_COLUMNS}{_FROM_CLAUSE}\nWHERE {where}\n"
        f"{order_clause(f.sort_by, f.sort_order)}\n"
        "LIMIT :limit OFFSET :offset"
    )

    return TransactionQuery(
        count_sql=count_sql,
        data_sql=data_sql,
        params=params,
        limit=f.limit,
        offset=(f.page - 1) * f.limit,
    )
