import logging
import time
from typing import Any, Optional

from sqlalchemy import DateTime, Numeric, bindparam, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from ewallet.config import QUERY_TIMEOUT_SECONDS
from ewallet.errors import QueryCancelledError, StoreError
from ewallet.models.transaction import Transaction
from ewallet.services.database import get_engine
from ewallet.services.query_builder import TransactionQuery

logger = logging.getLogger(__name__)

_QUERY_CANCELED_SQLSTATE = "57014"

_clock = time.monotonic


# ── Helpers ────────────────────────────────────────────────────────────────────

def _bound(sql: str, values: dict[str, Any]):
    # Typed bind parameters so dates compare as timestamps on every backend.
    return text(sql).bindparams(*[bindparam(name, value=v) for name, v in values.items()])


def _check_deadline(deadline: Optional[float], stage: str) -> None:
    if deadline is not None and _clock() >= deadline:
        raise QueryCancelledError(f"Deadline exceeded before {stage} query")


def _is_cancellation(exc: DBAPIError) -> bool:
    return getattr(exc.orig, "sqlstate", None) == _QUERY_CANCELED_SQLSTATE


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=row["id"],
        from_wallet_id=row["from_wallet_id"],
        to_wallet_id=row["to_wallet_id"],
        amount=row["amount"],
        description=row["description"] or "",
        source_of_fund_id=row["source_of_fund_id"],
        transaction_type=row["transaction_type"],
        created_at=row["created_at"],
        from_wallet_number=row["from_wallet_number"],
        to_wallet_number=row["to_wallet_number"],
        recipient_name=row["recipient_name"],
    )


# ── Reader ─────────────────────────────────────────────────────────────────────

def fetch_transactions(
    query: TransactionQuery,
    timeout: Optional[float] = QUERY_TIMEOUT_SECONDS,
) -> tuple[list[Transaction], int]:
    """
    Run the count query, then the data query, and map rows to Transactions.

    The two statements are separate round trips without a shared snapshot, so
    under concurrent writes the total may briefly disagree with the page.

    Args:
        query: statements and parameters from build_transaction_query
        timeout: seconds the caller is willing to wait; None disables the check
    Returns:
        (transactions in query order, total matching items)
    Raises:
        QueryCancelledError: the deadline passed or the server cancelled a statement
        StoreError: any other connectivity or execution failure
    """
    deadline = _clock() + timeout if timeout else None
    filter_values = query.bind_values()

    count_stmt = _bound(query.count_sql, filter_values)
    data_stmt = _bound(
        query.data_sql,
        {**filter_values, "limit": query.limit, "offset": query.offset},
    ).columns(created_at=DateTime, amount=Numeric(15, 2))

    try:
        with get_engine().connect() as conn:
            _check_deadline(deadline, "count")
            total_items = conn.execute(count_stmt).scalar_one()

            _check_deadline(deadline, "data")
            rows = conn.execute(data_stmt).mappings().all()
    except QueryCancelledError:
        logger.warning("transaction_query_cancelled", extra={"timeout": timeout})
        raise
    except DBAPIError as e:
        if _is_cancellation(e):
            logger.warning("transaction_query_cancelled", extra={"timeout": timeout, "error": str(e)})
            raise QueryCancelledError("Query cancelled by the database") from e
        raise StoreError("Transaction query failed") from e
    except SQLAlchemyError as e:
        raise StoreError("Transaction query failed") from e

    transactions = [_row_to_transaction(row) for row in rows]
    logger.info(
        "transactions_fetched",
        extra={"total_items": total_items, "returned": len(transactions), "offset": query.offset},
    )
    return transactions, int(total_items)
