import logging
from typing import Optional

from ewallet.config import QUERY_TIMEOUT_SECONDS
from ewallet.models.transaction import TransactionFilter, TransactionListResponse
from ewallet.services import transaction_store
from ewallet.services.pagination import build_pagination
from ewallet.services.query_builder import build_transaction_query

logger = logging.getLogger(__name__)


def list_transactions(
    f: TransactionFilter,
    timeout: Optional[float] = QUERY_TIMEOUT_SECONDS,
) -> TransactionListResponse:
    """
    One listing request: build the statements, fetch count + page, attach pagination.

    Store errors propagate untouched; nothing is returned unless both the
    count and the data query succeeded.
    """
    query = build_transaction_query(f)
    transactions, total_items = transaction_store.fetch_transactions(query, timeout=timeout)

    response = TransactionListResponse(
        transactions=transactions,
        pagination=build_pagination(total_items, f.page, f.limit),
    )
    logger.info(
        "transactions_listed",
        extra={
            "user_id": f.user_id,
            "page": f.page,
            "limit": f.limit,
            "total_items": total_items,
            "sort_by": f.sort_by,
            "sort_order": f.sort_order,
        },
    )
    return response
