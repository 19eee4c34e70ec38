import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ewallet.config import DEFAULT_PAGE_SIZE
from ewallet.middleware.auth_middleware import get_current_user_id
from ewallet.models.transaction import TransactionListResponse
from ewallet.services import transaction_service
from ewallet.services.transaction_filter import normalize_filter

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=TransactionListResponse, response_model_exclude_none=True)
def list_transactions(
    user_id: int = Depends(get_current_user_id),
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    search: Optional[str] = Query(default=None, alias="s", description="Case-insensitive substring of the description"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy", description="date | amount | recipient"),
    sort_order: Optional[str] = Query(default=None, alias="sort", description="asc | desc"),
    start_date: Optional[str] = Query(default=None, alias="startDate", description="YYYY-MM-DD, inclusive"),
    end_date: Optional[str] = Query(default=None, alias="endDate", description="YYYY-MM-DD, inclusive"),
):
    """
    Return one page of the caller's transactions, sent or received.

    - Defaults: page=1, limit=10, newest first
    - page/limit <= 0 fall back to the defaults; limit is capped
    - Unknown sortBy/sort values fall back to date/desc
    - A malformed startDate/endDate is rejected with 400 before any query runs
    """
    f = normalize_filter(
        user_id=user_id,
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        start_date=start_date,
        end_date=end_date,
    )
    return transaction_service.list_transactions(f)
