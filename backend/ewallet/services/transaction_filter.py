import logging
import re
from datetime import date, datetime
from typing import Optional

from ewallet.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ewallet.errors import InvalidDateFormat, ValidationError
from ewallet.models.transaction import TransactionFilter

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# OFFSET is bound as a signed 64-bit integer.
MAX_OFFSET = 2**63 - 1


def parse_date(value: Optional[str], label: str) -> Optional[date]:
    """Parse a YYYY-MM-DD query value. Empty means "no bound"."""
    if value is None or value == "":
        return None
    try:
        if not _DATE_RE.match(value):
            raise ValueError(value)
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDateFormat(f"Invalid {label} date format. Use YYYY-MM-DD") from None


def normalize_filter(
    user_id: int,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    max_limit: int = MAX_PAGE_SIZE,
) -> TransactionFilter:
    """
    Turn raw listing parameters into a TransactionFilter.

    Dates are checked first so a malformed value is rejected before anything
    touches the store. Non-positive page/limit fall back to defaults instead of
    failing; limit is clamped to max_limit. sort_by/sort_order are passed
    through lower-cased, the query builder decides what unknown values mean.
    """
    if user_id <= 0:
        raise ValidationError("Invalid user id")

    start = parse_date(start_date, "start")
    end = parse_date(end_date, "end")
    if start and end and start > end:
        raise ValidationError("startDate must not be after endDate")

    if limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    if limit > max_limit:
        logger.info("page_size_clamped", extra={"requested": limit, "max_limit": max_limit})
        limit = max_limit
    if page <= 0:
        page = 1
    if (page - 1) * limit > MAX_OFFSET:
        raise ValidationError("page is out of range")

    return TransactionFilter(
        user_id=user_id,
        page=page,
        limit=limit,
        search=search or None,
        sort_by=(sort_by or "").strip().lower() or "date",
        sort_order=(sort_order or "").strip().lower() or "desc",
        start_date=start,
        end_date=end,
    )
