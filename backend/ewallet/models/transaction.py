from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class TransactionFilter(BaseModel):
    """Normalized constraints for one transaction-listing request."""

    model_config = ConfigDict(frozen=True)

    user_id: int = Field(gt=0)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)
    search: Optional[str] = None
    sort_by: str = "date"        # date | amount | recipient
    sort_order: str = "desc"     # asc | desc
    start_date: Optional[date] = None
    end_date: Optional[date] = None  # inclusive; queried as < end_date + 1 day


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    from_wallet_id: Optional[int] = None  # None for externally funded top-ups
    to_wallet_id: int
    amount: Decimal
    description: str
    source_of_fund_id: int
    transaction_type: str
    created_at: datetime
    from_wallet_number: Optional[str] = None
    to_wallet_number: str
    recipient_name: str

    @field_serializer("amount", when_used="json")
    def _amount_as_number(self, amount: Decimal) -> float:
        return float(amount)


class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class TransactionListResponse(BaseModel):
    transactions: list[Transaction]
    pagination: PaginationInfo
