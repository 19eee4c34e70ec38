from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("username", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

wallets = Table(
    "wallets",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("wallet_number", String(20), nullable=False, unique=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("balance", Numeric(15, 2), nullable=False, default=0),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("from_wallet_id", Integer, ForeignKey("wallets.id"), nullable=True),  # NULL for top-ups
    Column("to_wallet_id", Integer, ForeignKey("wallets.id"), nullable=False),
    Column("amount", Numeric(15, 2), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("source_of_fund_id", Integer, nullable=False),
    Column("transaction_type", String(20), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Index("idx_transactions_from_wallet_created", "from_wallet_id", "created_at"),
    Index("idx_transactions_to_wallet_created", "to_wallet_id", "created_at"),
)


def create_all(engine: Engine) -> None:
    metadata.create_all(engine)
