"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-ewallet-api-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert
from sqlalchemy.pool import StaticPool

from ewallet.config import JWT_ISSUER, JWT_SECRET
from ewallet.services import database, schema

ALICE, BOB, CAROL = 1, 2, 3
ALICE_WALLET, BOB_WALLET, CAROL_WALLET = 11, 12, 13


@pytest.fixture
def engine():
    """In-memory SQLite store shared across threads, with users/wallets provisioned."""
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    schema.create_all(eng)
    with eng.begin() as conn:
        conn.execute(
            insert(schema.users),
            [
                {"id": ALICE, "username": "alice", "email": "alice@example.com", "password_hash": "x"},
                {"id": BOB, "username": "bob", "email": "bob@example.com", "password_hash": "x"},
                {"id": CAROL, "username": "carol", "email": "carol@example.com", "password_hash": "x"},
            ],
        )
        conn.execute(
            insert(schema.wallets),
            [
                {"id": ALICE_WALLET, "wallet_number": "1000000011", "user_id": ALICE, "balance": 0},
                {"id": BOB_WALLET, "wallet_number": "1000000012", "user_id": BOB, "balance": 0},
                {"id": CAROL_WALLET, "wallet_number": "1000000013", "user_id": CAROL, "balance": 0},
            ],
        )
    database.set_engine(eng)
    yield eng
    database.set_engine(None)
    eng.dispose()


@pytest.fixture
def add_transaction(engine):
    """Insert one transaction row; returns its id."""
    next_id = iter(range(1, 10_000))

    def _add(
        to_wallet_id: int,
        from_wallet_id: int | None = None,
        amount: str = "10.00",
        description: str = "transfer",
        created_at: datetime = datetime(2024, 1, 15, 12, 0, 0),
        transaction_type: str = "transfer",
        source_of_fund_id: int = 1,
    ) -> int:
        tx_id = next(next_id)
        with engine.begin() as conn:
            conn.execute(
                insert(schema.transactions).values(
                    id=tx_id,
                    from_wallet_id=from_wallet_id,
                    to_wallet_id=to_wallet_id,
                    amount=Decimal(amount),
                    description=description,
                    source_of_fund_id=source_of_fund_id,
                    transaction_type=transaction_type,
                    created_at=created_at,
                )
            )
        return tx_id

    return _add


@pytest.fixture
def client(engine) -> TestClient:
    from ewallet.main import app

    return TestClient(app)


def make_token(user_id, *, secret: str = JWT_SECRET, expires_in: timedelta = timedelta(hours=1)) -> str:
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {"sub": str(user_id), "iss": JWT_ISSUER, "iat": now, "exp": now + expires_in},
        secret,
        algorithm="HS256",
    )


@pytest.fixture
def auth_headers():
    def _headers(user_id: int = ALICE) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers
