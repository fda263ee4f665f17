import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on path for `ledgerapi` imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ledgerapi.config import Settings
from ledgerapi.database.connection import create_db_engine, create_session_factory
from ledgerapi.database.session import open_session
from ledgerapi.deps import get_db
from ledgerapi.main import app
from ledgerapi.models.base import Base
from ledgerapi.models.transaction import Transaction, TransactionStatus
from ledgerapi.models import transaction_summary  # noqa: F401


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://")


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        yield from open_session(session_factory)

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_transaction(db_session):
    """Insert a ledger row directly, bypassing the service."""
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(sender_id, receiver_id, status=TransactionStatus.PENDING, **kwargs):
        counter["n"] += 1
        created_at = kwargs.pop("created_at", base_time + timedelta(minutes=counter["n"]))
        row = Transaction(
            sender_id=sender_id,
            receiver_id=receiver_id,
            sender_email=kwargs.pop("sender_email", f"user{sender_id}@example.com"),
            receiver_email=kwargs.pop("receiver_email", f"user{receiver_id}@example.com"),
            amount=kwargs.pop("amount", Decimal("1.25")),
            status=status,
            created_at=created_at,
            updated_at=created_at,
            **kwargs,
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _make
