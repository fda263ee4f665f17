import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import Mock

from sqlalchemy.exc import IntegrityError, OperationalError

from ledgerapi.core.exceptions import StorageError
from ledgerapi.models.transaction import Transaction, TransactionStatus, TransactionType
from ledgerapi.models.transaction_summary import TransactionSummary
from ledgerapi.repositories.summary_repository import TransactionSummaryRepository
from ledgerapi.repositories.transaction_repository import TransactionRepository


def _now():
    return datetime.now(timezone.utc)


@pytest.fixture
def repo(db_session):
    return TransactionRepository(db_session)


def _create(repo, **overrides):
    fields = {
        "sender_id": 1,
        "receiver_id": 2,
        "sender_email": "a@x.com",
        "receiver_email": "b@x.com",
        "amount": Decimal("10.50"),
        "created_at": _now(),
    }
    fields.update(overrides)
    return repo.create_transaction(**fields)


class TestCreateTransaction:
    def test_assigns_distinct_ids_and_pending_status(self, repo):
        first = _create(repo)
        second = _create(repo, sender_id=3)

        assert first.id != second.id
        assert first.status is TransactionStatus.PENDING
        assert second.status is TransactionStatus.PENDING
        assert first.amount == Decimal("10.50")
        assert first.confirmations == 0

    def test_duplicate_hash_is_storage_error(self, repo, db_session):
        _create(repo, transaction_hash="0xdup")

        with pytest.raises(StorageError) as exc_info:
            _create(repo, transaction_hash="0xdup")

        assert isinstance(exc_info.value.cause, IntegrityError)
        assert exc_info.value.status_code == 500
        # Session was rolled back and is still usable
        assert db_session.query(Transaction).count() == 1


class TestUpdateStatusByHash:
    def test_pending_to_completed(self, repo, db_session):
        created = _create(repo, transaction_hash="0xabc")
        later = created.created_at + timedelta(seconds=5)

        changed = repo.update_status_by_hash(
            "0xabc", TransactionStatus.COMPLETED, {"confirmations": 12, "block_number": 99}, later
        )

        assert changed == 1
        db_session.expire_all()
        row = db_session.query(Transaction).filter_by(transaction_hash="0xabc").one()
        assert row.status is TransactionStatus.COMPLETED
        assert row.confirmations == 12
        assert row.block_number == 99
        assert row.amount == Decimal("10.50")
        assert row.updated_at > row.created_at

    def test_terminal_status_is_not_overwritten(self, repo, db_session):
        _create(repo, transaction_hash="0xabc")
        repo.update_status_by_hash("0xabc", TransactionStatus.COMPLETED, {}, _now())

        changed = repo.update_status_by_hash(
            "0xabc", TransactionStatus.FAILED, {"error_message": "late callback"}, _now()
        )

        assert changed == 0
        db_session.expire_all()
        row = db_session.query(Transaction).filter_by(transaction_hash="0xabc").one()
        assert row.status is TransactionStatus.COMPLETED
        assert row.error_message is None

    def test_same_terminal_status_is_reapplied(self, repo):
        _create(repo, transaction_hash="0xabc")
        repo.update_status_by_hash("0xabc", TransactionStatus.FAILED, {"error_message": "reverted"}, _now())

        changed = repo.update_status_by_hash(
            "0xabc", TransactionStatus.FAILED, {"error_message": "reverted"}, _now()
        )

        assert changed == 1
        assert repo.get_status_by_hash("0xabc") is TransactionStatus.FAILED

    def test_unknown_hash_changes_nothing(self, repo):
        assert repo.update_status_by_hash("0xnope", TransactionStatus.COMPLETED, {}, _now()) == 0
        assert repo.get_status_by_hash("0xnope") is None


class TestFindHistory:
    def test_visibility_rule(self, repo, make_transaction):
        sent_pending = make_transaction(1, 2)
        received_completed = make_transaction(2, 1, TransactionStatus.COMPLETED)
        make_transaction(1, 2, TransactionStatus.FAILED)
        received_pending = make_transaction(2, 1)

        user1, total1 = repo.find_history(user_id=1, limit=50, offset=0)
        user2, total2 = repo.find_history(user_id=2, limit=50, offset=0)

        assert [t.id for t in user1] == [received_completed.id, sent_pending.id]
        assert total1 == 2
        assert [t.id for t in user2] == [received_pending.id, received_completed.id]
        assert total2 == 2

    def test_offset_past_end_keeps_total(self, repo, make_transaction):
        for _ in range(3):
            make_transaction(1, 2, TransactionStatus.COMPLETED)

        page, total = repo.find_history(user_id=1, limit=10, offset=10)

        assert page == []
        assert total == 3

    def test_pages_newest_first(self, repo, make_transaction):
        rows = [make_transaction(1, 2, TransactionStatus.COMPLETED) for _ in range(5)]

        page, total = repo.find_history(user_id=2, limit=2, offset=1)

        assert [t.id for t in page] == [rows[3].id, rows[2].id]
        assert total == 5

    def test_wallet_and_type_filters(self, repo, make_transaction):
        match = make_transaction(
            1, 2, TransactionStatus.COMPLETED,
            from_address="0xABCDEF", transaction_type=TransactionType.FAUCET,
        )
        make_transaction(
            1, 2, TransactionStatus.COMPLETED,
            from_address="0x999999", transaction_type=TransactionType.FAUCET,
        )
        make_transaction(
            1, 2, TransactionStatus.COMPLETED,
            to_address="0xabcdef", transaction_type=TransactionType.SEND,
        )

        by_wallet, wallet_total = repo.find_history(
            user_id=1, limit=10, offset=0, wallet_address="0xabcdef"
        )
        both, both_total = repo.find_history(
            user_id=1, limit=10, offset=0,
            wallet_address="0xAbCdEf", transaction_type=TransactionType.FAUCET,
        )

        assert wallet_total == 2
        assert len(by_wallet) == 2
        assert both_total == 1
        assert both[0].id == match.id


class TestFindPending:
    def test_only_pending_oldest_first(self, repo, make_transaction):
        newer = make_transaction(1, 2)
        make_transaction(1, 2, TransactionStatus.COMPLETED)
        older = make_transaction(3, 1, created_at=datetime(2023, 6, 1, tzinfo=timezone.utc))

        pending = repo.find_pending()

        assert [p.id for p in pending] == [older.id, newer.id]
        assert all(p.status is TransactionStatus.PENDING for p in pending)

    def test_scoped_to_sender(self, repo, make_transaction):
        mine = make_transaction(1, 2)
        make_transaction(2, 1)

        pending = repo.find_pending(user_id=1)

        assert [p.id for p in pending] == [mine.id]


class TestSummaryRepository:
    def test_window_and_order(self, db_session):
        today = date.today()
        for offset_days in (0, 10, 95):
            db_session.add(
                TransactionSummary(
                    user_id=1,
                    summary_date=today - timedelta(days=offset_days),
                    total_transactions=offset_days + 1,
                )
            )
        db_session.add(TransactionSummary(user_id=2, summary_date=today, total_transactions=9))
        db_session.commit()

        rows = TransactionSummaryRepository(db_session).find_since(
            user_id=1, since=today - timedelta(days=90)
        )

        assert [r.summary_date for r in rows] == [today, today - timedelta(days=10)]
        assert rows[0].total_transactions == 1
        assert rows[0].net_amount == Decimal("0")


class TestStorageFailures:
    def test_read_failure_rolls_back(self):
        db = Mock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))

        with pytest.raises(StorageError) as exc_info:
            TransactionRepository(db).find_pending()

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert exc_info.value.details["cause"] == "OperationalError"
        db.rollback.assert_called_once()
