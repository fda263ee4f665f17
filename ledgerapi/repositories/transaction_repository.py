"""
거래 원장 리포지토리

All methods return Pydantic schemas, never SQLAlchemy models. Every write is a
single statement followed by a commit; any SQLAlchemy error rolls the session
back and surfaces as StorageError.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledgerapi.models.transaction import (
    Transaction,
    TransactionStatus,
    TransactionType,
)
from ledgerapi.repositories.base import BaseRepository
from ledgerapi.schemas.transaction import PendingTransactionSchema, TransactionSchema


class TransactionRepository(BaseRepository[Transaction, TransactionSchema]):
    def __init__(self, db: Session):
        super().__init__(Transaction, TransactionSchema, db)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_transaction(
        self,
        sender_id: int,
        receiver_id: int,
        sender_email: str,
        receiver_email: str,
        amount: Decimal,
        created_at: datetime,
        memo: Optional[str] = None,
        transaction_hash: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        from_address: Optional[str] = None,
        to_address: Optional[str] = None,
    ) -> TransactionSchema:
        """새 거래를 PENDING 상태로 추가하고 저장소가 부여한 ID와 함께 반환"""
        instance = Transaction(
            sender_id=sender_id,
            receiver_id=receiver_id,
            sender_email=sender_email,
            receiver_email=receiver_email,
            amount=amount,
            memo=memo,
            transaction_hash=transaction_hash,
            transaction_type=transaction_type,
            from_address=from_address,
            to_address=to_address,
            status=TransactionStatus.PENDING,
            confirmations=0,
            created_at=created_at,
            updated_at=created_at,
        )
        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("record transaction", e) from e
        return self._to_schema(instance)

    def update_status_by_hash(
        self,
        transaction_hash: str,
        status: TransactionStatus,
        metadata: Dict[str, Any],
        updated_at: datetime,
    ) -> int:
        """
        상태 변경 (compare-and-swap)

        Matches only a record that is still PENDING or already in the target
        status, so a terminal status is never overwritten by a different one.

        Returns:
            int: number of rows changed (0 or 1)
        """
        values: Dict[Any, Any] = {
            Transaction.status: status,
            Transaction.updated_at: updated_at,
        }
        for key, value in metadata.items():
            values[getattr(Transaction, key)] = value

        try:
            rowcount = (
                self.db.query(Transaction)
                .filter(
                    Transaction.transaction_hash == transaction_hash,
                    Transaction.status.in_([TransactionStatus.PENDING, status]),
                )
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("update transaction", e) from e
        return rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_status_by_hash(self, transaction_hash: str) -> Optional[TransactionStatus]:
        try:
            row = (
                self.db.query(Transaction.status)
                .filter(Transaction.transaction_hash == transaction_hash)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("fetch transaction", e) from e
        return row.status if row else None

    def find_history(
        self,
        user_id: int,
        limit: int,
        offset: int,
        wallet_address: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> Tuple[List[TransactionSchema], int]:
        """
        사용자에게 보이는 거래 내역 (최신순) 과 전체 건수

        A user sees their own PENDING sends and every COMPLETED transfer they
        took part in. FAILED records and PENDING records where the user is only
        the receiver are never returned.
        """
        conditions = [
            or_(
                and_(
                    Transaction.status == TransactionStatus.PENDING,
                    Transaction.sender_id == user_id,
                ),
                and_(
                    Transaction.status == TransactionStatus.COMPLETED,
                    or_(
                        Transaction.sender_id == user_id,
                        Transaction.receiver_id == user_id,
                    ),
                ),
            )
        ]
        if wallet_address:
            address = wallet_address.lower()
            conditions.append(
                or_(
                    func.lower(Transaction.from_address) == address,
                    func.lower(Transaction.to_address) == address,
                )
            )
        if transaction_type is not None:
            conditions.append(Transaction.transaction_type == transaction_type)

        try:
            rows = (
                self.db.query(Transaction)
                .filter(*conditions)
                .order_by(Transaction.created_at.desc(), Transaction.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            total = self.db.query(func.count(Transaction.id)).filter(*conditions).scalar()
        except SQLAlchemyError as e:
            raise self._storage_error("fetch transactions", e) from e

        return self._to_schemas(rows), int(total or 0)

    def find_pending(self, user_id: Optional[int] = None) -> List[PendingTransactionSchema]:
        """PENDING 거래 목록 (오래된 순), user_id가 있으면 해당 사용자가 보낸 것만"""
        conditions = [Transaction.status == TransactionStatus.PENDING]
        if user_id is not None:
            conditions.append(Transaction.sender_id == user_id)

        try:
            rows = (
                self.db.query(Transaction)
                .filter(*conditions)
                .order_by(Transaction.created_at.asc(), Transaction.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("fetch pending transactions", e) from e

        return [PendingTransactionSchema.model_validate(row) for row in rows]
