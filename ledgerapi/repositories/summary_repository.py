from datetime import date
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledgerapi.models.transaction_summary import TransactionSummary
from ledgerapi.repositories.base import BaseRepository
from ledgerapi.schemas.transaction import TransactionSummarySchema


class TransactionSummaryRepository(
    BaseRepository[TransactionSummary, TransactionSummarySchema]
):
    """일별 거래 요약 조회 전용 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(TransactionSummary, TransactionSummarySchema, db)

    def find_since(self, user_id: int, since: date) -> List[TransactionSummarySchema]:
        """since 이후(포함)의 요약을 최신 날짜순으로 반환"""
        try:
            rows = (
                self.db.query(TransactionSummary)
                .filter(
                    TransactionSummary.user_id == user_id,
                    TransactionSummary.summary_date >= since,
                )
                .order_by(TransactionSummary.summary_date.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("fetch summary", e) from e
        return self._to_schemas(rows)
