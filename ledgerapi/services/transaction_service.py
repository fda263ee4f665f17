"""
Transaction ledger service

Validates requests, clamps query windows and enforces the status lifecycle:
PENDING -> COMPLETED or PENDING -> FAILED, nothing out of a terminal state.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ledgerapi.config import Settings
from ledgerapi.core.exceptions import ConflictError, NotFoundError, ValidationError
from ledgerapi.models.transaction import TransactionStatus, TransactionType
from ledgerapi.repositories.summary_repository import TransactionSummaryRepository
from ledgerapi.repositories.transaction_repository import TransactionRepository
from ledgerapi.schemas.transaction import (
    PendingTransactionsResponse,
    TransactionHistoryResponse,
    TransactionRecordRequest,
    TransactionRecordResponse,
    TransactionStatusUpdateRequest,
    TransactionStatusUpdateResponse,
    TransactionSummaryResponse,
)

logger = logging.getLogger(__name__)

# Checked in this order; the first missing one is reported
REQUIRED_RECORD_FIELDS = (
    "sender_id",
    "receiver_id",
    "sender_email",
    "receiver_email",
    "amount",
)


USER_ID_FIELDS = ("sender_id", "receiver_id")


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    # 0 is not a user id
    return isinstance(value, int) and value == 0


class TransactionService:
    """거래 원장 비즈니스 로직"""

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        summary_repo: TransactionSummaryRepository,
        settings: Settings,
    ):
        self.transaction_repo = transaction_repo
        self.summary_repo = summary_repo
        self.settings = settings

    def record_transaction(
        self, request: TransactionRecordRequest
    ) -> TransactionRecordResponse:
        """거래 기록 (항상 PENDING으로 시작)

        Raises:
            ValidationError: 필수 필드 누락, 사용자 ID <= 0, 금액 <= 0, pending 이외의 초기 상태
            StorageError: 저장 실패 (해시 중복 포함)
        """
        for field in REQUIRED_RECORD_FIELDS:
            if _is_missing(getattr(request, field)):
                raise ValidationError(f"Missing required field: {field}")

        for field in USER_ID_FIELDS:
            if getattr(request, field) < 0:
                raise ValidationError(
                    f"Invalid value for field: {field}",
                    details={field: getattr(request, field)},
                )

        if request.amount <= 0:
            raise ValidationError(
                "Amount must be greater than zero",
                details={"amount": str(request.amount)},
            )

        if request.status is not None and request.status != TransactionStatus.PENDING:
            raise ValidationError(
                "New transactions must start as pending",
                details={"status": request.status.value},
            )

        transaction = self.transaction_repo.create_transaction(
            sender_id=request.sender_id,
            receiver_id=request.receiver_id,
            sender_email=request.sender_email,
            receiver_email=request.receiver_email,
            amount=request.amount,
            created_at=datetime.now(timezone.utc),
            memo=request.memo,
            transaction_hash=request.transaction_hash or None,
            transaction_type=request.transaction_type,
            from_address=request.from_address,
            to_address=request.to_address,
        )

        logger.info(
            f"Recorded transaction {transaction.id}: {request.sender_id} -> {request.receiver_id}, "
            f"amount={request.amount}, hash={transaction.transaction_hash}"
        )
        return TransactionRecordResponse(transaction_id=transaction.id)

    def update_status(
        self, request: TransactionStatusUpdateRequest
    ) -> TransactionStatusUpdateResponse:
        """체인 확인 결과로 상태와 메타데이터 갱신

        All chain metadata columns are rewritten; fields missing from the
        request fall back to 0 (confirmations) or null. The update is refused
        when the record already sits in a different terminal status.

        Raises:
            ValidationError: transaction_hash 또는 status 누락
            NotFoundError: 해당 해시의 거래 없음
            ConflictError: 종료 상태에서 다른 상태로 전이 시도
        """
        if _is_missing(request.transaction_hash) or request.status is None:
            raise ValidationError("Missing transaction_hash or status")

        transaction_hash = request.transaction_hash
        status = request.status
        metadata = request.chain_metadata()

        updated = self.transaction_repo.update_status_by_hash(
            transaction_hash=transaction_hash,
            status=status,
            metadata=metadata,
            updated_at=datetime.now(timezone.utc),
        )

        if updated == 0:
            current = self.transaction_repo.get_status_by_hash(transaction_hash)
            if current is None:
                raise NotFoundError(
                    f"No transaction found with hash: {transaction_hash}",
                    details={"transaction_hash": transaction_hash},
                )
            logger.warning(
                f"Rejected status change for {transaction_hash}: {current.value} -> {status.value}"
            )
            raise ConflictError(
                f"Transaction is already {current.value} and cannot become {status.value}",
                details={
                    "transaction_hash": transaction_hash,
                    "current_status": current.value,
                    "requested_status": status.value,
                },
            )

        logger.info(
            f"Updated transaction {transaction_hash} to {status.value} "
            f"(confirmations={metadata['confirmations']}, block={metadata['block_number']})"
        )
        return TransactionStatusUpdateResponse()

    def get_history(
        self,
        user_id: Optional[int],
        wallet_address: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> TransactionHistoryResponse:
        """사용자 거래 내역 조회

        Args:
            user_id: 사용자 ID (필수, wallet_address만으로는 조회 불가)
            wallet_address: from/to 주소로 추가 필터
            limit: 페이지 크기 (최대 HISTORY_MAX_LIMIT)
            offset: 오프셋
            transaction_type: 거래 유형 필터
        """
        if user_id is None:
            raise ValidationError("Missing user_id")

        if limit is None:
            limit = self.settings.HISTORY_DEFAULT_LIMIT
        if limit < 1:
            raise ValidationError("limit must be at least 1", details={"limit": limit})
        limit = min(limit, self.settings.HISTORY_MAX_LIMIT)

        if offset is None:
            offset = 0
        if offset < 0:
            raise ValidationError("offset must not be negative", details={"offset": offset})

        transactions, total = self.transaction_repo.find_history(
            user_id=user_id,
            limit=limit,
            offset=offset,
            wallet_address=wallet_address or None,
            transaction_type=transaction_type,
        )

        logger.info(
            f"Retrieved history for user {user_id}: {len(transactions)} of {total} "
            f"(limit={limit}, offset={offset})"
        )
        return TransactionHistoryResponse(
            transactions=transactions, total=total, limit=limit, offset=offset
        )

    def get_pending(self, user_id: Optional[int] = None) -> PendingTransactionsResponse:
        pending = self.transaction_repo.find_pending(user_id=user_id)
        logger.info(f"Retrieved {len(pending)} pending transactions (user={user_id})")
        return PendingTransactionsResponse(pending_transactions=pending)

    def get_summary(
        self, user_id: Optional[int], days: Optional[int] = None
    ) -> TransactionSummaryResponse:
        """최근 days일 (최대 SUMMARY_MAX_DAYS) 의 일별 요약"""
        if user_id is None:
            raise ValidationError("Missing user_id")

        if days is None:
            days = self.settings.SUMMARY_DEFAULT_DAYS
        if days < 0:
            raise ValidationError("days must not be negative", details={"days": days})
        days = min(days, self.settings.SUMMARY_MAX_DAYS)

        since = date.today() - timedelta(days=days)
        summaries = self.summary_repo.find_since(user_id=user_id, since=since)

        logger.info(f"Retrieved {len(summaries)} summaries for user {user_id} since {since}")
        return TransactionSummaryResponse(summaries=summaries, days=days)
