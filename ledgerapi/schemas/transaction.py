from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ledgerapi.models.transaction import TransactionStatus, TransactionType


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TransactionRecordRequest(BaseModel):
    """거래 기록 요청 - 필수 필드 검사는 서비스에서 순서대로 수행"""

    sender_id: Optional[int] = Field(None, description="보내는 사용자 ID")
    receiver_id: Optional[int] = Field(None, description="받는 사용자 ID")
    sender_email: Optional[str] = Field(None, max_length=255, description="보내는 사용자 표시 이메일")
    receiver_email: Optional[str] = Field(None, max_length=255, description="받는 사용자 표시 이메일")
    amount: Optional[Decimal] = Field(None, description="거래 금액")
    memo: Optional[str] = Field(None, description="메모")
    transaction_hash: Optional[str] = Field(None, max_length=66, description="체인 트랜잭션 해시")
    transaction_type: Optional[TransactionType] = Field(None, description="거래 유형")
    from_address: Optional[str] = Field(None, max_length=64, description="보내는 지갑 주소")
    to_address: Optional[str] = Field(None, max_length=64, description="받는 지갑 주소")
    status: Optional[TransactionStatus] = Field(None, description="초기 상태 (pending만 허용)")


class TransactionStatusUpdateRequest(BaseModel):
    """체인 확인 결과 반영 요청"""

    transaction_hash: Optional[str] = Field(None, max_length=66)
    status: Optional[TransactionStatus] = None
    confirmations: Optional[int] = Field(None, ge=0)
    block_number: Optional[int] = Field(None, ge=0)
    block_hash: Optional[str] = Field(None, max_length=66)
    transaction_index: Optional[int] = Field(None, ge=0)
    gas_used: Optional[int] = Field(None, ge=0)
    gas_cost: Optional[Decimal] = Field(None, ge=0)
    error_message: Optional[str] = None
    blockchain_timestamp: Optional[int] = Field(None, ge=0)

    CHAIN_METADATA_FIELDS: ClassVar[Tuple[str, ...]] = (
        "confirmations",
        "block_number",
        "block_hash",
        "transaction_index",
        "gas_used",
        "gas_cost",
        "error_message",
        "blockchain_timestamp",
    )

    def chain_metadata(self) -> dict:
        """
        체인 메타데이터 전체 - 누락되거나 null인 필드는 기본값

        Every column is written on each update, so data from an earlier
        callback never survives a later one. confirmations defaults to 0,
        the rest to null.
        """
        metadata = {field: getattr(self, field) for field in self.CHAIN_METADATA_FIELDS}
        if metadata["confirmations"] is None:
            metadata["confirmations"] = 0
        return metadata


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class TransactionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    sender_email: str
    receiver_email: str
    amount: Decimal
    memo: Optional[str] = None
    transaction_hash: Optional[str] = None
    transaction_type: Optional[TransactionType] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    status: TransactionStatus
    confirmations: int = 0
    block_number: Optional[int] = None
    block_hash: Optional[str] = None
    transaction_index: Optional[int] = None
    gas_used: Optional[int] = None
    gas_cost: Optional[Decimal] = None
    error_message: Optional[str] = None
    blockchain_timestamp: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class PendingTransactionSchema(BaseModel):
    """Projection of a transaction still waiting for chain confirmation."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    sender_email: str
    receiver_email: str
    amount: Decimal
    memo: Optional[str] = None
    transaction_hash: Optional[str] = None
    transaction_type: Optional[TransactionType] = None
    status: TransactionStatus
    created_at: datetime


class TransactionSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    summary_date: date
    total_transactions: int
    incoming_count: int
    outgoing_count: int
    total_incoming: Decimal
    total_outgoing: Decimal
    total_gas_fees: Decimal
    net_amount: Decimal
    send_count: int
    receive_count: int
    faucet_count: int
    betting_count: int
    contract_count: int


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TransactionRecordResponse(BaseModel):
    success: bool = True
    transaction_id: int
    message: str = "Transaction recorded successfully"


class TransactionStatusUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Transaction status updated successfully"


class TransactionHistoryResponse(BaseModel):
    success: bool = True
    transactions: List[TransactionSchema] = Field(default_factory=list)
    total: int = Field(..., description="페이지와 무관한 전체 건수")
    limit: int
    offset: int


class PendingTransactionsResponse(BaseModel):
    success: bool = True
    pending_transactions: List[PendingTransactionSchema] = Field(default_factory=list)


class TransactionSummaryResponse(BaseModel):
    success: bool = True
    summaries: List[TransactionSummarySchema] = Field(default_factory=list)
    days: int
