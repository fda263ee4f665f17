"""
Transaction ledger model

Every transfer between two users is one row. Rows are appended with status
PENDING and only their status and chain metadata change afterwards; nothing
is ever deleted.
"""

import enum
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, Enum, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ledgerapi.models.base import BaseModel


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


class TransactionType(str, enum.Enum):
    SEND = "send"
    RECEIVE = "receive"
    FAUCET = "faucet"
    BETTING = "betting"
    CONTRACT_INTERACTION = "contract_interaction"


def _enum_values(enum_cls) -> list:
    return [member.value for member in enum_cls]


class Transaction(BaseModel):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_sender_status", "sender_id", "status"),
        Index("ix_transactions_receiver_status", "receiver_id", "status"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    receiver_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Display labels copied from the user directory at append time
    sender_email: Mapped[str] = mapped_column(String(255), nullable=False)
    receiver_email: Mapped[str] = mapped_column(String(255), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(36, 18), nullable=False)
    memo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # External correlation key used by the chain watcher
    transaction_hash: Mapped[Optional[str]] = mapped_column(
        String(66), unique=True, nullable=True
    )
    transaction_type: Mapped[Optional[TransactionType]] = mapped_column(
        Enum(
            TransactionType,
            name="transaction_type",
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    from_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    to_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    status: Mapped[TransactionStatus] = mapped_column(
        Enum(
            TransactionStatus,
            name="transaction_status",
            values_callable=_enum_values,
            validate_strings=True,
        ),
        default=TransactionStatus.PENDING,
        nullable=False,
    )

    # Chain metadata, written by status updates
    confirmations: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    block_number: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    block_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    transaction_index: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    gas_used: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    gas_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(36, 18), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    blockchain_timestamp: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    # created_at, updated_at inherited from BaseModel's TimestampMixin
