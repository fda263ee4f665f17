"""
Daily per-user transaction rollup.

Rows are written by the summary aggregation job; this service only reads them.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import BigInteger, Date, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from ledgerapi.models.base import BaseModel


class TransactionSummary(BaseModel):
    __tablename__ = "transaction_summaries"
    __table_args__ = (UniqueConstraint("user_id", "summary_date"),)

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    summary_date: Mapped[date] = mapped_column(Date, nullable=False)

    total_transactions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    incoming_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    outgoing_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_incoming: Mapped[Decimal] = mapped_column(Numeric(36, 18), default=0, nullable=False)
    total_outgoing: Mapped[Decimal] = mapped_column(Numeric(36, 18), default=0, nullable=False)
    total_gas_fees: Mapped[Decimal] = mapped_column(Numeric(36, 18), default=0, nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(Numeric(36, 18), default=0, nullable=False)

    # Breakdown by TransactionType
    send_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    receive_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    faucet_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    betting_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    contract_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
