"""
거래 원장 API 라우터

A single resource path with the operation chosen by the ``action`` query
parameter:

- POST /transactions?action=record: 거래 기록
- POST /transactions?action=update_status: 체인 확인 결과 반영
- GET /transactions?action=history: 사용자 거래 내역
- GET /transactions?action=pending: 대기 중 거래 목록
- GET /transactions?action=summary: 일별 요약

An unknown action is a 400; a known action sent with the other verb is a 405.
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ledgerapi.core.exception_handlers import validation_error_from
from ledgerapi.core.exceptions import MethodNotAllowedError, ValidationError
from ledgerapi.deps import get_transaction_service
from ledgerapi.models.transaction import TransactionType
from ledgerapi.schemas.transaction import (
    TransactionRecordRequest,
    TransactionStatusUpdateRequest,
)
from ledgerapi.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

POST_ACTIONS = ("record", "update_status")
GET_ACTIONS = ("history", "pending", "summary")

RequestT = TypeVar("RequestT", bound=BaseModel)


def _parse_body(schema: Type[RequestT], payload: Optional[Dict[str, Any]]) -> RequestT:
    try:
        return schema.model_validate(payload or {})
    except PydanticValidationError as e:
        raise validation_error_from(e.errors()) from e


def _reject_action(action: str, other_verb_actions: tuple, other_verb: str) -> None:
    logger.warning(f"Rejected transaction action: {action!r}")
    if action in other_verb_actions:
        raise MethodNotAllowedError(
            f"Action '{action}' requires {other_verb}",
            details={"action": action, "allowed_method": other_verb},
        )
    raise ValidationError("Invalid action", details={"action": action})


@router.post("")
def post_transaction_action(
    action: str = Query("", description="record | update_status"),
    payload: Optional[Dict[str, Any]] = Body(None),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> Any:
    """
    거래 기록 / 상태 갱신

    Returns:
        record: {success, transaction_id, message}
        update_status: {success, message}
    """
    if action == "record":
        request = _parse_body(TransactionRecordRequest, payload)
        return transaction_service.record_transaction(request)
    if action == "update_status":
        request = _parse_body(TransactionStatusUpdateRequest, payload)
        return transaction_service.update_status(request)
    _reject_action(action, GET_ACTIONS, "GET")


@router.get("")
def get_transaction_action(
    action: str = Query("", description="history | pending | summary"),
    user_id: Optional[int] = Query(None, description="사용자 ID"),
    wallet_address: Optional[str] = Query(None, description="지갑 주소 필터"),
    limit: Optional[int] = Query(None, description="페이지 크기 (최대 100)"),
    offset: Optional[int] = Query(None, description="오프셋"),
    transaction_type: Optional[TransactionType] = Query(None, alias="type", description="거래 유형 필터"),
    days: Optional[int] = Query(None, description="요약 기간 (최대 90일)"),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> Any:
    """
    거래 내역 / 대기 목록 / 요약 조회

    Returns:
        history: {success, transactions, total, limit, offset}
        pending: {success, pending_transactions}
        summary: {success, summaries, days}
    """
    if action == "history":
        return transaction_service.get_history(
            user_id=user_id,
            wallet_address=wallet_address,
            limit=limit,
            offset=offset,
            transaction_type=transaction_type,
        )
    if action == "pending":
        return transaction_service.get_pending(user_id=user_id)
    if action == "summary":
        return transaction_service.get_summary(user_id=user_id, days=days)
    _reject_action(action, POST_ACTIONS, "POST")

