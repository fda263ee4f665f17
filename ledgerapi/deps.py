from typing import Iterator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from ledgerapi.config import Settings
from ledgerapi.containers import Container
from ledgerapi.database.session import open_session
from ledgerapi.repositories.summary_repository import TransactionSummaryRepository
from ledgerapi.repositories.transaction_repository import TransactionRepository
from ledgerapi.services.transaction_service import TransactionService


@inject
def get_session_factory(
    session_factory: sessionmaker = Depends(Provide[Container.database.session_factory]),
) -> sessionmaker:
    return session_factory


@inject
def get_settings_dep(
    settings: Settings = Depends(Provide[Container.config.config]),
) -> Settings:
    return settings


def get_db(session_factory: sessionmaker = Depends(get_session_factory)) -> Iterator[Session]:
    """요청 단위 세션 - 요청이 끝나면 반환"""
    yield from open_session(session_factory)


def get_transaction_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> TransactionService:
    return TransactionService(
        transaction_repo=TransactionRepository(db),
        summary_repo=TransactionSummaryRepository(db),
        settings=settings,
    )
