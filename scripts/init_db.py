import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text

from ledgerapi.config import get_settings
from ledgerapi.database.connection import create_db_engine
from ledgerapi.models.base import Base

# Register every table on Base.metadata
from ledgerapi.models import transaction, transaction_summary  # noqa: F401


def init_db():
    """데이터베이스 초기화"""
    settings = get_settings()
    engine = create_db_engine(settings)

    try:
        if engine.dialect.name == "postgresql":
            with engine.connect() as conn:
                conn.execute(
                    text(f'CREATE SCHEMA IF NOT EXISTS "{settings.POSTGRES_SCHEMA}"')
                )
                conn.commit()

        Base.metadata.create_all(bind=engine)
        print(f"Database initialized: {', '.join(sorted(Base.metadata.tables))}")

    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise
    finally:
        engine.dispose()


if __name__ == "__main__":
    init_db()
