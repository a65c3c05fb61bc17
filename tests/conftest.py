"""
テスト共通のfixture

DockerのPostgreSQLの代わりにSQLiteのインメモリDBを利用するため、
DBを起動せずに `pytest` でテストを実行できます。
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from active_record.db_controller import create_session, init_active_record
from active_record.model import ActiveRecordModel
from tests.db_models import Base, Company, FinancialData, FinancialReport


@pytest.fixture(scope="function")
def engine():
    # スレッドをまたいで同じインメモリDBを共有する
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    session = create_session(engine)
    try:
        yield session
    finally:
        session.rollback()
        session.remove()


@pytest.fixture(scope="function")
def context(db_session):
    repository_context = init_active_record(
        db_session, [Company, FinancialData, FinancialReport]
    )
    yield repository_context
    ActiveRecordModel.set_application_context(None)


@pytest.fixture(autouse=True)
def reset_application_context():
    yield
    ActiveRecordModel.set_application_context(None)


@pytest.fixture(scope="function")
def company_data():
    company = Company(
        edinet_code="E12345",
        security_code="S1234",
        company_name="Test Company",
    )
    return company
