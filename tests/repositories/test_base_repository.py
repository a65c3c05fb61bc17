"""
BaseRepositoryの各メソッドを、ActiveRecordModelを経由せず直接テストします。
"""

import pytest

from active_record.exceptions import EntityNotFoundError
from active_record.repositories.base_repository import BaseRepository
from tests.db_models import Company, FinancialData


@pytest.fixture(scope="function")
def repo(db_session):
    return BaseRepository(db_session, Company)


@pytest.fixture(scope="function")
def company_data2():
    company = Company(
        edinet_code="E67890",
        security_code="S5678",
        company_name="Another Test Company",
    )
    return company


def test_save_and_find_by_id(repo, db_session, company_data):
    """AAA(Arrange, Act, Assert)パターンに従い、Companyの保存と取得をテストします。"""
    # Arrange:準備
    repo.save(company_data)
    # Act:実行
    db_session.commit()  # トランザクションをコミットしてDBに反映
    retrieved_company = repo.find_by_id(company_data.company_id)
    # Assert:検証
    assert retrieved_company is not None
    assert retrieved_company.edinet_code == company_data.edinet_code
    assert retrieved_company.security_code == company_data.security_code
    assert retrieved_company.company_name == company_data.company_name


def test_identity_of(repo, company_data):
    assert repo.identity_of(company_data) is None
    assert repo.identity_of(Company(company_id=3)) == 3
    composite_repo = BaseRepository(repo.session, FinancialData)
    assert composite_repo.identity_of(FinancialData(report_id=1, item_id=2)) == (1, 2)


def test_save_all_find_all_and_count(repo, db_session, company_data, company_data2):
    saved = repo.save_all([company_data, company_data2])
    db_session.flush()

    assert saved == [company_data, company_data2]
    assert repo.count() == 2
    names = {company.company_name for company in repo.find_all()}
    assert names == {"Test Company", "Another Test Company"}


def test_find_all_by_id_skips_missing(repo, db_session, company_data, company_data2):
    repo.save_all([company_data, company_data2])
    db_session.flush()

    found = repo.find_all_by_id([company_data.company_id, 9999, company_data2.company_id])
    assert found == [company_data, company_data2]


def test_find_all_empty(repo):
    """Companyが一件も登録されていない場合、空リストが返ることを確認します。"""
    assert repo.find_all() == []
    assert repo.count() == 0


def test_delete_all_by_id(repo, db_session, company_data, company_data2):
    repo.save_all([company_data, company_data2])
    db_session.flush()

    repo.delete_all_by_id([company_data.company_id, company_data2.company_id, 9999])
    db_session.flush()
    assert repo.count() == 0


def test_get_by_id_not_found(repo):
    with pytest.raises(EntityNotFoundError):
        repo.get_by_id(9999)


def test_save_and_flush_merges_detached_entity(repo, db_session, company_data):
    repo.save_and_flush(company_data)
    company_id = company_data.company_id
    db_session.commit()
    db_session.expunge_all()

    detached = Company(
        company_id=company_id,
        edinet_code="E12345",
        company_name="Updated Company Name",
    )
    merged = repo.save_and_flush(detached)

    assert merged is not detached
    assert repo.get_by_id(company_id).company_name == "Updated Company Name"


def test_save_or_update_all_by_not_null_properties(repo, db_session, company_data):
    repo.save_and_flush(company_data)
    existing_id = company_data.company_id

    repo.save_or_update_all_by_not_null_properties(
        [
            Company(company_id=existing_id, security_code="S9999"),
            Company(edinet_code="E00002", company_name="Inserted Company"),
        ]
    )
    db_session.flush()

    updated = repo.get_by_id(existing_id)
    assert updated.security_code == "S9999"
    assert updated.company_name == "Test Company"
    assert repo.count() == 2


def test_save_or_update_with_managed_entity(repo, db_session, company_data):
    """セッション管理下のエンティティ自身を渡した場合、変更がそのまま反映されることを確認します。"""
    repo.save_and_flush(company_data)
    company_data.company_name = "Managed Update"

    result = repo.save_or_update_by_not_null_properties(company_data)
    db_session.flush()

    assert result is company_data
    assert repo.get_by_id(company_data.company_id).company_name == "Managed Update"


def test_identity_of_detached_expired_entity(repo, db_session, company_data):
    """コミットでexpireされ、セッションから外れたエンティティでも主キーを取得できることを確認します。"""
    repo.save_and_flush(company_data)
    company_id = company_data.company_id
    db_session.commit()
    db_session.expunge_all()

    assert repo.identity_of(company_data) == company_id
    assert repo.exists_by_id(repo.identity_of(company_data)) is True


def test_save_or_update_keeps_stored_value_for_explicit_none(repo, db_session, company_data):
    """明示的にNoneを指定した属性は更新されず、既存の値が残ることを確認します。"""
    repo.save_and_flush(company_data)
    existing_id = company_data.company_id

    repo.save_or_update_by_not_null_properties(
        Company(company_id=existing_id, company_name="Renamed", security_code=None)
    )
    db_session.flush()

    updated = repo.get_by_id(existing_id)
    assert updated.company_name == "Renamed"
    assert updated.security_code == "S1234"
