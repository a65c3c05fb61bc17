"""
Repositoryの遅延解決が、エンティティのインスタンスごとに一度だけ行われることをテストします。
"""

import threading
import time

import pytest

from active_record.model import ActiveRecordModel
from active_record.repositories.base_repository import BaseRepository
from tests.db_models import Company

THREAD_COUNT = 16


@pytest.fixture(scope="function")
def repository_bean(mocker):
    return BaseRepository(mocker.MagicMock(), Company)


@pytest.fixture(scope="function")
def mock_context(mocker, repository_bean):
    # Given：Beanの取得に時間がかかるコンテキストをモック化
    def slow_get_bean(name):
        time.sleep(0.05)
        return repository_bean

    context = mocker.MagicMock()
    context.contains_bean.return_value = True
    context.get_bean.side_effect = slow_get_bean
    ActiveRecordModel.set_application_context(context)
    return context


def test_repeated_access_resolves_once(mock_context, repository_bean):
    company = Company(company_id=1, company_name="Test Company")

    repositories = [company.get_repository() for _ in range(5)]
    company.find_by_id()
    company.exists_by_id()

    assert all(repository is repository_bean for repository in repositories)
    mock_context.get_bean.assert_called_once_with("companyRepository")
    mock_context.contains_bean.assert_called_once_with("companyRepository")


def test_each_instance_resolves_its_own_handle(mock_context, repository_bean):
    first = Company(company_name="First")
    second = Company(company_name="Second")

    assert first.get_repository() is second.get_repository()
    assert mock_context.get_bean.call_count == 2


def test_concurrent_first_access_resolves_once(mock_context, repository_bean):
    # Given
    company = Company(company_name="Test Company")
    barrier = threading.Barrier(THREAD_COUNT)
    results = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        repository = company.get_repository()
        with results_lock:
            results.append(repository)

    threads = [threading.Thread(target=worker) for _ in range(THREAD_COUNT)]

    # When
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    # Then
    assert len(results) == THREAD_COUNT
    assert all(repository is repository_bean for repository in results)
    mock_context.get_bean.assert_called_once_with("companyRepository")
