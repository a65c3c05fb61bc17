"""Unit of Work パターンを実装するためのモジュール。

ActiveRecordModelの各操作はトランザクションを管理しないため、
このモジュールが提供するUnit of Workでトランザクションの境界を定めます。
抽象的な `UnitOfWork` インターフェースと、SQLAlchemyを利用した具象クラス
`SqlAlchemyUnitOfWork` を提供します。

Example:
    session = create_session(engine)
    init_active_record(session, [Company])

    with SqlAlchemyUnitOfWork(session) as uow:
        Company(company_name="Test Company").save()
        # withブロックを抜ける際にcommitされ、例外発生時はrollbackされる
"""
import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Type

from sqlalchemy.orm import scoped_session, sessionmaker

from active_record.model import ActiveRecordModel
from active_record.repositories.interfaces import CrudRepository

logger = logging.getLogger(__name__)


class UnitOfWork(ABC):
    """Unit of Workパターンを実装するための抽象基底クラス/インターフェイス

    トランザクションの境界を定義し、コンテキストに登録されたリポジトリへのアクセスを提供します。
    このクラスはコンテキストマネージャーとして、`with`ステートメントで使用されることを想定しています。

    Args:
        session_factory: SQLAlchemyのsessionmakerまたはscoped_session
    """

    def __init__(self, session_factory: sessionmaker | scoped_session):
        self.session_factory = session_factory
        self.committed = False
        self.rollbacked = False

    @abstractmethod
    def __enter__(self):
        pass

    @abstractmethod
    def __exit__(
        self,
        execution_type: Optional[Type[BaseException]],
        execution_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ):
        pass

    def repository(self, model: Type[ActiveRecordModel]) -> CrudRepository:
        """モデルに対応するRepositoryをActiveRecordModelのコンテキストから取得する

        Raises:
            ContextNotConfiguredError: コンテキストが設定されていない場合
            BeanNotFoundError: Beanが存在しない、またはCrudRepositoryではない場合
        """
        return model.resolve_repository()


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemyを用いたUnit of Workの具体的実装"""

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        """セッションを開始する。scoped_sessionの場合は現在のスレッドのセッションを利用する"""
        self.session = self.session_factory()
        self.committed = False
        self.rollbacked = False
        return self

    def __exit__(
        self,
        execution_type: Optional[Type[BaseException]],
        execution_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ):
        """トランザクションのコミットまたはロールバックを行い、セッションを閉じること"""
        try:
            if execution_type is None:
                try:
                    self.session.commit()
                    self.committed = True
                except Exception:
                    logger.error("[COMMIT FAIL] Rolling back", exc_info=True)
                    self.session.rollback()
                    self.rollbacked = True
                    raise
            else:
                logger.debug("[ROLLBACK] reason=%s", execution_value)
                self.session.rollback()
                self.rollbacked = True
        finally:
            if isinstance(self.session_factory, scoped_session):
                self.session_factory.remove()
            else:
                self.session.close()
