"""ActiveRecordパターンの基底Modelクラスを提供するモジュール。

エンティティクラスが`ActiveRecordModel`を継承すると、Repositoryを明示的に
取得することなく、インスタンスから直接`save()`や`delete()`などを呼び出せる
ようになります。

本クラスが提供するのは単一のエンティティを操作するショートカットのみです。
一括操作や検索を行いたい場合は、`get_repository()`、`get_session_repository()`、
`get_partial_update_repository()`で取得したRepositoryを直接利用してください。

Repositoryは、起動時に`ActiveRecordModel.set_application_context()`で設定した
コンテキストから「先頭小文字のクラス名 + "Repository"」の名前で取得され、
エンティティのインスタンスごとに初回利用時に一度だけ解決・保持されます。

Example:
    ```python
    class Company(ActiveRecordModel, Base):
        __tablename__ = "companies"
        company_id = Column(Integer, primary_key=True, autoincrement=True)
        company_name = Column(String(200), nullable=False)

    context = RepositoryContext()
    context.register_repository(BaseRepository(session, Company))
    ActiveRecordModel.set_application_context(context)

    company = Company(company_name="Test Company").save_and_flush()
    company.exists_by_id()  # True
    ```
"""

import logging
import threading
from typing import Any, Optional

from sqlalchemy import inspect

from active_record.context import ApplicationContext, repository_bean_name
from active_record.exceptions import (
    BeanNotFoundError,
    ContextNotConfiguredError,
    RepositoryCapabilityError,
)
from active_record.repositories.base_repository import primary_key_identity
from active_record.repositories.interfaces import (
    CrudRepository,
    PartialUpdateRepository,
    SessionRepository,
)

logger = logging.getLogger(__name__)


class ActiveRecordModel:
    """ActiveRecordパターンの基底Model（Mixin）クラス

    SQLAlchemyのDeclarativeBaseを継承したモデルと組み合わせて利用します。
    """

    # 起動時に一度だけ設定され、以降は読み取りのみ
    _application_context = None

    @classmethod
    def set_application_context(cls, context: Optional[ApplicationContext]) -> None:
        ActiveRecordModel._application_context = context

    @classmethod
    def get_application_context(cls) -> Optional[ApplicationContext]:
        return ActiveRecordModel._application_context

    def get_id(self) -> Any:
        """エンティティのID値を返す。

        マッピング済みのクラスでは主キーの値（複合主キーの場合はtuple）を返し、
        未採番の場合はNoneを返す。主キー以外の値をIDとして扱いたい場合は
        このメソッドをオーバーライドすること。
        """
        mapper = inspect(type(self), raiseerr=False)
        if mapper is None:
            return getattr(self, "id", None)
        return primary_key_identity(mapper, self)

    @classmethod
    def get_repository_bean_name(cls) -> str:
        """このエンティティに対応するRepositoryのBean名を返す。

        デフォルトでは「先頭小文字のクラス名 + "Repository"」となる。
        実際のBean名が異なる場合は、エンティティ側でオーバーライドすること。
        """
        return repository_bean_name(cls.__name__)

    def get_repository(self) -> CrudRepository:
        """このエンティティに対応するRepositoryを返す。

        初回呼び出し時にコンテキストから取得して保持し、以降は同じインスタンスを返す。

        Raises:
            ContextNotConfiguredError: コンテキストが設定されていない場合
            BeanNotFoundError: Beanが存在しない、またはCrudRepositoryではない場合
        """
        repository = self.__dict__.get("_ar_repository")
        if repository is not None:
            return repository

        # 未初期化の場合のみロックを取得し、再確認してから初期化する
        lock = self.__dict__.setdefault("_ar_lock", threading.Lock())
        with lock:
            repository = self.__dict__.get("_ar_repository")
            if repository is None:
                repository = type(self).resolve_repository()
                self.__dict__["_ar_repository"] = repository
            return repository

    @classmethod
    def resolve_repository(cls) -> CrudRepository:
        """コンテキストからこのエンティティクラスに対応するRepositoryを取得する。

        インスタンスへの保持は行わないため、通常はget_repository()を利用すること。
        """
        context = ActiveRecordModel._application_context
        if context is None:
            raise ContextNotConfiguredError(
                "ApplicationContextが設定されていません。起動時に"
                "ActiveRecordModel.set_application_context()を呼び出してください。"
            )

        bean_name = cls.get_repository_bean_name()
        entity_name = f"{cls.__module__}.{cls.__qualname__}"
        if not context.contains_bean(bean_name):
            raise BeanNotFoundError(
                f"エンティティ[{entity_name}]に対応するRepository Bean[{bean_name}]が"
                f"見つかりません。[{cls.__name__}Repository]を定義し、"
                "コンテキストに登録してください。",
                bean_name=bean_name,
            )

        bean = context.get_bean(bean_name)
        if not isinstance(bean, CrudRepository):
            raise BeanNotFoundError(
                f"エンティティ[{entity_name}]に対応するBean[{bean_name}]は"
                "CrudRepositoryを実装していません。",
                bean_name=bean_name,
            )
        logger.debug(
            "[REPOSITORY RESOLVED] entity=%s, bean=%s, type=%s",
            entity_name,
            bean_name,
            type(bean).__name__,
        )
        return bean

    def get_session_repository(self) -> SessionRepository:
        """SessionRepositoryを実装したRepositoryを返す。

        Raises:
            RepositoryCapabilityError: BeanがSessionRepositoryを実装していない場合
        """
        return self._require(SessionRepository)

    def get_partial_update_repository(self) -> PartialUpdateRepository:
        """PartialUpdateRepositoryを実装したRepositoryを返す。

        Raises:
            RepositoryCapabilityError: BeanがPartialUpdateRepositoryを実装していない場合
        """
        return self._require(PartialUpdateRepository)

    def _require(self, interface: type) -> Any:
        repository = self.get_repository()
        if isinstance(repository, interface):
            return repository
        raise RepositoryCapabilityError(
            f"エンティティ[{type(self).__name__}]に対応するRepositoryは"
            f"{interface.__name__}を実装していません。"
            f"Repositoryが{interface.__name__}を継承していることを確認してください。",
            required=interface,
        )

    def save(self):
        """このエンティティを保存し、保存後のエンティティを返す"""
        return self.get_repository().save(self)

    def flush(self) -> None:
        """保留中の変更を即座にDBへ反映する"""
        self.get_session_repository().flush()

    def save_and_flush(self):
        return self.get_session_repository().save_and_flush(self)

    def save_or_update_by_not_null_properties(self):
        """このエンティティを新規登録するか、None以外の属性のみで既存レコードを更新する。

        IDがNone、またはIDに対応するレコードが無い場合は新規登録し、
        レコードが存在する場合はNone以外の属性値のみを更新する。

        Returns:
            このエンティティ自身。更新の場合、DB上の既存の値は反映されていない。
        """
        return self.get_partial_update_repository().save_or_update_by_not_null_properties(
            self
        )

    def find_by_id(self):
        """このエンティティのIDでDBのレコードを検索する。存在しない場合はNoneを返す。"""
        return self.get_repository().find_by_id(self.get_id())

    def get_by_id(self):
        return self.get_session_repository().get_by_id(self.get_id())

    def exists_by_id(self) -> bool:
        return self.get_repository().exists_by_id(self.get_id())

    def delete(self) -> None:
        self.get_repository().delete(self)

    def delete_by_id(self) -> None:
        self.get_repository().delete_by_id(self.get_id())
