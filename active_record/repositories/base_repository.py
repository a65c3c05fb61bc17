"""
SQLAlchemyを用いたRepositoryの具象クラス群。

特定のSQLAlchemyモデルに対するCRUD操作をカプセル化します。
提供する操作の範囲に応じて、3つのクラスを用意しています。

- BaseCrudRepository: CrudRepositoryの実装
- BaseSessionRepository: SessionRepositoryの実装（flush, save_and_flush, get_by_id）
- BaseRepository: PartialUpdateRepositoryの実装（null以外の属性によるupsert）

トランザクション管理（commit, rollback）は、このクラスの責務外であり、
呼び出し元（UnitOfWorkなど）で行う必要があります。

Attributes:
    session (Session): データベース操作に使用するSQLAlchemyのセッション。
        プロセス全体で共有するBeanとして登録する場合は、scoped_sessionを渡すこと。
    model (Type[T]): このリポジトリが操作対象とするモデルクラス。

Example:
    `Company`モデルを扱う具象リポジトリの実装例です。

    ```python
    from sqlalchemy.orm import Session
    from active_record.repositories.base_repository import BaseRepository

    class CompanyRepository(BaseRepository[Company, int]):
        def __init__(self, session: Session):
            super().__init__(session, Company)

        def find_by_name(self, name: str) -> list[Company]:
            # ドメイン固有のメソッドをここに追加
    ```
"""

import logging
from typing import Any, Iterable, List, Optional, Type

from sqlalchemy import func, inspect, select
from sqlalchemy.orm import Session

from active_record.exceptions import EntityNotFoundError
from active_record.repositories.interfaces import (
    ID,
    T,
    CrudRepository,
    PartialUpdateRepository,
    SessionRepository,
)

logger = logging.getLogger(__name__)


def primary_key_identity(mapper: Any, entity: Any) -> Any:
    """エンティティの主キー値を返す。未採番の場合はNone、複合主キーの場合はtupleを返す。

    DBに登録済みのエンティティは、コミット後にexpireされセッションから外れていても
    読み取れるよう、インスタンスの状態が保持するidentityから値を取得する。
    """
    state = inspect(entity)
    if state.key is not None:
        identity = state.identity
    else:
        identity = mapper.primary_key_from_instance(entity)
    if any(value is None for value in identity):
        return None
    return identity[0] if len(identity) == 1 else tuple(identity)


class BaseCrudRepository(CrudRepository[T, ID]):
    def __init__(self, session: Session, model: Type[T]):
        self.session = session
        self.model = model
        self._mapper = inspect(model)

    @property
    def table_name(self) -> str:
        return getattr(self.model, "__tablename__", self.model.__name__)

    def identity_of(self, entity: T) -> Any:
        return primary_key_identity(self._mapper, entity)

    def save(self, entity: T) -> T:
        # 主キーが無ければ新規登録、あれば既存レコードへマージ
        if self.identity_of(entity) is None:
            self.session.add(entity)
            logger.debug("[SAVE] table=%s, mode=insert", self.table_name)
            return entity
        logger.debug("[SAVE] table=%s, mode=merge", self.table_name)
        return self.session.merge(entity)

    def save_all(self, entities: Iterable[T]) -> List[T]:
        return [self.save(entity) for entity in entities]

    def find_by_id(self, id: ID) -> Optional[T]:
        if id is None:
            return None
        return self.session.get(self.model, id)

    def exists_by_id(self, id: ID) -> bool:
        return self.find_by_id(id) is not None

    def find_all(self) -> List[T]:
        return list(self.session.scalars(select(self.model)).all())

    def find_all_by_id(self, ids: Iterable[ID]) -> List[T]:
        found = (self.find_by_id(id) for id in ids)
        return [entity for entity in found if entity is not None]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(self.model))

    def delete(self, entity: T) -> None:
        identity = self.identity_of(entity)
        if identity is None:
            # 未登録のエンティティは削除対象が無い
            logger.debug("[DELETE SKIP] table=%s, reason=transient", self.table_name)
            return
        self.delete_by_id(identity)

    def delete_by_id(self, id: ID) -> None:
        stored = self.find_by_id(id)
        if stored is None:
            logger.debug("[DELETE SKIP] table=%s, id=%s (対象なし)", self.table_name, id)
            return
        self.session.delete(stored)
        logger.debug("[DELETE] table=%s, id=%s", self.table_name, id)

    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        for id in ids:
            self.delete_by_id(id)


class BaseSessionRepository(BaseCrudRepository[T, ID], SessionRepository[T, ID]):
    def flush(self) -> None:
        self.session.flush()

    def save_and_flush(self, entity: T) -> T:
        saved = self.save(entity)
        self.flush()
        return saved

    def get_by_id(self, id: ID) -> T:
        entity = self.find_by_id(id)
        if entity is None:
            raise EntityNotFoundError(
                f"テーブル[{self.table_name}]にID[{id}]のレコードが存在しません。"
            )
        return entity


class BaseRepository(BaseSessionRepository[T, ID], PartialUpdateRepository[T, ID]):
    def save_or_update_by_not_null_properties(self, entity: T) -> T:
        identity = self.identity_of(entity)
        if identity is None:
            self.session.add(entity)
            logger.debug("[UPSERT] table=%s, mode=insert", self.table_name)
            return entity

        stored = self.find_by_id(identity)
        if stored is None:
            # IDは指定されているがレコードが無いので、そのIDで新規登録する
            self.session.merge(entity)
            logger.debug("[UPSERT] table=%s, id=%s, mode=insert", self.table_name, identity)
            return entity

        if stored is not entity:
            self._copy_not_null_properties(entity, stored)
        logger.debug("[UPSERT] table=%s, id=%s, mode=update", self.table_name, identity)
        return entity

    def save_or_update_all_by_not_null_properties(self, entities: Iterable[T]) -> None:
        for entity in entities:
            self.save_or_update_by_not_null_properties(entity)

    def _copy_not_null_properties(self, source: T, target: T) -> None:
        """sourceでロード済みかつNone以外のカラム値のみをtargetへ反映する"""
        loaded = inspect(source).dict
        primary_keys = {
            self._mapper.get_property_by_column(column).key
            for column in self._mapper.primary_key
        }
        for attr in self._mapper.column_attrs:
            if attr.key in primary_keys:
                continue
            value = loaded.get(attr.key)
            if value is not None:
                setattr(target, attr.key, value)
