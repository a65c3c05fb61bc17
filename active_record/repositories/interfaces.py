"""Repositoryのインターフェースを定義するモジュール。

ActiveRecordModelは、ここで定義する3段階のインターフェースのどれを
Beanが実装しているかによって、利用できる操作を判定します。

- CrudRepository: 基本的なCRUD操作
- SessionRepository: flushやIDによる必須取得を加えたもの
- PartialUpdateRepository: null以外の属性のみを更新するupsertを加えたもの

Type Parameters:
    T: Repositoryが扱うエンティティの型。
    ID: エンティティの主キーの型。
"""

from abc import ABC, abstractmethod
from typing import Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")
ID = TypeVar("ID")


class CrudRepository(ABC, Generic[T, ID]):
    """基本的なCRUD操作を提供するRepositoryのインターフェース"""

    @abstractmethod
    def save(self, entity: T) -> T:
        pass

    @abstractmethod
    def save_all(self, entities: Iterable[T]) -> List[T]:
        pass

    @abstractmethod
    def find_by_id(self, id: ID) -> Optional[T]:
        pass

    @abstractmethod
    def exists_by_id(self, id: ID) -> bool:
        pass

    @abstractmethod
    def find_all(self) -> List[T]:
        pass

    @abstractmethod
    def find_all_by_id(self, ids: Iterable[ID]) -> List[T]:
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def delete(self, entity: T) -> None:
        pass

    @abstractmethod
    def delete_by_id(self, id: ID) -> None:
        pass

    @abstractmethod
    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        pass


class SessionRepository(CrudRepository[T, ID]):
    """セッションのflushを伴う操作を追加したRepositoryのインターフェース"""

    @abstractmethod
    def flush(self) -> None:
        pass

    @abstractmethod
    def save_and_flush(self, entity: T) -> T:
        pass

    @abstractmethod
    def get_by_id(self, id: ID) -> T:
        """IDに対応するエンティティを取得する。存在しない場合はEntityNotFoundErrorを送出する。"""
        pass


class PartialUpdateRepository(SessionRepository[T, ID]):
    """null以外の属性のみを反映するupsert操作を追加したRepositoryのインターフェース"""

    @abstractmethod
    def save_or_update_by_not_null_properties(self, entity: T) -> T:
        """エンティティを新規登録するか、None以外の属性のみで既存レコードを更新する。

        - IDがNoneの場合は新規登録する。
        - IDがあってもDBにレコードが存在しない場合は新規登録する。
        - レコードが存在する場合は、None以外の属性値のみを既存レコードへ反映する。

        Returns:
            引数で渡されたエンティティ。更新の場合、DB上の既存の値は反映されていない。
        """
        pass

    @abstractmethod
    def save_or_update_all_by_not_null_properties(self, entities: Iterable[T]) -> None:
        pass
