"""
SQLAlchemyのエンティティにActiveRecordパターンの操作を追加するパッケージ

このパッケージには以下のモジュールが含まれています:
- model: ActiveRecordModel（save, delete, find_by_id などのショートカット）
- context: Repository Beanを名前で保持するコンテキスト
- repositories: Repositoryのインターフェースと、SQLAlchemyによる実装
- db_controller: DBエンジン・セッションの作成と起動時の初期化
- unitofwork: トランザクション境界を管理するUnit of Work
"""

__version__ = "1.0.0"

from .exceptions import (
    ActiveRecordError,
    BeanNotFoundError,
    ContextNotConfiguredError,
    EntityNotFoundError,
    RepositoryCapabilityError,
)
from .context import ApplicationContext, RepositoryContext, repository_bean_name
from .model import ActiveRecordModel
from .repositories import (
    BaseCrudRepository,
    BaseRepository,
    BaseSessionRepository,
    CrudRepository,
    PartialUpdateRepository,
    SessionRepository,
)
from .db_controller import create_session, get_db_engine, init_active_record
from .unitofwork import SqlAlchemyUnitOfWork, UnitOfWork

__all__ = [
    "ActiveRecordError",
    "BeanNotFoundError",
    "ContextNotConfiguredError",
    "EntityNotFoundError",
    "RepositoryCapabilityError",
    "ApplicationContext",
    "RepositoryContext",
    "repository_bean_name",
    "ActiveRecordModel",
    "CrudRepository",
    "SessionRepository",
    "PartialUpdateRepository",
    "BaseCrudRepository",
    "BaseSessionRepository",
    "BaseRepository",
    "create_session",
    "get_db_engine",
    "init_active_record",
    "UnitOfWork",
    "SqlAlchemyUnitOfWork",
]
