"""
DBコントローラー用モジュール

DBエンジン・セッションの作成と、起動時にActiveRecordModelへ
Repositoryのコンテキストを設定する処理を提供します。
"""

import os
import logging
from typing import Iterable, Optional, Type

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from active_record.config_loader import ConfigLoader
from active_record.context import RepositoryContext
from active_record.model import ActiveRecordModel
from active_record.repositories.base_repository import BaseCrudRepository, BaseRepository

# 標準ロガーの取得
logger = logging.getLogger(__name__)


def build_database_url(config: Optional[ConfigLoader] = None) -> str:
    """
    DB接続URLを決定する関数

    設定ファイルの `[database] url`、環境変数 `DATABASE_URL`、
    `DB_USER` などの個別の環境変数の順に参照する。

    Returns:
        str: SQLAlchemyの接続URL
    """
    load_dotenv()
    if config is not None and config.get("database", "url"):
        return config.get("database", "url")
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    db_user = os.getenv("DB_USER", "user")
    db_password = os.getenv("DB_PASSWORD", "password")
    db_host = os.getenv("DB_HOST", "db").strip()  # Docker環境では"db"
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME", "mydatabase")
    return f"postgresql+psycopg2://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def get_db_engine(url: Optional[str] = None, config: Optional[ConfigLoader] = None) -> Engine:
    """
    DBエンジンを作成する関数

    Args:
        url: 接続URL。省略時はbuild_database_urlで決定する
        config: 設定。省略時はConfigLoaderで既定の設定ファイルを読み込む

    Returns:
        sqlalchemy.engine.Engine: 作成したDBエンジン
    """
    config = config if config is not None else ConfigLoader()
    if url is None:
        url = build_database_url(config)
    echo = bool(config.get("database", "echo", False))

    try:
        engine = create_engine(url, echo=echo)
    except ImportError:
        logger.error(
            "DBドライバがインストールされていません。 pip install psycopg2-binary などを実行してください。"
        )
        raise
    except SQLAlchemyError:
        logger.error("DBエンジン作成失敗: url=%s", engine_url_for_log(url), exc_info=True)
        raise
    logger.info("DBエンジン作成成功: url=%s", engine_url_for_log(url))
    return engine


def engine_url_for_log(url: str) -> str:
    """パスワードを伏せた接続URLを返す"""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except SQLAlchemyError:
        return "<invalid url>"


def create_session(engine: Optional[Engine] = None) -> scoped_session:
    """
    DBセッションを作成する関数

    スレッドごとにセッションを払い出すscoped_sessionを返すため、
    プロセス全体で共有するRepository Beanにそのまま渡すことができる。

    Returns:
        scoped_session：DB接続で開始したセッションオブジェクト
    """
    if engine is None:
        engine = get_db_engine()

    session = scoped_session(
        sessionmaker(
            autoflush=False,  # flush()またはcommit()するまでSQLを発行しない
            bind=engine,
        )
    )
    return session


def init_active_record(
    session: Session,
    models: Iterable[type],
    repository_class: Type[BaseCrudRepository] = BaseRepository,
    context: Optional[RepositoryContext] = None,
) -> RepositoryContext:
    """
    モデルごとのRepositoryを生成してコンテキストに登録し、ActiveRecordModelに設定する関数

    Args:
        session: Repositoryが利用するセッション（通常はscoped_session）
        models: ActiveRecordModelを継承したモデルクラスのリスト
        repository_class: 生成するRepositoryのクラス。`(session, model)`を引数に取ること
        context: 登録先のコンテキスト。省略時は新規に作成する

    Returns:
        RepositoryContext: Repositoryを登録したコンテキスト
    """
    context = context if context is not None else RepositoryContext()
    for model in models:
        name = context.register_repository(repository_class(session, model))
        logger.info("[REPOSITORY REGISTERED] model=%s, bean=%s", model.__name__, name)

    ActiveRecordModel.set_application_context(context)
    return context
