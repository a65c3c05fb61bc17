"""
Repository Beanを名前で保持するアプリケーションコンテキストのモジュール。

ActiveRecordModelは、起動時に設定された`ApplicationContext`から
「先頭小文字のクラス名 + "Repository"」という名前でRepositoryを取得します。
ホストアプリケーション側で独自のコンテナを持つ場合は、`ApplicationContext`を
実装したアダプタを渡せば良く、`RepositoryContext`はその最小限の実装です。
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from active_record.exceptions import BeanNotFoundError

logger = logging.getLogger(__name__)

REPOSITORY_SUFFIX = "Repository"


def repository_bean_name(class_name: str) -> str:
    """クラス名からRepository Beanの名前を組み立てる

    Example:
        >>> repository_bean_name("FinancialReport")
        'financialReportRepository'
    """
    return class_name[:1].lower() + class_name[1:] + REPOSITORY_SUFFIX


class ApplicationContext(ABC):
    """名前付きのBeanを保持するレジストリのインターフェース"""

    @abstractmethod
    def contains_bean(self, name: str) -> bool:
        pass

    @abstractmethod
    def get_bean(self, name: str) -> Any:
        pass


class RepositoryContext(ApplicationContext):
    """辞書で名前とBeanを対応付けるApplicationContextの実装"""

    def __init__(self):
        self._beans: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, bean: Any) -> None:
        with self._lock:
            if name in self._beans:
                logger.warning("[BEAN OVERRIDE] name=%s", name)
            self._beans[name] = bean
        logger.debug("[BEAN REGISTERED] name=%s, type=%s", name, type(bean).__name__)

    def register_repository(self, repository: Any) -> str:
        """repository.modelからBean名を決め、登録する

        モデルがget_repository_bean_name()を持つ場合はその名前を、
        持たない場合は命名規約に従ってクラス名から組み立てた名前を使う。

        Returns:
            str: 登録したBean名
        """
        model = repository.model
        if hasattr(model, "get_repository_bean_name"):
            name = model.get_repository_bean_name()
        else:
            name = repository_bean_name(model.__name__)
        self.register(name, repository)
        return name

    def contains_bean(self, name: str) -> bool:
        return name in self._beans

    def get_bean(self, name: str) -> Any:
        try:
            return self._beans[name]
        except KeyError:
            raise BeanNotFoundError(
                f"Bean[{name}]はコンテキストに登録されていません。", bean_name=name
            ) from None

    def bean_names(self) -> List[str]:
        return sorted(self._beans)
