"""
ActiveRecordモデルが送出する例外クラス群。

いずれも実行時に回復するためのものではなく、開発時に修正すべき
設定ミス・実装ミスを呼び出し元に知らせるためのものです。
"""


class ActiveRecordError(RuntimeError):
    """このパッケージが送出する例外の基底クラス"""

    pass


class ContextNotConfiguredError(ActiveRecordError):
    """ApplicationContextがまだ設定されていない場合に送出される"""

    pass


class BeanNotFoundError(ActiveRecordError):
    """エンティティに対応するRepositoryのBeanがコンテキストに存在しない場合に送出される"""

    def __init__(self, message: str, bean_name: str):
        super().__init__(message)
        self.bean_name = bean_name


class RepositoryCapabilityError(ActiveRecordError):
    """取得したRepositoryが、操作に必要なインターフェースを実装していない場合に送出される"""

    def __init__(self, message: str, required: type):
        super().__init__(message)
        self.required = required


class EntityNotFoundError(ActiveRecordError):
    """IDに対応するエンティティがDBに存在しない場合に送出される"""

    pass
