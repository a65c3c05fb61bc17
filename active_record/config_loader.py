"""
設定ファイル（config.toml）を読み込むモジュール

読み込み候補は次の順で確認し、最初に読み込めたファイルを採用します。

1. ConfigLoaderの引数で指定されたパス
2. 環境変数 `ACTIVE_RECORD_CONFIG` のパス
3. カレントディレクトリの `config/config.toml`
4. パッケージに同梱した `default_config.toml`
"""

import os
import toml
import logging
from typing import Any, List

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ACTIVE_RECORD_CONFIG"
LOCAL_CONFIG_PATH = os.path.join("config", "config.toml")
DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "default_config.toml"
)


class ConfigLoader:
    def __init__(self, path: str = None):
        self.config = self._load_config(path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """`[section] key` の値を返す。存在しない場合はdefaultを返す。"""
        return self.config.get(section, {}).get(key, default)

    @staticmethod
    def candidate_paths(path: str = None) -> List[str]:
        if path:
            # テスト時など、特定のパスが指定された場合はそれだけを見る
            return [path]
        paths = []
        if os.environ.get(CONFIG_ENV_VAR):
            paths.append(os.environ[CONFIG_ENV_VAR])
        paths.append(LOCAL_CONFIG_PATH)
        paths.append(DEFAULT_CONFIG_PATH)
        return paths

    def _load_config(self, path: str = None) -> dict:
        """
        候補パスを順に確認し、最初に読み込めた設定ファイルの内容を返す。

        Args:
            path (str, optional): 読み込む設定ファイルのパス. Defaults to None.

        Returns:
            dict: 設定ファイルの内容。読み込みに失敗した場合は空の辞書。
        """
        for config_path in self.candidate_paths(path):
            if not os.path.exists(config_path):
                logger.debug("設定ファイルが存在しません: %s", config_path)
                continue
            try:
                config_data = toml.load(config_path)
            except (toml.TomlDecodeError, OSError) as e:
                logger.error("設定ファイルの読み込みに失敗しました: %s, エラー: %s", config_path, e)
                continue
            logger.info("設定ファイルを読み込みました: %s", config_path)
            return config_data

        logger.warning("有効な設定ファイルが見つかりませんでした。")
        return {}


def configure_logging(config_loader: ConfigLoader) -> None:
    """`[logging] level` に従って標準loggerを設定する"""
    level_name = str(config_loader.get("logging", "level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
