"""ロギング設定ユーティリティ"""
import logging
import os
from typing import List, Optional
from ..models.config import LoggingConfig

LOGGER_NAME = "ceph_s3"


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    """コンソール（と設定されていればファイル）へのハンドラー"""
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if config.file:
        log_dir = os.path.dirname(config.file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))

    formatter = logging.Formatter(config.format, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


class LoggerManager:
    """ceph_s3 ロガーの設定と管理"""

    _logger: Optional[logging.Logger] = None

    @classmethod
    def setup(cls, config: LoggingConfig) -> logging.Logger:
        """アプリケーション側でロガーをセットアップ（2回目以降は既存を返す）"""
        if cls._logger is not None:
            return cls._logger

        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
        logger.handlers = _build_handlers(config)

        cls._logger = logger
        return logger

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """設定済みのロガーを取得

        setup() が呼ばれていない場合（ライブラリとして使用）は
        ハンドラー未設定の ceph_s3 ロガーを返す。
        """
        if cls._logger is None:
            return logging.getLogger(LOGGER_NAME)
        return cls._logger

    @classmethod
    def reset(cls) -> None:
        """セットアップ済みのロガーを破棄"""
        if cls._logger is not None:
            for handler in cls._logger.handlers:
                handler.close()
            cls._logger.handlers = []
        cls._logger = None
