#!/usr/bin/env python3
"""ロガーのテスト"""
import logging

import pytest

from ceph_s3.models.config import LoggingConfig
from ceph_s3.utils.logger import LoggerManager


@pytest.fixture(autouse=True)
def reset_logger():
    LoggerManager.reset()
    yield
    LoggerManager.reset()


def test_logger(tmp_path):
    """ロガーが正しく動作するか確認"""
    log_file = tmp_path / "logs" / "ceph_s3.log"
    logger = LoggerManager.setup(LoggingConfig(level="warning", file=str(log_file)))

    logger.info("info message")
    logger.warning("warning message")
    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert logger.level == logging.WARNING
    assert "warning message" in content
    assert "info message" not in content


def test_setup_is_idempotent():
    first = LoggerManager.setup(LoggingConfig(level="DEBUG"))
    second = LoggerManager.setup(LoggingConfig(level="ERROR"))

    assert first is second
    assert second.level == logging.DEBUG


def test_get_logger_without_setup():
    """setup 前でもライブラリ用ロガーを返す"""
    logger = LoggerManager.get_logger()

    assert logger.name == "ceph_s3"
