"""
Tests for configuration helpers and logging setup
"""

import logging

import pytest

from dataengine.config import Config, env_flag
from dataengine.logging_config import LOG_FILE_NAME, setup_logging


@pytest.fixture
def package_logger():
    """The package logger, restored after the test"""
    logger = logging.getLogger('dataengine')
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


class TestEnvFlag:
    """Test boolean environment parsing"""

    @pytest.mark.parametrize('raw', ['1', 'true', 'YES', ' on '])
    def test_true(self, monkeypatch, raw):
        monkeypatch.setenv('DATA_ENGINE_TEST_FLAG', raw)
        assert env_flag('DATA_ENGINE_TEST_FLAG') is True

    @pytest.mark.parametrize('raw', ['0', 'false', 'no', ''])
    def test_false(self, monkeypatch, raw):
        monkeypatch.setenv('DATA_ENGINE_TEST_FLAG', raw)
        assert env_flag('DATA_ENGINE_TEST_FLAG') is False

    def test_default(self, monkeypatch):
        monkeypatch.delenv('DATA_ENGINE_TEST_FLAG', raising=False)
        assert env_flag('DATA_ENGINE_TEST_FLAG') is False
        assert env_flag('DATA_ENGINE_TEST_FLAG', 'yes') is True

    def test_source_keywords(self):
        assert Config.source_keywords() == (Config.SOURCE_CUSTOM, Config.SOURCE_NATIVE, Config.SOURCE_ROW)


class TestSetupLogging:
    """Test logger configuration"""

    def test_debug_off_is_silent(self, package_logger, tmp_path):
        class QuietConfig(Config):
            DEBUG_MODE = False
            LOG_DIR = str(tmp_path / 'logs')

        logger = setup_logging(QuietConfig)

        assert logger is package_logger
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)
        assert not (tmp_path / 'logs').exists()

    def test_debug_on_writes_file(self, package_logger, tmp_path):
        class DebugConfig(Config):
            DEBUG_MODE = True
            LOG_LEVEL = 'DEBUG'
            LOG_DIR = str(tmp_path / 'logs')

        logger = setup_logging(DebugConfig)
        logging.getLogger('dataengine.engine.processor').debug('cache miss for custom:price')
        for handler in logger.handlers:
            handler.flush()

        content = (tmp_path / 'logs' / LOG_FILE_NAME).read_text(encoding='utf-8')
        assert '[DEBUG]: cache miss for custom:price' in content
        assert logger.level == logging.DEBUG

    def test_idempotent(self, package_logger, tmp_path):
        class DebugConfig(Config):
            DEBUG_MODE = True
            LOG_LEVEL = 'INFO'
            LOG_DIR = str(tmp_path)

        setup_logging(DebugConfig)
        logger = setup_logging(DebugConfig)

        installed = [h for h in logger.handlers if getattr(h, '_dataengine_handler', False)]
        assert len(installed) == 1
        assert isinstance(installed[0], logging.FileHandler)
