"""
Unit tests for settings and error types
"""

import logging

from tilesplit.common import ExtractionFailed, InvalidConfiguration, TileSplitError
from tilesplit.common.config import Settings, setup_logging


class TestSettings:
    """Test Settings loading"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TILESPLIT_BATCH_PIXEL_BUDGET", raising=False)
        config = Settings(_env_file=None)
        assert config.batch_pixel_budget == 1_000_000
        assert config.background_color == "#FFFFFF"

    def test_env_override(self, monkeypatch):
        """Settings read TILESPLIT_ prefixed variables"""
        monkeypatch.setenv("TILESPLIT_BATCH_PIXEL_BUDGET", "4096")
        monkeypatch.setenv("TILESPLIT_LOG_LEVEL", "debug")
        config = Settings(_env_file=None)
        assert config.batch_pixel_budget == 4096
        assert config.log_level == "debug"

    def test_setup_logging(self):
        logger = setup_logging("WARNING")
        assert logger.name == "tilesplit"
        assert logging.getLogger().level == logging.WARNING


class TestExceptions:
    """Test error taxonomy"""

    def test_hierarchy(self):
        assert issubclass(InvalidConfiguration, ValueError)
        assert issubclass(InvalidConfiguration, TileSplitError)
        assert issubclass(ExtractionFailed, RuntimeError)

    def test_extraction_failed_message(self):
        error = ExtractionFailed(4, 4, 16, "encode error")
        assert error.tile_index == 4
        assert "4 of 16" in str(error)
        assert "encode error" in str(error)
