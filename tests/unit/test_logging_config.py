"""Unit tests for logging setup (session files, pruning, quiet loggers)"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from hybrid_retrieval.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    """setup_logging replaces root handlers; put pytest's back afterwards"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test setup_logging"""
    
    def test_session_file_created(self, tmp_path, restore_root_logger):
        session_log = setup_logging(log_file=str(tmp_path / "logs" / "app.log"), console_level="WARNING")
        
        assert session_log.parent == tmp_path / "logs"
        assert session_log.name.startswith("app_")
        
        logging.getLogger("hybrid_retrieval.test").debug("written to file only")
        for handler in logging.getLogger().handlers:
            handler.flush()
        
        assert "written to file only" in session_log.read_text(encoding="utf-8")
        assert any(isinstance(h, RotatingFileHandler) for h in logging.getLogger().handlers)
    
    def test_old_sessions_pruned(self, tmp_path, restore_root_logger):
        for i in range(6):
            (tmp_path / f"app_20200101_00000{i}.log").write_text("old")
        
        setup_logging(log_file=str(tmp_path / "app.log"), keep_sessions=5)
        
        remaining = sorted(p.name for p in tmp_path.glob("app_*.log"))
        assert len(remaining) == 5
        assert "app_20200101_000000.log" not in remaining
        assert "app_20200101_000005.log" in remaining
    
    def test_noisy_loggers_quieted(self, tmp_path, restore_root_logger):
        setup_logging(log_file=str(tmp_path / "app.log"), quiet_loggers=("some.chatty.lib",))
        
        assert logging.getLogger("some.chatty.lib").level == logging.WARNING
