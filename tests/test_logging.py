"""Tests for logging configuration"""

import io
import json
import sys

import structlog

from solana_lens.utils.logging import configure_logging


class TestConfigureLogging:
    """Test structlog setup"""

    def test_writes_to_current_stderr(self, monkeypatch):
        """Test output follows sys.stderr replaced after configuration"""
        configure_logging(level="INFO", fmt="json")

        stream = io.StringIO()
        monkeypatch.setattr(sys, "stderr", stream)
        structlog.get_logger().info("snapshot_taken", anomalies=2)

        record = json.loads(stream.getvalue())
        assert record["event"] == "snapshot_taken"
        assert record["anomalies"] == 2
        assert record["level"] == "info"

    def test_level_filter(self, monkeypatch):
        """Test messages below the configured level are dropped"""
        configure_logging(level="WARNING", fmt="json")

        stream = io.StringIO()
        monkeypatch.setattr(sys, "stderr", stream)
        structlog.get_logger().info("block_unavailable", slot=1)

        assert stream.getvalue() == ""
