"""Tests for loguru sink configuration."""

import json

from loguru import logger

from mint_composer.utils.logger import setup_logger


class TestSetupLogger:
    def test_file_sink_captures_debug(self, tmp_path) -> None:
        log_file = tmp_path / "issuance.log"
        setup_logger(level="WARNING", log_file=str(log_file))
        try:
            logger.debug("[MINT] Built 7 instructions")
            logger.complete()
        finally:
            logger.remove()

        assert "[MINT] Built 7 instructions" in log_file.read_text()

    def test_json_file_sink(self, tmp_path) -> None:
        log_file = tmp_path / "issuance.json"
        setup_logger(json_logs=True, log_file=str(log_file))
        try:
            logger.info("[PAUSE] pause abc")
            logger.complete()
        finally:
            logger.remove()

        record = json.loads(log_file.read_text().splitlines()[0])
        assert record["record"]["message"] == "[PAUSE] pause abc"
        assert record["record"]["level"]["name"] == "INFO"
