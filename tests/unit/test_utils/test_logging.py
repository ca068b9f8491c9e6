"""Tests for logging configuration."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from bulkrepo.config.models import LoggingConfig
from bulkrepo.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Leave loguru and stdlib logging as they were."""
    yield
    logger.remove()
    logging.basicConfig(handlers=[], force=True)


class TestConfigureLogging:
    """Test configure_logging."""

    def test_writes_json_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "bulkrepo.log"
        configure_logging(LoggingConfig(level="INFO", format="json", file=log_file))

        logger.info("hello {}", "world")
        logger.complete()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert any(r["record"]["message"] == "hello world" for r in records)

    def test_level_filters(self, tmp_path: Path) -> None:
        log_file = tmp_path / "bulkrepo.log"
        configure_logging(LoggingConfig(level="WARNING", file=log_file))

        logger.info("quiet")
        logger.warning("loud")

        text = log_file.read_text()
        assert "loud" in text
        assert "quiet" not in text

    def test_stdlib_records_are_intercepted(self, tmp_path: Path) -> None:
        log_file = tmp_path / "bulkrepo.log"
        configure_logging(LoggingConfig(level="INFO", file=log_file))

        logging.getLogger("some.library").warning("from stdlib")

        assert "from stdlib" in log_file.read_text()

    def test_httpx_info_is_silenced(self, tmp_path: Path) -> None:
        log_file = tmp_path / "bulkrepo.log"
        configure_logging(LoggingConfig(level="DEBUG", file=log_file))

        logging.getLogger("httpx").info("HTTP Request: GET https://api.github.com")

        assert "HTTP Request" not in log_file.read_text()
