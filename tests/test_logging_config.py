from __future__ import annotations

import json

from loguru import logger

from core.logging_config import setup_logging


def test_json_log_file(tmp_path):
    log_file = tmp_path / "logs" / "api.log"
    setup_logging(level="info", json_format=True, log_file=log_file)

    logger.bind(request_id="abc").info("Object created with ID: {id}", id="42")
    logger.complete()
    setup_logging()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["level"] == "INFO"
    assert payload["message"] == "Object created with ID: 42"
    assert payload["request_id"] == "abc"
