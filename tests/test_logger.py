import json
import logging

from hostrecon.logger import create_logger, log_event


def test_create_logger_is_idempotent(tmp_path):
    path = tmp_path / "logs" / "scan.log"
    first = create_logger(logging.INFO, str(path))
    second = create_logger(logging.INFO, str(path))
    assert first is second
    assert len(first.handlers) == 2


def test_log_event_writes_json_lines(tmp_path):
    path = tmp_path / "scan.log"
    logger = create_logger(logging.INFO, str(path))
    log_event(logger, "port_open", {"port": 22, "service": "SSH"})
    log_event(logger, "noise", {"x": 1}, level=logging.DEBUG)
    for handler in logger.handlers:
        handler.flush()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    payload = json.loads(lines[0])
    assert payload["event"] == "port_open"
    assert payload["port"] == 22
    assert "ts" in payload
