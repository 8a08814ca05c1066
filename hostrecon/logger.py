import json
import logging
import os
import time
from typing import Any, Dict, Optional

LOGGER_NAME = "hostrecon"


def create_logger(level: int = logging.INFO, log_path: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Prevent duplicate handlers if called twice (tests, repeated CLI runs)
    if logger.handlers:
        return logger

    # We write JSON ourselves; keep formatter minimal
    formatter = logging.Formatter("%(message)s")

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if log_path:
        parent = os.path.dirname(log_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime())


def log_event(logger: logging.Logger, event: str, fields: Dict[str, Any], level: int = logging.INFO) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"ts": now_iso(), "event": event, **fields}
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
