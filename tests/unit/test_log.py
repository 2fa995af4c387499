from __future__ import annotations

import logging

import pytest

from common.config import ClientConfig
from common.log import REDACTED, redact_secrets, setup_logging


def test_redact_secrets_masks_sensitive_keys_only():
    event = {"event": "x", "password": "hunter2", "token": "t", "note_id": "abc123"}

    out = redact_secrets(None, "info", event)

    assert out["password"] == REDACTED
    assert out["token"] == REDACTED
    assert out["note_id"] == "abc123"


def test_transport_loggers_follow_config(monkeypatch: pytest.MonkeyPatch):
    for name in ("httpx", "httpcore"):
        monkeypatch.setattr(logging.getLogger(name), "level", logging.NOTSET)

    setup_logging(ClientConfig(http_log_level="ERROR"))

    assert logging.getLogger("httpx").level == logging.ERROR
    assert logging.getLogger("httpcore").level == logging.ERROR
