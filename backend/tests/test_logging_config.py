"""Tests for log redaction and the JSON formatter."""

import json
import logging

from teamsync.core.logging_config import _ContextFilter, _JsonFormatter, _SecretFilter, redact, user_id_var
from teamsync.core.passwords import hash_password
from teamsync.core.token_factory import create_token


def _record(msg, *args, **extra):
    record = logging.LogRecord("teamsync.test", logging.INFO, __file__, 1, msg, args or None, None)
    record.__dict__.update(extra)
    return record


class TestRedact:

    def test_session_token_is_scrubbed(self):
        token = create_token("alice", "Admin", "secret")
        assert token not in redact(f"issued {token}")

    def test_bcrypt_hash_is_scrubbed(self):
        hashed = hash_password("secret123")
        assert redact(f"user row {hashed}") == "user row ***"

    def test_key_value_keeps_the_key(self):
        assert redact("password=hunter22 ok") == "password=*** ok"


class TestSecretFilter:

    def test_sensitive_extras_and_args_are_masked(self):
        record = _record("login %s", "Bearer abcdefghijklmnopqrstuvwxyz", password="hunter22", doc_id="d1")
        _SecretFilter().filter(record)

        assert record.password == "***"
        assert record.doc_id == "d1"
        assert record.getMessage() == "login Bearer ***"


class TestJsonFormatter:

    def test_extras_and_session_user_are_top_level(self):
        token = user_id_var.set("alice")
        try:
            record = _record("Document created", doc_id="d1")
            _ContextFilter().filter(record)
            payload = json.loads(_JsonFormatter().format(record))
        finally:
            user_id_var.reset(token)

        assert payload["message"] == "Document created"
        assert payload["doc_id"] == "d1"
        assert payload["user_id"] == "alice"
        assert "request_id" not in payload
