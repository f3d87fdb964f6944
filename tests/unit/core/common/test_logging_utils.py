import logging

import pytest
import structlog

from neuroshell.core.common.logging_utils import (
    ApiKeyRedactionFilter,
    EnvironmentTaggingFilter,
    LogContext,
    get_logger,
)


def make_record(msg: str, args: tuple | dict | None = None) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_environment_tag_under_pytest(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NEUROSHELL_ENV", raising=False)
    record = make_record("hello")

    assert EnvironmentTaggingFilter().filter(record)
    assert record.env_tag == "test"


def test_explicit_environment_tag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEUROSHELL_ENV", " Staging ")
    record = make_record("hello")

    EnvironmentTaggingFilter().filter(record)

    assert record.env_tag == "staging"


def test_redacts_configured_key_in_message_and_args() -> None:
    redactor = ApiKeyRedactionFilter(["my-secret-key"])
    record = make_record("key=my-secret-key other=%s", ("my-secret-key",))

    redactor.filter(record)

    assert record.getMessage() == "key=*** other=***"


def test_redacts_key_shaped_strings_and_bearer_tokens() -> None:
    redactor = ApiKeyRedactionFilter()
    record = make_record(
        "using sk-abcdefghijklmnopqrstuvwxyz with Authorization: Bearer abc.def"
    )

    redactor.filter(record)

    assert "sk-abc" not in record.getMessage()
    assert "Bearer ***" in record.getMessage()


def test_redacts_nested_dict_args() -> None:
    redactor = ApiKeyRedactionFilter(["topsecret"], mask="<hidden>")
    record = make_record("%(payload)s", None)
    record.args = {"payload": {"token": "topsecret", "items": ["topsecret", 3]}}

    redactor.filter(record)

    assert record.args == {"payload": {"token": "<hidden>", "items": ["<hidden>", 3]}}


def test_log_context_binds_contextvars() -> None:
    with LogContext(get_logger("test"), command="echo") as bound:
        assert bound is not None
        assert structlog.contextvars.get_contextvars()["command"] == "echo"

    assert "command" not in structlog.contextvars.get_contextvars()


def test_log_context_get_logger_outside_block() -> None:
    context = LogContext(get_logger("test"), command="echo")

    with pytest.raises(RuntimeError):
        context.get_logger()
