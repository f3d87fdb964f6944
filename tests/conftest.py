import io
import logging
from collections.abc import Sequence

import pytest
import structlog

from neuroshell.core.app.application_builder import build_engine
from neuroshell.core.config.app_config import AppConfig
from neuroshell.core.execution.state_machine import ExecutionEngine
from neuroshell.core.interfaces.llm_client_interface import ILLMClient


class FakeLLMClient(ILLMClient):
    """Returns canned replies and records every request."""

    def __init__(self, replies: Sequence[str] | None = None) -> None:
        self.replies = list(replies or [])
        self.calls: list[dict] = []

    async def chat_completion(
        self,
        messages: Sequence[dict[str, str]],
        model: str,
        temperature: float | None = None,
    ) -> str:
        self.calls.append(
            {"messages": list(messages), "model": model, "temperature": temperature}
        )
        if self.replies:
            return self.replies.pop(0)
        return f"reply {len(self.calls)}"


@pytest.fixture(scope="session", autouse=True)
def _route_structlog_to_stdlib() -> None:
    # Keep structured log lines off stdout so output assertions stay clean.
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def engine(
    app_config: AppConfig, fake_llm: FakeLLMClient, output: io.StringIO, tmp_path
) -> ExecutionEngine:
    """A fully wired engine writing to `output`, with scripts under tmp_path."""
    return build_engine(
        app_config,
        output_stream=output,
        llm_client=fake_llm,
        script_dir=tmp_path,
    )
