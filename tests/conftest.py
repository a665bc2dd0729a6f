from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from app.core.errors import Unauthorized
from app.main import app
from app.routers import analysis
from app.services.auth_service import TokenVerifier

GATEWAY_URL = "https://gateway.test/v1/chat/completions"
VALID_TOKEN = "good-token"


class FakeVerifier(TokenVerifier):
    def __init__(self, user_id: str = "user-123") -> None:
        self.user_id = user_id
        self.tokens: list[str] = []

    def verify(self, token: str) -> str:
        self.tokens.append(token)
        if token != VALID_TOKEN:
            raise Unauthorized("Unauthorized - invalid or expired session")
        return self.user_id


class FakeChatModel:
    """Stands in for the gateway model: replays canned replies or raises canned errors."""

    def __init__(self, outputs: list[object] | None = None) -> None:
        self._outputs = list(outputs or [])
        self.messages: list[list] = []
        self.built_with: list[object] = []

    @property
    def calls(self) -> int:
        return len(self.messages)

    def factory(self, settings):  # type: ignore[no-untyped-def]
        self.built_with.append(settings)
        return RunnableLambda(self._respond)

    async def _respond(self, prompt_value):  # type: ignore[no-untyped-def]
        self.messages.append(prompt_value.to_messages())
        if not self._outputs:
            raise RuntimeError("no_more_outputs")
        next_item = self._outputs.pop(0)
        if isinstance(next_item, Exception):
            raise next_item
        return AIMessage(content=next_item)


def status_error(cls, status: int):  # type: ignore[no-untyped-def]
    request = httpx.Request("POST", GATEWAY_URL)
    response = httpx.Response(status, request=request, json={"error": {"message": "upstream said no"}})
    return cls("upstream said no", response=response, body=None)


def gateway_request() -> httpx.Request:
    return httpx.Request("POST", GATEWAY_URL)


@pytest.fixture
def gateway_env(monkeypatch):  # type: ignore[no-untyped-def]
    monkeypatch.setenv("AI_GATEWAY_API_KEY", "test-gateway-key")
    monkeypatch.delenv("LOVABLE_API_KEY", raising=False)
    monkeypatch.delenv("VALIDATE_ANALYSIS_SCHEMA", raising=False)


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def make_client(verifier):  # type: ignore[no-untyped-def]
    def _make(model: FakeChatModel) -> TestClient:
        app.dependency_overrides[analysis.get_verifier] = lambda: verifier
        app.dependency_overrides[analysis.get_model_factory] = lambda: model.factory
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
