import dataclasses
import os
from types import SimpleNamespace

import pytest

# Credentials must exist before the web module is imported.
os.environ.setdefault("AZURE_OPENAI_ENDPOINT", "https://example-resource.openai.azure.com")
os.environ.setdefault("AZURE_OPENAI_KEY", "test-azure-key")
os.environ.setdefault("AZURE_OPENAI_DEPLOYMENT", "pitch-deployment")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from fastapi.testclient import TestClient  # noqa: E402

from app.pitch_api import llm_client, web  # noqa: E402
from app.pitch_api.config import Settings  # noqa: E402


class FakeCompletions:
    def __init__(self, chunks=None, content="", error=None):
        self.chunks = chunks or []
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            return [
                SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])
                for text in self.chunks
            ]
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))]
        )


class FakeOpenAIClient:
    def __init__(self, completions: FakeCompletions):
        self.chat = SimpleNamespace(completions=completions)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        azure_endpoint="https://example-resource.openai.azure.com",
        azure_api_key="test-azure-key",
        azure_deployment="pitch-deployment",
        azure_api_version="2024-10-21",
        transcribe_api_key="test-openai-key",
    )


@pytest.fixture
def use_settings(monkeypatch, settings):
    def _apply(**overrides) -> Settings:
        active = dataclasses.replace(settings, **overrides)
        monkeypatch.setattr(web, "settings", active)
        return active

    _apply()
    return _apply


@pytest.fixture
def fake_completions(monkeypatch):
    completions = FakeCompletions(chunks=["Hello", " world"], content="Hello world")
    monkeypatch.setattr(llm_client, "_build_client", lambda settings: FakeOpenAIClient(completions))
    return completions


@pytest.fixture
def client(use_settings):
    with TestClient(web.app) as test_client:
        yield test_client
