"""Shared test fixtures."""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

CHINESE_TEXT = "机器学习属于人工智能的一个分支。深度学习是机器学习的重要方法。"

ENGLISH_TEXT = (
    "Photosynthesis converts light energy into chemical energy in plants.\n"
    "Chlorophyll absorbs light energy during photosynthesis.\n"
    "The Calvin cycle depends on products of the light reactions.\n"
    "Cellular respiration releases the chemical energy stored in glucose.\n"
    "Mitochondria host cellular respiration in most cells.\n"
    "Glucose is produced by the Calvin cycle."
)


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch, tmp_path):
    """Keep tests offline: no providers, no Redis, no Neo4j, no tracing."""
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("DEEPSEEK_API_KEY", "")
    monkeypatch.setenv("NEO4J_URI", "")
    monkeypatch.setenv("REDIS_URL", "")
    monkeypatch.setenv("PIPELINE_BACKEND", "inline")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("LANGSMITH_TRACING", "false")
    monkeypatch.setenv("LANGCHAIN_TRACING_V2", "false")


@pytest.fixture
def settings(tmp_path):
    from studygraph.config import Settings

    return Settings(
        GEMINI_API_KEY="",
        DEEPSEEK_API_KEY="",
        NEO4J_URI="",
        REDIS_URL="",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        AI_RANDOM_SEED=7,
        LOG_FORMAT="console",
    )


@pytest.fixture
def mock_registry(settings):
    """Provider registry with both providers backed by mocked chat models."""
    from studygraph.models.provider_registry import ProviderRegistry

    with patch.object(ProviderRegistry, "__init__", lambda self, s: None):
        registry = ProviderRegistry.__new__(ProviderRegistry)
        registry._settings = settings
        registry._models = {}
        registry._call_stats = {}

        for name in ("gemini", "deepseek"):
            model = MagicMock()
            model.ainvoke = AsyncMock(return_value=MagicMock(content=f"{name} response"))
            model.model_name = f"{name}-test"
            registry._models[name] = model
            registry._call_stats[name] = {"calls": 0, "failures": 0}

        return registry


@pytest.fixture
def mock_router(mock_registry):
    from studygraph.models.local_fallback import LocalFallback
    from studygraph.models.provider_router import ProviderRouter

    return ProviderRouter(mock_registry, LocalFallback(), rng=random.Random(0))


@pytest.fixture
def local_router(settings):
    """Router with no configured providers; every call resolves locally."""
    from studygraph.models.local_fallback import LocalFallback
    from studygraph.models.provider_registry import ProviderRegistry
    from studygraph.models.provider_router import ProviderRouter

    return ProviderRouter(ProviderRegistry(settings), LocalFallback())


@pytest.fixture
def document_repo():
    from studygraph.storage.repository import InMemoryDocumentRepository

    return InMemoryDocumentRepository()


@pytest.fixture
def graph_repo():
    from studygraph.storage.repository import InMemoryKnowledgeGraphRepository

    return InMemoryKnowledgeGraphRepository()


@pytest.fixture
def graph_builder(settings):
    from studygraph.graph.builder import KnowledgeGraphService

    return KnowledgeGraphService(settings)


@pytest.fixture
def make_document(tmp_path):
    """Factory for a pending Document whose bytes are written to disk."""
    from studygraph.models.document import Document, DocumentFile

    def _make(text: str = CHINESE_TEXT, *, user_id: str = "user-1", mime_type: str = "text/plain", **kwargs):
        path = tmp_path / f"doc-{random.getrandbits(32):08x}.txt"
        data = text.encode("utf-8")
        path.write_bytes(data)
        return Document(
            user_id=user_id,
            title=kwargs.pop("title", "Notes"),
            file=DocumentFile(original_name=path.name, path=str(path), size=len(data), mime_type=mime_type),
            **kwargs,
        )

    return _make


@pytest.fixture
def chinese_text() -> str:
    return CHINESE_TEXT


@pytest.fixture
def english_text() -> str:
    return ENGLISH_TEXT
