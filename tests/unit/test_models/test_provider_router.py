"""Unit tests for the provider router and its local fallback."""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from studygraph.models.local_fallback import DEFAULT_QUESTIONS, LOCAL_CHAT_RESULT, LocalFallback
from studygraph.models.provider_router import ProviderRouter, parse_response


def test_parse_response_strips_code_fences():
    assert parse_response('```json\n{"a": 1}\n```') == {"a": 1}


def test_parse_response_wraps_non_objects():
    assert parse_response("plain answer") == {"result": "plain answer"}
    assert parse_response("[1, 2]") == {"result": "[1, 2]"}


@pytest.mark.asyncio
async def test_preferred_provider_answers(mock_registry):
    router = ProviderRouter(mock_registry, LocalFallback(), preferred="deepseek")
    result = await router.invoke("prompt", "chat")

    assert result.provider == "deepseek"
    assert result.text() == "deepseek response"
    mock_registry.get_model("gemini").ainvoke.assert_not_awaited()


@pytest.mark.asyncio
async def test_primary_failure_swaps_to_secondary(mock_registry):
    mock_registry.get_model("gemini").ainvoke = AsyncMock(side_effect=RuntimeError("timeout"))
    router = ProviderRouter(mock_registry, LocalFallback(), preferred="gemini")

    result = await router.invoke("prompt", "chat")

    assert result.provider == "deepseek"
    assert mock_registry.stats["gemini"] == {"calls": 1, "failures": 1}
    assert mock_registry.stats["deepseek"] == {"calls": 1, "failures": 0}


@pytest.mark.asyncio
async def test_both_providers_failing_falls_back_locally(mock_registry, chinese_text):
    for name in ("gemini", "deepseek"):
        mock_registry.get_model(name).ainvoke = AsyncMock(side_effect=RuntimeError("down"))
    router = ProviderRouter(mock_registry, LocalFallback(), preferred="gemini")

    result = await router.invoke("summarise this", "summary", source_text=chinese_text)

    assert result.is_local
    assert result.text() == chinese_text


@pytest.mark.asyncio
async def test_empty_provider_answer_counts_as_failure(mock_registry):
    mock_registry.get_model("gemini").ainvoke = AsyncMock(return_value=MagicMock(content="   "))
    router = ProviderRouter(mock_registry, LocalFallback(), preferred="gemini")

    result = await router.invoke("prompt", "chat")
    assert result.provider == "deepseek"


@pytest.mark.asyncio
async def test_no_providers_uses_local_heuristics(local_router, chinese_text):
    assert not local_router.has_providers

    concepts = await local_router.invoke("prompt", "extract_concepts", source_text=chinese_text)
    assert concepts.is_local
    assert concepts.data["concepts"][0]["name"] == "机器学习"

    questions = await local_router.invoke("prompt", "generate_questions")
    assert len(questions.data["questions"]) == len(DEFAULT_QUESTIONS)

    chat = await local_router.invoke("prompt", "chat")
    assert chat.text() == LOCAL_CHAT_RESULT


def test_seeded_rng_makes_primary_choice_deterministic(mock_registry):
    first = ProviderRouter(mock_registry, LocalFallback(), rng=random.Random(42))
    second = ProviderRouter(mock_registry, LocalFallback(), rng=random.Random(42))

    orders = [first.provider_order() for _ in range(10)]
    assert orders == [second.provider_order() for _ in range(10)]
    assert all(sorted(order) == ["deepseek", "gemini"] for order in orders)


def test_provider_order_skips_unconfigured(local_router):
    assert local_router.provider_order() == []


def test_local_relations_pair_same_type_entities():
    data = LocalFallback().extract_relations("教授张三。教授李四。")
    assert data["relations"] == [
        {"from": "张三", "to": "李四", "relation": "related_to", "strength": 0.6}
    ]
