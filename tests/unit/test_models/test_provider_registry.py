"""Unit tests for provider registration."""

from __future__ import annotations

import pytest

from studygraph.models.provider_registry import ProviderRegistry
from studygraph.utils.exceptions import ProviderNotConfiguredError


def test_no_keys_means_no_providers(settings):
    registry = ProviderRegistry(settings)
    assert registry.available == []
    with pytest.raises(ProviderNotConfiguredError):
        registry.get_model("gemini")


def test_only_keyed_providers_are_registered(settings):
    registry = ProviderRegistry(settings.model_copy(update={"DEEPSEEK_API_KEY": "sk-test"}))
    assert registry.available == ["deepseek"]
    assert registry.is_configured("deepseek")
    assert not registry.is_configured("gemini")
    assert registry.get_model("deepseek").max_retries == 0


def test_call_stats(mock_registry):
    mock_registry.record_call("gemini")
    mock_registry.record_call("gemini", failed=True)
    mock_registry.record_call("unknown")
    assert mock_registry.stats["gemini"] == {"calls": 2, "failures": 1}
    assert "unknown" not in mock_registry.stats
