"""Language-model providers reachable through OpenAI-compatible endpoints.

A provider is registered only when its API key is set. A missing key is a
normal configuration state, not an error: the router simply has fewer
providers to try.
"""

from __future__ import annotations

from dataclasses import dataclass

from langchain_openai import ChatOpenAI

from studygraph.config import Settings
from studygraph.utils.exceptions import ProviderNotConfiguredError
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)

PROVIDER_NAMES = ("gemini", "deepseek")


@dataclass(frozen=True)
class ProviderSpec:
    name: str
    model: str
    api_key: str
    base_url: str


class ProviderRegistry:
    """Builds one ChatOpenAI client per configured provider."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._models: dict[str, ChatOpenAI] = {}
        self._call_stats: dict[str, dict[str, int]] = {}

        for spec in self._specs():
            if not spec.api_key:
                logger.info("provider_disabled", provider=spec.name, reason="no_api_key")
                continue
            self._models[spec.name] = self._build_model(spec)
            self._call_stats[spec.name] = {"calls": 0, "failures": 0}

    def _specs(self) -> list[ProviderSpec]:
        s = self._settings
        return [
            ProviderSpec("gemini", s.GEMINI_MODEL, s.GEMINI_API_KEY, s.GEMINI_BASE_URL),
            ProviderSpec("deepseek", s.DEEPSEEK_MODEL, s.DEEPSEEK_API_KEY, s.DEEPSEEK_BASE_URL),
        ]

    def _build_model(self, spec: ProviderSpec) -> ChatOpenAI:
        # The router's single provider swap is the only retry.
        return ChatOpenAI(
            model=spec.model,
            openai_api_key=spec.api_key,
            openai_api_base=spec.base_url,
            temperature=self._settings.AI_TEMPERATURE,
            max_tokens=self._settings.AI_MAX_TOKENS,
            timeout=self._settings.AI_TIMEOUT_SECONDS,
            max_retries=0,
        )

    @property
    def available(self) -> list[str]:
        """Configured provider names, in a fixed order."""
        return [name for name in PROVIDER_NAMES if name in self._models]

    def is_configured(self, name: str) -> bool:
        return name in self._models

    def get_model(self, name: str) -> ChatOpenAI:
        if name not in self._models:
            raise ProviderNotConfiguredError(f"Provider '{name}' has no API key configured")
        return self._models[name]

    def record_call(self, name: str, *, failed: bool = False) -> None:
        if name in self._call_stats:
            self._call_stats[name]["calls"] += 1
            if failed:
                self._call_stats[name]["failures"] += 1

    @property
    def stats(self) -> dict[str, dict[str, int]]:
        return {name: dict(counts) for name, counts in self._call_stats.items()}
