"""Provider router: one primary provider, one swap, then local heuristics.

``invoke`` never raises. Total failure of every provider is an expected
outcome and yields a result produced by :class:`LocalFallback`.
"""

from __future__ import annotations

import json
import random
import re
import time

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langsmith import traceable

from studygraph.models.local_fallback import LocalFallback
from studygraph.models.provider_registry import ProviderRegistry
from studygraph.models.schemas import RouterResult, TaskKind
from studygraph.utils.exceptions import ProviderResponseError
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_response(raw: str) -> dict:
    """Decode a JSON object answer; anything else is wrapped as ``{"result": raw}``."""
    text = raw.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return {"result": raw}
    if isinstance(parsed, dict):
        return parsed
    return {"result": raw}


def _message_text(content: object) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [p.get("text", "") if isinstance(p, dict) else str(p) for p in content]
        return "".join(parts)
    return str(content or "")


class ProviderRouter:
    """Routes a prompt to a configured provider with a single swap on failure.

    With ``AI_PREFERRED_PROVIDER=auto`` the primary is drawn 50/50 from the
    injected ``rng``; seed it to make the choice deterministic.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        fallback: LocalFallback,
        *,
        preferred: str = "auto",
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry
        self._fallback = fallback
        self._preferred = preferred
        self._rng = rng or random.Random()

    @property
    def has_providers(self) -> bool:
        return bool(self._registry.available)

    def provider_order(self) -> list[str]:
        """Providers to try for one call: the primary, then the other one."""
        if self._preferred in ("gemini", "deepseek"):
            primary = self._preferred
        else:
            primary = "gemini" if self._rng.random() > 0.5 else "deepseek"
        secondary = "deepseek" if primary == "gemini" else "gemini"
        return [name for name in (primary, secondary) if self._registry.is_configured(name)]

    @traceable(run_type="chain", name="provider_router_invoke")
    async def invoke(
        self,
        prompt: str,
        task: TaskKind,
        source_text: str | None = None,
        *,
        system: str | None = None,
    ) -> RouterResult:
        """Run ``prompt`` for ``task`` and return structured data.

        Args:
            prompt: Fully formatted prompt.
            task: Task kind; selects the local heuristic if every provider fails.
            source_text: Raw text the local heuristic should work on. Defaults
                to ``prompt``.
            system: Optional system message.
        """
        messages: list[BaseMessage] = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=prompt))

        for name in self.provider_order():
            model = self._registry.get_model(name)
            try:
                start = time.monotonic()
                response = await model.ainvoke(messages)
                elapsed_ms = int((time.monotonic() - start) * 1000)
                raw = _message_text(response.content)
                if not raw.strip():
                    raise ProviderResponseError(f"{name} returned an empty response")
            except Exception as exc:
                self._registry.record_call(name, failed=True)
                logger.warning("provider_invoke_failed", provider=name, task=task, error=str(exc))
                continue

            self._registry.record_call(name)
            logger.debug("provider_invoked", provider=name, task=task, elapsed_ms=elapsed_ms)
            return RouterResult(task=task, provider=name, data=parse_response(raw))

        return self._local(task, source_text if source_text is not None else prompt)

    def _local(self, task: TaskKind, text: str) -> RouterResult:
        if self.has_providers:
            logger.warning("provider_fallback_local", task=task, reason="all_providers_failed")
        else:
            logger.info("provider_fallback_local", task=task, reason="no_providers_configured")
        try:
            data = self._fallback.run(task, text)
        except Exception as exc:
            logger.error("local_fallback_failed", task=task, error=str(exc))
            data = {"result": ""}
        return RouterResult(task=task, provider="local", data=data)
