"""End-to-end test against live language-model providers.

This test requires a valid GEMINI_API_KEY or DEEPSEEK_API_KEY.

Run with: STUDYGRAPH_E2E=1 pytest tests/e2e/ -v
"""

from __future__ import annotations

import os
import time

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("STUDYGRAPH_E2E"),
    reason="Requires provider API keys",
)


def test_upload_then_ask(chinese_text, tmp_path):
    """Upload a document, wait for the pipeline, ask a question answered by a provider."""
    from fastapi.testclient import TestClient

    from studygraph.config import Settings
    from studygraph.main import create_app

    # Read keys from the real environment rather than the test defaults.
    settings = Settings(
        GEMINI_API_KEY=os.getenv("E2E_GEMINI_API_KEY", ""),
        DEEPSEEK_API_KEY=os.getenv("E2E_DEEPSEEK_API_KEY", ""),
        UPLOAD_DIR=str(tmp_path),
    )
    headers = {"X-User-Id": "e2e-user"}

    with TestClient(create_app(settings)) as client:
        resp = client.post(
            "/api/v1/documents",
            files={"file": ("ml.txt", chinese_text.encode("utf-8"), "text/plain")},
            headers=headers,
        )
        assert resp.status_code == 201
        document_id = resp.json()["id"]

        for _ in range(120):
            status = client.get(f"/api/v1/documents/{document_id}/status", headers=headers).json()
            if status["status"] in ("completed", "failed"):
                break
            time.sleep(1)
        assert status["status"] == "completed"

        answer = client.post(
            "/api/v1/ai/chat",
            json={"question": "机器学习属于什么领域？", "document_id": document_id},
            headers=headers,
        ).json()
        assert answer["confidence"] == 0.8
        assert answer["answer"]
