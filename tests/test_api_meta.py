from __future__ import annotations

import httpx
import pytest

from apps.api.main import app


@pytest.mark.anyio
async def test_meta_lists_types_rules_and_priorities() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/v1/meta")

    assert response.status_code == 200
    assert response.headers["X-Rollconv-Request-Id"]
    payload = response.json()
    assert "condition" in payload["supported_types"]
    assert payload["priorities"]["save"] == 90
    assert payload["priorities"]["template"] == 20
    rules = {rule["name"]: rule for rule in payload["rules"]}
    assert rules["save.comprehensive"] == {
        "name": "save.comprehensive",
        "type_tag": "save",
        "priority": 90,
        "scope": "text",
    }
    assert payload["max_text_chars"] == 200000
    assert isinstance(payload["version"], str)


@pytest.mark.anyio
async def test_meta_reflects_max_text_chars_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROLLCONV_MAX_TEXT_CHARS", "500")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/v1/meta")

    assert response.json()["max_text_chars"] == 500
