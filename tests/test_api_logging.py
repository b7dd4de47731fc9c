from __future__ import annotations

import logging

import httpx
import pytest

from apps.api.main import app


@pytest.mark.anyio
async def test_api_logs_request_id_for_success(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="rollconv.api")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/convert", json={"text": "DC 25 Reflex save"})

    assert response.status_code == 200
    request_id = response.headers["X-Rollconv-Request-Id"]
    messages = [record.message for record in caplog.records if record.name == "rollconv.api"]
    assert any(
        '"event":"converted"' in message
        and request_id in message
        and '"replaced_count":1' in message
        for message in messages
    )


@pytest.mark.anyio
async def test_api_logs_request_id_and_error_code_for_failure(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="rollconv.api")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post(
            "/v1/convert", json={"text": "prone", "policy_yaml": "legacy_cleanup: [oops"}
        )

    assert response.status_code == 400
    request_id = response.headers["X-Rollconv-Request-Id"]
    messages = [record.message for record in caplog.records if record.name == "rollconv.api"]
    assert any(
        '"event":"error"' in message
        and request_id in message
        and '"error_code":"INVALID_POLICY"' in message
        and '"failure_stage":"load_policy"' in message
        for message in messages
    )
