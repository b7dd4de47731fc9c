"""FastAPI wrapper for the inline roll conversion pipeline."""

from __future__ import annotations

import importlib.metadata
import json
import logging
import os
import time
import uuid
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from core.conversion.models import ConversionPolicy
from core.conversion.policy_loader import load_policy_text
from core.orchestrator.pipeline import Converter
from core.patterns.definitions import build_default_registry
from core.patterns.registry import PRIORITY
from core.replacements.factory import supported_types

app = FastAPI(title="inline-roll-converter API", version="0.1.0")
logger = logging.getLogger("rollconv.api")

REQUEST_ID_HEADER = "X-Rollconv-Request-Id"
_DEFAULT_MAX_TEXT_CHARS = 200_000


class ConvertRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    policy_yaml: str | None = None
    include_report: bool = False


class ApiRequestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail or {}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    """Supported type tags, registered rules, and the priority table."""

    request_id = _request_id_from_request(request)
    registry = build_default_registry()
    payload = {
        "supported_types": supported_types(),
        "rules": [
            {
                "name": rule.name,
                "type_tag": rule.type_tag,
                "priority": rule.priority,
                "scope": rule.scope,
            }
            for rule in registry.all()
        ],
        "priorities": dict(PRIORITY),
        "max_text_chars": _max_text_chars(),
        "version": _package_version(),
    }
    return JSONResponse(status_code=200, headers={REQUEST_ID_HEADER: request_id}, content=payload)


@app.post("/v1/convert", response_model=None)
async def convert_v1(request: Request, body: ConvertRequest) -> JSONResponse:
    """Convert one text and optionally return the per-match report."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    failure_stage = "validate_inputs"

    try:
        max_chars = _max_text_chars()
        if len(body.text) > max_chars:
            raise ApiRequestError(
                status_code=413,
                error_code="TEXT_TOO_LARGE",
                message="text too large",
                detail={"max_text_chars": max_chars, "text_chars": len(body.text)},
            )

        failure_stage = "load_policy"
        converter = _converter_for(body.policy_yaml)

        failure_stage = "convert"
        result = converter.run(body.text)
    except ApiRequestError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code=exc.error_code,
            status_code=exc.status_code,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("conversion failed")
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"error_type": type(exc).__name__},
        )

    summary = result.report.summary
    _log_event(
        logging.INFO,
        "converted",
        request_id,
        text_chars=len(body.text),
        total_matches=summary.total_matches,
        replaced_count=summary.replaced_count,
        total_ms=_elapsed_ms(request_started),
    )

    payload: dict[str, Any] = {"text": result.text, "request_id": request_id}
    if body.include_report:
        payload["report"] = result.report.model_dump(mode="json")
    return JSONResponse(status_code=200, headers={REQUEST_ID_HEADER: request_id}, content=payload)


def _converter_for(policy_yaml: str | None) -> Converter:
    if policy_yaml is None or not policy_yaml.strip():
        return _default_converter()
    try:
        policy = load_policy_text(policy_yaml, source="policy_yaml")
    except ValueError as exc:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_POLICY",
            message="invalid policy_yaml",
            detail={"field": "policy_yaml", "error": str(exc)},
        ) from exc
    return Converter(policy=policy)


@lru_cache(maxsize=1)
def _default_converter() -> Converter:
    return Converter(policy=ConversionPolicy())


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    generated = uuid.uuid4().hex
    request.state.request_id = generated
    return generated


def _max_text_chars() -> int:
    raw = os.getenv("ROLLCONV_MAX_TEXT_CHARS")
    if raw is None:
        return _DEFAULT_MAX_TEXT_CHARS
    try:
        parsed = int(raw)
    except ValueError:
        return _DEFAULT_MAX_TEXT_CHARS
    return parsed if parsed > 0 else _DEFAULT_MAX_TEXT_CHARS


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _package_version() -> str:
    try:
        return importlib.metadata.version("inline-roll-converter")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        headers={REQUEST_ID_HEADER: request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
