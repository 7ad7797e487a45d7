from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import uvicorn
from loguru import logger
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from quick_capture.capture_service import CaptureService, UnknownRuleError
from quick_capture.rule_config import RuleConfigError


class _CaptureApi:
    def __init__(self, *, service: CaptureService) -> None:
        self.service = service

    async def _parse_json_object(self, request: Request) -> tuple[dict[str, Any] | None, Response | None]:
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            return None, JSONResponse({"error": "Invalid JSON"}, status_code=400)
        if not isinstance(payload, dict):
            return None, JSONResponse({"error": "Expected JSON object"}, status_code=400)
        return payload, None

    async def handle_analyze(self, request: Request) -> Response:
        payload, error_response = await self._parse_json_object(request)
        if error_response is not None:
            return error_response
        assert payload is not None

        content = payload.get("content")
        if not isinstance(content, str):
            return JSONResponse({"error": "content must be a string"}, status_code=400)

        result = self.service.analyze(content)
        return JSONResponse(result.model_dump(mode="json"))

    async def serve_rules(self, _request: Request) -> Response:
        return JSONResponse(self.service.rule_listing())

    async def serve_rule_stats(self, _request: Request) -> Response:
        return JSONResponse(self.service.rule_statistics().model_dump(mode="json"))

    async def handle_rule_test(self, request: Request) -> Response:
        payload, error_response = await self._parse_json_object(request)
        if error_response is not None:
            return error_response
        assert payload is not None

        text = payload.get("text")
        rule_id = payload.get("rule_id")
        if not isinstance(text, str) or not text.strip():
            return JSONResponse({"error": "Text is required"}, status_code=400)
        if rule_id is not None and not isinstance(rule_id, str):
            return JSONResponse({"error": "rule_id must be a string"}, status_code=400)

        try:
            outcome = self.service.test_rule(text, rule_id or None)
        except UnknownRuleError as exc:
            return JSONResponse({"error": str(exc)}, status_code=404)
        return JSONResponse(outcome.model_dump(mode="json"))

    async def handle_rule_reload(self, _request: Request) -> Response:
        try:
            rule_set = await run_in_threadpool(self.service.reload_rules)
        except RuleConfigError as exc:
            logger.error(f"Rule reload failed: {exc}")
            return JSONResponse({"error": str(exc)}, status_code=500)
        return JSONResponse(
            {
                "message": "Rules reloaded successfully",
                "total_rules": len(rule_set),
                "generation": rule_set.generation,
            },
        )


def create_capture_app(*, service: CaptureService) -> Starlette:
    api = _CaptureApi(service=service)

    routes = [
        Route("/api/inbox/analyze-text", api.handle_analyze, methods=["POST"]),
        Route("/api/admin/rules", api.serve_rules, methods=["GET"]),
        Route("/api/admin/rules/stats", api.serve_rule_stats, methods=["GET"]),
        Route("/api/admin/rules/test", api.handle_rule_test, methods=["POST"]),
        Route("/api/admin/rules/reload", api.handle_rule_reload, methods=["POST"]),
    ]

    return Starlette(routes=routes)


def run_capture_server(*, host: str, port: int, rules: Path | None) -> None:
    """Serve the analyze and rule administration API."""
    from quick_capture.entrypoints.analyze import load_capture_service

    service = load_capture_service(rules=rules)
    app = create_capture_app(service=service)
    print(f"Quick capture API: http://{host}:{port}/", file=sys.stderr)
    uvicorn.run(app, host=host, port=port, access_log=False, log_level="warning")
