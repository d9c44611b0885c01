"""HTTP API for generating and validating Terraform configurations."""

from __future__ import annotations

import os
from typing import Any

from flask import Flask, Response, jsonify, request

from .ai import AIError, Provider, new_provider
from .generator import Generator, ValidationError
from .nlp import Engine
from .security import Issue, Scanner

VERSION = "1.0.0"

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Headers": (
        "Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization, "
        "accept, origin, Cache-Control, X-Requested-With"
    ),
    "Access-Control-Allow-Methods": "POST, OPTIONS, GET, PUT, DELETE",
}


def _issue_json(issue: Issue) -> dict[str, Any]:
    return {
        "Severity": issue.severity,
        "Message": issue.message,
        "Resource": issue.resource,
        "Line": issue.line,
        "Rule": issue.rule,
        "Remediation": issue.remediation,
    }


def _generate_response(
    status: int,
    *,
    configuration: str = "",
    issues: list[Issue] | None = None,
    costs: dict[str, float] | None = None,
    error: str = "",
) -> tuple[Response, int]:
    body: dict[str, Any] = {"configuration": configuration, "success": not error}
    if issues:
        body["issues"] = [_issue_json(issue) for issue in issues]
    if costs:
        body["estimated_costs"] = costs
    if error:
        body["error"] = error
    return jsonify(body), status


def _required_string(payload: Any, key: str) -> str:
    """Return a non-empty string field of a JSON object, else raise ValueError."""
    if not isinstance(payload, dict):
        raise ValueError("request body must be a JSON object")
    value = payload.get(key)
    if not isinstance(value, str):
        if value is None:
            raise ValueError(f"{key} is required")
        raise ValueError(f"{key} must be a string")
    if not value:
        raise ValueError(f"{key} is required")
    return value


def create_app(ai_provider: Provider | None = None) -> Flask:
    """Build the web application; the AI provider defaults to OpenAI."""
    provider = ai_provider if ai_provider is not None else new_provider("openai")
    engine = Engine()
    generator = Generator()
    scanner = Scanner()

    app = Flask(
        __name__,
        static_folder=os.path.abspath(os.path.join("web", "static")),
        static_url_path="/static",
    )

    @app.before_request
    def _preflight() -> Response | None:
        if request.method == "OPTIONS":
            return Response(status=204)
        return None

    @app.after_request
    def _cors(response: Response) -> Response:
        response.headers.update(_CORS_HEADERS)
        return response

    @app.post("/api/v1/generate")
    def generate() -> tuple[Response, int]:
        payload = request.get_json(silent=True)
        try:
            description = _required_string(payload, "description")
            override = payload.get("provider") or ""
            if not isinstance(override, str):
                raise ValueError("provider must be a string")
        except ValueError as exc:
            return _generate_response(400, error=str(exc))

        parsed = engine.parse(description)
        if override:
            parsed.cloud_provider = override

        try:
            config = provider.generate_config(parsed)
        except AIError as exc:
            return _generate_response(500, error=f"Failed to generate configuration: {exc}")

        try:
            validated = generator.validate(config)
        except ValidationError as exc:
            return _generate_response(500, error=f"Failed to validate configuration: {exc}")

        issues = scanner.scan(validated)
        costs = generator.estimate_cost(validated)
        return _generate_response(200, configuration=validated, issues=issues, costs=costs)

    @app.post("/api/v1/validate")
    def validate() -> tuple[Response, int]:
        try:
            configuration = _required_string(request.get_json(silent=True), "configuration")
        except ValueError as exc:
            return jsonify({"success": False, "error": str(exc)}), 400

        try:
            generator.validate(configuration)
        except ValidationError as exc:
            return jsonify({"success": False, "error": str(exc)}), 200

        issues = scanner.scan(configuration)
        return jsonify({"success": True, "issues": [_issue_json(i) for i in issues]}), 200

    @app.get("/api/v1/health")
    def health() -> tuple[Response, int]:
        return jsonify({"status": "healthy", "version": VERSION}), 200

    return app


def run_server(host: str = "0.0.0.0", port: int | str = 8080) -> None:
    """Serve the web application until interrupted."""
    create_app().run(host=host, port=int(port))