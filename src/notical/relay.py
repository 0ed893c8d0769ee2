"""Relay service - forwards /api/<path> to the Notion API with the token attached."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import requests
from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from .config import RelaySettings

logger = logging.getLogger(__name__)

HEALTH_PATH = "health"
BODY_METHODS = ("POST", "PUT", "PATCH")
RELAY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

USAGE = (
    "Notion relay running. Use /api/<notion-path> to forward requests to the "
    "Notion API. Example: POST /api/databases/<DB_ID>/query"
)


@dataclass
class RelayRequest:
    """One outbound call, built from one incoming request."""

    method: str
    path: str
    headers: dict[str, str]
    body: dict | None = None
    params: dict[str, str] = field(default_factory=dict)


@dataclass
class UpstreamResult:
    """Upstream answer, decoded as JSON when possible."""

    status: int
    kind: Literal["json", "text"]
    payload: Any


def build_relay_request(
    settings: RelaySettings,
    method: str,
    path: str,
    body: dict | None = None,
    params: dict[str, str] | None = None,
) -> RelayRequest:
    """Rewrite an incoming request into the upstream call."""
    headers = {
        "Authorization": f"Bearer {settings.secret}",
        "Notion-Version": settings.notion_version,
        "Content-Type": "application/json",
    }
    method = method.upper()
    return RelayRequest(
        method=method,
        path=path,
        headers=headers,
        body=(body or {}) if method in BODY_METHODS else None,
        params=params or {},
    )


def decode_upstream(status: int, text: str) -> UpstreamResult:
    """Decode an upstream body as JSON, or keep it as raw text."""
    try:
        return UpstreamResult(status, "json", json.loads(text))
    except ValueError:
        return UpstreamResult(status, "text", text)


def forward(settings: RelaySettings, relay_request: RelayRequest) -> UpstreamResult:
    """Send one request upstream. Raises requests.RequestException on network failure."""
    url = settings.upstream_base + relay_request.path
    resp = requests.request(
        relay_request.method,
        url,
        headers=relay_request.headers,
        json=relay_request.body,
        params=relay_request.params or None,
        timeout=settings.timeout,
    )
    logger.info(f"{relay_request.method} /{relay_request.path} -> {resp.status_code}")
    return decode_upstream(resp.status_code, resp.text)


def _health():
    return jsonify({"ok": True, "message": "proxy ok"})


def create_relay_app(settings: RelaySettings) -> Flask:
    """Create the relay Flask app. ``settings`` is never mutated afterwards."""
    app = Flask(__name__)
    CORS(app)

    @app.after_request
    def no_store(response: Response) -> Response:
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.route("/")
    def index():
        return Response(USAGE, mimetype="text/plain")

    @app.route(f"/api/{HEALTH_PATH}", methods=RELAY_METHODS)
    def health():
        return _health()

    @app.route("/api/<path:path>", methods=RELAY_METHODS)
    def relay(path: str):
        if path == HEALTH_PATH:
            return _health()

        body = None
        if request.method in BODY_METHODS:
            body = request.get_json(silent=True)

        relay_request = build_relay_request(
            settings,
            request.method,
            path,
            body=body,
            params=request.args.to_dict(),
        )

        try:
            result = forward(settings, relay_request)
        except requests.RequestException as e:
            logger.error(f"Relay error for {request.method} /{path}: {e}")
            return jsonify({"error": str(e)}), 500

        if result.kind == "json":
            return jsonify(result.payload), result.status
        return Response(result.payload, status=result.status, mimetype="text/plain")

    return app


def run_relay(settings: RelaySettings, host: str = "127.0.0.1") -> None:
    """Run the relay until interrupted."""
    app = create_relay_app(settings)
    logger.info(
        f"Notion relay running on http://{host}:{settings.port} "
        f"(forwarding to {settings.upstream_base})"
    )
    app.run(host=host, port=settings.port)
