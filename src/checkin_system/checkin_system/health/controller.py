from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/health", methods=["GET"], endpoint="api_health")
    def api_health():
        report = container.health_service.check()
        return jsonify(report.to_dict()), 200 if report.healthy else 503
