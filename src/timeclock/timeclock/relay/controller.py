from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ConfigurationError, SyncError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.after_request
    def add_cors_headers(response):
        # The endpoints are called from the PWA and from spreadsheet scripts on other origins.
        if request.path.startswith("/api/"):
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = "GET,OPTIONS,POST,DELETE"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type, X-Requested-With, Accept"
        return response

    @app.route("/api/submit", methods=["POST", "OPTIONS"], endpoint="api_submit")
    def api_submit():
        if request.method == "OPTIONS":
            return "", 200
        try:
            data = container.submit_relay_service.submit(request.get_json(silent=True))
            return jsonify(data), 200
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except ConfigurationError as e:
            app.logger.error("Submit relay not configured: %s", e)
            return jsonify({"error": "Configuration Error", "message": str(e)}), 500
        except SyncError as e:
            # Upstream failures are reported in the body, not as an HTTP error.
            return jsonify({"result": "error", "message": str(e)}), 200

    @app.route("/api/get-report", methods=["GET", "OPTIONS"], endpoint="api_get_report")
    def api_get_report():
        if request.method == "OPTIONS":
            return "", 200
        try:
            rows = container.report_query_service.query(
                start=request.args.get("start"),
                end=request.args.get("end"),
                name=request.args.get("name"),
            )
            return jsonify(rows), 200
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:
            app.logger.error("Error fetching report: %s", e)
            return jsonify({"error": str(e)}), 500

    @app.route("/api/get-status", methods=["GET", "OPTIONS"], endpoint="api_get_status")
    def api_get_status():
        if request.method == "OPTIONS":
            return "", 200
        try:
            return jsonify(container.status_query_service.current_statuses()), 200
        except Exception as e:
            app.logger.error("Error fetching status: %s", e)
            return jsonify({"error": str(e)}), 500
