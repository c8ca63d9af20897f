from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request

from ..common.validators import require_iso_date
from ..core.constants import EXPORT_FILENAME
from ..core.enums import RecordKind
from ..core.exceptions import ConfirmationRequiredError, TransitionError, ValidationError
from ..container import Container
from ..reports.periods import half_month_periods, resolve_period
from .service import EMPTY_REPORT_NOTICE


def register(app: Flask, container: Container) -> None:
    tracker = container.tracker_service

    def _state_payload():
        state = tracker.state
        notifier = tracker.notifier
        return {
            "status": state.status.value,
            "active_shift_id": state.active_shift_id,
            "user_name": state.user_name,
            "auto_share_enabled": state.auto_share_enabled,
            "timer": tracker.snapshot().to_dict(),
            "preview": notifier.preview,
            "copy_text": notifier.last_copied,
            "badge": notifier.badge_label(),
            "quote": notifier.quote,
            "notices": notifier.drain_notices(),
        }

    def _run(action):
        try:
            action()
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except ConfirmationRequiredError as e:
            return jsonify({"success": False, "confirm": True, "message": str(e)}), 409
        except TransitionError as e:
            return jsonify({"success": False, "message": str(e)}), 409
        return jsonify({"success": True, **_state_payload()}), 200

    def _body() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/tracker", methods=["GET"], endpoint="tracker_state")
    def tracker_state():
        return jsonify(_state_payload())

    @app.route("/api/tracker/user", methods=["POST"], endpoint="tracker_user")
    def tracker_user():
        return _run(lambda: tracker.set_user_name(str(_body().get("name") or "")))

    @app.route("/api/tracker/auto-share", methods=["POST"], endpoint="tracker_auto_share")
    def tracker_auto_share():
        return _run(lambda: tracker.set_auto_share(bool(_body().get("enabled"))))

    @app.route("/api/tracker/toggle", methods=["POST"], endpoint="tracker_toggle")
    def tracker_toggle():
        return _run(tracker.toggle)

    @app.route("/api/tracker/clock-in", methods=["POST"], endpoint="tracker_clock_in")
    def tracker_clock_in():
        return _run(tracker.clock_in)

    @app.route("/api/tracker/clock-out", methods=["POST"], endpoint="tracker_clock_out")
    def tracker_clock_out():
        return _run(tracker.request_clock_out)

    @app.route("/api/tracker/cancel", methods=["POST"], endpoint="tracker_cancel")
    def tracker_cancel():
        return _run(tracker.cancel_clock_out)

    @app.route("/api/tracker/leave", methods=["POST"], endpoint="tracker_leave")
    def tracker_leave():
        body = _body()

        def _add():
            try:
                kind = RecordKind(body.get("kind") or RecordKind.PAID_OFF.value)
            except ValueError:
                raise ValidationError(f"unknown leave kind: {body.get('kind')!r}") from None
            on_date = require_iso_date(body["date"], "date") if body.get("date") is not None else None
            tracker.add_leave(kind, on_date, confirmed=bool(body.get("confirm")))

        return _run(_add)

    @app.route("/api/tracker/records/<int:record_id>", methods=["DELETE"], endpoint="tracker_delete")
    def tracker_delete(record_id: int):
        return _run(lambda: tracker.delete_record(record_id))

    @app.route("/api/tracker/clear", methods=["POST"], endpoint="tracker_clear")
    def tracker_clear():
        return _run(tracker.clear_all)

    @app.route("/api/tracker/history", methods=["GET"], endpoint="tracker_history")
    def tracker_history():
        return jsonify([asdict(item) for item in tracker.history()])

    @app.route("/api/tracker/periods", methods=["GET"], endpoint="tracker_periods")
    def tracker_periods():
        periods = half_month_periods(tracker.now().date())
        return jsonify([{"value": p.value, "label": p.label} for p in periods] + [{"value": "custom", "label": "Custom Range..."}])

    @app.route("/api/tracker/report", methods=["GET"], endpoint="tracker_report")
    def tracker_report():
        try:
            period = resolve_period(
                request.args.get("period"),
                start=request.args.get("start"),
                end=request.args.get("end"),
                today=tracker.now().date(),
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        report = tracker.report(period)
        return jsonify(
            {
                "success": True,
                "period": {"value": period.value, "label": period.label},
                "lines": report.lines,
                "total": report.total_label,
                "total_minutes": report.total_minutes,
                "text": report.text,
            }
        )

    @app.route("/api/tracker/report/copy", methods=["POST"], endpoint="tracker_report_copy")
    def tracker_report_copy():
        text = tracker.copy_report()
        if text is None:
            return jsonify({"success": False, "message": EMPTY_REPORT_NOTICE}), 409
        return jsonify({"success": True, "text": text})

    @app.route("/api/tracker/export", methods=["GET"], endpoint="tracker_export")
    def tracker_export():
        return app.response_class(
            tracker.export_json().encode("utf-8"),
            mimetype="application/json",
            headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
        )
