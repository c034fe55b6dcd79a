from flask import Blueprint, Response, current_app, jsonify

from ..services import end_of_day_service, report_export_service
from ..time_utils import utcnow


reports_bp = Blueprint("reports", __name__, url_prefix="/api")


def _build_today_report():
    return end_of_day_service.build_end_of_day_report(
        now=utcnow(),
        tz_name=current_app.config["STORE_TIMEZONE"],
        summarizer=current_app.extensions["summarizer"],
    )


@reports_bp.get("/end-of-day-analysis")
def end_of_day_analysis():
    """
    Today's numeric summary plus the narrative analysis, as JSON.

    A summarizer outage still answers 200 with default narrative fields and
    `analysisError`/`retryable` set.
    """
    try:
        report = _build_today_report()
    except Exception:
        current_app.logger.exception("Failed to build end-of-day analysis")
        return jsonify({"error": "Error generating analysis"}), 500

    if report.analysis_error:
        current_app.logger.warning("End-of-day analysis without narrative: %s", report.analysis_error)
    return jsonify(report.to_dict()), 200


@reports_bp.get("/end-of-day")
def end_of_day_export():
    """Today's report as the three-sheet xlsx attachment."""
    try:
        report = _build_today_report()
        content = report_export_service.render_report_xlsx(report)
    except Exception:
        current_app.logger.exception("Failed to generate end-of-day report")
        return jsonify({"error": "Error generating report"}), 500

    filename = report_export_service.export_filename(report)
    return Response(
        content,
        status=200,
        mimetype=report_export_service.XLSX_MIMETYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(content)),
        },
    )
