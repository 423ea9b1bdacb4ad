from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from ...extensions import db
from ...services import dashboard as dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("/stats")
@login_required
def stats():
    data = dashboard_service.get_stats(
        db.session,
        current_user.id,
        start_date=request.args.get("startDate"),
        end_date=request.args.get("endDate"),
        recent_limit=current_app.config["RECENT_EXPENSES"],
    )
    return jsonify(data)
