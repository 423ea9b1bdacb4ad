from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from ...extensions import db
from ...schemas import BudgetCreate, BudgetUpdate, parse_body
from ...services import budgets as budget_service

budgets_bp = Blueprint("budgets", __name__, url_prefix="/api/budgets")


@budgets_bp.route("", methods=["GET"])
@login_required
def list_budgets():
    active_only = request.args.get("active", "").lower() == "true"
    budgets = budget_service.list_budgets(db.session, current_user.id, active_only=active_only)
    return jsonify({"budgets": budgets})


@budgets_bp.route("/<int:budget_id>", methods=["GET"])
@login_required
def get_budget(budget_id):
    return jsonify({"budget": budget_service.get_budget(db.session, current_user.id, budget_id)})


@budgets_bp.route("", methods=["POST"])
@login_required
def create_budget():
    payload = parse_body(BudgetCreate)
    budget = budget_service.create_budget(
        db.session,
        current_user.id,
        amount=payload.amount,
        period=payload.period,
        start_date=payload.start_date,
        end_date=payload.end_date,
        category_id=payload.category_id,
    )
    return jsonify({"message": "Budget created successfully", "budget": budget}), 201


@budgets_bp.route("/<int:budget_id>", methods=["PUT"])
@login_required
def update_budget(budget_id):
    payload = parse_body(BudgetUpdate)
    budget = budget_service.update_budget(db.session, current_user.id, budget_id, **payload.provided())
    return jsonify({"message": "Budget updated successfully", "budget": budget})


@budgets_bp.route("/<int:budget_id>", methods=["DELETE"])
@login_required
def delete_budget(budget_id):
    budget_service.delete_budget(db.session, current_user.id, budget_id)
    return jsonify({"message": "Budget deleted successfully"})
