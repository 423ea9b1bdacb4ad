from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from ...extensions import db
from ...schemas import ExpenseCreate, ExpenseUpdate, parse_body
from ...services import expenses as expense_service

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.route("", methods=["GET"])
@login_required
def list_expenses():
    expenses, pagination = expense_service.list_expenses(
        db.session,
        current_user.id,
        default_limit=current_app.config["DEFAULT_PAGE_SIZE"],
        max_limit=current_app.config["MAX_PAGE_SIZE"],
        start_date=request.args.get("startDate"),
        end_date=request.args.get("endDate"),
        category_id=request.args.get("categoryId"),
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return jsonify({
        "expenses": [expense.to_dict() for expense in expenses],
        "pagination": pagination,
    })


@expenses_bp.route("/<int:expense_id>", methods=["GET"])
@login_required
def get_expense(expense_id):
    expense = expense_service.get_expense(db.session, current_user.id, expense_id)
    return jsonify({"expense": expense.to_dict()})


@expenses_bp.route("", methods=["POST"])
@login_required
def create_expense():
    payload = parse_body(ExpenseCreate)
    expense = expense_service.create_expense(
        db.session,
        current_user.id,
        amount=payload.amount,
        description=payload.description,
        date=payload.date,
        category_id=payload.category_id,
    )
    return jsonify({"message": "Expense created successfully", "expense": expense.to_dict()}), 201


@expenses_bp.route("/<int:expense_id>", methods=["PUT"])
@login_required
def update_expense(expense_id):
    payload = parse_body(ExpenseUpdate)
    expense = expense_service.update_expense(db.session, current_user.id, expense_id, **payload.provided())
    return jsonify({"message": "Expense updated successfully", "expense": expense.to_dict()})


@expenses_bp.route("/<int:expense_id>", methods=["DELETE"])
@login_required
def delete_expense(expense_id):
    expense_service.delete_expense(db.session, current_user.id, expense_id)
    return jsonify({"message": "Expense deleted successfully"})
