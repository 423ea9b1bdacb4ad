from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from ...extensions import db
from ...schemas import CategoryCreate, CategoryUpdate, parse_body
from ...services import categories as category_service

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.route("", methods=["GET"])
@login_required
def list_categories():
    rows = category_service.list_categories(db.session, current_user.id)
    return jsonify({"categories": [category.to_dict(expense_count=count) for category, count in rows]})


@categories_bp.route("/<int:category_id>", methods=["GET"])
@login_required
def get_category(category_id):
    category, count = category_service.get_category(db.session, current_user.id, category_id)
    return jsonify({"category": category.to_dict(expense_count=count)})


@categories_bp.route("", methods=["POST"])
@login_required
def create_category():
    payload = parse_body(CategoryCreate)
    category = category_service.create_category(
        db.session, current_user.id, payload.name, color=payload.color, icon=payload.icon
    )
    return jsonify({"message": "Category created successfully", "category": category.to_dict()}), 201


@categories_bp.route("/<int:category_id>", methods=["PUT"])
@login_required
def update_category(category_id):
    payload = parse_body(CategoryUpdate)
    category = category_service.update_category(db.session, current_user.id, category_id, **payload.provided())
    return jsonify({"message": "Category updated successfully", "category": category.to_dict()})


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
@login_required
def delete_category(category_id):
    category_service.delete_category(db.session, current_user.id, category_id)
    return jsonify({"message": "Category deleted successfully"})
