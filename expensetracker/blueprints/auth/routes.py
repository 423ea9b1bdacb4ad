import logging

from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from ...errors import Unauthorized, ValidationError
from ...extensions import db
from ...models import User
from ...schemas import LoginIn, RegisterIn, parse_body
from ...services.categories import seed_default_categories

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/register", methods=["POST"])
def register():
    payload = parse_body(RegisterIn)
    email = payload.email.lower()
    if User.query.filter_by(email=email).first():
        raise ValidationError("Email already registered")

    user = User(name=payload.name, email=email)
    user.set_password(payload.password)
    db.session.add(user)
    db.session.flush()  # get user.id before seeding categories
    seed_default_categories(db.session, user.id)
    db.session.commit()
    logger.info("User %s registered", user.id)

    return jsonify({
        "message": "Registration successful",
        "token": user.generate_token(),
        "user": user.to_dict(),
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    payload = parse_body(LoginIn)
    user = User.query.filter_by(email=payload.email.lower()).first()
    if not user or not user.check_password(payload.password):
        raise Unauthorized("Invalid credentials")
    return jsonify({
        "message": "Logged in successfully",
        "token": user.generate_token(),
        "user": user.to_dict(),
    })


@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})
