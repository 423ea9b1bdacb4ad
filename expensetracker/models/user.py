from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadData, URLSafeTimedSerializer
from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db, login_manager
from ..timeutils import utcnow, isoformat


def _token_serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt="auth-token")


class User(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    categories = db.relationship("Category", back_populates="user", lazy=True, cascade="all, delete-orphan")
    expenses = db.relationship("Expense", back_populates="user", lazy=True, cascade="all, delete-orphan")
    budgets = db.relationship("Budget", back_populates="user", lazy=True, cascade="all, delete-orphan")

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def generate_token(self) -> str:
        return _token_serializer().dumps({"uid": self.id})

    @staticmethod
    def from_token(token: str):
        """Resolve a bearer token to its user; None if the token is forged or expired."""
        try:
            data = _token_serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
        except BadData:
            return None
        user_id = data.get("uid") if isinstance(data, dict) else None
        if user_id is None:
            return None
        return db.session.get(User, user_id)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "createdAt": isoformat(self.created_at),
        }


@login_manager.request_loader
def load_user_from_request(request):
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return User.from_token(token.strip())
