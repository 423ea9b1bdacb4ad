from ..extensions import db
from ..timeutils import utcnow, isoformat

DEFAULT_COLOR = "#3b82f6"
DEFAULT_ICON = "Wallet"


class Category(db.Model):
    __tablename__ = "categories"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(20), nullable=False, default=DEFAULT_COLOR)
    icon = db.Column(db.String(50), nullable=False, default=DEFAULT_ICON)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="categories")
    expenses = db.relationship("Expense", back_populates="category", lazy=True)
    # Budgets go with their category; expenses block deletion instead
    budgets = db.relationship("Budget", back_populates="category", lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("user_id", "name", name="uq_user_category_name"),
    )

    def summary(self):
        return {"id": self.id, "name": self.name, "color": self.color, "icon": self.icon}

    def to_dict(self, expense_count=None):
        data = self.summary()
        data.update({
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        })
        if expense_count is not None:
            data["_count"] = {"expenses": expense_count}
        return data
