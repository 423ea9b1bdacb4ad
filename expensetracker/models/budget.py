from ..extensions import db
from ..timeutils import utcnow, isoformat

PERIODS = ("weekly", "monthly", "quarterly", "yearly")


class Budget(db.Model):
    __tablename__ = "budgets"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    period = db.Column(db.String(20), nullable=False)  # label only, never drives the range
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="budgets")
    category = db.relationship("Category", back_populates="budgets")

    __table_args__ = (
        db.Index("ix_budgets_user_category", "user_id", "category_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "amount": self.amount,
            "period": self.period,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "categoryId": self.category_id,
            "category": self.category.summary() if self.category else None,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
