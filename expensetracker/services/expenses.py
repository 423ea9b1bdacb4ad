import logging
import math

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from ..errors import InvalidAmount, InvalidDate, NotFound, ValidationError
from ..models import Expense
from ..timeutils import end_of_day, midday, parse_datetime, start_of_day
from .categories import get_owned_category

logger = logging.getLogger(__name__)


def parse_amount(value):
    """Coerce an expense amount to a positive finite float or raise InvalidAmount."""
    if isinstance(value, bool):
        raise InvalidAmount()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidAmount()
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmount()
    return amount


def parse_expense_date(value):
    parsed = parse_datetime(value)
    if parsed is None:
        raise InvalidDate()
    # pin to midday so the calendar day survives any client offset
    return midday(parsed)


def parse_filter_date(value, boundary):
    if value in (None, ""):
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise InvalidDate()
    return boundary(parsed)


def parse_filter_id(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid categoryId")


def _to_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    # zero is treated like a missing value
    return number or default


def clamp_pagination(page, limit, default_limit, max_limit):
    page = max(1, _to_int(page, 1))
    limit = min(max_limit, max(1, _to_int(limit, default_limit)))
    return page, limit


def get_owned_expense(session, user_id, expense_id):
    expense = (
        session.query(Expense)
        .options(joinedload(Expense.category))
        .filter(Expense.id == expense_id, Expense.user_id == user_id)
        .first()
    )
    if expense is None:
        raise NotFound("Expense not found")
    return expense


def list_expenses(session, user_id, default_limit, max_limit, start_date=None, end_date=None,
                  category_id=None, page=None, limit=None):
    """Return ``(expenses, pagination)`` for one page of the user's expenses, newest first."""
    page, limit = clamp_pagination(page, limit, default_limit, max_limit)
    start = parse_filter_date(start_date, start_of_day)
    end = parse_filter_date(end_date, end_of_day)
    category_id = parse_filter_id(category_id)

    query = session.query(Expense).filter(Expense.user_id == user_id)
    if start is not None:
        query = query.filter(Expense.date >= start)
    if end is not None:
        query = query.filter(Expense.date <= end)
    if category_id is not None:
        query = query.filter(Expense.category_id == category_id)

    total = query.count()
    expenses = (
        query.options(joinedload(Expense.category))
        .order_by(Expense.date.desc(), Expense.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    pagination = {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit),
    }
    return expenses, pagination


def get_expense(session, user_id, expense_id):
    return get_owned_expense(session, user_id, expense_id)


def create_expense(session, user_id, amount, description, date, category_id):
    amount = parse_amount(amount)
    date = parse_expense_date(date)
    get_owned_category(session, user_id, category_id)

    expense = Expense(
        user_id=user_id,
        category_id=category_id,
        amount=amount,
        description=description,
        date=date,
    )
    session.add(expense)
    session.commit()
    logger.info("Expense %s created for user %s", expense.id, user_id)
    return expense


def update_expense(session, user_id, expense_id, **fields):
    expense = get_owned_expense(session, user_id, expense_id)

    changes = {}
    if "category_id" in fields:
        changes["category"] = get_owned_category(session, user_id, fields["category_id"])
    if "amount" in fields:
        changes["amount"] = parse_amount(fields["amount"])
    if "date" in fields:
        changes["date"] = parse_expense_date(fields["date"])
    if "description" in fields:
        changes["description"] = fields["description"]

    for attr, value in changes.items():
        setattr(expense, attr, value)
    session.commit()
    logger.info("Expense %s updated for user %s", expense.id, user_id)
    return expense


def delete_expense(session, user_id, expense_id):
    expense = get_owned_expense(session, user_id, expense_id)
    session.delete(expense)
    session.commit()
    logger.info("Expense %s deleted for user %s", expense_id, user_id)


def spent_in_range(session, user_id, category_id, start, end):
    """Sum of the user's expenses in ``category_id`` dated within [start, end]."""
    total = (
        session.query(func.coalesce(func.sum(Expense.amount), 0.0))
        .filter(
            Expense.user_id == user_id,
            Expense.category_id == category_id,
            Expense.date >= start,
            Expense.date <= end,
        )
        .scalar()
    )
    return float(total or 0.0)
