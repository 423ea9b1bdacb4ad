from sqlalchemy import func
from sqlalchemy.orm import joinedload

from ..errors import InvalidDate
from ..models import Category, Expense
from ..timeutils import end_of_day, month_bounds, parse_datetime, shift_months, start_of_day, utcnow
from .budgets import list_budgets


def _window_bound(value, boundary, fallback):
    if value in (None, ""):
        return fallback
    parsed = parse_datetime(value)
    if parsed is None:
        raise InvalidDate()
    return boundary(parsed)


def resolve_window(start_date=None, end_date=None, now=None):
    """Reporting window; defaults to the calendar month containing ``now``."""
    month_start, month_end = month_bounds(now or utcnow())
    start = _window_bound(start_date, start_of_day, month_start)
    end = _window_bound(end_date, end_of_day, month_end)
    return start, end


def previous_window(start, end):
    return shift_months(start, -1), shift_months(end, -1)


def percentage_change(current, previous):
    if previous <= 0:
        return 0
    return (current - previous) / previous * 100


def _totals(session, user_id, start, end):
    total, count = (
        session.query(func.coalesce(func.sum(Expense.amount), 0.0), func.count(Expense.id))
        .filter(Expense.user_id == user_id, Expense.date >= start, Expense.date <= end)
        .one()
    )
    return float(total or 0.0), count


def expenses_by_category(session, user_id, start, end):
    total = func.sum(Expense.amount)
    grouped = (
        session.query(Expense.category_id, total, func.count(Expense.id))
        .filter(Expense.user_id == user_id, Expense.date >= start, Expense.date <= end)
        .group_by(Expense.category_id)
        .order_by(total.desc())
        .all()
    )
    if not grouped:
        return []

    category_ids = [category_id for category_id, _, _ in grouped]
    categories = {
        category.id: category
        for category in session.query(Category).filter(
            Category.user_id == user_id, Category.id.in_(category_ids)
        )
    }
    return [
        {
            "category": categories[category_id].summary() if category_id in categories else None,
            "total": float(amount or 0.0),
            "count": count,
        }
        for category_id, amount, count in grouped
    ]


def recent_expenses(session, user_id, limit):
    return (
        session.query(Expense)
        .options(joinedload(Expense.category))
        .filter(Expense.user_id == user_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .limit(limit)
        .all()
    )


def get_stats(session, user_id, recent_limit, start_date=None, end_date=None, now=None):
    now = now or utcnow()
    start, end = resolve_window(start_date, end_date, now=now)
    prev_start, prev_end = previous_window(start, end)

    current_total, expense_count = _totals(session, user_id, start, end)
    previous_total, _ = _totals(session, user_id, prev_start, prev_end)

    return {
        "summary": {
            "totalExpenses": current_total,
            "expenseCount": expense_count,
            "averageExpense": current_total / expense_count if expense_count else 0,
            "percentageChange": percentage_change(current_total, previous_total),
        },
        "expensesByCategory": expenses_by_category(session, user_id, start, end),
        "recentExpenses": [expense.to_dict() for expense in recent_expenses(session, user_id, recent_limit)],
        "activeBudgets": list_budgets(session, user_id, active_only=True, now=now),
    }
