"""Budgets and their spend progress.

A budget covers whole UTC days: ``start_date`` is stored at the first instant
of its day and ``end_date`` at the last, so a range given as two calendar
dates includes every expense dated on either end. Budgets for the same
category may not share any instant.
"""
import logging
import math

from sqlalchemy import not_, or_
from sqlalchemy.orm import joinedload

from ..errors import InvalidAmount, InvalidDate, InvalidRange, NotFound, OverlappingBudget, ValidationError
from ..models import Budget
from ..models.budget import PERIODS
from ..timeutils import end_of_day, parse_datetime, start_of_day, utcnow
from .categories import get_owned_category
from .expenses import spent_in_range

logger = logging.getLogger(__name__)


def spend_progress(amount, spent):
    remaining = amount - spent
    percent_used = (spent / amount) * 100 if amount > 0 else 0
    return {"spent": spent, "remaining": remaining, "percentUsed": percent_used}


def with_progress(session, budget):
    spent = spent_in_range(session, budget.user_id, budget.category_id, budget.start_date, budget.end_date)
    data = budget.to_dict()
    data.update(spend_progress(budget.amount, spent))
    return data


def _parse_budget_amount(value):
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidAmount()
    if not math.isfinite(amount) or amount < 0:
        raise InvalidAmount("Amount must be zero or greater")
    return amount


def _parse_period(value):
    if value not in PERIODS:
        raise ValidationError(f"Period must be one of: {', '.join(PERIODS)}")
    return value


def _parse_bound(value, boundary, label):
    parsed = parse_datetime(value)
    if parsed is None:
        raise InvalidDate(f"Valid {label} date is required")
    return boundary(parsed)


def _check_range(start, end):
    if start.date() >= end.date():
        raise InvalidRange()


def _check_overlap(session, user_id, category_id, start, end, exclude_id=None):
    # two ranges intersect unless one ends before the other starts
    query = session.query(Budget.id).filter(
        Budget.user_id == user_id,
        Budget.category_id == category_id,
        not_(or_(Budget.end_date < start, Budget.start_date > end)),
    )
    if exclude_id is not None:
        query = query.filter(Budget.id != exclude_id)
    clash = query.first()
    if clash is not None:
        logger.info("Budget range %s..%s overlaps budget %s for user %s", start, end, clash.id, user_id)
        raise OverlappingBudget()


def get_owned_budget(session, user_id, budget_id):
    budget = (
        session.query(Budget)
        .options(joinedload(Budget.category))
        .filter(Budget.id == budget_id, Budget.user_id == user_id)
        .first()
    )
    if budget is None:
        raise NotFound("Budget not found")
    return budget


def list_budgets(session, user_id, active_only=False, now=None):
    query = (
        session.query(Budget)
        .options(joinedload(Budget.category))
        .filter(Budget.user_id == user_id)
    )
    if active_only:
        now = now or utcnow()
        query = query.filter(Budget.start_date <= now, Budget.end_date >= now)
    budgets = query.order_by(Budget.start_date.desc(), Budget.id.desc()).all()
    return [with_progress(session, budget) for budget in budgets]


def get_budget(session, user_id, budget_id):
    return with_progress(session, get_owned_budget(session, user_id, budget_id))


def create_budget(session, user_id, amount, period, start_date, end_date, category_id):
    amount = _parse_budget_amount(amount)
    period = _parse_period(period)
    start = _parse_bound(start_date, start_of_day, "start")
    end = _parse_bound(end_date, end_of_day, "end")

    _check_range(start, end)
    # row lock on the category serialises overlap check + insert per category
    get_owned_category(session, user_id, category_id, for_update=True)
    _check_overlap(session, user_id, category_id, start, end)

    budget = Budget(
        user_id=user_id,
        category_id=category_id,
        amount=amount,
        period=period,
        start_date=start,
        end_date=end,
    )
    session.add(budget)
    session.commit()
    logger.info("Budget %s created for user %s", budget.id, user_id)
    return with_progress(session, budget)


def update_budget(session, user_id, budget_id, **fields):
    budget = get_owned_budget(session, user_id, budget_id)

    amount = _parse_budget_amount(fields["amount"]) if "amount" in fields else budget.amount
    period = _parse_period(fields["period"]) if "period" in fields else budget.period
    start = (
        _parse_bound(fields["start_date"], start_of_day, "start")
        if "start_date" in fields else budget.start_date
    )
    end = (
        _parse_bound(fields["end_date"], end_of_day, "end")
        if "end_date" in fields else budget.end_date
    )
    category_id = fields.get("category_id", budget.category_id)

    _check_range(start, end)
    category = get_owned_category(session, user_id, category_id, for_update=True)
    _check_overlap(session, user_id, category_id, start, end, exclude_id=budget.id)

    budget.amount = amount
    budget.period = period
    budget.start_date = start
    budget.end_date = end
    budget.category_id = category.id
    session.commit()
    logger.info("Budget %s updated for user %s", budget.id, user_id)
    return with_progress(session, budget)


def delete_budget(session, user_id, budget_id):
    budget = get_owned_budget(session, user_id, budget_id)
    session.delete(budget)
    session.commit()
    logger.info("Budget %s deleted for user %s", budget_id, user_id)
