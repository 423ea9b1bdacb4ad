import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateName, HasDependents, LastCategory, NotFound
from ..models import Category, Expense
from ..models.category import DEFAULT_COLOR, DEFAULT_ICON

logger = logging.getLogger(__name__)

# Starter set given to every new account
DEFAULT_CATEGORIES = [
    ("Food", "#ef4444", "Utensils"),
    ("Transport", "#3b82f6", "Car"),
    ("Bills", "#f59e0b", "Receipt"),
    ("Shopping", "#8b5cf6", "ShoppingBag"),
    ("Entertainment", "#10b981", "Film"),
]


def get_owned_category(session, user_id, category_id, for_update=False):
    query = session.query(Category).filter(Category.id == category_id, Category.user_id == user_id)
    if for_update:
        query = query.with_for_update()
    category = query.first()
    if category is None:
        raise NotFound("Category not found")
    return category


def _count_expenses(session, user_id, category_id):
    return (
        session.query(func.count(Expense.id))
        .filter(Expense.user_id == user_id, Expense.category_id == category_id)
        .scalar()
    )


def _name_taken(session, user_id, name, exclude_id=None):
    query = session.query(Category.id).filter(Category.user_id == user_id, Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def _commit_unique(session):
    # The unique constraint still catches a concurrent insert that slipped past _name_taken
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise DuplicateName()


def list_categories(session, user_id):
    """Return ``(category, expense_count)`` pairs ordered by name."""
    rows = (
        session.query(Category, func.count(Expense.id))
        .outerjoin(Expense, Expense.category_id == Category.id)
        .filter(Category.user_id == user_id)
        .group_by(Category.id)
        .order_by(Category.name)
        .all()
    )
    return [(category, count) for category, count in rows]


def get_category(session, user_id, category_id):
    category = get_owned_category(session, user_id, category_id)
    return category, _count_expenses(session, user_id, category.id)


def create_category(session, user_id, name, color=None, icon=None):
    name = name.strip()
    if _name_taken(session, user_id, name):
        raise DuplicateName()

    category = Category(
        user_id=user_id,
        name=name,
        color=color or DEFAULT_COLOR,
        icon=icon or DEFAULT_ICON,
    )
    session.add(category)
    _commit_unique(session)
    logger.info("Category %s created for user %s", category.id, user_id)
    return category


def update_category(session, user_id, category_id, name=None, color=None, icon=None):
    category = get_owned_category(session, user_id, category_id)

    if name is not None:
        name = name.strip()
        if name != category.name and _name_taken(session, user_id, name, exclude_id=category.id):
            raise DuplicateName()
        category.name = name
    if color is not None:
        category.color = color
    if icon is not None:
        category.icon = icon

    _commit_unique(session)
    logger.info("Category %s updated for user %s", category.id, user_id)
    return category


def delete_category(session, user_id, category_id):
    category = get_owned_category(session, user_id, category_id)

    if _count_expenses(session, user_id, category.id) > 0:
        logger.info("Refusing to delete category %s: expenses still reference it", category.id)
        raise HasDependents()

    remaining = session.query(func.count(Category.id)).filter(Category.user_id == user_id).scalar()
    if remaining <= 1:
        logger.info("Refusing to delete category %s: last category of user %s", category.id, user_id)
        raise LastCategory()

    session.delete(category)
    session.commit()
    logger.info("Category %s deleted for user %s", category_id, user_id)


def seed_default_categories(session, user_id):
    """Add the starter categories for a new user. The caller commits."""
    categories = [
        Category(user_id=user_id, name=name, color=color, icon=icon)
        for name, color, icon in DEFAULT_CATEGORIES
    ]
    session.add_all(categories)
    return categories
