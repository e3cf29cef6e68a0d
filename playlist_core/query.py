"""Translate a (sort field, sort order) selection into a deterministic ordering."""
from typing import List

from database import VideoGame
from .models import Category, SortField, SortOrder

# Views whose "metric" column is playtime; the others sort by price.
_PLAYTIME_VIEWS = (Category.BACKLOG, Category.COMPLETION)


def resolve_sort_column(category: Category, field: SortField) -> str:
    """Return the storage column name *field* refers to inside *category*'s view."""
    category = Category.parse(category)
    field = SortField(field)
    if field is SortField.DATE:
        return 'completion_date' if category is Category.COMPLETION else 'release_date'
    if field is SortField.METRIC:
        return 'playtime' if category in _PLAYTIME_VIEWS else 'price'
    return field.value


def build_order_by(category: Category, field: SortField, order: SortOrder) -> List:
    """Return ORDER BY clauses for a category view.

    The primary column follows *order*; ties are always broken by title
    ascending and then by id, so equal titles keep insertion order.
    """
    column_name = resolve_sort_column(category, field)
    column = getattr(VideoGame, column_name)
    primary = column.desc() if SortOrder(order) is SortOrder.DESCENDING else column.asc()
    clauses = [primary]
    if column_name != 'title':
        clauses.append(VideoGame.title.asc())
    clauses.append(VideoGame.id.asc())
    return clauses
