"""Domain types: categories, sort selections and the video game record."""
import dataclasses
import datetime
from enum import Enum
from typing import FrozenSet, Optional


class Category(str, Enum):
    """A named list a video game can belong to."""

    BACKLOG = 'backlog'
    COLLECTION = 'collection'
    COMPLETION = 'completion'
    WISHLIST = 'wishlist'

    @property
    def column(self) -> str:
        """Name of the boolean storage column holding this flag."""
        return f'is_{self.value}'

    @classmethod
    def parse(cls, value) -> 'Category':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(c.value for c in cls)
            raise ValueError(f"Unknown category {value!r} (expected one of: {valid})") from None


class SortField(str, Enum):
    """Sort selections offered by every category view.

    ``DATE`` and ``METRIC`` resolve per view: completion date vs. release
    date, and playtime vs. price.
    """

    TITLE = 'title'
    PLATFORM = 'platform'
    PUBLISHER = 'publisher'
    DATE = 'date'
    METRIC = 'metric'


class SortOrder(str, Enum):
    ASCENDING = 'asc'
    DESCENDING = 'desc'

    @classmethod
    def _missing_(cls, value):
        aliases = {'ascending': cls.ASCENDING, 'descending': cls.DESCENDING}
        return aliases.get(str(value).strip().lower())


DEFAULT_SORT = (SortField.TITLE, SortOrder.ASCENDING)


@dataclasses.dataclass(frozen=True)
class GameRecord:
    """Immutable snapshot of one video game.

    ``id`` is ``None`` until the repository assigns one.  ``playtime`` is
    ``None`` when the user never entered it (distinct from ``0``).
    """

    title: str
    platform: str
    publisher: str
    release_date: Optional[datetime.date]
    price: float = 0.0
    categories: FrozenSet[Category] = frozenset()
    completion_date: Optional[datetime.date] = None
    playtime: Optional[int] = None
    image_path: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        # Accept any iterable of categories or their string names.
        object.__setattr__(self, 'categories',
                           frozenset(Category.parse(c) for c in self.categories or ()))

    def in_category(self, category: Category) -> bool:
        return Category.parse(category) in self.categories

    @property
    def is_backlog(self) -> bool:
        return Category.BACKLOG in self.categories

    @property
    def is_collection(self) -> bool:
        return Category.COLLECTION in self.categories

    @property
    def is_completion(self) -> bool:
        return Category.COMPLETION in self.categories

    @property
    def is_wishlist(self) -> bool:
        return Category.WISHLIST in self.categories

    @property
    def category_count(self) -> int:
        return len(self.categories)

    def with_category(self, category: Category, value: bool) -> 'GameRecord':
        """Return a copy with *category* added (``value=True``) or removed."""
        category = Category.parse(category)
        if value:
            categories = self.categories | {category}
        else:
            categories = self.categories - {category}
        return dataclasses.replace(self, categories=categories)

    def with_id(self, game_id: int) -> 'GameRecord':
        return dataclasses.replace(self, id=game_id)
