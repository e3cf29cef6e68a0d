"""In-memory state of one category view: displayed list plus search base."""
import logging
from typing import Callable, List, Optional

from ..models import Category, GameRecord
from .search_service import matches

RemovalListener = Callable[[int, GameRecord], None]


class ListProjection:
    """Holds the two ordered lists behind a category view.

    ``authoritative`` is what the view displays; while a search is active
    it is a filtered subset.  ``working_copy`` is the unfiltered list as
    loaded from storage and serves as the base for every search, so
    repeated searches never compound.

    Records are correlated between the two lists by id only: positions
    differ as soon as a filter is applied.

    Args:
        category:   The category this view shows.
        on_removed: Optional callback ``(index, record)`` fired whenever a
                    record leaves ``authoritative`` (e.g. to animate a row
                    removal at that index).
    """

    def __init__(self, category: Category,
                 on_removed: Optional[RemovalListener] = None) -> None:
        self.category = Category.parse(category)
        self.authoritative: List[GameRecord] = []
        self.working_copy: List[GameRecord] = []
        self.query = ''
        self._on_removed = on_removed
        self._log = logging.getLogger(f'playlist.projection.{self.category.value}')

    # ------------------------------------------------------------------
    # Reload protocol
    # ------------------------------------------------------------------

    def load(self, records: List[GameRecord]) -> None:
        """Replace the displayed list; the working copy is left alone."""
        self.authoritative = list(records)

    def snapshot(self) -> None:
        """Copy the displayed list into the working copy.  Call after every reload."""
        self.working_copy = list(self.authoritative)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def apply_filter(self, predicate: Callable[[GameRecord], bool]) -> List[GameRecord]:
        """Filter the working copy and display the result."""
        self.authoritative = [r for r in self.working_copy if predicate(r)]
        return list(self.authoritative)

    def search(self, query: str) -> List[GameRecord]:
        """Display the working-copy records whose title matches *query*.

        An empty query restores the full working copy.
        """
        self.query = query or ''
        return self.apply_filter(lambda record: matches(self.query, record.title))

    # ------------------------------------------------------------------
    # In-place patches
    # ------------------------------------------------------------------

    @staticmethod
    def _index_of(records: List[GameRecord], game_id: int) -> int:
        for index, record in enumerate(records):
            if record.id == game_id:
                return index
        return -1

    def patch_category_flag(self, game_id: int, category: Category, value: bool) -> None:
        """Apply a category change already persisted for *game_id*.

        The record is updated wherever it appears.  When this view's own
        category was cleared the record also leaves the displayed list; it
        stays in the working copy (with the flag cleared) until the next
        reload.
        """
        category = Category.parse(category)
        for records in (self.authoritative, self.working_copy):
            index = self._index_of(records, game_id)
            if index != -1:
                records[index] = records[index].with_category(category, value)

        if not value and category is self.category:
            index = self._index_of(self.authoritative, game_id)
            if index != -1:
                self._remove_displayed(index)

    def remove_by_id(self, game_id: int) -> None:
        """Drop *game_id* from both lists (deleted from storage)."""
        index = self._index_of(self.authoritative, game_id)
        if index != -1:
            self._remove_displayed(index)
        index = self._index_of(self.working_copy, game_id)
        if index != -1:
            del self.working_copy[index]

    def _remove_displayed(self, index: int) -> None:
        record = self.authoritative.pop(index)
        self._log.debug("Removed video game %s at position %d", record.id, index)
        if self._on_removed is not None:
            self._on_removed(index, record)

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    def ids(self) -> List[int]:
        return [record.id for record in self.authoritative]

    def __len__(self) -> int:
        return len(self.authoritative)

    @property
    def is_empty(self) -> bool:
        return not self.authoritative
