"""Business logic for loading category views and editing the library."""
import logging
from typing import List, Optional

from ..models import Category, GameRecord, SortField, SortOrder
from ..repositories.video_game_repository import VideoGameRepository
from .list_projection import ListProjection
from .settings_service import SettingsService


class LibraryService:
    """Loads category views in their preferred order and forwards edits to
    :class:`~playlist_core.repositories.video_game_repository.VideoGameRepository`.

    Views are keyed by category name, so each category remembers its own
    sort choice.
    """

    def __init__(self, repository: VideoGameRepository, settings: SettingsService) -> None:
        self._repo = repository
        self._settings = settings
        self._log = logging.getLogger('playlist.library')

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def list_view(self, category: Category,
                  field: Optional[SortField] = None,
                  order: Optional[SortOrder] = None) -> List[GameRecord]:
        """Return *category*'s games sorted by the given or stored preference.

        Passing *field* and/or *order* also stores them as the view's new
        preference; the omitted half keeps its stored value.
        """
        category = Category.parse(category)
        stored_field, stored_order = self._settings.get_sort_preference(category.value)
        if field is not None or order is not None:
            field = SortField(field) if field is not None else stored_field
            order = SortOrder(order) if order is not None else stored_order
            self._settings.set_sort_preference(category.value, field, order)
        else:
            field, order = stored_field, stored_order
        return self._repo.list_by_category(category, field, order)

    def load_projection(self, projection: ListProjection) -> List[GameRecord]:
        """Fully reload *projection* from storage and re-apply its search."""
        projection.load(self.list_view(projection.category))
        projection.snapshot()
        if projection.query:
            projection.search(projection.query)
        return list(projection.authoritative)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_game(self, record: GameRecord) -> int:
        return self._repo.create(record)

    def edit_game(self, game_id: int, record: GameRecord) -> None:
        self._repo.update(game_id, record)

    def read_game(self, game_id: int) -> GameRecord:
        return self._repo.read_one(game_id)

    def total_games(self) -> int:
        return self._repo.count()

    def delete_all_games(self) -> bool:
        """Delete every game.  Returns ``False`` when there was nothing to delete."""
        if self._repo.count() == 0:
            self._log.info("Library already empty; nothing to delete")
            return False
        self._repo.delete_all()
        return True
