"""Business logic for adding games to and removing them from categories."""
import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from ..exceptions import CancelledError
from ..models import Category, GameRecord
from ..repositories.video_game_repository import VideoGameRepository
from .list_projection import ListProjection
from .settings_service import SettingsService

Confirm = Callable[[str], bool]

DELETE_MESSAGE = "This video game will be permanently deleted."
LAST_CATEGORY_MESSAGE = "This is the last category the video game belongs to."


class ToggleOutcome(str, Enum):
    ADDED = 'added'
    REMOVED = 'removed'
    DELETED = 'deleted'
    CANCELLED = 'cancelled'


class CategoryService:
    """Toggles category membership without ever leaving a game in no category.

    Rules
    -----
    * Toggling a category the game is not in adds it.
    * Toggling a category the game is in removes it, unless it is the
      game's last category: then the whole game is deleted, after asking
      *confirm* when the "always confirm" setting is on.
    * Membership counts are read from storage, under the repository lock,
      right before deciding; in-memory flags are never trusted.
    * Projections are patched only after storage succeeded.  Storage
      errors propagate and leave every projection untouched.

    Args:
        repository: The game store.
        settings:   Source of the ``always_confirm_delete`` flag; without
                    one, confirmation is always requested.
        confirm:    ``confirm(message) -> bool``.  It may also raise
                    :class:`CancelledError`.  Without one, every
                    confirmation is treated as declined.
    """

    def __init__(self, repository: VideoGameRepository,
                 settings: Optional[SettingsService] = None,
                 confirm: Optional[Confirm] = None) -> None:
        self._repo = repository
        self._settings = settings
        self._confirm = confirm
        self._log = logging.getLogger('playlist.category')

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def toggle_category(self, game_id: int, category: Category,
                        projections: Iterable[ListProjection] = ()) -> ToggleOutcome:
        """Flip *category* for *game_id* and patch every open *projections*.

        Raises:
            NotFoundError: *game_id* does not exist.
            StorageError:  the database call failed.
        """
        category = Category.parse(category)
        with self._repo.lock:
            record = self._repo.read_one(game_id)
            if not record.in_category(category):
                self._repo.set_category_flag(game_id, category, True)
                outcome = ToggleOutcome.ADDED
            elif self._repo.category_count(game_id) > 1:
                self._repo.set_category_flag(game_id, category, False)
                outcome = ToggleOutcome.REMOVED
            else:
                outcome = None

        if outcome is None:
            outcome = self._remove_last_category(record, category)

        self._log.info("Toggle %s on video game %d: %s", category.value, game_id, outcome.value)
        self._patch(projections, game_id, category, outcome)
        return outcome

    def delete_game(self, game_id: int,
                    projections: Iterable[ListProjection] = ()) -> ToggleOutcome:
        """Delete *game_id* outright (after confirmation, if enabled)."""
        record = self._repo.read_one(game_id)
        if not self._ask(f"Delete {record.title}? {DELETE_MESSAGE}"):
            return ToggleOutcome.CANCELLED
        self._repo.delete(game_id)
        for projection in projections:
            projection.remove_by_id(game_id)
        return ToggleOutcome.DELETED

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _remove_last_category(self, record: GameRecord, category: Category) -> ToggleOutcome:
        message = f"Delete {record.title}? {LAST_CATEGORY_MESSAGE} {DELETE_MESSAGE}"
        if not self._ask(message):
            return ToggleOutcome.CANCELLED

        # The prompt ran unlocked; another view may have changed the game since.
        # Only a game whose sole category is still *category* gets deleted.
        with self._repo.lock:
            current = self._repo.read_one(record.id)
            if not current.in_category(category):
                return ToggleOutcome.REMOVED
            if current.category_count > 1:
                self._repo.set_category_flag(record.id, category, False)
                return ToggleOutcome.REMOVED
            self._repo.delete(record.id)
        return ToggleOutcome.DELETED

    def _ask(self, message: str) -> bool:
        if self._settings is not None and not self._settings.always_confirm_delete:
            return True
        if self._confirm is None:
            self._log.warning("No confirmation prompt configured; not deleting")
            return False
        try:
            confirmed = bool(self._confirm(message))
        except CancelledError:
            confirmed = False
        if not confirmed:
            self._log.debug("Deletion cancelled by user")
        return confirmed

    @staticmethod
    def _patch(projections: Iterable[ListProjection], game_id: int,
               category: Category, outcome: ToggleOutcome) -> None:
        for projection in projections:
            if outcome is ToggleOutcome.ADDED:
                projection.patch_category_flag(game_id, category, True)
            elif outcome is ToggleOutcome.REMOVED:
                projection.patch_category_flag(game_id, category, False)
            elif outcome is ToggleOutcome.DELETED:
                projection.remove_by_id(game_id)
