"""Business logic for user settings and per-view sort preferences."""
import logging
from typing import Tuple

from ..models import DEFAULT_SORT, SortField, SortOrder
from ..repositories.preferences_repository import PreferencesRepository

_SORT = 'sort'
_SETTINGS = 'settings'


class SettingsService:
    """Reads and writes user preferences, delegating persistence to
    :class:`~playlist_core.repositories.preferences_repository.PreferencesRepository`.

    Rules
    -----
    * Every category view keeps its own sort choice, keyed by view name;
      a view with no stored choice sorts by title, ascending.
    * ``always_confirm_delete`` and ``display_images`` default to ``True``.
    * Unreadable stored values fall back to the defaults.
    """

    def __init__(self, repository: PreferencesRepository) -> None:
        self._repo = repository
        self._log = logging.getLogger('playlist.settings')

    # ------------------------------------------------------------------
    # Sort preferences
    # ------------------------------------------------------------------

    def get_sort_preference(self, view: str) -> Tuple[SortField, SortOrder]:
        """Return the stored ``(field, order)`` for *view*, or the default."""
        stored = self._repo.find(_SORT, str(view))
        if not stored:
            return DEFAULT_SORT
        try:
            return SortField(stored['field']), SortOrder(stored['order'])
        except (KeyError, TypeError, ValueError):
            self._log.warning("Ignoring invalid sort preference for %s: %r", view, stored)
            return DEFAULT_SORT

    def set_sort_preference(self, view: str, field: SortField, order: SortOrder) -> None:
        field, order = SortField(field), SortOrder(order)
        self._repo.upsert(_SORT, str(view), {'field': field.value, 'order': order.value})
        self._log.debug("Sort preference for %s set to %s %s", view, field.value, order.value)

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def _get_flag(self, key: str, default: bool = True) -> bool:
        value = self._repo.find(_SETTINGS, key, default)
        if not isinstance(value, bool):
            self._log.warning("Ignoring invalid %s setting: %r", key, value)
            return default
        return value

    @property
    def always_confirm_delete(self) -> bool:
        """Whether deleting a game asks the user first."""
        return self._get_flag('always_confirm_delete')

    def set_always_confirm_delete(self, enabled: bool) -> None:
        self._repo.upsert(_SETTINGS, 'always_confirm_delete', bool(enabled))

    @property
    def display_images(self) -> bool:
        """Whether cover art is shown in lists and details."""
        return self._get_flag('display_images')

    def set_display_images(self, enabled: bool) -> None:
        self._repo.upsert(_SETTINGS, 'display_images', bool(enabled))
