"""Presentation helpers: how prices, playtimes, dates and covers are shown."""
import logging
import os
from typing import Optional
from urllib.parse import unquote, urlparse

from ..models import Category, GameRecord
from .settings_service import SettingsService


class DisplayService:
    """Formats record fields the way the list and detail screens show them.

    Cover resolution never raises: a path that no longer resolves yields
    the placeholder.
    """

    def __init__(self, settings: Optional[SettingsService] = None,
                 placeholder: Optional[str] = None) -> None:
        self._settings = settings
        self._placeholder = placeholder
        self._log = logging.getLogger('playlist.display')

    @staticmethod
    def format_price(price: float) -> str:
        if price is None or price <= 0:
            return 'Free'
        return f'${price:.2f}'

    @staticmethod
    def format_playtime(playtime: Optional[int]) -> str:
        if playtime is None or playtime <= 0:
            return 'No playtime'
        if playtime == 1:
            return '1 hour'
        return f'{playtime} hours'

    @staticmethod
    def view_date(view: Category, record: GameRecord) -> str:
        """Completion view shows the completion date; the others the release date."""
        if Category.parse(view) is Category.COMPLETION:
            if record.completion_date is None:
                return 'No completion date'
            return record.completion_date.isoformat()
        return record.release_date.isoformat() if record.release_date else ''

    def view_metric(self, view: Category, record: GameRecord) -> str:
        """Playtime in backlog/completion views, price in collection/wishlist."""
        if Category.parse(view) in (Category.BACKLOG, Category.COMPLETION):
            return self.format_playtime(record.playtime)
        return self.format_price(record.price)

    def resolve_cover(self, image_path: Optional[str]) -> Optional[str]:
        """Return a local file to display for *image_path*.

        ``None`` when images are switched off; the placeholder when the
        path is empty, uses an unsupported scheme, or no longer exists.
        """
        if self._settings is not None and not self._settings.display_images:
            return None
        if not image_path:
            return self._placeholder
        try:
            parsed = urlparse(image_path)
            if parsed.scheme == 'file':
                local = unquote(parsed.path)
            elif parsed.scheme == '' or (len(parsed.scheme) == 1 and os.name == 'nt'):
                local = image_path
            else:
                return self._placeholder
            if os.path.isfile(local):
                return local
        except (ValueError, OSError) as exc:
            self._log.debug("Cover %r unavailable: %s", image_path, exc)
        return self._placeholder
