"""Repository for per-view sort choices and user settings."""
from typing import Any, Dict, Optional

from .base import JsonFileRepository


class PreferencesRepository(JsonFileRepository):
    """Persists user preferences to a JSON file, grouped in sections.

    Schema::

        {
            "sort": {
                "<view>": {"field": "<sort field>", "order": "asc|desc"}
            },
            "settings": {
                "always_confirm_delete": <bool>,
                "display_images":        <bool>
            }
        }
    """

    def __init__(self, file_path: str = '.playlist_preferences.json') -> None:
        super().__init__(file_path)
        self.data: Dict[str, Dict[str, Any]] = self._load({})

    def find(self, section: str, key: str, default: Optional[Any] = None) -> Any:
        entries = self.data.get(section)
        if not isinstance(entries, dict):
            return default
        return entries.get(key, default)

    def upsert(self, section: str, key: str, value: Any) -> None:
        entries = self.data.get(section)
        if not isinstance(entries, dict):
            entries = self.data[section] = {}
        entries[key] = value
        self.save()

    def save(self) -> None:
        self._save(self.data)
