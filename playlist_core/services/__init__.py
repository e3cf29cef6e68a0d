"""Services package: expose all concrete services from one import."""
from .category_service import CategoryService, ToggleOutcome
from .display_service import DisplayService
from .library_service import LibraryService
from .list_projection import ListProjection
from .search_service import matches, sanitize
from .settings_service import SettingsService

__all__ = [
    'CategoryService',
    'ToggleOutcome',
    'DisplayService',
    'LibraryService',
    'ListProjection',
    'matches',
    'sanitize',
    'SettingsService',
]
