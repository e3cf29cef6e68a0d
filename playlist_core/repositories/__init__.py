"""Repository package: expose all concrete repositories from one import."""
from .preferences_repository import PreferencesRepository
from .video_game_repository import VideoGameRepository

__all__ = [
    'PreferencesRepository',
    'VideoGameRepository',
]
