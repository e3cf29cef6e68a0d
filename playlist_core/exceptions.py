"""Error taxonomy shared by the repositories and services."""
from typing import Dict, Optional


class PlayListError(Exception):
    """Base class for every error the core raises."""


class ValidationError(PlayListError):
    """Raised when a record violates a field constraint on create/update.

    ``errors`` maps each offending field name to a human-readable message.
    """

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        detail = '; '.join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Invalid video game: {detail}")


class NotFoundError(PlayListError):
    """Raised when an operation references a video game id that does not exist."""

    def __init__(self, game_id: Optional[int]) -> None:
        self.game_id = game_id
        super().__init__(f"Video game {game_id} not found")


class StorageError(PlayListError):
    """Raised when the underlying database call fails for an environment reason."""


class CancelledError(PlayListError):
    """Raised by a confirmation prompt when the user backs out.

    Not a failure: callers turn it into a no-op outcome.
    """
