"""JSON file persistence shared by the file-backed repositories."""
import json
import logging
import os
import tempfile
from typing import Any

from ..exceptions import StorageError


class JsonFileRepository:
    """Keeps a JSON document in ``self.data`` and persists it atomically.

    A missing or unreadable file yields the caller's *default*, so a fresh
    install (or a hand-mangled file) starts from defaults instead of failing.
    Writes go to a sibling temp file that is renamed over the target, which
    means a crash never leaves a half-written document behind.
    """

    def __init__(self, file_path: str) -> None:
        self._path = file_path
        self._log = logging.getLogger(f'playlist.repository.{type(self).__name__}')

    @property
    def path(self) -> str:
        return self._path

    def _load(self, default: Any) -> Any:
        """Load JSON from *self._path*, returning *default* on missing/corrupt file."""
        if not os.path.exists(self._path):
            return default
        try:
            with open(self._path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            self._log.warning("Could not load %s: %s", self._path, exc)
            return default
        if not isinstance(data, type(default)):
            self._log.warning("Ignoring %s: expected a JSON %s", self._path,
                              type(default).__name__)
            return default
        return data

    def _save(self, data: Any) -> None:
        """Atomically write *data* as JSON to *self._path*.

        Raises:
            StorageError: the temp file could not be written or renamed.
        """
        dir_name = os.path.dirname(os.path.abspath(self._path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix='.tmp')
        except OSError as exc:
            raise StorageError(f"Could not write {self._path}: {exc}") from exc
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StorageError(f"Could not write {self._path}: {exc}") from exc
