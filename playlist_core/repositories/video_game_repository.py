"""Repository for the video game table."""
import contextlib
import logging
import threading
from typing import Iterator, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import database
from database import PLAYTIME_ABSENT, VideoGame
from ..exceptions import NotFoundError, StorageError, ValidationError
from ..models import Category, DEFAULT_SORT, GameRecord, SortField, SortOrder
from ..query import build_order_by
from ..validation import validate_record


class VideoGameRepository:
    """Create/read/update/delete access to the ``video_games`` table.

    Every call opens its own session and commits before returning; calls are
    serialized through a re-entrant lock so several category views sharing
    one repository never interleave a read with another view's write.
    Callers that need a read-then-write to be atomic hold :attr:`lock`
    around both calls.

    Errors:
        * :class:`ValidationError` for bad fields, raised before any
          storage call (and for constraint violations reported by the DB).
        * :class:`NotFoundError` when the id does not exist.
        * :class:`StorageError` for any other database failure.
    """

    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory or database.SessionLocal
        self._lock = threading.RLock()
        self._log = logging.getLogger('playlist.repository.video_games')

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @contextlib.contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            db = self._session_factory()
            try:
                yield db
            except IntegrityError as exc:
                db.rollback()
                self._log.warning("Constraint violated: %s", exc.orig)
                raise ValidationError({'record': str(exc.orig)}) from exc
            except SQLAlchemyError as exc:
                db.rollback()
                self._log.error("Database error: %s", exc)
                raise StorageError(str(exc)) from exc
            finally:
                db.close()

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _to_record(row: VideoGame) -> GameRecord:
        categories = frozenset(c for c in Category if getattr(row, c.column))
        return GameRecord(
            id=row.id,
            title=row.title,
            platform=row.platform,
            publisher=row.publisher,
            release_date=row.release_date,
            completion_date=row.completion_date,
            playtime=None if row.playtime is None or row.playtime == PLAYTIME_ABSENT else row.playtime,
            price=row.price,
            categories=categories,
            image_path=row.image_path,
        )

    @staticmethod
    def _apply(row: VideoGame, record: GameRecord) -> None:
        row.title = record.title.strip()
        row.platform = record.platform.strip()
        row.publisher = record.publisher.strip()
        row.release_date = record.release_date
        row.completion_date = record.completion_date
        row.playtime = PLAYTIME_ABSENT if record.playtime is None else record.playtime
        row.price = float(record.price)
        for category in Category:
            setattr(row, category.column, category in record.categories)
        row.image_path = record.image_path

    @staticmethod
    def _get_row(db: Session, game_id: int) -> VideoGame:
        row = db.get(VideoGame, game_id)
        if row is None:
            raise NotFoundError(game_id)
        return row

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, record: GameRecord) -> int:
        """Insert *record* and return the id assigned by storage."""
        validate_record(record)
        with self._session() as db:
            row = VideoGame()
            self._apply(row, record)
            db.add(row)
            db.commit()
            self._log.info("Added video game %d (%s)", row.id, row.title)
            return row.id

    def update(self, game_id: int, record: GameRecord) -> None:
        """Replace every field of *game_id* with *record*'s (the id is kept)."""
        validate_record(record)
        with self._session() as db:
            row = self._get_row(db, game_id)
            self._apply(row, record)
            db.commit()
            self._log.info("Updated video game %d", game_id)

    def set_category_flag(self, game_id: int, category: Category, value: bool) -> None:
        """Set exactly one category flag.

        Raises:
            ValidationError: clearing the flag would leave the game in no
                category; remove the game with :meth:`delete` instead.
        """
        category = Category.parse(category)
        with self._session() as db:
            row = self._get_row(db, game_id)
            if not value and getattr(row, category.column) and self._count_flags(row) == 1:
                raise ValidationError({
                    'categories': f"{category.value} is the last category of video game {game_id}",
                })
            setattr(row, category.column, bool(value))
            db.commit()
            self._log.info("Set %s=%s on video game %d", category.column, bool(value), game_id)

    def delete(self, game_id: int) -> None:
        with self._session() as db:
            row = self._get_row(db, game_id)
            db.delete(row)
            db.commit()
            self._log.info("Deleted video game %d", game_id)

    def delete_all(self) -> None:
        """Empty the table, then check that nothing is left."""
        with self._session() as db:
            removed = db.execute(delete(VideoGame)).rowcount
            db.commit()
            remaining = db.scalar(select(func.count()).select_from(VideoGame))
            if remaining != 0:
                raise StorageError(f"{remaining} video games remain after deleting all")
            self._log.info("Deleted all %d video games", removed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def _count_flags(row: VideoGame) -> int:
        return sum(1 for c in Category if getattr(row, c.column))

    def category_count(self, game_id: int) -> int:
        """Return how many categories *game_id* currently belongs to, read from storage."""
        with self._session() as db:
            return self._count_flags(self._get_row(db, game_id))

    def read_one(self, game_id: int) -> GameRecord:
        with self._session() as db:
            return self._to_record(self._get_row(db, game_id))

    def find(self, game_id: int) -> Optional[GameRecord]:
        """Like :meth:`read_one` but returns ``None`` for a missing id."""
        try:
            return self.read_one(game_id)
        except NotFoundError:
            return None

    def count(self) -> int:
        with self._session() as db:
            return db.scalar(select(func.count()).select_from(VideoGame))

    def list_by_category(self, category: Category,
                         sort_field: SortField = DEFAULT_SORT[0],
                         sort_order: SortOrder = DEFAULT_SORT[1]) -> List[GameRecord]:
        """Return the games in *category*, ordered by the sort field then title."""
        category = Category.parse(category)
        stmt = (
            select(VideoGame)
            .where(getattr(VideoGame, category.column).is_(True))
            .order_by(*build_order_by(category, sort_field, sort_order))
        )
        with self._session() as db:
            return [self._to_record(row) for row in db.scalars(stmt)]
