import logging
import threading
import typing

from sqlalchemy import Column, Text, create_engine, literal_column, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class SongEntry(Base):
    __tablename__ = "Songs"

    video_id = Column(Text, primary_key=True)
    title = Column("video_title", Text)


class RegistryError(Exception):
    pass


class DuplicateSongError(RegistryError):
    def __init__(self, video_id: str):
        super().__init__(f"A video with id {video_id} is already registered")
        self.video_id = video_id


class StorageError(RegistryError):
    pass


class SongRegistry:
    """
    Durable video id -> title table backed by SQLite.

    All storage operations are serialised behind one lock, so a single instance
    can be shared by every command handler. Calls block; async callers should
    run them in an executor.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._lock = threading.Lock()
        self._engine = create_engine(
            f"sqlite:///{db_path}", connect_args={"check_same_thread": False}
        )
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, autocommit=False
        )
        try:
            with self._lock:
                Base.metadata.create_all(self._engine)
        except SQLAlchemyError:
            logger.exception("Failed to create songs table in %s", db_path)

    def insert(self, video_id: str, title: str):
        """
        Stores a new song
        :param video_id: the video's id, must not already be registered
        :param title: the video's title
        :return:
        """
        if not video_id:
            raise RegistryError("Video id must not be empty")
        with self._lock:
            db = self._session_factory()
            try:
                db.add(SongEntry(video_id=video_id, title=title))
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateSongError(video_id) from e
            except SQLAlchemyError as e:
                db.rollback()
                raise StorageError(f"Failed to store video due to error: {e}") from e
            finally:
                db.close()
        logger.info("Registered %s as %r", video_id, title)

    def find_by_title_contains(self, query: str) -> list[tuple[str, str]]:
        """
        Case-insensitive substring search over titles, in insertion order.
        Storage failures are logged and yield no results.
        """
        try:
            songs = self._all_songs()
        except SQLAlchemyError:
            logger.exception("Failed to read songs from %s", self.db_path)
            return []
        query = query.lower()
        return [
            (video_id, title or "")
            for video_id, title in songs
            if query in (title or "").lower()
        ]

    def _all_songs(self) -> list[tuple[str, typing.Optional[str]]]:
        with self._lock:
            db = self._session_factory()
            try:
                rows = db.execute(
                    select(SongEntry.video_id, SongEntry.title).order_by(
                        literal_column("rowid")
                    )
                ).all()
            finally:
                db.close()
        return [(video_id, title) for video_id, title in rows]

    def close(self):
        self._engine.dispose()
