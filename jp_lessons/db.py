from __future__ import annotations
from sqlalchemy import create_engine, event, Integer, Float as SAFloat, String, DateTime, Text, Boolean, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session, Mapped, mapped_column
from contextlib import contextmanager
import datetime
import functools
import logging
import os
import time
import uuid
from typing import Any, Callable, Iterator, List, Optional, TypeVar

from .errors import ConstraintViolation, StorageUnavailable

DEBUG_MODE = os.getenv("DEBUG", "0") == "1"

DB_PATH: str = os.environ.get("JP_LESSONS_DB", "jp_lessons.db")
DB_URL: str = os.environ.get("JP_LESSONS_DB_URL", f"sqlite:///{DB_PATH}")
DB_TIMEOUT: float = float(os.environ.get("JP_LESSONS_DB_TIMEOUT", "5"))
DB_RETRIES: int = int(os.environ.get("JP_LESSONS_DB_RETRIES", "3"))
DB_BACKOFF: float = float(os.environ.get("JP_LESSONS_DB_BACKOFF", "0.05"))

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Nesting depth of transaction() blocks, kept in Session.info
_TX_DEPTH = "jp_lessons_tx_depth"


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, matching what SQLite hands back from DateTime columns."""
    return datetime.datetime.now(datetime.UTC).replace(tzinfo=None)


class Lesson(Base):
    __tablename__ = "lessons"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)  # display position on the lessons page


class VocabEntry(Base):
    __tablename__ = "vocab_entries"
    __table_args__ = (UniqueConstraint("lesson_id", "order", name="uq_vocab_lesson_order"),)
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    word: Mapped[str] = mapped_column(String, nullable=False)
    reading: Mapped[str] = mapped_column(String, nullable=False)  # romaji
    definition: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)  # "noun", "verb", ...
    category: Mapped[Optional[str]] = mapped_column(String)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    lesson_id: Mapped[str] = mapped_column(ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)


class KanjiEntry(Base):
    __tablename__ = "kanji_entries"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    kanji: Mapped[str] = mapped_column(String, nullable=False)
    definition: Mapped[str] = mapped_column(Text, nullable=False)
    onyomi: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)  # Chinese readings
    kunyomi: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)  # Native Japanese readings
    lesson_id: Mapped[str] = mapped_column(ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)


class VocabReview(Base):
    """Per-user review state of one vocabulary card."""
    __tablename__ = "vocab_reviews"
    __table_args__ = (UniqueConstraint("user", "vocab_id", name="uq_review_user_vocab"),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user: Mapped[str] = mapped_column(String, nullable=False)
    vocab_id: Mapped[str] = mapped_column(ForeignKey("vocab_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    # SRS fields
    next_review: Mapped[datetime.datetime] = mapped_column(DateTime, default=utcnow)
    interval: Mapped[int] = mapped_column(Integer, default=1)
    ease_factor: Mapped[float] = mapped_column(SAFloat, default=2.5)
    repetitions: Mapped[int] = mapped_column(Integer, default=0)
    success_count: Mapped[int] = mapped_column(Integer, default=0)  # 0 = never answered correctly
    last_reviewed: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> Engine:
    """Create an engine with a bounded connect timeout and enforced foreign keys."""
    if url.startswith("sqlite"):
        connect_args: dict[str, Any] = {"timeout": DB_TIMEOUT}
    else:
        connect_args = {"connect_timeout": int(DB_TIMEOUT)}
    eng = create_engine(url, echo=DEBUG_MODE, connect_args=connect_args)
    if eng.dialect.name == "sqlite":
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


engine: Engine = make_engine(DB_URL)
# Prevent attribute expiration on commit so returned objects remain accessible
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def init_db(url: Optional[str] = None) -> None:
    """Create all tables. Passing a URL rebinds the process-wide engine first."""
    global engine, SessionLocal
    if url is not None:
        engine.dispose()
        engine = make_engine(url)
        SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    logger.debug("Database initialized at %s", engine.url)


def close_db() -> None:
    """Release every pooled connection. Call once at process exit."""
    engine.dispose()


def get_session() -> Session:
    return SessionLocal()


def in_transaction(session: Session) -> bool:
    return session.info.get(_TX_DEPTH, 0) > 0


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Unit of work around a repository call.

    The outermost block commits or rolls back; nested blocks only flush, so
    an admin procedure calling several repository functions stays atomic.
    SQLAlchemy errors are translated into the store's own exceptions.
    """
    depth = session.info.get(_TX_DEPTH, 0)
    session.info[_TX_DEPTH] = depth + 1
    try:
        yield session
        if depth == 0:
            session.commit()
        else:
            session.flush()
    except IntegrityError as exc:
        if depth == 0:
            session.rollback()
        raise ConstraintViolation(str(exc.orig)) from exc
    except OperationalError as exc:
        if depth == 0:
            session.rollback()
        raise StorageUnavailable(str(exc.orig)) from exc
    except Exception:
        if depth == 0:
            session.rollback()
        raise
    finally:
        session.info[_TX_DEPTH] = depth


def retry_unavailable(func: F) -> F:
    """Retry a repository call on transient connectivity errors.

    The wrapped function takes the session as its first argument. Inside an
    outer transaction the error propagates untouched, since only the
    outermost caller can roll back and start over.
    """
    @functools.wraps(func)
    def wrapper(session: Session, *args: Any, **kwargs: Any) -> Any:
        attempts = max(1, DB_RETRIES)
        for attempt in range(1, attempts + 1):
            try:
                return func(session, *args, **kwargs)
            except (OperationalError, StorageUnavailable) as exc:
                if in_transaction(session):
                    raise
                session.rollback()
                if attempt == attempts:
                    if isinstance(exc, StorageUnavailable):
                        raise
                    raise StorageUnavailable(str(exc.orig)) from exc
                delay = DB_BACKOFF * 2 ** (attempt - 1)
                logger.warning("%s: storage unavailable (%s), retry %d/%d in %.2fs",
                               func.__name__, exc, attempt, attempts - 1, delay)
                time.sleep(delay)
        raise AssertionError("unreachable")
    return wrapper  # type: ignore[return-value]
