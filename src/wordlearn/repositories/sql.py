"""SQLAlchemy implementations of the repositories."""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wordlearn.exceptions import RepositoryError
from wordlearn.models.base import as_utc
from wordlearn.models.domain import SessionKind, StudySession, UserProgress, WordItem
from wordlearn.models.models import StudySessionRecord, UserProgressRecord, WordRecord
from wordlearn.monitoring import repository_errors
from wordlearn.repositories.base import (
    ProgressRepository,
    SessionRepository,
    WordRepository,
)

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(db: Session, operation: str) -> Iterator[None]:
    """Roll back and re-raise database failures as RepositoryError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        repository_errors.labels(operation=operation).inc()
        logger.error(f"Repository operation {operation} failed: {e}")
        raise RepositoryError(f"Repository operation {operation} failed") from e


def like_pattern(query: str) -> str:
    """Substring pattern for LIKE with the wildcards in the query taken literally."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def word_from_record(record: WordRecord) -> WordItem:
    return WordItem(
        headword=record.headword,
        translation=record.translation,
        pronunciation=record.pronunciation or "",
        part_of_speech=record.part_of_speech or "",
        example=record.example or "",
        example_translation=record.example_translation or "",
        difficulty=record.difficulty,
        learning_count=record.learning_count,
        correct_count=record.correct_count,
        is_learned=record.is_learned,
        is_favorited=record.is_favorited,
        last_study_date=as_utc(record.last_study_date),
        created_at=as_utc(record.added_at),
    )


def session_from_record(record: StudySessionRecord) -> StudySession:
    return StudySession(
        kind=SessionKind(record.kind),
        start_time=as_utc(record.start_time),
        total_questions=record.total_questions,
        words=record.words.split("\n") if record.words else [],
        words_studied=record.words_studied,
        correct_answers=record.correct_answers,
        end_time=as_utc(record.end_time),
        is_completed=record.is_completed,
        id=record.id,
    )


def progress_from_record(record: UserProgressRecord) -> UserProgress:
    return UserProgress(
        total_words_learned=record.total_words_learned,
        current_streak=record.current_streak,
        longest_streak=record.longest_streak,
        total_study_time=record.total_study_time,
        level=record.level,
        experience=record.experience,
        daily_goal=record.daily_goal,
        weekly_goal=record.weekly_goal,
        last_study_date=as_utc(record.last_study_date),
        id=record.id,
    )


class SqlWordRepository(WordRepository):
    """Word repository backed by the ``words`` table."""

    def __init__(self, db: Session):
        """Initialize the repository with a database session."""
        self.db = db

    def _get_record(self, headword: str) -> Optional[WordRecord]:
        return self.db.query(WordRecord).filter(WordRecord.headword == headword).first()

    def _apply(self, word: WordItem) -> None:
        record = self._get_record(word.headword)
        if not record:
            record = WordRecord(headword=word.headword, added_at=word.created_at)
            self.db.add(record)
        record.translation = word.translation
        record.pronunciation = word.pronunciation
        record.part_of_speech = word.part_of_speech
        record.example = word.example
        record.example_translation = word.example_translation
        record.difficulty = word.difficulty
        record.learning_count = word.learning_count
        record.correct_count = word.correct_count
        record.is_learned = word.is_learned
        record.is_favorited = word.is_favorited
        record.last_study_date = word.last_study_date

    def load_all(self) -> List[WordItem]:
        with translate_errors(self.db, "load_words"):
            records = self.db.query(WordRecord).order_by(WordRecord.headword).all()
        return [word_from_record(record) for record in records]

    def save(self, word: WordItem) -> None:
        with translate_errors(self.db, "save_word"):
            self._apply(word)
            self.db.commit()

    def save_batch(self, words: List[WordItem]) -> None:
        with translate_errors(self.db, "save_words"):
            for word in words:
                self._apply(word)
                self.db.flush()
            self.db.commit()
        logger.debug(f"Saved batch of {len(words)} words")

    def delete(self, word: WordItem) -> None:
        with translate_errors(self.db, "delete_word"):
            record = self._get_record(word.headword)
            if record:
                self.db.delete(record)
                self.db.commit()

    def delete_all(self) -> None:
        with translate_errors(self.db, "delete_words"):
            self.db.query(WordRecord).delete()
            self.db.commit()

    def count(self) -> int:
        with translate_errors(self.db, "count_words"):
            return self.db.query(WordRecord).count()

    def search(self, query: str) -> List[WordItem]:
        pattern = like_pattern(query)
        with translate_errors(self.db, "search_words"):
            records = (
                self.db.query(WordRecord)
                .filter(
                    or_(
                        WordRecord.headword.ilike(pattern, escape="\\"),
                        WordRecord.translation.ilike(pattern, escape="\\"),
                        WordRecord.part_of_speech.ilike(pattern, escape="\\"),
                    )
                )
                .order_by(WordRecord.headword)
                .all()
            )
        return [word_from_record(record) for record in records]


class SqlSessionRepository(SessionRepository):
    """Session repository backed by the ``study_sessions`` table."""

    def __init__(self, db: Session):
        """Initialize the repository with a database session."""
        self.db = db

    @staticmethod
    def _apply(record: StudySessionRecord, session: StudySession) -> None:
        record.kind = session.kind.value
        record.start_time = session.start_time
        record.end_time = session.end_time
        record.words = "\n".join(session.words)
        record.words_studied = session.words_studied
        record.correct_answers = session.correct_answers
        record.total_questions = session.total_questions
        record.is_completed = session.is_completed

    def save(self, session: StudySession) -> None:
        with translate_errors(self.db, "save_session"):
            record = StudySessionRecord()
            self._apply(record, session)
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        session.id = record.id

    def update(self, session: StudySession) -> None:
        if session.id is None:
            self.save(session)
            return
        with translate_errors(self.db, "update_session"):
            record = self.db.get(StudySessionRecord, session.id)
            if not record:
                raise RepositoryError(f"Session {session.id} not found")
            self._apply(record, session)
            self.db.commit()

    def find_recent(self, limit: int) -> List[StudySession]:
        with translate_errors(self.db, "find_recent_sessions"):
            records = (
                self.db.query(StudySessionRecord)
                .order_by(StudySessionRecord.start_time.desc())
                .limit(limit)
                .all()
            )
        return [session_from_record(record) for record in records]

    def find_by_date_range(self, start: datetime, end: datetime) -> List[StudySession]:
        with translate_errors(self.db, "find_sessions_by_date"):
            records = (
                self.db.query(StudySessionRecord)
                .filter(
                    StudySessionRecord.start_time >= start,
                    StudySessionRecord.start_time <= end,
                )
                .order_by(StudySessionRecord.start_time.desc())
                .all()
            )
        return [session_from_record(record) for record in records]


class SqlProgressRepository(ProgressRepository):
    """Progress repository backed by the ``user_progress`` table."""

    def __init__(self, db: Session):
        """Initialize the repository with a database session."""
        self.db = db

    @staticmethod
    def _apply(record: UserProgressRecord, progress: UserProgress) -> None:
        record.total_words_learned = progress.total_words_learned
        record.current_streak = progress.current_streak
        record.longest_streak = progress.longest_streak
        record.total_study_time = progress.total_study_time
        record.level = progress.level
        record.experience = progress.experience
        record.daily_goal = progress.daily_goal
        record.weekly_goal = progress.weekly_goal
        record.last_study_date = progress.last_study_date

    def load_current(self) -> Optional[UserProgress]:
        with translate_errors(self.db, "load_progress"):
            record = self.db.query(UserProgressRecord).order_by(UserProgressRecord.id).first()
        return progress_from_record(record) if record else None

    def save(self, progress: UserProgress) -> None:
        with translate_errors(self.db, "save_progress"):
            record = self.db.get(UserProgressRecord, progress.id) if progress.id else None
            if not record:
                record = UserProgressRecord()
                self.db.add(record)
            self._apply(record, progress)
            self.db.commit()
            self.db.refresh(record)
        progress.id = record.id

    def update(self, progress: UserProgress) -> None:
        self.save(progress)

    def reset(self) -> UserProgress:
        with translate_errors(self.db, "reset_progress"):
            self.db.query(UserProgressRecord).delete()
            self.db.commit()
        progress = UserProgress()
        self.save(progress)
        return progress
