"""Database models backing the SQL repositories."""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
)

from wordlearn.models.base import Base, TimestampMixin


class WordRecord(Base, TimestampMixin):
    """Word model."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    headword = Column(String, unique=True, nullable=False, index=True)
    translation = Column(String, nullable=False)
    pronunciation = Column(String, default="")
    part_of_speech = Column(String, default="")
    example = Column(Text, default="")
    example_translation = Column(Text, default="")
    difficulty = Column(Integer, default=1)  # 1-5
    learning_count = Column(Integer, default=0)
    correct_count = Column(Integer, default=0)
    is_learned = Column(Boolean, default=False)
    is_favorited = Column(Boolean, default=False)
    last_study_date = Column(DateTime(timezone=True), nullable=True)
    added_at = Column(DateTime(timezone=True), nullable=False)


class StudySessionRecord(Base, TimestampMixin):
    """Study session model."""

    __tablename__ = "study_sessions"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)  # learning, quiz, review
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True))
    words = Column(Text, default="")  # newline separated headwords
    words_studied = Column(Integer, default=0)
    correct_answers = Column(Integer, default=0)
    total_questions = Column(Integer, default=0)
    is_completed = Column(Boolean, default=False)


class UserProgressRecord(Base, TimestampMixin):
    """User progress model, a single row per installation."""

    __tablename__ = "user_progress"

    id = Column(Integer, primary_key=True)
    total_words_learned = Column(Integer, default=0)
    current_streak = Column(Integer, default=0)
    longest_streak = Column(Integer, default=0)
    total_study_time = Column(Float, default=0.0)  # in seconds
    level = Column(Integer, default=1)
    experience = Column(Integer, default=0)
    daily_goal = Column(Integer, default=20)
    weekly_goal = Column(Integer, default=100)
    last_study_date = Column(DateTime(timezone=True), nullable=True)
