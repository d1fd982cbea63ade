"""Domain data structures used by the scheduler core."""
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import List, Optional

from wordlearn.config import settings
from wordlearn.exceptions import DataError, ValidationError


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class SessionKind(Enum):
    """Kinds of study sessions."""
    LEARNING = "learning"  # New words mixed with words due for review
    QUIZ = "quiz"  # Multiple choice over learned words
    REVIEW = "review"  # Only words due for review


class SessionState(Enum):
    """States of the session runner."""
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class EventType(Enum):
    """Notifications emitted on session state transitions."""
    SESSION_STARTED = "session_started"
    ANSWER_RECORDED = "answer_recorded"
    WORD_SKIPPED = "word_skipped"
    SESSION_PAUSED = "session_paused"
    SESSION_RESUMED = "session_resumed"
    SESSION_COMPLETED = "session_completed"
    PROGRESS_UPDATED = "progress_updated"


@dataclass
class WordItem:
    """A vocabulary item together with its learning statistics."""
    headword: str
    translation: str
    pronunciation: str = ""
    part_of_speech: str = ""
    example: str = ""
    example_translation: str = ""
    difficulty: int = 1
    learning_count: int = 0
    correct_count: int = 0
    is_learned: bool = False
    is_favorited: bool = False
    last_study_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.headword:
            raise ValidationError("Word headword cannot be empty")
        low, high = settings.learning.min_difficulty, settings.learning.max_difficulty
        if not low <= self.difficulty <= high:
            raise ValidationError(
                f"Difficulty of {self.headword!r} must be between {low} and {high}, got {self.difficulty}"
            )
        if self.learning_count < 0 or not 0 <= self.correct_count <= self.learning_count:
            raise ValidationError(
                f"Invalid statistics for {self.headword!r}: "
                f"correct_count={self.correct_count}, learning_count={self.learning_count}"
            )

    @property
    def accuracy(self) -> float:
        """Share of correct answers, 0 for a word never presented."""
        if self.learning_count == 0:
            return 0.0
        return self.correct_count / self.learning_count

    def reset_progress(self) -> None:
        """Forget all learning statistics. Only used by an explicit bulk reset."""
        self.learning_count = 0
        self.correct_count = 0
        self.is_learned = False
        self.last_study_date = None


@dataclass
class StudySession:
    """One bounded sequence of word presentations."""
    kind: SessionKind
    start_time: datetime
    total_questions: int
    words: List[str] = field(default_factory=list)
    words_studied: int = 0
    correct_answers: int = 0
    end_time: Optional[datetime] = None
    is_completed: bool = False
    id: Optional[int] = None

    def record(self, is_correct: bool) -> None:
        """Count one answered word."""
        if self.is_completed:
            raise DataError("Cannot record an answer in a completed session")
        if self.words_studied >= self.total_questions:
            raise DataError("All questions of this session have already been answered")
        self.words_studied += 1
        if is_correct:
            self.correct_answers += 1

    def finalize(self, end_time: datetime) -> None:
        """Seal the session."""
        if self.is_completed:
            return
        self.end_time = end_time
        self.is_completed = True

    @property
    def accuracy(self) -> float:
        """Correct answers over planned questions."""
        if self.total_questions == 0:
            return 0.0
        return self.correct_answers / self.total_questions

    @property
    def duration(self) -> float:
        """Length of a completed session in seconds, 0 while it is running."""
        if self.end_time is None:
            return 0.0
        return max((self.end_time - self.start_time).total_seconds(), 0.0)

    @property
    def words_per_minute(self) -> float:
        if self.duration == 0:
            return 0.0
        return self.words_studied / (self.duration / 60)


@dataclass
class UserProgress:
    """Cumulative progress of the single local user."""
    total_words_learned: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_study_time: float = 0.0  # in seconds
    level: int = 1
    experience: int = 0
    daily_goal: int = field(default_factory=lambda: settings.learning.daily_goal)
    weekly_goal: int = field(default_factory=lambda: settings.learning.weekly_goal)
    last_study_date: Optional[datetime] = None
    id: Optional[int] = None


@dataclass
class SessionStatistics:
    """Running statistics of a session."""
    total_words: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    skipped_words: int = 0
    accuracy: float = 0.0
    time_spent: float = 0.0  # in seconds
    words_per_minute: float = 0.0


@dataclass
class SessionEvent:
    """Emitted by the runner and the learning service on state transitions."""
    type: EventType
    session: Optional[StudySession] = None
    word: Optional[WordItem] = None
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class QuizQuestion:
    """A multiple choice question for one word."""
    word: WordItem
    options: List[str]

    @property
    def answer(self) -> str:
        return self.word.translation

    def is_correct(self, option: str) -> bool:
        return option == self.word.translation


@dataclass
class Achievement:
    """A badge evaluated from progress and session history."""
    key: str
    title: str
    description: str
    unlocked: bool
    progress: float = 0.0  # 0..1
