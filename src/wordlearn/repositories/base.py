"""Persistence interfaces consumed by the scheduler core."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from wordlearn.models.domain import StudySession, UserProgress, WordItem


class WordRepository(ABC):
    """Storage for vocabulary items, keyed by headword."""

    @abstractmethod
    def load_all(self) -> List[WordItem]:
        """Return every stored word ordered by headword."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def save(self, word: WordItem) -> None:
        """Insert the word or overwrite the stored copy with the same headword."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def save_batch(self, words: List[WordItem]) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def delete(self, word: WordItem) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def delete_all(self) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def search(self, query: str) -> List[WordItem]:
        """Case-insensitive match on headword, translation or part of speech."""
        raise NotImplementedError("Subclasses must implement this method")


class SessionRepository(ABC):
    """Storage for study sessions."""

    @abstractmethod
    def save(self, session: StudySession) -> None:
        """Insert a new session and assign its id."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def update(self, session: StudySession) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def find_recent(self, limit: int) -> List[StudySession]:
        """Return up to ``limit`` sessions, most recently started first."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def find_by_date_range(self, start: datetime, end: datetime) -> List[StudySession]:
        raise NotImplementedError("Subclasses must implement this method")


class ProgressRepository(ABC):
    """Storage for the user progress singleton."""

    @abstractmethod
    def load_current(self) -> Optional[UserProgress]:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def save(self, progress: UserProgress) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def update(self, progress: UserProgress) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def reset(self) -> UserProgress:
        """Drop the stored progress and return a fresh, saved one."""
        raise NotImplementedError("Subclasses must implement this method")
