"""In-memory repositories, used by tests and by callers without a database."""
import itertools
from datetime import datetime
from typing import Dict, List, Optional

from wordlearn.models.domain import StudySession, UserProgress, WordItem
from wordlearn.repositories.base import (
    ProgressRepository,
    SessionRepository,
    WordRepository,
)


def matches_query(word: WordItem, query: str) -> bool:
    """Check whether a word matches a free-text search query."""
    query = query.lower()
    return (
        query in word.headword.lower()
        or query in word.translation.lower()
        or query in word.part_of_speech.lower()
    )


class InMemoryWordRepository(WordRepository):
    """Word repository holding the items in a dict."""

    def __init__(self, words: Optional[List[WordItem]] = None):
        self.words: Dict[str, WordItem] = {}
        for word in words or []:
            self.words[word.headword] = word

    def load_all(self) -> List[WordItem]:
        return [self.words[key] for key in sorted(self.words)]

    def save(self, word: WordItem) -> None:
        self.words[word.headword] = word

    def save_batch(self, words: List[WordItem]) -> None:
        for word in words:
            self.save(word)

    def delete(self, word: WordItem) -> None:
        self.words.pop(word.headword, None)

    def delete_all(self) -> None:
        self.words.clear()

    def count(self) -> int:
        return len(self.words)

    def search(self, query: str) -> List[WordItem]:
        return [word for word in self.load_all() if matches_query(word, query)]


class InMemorySessionRepository(SessionRepository):
    """Session repository holding sessions in a list."""

    def __init__(self):
        self.sessions: List[StudySession] = []
        self._ids = itertools.count(1)

    def save(self, session: StudySession) -> None:
        session.id = next(self._ids)
        self.sessions.append(session)

    def update(self, session: StudySession) -> None:
        if session.id is None:
            self.save(session)

    def find_recent(self, limit: int) -> List[StudySession]:
        ordered = sorted(self.sessions, key=lambda s: s.start_time, reverse=True)
        return ordered[:limit]

    def find_by_date_range(self, start: datetime, end: datetime) -> List[StudySession]:
        return sorted(
            (s for s in self.sessions if start <= s.start_time <= end),
            key=lambda s: s.start_time,
            reverse=True,
        )


class InMemoryProgressRepository(ProgressRepository):
    """Progress repository holding the singleton in an attribute."""

    def __init__(self, progress: Optional[UserProgress] = None):
        self.progress = progress

    def load_current(self) -> Optional[UserProgress]:
        return self.progress

    def save(self, progress: UserProgress) -> None:
        if progress.id is None:
            progress.id = 1
        self.progress = progress

    def update(self, progress: UserProgress) -> None:
        self.save(progress)

    def reset(self) -> UserProgress:
        self.progress = None
        progress = UserProgress()
        self.save(progress)
        return progress
