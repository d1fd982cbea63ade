"""Learning service wiring word selection, sessions and progress together."""
import logging
import random
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from wordlearn.exceptions import DataError
from wordlearn.models.domain import (
    Achievement,
    EventType,
    QuizQuestion,
    SessionEvent,
    SessionKind,
    SessionStatistics,
    StudySession,
    UserProgress,
    WordItem,
)
from wordlearn.repositories.base import ProgressRepository, SessionRepository, WordRepository
from wordlearn.repositories.memory import (
    InMemoryProgressRepository,
    InMemorySessionRepository,
    InMemoryWordRepository,
)
from wordlearn.repositories.sql import SqlProgressRepository, SqlSessionRepository, SqlWordRepository
from wordlearn.services.mastery_policy import MasteryPolicy
from wordlearn.services.progress_aggregator import ProgressAggregator
from wordlearn.services.session_runner import Listener, SessionRunner
from wordlearn.services.session_selector import SessionSelector
from wordlearn.services.word_store import WordStore

logger = logging.getLogger(__name__)


class LearningService:
    """Service for running study sessions over a word store.

    Completed sessions are recorded in the progress aggregator as soon as the
    runner reports them, after which a PROGRESS_UPDATED event is emitted.
    """

    def __init__(
        self,
        word_store: WordStore,
        selector: SessionSelector,
        runner: SessionRunner,
        aggregator: ProgressAggregator,
        session_repository: SessionRepository,
    ):
        """Initialize the service with its collaborators."""
        self.word_store = word_store
        self.selector = selector
        self.runner = runner
        self.aggregator = aggregator
        self.session_repository = session_repository
        self.policy = runner.policy
        self._listeners: List[Listener] = []
        self._question: Optional[QuizQuestion] = None
        self.runner.subscribe(self._on_session_event)

    @classmethod
    def create(
        cls,
        word_repository: WordRepository,
        session_repository: SessionRepository,
        progress_repository: ProgressRepository,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "LearningService":
        """Build a service over the given repositories and load the words."""
        policy = MasteryPolicy()
        word_store = WordStore(word_repository)
        word_store.load()
        return cls(
            word_store=word_store,
            selector=SessionSelector(policy, rng=rng),
            runner=SessionRunner(word_store, session_repository, policy, clock=clock),
            aggregator=ProgressAggregator(progress_repository, clock=clock),
            session_repository=session_repository,
        )

    @classmethod
    def from_db(cls, db: Session, **kwargs) -> "LearningService":
        """Build a service backed by the database."""
        return cls.create(
            SqlWordRepository(db),
            SqlSessionRepository(db),
            SqlProgressRepository(db),
            **kwargs,
        )

    @classmethod
    def in_memory(cls, words: Optional[List[WordItem]] = None, **kwargs) -> "LearningService":
        """Build a service that keeps everything in memory."""
        return cls.create(
            InMemoryWordRepository(words),
            InMemorySessionRepository(),
            InMemoryProgressRepository(),
            **kwargs,
        )

    def subscribe(self, listener: Listener) -> None:
        """Receive session events and progress updates."""
        # Progress is recorded after every other listener saw SESSION_COMPLETED
        self.runner.unsubscribe(self._on_session_event)
        self.runner.subscribe(listener)
        self.runner.subscribe(self._on_session_event)
        self._listeners.append(listener)

    def _on_session_event(self, event: SessionEvent) -> None:
        if event.type != EventType.SESSION_COMPLETED:
            return
        self._question = None
        progress = self.aggregator.load_progress()
        self.aggregator.record_session_completion(progress, event.session)
        progress_event = SessionEvent(type=EventType.PROGRESS_UPDATED, session=event.session)
        for listener in list(self._listeners):
            listener(progress_event)

    def start_session(self, kind: SessionKind = SessionKind.LEARNING, now: Optional[datetime] = None) -> List[WordItem]:
        """Choose words and start a session of the given kind."""
        now = now or self.runner.clock()
        words = self.selector.select(kind, self.word_store.words, now)
        self._question = None
        self.runner.start(words, kind)
        return words

    def current_word(self) -> Optional[WordItem]:
        return self.runner.current_word

    def current_question(self) -> Optional[QuizQuestion]:
        """Multiple choice question for the current word, stable until answered."""
        word = self.runner.current_word
        if word is None:
            return None
        if self._question is None or self._question.word is not word:
            self._question = self.selector.quiz_question(word, self.word_store.words)
        return self._question

    def answer(self, is_correct: bool) -> StudySession:
        """Submit an answer for the current word."""
        word = self.runner.current_word
        if word is None:
            raise DataError("There is no active session")
        return self.runner.submit_answer(word, is_correct)

    def answer_option(self, option: str) -> bool:
        """Answer the current quiz question with one of its options."""
        question = self.current_question()
        if question is None:
            raise DataError("There is no active session")
        is_correct = question.is_correct(option)
        self.answer(is_correct)
        return is_correct

    def skip(self) -> Optional[WordItem]:
        return self.runner.skip_current_word()

    def pause(self) -> None:
        self.runner.pause()

    def resume(self) -> None:
        self.runner.resume()

    def finish(self) -> Optional[StudySession]:
        """End the current session early."""
        return self.runner.end()

    def statistics(self) -> SessionStatistics:
        return self.runner.get_statistics()

    def progress(self) -> UserProgress:
        return self.aggregator.load_progress()

    def recent_sessions(self, limit: int = 10) -> List[StudySession]:
        return self.session_repository.find_recent(limit)

    def achievements(self, now: Optional[datetime] = None, history: int = 100) -> List[Achievement]:
        """Evaluate achievements over the most recent sessions."""
        return self.aggregator.evaluate_achievements(
            self.progress(),
            self.recent_sessions(history),
            now or self.runner.clock(),
        )

    def difficult_words(self) -> List[WordItem]:
        return self.word_store.difficult(self.policy)
