"""State machine driving a single study or quiz session."""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from wordlearn.exceptions import DataError, ValidationError
from wordlearn.models.domain import (
    EventType,
    SessionEvent,
    SessionKind,
    SessionState,
    SessionStatistics,
    StudySession,
    WordItem,
    utcnow,
)
from wordlearn.monitoring import (
    answers_submitted,
    session_duration,
    sessions_completed,
    sessions_started,
    words_mastered,
)
from wordlearn.repositories.base import SessionRepository
from wordlearn.services.mastery_policy import MasteryPolicy
from wordlearn.services.word_store import WordStore

logger = logging.getLogger(__name__)

Listener = Callable[[SessionEvent], None]


class SessionRunner:
    """Runs one session at a time: Idle -> Active <-> Paused -> Completed.

    Answers update word statistics through the mastery policy and are written
    to the word store and the session repository immediately, so ending a
    session early never loses answers already submitted. In-memory state is
    updated before anything is persisted; if a repository call fails the
    error propagates and the in-memory state stays authoritative. A session
    sealed by that call still emits SESSION_COMPLETED before the error
    reaches the caller.

    Answers are accepted while paused; pausing only stops skipping.

    A runner is not thread-safe. Calls must be serialized by the caller.
    """

    def __init__(
        self,
        word_store: WordStore,
        session_repository: SessionRepository,
        policy: MasteryPolicy,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.word_store = word_store
        self.session_repository = session_repository
        self.policy = policy
        self.clock = clock or utcnow

        self.state = SessionState.IDLE
        self.current_session: Optional[StudySession] = None
        self.last_session: Optional[StudySession] = None
        self._words: List[WordItem] = []
        self._cursor = 0
        self._start_time: Optional[datetime] = None
        self._listeners: List[Listener] = []

    @property
    def is_session_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def current_word(self) -> Optional[WordItem]:
        if self._cursor < len(self._words):
            return self._words[self._cursor]
        return None

    @property
    def progress(self) -> float:
        """Share of the session's words already answered or skipped."""
        if not self._words:
            return 0.0
        return self._cursor / len(self._words)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event_type: EventType, session: Optional[StudySession], word: Optional[WordItem] = None) -> None:
        event = SessionEvent(type=event_type, session=session, word=word, timestamp=self.clock())
        for listener in list(self._listeners):
            listener(event)

    def start(self, words: Sequence[WordItem], kind: SessionKind = SessionKind.LEARNING) -> StudySession:
        """Start a new session, ending the current one first."""
        if not words:
            raise ValidationError("Cannot start a session without words")
        missing = [word.headword for word in words if word.headword not in self.word_store]
        if missing:
            raise ValidationError(f"Words not in the store: {', '.join(repr(h) for h in missing)}")

        if self.current_session is not None:
            logger.info("Ending the previous session before starting a new one")
            self.end()

        now = self.clock()
        session = StudySession(
            kind=kind,
            start_time=now,
            total_questions=len(words),
            words=[word.headword for word in words],
        )
        self._words = list(words)
        self._cursor = 0
        self._start_time = now
        self.current_session = session
        self.state = SessionState.ACTIVE
        sessions_started.labels(kind=kind.value).inc()
        logger.info(f"Started {kind.value} session with {len(words)} words")

        self.session_repository.save(session)
        self._emit(EventType.SESSION_STARTED, session)
        return session

    def submit_answer(self, word: WordItem, is_correct: bool) -> StudySession:
        """Record an answer for a word and advance to the next one."""
        session = self.current_session
        if session is None:
            raise DataError("There is no active session")
        if word.headword not in self.word_store:
            raise ValidationError(f"Word {word.headword!r} is not in the store")

        current = self.current_word
        if current is not None and current.headword != word.headword:
            logger.warning(f"Answer for {word.headword!r} submitted while {current.headword!r} is current")

        now = self.clock()
        was_learned = word.is_learned
        self.policy.record_answer(word, is_correct, now)
        if word.is_learned and not was_learned:
            words_mastered.inc()
        session.record(is_correct)
        answers_submitted.labels(result="correct" if is_correct else "incorrect").inc()
        logger.debug(f"Answer for {word.headword!r}: {'correct' if is_correct else 'incorrect'}")

        self._cursor += 1
        completed = self._cursor >= len(self._words)
        if completed:
            self._finalize(now)

        try:
            self.word_store.save(word)
            self.session_repository.update(session)
            self._emit(EventType.ANSWER_RECORDED, session, word)
        finally:
            # A sealed session is announced even when writing it failed
            if completed:
                self._emit(EventType.SESSION_COMPLETED, session)
        return session

    def skip_current_word(self) -> Optional[WordItem]:
        """Move past the current word without touching its statistics.

        Returns the next word, or None when the session is not running or
        has just been completed by this skip.
        """
        session = self.current_session
        if session is None or self.state != SessionState.ACTIVE:
            return None
        word = self.current_word
        if word is None:
            return None

        logger.debug(f"Skipping word {word.headword!r}")
        self._cursor += 1
        self._emit(EventType.WORD_SKIPPED, session, word)

        if self._cursor >= len(self._words):
            self._finalize(self.clock())
            self._persist_completed(session)
            return None
        return self.current_word

    def pause(self) -> None:
        if self.state != SessionState.ACTIVE:
            return
        self.state = SessionState.PAUSED
        logger.info("Session paused")
        self._emit(EventType.SESSION_PAUSED, self.current_session)

    def resume(self) -> None:
        if self.state != SessionState.PAUSED:
            return
        self.state = SessionState.ACTIVE
        logger.info("Session resumed")
        self._emit(EventType.SESSION_RESUMED, self.current_session)

    def end(self) -> Optional[StudySession]:
        """Terminate the current session wherever its cursor is."""
        session = self.current_session
        if session is None:
            return None

        self._finalize(self.clock())
        self._persist_completed(session)
        return session

    def _persist_completed(self, session: StudySession) -> None:
        try:
            self.session_repository.update(session)
        finally:
            self._emit(EventType.SESSION_COMPLETED, session)

    def _finalize(self, now: datetime) -> None:
        session = self.current_session
        session.finalize(now)
        sessions_completed.labels(kind=session.kind.value).inc()
        session_duration.labels(kind=session.kind.value).observe(session.duration)
        logger.info(
            f"Session finished: {session.words_studied}/{session.total_questions} words studied, "
            f"{session.correct_answers} correct"
        )

        self.last_session = session
        self.current_session = None
        self._words = []
        self._cursor = 0
        self._start_time = None
        self.state = SessionState.COMPLETED

    def get_statistics(self) -> SessionStatistics:
        """Statistics of the running session, or of the last finished one."""
        session = self.current_session or self.last_session
        if session is None:
            return SessionStatistics()

        if session.is_completed:
            time_spent = session.duration
        else:
            time_spent = max((self.clock() - self._start_time).total_seconds(), 0.0)

        studied = session.words_studied
        return SessionStatistics(
            total_words=session.total_questions,
            correct_answers=session.correct_answers,
            incorrect_answers=studied - session.correct_answers,
            skipped_words=session.total_questions - studied,
            accuracy=session.correct_answers / studied if studied > 0 else 0.0,
            time_spent=time_spent,
            words_per_minute=studied / (time_spent / 60) if time_spent > 0 else 0.0,
        )
