"""Tests for the in-memory and SQL repositories."""
from datetime import timedelta

import pytest

from wordlearn.exceptions import RepositoryError
from wordlearn.models.base import Base
from wordlearn.models.domain import SessionKind, StudySession, UserProgress, WordItem
from wordlearn.repositories.memory import (
    InMemoryProgressRepository,
    InMemorySessionRepository,
    InMemoryWordRepository,
)
from wordlearn.repositories.sql import (
    SqlProgressRepository,
    SqlSessionRepository,
    SqlWordRepository,
)


@pytest.fixture(params=["memory", "sql"])
def word_repository(request, db):
    """Word repository of each backend."""
    if request.param == "memory":
        return InMemoryWordRepository()
    return SqlWordRepository(db)


@pytest.fixture(params=["memory", "sql"])
def session_repository(request, db):
    """Session repository of each backend."""
    if request.param == "memory":
        return InMemorySessionRepository()
    return SqlSessionRepository(db)


@pytest.fixture(params=["memory", "sql"])
def progress_repository(request, db):
    """Progress repository of each backend."""
    if request.param == "memory":
        return InMemoryProgressRepository()
    return SqlProgressRepository(db)


def test_word_save_and_load(word_repository, make_word, clock) -> None:
    """Test that words round-trip through the repository."""
    word = make_word(
        pronunciation="/wɜːd/",
        example="A word.",
        difficulty=3,
        learning_count=4,
        correct_count=3,
        is_learned=True,
        last_study_date=clock.now,
    )
    word_repository.save(word)

    loaded = word_repository.load_all()

    assert len(loaded) == 1
    assert loaded[0].headword == word.headword
    assert loaded[0].pronunciation == "/wɜːd/"
    assert loaded[0].difficulty == 3
    assert loaded[0].correct_count == 3
    assert loaded[0].is_learned is True
    assert loaded[0].last_study_date == clock.now


def test_word_save_overwrites_by_headword(word_repository, make_word) -> None:
    """Test that saving twice keeps one copy with the latest statistics."""
    word = make_word()
    word_repository.save(word)
    word.learning_count = 2
    word.correct_count = 1

    word_repository.save(word)

    assert word_repository.count() == 1
    assert word_repository.load_all()[0].learning_count == 2


def test_word_load_all_is_sorted(word_repository) -> None:
    word_repository.save_batch([
        WordItem(headword="cherry", translation="cereza"),
        WordItem(headword="apple", translation="manzana"),
        WordItem(headword="banana", translation="plátano"),
    ])

    assert [word.headword for word in word_repository.load_all()] == ["apple", "banana", "cherry"]


def test_word_delete(word_repository, make_word) -> None:
    words = [make_word() for _ in range(3)]
    word_repository.save_batch(words)

    word_repository.delete(words[0])
    assert word_repository.count() == 2

    word_repository.delete_all()
    assert word_repository.count() == 0


def test_word_search(word_repository) -> None:
    """Test case-insensitive search."""
    word_repository.save_batch([
        WordItem(headword="Apple", translation="manzana", part_of_speech="n."),
        WordItem(headword="run", translation="correr", part_of_speech="v."),
    ])

    assert [word.headword for word in word_repository.search("apple")] == ["Apple"]
    assert [word.headword for word in word_repository.search("CORR")] == ["run"]
    assert word_repository.search("zzz") == []


def test_word_search_treats_wildcards_literally(word_repository) -> None:
    """Test that percent signs and underscores match only themselves."""
    word_repository.save_batch([
        WordItem(headword="under_score", translation="guion bajo"),
        WordItem(headword="plain", translation="llano"),
        WordItem(headword="100%", translation="cien por cien"),
    ])

    assert [word.headword for word in word_repository.search("_")] == ["under_score"]
    assert [word.headword for word in word_repository.search("%")] == ["100%"]
    assert [word.headword for word in word_repository.search("d_r")] == []


def test_session_save_assigns_id(session_repository, clock) -> None:
    """Test inserting and updating a session."""
    session = StudySession(
        kind=SessionKind.QUIZ, start_time=clock.now, total_questions=2, words=["one", "two"]
    )

    session_repository.save(session)
    assert session.id is not None

    session.record(True)
    session.finalize(clock.now + timedelta(minutes=1))
    session_repository.update(session)

    [loaded] = session_repository.find_recent(10)
    assert loaded.id == session.id
    assert loaded.kind == SessionKind.QUIZ
    assert loaded.words == ["one", "two"]
    assert loaded.words_studied == 1
    assert loaded.is_completed is True
    assert loaded.end_time == clock.now + timedelta(minutes=1)


def test_session_update_without_id_inserts(session_repository, clock) -> None:
    session = StudySession(kind=SessionKind.LEARNING, start_time=clock.now, total_questions=1)

    session_repository.update(session)

    assert session.id is not None
    assert len(session_repository.find_recent(10)) == 1


def test_session_queries(session_repository, clock) -> None:
    """Test recency ordering and date range filtering."""
    for days in (0, 1, 3, 10):
        session_repository.save(
            StudySession(kind=SessionKind.LEARNING, start_time=clock.now - timedelta(days=days), total_questions=1)
        )

    recent = session_repository.find_recent(2)
    assert [s.start_time for s in recent] == [clock.now, clock.now - timedelta(days=1)]

    in_range = session_repository.find_by_date_range(clock.now - timedelta(days=5), clock.now)
    assert len(in_range) == 3
    assert in_range[0].start_time == clock.now


def test_progress_lifecycle(progress_repository, clock) -> None:
    """Test saving, updating and resetting the progress singleton."""
    assert progress_repository.load_current() is None

    progress = UserProgress(total_words_learned=5, current_streak=2, longest_streak=4, last_study_date=clock.now)
    progress_repository.save(progress)
    progress.total_words_learned = 9
    progress_repository.update(progress)

    loaded = progress_repository.load_current()
    assert loaded.total_words_learned == 9
    assert loaded.longest_streak == 4
    assert loaded.last_study_date == clock.now

    fresh = progress_repository.reset()
    assert fresh.total_words_learned == 0
    assert progress_repository.load_current().total_words_learned == 0


def test_sql_failures_raise_repository_error(db, make_word, clock) -> None:
    """Test that database failures surface as RepositoryError."""
    Base.metadata.drop_all(db.get_bind())

    with pytest.raises(RepositoryError):
        SqlWordRepository(db).save(make_word())
    with pytest.raises(RepositoryError):
        SqlSessionRepository(db).find_recent(5)
    with pytest.raises(RepositoryError):
        SqlProgressRepository(db).load_current()


def test_sql_update_of_missing_session_raises(db, clock) -> None:
    session = StudySession(kind=SessionKind.LEARNING, start_time=clock.now, total_questions=1, id=999)

    with pytest.raises(RepositoryError):
        SqlSessionRepository(db).update(session)
