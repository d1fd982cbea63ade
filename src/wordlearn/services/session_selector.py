"""Selection of the words presented in a study session."""
import logging
import random
from datetime import datetime
from typing import List, Optional, Sequence

from wordlearn.config import LearningSettings, QuizSettings, settings
from wordlearn.exceptions import EmptySelectionError, ValidationError
from wordlearn.models.domain import QuizQuestion, SessionKind, WordItem
from wordlearn.services.mastery_policy import MasteryPolicy

logger = logging.getLogger(__name__)


class SessionSelector:
    """Builds the ordered word queue for a session.

    Sampling is uniform without replacement and the final order is a full
    random permutation. The selector only reads the words it is given.
    """

    def __init__(
        self,
        policy: MasteryPolicy,
        learning_settings: Optional[LearningSettings] = None,
        quiz_settings: Optional[QuizSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        learning_settings = learning_settings or settings.learning
        quiz_settings = quiz_settings or settings.quiz
        self.policy = policy
        self.new_word_target = learning_settings.new_word_target
        self.review_word_target = learning_settings.review_word_target
        self.quiz_size = quiz_settings.quiz_size
        self.options_count = quiz_settings.options_count
        # Process-wide random source unless one is injected
        self.random = rng or random

    def select(self, kind: SessionKind, words: Sequence[WordItem], now: Optional[datetime] = None) -> List[WordItem]:
        """Choose words for a session of the given kind."""
        if kind == SessionKind.QUIZ:
            return self.select_quiz_words(words)
        if kind == SessionKind.REVIEW:
            return self.select_review_words(words, now)
        return self.select_learning_words(words, now)

    def select_learning_words(
        self,
        words: Sequence[WordItem],
        now: Optional[datetime] = None,
        new_word_target: Optional[int] = None,
        review_word_target: Optional[int] = None,
    ) -> List[WordItem]:
        """Mix new words with words due for review."""
        new_word_target = self.new_word_target if new_word_target is None else new_word_target
        review_word_target = self.review_word_target if review_word_target is None else review_word_target
        if new_word_target < 0 or review_word_target < 0:
            raise ValidationError("Word targets cannot be negative")
        if not words:
            raise EmptySelectionError("No words to choose from")

        unlearned = [word for word in words if not word.is_learned]
        due = [word for word in words if self.policy.is_due_for_review(word, now)]
        logger.debug(f"Unlearned words: {len(unlearned)}, due for review: {len(due)}")

        chosen = self._sample(unlearned, new_word_target) + self._sample(due, review_word_target)
        if not chosen:
            raise EmptySelectionError("No new words and no words due for review")

        self.random.shuffle(chosen)
        logger.info(f"Selected {len(chosen)} words for a learning session")
        return chosen

    def select_review_words(
        self,
        words: Sequence[WordItem],
        now: Optional[datetime] = None,
        size: Optional[int] = None,
    ) -> List[WordItem]:
        """Choose only words that are due for review."""
        size = self.review_word_target if size is None else size
        if size < 0:
            raise ValidationError("Review session size cannot be negative")
        if not words:
            raise EmptySelectionError("No words to choose from")

        due = [word for word in words if self.policy.is_due_for_review(word, now)]
        chosen = self._sample(due, size)
        if not chosen:
            raise EmptySelectionError("No words are due for review")
        self.random.shuffle(chosen)
        return chosen

    def select_quiz_words(self, words: Sequence[WordItem], quiz_size: Optional[int] = None) -> List[WordItem]:
        """Choose learned words for a quiz, falling back to the whole set."""
        quiz_size = self.quiz_size if quiz_size is None else quiz_size
        if quiz_size < 1:
            raise ValidationError("Quiz size must be positive")
        if not words:
            raise EmptySelectionError("No words to choose from")

        learned = [word for word in words if word.is_learned]
        if len(learned) >= quiz_size:
            return self._sample(learned, quiz_size)

        logger.info(f"Only {len(learned)} learned words, drawing the quiz from all {len(words)} words")
        return self._sample(list(words), quiz_size)

    def quiz_question(self, word: WordItem, words: Sequence[WordItem]) -> QuizQuestion:
        """Build a multiple choice question with distractors from other words."""
        others = [other.translation for other in words if other.headword != word.headword]
        distractors = self._sample(others, self.options_count - 1)
        options = [word.translation] + distractors
        self.random.shuffle(options)
        return QuizQuestion(word=word, options=options)

    def _sample(self, population: List, count: int) -> List:
        return self.random.sample(population, min(count, len(population)))
