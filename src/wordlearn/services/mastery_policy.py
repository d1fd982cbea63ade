"""Mastery rules deciding when a word is learned, due or difficult."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from wordlearn.config import LearningSettings, settings
from wordlearn.models.domain import WordItem, utcnow

logger = logging.getLogger(__name__)


class MasteryPolicy:
    """Pure decision rules over a word's learning statistics.

    The only state a policy touches is the word passed to ``record_answer``.
    A word becomes learned once it has been presented at least
    ``min_learning_count`` times with an accuracy of at least
    ``mastery_threshold``; the policy never un-masters a word on its own.
    """

    def __init__(self, learning_settings: Optional[LearningSettings] = None):
        learning_settings = learning_settings or settings.learning
        self.mastery_threshold = learning_settings.mastery_threshold
        self.min_learning_count = learning_settings.min_learning_count
        self.review_interval = timedelta(days=learning_settings.review_interval_days)
        self.difficult_accuracy_threshold = learning_settings.difficult_accuracy_threshold

    def record_answer(self, word: WordItem, is_correct: bool, now: Optional[datetime] = None) -> WordItem:
        """Count one presentation of the word and re-evaluate its mastery."""
        word.learning_count += 1
        if is_correct:
            word.correct_count += 1
        word.last_study_date = now or utcnow()

        if not word.is_learned and self.is_mastered(word):
            word.is_learned = True
            logger.info(
                f"Word {word.headword!r} mastered after {word.learning_count} presentations "
                f"with accuracy {word.accuracy:.2f}"
            )
        return word

    def is_mastered(self, word: WordItem) -> bool:
        return word.learning_count >= self.min_learning_count and word.accuracy >= self.mastery_threshold

    def is_due_for_review(self, word: WordItem, now: Optional[datetime] = None) -> bool:
        """Check whether a learned word should reappear in a session."""
        if not word.is_learned or self.is_new(word):
            return False
        if word.last_study_date is None:
            return True
        return (now or utcnow()) - word.last_study_date >= self.review_interval

    def is_difficult(self, word: WordItem) -> bool:
        return word.learning_count > 0 and word.accuracy < self.difficult_accuracy_threshold

    @staticmethod
    def is_new(word: WordItem) -> bool:
        return word.learning_count == 0
