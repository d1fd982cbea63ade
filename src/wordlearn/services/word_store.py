"""Word store holding the vocabulary corpus and its learning statistics."""
import logging
import random
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from wordlearn.exceptions import ValidationError
from wordlearn.models.domain import WordItem
from wordlearn.repositories.base import WordRepository
from wordlearn.repositories.memory import matches_query
from wordlearn.services.mastery_policy import MasteryPolicy

logger = logging.getLogger(__name__)


class WordStore:
    """Owns every WordItem and writes changes through a WordRepository."""

    def __init__(self, repository: WordRepository):
        """Initialize the store with a word repository."""
        self.repository = repository
        self._words: Dict[str, WordItem] = {}

    def load(self) -> List[WordItem]:
        """Replace the in-memory corpus with the repository contents."""
        words: Dict[str, WordItem] = {}
        for word in self.repository.load_all():
            if word.headword in words:
                raise ValidationError(f"Duplicate headword in repository: {word.headword!r}")
            words[word.headword] = word
        self._words = words
        logger.info(f"Loaded {len(words)} words")
        return self.words

    @property
    def words(self) -> List[WordItem]:
        return list(self._words.values())

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, headword: str) -> bool:
        return headword in self._words

    def get(self, headword: str) -> Optional[WordItem]:
        return self._words.get(headword)

    def add(self, word: WordItem) -> WordItem:
        """Add a new word to the store."""
        if word.headword in self._words:
            raise ValidationError(f"Word {word.headword!r} already exists")
        self._words[word.headword] = word
        self.repository.save(word)
        return word

    def add_many(self, words: Iterable[WordItem]) -> List[WordItem]:
        """Add multiple words at once, rejecting the whole batch on a duplicate."""
        words = list(words)
        seen = set()
        for word in words:
            if word.headword in self._words or word.headword in seen:
                raise ValidationError(f"Word {word.headword!r} already exists")
            seen.add(word.headword)
        for word in words:
            self._words[word.headword] = word
        self.repository.save_batch(words)
        logger.info(f"Added {len(words)} words")
        return words

    def save(self, word: WordItem) -> None:
        """Persist the current statistics of a stored word."""
        if word.headword not in self._words:
            raise ValidationError(f"Word {word.headword!r} is not in the store")
        self.repository.save(word)

    def learned(self) -> List[WordItem]:
        return [word for word in self._words.values() if word.is_learned]

    def unlearned(self) -> List[WordItem]:
        return [word for word in self._words.values() if not word.is_learned]

    def favorites(self) -> List[WordItem]:
        return [word for word in self._words.values() if word.is_favorited]

    def by_difficulty(self, difficulty: int) -> List[WordItem]:
        return [word for word in self._words.values() if word.difficulty == difficulty]

    def difficult(self, policy: MasteryPolicy) -> List[WordItem]:
        """Words answered poorly so far, hardest first."""
        words = [word for word in self._words.values() if policy.is_difficult(word)]
        return sorted(words, key=lambda w: (w.accuracy, -w.difficulty))

    def due_for_review(self, policy: MasteryPolicy, now: Optional[datetime] = None) -> List[WordItem]:
        return [word for word in self._words.values() if policy.is_due_for_review(word, now)]

    def search(self, query: str) -> List[WordItem]:
        """Search for words by headword, translation or part of speech."""
        if not query:
            return []
        return sorted(
            (word for word in self._words.values() if matches_query(word, query)),
            key=lambda w: w.headword,
        )

    def random_words(self, count: int) -> List[WordItem]:
        words = self.words
        return random.sample(words, min(count, len(words)))

    def toggle_favorite(self, headword: str) -> WordItem:
        word = self.get(headword)
        if not word:
            raise ValidationError(f"Word {headword!r} is not in the store")
        word.is_favorited = not word.is_favorited
        self.repository.save(word)
        return word

    def reset_progress(self) -> None:
        """Bulk reset of every word's learning statistics."""
        for word in self._words.values():
            word.reset_progress()
        self.repository.save_batch(self.words)
        logger.warning(f"Learning statistics reset for {len(self._words)} words")

    def clear(self) -> None:
        """Delete every word from the store and the repository."""
        self.repository.delete_all()
        self._words.clear()
        logger.warning("All words deleted")

    def statistics(self, policy: MasteryPolicy, now: Optional[datetime] = None) -> dict:
        """Get corpus statistics."""
        total = len(self._words)
        learned = len(self.learned())
        return {
            "total_words": total,
            "learned_words": learned,
            "unlearned_words": total - learned,
            "favorited_words": len(self.favorites()),
            "difficult_words": len(self.difficult(policy)),
            "due_for_review": len(self.due_for_review(policy, now)),
            "progress": learned / total if total > 0 else 0.0,
        }
