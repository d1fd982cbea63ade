"""Roll-up of completed sessions into streaks, totals and achievements."""
import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from wordlearn.config import AchievementSettings, LearningSettings, settings
from wordlearn.exceptions import DataError
from wordlearn.models.domain import Achievement, StudySession, UserProgress, utcnow
from wordlearn.repositories.base import ProgressRepository

logger = logging.getLogger(__name__)

WORD_BADGE_TITLES = {
    1: "First Word",
    10: "Beginner",
    50: "Intermediate",
    100: "Word Enthusiast",
    500: "Vocabulary Master",
    1000: "Lexicon Legend",
}


class ProgressAggregator:
    """Owns the UserProgress singleton and derives read-side statistics."""

    def __init__(
        self,
        repository: ProgressRepository,
        learning_settings: Optional[LearningSettings] = None,
        achievement_settings: Optional[AchievementSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.learning_settings = learning_settings or settings.learning
        self.achievement_settings = achievement_settings or settings.achievements
        self.clock = clock or utcnow

    def load_progress(self) -> UserProgress:
        """Get the stored progress, creating it on first use."""
        progress = self.repository.load_current()
        if progress is None:
            progress = UserProgress(
                daily_goal=self.learning_settings.daily_goal,
                weekly_goal=self.learning_settings.weekly_goal,
            )
            self.repository.save(progress)
            logger.info("Created user progress")
        return progress

    def study_day(self, moment: datetime) -> date:
        """Calendar day a moment belongs to, with days starting at day_start_hour."""
        return (moment - timedelta(hours=self.learning_settings.day_start_hour)).date()

    def update_streak(self, progress: UserProgress, now: Optional[datetime] = None) -> UserProgress:
        """Advance, keep or restart the study streak."""
        now = now or self.clock()
        if progress.last_study_date is None:
            progress.current_streak = 1
        else:
            last = progress.last_study_date
            if last.tzinfo is not None and now.tzinfo is not None:
                last = last.astimezone(now.tzinfo)
            days_difference = (self.study_day(now) - self.study_day(last)).days
            if days_difference == 1:
                progress.current_streak += 1
                progress.longest_streak = max(progress.longest_streak, progress.current_streak)
            elif days_difference > 1:
                logger.info(f"Streak of {progress.current_streak} days broken after {days_difference} days")
                progress.current_streak = 1
            # Same day: already counted

        progress.last_study_date = now
        return progress

    def record_session_completion(self, progress: UserProgress, session: StudySession) -> UserProgress:
        """Add a finished session to the totals and the streak."""
        if not session.is_completed:
            raise DataError("Only completed sessions can be recorded")

        progress.total_words_learned += session.words_studied
        progress.total_study_time += session.duration
        self.update_streak(progress, session.end_time)
        self.repository.update(progress)
        logger.info(
            f"Recorded session: {session.words_studied} words, "
            f"total {progress.total_words_learned}, streak {progress.current_streak}"
        )
        return progress

    def reset(self) -> UserProgress:
        """Start over with fresh progress."""
        logger.warning("Resetting user progress")
        return self.repository.reset()

    def studied_today(self, sessions: Sequence[StudySession], now: Optional[datetime] = None) -> int:
        today = self.study_day(now or self.clock())
        return sum(s.words_studied for s in sessions if self.study_day(s.start_time) == today)

    def _days(self, days: int, now: Optional[datetime]) -> List[date]:
        today = self.study_day(now or self.clock())
        return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    def daily_activity(
        self, sessions: Sequence[StudySession], days: int = 7, now: Optional[datetime] = None
    ) -> List[Tuple[date, int]]:
        """Words studied per day, oldest day first."""
        totals = {day: 0 for day in self._days(days, now)}
        for session in sessions:
            day = self.study_day(session.start_time)
            if day in totals:
                totals[day] += session.words_studied
        return list(totals.items())

    def accuracy_trend(
        self, sessions: Sequence[StudySession], days: int = 7, now: Optional[datetime] = None
    ) -> List[Tuple[date, float]]:
        """Mean session accuracy per day, oldest day first, 0 for idle days."""
        per_day = {day: [] for day in self._days(days, now)}
        for session in sessions:
            day = self.study_day(session.start_time)
            if day in per_day:
                per_day[day].append(session.accuracy)
        return [
            (day, sum(values) / len(values) if values else 0.0)
            for day, values in per_day.items()
        ]

    def evaluate_achievements(
        self,
        progress: UserProgress,
        sessions: Sequence[StudySession],
        now: Optional[datetime] = None,
    ) -> List[Achievement]:
        """Evaluate every badge against the current progress and history."""
        thresholds = self.achievement_settings
        completed = [s for s in sessions if s.is_completed]
        achievements = []

        for threshold in thresholds.words_learned_thresholds:
            achievements.append(Achievement(
                key=f"words_{threshold}",
                title=WORD_BADGE_TITLES.get(threshold, f"{threshold} Words"),
                description=f"Learn {threshold} words",
                unlocked=progress.total_words_learned >= threshold,
                progress=min(progress.total_words_learned / threshold, 1.0),
            ))

        streak = max(progress.current_streak, progress.longest_streak)
        achievements.append(Achievement(
            key="streak",
            title="Consistent Learner",
            description=f"Study {thresholds.streak_days} days in a row",
            unlocked=streak >= thresholds.streak_days,
            progress=min(streak / thresholds.streak_days, 1.0),
        ))

        peak_accuracy = max((s.accuracy for s in completed), default=0.0)
        achievements.append(Achievement(
            key="accuracy",
            title="Quiz Ace",
            description=f"Reach {thresholds.peak_accuracy:.0%} accuracy in a session",
            unlocked=peak_accuracy >= thresholds.peak_accuracy,
            progress=min(peak_accuracy / thresholds.peak_accuracy, 1.0),
        ))

        studied_today = self.studied_today(completed, now)
        daily_goal = max(progress.daily_goal, 1)
        achievements.append(Achievement(
            key="daily_goal",
            title="Daily Goal",
            description=f"Study {progress.daily_goal} words today",
            unlocked=studied_today >= progress.daily_goal,
            progress=min(studied_today / daily_goal, 1.0),
        ))

        peak_speed = max((s.words_per_minute for s in completed), default=0.0)
        achievements.append(Achievement(
            key="speed",
            title="Speed Learner",
            description=f"Study {thresholds.speed_words_per_minute:g} words per minute in a session",
            unlocked=peak_speed >= thresholds.speed_words_per_minute,
            progress=min(peak_speed / thresholds.speed_words_per_minute, 1.0),
        ))

        return achievements
