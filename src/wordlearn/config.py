"""Configuration settings for the learning scheduler."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from wordlearn.exceptions import ValidationError

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

# Learning settings
MASTERY_THRESHOLD = 0.7  # accuracy needed to count a word as learned
MIN_LEARNING_COUNT = 3  # presentations needed before mastery is possible
WORDS_LEARNED_THRESHOLDS = [1, 10, 50, 100, 500, 1000]


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///wordlearn.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "5"))


@dataclass
class LearningSettings:
    """Mastery and session selection settings."""
    mastery_threshold: float = float(os.getenv("MASTERY_THRESHOLD", str(MASTERY_THRESHOLD)))
    min_learning_count: int = int(os.getenv("MIN_LEARNING_COUNT", str(MIN_LEARNING_COUNT)))
    review_interval_days: int = int(os.getenv("REVIEW_INTERVAL_DAYS", "1"))
    difficult_accuracy_threshold: float = float(os.getenv("DIFFICULT_ACCURACY_THRESHOLD", "0.5"))
    new_word_target: int = int(os.getenv("NEW_WORD_TARGET", "15"))
    review_word_target: int = int(os.getenv("REVIEW_WORD_TARGET", "5"))
    min_difficulty: int = int(os.getenv("MIN_DIFFICULTY", "1"))
    max_difficulty: int = int(os.getenv("MAX_DIFFICULTY", "5"))
    day_start_hour: int = int(os.getenv("DAY_START_HOUR", "0"))
    daily_goal: int = int(os.getenv("DAILY_GOAL", "20"))
    weekly_goal: int = int(os.getenv("WEEKLY_GOAL", "100"))


@dataclass
class QuizSettings:
    """Quiz session settings."""
    quiz_size: int = int(os.getenv("QUIZ_SIZE", "10"))
    options_count: int = int(os.getenv("QUIZ_OPTIONS", "4"))


@dataclass
class AchievementSettings:
    """Thresholds for achievement badges."""
    words_learned_thresholds: list[int] = field(default_factory=lambda: list(WORDS_LEARNED_THRESHOLDS))
    streak_days: int = 7
    peak_accuracy: float = 0.9
    speed_words_per_minute: float = 1.0


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_quiz_settings() -> QuizSettings:
    """Get quiz settings."""
    return QuizSettings()


def get_achievement_settings() -> AchievementSettings:
    """Get achievement settings."""
    return AchievementSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    quiz: QuizSettings = field(default_factory=get_quiz_settings)
    achievements: AchievementSettings = field(default_factory=get_achievement_settings)

    def validate(self) -> None:
        """Validate settings and raise ValidationError if invalid."""
        if self.learning.mastery_threshold < 0 or self.learning.mastery_threshold > 1:
            raise ValidationError("MASTERY_THRESHOLD must be between 0 and 1")

        if self.learning.min_learning_count < 1:
            raise ValidationError("MIN_LEARNING_COUNT must be positive")

        if self.learning.review_interval_days < 0:
            raise ValidationError("REVIEW_INTERVAL_DAYS cannot be negative")

        if self.learning.new_word_target < 0 or self.learning.review_word_target < 0:
            raise ValidationError("NEW_WORD_TARGET and REVIEW_WORD_TARGET cannot be negative")

        if self.learning.min_difficulty > self.learning.max_difficulty:
            raise ValidationError("MIN_DIFFICULTY cannot be greater than MAX_DIFFICULTY")

        if not 0 <= self.learning.day_start_hour <= 23:
            raise ValidationError("DAY_START_HOUR must be between 0 and 23")

        if self.quiz.quiz_size < 1:
            raise ValidationError("QUIZ_SIZE must be positive")

        if self.quiz.options_count < 2:
            raise ValidationError("QUIZ_OPTIONS must be at least 2")


# Create global settings instance
settings = Settings()
settings.validate()
