"""Configuration settings for the learning core."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Mastery settings
MIN_MASTERY = 0
MAX_MASTERY = 100
MASTERY_DELTAS = {"easy": 15, "medium": 8, "hard": -5}  # points per rating
DEFAULT_SESSION_WORD_LIMIT = 10


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///wordjungle.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class LearningSettings:
    """Learning process settings."""
    session_word_limit: int = int(os.getenv("SESSION_WORD_LIMIT", str(DEFAULT_SESSION_WORD_LIMIT)))
    min_mastery: int = MIN_MASTERY
    max_mastery: int = MAX_MASTERY
    mastery_deltas: dict[str, int] = field(default_factory=lambda: dict(MASTERY_DELTAS))


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.learning.session_word_limit < 1:
            raise ValueError("SESSION_WORD_LIMIT must be positive")

        if self.learning.min_mastery >= self.learning.max_mastery:
            raise ValueError("Mastery lower bound must be below the upper bound")

        if self.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL {self.logging.level!r} is not a valid level")

        if not 0 < self.monitoring.port < 65536:
            raise ValueError("METRICS_PORT must be a valid TCP port")


# Create global settings instance
settings = Settings()
settings.validate()
