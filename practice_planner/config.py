"""Configuration management for the practice planner."""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Storage
    DATA_DIR: Path = Path(os.getenv("PRACTICE_PLANNER_DATA_DIR", "~/.practice_planner")).expanduser()
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'practice_planner.db'}")

    # Calendar
    CALENDAR_DAYS: int = int(os.getenv("CALENDAR_DAYS", "7"))  # rolling agenda window

    # Weights are whole units; the unit label is display only
    WEIGHT_UNIT: str = os.getenv("WEIGHT_UNIT", "lb")

    # GZCLP tier overrides (empty = use the standard tier table)
    GZCLP_T1_INCREMENT: str = os.getenv("GZCLP_T1_INCREMENT", "")
    GZCLP_T2_INCREMENT: str = os.getenv("GZCLP_T2_INCREMENT", "")
    GZCLP_T3_INCREMENT: str = os.getenv("GZCLP_T3_INCREMENT", "")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def get_weight_increment(cls, tier: str, default: int) -> int:
        """Get the weight increment for a GZCLP tier, honouring overrides."""
        raw = getattr(cls, f"GZCLP_{tier.upper()}_INCREMENT", "")
        if not raw:
            return default
        try:
            increment = int(raw)
        except ValueError:
            return default
        return increment if increment > 0 else default

    @classmethod
    def ensure_dirs(cls) -> None:
        """Ensure required directories exist."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def configure_logging(cls, level: str = None) -> None:
        """Configure root logging from LOG_LEVEL."""
        level_name = (level or cls.LOG_LEVEL).upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format=cls.LOG_FORMAT,
        )


config = Config()
