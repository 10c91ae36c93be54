from pydantic_settings import BaseSettings
from pathlib import Path
from typing import List

# Get the project root directory (parent of studyplan folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'study_planner.db'}"

    # Day-change watcher polling interval
    sweep_interval_seconds: int = 60

    log_level: str = "INFO"

    # Suggested categories, merged with the ones already in use
    default_categories: List[str] = [
        "Programming",
        "Math",
        "Science",
        "Language",
        "Reading",
        "Writing",
        "Music",
        "Art",
    ]

    class Config:
        env_file = str(PROJECT_ROOT / ".env")

settings = Settings()
