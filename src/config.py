"""Application configuration loaded from environment variables and .env file."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    """Narrative service settings.

    Environment variables take precedence over the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Generation defaults
    WORLD_SEED: int = 42
    WORLD_NAME: str = "Iron Frontier"

    # Content pack
    CONTENT_DIR: Optional[Path] = None
    STRICT_CONTENT: bool = False

    @property
    def content_dir(self) -> Path:
        """CONTENT_DIR이 없으면 패키지에 포함된 src/data"""
        return self.CONTENT_DIR or PACKAGE_DATA_DIR


settings = Settings()
