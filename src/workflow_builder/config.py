"""Configuration and settings."""

import logging
from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # Document
    root_id: str = Field(default="start", alias="WORKFLOW_ROOT_ID")
    root_label: str = Field(default="Start", alias="WORKFLOW_ROOT_LABEL")
    id_prefix: str = Field(default="node", alias="WORKFLOW_ID_PREFIX")

    # History depth per stack; None keeps every snapshot
    history_limit: Optional[int] = Field(default=None, ge=1, alias="WORKFLOW_HISTORY_LIMIT")

    # Logging
    log_level: str = Field(default="INFO", alias="WORKFLOW_LOG_LEVEL")
    log_dir: Optional[Path] = Field(default=None, alias="WORKFLOW_LOG_DIR")

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

    def get_log_level(self) -> int:
        """Get the numeric logging level."""
        level = logging.getLevelName(self.log_level.upper())
        if isinstance(level, int):
            return level
        return logging.INFO


settings = Settings()
