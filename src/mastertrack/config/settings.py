"""Configuration model for Mastertrack."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class Settings(BaseModel):
    data_dir: Path = Path.home() / ".mastertrack"
    weak_threshold: float = Field(default=60, ge=0, le=100)
    strong_threshold: float = Field(default=80, ge=0, le=100)
    recommend_limit: int = Field(default=5, ge=1)
    log_level: str = "WARNING"

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        config_path = config_path or (Path.home() / ".mastertrack" / "config.yaml")
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        return cls()

    def save(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        config_path = self.data_dir / "config.yaml"
        with open(config_path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)

    def get_data_dir(self) -> Path:
        env = os.environ.get("MASTERTRACK_DATA_DIR")
        return Path(env) if env else self.data_dir

    def get_log_level(self) -> str:
        level = (os.environ.get("MASTERTRACK_LOG_LEVEL") or self.log_level).upper()
        # getLevelName maps known names to ints and anything else to a string
        if not isinstance(logging.getLevelName(level), int):
            return "WARNING"
        return level

    @property
    def db_path(self) -> Path:
        return self.get_data_dir() / "progress.db"
