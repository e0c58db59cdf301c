"""Settings models and YAML loading."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class AccessPolicy(BaseModel):
    # Heuristics layered over the primary account/group evaluation.
    server_track: bool = True
    list_fallback: bool = True


class LockWaitSettings(BaseModel):
    timeout: Optional[float] = Field(default=None, ge=0)  # seconds; None waits indefinitely
    poll_interval: float = Field(default=0.1, gt=0)


class Settings(BaseModel):
    policy: AccessPolicy = Field(default_factory=AccessPolicy)
    lock_wait: LockWaitSettings = Field(default_factory=LockWaitSettings)


def load_settings(path: Path | None) -> Settings:
    if path is None:
        return Settings()
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        raise ValueError(f"Settings file {path} must contain a mapping.")
    return Settings.model_validate(raw)
