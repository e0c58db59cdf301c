"""Pydantic models for processes holding file locks."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LockingProcess(BaseModel):
    model_config = ConfigDict(frozen=True)

    pid: int
    name: str = ""

    def __str__(self) -> str:
        return f"{self.name or '?'} ({self.pid})"


class LockOwnership(BaseModel):
    owners: dict[Path, tuple[LockingProcess, ...]] = Field(default_factory=dict)

    def processes(self) -> list[LockingProcess]:
        seen: dict[int, LockingProcess] = {}
        for processes in self.owners.values():
            for process in processes:
                seen.setdefault(process.pid, process)
        return list(seen.values())
