"""Pydantic model for a principal plus its group memberships."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from dir_access.models.security_id import SecurityId


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    principal: SecurityId
    groups: Optional[frozenset[SecurityId]] = None  # None: membership could not be resolved

    def require_groups(self) -> frozenset[SecurityId]:
        if self.groups is None:
            raise ValueError(f"Identity {self.principal} carries no group membership data.")
        return self.groups

    def group_values(self) -> frozenset[str]:
        return frozenset(group.value for group in self.require_groups())
