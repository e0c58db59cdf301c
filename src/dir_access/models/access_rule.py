"""Pydantic model for an access-control entry."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from dir_access.models.security_id import SecurityId


class AccessControlType(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


class AccessRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: SecurityId
    rights: int  # elementary or generic mask; -1 never grants
    access_type: AccessControlType = AccessControlType.ALLOW
