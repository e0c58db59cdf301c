"""Pydantic model for a security identifier."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class SecurityId(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["account", "group"]
    value: str

    @classmethod
    def account(cls, value: str) -> "SecurityId":
        return cls(kind="account", value=value)

    @classmethod
    def group(cls, value: str) -> "SecurityId":
        return cls(kind="group", value=value)

    def is_account(self) -> bool:
        return self.kind == "account"

    def __str__(self) -> str:
        return self.value
