"""Shapes of identity-provider payloads and account request bodies."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthInfo(BaseModel):
    """Profile claims reported by the provider."""

    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None


class AuthPayload(BaseModel):
    """Transient result of a provider login, consumed once per reconciliation."""

    provider: Optional[str] = None
    uid: Optional[str] = None
    info: AuthInfo = Field(default_factory=AuthInfo)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("provider", "uid", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        # GitHub reports numeric ids.
        if value is None:
            return None
        return str(value)

    @field_validator("info", "extra", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def without_extra(self) -> Dict[str, Any]:
        """Serializable form with provider internals removed."""

        return self.model_dump(exclude={"extra"})


class RegistrationRequest(BaseModel):
    email: str
    name: Optional[str] = None
    password: str = Field(min_length=8, max_length=128)


class SignInRequest(BaseModel):
    email: str
    password: str


__all__ = ["AuthInfo", "AuthPayload", "RegistrationRequest", "SignInRequest"]
