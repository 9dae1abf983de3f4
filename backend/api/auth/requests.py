"""Request bodies for the auth and profile endpoints."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shared.auth.service import (
    EMAIL_PATTERN,
    FULL_NAME_MAX_LENGTH,
    FULL_NAME_MIN_LENGTH,
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LENGTH,
    normalize_email,
)


def _check_avatar_url(value: str | None) -> str | None:
    if value is None:
        return None
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Avatar must be a valid URL")
    return value


def _check_full_name(value: str) -> str:
    stripped = value.strip()
    if not FULL_NAME_MIN_LENGTH <= len(stripped) <= FULL_NAME_MAX_LENGTH:
        raise ValueError(f"Full name must be between {FULL_NAME_MIN_LENGTH} and {FULL_NAME_MAX_LENGTH} characters")
    return stripped


def _check_email(value: str) -> str:
    email = normalize_email(value)
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Please provide a valid email")
    return email


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class RegisterRequest(_RequestModel):
    full_name: str
    email: str
    password: str
    avatar: str | None = None

    @field_validator("full_name")
    @classmethod
    def _validate_full_name(cls, v: str) -> str:
        return _check_full_name(v)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def _validate_password(cls, v: str) -> str:
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes when encoded")
        return v

    @field_validator("avatar")
    @classmethod
    def _validate_avatar(cls, v: str | None) -> str | None:
        return _check_avatar_url(v)


class LoginRequest(_RequestModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, v: str) -> str:
        return _check_email(v)


class ProfileUpdateRequest(_RequestModel):
    full_name: str | None = None
    avatar: str | None = None

    @field_validator("full_name")
    @classmethod
    def _validate_full_name(cls, v: str | None) -> str | None:
        return None if v is None else _check_full_name(v)

    @field_validator("avatar")
    @classmethod
    def _validate_avatar(cls, v: str | None) -> str | None:
        return _check_avatar_url(v)
