import os
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email

# NOTE: field names must stay in sync with the application's User document
IDENTITY_FIELDS = ("id", "email", "hashedPassword", "activeKey", "verified", "isAdmin")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class SeedUserRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    email: str
    hashed_password: str = Field(alias="hashedPassword", min_length=1)  # opaque, never computed here
    active_key: str = Field(alias="activeKey")
    verified: bool = True
    is_admin: bool = Field(default=True, alias="isAdmin")
    creation_time_utc: Optional[datetime] = Field(default=None, alias="creationTimeUtc")

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        # checked only; the configured spelling is stored as is
        validate_email(v)
        return v

    @field_validator("is_admin")
    @classmethod
    def always_admin(cls, v: bool) -> bool:
        if not v:
            raise ValueError("the seed user is always an administrator")
        return v

    def to_document(self, creation_time_utc: datetime) -> Dict[str, Any]:
        doc = self.model_dump(by_alias=True)
        doc["creationTimeUtc"] = creation_time_utc
        return doc


def comparison_key(record: SeedUserRecord) -> Dict[str, Any]:
    """
    Canonical identity of the seed user: every persisted field except the
    volatile creation timestamp. Used verbatim as an equality filter.
    """
    doc = record.model_dump(by_alias=True)
    return {f: doc[f] for f in IDENTITY_FIELDS}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    v = raw.strip().lower()
    if v in _TRUTHY:
        return True
    if v in _FALSY:
        return False
    raise RuntimeError(f"{name} must be a boolean, got {raw!r}")


def seed_user_from_env() -> SeedUserRecord:
    password_hash = os.getenv("SEED_USER_PASSWORD_HASH")
    if not password_hash:
        raise RuntimeError("SEED_USER_PASSWORD_HASH is not set")

    return SeedUserRecord(
        id=os.getenv("SEED_USER_ID", "dev").strip(),
        email=os.getenv("SEED_USER_EMAIL", "dev@sentinel.org").strip(),
        hashedPassword=password_hash,
        activeKey=os.getenv("SEED_USER_ACTIVE_KEY", "dev").strip(),
        verified=_env_bool("SEED_USER_VERIFIED", True),
        isAdmin=True,
    )
