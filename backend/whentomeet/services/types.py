"""
Shared types for roster and calendar data. Wire/persisted JSON uses camelCase keys
(userId, userName, color); Python code uses snake_case attributes.
"""
import secrets
import string
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Persisted shapes:
#   roster blob:   [ {"id", "name", "color"}, ... ]                    (insertion order)
#   calendar blob: { weekKey: { "day-timeIndex": [SlotEntry, ...] } }  (first-mark order)
SlotTable = dict[str, list[dict[str, Any]]]
Calendar = dict[str, SlotTable]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_user_id() -> str:
    """user-<epoch ms>-<9 base36 chars>; generated client-side on first profile save."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"user-{int(time.time() * 1000)}-{suffix}"


class Profile(BaseModel):
    """A participant. id is immutable once created; name and color may change."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1)

    @field_validator("id", "name", "color", mode="after")
    @classmethod
    def strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    def to_json(self) -> dict[str, str]:
        return self.model_dump()

    def entry(self) -> "SlotEntry":
        return SlotEntry(user_id=self.id, user_name=self.name, color=self.color)


class SlotEntry(BaseModel):
    """One user's mark on one slot: a name/color snapshot of the Profile when it was marked."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    user_name: str = Field(..., min_length=1, alias="userName")
    color: str = Field(..., min_length=1)

    def to_json(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)
