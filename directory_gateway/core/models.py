"""Directory record types and their JSON wire shape."""
from __future__ import annotations
import datetime
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional


class Role(str, Enum):
    """The two roles a directory record can hold."""
    USER = "USER"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, raw: Any) -> "Role":
        """Parse a role token (case-insensitive).

        Raises:
            ValueError: If the token is not USER or ADMIN
        """
        if isinstance(raw, Role):
            return raw
        token = str(raw or "").strip().upper()
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Unknown role '{raw}'; expected one of USER, ADMIN") from None


def _parse_date(raw: Any) -> Optional[datetime.date]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime.date):
        return raw
    try:
        return datetime.date.fromisoformat(str(raw))
    except ValueError:
        raise ValueError(f"birthday must be an ISO date (YYYY-MM-DD), got '{raw}'") from None


def _parse_text(payload: dict, key: str) -> Optional[str]:
    raw = payload.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValueError(f"{key} must be a string, got {type(raw).__name__}")
    return raw


def _parse_id(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError("id must be an integer")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"id must be an integer, got '{raw}'") from None


@dataclass(frozen=True)
class DirectoryRecord:
    """A user entity as held by the remote directory.

    ``id`` is None until the directory assigns one on creation.
    """
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birthday: Optional[datetime.date] = None
    role: Optional[Role] = None
    id: Optional[int] = None

    @classmethod
    def from_json(cls, payload: dict) -> "DirectoryRecord":
        """Build a record from the directory's camelCase JSON.

        Raises:
            ValueError: If the payload is not an object or a field has the wrong shape
        """
        if not isinstance(payload, dict):
            raise ValueError("Directory record must be a JSON object")
        role = payload.get("role")
        return cls(
            id=_parse_id(payload.get("id")),
            email=_parse_text(payload, "email"),
            password=_parse_text(payload, "password"),
            first_name=_parse_text(payload, "firstName"),
            last_name=_parse_text(payload, "lastName"),
            birthday=_parse_date(payload.get("birthday")),
            role=Role.parse(role) if role else None,
        )

    def to_json(self) -> dict:
        """Serialize to the directory's JSON shape, omitting unset fields."""
        payload = {
            "id": self.id,
            "email": self.email,
            "password": self.password,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "birthday": self.birthday.isoformat() if self.birthday else None,
            "role": self.role.value if self.role else None,
        }
        return {key: value for key, value in payload.items() if value is not None}

    def with_id(self, record_id: int) -> "DirectoryRecord":
        return replace(self, id=record_id)


@dataclass(frozen=True)
class UpdateRequest:
    """Partial record sent by a caller to modify an existing entry.

    Blank strings and future birthdays mean "keep the current value".
    The body's id is never trusted; the path id replaces it before merge.
    """
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birthday: Optional[datetime.date] = None
    id: Optional[int] = None

    @classmethod
    def from_json(cls, payload: dict) -> "UpdateRequest":
        if not isinstance(payload, dict):
            raise ValueError("Update request must be a JSON object")
        return cls(
            email=_parse_text(payload, "email"),
            password=_parse_text(payload, "password"),
            first_name=_parse_text(payload, "firstName"),
            last_name=_parse_text(payload, "lastName"),
            birthday=_parse_date(payload.get("birthday")),
        )

    def with_id(self, record_id: int) -> "UpdateRequest":
        return replace(self, id=record_id)
