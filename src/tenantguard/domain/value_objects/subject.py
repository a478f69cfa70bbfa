"""Authenticated subject and rule subject references."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


@dataclass(frozen=True)
class Subject:
    """Identity supplied by the session layer. Trusted as given."""

    user_id: str
    business_id: UUID
    role: str | None = None
    timezone: str = "UTC"


class SubjectType(StrEnum):
    """Kind of subject a business rule is attached to."""

    USER = "user"
    ROLE = "role"


@dataclass(frozen=True)
class SubjectRef:
    """Reference to a user or a role, as stored on business rules."""

    subject_type: SubjectType
    subject_id: str

    @classmethod
    def user(cls, user_id: str) -> "SubjectRef":
        return cls(SubjectType.USER, user_id)

    @classmethod
    def role(cls, role_id: UUID) -> "SubjectRef":
        return cls(SubjectType.ROLE, str(role_id))

    def __str__(self) -> str:
        return f"{self.subject_type}:{self.subject_id}"
