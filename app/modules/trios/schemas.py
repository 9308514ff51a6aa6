from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from enum import Enum

from app.modules.trios.models import MEMBER_COLUMNS, GROUP_SIZE, MAX_GROUP_SIZE


class Candidate(BaseModel):
    user_id: str
    birthday: Optional[date] = None

    @field_validator("birthday", mode="before")
    @classmethod
    def parse_birthday(cls, value: Any) -> Optional[date]:
        """Missing or unparseable birthdays become None so the candidate is filtered out, not rejected."""
        if value is None or isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            return None


class FormedGroup(BaseModel):
    member_ids: List[str] = Field(min_length=GROUP_SIZE, max_length=MAX_GROUP_SIZE)
    date: date

    @field_validator("member_ids")
    @classmethod
    def unique_members(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("group members must be unique")
        return value

    def to_row(self) -> Dict[str, Any]:
        """Map to a trios row: user1_id..user5_id, unused slots left null."""
        row: Dict[str, Any] = {column: None for column in MEMBER_COLUMNS}
        for column, member_id in zip(MEMBER_COLUMNS, self.member_ids):
            row[column] = member_id
        row["date"] = self.date.isoformat()
        return row


class PersistedGroup(BaseModel):
    id: str
    date: date
    member_ids: List[str]
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PersistedGroup":
        return cls(
            id=str(row["id"]),
            date=row["date"],
            member_ids=[row[c] for c in MEMBER_COLUMNS if row.get(c)],
            created_at=row.get("created_at"),
        )

    @property
    def member_count(self) -> int:
        return len(self.member_ids)


class FormationOutcome(str, Enum):
    ALREADY_FORMED = "already_formed"
    NOT_ENOUGH_USERS = "not_enough_users"
    NOT_ENOUGH_ELIGIBLE_USERS = "not_enough_eligible_users"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


OUTCOME_MESSAGES = {
    FormationOutcome.ALREADY_FORMED: "groups already exist for today",
    FormationOutcome.NOT_ENOUGH_USERS: "not enough users",
    FormationOutcome.NOT_ENOUGH_ELIGIBLE_USERS: "not enough eligible users",
    FormationOutcome.IN_PROGRESS: "group formation already in progress",
    FormationOutcome.COMPLETED: "group randomization completed successfully",
}


class FormationResult(BaseModel):
    outcome: FormationOutcome
    date: date
    groups: List[PersistedGroup] = []
    hook_failures: List[str] = []

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]

    @property
    def groups_created(self) -> int:
        return len(self.groups)

    def to_response(self) -> Dict[str, Any]:
        """JSON body returned to the invoker."""
        body: Dict[str, Any] = {"message": self.message}
        if self.outcome == FormationOutcome.COMPLETED:
            body["groups_created"] = self.groups_created
            body["date"] = self.date.isoformat()
            if self.hook_failures:
                body["hook_failures"] = self.hook_failures
        return body


class FormationErrorResponse(BaseModel):
    error: str = "internal server error"
    details: str
