"""
Election-related Pydantic schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class ScheduleStatus(str, Enum):
    """Derived state of the voting window."""

    NOT_SCHEDULED = "not_scheduled"
    DISABLED = "disabled"
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    ENDED = "ended"


class Countdown(BaseModel):
    """Remaining time split into display units."""

    expired: bool
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    total_ms: int = 0


class VotingStatus(BaseModel):
    """Schedule status plus the message and countdown shown to users."""

    status: ScheduleStatus
    message: str
    target_time: Optional[datetime] = Field(
        None, description="Start time when not started, end time when active or ended"
    )
    time_remaining_ms: Optional[int] = Field(None, description="Milliseconds until target_time")
    countdown: Optional[Countdown] = None

    @property
    def is_active(self) -> bool:
        return self.status == ScheduleStatus.ACTIVE


class ElectionConfigResponse(BaseModel):
    """Stored schedule and departmental voting settings."""

    voting_start: Optional[datetime] = None
    voting_end: Optional[datetime] = None
    enable_departmental_voting: bool = False
    allow_cross_department_voting: bool = True
    is_active: bool = False
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ElectionStatusResponse(BaseModel):
    """Public election status, polled by the dashboards."""

    server_time: datetime
    voting: VotingStatus
    config: Optional[ElectionConfigResponse] = None
    total_positions: int = 0


class ScheduleUpdate(BaseModel):
    """Admin schedule save request."""

    voting_start: Optional[datetime] = None
    voting_end: Optional[datetime] = None
    enable_departmental_voting: bool = False
    allow_cross_department_voting: bool = True
    is_active: bool = False


class PositionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""


class PositionResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CandidateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    department: str = ""
    bio: str = ""
    photo_url: str = ""
    position_id: str


class CandidateResponse(BaseModel):
    id: str
    name: str
    department: str = ""
    bio: str = ""
    photo_url: str = ""
    position_id: str

    model_config = {"from_attributes": True}


class DepartmentNotice(BaseModel):
    """Explains which candidates a student is allowed to see."""

    user_department: Optional[str] = None
    restricted_mode: bool
    message: str


class BallotPosition(BaseModel):
    """One position on a student's ballot with its visible candidates."""

    id: str
    name: str
    description: str = ""
    candidates: list[CandidateResponse] = Field(default_factory=list)


class BallotResponse(BaseModel):
    """Everything the voting page needs."""

    voting: VotingStatus
    positions: list[BallotPosition]
    department_notice: Optional[DepartmentNotice] = None
    voting_credits: int = Field(0, description="One credit per position")


class BallotChoice(BaseModel):
    position_id: str
    candidate_id: str


class BallotSubmission(BaseModel):
    """A complete ballot: one candidate per position."""

    votes: list[BallotChoice] = Field(..., min_length=1)

    @model_validator(mode="after")
    def one_choice_per_position(self) -> "BallotSubmission":
        seen: set[str] = set()
        for choice in self.votes:
            if choice.position_id in seen:
                raise ValueError(f"Position {choice.position_id} appears more than once")
            seen.add(choice.position_id)
        return self


class VoteSubmissionResponse(BaseModel):
    success: bool
    message: str
    votes_recorded: int
    vote_timestamp: datetime
