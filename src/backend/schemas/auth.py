"""
Authentication and session schemas.

A request's identity is either a student or an admin; the two are tagged
variants discriminated by `kind`.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from schemas.election import VotingStatus


class StudentIdentity(BaseModel):
    """A logged-in student."""

    kind: Literal["student"] = "student"
    student_id: str
    name: str
    department: str = ""
    has_voted: bool = False
    last_login_time: Optional[datetime] = None
    vote_timestamp: Optional[datetime] = None


class AdminIdentity(BaseModel):
    """A signed-in administrator."""

    kind: Literal["admin"] = "admin"
    admin_id: str
    email: str
    display_name: Optional[str] = None


Identity = Annotated[Union[StudentIdentity, AdminIdentity], Field(discriminator="kind")]


class VotingSession(BaseModel):
    """
    Per-request session context.

    Rebuilt from the bearer token and the store on every request; holds the
    caller's identity, the device the session was opened from and the
    schedule status at the time of the request.
    """

    identity: Identity
    device_id: Optional[str] = None
    voting: VotingStatus

    @property
    def is_admin(self) -> bool:
        return isinstance(self.identity, AdminIdentity)

    @property
    def is_student(self) -> bool:
        return isinstance(self.identity, StudentIdentity)


class StudentLoginRequest(BaseModel):
    """
    Student sign-in.

    The device is identified either by the fingerprint hash the browser
    cached (`device_id`) or by the raw signals it would have hashed
    (`device_signals`).
    """

    student_id: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    device_id: Optional[str] = None
    device_signals: Optional[dict[str, Any]] = None


class AdminLoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """Returned after a successful login."""

    access_token: str
    token_type: str = "bearer"
    device_id: Optional[str] = None
    identity: Identity


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out"


class MeResponse(BaseModel):
    identity: Identity
    device_id: Optional[str] = None
    voting: VotingStatus
    voting_credits: int = 0
    used_credits: int = 0
