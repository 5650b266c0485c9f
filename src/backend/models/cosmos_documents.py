"""
Cosmos DB document models for CouncilVote.

These Pydantic models define the document structure stored in Cosmos DB and
are validated whenever a document crosses the store boundary.

Container Strategy:
- users: Student records, id = student id (partition: /id)
- admins: Admin accounts, id = admin uid (partition: /id)
- positions: Council positions (partition: /id)
- candidates: Candidates standing for a position (partition: /id)
- votes: One document per (voter, position) choice (partition: /position_id)
- devices: Device usage locks, id = "{device_id}_{student_id}" (partition: /id)
- settings: Singleton election configuration, id = "electionConfig" (partition: /id)
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

ELECTION_CONFIG_ID = "electionConfig"


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# ============================================================================
# Base Document Model
# ============================================================================


class CosmosDocument(BaseModel):
    """
    Base class for Cosmos DB documents.

    All documents have:
    - id: Unique identifier (also used as partition key for most containers)
    - etag: Cosmos DB `_etag`, used for compare-and-swap replaces

    Other system properties (_ts, _rid, ...) are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    etag: Optional[str] = Field(default=None, alias="_etag", exclude=True)

    def to_document(self) -> dict:
        """Serialize for writing, without Cosmos system properties."""
        data = self.model_dump(mode="json")
        return {key: value for key, value in data.items() if not key.startswith("_")}


# ============================================================================
# Identity Documents
# ============================================================================


class StudentDocument(CosmosDocument):
    """
    Student record stored in the 'users' container.

    Partition key: /id (the student id)
    The "session" of a student is the is_logged_in flag on this record.
    """

    student_id: str
    name: str
    department: str = ""  # class/department, used for departmental voting
    password: str  # Stored as issued; compared as plaintext at login

    has_voted: bool = False
    is_logged_in: bool = False
    device_id: Optional[str] = None
    session_id: Optional[str] = None  # Rotated on every login; student tokens carry it as "sid"

    last_login_time: Optional[datetime] = None
    vote_timestamp: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class AdminDocument(CosmosDocument):
    """
    Admin account stored in the 'admins' container.

    Partition key: /id
    """

    email: str
    password_hash: str
    display_name: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None


# ============================================================================
# Election Documents
# ============================================================================


class PositionDocument(CosmosDocument):
    """A council position (President, Secretary, ...)."""

    name: str
    description: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class CandidateDocument(CosmosDocument):
    """A candidate standing for one position."""

    name: str
    department: str = ""
    bio: str = ""
    photo_url: str = ""
    position_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class VoteDocument(CosmosDocument):
    """
    A single vote stored in the 'votes' container.

    Partition key: /position_id
    Append-only. The voter id is stored directly on the vote.
    """

    position_id: str
    candidate_id: str
    voter_id: str
    device_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)


class ElectionConfigDocument(CosmosDocument):
    """
    Singleton election configuration in the 'settings' container.

    Overwritten wholesale on every save.
    """

    id: str = ELECTION_CONFIG_ID
    voting_start: Optional[datetime] = None
    voting_end: Optional[datetime] = None
    enable_departmental_voting: bool = False
    allow_cross_department_voting: bool = True
    is_active: bool = False
    updated_at: datetime = Field(default_factory=utcnow)


class DeviceUsageDocument(CosmosDocument):
    """
    Device lock stored in the 'devices' container.

    One document per (device fingerprint, student) pair; `used` is set when
    that student submits a ballot from the device.
    """

    device_id: str
    student_id: str
    used: bool = False
    timestamp: datetime = Field(default_factory=utcnow)

    @staticmethod
    def make_id(device_id: str, student_id: str) -> str:
        return f"{device_id}_{student_id}"
