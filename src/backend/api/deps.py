"""
Shared dependencies for API endpoints.

Includes:
- Bearer token -> VotingSession (rebuilt from the store on every request)
- Student / admin guards
- Service factories wired to the repository providers
"""

from typing import Annotated, Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import InvalidSessionError
from core.security import compute_device_fingerprint, decode_token
from models.cosmos_documents import AdminDocument, StudentDocument
from repositories.provider import (
    AdminRepositoryProtocol,
    CandidateRepositoryProtocol,
    DeviceRepositoryProtocol,
    PositionRepositoryProtocol,
    SettingsRepositoryProtocol,
    StudentRepositoryProtocol,
    VoteRepositoryProtocol,
    get_admin_repository,
    get_candidate_repository,
    get_device_repository,
    get_position_repository,
    get_settings_repository,
    get_student_repository,
    get_vote_repository,
)
from schemas.auth import AdminIdentity, StudentIdentity, StudentLoginRequest, VotingSession
from services.election_admin import ElectionAdminService
from services.schedule import evaluate_schedule
from services.session_guard import ADMIN_ACCESS_DENIED, SessionGuard
from services.vote_recorder import VoteRecorder

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)

STUDENT_ROLE = "student"
ADMIN_ROLE = "admin"


# =============================================================================
# Helper Functions
# =============================================================================


def student_identity(student: StudentDocument) -> StudentIdentity:
    """Single place where a student record becomes a session identity."""
    return StudentIdentity(
        student_id=student.student_id,
        name=student.name,
        department=student.department,
        has_voted=student.has_voted,
        last_login_time=student.last_login_time,
        vote_timestamp=student.vote_timestamp,
    )


def admin_identity(admin: AdminDocument) -> AdminIdentity:
    return AdminIdentity(admin_id=admin.id, email=admin.email, display_name=admin.display_name)


def resolve_device_id(request: StudentLoginRequest) -> Optional[str]:
    """Cached fingerprint hash if the client sent one, else hash the raw signals."""
    if request.device_id:
        return request.device_id
    if request.device_signals:
        return compute_device_fingerprint(request.device_signals)
    return None


# =============================================================================
# Session
# =============================================================================


async def get_voting_session(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    students: StudentRepositoryProtocol = Depends(get_student_repository),
    admins: AdminRepositoryProtocol = Depends(get_admin_repository),
    settings_repo: SettingsRepositoryProtocol = Depends(get_settings_repository),
) -> VotingSession:
    """
    Rebuild the caller's session from the bearer token.

    A student token is only honoured while the student record is still
    logged in under the same login (session id and device) and has not voted.

    Raises:
        InvalidSessionError: Missing, invalid or expired token, or a session
            that has since been closed.
    """
    if credentials is None:
        raise InvalidSessionError("Not authenticated")

    payload = decode_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise InvalidSessionError("Invalid or expired token")

    subject = payload["sub"]
    role = payload.get("role")
    voting = evaluate_schedule(await settings_repo.get_election_config())

    if role == STUDENT_ROLE:
        student = await students.get_by_id(subject)
        if student is None or not student.is_logged_in or student.has_voted:
            raise InvalidSessionError()
        if student.session_id != payload.get("sid") or student.device_id != payload.get("device_id"):
            logger.warning("student_session_superseded", student_id=subject)
            raise InvalidSessionError()
        return VotingSession(identity=student_identity(student), device_id=student.device_id, voting=voting)

    if role == ADMIN_ROLE:
        admin = await admins.get_by_id(subject)
        if admin is None:
            raise InvalidSessionError()
        return VotingSession(identity=admin_identity(admin), voting=voting)

    raise InvalidSessionError("Invalid token payload")


async def require_student(
    session: Annotated[VotingSession, Depends(get_voting_session)],
) -> VotingSession:
    if not session.is_student:
        raise InvalidSessionError()
    return session


async def require_admin(
    session: Annotated[VotingSession, Depends(get_voting_session)],
) -> VotingSession:
    """
    Ensure the caller is an administrator.

    Raises:
        InvalidSessionError: The session belongs to a student.
    """
    if not session.is_admin:
        logger.warning("non_admin_access_attempt", identity=session.identity.kind)
        raise InvalidSessionError(ADMIN_ACCESS_DENIED)
    return session


# =============================================================================
# Services
# =============================================================================


async def get_session_guard(
    students: StudentRepositoryProtocol = Depends(get_student_repository),
    devices: DeviceRepositoryProtocol = Depends(get_device_repository),
    admins: AdminRepositoryProtocol = Depends(get_admin_repository),
) -> SessionGuard:
    return SessionGuard(students, devices, admins)


async def get_vote_recorder(
    students: StudentRepositoryProtocol = Depends(get_student_repository),
    votes: VoteRepositoryProtocol = Depends(get_vote_repository),
    devices: DeviceRepositoryProtocol = Depends(get_device_repository),
    settings_repo: SettingsRepositoryProtocol = Depends(get_settings_repository),
) -> VoteRecorder:
    return VoteRecorder(students, votes, devices, settings_repo)


async def get_admin_service(
    students: StudentRepositoryProtocol = Depends(get_student_repository),
    positions: PositionRepositoryProtocol = Depends(get_position_repository),
    candidates: CandidateRepositoryProtocol = Depends(get_candidate_repository),
    votes: VoteRepositoryProtocol = Depends(get_vote_repository),
    settings_repo: SettingsRepositoryProtocol = Depends(get_settings_repository),
) -> ElectionAdminService:
    return ElectionAdminService(students, positions, candidates, votes, settings_repo)
