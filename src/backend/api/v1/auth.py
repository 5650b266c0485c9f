"""
Authentication endpoints.

Students sign in with the student id and password issued by the election
administrator; admins sign in with email and password. Both receive a bearer
session token. A student may hold one open session at a time.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from api.deps import (
    ADMIN_ROLE,
    STUDENT_ROLE,
    admin_identity,
    get_session_guard,
    get_voting_session,
    resolve_device_id,
    student_identity,
)
from core.security import create_session_token
from repositories.provider import (
    PositionRepositoryProtocol,
    VoteRepositoryProtocol,
    get_position_repository,
    get_vote_repository,
)
from schemas.auth import (
    AdminLoginRequest,
    LogoutResponse,
    MeResponse,
    SessionResponse,
    StudentIdentity,
    StudentLoginRequest,
    VotingSession,
)
from services.session_guard import SessionGuard

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _student_login(request: StudentLoginRequest, guard: SessionGuard, force: bool) -> SessionResponse:
    device_id = resolve_device_id(request)
    student = await guard.login_student(
        request.student_id.strip(),
        request.password,
        device_id=device_id,
        force=force,
    )
    token = create_session_token(
        student.student_id, STUDENT_ROLE, device_id=device_id, session_id=student.session_id
    )
    return SessionResponse(access_token=token, device_id=device_id, identity=student_identity(student))


@router.post("/student/login", response_model=SessionResponse)
async def student_login(
    request: StudentLoginRequest,
    guard: Annotated[SessionGuard, Depends(get_session_guard)],
) -> SessionResponse:
    """
    Open a student session.

    Fails if the student is unknown, the password is wrong, the student has
    already voted, is logged in elsewhere, or already voted from this device.
    """
    return await _student_login(request, guard, force=False)


@router.post("/student/force-login", response_model=SessionResponse)
async def student_force_login(
    request: StudentLoginRequest,
    guard: Annotated[SessionGuard, Depends(get_session_guard)],
) -> SessionResponse:
    """
    Open a student session even if one is already open.

    The earlier session's token stops working. All other login checks still
    apply.
    """
    logger.info("student_force_login_requested", student_id=request.student_id)
    return await _student_login(request, guard, force=True)


@router.post("/admin/login", response_model=SessionResponse)
async def admin_login(
    request: AdminLoginRequest,
    guard: Annotated[SessionGuard, Depends(get_session_guard)],
) -> SessionResponse:
    """Sign an administrator in."""
    admin = await guard.login_admin(request.email.strip().lower(), request.password)
    token = create_session_token(admin.id, ADMIN_ROLE)
    return SessionResponse(access_token=token, identity=admin_identity(admin))


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    session: Annotated[VotingSession, Depends(get_voting_session)],
    guard: Annotated[SessionGuard, Depends(get_session_guard)],
) -> LogoutResponse:
    """
    Close the current session.

    Students are marked logged out and their device is released. Admin
    sessions are token-only; the client discards the token.
    """
    if isinstance(session.identity, StudentIdentity):
        await guard.logout_student(session.identity.student_id)
    return LogoutResponse()


@router.get("/me", response_model=MeResponse)
async def me(
    session: Annotated[VotingSession, Depends(get_voting_session)],
    positions: PositionRepositoryProtocol = Depends(get_position_repository),
    votes: VoteRepositoryProtocol = Depends(get_vote_repository),
) -> MeResponse:
    """Current identity, schedule status and voting credits."""
    credits = await positions.count()
    used = 0
    if isinstance(session.identity, StudentIdentity):
        used = len(await votes.list_by_voter(session.identity.student_id))

    return MeResponse(
        identity=session.identity,
        device_id=session.device_id,
        voting=session.voting,
        voting_credits=credits,
        used_credits=used,
    )
