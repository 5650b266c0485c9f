"""
Session and device guard.

Implements the student login gate (one open session per student, no login
after voting, no reuse of a device the student already voted from) and admin
sign-in. A student's session is the is_logged_in flag on the student record;
the flag is flipped with a compare-and-swap so two simultaneous logins cannot
both pass the check.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from azure.cosmos.exceptions import CosmosHttpResponseError

from core.exceptions import (
    AlreadyLoggedInError,
    AlreadyVotedError,
    ConcurrentUpdateError,
    DeviceAlreadyUsedError,
    InvalidCredentialError,
    NotFoundError,
    WriteFailedError,
)
from core.security import verify_password
from db.cosmos_session import PreconditionFailed
from models.cosmos_documents import AdminDocument, StudentDocument
from repositories.provider import (
    AdminRepositoryProtocol,
    DeviceRepositoryProtocol,
    StudentRepositoryProtocol,
)

logger = structlog.get_logger(__name__)

# A lost compare-and-swap re-reads the record and re-applies the checks once.
LOGIN_ATTEMPTS = 2

ADMIN_ACCESS_DENIED = "Access denied. Admin privileges required."


class SessionGuard:
    """Opens and closes student and admin sessions."""

    def __init__(
        self,
        students: StudentRepositoryProtocol,
        devices: DeviceRepositoryProtocol,
        admins: Optional[AdminRepositoryProtocol] = None,
    ):
        self.students = students
        self.devices = devices
        self.admins = admins

    async def _check_student(
        self,
        student: Optional[StudentDocument],
        password: str,
        device_id: Optional[str],
        force: bool,
    ) -> StudentDocument:
        """Apply the login checks in order; raise the first that fails."""
        if student is None:
            raise NotFoundError()

        if student.password != password:
            raise InvalidCredentialError()

        if student.has_voted:
            raise AlreadyVotedError()

        if student.is_logged_in and not force:
            raise AlreadyLoggedInError()

        if device_id and await self.devices.is_used(device_id, student.student_id):
            raise DeviceAlreadyUsedError()

        return student

    async def login_student(
        self,
        student_id: str,
        password: str,
        device_id: Optional[str] = None,
        force: bool = False,
    ) -> StudentDocument:
        """
        Open a student session.

        Args:
            student_id: The student's id
            password: Plaintext password as issued
            device_id: Device fingerprint hash, if the client supplied one
            force: Skip the already-logged-in check (recovers a session that
                was never closed, e.g. a crashed browser)

        Raises:
            NotFoundError, InvalidCredentialError, AlreadyVotedError,
            AlreadyLoggedInError, DeviceAlreadyUsedError,
            ConcurrentUpdateError, WriteFailedError
        """
        for attempt in range(LOGIN_ATTEMPTS):
            student = await self.students.get_by_id(student_id)
            student = await self._check_student(student, password, device_id, force)

            student.is_logged_in = True
            student.device_id = device_id
            student.session_id = uuid.uuid4().hex
            student.last_login_time = datetime.now(timezone.utc)

            try:
                student = await self.students.replace_if_unchanged(student)
            except PreconditionFailed:
                logger.warning("student_login_race", student_id=student_id, attempt=attempt + 1)
                continue
            except CosmosHttpResponseError as e:
                logger.error("student_login_write_failed", student_id=student_id, error=str(e))
                raise WriteFailedError() from e

            logger.info("student_logged_in", student_id=student_id, forced=force)
            return student

        raise ConcurrentUpdateError()

    async def logout_student(self, student_id: str) -> None:
        """Close a student session: clear is_logged_in, the device id and the session id."""
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError()

        student.is_logged_in = False
        student.device_id = None
        student.session_id = None
        try:
            await self.students.update(student)
        except CosmosHttpResponseError as e:
            logger.error("student_logout_write_failed", student_id=student_id, error=str(e))
            raise WriteFailedError() from e

        logger.info("student_logged_out", student_id=student_id)

    async def login_admin(self, email: str, password: str) -> AdminDocument:
        """
        Sign an administrator in with email and password.

        Unknown email and wrong password fail the same way.
        """
        if self.admins is None:
            raise InvalidCredentialError(ADMIN_ACCESS_DENIED)

        admin = await self.admins.get_by_email(email)
        if admin is None or not verify_password(password, admin.password_hash):
            logger.warning("admin_login_denied", email=email)
            raise InvalidCredentialError(ADMIN_ACCESS_DENIED)

        try:
            admin = await self.admins.update_last_login(admin)
        except CosmosHttpResponseError as e:
            logger.error("admin_login_write_failed", admin_id=admin.id, error=str(e))
            raise WriteFailedError() from e

        logger.info("admin_logged_in", admin_id=admin.id)
        return admin
