"""
Election administration.

Positions, candidates and students management, schedule control, bulk
student operations and results. Cascading deletes and bulk operations issue
one write per record, in order, and stop at the first failure; whatever was
already written stays written.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

import structlog
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceExistsError

from core.config import settings
from core.exceptions import (
    AlreadyExistsError,
    InvalidScheduleError,
    NotFoundError,
    WriteFailedError,
)
from core.security import generate_password, generate_student_id
from models.cosmos_documents import (
    CandidateDocument,
    ElectionConfigDocument,
    PositionDocument,
    StudentDocument,
)
from repositories.provider import (
    CandidateRepositoryProtocol,
    PositionRepositoryProtocol,
    SettingsRepositoryProtocol,
    StudentRepositoryProtocol,
    VoteRepositoryProtocol,
)
from schemas.election import CandidateCreate, PositionCreate, ScheduleUpdate
from schemas.results import ElectionStats, PositionResult
from schemas.student import StudentCreate, StudentCredential, StudentImportRow, StudentUpdate
from services.results import election_stats, tally_results
from services.schedule import as_utc

logger = structlog.get_logger(__name__)

TEST_STUDENTS = [
    {"student_id": "S101", "name": "Alice Johnson", "department": "BCA-1", "password": "pass123"},
    {"student_id": "S102", "name": "Bob Smith", "department": "BCA-1", "password": "pass123"},
    {"student_id": "S103", "name": "Charlie Brown", "department": "BCA-2", "password": "pass123"},
    {"student_id": "S104", "name": "Diana Prince", "department": "BCA-2", "password": "pass123"},
    {"student_id": "S105", "name": "Eve Wilson", "department": "BCA-3", "password": "pass123"},
]


@contextmanager
def _store_write(action: str, **context) -> Iterator[None]:
    """Turn store failures into WriteFailedError, logging the action."""
    try:
        yield
    except CosmosHttpResponseError as e:
        logger.error("admin_write_failed", action=action, error=str(e), **context)
        raise WriteFailedError() from e


def _credential(student: StudentDocument) -> StudentCredential:
    return StudentCredential(
        student_id=student.student_id,
        name=student.name,
        department=student.department,
        password=student.password,
    )


def _new_student(student_id: str, name: str, department: str, password: str) -> StudentDocument:
    """A fresh, logged-out, not-yet-voted student."""
    return StudentDocument(
        id=student_id,
        student_id=student_id,
        name=name,
        department=department,
        password=password,
        has_voted=False,
        is_logged_in=False,
        device_id=None,
    )


class ElectionAdminService:
    """Admin operations over the election store."""

    def __init__(
        self,
        students: StudentRepositoryProtocol,
        positions: PositionRepositoryProtocol,
        candidates: CandidateRepositoryProtocol,
        votes: VoteRepositoryProtocol,
        settings_repo: SettingsRepositoryProtocol,
    ):
        self.students = students
        self.positions = positions
        self.candidates = candidates
        self.votes = votes
        self.settings_repo = settings_repo

    # ========================================================================
    # Positions
    # ========================================================================

    async def create_position(self, data: PositionCreate) -> PositionDocument:
        with _store_write("create_position"):
            return await self.positions.create(
                PositionDocument(name=data.name.strip(), description=data.description)
            )

    async def update_position(self, position_id: str, data: PositionCreate) -> PositionDocument:
        position = await self.positions.get_by_id(position_id)
        if position is None:
            raise NotFoundError("Position not found")

        position.name = data.name.strip()
        position.description = data.description
        with _store_write("update_position", position_id=position_id):
            return await self.positions.update(position)

    async def delete_position(self, position_id: str) -> None:
        """Delete a position with its candidates and its votes."""
        position = await self.positions.get_by_id(position_id)
        if position is None:
            raise NotFoundError("Position not found")

        with _store_write("delete_position", position_id=position_id):
            for candidate in await self.candidates.list_by_position(position_id):
                await self.candidates.delete(candidate.id)
            for vote in await self.votes.list_by_position(position_id):
                await self.votes.delete(vote)
            await self.positions.delete(position_id)

        logger.info("position_deleted", position_id=position_id)

    # ========================================================================
    # Candidates
    # ========================================================================

    async def _require_position(self, position_id: str) -> None:
        if await self.positions.get_by_id(position_id) is None:
            raise NotFoundError("Position not found")

    async def create_candidate(self, data: CandidateCreate) -> CandidateDocument:
        await self._require_position(data.position_id)
        candidate = CandidateDocument(
            name=data.name.strip(),
            department=data.department.strip(),
            bio=data.bio,
            photo_url=data.photo_url or "",
            position_id=data.position_id,
        )
        with _store_write("create_candidate"):
            return await self.candidates.create(candidate)

    async def update_candidate(self, candidate_id: str, data: CandidateCreate) -> CandidateDocument:
        candidate = await self.candidates.get_by_id(candidate_id)
        if candidate is None:
            raise NotFoundError("Candidate not found")
        await self._require_position(data.position_id)

        candidate.name = data.name.strip()
        candidate.department = data.department.strip()
        candidate.bio = data.bio
        candidate.photo_url = data.photo_url or ""
        candidate.position_id = data.position_id
        with _store_write("update_candidate", candidate_id=candidate_id):
            return await self.candidates.update(candidate)

    async def delete_candidate(self, candidate_id: str) -> None:
        """Delete a candidate and the votes cast for them."""
        candidate = await self.candidates.get_by_id(candidate_id)
        if candidate is None:
            raise NotFoundError("Candidate not found")

        with _store_write("delete_candidate", candidate_id=candidate_id):
            for vote in await self.votes.list_by_candidate(candidate_id):
                await self.votes.delete(vote)
            await self.candidates.delete(candidate_id)

        logger.info("candidate_deleted", candidate_id=candidate_id)

    # ========================================================================
    # Students
    # ========================================================================

    async def create_student(self, data: StudentCreate) -> StudentDocument:
        student = _new_student(
            data.student_id.strip(),
            data.name.strip(),
            data.department.strip(),
            data.password or settings.DEFAULT_STUDENT_PASSWORD,
        )
        try:
            return await self.students.create(student)
        except CosmosResourceExistsError as e:
            raise AlreadyExistsError(f"Student {student.student_id} already exists") from e
        except CosmosHttpResponseError as e:
            logger.error("admin_write_failed", action="create_student", error=str(e))
            raise WriteFailedError() from e

    async def update_student(self, student_id: str, data: StudentUpdate) -> StudentDocument:
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError()

        student.name = data.name.strip()
        student.department = data.department.strip()
        student.password = data.password
        with _store_write("update_student", student_id=student_id):
            return await self.students.update(student)

    async def delete_student(self, student_id: str) -> int:
        """Delete a student and their votes. Returns the number of votes removed."""
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError()

        with _store_write("delete_student", student_id=student_id):
            votes = await self.votes.list_by_voter(student_id)
            for vote in votes:
                await self.votes.delete(vote)
            await self.students.delete(student_id)

        logger.info("student_deleted", student_id=student_id, votes_deleted=len(votes))
        return len(votes)

    async def delete_all_students(self) -> tuple[int, int]:
        """Delete every vote, then every student. Returns (students, votes) deleted."""
        with _store_write("delete_all_students"):
            votes = await self.votes.list_all()
            for vote in votes:
                await self.votes.delete(vote)

            students = await self.students.list_all()
            for student in students:
                await self.students.delete(student.student_id)

        logger.info("all_students_deleted", students=len(students), votes=len(votes))
        return len(students), len(votes)

    async def reset_password(self, student_id: str) -> StudentCredential:
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError()

        student.password = generate_password()
        with _store_write("reset_password", student_id=student_id):
            student = await self.students.update(student)
        return _credential(student)

    async def reset_all_passwords(self) -> list[StudentCredential]:
        """Issue a new random password to every student, one write at a time."""
        updated: list[StudentCredential] = []
        with _store_write("reset_all_passwords"):
            for student in await self.students.list_all():
                student.password = generate_password()
                updated.append(_credential(await self.students.update(student)))

        logger.info("all_passwords_reset", students=len(updated))
        return updated

    async def seed_test_students(self) -> list[StudentCredential]:
        """Write the five fixed test students, overwriting any existing records."""
        seeded: list[StudentCredential] = []
        with _store_write("seed_test_students"):
            for row in TEST_STUDENTS:
                student = _new_student(row["student_id"], row["name"], row["department"], row["password"])
                seeded.append(_credential(await self.students.save(student)))
        return seeded

    async def import_students(self, rows: list[StudentImportRow]) -> list[StudentCredential]:
        """
        Bulk-create students from spreadsheet rows.

        Blank ids become S + 4 random digits and blank passwords 8 random
        alphanumerics. Existing records with the same id are overwritten.
        """
        imported: list[StudentCredential] = []
        with _store_write("import_students"):
            for row in rows:
                student = _new_student(
                    row.student_id or generate_student_id(),
                    row.name,
                    row.department,
                    row.password or generate_password(),
                )
                imported.append(_credential(await self.students.save(student)))

        logger.info("students_imported", count=len(imported))
        return imported

    async def list_credentials(self) -> list[StudentCredential]:
        return [_credential(s) for s in await self.students.list_all()]

    # ========================================================================
    # Schedule
    # ========================================================================

    async def save_schedule(self, data: ScheduleUpdate) -> ElectionConfigDocument:
        """
        Overwrite the election configuration after validating the window.

        Naive times are taken as UTC; both are stored in UTC.
        """
        start, end = as_utc(data.voting_start), as_utc(data.voting_end)
        if start is None or end is None:
            raise InvalidScheduleError()
        if start >= end:
            raise InvalidScheduleError("Voting end time must be after start time.")

        config = ElectionConfigDocument(
            voting_start=start,
            voting_end=end,
            enable_departmental_voting=data.enable_departmental_voting,
            allow_cross_department_voting=data.allow_cross_department_voting,
            is_active=data.is_active,
        )
        with _store_write("save_schedule"):
            return await self.settings_repo.save_election_config(config)

    async def start_voting(self, now: Optional[datetime] = None) -> ElectionConfigDocument:
        """
        Open voting immediately.

        Keeps the stored end time while it is still in the future; otherwise
        voting runs for DEFAULT_VOTING_DURATION_HOURS.
        """
        now = now or datetime.now(timezone.utc)
        current = await self.settings_repo.get_election_config() or ElectionConfigDocument()

        end = as_utc(current.voting_end)
        if end is None or end <= now:
            end = now + timedelta(hours=settings.DEFAULT_VOTING_DURATION_HOURS)

        config = ElectionConfigDocument(
            voting_start=now,
            voting_end=end,
            enable_departmental_voting=current.enable_departmental_voting,
            allow_cross_department_voting=current.allow_cross_department_voting,
            is_active=True,
        )
        with _store_write("start_voting"):
            config = await self.settings_repo.save_election_config(config)

        logger.info("voting_started", start=now.isoformat(), end=end.isoformat())
        return config

    async def end_voting(self, now: Optional[datetime] = None) -> ElectionConfigDocument:
        """Close voting immediately and disable the election."""
        now = now or datetime.now(timezone.utc)
        current = await self.settings_repo.get_election_config() or ElectionConfigDocument()

        config = ElectionConfigDocument(
            voting_start=current.voting_start or now,
            voting_end=now,
            enable_departmental_voting=current.enable_departmental_voting,
            allow_cross_department_voting=current.allow_cross_department_voting,
            is_active=False,
        )
        with _store_write("end_voting"):
            config = await self.settings_repo.save_election_config(config)

        logger.info("voting_ended", end=now.isoformat())
        return config

    # ========================================================================
    # Results
    # ========================================================================

    async def results(self) -> list[PositionResult]:
        return tally_results(
            await self.positions.list_all(),
            await self.candidates.list_all(),
            await self.votes.list_all(),
        )

    async def stats(self) -> ElectionStats:
        return election_stats(await self.students.list_all(), await self.votes.count_all())
