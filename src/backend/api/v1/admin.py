"""
Admin endpoints for election management.

These endpoints require an admin session and are used for:
- Positions and candidates
- Student accounts, credentials and bulk spreadsheet import/export
- The voting schedule
- Results and turnout
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from api.deps import get_admin_service, require_admin
from core.exceptions import InvalidSpreadsheetError, NotFoundError
from repositories.provider import (
    CandidateRepositoryProtocol,
    PositionRepositoryProtocol,
    SettingsRepositoryProtocol,
    StudentRepositoryProtocol,
    get_candidate_repository,
    get_position_repository,
    get_settings_repository,
    get_student_repository,
)
from schemas.auth import VotingSession
from schemas.election import (
    CandidateCreate,
    CandidateResponse,
    ElectionConfigResponse,
    PositionCreate,
    PositionResponse,
    ScheduleUpdate,
)
from schemas.results import ElectionResults, ElectionStats
from schemas.student import (
    BulkDeleteResult,
    ImportResult,
    PasswordResetResult,
    StudentCreate,
    StudentCredential,
    StudentResponse,
    StudentUpdate,
)
from services.election_admin import ElectionAdminService
from services.spreadsheets import (
    XLSX_MEDIA_TYPE,
    credentials_workbook,
    parse_student_rows,
    results_workbook,
)

logger = structlog.get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

AdminService = Annotated[ElectionAdminService, Depends(get_admin_service)]


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =============================================================================
# Positions
# =============================================================================


@router.get("/positions", response_model=list[PositionResponse])
async def list_positions(
    positions: PositionRepositoryProtocol = Depends(get_position_repository),
) -> list[PositionResponse]:
    return [PositionResponse.model_validate(p) for p in await positions.list_all()]


@router.post("/positions", response_model=PositionResponse, status_code=status.HTTP_201_CREATED)
async def create_position(data: PositionCreate, service: AdminService) -> PositionResponse:
    return PositionResponse.model_validate(await service.create_position(data))


@router.put("/positions/{position_id}", response_model=PositionResponse)
async def update_position(position_id: str, data: PositionCreate, service: AdminService) -> PositionResponse:
    return PositionResponse.model_validate(await service.update_position(position_id, data))


@router.delete("/positions/{position_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_position(position_id: str, service: AdminService) -> None:
    """Delete a position together with its candidates and votes."""
    await service.delete_position(position_id)


# =============================================================================
# Candidates
# =============================================================================


@router.get("/candidates", response_model=list[CandidateResponse])
async def list_candidates(
    candidates: CandidateRepositoryProtocol = Depends(get_candidate_repository),
) -> list[CandidateResponse]:
    return [CandidateResponse.model_validate(c) for c in await candidates.list_all()]


@router.post("/candidates", response_model=CandidateResponse, status_code=status.HTTP_201_CREATED)
async def create_candidate(data: CandidateCreate, service: AdminService) -> CandidateResponse:
    return CandidateResponse.model_validate(await service.create_candidate(data))


@router.put("/candidates/{candidate_id}", response_model=CandidateResponse)
async def update_candidate(candidate_id: str, data: CandidateCreate, service: AdminService) -> CandidateResponse:
    return CandidateResponse.model_validate(await service.update_candidate(candidate_id, data))


@router.delete("/candidates/{candidate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_candidate(candidate_id: str, service: AdminService) -> None:
    """Delete a candidate and the votes cast for them."""
    await service.delete_candidate(candidate_id)


# =============================================================================
# Students
# =============================================================================


@router.get("/students", response_model=list[StudentResponse])
async def list_students(
    students: StudentRepositoryProtocol = Depends(get_student_repository),
) -> list[StudentResponse]:
    return [StudentResponse.model_validate(s) for s in await students.list_all()]


@router.get("/students/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    students: StudentRepositoryProtocol = Depends(get_student_repository),
) -> StudentResponse:
    student = await students.get_by_id(student_id)
    if student is None:
        raise NotFoundError()
    return StudentResponse.model_validate(student)


@router.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(data: StudentCreate, service: AdminService) -> StudentResponse:
    """Add one student. A blank password falls back to the default password."""
    return StudentResponse.model_validate(await service.create_student(data))


@router.put("/students/{student_id}", response_model=StudentResponse)
async def update_student(student_id: str, data: StudentUpdate, service: AdminService) -> StudentResponse:
    return StudentResponse.model_validate(await service.update_student(student_id, data))


@router.delete("/students/{student_id}", response_model=BulkDeleteResult)
async def delete_student(student_id: str, service: AdminService) -> BulkDeleteResult:
    """Delete a student and every vote they cast."""
    votes_deleted = await service.delete_student(student_id)
    return BulkDeleteResult(
        students_deleted=1,
        votes_deleted=votes_deleted,
        message=f"Student {student_id} deleted",
    )


@router.delete("/students", response_model=BulkDeleteResult)
async def delete_all_students(service: AdminService) -> BulkDeleteResult:
    """Delete every vote, then every student."""
    students_deleted, votes_deleted = await service.delete_all_students()
    return BulkDeleteResult(
        students_deleted=students_deleted,
        votes_deleted=votes_deleted,
        message=f"Deleted {students_deleted} students and {votes_deleted} votes",
    )


@router.post("/students/{student_id}/reset-password", response_model=StudentCredential)
async def reset_password(student_id: str, service: AdminService) -> StudentCredential:
    return await service.reset_password(student_id)


@router.post("/students/reset-passwords", response_model=PasswordResetResult)
async def reset_all_passwords(service: AdminService) -> PasswordResetResult:
    """Issue a new random password to every student."""
    credentials = await service.reset_all_passwords()
    return PasswordResetResult(
        reset=len(credentials),
        students=credentials,
        message=f"Passwords reset for {len(credentials)} students",
    )


@router.post("/students/seed", response_model=ImportResult)
async def seed_test_students(service: AdminService) -> ImportResult:
    """Create the five fixed test students."""
    credentials = await service.seed_test_students()
    return ImportResult(
        imported=len(credentials),
        students=credentials,
        message=f"Seeded {len(credentials)} test students",
    )


@router.post("/students/import", response_model=ImportResult)
async def import_students(request: Request, service: AdminService) -> ImportResult:
    """
    Bulk-create students from an .xlsx workbook sent as the request body.

    Columns: studentId, name, class, password. Blank ids and passwords are
    generated.
    """
    data = await request.body()
    if not data:
        raise InvalidSpreadsheetError("No file uploaded")

    rows = parse_student_rows(data)
    credentials = await service.import_students(rows)
    return ImportResult(
        imported=len(credentials),
        students=credentials,
        message=f"Imported {len(credentials)} students",
    )


@router.get("/students/export/credentials")
async def export_credentials(service: AdminService) -> Response:
    """Download every student's credentials as an .xlsx workbook."""
    content = credentials_workbook(await service.list_credentials())
    return _xlsx_response(content, "student_credentials.xlsx")


# =============================================================================
# Schedule
# =============================================================================


@router.get("/schedule", response_model=ElectionConfigResponse)
async def get_schedule(
    settings_repo: SettingsRepositoryProtocol = Depends(get_settings_repository),
) -> ElectionConfigResponse:
    config = await settings_repo.get_election_config()
    if config is None:
        return ElectionConfigResponse()
    return ElectionConfigResponse.model_validate(config)


@router.put("/schedule", response_model=ElectionConfigResponse)
async def save_schedule(data: ScheduleUpdate, service: AdminService) -> ElectionConfigResponse:
    """Save the voting window and departmental voting settings."""
    return ElectionConfigResponse.model_validate(await service.save_schedule(data))


@router.post("/schedule/start", response_model=ElectionConfigResponse)
async def start_voting(
    session: Annotated[VotingSession, Depends(require_admin)],
    service: AdminService,
) -> ElectionConfigResponse:
    """Open voting now."""
    config = await service.start_voting()
    logger.info("voting_started_by_admin", admin_id=session.identity.admin_id)
    return ElectionConfigResponse.model_validate(config)


@router.post("/schedule/end", response_model=ElectionConfigResponse)
async def end_voting(
    session: Annotated[VotingSession, Depends(require_admin)],
    service: AdminService,
) -> ElectionConfigResponse:
    """Close voting now."""
    config = await service.end_voting()
    logger.info("voting_ended_by_admin", admin_id=session.identity.admin_id)
    return ElectionConfigResponse.model_validate(config)


# =============================================================================
# Results
# =============================================================================


@router.get("/results", response_model=ElectionResults)
async def get_results(service: AdminService) -> ElectionResults:
    return ElectionResults(positions=await service.results(), stats=await service.stats())


@router.get("/results/export")
async def export_results(service: AdminService) -> Response:
    """Download the results as an .xlsx workbook."""
    return _xlsx_response(results_workbook(await service.results()), "election_results.xlsx")


@router.get("/stats", response_model=ElectionStats)
async def get_stats(service: AdminService) -> ElectionStats:
    return await service.stats()
