"""
Spreadsheet import and export.

Students are bulk-loaded from the first sheet of an .xlsx workbook with the
columns studentId, name, class, password. Credentials and results are written
back out as single-sheet workbooks.
"""

from io import BytesIO
from zipfile import BadZipFile

import structlog
from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.exceptions import InvalidSpreadsheetError
from schemas.results import PositionResult
from schemas.student import StudentCredential, StudentImportRow

logger = structlog.get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CREDENTIALS_SHEET = "Student Credentials"
RESULTS_SHEET = "Election Results"

# Accepted header spellings -> StudentImportRow field
HEADER_ALIASES = {
    "studentid": "student_id",
    "student_id": "student_id",
    "student id": "student_id",
    "name": "name",
    "class": "department",
    "department": "department",
    "password": "password",
}


def _cell_text(value) -> str:
    """Spreadsheet cell to trimmed text; whole floats lose their '.0'."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_student_rows(data: bytes) -> list[StudentImportRow]:
    """
    Read student rows from the first sheet of an .xlsx workbook.

    Unknown columns are ignored and fully blank rows are skipped.

    Raises:
        InvalidSpreadsheetError: The file is not a readable workbook, or it has
            no name column.
    """
    try:
        workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, ValueError, OSError) as e:
        logger.warning("spreadsheet_unreadable", error=str(e))
        raise InvalidSpreadsheetError() from e

    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []

        columns: dict[int, str] = {}
        for index, title in enumerate(header):
            field = HEADER_ALIASES.get(_cell_text(title).lower())
            if field:
                columns[index] = field

        if "name" not in columns.values():
            raise InvalidSpreadsheetError("The spreadsheet must have a 'name' column.")

        parsed: list[StudentImportRow] = []
        for row in rows:
            values = {field: _cell_text(row[index]) for index, field in columns.items() if index < len(row)}
            if not any(values.values()):
                continue
            parsed.append(
                StudentImportRow(
                    student_id=values.get("student_id") or None,
                    name=values.get("name", ""),
                    department=values.get("department", ""),
                    password=values.get("password") or None,
                )
            )
        return parsed
    finally:
        workbook.close()


def _to_bytes(workbook: Workbook) -> bytes:
    stream = BytesIO()
    workbook.save(stream)
    return stream.getvalue()


def credentials_workbook(credentials: list[StudentCredential]) -> bytes:
    """Workbook listing every student's login credentials."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = CREDENTIALS_SHEET
    sheet.append(["studentId", "name", "class", "password"])
    for credential in credentials:
        sheet.append([credential.student_id, credential.name, credential.department, credential.password])
    return _to_bytes(workbook)


def results_workbook(results: list[PositionResult]) -> bytes:
    """Workbook with one row per candidate, grouped by position."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = RESULTS_SHEET
    sheet.append(["position", "totalVotes", "candidateName", "candidateClass", "votes", "percentage"])
    for position in results:
        if not position.candidates:
            sheet.append([position.position, position.total_votes, None, None, 0, 0.0])
            continue
        for candidate in position.candidates:
            sheet.append(
                [
                    position.position,
                    position.total_votes,
                    candidate.candidate_name,
                    candidate.candidate_department,
                    candidate.votes,
                    candidate.percentage,
                ]
            )
    return _to_bytes(workbook)
