"""
Student-related Pydantic schemas (admin views).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StudentCreate(BaseModel):
    """Manual student creation. A blank password falls back to the default."""

    student_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    department: str = ""
    password: Optional[str] = None


class StudentUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    department: str = ""
    password: str = Field(..., min_length=1)


class StudentResponse(BaseModel):
    """Admin view of a student, credentials included."""

    student_id: str
    name: str
    department: str = ""
    password: str
    has_voted: bool = False
    is_logged_in: bool = False
    device_id: Optional[str] = None
    last_login_time: Optional[datetime] = None
    vote_timestamp: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StudentImportRow(BaseModel):
    """One spreadsheet row; blank id/password are generated on import."""

    student_id: Optional[str] = None
    name: str = ""
    department: str = ""
    password: Optional[str] = None


class StudentCredential(BaseModel):
    student_id: str
    name: str
    department: str = ""
    password: str


class ImportResult(BaseModel):
    imported: int
    students: list[StudentCredential]
    message: str


class PasswordResetResult(BaseModel):
    reset: int
    students: list[StudentCredential]
    message: str


class BulkDeleteResult(BaseModel):
    students_deleted: int
    votes_deleted: int
    message: str
