"""
Election error kinds.

Every failure surfaced to a voter or admin is one of these exceptions. Each
carries a stable string ``code`` (the key the front end switches on) and the
HTTP status the API answers with.
"""

from fastapi import status


class ElectionError(Exception):
    """Base exception for election operations."""

    code: str = "election-error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "The request could not be completed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ElectionError):
    """A student, position, candidate or admin record does not exist."""

    code = "not-found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Student ID not found"


class InvalidCredentialError(ElectionError):
    """Password does not match the stored value."""

    code = "invalid-credential"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid password"


class AlreadyVotedError(ElectionError):
    """The student has already cast a ballot."""

    code = "already-voted"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You have already voted and cannot login again"


class AlreadyLoggedInError(ElectionError):
    """The student has an open session elsewhere."""

    code = "already-logged-in"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Account is already logged in on another device"


class DeviceAlreadyUsedError(ElectionError):
    """The student already voted from this device."""

    code = "device-already-used"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You have already used this device for voting"


class VotingInactiveError(ElectionError):
    """The election schedule is not in its active window."""

    code = "voting-inactive"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Voting is not currently active."


class IncompleteBallotError(ElectionError):
    """The ballot does not pick exactly one candidate for every position."""

    code = "incomplete-ballot"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Please select a candidate for all positions before submitting."


class InvalidSessionError(ElectionError):
    """Missing, expired or wrong-role session."""

    code = "invalid-session"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid user session"


class InvalidScheduleError(ElectionError):
    """Schedule save rejected (missing times or end before start)."""

    code = "invalid-schedule"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Please set both start and end times for voting."


class AlreadyExistsError(ElectionError):
    """A record with the same identifier already exists."""

    code = "already-exists"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Error adding student. Please check if Student ID already exists."


class InvalidSpreadsheetError(ElectionError):
    """Uploaded workbook could not be read."""

    code = "invalid-spreadsheet"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Error uploading students. Please check the file format and try again."


class ConcurrentUpdateError(ElectionError):
    """A compare-and-swap on a student record lost the race."""

    code = "concurrent-update"
    status_code = status.HTTP_409_CONFLICT
    default_message = "The account was modified by another request. Please try again."


class WriteFailedError(ElectionError):
    """A write to the document store failed."""

    code = "write-failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to save changes. Please try again."
