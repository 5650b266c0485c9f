"""Security utilities for authentication and credential handling.

Students authenticate against the plaintext password stored on their record;
admins authenticate with a bcrypt hash. Both receive a signed session token.
"""

import hashlib
import json
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from core.config import settings

# Token issuer and audience for validation
TOKEN_ISSUER = "councilvote-api"
TOKEN_AUDIENCE = "councilvote-client"

SESSION_TOKEN_TYPE = "session"

PASSWORD_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def _create_token_base(
    data: dict[str, Any],
    token_type: str,
    expires_delta: timedelta,
) -> str:
    """Create a JWT token with standard claims."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + expires_delta
    to_encode.update(
        {
            "exp": expire,
            "iat": now,
            "type": token_type,
            "iss": TOKEN_ISSUER,
            "aud": TOKEN_AUDIENCE,
            "jti": secrets.token_urlsafe(16),
        }
    )
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_session_token(
    subject: str,
    role: str,
    device_id: str | None = None,
    session_id: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a session token for a student or admin.

    Student tokens carry the record's session_id as `sid`; a later login
    rotates it and the older token stops matching.
    """
    delta = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token_base(
        {"sub": subject, "role": role, "device_id": device_id, "sid": session_id},
        SESSION_TOKEN_TYPE,
        delta,
    )


def decode_token(token: str, expected_type: str | None = SESSION_TOKEN_TYPE) -> dict[str, Any] | None:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode
        expected_type: If provided, validates the token type matches

    Returns:
        The decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=TOKEN_ISSUER,
            audience=TOKEN_AUDIENCE,
        )
        if expected_type and payload.get("type") != expected_type:
            return None
        return payload
    except JWTError:
        return None


def hash_password(password: str) -> str:
    """Hash an admin password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check an admin password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash stored on the record
        return False


def generate_password(length: int | None = None) -> str:
    """Generate a random alphanumeric student password."""
    size = length or settings.GENERATED_PASSWORD_LENGTH
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(size))


def generate_student_id() -> str:
    """Generate a student id of the form S1234."""
    return f"S{1000 + secrets.randbelow(9000)}"


def compute_device_fingerprint(signals: dict[str, Any]) -> str:
    """
    Hash browser/environment signals into a device identifier.

    The signals (user agent, language, platform, screen resolution, timezone,
    canvas signature prefix, storage flags) are serialized as canonical JSON
    and hashed with SHA-256. This is a heuristic identifier, not a guarantee
    that two devices differ.
    """
    canonical = json.dumps(signals, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
