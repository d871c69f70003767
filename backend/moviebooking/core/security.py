import base64
import binascii
import secrets
import uuid
from typing import Optional
from passlib.context import CryptContext
from moviebooking.core.config import settings
from moviebooking.core.errors import MalformedCredentials

# CryptContext handles password hashing using bcrypt
# bcrypt generates a fresh salt per call and embeds it in the hash string
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    # Same password produces a different hash on every call,
    # so hashes must only ever be compared through verify_password
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Stored value is not a recognisable hash - treat as a mismatch
        return False


def new_session_id() -> str:
    """Generate a random session identifier (UUID4)"""
    return str(uuid.uuid4())


def new_access_token() -> str:
    """Generate an opaque, URL-safe bearer token"""
    # token_urlsafe(32) draws 256 bits from the OS CSPRNG
    return secrets.token_urlsafe(settings.ACCESS_TOKEN_BYTES)


def parse_basic_auth(authorization: Optional[str]) -> tuple[str, str]:
    """
    Decode an ``Authorization: Basic <base64(username:password)>`` header.

    Returns (username, password). The password is everything after the first
    colon. Raises MalformedCredentials if the header is missing, uses another
    scheme, is not valid base64, or lacks a username or password.
    """
    if not authorization or not authorization.startswith("Basic "):
        raise MalformedCredentials("Authentication header is required!")

    encoded = authorization[len("Basic "):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise MalformedCredentials("Authentication header is malformed!")

    username, _, password = decoded.partition(":")
    if not username or not password:
        raise MalformedCredentials("Username and password are required!")

    return username, password


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the second whitespace-separated segment of the header, if any"""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) < 2:
        return None
    return parts[1]
