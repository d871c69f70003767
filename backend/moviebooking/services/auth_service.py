"""
Authentication service: sign-up, login, logout and token lookup.

Session state lives on the user row (is_logged_in, session_id,
access_token), so a user has at most one live session and a new login
invalidates the previous token.
"""

import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from moviebooking.core.config import settings
from moviebooking.core.errors import (
    DuplicateKeyError,
    InvalidCredentials,
    NotFound,
    StoreError,
    Unauthorized,
    ValidationError,
)
from moviebooking.core.security import (
    get_password_hash,
    new_access_token,
    new_session_id,
    parse_basic_auth,
    verify_password,
)
from moviebooking.models.user import User
from moviebooking.services.user_store import UserStore

logger = logging.getLogger(__name__)

REQUIRED_SIGNUP_MESSAGE = "Email, password, first name, and last name are required!"
USERNAME_TAKEN_MESSAGE = "Username already exists"

# Fields a profile update may touch; identity and session state are excluded
UPDATABLE_FIELDS = (
    "email",
    "first_name",
    "last_name",
    "contact",
    "role",
    "coupons",
    "booking_requests",
)


def identity_view(user: User) -> Dict[str, Any]:
    """Redacted identity: profile and session status, no secrets"""
    return {
        "id": user.session_id,
        "username": user.username,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "isLoggedIn": user.is_logged_in,
    }


class AuthService:
    """Orchestrates the credential store, password hasher and token issuer"""

    def __init__(self, db: Session):
        self.store = UserStore(db)

    def sign_up(self, profile: Dict[str, Any], password: Optional[str]) -> User:
        """
        Create a user with the next free user_id.

        user_id is read-max-then-insert; the unique constraint rejects a
        concurrent duplicate and the loop re-reads the maximum and retries.
        """
        email = profile.get("email")
        first_name = profile.get("first_name")
        last_name = profile.get("last_name")
        if not email or not password or not first_name or not last_name:
            raise ValidationError(REQUIRED_SIGNUP_MESSAGE)

        username = profile.get("username") or f"{first_name}{last_name}".lower()
        if self.store.username_exists(username):
            raise ValidationError(USERNAME_TAKEN_MESSAGE)

        password_hash = get_password_hash(password)

        for attempt in range(1, settings.SIGNUP_MAX_RETRIES + 1):
            user = User(
                user_id=self.store.max_user_id() + 1,
                username=username,
                email=email,
                first_name=first_name,
                last_name=last_name,
                contact=profile.get("contact"),
                password_hash=password_hash,
                role=profile.get("role") or "user",
                is_logged_in=False,
                session_id="",
                access_token="",
                coupons=profile.get("coupons") or [],
                booking_requests=profile.get("booking_requests") or [],
            )
            try:
                user = self.store.insert(user)
            except DuplicateKeyError:
                # Either the username or the user_id was taken concurrently
                if self.store.username_exists(username):
                    raise ValidationError(USERNAME_TAKEN_MESSAGE)
                logger.warning(
                    f"user_id {user.user_id} taken by a concurrent sign-up "
                    f"(attempt {attempt}/{settings.SIGNUP_MAX_RETRIES})"
                )
                continue

            logger.info(f"Registered user {user.username} with user_id {user.user_id}")
            return user

        raise StoreError("Error creating the user.")

    def login(self, authorization: Optional[str]) -> tuple[str, Dict[str, Any]]:
        """
        Authenticate a Basic auth header and open a new session.

        Returns (access_token, identity). Any previous session of the same
        user is overwritten.
        """
        username, password = parse_basic_auth(authorization)

        user = self.store.get_by_username(username)
        # Same error for unknown user and wrong password
        if not user or not verify_password(password, user.password_hash):
            logger.info("Rejected login with invalid credentials")
            raise InvalidCredentials("Invalid credentials")

        token = new_access_token()
        user = self.store.update(
            user,
            is_logged_in=True,
            session_id=new_session_id(),
            access_token=token,
        )
        logger.info(f"User {user.username} logged in")
        return token, identity_view(user)

    def logout(self, session_id: str) -> None:
        # Matching on session_id in the UPDATE itself keeps a stale logout
        # from clearing a session opened by a later login
        if not self.store.clear_session(session_id):
            raise NotFound(f"User not found with uuid={session_id}")
        logger.info(f"Session {session_id[:8]}... logged out")

    def resolve_by_token(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise Unauthorized("Authentication token is required!")

        user = self.store.get_by_access_token(token)
        if not user:
            raise NotFound("User not found with provided token")
        return identity_view(user)

    def find_user(self, identifier: str) -> User:
        user = self.store.find(identifier)
        if not user:
            raise NotFound(f"User not found with id={identifier}")
        return user

    def list_users(self) -> list[User]:
        return self.store.list_all()

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> User:
        fields = {
            name: value for name, value in changes.items()
            if name in UPDATABLE_FIELDS and value is not None
        }
        if not fields:
            raise ValidationError("Data to update cannot be empty!")

        user = self.store.get_by_user_id(user_id)
        if not user:
            raise NotFound(f"User not found with id={user_id}")
        return self.store.update(user, **fields)

    def delete_user(self, user_id: int) -> None:
        user = self.store.get_by_user_id(user_id)
        if not user:
            raise NotFound(f"User not found with id={user_id}")
        self.store.delete(user)
        logger.info(f"Deleted user {user_id}")

    def get_coupons(self, user_id: int) -> list:
        user = self.store.get_by_user_id(user_id)
        if not user:
            raise NotFound(f"User not found with id={user_id}")
        if not user.is_logged_in:
            raise Unauthorized("User must be logged in to get coupons")
        return list(user.coupons or [])
