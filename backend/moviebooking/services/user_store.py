import re
from typing import Callable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from moviebooking.core.database import store_errors
from moviebooking.models.user import User

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

# Keeps numeric identifiers inside a 64-bit integer column
MAX_USER_ID_DIGITS = 18


def looks_like_user_id(value: str) -> bool:
    return value.isascii() and value.isdigit() and len(value) <= MAX_USER_ID_DIGITS


class UserStore:
    """
    Credential store over the users table.

    Every method touches a single record (or a single aggregate), so the
    database's per-row atomicity is all the service relies on. SQLAlchemy
    failures surface as StoreError / DuplicateKeyError.
    """

    def __init__(self, db: Session):
        self.db = db

    def max_user_id(self) -> int:
        """Highest assigned user_id, 0 when there are no users"""
        with store_errors(self.db, "reading user ids"):
            return self.db.query(func.max(User.user_id)).scalar() or 0

    def username_exists(self, username: str) -> bool:
        with store_errors(self.db, "checking username"):
            return self.db.query(User.user_id).filter(User.username == username).first() is not None

    def get_by_user_id(self, user_id: int) -> Optional[User]:
        with store_errors(self.db, "retrieving user"):
            return self.db.query(User).filter(User.user_id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        with store_errors(self.db, "retrieving user"):
            return self.db.query(User).filter(User.username == username).first()

    def get_by_session_id(self, session_id: str) -> Optional[User]:
        # Logged-out users carry "", which must never match a lookup
        if not session_id:
            return None
        with store_errors(self.db, "retrieving user"):
            return self.db.query(User).filter(User.session_id == session_id).first()

    def get_by_access_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        with store_errors(self.db, "retrieving user"):
            return self.db.query(User).filter(User.access_token == token).first()

    def list_all(self) -> List[User]:
        with store_errors(self.db, "retrieving users"):
            return self.db.query(User).order_by(User.user_id).all()

    def find(self, identifier: str) -> Optional[User]:
        """
        Resolve a user from a loosely typed identifier.

        Matchers run in priority order (user_id, username, session id). A
        matcher is skipped when the identifier does not have its shape; the
        first one that finds a row wins.
        """
        for accepts, lookup in self._matchers():
            if not accepts(identifier):
                continue
            user = lookup(identifier)
            if user is not None:
                return user
        return None

    def _matchers(self) -> List[tuple[Callable[[str], bool], Callable[[str], Optional[User]]]]:
        return [
            (looks_like_user_id, lambda value: self.get_by_user_id(int(value))),
            (lambda value: bool(value), self.get_by_username),
            (lambda value: bool(UUID_PATTERN.match(value)), self.get_by_session_id),
        ]

    def insert(self, user: User) -> User:
        """Insert a new user; raises DuplicateKeyError on a unique violation"""
        with store_errors(self.db, "creating the user"):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user

    def update(self, user: User, **fields) -> User:
        """Apply ``fields`` to one user and commit them as a single UPDATE"""
        with store_errors(self.db, "updating user"):
            for name, value in fields.items():
                setattr(user, name, value)
            self.db.commit()
            self.db.refresh(user)
        return user

    def clear_session(self, session_id: str) -> bool:
        """
        Log out the user holding session_id in one conditional UPDATE.

        Returns False when no row carries that session id, including when a
        newer login already replaced it.
        """
        if not session_id:
            return False
        with store_errors(self.db, "logging out user"):
            updated = (
                self.db.query(User)
                .filter(User.session_id == session_id)
                .update(
                    {"is_logged_in": False, "session_id": "", "access_token": ""},
                    synchronize_session=False,
                )
            )
            self.db.commit()
        return updated > 0

    def delete(self, user: User) -> None:
        with store_errors(self.db, "deleting user"):
            self.db.delete(user)
            self.db.commit()
