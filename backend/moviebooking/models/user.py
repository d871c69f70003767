from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from moviebooking.core.database import Base


class User(Base):
    """
    User model representing application accounts.

    Holds profile data, the bcrypt password hash and the state of the
    single live session. A user is logged in exactly when both session_id
    and access_token are non-empty.
    """
    __tablename__ = "users"

    # user_id is assigned as max + 1 at sign-up; the unique constraint
    # turns a concurrent duplicate into an IntegrityError the service retries
    user_id = Column(Integer, primary_key=True, autoincrement=False)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    contact = Column(String, nullable=True)
    # Never returned to clients and never logged
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")

    is_logged_in = Column(Boolean, nullable=False, default=False)
    session_id = Column(String, nullable=False, default="", index=True)
    access_token = Column(String, nullable=False, default="", index=True)

    coupons = Column(JSON, nullable=False, default=list)
    booking_requests = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
