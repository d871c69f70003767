from typing import Annotated, Optional
from fastapi import Depends, Header, Path
from pydantic import Field
from sqlalchemy.orm import Session
from moviebooking.core.database import get_db
from moviebooking.core.security import parse_bearer_token
from moviebooking.services.auth_service import AuthService

# Range of a signed 64-bit integer column
MAX_RECORD_ID = 2**63 - 1
MIN_RECORD_ID = -(2**63)
# Keeps (page - 1) * limit inside the same range
MAX_PAGE_VALUE = 10**9

RecordId = Annotated[int, Path(ge=MIN_RECORD_ID, le=MAX_RECORD_ID)]
BodyInt = Annotated[int, Field(ge=MIN_RECORD_ID, le=MAX_RECORD_ID)]


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Authentication service bound to the request's database session"""
    return AuthService(db)


async def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Extract the bearer token from the Authorization header.

    The token is the second whitespace-separated segment; a missing header
    yields None and the service decides how to reject it.
    """
    return parse_bearer_token(authorization)
