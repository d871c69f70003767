from typing import Optional
from fastapi import APIRouter, Depends, Header, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from moviebooking.api.dependencies import RecordId, get_auth_service, get_bearer_token
from moviebooking.models.user import User
from moviebooking.services.auth_service import AuthService

router = APIRouter(prefix="/users", tags=["users"])


def blank_to_none(value):
    """Treat an empty or whitespace-only string as an absent field"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SignUpRequest(BaseModel):
    email_address: Optional[EmailStr] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    mobile_number: Optional[str] = None
    role: Optional[str] = None
    coupons: Optional[list] = Field(default=None, alias="coupens")
    booking_requests: Optional[list] = Field(default=None, alias="bookingRequests")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("email_address", mode="before")
    @classmethod
    def blank_email_is_missing(cls, value):
        return blank_to_none(value)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact: Optional[str] = None
    role: Optional[str] = None
    coupons: Optional[list] = Field(default=None, alias="coupens")
    booking_requests: Optional[list] = Field(default=None, alias="bookingRequests")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_missing(cls, value):
        return blank_to_none(value)


class UserResponse(BaseModel):
    """Client-facing user: no password hash, no session credentials"""
    user_id: int
    username: str
    email: str
    first_name: str
    last_name: str
    contact: Optional[str] = None
    role: str
    is_logged_in: bool
    coupons: list = Field(default_factory=list, serialization_alias="coupens")
    booking_requests: list = Field(default_factory=list, serialization_alias="bookingRequests")

    model_config = ConfigDict(from_attributes=True)


class IdentityResponse(BaseModel):
    id: str
    username: str
    firstName: str
    lastName: str
    email: str
    isLoggedIn: bool


def serialize_user(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def sign_up(body: SignUpRequest, auth: AuthService = Depends(get_auth_service)):
    """Register a new user"""
    profile = {
        "email": body.email_address,
        "first_name": body.first_name,
        "last_name": body.last_name,
        "username": body.username,
        "contact": body.mobile_number,
        "role": body.role,
        "coupons": body.coupons,
        "booking_requests": body.booking_requests,
    }
    return auth.sign_up(profile, body.password)


@router.get("/login")
def login(
    response: Response,
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
):
    """Login with Basic credentials and receive a bearer token"""
    token, identity = auth.login(authorization)
    response.headers["access-token"] = token
    return {**identity, "access-token": token}


@router.put("/logout/{session_id}")
def logout(session_id: str, auth: AuthService = Depends(get_auth_service)):
    """End the session identified by session_id"""
    auth.logout(session_id)
    return {"message": "User logged out successfully"}


@router.get("/token", response_model=IdentityResponse)
def get_user_by_token(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
):
    """Resolve the bearer token to the logged-in user"""
    return auth.resolve_by_token(token)


@router.get("")
def list_users(auth: AuthService = Depends(get_auth_service)):
    """List all users"""
    users = [serialize_user(user) for user in auth.list_users()]
    return {"users": users, "page": 1, "limit": len(users), "total": len(users)}


@router.get("/{user_id}/coupons")
def get_coupons(user_id: RecordId, auth: AuthService = Depends(get_auth_service)):
    """Coupons of a logged-in user"""
    coupons = auth.get_coupons(user_id)
    return {"coupens": coupons, "page": 1, "limit": len(coupons), "total": len(coupons)}


@router.get("/{identifier}")
def get_user(identifier: str, auth: AuthService = Depends(get_auth_service)):
    """Get a user by user_id, username or session id"""
    user = auth.find_user(identifier)
    return {
        "user": serialize_user(user),
        "coupens": user.coupons or [],
        "bookingRequests": user.booking_requests or [],
    }


@router.put("/{user_id}")
def update_user(
    user_id: RecordId,
    body: UserUpdate,
    auth: AuthService = Depends(get_auth_service),
):
    """Update profile fields of a user"""
    user = auth.update_user(user_id, body.model_dump(exclude_unset=True))
    return {"message": "User updated successfully", "user": serialize_user(user)}


@router.delete("/{user_id}")
def delete_user(user_id: RecordId, auth: AuthService = Depends(get_auth_service)):
    """Delete a user"""
    auth.delete_user(user_id)
    return {"message": "User deleted successfully"}
