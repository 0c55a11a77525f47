"""
User Routes

POST /users/register - Register new user, returns user + token
POST /users/login - Login and get JWT token
GET /users/profile - Get current user's profile
PATCH /users/profile - Update name, profile or company info
PUT /users/profile/password - Change password
GET /users - List all users (admin only)
"""

from typing import List

from fastapi import APIRouter, Depends

from careerconnect.api.dependencies import get_user_service
from careerconnect.core.auth import (
    Identity,
    create_access_token,
    get_app_settings,
    get_current_user,
    require_roles,
)
from careerconnect.core.config import Settings
from careerconnect.schemas.schemas import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
    StatusResponse,
    UserResponse,
    UserRole,
    UserUpdate,
)
from careerconnect.services.mongo_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    request: RegisterRequest,
    users: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
):
    """
    Register a new user account.

    Returns the created user and an access token, so no separate login is needed.
    """
    user = users.register(request)
    token = create_access_token(user["id"], settings)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(
    request: LoginRequest,
    users: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = users.authenticate(request.email, request.password)
    token = create_access_token(user["id"], settings)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.get("/profile", response_model=UserResponse)
def get_profile(
    user: Identity = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Get current authenticated user's profile."""
    return UserResponse.model_validate(users.get_by_id(user.id))


@router.patch("/profile", response_model=UserResponse)
def update_profile(
    update: UserUpdate,
    user: Identity = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Update profile. Only firstName, lastName, profile and company are accepted."""
    return UserResponse.model_validate(users.update_profile(user.id, update))


@router.put("/profile/password", response_model=StatusResponse)
def change_password(
    request: PasswordChangeRequest,
    user: Identity = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Change password. The current password must be supplied."""
    users.change_password(user.id, request.current_password, request.new_password)
    return StatusResponse(message="Password updated successfully")


@router.get("", response_model=List[UserResponse])
def list_users(
    admin: Identity = Depends(require_roles(UserRole.admin)),
    users: UserService = Depends(get_user_service),
):
    """List every user account. Admins only."""
    return [UserResponse.model_validate(u) for u in users.list_users()]
