"""Authentication API."""

import logging
from typing import Any

from fastapi import APIRouter, status

from promptify.api.deps import CurrentUser, SessionDep
from promptify.core import security
from promptify.schemas import (
    AuthData,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserCreate,
    ok,
    user_to_public,
)
from promptify.services import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(register_in: RegisterRequest, session: SessionDep) -> Any:
    """Create an account on the Free plan and log it in."""
    user = UserService(session).register(
        UserCreate(name=register_in.name, email=register_in.email, password=register_in.password)
    )
    token = security.create_access_token(user.id)
    return ok(AuthData(user=user_to_public(user), token=token), "User registered successfully")


@router.post("/login")
def login(login_in: LoginRequest, session: SessionDep) -> Any:
    user = UserService(session).authenticate(login_in.email, login_in.password)
    token = security.create_access_token(user.id)
    logger.info(f"User {user.id} logged in")
    return ok(AuthData(user=user_to_public(user), token=token), "Login successful")


@router.get("/me")
def read_me(current_user: CurrentUser) -> Any:
    return ok({"user": user_to_public(current_user)}, "User profile retrieved successfully")


@router.put("/profile")
def update_profile(profile_in: ProfileUpdate, session: SessionDep, current_user: CurrentUser) -> Any:
    user = UserService(session).update_profile(current_user, profile_in)
    return ok({"user": user_to_public(user)}, "Profile updated successfully")


@router.api_route("/change-password", methods=["PUT", "POST"])
def change_password(
    password_in: ChangePasswordRequest, session: SessionDep, current_user: CurrentUser
) -> Any:
    UserService(session).change_password(
        current_user, password_in.current_password, password_in.new_password
    )
    return ok(message="Password changed successfully")


@router.post("/logout")
def logout(current_user: CurrentUser) -> Any:
    # tokens are stateless; the client discards its copy
    logger.info(f"User {current_user.id} logged out")
    return ok(message="Logout successful")
