"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from blog_api.api.deps import auth_rate_limit, get_current_user, get_db
from blog_api.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    InvalidTokenError,
)
from blog_api.core.log_config import log_security
from blog_api.core.security import (
    compare_password,
    generate_refresh_token,
    generate_token,
    validate_password_strength,
    verify_token,
)
from blog_api.crud import crud_user
from blog_api.models.user import User
from blog_api.schemas.common import success_response
from blog_api.schemas.user import (
    ProfileUpdate,
    RefreshRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post(
    "/register",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    dependencies=[Depends(auth_rate_limit)],
)
async def register(
    user_in: UserRegister,
    db: Session = Depends(get_db),
) -> dict:
    """
    Register a new user with the ``user`` role.

    Raises:
        BadRequestError: 400 if the password is weak (details list every failed rule)
        ConflictError: 400 if the email or username is taken
    """
    strength = validate_password_strength(user_in.password)
    if not strength.is_valid:
        raise BadRequestError("Password does not meet strength requirements", details=strength.errors)

    if crud_user.get_by_email(db, user_in.email):
        raise ConflictError("email")
    if crud_user.get_by_username(db, user_in.username):
        raise ConflictError("username")

    db_user = crud_user.create_user(db, user_in=user_in)
    logger.info(f"New user registered: {db_user.username}")

    return success_response(
        {"user": UserResponse.model_validate(db_user), "token": generate_token(db_user)},
        message="User registered successfully",
    )


@router.post(
    "/login",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Login user",
    dependencies=[Depends(auth_rate_limit)],
)
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
) -> dict:
    """
    Login with email and password.

    Returns the public user, an access token and a refresh token.
    """
    user = crud_user.get_by_email(db, credentials.email)
    if not user:
        log_security("Failed login", email=credentials.email, reason="unknown email")
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        log_security("Failed login", user=user.username, reason="deactivated")
        raise AuthenticationError("Account is deactivated")

    if not compare_password(credentials.password, user.password_hash):
        log_security("Failed login", user=user.username, reason="wrong password")
        raise AuthenticationError("Invalid credentials")

    user = crud_user.record_login(db, user=user)
    logger.info(f"User logged in: {user.username}")

    return success_response(
        {
            "user": UserResponse.model_validate(user),
            "token": generate_token(user),
            "refreshToken": generate_refresh_token(user),
        },
        message="Login successful",
    )


@router.post(
    "/refresh",
    response_model=dict,
    summary="Refresh access token",
)
async def refresh(
    payload: RefreshRequest,
    db: Session = Depends(get_db),
) -> dict:
    """Exchange a refresh token for a new access token."""
    if not payload.refresh_token:
        raise BadRequestError("Refresh token is required")

    try:
        claims = verify_token(payload.refresh_token)
    except InvalidTokenError:
        raise AuthenticationError("Invalid refresh token")

    user = crud_user.get(db, claims["id"]) if claims.get("id") is not None else None
    if claims.get("type") != "refresh" or user is None or not user.is_active:
        raise AuthenticationError("Invalid refresh token")

    return success_response({"token": generate_token(user)}, message="Token refreshed successfully")


@router.get(
    "/me",
    response_model=dict,
    summary="Get current user",
)
async def me(current_user: User = Depends(get_current_user)) -> dict:
    return success_response({"user": UserResponse.model_validate(current_user)})


@router.put(
    "/profile",
    response_model=dict,
    summary="Update own profile",
    description="""
Merge the submitted profile fields into the current user's profile.

Fields that are not sent keep their current value.
""",
)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    user = current_user
    if payload.profile is not None:
        user = crud_user.update_profile(
            db, user=current_user, profile=payload.profile.model_dump(exclude_unset=True)
        )
    logger.info(f"Profile updated for user: {user.username}")
    return success_response(
        {"user": UserResponse.model_validate(user)},
        message="Profile updated successfully",
    )


@router.post(
    "/logout",
    response_model=dict,
    summary="Logout",
)
async def logout() -> dict:
    """Tokens are stateless; the client discards its token."""
    logger.info("User logout requested")
    return success_response(message="Logout successful")
