"""
Auth Routes

Signup, login, current user and logout.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from volt.api.deps import get_bearer_token, get_current_user
from volt.db.session import get_async_db
from volt.features.users import (
    AuthError,
    AuthResponse,
    AuthService,
    DuplicateUserError,
    IssuedToken,
    LoginRequest,
    SignupRequest,
    User,
    UserResponse,
)
from volt.shared.errors import ApiError

router = APIRouter()


def _auth_response(issued: IssuedToken) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(issued.user),
        token=issued.token,
        expires_at=issued.expires_at,
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(request: SignupRequest, db: AsyncSession = Depends(get_async_db)):
    """Create an account and return a bearer token."""
    try:
        issued = await AuthService(db).signup(request.email, request.username, request.password)
    except DuplicateUserError as e:
        raise ApiError(409, str(e), code="user_exists")
    return _auth_response(issued)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_async_db)):
    """Exchange email and password for a bearer token."""
    try:
        issued = await AuthService(db).login(request.email, request.password)
    except AuthError as e:
        raise ApiError(401, str(e), code="invalid_credentials", headers={"WWW-Authenticate": "Bearer"})
    return _auth_response(issued)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user


@router.post("/logout", status_code=204)
async def logout(
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Revoke the token used for this request."""
    await AuthService(db).logout(token)
    return Response(status_code=204)
