from collections.abc import Generator
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlmodel import Session

from promptify.core import security
from promptify.core.config import settings
from promptify.core.db import engine
from promptify.core.errors import AuthenticationError, AuthorizationError
from promptify.models import Role, User
from promptify.schemas import TokenPayload

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False
)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[Optional[str], Depends(reusable_oauth2)]


def _user_from_token(session: Session, token: str) -> User:
    # expired/garbled tokens surface as PyJWT errors and are rendered by the handlers
    payload = security.decode_access_token(token)
    try:
        token_data = TokenPayload(**payload)
        user_id = UUID(token_data.sub or "")
    except (ValidationError, ValueError) as e:
        raise InvalidTokenError("Malformed token subject") from e

    if token_data.type and token_data.type != "access":
        raise AuthenticationError("Invalid token type")

    user = session.get(User, user_id)
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user


def get_current_user(session: SessionDep, token: TokenDep) -> User:
    if not token:
        raise AuthenticationError("Access token required")
    return _user_from_token(session, token)


def get_optional_user(session: SessionDep, token: TokenDep) -> Optional[User]:
    """Anonymous browsing is allowed; a bad token is treated as no token."""
    if not token:
        return None
    try:
        return _user_from_token(session, token)
    except (InvalidTokenError, AuthenticationError):
        return None


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


def get_current_active_superuser(current_user: CurrentUser) -> User:
    if current_user.role != Role.ADMIN:
        raise AuthorizationError("Admin access required")
    return current_user


AdminUser = Annotated[User, Depends(get_current_active_superuser)]
