"""FastAPI dependencies for authentication."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from lifetasks.database.database import get_db
from lifetasks.database.models import UserDB
from lifetasks.auth.jwt import get_user_id_from_token
from lifetasks.models.user import User

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the user from the bearer JWT.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or names an unknown user
    """
    if not credentials:
        raise _unauthorized("Not authenticated")

    user_id = get_user_id_from_token(credentials.credentials)
    if not user_id:
        raise _unauthorized("Invalid or expired token")

    user_db = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user_db:
        raise _unauthorized("User not found")

    return user_db.to_pydantic()
