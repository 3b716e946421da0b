from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from watchtrack.database import get_db
from watchtrack.utils.security import decode_token, AUTH_COOKIE_NAME
from watchtrack.schemas.auth import Identity
from watchtrack.models.user import User

# The session cookie wins; a bearer header is accepted for non-browser callers
security = HTTPBearer(auto_error=False)


# Dependency to get the authenticated caller
async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Identity:
    token = request.cookies.get(AUTH_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    payload = decode_token(token)
    if payload is None or not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    return Identity(user_id=str(payload["sub"]), email=payload.get("email"))


# Admin surface: role is read from the stored User row on every call
async def require_admin(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
) -> User:
    user = db.get(User, identity.user_id)
    if user is None or not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user
