# app/core/auth.py

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.users import User
from app.core.errors import NotAuthenticated
from app.core.jwt import decode_access_token
from app.core.oauth2 import oauth2_scheme


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    if not token:
        raise NotAuthenticated("Not authenticated")

    payload = decode_access_token(token)

    if payload is None:
        raise NotAuthenticated("Invalid or expired token")

    user_id = payload.get("sub")

    if user_id is None:
        raise NotAuthenticated("Invalid token payload")

    user = db.query(User).filter(User.id == int(user_id)).first()

    if user is None:
        raise NotAuthenticated("User not found")

    return user

def get_admin_user(
    current_user: User = Depends(get_current_user),
):
    # Only store admins may manage the catalog, users and settings
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
