import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm

from app.database import get_db
from app.models.users import User
from app.schemas.user import TokenResponse, UserResponse
from app.core.auth import get_current_user
from app.core.hashing import verify_password
from app.core.jwt import create_user_token
from app.core.rate_limiter import limiter

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = logging.getLogger("app")


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.username == form_data.username).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.info(f"Failed login for {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    return {
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "user": user,
    }


# ---------------- CURRENT USER ----------------
@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# ---------------- LOGOUT ----------------
@router.post("/logout")
def logout():
    # Tokens are stateless, the client drops its copy
    return {"message": "Logged out successfully"}
