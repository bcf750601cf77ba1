from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from app.core.config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    claims = dict(data)
    claims["exp"] = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims["type"] = ACCESS_TOKEN_TYPE

    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user) -> str:
    # One token per login session; role is informational, the user row is authoritative
    return create_access_token(
        {"sub": str(user.id), "username": user.username, "role": user.role}
    )


def decode_access_token(token: str) -> dict | None:
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        return None

    return claims
