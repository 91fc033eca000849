import uuid
from datetime import datetime, timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.config import get_settings
from app.core.errors import UnauthorizedError
from app.database import get_db
from app.models.user import User
from app.schemas.user import TokenPayload

settings = get_settings()
security = HTTPBearer(auto_error=False)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

# Use Argon2 for password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)

def create_access_token(user: User) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    payload = {
        "sub": user.id,
        "email": user.email,
        "username": user.username,
        "fullName": user.full_name,
        "exp": expire,
        "type": "access",
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.access_token_secret, algorithm=settings.algorithm)

def create_refresh_token(user: User) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=settings.refresh_token_expire_minutes
    )
    # jti keeps every issued token distinct, so a rotated-out token never equals the stored one
    payload = {
        "sub": user.id,
        "exp": expire,
        "type": "refresh",
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.refresh_token_secret, algorithm=settings.algorithm)

def _decode(token: str, secret: str, expected_type: str) -> TokenPayload | None:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        return None
    if payload.get("type") != expected_type or "sub" not in payload:
        return None
    return TokenPayload(
        sub=payload["sub"],
        exp=payload["exp"],
        type=payload["type"],
        email=payload.get("email"),
        username=payload.get("username"),
    )

def decode_access_token(token: str) -> TokenPayload | None:
    return _decode(token, settings.access_token_secret, "access")

def decode_refresh_token(token: str) -> TokenPayload | None:
    return _decode(token, settings.refresh_token_secret, "refresh")

def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Access token from an Authorization: Bearer header, else the accessToken cookie. The first one that decodes wins."""
    tokens = []
    if credentials:
        tokens.append(credentials.credentials)
    if request.cookies.get(ACCESS_COOKIE):
        tokens.append(request.cookies[ACCESS_COOKIE])
    if not tokens:
        raise UnauthorizedError("Unauthorized request")

    payload = None
    for token in tokens:
        payload = decode_access_token(token)
        if payload:
            break

    if not payload:
        raise UnauthorizedError("Invalid or expired access token")

    user = db.query(User).filter(User.id == payload.sub).first()

    if not user:
        raise UnauthorizedError("Invalid access token")

    return user
