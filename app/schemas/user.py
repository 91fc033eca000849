from pydantic import BaseModel
from app.schemas.common import CamelModel


class TokenPayload(BaseModel):
    sub: str  # user id
    exp: int
    type: str = "access"
    email: str | None = None
    username: str | None = None


class LoginRequest(BaseModel):
    """Either username or email identifies the account."""
    username: str | None = None
    email: str | None = None
    password: str


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str


class UpdateAccountRequest(CamelModel):
    full_name: str
    email: str
