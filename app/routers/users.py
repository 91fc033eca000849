from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.auth import ACCESS_COOKIE, REFRESH_COOKIE, get_current_user
from app.config import get_settings
from app.core.errors import NotFoundError
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views
from app.schemas.user import ChangePasswordRequest, LoginRequest, RefreshTokenRequest, UpdateAccountRequest
from app.services import credentials
from app.services.media_storage import MediaStorage, get_media_storage
from app.services.uploads import StagedUploads

router = APIRouter(prefix="/api/v1/users", tags=["users"])
settings = get_settings()


def _set_auth_cookies(response: JSONResponse, access_token: str, refresh_token: str) -> JSONResponse:
    options = {"httponly": True, "secure": settings.cookie_secure, "samesite": "lax"}
    response.set_cookie(ACCESS_COOKIE, access_token, max_age=settings.access_token_expire_minutes * 60, **options)
    response.set_cookie(REFRESH_COOKIE, refresh_token, max_age=settings.refresh_token_expire_minutes * 60, **options)
    return response


@router.post("/register")
def register(
    full_name: str | None = Form(None, alias="fullName"),
    email: str | None = Form(None),
    username: str | None = Form(None),
    password: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """Create an account. Multipart: fullName, email, username, password, avatar (required), coverImage."""
    with StagedUploads() as staged:
        avatar_path = staged.image(avatar, "avatar")
        cover_path = staged.image(cover_image, "coverImage")
        user = credentials.register(
            db,
            storage,
            full_name=full_name,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_path,
        )
    return api_response(user.to_document(), "User registered successfully", status.HTTP_201_CREATED)


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Login with username or email and password. Tokens are returned and set as cookies."""
    user, access_token, refresh_token = credentials.login(
        db, username=body.username, email=body.email, password=body.password
    )
    response = api_response(
        {"user": user.to_document(), "accessToken": access_token, "refreshToken": refresh_token},
        "User logged in successfully",
    )
    return _set_auth_cookies(response, access_token, refresh_token)


@router.post("/logout")
def logout(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    credentials.logout(db, user)
    response = api_response({}, "User logged out")
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)
    return response


@router.post("/refresh-token")
def refresh_token(
    request: Request,
    body: RefreshTokenRequest | None = None,
    db: Session = Depends(get_db),
):
    """Rotate the token pair. Refresh token from the refreshToken cookie or the request body."""
    incoming = request.cookies.get(REFRESH_COOKIE) or (body.refresh_token if body else None)
    _user, access_token, new_refresh_token = credentials.refresh(db, incoming)
    response = api_response(
        {"accessToken": access_token, "refreshToken": new_refresh_token},
        "Access token refreshed",
    )
    return _set_auth_cookies(response, access_token, new_refresh_token)


@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    credentials.change_password(db, user, body.old_password, body.new_password)
    return api_response({}, "Password changed successfully")


@router.get("/current-user")
def current_user(user: User = Depends(get_current_user)):
    return api_response(user.to_document(), "Current user fetched successfully")


@router.patch("/update-account")
def update_account(
    body: UpdateAccountRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = credentials.update_account(db, user, body.full_name, body.email)
    return api_response(user.to_document(), "Account details updated successfully")


@router.patch("/avatar")
def update_avatar(
    avatar: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    with StagedUploads() as staged:
        user = credentials.update_avatar(db, storage, user, staged.image(avatar, "avatar"))
    return api_response(user.to_document(), "Avatar image updated successfully")


@router.patch("/cover-image")
def update_cover_image(
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    with StagedUploads() as staged:
        user = credentials.update_cover_image(db, storage, user, staged.image(cover_image, "coverImage"))
    return api_response(user.to_document(), "Cover image updated successfully")


@router.get("/c/{username}")
def channel_profile(
    username: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Channel page: subscriber counts and whether the caller is subscribed."""
    if not username.strip():
        raise NotFoundError("Channel does not exist")
    channel = views.channel_profile(db, username, user.id)
    if channel is None:
        raise NotFoundError("Channel does not exist")
    return api_response(channel, "User channel fetched successfully")


@router.get("/history")
def watch_history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return api_response(views.watch_history(db, user.id), "Watch history fetched successfully")
