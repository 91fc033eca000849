"""
Accounts and tokens: registration, login, refresh-token rotation, logout, profile edits.
A user holds one refresh token at a time; refresh requires an exact match with it.
"""
import logging
from pathlib import Path

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from app.core.errors import ConflictError, InternalError, NotFoundError, UnauthorizedError, ValidationError
from app.models.user import User
from app.services.media_storage import RESOURCE_IMAGE, MediaStorage

logger = logging.getLogger(__name__)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def register(
    db: Session,
    storage: MediaStorage,
    *,
    full_name: str | None,
    email: str | None,
    username: str | None,
    password: str | None,
    avatar_path: Path | None,
    cover_image_path: Path | None = None,
) -> User:
    if any(_blank(v) for v in (full_name, email, username, password)):
        raise ValidationError("All fields are required")
    email = email.strip().lower()
    username = username.strip().lower()

    existing = (
        db.query(User)
        .filter(or_(func.lower(User.username) == username, func.lower(User.email) == email))
        .first()
    )
    if existing:
        raise ConflictError("User with email or username already exists")

    if avatar_path is None:
        raise ValidationError("Avatar file is required")
    avatar = storage.upload(avatar_path, "avatars", RESOURCE_IMAGE)
    if not avatar:
        raise ValidationError("Avatar file upload failed")
    cover = storage.upload(cover_image_path, "covers", RESOURCE_IMAGE)

    user = User(
        full_name=full_name.strip(),
        email=email,
        username=username,
        password=hash_password(password),
        avatar_url=avatar.url,
        avatar_public_id=avatar.public_id,
        cover_image_url=cover.url if cover else None,
        cover_image_public_id=cover.public_id if cover else None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        storage.delete(avatar.public_id, RESOURCE_IMAGE)
        if cover:
            storage.delete(cover.public_id, RESOURCE_IMAGE)
        raise ConflictError("User with email or username already exists") from None
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


def _issue_tokens(db: Session, user: User) -> tuple[str, str]:
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)
    user.refresh_token = refresh_token
    db.commit()
    db.refresh(user)
    return access_token, refresh_token


def login(db: Session, *, username: str | None, email: str | None, password: str) -> tuple[User, str, str]:
    if _blank(username) and _blank(email):
        raise ValidationError("username or email is required")
    criteria = []
    if not _blank(username):
        criteria.append(func.lower(User.username) == username.strip().lower())
    if not _blank(email):
        criteria.append(func.lower(User.email) == email.strip().lower())
    user = db.query(User).filter(or_(*criteria)).first()
    if not user:
        raise NotFoundError("User does not exist")
    if not verify_password(password, user.password):
        raise UnauthorizedError("Invalid user credentials")
    access_token, refresh_token = _issue_tokens(db, user)
    logger.info("User %s logged in", user.id)
    return user, access_token, refresh_token


def refresh(db: Session, incoming_token: str | None) -> tuple[User, str, str]:
    if not incoming_token:
        raise UnauthorizedError("Unauthorized request")
    payload = decode_refresh_token(incoming_token)
    if not payload:
        raise UnauthorizedError("Invalid refresh token")
    user = db.query(User).filter(User.id == payload.sub).first()
    if not user:
        raise UnauthorizedError("Invalid refresh token")
    if incoming_token != user.refresh_token:
        logger.warning("Stale refresh token presented for user %s", user.id)
        raise UnauthorizedError("Refresh token is expired or used")
    access_token, refresh_token = _issue_tokens(db, user)
    return user, access_token, refresh_token


def logout(db: Session, user: User) -> None:
    user.refresh_token = None
    db.commit()
    logger.info("User %s logged out", user.id)


def change_password(db: Session, user: User, old_password: str, new_password: str) -> None:
    if not verify_password(old_password, user.password):
        raise ValidationError("Invalid old password")
    if _blank(new_password):
        raise ValidationError("New password is required")
    user.password = hash_password(new_password)
    db.commit()


def update_account(db: Session, user: User, full_name: str, email: str) -> User:
    if _blank(full_name) or _blank(email):
        raise ValidationError("All fields are required")
    email = email.strip().lower()
    taken = db.query(User).filter(func.lower(User.email) == email, User.id != user.id).first()
    if taken:
        raise ConflictError("Email is already in use")
    user.full_name = full_name.strip()
    user.email = email
    db.commit()
    db.refresh(user)
    return user


def update_avatar(db: Session, storage: MediaStorage, user: User, avatar_path: Path | None) -> User:
    if avatar_path is None:
        raise ValidationError("Avatar file is missing")
    avatar = storage.upload(avatar_path, "avatars", RESOURCE_IMAGE)
    if not avatar:
        raise InternalError("Error while uploading avatar")
    previous = user.avatar_public_id
    user.avatar_url = avatar.url
    user.avatar_public_id = avatar.public_id
    db.commit()
    db.refresh(user)
    storage.delete(previous, RESOURCE_IMAGE)
    return user


def update_cover_image(db: Session, storage: MediaStorage, user: User, cover_path: Path | None) -> User:
    if cover_path is None:
        raise ValidationError("Cover image file is missing")
    cover = storage.upload(cover_path, "covers", RESOURCE_IMAGE)
    if not cover:
        raise InternalError("Error while uploading cover image")
    previous = user.cover_image_public_id
    user.cover_image_url = cover.url
    user.cover_image_public_id = cover.public_id
    db.commit()
    db.refresh(user)
    storage.delete(previous, RESOURCE_IMAGE)
    return user
