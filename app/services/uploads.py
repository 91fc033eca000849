"""Multipart intake: type/size checks, then stream to the temp dir for the media store."""
import uuid
from pathlib import Path

from fastapi import UploadFile

from app.config import get_settings
from app.core.errors import ValidationError

CHUNK_SIZE = 1024 * 1024  # 1 MB

IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}
IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png"}
VIDEO_CONTENT_TYPES = {"video/mp4", "video/webm", "video/ogg", "video/quicktime"}
VIDEO_EXTENSIONS = {".mp4", ".webm", ".ogg", ".mov"}


def temp_upload_dir() -> Path:
    settings = get_settings()
    if settings.temp_upload_dir:
        return Path(settings.temp_upload_dir)
    return Path(__file__).resolve().parent.parent.parent / "uploads" / "temp"


def _has_file(file: UploadFile | None) -> bool:
    return file is not None and bool(file.filename)


def _save(file: UploadFile, field_name: str, max_bytes: int, ext: str) -> Path:
    """Stream to the temp dir under a fresh name. ext must come from an allow-list."""
    temp_upload_dir().mkdir(parents=True, exist_ok=True)
    path = temp_upload_dir() / f"{uuid.uuid4()}{ext}"
    written = 0
    try:
        with path.open("wb") as f:
            while chunk := file.file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > max_bytes:
                    raise ValidationError(f"{field_name} exceeds the {max_bytes // (1024 * 1024)} MB limit")
                f.write(chunk)
    except ValidationError:
        path.unlink(missing_ok=True)
        raise
    return path


def save_image_upload(file: UploadFile | None, field_name: str) -> Path | None:
    """Validate an image field (jpeg/jpg/png) and stream it to the temp dir. None when no file was sent."""
    if not _has_file(file):
        return None
    ct = (file.content_type or "").split(";")[0].strip().lower()
    ext = Path(file.filename).suffix.lower()
    if ct not in IMAGE_CONTENT_TYPES or ext not in IMAGE_EXTENSIONS:
        raise ValidationError(f"{field_name} must be an image. Allowed: jpeg, jpg, png.")
    return _save(file, field_name, get_settings().max_image_size_bytes, ext)


def save_video_upload(file: UploadFile | None, field_name: str) -> Path | None:
    if not _has_file(file):
        return None
    ct = (file.content_type or "").split(";")[0].strip().lower()
    ext = Path(file.filename).suffix.lower()
    if ct not in VIDEO_CONTENT_TYPES or ext not in VIDEO_EXTENSIONS:
        raise ValidationError(f"{field_name} must be a video. Allowed: mp4, webm, ogg, mov.")
    return _save(file, field_name, get_settings().max_video_size_bytes, ext)


def discard(*paths: Path | None) -> None:
    """Remove temp files that never reached the media store."""
    for path in paths:
        if path is not None:
            path.unlink(missing_ok=True)


class StagedUploads:
    """Temp files of one request. Whatever the media store did not consume is removed on exit."""

    def __init__(self):
        self._paths: list[Path] = []

    def image(self, file: UploadFile | None, field_name: str) -> Path | None:
        return self._track(save_image_upload(file, field_name))

    def video(self, file: UploadFile | None, field_name: str) -> Path | None:
        return self._track(save_video_upload(file, field_name))

    def _track(self, path: Path | None) -> Path | None:
        if path is not None:
            self._paths.append(path)
        return path

    def __enter__(self) -> "StagedUploads":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        discard(*self._paths)
