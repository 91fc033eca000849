"""
Media object store backed by a local directory and served under settings.media_url_prefix.
upload() consumes a temp file (always removed afterwards); delete() never raises.
"""
import logging
import shutil
import subprocess
import uuid
from dataclasses import dataclass
from pathlib import Path

from app.config import get_settings

logger = logging.getLogger(__name__)

RESOURCE_IMAGE = "image"
RESOURCE_VIDEO = "video"

# Stored objects keep only these suffixes; anything else is stored without one
STORED_SUFFIXES = {".jpeg", ".jpg", ".png", ".mp4", ".webm", ".ogg", ".mov"}


@dataclass
class MediaAsset:
    url: str
    public_id: str  # path relative to the media root, e.g. "videos/<uuid>.mp4"
    duration: float | None = None


def media_root() -> Path:
    settings = get_settings()
    if settings.media_root:
        return Path(settings.media_root)
    return Path(__file__).resolve().parent.parent.parent / "uploads" / "media"


def _public_url(public_id: str) -> str:
    return f"{get_settings().media_url_prefix.rstrip('/')}/{public_id}"


def _safe_object_path(public_id: str) -> Path | None:
    """Resolve public_id under media root. None if it escapes the root."""
    root = media_root().resolve()
    try:
        full = (root / public_id).resolve()
        full.relative_to(root)
    except (ValueError, OSError):
        return None
    return full


def probe_duration(path: Path) -> float:
    """Duration in seconds via ffprobe; 0.0 when ffprobe is missing or fails."""
    cmd = [
        "ffprobe",
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(path),
    ]
    try:
        result = subprocess.run(cmd, check=True, capture_output=True, timeout=60)
        return float(result.stdout.decode().strip() or 0)
    except subprocess.CalledProcessError as e:
        logger.warning("ffprobe failed for %s: %s", path, e.stderr and e.stderr.decode() or e)
    except subprocess.TimeoutExpired:
        logger.warning("ffprobe timed out for %s", path)
    except FileNotFoundError:
        logger.warning("ffprobe not found; install FFmpeg to record video durations")
    except ValueError:
        logger.warning("ffprobe returned no duration for %s", path)
    return 0.0


def _remove_temp(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove temp upload %s: %s", path, e)


class MediaStorage:
    def upload(self, local_path: Path | str | None, folder: str, resource_type: str = RESOURCE_IMAGE) -> MediaAsset | None:
        if not local_path:
            return None
        source = Path(local_path)
        if not source.is_file():
            logger.warning("Upload source missing: %s", source)
            return None
        try:
            ext = source.suffix.lower() if source.suffix.lower() in STORED_SUFFIXES else ""
            public_id = f"{folder}/{uuid.uuid4()}{ext}"
            target = media_root() / public_id
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            duration = probe_duration(target) if resource_type == RESOURCE_VIDEO else None
            logger.info("Stored %s as %s", source.name, public_id)
            return MediaAsset(url=_public_url(public_id), public_id=public_id, duration=duration)
        except OSError as e:
            logger.error("Media upload failed for %s: %s", source, e)
            return None
        finally:
            _remove_temp(source)

    def delete(self, public_id: str | None, resource_type: str = RESOURCE_IMAGE) -> None:
        if not public_id:
            return
        path = _safe_object_path(public_id)
        if path is None:
            logger.warning("Refusing to delete %s object outside media root: %s", resource_type, public_id)
            return
        try:
            path.unlink(missing_ok=True)
            logger.info("Deleted %s object %s", resource_type, public_id)
        except OSError as e:
            logger.warning("Failed to delete %s object %s: %s", resource_type, public_id, e)


media_storage = MediaStorage()


def get_media_storage() -> MediaStorage:
    return media_storage
