from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./vidtube.db"

    # JWT: access and refresh tokens are signed with separate secrets
    access_token_secret: str = "access-secret-change-in-production"
    access_token_expire_minutes: int = 60 * 24  # 1 day
    refresh_token_secret: str = "refresh-secret-change-in-production"
    refresh_token_expire_minutes: int = 60 * 24 * 10  # 10 days
    algorithm: str = "HS256"

    # Cookies carrying the tokens (set secure=False for plain http in dev)
    cookie_secure: bool = True

    # CORS: "*" or comma separated origins
    cors_origin: str = "*"

    # Media object store: absolute path (empty = backend/uploads/media)
    media_root: str = ""
    media_url_prefix: str = "/media"

    # Multipart temp files before they reach the media store (empty = backend/uploads/temp)
    temp_upload_dir: str = ""

    max_image_size_bytes: int = 5 * 1024 * 1024
    max_video_size_bytes: int = 512 * 1024 * 1024

    log_level: str = "INFO"
    port: int = 8000

    class Config:
        env_file = ".env"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
