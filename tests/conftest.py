import os
import tempfile

_workdir = tempfile.mkdtemp(prefix="vidtube-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MEDIA_ROOT"] = os.path.join(_workdir, "media")
os.environ["TEMP_UPLOAD_DIR"] = os.path.join(_workdir, "temp")
os.environ["COOKIE_SECURE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.main import app  # noqa: E402

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 256

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register(client, username, *, email=None, password="secret123", cover=False):
    files = {"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    if cover:
        files["coverImage"] = ("cover.png", PNG_BYTES, "image/png")
    return client.post(
        "/api/v1/users/register",
        data={
            "fullName": username.title(),
            "email": email or f"{username}@example.com",
            "username": username,
            "password": password,
        },
        files=files,
    )


def login(client, username, password="secret123"):
    res = client.post("/api/v1/users/login", json={"username": username, "password": password})
    # tests authenticate with explicit Bearer headers, one user per header
    client.cookies.clear()
    return res


class Account:
    def __init__(self, user: dict, access_token: str, refresh_token: str):
        self.user = user
        self.id = user["id"]
        self.access_token = access_token
        self.refresh_token = refresh_token

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.access_token}"}


@pytest.fixture
def make_user(client):
    def _make(username: str, **kwargs) -> Account:
        assert register(client, username, **kwargs).status_code == 201
        res = login(client, username, kwargs.get("password", "secret123"))
        assert res.status_code == 200
        data = res.json()["data"]
        return Account(data["user"], data["accessToken"], data["refreshToken"])
    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


def upload_video(client, account: Account, title="First video", description="A description"):
    res = client.post(
        "/api/v1/videos",
        data={"title": title, "description": description},
        files={
            "videoFile": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
        },
        headers=account.headers,
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]


def publish(client, account: Account, video_id: str):
    res = client.patch(f"/api/v1/videos/toggle/publish/{video_id}", headers=account.headers)
    assert res.status_code == 200, res.text
    return res.json()["data"]


@pytest.fixture
def published_video(client, alice):
    video = upload_video(client, alice)
    publish(client, alice, video["id"])
    return video
