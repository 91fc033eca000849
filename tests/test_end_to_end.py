from conftest import MP4_BYTES, PNG_BYTES, login, register

from app.models.comment import Comment
from app.models.like import Like


def test_owner_publishes_other_user_cannot_edit_owner_deletes(client, db):
    assert register(client, "ana").status_code == 201
    ana = login(client, "ana").json()["data"]
    ana_headers = {"Authorization": f"Bearer {ana['accessToken']}"}

    created = client.post(
        "/api/v1/videos",
        data={"title": "Launch", "description": "Our first upload"},
        files={
            "videoFile": ("launch.webm", MP4_BYTES, "video/webm"),
            "thumbnail": ("launch.jpg", PNG_BYTES, "image/jpeg"),
        },
        headers=ana_headers,
    )
    assert created.status_code == 201
    video_id = created.json()["data"]["id"]
    client.patch(f"/api/v1/videos/toggle/publish/{video_id}", headers=ana_headers)

    assert register(client, "ben").status_code == 201
    ben = login(client, "ben").json()["data"]
    ben_headers = {"Authorization": f"Bearer {ben['accessToken']}"}
    client.post(f"/api/v1/comments/{video_id}", json={"content": "Great"}, headers=ben_headers)
    client.post(f"/api/v1/likes/toggle/v/{video_id}", headers=ben_headers)

    patched = client.patch(
        f"/api/v1/videos/{video_id}",
        data={"title": "Mine", "description": "Taken over"},
        headers=ben_headers,
    )
    assert patched.status_code == 403
    assert patched.json()["success"] is False

    deleted = client.delete(f"/api/v1/videos/{video_id}", headers=ana_headers)
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True
    assert db.query(Like).filter(Like.video_id == video_id).count() == 0
    assert db.query(Comment).filter(Comment.video_id == video_id).count() == 0


def test_cookie_authentication(client):
    register(client, "ana")
    res = client.post("/api/v1/users/login", json={"username": "ana", "password": "secret123"})
    assert res.status_code == 200
    # the client keeps the accessToken cookie from the login response
    me = client.get("/api/v1/users/current-user")
    assert me.status_code == 200
    assert me.json()["data"]["username"] == "ana"

    client.post("/api/v1/users/logout")
    assert client.get("/api/v1/users/current-user").status_code == 401
