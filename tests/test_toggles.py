import pytest
from conftest import upload_video

from app.core.errors import NotFoundError
from app.models.like import Like
from app.models.subscription import Subscription
from app.services.markers import toggle_marker

MISSING_ID = "00000000-0000-0000-0000-000000000000"


def test_like_video_twice_returns_to_unliked(client, db, published_video, bob):
    url = f"/api/v1/likes/toggle/v/{published_video['id']}"
    first = client.post(url, headers=bob.headers)
    assert first.status_code == 200
    assert first.json()["data"] == {"isLiked": True}
    second = client.post(url, headers=bob.headers)
    assert second.json()["data"] == {"isLiked": False}
    assert db.query(Like).count() == 0


def test_like_missing_target(client, alice):
    assert client.post(f"/api/v1/likes/toggle/v/{MISSING_ID}", headers=alice.headers).status_code == 404
    assert client.post(f"/api/v1/likes/toggle/c/{MISSING_ID}", headers=alice.headers).status_code == 404
    assert client.post(f"/api/v1/likes/toggle/t/{MISSING_ID}", headers=alice.headers).status_code == 404
    assert client.post("/api/v1/likes/toggle/v/123", headers=alice.headers).status_code == 400


def test_liked_videos(client, published_video, alice, bob):
    client.post(f"/api/v1/likes/toggle/v/{published_video['id']}", headers=bob.headers)
    res = client.get("/api/v1/likes/videos", headers=bob.headers)
    assert res.status_code == 200
    liked = res.json()["data"]
    assert len(liked) == 1
    assert liked[0]["likedVideo"]["id"] == published_video["id"]
    assert liked[0]["likedVideo"]["ownerDetails"]["username"] == "alice"
    assert client.get("/api/v1/likes/videos", headers=alice.headers).json()["data"] == []


def test_subscribe_toggle(client, db, alice, bob):
    url = f"/api/v1/subscriptions/c/{alice.id}"
    assert client.post(url, headers=bob.headers).json()["data"] == {"subscribed": True}
    assert db.query(Subscription).count() == 1
    assert client.post(url, headers=bob.headers).json()["data"] == {"subscribed": False}
    assert db.query(Subscription).count() == 0


def test_cannot_subscribe_to_self_or_missing_channel(client, alice):
    assert client.post(f"/api/v1/subscriptions/c/{alice.id}", headers=alice.headers).status_code == 400
    assert client.post(f"/api/v1/subscriptions/c/{MISSING_ID}", headers=alice.headers).status_code == 404


def test_subscriber_and_channel_lists(client, alice, bob, make_user):
    carol = make_user("carol")
    client.post(f"/api/v1/subscriptions/c/{alice.id}", headers=bob.headers)
    client.post(f"/api/v1/subscriptions/c/{alice.id}", headers=carol.headers)
    client.post(f"/api/v1/subscriptions/c/{bob.id}", headers=alice.headers)

    subscribers = client.get(f"/api/v1/subscriptions/c/{alice.id}", headers=alice.headers).json()["data"]
    by_name = {s["subscriber"]["username"]: s["subscriber"] for s in subscribers}
    assert set(by_name) == {"bob", "carol"}
    assert by_name["bob"]["subscribedToSubscriber"] is True
    assert by_name["bob"]["subscribersCount"] == 1
    assert by_name["carol"]["subscribedToSubscriber"] is False


def test_subscribed_channels_latest_video(client, alice, bob):
    from conftest import publish, upload_video

    publish(client, alice, upload_video(client, alice, title="Older")["id"])
    newest = upload_video(client, alice, title="Newer")
    publish(client, alice, newest["id"])
    client.post(f"/api/v1/subscriptions/c/{alice.id}", headers=bob.headers)

    channels = client.get(f"/api/v1/subscriptions/u/{bob.id}", headers=bob.headers).json()["data"]
    assert len(channels) == 1
    channel = channels[0]["subscribedChannel"]
    assert channel["username"] == "alice"
    assert channel["latestVideo"]["id"] == newest["id"]


def test_like_draft_hidden_from_others(client, db, alice, bob):
    draft = upload_video(client, alice)
    assert client.post(f"/api/v1/likes/toggle/v/{draft['id']}", headers=bob.headers).status_code == 404
    assert db.query(Like).count() == 0
    res = client.post(f"/api/v1/likes/toggle/v/{draft['id']}", headers=alice.headers)
    assert res.json()["data"] == {"isLiked": True}


def test_marker_for_vanished_target_is_not_reported_on(client, db, alice):
    with pytest.raises(NotFoundError):
        toggle_marker(db, Like, video_id=MISSING_ID, liked_by_id=alice.id)
    assert db.query(Like).count() == 0
