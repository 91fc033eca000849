from conftest import upload_video

from app.models.like import Like

MISSING_ID = "00000000-0000-0000-0000-000000000000"


def _comment(client, account, video_id, content):
    res = client.post(f"/api/v1/comments/{video_id}", json={"content": content}, headers=account.headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]


def test_add_and_list_comments(client, published_video, alice, bob):
    video_id = published_video["id"]
    first = _comment(client, bob, video_id, "First!")
    second = _comment(client, alice, video_id, "Thanks")
    client.post(f"/api/v1/likes/toggle/c/{first['id']}", headers=alice.headers)

    res = client.get(f"/api/v1/comments/{video_id}", headers=alice.headers)
    assert res.status_code == 200
    page = res.json()["data"]
    assert page["totalDocs"] == 2
    by_id = {c["id"]: c for c in page["docs"]}
    assert by_id[first["id"]]["likesCount"] == 1
    assert by_id[first["id"]]["isLiked"] is True
    assert by_id[first["id"]]["owner"]["username"] == "bob"
    assert by_id[second["id"]]["likesCount"] == 0
    assert [c["id"] for c in page["docs"]] == [second["id"], first["id"]]


def test_comment_validation(client, published_video, alice):
    video_id = published_video["id"]
    assert client.post(f"/api/v1/comments/{video_id}", json={"content": "   "}, headers=alice.headers).status_code == 400
    assert client.post(f"/api/v1/comments/{MISSING_ID}", json={"content": "hi"}, headers=alice.headers).status_code == 404


def test_comments_on_empty_video(client, alice):
    video = upload_video(client, alice)
    page = client.get(f"/api/v1/comments/{video['id']}", headers=alice.headers).json()["data"]
    assert page["docs"] == []
    assert page["totalDocs"] == 0
    assert page["totalPages"] == 1
    assert page["hasNextPage"] is False


def test_edit_and_delete_comment_owner_only(client, db, published_video, alice, bob):
    comment = _comment(client, bob, published_video["id"], "typo")
    client.post(f"/api/v1/likes/toggle/c/{comment['id']}", headers=alice.headers)

    forbidden = client.patch(f"/api/v1/comments/c/{comment['id']}", json={"content": "mine now"}, headers=alice.headers)
    assert forbidden.status_code == 403

    edited = client.patch(f"/api/v1/comments/c/{comment['id']}", json={"content": "fixed"}, headers=bob.headers)
    assert edited.status_code == 200
    assert edited.json()["data"]["content"] == "fixed"

    assert client.delete(f"/api/v1/comments/c/{comment['id']}", headers=alice.headers).status_code == 403
    assert client.delete(f"/api/v1/comments/c/{comment['id']}", headers=bob.headers).status_code == 200
    assert db.query(Like).filter(Like.comment_id == comment["id"]).count() == 0
    assert client.delete(f"/api/v1/comments/c/{comment['id']}", headers=bob.headers).status_code == 404


def test_tweets_lifecycle(client, alice, bob):
    res = client.post("/api/v1/tweets", json={"content": "hello world"}, headers=alice.headers)
    assert res.status_code == 201
    tweet = res.json()["data"]
    assert tweet["owner"] == alice.id

    client.post(f"/api/v1/likes/toggle/t/{tweet['id']}", headers=bob.headers)
    listed = client.get(f"/api/v1/tweets/user/{alice.id}", headers=bob.headers).json()["data"]
    assert len(listed) == 1
    assert listed[0]["likesCount"] == 1
    assert listed[0]["isLiked"] is True
    assert listed[0]["ownerDetails"]["username"] == "alice"

    assert client.patch(f"/api/v1/tweets/{tweet['id']}", json={"content": "x"}, headers=bob.headers).status_code == 403
    updated = client.patch(f"/api/v1/tweets/{tweet['id']}", json={"content": "edited"}, headers=alice.headers)
    assert updated.json()["data"]["content"] == "edited"

    assert client.delete(f"/api/v1/tweets/{tweet['id']}", headers=alice.headers).status_code == 200
    assert client.get(f"/api/v1/tweets/user/{alice.id}", headers=bob.headers).json()["data"] == []


def test_tweet_requires_content(client, alice):
    assert client.post("/api/v1/tweets", json={}, headers=alice.headers).status_code == 400
    assert client.post("/api/v1/tweets", json={"content": ""}, headers=alice.headers).status_code == 400


def test_draft_comments_only_for_owner(client, db, alice, bob):
    draft = upload_video(client, alice)
    url = f"/api/v1/comments/{draft['id']}"
    assert client.post(url, json={"content": "early"}, headers=bob.headers).status_code == 404
    assert client.get(url, headers=bob.headers).status_code == 404

    comment = _comment(client, alice, draft["id"], "note to self")
    like_url = f"/api/v1/likes/toggle/c/{comment['id']}"
    assert client.post(like_url, headers=bob.headers).status_code == 404
    assert db.query(Like).count() == 0
    assert client.post(like_url, headers=alice.headers).json()["data"] == {"isLiked": True}
    assert client.get(url, headers=alice.headers).json()["data"]["totalDocs"] == 1
