from conftest import publish, upload_video


def _playlist(client, account, name="Favourites", description="Best ones"):
    res = client.post("/api/v1/playlist", json={"name": name, "description": description}, headers=account.headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]


def test_create_requires_name_and_description(client, alice):
    res = client.post("/api/v1/playlist", json={"name": "Only name"}, headers=alice.headers)
    assert res.status_code == 400


def test_add_video_is_idempotent_and_ordered(client, alice):
    first = upload_video(client, alice, title="One")
    second = upload_video(client, alice, title="Two")
    for video in (first, second):
        publish(client, alice, video["id"])
    playlist = _playlist(client, alice)

    url = "/api/v1/playlist/add/{}/" + playlist["id"]
    client.patch(url.format(second["id"]), headers=alice.headers)
    client.patch(url.format(first["id"]), headers=alice.headers)
    res = client.patch(url.format(second["id"]), headers=alice.headers)
    assert res.status_code == 200
    assert res.json()["data"]["videos"] == [second["id"], first["id"]]

    detail = client.get(f"/api/v1/playlist/{playlist['id']}", headers=alice.headers).json()["data"]
    assert [v["title"] for v in detail["videos"]] == ["Two", "One"]
    assert detail["totalVideos"] == 2
    assert detail["totalViews"] == 0
    assert detail["owner"]["username"] == "alice"


def test_playlist_detail_hides_unpublished(client, alice):
    draft = upload_video(client, alice)
    playlist = _playlist(client, alice)
    client.patch(f"/api/v1/playlist/add/{draft['id']}/{playlist['id']}", headers=alice.headers)
    detail = client.get(f"/api/v1/playlist/{playlist['id']}", headers=alice.headers).json()["data"]
    assert detail["videos"] == []
    assert detail["totalVideos"] == 0


def test_remove_video(client, published_video, alice):
    playlist = _playlist(client, alice)
    client.patch(f"/api/v1/playlist/add/{published_video['id']}/{playlist['id']}", headers=alice.headers)
    res = client.patch(f"/api/v1/playlist/remove/{published_video['id']}/{playlist['id']}", headers=alice.headers)
    assert res.status_code == 200
    assert res.json()["data"]["videos"] == []


def test_only_owner_changes_playlist(client, published_video, alice, bob):
    playlist = _playlist(client, alice)
    add = client.patch(f"/api/v1/playlist/add/{published_video['id']}/{playlist['id']}", headers=bob.headers)
    assert add.status_code == 403
    rename = client.patch(
        f"/api/v1/playlist/{playlist['id']}", json={"name": "Bob's", "description": "x"}, headers=bob.headers
    )
    assert rename.status_code == 403
    assert client.delete(f"/api/v1/playlist/{playlist['id']}", headers=bob.headers).status_code == 403

    detail = client.get(f"/api/v1/playlist/{playlist['id']}", headers=bob.headers).json()["data"]
    assert detail["name"] == "Favourites"
    assert detail["videos"] == []


def test_update_and_delete(client, published_video, alice):
    playlist = _playlist(client, alice)
    client.patch(f"/api/v1/playlist/add/{published_video['id']}/{playlist['id']}", headers=alice.headers)
    res = client.patch(
        f"/api/v1/playlist/{playlist['id']}", json={"name": "Renamed", "description": "New"}, headers=alice.headers
    )
    assert res.json()["data"]["name"] == "Renamed"

    assert client.delete(f"/api/v1/playlist/{playlist['id']}", headers=alice.headers).status_code == 200
    assert client.get(f"/api/v1/playlist/{playlist['id']}", headers=alice.headers).status_code == 404


def test_user_playlists(client, published_video, alice, bob):
    mine = _playlist(client, alice, name="Mine")
    _playlist(client, alice, name="Empty")
    client.patch(f"/api/v1/playlist/add/{published_video['id']}/{mine['id']}", headers=alice.headers)
    client.get(f"/api/v1/videos/{published_video['id']}", headers=bob.headers)

    playlists = client.get(f"/api/v1/playlist/user/{alice.id}", headers=bob.headers).json()["data"]
    by_name = {p["name"]: p for p in playlists}
    assert by_name["Mine"]["totalVideos"] == 1
    assert by_name["Mine"]["totalViews"] == 1
    assert by_name["Empty"]["totalVideos"] == 0
    assert playlists[0]["name"] == "Mine"


def test_cannot_add_someone_elses_draft(client, alice, bob):
    draft = upload_video(client, alice)
    playlist = _playlist(client, bob)
    res = client.patch(f"/api/v1/playlist/add/{draft['id']}/{playlist['id']}", headers=bob.headers)
    assert res.status_code == 404
    detail = client.get(f"/api/v1/playlist/{playlist['id']}", headers=bob.headers).json()["data"]
    assert detail["totalVideos"] == 0


def test_user_playlists_count_only_published(client, alice):
    draft = upload_video(client, alice)
    playlist = _playlist(client, alice)
    client.patch(f"/api/v1/playlist/add/{draft['id']}/{playlist['id']}", headers=alice.headers)

    listed = client.get(f"/api/v1/playlist/user/{alice.id}", headers=alice.headers).json()["data"]
    detail = client.get(f"/api/v1/playlist/{playlist['id']}", headers=alice.headers).json()["data"]
    assert listed[0]["totalVideos"] == detail["totalVideos"] == 0

    publish(client, alice, draft["id"])
    listed = client.get(f"/api/v1/playlist/user/{alice.id}", headers=alice.headers).json()["data"]
    assert listed[0]["totalVideos"] == 1
