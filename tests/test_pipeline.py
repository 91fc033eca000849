from datetime import datetime, timedelta

from app.core.pipeline import Pipeline, contains, date_parts, field, first, get_path, last, size, total
from app.models.like import Like
from app.models.user import User
from app.models.video import Video


def _user(db, username):
    user = User(
        username=username,
        email=f"{username}@example.com",
        full_name=username.title(),
        password="x",
        avatar_url=f"/media/avatars/{username}.png",
        avatar_public_id=f"avatars/{username}.png",
    )
    db.add(user)
    db.commit()
    return user


def _video(db, owner, title, *, views=0, published=True, created_at=None):
    video = Video(
        title=title,
        description=f"about {title}",
        owner_id=owner.id,
        views=views,
        is_published=published,
        video_file_url=f"/media/videos/{title}.mp4",
        video_file_public_id=f"videos/{title}.mp4",
        thumbnail_url=f"/media/thumbnails/{title}.png",
        thumbnail_public_id=f"thumbnails/{title}.png",
        created_at=created_at or datetime.utcnow(),
    )
    db.add(video)
    db.commit()
    return video


def test_get_path_maps_over_arrays():
    doc = {"likes": [{"likedBy": "a"}, {"likedBy": "b"}, {}], "owner": {"avatar": {"url": "u"}}}
    assert get_path(doc, "likes.likedBy") == ["a", "b"]
    assert get_path(doc, "owner.avatar.url") == "u"
    assert get_path(doc, "owner.missing", "fallback") == "fallback"


def test_expressions():
    doc = {"items": [{"v": 1}, {"v": 2}, {"v": "x"}], "empty": [], "at": datetime(2024, 3, 5, 10, 30)}
    assert size("items")(doc) == 3
    assert size("nothing")(doc) == 0
    assert first("empty")(doc) is None
    assert first("items")(doc) == {"v": 1}
    assert last("items")(doc) == {"v": "x"}
    assert total("items.v")(doc) == 3
    assert contains("items.v", 2)(doc) is True
    assert contains("items.v", None)(doc) is False
    assert date_parts("at")(doc)["month"] == 3
    assert field("items.v")(doc) == [1, 2, "x"]


def test_first_on_empty_result(db):
    assert Pipeline(Video).match(isPublished=True).first(db) is None


def test_project_dotted_paths(db):
    owner = _user(db, "alice")
    docs = (
        Pipeline(User)
        .match(id=owner.id)
        .project("username", "avatar.url")
        .run(db)
    )
    assert docs == [{"username": "alice", "avatar": {"url": "/media/avatars/alice.png"}}]


def test_lookup_batches_and_flattens(db):
    alice = _user(db, "alice")
    bob = _user(db, "bob")
    video = _video(db, alice, "clip")
    _video(db, bob, "lonely")
    db.add(Like(video_id=video.id, liked_by_id=bob.id))
    db.add(Like(video_id=video.id, liked_by_id=alice.id))
    db.commit()

    docs = (
        Pipeline(Video)
        .sort(title=1)
        .lookup(Like, "id", "video", "likes")
        .lookup(User, "owner", "id", "owner", Pipeline(User).project("username"))
        .add_fields(likesCount=size("likes"), owner=first("owner"), isLiked=contains("likes.likedBy", bob.id))
        .project("title", "likesCount", "owner", "isLiked")
        .run(db)
    )
    assert docs == [
        {"title": "clip", "likesCount": 2, "owner": {"username": "alice"}, "isLiked": True},
        {"title": "lonely", "likesCount": 0, "owner": {"username": "bob"}, "isLiked": False},
    ]


def test_unwind_drops_empty_unless_preserved(db):
    alice = _user(db, "alice")
    _user(db, "bob")
    _video(db, alice, "clip")

    base = Pipeline(User).sort(username=1).lookup(Video, "id", "owner", "videos", Pipeline(Video).project("title"))
    dropped = base.unwind("videos").project("username", "videos").run(db)
    assert dropped == [{"username": "alice", "videos": {"title": "clip"}}]

    kept = (
        Pipeline(User).sort(username=1)
        .lookup(Video, "id", "owner", "videos", Pipeline(Video).project("title"))
        .unwind("videos", preserve_empty=True)
        .project("username", "videos")
        .run(db)
    )
    assert kept[1] == {"username": "bob", "videos": None}


def test_paginate_second_page(db):
    owner = _user(db, "alice")
    start = datetime(2024, 1, 1)
    for i in range(15):
        _video(db, owner, f"v{i:02d}", created_at=start + timedelta(minutes=i))

    page = Pipeline(Video).sort(createdAt=-1).project("title").paginate(db, page=2, limit=10)
    assert [d["title"] for d in page["docs"]] == [f"v{i:02d}" for i in range(4, -1, -1)]
    assert page["totalDocs"] == 15
    assert page["hasNextPage"] is False
    assert page["hasPrevPage"] is True
    assert page["nextPage"] is None


def test_paginate_empty(db):
    page = Pipeline(Video).paginate(db, page=1, limit=10)
    assert page["docs"] == []
    assert page["totalPages"] == 1
    assert page["hasPrevPage"] is False
    assert page["prevPage"] is None


def test_search_matches_any_term(db):
    owner = _user(db, "alice")
    _video(db, owner, "Pasta night")
    _video(db, owner, "Garden tour")
    _video(db, owner, "100%_real")

    titles = [d["title"] for d in Pipeline(Video).search("pasta garden", "title").sort(title=1).run(db)]
    assert titles == ["Garden tour", "Pasta night"]
    assert Pipeline(Video).search("%", "title").count(db) == 1
    assert Pipeline(Video).search("   ", "title").count(db) == 3


def test_total_over_lookup(db):
    owner = _user(db, "alice")
    _video(db, owner, "a", views=3)
    _video(db, owner, "b", views=4)
    doc = (
        Pipeline(User)
        .lookup(Video, "id", "owner", "videos", Pipeline(Video).project("views"))
        .add_fields(totalViews=total("videos.views"))
        .project("totalViews")
        .first(db)
    )
    assert doc == {"totalViews": 7}
