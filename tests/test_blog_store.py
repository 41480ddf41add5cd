import pytest
from sqlalchemy.exc import OperationalError

from apps.blog import store
from apps.blog.models import BlogPost
from apps.blog.slugs import allocate
from apps.images.models import Image
from apps.images.store import image_url, store_image
from apps.shared.errors import Conflict, NotFound, StorageError, ValidationError


def test_create_sets_server_fields(db):
    post = store.create_post(db, title="First Post", content="# Hi")

    assert post.id is not None
    assert post.slug == "first-post"
    assert post.content == "# Hi"
    assert post.created_at is not None
    assert post.updated_at is not None


@pytest.mark.parametrize("title", [None, "", "   "])
def test_create_requires_title(db, title):
    with pytest.raises(ValidationError) as exc_info:
        store.create_post(db, title=title)
    assert exc_info.value.message == "Title is required"
    assert db.query(BlogPost).count() == 0


def test_create_stores_blank_optionals_as_null(db):
    post = store.create_post(db, title="Blank", excerpt="", content="", cover_image_url="")
    assert post.excerpt is None
    assert post.content is None
    assert post.cover_image_url is None


def test_same_title_gets_suffixed_slugs(db):
    slugs = [store.create_post(db, title="Same Title").slug for _ in range(3)]
    assert slugs == ["same-title", "same-title-1", "same-title-2"]

    for slug in slugs:
        assert store.get_post_by_slug(db, slug).slug == slug


def test_unusable_title_and_slug_use_fallback(db):
    first = store.create_post(db, title="???", slug="!!!")
    second = store.create_post(db, title="...")
    assert first.slug == "post"
    assert second.slug == "post-1"


def test_get_by_slug_missing(db):
    with pytest.raises(NotFound):
        store.get_post_by_slug(db, "nope")


def test_list_newest_first_with_limit(db):
    for i in range(5):
        store.create_post(db, title=f"Post {i}")

    everything = store.list_posts(db)
    assert [p.slug for p in everything] == ["post-4", "post-3", "post-2", "post-1", "post-0"]

    assert [p.slug for p in store.list_posts(db, 2)] == ["post-4", "post-3"]


@pytest.mark.parametrize("limit", [None, 0, -1])
def test_list_without_positive_limit_is_unbounded(db, limit):
    for i in range(3):
        store.create_post(db, title=f"Post {i}")
    assert len(store.list_posts(db, limit)) == 3


def test_delete_is_idempotent(db):
    post = store.create_post(db, title="Short lived")

    store.delete_post(db, post.id)
    store.delete_post(db, post.id)
    store.delete_post(db, 12345)

    assert db.query(BlogPost).count() == 0


def test_lost_slug_race_is_retried(db, monkeypatch, caplog):
    store.create_post(db, title="Race")

    calls = []

    def stale_allocate(session, base):
        calls.append(base)
        # First probe answers with a slug a concurrent request already took
        if len(calls) == 1:
            return base
        return allocate(session, base)

    monkeypatch.setattr(store, "allocate", stale_allocate)

    post = store.create_post(db, title="Race")

    assert post.slug == "race-1"
    assert len(calls) == 2
    assert "claimed concurrently" in caplog.text


def test_slug_race_exhaustion_raises_conflict(db, monkeypatch):
    store.create_post(db, title="Race")
    monkeypatch.setattr(store, "allocate", lambda session, base: base)

    with pytest.raises(Conflict):
        store.create_post(db, title="Race")

    assert db.query(BlogPost).count() == 1


def test_storage_failure_is_sanitized(db, monkeypatch):
    def broken_insert(*args, **kwargs):
        raise OperationalError("INSERT INTO blogs", {}, Exception("password=hunter2"))

    monkeypatch.setattr(store, "insert_unless_exists", broken_insert)

    with pytest.raises(StorageError) as exc_info:
        store.create_post(db, title="Doomed")

    assert "Failed to create blog" in exc_info.value.message
    assert "hunter2" not in exc_info.value.message


def test_cover_image_path_links_existing_image(db):
    image = store_image(db, b"\x89PNG", "image/png", "cover.png")

    linked = store.create_post(db, title="Linked", cover_image_url=image_url(image.id))
    external = store.create_post(db, title="External", cover_image_url="https://cdn.example.com/a.png")
    dangling = store.create_post(db, title="Dangling", cover_image_url="/images/9999")

    assert linked.cover_image_id == image.id
    assert external.cover_image_id is None
    assert dangling.cover_image_id is None
    assert dangling.cover_image_url == "/images/9999"


def test_deleting_image_nulls_cover_reference_without_cascade(db):
    image = store_image(db, b"\x89PNG", "image/png")
    post = store.create_post(db, title="Covered", cover_image_url=image_url(image.id))
    post_id = post.id

    db.delete(db.get(Image, image.id))
    db.commit()
    db.expire_all()

    post = db.get(BlogPost, post_id)
    assert post is not None
    assert post.cover_image_id is None
    assert post.cover_image_url == image_url(image.id)


def test_cover_path_beyond_id_range_is_not_linked(db):
    post = store.create_post(db, title="Huge", cover_image_url="/images/99999999999999999999")
    assert post.cover_image_id is None
    assert post.cover_image_url == "/images/99999999999999999999"
