import pytest

from conftest import create_user, image, make_post
from hobbi.core.exceptions import FileUploadFailed, Forbidden, ObjectStorageError, PostNotFound
from hobbi.modules.comments.models.comment import Comment
from hobbi.modules.post_images.models.post_image import PostImage
from hobbi.modules.post_images.services.post_image import PostImageService
from hobbi.modules.posts.models.post import Post, PostHobbyTag
from hobbi.modules.posts.schemas.post import PostUpdate

URL_BASE = "https://objects.example.com/hobbi-media/post_images"


def _fail_on_call(monkeypatch, target_call):
    """Make PostImageService.save_post_image raise on its target_call-th invocation"""
    original = PostImageService.save_post_image
    calls = {"n": 0}

    def flaky(self, post, image_url):
        calls["n"] += 1
        if calls["n"] == target_call:
            raise RuntimeError("metadata write failed")
        return original(self, post, image_url)

    monkeypatch.setattr(PostImageService, "save_post_image", flaky)


class TestCreatePost:
    def test_create_with_images_and_tags(self, db, post_service, alice, events):
        post = make_post(
            post_service, alice, hobby_tag_names=["running", "no-such-tag", "cooking"],
            image_files=[image("a.png"), image("b.JPG")],
        )

        db.refresh(post)
        assert post.user_id == alice.id
        assert [i.image_url for i in post.post_images] == [f"{URL_BASE}/img-1.png", f"{URL_BASE}/img-2.jpg"]
        assert sorted(link.hobby_tag.name for link in post.post_hobby_tags) == ["cooking", "running"]

    def test_events_published_after_commit(self, db, post_service, alice, events):
        post = make_post(post_service, alice, image_files=[image("a.png"), image("b.png")])

        assert [e.file_name for e in events] == ["img-1.png", "img-2.png"]
        assert [e.post_image_id for e in events] == [i.id for i in post.post_images]
        assert events[0].file.content == b"\x89PNG fake bytes"

    def test_create_without_images_or_tags(self, db, post_service, alice, events):
        post = make_post(post_service, alice)

        assert db.query(Post).count() == 1
        assert post.post_images == []
        assert post.post_hobby_tags == []
        assert events == []

    def test_failed_second_image_removes_every_uploaded_object(self, db, post_service, storage, alice, events, monkeypatch):
        _fail_on_call(monkeypatch, 2)

        with pytest.raises(FileUploadFailed):
            make_post(post_service, alice, hobby_tag_names=["running"], image_files=[image("a.png"), image("b.png")])

        assert storage.deleted == ["post_images/img-1.png", "post_images/img-2.png"]
        assert db.query(Post).count() == 0
        assert db.query(PostImage).count() == 0
        assert events == []

    def test_compensation_continues_past_failing_delete(self, db, post_service, storage, alice, monkeypatch):
        _fail_on_call(monkeypatch, 3)
        deleted = []

        def delete(url_or_key):
            deleted.append(url_or_key)
            if url_or_key.endswith("img-1.png"):
                raise ObjectStorageError()

        monkeypatch.setattr(storage, "delete", delete)

        with pytest.raises(FileUploadFailed):
            make_post(post_service, alice, image_files=[image(), image(), image()])

        assert deleted == [f"{URL_BASE}/img-1.png", f"{URL_BASE}/img-2.png", f"{URL_BASE}/img-3.png"]


class TestUpdatePost:
    def test_update_replaces_fields_and_tags(self, db, post_service, alice):
        post = make_post(post_service, alice, hobby_tag_names=["running", "hiking"])

        post_service.update(alice, post.id, PostUpdate(title="New", content="Body", hobby_tag_names=["music"]))

        db.refresh(post)
        assert (post.title, post.content) == ("New", "Body")
        assert [link.hobby_tag.name for link in post.post_hobby_tags] == ["music"]

    def test_update_keeping_same_tag(self, db, post_service, alice):
        post = make_post(post_service, alice, hobby_tag_names=["running"])

        post_service.update(alice, post.id, PostUpdate(title="t", content="c", hobby_tag_names=["running"]))

        db.refresh(post)
        assert [link.hobby_tag.name for link in post.post_hobby_tags] == ["running"]

    def test_empty_tag_list_clears_tags(self, db, post_service, alice):
        post = make_post(post_service, alice, hobby_tag_names=["running", "hiking"])

        post_service.update(alice, post.id, PostUpdate(title="t", content="c", hobby_tag_names=[]))

        assert db.query(PostHobbyTag).filter(PostHobbyTag.post_id == post.id).count() == 0

    def test_non_owner_is_forbidden(self, db, post_service, storage, alice, bob):
        post = make_post(post_service, alice, title="Original", hobby_tag_names=["running"], image_files=[image()])
        url = post.post_images[0].image_url

        with pytest.raises(Forbidden):
            post_service.update(
                bob, post.id,
                PostUpdate(title="Hijacked", content="x", deleted_image_urls=[url], hobby_tag_names=[]),
            )

        db.expire_all()
        post = db.get(Post, post.id)
        assert post.title == "Original"
        assert len(post.post_images) == 1
        assert len(post.post_hobby_tags) == 1
        assert storage.deleted == []

    def test_missing_post(self, post_service, alice):
        with pytest.raises(PostNotFound):
            post_service.update(alice, 999, PostUpdate(title="t", content="c"))

    def test_delete_listed_images_and_append_new(self, db, post_service, storage, alice, events):
        post = make_post(post_service, alice, image_files=[image("a.png"), image("b.png")])
        first_url = post.post_images[0].image_url
        events.clear()

        post_service.update(
            alice, post.id,
            PostUpdate(title="t", content="c", deleted_image_urls=[first_url, "https://elsewhere/x.png"]),
            [image("c.png")],
        )

        db.refresh(post)
        assert storage.deleted == ["post_images/img-1.png"]
        assert [i.image_url for i in post.post_images] == [f"{URL_BASE}/img-2.png", f"{URL_BASE}/img-3.png"]
        assert db.query(PostImage).count() == 2
        assert [e.file_name for e in events] == ["img-3.png"]

    def test_failed_image_removal_keeps_post_unchanged(self, db, post_service, storage, alice, events, monkeypatch):
        post = make_post(post_service, alice, title="Kept", image_files=[image("a.png")])
        url = post.post_images[0].image_url
        events.clear()

        def unavailable(url_or_key):
            raise ObjectStorageError("Failed to delete")

        monkeypatch.setattr(storage, "delete", unavailable)

        with pytest.raises(ObjectStorageError):
            post_service.update(alice, post.id, PostUpdate(title="Changed", content="c", deleted_image_urls=[url]))

        db.expire_all()
        post = db.get(Post, post.id)
        assert post.title == "Kept"
        assert [i.image_url for i in post.post_images] == [url]
        assert db.query(PostImage).count() == 1
        assert events == []

    def test_failed_new_image_only_removes_images_of_this_call(self, db, post_service, storage, alice, events, monkeypatch):
        post = make_post(post_service, alice, title="Kept", image_files=[image("a.png")])
        events.clear()
        _fail_on_call(monkeypatch, 2)

        with pytest.raises(FileUploadFailed):
            post_service.update(alice, post.id, PostUpdate(title="Changed", content="c"), [image("b.png"), image("c.png")])

        assert storage.deleted == ["post_images/img-2.png", "post_images/img-3.png"]
        db.expire_all()
        post = db.get(Post, post.id)
        assert post.title == "Kept"
        assert [i.image_url for i in post.post_images] == [f"{URL_BASE}/img-1.png"]
        assert events == []


class TestDeletePost:
    def test_delete_removes_objects_and_rows(self, db, post_service, storage, alice, bob):
        post = make_post(post_service, alice, hobby_tag_names=["running"], image_files=[image("a.png"), image("b.png")])
        db.add(Comment(post_id=post.id, user_id=bob.id, content="nice"))
        db.commit()

        post_service.delete(alice, post.id)

        assert storage.deleted == ["post_images/img-1.png", "post_images/img-2.png"]
        assert db.query(Post).count() == 0
        assert db.query(PostImage).count() == 0
        assert db.query(PostHobbyTag).count() == 0
        assert db.query(Comment).count() == 0

    def test_non_owner_cannot_delete(self, db, post_service, storage, alice, bob):
        post = make_post(post_service, alice, image_files=[image()])

        with pytest.raises(Forbidden):
            post_service.delete(bob, post.id)

        assert db.query(Post).count() == 1
        assert storage.deleted == []

    def test_missing_post(self, post_service, alice):
        with pytest.raises(PostNotFound):
            post_service.delete(alice, 42)


class TestFeed:
    @pytest.fixture
    def tagged_posts(self, post_service, bob):
        # alice follows running and hiking
        tags = [["running"], ["cooking"], ["hiking"], ["running", "hiking"], ["cooking"], ["hiking"]]
        return [make_post(post_service, bob, title=f"p{n}", hobby_tag_names=names).id for n, names in enumerate(tags, 1)]

    def test_tag_filtered_pages(self, post_service, alice, tagged_posts):
        p1, p2, p3, p4, p5, p6 = tagged_posts

        first = post_service.find_posts_infinite_scroll(alice, True, None, 2)
        second = post_service.find_posts_infinite_scroll(alice, True, first[-1].id, 2)
        third = post_service.find_posts_infinite_scroll(alice, True, second[-1].id, 2)

        assert [p.id for p in first] == [p6, p4]
        assert [p.id for p in second] == [p3, p1]
        assert third == []

    def test_post_with_two_matching_tags_appears_once(self, post_service, alice, tagged_posts):
        page = post_service.find_posts_infinite_scroll(alice, True, 0, 10)

        ids = [p.id for p in page]
        assert len(ids) == len(set(ids)) == 4

    def test_unfiltered_pages(self, post_service, alice, tagged_posts):
        first = post_service.find_posts_infinite_scroll(alice, False, 0, 4)
        second = post_service.find_posts_infinite_scroll(alice, False, first[-1].id, 4)

        assert [p.id for p in first] == list(reversed(tagged_posts))[:4]
        assert [p.id for p in second] == list(reversed(tagged_posts))[4:]

    def test_newer_post_does_not_shift_next_page(self, post_service, alice, bob):
        p1, p2, p3, p4 = [make_post(post_service, bob, title=f"p{n}", hobby_tag_names=["running"]).id for n in range(1, 5)]

        first = post_service.find_posts_infinite_scroll(alice, True, None, 2)
        newest = make_post(post_service, bob, title="late", hobby_tag_names=["running"]).id
        second = post_service.find_posts_infinite_scroll(alice, True, first[-1].id, 2)

        assert [p.id for p in first] == [p4, p3]
        assert [p.id for p in second] == [p2, p1]
        assert newest not in [p.id for p in second]

    def test_user_without_tags_gets_empty_filtered_feed(self, db, post_service, tagged_posts):
        carol = create_user(db, "carol@example.com", "carol")

        assert post_service.find_posts_infinite_scroll(carol, True, None, 10) == []

    def test_comment_counts_default_to_zero(self, db, post_service, alice, bob):
        quiet = make_post(post_service, bob, title="quiet")
        busy = make_post(post_service, bob, title="busy")
        db.add_all([Comment(post_id=busy.id, user_id=alice.id, content=str(n)) for n in range(3)])
        db.commit()

        page = post_service.find_posts_infinite_scroll(alice, False, None, 10)

        assert [(p.title, p.comment_count) for p in page] == [("busy", 3), ("quiet", 0)]

    def test_projection_carries_author_tags_and_images(self, post_service, alice, bob):
        make_post(post_service, bob, title="full", hobby_tag_names=["running"], image_files=[image()])

        (post,) = post_service.find_posts_infinite_scroll(alice, False, None, 10)

        assert post.user.nickname == "bob"
        assert post.hobby_tag_names == ["running"]
        assert post.image_urls == [f"{URL_BASE}/img-1.png"]


class TestFindPost:
    def test_find_post_with_comment_count(self, db, post_service, alice, bob):
        post = make_post(post_service, alice)
        db.add(Comment(post_id=post.id, user_id=bob.id, content="hi"))
        db.commit()

        response = post_service.find_post(post.id)

        assert response.comment_count == 1
        assert response.user.id == alice.id

    def test_missing_post(self, post_service):
        with pytest.raises(PostNotFound):
            post_service.find_post(7)
