from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from hobbi.core.exceptions import PostNotFound
from hobbi.core.permissions import assert_owner
from hobbi.core.storage import ObjectStorage
from hobbi.modules.comments.services.comment import count_by_post_id, counts_by_post_ids
from hobbi.modules.hobby_tags.services.hobby_tag import find_all_by_names, find_user_hobby_tag_ids
from hobbi.modules.post_images.events import EventPublisher, ImageFile, PostImageUploadEvent
from hobbi.modules.post_images.services.post_image import PostImageService
from hobbi.modules.posts.models.post import Post, PostHobbyTag
from hobbi.modules.posts.schemas.post import PostCreate, PostResponse, PostUpdate
from hobbi.modules.posts.services.post_query import (
    find_post_by_id, find_post_ids, find_post_ids_with_tags, find_posts_with_hobby_and_user,
)
from hobbi.modules.users.models.user import User
from hobbi.modules.users.schemas.user import UserSummary

logger = logging.getLogger(__name__)


class PostService:
    """
    Post authoring and feed.

    create/update/delete run in the session's single transaction: the
    session is committed at the end of a successful call and rolled back
    on any error. Image upload events are published only after commit.
    """

    def __init__(self, db: Session, storage: ObjectStorage, publish: EventPublisher):
        self.db = db
        self.post_image_service = PostImageService(db, storage)
        self.publish = publish

    def create(self, user: User, request: PostCreate, image_files: Optional[List[ImageFile]] = None) -> Post:
        post = Post(user_id=user.id, title=request.title, content=request.content)
        self.db.add(post)
        try:
            self.db.flush()
            events = self.post_image_service.upload_images(post, image_files)
            self._attach_hobby_tags(post, request.hobby_tag_names)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self._publish(events)
        logger.info(f"User {user.id} created post {post.id}")
        return post

    def find_post(self, post_id: int) -> PostResponse:
        post = find_post_by_id(self.db, post_id)
        if not post:
            raise PostNotFound()
        return _to_post_response(post, count_by_post_id(self.db, post_id))

    def update(
        self, user: User, post_id: int, request: PostUpdate, new_image_files: Optional[List[ImageFile]] = None
    ) -> Post:
        post = self._get_post(post_id)
        assert_owner(post, user)

        try:
            post.update(request.title, request.content)
            self._delete_images(post, request.deleted_image_urls)
            events = self.post_image_service.upload_images(post, new_image_files)

            # Replace-all: an empty name list leaves the post without tags
            post.post_hobby_tags.clear()
            self.db.flush()
            self._attach_hobby_tags(post, request.hobby_tag_names)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self._publish(events)
        logger.info(f"User {user.id} updated post {post.id}")
        return post

    def delete(self, user: User, post_id: int) -> None:
        post = self._get_post(post_id)
        assert_owner(post, user)

        # Storage goes first; a crash before commit leaves rows pointing at deleted objects
        for image in post.post_images:
            self.post_image_service.delete_post_image(
                self.post_image_service.get_suffix_image_url(image.image_url)
            )

        post.post_images.clear()
        post.post_hobby_tags.clear()
        self.db.delete(post)
        self.db.commit()
        logger.info(f"User {user.id} deleted post {post_id}")

    def find_posts_infinite_scroll(
        self, user: User, tag_exist: bool, last_post_id: Optional[int], page_size: int
    ) -> List[PostResponse]:
        post_ids = self._fetch_post_ids(tag_exist, last_post_id, page_size, user.id)
        logger.debug(f"Feed page for user {user.id}: {post_ids}")
        posts = find_posts_with_hobby_and_user(self.db, post_ids)
        comment_counts = counts_by_post_ids(self.db, post_ids)

        return [_to_post_response(post, comment_counts.get(post.id, 0)) for post in posts]

    def _fetch_post_ids(self, tag_exist: bool, last_post_id: Optional[int], page_size: int, user_id: int) -> List[int]:
        is_first_page = not last_post_id
        if not tag_exist:
            if is_first_page:
                return find_post_ids(self.db, page_size)
            return find_post_ids(self.db, page_size, last_post_id)

        hobby_tag_ids = find_user_hobby_tag_ids(self.db, user_id)
        if is_first_page:
            return find_post_ids_with_tags(self.db, hobby_tag_ids, page_size)
        return find_post_ids_with_tags(self.db, hobby_tag_ids, page_size, last_post_id)

    def _get_post(self, post_id: int) -> Post:
        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise PostNotFound()
        return post

    def _attach_hobby_tags(self, post: Post, hobby_tag_names: List[str]) -> None:
        if not hobby_tag_names:
            return
        for hobby_tag in find_all_by_names(self.db, hobby_tag_names):
            post.post_hobby_tags.append(PostHobbyTag(hobby_tag=hobby_tag))

    def _delete_images(self, post: Post, deleted_image_urls: List[str]) -> None:
        if not deleted_image_urls:
            return
        to_delete = [image for image in post.post_images if image.image_url in deleted_image_urls]
        for image in to_delete:
            self.post_image_service.delete_post_image(
                self.post_image_service.get_suffix_image_url(image.image_url)
            )
            post.post_images.remove(image)

    def _publish(self, events: List[PostImageUploadEvent]) -> None:
        for event in events:
            self.publish(event)


def _to_post_response(post: Post, comment_count: int) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        user=UserSummary.model_validate(post.user),
        image_urls=[image.image_url for image in post.post_images],
        hobby_tag_names=[link.hobby_tag.name for link in post.post_hobby_tags],
        comment_count=comment_count,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )
