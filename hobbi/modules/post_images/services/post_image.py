from contextlib import contextmanager
from typing import Iterator, List
import logging

from sqlalchemy.orm import Session

from hobbi.core.exceptions import FileUploadFailed
from hobbi.core.storage import ObjectStorage
from hobbi.modules.post_images.events import ImageFile, PostImageUploadEvent
from hobbi.modules.post_images.models.post_image import PostImage
from hobbi.modules.posts.models.post import Post

logger = logging.getLogger(__name__)


class PostImageService:
    def __init__(self, db: Session, storage: ObjectStorage):
        self.db = db
        self.storage = storage

    def file_name_formatter(self, image_file: ImageFile) -> str:
        return self.storage.generate_unique_name(image_file.filename)

    def generate_object_storage_url(self, file_name: str) -> str:
        return self.storage.url_for(file_name)

    def get_suffix_image_url(self, image_url: str) -> str:
        return self.storage.suffix_of(image_url)

    def save_post_image(self, post: Post, image_url: str) -> PostImage:
        post_image = PostImage(image_url=image_url)
        post.post_images.append(post_image)
        self.db.flush()
        return post_image

    def delete_post_image(self, image_url: str) -> None:
        self.storage.delete(image_url)

    @contextmanager
    def compensating_uploads(self) -> Iterator[List[str]]:
        """
        Collect URLs of images uploaded inside the block.

        If the block raises, every collected URL is deleted from storage
        before a single FileUploadFailed is raised. Deletions are best
        effort: a failing one is logged and the rest still run.
        """
        uploaded_urls: List[str] = []
        try:
            yield uploaded_urls
        except Exception as e:
            logger.error(f"Image upload failed, removing {len(uploaded_urls)} uploaded object(s): {e}")
            for uploaded_url in uploaded_urls:
                try:
                    self.delete_post_image(uploaded_url)
                except Exception as delete_error:
                    logger.error(f"Failed to remove {uploaded_url}: {delete_error}")
            raise FileUploadFailed() from e

    def upload_images(self, post: Post, image_files: List[ImageFile]) -> List[PostImageUploadEvent]:
        """Attach image_files to post in order and return their upload events"""
        events: List[PostImageUploadEvent] = []
        if not image_files:
            return events

        with self.compensating_uploads() as uploaded_urls:
            for image_file in image_files:
                file_name = self.file_name_formatter(image_file)
                image_url = self.generate_object_storage_url(file_name)
                uploaded_urls.append(image_url)
                saved_post_image = self.save_post_image(post, image_url)
                events.append(PostImageUploadEvent(
                    post_image_id=saved_post_image.id,
                    file=image_file,
                    file_name=file_name,
                ))
        return events
