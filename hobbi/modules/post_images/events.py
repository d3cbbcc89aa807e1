"""
Image upload events.

The write path queues one PostImageUploadEvent per saved PostImage and
publishes them once its transaction has committed. The consumer pushes the
bytes to object storage outside the request; its failures are logged and
never reach the write path.
"""
from dataclasses import dataclass
from typing import Callable, Optional
import logging

from fastapi import BackgroundTasks

from hobbi.core.storage import ObjectStorage

logger = logging.getLogger(__name__)


@dataclass
class ImageFile:
    filename: Optional[str]
    content_type: Optional[str]
    content: bytes


@dataclass
class PostImageUploadEvent:
    post_image_id: int
    file: ImageFile
    file_name: str


EventPublisher = Callable[[PostImageUploadEvent], None]


def handle_post_image_upload(event: PostImageUploadEvent, storage: ObjectStorage) -> None:
    try:
        storage.put_object(event.file_name, event.file.content, event.file.content_type)
        logger.info(f"Uploaded image {event.post_image_id} as {event.file_name}")
    except Exception as e:
        logger.error(f"Failed to upload image {event.post_image_id} ({event.file_name}): {e}")


def background_publisher(background_tasks: BackgroundTasks, storage: ObjectStorage) -> EventPublisher:
    """Publisher running the upload consumer after the response is sent"""
    def publish(event: PostImageUploadEvent) -> None:
        background_tasks.add_task(handle_post_image_upload, event, storage)
    return publish
