from typing import List, Optional
import os
import logging

from fastapi import (
    APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, Response, UploadFile, status,
)
from sqlalchemy.orm import Session

from hobbi.core.config import settings
from hobbi.core.storage import ObjectStorage, get_storage
from hobbi.db.session import get_db
from hobbi.deps import get_current_user
from hobbi.modules.post_images.events import ImageFile, background_publisher
from hobbi.modules.posts.schemas.post import PostCreate, PostResponse, PostUpdate
from hobbi.modules.posts.services.post import PostService
from hobbi.modules.users.models.user import User

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp"]

router = APIRouter()


def get_post_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> PostService:
    return PostService(db, storage, background_publisher(background_tasks, storage))


async def _read_image_files(images: Optional[List[UploadFile]]) -> List[ImageFile]:
    """Validate uploaded images and read them into memory"""
    image_files = []
    for image in images or []:
        file_extension = os.path.splitext(image.filename or "")[1].lower()
        if file_extension not in ALLOWED_EXTENSIONS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported file format. Please use one of: {', '.join(ALLOWED_EXTENSIONS)}",
            )
        content = await image.read()
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"{image.filename} exceeds {settings.MAX_UPLOAD_SIZE} bytes",
            )
        image_files.append(ImageFile(filename=image.filename, content_type=image.content_type, content=content))
    return image_files


@router.get("", response_model=List[PostResponse])
def read_posts(
    tag_exist: bool = Query(False, description="Only posts tagged with the user's hobby tags"),
    last_post_id: Optional[int] = Query(None, ge=0, description="Last post id of the previous page"),
    page_size: int = Query(10, ge=1, le=50),
    post_service: PostService = Depends(get_post_service),
    current_user: User = Depends(get_current_user),
) -> List[PostResponse]:
    """
    Infinite-scroll feed, newest first. Pass the id of the last post
    received as last_post_id to fetch the next page.
    """
    return post_service.find_posts_infinite_scroll(current_user, tag_exist, last_post_id, page_size)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_new_post(
    *,
    title: str = Form(..., min_length=1, max_length=100),
    content: str = Form(..., min_length=1),
    hobby_tag_names: List[str] = Form([]),
    images: Optional[List[UploadFile]] = File(None),
    post_service: PostService = Depends(get_post_service),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    """
    Create new post with optional images and hobby tags.
    """
    request = PostCreate(title=title, content=content, hobby_tag_names=hobby_tag_names)
    image_files = await _read_image_files(images)
    post = post_service.create(current_user, request, image_files)
    return post_service.find_post(post.id)


@router.get("/{post_id}", response_model=PostResponse)
def read_post_by_id(
    post_id: int,
    post_service: PostService = Depends(get_post_service),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    return post_service.find_post(post_id)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post_by_id(
    post_id: int,
    *,
    title: str = Form(..., min_length=1, max_length=100),
    content: str = Form(..., min_length=1),
    hobby_tag_names: List[str] = Form([]),
    deleted_image_urls: List[str] = Form([]),
    images: Optional[List[UploadFile]] = File(None),
    post_service: PostService = Depends(get_post_service),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    """
    Update a post. Hobby tags are replaced by hobby_tag_names; images
    listed in deleted_image_urls are removed and images are appended.
    """
    request = PostUpdate(
        title=title, content=content, hobby_tag_names=hobby_tag_names, deleted_image_urls=deleted_image_urls,
    )
    image_files = await _read_image_files(images)
    post_service.update(current_user, post_id, request, image_files)
    return post_service.find_post(post_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post_by_id(
    post_id: int,
    post_service: PostService = Depends(get_post_service),
    current_user: User = Depends(get_current_user),
) -> Response:
    """
    Delete a post with its images, tag links and comments.
    """
    post_service.delete(current_user, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
