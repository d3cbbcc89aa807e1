from typing import List
from datetime import datetime
from pydantic import BaseModel, Field

from hobbi.modules.users.schemas.user import UserSummary

class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1)
    hobby_tag_names: List[str] = []

class PostUpdate(PostCreate):
    deleted_image_urls: List[str] = []

class PostResponse(BaseModel):
    """Post model returned to client"""
    id: int
    title: str
    content: str
    user: UserSummary
    image_urls: List[str] = []
    hobby_tag_names: List[str] = []
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime
