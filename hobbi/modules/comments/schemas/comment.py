from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from hobbi.modules.users.schemas.user import UserSummary

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)

class Comment(BaseModel):
    """Comment model returned to client"""
    id: int
    post_id: int
    content: str
    user: UserSummary
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
