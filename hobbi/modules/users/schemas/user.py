from typing import List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr

class UserBase(BaseModel):
    email: EmailStr
    nickname: str

class UserSummary(BaseModel):
    """Author information embedded in posts and comments"""
    id: int
    nickname: str

    model_config = ConfigDict(from_attributes=True)

class User(UserBase):
    """User model returned to client"""
    id: int
    auth_provider: str
    is_active: bool
    created_at: datetime
    hobby_tag_names: List[str] = []

    model_config = ConfigDict(from_attributes=True)

class UserHobbyTagsUpdate(BaseModel):
    hobby_tag_names: List[str] = []
