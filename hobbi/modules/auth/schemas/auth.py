from typing import List
from pydantic import BaseModel, EmailStr, Field, field_validator

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class EmailRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower()

class SignupRequest(EmailRequest):
    password: str = Field(..., min_length=8, max_length=64)
    nickname: str = Field(..., min_length=1, max_length=30)
    hobby_tag_names: List[str] = []

class LoginRequest(EmailRequest):
    password: str

class RefreshRequest(BaseModel):
    refresh_token: str

class GoogleSignInRequest(BaseModel):
    id_token: str
