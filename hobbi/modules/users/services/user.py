from typing import Optional
import logging
from sqlalchemy.orm import Session

from hobbi.core.exceptions import UserNotFound
from hobbi.modules.users.models.user import User
from hobbi.modules.users.schemas.user import User as UserSchema

logger = logging.getLogger("app")

def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(User.email == email).first()

def get_user_by_email_or_raise(db: Session, email: str) -> User:
    user = get_user_by_email(db, email)
    if not user:
        logger.warning(f"No user for token subject {email}")
        raise UserNotFound()
    return user

def to_user_schema(user: User) -> UserSchema:
    schema = UserSchema.model_validate(user)
    schema.hobby_tag_names = [link.hobby_tag.name for link in user.user_hobby_tags]
    return schema
