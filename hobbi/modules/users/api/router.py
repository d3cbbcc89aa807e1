from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hobbi.db.session import get_db
from hobbi.deps import get_current_user
from hobbi.modules.hobby_tags.services.hobby_tag import replace_user_hobby_tags
from hobbi.modules.users.models.user import User
from hobbi.modules.users.schemas.user import User as UserSchema, UserHobbyTagsUpdate
from hobbi.modules.users.services.user import to_user_schema

router = APIRouter()

@router.get("/me", response_model=UserSchema)
def read_user_me(current_user: User = Depends(get_current_user)) -> UserSchema:
    """Get current user"""
    return to_user_schema(current_user)

@router.put("/me/hobby-tags", response_model=UserSchema)
def update_user_hobby_tags(
    *,
    db: Session = Depends(get_db),
    tags_in: UserHobbyTagsUpdate,
    current_user: User = Depends(get_current_user),
) -> UserSchema:
    """Replace the hobby tags the current user follows"""
    return to_user_schema(replace_user_hobby_tags(db, current_user, tags_in.hobby_tag_names))
