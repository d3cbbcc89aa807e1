from typing import Iterable, List
import logging
from sqlalchemy.orm import Session

from hobbi.modules.hobby_tags.models.hobby_tag import HobbyTag, UserHobbyTag
from hobbi.modules.users.models.user import User

logger = logging.getLogger(__name__)

def list_hobby_tags(db: Session) -> List[HobbyTag]:
    return db.query(HobbyTag).order_by(HobbyTag.id).all()

def find_all_by_names(db: Session, names: Iterable[str]) -> List[HobbyTag]:
    """Tags whose name is in names; unknown names are ignored"""
    names = list(names)
    if not names:
        return []
    return db.query(HobbyTag).filter(HobbyTag.name.in_(names)).order_by(HobbyTag.id).all()

def find_user_hobby_tag_ids(db: Session, user_id: int) -> List[int]:
    rows = db.query(UserHobbyTag.hobby_tag_id).filter(UserHobbyTag.user_id == user_id).all()
    return [row.hobby_tag_id for row in rows]

def replace_user_hobby_tags(db: Session, user: User, names: List[str]) -> User:
    """Clear the user's interests, then attach the tags matching names"""
    user.user_hobby_tags.clear()
    db.flush()
    for hobby_tag in find_all_by_names(db, names):
        user.user_hobby_tags.append(UserHobbyTag(hobby_tag=hobby_tag))
    db.commit()
    db.refresh(user)
    return user

def seed_hobby_tags(db: Session, names: List[str]) -> None:
    existing = {tag.name for tag in find_all_by_names(db, names)}
    missing = [name for name in dict.fromkeys(names) if name not in existing]
    if not missing:
        return
    db.add_all([HobbyTag(name=name) for name in missing])
    db.commit()
    logger.info(f"Seeded hobby tags: {missing}")
