from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hobbi.db.session import get_db
from hobbi.modules.hobby_tags.schemas.hobby_tag import HobbyTag as HobbyTagSchema
from hobbi.modules.hobby_tags.services.hobby_tag import list_hobby_tags

router = APIRouter()

@router.get("", response_model=List[HobbyTagSchema])
def read_hobby_tags(db: Session = Depends(get_db)) -> List[HobbyTagSchema]:
    """List every hobby tag users and posts can refer to"""
    return list_hobby_tags(db)
