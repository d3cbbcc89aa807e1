from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from hobbi.db.session import get_db
from hobbi.deps import get_current_user
from hobbi.modules.comments.schemas.comment import Comment as CommentSchema, CommentCreate
from hobbi.modules.comments.services.comment import create_comment, delete_comment, get_comments_by_post
from hobbi.modules.users.models.user import User

router = APIRouter()

@router.get("", response_model=List[CommentSchema])
def read_comments(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Comments of a post, oldest first"""
    return get_comments_by_post(db, post_id)

@router.post("", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
def create_new_comment(
    post_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_comment(db, current_user, post_id, comment_in)

@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment_by_id(
    post_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    delete_comment(db, current_user, post_id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
