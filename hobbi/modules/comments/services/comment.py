from typing import Dict, List
import logging
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from hobbi.core.exceptions import CommentNotFound, PostNotFound
from hobbi.core.permissions import assert_owner
from hobbi.modules.comments.models.comment import Comment
from hobbi.modules.comments.schemas.comment import CommentCreate
from hobbi.modules.posts.models.post import Post
from hobbi.modules.users.models.user import User

logger = logging.getLogger(__name__)

def count_by_post_id(db: Session, post_id: int) -> int:
    return db.query(func.count(Comment.id)).filter(Comment.post_id == post_id).scalar() or 0

def counts_by_post_ids(db: Session, post_ids: List[int]) -> Dict[int, int]:
    """Comment counts keyed by post id; posts without comments are absent"""
    if not post_ids:
        return {}
    rows = (
        db.query(Comment.post_id, func.count(Comment.id).label("comment_count"))
        .filter(Comment.post_id.in_(post_ids))
        .group_by(Comment.post_id)
        .all()
    )
    return {row.post_id: row.comment_count for row in rows}

def get_comments_by_post(db: Session, post_id: int) -> List[Comment]:
    if not db.query(Post.id).filter(Post.id == post_id).first():
        raise PostNotFound()
    return (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.post_id == post_id)
        .order_by(Comment.id.asc())
        .all()
    )

def create_comment(db: Session, user: User, post_id: int, comment_in: CommentCreate) -> Comment:
    if not db.query(Post.id).filter(Post.id == post_id).first():
        raise PostNotFound()
    comment = Comment(post_id=post_id, user_id=user.id, content=comment_in.content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info(f"User {user.id} commented on post {post_id}")
    return comment

def delete_comment(db: Session, user: User, post_id: int, comment_id: int) -> None:
    comment = (
        db.query(Comment)
        .filter(Comment.id == comment_id, Comment.post_id == post_id)
        .first()
    )
    if not comment:
        raise CommentNotFound()
    assert_owner(comment, user)
    db.delete(comment)
    db.commit()
