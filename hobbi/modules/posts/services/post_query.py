"""Read queries behind the post feed and post detail"""
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload, selectinload

from hobbi.modules.posts.models.post import Post, PostHobbyTag

def _hydrated(db: Session):
    return db.query(Post).options(
        joinedload(Post.user),
        selectinload(Post.post_hobby_tags).joinedload(PostHobbyTag.hobby_tag),
        selectinload(Post.post_images),
    )

def find_post_ids(db: Session, page_size: int, last_post_id: Optional[int] = None) -> List[int]:
    """Newest post ids, strictly below last_post_id when given"""
    query = db.query(Post.id)
    if last_post_id:
        query = query.filter(Post.id < last_post_id)
    rows = query.order_by(Post.id.desc()).limit(page_size).all()
    return [row.id for row in rows]

def find_post_ids_with_tags(
    db: Session, hobby_tag_ids: List[int], page_size: int, last_post_id: Optional[int] = None
) -> List[int]:
    """Newest ids of posts carrying at least one of hobby_tag_ids"""
    if not hobby_tag_ids:
        return []
    query = (
        db.query(Post.id)
        .join(PostHobbyTag, PostHobbyTag.post_id == Post.id)
        .filter(PostHobbyTag.hobby_tag_id.in_(hobby_tag_ids))
    )
    if last_post_id:
        query = query.filter(Post.id < last_post_id)
    rows = query.distinct().order_by(Post.id.desc()).limit(page_size).all()
    return [row.id for row in rows]

def find_posts_with_hobby_and_user(db: Session, post_ids: List[int]) -> List[Post]:
    """Posts for post_ids with author, tags and images loaded in batch, newest first"""
    if not post_ids:
        return []
    return _hydrated(db).filter(Post.id.in_(post_ids)).order_by(Post.id.desc()).all()

def find_post_by_id(db: Session, post_id: int) -> Optional[Post]:
    return _hydrated(db).filter(Post.id == post_id).first()
