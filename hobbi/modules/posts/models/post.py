from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hobbi.db.session import Base

class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Images and tag links belong to exactly one post and go away with it
    user = relationship("User")
    post_images = relationship(
        "PostImage", back_populates="post", cascade="all, delete-orphan", order_by="PostImage.id"
    )
    post_hobby_tags = relationship("PostHobbyTag", back_populates="post", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")

    def update(self, title: str, content: str) -> None:
        self.title = title
        self.content = content


class PostHobbyTag(Base):
    __tablename__ = "post_hobby_tags"
    __table_args__ = (UniqueConstraint("post_id", "hobby_tag_id"),)

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    hobby_tag_id = Column(Integer, ForeignKey("hobby_tags.id"), nullable=False, index=True)

    post = relationship("Post", back_populates="post_hobby_tags")
    hobby_tag = relationship("HobbyTag")
