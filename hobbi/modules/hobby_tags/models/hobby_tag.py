from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from hobbi.db.session import Base

class HobbyTag(Base):
    __tablename__ = "hobby_tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)


class UserHobbyTag(Base):
    """A hobby tag the user declared interest in"""
    __tablename__ = "user_hobby_tags"
    __table_args__ = (UniqueConstraint("user_id", "hobby_tag_id"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    hobby_tag_id = Column(Integer, ForeignKey("hobby_tags.id"), nullable=False)

    user = relationship("User", back_populates="user_hobby_tags")
    hobby_tag = relationship("HobbyTag", lazy="joined")
