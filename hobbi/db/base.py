# Import all models here so Base.metadata knows every table
from hobbi.db.session import Base

from hobbi.modules.users.models.user import User
from hobbi.modules.hobby_tags.models.hobby_tag import HobbyTag, UserHobbyTag
from hobbi.modules.posts.models.post import Post, PostHobbyTag
from hobbi.modules.post_images.models.post_image import PostImage
from hobbi.modules.comments.models.comment import Comment
