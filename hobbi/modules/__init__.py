"""
Modules package initialization.
This package contains all the functional modules of the application.
"""

from hobbi.modules import auth
from hobbi.modules import users
from hobbi.modules import hobby_tags
from hobbi.modules import posts
from hobbi.modules import post_images
from hobbi.modules import comments
