import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hobbi.core.exceptions import DuplicateEmail, InvalidCredentials
from hobbi.core.security import (
    create_access_token, create_refresh_token, get_email_from_token, get_password_hash, verify_password,
)
from hobbi.modules.auth.schemas.auth import LoginRequest, SignupRequest, Token
from hobbi.modules.hobby_tags.services.hobby_tag import replace_user_hobby_tags
from hobbi.modules.users.models.user import User
from hobbi.modules.users.services.user import get_user_by_email, get_user_by_email_or_raise

logger = logging.getLogger("app")

def issue_tokens(email: str) -> Token:
    return Token(access_token=create_access_token(email), refresh_token=create_refresh_token(email))

def signup(db: Session, signup_in: SignupRequest) -> User:
    if get_user_by_email(db, signup_in.email):
        raise DuplicateEmail()

    user = User(
        email=signup_in.email,
        nickname=signup_in.nickname,
        hashed_password=get_password_hash(signup_in.password),
        auth_provider="local",
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Registered concurrently since the lookup above
        db.rollback()
        raise DuplicateEmail()
    user = replace_user_hobby_tags(db, user, signup_in.hobby_tag_names)
    logger.info(f"Registered user {user.id}")
    return user

def authenticate(db: Session, login_in: LoginRequest) -> Token:
    user = get_user_by_email(db, login_in.email)
    if not user or not user.hashed_password or not verify_password(login_in.password, user.hashed_password):
        logger.warning(f"Failed login attempt for {login_in.email}")
        raise InvalidCredentials()
    if not user.is_active:
        raise InvalidCredentials("Inactive user")
    return issue_tokens(user.email)

def refresh_tokens(db: Session, refresh_token: str) -> Token:
    """Exchange a valid refresh token for a fresh token pair"""
    email = get_email_from_token(refresh_token)
    user = get_user_by_email_or_raise(db, email)
    return issue_tokens(user.email)
