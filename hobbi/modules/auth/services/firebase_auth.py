"""Firebase authentication service for Google Sign-In"""
import logging
import os
from typing import Any, Dict

import firebase_admin
from firebase_admin import auth, credentials
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hobbi.core.config import settings
from hobbi.core.exceptions import InvalidToken
from hobbi.modules.auth.schemas.auth import Token
from hobbi.modules.auth.services.auth import issue_tokens
from hobbi.modules.users.models.user import User
from hobbi.modules.users.services.user import get_user_by_email

logger = logging.getLogger("app")

_firebase_initialized = False


def initialize_firebase() -> None:
    """Initialize the default Firebase app once"""
    global _firebase_initialized
    if _firebase_initialized:
        return

    service_account_path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
    if os.path.exists(service_account_path):
        firebase_admin.initialize_app(credentials.Certificate(service_account_path))
        logger.info(f"Firebase initialized with service account from {service_account_path}")
    else:
        firebase_admin.initialize_app()
        logger.warning("Firebase initialized without explicit credentials")
    _firebase_initialized = True


def verify_firebase_token(id_token: str) -> Dict[str, Any]:
    """Verify a Firebase ID token and return its claims"""
    try:
        initialize_firebase()
        return auth.verify_id_token(id_token)
    except Exception as e:
        logger.error(f"Firebase token verification failed: {type(e).__name__}: {e}")
        raise InvalidToken()


class GoogleUserInfo:
    def __init__(self, attributes: Dict[str, Any]):
        self.attributes = attributes

    @property
    def email(self) -> str:
        return (self.attributes.get("email") or "").lower()

    @property
    def name(self) -> str:
        return self.attributes.get("name") or self.email.split("@")[0]


def authenticate_with_google(db: Session, id_token: str) -> Token:
    """Sign a Google user in, registering them on first visit"""
    user_info = GoogleUserInfo(verify_firebase_token(id_token))
    if not user_info.email:
        logger.warning("Verified Google token carries no email")
        raise InvalidToken()

    user = get_user_by_email(db, user_info.email)
    if not user:
        user = User(email=user_info.email, nickname=user_info.name, auth_provider="google")
        db.add(user)
        try:
            db.commit()
            logger.info(f"Registered Google user {user.id}")
        except IntegrityError:
            # A concurrent first sign-in registered the same email
            db.rollback()
            user = get_user_by_email(db, user_info.email)
            if not user:
                raise
    return issue_tokens(user.email)
