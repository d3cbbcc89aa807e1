from fastapi import Depends, Request
from sqlalchemy.orm import Session

import hobbi.db.base  # noqa: F401  registers every mapped model
from hobbi.core import security
from hobbi.core.exceptions import Unauthorized
from hobbi.db.session import get_db
from hobbi.modules.users.models.user import User
from hobbi.modules.users.services.user import get_user_by_email_or_raise


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Dependency for getting the current authenticated user from the
    Authorization: Bearer <token> header
    """
    token = security.resolve_access_token(request)
    if token is None:
        raise Unauthorized()

    email = security.get_email_from_token(token)
    user = get_user_by_email_or_raise(db, email)
    if not user.is_active:
        raise Unauthorized("Inactive user")
    return user
