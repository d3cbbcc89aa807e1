"""Authentication router: password login, Google sign-in and token refresh"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hobbi.db.session import get_db
from hobbi.modules.auth.schemas.auth import GoogleSignInRequest, LoginRequest, RefreshRequest, SignupRequest, Token
from hobbi.modules.auth.services.auth import authenticate, refresh_tokens, signup
from hobbi.modules.auth.services.firebase_auth import authenticate_with_google
from hobbi.modules.users.schemas.user import User as UserSchema
from hobbi.modules.users.services.user import to_user_schema

router = APIRouter()

@router.post("/signup", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def register(*, db: Session = Depends(get_db), signup_in: SignupRequest) -> UserSchema:
    return to_user_schema(signup(db, signup_in))

@router.post("/login", response_model=Token)
def login(*, db: Session = Depends(get_db), login_in: LoginRequest) -> Token:
    return authenticate(db, login_in)

@router.post("/refresh", response_model=Token)
def refresh(*, db: Session = Depends(get_db), refresh_in: RefreshRequest) -> Token:
    return refresh_tokens(db, refresh_in.refresh_token)

@router.post("/google-signin", response_model=Token)
def google_signin(*, db: Session = Depends(get_db), google_signin_in: GoogleSignInRequest) -> Token:
    """Authenticate user with a Firebase-issued Google ID token"""
    return authenticate_with_google(db, google_signin_in.id_token)
