"""Authentication service for JWT and password handling."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from src.config import get_settings
from src.errors import Conflict, InvalidToken, NotFound, Unauthenticated
from src.models.user import User
from src.schemas.auth import UserSignup
from src.services.validation import validate

logger = logging.getLogger(__name__)
settings = get_settings()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.password_hash_rounds
)


@dataclass(frozen=True)
class TokenClaims:
    """Identity facts carried by an access token."""

    user_id: int
    email: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh salt."""
    return pwd_context.hash(password)


def create_access_token(user_id: int, email: str, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.jwt_expiration_minutes)
    )
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> TokenClaims:
    """Decode and validate a JWT token.

    Raises:
        InvalidToken: if the token is malformed, badly signed, or expired
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    subject = payload.get("sub")
    email = payload.get("email")
    if subject is None or email is None:
        raise InvalidToken("Token is missing identity claims")
    try:
        user_id = int(subject)
    except ValueError as exc:
        raise InvalidToken("Token subject is not a user id") from exc
    return TokenClaims(user_id=user_id, email=email)


def authenticate_header(authorization: str | None) -> TokenClaims:
    """Resolve an ``Authorization: Bearer <token>`` header to token claims.

    Raises:
        Unauthenticated: if the header is missing, not a bearer header, or the
            token does not verify
    """
    if not authorization:
        raise Unauthenticated("Not authenticated.")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Not authenticated.")
    try:
        return decode_access_token(token.strip())
    except InvalidToken as exc:
        logger.info(f"Rejected bearer token: {exc}")
        raise Unauthenticated("Invalid authentication credentials.") from exc


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def create_user(db: Session, email: str | None, password: str | None, name: str | None) -> User:
    """Sign up a new user.

    Raises:
        ValidationFailed: if the email, password or name violate their rules
        Conflict: if the email is already registered
    """
    data = validate(UserSignup, email=email, password=password, name=name)
    if get_user_by_email(db, data.email):
        raise Conflict("User exists already.")

    user = User(email=data.email, password_hash=get_password_hash(data.password), name=data.name)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {user.id}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate a user by email and password.

    Raises:
        NotFound: if no user has this email
        Unauthenticated: if the password is wrong
    """
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("A user with this email could not be found.")
    if not verify_password(password, user.password_hash):
        logger.info(f"Wrong password for user {user.id}")
        raise Unauthenticated("Wrong password.")
    return user


def login(db: Session, email: str, password: str) -> tuple[str, User]:
    """Authenticate and issue an access token."""
    user = authenticate_user(db, email, password)
    return create_access_token(user.id, user.email), user
