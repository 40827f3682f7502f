from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Token type constants
TOKEN_TYPE_ACCESS = "access"

MIN_PASSWORD_LENGTH = 8


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def password_strength_error(password: str) -> Optional[str]:
    """Return a human-readable reason the password is too weak, or None."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if not any(c.isupper() for c in password):
        return "Password must contain at least one uppercase letter"
    if not any(c.islower() for c in password):
        return "Password must contain at least one lowercase letter"
    if not any(c.isdigit() for c in password):
        return "Password must contain at least one number"
    return None


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> tuple[str, str, datetime]:
    """
    Create a JWT session token.
    Returns (token, jti, expires_at).
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    # Unique token ID so sign-out can revoke this token only
    jti = str(uuid4())
    to_encode.update({
        "exp": expire,
        "type": TOKEN_TYPE_ACCESS,
        "jti": jti,
    })

    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    return encoded_jwt, jti, expire


def verify_token(token: str, expected_type: Optional[str] = TOKEN_TYPE_ACCESS) -> Optional[dict]:
    """
    Verify a JWT token and return the payload if valid.

    Args:
        token: The JWT token to verify
        expected_type: If provided, verify the token type matches
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )

        # Verify token type if specified
        if expected_type and payload.get("type") != expected_type:
            return None

        return payload
    except JWTError:
        return None


def is_token_blacklisted(db: Session, jti: str) -> bool:
    """Check if a token is blacklisted."""
    from app.models.token_blacklist import TokenBlacklist

    return db.query(TokenBlacklist).filter(TokenBlacklist.jti == jti).first() is not None


def blacklist_token(
    db: Session,
    jti: str,
    user_id,
    expires_at: datetime,
    token_type: str = TOKEN_TYPE_ACCESS,
) -> None:
    """Add a token to the blacklist."""
    from app.models.token_blacklist import TokenBlacklist

    if is_token_blacklisted(db, jti):
        return

    blacklisted = TokenBlacklist(
        jti=jti,
        user_id=user_id,
        token_type=token_type,
        expires_at=expires_at,
    )
    db.add(blacklisted)
    db.commit()


def cleanup_expired_tokens(db: Session) -> int:
    """
    Remove expired tokens from blacklist.
    Returns number of tokens removed.
    """
    from app.models.token_blacklist import TokenBlacklist

    deleted = db.query(TokenBlacklist).filter(
        TokenBlacklist.expires_at < datetime.utcnow()
    ).delete()

    db.commit()
    return deleted
