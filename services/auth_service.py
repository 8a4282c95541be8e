"""
RecipeShare Authentication Service
Password hashing, JWT issue/verify and credential checks
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import or_
from sqlalchemy.orm import Session
import bcrypt
import structlog

from core.config import get_settings
from models.users import User

settings = get_settings()
logger = structlog.get_logger()


class AuthenticationError(Exception):
    """Raised when a token or credential cannot be accepted"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthService:
    def __init__(self):
        # JWT settings
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expires_in = settings.JWT_EXPIRES_IN
        self.expires_seconds = settings.jwt_expires_seconds
        self.bcrypt_rounds = settings.BCRYPT_ROUNDS

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        try:
            return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            # Stored hash is not a bcrypt hash
            return False

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def create_access_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed token whose subject is the user id"""
        issued_at = datetime.now(timezone.utc)
        expire = issued_at + (expires_delta or timedelta(seconds=self.expires_seconds))

        to_encode = {
            "userId": user_id,
            "exp": expire,
            "iat": issued_at,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify and decode a token, distinguishing expiry from other failures"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except JWTError:
            raise AuthenticationError("Invalid token")

        if not payload.get("userId"):
            raise AuthenticationError("Invalid token")
        return payload

    def get_current_user(self, token: str, db: Session) -> User:
        """Resolve a bearer token to an active user"""
        payload = self.verify_token(token)

        user = db.query(User).filter(User.id == payload["userId"]).first()
        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        return user

    def find_by_email_or_username(self, db: Session, email: str, username: str) -> Optional[User]:
        return db.query(User).filter(
            or_(User.email == email.lower(), User.username == username.lower())
        ).first()

    def authenticate_user(self, db: Session, email_or_username: str, password: str) -> Optional[User]:
        """
        Check credentials for login

        Returns the user, or None for any failure so callers cannot tell
        which check rejected the attempt.
        """
        identifier = email_or_username.strip().lower()
        user = db.query(User).filter(
            or_(User.email == identifier, User.username == identifier),
            User.is_active.is_(True),
        ).first()

        if not user or not self.verify_password(password, user.password_hash):
            logger.info("Login rejected", identifier_type="email" if "@" in identifier else "username")
            return None
        return user


# Global auth service instance
auth_service = AuthService()
