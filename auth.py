import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings
from errors import AuthError
from models import TokenData

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


class PasswordHasher:
    """Salted bcrypt hashing of user passwords."""

    def __init__(self, rounds: int = 10):
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self.pwd_context.verify(password, password_hash)
        except (ValueError, TypeError):
            # malformed or unknown hash format
            return False


class TokenService:
    """Signs and verifies the bearer tokens handed out at login.

    Tokens carry ``id`` and ``email`` claims plus an ``exp`` timestamp.
    ``decode`` raises ``AuthError`` for any token that is malformed, signed
    with another key or past its expiry.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_hours: int = 24):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_delta = timedelta(hours=expire_hours)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(settings.jwt_secret, settings.jwt_algorithm, settings.token_expire_hours)

    def create_access_token(self, user_id: int, email: str, now: Optional[datetime] = None) -> str:
        issued = now or datetime.now(timezone.utc)
        to_encode = {"id": user_id, "email": email, "iat": issued, "exp": issued + self.expire_delta}
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenData:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise AuthError("Invalid or expired token")

        user_id = payload.get("id")
        email = payload.get("email")
        if user_id is None or not email:
            raise AuthError("Invalid or expired token")
        return TokenData(id=user_id, email=email)


# Verify token & return the caller's identity
async def get_current_user(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> TokenData:
    if not token:
        raise AuthError("Access denied. No token provided")

    identity = request.app.state.tokens.decode(token)
    user = await request.app.state.store.get_user(identity.id)
    if user is None:
        raise AuthError("User no longer exists")
    return identity
