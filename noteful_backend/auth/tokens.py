"""
Token service: stateless JWT bearer tokens.

Tokens carry the public user, subject = username, and an expiry. There is no
revocation list; a leaked or logged-out token stays valid until it expires.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError as SchemaError

from noteful_backend.exceptions import Unauthorized
from noteful_backend.schemas import UserOut


# PUBLIC_INTERFACE
class TokenService:
    def __init__(self, secret: str, algorithm: str = "HS256", expires_delta: Optional[timedelta] = None):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_delta = expires_delta or timedelta(days=7)

    @classmethod
    def from_settings(cls, settings):
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(minutes=settings.jwt_expiry_minutes),
        )

    def issue(self, user) -> str:
        """Signs a token embedding the password-free representation of `user`."""
        public_user = UserOut.model_validate(user)
        now = datetime.now(timezone.utc)
        claims = {
            "user": public_user.model_dump(),
            "sub": public_user.username,
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> UserOut:
        """Returns the embedded user; any signature, format or expiry problem is Unauthorized."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise Unauthorized(context={"error": str(exc)}) from exc
        user = payload.get("user")
        if not isinstance(user, dict):
            raise Unauthorized(context={"error": "token has no user claim"})
        try:
            return UserOut.model_validate(user)
        except SchemaError as exc:
            raise Unauthorized(context={"error": "malformed user claim"}) from exc
