"""
Auth gate: resolves the caller of a request.

Local protocol: username + password against the credential store (login only).
Bearer protocol: `Authorization: Bearer <token>` against the token service.
Nothing is carried between requests.
"""
import logging
from typing import Optional

from noteful_backend.auth.credentials import CredentialStore, verify_password
from noteful_backend.auth.tokens import TokenService
from noteful_backend.exceptions import LoginError, Unauthorized
from noteful_backend.schemas import UserOut
from noteful_database import User

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class AuthGate:
    def __init__(self, credentials: Optional[CredentialStore], tokens: TokenService):
        self.credentials = credentials
        self.tokens = tokens

    def authenticate_local(self, username: str, password: str) -> User:
        """
        Returns the full user. Unknown username and wrong password raise
        LoginError with different locations; store failures propagate as-is.
        """
        user = self.credentials.find_by_username(username)
        if user is None:
            logger.info("Login failed for %r: unknown username", username)
            raise LoginError("Incorrect username", location="username")
        if not verify_password(password, user.password):
            logger.info("Login failed for %r: wrong password", username)
            raise LoginError("Incorrect password", location="password")
        return user

    def login(self, username: str, password: str) -> str:
        """Local authentication followed by a freshly minted token."""
        return self.tokens.issue(self.authenticate_local(username, password))

    def authenticate_bearer(self, authorization: Optional[str]) -> UserOut:
        """Takes the raw Authorization header value."""
        if not authorization:
            raise Unauthorized("Missing authorization header")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthorized("Authorization header must use the Bearer scheme")
        return self.tokens.verify(token.strip())
