"""
Credential store: password hashing and user registration.
"""
import logging
from typing import Any, Dict, Optional

from passlib.context import CryptContext

from noteful_backend.exceptions import Conflict, ValidationError
from noteful_database import DocumentStore, DuplicateKeyError, User

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10

REQUIRED_FIELDS = ("username", "password")
STRING_FIELDS = ("username", "password", "fullname")
# credentials are rejected rather than trimmed
EXPLICITLY_TRIMMED_FIELDS = ("username", "password")
# bcrypt truncates after 72 bytes, so longer passwords would only look stronger
SIZED_FIELDS = {
    "username": {"min": 1},
    "password": {"min": 8, "max": 72},
}

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    """Returns a salted bcrypt digest; two calls never return the same digest."""
    return pwd_context.hash(password)


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    True iff `plain_password` matches the digest. A mismatch returns False;
    only a malformed digest raises (ValueError from passlib).
    """
    return pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def validate_registration(payload: Dict[str, Any]) -> Dict[str, str]:
    """
    Checks a registration body in a fixed order and returns the cleaned
    {username, password, fullname}. Raises ValidationError on the first failure.
    """
    missing = next((field for field in REQUIRED_FIELDS if field not in payload), None)
    if missing:
        raise ValidationError(f"Missing '{missing}' in request body", location=missing)

    non_string = next(
        (field for field in STRING_FIELDS if field in payload and not isinstance(payload[field], str)),
        None,
    )
    if non_string:
        raise ValidationError("Incorrect field type: expected string", location=non_string)

    non_trimmed = next(
        (field for field in EXPLICITLY_TRIMMED_FIELDS if payload[field].strip() != payload[field]),
        None,
    )
    if non_trimmed:
        raise ValidationError("Cannot start or end with whitespace", location=non_trimmed)

    too_small = next(
        (
            field for field, size in SIZED_FIELDS.items()
            if "min" in size and len(payload[field].strip()) < size["min"]
        ),
        None,
    )
    if too_small:
        raise ValidationError(
            f"Must be at least {SIZED_FIELDS[too_small]['min']} characters long", location=too_small
        )
    too_large = next(
        (
            field for field, size in SIZED_FIELDS.items()
            if "max" in size and len(payload[field].strip()) > size["max"]
        ),
        None,
    )
    if too_large:
        raise ValidationError(
            f"Must be at most {SIZED_FIELDS[too_large]['max']} characters long", location=too_large
        )

    return {
        "username": payload["username"],
        "password": payload["password"],
        "fullname": payload.get("fullname", "").strip(),
    }


# PUBLIC_INTERFACE
class CredentialStore:
    """Owns user records: lookup by username and registration."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def find_by_username(self, username: str) -> Optional[User]:
        return self.store.find_one(User, {"username": username})

    def register(self, payload: Dict[str, Any]) -> User:
        fields = validate_registration(payload)
        fields["password"] = hash_password(fields["password"])
        try:
            user = self.store.create(User, fields)
        except DuplicateKeyError:
            logger.info("Registration rejected, username taken: %s", fields["username"])
            raise Conflict("The username already exists", location="username")
        logger.info("Registered user %s", user.username)
        return user
