"""
FastAPI dependencies. Everything is built per request from app.state, which
create_app() fills from Settings.
"""
from typing import Optional

from fastapi import Depends, Header, Request

from noteful_backend.auth import AuthGate, CredentialStore, TokenService
from noteful_backend.references import ReferenceValidator
from noteful_backend.schemas import UserOut
from noteful_database import DocumentStore


# DATABASE Dependency
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_store(db=Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_gate(
    store: DocumentStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
) -> AuthGate:
    return AuthGate(CredentialStore(store), tokens)


def get_reference_validator(request: Request) -> ReferenceValidator:
    # checks run on the app-wide pool, each with its own session
    state = request.app.state
    return ReferenceValidator(state.session_factory, getattr(state, "reference_executor", None))


# PUBLIC_INTERFACE
def get_current_user(
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> UserOut:
    """Bearer protocol: the token's embedded user becomes the caller identity."""
    return AuthGate(credentials=None, tokens=tokens).authenticate_bearer(authorization)
