from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, Response

from noteful_backend.api.deps import get_store
from noteful_backend.auth import CredentialStore
from noteful_backend.schemas import UserOut
from noteful_database import DocumentStore

router = APIRouter(prefix="/users", tags=["Authentication"])


# PUBLIC_INTERFACE
@router.post("", response_model=UserOut, status_code=201, summary="Register a new user")
def register(
    request: Request,
    response: Response,
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    """
    Register a new user.
    Returns the newly created user record (excluding password).
    """
    user = CredentialStore(store).register(payload)
    response.headers["Location"] = f"{request.url.path}/{user.id}"
    return user
