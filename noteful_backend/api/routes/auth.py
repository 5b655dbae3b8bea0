from fastapi import APIRouter, Depends

from noteful_backend.api.deps import get_auth_gate, get_current_user, get_token_service
from noteful_backend.auth import AuthGate, TokenService
from noteful_backend.schemas import LoginRequest, TokenOut, UserOut

router = APIRouter(tags=["Authentication"])


# PUBLIC_INTERFACE
@router.post("/login", response_model=TokenOut, summary="Login and get JWT token")
def login(credentials: LoginRequest, gate: AuthGate = Depends(get_auth_gate)):
    """
    User login. Always answers a fresh token, never the user record.
    """
    return {"authToken": gate.login(credentials.username, credentials.password)}


# PUBLIC_INTERFACE
@router.post("/refresh", response_model=TokenOut, summary="Exchange a valid token for a new one")
def refresh(
    current_user: UserOut = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
):
    return {"authToken": tokens.issue(current_user)}
