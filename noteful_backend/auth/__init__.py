from noteful_backend.auth.credentials import CredentialStore, hash_password, verify_password
from noteful_backend.auth.gate import AuthGate
from noteful_backend.auth.tokens import TokenService

__all__ = ["AuthGate", "CredentialStore", "TokenService", "hash_password", "verify_password"]
