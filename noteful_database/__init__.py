from noteful_database.models import Base, Folder, Note, Tag, User
from noteful_database.store import Contains, DocumentStore, DuplicateKeyError, Matches, OneOf, StoreError

__all__ = [
    "Base",
    "Contains",
    "DocumentStore",
    "DuplicateKeyError",
    "Folder",
    "Matches",
    "Note",
    "OneOf",
    "StoreError",
    "Tag",
    "User",
]
