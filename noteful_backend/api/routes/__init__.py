from noteful_backend.api.routes import auth, folders, notes, tags, users

__all__ = ["auth", "folders", "notes", "tags", "users"]
