"""
Pydantic request and response models.

Response models are the single serialization boundary: they emit camelCase
keys and expose nothing beyond the public fields listed here (no password
digest, no storage internals).
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _OutModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class UserOut(_OutModel):
    """Public user representation; also the identity embedded in tokens."""
    id: str
    username: str
    fullname: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    authToken: str


class FolderIn(BaseModel):
    name: Optional[str] = None


class FolderOut(_OutModel):
    id: str
    name: str
    user_id: str
    created_at: datetime
    updated_at: datetime


class TagIn(BaseModel):
    name: Optional[str] = None


class TagOut(_OutModel):
    id: str
    name: str
    user_id: str
    created_at: datetime
    updated_at: datetime


class NoteIn(BaseModel):
    """
    Body for note create/update. `folderId` and `tags` are left untyped so the
    reference validator can report malformed values with its own errors.
    Presence of a field is read from `model_fields_set`.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content: Optional[str] = None
    folder_id: Any = Field(default=None, alias="folderId")
    tags: Any = None


class NoteOut(_OutModel):
    id: str
    title: str
    content: Optional[str] = None
    folder_id: Optional[str] = None
    tags: List[TagOut] = []
    user_id: str
    created_at: datetime
    updated_at: datetime
