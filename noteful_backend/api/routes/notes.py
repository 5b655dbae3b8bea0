from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from noteful_backend.api.deps import get_current_user, get_reference_validator, get_store
from noteful_backend.exceptions import InvalidReference, NotFound, ValidationError
from noteful_backend.references import ABSENT, ReferenceValidator, is_valid_id
from noteful_backend.schemas import NoteIn, NoteOut, UserOut
from noteful_database import Contains, DocumentStore, Matches, Note

router = APIRouter(prefix="/notes", tags=["Notes"])


def _check_id(note_id: str) -> None:
    if not is_valid_id(note_id):
        raise InvalidReference("id")


# PUBLIC_INTERFACE
@router.get("", response_model=List[NoteOut], response_model_exclude_none=True, summary="List all user notes")
def list_notes(
    search_term: Optional[str] = Query(None, alias="searchTerm", description="Search term for note title or content"),
    folder_id: Optional[str] = Query(None, alias="folderId"),
    tag_id: Optional[str] = Query(None, alias="tagId"),
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    """
    Get all notes for the authenticated user, most recently updated first.
    """
    filter = {"user_id": current_user.id}
    if search_term:
        filter[("title", "content")] = Matches(search_term)
    if folder_id:
        filter["folder_id"] = folder_id
    if tag_id:
        filter["tags"] = Contains(tag_id)
    return store.find(Note, filter, order_by=Note.updated_at.desc())


# PUBLIC_INTERFACE
@router.get("/{note_id}", response_model=NoteOut, response_model_exclude_none=True, summary="Get a single note")
def get_note(
    note_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    _check_id(note_id)
    note = store.find_one(Note, {"id": note_id, "user_id": current_user.id})
    if note is None:
        raise NotFound("Note not found.")
    return note


# PUBLIC_INTERFACE
@router.post(
    "", response_model=NoteOut, response_model_exclude_none=True, status_code=201, summary="Create a new note"
)
def create_note(
    note: NoteIn,
    request: Request,
    response: Response,
    store: DocumentStore = Depends(get_store),
    validator: ReferenceValidator = Depends(get_reference_validator),
    current_user: UserOut = Depends(get_current_user),
):
    """
    Create a new note for the authenticated user. The folder and tags must
    belong to the caller; nothing is written if either check fails.
    """
    if not note.title:
        raise ValidationError("Missing `title` in request body", location="title")

    sent = note.model_fields_set
    folder_id = note.folder_id if "folder_id" in sent else ABSENT
    # an empty string leaves the tags alone
    tags = note.tags if "tags" in sent and note.tags != "" else ABSENT
    validator.validate(current_user.id, folder_id=folder_id, tags=tags)

    attrs = {"title": note.title, "content": note.content, "user_id": current_user.id}
    if folder_id not in (ABSENT, None, ""):
        attrs["folder_id"] = folder_id
    if tags is not ABSENT:
        attrs["tags"] = tags
    created = store.create(Note, attrs)
    response.headers["Location"] = f"{request.url.path}/{created.id}"
    return created


# PUBLIC_INTERFACE
@router.put("/{note_id}", response_model=NoteOut, response_model_exclude_none=True, summary="Update a note")
def update_note(
    note_id: str,
    note: NoteIn,
    store: DocumentStore = Depends(get_store),
    validator: ReferenceValidator = Depends(get_reference_validator),
    current_user: UserOut = Depends(get_current_user),
):
    """
    Update a note belonging to the authenticated user. Only fields present in
    the body change; `folderId: ""` (or null) removes the folder.
    """
    _check_id(note_id)
    sent = note.model_fields_set
    if "title" in sent and not note.title:
        raise ValidationError("Missing `title` in request body", location="title")

    patch = {field: getattr(note, field) for field in ("title", "content") if field in sent}
    unset = []
    folder_id = ABSENT
    if "folder_id" in sent:
        if note.folder_id is None or note.folder_id == "":
            unset.append("folder_id")
        else:
            folder_id = patch["folder_id"] = note.folder_id
    # an empty string leaves the tags alone
    tags = note.tags if "tags" in sent and note.tags != "" else ABSENT

    validator.validate(current_user.id, folder_id=folder_id, tags=tags)

    if tags is not ABSENT:
        patch["tags"] = tags
    updated = store.update_one(Note, {"id": note_id, "user_id": current_user.id}, patch, unset)
    if updated is None:
        raise NotFound("Note not found.")
    return updated


# PUBLIC_INTERFACE
@router.delete("/{note_id}", status_code=204, summary="Delete a note")
def delete_note(
    note_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    _check_id(note_id)
    if not store.delete_one(Note, {"id": note_id, "user_id": current_user.id}):
        raise NotFound("Note not found.")
    return Response(status_code=204)
