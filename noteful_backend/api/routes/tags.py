from typing import List

from fastapi import APIRouter, Depends, Request, Response

from noteful_backend.api.deps import get_current_user, get_store
from noteful_backend.exceptions import Conflict, InvalidReference, NotFound, ValidationError
from noteful_backend.references import is_valid_id
from noteful_backend.schemas import TagIn, TagOut, UserOut
from noteful_database import DocumentStore, DuplicateKeyError, Tag

router = APIRouter(prefix="/tags", tags=["Tags"])


def _check_id(tag_id: str) -> None:
    if not is_valid_id(tag_id):
        raise InvalidReference("id")


# PUBLIC_INTERFACE
@router.get("", response_model=List[TagOut], summary="List the user's tags by name")
def list_tags(store: DocumentStore = Depends(get_store), current_user: UserOut = Depends(get_current_user)):
    return store.find(Tag, {"user_id": current_user.id}, order_by=Tag.name)


# PUBLIC_INTERFACE
@router.get("/{tag_id}", response_model=TagOut, summary="Get a single tag")
def get_tag(
    tag_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    _check_id(tag_id)
    tag = store.find_one(Tag, {"id": tag_id, "user_id": current_user.id})
    if tag is None:
        raise NotFound("Tag not found.")
    return tag


# PUBLIC_INTERFACE
@router.post("", response_model=TagOut, status_code=201, summary="Create a tag")
def create_tag(
    tag: TagIn,
    request: Request,
    response: Response,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    if not tag.name:
        raise ValidationError("Missing `name` in request body", location="name")
    try:
        created = store.create(Tag, {"name": tag.name, "user_id": current_user.id})
    except DuplicateKeyError:
        raise Conflict("Tag name already exists", location="name")
    response.headers["Location"] = f"{request.url.path}/{created.id}"
    return created


# PUBLIC_INTERFACE
@router.put("/{tag_id}", response_model=TagOut, summary="Rename a tag")
def update_tag(
    tag_id: str,
    tag: TagIn,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    _check_id(tag_id)
    if not tag.name:
        raise ValidationError("Missing `name` in request body", location="name")
    try:
        updated = store.update_one(Tag, {"id": tag_id, "user_id": current_user.id}, {"name": tag.name})
    except DuplicateKeyError:
        raise Conflict("Tag name already exists", location="name")
    if updated is None:
        raise NotFound("Tag not found.")
    return updated


# PUBLIC_INTERFACE
@router.delete("/{tag_id}", status_code=204, summary="Delete a tag")
def delete_tag(
    tag_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    """
    Delete a tag; it is removed from every note that carried it.
    """
    _check_id(tag_id)
    if not store.delete_one(Tag, {"id": tag_id, "user_id": current_user.id}):
        raise NotFound("Tag not found.")
    return Response(status_code=204)
