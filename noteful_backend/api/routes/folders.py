from typing import List

from fastapi import APIRouter, Depends, Request, Response

from noteful_backend.api.deps import get_current_user, get_store
from noteful_backend.exceptions import Conflict, InvalidReference, NotFound, ValidationError
from noteful_backend.references import is_valid_id
from noteful_backend.schemas import FolderIn, FolderOut, UserOut
from noteful_database import DocumentStore, DuplicateKeyError, Folder, Note

router = APIRouter(prefix="/folders", tags=["Folders"])


def _check_id(folder_id: str) -> None:
    if not is_valid_id(folder_id):
        raise InvalidReference("id")


def _require_name(folder: FolderIn) -> str:
    if not folder.name:
        raise ValidationError("Missing `name` in request body", location="name")
    return folder.name


# PUBLIC_INTERFACE
@router.get("", response_model=List[FolderOut], summary="List the user's folders by name")
def list_folders(store: DocumentStore = Depends(get_store), current_user: UserOut = Depends(get_current_user)):
    return store.find(Folder, {"user_id": current_user.id}, order_by=Folder.name)


# PUBLIC_INTERFACE
@router.get("/{folder_id}", response_model=FolderOut, summary="Get a single folder")
def get_folder(
    folder_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    _check_id(folder_id)
    folder = store.find_one(Folder, {"id": folder_id, "user_id": current_user.id})
    if folder is None:
        raise NotFound("Folder not found.")
    return folder


# PUBLIC_INTERFACE
@router.post("", response_model=FolderOut, status_code=201, summary="Create a folder")
def create_folder(
    folder: FolderIn,
    request: Request,
    response: Response,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    """
    Folder names are unique per user; another user may hold the same name.
    """
    name = _require_name(folder)
    try:
        created = store.create(Folder, {"name": name, "user_id": current_user.id})
    except DuplicateKeyError:
        raise Conflict("Folder name already exists", location="name")
    response.headers["Location"] = f"{request.url.path}/{created.id}"
    return created


# PUBLIC_INTERFACE
@router.put("/{folder_id}", response_model=FolderOut, summary="Rename a folder")
def update_folder(
    folder_id: str,
    folder: FolderIn,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    _check_id(folder_id)
    name = _require_name(folder)
    try:
        updated = store.update_one(Folder, {"id": folder_id, "user_id": current_user.id}, {"name": name})
    except DuplicateKeyError:
        raise Conflict("Folder name already exists", location="name")
    if updated is None:
        raise NotFound("Folder not found.")
    return updated


# PUBLIC_INTERFACE
@router.delete("/{folder_id}", status_code=204, summary="Delete a folder")
def delete_folder(
    folder_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: UserOut = Depends(get_current_user),
):
    """
    Delete a folder; the user's notes that were in it keep existing without a folder.
    """
    _check_id(folder_id)
    owned = {"id": folder_id, "user_id": current_user.id}
    if store.find_one(Folder, owned) is None:
        raise NotFound("Folder not found.")
    # the notes keep their folder unless the delete goes through
    with store.atomic():
        store.update_many(Note, {"folder_id": folder_id, "user_id": current_user.id}, unset=("folder_id",))
        store.delete_one(Folder, owned)
    return Response(status_code=204)
