"""
Reference validation for note writes.

A note may only point at a folder and tags owned by the note's owner. A
foreign folder or tag is reported exactly like a missing one.
"""
import logging
import uuid
from concurrent.futures import Executor, ThreadPoolExecutor, wait
from typing import Optional

from noteful_backend.exceptions import InvalidReference, ValidationError
from noteful_database import DocumentStore, Folder, OneOf, Tag

logger = logging.getLogger(__name__)

# marks a field that was not sent at all
ABSENT = object()


# PUBLIC_INTERFACE
def is_valid_id(value) -> bool:
    """True for strings that parse as a UUID."""
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


# PUBLIC_INTERFACE
class ReferenceValidator:
    """
    Each check opens its own session from `session_factory`, so the two
    lookups can run on separate worker threads at the same time.
    """

    def __init__(self, session_factory, executor: Optional[Executor] = None):
        self.session_factory = session_factory
        self.executor = executor

    def _count(self, model, filter) -> int:
        session = self.session_factory()
        try:
            return DocumentStore(session).count(model, filter)
        finally:
            session.close()

    def check_folder(self, folder_id, user_id: str) -> None:
        if folder_id is ABSENT or folder_id is None or folder_id == "":
            return
        if not is_valid_id(folder_id):
            raise InvalidReference("folderId")
        if self._count(Folder, {"id": folder_id, "user_id": user_id}) == 0:
            logger.info("Rejected folderId %s for user %s", folder_id, user_id)
            raise InvalidReference("folderId")

    def check_tags(self, tags, user_id: str) -> None:
        if tags is ABSENT or tags == "":
            return
        if not isinstance(tags, list):
            raise ValidationError("The `tags` property must be an array", location="tags")
        if any(not is_valid_id(tag) for tag in tags):
            raise InvalidReference("tags", "The `tags` array contains an invalid `id`")
        requested = set(tags)
        if not requested:
            return
        if self._count(Tag, {"id": OneOf(requested), "user_id": user_id}) < len(requested):
            logger.info("Rejected tags %s for user %s", sorted(requested), user_id)
            raise InvalidReference("tags", "The `tags` array contains an invalid `id`")

    def _join(self, executor: Executor, user_id, folder_id, tags) -> None:
        futures = [
            executor.submit(self.check_folder, folder_id, user_id),
            executor.submit(self.check_tags, tags, user_id),
        ]
        wait(futures)
        # folder failure wins when both fail
        for future in futures:
            future.result()

    def validate(self, user_id: str, folder_id=ABSENT, tags=ABSENT) -> None:
        """
        Runs the folder and tag checks concurrently and waits for both. If
        either fails, the first failure is raised and the caller must not write.
        """
        if self.executor is not None:
            return self._join(self.executor, user_id, folder_id, tags)
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="noteful-refs") as executor:
            return self._join(executor, user_id, folder_id, tags)
