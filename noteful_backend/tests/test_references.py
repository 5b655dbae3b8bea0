import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from noteful_backend.exceptions import InvalidReference, ValidationError
from noteful_backend.references import ReferenceValidator, is_valid_id
from noteful_database import DocumentStore, Folder, Tag, User


@pytest.fixture
def owners(store):
    alice = store.create(User, {"username": "alice", "password": "digest"})
    bob = store.create(User, {"username": "bob", "password": "digest"})
    return alice, bob


@pytest.fixture
def validator(session_factory):
    return ReferenceValidator(session_factory)


@pytest.fixture
def overlapping_counts(monkeypatch):
    """Makes every count wait until a second count is running alongside it."""
    barrier = threading.Barrier(2, timeout=5)
    original = DocumentStore.count

    def count(self, model, filter=None):
        barrier.wait()
        return original(self, model, filter)

    monkeypatch.setattr(DocumentStore, "count", count)
    return barrier


def test_is_valid_id():
    assert is_valid_id(str(uuid.uuid4()))
    assert not is_valid_id("123")
    assert not is_valid_id(None)
    assert not is_valid_id(12345)


def test_absent_references_pass(validator, owners):
    validator.validate(owners[0].id)
    validator.validate(owners[0].id, folder_id="", tags=[])
    validator.validate(owners[0].id, folder_id=None)
    # an empty string is the same as not sending tags
    validator.validate(owners[0].id, tags="")


def test_folder_check(store, validator, owners):
    alice, bob = owners
    mine = store.create(Folder, {"name": "f", "user_id": alice.id})
    theirs = store.create(Folder, {"name": "f", "user_id": bob.id})

    validator.validate(alice.id, folder_id=mine.id)
    for folder_id in (theirs.id, str(uuid.uuid4()), "not-an-id", 7):
        with pytest.raises(InvalidReference) as excinfo:
            validator.validate(alice.id, folder_id=folder_id)
        assert excinfo.value.location == "folderId"


def test_tag_check(store, validator, owners):
    alice, bob = owners
    mine = store.create(Tag, {"name": "t", "user_id": alice.id})
    theirs = store.create(Tag, {"name": "t", "user_id": bob.id})

    validator.validate(alice.id, tags=[mine.id])
    # repeated ids are counted once
    validator.validate(alice.id, tags=[mine.id, mine.id])

    with pytest.raises(ValidationError):
        validator.validate(alice.id, tags=mine.id)
    for tags in ([mine.id, theirs.id], [mine.id, "bad"], [str(uuid.uuid4())], [mine.id, mine.id, theirs.id]):
        with pytest.raises(InvalidReference) as excinfo:
            validator.validate(alice.id, tags=tags)
        assert excinfo.value.location == "tags"


def test_folder_failure_reported_first(validator, owners):
    with pytest.raises(InvalidReference) as excinfo:
        validator.validate(owners[0].id, folder_id="bad", tags=["bad"])
    assert excinfo.value.location == "folderId"


def test_folder_failure_wins_after_both_lookups(store, validator, owners, overlapping_counts):
    alice, bob = owners
    theirs = store.create(Folder, {"name": "f", "user_id": bob.id})
    mine = store.create(Tag, {"name": "t", "user_id": alice.id})

    with pytest.raises(InvalidReference) as excinfo:
        validator.validate(alice.id, folder_id=theirs.id, tags=[mine.id])
    assert excinfo.value.location == "folderId"


def test_folder_and_tag_lookups_overlap(store, validator, owners, overlapping_counts):
    alice, _ = owners
    folder = store.create(Folder, {"name": "f", "user_id": alice.id})
    tag = store.create(Tag, {"name": "t", "user_id": alice.id})

    # each lookup blocks until the other has started; run one after the
    # other they would break the barrier instead
    validator.validate(alice.id, folder_id=folder.id, tags=[tag.id])
    assert not overlapping_counts.broken


def test_shared_executor_is_used(session_factory, owners):
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="shared") as executor:
        seen = []

        class Recording(ReferenceValidator):
            def check_folder(self, folder_id, user_id):
                seen.append(threading.current_thread().name)
                return super().check_folder(folder_id, user_id)

        Recording(session_factory, executor).validate(owners[0].id, folder_id="")
    assert seen and seen[0].startswith("shared")


# ------- THROUGH THE API --------
def test_create_note_with_foreign_folder(client, auth_header, second_auth_header):
    foreign = client.post("/folders", json={"name": "Theirs"}, headers=second_auth_header).json()["id"]
    r = client.post("/notes", json={"title": "t", "folderId": foreign}, headers=auth_header)
    missing = client.post("/notes", json={"title": "t", "folderId": str(uuid.uuid4())}, headers=auth_header)
    assert r.status_code == 400
    # a foreign folder looks exactly like a missing one
    assert r.json() == missing.json()
    assert r.json()["location"] == "folderId"
    assert client.get("/notes", headers=auth_header).json() == []


def test_create_note_with_foreign_tag(client, auth_header, second_auth_header):
    mine = client.post("/tags", json={"name": "mine"}, headers=auth_header).json()["id"]
    theirs = client.post("/tags", json={"name": "theirs"}, headers=second_auth_header).json()["id"]
    r = client.post("/notes", json={"title": "t", "tags": [mine, theirs]}, headers=auth_header)
    assert r.status_code == 400
    assert r.json()["location"] == "tags"
    assert client.get("/notes", headers=auth_header).json() == []


def test_tags_must_be_array(client, auth_header):
    r = client.post("/notes", json={"title": "t", "tags": "abc"}, headers=auth_header)
    assert r.status_code == 422
    assert r.json()["message"] == "The `tags` property must be an array"


def test_create_note_with_folder_and_tags(client, auth_header):
    folder_id = client.post("/folders", json={"name": "Work"}, headers=auth_header).json()["id"]
    tag_id = client.post("/tags", json={"name": "urgent"}, headers=auth_header).json()["id"]
    r = client.post(
        "/notes", json={"title": "t", "folderId": folder_id, "tags": [tag_id]}, headers=auth_header
    )
    assert r.status_code == 201
    assert r.json()["folderId"] == folder_id
    assert [t["id"] for t in r.json()["tags"]] == [tag_id]


def test_update_empty_folder_unsets(client, auth_header):
    folder_id = client.post("/folders", json={"name": "Work"}, headers=auth_header).json()["id"]
    note_id = client.post(
        "/notes", json={"title": "t", "folderId": folder_id}, headers=auth_header
    ).json()["id"]

    r = client.put(f"/notes/{note_id}", json={"folderId": ""}, headers=auth_header)
    assert r.status_code == 200
    assert "folderId" not in r.json()
    assert "folderId" not in client.get(f"/notes/{note_id}", headers=auth_header).json()


def test_update_with_foreign_references_writes_nothing(client, auth_header, second_auth_header):
    foreign_tag = client.post("/tags", json={"name": "x"}, headers=second_auth_header).json()["id"]
    note_id = client.post("/notes", json={"title": "orig"}, headers=auth_header).json()["id"]

    r = client.put(
        f"/notes/{note_id}", json={"title": "changed", "tags": [foreign_tag]}, headers=auth_header
    )
    assert r.status_code == 400
    assert client.get(f"/notes/{note_id}", headers=auth_header).json()["title"] == "orig"


def test_update_replaces_tags(client, auth_header):
    a = client.post("/tags", json={"name": "a"}, headers=auth_header).json()["id"]
    b = client.post("/tags", json={"name": "b"}, headers=auth_header).json()["id"]
    note_id = client.post("/notes", json={"title": "t", "tags": [a]}, headers=auth_header).json()["id"]

    r = client.put(f"/notes/{note_id}", json={"tags": [b]}, headers=auth_header)
    assert [t["id"] for t in r.json()["tags"]] == [b]

    r2 = client.put(f"/notes/{note_id}", json={"tags": []}, headers=auth_header)
    assert r2.json()["tags"] == []


def test_create_note_with_empty_tags_string(client, auth_header):
    r = client.post("/notes", json={"title": "t", "tags": ""}, headers=auth_header)
    assert r.status_code == 201
    assert r.json()["tags"] == []


def test_update_with_empty_tags_string_keeps_tags(client, auth_header):
    tag_id = client.post("/tags", json={"name": "keep"}, headers=auth_header).json()["id"]
    note_id = client.post("/notes", json={"title": "t", "tags": [tag_id]}, headers=auth_header).json()["id"]

    r = client.put(f"/notes/{note_id}", json={"title": "renamed", "tags": ""}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["title"] == "renamed"
    assert [t["id"] for t in r.json()["tags"]] == [tag_id]


def test_create_note_checks_run_side_by_side(client, auth_header, overlapping_counts):
    folder_id = client.post("/folders", json={"name": "Work"}, headers=auth_header).json()["id"]
    tag_id = client.post("/tags", json={"name": "urgent"}, headers=auth_header).json()["id"]

    r = client.post(
        "/notes", json={"title": "t", "folderId": folder_id, "tags": [tag_id]}, headers=auth_header
    )
    assert r.status_code == 201
    assert not overlapping_counts.broken
