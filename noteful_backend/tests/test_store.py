import pytest

from noteful_database import Contains, DuplicateKeyError, Folder, Matches, Note, OneOf, Tag, User


@pytest.fixture
def owner(store):
    return store.create(User, {"username": "alice", "password": "digest"})


def test_create_and_find_one(store, owner):
    folder = store.create(Folder, {"name": "Work", "user_id": owner.id})
    assert store.find_one(Folder, {"id": folder.id}).name == "Work"
    assert store.find_one(Folder, {"id": folder.id, "user_id": "someone-else"}) is None


def test_unique_violation(store, owner):
    store.create(Tag, {"name": "x", "user_id": owner.id})
    with pytest.raises(DuplicateKeyError):
        store.create(Tag, {"name": "x", "user_id": owner.id})
    # session is usable after the rollback
    assert store.count(Tag, {"user_id": owner.id}) == 1


def test_count_with_set_membership(store, owner):
    ids = [store.create(Tag, {"name": name, "user_id": owner.id}).id for name in ("a", "b", "c")]
    assert store.count(Tag, {"id": OneOf(ids[:2]), "user_id": owner.id}) == 2
    assert store.count(Tag, {"id": OneOf([])}) == 0


def test_search_and_membership(store, owner):
    tag = store.create(Tag, {"name": "t", "user_id": owner.id})
    store.create(Note, {"title": "Groceries", "content": "milk", "user_id": owner.id, "tags": [tag.id]})
    store.create(Note, {"title": "Ideas", "content": "100% new", "user_id": owner.id})

    found = store.find(Note, {("title", "content"): Matches("MILK")})
    assert [n.title for n in found] == ["Groceries"]
    # LIKE wildcards are literal
    assert [n.title for n in store.find(Note, {"content": Matches("0%")})] == ["Ideas"]
    assert [n.title for n in store.find(Note, {"tags": Contains(tag.id)})] == ["Groceries"]


def test_update_one_patch_and_unset(store, owner):
    folder = store.create(Folder, {"name": "Work", "user_id": owner.id})
    note = store.create(Note, {"title": "t", "folder_id": folder.id, "user_id": owner.id})

    updated = store.update_one(Note, {"id": note.id}, {"title": "renamed"}, unset=("folder_id",))
    assert updated.title == "renamed"
    assert updated.folder_id is None
    assert store.update_one(Note, {"id": "missing"}, {"title": "x"}) is None


def test_update_many_and_delete(store, owner):
    folder = store.create(Folder, {"name": "Work", "user_id": owner.id})
    for title in ("a", "b"):
        store.create(Note, {"title": title, "folder_id": folder.id, "user_id": owner.id})

    assert store.update_many(Note, {"folder_id": folder.id}, unset=("folder_id",)) == 2
    assert store.count(Note, {"folder_id": None}) == 2
    assert store.delete_one(Folder, {"id": folder.id}) is True
    assert store.delete_one(Folder, {"id": folder.id}) is False
