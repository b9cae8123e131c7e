"""Tests for the SQLite contact store (real SQLite on tmp_path)."""

import pytest

from roster.contact_store import ContactStore
from roster.protocol import ContactStoreProtocol
from roster.types import Tag

from tests.conftest import make_contact


@pytest.fixture
def store(tmp_path):
    with ContactStore(tmp_path / "contacts.db") as s:
        yield s


def test_satisfies_protocol(store):
    assert isinstance(store, ContactStoreProtocol)


def test_contacts_keep_insertion_order(store):
    for name in ["Zed", "Amy", "Mo"]:
        store.upsert_contact(make_contact(name))
    assert [c.name for c in store.list_contacts()] == ["Zed", "Amy", "Mo"]


def test_round_trip_fields_and_tags(store, benson):
    store.upsert_contact(benson)
    (loaded,) = store.list_contacts()
    assert loaded == benson


def test_update_keeps_position(store):
    first = make_contact("First")
    store.upsert_contact(first)
    store.upsert_contact(make_contact("Second"))
    store.upsert_contact(first.with_tags({Tag("friend")}))
    loaded = store.list_contacts()
    assert [c.name for c in loaded] == ["First", "Second"]
    assert loaded[0].tags == {Tag("friend")}


def test_delete_contact(store):
    store.upsert_contact(make_contact("Gone"))
    assert store.delete_contact("Gone")
    assert not store.delete_contact("Gone")
    assert store.count() == 0


def test_tags_keep_order_and_ignore_duplicates(store):
    for name in ["friend", "colleague", "friend"]:
        store.upsert_tag(Tag(name))
    assert store.list_tags() == [Tag("friend"), Tag("colleague")]
    assert store.delete_tag(Tag("friend"))
    assert store.list_tags() == [Tag("colleague")]


def test_replace_all(store, alice, carl):
    store.upsert_contact(make_contact("Stale"))
    store.upsert_tag(Tag("stale"))
    store.replace_all([carl, alice], [Tag("friend")])
    assert [c.name for c in store.list_contacts()] == ["Carl Kurz", "Alice Pauline"]
    assert store.list_tags() == [Tag("friend")]


def test_persists_across_connections(tmp_path, alice):
    path = tmp_path / "contacts.db"
    with ContactStore(path) as s:
        s.upsert_tag(Tag("friend"))
        s.upsert_contact(alice)
    with ContactStore(path) as s:
        assert s.list_contacts() == [alice]
        assert s.list_tags() == [Tag("friend")]
