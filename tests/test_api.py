"""
Tests for the Roster facade: write-through persistence, tag commands,
search with fallback, and the operations log.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from roster.api import Roster
from roster.config import SearchConfig, StoreConfig
from roster.contact_store import ContactStore
from roster.errors import (
    DuplicateContact,
    DuplicateTag,
    EmptyQuery,
    InvalidIndex,
    InvalidValue,
    TagNotPresent,
    UnknownTag,
)
from roster.tokenizer import Condition
from roster.types import Tag

from tests.conftest import make_contact


@pytest.fixture
def seeded(roster):
    roster.create_tag("friend")
    roster.create_tag("colleague")
    roster.add_contact("John Doe", "98765432", "johnd@example.com", "Kent Ridge", tags=["friend"])
    roster.add_contact("Betsy Crowe", "12345678", "betsy@nus.edu", "NUS Computing")
    roster.add_contact("Carl Kurz", "95352563", "heinz@example.com", "wall street")
    return roster


class TestTagAdd:
    def test_success(self, seeded):
        applied = seeded.tag_add(1, "colleague")
        assert applied == Tag("colleague")
        assert seeded.list_contacts()[0].tags == {Tag("friend"), Tag("colleague")}

    def test_duplicate(self, seeded):
        with pytest.raises(DuplicateTag):
            seeded.tag_add(1, "friend")

    def test_unknown(self, seeded):
        before = seeded.list_contacts()[0]
        with pytest.raises(UnknownTag):
            seeded.tag_add(1, "vip")
        assert seeded.list_contacts()[0] == before

    def test_invalid_index(self, seeded):
        with pytest.raises(InvalidIndex):
            seeded.tag_add(4, "friend")

    def test_index_is_against_displayed_view(self, seeded):
        seeded.search("n/Carl")
        seeded.tag_add(1, "colleague")
        carl = next(c for c in seeded.book.contacts if c.name == "Carl Kurz")
        assert carl.tags == {Tag("colleague")}

    def test_view_reset_after_edit(self, seeded):
        seeded.search("n/Carl")
        seeded.tag_add(1, "friend")
        assert len(seeded.list_contacts()) == 3

    def test_persisted(self, seeded, tmp_path):
        seeded.tag_add(2, "colleague")
        seeded.close()
        with Roster(tmp_path) as reopened:
            betsy = reopened.list_contacts()[1]
            assert betsy.tags == {Tag("colleague")}


class TestTagRemove:
    def test_success(self, seeded):
        assert seeded.tag_remove(1, "friend") == Tag("friend")
        assert seeded.list_contacts()[0].tags == frozenset()

    def test_not_present(self, seeded):
        with pytest.raises(TagNotPresent):
            seeded.tag_remove(2, "friend")


class TestRegistry:
    def test_create_is_idempotent(self, seeded):
        seeded.create_tag("Friend")
        assert seeded.list_tags() == [Tag("friend"), Tag("colleague")]

    def test_create_invalid(self, roster):
        with pytest.raises(InvalidValue):
            roster.create_tag("not valid")

    def test_delete_cascades_and_persists(self, seeded, tmp_path):
        edited = seeded.delete_tag("friend")
        assert [c.name for c in edited] == ["John Doe"]
        seeded.close()
        with Roster(tmp_path) as reopened:
            assert reopened.list_tags() == [Tag("colleague")]
            assert all(not c.tags for c in reopened.list_contacts())

    def test_delete_unknown(self, seeded):
        with pytest.raises(UnknownTag):
            seeded.delete_tag("vip")


class TestContacts:
    def test_add_requires_registered_tags(self, roster):
        with pytest.raises(UnknownTag):
            roster.add_contact("Amy", "123", "amy@example.com", "Here", tags=["vip"])
        assert roster.list_contacts() == []

    def test_add_duplicate(self, seeded):
        with pytest.raises(DuplicateContact):
            seeded.add_contact("john doe", "111", "x@example.com", "Elsewhere")

    @pytest.mark.parametrize("name,phone,email,address", [
        ("", "123", "a@b.com", "x"),
        ("Bad*Name", "123", "a@b.com", "x"),
        ("A" * 46, "123", "a@b.com", "x"),
        ("Amy", "12", "a@b.com", "x"),
        ("Amy", "12a", "a@b.com", "x"),
        ("Amy", "123", "not-an-email", "x"),
        ("Amy", "123", "a@b.com", "   "),
    ])
    def test_add_validation(self, roster, name, phone, email, address):
        with pytest.raises(InvalidValue):
            roster.add_contact(name, phone, email, address)

    def test_delete(self, seeded):
        deleted = seeded.delete_contact(2)
        assert deleted.name == "Betsy Crowe"
        assert [c.name for c in seeded.list_contacts()] == ["John Doe", "Carl Kurz"]

    def test_clear_keeps_tags(self, seeded, tmp_path):
        seeded.clear()
        seeded.close()
        with Roster(tmp_path) as reopened:
            assert reopened.list_contacts() == []
            assert reopened.list_tags() == [Tag("friend"), Tag("colleague")]

    def test_clear_with_reset(self, seeded):
        seeded.clear(reset_tags=True)
        assert seeded.list_contacts() == []
        assert seeded.list_tags() == []


class TestSearch:
    def test_conjunctive_falls_back_to_disjunctive(self, seeded):
        result = seeded.search("n/John a/NUS")
        assert result.fallback_used
        assert result.count == 2
        assert [c.name for c in seeded.list_contacts()] == ["John Doe", "Betsy Crowe"]

    def test_empty_query(self, seeded):
        with pytest.raises(EmptyQuery):
            seeded.search("   ")

    def test_config_controls_default_and_fallback(self, tmp_path):
        config = StoreConfig(
            path=tmp_path,
            search=SearchConfig(default_condition=Condition.OR, fallback=False),
        )
        with Roster(config=config, store=ContactStore(tmp_path / "c.db")) as r:
            r.add_contact("John Doe", "98765432", "johnd@example.com", "Kent Ridge")
            r.add_contact("Betsy Crowe", "12345678", "betsy@nus.edu", "NUS")
            result = r.search("n/John a/NUS")
            assert result.count == 2
            assert not result.fallback_used
            assert r.search("and n/John a/NUS").count == 0

    def test_show_all_resets_view(self, seeded):
        seeded.search("n/Carl")
        assert len(seeded.show_all()) == 3


def test_ops_log_written(seeded, tmp_path):
    seeded.search("t/friend")
    seeded.close()
    log = (tmp_path / "roster-ops.log").read_text()
    assert "tag create friend" in log
    assert "search 't/friend': 1 listed" in log


def test_store_path_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("ROSTER_STORE_PATH", str(tmp_path))
    with Roster() as r:
        assert r.store_path == tmp_path.resolve()
        assert (tmp_path / "roster.toml").exists()


def test_failed_open_leaves_no_ops_log_handler(tmp_path):
    with ContactStore(tmp_path / "contacts.db") as store:
        # A contact carrying a tag the registry never saw
        store.upsert_contact(make_contact("Amy", tags=["ghost"]))
    roster_logger = logging.getLogger("roster")
    before = list(roster_logger.handlers)
    with pytest.raises(UnknownTag):
        Roster(tmp_path)
    assert roster_logger.handlers == before
    assert not any(
        isinstance(h, RotatingFileHandler) and h.baseFilename.startswith(str(tmp_path))
        for h in roster_logger.handlers
    )
