"""
Shared pytest fixtures for roster tests.

Provides sample contacts, an in-memory ContactBook, and a Roster on tmp_path.
"""

import logging

import pytest

from roster.api import Roster
from roster.model import ContactBook
from roster.tags import TagRegistry
from roster.types import Contact, Tag


def make_contact(name, phone="98765432", email="someone@example.com",
                 address="Clementi Ave 2", tags=()):
    return Contact(name, phone, email, address, frozenset(Tag(t) for t in tags))


@pytest.fixture
def alice():
    return make_contact("Alice Pauline", "94351253", "alice@example.com",
                        "123 Jurong West Ave 6", tags=["friend"])


@pytest.fixture
def benson():
    return make_contact("Benson Meier", "98765432", "johnd@example.com",
                        "311 Clementi Ave 2", tags=["owesmoney", "friend"])


@pytest.fixture
def carl():
    return make_contact("Carl Kurz", "95352563", "heinz@example.com", "wall street")


@pytest.fixture
def john():
    return make_contact("John Doe", "90", "john@example.com", "Kent Ridge")


@pytest.fixture
def nus_contact():
    return make_contact("Betsy Crowe", "1900", "betsy@nus.edu", "NUS Computing")


@pytest.fixture
def registry():
    return TagRegistry(["friend", "owesmoney", "colleague"])


@pytest.fixture
def book(alice, benson, carl, john, nus_contact, registry):
    return ContactBook([alice, benson, carl, john, nus_contact], registry)


@pytest.fixture
def roster(tmp_path):
    """A Roster on a fresh store directory, closed after the test."""
    r = Roster(tmp_path)
    yield r
    r.close()


@pytest.fixture(autouse=True)
def _detach_ops_logs():
    """Remove ops-log handlers left on the roster logger by a test."""
    yield
    roster_logger = logging.getLogger("roster")
    for handler in list(roster_logger.handlers):
        roster_logger.removeHandler(handler)
        handler.close()
