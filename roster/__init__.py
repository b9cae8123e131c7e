"""
Roster

A contact book with whole-word keyword search and tag referential integrity.

Quick Start:
    from roster import Roster

    with Roster("~/.roster") as roster:
        roster.create_tag("friend")
        roster.add_contact("John Doe", "98765432", "johnd@example.com", "NUS", tags=["friend"])
        result = roster.search("and n/John a/NUS")
        print(result.message, roster.list_contacts())

CLI Usage:
    roster search or n/John t/friend
    roster tag add 1 colleague

Default Store:
    ~/.roster/ (created automatically).
    Override with ROSTER_STORE_PATH or --store.

Environment Variables:
    ROSTER_STORE_PATH  - Override default store location
    ROSTER_VERBOSE     - Set to 1 for debug logging
"""

from .api import Roster
from .errors import (
    DuplicateContact,
    DuplicateTag,
    EmptyQuery,
    InvalidIndex,
    InvalidValue,
    MalformedCondition,
    RosterError,
    TagNotPresent,
    UnknownTag,
)
from .model import ContactBook
from .predicates import KeywordPredicate, MatchKind, build_predicates
from .search import SearchResult, execute_search, search, select_predicates
from .tags import TagRegistry, add_tag, remove_tag
from .tokenizer import Condition, SearchQuery, tokenize
from .types import Contact, Field, Tag

__version__ = "0.1.0"
__all__ = [
    "Roster",
    "Contact",
    "ContactBook",
    "Tag",
    "TagRegistry",
    "Field",
    "Condition",
    "SearchQuery",
    "SearchResult",
    "KeywordPredicate",
    "MatchKind",
    "tokenize",
    "build_predicates",
    "select_predicates",
    "execute_search",
    "search",
    "add_tag",
    "remove_tag",
    "RosterError",
    "EmptyQuery",
    "MalformedCondition",
    "InvalidIndex",
    "InvalidValue",
    "DuplicateContact",
    "UnknownTag",
    "DuplicateTag",
    "TagNotPresent",
]
