"""
Protocol definitions for the collaborators the query and tag code runs against.

- TagRegistryProtocol: the set of known tags
- ContactModelProtocol: the contact collection and its displayed view

Search (search.py) and tag integrity (tags.py, api.py) only rely on these
methods, so any model satisfying them can be searched and tagged.
"""

from typing import Iterable, Protocol, runtime_checkable

from .predicates import ContactFilter
from .types import Contact, Tag


@runtime_checkable
class TagRegistryProtocol(Protocol):
    """
    Known tags for a roster.

    Implemented by:
    - TagRegistry (tags.py)
    """

    def has_tag(self, tag: Tag | str) -> bool: ...

    def get(self, tag: Tag | str) -> Tag | None: ...

    def add(self, tag: Tag | str) -> Tag: ...

    def tags(self) -> list[Tag]: ...


@runtime_checkable
class ContactModelProtocol(Protocol):
    """
    A contact collection with a filtered view.

    Implemented by:
    - ContactBook (model.py)
    """

    # -- Displayed view --

    @property
    def filtered_contacts(self) -> list[Contact]: ...

    def apply_filter(self, predicate: ContactFilter) -> None: ...

    def is_filtered_empty(self) -> bool: ...

    def get_filtered(self, index: int) -> Contact: ...

    # -- Mutation by replacement --

    def set_contact(self, target: Contact, edited: Contact) -> None: ...

    # -- Tags --

    @property
    def tags(self) -> TagRegistryProtocol: ...

    def has_tag(self, tag: Tag | str) -> bool: ...


@runtime_checkable
class ContactStoreProtocol(Protocol):
    """
    Persistence for a contact book.

    Implemented by:
    - ContactStore (contact_store.py, SQLite)
    """

    def list_contacts(self) -> list[Contact]: ...

    def list_tags(self) -> list[Tag]: ...

    def upsert_contact(self, contact: Contact) -> None: ...

    def delete_contact(self, name: str) -> bool: ...

    def upsert_tag(self, tag: Tag) -> None: ...

    def delete_tag(self, tag: Tag) -> bool: ...

    def replace_all(self, contacts: Iterable[Contact], tags: Iterable[Tag]) -> None: ...

    def close(self) -> None: ...
