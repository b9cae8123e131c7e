"""
In-memory contact book: the collection, its displayed view, and its tags.
"""

import logging
from typing import Iterable, Optional

from .errors import DuplicateContact, InvalidIndex
from .predicates import ContactFilter, show_all
from .tags import TagLike, TagRegistry, as_tag, check_registered
from .types import Contact, Tag

logger = logging.getLogger(__name__)


class ContactBook:
    """
    Contacts in insertion order, a filtered view over them, and the tag registry.

    Contacts are immutable; edits replace a contact with a new instance at
    the same position. Every contact's tags are registry instances.
    """

    def __init__(
        self,
        contacts: Iterable[Contact] = (),
        tags: Optional[TagRegistry] = None,
    ):
        self._tags = tags if tags is not None else TagRegistry()
        self._contacts: list[Contact] = []
        self._filter: ContactFilter = show_all
        for contact in contacts:
            self.add_contact(contact)

    # -------------------------------------------------------------------------
    # Contacts
    # -------------------------------------------------------------------------

    @property
    def contacts(self) -> list[Contact]:
        return list(self._contacts)

    def __len__(self) -> int:
        return len(self._contacts)

    def has_contact(self, contact: Contact) -> bool:
        return any(c.is_same_contact(contact) for c in self._contacts)

    def add_contact(self, contact: Contact) -> Contact:
        """Append a contact. Its tags must already be registered.

        Returns the stored contact, carrying the registry's tag instances.
        """
        if self.has_contact(contact):
            raise DuplicateContact(contact.name)
        contact = contact.with_tags(check_registered(contact.tags, self._tags))
        self._contacts.append(contact)
        return contact

    def set_contact(self, target: Contact, edited: Contact) -> None:
        """Replace target with edited, keeping its position in the list."""
        position = self._position(target)
        if any(c.is_same_contact(edited) for i, c in enumerate(self._contacts) if i != position):
            raise DuplicateContact(edited.name)
        self._contacts[position] = edited.with_tags(check_registered(edited.tags, self._tags))

    def delete_contact(self, target: Contact) -> None:
        del self._contacts[self._position(target)]

    def _position(self, target: Contact) -> int:
        for i, c in enumerate(self._contacts):
            if c == target:
                return i
        raise KeyError(f"Contact not in roster: {target.name}")

    def clear(self) -> None:
        """Remove all contacts. Registered tags are kept."""
        self._contacts.clear()
        self._filter = show_all

    def reset(self) -> None:
        """Remove all contacts and all registered tags together."""
        self._contacts.clear()
        self._tags.clear()
        self._filter = show_all

    # -------------------------------------------------------------------------
    # Displayed view
    # -------------------------------------------------------------------------

    @property
    def filtered_contacts(self) -> list[Contact]:
        return [c for c in self._contacts if self._filter(c)]

    def apply_filter(self, predicate: ContactFilter) -> None:
        self._filter = predicate

    def is_filtered_empty(self) -> bool:
        return not any(self._filter(c) for c in self._contacts)

    def get_filtered(self, index: int) -> Contact:
        """Contact at a 1-based index of the displayed view."""
        view = self.filtered_contacts
        if index < 1 or index > len(view):
            raise InvalidIndex(index, len(view))
        return view[index - 1]

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    @property
    def tags(self) -> TagRegistry:
        return self._tags

    def has_tag(self, tag: TagLike) -> bool:
        return self._tags.has_tag(tag)

    def add_tag(self, tag: TagLike) -> Tag:
        return self._tags.add(tag)

    def delete_tag(self, tag: TagLike) -> list[Contact]:
        """Unregister a tag and strip it from every contact carrying it.

        Returns the edited contacts. Unknown tags are a no-op.
        """
        tag = as_tag(tag)
        edited = []
        for i, c in enumerate(self._contacts):
            if tag in c.tags:
                self._contacts[i] = c.with_tags(c.tags - {tag})
                edited.append(self._contacts[i])
        self._tags.remove(tag)
        if edited:
            logger.debug("Removed tag %s from %d contacts", tag, len(edited))
        return edited
