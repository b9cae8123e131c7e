"""
Core API for the contact roster.

This is the minimal working implementation focused on:
- search(): keyword search with all/any fallback
- tag_add() / tag_remove(): tag edits that keep tags consistent with the registry
- create_tag() / delete_tag(): registry management
- add_contact() / delete_contact() / clear(): collection management
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .config import StoreConfig, get_default_store_path, load_or_create_config
from .contact_store import ContactStore
from .errors import UnknownTag
from .model import ContactBook
from .predicates import show_all
from .protocol import ContactStoreProtocol
from .search import SearchResult, search
from .tags import TagRegistry, add_tag, as_tag, remove_tag
from .types import Contact, Tag

logger = logging.getLogger(__name__)

STORE_FILENAME = "contacts.db"


class Roster:
    """
    A contact book with keyword search and tag integrity.

    Loads the contacts and tags from the store directory on construction;
    every change is written through before the method returns.
    """

    def __init__(
        self,
        store_path: Optional[Union[str, Path]] = None,
        *,
        config: Optional[StoreConfig] = None,
        store: Optional[ContactStoreProtocol] = None,
    ) -> None:
        """
        Initialize or open an existing roster.

        Args:
            store_path: Path to store directory. Uses ROSTER_STORE_PATH or
                ~/.roster/ when not specified.
            config: Injected config (skips loading roster.toml)
            store: Injected contact store (skips opening contacts.db)
        """
        if config is not None:
            self._config = config
            self._store_path = config.path
        else:
            if store_path is not None:
                self._store_path = Path(store_path).expanduser().resolve()
            else:
                self._store_path = get_default_store_path()
            self._config = load_or_create_config(self._store_path)

        self._store: ContactStoreProtocol = (
            store if store is not None else ContactStore(self._store_path / STORE_FILENAME)
        )
        try:
            self._book = ContactBook(
                self._store.list_contacts(),
                TagRegistry(self._store.list_tags()),
            )
        except Exception:
            self._store.close()
            raise

        # --- Persistent operations log (attached once the roster is loaded) ---
        from .logging_config import configure_ops_log
        self._ops_log_handler = configure_ops_log(self._store_path)
        logger.debug("Opened roster at %s (%d contacts, %d tags)",
                     self._store_path, len(self._book), len(self._book.tags))

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def store_path(self) -> Path:
        return self._store_path

    @property
    def book(self) -> ContactBook:
        return self._book

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, args: str) -> SearchResult:
        """
        Filter the displayed contacts by keywords.

        Args:
            args: Raw search arguments, e.g. "or n/John t/friend"

        Returns:
            SearchResult; the matching contacts are in list_contacts()

        Raises:
            EmptyQuery, MalformedCondition
        """
        result = search(
            self._book,
            args,
            default_condition=self._config.search.default_condition,
            fallback=self._config.search.fallback,
        )
        logger.info("search %r: %d listed%s", args, result.count,
                    " (fallback)" if result.fallback_used else "")
        return result

    def list_contacts(self) -> list[Contact]:
        """Contacts in the displayed view."""
        return self._book.filtered_contacts

    def show_all(self) -> list[Contact]:
        self._book.apply_filter(show_all)
        return self._book.filtered_contacts

    # -------------------------------------------------------------------------
    # Tags on contacts
    # -------------------------------------------------------------------------

    def tag_add(self, index: int, tag: Union[Tag, str]) -> Tag:
        """
        Add a registered tag to the contact at a 1-based index of the displayed view.

        Returns:
            The applied tag

        Raises:
            InvalidIndex: No contact at that index
            UnknownTag: Tag is not registered
            DuplicateTag: Contact already has the tag
        """
        contact = self._book.get_filtered(index)
        edited = add_tag(contact, tag, self._book.tags)
        applied = self._book.tags.get(tag)
        self._replace(contact, edited)
        logger.info("tag add %s -> %s", applied, contact.name)
        return applied

    def tag_remove(self, index: int, tag: Union[Tag, str]) -> Tag:
        """
        Remove a tag from the contact at a 1-based index of the displayed view.

        Raises:
            InvalidIndex: No contact at that index
            TagNotPresent: Contact does not have the tag
        """
        contact = self._book.get_filtered(index)
        edited = remove_tag(contact, tag)
        removed = next(iter(contact.tags - edited.tags))
        self._replace(contact, edited)
        logger.info("tag remove %s <- %s", removed, contact.name)
        return removed

    def _replace(self, contact: Contact, edited: Contact) -> None:
        self._book.set_contact(contact, edited)
        self._book.apply_filter(show_all)
        self._store.upsert_contact(edited)

    # -------------------------------------------------------------------------
    # Tag registry
    # -------------------------------------------------------------------------

    def create_tag(self, tag: Union[Tag, str]) -> Tag:
        """Register a tag. Creating an existing tag returns it unchanged."""
        created = self._book.add_tag(tag)
        self._store.upsert_tag(created)
        logger.info("tag create %s", created)
        return created

    def delete_tag(self, tag: Union[Tag, str]) -> list[Contact]:
        """
        Unregister a tag and remove it from every contact.

        Returns:
            The contacts that lost the tag

        Raises:
            UnknownTag: Tag is not registered
        """
        known = self._book.tags.get(tag)
        if known is None:
            raise UnknownTag(tag)
        edited = self._book.delete_tag(known)
        for contact in edited:
            self._store.upsert_contact(contact)
        self._store.delete_tag(known)
        logger.info("tag delete %s (%d contacts untagged)", known, len(edited))
        return edited

    def list_tags(self) -> list[Tag]:
        return self._book.tags.tags()

    # -------------------------------------------------------------------------
    # Contacts
    # -------------------------------------------------------------------------

    def add_contact(
        self,
        name: str,
        phone: str,
        email: str,
        address: str,
        tags: Iterable[Union[Tag, str]] = (),
    ) -> Contact:
        """
        Validate and add a contact. All tags must already be registered.

        Raises:
            InvalidValue, DuplicateContact, UnknownTag
        """
        contact = Contact.create(name, phone, email, address, [as_tag(t) for t in tags])
        stored = self._book.add_contact(contact)
        self._book.apply_filter(show_all)
        self._store.upsert_contact(stored)
        logger.info("add %s", stored.name)
        return stored

    def delete_contact(self, index: int) -> Contact:
        """Delete the contact at a 1-based index of the displayed view."""
        contact = self._book.get_filtered(index)
        self._book.delete_contact(contact)
        self._book.apply_filter(show_all)
        self._store.delete_contact(contact.name)
        logger.info("delete %s", contact.name)
        return contact

    def clear(self, *, reset_tags: bool = False) -> None:
        """
        Remove every contact.

        Registered tags are kept unless reset_tags is True, in which case
        the registry is emptied along with the contacts.
        """
        if reset_tags:
            self._book.reset()
        else:
            self._book.clear()
        self._store.replace_all(self._book.contacts, self._book.tags.tags())
        logger.info("clear%s", " (tags reset)" if reset_tags else "")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the store and detach the operations log."""
        if self._store is not None:
            self._store.close()
        handler = getattr(self, "_ops_log_handler", None)
        if handler is not None:
            logging.getLogger("roster").removeHandler(handler)
            handler.close()
            self._ops_log_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
