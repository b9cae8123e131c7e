"""
Tag registry and tag integrity rules.

The registry is the single owner of Tag values for a roster. Contacts only
ever carry tags handed out by the registry, so "tag exists" and "tag is
referenced" cannot drift apart.
"""

import logging
from typing import Iterable, Iterator, Optional, Union

from .errors import DuplicateTag, TagNotPresent, UnknownTag
from .types import Contact, Tag

logger = logging.getLogger(__name__)

TagLike = Union[Tag, str]


def as_tag(tag: TagLike) -> Tag:
    """Coerce an identifier string to a normalized Tag."""
    return tag if isinstance(tag, Tag) else Tag.of(tag)


class TagRegistry:
    """Ordered set of known tags, unique by identifier.

    Listing order is insertion order and stays stable for the session.
    """

    def __init__(self, tags: Iterable[TagLike] = ()):
        self._tags: dict[str, Tag] = {}
        for tag in tags:
            self.add(tag)

    def has_tag(self, tag: TagLike) -> bool:
        return as_tag(tag).name in self._tags

    __contains__ = has_tag

    def get(self, tag: TagLike) -> Optional[Tag]:
        """Return the registry's own instance of a tag, or None."""
        return self._tags.get(as_tag(tag).name)

    def add(self, tag: TagLike) -> Tag:
        """Register a tag. Adding an existing tag is a no-op.

        Returns the registry's instance of the tag.
        """
        tag = as_tag(tag)
        existing = self._tags.get(tag.name)
        if existing is not None:
            return existing
        self._tags[tag.name] = tag
        logger.debug("Registered tag %s", tag)
        return tag

    def remove(self, tag: TagLike) -> bool:
        """Unregister a tag. Callers are responsible for untagging contacts first."""
        return self._tags.pop(as_tag(tag).name, None) is not None

    def clear(self) -> None:
        self._tags.clear()

    def tags(self) -> list[Tag]:
        return list(self._tags.values())

    def __iter__(self) -> Iterator[Tag]:
        return iter(self.tags())

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"TagRegistry({[t.name for t in self._tags.values()]!r})"


def add_tag(contact: Contact, tag: TagLike, registry: TagRegistry) -> Contact:
    """
    Return a copy of contact carrying one more tag.

    The contact passed in is never modified.

    Raises:
        UnknownTag: The tag is not in the registry
        DuplicateTag: The contact already carries the tag
    """
    known = registry.get(tag)
    if known is None:
        raise UnknownTag(as_tag(tag))
    if known in contact.tags:
        raise DuplicateTag(known)
    return contact.with_tags(contact.tags | {known})


def remove_tag(contact: Contact, tag: TagLike) -> Contact:
    """
    Return a copy of contact without the given tag.

    Raises:
        TagNotPresent: The contact does not carry the tag
    """
    tag = as_tag(tag)
    if tag not in contact.tags:
        raise TagNotPresent(tag)
    return contact.with_tags(contact.tags - {tag})


def check_registered(tags: Iterable[Tag], registry: TagRegistry) -> frozenset[Tag]:
    """Resolve tags to registry instances, failing on the first unknown one."""
    resolved = set()
    for tag in tags:
        known = registry.get(tag)
        if known is None:
            raise UnknownTag(tag)
        resolved.add(known)
    return frozenset(resolved)
