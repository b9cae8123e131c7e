"""
Data types for the contact roster.
"""

import re
import string
from dataclasses import dataclass, field, replace
from enum import Enum

from .errors import InvalidValue


class Field(Enum):
    """Searchable contact attributes, keyed by their command-line marker.

    Declaration order is the order fields are tokenized and evaluated in.
    """
    NAME = "n/"
    PHONE = "p/"
    EMAIL = "e/"
    ADDRESS = "a/"
    TAG = "t/"

    @property
    def marker(self) -> str:
        return self.value

    @classmethod
    def from_marker(cls, marker: str) -> "Field":
        for f in cls:
            if f.value == marker:
                return f
        raise ValueError(f"Unknown field marker: {marker!r}")


NAME_MAX_LENGTH = 45
PHONE_MIN_LENGTH = 3

_NAME_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9 ]*$')
_PHONE_RE = re.compile(r"[0-9]{%d,}" % PHONE_MIN_LENGTH)
_EMAIL_RE = re.compile(r'^[A-Za-z0-9+_.-]+@[A-Za-z0-9][A-Za-z0-9.-]*$')
_TAG_RE = re.compile(r"[A-Za-z0-9]+")
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

NAME_CONSTRAINTS = (
    "Names should only contain alphanumeric characters and spaces, "
    f"and it should not be blank (max {NAME_MAX_LENGTH} characters)"
)
PHONE_CONSTRAINTS = f"Phone numbers should only contain digits, and be at least {PHONE_MIN_LENGTH} digits long"
EMAIL_CONSTRAINTS = "Emails should be of the format local-part@domain"
ADDRESS_CONSTRAINTS = "Addresses can take any value, and should not be blank"
TAG_CONSTRAINTS = "Tag names should be alphanumeric"


def validate_name(name: str) -> None:
    if len(name) > NAME_MAX_LENGTH or not _NAME_RE.match(name):
        raise InvalidValue(f"{NAME_CONSTRAINTS}: {name!r}")


def validate_phone(phone: str) -> None:
    if not _PHONE_RE.fullmatch(phone):
        raise InvalidValue(f"{PHONE_CONSTRAINTS}: {phone!r}")


def validate_email(email: str) -> None:
    if not _EMAIL_RE.match(email):
        raise InvalidValue(f"{EMAIL_CONSTRAINTS}: {email!r}")


def validate_address(address: str) -> None:
    if not address.strip():
        raise InvalidValue(ADDRESS_CONSTRAINTS)


def ascii_lower(text: str) -> str:
    """Lowercase A-Z only; every other character is left as is."""
    return text.translate(_ASCII_LOWER)


def normalize_tag(identifier: str) -> str:
    """Validate and normalize a tag identifier.

    Tags are compared ASCII-lowercased, so "Friend" and "friend" are one tag.
    Raises InvalidValue for blank or non-ASCII-alphanumeric identifiers.
    """
    stripped = identifier.strip()
    if not _TAG_RE.fullmatch(stripped):
        raise InvalidValue(f"{TAG_CONSTRAINTS}: {identifier!r}")
    return ascii_lower(stripped)


@dataclass(frozen=True, order=True)
class Tag:
    """A tag, identified by its normalized name.

    Construct through Tag.of() to normalize; the registry hands out
    its own instances so contacts share them.
    """
    name: str

    @classmethod
    def of(cls, identifier: str) -> "Tag":
        return cls(normalize_tag(identifier))

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Contact:
    """
    A contact in the roster.

    This is a read-only snapshot. Changing anything (for example adding a
    tag) goes through with_tags() or the model, which return a new Contact
    with every other field copied verbatim.

    Attributes:
        name: Full name, alphanumeric and spaces
        phone: Digits only
        email: local-part@domain
        address: Free text
        tags: Tags carried by the contact (registry-owned instances)
    """
    name: str
    phone: str
    email: str
    address: str
    tags: frozenset[Tag] = field(default_factory=frozenset)

    @classmethod
    def create(
        cls,
        name: str,
        phone: str,
        email: str,
        address: str,
        tags=(),
    ) -> "Contact":
        """Build a validated contact, stripping surrounding whitespace."""
        name, phone, email, address = (v.strip() for v in (name, phone, email, address))
        validate_name(name)
        validate_phone(phone)
        validate_email(email)
        validate_address(address)
        return cls(name, phone, email, address, frozenset(tags))

    def with_tags(self, tags) -> "Contact":
        return replace(self, tags=frozenset(tags))

    def is_same_contact(self, other: "Contact") -> bool:
        """Two contacts are the same person when their names match, ignoring case."""
        return ascii_lower(self.name) == ascii_lower(other.name)

    def values(self, f: Field) -> list[str]:
        """String renderings of an attribute, as seen by keyword matching."""
        if f is Field.NAME:
            return [self.name]
        if f is Field.PHONE:
            return [self.phone]
        if f is Field.EMAIL:
            return [self.email]
        if f is Field.ADDRESS:
            return [self.address]
        return sorted(str(t) for t in self.tags)

    def sorted_tags(self) -> list[Tag]:
        return sorted(self.tags)

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dict."""
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "tags": [str(t) for t in self.sorted_tags()],
        }

    def __str__(self) -> str:
        text = f"{self.name}; Phone: {self.phone}; Email: {self.email}; Address: {self.address}"
        if self.tags:
            text += "; Tags: " + " ".join(f"[{t}]" for t in self.sorted_tags())
        return text
