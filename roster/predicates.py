"""
Keyword predicates over contacts.

A predicate is a plain value: its kind (all/any) plus the ordered
(field, keywords) pairs it was built from. Calling it on a Contact applies
whole-word, case-insensitive matching. Two predicates built from the same
keywords compare equal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .errors import EmptyQuery
from .types import Contact, Field, ascii_lower

ContactFilter = Callable[[Contact], bool]


class MatchKind(str, Enum):
    ALL = "all"
    ANY = "any"


def contains_word(text: str, keyword: str) -> bool:
    """True if keyword equals one whitespace-delimited word of text, ignoring ASCII case.

    "90" matches "90" and "call 90 now", but not "900" or "1990".
    """
    word = ascii_lower(keyword.strip())
    if not word:
        return False
    return word in ascii_lower(text).split()


def field_matches(contact: Contact, f: Field, keyword: str) -> bool:
    return any(contains_word(value, keyword) for value in contact.values(f))


@dataclass(frozen=True)
class KeywordPredicate:
    kind: MatchKind
    fields: tuple[tuple[Field, tuple[str, ...]], ...]

    def __post_init__(self):
        if not self.fields:
            raise EmptyQuery()

    def pairs(self):
        """Flattened (field, keyword) pairs in evaluation order."""
        for f, keywords in self.fields:
            for keyword in keywords:
                yield f, keyword

    def __call__(self, contact: Contact) -> bool:
        checks = (field_matches(contact, f, kw) for f, kw in self.pairs())
        if self.kind is MatchKind.ALL:
            return all(checks)
        return any(checks)

    def describe(self) -> str:
        joiner = " and " if self.kind is MatchKind.ALL else " or "
        return joiner.join(f"{f.marker}{kw}" for f, kw in self.pairs())


def build_predicates(keywords: dict[Field, tuple[str, ...]]) -> tuple[KeywordPredicate, KeywordPredicate]:
    """
    Build the all-match and any-match predicates for a keyword group.

    Args:
        keywords: Field -> keywords, as produced by tokenize()

    Returns:
        (all_match, any_match)

    Raises:
        EmptyQuery: If no field carries a keyword
    """
    fields = tuple(
        (f, tuple(kws)) for f, kws in keywords.items() if kws
    )
    return (
        KeywordPredicate(MatchKind.ALL, fields),
        KeywordPredicate(MatchKind.ANY, fields),
    )


def show_all(contact: Contact) -> bool:
    """Filter that lists every contact."""
    return True
