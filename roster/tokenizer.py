"""
Search argument tokenizer.

Splits a raw search string such as ``"and n/John Doe a/NUS t/friend"`` into
its condition token and field-qualified keywords, without interpreting them.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import EmptyQuery, MalformedCondition
from .types import Field, ascii_lower


class Condition(str, Enum):
    AND = "and"
    OR = "or"

    @classmethod
    def parse(cls, token: str) -> Optional["Condition"]:
        """Parse a condition token; blank means no condition was given."""
        token = ascii_lower(token.strip())
        if not token:
            return None
        for c in cls:
            if c.value == token:
                return c
        raise MalformedCondition(token)


# A marker only counts at the start of the string or after whitespace,
# so "e/betsy@nus.edu" or "Blk 30/2" values are left intact.
_MARKER_PATTERN = re.compile(
    r'(?<!\S)(' + "|".join(re.escape(f.marker) for f in Field) + r')'
)

FieldKeywords = dict[Field, tuple[str, ...]]


@dataclass(frozen=True)
class SearchQuery:
    """A tokenized search: the condition token and keywords per field.

    ``keywords`` is ordered by Field declaration order and never empty.
    """
    condition: Optional[Condition]
    keywords: FieldKeywords


def split_markers(args: str) -> tuple[str, list[tuple[Field, str]]]:
    """Split raw args into (preamble, [(field, value), ...]) in input order."""
    matches = list(_MARKER_PATTERN.finditer(args))
    if not matches:
        return args.strip(), []
    preamble = args[:matches[0].start()]
    values = []
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(args)
        values.append((Field.from_marker(m.group(1)), args[m.end():end].strip()))
    return preamble.strip(), values


def tokenize(args: str) -> SearchQuery:
    """
    Tokenize a raw search argument string.

    Each marker's value is split on whitespace into keywords (case kept).
    Repeated markers accumulate keywords in input order. Markers with only
    blank values are dropped.

    Raises:
        EmptyQuery: No field supplied any keyword
        MalformedCondition: Leading token is not "and" or "or"
    """
    if not args or not args.strip():
        raise EmptyQuery()

    preamble, values = split_markers(args)
    condition = Condition.parse(preamble)

    collected: dict[Field, list[str]] = {}
    for f, value in values:
        words = value.split()
        if words:
            collected.setdefault(f, []).extend(words)

    keywords: FieldKeywords = {f: tuple(collected[f]) for f in Field if f in collected}
    if not keywords:
        raise EmptyQuery()
    return SearchQuery(condition=condition, keywords=keywords)
