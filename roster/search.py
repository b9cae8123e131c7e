"""
Keyword search over a contact model, with fallback.

The query's condition picks the primary predicate. When the primary
predicate lists nothing, the alternative predicate is applied to the whole
collection instead:

    search n/John a/NUS       # contacts named John at NUS,
                              # else contacts named John or at NUS
    search or p/9123 t/vip    # contacts matching either keyword
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .predicates import KeywordPredicate, build_predicates
from .protocol import ContactModelProtocol
from .tokenizer import Condition, SearchQuery, tokenize

logger = logging.getLogger(__name__)

MESSAGE_CONTACTS_LISTED = "{count} contacts listed!"


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one search: how many contacts are listed and which pass listed them."""
    count: int
    primary: KeywordPredicate
    alternative: Optional[KeywordPredicate]
    fallback_used: bool = False

    @property
    def message(self) -> str:
        return MESSAGE_CONTACTS_LISTED.format(count=self.count)


def select_predicates(
    query: SearchQuery,
    default_condition: Condition = Condition.AND,
) -> tuple[KeywordPredicate, KeywordPredicate]:
    """
    Pick (primary, alternative) predicates for a tokenized query.

    "and" searches all-match first and falls back to any-match; "or" searches
    any-match first. No condition token means default_condition.
    """
    all_match, any_match = build_predicates(query.keywords)
    condition = query.condition or default_condition
    if condition is Condition.OR:
        return any_match, all_match
    return all_match, any_match


def execute_search(
    model: ContactModelProtocol,
    primary: KeywordPredicate,
    alternative: Optional[KeywordPredicate],
) -> tuple[int, bool]:
    """
    Filter the model with primary, falling back to alternative if nothing matched.

    The alternative is applied to the full collection, not to the primary's
    view. An empty final view is a normal result.

    Returns:
        (number of contacts listed, whether the alternative was used)
    """
    model.apply_filter(primary)
    fallback_used = False
    if alternative is not None and model.is_filtered_empty():
        logger.debug("No contacts for %s, falling back to %s",
                     primary.describe(), alternative.describe())
        model.apply_filter(alternative)
        fallback_used = True
    return len(model.filtered_contacts), fallback_used


def search(
    model: ContactModelProtocol,
    args: str,
    *,
    default_condition: Condition = Condition.AND,
    fallback: bool = True,
) -> SearchResult:
    """
    Tokenize, build predicates and search in one call.

    Raises:
        EmptyQuery: No field supplied any keyword
        MalformedCondition: Leading token is not "and" or "or"
    """
    query = tokenize(args)
    primary, alternative = select_predicates(query, default_condition)
    if not fallback:
        alternative = None
    count, fallback_used = execute_search(model, primary, alternative)
    return SearchResult(
        count=count,
        primary=primary,
        alternative=alternative,
        fallback_used=fallback_used,
    )
