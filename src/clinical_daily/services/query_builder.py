"""PubMed search expression for the tracked journals."""

from collections.abc import Iterable

from clinical_daily.vocabulary import (
    ALL_JOURNALS,
    ALL_PUBLICATION_TYPES,
    JOURNAL_QUERY_TOKENS,
    PUBLICATION_TYPE_QUERY_TOKENS,
    JournalName,
    PublicationType,
    parse_publication_type,
)


def journal_clause(journals: Iterable[JournalName] = ALL_JOURNALS) -> str:
    return " OR ".join(JOURNAL_QUERY_TOKENS[journal] for journal in journals)


def recency_clause(days: int) -> str:
    return f'"last {days} days"[dp]'


def publication_type_clause(
    publication_types: Iterable[str | PublicationType],
) -> str:
    """OR over the selected types; unknown names are dropped.

    An empty selection (or one with only unknown names) means every
    supported type, so the clause is never an empty disjunction.
    """
    selected: list[PublicationType] = []
    for name in publication_types:
        pub_type = parse_publication_type(name)
        if pub_type is not None and pub_type not in selected:
            selected.append(pub_type)
    if not selected:
        selected = ALL_PUBLICATION_TYPES
    return " OR ".join(PUBLICATION_TYPE_QUERY_TOKENS[t] for t in selected)


def build_query(
    days: int,
    publication_types: Iterable[str | PublicationType] = (),
    journals: Iterable[JournalName] = ALL_JOURNALS,
) -> str:
    """Build the esearch ``term`` for the tracked journals.

    Journal selection in the UI is applied after the fetch, so the journal
    clause always covers the full tracked set.

    Args:
        days: Recency window in days (positive; validated by callers).
        publication_types: Selected publication types, by enum or display name.
        journals: Tracked journals.

    Returns:
        ``(journals) AND (recency) AND (types)``.
    """
    return (
        f"({journal_clause(journals)})"
        f" AND ({recency_clause(days)})"
        f" AND ({publication_type_clause(publication_types)})"
    )
