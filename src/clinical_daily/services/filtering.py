"""Client-side filter and sort over the fetched article set."""

from collections.abc import Iterable
from enum import Enum

from clinical_daily.models.model_article import Article


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


def matches(article: Article, journals: set[str], search_text: str) -> bool:
    """Journal membership AND case-insensitive text match on title or abstract."""
    if article.journal not in journals:
        return False
    if not search_text:
        return True
    needle = search_text.lower()
    return needle in article.title.lower() or needle in article.abstract.lower()


def filter_and_sort(
    articles: Iterable[Article],
    selected_journals: Iterable[str],
    search_text: str = "",
    sort: SortOption | str = SortOption.NEWEST,
) -> list[Article]:
    """Return the articles to display, in display order.

    ``pub_date`` is zero-padded YYYY-MM-DD, so string order is date order.
    The sort is stable: articles with equal dates keep their fetched order.
    The input is never modified.
    """
    journals = {j.value if isinstance(j, Enum) else j for j in selected_journals}
    sort = SortOption(sort)
    result = [a for a in articles if matches(a, journals, search_text)]
    return sorted(
        result, key=lambda a: a.pub_date, reverse=sort is SortOption.NEWEST
    )
