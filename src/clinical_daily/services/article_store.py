"""
In-memory article set plus per-article summary state.

The set is replaced wholesale by each fetch. Between fetches, the only
per-article write is filling the summary slot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel

from clinical_daily.models.model_article import AISummary, Article

logger = logging.getLogger(__name__)


class ArticleNotFoundError(KeyError):
    """Raised for an article id not in the current set."""

    def __init__(self, article_id: str):
        self.article_id = article_id
        super().__init__(article_id)

    def __str__(self) -> str:
        return f"Article {self.article_id} not found"


class SummaryInProgressError(Exception):
    """Raised when a summary is requested while one is already in flight."""

    def __init__(self, article_id: str):
        self.article_id = article_id
        super().__init__(f"Summary for article {article_id} is already in progress")


class SummaryState(BaseModel):
    """UI state of one article's summarize action."""

    loading: bool = False
    error: str | None = None


class ArticleStore:
    """Holds the current article set as an immutable tuple."""

    def __init__(self, articles: Iterable[Article] = ()):
        self._articles: tuple[Article, ...] = tuple(articles)
        self._states: dict[str, SummaryState] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        """Incremented on every replace; identifies the current set."""
        return self._generation

    @property
    def articles(self) -> tuple[Article, ...]:
        return self._articles

    def __len__(self) -> int:
        return len(self._articles)

    def __contains__(self, article_id: object) -> bool:
        return any(a.id == article_id for a in self._articles)

    def get(self, article_id: str) -> Article:
        for article in self._articles:
            if article.id == article_id:
                return article
        raise ArticleNotFoundError(article_id)

    def replace(self, articles: Iterable[Article]) -> None:
        """Swap in a new set; prior summaries and summary states are dropped."""
        self._articles = tuple(articles)
        self._states = {}
        self._generation += 1

    def set_summary(self, article_id: str, summary: AISummary) -> Article:
        """Fill one article's summary slot. Other articles are untouched."""
        updated = self.get(article_id).with_summary(summary)
        self._articles = tuple(
            updated if a.id == article_id else a for a in self._articles
        )
        return updated

    # -- Summary state -------------------------------------------------------

    def summary_state(self, article_id: str) -> SummaryState:
        return self._states.get(article_id, SummaryState())

    def can_summarize(self, article_id: str) -> bool:
        """False once a summary exists or while one is being generated."""
        article = self.get(article_id)
        return not article.has_summary and not self.summary_state(article_id).loading

    def mark_loading(self, article_id: str) -> None:
        self._states[article_id] = SummaryState(loading=True)

    def mark_failed(self, article_id: str, message: str) -> None:
        self._states[article_id] = SummaryState(loading=False, error=message)

    def mark_succeeded(self, article_id: str) -> None:
        self._states.pop(article_id, None)

    def clear_state(self, article_id: str) -> None:
        """Back to idle with no error, e.g. after a cancelled request."""
        self._states.pop(article_id, None)
