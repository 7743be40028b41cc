"""
Fetch orchestration: query -> esearch -> efetch -> normalize.

``run_fetch`` reports success or failure explicitly. ``fetch_articles`` is
the boundary that collapses a failure into an empty list. ``ArticleFeed``
holds the session's article set and runs refreshes and summaries against it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Literal

from pydantic import BaseModel

from clinical_daily.constants import SUMMARY_FAILED_MESSAGE
from clinical_daily.data_sources.base_client import DataSourceError
from clinical_daily.data_sources.pubmed import PubMedClient
from clinical_daily.models.model_article import (
    AISummary,
    Article,
    SummaryAlreadyCachedError,
)
from clinical_daily.services.article_store import ArticleStore, SummaryInProgressError
from clinical_daily.services.filtering import SortOption, filter_and_sort
from clinical_daily.services.llm import request_summary
from clinical_daily.services.normalizer import normalize_document
from clinical_daily.services.query_builder import build_query
from clinical_daily.vocabulary import PublicationType

logger = logging.getLogger(__name__)

Summarizer = Callable[[str], Awaitable[AISummary]]


# ------------------------------------------------------------------
# Fetch outcome
# ------------------------------------------------------------------


class FetchSuccess(BaseModel):
    status: Literal["success"] = "success"
    articles: list[Article] = []
    sequence: int = 0


class FetchFailure(BaseModel):
    status: Literal["failure"] = "failure"
    error: str
    source: str | None = None
    status_code: int | None = None
    sequence: int = 0

    @property
    def articles(self) -> list[Article]:
        return []


FetchOutcome = FetchSuccess | FetchFailure


async def run_fetch(
    days: int,
    publication_types: Iterable[str | PublicationType],
    client: PubMedClient,
    sequence: int = 0,
) -> FetchOutcome:
    """One full fetch/normalize cycle. Transport failures become FetchFailure."""
    term = build_query(days, publication_types)
    logger.info("Fetching articles (seq=%d, days=%d)", sequence, days)
    try:
        pmids = await client.search(term)
        if not pmids:
            logger.info("No PMIDs found (seq=%d)", sequence)
            return FetchSuccess(sequence=sequence)
        xml_text = await client.fetch_document(pmids)
        articles = normalize_document(xml_text)
    except DataSourceError as e:
        logger.error("Fetch failed (seq=%d): %s", sequence, e)
        return FetchFailure(
            error=str(e),
            source=e.source,
            status_code=e.status_code,
            sequence=sequence,
        )
    except Exception as e:
        logger.exception("Unexpected fetch failure (seq=%d)", sequence)
        return FetchFailure(error=f"Unexpected error: {e}", sequence=sequence)

    logger.info(
        "Fetched %d articles from %d PMIDs (seq=%d)", len(articles), len(pmids), sequence
    )
    return FetchSuccess(articles=articles, sequence=sequence)


async def fetch_articles(
    days: int,
    publication_types: Iterable[str | PublicationType] = (),
    client: PubMedClient | None = None,
) -> list[Article]:
    """Fetch and normalize recent articles; an empty list on any failure."""
    if client is not None:
        outcome = await run_fetch(days, publication_types, client)
    else:
        async with PubMedClient() as owned_client:
            outcome = await run_fetch(days, publication_types, owned_client)
    return outcome.articles


# ------------------------------------------------------------------
# Session feed
# ------------------------------------------------------------------


class ArticleFeed:
    """The article set for one session, with refresh and summarize commands.

    Overlapping refreshes are sequenced: each refresh takes a number when it
    starts, and a result is applied only if no later refresh has already
    been applied. Summaries for different articles run independently.
    """

    def __init__(
        self,
        client: PubMedClient | None = None,
        summarizer: Summarizer = request_summary,
    ):
        self.store = ArticleStore()
        self._client = client
        self._summarizer = summarizer
        self._issued = 0
        self._applied = 0
        self._in_flight = 0
        self.last_outcome: FetchOutcome | None = None

    @property
    def articles(self) -> tuple[Article, ...]:
        return self.store.articles

    @property
    def is_refreshing(self) -> bool:
        return self._in_flight > 0

    async def _run(
        self, days: int, publication_types: list, sequence: int
    ) -> FetchOutcome:
        if self._client is not None:
            return await run_fetch(days, publication_types, self._client, sequence)
        async with PubMedClient() as client:
            return await run_fetch(days, publication_types, client, sequence)

    async def refresh(
        self,
        days: int,
        publication_types: Iterable[str | PublicationType] = (),
    ) -> FetchOutcome:
        """Refetch and replace the article set.

        A failed fetch empties the set, same as an empty result. A result
        overtaken by a newer, already applied refresh is discarded.
        """
        self._issued += 1
        sequence = self._issued
        self._in_flight += 1
        try:
            outcome = await self._run(days, list(publication_types), sequence)
        finally:
            self._in_flight -= 1

        if sequence < self._applied:
            logger.info(
                "Discarding stale fetch result (seq=%d, applied=%d)",
                sequence,
                self._applied,
            )
            return outcome

        self._applied = sequence
        self.store.replace(outcome.articles)
        self.last_outcome = outcome
        return outcome

    def view(
        self,
        selected_journals: Iterable[str],
        search_text: str = "",
        sort: SortOption | str = SortOption.NEWEST,
    ) -> list[Article]:
        return filter_and_sort(self.store.articles, selected_journals, search_text, sort)

    async def summarize(self, article_id: str) -> AISummary:
        """Generate and cache a summary for one article.

        Raises:
            ArticleNotFoundError: unknown id.
            SummaryAlreadyCachedError: the article already has a summary.
            SummaryInProgressError: a summary is already being generated.
            SummaryError: the summarizer failed; the article keeps no summary
                and its state carries a retryable error message.
        """
        article = self.store.get(article_id)
        if article.has_summary:
            raise SummaryAlreadyCachedError(article_id)
        if self.store.summary_state(article_id).loading:
            raise SummaryInProgressError(article_id)

        generation = self.store.generation
        self.store.mark_loading(article_id)
        try:
            summary = await self._summarizer(article.abstract)
        except Exception as e:
            logger.warning("Summary failed for article %s: %s", article_id, e)
            if self.store.generation == generation:
                self.store.mark_failed(article_id, SUMMARY_FAILED_MESSAGE)
            raise
        except asyncio.CancelledError:
            logger.info("Summary cancelled for article %s", article_id)
            if self.store.generation == generation:
                self.store.clear_state(article_id)
            raise

        if self.store.generation != generation:
            # The set was replaced while the request was in flight
            logger.info("Dropping summary for replaced article %s", article_id)
            return summary

        self.store.set_summary(article_id, summary)
        self.store.mark_succeeded(article_id)
        return summary
