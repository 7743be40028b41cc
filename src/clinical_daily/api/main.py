"""FastAPI application."""

from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from clinical_daily import __version__
from clinical_daily.config import get_settings
from clinical_daily.models.model_article import AISummary, Article, SummaryAlreadyCachedError
from clinical_daily.services.article_feed import ArticleFeed
from clinical_daily.services.article_store import ArticleNotFoundError, SummaryInProgressError
from clinical_daily.services.filtering import SortOption
from clinical_daily.services.llm import SummaryError
from clinical_daily.utils.logging import configure_logging
from clinical_daily.vocabulary import ALL_JOURNALS, PublicationType

configure_logging(get_settings().log_level)

app = FastAPI(
    title="ClinicalDaily API",
    description="Recent clinical literature from high-impact journals",
    version=__version__,
)


class RefreshRequest(BaseModel):
    days: int = Field(default_factory=lambda: get_settings().default_days_window, gt=0)
    publication_types: list[PublicationType] = []


class RefreshResponse(BaseModel):
    status: str
    count: int
    error: str | None = None


class ArticleView(Article):
    can_summarize: bool
    summary_error: str | None = None


@lru_cache
def get_feed() -> ArticleFeed:
    """One feed per process; the article set lives for the process lifetime."""
    return ArticleFeed()


def _view(feed: ArticleFeed, article: Article) -> ArticleView:
    state = feed.store.summary_state(article.id)
    return ArticleView(
        **article.model_dump(),
        can_summarize=feed.store.can_summarize(article.id),
        summary_error=state.error,
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.post("/articles/refresh")
async def refresh_articles(
    request: RefreshRequest, feed: ArticleFeed = Depends(get_feed)
) -> RefreshResponse:
    """Refetch the article set. A failed fetch still answers 200 with an empty set."""
    outcome = await feed.refresh(request.days, request.publication_types)
    return RefreshResponse(
        status=outcome.status,
        count=len(outcome.articles),
        error=getattr(outcome, "error", None),
    )


@app.get("/articles")
async def list_articles(
    journal: list[str] | None = Query(default=None),
    q: str = "",
    sort: SortOption = SortOption.NEWEST,
    feed: ArticleFeed = Depends(get_feed),
) -> list[ArticleView]:
    """Filtered, sorted view of the current article set."""
    journals = journal if journal is not None else [j.value for j in ALL_JOURNALS]
    return [_view(feed, a) for a in feed.view(journals, q, sort)]


@app.post("/articles/{article_id}/summary")
async def summarize_article(
    article_id: str, feed: ArticleFeed = Depends(get_feed)
) -> AISummary:
    """Generate the summary for one article, once."""
    try:
        return await feed.summarize(article_id)
    except ArticleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (SummaryAlreadyCachedError, SummaryInProgressError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SummaryError as e:
        detail = feed.store.summary_state(article_id).error or str(e)
        raise HTTPException(status_code=502, detail=detail)
