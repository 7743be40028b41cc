"""
Pydantic models for normalized articles.

These are the data contracts between the normalizer and everything that
displays, filters or summarizes articles. Nothing downstream sees raw
PubMed XML.
"""

from pydantic import BaseModel, ConfigDict, Field


class SummaryAlreadyCachedError(Exception):
    """Raised when a summary is written to an article that already has one."""

    def __init__(self, article_id: str):
        self.article_id = article_id
        super().__init__(f"Article {article_id} already has a cached summary")


class AISummary(BaseModel):
    """Five-part clinical synopsis of a trial abstract."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    research_design: str = Field(min_length=1, alias="researchDesign")
    study_population: str = Field(min_length=1, alias="studyPopulation")
    interventions: str = Field(min_length=1)
    endpoints: str = Field(min_length=1)
    results: str = Field(min_length=1)


class Article(BaseModel):
    """A single normalized article ready for display.

    Immutable apart from the summary slot, which is filled at most once
    through ``with_summary``.
    """

    model_config = ConfigDict(frozen=True)

    id: str  # PMID when available, otherwise a generated uuid
    title: str
    journal: str  # canonical JournalName value, or the raw title if unknown
    authors: list[str]  # "Last Initials", at most 3 plus "et al."
    pub_date: str  # YYYY-MM-DD, zero-padded
    abstract: str
    doi_link: str
    is_trial: bool = False
    cached_summary: AISummary | None = None

    @property
    def has_summary(self) -> bool:
        return self.cached_summary is not None

    def with_summary(self, summary: AISummary) -> "Article":
        """Return a copy of this article with the summary slot filled."""
        if self.cached_summary is not None:
            raise SummaryAlreadyCachedError(self.id)
        return self.model_copy(update={"cached_summary": summary})
