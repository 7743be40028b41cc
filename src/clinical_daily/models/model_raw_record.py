"""
Raw PubMed record models.

One ``RawRecord`` per ``PubmedArticle`` element, holding exactly what the XML
reported. Every scalar is optional so the normalizer decides each fallback
explicitly instead of tripping over a missing element.
"""

from pydantic import BaseModel


class RawAbstractSegment(BaseModel):
    """One ``AbstractText`` element."""

    label: str | None = None  # e.g. "BACKGROUND", absent for unstructured abstracts
    text: str = ""


class RawAuthor(BaseModel):
    """One ``Author`` element."""

    last_name: str | None = None
    initials: str | None = None
    collective_name: str | None = None  # group authors, e.g. "RECOVERY Collaborative Group"


class RawPubDate(BaseModel):
    """``Journal/JournalIssue/PubDate`` sub-fields, as reported."""

    year: str | None = None
    month: str | None = None  # "3", "03" or "Mar"
    day: str | None = None
    medline_date: str | None = None  # free text such as "2024 Jan-Feb"


class RawRecord(BaseModel):
    """A single ``PubmedArticle`` that has an ``Article`` container."""

    pmid: str | None = None
    title: str | None = None
    journal_title: str | None = None
    abstract_segments: list[RawAbstractSegment] = []
    authors: list[RawAuthor] = []
    pub_date: RawPubDate = RawPubDate()
    doi: str | None = None
    publication_types: list[str] = []
