"""Data models for ClinicalDaily."""

from clinical_daily.models.model_article import AISummary, Article
from clinical_daily.models.model_raw_record import (
    RawAbstractSegment,
    RawAuthor,
    RawPubDate,
    RawRecord,
)

__all__ = [
    "AISummary",
    "Article",
    "RawAbstractSegment",
    "RawAuthor",
    "RawPubDate",
    "RawRecord",
]
