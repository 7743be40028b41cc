"""
Record normalizer: PubmedArticleSet XML -> Article.

Two passes. ``parse_document`` walks the XML into ``RawRecord`` objects,
keeping only what each element actually reported. ``normalize_record`` is a
total function from ``RawRecord`` to ``Article`` in which every fallback is
an explicit branch.
"""

from __future__ import annotations

import logging
import re
import uuid
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import date

from clinical_daily.constants import (
    DEFAULT_DAY,
    DEFAULT_MONTH,
    DOI_RESOLVER_URL,
    ET_AL,
    MAX_DISPLAY_AUTHORS,
    NO_ABSTRACT,
    PUBMED_ARTICLE_URL,
    PUBMED_HOME_URL,
    UNKNOWN_AUTHORS,
    UNTITLED,
)
from clinical_daily.data_sources.base_client import DataSourceError
from clinical_daily.models.model_article import Article
from clinical_daily.models.model_raw_record import (
    RawAbstractSegment,
    RawAuthor,
    RawPubDate,
    RawRecord,
)
from clinical_daily.vocabulary import is_trial_publication, reconcile_journal

logger = logging.getLogger(__name__)

_YEAR_RE = re.compile(r"\b(\d{4})\b")


# ------------------------------------------------------------------
# XML -> RawRecord
# ------------------------------------------------------------------


def _text(elem: ET.Element | None) -> str | None:
    """Full text of an element including inline markup, stripped; None if empty."""
    if elem is None:
        return None
    text = "".join(elem.itertext()).strip()
    return text or None


def _find_text(elem: ET.Element, path: str) -> str | None:
    return _text(elem.find(path))


def _parse_author(author_elem: ET.Element) -> RawAuthor:
    return RawAuthor(
        last_name=_find_text(author_elem, "LastName"),
        initials=_find_text(author_elem, "Initials"),
        collective_name=_find_text(author_elem, "CollectiveName"),
    )


def _parse_pub_date(article_elem: ET.Element) -> RawPubDate:
    pub_date_elem = article_elem.find("Journal/JournalIssue/PubDate")
    if pub_date_elem is None:
        return RawPubDate()
    return RawPubDate(
        year=_find_text(pub_date_elem, "Year"),
        month=_find_text(pub_date_elem, "Month"),
        day=_find_text(pub_date_elem, "Day"),
        medline_date=_find_text(pub_date_elem, "MedlineDate"),
    )


def _parse_doi(record_elem: ET.Element, article_elem: ET.Element) -> str | None:
    # ELocationID is the publisher-supplied DOI; ArticleIdList is PubMed's copy
    for elem in article_elem.findall("ELocationID"):
        if elem.get("EIdType") == "doi" and _text(elem):
            return _text(elem)
    for elem in record_elem.findall(".//ArticleIdList/ArticleId"):
        if elem.get("IdType") == "doi" and _text(elem):
            return _text(elem)
    return None


def parse_record(record_elem: ET.Element) -> RawRecord | None:
    """Read one ``PubmedArticle`` element.

    Returns None when the record has no ``Article`` container, which is the
    only case in which a record is dropped.
    """
    article_elem = record_elem.find(".//Article")
    if article_elem is None:
        return None

    pmid = _find_text(record_elem, "MedlineCitation/PMID") or _find_text(
        record_elem, ".//PMID"
    )

    return RawRecord(
        pmid=pmid,
        title=_find_text(article_elem, "ArticleTitle"),
        journal_title=_find_text(article_elem, "Journal/Title"),
        abstract_segments=[
            RawAbstractSegment(label=elem.get("Label"), text=_text(elem) or "")
            for elem in article_elem.findall(".//AbstractText")
        ],
        authors=[_parse_author(a) for a in article_elem.findall(".//Author")],
        pub_date=_parse_pub_date(article_elem),
        doi=_parse_doi(record_elem, article_elem),
        publication_types=[
            text
            for text in (_text(pt) for pt in record_elem.findall(".//PublicationType"))
            if text
        ],
    )


def parse_document(xml_text: str) -> list[RawRecord]:
    """Parse a PubmedArticleSet document into raw records, in document order."""
    try:
        # bytes, so an encoding declaration in the prolog is accepted
        root = ET.fromstring(xml_text.encode("utf-8"))
    except ET.ParseError as e:
        raise DataSourceError("pubmed", f"Failed to parse XML: {e}")

    records: list[RawRecord] = []
    for record_elem in root.iter("PubmedArticle"):
        raw = parse_record(record_elem)
        if raw is None:
            logger.debug(
                "Skipping PubmedArticle without Article element (pmid=%s)",
                _find_text(record_elem, ".//PMID"),
            )
            continue
        records.append(raw)
    return records


# ------------------------------------------------------------------
# RawRecord -> Article field rules
# ------------------------------------------------------------------


def normalize_title(title: str | None) -> str:
    if title is None or not title.strip():
        return UNTITLED
    return title.strip()


def normalize_abstract(segments: list[RawAbstractSegment]) -> str:
    """Join abstract segments.

    A single segment is returned verbatim, label and all dropped, so that
    unstructured abstracts stay a single quoted paragraph. Several segments
    become ``LABEL: text`` paragraphs separated by a blank line.
    """
    non_empty = [s for s in segments if s.text.strip()]
    if not non_empty:
        return NO_ABSTRACT
    if len(non_empty) == 1:
        return non_empty[0].text

    paragraphs = []
    for segment in non_empty:
        text = segment.text.strip()
        if segment.label:
            paragraphs.append(f"{segment.label.upper()}: {text}")
        else:
            paragraphs.append(text)
    return "\n\n".join(paragraphs)


def _author_display(author: RawAuthor) -> str:
    last = author.last_name or ""
    if not last and not author.initials and author.collective_name:
        return author.collective_name
    return f"{last} {author.initials or ''}"


def normalize_authors(authors: list[RawAuthor]) -> list[str]:
    """First three authors as "Last Initials", plus "et al." if there were more."""
    if not authors:
        return [UNKNOWN_AUTHORS]
    rendered = [_author_display(a) for a in authors[:MAX_DISPLAY_AUTHORS]]
    if len(authors) > MAX_DISPLAY_AUTHORS:
        rendered.append(ET_AL)
    return rendered


def _pad(part: str) -> str:
    # Textual months ("Mar") are left as-is
    if len(part) == 1 and part.isdigit():
        return f"0{part}"
    return part


def normalize_pub_date(pub_date: RawPubDate, today: date | None = None) -> str:
    """Build ``YYYY-MM-DD``; each part defaults independently.

    Year falls back to the leading year of a ``MedlineDate`` and then to the
    current year; month and day fall back to "01".
    """
    year = pub_date.year
    if not year and pub_date.medline_date:
        match = _YEAR_RE.search(pub_date.medline_date)
        year = match.group(1) if match else None
    if not year:
        year = str((today or date.today()).year)

    month = _pad(pub_date.month or DEFAULT_MONTH)
    day = _pad(pub_date.day or DEFAULT_DAY)
    return f"{year}-{month}-{day}"


def normalize_link(doi: str | None, pmid: str | None) -> str:
    if doi:
        return DOI_RESOLVER_URL.format(doi=doi)
    if pmid:
        return PUBMED_ARTICLE_URL.format(pmid=pmid)
    return PUBMED_HOME_URL


def normalize_record(
    raw: RawRecord, today: date | None = None, article_id: str | None = None
) -> Article:
    """Build a fully populated Article from a raw record. Never raises."""
    return Article(
        id=article_id or raw.pmid or uuid.uuid4().hex,
        title=normalize_title(raw.title),
        journal=reconcile_journal(raw.journal_title or ""),
        authors=normalize_authors(raw.authors),
        pub_date=normalize_pub_date(raw.pub_date, today=today),
        abstract=normalize_abstract(raw.abstract_segments),
        doi_link=normalize_link(raw.doi, raw.pmid),
        is_trial=is_trial_publication(raw.publication_types),
    )


def normalize_records(
    records: Iterable[RawRecord], today: date | None = None
) -> list[Article]:
    """Normalize a batch, keeping ids unique.

    The PMID is used as the article id; a record without one, or whose PMID
    was already used in this batch, gets a fresh uuid.
    """
    articles: list[Article] = []
    seen: set[str] = set()
    for raw in records:
        article_id = raw.pmid if raw.pmid and raw.pmid not in seen else uuid.uuid4().hex
        seen.add(article_id)
        articles.append(normalize_record(raw, today=today, article_id=article_id))
    return articles


def normalize_document(xml_text: str, today: date | None = None) -> list[Article]:
    """Parse and normalize a PubmedArticleSet document."""
    records = parse_document(xml_text)
    articles = normalize_records(records, today=today)
    logger.debug("Normalized %d articles", len(articles))
    return articles
