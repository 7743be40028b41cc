"""Pytest configuration and fixtures."""

import asyncio
from xml.sax.saxutils import escape

import pytest

from clinical_daily.models.model_article import AISummary, Article


def _article_xml(
    pmid: str | None = "38000001",
    title: str | None = "Semaglutide and Cardiovascular Outcomes",
    journal: str | None = "The New England journal of medicine",
    year: str | None = "2024",
    month: str | None = "3",
    day: str | None = "7",
    abstract: list[tuple[str | None, str]] | None = None,
    authors: list[tuple[str, str]] | None = None,
    publication_types: list[str] | None = None,
    doi: str | None = "10.1056/NEJMoa2307563",
) -> str:
    """Render one PubmedArticle element shaped like real efetch output."""
    parts = ["<PubmedArticle><MedlineCitation>"]
    if pmid:
        parts.append(f'<PMID Version="1">{pmid}</PMID>')
    parts.append("<Article>")

    parts.append("<Journal>")
    date_parts = [
        f"<{tag}>{value}</{tag}>"
        for tag, value in (("Year", year), ("Month", month), ("Day", day))
        if value
    ]
    parts.append(f"<JournalIssue><PubDate>{''.join(date_parts)}</PubDate></JournalIssue>")
    if journal:
        parts.append(f"<Title>{escape(journal)}</Title>")
    parts.append("</Journal>")

    if title:
        parts.append(f"<ArticleTitle>{escape(title)}</ArticleTitle>")
    if doi:
        parts.append(f'<ELocationID EIdType="doi" ValidYN="Y">{doi}</ELocationID>')

    if abstract:
        parts.append("<Abstract>")
        for label, text in abstract:
            label_attr = f' Label="{label}"' if label else ""
            parts.append(f"<AbstractText{label_attr}>{escape(text)}</AbstractText>")
        parts.append("</Abstract>")

    if authors:
        parts.append('<AuthorList CompleteYN="Y">')
        for last, initials in authors:
            parts.append(
                f'<Author ValidYN="Y"><LastName>{last}</LastName>'
                f"<ForeName>{last}</ForeName><Initials>{initials}</Initials></Author>"
            )
        parts.append("</AuthorList>")

    parts.append("<PublicationTypeList>")
    for pub_type in publication_types or ["Journal Article"]:
        parts.append(f'<PublicationType UI="D000000">{pub_type}</PublicationType>')
    parts.append("</PublicationTypeList>")

    parts.append("</Article></MedlineCitation>")
    if pmid:
        parts.append(
            "<PubmedData><ArticleIdList>"
            f'<ArticleId IdType="pubmed">{pmid}</ArticleId>'
            "</ArticleIdList></PubmedData>"
        )
    parts.append("</PubmedArticle>")
    return "".join(parts)


def _document(*articles: str) -> str:
    return (
        '<?xml version="1.0" ?>\n'
        "<PubmedArticleSet>" + "".join(articles) + "</PubmedArticleSet>"
    )


@pytest.fixture
def article_xml():
    """Builder for a single PubmedArticle element."""
    return _article_xml


@pytest.fixture
def pubmed_document():
    """Wrap PubmedArticle elements in a PubmedArticleSet document."""
    return _document


@pytest.fixture
def sample_document() -> str:
    """Three-record efetch document covering the common shapes."""
    return _document(
        _article_xml(
            pmid="38000001",
            abstract=[
                ("Background", "GLP-1 agonists reduce weight."),
                ("Methods", "Randomized, double-blind trial."),
                ("Results", "MACE reduced by 20%."),
            ],
            authors=[("Lincoff", "AM"), ("Brown-Frandsen", "K"), ("Colhoun", "HM"), ("Deanfield", "J"), ("Emerson", "SS")],
            publication_types=["Journal Article", "Randomized Controlled Trial"],
        ),
        _article_xml(
            pmid="38000002",
            title="Long-term outcomes of a rare presentation",
            journal="BMJ case reports",
            year="2024",
            month="Feb",
            day=None,
            abstract=[(None, "A 54-year-old man presented with chest pain.")],
            authors=[("Patel", "R"), ("Nguyen", "T")],
            publication_types=["Case Reports"],
            doi=None,
        ),
        _article_xml(
            pmid="38000003",
            title="Statins for primary prevention: a meta-analysis",
            journal="Lancet (London, England)",
            year="2023",
            month="12",
            day="31",
            abstract=None,
            authors=None,
            publication_types=["Journal Article", "Meta-Analysis"],
        ),
    )


def make_article(**overrides) -> Article:
    fields = {
        "id": "1",
        "title": "A trial",
        "journal": "NEJM",
        "authors": ["Smith J"],
        "pub_date": "2024-01-01",
        "abstract": "Some abstract.",
        "doi_link": "https://doi.org/10.1/x",
        "is_trial": True,
    }
    fields.update(overrides)
    return Article(**fields)


@pytest.fixture
def article_factory():
    """Build an Article with sensible defaults; override any field by keyword."""
    return make_article


@pytest.fixture
def sample_summary() -> AISummary:
    return AISummary(
        research_design="Phase III, randomized, double-blind",
        study_population="17,604 adults with CVD and overweight",
        interventions="Semaglutide 2.4 mg weekly vs placebo",
        endpoints="Primary: composite MACE",
        results="HR 0.80 (95% CI 0.72-0.90), P<0.001",
    )


class FakePubMedClient:
    """Stands in for PubMedClient.

    ``results`` maps a substring of the search term (e.g. ``"last 7 days"``)
    to the PMIDs it returns; ``documents`` maps a PMID to its PubmedArticle
    XML. ``gates`` maps a term substring to an asyncio.Event the search
    waits on, to control completion order.
    """

    def __init__(self, results=None, documents=None, gates=None, search_error=None, fetch_error=None):
        self.results = results or {}
        self.documents = documents or {}
        self.gates = gates or {}
        self.search_error = search_error
        self.fetch_error = fetch_error
        self.terms: list[str] = []
        self.fetched: list[list[str]] = []

    async def search(self, term: str, max_results: int = 50) -> list[str]:
        self.terms.append(term)
        for key, gate in self.gates.items():
            if key in term:
                await gate.wait()
        if self.search_error:
            raise self.search_error
        for key, pmids in self.results.items():
            if key in term:
                return list(pmids)
        return []

    async def fetch_document(self, pmids: list[str]) -> str:
        self.fetched.append(list(pmids))
        if self.fetch_error:
            raise self.fetch_error
        return _document(*(self.documents[p] for p in pmids if p in self.documents))

    async def close(self) -> None:
        pass


@pytest.fixture
def fake_client_cls():
    return FakePubMedClient


class FakeSummarizer:
    """Async callable recording abstracts; returns or raises per call."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[str] = []
        self.release: asyncio.Event | None = None

    async def __call__(self, abstract: str) -> AISummary:
        self.calls.append(abstract)
        if self.release is not None:
            await self.release.wait()
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_summarizer_cls():
    return FakeSummarizer
