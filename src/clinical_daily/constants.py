"""Project-wide constants."""

# -- Base client defaults ---------------------------------------------------
DEFAULT_TIMEOUT: float = 30.0
DEFAULT_MAX_RETRIES: int = 3

# -- PubMed / NCBI ----------------------------------------------------------
NCBI_BASE_URL: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
PUBMED_SEARCH_URL: str = f"{NCBI_BASE_URL}/esearch.fcgi"
PUBMED_FETCH_URL: str = f"{NCBI_BASE_URL}/efetch.fcgi"
PUBMED_HOME_URL: str = "https://pubmed.ncbi.nlm.nih.gov/"
PUBMED_ARTICLE_URL: str = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"
DOI_RESOLVER_URL: str = "https://doi.org/{doi}"
PUBMED_MAX_RESULTS: int = 50

# -- Normalization fallbacks ------------------------------------------------
UNTITLED: str = "Untitled"
NO_ABSTRACT: str = "No abstract available."
UNKNOWN_AUTHORS: str = "Unknown Authors"
ET_AL: str = "et al."
MAX_DISPLAY_AUTHORS: int = 3
DEFAULT_MONTH: str = "01"
DEFAULT_DAY: str = "01"

# -- Recency windows offered to the user (label, days) ----------------------
DATE_RANGES: list[tuple[str, int]] = [
    ("Last 7 Days", 7),
    ("Last 14 Days", 14),
    ("Last 30 Days", 30),
]
DEFAULT_DAYS_WINDOW: int = 14

# -- Summarization ----------------------------------------------------------
SUMMARY_FAILED_MESSAGE: str = "Failed to generate summary. Please try again."
