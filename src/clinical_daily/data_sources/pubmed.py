"""
PubMed E-utilities client.

Two methods, called in sequence by the article feed:
  1. search         : Find PMIDs matching a query, newest first
  2. fetch_document : Fetch the PubmedArticleSet XML for those PMIDs in one batch
"""

from __future__ import annotations

from typing import Any

from clinical_daily.config import get_settings
from clinical_daily.constants import (
    PUBMED_FETCH_URL,
    PUBMED_MAX_RESULTS,
    PUBMED_SEARCH_URL,
)
from clinical_daily.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    DataSourceError,
    RequestContext,
)

EMPTY_ARTICLE_SET = "<PubmedArticleSet></PubmedArticleSet>"


class PubMedClient(BaseClient):
    """Client for querying PubMed/NCBI APIs."""

    SEARCH_URL = PUBMED_SEARCH_URL
    FETCH_URL = PUBMED_FETCH_URL

    def __init__(
        self, config: ClientConfig | None = None, max_retries: int | None = None
    ) -> None:
        super().__init__(config=config, max_retries=max_retries)
        settings = get_settings()
        self.api_key = settings.ncbi_api_key
        self.tool = settings.ncbi_tool
        self.email = settings.ncbi_email

    @property
    def _source_name(self) -> str:
        return "pubmed"

    def _base_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"db": "pubmed"}
        if self.api_key:
            params["api_key"] = self.api_key
        if self.tool:
            params["tool"] = self.tool
        if self.email:
            params["email"] = self.email
        return params

    async def search(self, term: str, max_results: int = PUBMED_MAX_RESULTS) -> list[str]:
        """Search PubMed and return PMIDs, newest first.

        An absent or empty id list is a valid zero-result answer.
        """
        params = {
            **self._base_params(),
            "term": term,
            "retmode": "json",
            "retmax": max_results,
            "sort": "date",
        }
        data = await self._rest_get(
            self.SEARCH_URL,
            params,
            context=RequestContext(source=self._source_name, method="search"),
        )

        result = data.get("esearchresult") or {}
        if not isinstance(result, dict):
            raise DataSourceError(self._source_name, "Malformed esearchresult")
        pmids = result.get("idlist") or []
        if not isinstance(pmids, list):
            raise DataSourceError(self._source_name, "Malformed idlist")
        return [str(pmid) for pmid in pmids]

    async def fetch_document(self, pmids: list[str]) -> str:
        """Fetch the PubmedArticleSet XML for all PMIDs in a single request.

        Record order in the document is not guaranteed to match ``pmids``.
        """
        if not pmids:
            return EMPTY_ARTICLE_SET

        params = {
            **self._base_params(),
            "id": ",".join(pmids),
            "retmode": "xml",
        }
        return await self._rest_get_xml(
            self.FETCH_URL,
            params,
            context=RequestContext(
                source=self._source_name,
                method="fetch_document",
                params={"count": len(pmids)},
            ),
        )
