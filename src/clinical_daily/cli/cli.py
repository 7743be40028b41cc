"""Command-line interface for ClinicalDaily."""

import asyncio
import json

import click

from clinical_daily.config import get_settings
from clinical_daily.constants import DATE_RANGES
from clinical_daily.services.article_feed import ArticleFeed, FetchFailure
from clinical_daily.services.filtering import SortOption
from clinical_daily.services.llm import SummaryError
from clinical_daily.utils.logging import configure_logging
from clinical_daily.vocabulary import ALL_JOURNALS, ALL_PUBLICATION_TYPES

JOURNAL_CHOICES = [j.value for j in ALL_JOURNALS]
TYPE_CHOICES = [t.value for t in ALL_PUBLICATION_TYPES]


def _echo_article(index: int, article) -> None:
    badge = " [Clinical Trial]" if article.is_trial else ""
    click.echo(f"{index}. {article.title}")
    click.echo(f"   {article.journal} | {article.pub_date}{badge}")
    click.echo(f"   {', '.join(article.authors)}")
    click.echo(f"   {article.doi_link}")


def _echo_summary(summary) -> None:
    click.echo(f"  Research design:  {summary.research_design}")
    click.echo(f"  Study population: {summary.study_population}")
    click.echo(f"  Interventions:    {summary.interventions}")
    click.echo(f"  Endpoints:        {summary.endpoints}")
    click.echo(f"  Results:          {summary.results}")


@click.group()
@click.version_option(package_name="clinical-daily")
def main():
    """ClinicalDaily: the latest trials from high-impact journals."""
    configure_logging(get_settings().log_level)


@main.command()
def ranges():
    """List the preset recency windows."""
    for label, days in DATE_RANGES:
        click.echo(f"{days:>3}  {label}")


@main.command()
@click.option(
    "-d",
    "--days",
    type=click.IntRange(min=1),
    default=lambda: get_settings().default_days_window,
    show_default="from settings",
    help="Recency window in days",
)
@click.option(
    "-t",
    "--type",
    "pub_types",
    multiple=True,
    type=click.Choice(TYPE_CHOICES),
    help="Publication type to search for (repeatable; default all)",
)
@click.option(
    "-j",
    "--journal",
    "journals",
    multiple=True,
    type=click.Choice(JOURNAL_CHOICES),
    help="Journal to display (repeatable; default all)",
)
@click.option("-s", "--search", "search_text", default="", help="Filter by title/abstract text")
@click.option(
    "--sort",
    type=click.Choice([s.value for s in SortOption]),
    default=SortOption.NEWEST.value,
    show_default=True,
)
@click.option("--json", "as_json", is_flag=True, help="Print articles as JSON")
def fetch(days, pub_types, journals, search_text, sort, as_json):
    """Fetch recent articles and print the filtered list."""
    feed = ArticleFeed()
    outcome = asyncio.run(feed.refresh(days, list(pub_types)))
    if isinstance(outcome, FetchFailure):
        click.echo(f"Warning: fetch failed ({outcome.error})", err=True)

    articles = feed.view(journals or JOURNAL_CHOICES, search_text, sort)

    if as_json:
        click.echo(json.dumps([a.model_dump() for a in articles], indent=2))
        return

    if not articles:
        click.echo("No articles found")
        return

    click.echo(f"{len(articles)} Articles")
    for i, article in enumerate(articles, 1):
        _echo_article(i, article)


@main.command()
@click.option("-d", "--days", type=click.IntRange(min=1), default=30, show_default=True)
@click.option("-p", "--pmid", required=True, help="PMID of the article to summarize")
def summarize(days, pmid):
    """Fetch recent articles and summarize one of them."""

    async def _run():
        feed = ArticleFeed()
        await feed.refresh(days)
        if pmid not in feed.store:
            raise click.ClickException(f"Article {pmid} not in the last {days} days")
        article = feed.store.get(pmid)
        _echo_article(1, article)
        try:
            summary = await feed.summarize(pmid)
        except SummaryError as e:
            raise click.ClickException(f"{feed.store.summary_state(pmid).error} ({e})")
        _echo_summary(summary)

    asyncio.run(_run())


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host, port):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("clinical_daily.api.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
