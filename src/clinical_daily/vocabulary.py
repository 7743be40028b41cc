"""
Vocabulary tables.

Maps the canonical journal and publication-type enumerations to the tokens
PubMed understands in a query, and reconciles the free-text journal titles
and publication types found in fetched records back onto them.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class JournalName(str, Enum):
    """Journals tracked by the feed, by display name."""

    NEJM = "NEJM"
    JAMA = "JAMA"
    LANCET = "The Lancet"
    BMJ = "BMJ"
    NATURE_MED = "Nature Medicine"
    ANNALS = "Annals of Internal Medicine"
    JCO = "Journal of Clinical Oncology"


class PublicationType(str, Enum):
    """Publication types the user can restrict the search to."""

    CLINICAL_TRIAL = "Clinical Trial"
    RCT = "Randomized Controlled Trial"
    META_ANALYSIS = "Meta-Analysis"
    SYSTEMATIC_REVIEW = "Systematic Review"


ALL_JOURNALS: list[JournalName] = list(JournalName)
ALL_PUBLICATION_TYPES: list[PublicationType] = list(PublicationType)

# -- Query tokens (NLM journal abbreviations) -------------------------------
JOURNAL_QUERY_TOKENS: dict[JournalName, str] = {
    JournalName.NEJM: '"N Engl J Med"[Journal]',
    JournalName.JAMA: '"JAMA"[Journal]',
    JournalName.LANCET: '"Lancet"[Journal]',
    JournalName.BMJ: '"BMJ"[Journal]',
    JournalName.NATURE_MED: '"Nat Med"[Journal]',
    JournalName.ANNALS: '"Ann Intern Med"[Journal]',
    JournalName.JCO: '"J Clin Oncol"[Journal]',
}

PUBLICATION_TYPE_QUERY_TOKENS: dict[PublicationType, str] = {
    PublicationType.CLINICAL_TRIAL: '"Clinical Trial"[Publication Type]',
    PublicationType.RCT: '"Randomized Controlled Trial"[Publication Type]',
    PublicationType.META_ANALYSIS: '"Meta-Analysis"[Publication Type]',
    PublicationType.SYSTEMATIC_REVIEW: '"Systematic Review"[Publication Type]',
}

# -- Journal title reconciliation -------------------------------------------
# Tested top to bottom, first match wins. "exact" patterns guard short titles
# ("JAMA", "BMJ") that would otherwise match specialty spin-offs.
JOURNAL_TITLE_PATTERNS: list[tuple[str, str, JournalName]] = [
    ("contains", "New England", JournalName.NEJM),
    ("exact", "JAMA", JournalName.JAMA),
    ("contains", "Lancet", JournalName.LANCET),
    ("exact", "BMJ", JournalName.BMJ),
    ("contains", "Nature", JournalName.NATURE_MED),
    ("contains", "Annals", JournalName.ANNALS),
    ("contains", "Oncology", JournalName.JCO),
]

# -- Trial classification ---------------------------------------------------
TRIAL_KEYWORDS: frozenset[str] = frozenset(
    {
        "clinical trial",
        "randomized controlled trial",
        "meta-analysis",
        "systematic review",
    }
)


def reconcile_journal(raw_title: str) -> str:
    """Map a raw journal title onto its canonical name.

    Titles matching none of the patterns are returned unchanged.
    """
    for kind, pattern, canonical in JOURNAL_TITLE_PATTERNS:
        if kind == "exact" and raw_title == pattern:
            return canonical.value
        if kind == "contains" and pattern in raw_title:
            return canonical.value
    return raw_title


def is_trial_publication(publication_types: Iterable[str]) -> bool:
    """True if any publication-type token names a trial or evidence synthesis."""
    for token in publication_types:
        lower = token.lower()
        if any(keyword in lower for keyword in TRIAL_KEYWORDS):
            return True
    return False


def parse_publication_type(name: str | PublicationType) -> PublicationType | None:
    """Return the PublicationType for a display name, or None if unknown."""
    if isinstance(name, PublicationType):
        return name
    try:
        return PublicationType(name)
    except ValueError:
        return None


def parse_journal(name: str | JournalName) -> JournalName | None:
    """Return the JournalName for a display name, or None if unknown."""
    if isinstance(name, JournalName):
        return name
    try:
        return JournalName(name)
    except ValueError:
        return None
