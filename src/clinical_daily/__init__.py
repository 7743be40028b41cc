"""ClinicalDaily: recent high-impact clinical literature, normalized."""

__version__ = "0.1.0"
