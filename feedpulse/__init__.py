"""feedpulse - RSS/Atom ingestion with per-source health tracking."""

__version__ = "0.1.0"
