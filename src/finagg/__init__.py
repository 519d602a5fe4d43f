"""Bank transaction aggregation service: CSV and API ingestion with keyword categorization."""

__version__ = "0.1.0"
