"""Page ingestion."""

from majorpredictor.ingestion.page import PageLoader, parse_html, is_url

__all__ = ["PageLoader", "parse_html", "is_url"]
