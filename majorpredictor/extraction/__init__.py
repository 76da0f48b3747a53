"""Match extraction from bracket pages."""

from majorpredictor.extraction.rules import ExtractionRules, load_known_teams
from majorpredictor.extraction.extractor import PageExtractor

__all__ = ["ExtractionRules", "load_known_teams", "PageExtractor"]
