"""Presentation layer: sink contract and the HTML badge renderer."""

from majorpredictor.presentation.sink import CompositeSink, LoggingSink, PresentationSink
from majorpredictor.presentation.badges import HtmlBadgeRenderer, find_badge_insert_target

__all__ = [
    "PresentationSink",
    "LoggingSink",
    "CompositeSink",
    "HtmlBadgeRenderer",
    "find_badge_insert_target",
]
