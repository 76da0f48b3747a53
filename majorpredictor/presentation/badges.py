"""Renders prediction badges, tooltips and the control panel into a page.

Every node this module adds carries an ``mp-`` id or class so the
extractor can tell injected markup from the page's own.
"""

from pathlib import Path
from typing import Dict, Iterable, Optional
import logging

from bs4 import BeautifulSoup, Tag

from majorpredictor.constants import BADGE_TARGET_SELECTORS
from majorpredictor.presentation.sink import PresentationSink
from majorpredictor.schema import (
    PASS_ALL_DONE,
    PASS_BUSY,
    PASS_ERROR,
    PASS_SCANNING,
    STATE_ERROR,
    STATE_LOADING,
    MatchDescriptor,
    MatchState,
    PassStatus,
    PredictionResult,
)

logger = logging.getLogger(__name__)

STYLE_ID = "major-predictor-styles"
CONTROL_PANEL_ID = "mp-control-panel"
CARDS_CONTAINER_ID = "mp-predictions-container"
MAX_TOOLTIP_FACTORS = 3
CARD_ANALYSIS_CHARS = 150

RISK_COLORS = {"high": "#f87171", "medium": "#fbbf24", "low": "#4ade80"}

BADGE_CSS = """
.mp-prediction-badge { display: inline-flex; align-items: center; gap: 6px; padding: 4px 10px;
  border-radius: 6px; font-size: 12px; font-weight: 600; margin-left: 8px; cursor: pointer;
  position: relative; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; }
.mp-prediction-badge.team1 { background: linear-gradient(135deg, #4ade80 0%, #22c55e 100%); color: #052e16; }
.mp-prediction-badge.team2 { background: linear-gradient(135deg, #60a5fa 0%, #3b82f6 100%); color: #1e3a5f; }
.mp-prediction-badge.uncertain { background: linear-gradient(135deg, #fbbf24 0%, #f59e0b 100%); color: #451a03; }
.mp-prediction-badge.loading { background: linear-gradient(135deg, #94a3b8 0%, #64748b 100%); color: #f1f5f9;
  animation: mp-pulse 1.5s ease-in-out infinite; }
.mp-prediction-badge.error { background: linear-gradient(135deg, #f87171 0%, #ef4444 100%); color: #450a0a; }
@keyframes mp-pulse { 0%, 100% { opacity: 1; } 50% { opacity: 0.6; } }
.mp-confidence { font-size: 10px; opacity: 0.9; background: rgba(0, 0, 0, 0.2); padding: 2px 6px; border-radius: 4px; }
.mp-tooltip { position: absolute; bottom: calc(100% + 8px); left: 50%; transform: translateX(-50%);
  background: #1e293b; color: #f8fafc; padding: 12px 16px; border-radius: 8px; font-size: 12px;
  font-weight: 400; min-width: 280px; max-width: 350px; z-index: 10000; opacity: 0; visibility: hidden;
  text-align: left; line-height: 1.5; }
.mp-prediction-badge:hover .mp-tooltip { opacity: 1; visibility: visible; }
.mp-tooltip-header { font-weight: 600; font-size: 14px; margin-bottom: 8px; padding-bottom: 8px;
  border-bottom: 1px solid rgba(255, 255, 255, 0.1); }
.mp-tooltip-section { margin-bottom: 8px; }
.mp-tooltip-label { font-size: 10px; text-transform: uppercase; letter-spacing: 0.5px; color: #94a3b8; margin-bottom: 4px; }
.mp-tooltip-factors { list-style: none; padding: 0; margin: 0; }
#mp-control-panel { position: fixed; bottom: 20px; right: 20px; z-index: 10001; background: #1a1a2e;
  color: #f8fafc; padding: 10px 14px; border-radius: 8px; font-size: 12px; font-family: sans-serif; }
#mp-predictions-container { position: fixed; top: 80px; right: 20px; z-index: 10000; max-height: 70vh;
  overflow-y: auto; width: 300px; }
.mp-prediction-card { background: #1a1a2e; color: #f8fafc; padding: 12px; border-radius: 8px; margin-bottom: 8px; }
"""


def badge_class(result: PredictionResult) -> str:
    """Colour class; a winner naming neither team reads as uncertain."""
    if result.predicted_winner == result.team1:
        return "team1"
    if result.predicted_winner == result.team2:
        return "team2"
    return "uncertain"


def find_badge_insert_target(container: Tag) -> Tag:
    for selector in BADGE_TARGET_SELECTORS:
        for element in container.select(selector):
            classes = element.get("class") or []
            if isinstance(classes, str):
                classes = classes.split()
            if not any(cls.startswith("mp-") for cls in classes):
                return element
    return container


class HtmlBadgeRenderer(PresentationSink):
    """Presentation sink that edits a parsed page in place."""

    def __init__(self, document: BeautifulSoup, show_confidence: bool = True):
        self.document = document
        self.show_confidence = show_confidence
        self.states: Dict[str, MatchState] = {}
        self._descriptors: Dict[str, MatchDescriptor] = {}
        self._card_ids = set()
        self.pass_status: Optional[PassStatus] = None

    def attach(self, descriptors: Iterable[MatchDescriptor], as_cards: bool = False) -> None:
        """Register matches so later state changes know where to render."""
        for descriptor in descriptors:
            self._descriptors[descriptor.id] = descriptor
            if as_cards or descriptor.source_element is None:
                self._card_ids.add(descriptor.id)

    # ------------------------------------------------------------------
    # Sink callbacks
    # ------------------------------------------------------------------

    def on_match_state_changed(self, match_id: str, state: MatchState) -> None:
        self.states[match_id] = state
        descriptor = self._descriptors.get(match_id)
        if descriptor is None:
            logger.debug(f"No page element registered for {match_id}")
            return
        self._ensure_styles()
        if match_id in self._card_ids:
            self._render_card(descriptor, state)
        else:
            self._render_badge(descriptor, state)

    def on_pass_status(self, status: PassStatus) -> None:
        self.pass_status = status
        self._ensure_styles()
        panel = self.document.find(id=CONTROL_PANEL_ID)
        if panel is None:
            panel = self.document.new_tag("div", id=CONTROL_PANEL_ID)
            self._body().append(panel)
        panel.clear()
        title = self.document.new_tag("strong")
        title.string = "Major Predictor"
        status_el = self.document.new_tag("div", attrs={"class": "mp-status"})
        status_el.string = self.status_text(status)
        panel.append(title)
        panel.append(status_el)

    @staticmethod
    def status_text(status: PassStatus) -> str:
        if status.kind == PASS_SCANNING:
            return "Scanning page..."
        if status.kind == PASS_BUSY:
            return f"Predicting {status.label}..." if status.label else "Predicting..."
        if status.kind == PASS_ERROR:
            return f"Error: {status.label}" if status.label else "Error"
        if status.kind == PASS_ALL_DONE:
            return "All rounds predicted"
        if status.label:
            return f"Ready: predict {status.label}"
        return "Ready"

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> str:
        return str(self.document)

    def save(self, path: str) -> Path:
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(self.render(), encoding="utf-8")
        logger.info(f"Wrote annotated page to {output}")
        return output

    # ------------------------------------------------------------------
    # Markup
    # ------------------------------------------------------------------

    def _ensure_styles(self) -> None:
        if self.document.find(id=STYLE_ID) is not None:
            return
        head = self.document.head
        if head is None:
            head = self.document.new_tag("head")
            html = self.document.html
            if html is not None:
                html.insert(0, head)
            else:
                self.document.insert(0, head)
        style = self.document.new_tag("style", id=STYLE_ID)
        style.string = BADGE_CSS
        head.append(style)

    def _body(self) -> Tag:
        body = self.document.body
        if body is None:
            body = self.document.new_tag("body")
            html = self.document.html
            (html if html is not None else self.document).append(body)
        return body

    def _span(self, text: str, css_class: Optional[str] = None) -> Tag:
        attrs = {"class": css_class} if css_class else {}
        span = self.document.new_tag("span", attrs=attrs)
        span.string = text
        return span

    def _div(self, css_class: Optional[str] = None, text: Optional[str] = None, **attrs) -> Tag:
        if css_class:
            attrs["class"] = css_class
        div = self.document.new_tag("div", attrs=attrs)
        if text is not None:
            div.string = text
        return div

    def _render_badge(self, descriptor: MatchDescriptor, state: MatchState) -> None:
        badge_id = f"mp-badge-{descriptor.id}"
        existing = self.document.find(id=badge_id)
        if existing is not None:
            existing.decompose()

        if state.kind == STATE_LOADING:
            css = "loading"
        elif state.kind == STATE_ERROR:
            css = "error"
        else:
            css = badge_class(state.result)

        badge = self.document.new_tag("span", id=badge_id, attrs={"class": f"mp-prediction-badge {css}"})
        if state.kind == STATE_LOADING:
            badge.append(self._span("⏳"))
            badge.append(self._span("Analyzing..."))
        elif state.kind == STATE_ERROR:
            badge.append(self._span("❌"))
            badge.append(self._span("Error"))
            tooltip = self._div("mp-tooltip")
            tooltip.append(self._div("mp-tooltip-header", "Prediction Error"))
            tooltip.append(self._div(text=state.message or "Unknown error occurred"))
            badge.append(tooltip)
        else:
            self._fill_result_badge(badge, state.result)

        find_badge_insert_target(descriptor.source_element).append(badge)

    def _fill_result_badge(self, badge: Tag, result: PredictionResult) -> None:
        badge.append(self._span("🎯"))
        badge.append(self._span(result.predicted_winner))
        if self.show_confidence:
            badge.append(self._span(f"{result.confidence}%", "mp-confidence"))

        tooltip = self._div("mp-tooltip")
        header = f"{result.predicted_winner} to win"
        if result.predicted_score:
            header += f" ({result.predicted_score})"
        tooltip.append(self._div("mp-tooltip-header", header))

        if result.key_factors:
            section = self._div("mp-tooltip-section")
            section.append(self._div("mp-tooltip-label", "Key Factors"))
            factors = self.document.new_tag("ul", attrs={"class": "mp-tooltip-factors"})
            for factor in result.key_factors[:MAX_TOOLTIP_FACTORS]:
                item = self.document.new_tag("li")
                item.string = factor
                factors.append(item)
            section.append(factors)
            tooltip.append(section)

        if result.brief_analysis:
            section = self._div("mp-tooltip-section")
            section.append(self._div("mp-tooltip-label", "Analysis"))
            section.append(self._div(text=result.brief_analysis))
            tooltip.append(section)

        if result.risk_level:
            section = self._div("mp-tooltip-section")
            color = RISK_COLORS.get(result.risk_level, RISK_COLORS["medium"])
            section.append(self._div(text=f"Risk: {result.risk_level.capitalize()}", style=f"color: {color};"))
            tooltip.append(section)

        badge.append(tooltip)

    def _cards_container(self) -> Tag:
        container = self.document.find(id=CARDS_CONTAINER_ID)
        if container is None:
            container = self._div(id=CARDS_CONTAINER_ID)
            self._body().append(container)
        return container

    def _render_card(self, descriptor: MatchDescriptor, state: MatchState) -> None:
        card_id = f"mp-card-{descriptor.id}"
        card = self.document.find(id=card_id)
        if card is None:
            card = self._div("mp-prediction-card", id=card_id)
            header = self._div("mp-card-header")
            header.append(self._span(descriptor.team1))
            header.append(self._span(" vs "))
            header.append(self._span(descriptor.team2))
            card.append(header)
            card.append(self._div("mp-prediction-status"))
            self._cards_container().append(card)

        status = card.find("div", class_="mp-prediction-status")
        status.clear()
        if state.kind == STATE_LOADING:
            status.append(self._span("⏳ Analyzing..."))
        elif state.kind == STATE_ERROR:
            status.append(self._span(f"❌ {state.message or 'Unknown error occurred'}"))
        else:
            result = state.result
            status.append(self._div("mp-card-winner", f"🎯 {result.predicted_winner}"))
            if self.show_confidence:
                status.append(self._div("mp-card-confidence", f"Confidence: {result.confidence}%"))
            if result.predicted_score:
                status.append(self._div("mp-card-score", f"Score: {result.predicted_score}"))
            if result.brief_analysis:
                analysis = result.brief_analysis
                if len(analysis) > CARD_ANALYSIS_CHARS:
                    analysis = analysis[:CARD_ANALYSIS_CHARS] + "..."
                status.append(self._div("mp-card-analysis", analysis))
