"""Unit tests for the HTML badge renderer and sinks."""

from majorpredictor.extraction import PageExtractor
from majorpredictor.presentation import CompositeSink, HtmlBadgeRenderer, find_badge_insert_target
from majorpredictor.presentation.badges import badge_class
from majorpredictor.ingestion import parse_html
from majorpredictor.schema import MatchState, PassStatus, PredictionResult
from tests.mocks import RecordingSink


def _rendered(document, show_confidence=True):
    descriptors = PageExtractor().scan(document)
    renderer = HtmlBadgeRenderer(document, show_confidence=show_confidence)
    renderer.attach(descriptors)
    return renderer, descriptors


def _result(winner="Vitality", **overrides):
    values = dict(
        predicted_winner=winner,
        confidence=72,
        team1="Vitality",
        team2="FURIA",
        raw_response="{}",
        predicted_score="2-1",
        key_factors=["Map pool", "Form", "Experience", "Fourth factor"],
        risk_level="high",
        brief_analysis="Vitality are in form.",
    )
    values.update(overrides)
    return PredictionResult(**values)


class TestBadges:
    def test_loading_badge(self, bracket_document):
        renderer, descriptors = _rendered(bracket_document)
        match_id = descriptors[0].id

        renderer.on_match_state_changed(match_id, MatchState.loading())

        badge = bracket_document.find(id=f"mp-badge-{match_id}")
        assert badge is not None
        assert "loading" in badge["class"]
        assert "Analyzing..." in badge.get_text()
        assert bracket_document.find(id="major-predictor-styles") is not None

    def test_success_replaces_loading_badge(self, bracket_document):
        renderer, descriptors = _rendered(bracket_document)
        match_id = descriptors[0].id

        renderer.on_match_state_changed(match_id, MatchState.loading())
        renderer.on_match_state_changed(match_id, MatchState.success(_result()))

        badges = bracket_document.find_all(id=f"mp-badge-{match_id}")
        assert len(badges) == 1
        badge = badges[0]
        assert "team1" in badge["class"]
        assert badge.find(class_="mp-confidence").get_text() == "72%"
        assert badge.find(class_="mp-tooltip-header").get_text() == "Vitality to win (2-1)"
        assert len(badge.find_all("li")) == 3
        assert "Risk: High" in badge.get_text()

    def test_confidence_hidden(self, bracket_document):
        renderer, descriptors = _rendered(bracket_document, show_confidence=False)
        renderer.on_match_state_changed(descriptors[0].id, MatchState.success(_result()))
        assert bracket_document.find(class_="mp-confidence") is None

    def test_uncertain_and_team2_classes(self, bracket_document):
        renderer, descriptors = _rendered(bracket_document)
        renderer.on_match_state_changed(descriptors[0].id, MatchState.success(_result("Uncertain")))
        renderer.on_match_state_changed(descriptors[1].id, MatchState.success(_result("FURIA")))

        assert "uncertain" in bracket_document.find(id=f"mp-badge-{descriptors[0].id}")["class"]
        assert "team2" in bracket_document.find(id=f"mp-badge-{descriptors[1].id}")["class"]

    def test_winner_naming_neither_team_is_uncertain(self, bracket_document):
        renderer, descriptors = _rendered(bracket_document)
        result = _result("Both teams look even")

        renderer.on_match_state_changed(descriptors[0].id, MatchState.success(result))

        badge = bracket_document.find(id=f"mp-badge-{descriptors[0].id}")
        assert "uncertain" in badge["class"]
        assert badge_class(result) == "uncertain"

    def test_error_badge_tooltip(self, bracket_document):
        renderer, descriptors = _rendered(bracket_document)
        renderer.on_match_state_changed(descriptors[0].id, MatchState.error("OpenRouter error: bad key"))

        badge = bracket_document.find(id=f"mp-badge-{descriptors[0].id}")
        assert "error" in badge["class"]
        assert "OpenRouter error: bad key" in badge.get_text()

    def test_styles_injected_once(self, bracket_document):
        renderer, descriptors = _rendered(bracket_document)
        for descriptor in descriptors:
            renderer.on_match_state_changed(descriptor.id, MatchState.loading())
        assert len(bracket_document.find_all(id="major-predictor-styles")) == 1

    def test_insert_target_prefers_match_info(self):
        document = parse_html('<div class="match"><div class="match-info">x</div></div>')
        container = document.find(class_="match")
        assert find_badge_insert_target(container) is document.find(class_="match-info")


class TestCardsAndPanel:
    def test_text_fallback_matches_render_as_cards(self, text_only_document):
        extractor = PageExtractor()
        descriptors = extractor.scan(text_only_document)
        renderer = HtmlBadgeRenderer(text_only_document)
        renderer.attach(descriptors, as_cards=extractor.used_text_fallback)

        renderer.on_match_state_changed(descriptors[0].id, MatchState.success(_result("Vitality", team2="NAVI")))

        container = text_only_document.find(id="mp-predictions-container")
        card = container.find(id=f"mp-card-{descriptors[0].id}")
        assert "Confidence: 72%" in card.get_text()
        assert text_only_document.find(id=f"mp-badge-{descriptors[0].id}") is None

    def test_control_panel_status(self, bracket_document):
        renderer = HtmlBadgeRenderer(bracket_document)

        renderer.on_pass_status(PassStatus.busy("Round 1"))
        renderer.on_pass_status(PassStatus.all_done())

        panels = bracket_document.find_all(id="mp-control-panel")
        assert len(panels) == 1
        assert panels[0].find(class_="mp-status").get_text() == "All rounds predicted"

    def test_save(self, bracket_document, tmp_path):
        renderer = HtmlBadgeRenderer(bracket_document)
        renderer.on_pass_status(PassStatus.idle())
        path = renderer.save(str(tmp_path / "out" / "page.html"))
        assert "mp-control-panel" in path.read_text(encoding="utf-8")


def test_composite_sink_fans_out():
    first, second = RecordingSink(), RecordingSink()
    sink = CompositeSink([first, second])

    sink.on_match_state_changed("a-vs-b", MatchState.loading())
    sink.on_pass_status(PassStatus.scanning())

    assert first.match_events == second.match_events
    assert len(first.pass_events) == len(second.pass_events) == 1
