"""
Pytest configuration and shared fixtures for Major Predictor tests.
"""

import pytest

from majorpredictor.ingestion import parse_html
from majorpredictor.storage.settings_store import Settings


BRACKET_HTML = """
<html>
<head><title>PGL Major Copenhagen 2026 - Playoffs</title></head>
<body>
  <h1>PGL Major Copenhagen 2026</h1>
  <div class="bracket">
    <div class="round-column">
      <div class="round-title">Round 1</div>
      <div class="bracket-match">
        <div class="match-info">
          <span class="team-name">1. Vitality</span>
          <span class="team-name">8. FURIA</span>
        </div>
        <span class="format">bo3</span>
      </div>
      <div class="bracket-match">
        <span class="team-name">NAVI</span>
        <span class="team-name">MOUZ</span>
      </div>
    </div>
    <div class="round-column">
      <div class="round-title">Round 2</div>
      <div class="bracket-match">
        <span class="team-name">Spirit</span>
        <span class="team-name">FaZe</span>
        <span class="format">bo5</span>
      </div>
    </div>
  </div>
</body>
</html>
"""

TEXT_ONLY_HTML = """
<html>
<body>
  <h1>Major Playoffs</h1>
  <ul>
    <li><span>Vitality</span> <em>vs</em> <span>NAVI</span></li>
    <li><span>G2 Esports</span> - <span>Spirit</span></li>
  </ul>
</body>
</html>
"""

ALPHA_BETA_JSON = (
    '{"predictedWinner":"Alpha","confidence":70,"riskLevel":"low",'
    '"briefAnalysis":"Alpha favored."}'
)


@pytest.fixture
def bracket_html():
    return BRACKET_HTML


@pytest.fixture
def bracket_document():
    return parse_html(BRACKET_HTML)


@pytest.fixture
def text_only_document():
    return parse_html(TEXT_ONLY_HTML)


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def settings():
    """Settings with a completion key and search disabled."""
    return Settings(
        completion_api_key="sk-or-test-key",
        search_api_key="",
        include_external_ranking=False,
    )


@pytest.fixture
def search_settings():
    return Settings(
        completion_api_key="sk-or-test-key",
        search_api_key="tvly-test-key",
        include_external_ranking=True,
    )
