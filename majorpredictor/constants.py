"""Shared constants: settings keys, page heuristics and prompt text."""

# =============================================================================
# Settings
# =============================================================================

SETTINGS_NAMESPACE = "majorPredictor"

SETTING_COMPLETION_API_KEY = "completionApiKey"
SETTING_SEARCH_API_KEY = "searchApiKey"
SETTING_MODEL_ID = "modelId"
SETTING_AUTO_PREDICT = "autoPredict"
SETTING_SHOW_CONFIDENCE = "showConfidence"
SETTING_INCLUDE_EXTERNAL_RANKING = "includeExternalRanking"

SETTING_KEYS = [
    SETTING_COMPLETION_API_KEY,
    SETTING_SEARCH_API_KEY,
    SETTING_MODEL_ID,
    SETTING_AUTO_PREDICT,
    SETTING_SHOW_CONFIDENCE,
    SETTING_INCLUDE_EXTERNAL_RANKING,
]
BOOLEAN_SETTINGS = {
    SETTING_AUTO_PREDICT,
    SETTING_SHOW_CONFIDENCE,
    SETTING_INCLUDE_EXTERNAL_RANKING,
}
SECRET_SETTINGS = {SETTING_COMPLETION_API_KEY, SETTING_SEARCH_API_KEY}

DEFAULT_MODEL_ID = "anthropic/claude-3.5-sonnet"
DEFAULT_SETTINGS = {
    SETTING_MODEL_ID: DEFAULT_MODEL_ID,
    SETTING_AUTO_PREDICT: False,
    SETTING_SHOW_CONFIDENCE: True,
    SETTING_INCLUDE_EXTERNAL_RANKING: True,
}

# Environment fallbacks for empty key slots
SETTING_ENV_FALLBACKS = {
    SETTING_COMPLETION_API_KEY: "OPENROUTER_API_KEY",
    SETTING_SEARCH_API_KEY: "TAVILY_API_KEY",
}

# =============================================================================
# Providers
# =============================================================================

COMPLETION_PROVIDER = "OpenRouter"
SEARCH_PROVIDER = "Tavily"
DEFAULT_COMPLETION_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_SEARCH_URL = "https://api.tavily.com/search"
DEFAULT_APP_REFERER = "https://majors.im"
DEFAULT_APP_TITLE = "Major Predictor"

# =============================================================================
# Predictions
# =============================================================================

UNCERTAIN_WINNER = "Uncertain"
RISK_LEVELS = ("low", "medium", "high")
DEFAULT_RISK_LEVEL = "medium"
DEFAULT_CONFIDENCE = 55
FALLBACK_ANALYSIS_CHARS = 500

# Ordered: first phrase found wins
CONFIDENCE_KEYWORDS = [
    ("highly likely", 80),
    ("very confident", 80),
    ("likely", 65),
    ("should win", 65),
    ("close", 50),
    ("toss-up", 50),
]

DEFAULT_TOURNAMENT = "CS2 Major"
DEFAULT_MATCH_TYPE = "Best of 3"

# =============================================================================
# Page heuristics
# =============================================================================

MATCH_CONTAINER_SELECTORS = [
    '[class*="bracket_match"]',
    '[class*="bracket-match"]',
    '[class*="match"]',
    '[class*="fixture"]',
    "[data-match]",
    '[class*="game"]',
]

TEAM_NAME_SELECTORS = [
    '[class*="team-name"]',
    '[class*="teamName"]',
    '[class*="team_name"]',
    '[class*="team"] [class*="name"]',
    ".team-1",
    ".team-2",
    '[class*="opponent"]',
    "[data-team]",
]

BADGE_TARGET_SELECTORS = [
    '[class*="match-info"]',
    '[class*="matchInfo"]',
    '[class*="team-container"]',
    '[class*="versus"]',
    '[class*="vs"]',
]

TOURNAMENT_CLASS_HINTS = ["tournament", "event", "league"]

GENERIC_IMAGE_ALTS = ["logo", "icon", "flag", "image", "avatar", "team"]

ROUND_PATTERN = r"\bround\s*(\d{1,2})\b"

KNOWN_TEAMS = [
    "Natus Vincere", "NAVI", "G2 Esports", "G2", "FaZe Clan", "FaZe",
    "Team Vitality", "Vitality", "Astralis", "MOUZ", "mousesports",
    "Team Spirit", "Spirit", "Heroic", "Cloud9", "Complexity",
    "Team Liquid", "Liquid", "ENCE", "BIG", "Eternal Fire",
    "paiN", "FURIA", "Imperial", "Monte", "GamerLegion",
    "MIBR", "TheMongolz", "Virtus.pro", "VP", "Falcons",
    "9z", "SAW", "Aurora", "fnatic", "NIP", "Ninjas in Pyjamas",
]

# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT = (
    "You are an expert CS2 esports analyst with deep knowledge of professional Counter-Strike.\n"
    "You analyze team match histories, recent form, head-to-head records, map pools, and roster "
    "changes to predict match outcomes.\n"
    "Your predictions should be based on factual historical performance and current team conditions.\n"
    "Always provide your analysis in a structured JSON format."
)

TEST_API_PROMPT = 'Say "API connection successful" in exactly those words.'
TEST_API_MAX_TOKENS = 50

LOG_MAX_ENTRIES = 500
