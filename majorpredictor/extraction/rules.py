"""Heuristic matching policy for the page extractor.

Everything the extractor guesses with (selectors, the known team list,
the round pattern, walk depths) lives here so tests and users can swap it
without touching the tree-walking code.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import json
import logging
import re

from majorpredictor.constants import (
    DEFAULT_MATCH_TYPE,
    DEFAULT_TOURNAMENT,
    GENERIC_IMAGE_ALTS,
    KNOWN_TEAMS,
    MATCH_CONTAINER_SELECTORS,
    ROUND_PATTERN,
    TEAM_NAME_SELECTORS,
    TOURNAMENT_CLASS_HINTS,
)

logger = logging.getLogger(__name__)


def load_known_teams(path: str) -> List[str]:
    """Read a JSON list of team names; empty or unreadable files give []."""
    if not path:
        return []
    teams_path = Path(path)
    if not teams_path.exists():
        logger.warning("Known teams file not found: %s", path)
        return []
    try:
        payload = json.loads(teams_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read known teams file %s: %s", path, e)
        return []
    if not isinstance(payload, list):
        logger.warning("Known teams file %s is not a JSON list", path)
        return []
    return [str(name).strip() for name in payload if str(name).strip()]


@dataclass
class ExtractionRules:
    container_selectors: List[str] = field(default_factory=lambda: list(MATCH_CONTAINER_SELECTORS))
    team_selectors: List[str] = field(default_factory=lambda: list(TEAM_NAME_SELECTORS))
    known_teams: List[str] = field(default_factory=lambda: list(KNOWN_TEAMS))
    generic_alts: List[str] = field(default_factory=lambda: list(GENERIC_IMAGE_ALTS))
    tournament_hints: List[str] = field(default_factory=lambda: list(TOURNAMENT_CLASS_HINTS))
    round_pattern: str = ROUND_PATTERN
    round_search_depth: int = 8
    ancestor_pair_depth: int = 5
    fallback_round_label: str = "Unknown Round"
    fallback_round_index: int = 999
    default_tournament: str = DEFAULT_TOURNAMENT
    default_match_type: str = DEFAULT_MATCH_TYPE
    min_name_length: int = 2
    max_name_length: int = 29
    max_label_length: int = 40

    def __post_init__(self) -> None:
        self._round_re = re.compile(self.round_pattern, re.IGNORECASE)
        # Longest names first so "Team Vitality" wins over "Vitality" at the same offset
        ordered = sorted({name for name in self.known_teams if name}, key=len, reverse=True)
        self._team_res = [
            (name, re.compile(r"(?<![\w.])" + re.escape(name) + r"(?![\w.])", re.IGNORECASE))
            for name in ordered
        ]

    @property
    def round_regex(self):
        return self._round_re

    @property
    def team_regexes(self):
        return self._team_res

    @classmethod
    def from_config(cls, config) -> "ExtractionRules":
        known = load_known_teams(config.known_teams_path) if config.known_teams_path else []
        return cls(
            known_teams=known or list(KNOWN_TEAMS),
            round_search_depth=config.round_search_depth,
            ancestor_pair_depth=config.ancestor_pair_depth,
            fallback_round_label=config.fallback_round_label,
            fallback_round_index=config.fallback_round_index,
        )

    def find_known_teams(self, text: str) -> List[str]:
        """Known team names in ``text``, in order of appearance, without overlaps."""
        if not text:
            return []
        hits = []
        for name, regex in self._team_res:
            for match in regex.finditer(text):
                hits.append((match.start(), -(match.end() - match.start()), match.end(), name))
        hits.sort()
        found: List[str] = []
        seen = set()
        taken_until = -1
        for start, _neg_len, end, name in hits:
            if start < taken_until:
                continue
            taken_until = end
            key = name.lower()
            if key in seen:
                continue
            seen.add(key)
            found.append(name)
        return found

    def match_round(self, text: str) -> Optional[int]:
        if not text:
            return None
        match = self._round_re.search(text)
        if not match:
            return None
        try:
            return int(match.group(1))
        except (IndexError, ValueError):
            return None
