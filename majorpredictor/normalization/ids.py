"""Canonical ID helpers."""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def canonicalize_team_name(name: str) -> str:
    """Collapse whitespace runs; keep the display casing."""
    return " ".join((name or "").split())


def normalize_team_key(name: str) -> str:
    """Lower-case ASCII key with every non-alphanumeric character removed."""
    text = unicodedata.normalize("NFKD", name or "").encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("", text.lower())


def make_match_id(team1: str, team2: str) -> str:
    """Order-sensitive match id: ``make_match_id("A", "B") != make_match_id("B", "A")``."""
    return f"{normalize_team_key(team1)}-vs-{normalize_team_key(team2)}"
