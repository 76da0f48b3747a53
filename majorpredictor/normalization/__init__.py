"""Team name and match id helpers."""

from majorpredictor.normalization.ids import (
    canonicalize_team_name,
    normalize_team_key,
    make_match_id,
)

__all__ = ["canonicalize_team_name", "normalize_team_key", "make_match_id"]
