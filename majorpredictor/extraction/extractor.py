"""Bracket page extractor.

Walks a parsed page and returns one :class:`MatchDescriptor` per matchup.
Matching policy comes from :class:`ExtractionRules`; this module only knows
how to walk the tree. A scan never raises: malformed containers are logged
and skipped, and a page with nothing recognisable yields an empty list.
"""

from typing import Iterable, List, Optional, Tuple
import logging
import re

from bs4 import BeautifulSoup, NavigableString, Tag

from majorpredictor.extraction.rules import ExtractionRules
from majorpredictor.normalization import canonicalize_team_name, make_match_id, normalize_team_key
from majorpredictor.schema import MatchDescriptor

logger = logging.getLogger(__name__)

SEED_PREFIX_RE = re.compile(r"^\s*#?\s*\d{1,3}(?:[.):]\s*|\s+)(?=\S)")
LOGO_SUFFIX_RE = re.compile(r"\s+(?:logo|icon)$", re.IGNORECASE)
ROUND_CLASS_RE = re.compile(r"round[-_]?(\d{1,2})$", re.IGNORECASE)
HEADING_TAGS = ["h1", "h2", "h3", "h4"]
SKIPPED_TEXT_PARENTS = {"script", "style", "noscript", "title", "head", "template"}
DOCUMENT_ROOTS = {"[document]", "html", "body"}
INJECTED_PREFIX = "mp-"


def _classes(tag: Tag) -> List[str]:
    value = tag.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def _is_injected(tag: Tag) -> bool:
    """True for nodes the badge renderer added to the page."""
    node = tag
    while isinstance(node, Tag):
        if node.get("id", "").startswith(INJECTED_PREFIX):
            return True
        if any(cls.startswith(INJECTED_PREFIX) for cls in _classes(node)):
            return True
        node = node.parent
    return False


def _text(tag: Tag) -> str:
    """Visible text of ``tag`` without anything the badge renderer added."""
    parts = [
        str(string)
        for string in tag.find_all(string=True)
        if type(string) is NavigableString and not _is_injected(string.parent)
    ]
    return " ".join(" ".join(parts).split())


class PageExtractor:
    """Finds matchups on a parsed bracket page."""

    def __init__(self, rules: Optional[ExtractionRules] = None):
        self.rules = rules or ExtractionRules()
        # Set by each scan: True when matchups came from the text-node fallback
        self.used_text_fallback = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def scan(self, document: BeautifulSoup) -> List[MatchDescriptor]:
        """Return unique matchups in document order, deduplicated by id."""
        if document is None:
            self.used_text_fallback = False
            return []

        candidates = self._container_candidates(document)
        self.used_text_fallback = False
        if not candidates:
            candidates = self._text_node_candidates(document)
            self.used_text_fallback = bool(candidates)
            if candidates:
                logger.info("No match containers found; paired %d matchups from text", len(candidates))

        page_tournament = self._page_tournament(document)
        descriptors: List[MatchDescriptor] = []
        seen_ids = set()
        for container, team1, team2 in candidates:
            try:
                descriptor = self._describe(container, team1, team2, page_tournament)
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed match container: %s", e)
                continue
            if descriptor.id in seen_ids:
                continue
            seen_ids.add(descriptor.id)
            descriptors.append(descriptor)

        logger.debug("Scan found %d matchups", len(descriptors))
        return descriptors

    def extract_teams(self, container: Tag) -> List[str]:
        """Team names inside ``container``, first strategy with two names wins."""
        strategies = (
            self._teams_from_selectors,
            self._teams_from_images,
            self._teams_from_known_names,
        )
        for strategy in strategies:
            names = self._unique(strategy(container))
            if len(names) >= 2:
                return names
        return []

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def _container_candidates(self, document: BeautifulSoup) -> List[Tuple[Tag, str, str]]:
        containers: List[Tag] = []
        seen = set()
        for selector in self.rules.container_selectors:
            for element in document.select(selector):
                if id(element) in seen or element.name in DOCUMENT_ROOTS:
                    continue
                if _is_injected(element):
                    continue
                seen.add(id(element))
                containers.append(element)

        qualified: List[Tuple[Tag, str, str]] = []
        for container in containers:
            teams = self.extract_teams(container)
            if len(teams) >= 2:
                qualified.append((container, teams[0], teams[1]))

        # Wrappers repeat their inner matchup; keep the innermost container
        kept_ids = {id(container) for container, _t1, _t2 in qualified}
        innermost = []
        for container, team1, team2 in qualified:
            has_inner = any(
                id(descendant) in kept_ids
                for descendant in container.descendants
                if isinstance(descendant, Tag)
            )
            if not has_inner:
                innermost.append((container, team1, team2))

        position = {id(tag): index for index, tag in enumerate(document.find_all(True))}
        innermost.sort(key=lambda item: position.get(id(item[0]), 0))
        return innermost

    def _text_node_candidates(self, document: BeautifulSoup) -> List[Tuple[Tag, str, str]]:
        hits: List[Tuple[str, Tag]] = []
        for string in document.find_all(string=True):
            parent = string.parent
            if parent is None or parent.name in SKIPPED_TEXT_PARENTS:
                continue
            if type(string) is not NavigableString:
                continue
            if _is_injected(parent):
                continue
            for name in self.rules.find_known_teams(str(string)):
                hits.append((name, parent))

        candidates = []
        index = 0
        while index < len(hits) - 1:
            (name_a, node_a), (name_b, node_b) = hits[index], hits[index + 1]
            ancestor = None
            if normalize_team_key(name_a) != normalize_team_key(name_b):
                ancestor = self._common_ancestor(node_a, node_b)
            if ancestor is None:
                index += 1
                continue
            candidates.append((ancestor, name_a, name_b))
            index += 2
        return candidates

    def _common_ancestor(self, first: Tag, second: Tag) -> Optional[Tag]:
        depth = self.rules.ancestor_pair_depth
        chain_b = {id(node) for node in self._ancestors(second, depth)}
        for node in self._ancestors(first, depth):
            if id(node) in chain_b:
                if node.name in DOCUMENT_ROOTS:
                    return None
                return node
        return None

    @staticmethod
    def _ancestors(node: Tag, depth: int) -> Iterable[Tag]:
        current = node
        for _ in range(depth + 1):
            if current is None:
                return
            yield current
            current = current.parent

    # ------------------------------------------------------------------
    # Team name strategies
    # ------------------------------------------------------------------

    def _teams_from_selectors(self, container: Tag) -> List[str]:
        matched: List[Tag] = []
        seen = set()
        for selector in self.rules.team_selectors:
            for element in container.select(selector):
                if id(element) not in seen and not _is_injected(element):
                    seen.add(id(element))
                    matched.append(element)
        if not matched:
            return []
        position = {id(tag): index for index, tag in enumerate(container.find_all(True))}
        matched.sort(key=lambda element: position.get(id(element), 0))

        # An element wrapping other team elements is a row, not a name
        names = []
        for element in matched:
            wraps_other = any(
                id(descendant) in seen
                for descendant in element.descendants
                if isinstance(descendant, Tag)
            )
            if wraps_other:
                continue
            name = self._clean_name(_text(element))
            if name:
                names.append(name)
        return names

    def _teams_from_images(self, container: Tag) -> List[str]:
        generic = {alt.lower() for alt in self.rules.generic_alts}
        names = []
        for image in container.select("img[alt]"):
            alt = LOGO_SUFFIX_RE.sub("", (image.get("alt") or "").strip())
            if alt.lower() in generic:
                continue
            name = self._clean_name(alt)
            if name:
                names.append(name)
        return names

    def _teams_from_known_names(self, container: Tag) -> List[str]:
        return self.rules.find_known_teams(_text(container))

    def _clean_name(self, raw: str) -> Optional[str]:
        name = canonicalize_team_name(SEED_PREFIX_RE.sub("", raw or ""))
        if not (self.rules.min_name_length <= len(name) <= self.rules.max_name_length):
            return None
        return name

    @staticmethod
    def _unique(names: List[str]) -> List[str]:
        unique = []
        seen = set()
        for name in names:
            key = normalize_team_key(name)
            if not key or key in seen:
                continue
            seen.add(key)
            unique.append(name)
        return unique

    # ------------------------------------------------------------------
    # Round, tournament and format
    # ------------------------------------------------------------------

    def _describe(self, container: Tag, team1: str, team2: str, page_tournament: str) -> MatchDescriptor:
        round_label, round_index = self._find_round(container)
        return MatchDescriptor(
            id=make_match_id(team1, team2),
            team1=team1,
            team2=team2,
            tournament=self._container_tournament(container) or page_tournament,
            round=round_label,
            round_index=round_index,
            match_type=self._match_type(container),
            source_element=container,
        )

    def _find_round(self, container: Tag) -> Tuple[str, int]:
        # A short label inside the container itself
        for label in container.select('[class*="round"]'):
            index = self._short_round(label)
            if index is not None:
                return f"Round {index}", index

        node = container
        for _ in range(self.rules.round_search_depth + 1):
            if node is None or node.name in DOCUMENT_ROOTS:
                break
            index = self._round_from_attributes(node)
            if index is None:
                index = self._round_from_previous_siblings(node)
            if index is not None:
                return f"Round {index}", index
            node = node.parent
        return self.rules.fallback_round_label, self.rules.fallback_round_index

    def _round_from_attributes(self, node: Tag) -> Optional[int]:
        value = str(node.get("data-round") or "").strip()
        if value.isdigit():
            return int(value)
        if value:
            index = self.rules.match_round(value)
            if index is not None:
                return index
        for cls in _classes(node):
            match = ROUND_CLASS_RE.search(cls)
            if match:
                return int(match.group(1))
        return None

    def _round_from_previous_siblings(self, node: Tag) -> Optional[int]:
        for sibling in node.previous_siblings:
            if isinstance(sibling, Tag):
                if _is_injected(sibling):
                    continue
                index = self._short_round(sibling)
            elif type(sibling) is NavigableString:
                text = str(sibling).strip()
                index = self.rules.match_round(text) if len(text) <= self.rules.max_label_length else None
            else:
                index = None
            if index is not None:
                return index
        return None

    def _short_round(self, tag: Tag) -> Optional[int]:
        text = _text(tag)
        if not text or len(text) > self.rules.max_label_length:
            return None
        return self.rules.match_round(text)

    def _container_tournament(self, container: Tag) -> Optional[str]:
        hints = [hint.lower() for hint in self.rules.tournament_hints]
        for parent in container.parents:
            if parent.name in DOCUMENT_ROOTS:
                break
            class_text = " ".join(_classes(parent)).lower()
            if not any(hint in class_text for hint in hints):
                continue
            for heading in parent.find_all(HEADING_TAGS) + parent.select('[class*="title"]'):
                candidate = _text(heading)
                if self.rules.match_round(candidate) is not None:
                    continue
                if self._plausible_title(candidate):
                    return candidate
            candidate = _text(parent)
            if self._plausible_title(candidate):
                return candidate
        return None

    def _page_tournament(self, document: BeautifulSoup) -> str:
        heading = document.find("h1")
        if heading is not None:
            text = _text(heading)
            if self._plausible_title(text):
                return text
        if document.title is not None and document.title.string:
            text = " ".join(document.title.string.split())
            if self._plausible_title(text):
                return text
        return self.rules.default_tournament

    @staticmethod
    def _plausible_title(text: Optional[str]) -> bool:
        return bool(text) and 3 < len(text) < 100

    def _match_type(self, container: Tag) -> str:
        text = _text(container).lower()
        if "bo5" in text or "best of 5" in text:
            return "Best of 5"
        if "bo3" in text or "best of 3" in text:
            return "Best of 3"
        if "bo1" in text or "best of 1" in text:
            return "Best of 1"
        return self.rules.default_match_type
