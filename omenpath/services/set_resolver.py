"""
Set code validation and correction.

Resolution order for a record's set:
1. Exact, case-insensitive code membership in the canonical set list
2. Exact, case-insensitive set name match (against cleaned name variants)
3. Fuzzy name match by word overlap, accepted above a threshold

Fuzzy scoring rewards query words found in the candidate name (typos
tolerated through rapidfuzz, numbers must match exactly) and penalizes
verbose candidates, so "Dominaria" prefers "Dominaria" over "Dominaria
Tokens". Child sets (tokens, promos, art series, ...) are penalized unless
the caller asks for a token- or art-series-biased search.

INVARIANTS:
- Records carrying a direct or numeric id are never touched
- A correction always sets set_code_corrected and adds a warning
- A rejected correction leaves the set code unchanged and adds a warning
"""

import logging
import re
from dataclasses import dataclass

from rapidfuzz import fuzz, process

from omenpath.config import settings
from omenpath.models.card import SetEntry
from omenpath.models.record import ParsedRecord
from omenpath.services.set_catalog import SetCatalog

logger = logging.getLogger(__name__)

CHILD_MARKERS = (
    "tokens",
    "promos",
    "art series",
    "minigames",
    "substitute cards",
    "front cards",
    "oversized",
)
CHILD_SET_TYPES = frozenset({"token", "promo", "memorabilia", "minigame"})
CHILD_PENALTY = 0.85

# Typo tolerance for a single word
WORD_SIMILARITY_CUTOFF = 85
FUZZY_WORD_WEIGHT = 0.8

_ORDINAL_WORDS = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "sixth": 6,
    "seventh": 7,
    "eighth": 8,
    "ninth": 9,
    "tenth": 10,
}
_ORDINAL_DIGITS = re.compile(r"^(\d+)(st|nd|rd|th)$")
_WORD = re.compile(r"[\w']+")
_PREFIXED = re.compile(r"^(Art Series|Commander|Alchemy):\s*(.+)$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class SetMatch:
    """Outcome of a name lookup."""

    code: str | None
    confidence: float
    matched_name: str | None = None


NO_MATCH = SetMatch(code=None, confidence=0.0)


def clean_set_name(name: str) -> str:
    """Strip a "Universes Beyond: " prefix and a trailing parenthetical."""
    cleaned = re.sub(r"^Universes Beyond:\s+", "", name.strip(), flags=re.IGNORECASE)
    return re.sub(r"\s*\([^)]+\)\s*$", "", cleaned).strip()


def search_alternatives(name: str) -> list[str]:
    """
    Name variants to try, most literal first.

    "Commander: Innistrad: Midnight Hunt" also yields
    "Innistrad: Midnight Hunt Commander" and "Innistrad: Midnight Hunt".
    """
    name = name.strip()
    if not name:
        return []
    alternatives = [name]
    cleaned = clean_set_name(name)
    alternatives.append(cleaned)

    prefixed = _PREFIXED.match(cleaned)
    if prefixed:
        prefix, base = prefixed.group(1), prefixed.group(2).strip()
        alternatives.append(f"{base} {prefix}")
        alternatives.append(base)

    unique: list[str] = []
    for alternative in alternatives:
        if alternative and alternative not in unique:
            unique.append(alternative)
    return unique


def _tokens(name: str) -> list[str]:
    tokens = []
    for word in _WORD.findall(name.lower()):
        word = word.strip("'")
        if not word:
            continue
        if word in _ORDINAL_WORDS:
            word = f"#{_ORDINAL_WORDS[word]}"
        else:
            ordinal = _ORDINAL_DIGITS.match(word)
            if ordinal:
                word = f"#{int(ordinal.group(1))}"
        tokens.append(word)
    return tokens


def _is_numeric(token: str) -> bool:
    return any(ch.isdigit() for ch in token)


def _edition_number(tokens: list[str]) -> int | None:
    """Number of an "Nth Edition" set name, if any."""
    for index, token in enumerate(tokens[:-1]):
        if token.startswith("#") and tokens[index + 1] == "edition":
            return int(token[1:])
    return None


def word_overlap_score(query: str, candidate: str) -> float:
    """
    Similarity of two set names in [0, 1].

    0.6 * recall + 0.25 * precision of matched words, plus 0.1 * share of
    query words matched exactly and 0.05 when the word counts are equal.
    Different "Nth Edition" numbers never match.
    """
    query_tokens = _tokens(query)
    candidate_tokens = _tokens(candidate)
    if not query_tokens or not candidate_tokens:
        return 0.0

    query_edition = _edition_number(query_tokens)
    candidate_edition = _edition_number(candidate_tokens)
    if query_edition is not None and candidate_edition is not None:
        if query_edition != candidate_edition:
            return 0.0

    remaining = list(candidate_tokens)
    exact = 0
    fuzzy = 0.0
    for token in query_tokens:
        if token in remaining:
            remaining.remove(token)
            exact += 1
            continue
        if _is_numeric(token):
            continue
        choices = [t for t in remaining if not _is_numeric(t)]
        best = process.extractOne(
            token, choices, scorer=fuzz.ratio, score_cutoff=WORD_SIMILARITY_CUTOFF
        )
        if best is not None:
            remaining.remove(best[0])
            fuzzy += FUZZY_WORD_WEIGHT

    matched = exact + fuzzy
    score = 0.6 * (matched / len(query_tokens))
    score += 0.25 * (matched / len(candidate_tokens))
    score += 0.1 * (exact / len(query_tokens))
    if len(query_tokens) == len(candidate_tokens):
        score += 0.05
    return min(score, 1.0)


def is_child_set(entry: SetEntry) -> bool:
    """Tokens, promos, art series and similar satellite sets."""
    name = entry.name.lower()
    return (
        entry.parent_set_code is not None
        or entry.set_type in CHILD_SET_TYPES
        or any(marker in name for marker in CHILD_MARKERS)
    )


class SetResolver:
    """Validates and corrects set codes against the canonical set list."""

    def __init__(self, catalog: SetCatalog, threshold: float | None = None):
        self.catalog = catalog
        self.threshold = settings.set_match_threshold if threshold is None else threshold
        self._cache: dict[tuple[str, bool, bool], SetMatch] = {}
        self._by_name: dict[str, SetEntry] = {}
        for entry in catalog:
            self._by_name.setdefault(entry.name.lower(), entry)

    def is_valid_code(self, code: str) -> bool:
        return self.catalog.is_valid_code(code)

    def find_set_code(
        self,
        set_name: str,
        *,
        prefer_tokens: bool = False,
        prefer_art_series: bool = False,
    ) -> SetMatch:
        """
        Resolve a set display name to a code.

        Returns:
            SetMatch with confidence 1.0 for exact name matches, the fuzzy
            score otherwise; code is None when nothing clears the threshold.
        """
        key = (set_name.strip().lower(), prefer_tokens, prefer_art_series)
        if key not in self._cache:
            self._cache[key] = self._find(set_name, prefer_tokens, prefer_art_series)
        return self._cache[key]

    def _find(self, set_name: str, prefer_tokens: bool, prefer_art_series: bool) -> SetMatch:
        alternatives = search_alternatives(set_name)
        if not alternatives:
            return NO_MATCH

        exact = self._exact_match(alternatives)
        if exact is not None:
            return exact

        if prefer_tokens or prefer_art_series:
            marker = "tokens" if prefer_tokens else "art series"
            biased = [entry for entry in self.catalog if marker in entry.name.lower()]
            match = self._fuzzy_match(alternatives, biased, penalize_children=False)
            if match.code is not None:
                return match

        return self._fuzzy_match(alternatives, self.catalog.entries, penalize_children=True)

    def _exact_match(self, alternatives: list[str]) -> SetMatch | None:
        for alternative in alternatives:
            entry = self._by_name.get(alternative.lower())
            if entry is not None:
                return SetMatch(code=entry.code, confidence=1.0, matched_name=entry.name)
        return None

    def _fuzzy_match(
        self,
        alternatives: list[str],
        candidates: tuple[SetEntry, ...] | list[SetEntry],
        *,
        penalize_children: bool,
    ) -> SetMatch:
        best: tuple[float, bool, int, str] | None = None
        best_entry: SetEntry | None = None

        for entry in candidates:
            child = is_child_set(entry)
            score = 0.0
            for alternative in alternatives:
                candidate_score = word_overlap_score(alternative, entry.name)
                asks_for_child = any(m in alternative.lower() for m in CHILD_MARKERS)
                if penalize_children and child and not asks_for_child:
                    candidate_score *= CHILD_PENALTY
                score = max(score, candidate_score)
            if score <= 0.0:
                continue
            # Higher score, then parent sets, then shorter names
            rank = (-score, child, len(entry.name), entry.code)
            if best is None or rank < best:
                best = rank
                best_entry = entry

        if best is None or best_entry is None:
            return NO_MATCH
        score = -best[0]
        if score < self.threshold:
            logger.debug(
                "set_match_rejected",
                extra={"query": alternatives[0], "candidate": best_entry.name, "score": score},
            )
            return SetMatch(code=None, confidence=score, matched_name=best_entry.name)
        return SetMatch(code=best_entry.code, confidence=score, matched_name=best_entry.name)

    def resolve(self, record: ParsedRecord) -> None:
        """Validate and, where possible, correct one record's set code in place."""
        if record.has_any_id:
            return

        code = record.set_code.strip()
        if code:
            if self.is_valid_code(code):
                record.set_code = code.lower()
                return
            if record.set_name:
                match = self._find_for(record)
                if match.code is not None:
                    corrected = self._token_code(record, match.code)
                    record.set_code = corrected
                    record.set_code_corrected = True
                    record.add_warning(
                        f'Set code "{code}" corrected to "{corrected}" '
                        f'based on set name "{record.set_name}"'
                    )
                    return
            record.add_warning(f'Invalid set code "{code}" cannot be automatically corrected')
            return

        set_name = record.set_name.strip()
        if not set_name:
            return
        # Some exporters put the code in their "Set" column
        if self.is_valid_code(set_name):
            record.set_code = set_name.lower()
            return
        match = self._find_for(record)
        if match.code is None:
            record.add_warning(f'Set name "{set_name}" cannot be matched to a valid set code')
            return
        added = self._token_code(record, match.code)
        record.set_code = added
        record.set_code_corrected = True
        record.set_code_from_name = True
        record.add_warning(f'Set code added as "{added}" based on set name "{set_name}"')

    def resolve_all(self, records: list[ParsedRecord]) -> None:
        for record in records:
            self.resolve(record)
        logger.info(
            "sets_resolved",
            extra={
                "records": len(records),
                "corrected": sum(1 for r in records if r.set_code_corrected),
            },
        )

    def _find_for(self, record: ParsedRecord) -> SetMatch:
        return self.find_set_code(
            record.set_name,
            prefer_tokens=record.is_token,
            prefer_art_series=record.is_art_card,
        )

    def _token_code(self, record: ParsedRecord, code: str) -> str:
        """Token rows use the "t"-prefixed token set when one exists."""
        if record.is_token and not code.startswith("t"):
            token_code = f"t{code}"
            if self.is_valid_code(token_code):
                return token_code
        return code
