"""Heuristic matching of CSV headers to target fields.

Each field is matched in list order, so earlier fields claim headers first.
A field is first tried against its known aliases (exact, then normalized);
fields without an alias hit fall back to a name-similarity score. A header
is never assigned to more than one field.
"""

import logging
import re
from typing import Mapping, Optional, Sequence

from .models import (
    AliasTable,
    FieldMapping,
    MatchDecision,
    MatchMethod,
    MatchResult,
    TargetField,
)
from .validator import is_usable_value

logger = logging.getLogger(__name__)

# Minimum similarity score for a fuzzy match to be accepted
SIMILARITY_THRESHOLD = 0.5

EXACT_SCORE = 1.0
SUBSTRING_SCORE = 0.8
WORD_OVERLAP_WEIGHT = 0.5

_SEPARATOR_RUN = re.compile(r"[\s-]+")
_DISALLOWED_CHARS = re.compile(r"[^a-z0-9_]")
_WORD_SPLIT = re.compile(r"[\s_-]+")
# Trailing platform marker: custom field/object, relationship, metadata type,
# external object, platform event, big object
_SUFFIX_MARKER = re.compile(r"__(?:c|r|mdt|x|e|b)$")


def normalize_header(value: str) -> str:
    """
    Normalize a header or alias for comparison.

    Trims, lowercases, collapses each run of whitespace/hyphens into a
    single underscore and drops anything outside ``[a-z0-9_]``.
    """
    normalized = value.strip().lower()
    normalized = _SEPARATOR_RUN.sub("_", normalized)
    return _DISALLOWED_CHARS.sub("", normalized)


def strip_suffix_marker(api_name: str) -> str:
    """Lowercase an api name and drop its trailing ``__c``-style suffix."""
    return _SUFFIX_MARKER.sub("", api_name.lower())


def _words(value: str) -> list[str]:
    return [word for word in _WORD_SPLIT.split(value) if word]


def similarity_score(header: str, api_name: str) -> float:
    """
    Score how closely a CSV header resembles a field api name.

    1.0 for an exact match (ignoring case and suffix marker), 0.8 when one
    contains the other, otherwise a word-overlap score capped at 0.5.
    """
    lowered_header = header.lower()
    field_name = strip_suffix_marker(api_name)

    if not lowered_header or not field_name:
        return 0.0

    if lowered_header == field_name:
        return EXACT_SCORE

    if lowered_header in field_name or field_name in lowered_header:
        return SUBSTRING_SCORE

    header_words = _words(lowered_header)
    field_words = _words(field_name)
    if not header_words or not field_words:
        return 0.0

    common = sum(
        1
        for field_word in field_words
        if any(
            field_word == header_word or field_word in header_word or header_word in field_word
            for header_word in header_words
        )
    )
    if common == 0:
        return 0.0

    return WORD_OVERLAP_WEIGHT * (common / max(len(header_words), len(field_words)))


class AutoMatcher:
    """Proposes a field mapping from headers, field names and known aliases."""

    def __init__(self, threshold: float = SIMILARITY_THRESHOLD):
        self.threshold = threshold

    def match(
        self,
        target_fields: Sequence[TargetField],
        csv_headers: Sequence[str],
        alias_table: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> MatchResult:
        """
        Build a fresh mapping for all target fields.

        The result does not depend on any previously committed mapping.

        Args:
            target_fields: Fields to match, in precedence order
            csv_headers: Headers of the uploaded file
            alias_table: Known header aliases per field api name

        Returns:
            MatchResult with the mapping and one decision per matched field
        """
        alias_table = alias_table or {}
        header_set = set(csv_headers)
        mapping: FieldMapping = {}
        decisions: list[MatchDecision] = []

        for field in target_fields:
            claimed = set(mapping.values())
            available = [h for h in csv_headers if is_usable_value(h) and h not in claimed]

            decision = self._match_alias(field, available, alias_table.get(field.api_name) or [])
            if decision is None:
                decision = self._match_similarity(field, available)

            if decision is not None and decision.header in header_set:
                mapping[field.api_name] = decision.header
                decisions.append(decision)

        for decision in decisions:
            logger.info(decision.describe())
        logger.info(f"Auto-match completed: {len(mapping)} of {len(target_fields)} fields matched")

        return MatchResult(mapping=mapping, decisions=decisions, total_fields=len(target_fields))

    def _match_alias(
        self, field: TargetField, available: Sequence[str], aliases: Sequence[str]
    ) -> Optional[MatchDecision]:
        """First alias (in listed order) with an exact or normalized hit wins."""
        for alias in aliases:
            if not alias or not alias.strip():
                continue

            header = self._find_exact(alias, available) or self._find_normalized(alias, available)
            if header is not None:
                return MatchDecision(
                    api_name=field.api_name,
                    header=header,
                    method=MatchMethod.ALIAS,
                    alias=alias,
                )
        return None

    @staticmethod
    def _find_exact(alias: str, available: Sequence[str]) -> Optional[str]:
        wanted = alias.lower()
        for header in available:
            if header.strip().lower() == wanted:
                return header
        return None

    @staticmethod
    def _find_normalized(alias: str, available: Sequence[str]) -> Optional[str]:
        wanted = normalize_header(alias)
        if not wanted:
            return None
        for header in available:
            if normalize_header(header) == wanted:
                return header
        return None

    def _match_similarity(
        self, field: TargetField, available: Sequence[str]
    ) -> Optional[MatchDecision]:
        """Best-scoring unclaimed header; ties keep the earlier header."""
        best_header = None
        best_score = 0.0

        for header in available:
            score = similarity_score(header, field.api_name)
            if score > best_score:
                best_score = score
                best_header = header

        if best_header is None or best_score < self.threshold:
            return None

        return MatchDecision(
            api_name=field.api_name,
            header=best_header,
            method=MatchMethod.SIMILARITY,
            score=best_score,
        )


def auto_match(
    target_fields: Sequence[TargetField],
    csv_headers: Sequence[str],
    alias_table: Optional[AliasTable] = None,
) -> MatchResult:
    """Run the default auto-matcher."""
    return AutoMatcher().match(target_fields, csv_headers, alias_table)
