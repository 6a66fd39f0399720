"""Deduplication, score merging and ordering of candidates and matches."""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .documents import canonical_url, url_host
from .errors import InvalidURLError
from .models import CandidateRecord, ScoredMatch


def dedupe_by_url(candidates: Sequence[CandidateRecord]) -> List[CandidateRecord]:
    """
    Collapse candidates sharing a canonical URL (no query, no fragment).

    The survivor of each group is the one with the best source type
    (tab > history > bookmark); among equals the first seen wins. Survivors
    keep the position of the first member of their group. Candidates whose
    URL cannot be parsed are dropped.
    """
    groups: Dict[str, CandidateRecord] = {}
    for candidate in candidates:
        try:
            key = canonical_url(candidate.url)
        except InvalidURLError as e:
            logger.warning(f"Skipping candidate {candidate.id}: {e}")
            continue

        kept = groups.get(key)
        if kept is None or candidate.source_type.precedence < kept.source_type.precedence:
            # Reassigning an existing key keeps its insertion position
            groups[key] = candidate
    return list(groups.values())


def display_key(url: str, title: str) -> Tuple[str, str]:
    """
    Identity of a result for display: lowercased host plus title.

    Only called for URLs that already passed :func:`dedupe_by_url`.
    """
    return url_host(url), title


def merge_by_max_score(*result_sets: Iterable[ScoredMatch]) -> List[ScoredMatch]:
    """Union of match lists keeping, per id, the match with the highest score."""
    best: Dict[str, ScoredMatch] = {}
    for results in result_sets:
        for match in results:
            current = best.get(match.id)
            if current is None or match.score > current.score:
                best[match.id] = match
    return list(best.values())


def rank_matches(matches: Iterable[ScoredMatch],
                 order: Optional[Dict[str, int]] = None) -> List[ScoredMatch]:
    """
    Sort by source type precedence, then score descending.

    Args:
        matches: Scored matches
        order: Position of each id in the candidate list, used as final tie-break

    Returns:
        Sorted matches
    """
    order = order or {}
    return sorted(
        matches,
        key=lambda m: (m.source_type.precedence, -m.score, order.get(m.id, len(order)), m.id),
    )


def dedupe_by_display_key(matches: Iterable[ScoredMatch]) -> List[ScoredMatch]:
    """Keep the first match for every (host, title) pair."""
    seen = set()
    unique = []
    for match in matches:
        key = display_key(match.url, match.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(match)
    return unique


def finalize(matches: Iterable[ScoredMatch],
             max_results: int,
             order: Optional[Dict[str, int]] = None) -> List[ScoredMatch]:
    """Rank, collapse display duplicates and cap the result list."""
    if max_results <= 0:
        return []
    ranked = rank_matches(matches, order)
    return dedupe_by_display_key(ranked)[:max_results]
