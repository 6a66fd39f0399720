"""Ranked search over tabs, bookmarks and history for the command bar."""

from typing import Dict, List, Optional, Sequence

from loguru import logger

from .config import SearchConfig
from .documents import to_document
from .errors import InvalidURLError
from .indexers.fts import CandidateIndex
from .models import CandidateRecord
from .postprocess import dedupe_by_url, finalize, merge_by_max_score
from .transliterate import contains_cjk, to_pinyin


def build_index(candidates: Sequence[CandidateRecord],
                config: Optional[SearchConfig] = None) -> CandidateIndex:
    """Index a candidate snapshot. Candidates with bad URLs are left out."""
    config = config or SearchConfig()
    documents = []
    urls: Dict[str, str] = {}
    for candidate in candidates:
        try:
            documents.append(to_document(candidate))
        except InvalidURLError as e:
            logger.warning(f"Not indexing candidate {candidate.id}: {e}")
            continue
        urls[candidate.id] = candidate.url

    return CandidateIndex.build(
        documents,
        urls,
        boosts=config.boosts.as_dict(),
        fuzzy=config.fuzzy,
        fuzzy_prefix_length=config.fuzzy_prefix_length,
        ngram_min=config.ngram_min,
        ngram_max=config.ngram_max,
    )


def search(term: str,
           candidates: Sequence[CandidateRecord],
           max_results: int = 10,
           config: Optional[SearchConfig] = None) -> List[CandidateRecord]:
    """
    Find the candidates matching ``term``, best first.

    A blank term returns the first ``max_results`` candidates untouched.
    Otherwise candidates are merged per URL, indexed, queried (also in pinyin
    when the term has Chinese characters), collapsed per host and title,
    and ordered tabs first, then history, then bookmarks, by score within
    each type.

    Args:
        term: Query typed by the user
        candidates: Tabs, bookmarks and history entries
        max_results: Maximum number of results
        config: Search tuning; defaults apply when omitted

    Returns:
        Matching candidates, at most ``max_results``
    """
    max_results = max(0, max_results)
    if not term or not term.strip():
        return list(candidates[:max_results])

    unique = dedupe_by_url(candidates)
    if not unique or max_results == 0:
        return []

    index = build_index(unique, config)
    matches = index.query(term)
    if contains_cjk(term):
        transliterated = to_pinyin(term)
        logger.debug(f"Also searching transliterated query {transliterated!r}")
        matches = merge_by_max_score(matches, index.query(transliterated))

    by_id = {candidate.id: candidate for candidate in unique}
    order = {candidate.id: position for position, candidate in enumerate(unique)}
    ranked = finalize(matches, max_results, order)

    logger.debug(f"Search {term!r}: {len(matches)} matches, returning {len(ranked)}")
    return [by_id[match.id] for match in ranked]
