"""Transient full-text index over command bar candidates using Whoosh.

The index lives in memory for a single query:
- Searchable fields are analysed by the script-aware tokenizer plus n-gram expansion
- Field boosts are applied per term at query time
- Query tokens are combined with AND, expansions of one token with OR
- A small edit distance is tolerated per query token
- The candidate id is stored as an exact key and never searched
"""

import math
import time
from typing import Dict, Iterable, List, Optional

from loguru import logger
from whoosh import scoring
from whoosh.analysis import Filter, Token, Tokenizer
from whoosh.fields import ID, STORED, Schema, TEXT
from whoosh.filedb.filestore import RamStorage
from whoosh.query import And, FuzzyTerm, Or, Term

from ..models import IndexedDocument, ScoredMatch, SourceType
from ..terms import NGRAM_MAX, NGRAM_MIN, expand_term
from ..tokenizer import tokenize as tokenize_text

FIELD_BOOSTS: Dict[str, float] = {
    'title': 4.0,
    'url_base': 3.0,
    'url_query': 2.0,
    'url_hash': 1.0,
}

FUZZY_RATIO = 0.1

# URL tokens shared by nearly every page; indexed whole but not split into n-grams
URL_NOISE_TOKENS = frozenset({
    'http', 'https', 'www', 'com', 'org', 'net', 'html', 'htm', 'php', 'aspx',
})

# Longer URL tokens are opaque ids and hashes
URL_EXPANSION_MAX_LENGTH = 24


class ScriptAwareTokenizer(Tokenizer):
    """Whoosh tokenizer backed by :func:`switchbar.core.tokenizer.tokenize`."""

    def __init__(self, field: Optional[str] = None):
        self.field = field

    def __call__(self, value, positions=False, chars=False, keeporiginal=False,
                 removestops=True, start_pos=0, start_char=0, tokenize=True,
                 mode='', **kwargs):
        t = Token(positions, chars, removestops=removestops, mode=mode, **kwargs)
        texts = tokenize_text(value, self.field) if tokenize else [value.lower()]
        for pos, text in enumerate(texts, start_pos):
            t.original = t.text = text
            t.boost = 1.0
            t.stopped = False
            if positions:
                t.pos = pos
            if chars:
                t.startchar = start_char
                t.endchar = start_char + len(value)
            yield t


class TermExpansionFilter(Filter):
    """
    Replaces each token with its n-gram expansions.

    Tokens listed in ``keep_whole`` or longer than ``max_length`` pass
    through unexpanded.
    """

    def __init__(self,
                 minsize: int = NGRAM_MIN,
                 maxsize: int = NGRAM_MAX,
                 keep_whole: Iterable[str] = (),
                 max_length: Optional[int] = None):
        self.minsize = minsize
        self.maxsize = maxsize
        self.keep_whole = frozenset(keep_whole)
        self.max_length = max_length

    def __call__(self, tokens):
        for t in tokens:
            if t.text in self.keep_whole or (self.max_length and len(t.text) > self.max_length):
                yield t
                continue
            for text in expand_term(t.text, self.minsize, self.maxsize):
                t.text = text
                yield t


def build_schema(ngram_min: int = NGRAM_MIN, ngram_max: int = NGRAM_MAX) -> Schema:
    """Create the schema: four searchable fields plus stored display data."""
    def title_analyzer():
        return ScriptAwareTokenizer('title') | TermExpansionFilter(ngram_min, ngram_max)

    def url_analyzer():
        return ScriptAwareTokenizer() | TermExpansionFilter(
            ngram_min, ngram_max,
            keep_whole=URL_NOISE_TOKENS,
            max_length=URL_EXPANSION_MAX_LENGTH,
        )

    return Schema(
        id=ID(stored=True),
        title=TEXT(stored=True, analyzer=title_analyzer(), phrase=False),
        url_base=TEXT(analyzer=url_analyzer(), phrase=False),
        url_query=TEXT(analyzer=url_analyzer(), phrase=False),
        url_hash=TEXT(analyzer=url_analyzer(), phrase=False),
        url=STORED(),
        source_type=STORED(),
    )


class CandidateIndex:
    """
    In-memory inverted index built from one snapshot of candidates.

    The index is never modified after :meth:`build` returns.
    """

    def __init__(self,
                 storage_index,
                 boosts: Optional[Dict[str, float]] = None,
                 fuzzy: float = FUZZY_RATIO,
                 fuzzy_prefix_length: int = 1,
                 ngram_min: int = NGRAM_MIN,
                 ngram_max: int = NGRAM_MAX):
        self._index = storage_index
        self.boosts = dict(boosts or FIELD_BOOSTS)
        self.fuzzy = fuzzy
        self.fuzzy_prefix_length = fuzzy_prefix_length
        self.ngram_min = ngram_min
        self.ngram_max = ngram_max

    @classmethod
    def build(cls,
              documents: Iterable[IndexedDocument],
              urls: Dict[str, str],
              **options) -> "CandidateIndex":
        """
        Index documents.

        Args:
            documents: Documents to index
            urls: Full original URL per document id, returned with matches
            **options: Query options forwarded to the constructor

        Returns:
            A ready-to-query index
        """
        start = time.perf_counter()
        schema = build_schema(options.get('ngram_min', NGRAM_MIN), options.get('ngram_max', NGRAM_MAX))
        ix = RamStorage().create_index(schema)

        count = 0
        writer = ix.writer()
        for doc in documents:
            writer.add_document(
                id=doc.id,
                title=doc.title,
                url_base=doc.url_base,
                url_query=doc.url_query,
                url_hash=doc.url_hash,
                url=urls.get(doc.id, doc.url_base),
                source_type=doc.source_type.value,
            )
            count += 1
        writer.commit()

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Indexed {count} candidates in {elapsed_ms:.1f}ms")
        return cls(ix, **options)

    def fuzzy_distance(self, token: str) -> int:
        """Allowed edit distance for a query token."""
        return int(math.floor(len(token) * self.fuzzy + 0.5))

    def _token_clause(self, token: str):
        expansions = list(dict.fromkeys(expand_term(token, self.ngram_min, self.ngram_max)))
        maxdist = self.fuzzy_distance(token)

        subqueries = []
        for field, boost in self.boosts.items():
            subqueries.extend(Term(field, text, boost=boost) for text in expansions)
            if maxdist > 0:
                subqueries.append(FuzzyTerm(
                    field, token,
                    boost=boost,
                    maxdist=maxdist,
                    prefixlength=self.fuzzy_prefix_length,
                ))
        return Or(subqueries)

    def build_query(self, term: str):
        """AND over query tokens, each an OR of its expansions across fields."""
        tokens = list(dict.fromkeys(tokenize_text(term)))
        if not tokens:
            return None
        return And([self._token_clause(token) for token in tokens])

    def query(self, term: str) -> List[ScoredMatch]:
        """
        Run a boosted, fuzzy, conjunctive query.

        Args:
            term: Raw query text

        Returns:
            Matches in descending score order
        """
        query = self.build_query(term)
        if query is None:
            return []

        start = time.perf_counter()
        matches = []
        with self._index.searcher(weighting=scoring.BM25F()) as searcher:
            for hit in searcher.search(query, limit=None):
                matches.append(ScoredMatch(
                    id=hit['id'],
                    score=float(hit.score),
                    source_type=SourceType(hit['source_type']),
                    url=hit.get('url', ''),
                    title=hit.get('title', ''),
                ))

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Query {term!r} matched {len(matches)} candidates in {elapsed_ms:.1f}ms")
        return matches
