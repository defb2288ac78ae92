"""BM25 lexical scoring over a candidate set (``rank_bm25.BM25Okapi``)."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from rank_bm25 import BM25Okapi

from contextual_rag.vectorstore.schemas import SearchResult

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+")


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens."""
    return _TOKEN_RE.findall(text.lower())


def bm25_top_n(query: str, results: Sequence[SearchResult], n: int) -> list[SearchResult]:
    """Return up to ``n`` results ranked by BM25 score against ``query``.

    Only results sharing at least one token with the query are eligible.
    BM25Okapi idf can go negative for terms present in most documents of a
    small corpus, so eligibility is decided by term overlap, not by sign.
    Ties keep the input order.
    """
    if n <= 0 or not results:
        return []

    query_tokens = tokenize(query)
    if not query_tokens:
        return []

    corpus = [tokenize(r.text) for r in results]
    if not any(corpus):
        return []

    scores = BM25Okapi(corpus).get_scores(query_tokens)
    wanted = set(query_tokens)
    eligible = [
        (float(scores[i]), i)
        for i, tokens in enumerate(corpus)
        if wanted.intersection(tokens)
    ]
    eligible.sort(key=lambda pair: pair[0], reverse=True)

    logger.debug("BM25 matched %d of %d documents", len(eligible), len(results))
    return [results[i] for _, i in eligible[:n]]
