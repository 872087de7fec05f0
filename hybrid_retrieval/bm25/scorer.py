"""
BM25 scorer with corpus-wide IDF.

BM25 (Best Match 25) is a probabilistic ranking function used for information retrieval.
Corpus statistics are derived from the documents passed to each call and are
never cached, so scores always reflect the current corpus snapshot.

Formula:
    idf(term) = ln((N - df + 0.5) / (df + 0.5) + 1)
    score(term, doc) = idf × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × dl/avgdl))

Where:
    N = number of documents in the corpus
    df = number of documents containing the term at least once
    tf = term frequency in document
    k1 = term frequency saturation parameter (default: 1.5)
    b = length normalization parameter (default: 0.75)
    dl = document length (number of tokens)
    avgdl = mean document length across the corpus

The +1 inside the logarithm keeps idf non-negative even for terms present in
more than half of the documents.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..exceptions import EmptyCorpusError
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass
class BM25Score:
    """BM25 score for one input document (input order preserved)"""
    index: int   # Position in the input document list
    score: float # 0.0 when no query term matched
    text: str


@dataclass
class CorpusStatistics:
    """Per-query corpus statistics (rebuilt on every call)"""
    document_count: int
    avg_doc_length: float
    document_frequencies: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def build(cls, doc_tokens: Sequence[Sequence[str]], query_terms: Sequence[str]) -> "CorpusStatistics":
        """
        Compute average length and document frequency of each distinct query term.

        Raises:
            EmptyCorpusError: If there are no documents (avgdl undefined)
        """
        if not doc_tokens:
            raise EmptyCorpusError("Cannot compute BM25 statistics for an empty corpus")

        total_tokens = sum(len(tokens) for tokens in doc_tokens)
        avg_doc_length = total_tokens / len(doc_tokens)

        # df counts each document once, however many times the term occurs
        doc_sets = [set(tokens) for tokens in doc_tokens]
        document_frequencies = {
            term: sum(1 for terms in doc_sets if term in terms)
            for term in dict.fromkeys(query_terms)
        }

        return cls(
            document_count=len(doc_tokens),
            avg_doc_length=avg_doc_length,
            document_frequencies=document_frequencies,
        )

    def idf(self, term: str) -> float:
        """Inverse document frequency (0.0 for terms absent from the corpus)"""
        df = self.document_frequencies.get(term, 0)
        if df == 0:
            return 0.0
        n = self.document_count
        return math.log((n - df + 0.5) / (df + 0.5) + 1)


class BM25Scorer:
    """
    Okapi BM25 over an in-memory list of document texts.
    """

    def __init__(self, k1: float = 1.5, b: float = 0.75):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
                Higher = more weight to term frequency
                Default: 1.5

            b: Length normalization parameter
                Higher = more penalty for long documents
                Range: 0.0 - 1.0
                Default: 0.75
        """
        self.k1 = k1
        self.b = b

    def score(self, documents: Sequence[str], query: str) -> List[BM25Score]:
        """
        Score every document against the query.

        Args:
            documents: Document texts
            query: Raw query text (tokenized here)

        Returns:
            One BM25Score per document, in input order (not sorted)

        Raises:
            EmptyCorpusError: If documents is empty

        Example:
            >>> scorer = BM25Scorer()
            >>> [round(s.score, 3) for s in scorer.score(["the cat sat", "the dog ran"], "cat")]
            [0.693, 0.0]
        """
        query_terms = tokenize(query)
        doc_tokens = [tokenize(doc) for doc in documents]

        stats = CorpusStatistics.build(doc_tokens, query_terms)
        logger.debug(
            f"BM25 corpus: {stats.document_count} docs, avgdl={stats.avg_doc_length:.1f}, "
            f"query terms={query_terms}"
        )

        results = []
        for index, (text, tokens) in enumerate(zip(documents, doc_tokens)):
            results.append(BM25Score(
                index=index,
                score=self._score_document(tokens, query_terms, stats),
                text=text,
            ))

        return results

    def _score_document(
        self,
        tokens: Sequence[str],
        query_terms: Sequence[str],
        stats: CorpusStatistics,
    ) -> float:
        if not query_terms or not tokens:
            return 0.0

        term_frequencies = Counter(tokens)
        doc_length = len(tokens)
        score = 0.0

        # Repeated query terms contribute once per occurrence
        for term in query_terms:
            if stats.document_frequencies.get(term, 0) == 0:
                continue

            tf = term_frequencies.get(term, 0)
            numerator = tf * (self.k1 + 1)
            denominator = tf + self.k1 * (
                1 - self.b + self.b * (doc_length / stats.avg_doc_length)
            )
            score += stats.idf(term) * (numerator / denominator)

        return score


def calculate_bm25(
    documents: Sequence[str],
    query: str,
    k1: float = 1.5,
    b: float = 0.75,
) -> List[BM25Score]:
    """Score documents against a query with a one-off BM25Scorer."""
    return BM25Scorer(k1=k1, b=b).score(documents, query)
