"""
Vector similarity scoring for the semantic leg of hybrid search.
"""

import logging
from typing import List, Sequence

import numpy as np

from .exceptions import DimensionMismatchError
from .models import Document

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity between two equal-length vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatchError: If the vectors differ in length. Callers are
            expected to filter mismatched documents beforehand.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vectors must have the same length: {len(a)} != {len(b)}"
        )

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    denominator = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denominator == 0.0:
        return 0.0

    return float(np.dot(va, vb)) / denominator


def score_documents(query_vector: Sequence[float], documents: Sequence[Document]) -> List[tuple]:
    """
    Cosine similarity of the query against every document of matching dimension.

    Documents whose vector length differs from the query's are skipped, since
    several embedding models may share one store.

    Returns:
        List of (document, similarity) pairs in input order
    """
    dimension = len(query_vector)
    scored = []
    skipped = 0

    for document in documents:
        if len(document.vector) != dimension:
            skipped += 1
            continue
        scored.append((document, cosine_similarity(query_vector, document.vector)))

    if skipped:
        logger.debug(f"Skipped {skipped} documents with dimension != {dimension}")

    return scored
