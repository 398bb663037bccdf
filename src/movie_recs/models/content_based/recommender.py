import heapq
import logging
import math
from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Dict, List, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed

from movie_recs.data.make_dataset import Item
from movie_recs.exceptions import UnknownItemError, UnknownTitleError
from movie_recs.models.content_based.config import VectorizerConfig
from movie_recs.models.content_based.similarity import cosine_to_rows, row_norms
from movie_recs.models.content_based.vectorizer import BagOfWordsVectorizer, Vocabulary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommenderIndex:
    """Fitted bag-of-words index over a fixed corpus.

    Build it once with RecommenderIndex.build(items); after that nothing is
    written, so one index can serve queries from many threads. Lookups are by
    item id; title lookup is a convenience that picks the first item in corpus
    order carrying that title.
    """
    items: Tuple[Item, ...]
    vocabulary: Vocabulary
    matrix: np.ndarray = field(repr=False, compare=False)
    config: VectorizerConfig = field(default_factory=VectorizerConfig)
    _norms: np.ndarray = field(init=False, repr=False, compare=False)
    _rows_by_id: Dict[int, int] = field(init=False, repr=False, compare=False)
    _rows_by_title: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        if self.matrix.shape != (len(self.items), len(self.vocabulary)):
            raise ValueError(
                f"Matrix shape {self.matrix.shape} does not match "
                f"{len(self.items)} items x {len(self.vocabulary)} terms"
            )
        norms = row_norms(self.matrix)
        norms.setflags(write=False)
        object.__setattr__(self, "_norms", norms)

        rows_by_id, rows_by_title = {}, {}
        for row, item in enumerate(self.items):
            rows_by_id.setdefault(item.id, row)
            rows_by_title.setdefault(item.title, row)
        object.__setattr__(self, "_rows_by_id", rows_by_id)
        object.__setattr__(self, "_rows_by_title", rows_by_title)

    @classmethod
    def build(cls, items: Sequence[Item], config: VectorizerConfig = None) -> "RecommenderIndex":
        config = config or VectorizerConfig()
        items = tuple(items)
        logger.info(f"Building bag-of-words index for {len(items)} items...")
        vocabulary, matrix = BagOfWordsVectorizer(config).fit_transform([item.tag_text for item in items])
        return cls(items=items, vocabulary=vocabulary, matrix=matrix, config=config)

    def __len__(self):
        return len(self.items)

    def row_for_id(self, item_id: int) -> int:
        try:
            return self._rows_by_id[item_id]
        except KeyError:
            raise UnknownItemError(item_id) from None

    def row_for_title(self, title: str) -> int:
        try:
            return self._rows_by_title[title]
        except KeyError:
            raise UnknownTitleError(title) from None

    def get_item(self, item_id: int) -> Item:
        return self.items[self.row_for_id(item_id)]

    def scores_for_row(self, row: int) -> np.ndarray:
        return cosine_to_rows(self.matrix[row], self.matrix, norms=self._norms)

    def top_rows(self, row: int, k: int) -> List[Tuple[int, float]]:
        """(row, score) pairs of the k most similar rows to `row`.

        The query row and any row sharing its id are skipped, as are nan
        scores. Ranking is score descending, then row index ascending.
        """
        if k < 0:
            raise ValueError(f"k must be >= 0, got {k}")
        if k == 0:
            return []

        query_id = self.items[row].id
        scores = self.scores_for_row(row)
        candidates = (
            (other, float(score))
            for other, score in enumerate(scores)
            if other != row and self.items[other].id != query_id and not math.isnan(score)
        )
        top = heapq.nsmallest(k, candidates, key=lambda pair: (-pair[1], pair[0]))
        if not top and self._norms[row] == 0:
            logger.debug(f"Item {query_id} has no vocabulary terms; nothing is comparable")
        return top

    def similar_items(self, item_id: int, k: int = 5) -> List[Tuple[Item, float]]:
        return [(self.items[r], score) for r, score in self.top_rows(self.row_for_id(item_id), k)]

    def recommend_by_id(self, item_id: int, k: int = 5) -> List[Item]:
        return [item for item, _ in self.similar_items(item_id, k)]

    def similar_to_title(self, title: str, k: int = 5) -> List[Tuple[Item, float]]:
        return [(self.items[r], score) for r, score in self.top_rows(self.row_for_title(title), k)]

    def recommend(self, title: str, k: int = 5) -> List[Item]:
        """Items most similar to the first item titled `title`, best first."""
        return [item for item, _ in self.similar_to_title(title, k)]

    def recommend_batch(self, titles: Sequence[str], k: int = 5, n_jobs: int = 1) -> List[List[Item]]:
        """Run independent title queries in parallel threads, preserving input order."""
        return Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(self.recommend)(title, k) for title in titles
        )

    def find_close_titles(self, title: str, n: int = 3, cutoff: float = 0.6) -> List[str]:
        return get_close_matches(title, list(self._rows_by_title), n=n, cutoff=cutoff)

    def token_frequencies(self) -> Dict[str, int]:
        """Term -> total count across the corpus, in vocabulary order."""
        totals = self.matrix.sum(axis=0)
        return {term: int(count) for term, count in zip(self.vocabulary, totals)}

    def top_tokens(self, n: int = 20) -> List[Tuple[str, int]]:
        return list(self.token_frequencies().items())[:n]
