import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer

from movie_recs.exceptions import EmptyVocabularyError
from movie_recs.models.content_based.config import VectorizerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Ordered, immutable term list. A term's position is its vector dimension."""
    terms: Tuple[str, ...]
    _positions: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "terms", tuple(self.terms))
        object.__setattr__(self, "_positions", {t: i for i, t in enumerate(self.terms)})

    def __len__(self):
        return len(self.terms)

    def __iter__(self):
        return iter(self.terms)

    def __contains__(self, term):
        return term in self._positions

    def index_of(self, term):
        return self._positions[term]

    def get(self, term, default=None):
        return self._positions.get(term, default)


class BagOfWordsVectorizer:
    """Raw term-count vectorizer with a frequency-ranked, bounded vocabulary.

    Text analysis and counting go through scikit-learn's CountVectorizer;
    only the vocabulary selection (frequency rank, first-seen ties) is ours.
    """

    def __init__(self, config: VectorizerConfig = None):
        self.config = config or VectorizerConfig()
        self._text_vectorizer = self._build_text_vectorizer()
        self._preprocess = self._text_vectorizer.build_preprocessor()
        self._tokenizer = self._text_vectorizer.build_tokenizer()
        self._analyzer = self._text_vectorizer.build_analyzer()

    def _build_text_vectorizer(self) -> CountVectorizer:
        config = self.config
        return CountVectorizer(
            lowercase=config.lowercase,
            stop_words=sorted(config.stopwords) or None,
            ngram_range=config.ngram_range,
            token_pattern=config.token_pattern,
            tokenizer=str.split if config.token_pattern is None else None,
        )

    def tokenize(self, document: str) -> List[str]:
        return self._tokenizer(self._preprocess(str(document)))

    def analyze(self, document: str) -> List[str]:
        """Document -> terms: tokens minus stopwords, then n-grams (unigrams first)."""
        return self._analyzer(str(document))

    def fit_vocabulary(self, documents: Sequence[str]) -> Vocabulary:
        analyzed = [self.analyze(doc) for doc in documents]
        return self._select_vocabulary(analyzed)

    def transform(self, documents: Iterable[str], vocabulary: Vocabulary) -> np.ndarray:
        counter = CountVectorizer(analyzer=self._analyzer, vocabulary=list(vocabulary.terms))
        matrix = counter.transform([str(doc) for doc in documents]).toarray()
        matrix.setflags(write=False)
        return matrix

    def fit_transform(self, documents: Sequence[str]) -> Tuple[Vocabulary, np.ndarray]:
        documents = list(documents)
        vocabulary = self.fit_vocabulary(documents)
        matrix = self.transform(documents, vocabulary)
        logger.info(f"Vectorized {matrix.shape[0]} documents over {len(vocabulary)} terms")
        return vocabulary, matrix

    def _select_vocabulary(self, analyzed: List[List[str]]) -> Vocabulary:
        n_docs = len(analyzed)
        if n_docs == 0:
            raise EmptyVocabularyError("Cannot build a vocabulary from an empty corpus")

        # dict insertion order doubles as first-seen order
        totals: Dict[str, int] = {}
        doc_counts: Dict[str, int] = {}
        for terms in analyzed:
            for term in terms:
                totals[term] = totals.get(term, 0) + 1
            for term in set(terms):
                doc_counts[term] = doc_counts.get(term, 0) + 1

        min_df, max_df = self.config.min_df, self.config.max_df
        survivors = [
            term for term in totals
            if min_df <= doc_counts[term] / n_docs <= max_df
        ]
        if not survivors:
            raise EmptyVocabularyError(
                f"No terms left after filtering {len(totals)} candidates "
                f"(min_df={min_df}, max_df={max_df})"
            )

        # sorted() is stable, so equal totals keep first-seen order
        ranked = sorted(survivors, key=lambda term: -totals[term])
        kept = ranked[:self.config.max_features]
        logger.debug(f"Vocabulary: {len(totals)} candidates, {len(survivors)} in df band, {len(kept)} kept")
        return Vocabulary(tuple(kept))


def fit_transform(documents: Sequence[str], config: VectorizerConfig = None) -> Tuple[Vocabulary, np.ndarray]:
    return BagOfWordsVectorizer(config).fit_transform(documents)
