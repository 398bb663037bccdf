"""
Configuration for the bag-of-words vectorizer
"""

from dataclasses import dataclass
from numbers import Integral, Real
from typing import FrozenSet, Iterable, Optional, Tuple, Union

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from movie_recs.exceptions import InvalidRangeError


def _is_real(value):
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_int(value):
    return isinstance(value, Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class VectorizerConfig:
    """Bag-of-words vectorizer settings, validated on construction.

    min_df / max_df are document-frequency fractions in [0, 1]. stopwords may
    be "english" (scikit-learn's list), None, or any iterable of terms; it is
    stored as a frozenset. token_pattern=None splits on whitespace. None is
    rejected for the numeric settings.
    """
    min_df: float = 0.0
    max_df: float = 1.0
    max_features: int = 5000            # Vocabulary cap
    ngram_range: Tuple[int, int] = (1, 1)
    stopwords: Union[str, Iterable[str], FrozenSet[str], None] = "english"
    token_pattern: Optional[str] = None
    lowercase: bool = True

    def __post_init__(self):
        for name in ("min_df", "max_df"):
            if not _is_real(getattr(self, name)):
                raise InvalidRangeError(f"{name} must be a number, got {getattr(self, name)!r}")
        if not _is_int(self.max_features):
            raise InvalidRangeError(f"max_features must be an integer, got {self.max_features!r}")

        if not 0.0 <= self.min_df <= 1.0:
            raise InvalidRangeError(f"min_df must be within [0, 1], got {self.min_df}")
        if not 0.0 <= self.max_df <= 1.0:
            raise InvalidRangeError(f"max_df must be within [0, 1], got {self.max_df}")
        if self.min_df > self.max_df:
            raise InvalidRangeError(
                f"min_df ({self.min_df}) is greater than max_df ({self.max_df})"
            )
        if self.max_features < 1:
            raise InvalidRangeError(f"max_features must be >= 1, got {self.max_features}")

        try:
            min_n, max_n = self.ngram_range
        except (TypeError, ValueError):
            raise InvalidRangeError(f"ngram_range must be a (min_n, max_n) pair, got {self.ngram_range!r}")
        if not (_is_int(min_n) and _is_int(max_n)):
            raise InvalidRangeError(f"ngram_range bounds must be integers, got {self.ngram_range!r}")
        if min_n < 1:
            raise InvalidRangeError(f"ngram_range lower bound must be >= 1, got {min_n}")
        if min_n > max_n:
            raise InvalidRangeError(f"ngram_range ({min_n}, {max_n}) has min_n > max_n")
        object.__setattr__(self, "ngram_range", (int(min_n), int(max_n)))

        object.__setattr__(self, "stopwords", _resolve_stopwords(self.stopwords))


def _resolve_stopwords(stopwords):
    if stopwords is None:
        return frozenset()
    if isinstance(stopwords, str):
        if stopwords == "english":
            return frozenset(ENGLISH_STOP_WORDS)
        raise InvalidRangeError(f"Unknown stopword list: {stopwords!r}")
    return frozenset(stopwords)
