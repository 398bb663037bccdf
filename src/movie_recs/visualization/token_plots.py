"""
Token-frequency charts for a fitted index: a horizontal bar chart of the most
frequent terms and a word cloud of the whole table. Both only read the
term -> count mapping from RecommenderIndex.token_frequencies().
"""

import logging
from pathlib import Path
from typing import Mapping

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from wordcloud import WordCloud

logger = logging.getLogger(__name__)


def _check_frequencies(frequencies: Mapping[str, int]):
    if not frequencies:
        raise ValueError("Token-frequency table is empty; nothing to plot.")


def plot_top_tokens(frequencies: Mapping[str, int], out_path: Path, top_n: int = 20) -> Path:
    _check_frequencies(frequencies)
    top = sorted(frequencies.items(), key=lambda kv: -kv[1])[:top_n]
    terms = [term for term, _ in top]
    counts = [count for _, count in top]

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(8, max(4, len(top) * 0.4)))
    plt.barh(terms, counts, color="skyblue")
    plt.xlabel("Occurrences")
    plt.title(f"Top {len(top)} Tags")
    plt.gca().invert_yaxis()
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()
    logger.info(f"Bar plot saved to {out_path}")
    return out_path


def render_wordcloud(frequencies: Mapping[str, int], out_path: Path, max_words: int = 100) -> Path:
    _check_frequencies(frequencies)
    wordcloud = WordCloud(width=800, height=400, background_color="white",
                          max_words=max_words, contour_width=3, contour_color="steelblue")
    wordcloud.generate_from_frequencies(dict(frequencies))

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(10, 5))
    plt.imshow(wordcloud, interpolation="bilinear")
    plt.axis("off")
    plt.title("Tag Cloud", fontsize=16)
    plt.savefig(out_path)
    plt.close()
    logger.info(f"Word cloud saved to {out_path}")
    return out_path
