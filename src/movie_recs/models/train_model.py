import logging

from movie_recs.config import PLOTS_DIR, configure_logging, find_movies_csv
from movie_recs.data.make_dataset import load_corpus
from movie_recs.models.content_based.config import VectorizerConfig
from movie_recs.models.content_based.recommender import RecommenderIndex
from movie_recs.visualization.token_plots import plot_top_tokens, render_wordcloud

logger = logging.getLogger(__name__)


def build_index(config: VectorizerConfig = None) -> RecommenderIndex:
    movies_path = find_movies_csv()
    if movies_path is None:
        raise FileNotFoundError("No movies CSV found; run movie_recs.data.make_dataset first.")
    items = load_corpus(movies_path)
    return RecommenderIndex.build(items, config)


def report(index: RecommenderIndex, top_n: int = 20):
    frequencies = index.token_frequencies()
    empty_rows = int((index.matrix.sum(axis=1) == 0).sum())
    logger.info(f"Index: {len(index)} items, {len(index.vocabulary)} terms")
    if empty_rows:
        logger.warning(f"{empty_rows} items contain no vocabulary term and will get no recommendations")
    logger.info(f"Most frequent tags: {index.top_tokens(10)}")

    plot_top_tokens(frequencies, PLOTS_DIR / "top_tokens.png", top_n=top_n)
    render_wordcloud(frequencies, PLOTS_DIR / "token_wordcloud.png")


def main():
    logger.info("=== Starting Content-Based Pipeline ===")
    index = build_index()
    report(index)
    logger.info("=== Pipeline Completed ===")


if __name__ == "__main__":
    configure_logging("train_model.log")
    main()
