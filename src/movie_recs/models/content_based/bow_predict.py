import logging

from movie_recs.config import configure_logging
from movie_recs.exceptions import UnknownTitleError
from movie_recs.models.train_model import build_index

logger = logging.getLogger(__name__)


def get_recommendations(title, index, top_n=5):
    """Return top-N (title, score) pairs for a movie title."""
    recommendations = [
        (item.title, round(score, 3))
        for item, score in index.similar_to_title(title, top_n)
    ]
    logger.info(f"Top {top_n} recommendations for '{title}': {recommendations}")
    return recommendations


def main():
    logger.info("Starting bag-of-words prediction...")
    index = build_index()

    user_input = input("Enter a movie title: ").strip()
    try:
        recommendations = get_recommendations(user_input, index)
    except UnknownTitleError as e:
        logger.warning(str(e))
        suggestions = index.find_close_titles(user_input)
        if suggestions:
            print(f"Did you mean: {', '.join(suggestions)}?")
        return

    if not recommendations:
        print(f"'{user_input}' has no comparable movies.")
    for rec_title, score in recommendations:
        print(f"{rec_title} (Similarity: {score})")

    logger.info("Prediction completed successfully.")


if __name__ == "__main__":
    configure_logging("bow_predict.log")
    main()
