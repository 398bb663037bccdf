import pytest

from movie_recs.data.make_dataset import Item
from movie_recs.models.content_based.config import VectorizerConfig
from movie_recs.models.content_based.recommender import RecommenderIndex


@pytest.fixture
def batman_items():
    return (
        Item(1, "Batman Begins", "action crime batman nolan"),
        Item(2, "The Dark Knight", "action crime batman nolan joker"),
        Item(3, "Clueless", "comedy romance school"),
    )


@pytest.fixture
def batman_index(batman_items):
    return RecommenderIndex.build(batman_items, VectorizerConfig(min_df=0.0, max_df=1.0, max_features=500))
