import numpy as np
import pytest

from movie_recs.data.make_dataset import Item
from movie_recs.exceptions import UnknownItemError, UnknownTitleError
from movie_recs.models.content_based.config import VectorizerConfig
from movie_recs.models.content_based.recommender import RecommenderIndex

PLAIN = VectorizerConfig(stopwords=None)


def titles(items):
    return [item.title for item in items]


def test_dark_knight_ranks_above_clueless(batman_index):
    assert titles(batman_index.recommend("Batman Begins", k=2)) == ["The Dark Knight", "Clueless"]


def test_scores_for_batman_scenario(batman_index):
    results = batman_index.similar_to_title("Batman Begins", k=2)
    assert results[0][1] == pytest.approx(4 / (2 * 5 ** 0.5))
    assert results[1][1] == pytest.approx(0.0)


def test_query_item_never_returned(batman_index, batman_items):
    for item in batman_items:
        results = batman_index.recommend(item.title, k=10)
        assert item not in results
        assert len(results) <= len(batman_items) - 1


@pytest.mark.parametrize("k", [0, 1, 2, 3, 10])
def test_result_length_bounded(batman_index, k):
    assert len(batman_index.recommend("Clueless", k=k)) == min(k, 2)


def test_negative_k_raises(batman_index):
    with pytest.raises(ValueError):
        batman_index.recommend("Clueless", k=-1)


def test_unknown_title(batman_index):
    with pytest.raises(UnknownTitleError) as exc_info:
        batman_index.recommend("Batman Forever")
    assert isinstance(exc_info.value, KeyError)
    assert "Batman Forever" in str(exc_info.value)


def test_unknown_id(batman_index):
    with pytest.raises(UnknownItemError):
        batman_index.recommend_by_id(404)


def test_recommend_by_id(batman_index):
    assert titles(batman_index.recommend_by_id(2, k=1)) == ["Batman Begins"]


def test_zero_vector_query_returns_empty():
    items = [
        Item(1, "Silent", "the and of"),
        Item(2, "Heat", "crime heist"),
        Item(3, "Ronin", "crime heist paris"),
    ]
    index = RecommenderIndex.build(items)
    assert index.recommend("Silent", k=5) == []
    # and the zero row never shows up for other queries
    assert titles(index.recommend("Heat", k=5)) == ["Ronin"]


def test_top_k_is_order_independent():
    query = Item(0, "Query", "x y z")
    others = [
        Item(1, "One", "x"),
        Item(2, "Two", "x y"),
        Item(3, "Three", "x y z w"),
        Item(4, "Four", "q"),
    ]
    forward = RecommenderIndex.build([query] + others, PLAIN)
    backward = RecommenderIndex.build([query] + others[::-1], PLAIN)

    expected = ["Three", "Two", "One"]
    assert titles(forward.recommend("Query", k=3)) == expected
    assert titles(backward.recommend("Query", k=3)) == expected


def test_ties_broken_by_corpus_order():
    items = [
        Item(1, "Query", "drama war"),
        Item(2, "First", "drama war"),
        Item(3, "Second", "drama war"),
    ]
    assert titles(RecommenderIndex.build(items, PLAIN).recommend("Query")) == ["First", "Second"]

    swapped = [items[0], items[2], items[1]]
    assert titles(RecommenderIndex.build(swapped, PLAIN).recommend("Query")) == ["Second", "First"]


def test_identical_item_scores_one():
    items = [Item(1, "Query", "drama war"), Item(2, "Twin", "drama war")]
    [(twin, score)] = RecommenderIndex.build(items, PLAIN).similar_to_title("Query", k=1)
    assert twin.title == "Twin"
    assert score == pytest.approx(1.0)


def test_duplicate_title_uses_first_occurrence():
    items = [
        Item(10, "Solaris", "space ocean memory"),
        Item(11, "Solaris", "space ocean remake"),
        Item(12, "Stalker", "zone memory"),
    ]
    index = RecommenderIndex.build(items, PLAIN)
    results = index.recommend("Solaris", k=5)

    assert [item.id for item in results] == [11, 12]
    assert index.row_for_title("Solaris") == 0


def test_batch_matches_single_queries(batman_index):
    queries = ["Batman Begins", "Clueless", "The Dark Knight"]
    expected = [batman_index.recommend(title, k=2) for title in queries]
    assert batman_index.recommend_batch(queries, k=2, n_jobs=2) == expected


def test_batch_propagates_unknown_title(batman_index):
    with pytest.raises(UnknownTitleError):
        batman_index.recommend_batch(["Clueless", "Nope"], k=2)


def test_token_frequencies(batman_index):
    frequencies = batman_index.token_frequencies()
    assert list(frequencies) == list(batman_index.vocabulary)
    assert frequencies["batman"] == 2
    assert frequencies["school"] == 1
    assert sum(frequencies.values()) == int(batman_index.matrix.sum())
    assert batman_index.top_tokens(2) == [("action", 2), ("crime", 2)]


def test_find_close_titles(batman_index):
    assert batman_index.find_close_titles("Batman Begin") == ["Batman Begins"]


def test_index_is_immutable(batman_index):
    with pytest.raises(AttributeError):
        batman_index.items = ()
    assert not batman_index.matrix.flags.writeable


def test_independent_indexes_coexist(batman_items):
    small = RecommenderIndex.build(batman_items, VectorizerConfig(max_features=1))
    full = RecommenderIndex.build(batman_items)
    assert len(small.vocabulary) == 1
    assert len(full.vocabulary) == 8
    assert small.config.max_features == 1


def test_matrix_shape_must_match_items(batman_items):
    with pytest.raises(ValueError):
        RecommenderIndex(items=batman_items, vocabulary=RecommenderIndex.build(batman_items).vocabulary,
                         matrix=np.zeros((1, 1), dtype=int))


def test_extra_fields_pass_through():
    items = [
        Item(1, "Heat", "crime heist", extra={"year": 1995}),
        Item(2, "Ronin", "crime heist", extra={"year": 1998}),
    ]
    [result] = RecommenderIndex.build(items).recommend("Heat", k=1)
    assert result.to_dict() == {"id": 2, "title": "Ronin", "year": 1998}
