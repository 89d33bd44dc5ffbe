import pytest

from tripmatch.collaborative.providers import StaticSimilarityProvider
from tripmatch.collaborative.scorer import score_collaborative, score_collaborative_with_matrix
from tripmatch.collaborative.similarity import EMPTY_MATRIX, Neighbor, SimilarityCache, build_similarity_matrix
from tripmatch.domain.models import CatalogItem, PreferenceProfile


CATALOG = [CatalogItem(id=i) for i in ("a", "b", "c", "d")]


def _cache(payload) -> SimilarityCache:
    return SimilarityCache(StaticSimilarityProvider(payload))


def test_no_ratings_yields_empty_scores_without_fetching():
    cache = _cache({"a": [("c", 0.9)]})

    assert score_collaborative(PreferenceProfile(), CATALOG, cache=cache) == {}
    assert cache.fetch_count == 0


def test_empty_similarity_yields_empty_scores():
    profile = PreferenceProfile(destination_ratings={"a": "like"})

    assert score_collaborative(profile, CATALOG, cache=_cache({})) == {}
    assert score_collaborative_with_matrix(profile, CATALOG, EMPTY_MATRIX) == {}


def test_two_likes_sharing_a_neighbour_average_their_similarity():
    matrix = build_similarity_matrix(
        [
            {"item_id": "a", "neighbour_id": "c", "sim": 0.5},
            {"item_id": "b", "neighbour_id": "c", "sim": 0.5},
            {"item_id": "a", "neighbour_id": "b", "sim": 0.9},
        ]
    )
    profile = PreferenceProfile(destination_ratings={"a": "like", "b": "like"})

    scores = score_collaborative_with_matrix(profile, CATALOG, matrix)

    assert scores == {"c": pytest.approx(0.5)}


def test_partial_overlap_uses_only_positive_similarities():
    matrix = build_similarity_matrix([("a", "c", 0.8), ("b", "d", 0.2)])
    profile = PreferenceProfile(destination_ratings={"a": "like", "b": "like"})

    scores = score_collaborative_with_matrix(profile, CATALOG, matrix)

    assert scores == {"c": pytest.approx(0.8), "d": pytest.approx(0.2)}


def test_dislikes_do_not_contribute_and_are_not_scored():
    matrix = build_similarity_matrix([("a", "c", 0.6), ("b", "c", 0.9), ("a", "b", 0.7)])
    profile = PreferenceProfile(destination_ratings={"a": "like", "b": "dislike"})

    scores = score_collaborative_with_matrix(profile, CATALOG, matrix)

    assert scores == {"c": pytest.approx(0.6)}


def test_lookup_goes_from_liked_item_side_only():
    matrix = build_similarity_matrix([("c", "a", 0.9)])
    profile = PreferenceProfile(destination_ratings={"a": "like"})

    assert score_collaborative_with_matrix(profile, CATALOG, matrix) == {}


def test_build_similarity_matrix_skips_malformed_rows(caplog):
    rows = [
        {"item_id": 1, "neighbor_id": 2, "weight": 1.0},
        {"item_id": "1", "neighbour_id": "3", "sim": "0.25"},
        {"item_id": "1", "neighbour_id": "4", "sim": 0},
        {"item_id": "1", "neighbour_id": "5", "sim": 1.5},
        {"item_id": "1", "sim": 0.4},
        ("1", "6", "not-a-number"),
    ]

    with caplog.at_level("WARNING"):
        matrix = build_similarity_matrix(rows)

    assert dict(matrix) == {"1": (Neighbor("2", 1.0), Neighbor("3", 0.25))}
    assert "Skipped 4 malformed similarity row(s)" in caplog.text
