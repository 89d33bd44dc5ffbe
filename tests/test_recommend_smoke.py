import pytest

from tripmatch.collaborative.providers import StaticSimilarityProvider
from tripmatch.collaborative.similarity import SimilarityCache
from tripmatch.config.settings import get_settings
from tripmatch.domain.models import THEMES, CatalogItem, PreferenceProfile
from tripmatch.recommender.rank import rank
from tripmatch.recommender.recommend import recommend
from tripmatch.scoring.content import score_content


class RecordingTrace:
    def __init__(self):
        self.records = {}
        self.positions = []

    def __call__(self, position, record, confidence):
        self.positions.append((position, record.item_id, confidence))
        self.records[record.item_id] = record


class FailingProvider:
    def fetch(self):
        raise RuntimeError("similarity store down")


def _all_themes(value, **kwargs):
    return {**{t: value for t in THEMES}, **kwargs}


def test_identical_theme_vector_scores_full_confidence():
    settings = get_settings()
    profile = PreferenceProfile(**_all_themes(3))
    catalog = [CatalogItem(id="match", **_all_themes(3))]
    trace = RecordingTrace()

    result = recommend(profile, catalog=catalog, settings=settings, trace=trace)

    record = trace.records["match"]
    assert record.theme_score == pytest.approx(1.0)
    assert record.content_score == pytest.approx(1.0)
    assert record.hybrid_score == pytest.approx(1.0)
    # Only the theme factor had inputs; everything else is omitted rather than zero.
    assert [k for k, v in record.sub_scores().items() if v is not None] == ["theme_score"]
    assert [(r.item_id, r.confidence) for r in result.results] == [("match", 100)]


def test_collaborative_signal_blends_into_hybrid_score():
    settings = get_settings()
    catalog = [
        CatalogItem(id="a", **_all_themes(2, culture=5)),
        CatalogItem(id="b", **_all_themes(2, cuisine=5)),
        CatalogItem(id="c", **_all_themes(1, nature=4, beaches=5)),
    ]
    cache = SimilarityCache(StaticSimilarityProvider({"a": [("c", 0.5)], "b": [("c", 0.5)]}))
    profile = PreferenceProfile(**_all_themes(3), destination_ratings={"a": "like", "b": "like"})
    trace = RecordingTrace()

    result = recommend(profile, catalog=catalog, similarity_cache=cache, settings=settings, trace=trace)

    candidate = trace.records["c"]
    assert candidate.collab_score == pytest.approx(0.5)
    assert candidate.hybrid_score == pytest.approx(0.7 * candidate.content_score + 0.3 * 0.5)
    assert trace.records["a"].collab_score == 0.0
    assert {r.item_id for r in result.results} == {"a", "b", "c"}
    assert result.meta["collaborative"]["scored_items"] == 1
    assert result.meta["settings_snapshot"]["hybrid_weights"] == {"content": 0.7, "collaborative": 0.3}


def test_recommend_does_not_mutate_profile():
    catalog = [CatalogItem(id="liked", adventure=5), CatalogItem(id="other", adventure=4)]
    profile = PreferenceProfile(adventure=2, destination_ratings={"liked": "like"})

    result = recommend(profile, catalog=catalog, settings=get_settings())

    assert profile.adventure == 2
    assert result.adjustment.profile.adventure == 5


def test_ties_keep_catalog_order_and_respect_top_n():
    catalog = [CatalogItem(id=name, **_all_themes(4)) for name in ("first", "second", "third")]
    profile = PreferenceProfile(**_all_themes(4))

    result = recommend(profile, catalog=catalog, settings=get_settings(), top_n=2)

    assert [r.item_id for r in result.results] == ["first", "second"]


def test_empty_catalog_and_missing_profile_return_empty_results():
    settings = get_settings()

    empty = recommend(PreferenceProfile(), catalog=[], settings=settings)
    missing = recommend(None, catalog=[CatalogItem(id="x")], settings=settings)

    assert empty.results == []
    assert empty.meta["warnings"][0]["code"] == "CATALOG_EMPTY"
    assert missing.results == []
    assert missing.meta["warnings"][0]["code"] == "PROFILE_MISSING"


def test_raw_profile_payloads_are_validated_not_crashed_on():
    settings = get_settings()
    catalog = [CatalogItem(id="a", culture=3)]

    ok = recommend({"culture": 3, "destinationRatings": {"a": "like"}}, catalog=catalog, settings=settings)
    out_of_range = recommend({"culture": 9}, catalog=catalog, settings=settings)
    not_a_mapping = recommend("culture=3", catalog=catalog, settings=settings)

    assert [r.item_id for r in ok.results] == ["a"]
    assert ok.adjustment.liked_ids == ["a"]
    for result in (out_of_range, not_a_mapping):
        assert result.results == []
        assert result.meta["warnings"][0]["code"] == "PROFILE_INVALID"
    assert out_of_range.meta["errors"][0]["loc"] == ["culture"]


def test_explicit_zero_top_n_returns_no_results():
    catalog = [CatalogItem(id="a", culture=3), CatalogItem(id="b", culture=2)]

    result = recommend(PreferenceProfile(culture=3), catalog=catalog, settings=get_settings(), top_n=0)

    assert result.results == []
    assert result.meta["settings_snapshot"]["top_n"] == 0


def test_failing_similarity_provider_degrades_to_content_only():
    catalog = [CatalogItem(id="a", culture=5), CatalogItem(id="b", culture=4)]
    profile = PreferenceProfile(culture=5, destination_ratings={"a": "like", "ghost": "dislike"})

    result = recommend(
        profile,
        catalog=catalog,
        similarity_cache=SimilarityCache(FailingProvider()),
        settings=get_settings(),
    )

    codes = [w["code"] for w in result.meta["warnings"]]
    assert "COLLABORATIVE_EMPTY" in codes
    assert "RATINGS_UNKNOWN_IDS" in codes
    assert [r.item_id for r in result.results] == ["a", "b"]


def test_settings_overrides_apply_to_a_single_run():
    settings = get_settings()
    catalog = [CatalogItem(id=f"d{i}", culture=5 - i % 5) for i in range(6)]
    profile = PreferenceProfile(culture=5)

    result = recommend(
        profile,
        catalog=catalog,
        settings=settings,
        settings_overrides={"scoring": {"top_n_default": 5}},
    )

    assert len(result.results) == 5
    assert settings.scoring.top_n_default == 3
    with pytest.raises(ValueError):
        recommend(profile, catalog=catalog, settings=settings, settings_overrides={"cache": {"enabled": False}})


def test_rank_without_ratings_ignores_collaborative_scores():
    settings = get_settings()
    catalog = [CatalogItem(id="a", **_all_themes(3)), CatalogItem(id="b", **_all_themes(1, urban=5))]
    content = score_content(PreferenceProfile(**_all_themes(3)), catalog, settings=settings)

    results = rank(content, {"b": 1.0}, False, 2, settings=settings)

    assert [r.item_id for r in results] == ["a", "b"]
    assert results[0].confidence == 100


def test_content_scores_renormalize_over_present_factors():
    settings = get_settings()
    profile = PreferenceProfile(**_all_themes(3), preferred_regions=["Asia"], travel_budget=["budget"])
    dest = CatalogItem(id="x", **_all_themes(3), region="Europe", budget_level="budget")

    record = score_content(profile, [dest], settings=settings)["x"]

    w = settings.scoring.content_weights
    expected = (w.theme * 1.0 + w.region * 0.3 + w.budget * 1.0) / (w.theme + w.region + w.budget)
    assert record.content_score == pytest.approx(expected)
    assert record.climate_score is None
