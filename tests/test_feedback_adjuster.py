from tripmatch.config.settings import get_settings
from tripmatch.domain.models import THEMES, CatalogItem, PreferenceProfile
from tripmatch.feedback.adjuster import adjust_profile, mean_vector, round_away_from_zero


def _profile(**kwargs) -> PreferenceProfile:
    base = {t: 3 for t in THEMES}
    base.update(kwargs)
    return PreferenceProfile(**base)


def test_round_away_from_zero():
    assert round_away_from_zero(0.2) == 1
    assert round_away_from_zero(1.0) == 1
    assert round_away_from_zero(-1.5) == -2
    assert round_away_from_zero(-0.01) == -1
    assert round_away_from_zero(0.0) == 0


def test_mean_vector_of_nothing_is_zero_vector():
    assert mean_vector([]) == [0.0] * len(THEMES)
    assert mean_vector([[1, 3], [3, 5]], dims=2) == [2.0, 4.0]


def test_liked_adventure_pushes_profile_up_within_bounds():
    catalog = [
        CatalogItem(id="liked", adventure=5),
        CatalogItem(id="disliked", adventure=1),
    ]
    profile = _profile(adventure=3, destination_ratings={"liked": "like", "disliked": "dislike"})

    out = adjust_profile(profile, catalog, settings=get_settings())

    assert 3 < out.profile.adventure <= 5
    assert out.adjustments["adventure"] == 4
    assert out.liked_ids == ["liked"]
    assert out.disliked_ids == ["disliked"]


def test_fractional_deltas_round_to_whole_steps():
    catalog = [
        CatalogItem(id="a", culture=1),
        CatalogItem(id="b", culture=2),
        CatalogItem(id="c", nightlife=0.4),
    ]
    profile = _profile(culture=2, nightlife=3, destination_ratings={"a": "like", "b": "like", "c": "dislike"})

    out = adjust_profile(profile, catalog, settings=get_settings())

    # culture: mean 1.5 -> +2; nightlife: -0.4 -> -1
    assert out.adjustments["culture"] == 2
    assert out.adjustments["nightlife"] == -1
    assert out.profile.culture == 4
    assert out.profile.nightlife == 2


def test_no_ratings_leaves_vector_unchanged():
    profile = _profile(culture=5, urban=1)

    out = adjust_profile(profile, [CatalogItem(id="x", culture=5)], settings=get_settings())

    assert set(out.adjustments.values()) == {0}
    assert out.profile.theme_vector() == profile.theme_vector()


def test_absent_themes_are_clamped_to_minimum():
    out = adjust_profile(PreferenceProfile(culture=4), [], settings=get_settings())
    assert out.profile.culture == 4
    assert out.profile.beaches == 1


def test_unknown_rated_ids_are_skipped_and_reported(caplog):
    catalog = [CatalogItem(id="known", beaches=5)]
    profile = _profile(beaches=2, destination_ratings={"known": "like", "gone": "dislike"})

    with caplog.at_level("WARNING"):
        out = adjust_profile(profile, catalog, settings=get_settings())

    assert out.unknown_ids == ["gone"]
    assert out.disliked_ids == []
    assert out.profile.beaches == 5
    assert "gone" in caplog.text


def test_adjust_profile_does_not_mutate_caller_profile():
    catalog = [CatalogItem(id="liked", seclusion=5)]
    profile = _profile(seclusion=1, destination_ratings={"liked": "like"})
    before = profile.model_dump()

    out = adjust_profile(profile, catalog, settings=get_settings())

    assert out.profile.seclusion == 5
    assert profile.model_dump() == before
    assert out.profile.destination_ratings == profile.destination_ratings


def test_duplicate_catalog_ids_use_the_first_entry():
    catalog = [CatalogItem(id="dup", adventure=5), CatalogItem(id="dup", adventure=1)]
    profile = _profile(adventure=1, destination_ratings={"dup": "like"})

    out = adjust_profile(profile, catalog, settings=get_settings())

    assert out.adjustments["adventure"] == 5
    assert out.profile.adventure == 5
