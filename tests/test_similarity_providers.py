import json

import pytest

from tripmatch.collaborative.providers import (
    JsonFileSimilarityProvider,
    RestSimilarityProvider,
    build_similarity_provider,
    matrix_from_payload,
)
from tripmatch.collaborative.similarity import Neighbor
from tripmatch.config.settings import Settings
from tripmatch.core.cache import FileCache


ROWS = [
    {"item_id": "lisbon", "neighbour_id": "berlin", "sim": 0.62},
    {"item_id": "lisbon", "neighbour_id": "kyoto", "sim": 0.41},
]


def _rest_settings(**rest) -> Settings:
    cfg = {"base_url": "https://sim.example.org/", "api_key": "secret-key"}
    cfg.update(rest)
    return Settings.model_validate({"similarity": {"source": "rest", "rest": cfg}})


def test_json_file_provider_reads_rows(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps(ROWS), encoding="utf-8")

    matrix = JsonFileSimilarityProvider(path).fetch()

    assert matrix["lisbon"] == (Neighbor("berlin", 0.62), Neighbor("kyoto", 0.41))


def test_json_file_provider_reads_grouped_mapping(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"a": [{"id": "b", "sim": 0.3}, ["c", 0.2]]}), encoding="utf-8")

    matrix = JsonFileSimilarityProvider(path).fetch()

    assert matrix["a"] == (Neighbor("b", 0.3), Neighbor("c", 0.2))


def test_matrix_from_payload_rejects_unknown_shapes():
    with pytest.raises(ValueError, match="Unsupported similarity payload"):
        matrix_from_payload("lisbon,berlin,0.6")


def test_rest_provider_requests_similarity_table(monkeypatch):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout_seconds})
        return ROWS

    monkeypatch.setattr("tripmatch.collaborative.providers.get_json", fake_get_json)

    matrix = RestSimilarityProvider(_rest_settings(timeout_seconds=3)).fetch()

    assert matrix["lisbon"][0] == Neighbor("berlin", 0.62)
    assert calls == [
        {
            "url": "https://sim.example.org/rest/v1/item_similarity",
            "params": {"select": "item_id,neighbour_id,sim"},
            "headers": {"apikey": "secret-key", "Authorization": "Bearer secret-key"},
            "timeout": 3.0,
        }
    ]


def test_rest_provider_serves_last_good_rows_when_upstream_fails(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True)
    settings = _rest_settings()

    monkeypatch.setattr("tripmatch.collaborative.providers.get_json", lambda *a, **k: ROWS)
    RestSimilarityProvider(settings, cache).fetch()

    def down(*args, **kwargs):
        raise RuntimeError("upstream down")

    monkeypatch.setattr("tripmatch.collaborative.providers.get_json", down)
    matrix = RestSimilarityProvider(settings, cache).fetch()

    assert matrix["lisbon"] == (Neighbor("berlin", 0.62), Neighbor("kyoto", 0.41))


def test_rest_provider_raises_without_snapshot(monkeypatch, tmp_path):
    def down(*args, **kwargs):
        raise RuntimeError("upstream down")

    monkeypatch.setattr("tripmatch.collaborative.providers.get_json", down)

    with pytest.raises(RuntimeError):
        RestSimilarityProvider(_rest_settings(), FileCache(tmp_path)).fetch()
    with pytest.raises(RuntimeError):
        RestSimilarityProvider(_rest_settings()).fetch()


def test_rest_provider_requires_base_url():
    with pytest.raises(ValueError, match="base_url"):
        RestSimilarityProvider(_rest_settings(base_url=None))


def test_build_similarity_provider_by_source(tmp_path):
    assert build_similarity_provider(Settings()) is None

    file_settings = Settings.model_validate(
        {"similarity": {"source": "file", "path": str(tmp_path / "sim.json")}}
    )
    provider = build_similarity_provider(file_settings)
    assert isinstance(provider, JsonFileSimilarityProvider)
    assert provider.path == tmp_path / "sim.json"

    rest_settings = _rest_settings()
    rest_settings.cache.dir = str(tmp_path / "cache")
    assert isinstance(build_similarity_provider(rest_settings), RestSimilarityProvider)
