from fastapi.testclient import TestClient
import pytest

import movie_recs.api.app as api

client = TestClient(api.app)


@pytest.fixture
def loaded(monkeypatch, batman_index):
    monkeypatch.setattr(api, "recommender_index", batman_index)
    return batman_index


@pytest.fixture
def unloaded(monkeypatch):
    monkeypatch.setattr(api, "recommender_index", None)


def test_read_root(loaded):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert data["models"] == {"cb_loaded": True, "items": 3, "vocabulary_size": 8}


def test_recommend_content_by_title(loaded):
    response = client.get("/recommend/content/", params={"title": "Batman Begins", "top_n": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["query"] == {"id": 1, "title": "Batman Begins"}
    assert [r["title"] for r in data["recommendations"]] == ["The Dark Knight", "Clueless"]
    assert data["recommendations"][0]["score"] > data["recommendations"][1]["score"]


def test_recommend_content_by_id(loaded):
    response = client.get("/recommend/content/", params={"movie_id": 2, "top_n": 1})
    assert response.status_code == 200
    assert [r["id"] for r in response.json()["recommendations"]] == [1]


def test_recommend_content_needs_a_query(loaded):
    response = client.get("/recommend/content/")
    assert response.status_code == 400


def test_recommend_content_unknown_title_suggests(loaded):
    response = client.get("/recommend/content/", params={"title": "Batman Begin"})
    assert response.status_code == 404
    assert "Batman Begins" in response.json()["detail"]


def test_recommend_content_unknown_id(loaded):
    response = client.get("/recommend/content/", params={"movie_id": 99})
    assert response.status_code == 404


def test_recommend_content_validates_top_n(loaded):
    response = client.get("/recommend/content/", params={"title": "Clueless", "top_n": 0})
    assert response.status_code == 422


def test_top_tokens(loaded):
    response = client.get("/tokens/top", params={"n": 3})
    assert response.status_code == 200
    assert response.json()["tokens"] == [
        {"token": "action", "count": 2},
        {"token": "crime", "count": 2},
        {"token": "batman", "count": 2},
    ]


@pytest.mark.parametrize("path", ["/recommend/content/?title=Clueless", "/tokens/top"])
def test_endpoints_without_index(unloaded, path):
    assert client.get(path).status_code == 503


def test_root_without_index(unloaded):
    assert client.get("/").json()["models"]["cb_loaded"] is False
