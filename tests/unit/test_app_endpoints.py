from __future__ import annotations

from datetime import date

import pytest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.testclient import TestClient

from record_search.adapters.record_source import AbstractRecordSource, InMemoryRecordSource
from record_search.app import SearchRequest, create_app, render_result
from record_search.config import Settings
from record_search.domain.errors import CorpusFetchError
from record_search.domain.model import MatchResult, Record
from record_search.observability import trace_request


class DownRecordSource(AbstractRecordSource):
    async def fetch_records(self) -> list[Record]:
        raise CorpusFetchError("Airtable API error: Bad Gateway", status_code=502)


@pytest.fixture
def settings() -> Settings:
    return Settings(search_default_limit=5, search_threshold=0.4, cors_allow_origins="https://grants.example.org")


@pytest.fixture
def client(settings, grant_corpus):
    app = create_app(settings, record_source=InMemoryRecordSource(grant_corpus))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def funding_client(settings, funding_corpus):
    app = create_app(settings, record_source=InMemoryRecordSource(funding_corpus))
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.unit
def test_search_returns_ranked_flat_records(client) -> None:
    response = client.post("/search", json={"query": "marine biology", "limit": 10, "threshold": 0.4})

    assert response.status_code == 200
    body = response.json()
    assert body["query"] == "marine biology"
    assert body["count"] == 2
    assert [item["id"] for item in body["results"]] == ["a", "b"]
    assert body["results"][0] == {"id": "a", "score": 0.0, "Title": "Marine Biology Grant"}
    assert 0.0 < body["results"][1]["score"] <= 0.4


@pytest.mark.unit
def test_empty_body_lists_records_up_to_default_limit(settings, funding_corpus) -> None:
    app = create_app(settings.model_copy(update={"search_default_limit": 2}), InMemoryRecordSource(funding_corpus))
    with TestClient(app) as test_client:
        response = test_client.post("/search", json={})

    body = response.json()
    assert response.status_code == 200
    assert body["query"] == ""
    assert [item["id"] for item in body["results"]] == ["rec1", "rec2"]
    assert all(item["score"] == 0.0 for item in body["results"])


@pytest.mark.unit
def test_camel_case_search_fields_and_match_mode(funding_client) -> None:
    response = funding_client.post(
        "/search",
        json={"query": "ocean trust", "searchFields": ["Funder"], "threshold": 0.1, "matchMode": "phrase"},
    )

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["results"]] == ["rec1", "rec4"]


@pytest.mark.unit
def test_filters_are_applied(funding_client) -> None:
    response = funding_client.post(
        "/search",
        json={
            "filters": [
                {"kind": "date_on_or_after", "field": "Deadline", "cutoff": "2025-01-01"},
                {"kind": "number_range", "field": "Amount", "maximum": 100000},
            ],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["results"]] == ["rec1"]
    assert body["results"][0]["Discipline"] == ["Biology", "Ecology"]


@pytest.mark.unit
def test_allowed_fields_limit_response(settings, funding_corpus) -> None:
    restricted = settings.model_copy(update={"allowed_fields": "Title"})
    app = create_app(restricted, InMemoryRecordSource(funding_corpus))
    with TestClient(app) as test_client:
        response = test_client.post("/search", json={"query": "arctic", "searchFields": ["Title"], "threshold": 0.2})

    assert response.json()["results"] == [{"id": "rec2", "score": 0.0, "Title": "Arctic Research Grant"}]


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        {"threshold": 1.5},
        {"limit": -1},
        {"filters": [{"kind": "regex", "field": "Title"}]},
        {"filters": [{"kind": "number_range", "field": "Amount"}]},
    ],
)
def test_invalid_request_returns_400(client, payload) -> None:
    response = client.post("/search", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid search request"
    assert body["details"]


@pytest.mark.unit
def test_unknown_match_mode_returns_400(client) -> None:
    response = client.post("/search", json={"query": "marine", "matchMode": "regex"})

    assert response.status_code == 400
    assert "Unknown match mode" in response.json()["error"]


@pytest.mark.unit
def test_malformed_json_returns_400(client) -> None:
    response = client.post("/search", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be valid JSON"}


@pytest.mark.unit
def test_non_object_body_returns_400(client) -> None:
    response = client.post("/search", json=["marine"])

    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be a JSON object"}


@pytest.mark.unit
def test_corpus_failure_returns_502(settings) -> None:
    app = create_app(settings, record_source=DownRecordSource())
    with TestClient(app) as test_client:
        response = test_client.post("/search", json={"query": "marine"})

    assert response.status_code == 502
    assert response.json() == {"error": "Airtable API error: Bad Gateway"}


@pytest.mark.unit
def test_health_endpoint(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.unit
def test_metrics_endpoint(client) -> None:
    client.post("/search", json={"query": "marine"})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "record_search_requests_total" in response.text


@pytest.mark.unit
def test_cors_allows_configured_origin(client) -> None:
    response = client.options(
        "/search",
        headers={
            "Origin": "https://grants.example.org",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://grants.example.org"


@pytest.mark.unit
def test_search_only_accepts_post(client) -> None:
    assert client.get("/search").status_code == 405


@pytest.mark.unit
def test_create_app_requires_a_source_when_airtable_unconfigured() -> None:
    with pytest.raises(ValueError):
        create_app(Settings())


@pytest.mark.unit
def test_search_request_accepts_snake_case() -> None:
    payload = SearchRequest.model_validate({"search_fields": ["Title"], "match_mode": "all_terms"})

    assert payload.search_fields == ["Title"]
    assert payload.match_mode == "all_terms"


@pytest.mark.unit
def test_render_result_serializes_dates() -> None:
    result = MatchResult(record=Record(id="r1", fields={"Deadline": date(2025, 3, 1)}), score=0.1234567891, index=0)

    assert render_result(result) == {"id": "r1", "score": 0.123457, "Deadline": "2025-03-01"}


@pytest.mark.unit
def test_record_fields_cannot_mask_id_or_score() -> None:
    record = Record(id="rec9", fields={"id": "spoofed", "score": 0.99, "Title": "Grant"})
    result = MatchResult(record=record, score=0.25, index=0)

    rendered = render_result(result)

    assert rendered["id"] == "rec9"
    assert rendered["score"] == 0.25
    assert rendered["Title"] == "Grant"


@pytest.mark.unit
def test_request_tracing_registered_as_class_middleware(settings, grant_corpus) -> None:
    app = create_app(settings, record_source=InMemoryRecordSource(grant_corpus))

    dispatchers = [m.kwargs.get("dispatch") for m in app.user_middleware if m.cls is BaseHTTPMiddleware]

    assert dispatchers == [trace_request]
    with TestClient(app) as test_client:
        assert test_client.post("/search", json={"query": "marine"}).status_code == 200
