"""Shared test fixtures and configuration."""

import os

import pytest

from record_search.domain.model import Record


# Complete test environment that overrides ALL possible config values
TEST_ENV = {
    "AIRTABLE_API_KEY": "",
    "AIRTABLE_BASE_ID": "",
    "AIRTABLE_TABLE_NAME": "",
    "AIRTABLE_VIEW_NAME": "",
    "AIRTABLE_API_URL": "https://api.airtable.com/v0",
    "ALLOWED_FIELDS": "",
    "HTTP_TIMEOUT": "30",
    "SEARCH_DEFAULT_LIMIT": "5",
    "SEARCH_THRESHOLD": "0.4",
    "SEARCH_MIN_MATCH_LENGTH": "2",
    "HOST": "127.0.0.1",
    "PORT": "3000",
    "CORS_ALLOW_ORIGINS": "*",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment variables to test defaults before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def grant_corpus() -> list[Record]:
    """The three-record grant corpus used throughout the ranking tests."""
    return [
        Record(id="a", fields={"Title": "Marine Biology Grant"}),
        Record(id="b", fields={"Title": "Marine Biodiversity Fund"}),
        Record(id="c", fields={"Title": "Urban Planning Award"}),
    ]


@pytest.fixture
def funding_corpus() -> list[Record]:
    """A richer corpus with dates, numbers and multi-select values."""
    return [
        Record(
            id="rec1",
            fields={
                "Title": "Coastal Ecology Fellowship",
                "Funder": "Ocean Trust",
                "Discipline": ["Biology", "Ecology"],
                "Deadline": "2025-03-01",
                "Amount": 25000,
            },
        ),
        Record(
            id="rec2",
            fields={
                "Title": "Arctic Research Grant",
                "Funder": "Polar Institute",
                "Discipline": ["Climate"],
                "Deadline": "2024-11-15",
                "Amount": 50000,
            },
        ),
        Record(
            id="rec3",
            fields={
                "Title": "Community Arts Award",
                "Funder": "City Council",
                "Deadline": "not announced",
                "Amount": "5,000",
            },
        ),
        Record(
            id="rec4",
            fields={
                "Title": "Ocean Acidification Study",
                "Funder": "Ocean Trust",
                "Discipline": ["Chemistry", "Climate"],
                "Deadline": "2025-06-30T17:00:00.000Z",
                "Amount": 120000,
            },
        ),
    ]
