"""Record source abstractions and implementations.

Defines the corpus-supplier boundary following the Repository Pattern.
The search core never performs I/O; a source hands it a fresh snapshot of
records for every request.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from record_search.config import Settings
from record_search.domain.errors import CorpusFetchError
from record_search.domain.model import Record


logger = logging.getLogger(__name__)

# Upper bound on pages followed in one fetch (Airtable pages hold 100 records)
MAX_PAGES = 1000


class AbstractRecordSource(ABC):
    """Abstract supplier of the searchable corpus.

    Implementations raise CorpusFetchError on any failure; callers decide
    whether to retry.
    """

    @abstractmethod
    async def fetch_records(self) -> list[Record]:
        """Fetch the current corpus, in store order."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Optional hook for releasing network resources."""

        return


class InMemoryRecordSource(AbstractRecordSource):
    """Serves a fixed snapshot. Used in tests and for local experiments."""

    def __init__(self, records: Sequence[Record] | None = None) -> None:
        self._records = list(records or [])
        self.fetch_count = 0

    async def fetch_records(self) -> list[Record]:
        self.fetch_count += 1
        return list(self._records)


class AirtableRecordSource(AbstractRecordSource):
    """Fetches records from an Airtable table over its REST API.

    Hides:
    - Bearer authentication
    - Optional view selection and field whitelist (``fields[]`` params)
    - ``offset`` pagination
    - Translation of Airtable payloads into Record objects
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        if not settings.is_airtable_configured():
            raise ValueError("Airtable API key, base id and table name are required")
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    @property
    def url(self) -> str:
        base = self.settings.airtable_api_url.rstrip("/")
        return f"{base}/{self.settings.airtable_base_id}/{quote(self.settings.airtable_table_name, safe='')}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            timeout = httpx.Timeout(float(self.settings.http_timeout), connect=10.0)
            self._client = httpx.AsyncClient(timeout=timeout)
        return self._client

    def _build_params(self, offset: str | None) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        view = self.settings.get_view_name()
        if view:
            params.append(("view", view))
        for field in self.settings.get_allowed_fields():
            params.append(("fields[]", field))
        if offset:
            params.append(("offset", offset))
        return params

    async def fetch_records(self) -> list[Record]:
        client = self._get_client()
        headers = {"Authorization": f"Bearer {self.settings.airtable_api_key}"}
        records: list[Record] = []
        offset: str | None = None

        for page in range(MAX_PAGES):
            try:
                response = await client.get(self.url, params=self._build_params(offset), headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                logger.error("Airtable API error %s for table %s", status, self.settings.airtable_table_name)
                raise CorpusFetchError(
                    f"Airtable API error: {exc.response.reason_phrase or status}", status_code=status
                ) from exc
            except httpx.HTTPError as exc:
                logger.error("Airtable request failed: %s", exc)
                raise CorpusFetchError(f"Airtable request failed: {exc}") from exc

            try:
                payload = response.json()
            except ValueError as exc:
                raise CorpusFetchError("Airtable returned a non-JSON payload") from exc

            records.extend(parse_airtable_page(payload))
            offset = payload.get("offset")
            if not offset:
                break
            logger.debug("Fetched Airtable page %d, continuing at offset %s", page + 1, offset)
        else:
            logger.warning("Stopped Airtable pagination after %d pages", MAX_PAGES)

        logger.info("Fetched %d records from Airtable table %s", len(records), self.settings.airtable_table_name)
        return records

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def parse_airtable_page(payload: Any) -> list[Record]:
    """Translate one Airtable list-records page into Records.

    Raises:
        CorpusFetchError: payload does not have the list-records shape.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("records"), list):
        raise CorpusFetchError("Malformed Airtable payload: missing 'records' list")

    records: list[Record] = []
    for raw in payload["records"]:
        if not isinstance(raw, dict):
            raise CorpusFetchError("Malformed Airtable payload: record is not an object")
        try:
            records.append(Record(id=raw.get("id", ""), fields=raw.get("fields") or {}))
        except ValidationError as exc:
            raise CorpusFetchError(f"Malformed Airtable record {raw.get('id')!r}: {exc}") from exc
    return records
