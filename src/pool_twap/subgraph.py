from __future__ import annotations

import asyncio
import logging
import random
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from .config import Config
from .errors import DataSourceError
from .models import TickEvent

logger = logging.getLogger(__name__)

TICK_CHANGES_QUERY = """
query TickChanges($first: Int!, $where: TickChange_filter!) {
  tickChanges(first: $first, where: $where, orderBy: id, orderDirection: asc) {
    id
    tick
    timestamp
    blockNumber
    logIndex
    transactionLogIndex
    initialTick
  }
}
"""

_INT_FIELDS = {
    "timestamp": "timestamp",
    "blockNumber": "block_number",
    "logIndex": "log_index",
    "transactionLogIndex": "transaction_log_index",
}
_DECIMAL_FIELDS = {
    "tick": "tick",
    "initialTick": "initial_tick",
}


class SubgraphClient:
    """Paginated reader for a pool's tick-change events on a GraphQL index.

    Pages are walked with an ``id_gt`` cursor until a short page comes back.
    Transport and HTTP failures are retried; anything that would leave the
    result incomplete raises ``DataSourceError``.
    """

    def __init__(
        self,
        url: str,
        *,
        page_size: int = 1000,
        timeout_seconds: float = 15.0,
        max_retries: int = 2,
        retry_backoff_seconds: float = 0.35,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self.url = url
        self.page_size = page_size
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self._transport = transport

    @classmethod
    def from_config(cls, config: Config) -> SubgraphClient:
        return cls(
            config.subgraph_url,
            page_size=config.subgraph_page_size,
            timeout_seconds=config.subgraph_timeout_seconds,
            max_retries=config.subgraph_max_retries,
        )

    async def fetch_tick_events(
        self,
        pool_id: str,
        *,
        since_ts: int | None = None,
        until_ts: int | None = None,
    ) -> list[TickEvent]:
        events: list[TickEvent] = []
        last_id = ""
        pages = 0

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            while True:
                where: dict[str, Any] = {"pool": pool_id.lower(), "id_gt": last_id}
                if since_ts is not None:
                    where["timestamp_gte"] = str(since_ts)
                if until_ts is not None:
                    where["timestamp_lte"] = str(until_ts)

                rows = await self._fetch_page_with_retries(client, where)
                pages += 1
                events.extend(_parse_event(row) for row in rows)

                if len(rows) < self.page_size:
                    break
                last_id = events[-1].id

        logger.info("[Subgraph] Fetched %s tick event(s) for %s in %s page(s)", len(events), pool_id, pages)
        return events

    async def _fetch_page_with_retries(self, client: httpx.AsyncClient, where: dict[str, Any]) -> list[dict]:
        attempts = max(0, self.max_retries) + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                return await self._fetch_page(client, where)
            except (httpx.TransportError, httpx.HTTPStatusError) as exc:
                last_error = exc
                if attempt >= attempts - 1:
                    break
                logger.warning("[Subgraph] Page request failed: %s; retry %s/%s", exc, attempt + 1, attempts - 1)
                await asyncio.sleep(
                    min(2.0, (self.retry_backoff_seconds * (2**attempt)) + random.uniform(0.0, self.retry_backoff_seconds))
                )

        raise DataSourceError(f"subgraph request failed after {attempts} attempt(s): {last_error}")

    async def _fetch_page(self, client: httpx.AsyncClient, where: dict[str, Any]) -> list[dict]:
        payload = {
            "query": TICK_CHANGES_QUERY,
            "variables": {"first": self.page_size, "where": where},
        }
        response = await client.post(self.url, json=payload)
        response.raise_for_status()

        try:
            body = response.json()
        except ValueError as exc:
            raise DataSourceError("subgraph response is not valid JSON") from exc

        if not isinstance(body, dict):
            raise DataSourceError("subgraph response must be a JSON object")

        errors = body.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = [
                str(item.get("message", item)) if isinstance(item, dict) else str(item)
                for item in errors
            ]
            raise DataSourceError(f"subgraph returned errors: {'; '.join(messages)}")

        data = body.get("data")
        rows = data.get("tickChanges") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise DataSourceError("subgraph response missing data.tickChanges")
        return rows


def _parse_event(row: object) -> TickEvent:
    if not isinstance(row, dict):
        raise DataSourceError(f"malformed tick event: {row!r}")

    event_id = row.get("id")
    if not isinstance(event_id, str) or not event_id:
        raise DataSourceError(f"tick event missing id: {row!r}")

    values: dict[str, Any] = {"id": event_id}
    try:
        for source, target in _INT_FIELDS.items():
            values[target] = int(str(row[source]))
        for source, target in _DECIMAL_FIELDS.items():
            values[target] = Decimal(str(row[source]))
    except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
        raise DataSourceError(f"malformed tick event {event_id}: {exc!r}") from exc

    if not values["tick"].is_finite() or not values["initial_tick"].is_finite():
        raise DataSourceError(f"tick event {event_id} has a non-finite tick")

    return TickEvent(**values)
