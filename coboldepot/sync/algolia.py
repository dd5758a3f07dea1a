"""Algolia index sync — push the normalized catalog to the search index.

Records are replaced in batches of at most 1000 through the index batch
endpoint. Any non-2xx answer aborts the whole sync.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping
from urllib.parse import quote

import httpx

from coboldepot.errors import ConfigError, RemoteError
from coboldepot.registry.loader import load_catalog
from coboldepot.registry.models import PackageRecord
from coboldepot.registry.schema import SchemaVariant

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000
REQUEST_TIMEOUT = 30.0

APP_ID_ENV = "ALGOLIA_APP_ID"
ADMIN_KEY_ENV = "ALGOLIA_ADMIN_KEY"
INDEX_NAME_ENV = "ALGOLIA_INDEX_NAME"


@dataclass(frozen=True)
class SearchIndexConfig:
    app_id: str
    admin_key: str
    index_name: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SearchIndexConfig":
        """Read the three Algolia settings; all of them are required."""
        env = os.environ if environ is None else environ
        names = (APP_ID_ENV, ADMIN_KEY_ENV, INDEX_NAME_ENV)
        missing = [name for name in names if not env.get(name)]
        if missing:
            raise ConfigError(
                f"{', '.join(names)} must be set to sync the index "
                f"(missing: {', '.join(missing)})."
            )
        return cls(
            app_id=env[APP_ID_ENV],
            admin_key=env[ADMIN_KEY_ENV],
            index_name=env[INDEX_NAME_ENV],
        )

    @property
    def batch_endpoint(self) -> str:
        return f"https://{self.app_id}.algolia.net/1/indexes/{quote(self.index_name, safe='')}/batch"


def parse_timestamp_ms(value: Any) -> int:
    """Return ``value`` as epoch milliseconds, or 0 when it cannot be parsed.

    Naive timestamps are taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return 0
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def to_search_records(catalog: Iterable[PackageRecord]) -> list[dict[str, Any]]:
    records = []
    for package in catalog:
        record = {"objectID": package.name, "type": "package"}
        record.update(package.to_dict())
        record["updatedTimestamp"] = parse_timestamp_ms(package.updated_at)
        records.append(record)
    return records


def chunked(items: list, size: int = BATCH_SIZE) -> Iterator[list]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def push_records(
    records: list[dict[str, Any]],
    config: SearchIndexConfig,
    client: httpx.Client | None = None,
) -> int:
    """Replace ``records`` in the index. Returns the number of batches sent.

    Raises:
        RemoteError: The index answered a batch with a non-2xx status.
    """
    headers = {
        "X-Algolia-Application-Id": config.app_id,
        "X-Algolia-API-Key": config.admin_key,
    }
    owns_client = client is None
    client = client or httpx.Client(timeout=REQUEST_TIMEOUT)
    batches = 0
    try:
        for chunk in chunked(records):
            payload = {
                "requests": [{"action": "replaceObject", "body": record} for record in chunk]
            }
            response = client.post(config.batch_endpoint, json=payload, headers=headers)
            if not response.is_success:
                raise RemoteError(
                    f"Algolia sync failed with status {response.status_code}: {response.text}",
                    status_code=response.status_code,
                    body=response.text,
                )
            batches += 1
            logger.info("Synced batch %d (%d record(s))", batches, len(chunk))
    finally:
        if owns_client:
            client.close()
    return batches


def sync_registry(
    registry_dir: str | Path,
    environ: Mapping[str, str] | None = None,
    client: httpx.Client | None = None,
) -> int:
    """Load the registry and push it to the index. Returns the record count.

    Duplicate names are tolerated here: the last manifest wins.
    """
    catalog = load_catalog(registry_dir, variant=SchemaVariant.SYNC, allow_duplicates=True)
    records = to_search_records(catalog)
    config = SearchIndexConfig.from_env(environ)

    logger.info(
        'Preparing to sync %d record(s) to Algolia index "%s"...',
        len(records),
        config.index_name,
    )
    push_records(records, config, client=client)
    return len(records)
