"""Search index sync — publish the catalog to the hosted search index.

This package provides:
- Configuration: Algolia credentials read from the environment
- Normalization: catalog records plus objectID and updatedTimestamp
- Transport: batched replaceObject requests over HTTPS
"""

from coboldepot.sync.algolia import (
    SearchIndexConfig,
    push_records,
    sync_registry,
    to_search_records,
)

__all__ = ["SearchIndexConfig", "push_records", "sync_registry", "to_search_records"]
