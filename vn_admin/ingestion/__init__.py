"""
Ingestion Framework
===================

Pipeline Stages:
1. Fetch provinces - one POST to the province endpoint, with retry
2. Persist province - keyed upsert
3. Fetch units - one POST per province, with retry
4. Persist units - keyed upsert, one unit at a time
5. Politeness delay - pause before the next province
"""

from vn_admin.ingestion.fetcher import Fetcher
from vn_admin.ingestion.pipeline import IngestionPipeline, IngestionReport, RunStatus
from vn_admin.ingestion.retry import backoff_delay, retry, wait_or_cancel
from vn_admin.ingestion.source import RetryPolicy, SourceConfig, get_default_source_config

__all__ = [
    # Source
    "SourceConfig",
    "RetryPolicy",
    "get_default_source_config",
    # Fetcher
    "Fetcher",
    # Retry
    "retry",
    "backoff_delay",
    "wait_or_cancel",
    # Pipeline
    "IngestionPipeline",
    "IngestionReport",
    "RunStatus",
]
