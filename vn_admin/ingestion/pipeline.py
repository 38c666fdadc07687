"""
Ingestion Pipeline Module
=========================

Crawls provinces, then the units of each province, and upserts everything
into the store. The run is sequential and best-effort: only failing to get
the province list is fatal; per-province and per-unit failures are logged
and skipped. Every write is a keyed upsert, so re-running is always safe.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from vn_admin.core.errors import (
    IngestionCancelled,
    PersistenceError,
    PipelineError,
    RetriesExhaustedError,
)
from vn_admin.core.schema import Province
from vn_admin.db.repositories import AdminRepository
from vn_admin.ingestion.fetcher import Fetcher
from vn_admin.ingestion.retry import check_cancelled, retry, wait_or_cancel
from vn_admin.ingestion.source import SourceConfig

logger = logging.getLogger(__name__)


class RunStatus(str, Enum):
    """Outcome of an ingestion run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class IngestionReport:
    """Counters and errors collected during one run."""

    status: RunStatus = RunStatus.RUNNING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    provinces_found: int = 0
    provinces_saved: int = 0
    provinces_skipped: int = 0
    units_saved: int = 0
    units_failed: int = 0
    errors: list[str] = field(default_factory=list)
    duration_seconds: float | None = None

    def finish(self, status: RunStatus) -> None:
        """Record the final status and timing."""
        self.status = status
        self.completed_at = datetime.now(UTC)
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "provinces_found": self.provinces_found,
            "provinces_saved": self.provinces_saved,
            "provinces_skipped": self.provinces_skipped,
            "units_saved": self.units_saved,
            "units_failed": self.units_failed,
            "errors": self.errors,
            "duration_seconds": self.duration_seconds,
        }


class IngestionPipeline:
    """
    Sequential province -> units ingestion.

    Args:
        fetcher: Remote source client.
        repository: Store that receives the upserts.
        source: Retry policy and politeness delay. Defaults to the
                fetcher's source configuration.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        repository: AdminRepository,
        source: SourceConfig | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.repository = repository
        self.source = source or fetcher.source

    async def run(self, cancel_event: asyncio.Event | None = None) -> IngestionReport:
        """
        Run the full ingestion.

        Args:
            cancel_event: Set it to stop after the current step. Rows already
                          written stay in the store.

        Returns:
            IngestionReport for the completed run.

        Raises:
            PipelineError: If the province list could not be fetched.
            IngestionCancelled: If cancellation was requested; the partial
                report is available as ``exc.report``.
        """
        report = IngestionReport(started_at=datetime.now(UTC))
        logger.info("Starting ingestion run")

        try:
            provinces = await self._fetch_provinces(report, cancel_event)
            report.provinces_found = len(provinces)
            logger.info(f"Found {len(provinces)} provinces")

            for index, province in enumerate(provinces):
                check_cancelled(cancel_event)
                completed = await self._ingest_province(province, report, cancel_event)
                if completed and index < len(provinces) - 1:
                    await wait_or_cancel(self.source.politeness_delay, cancel_event)
        except IngestionCancelled as e:
            report.finish(RunStatus.CANCELLED)
            logger.warning(
                f"Ingestion cancelled after {report.provinces_saved} provinces "
                f"and {report.units_saved} units"
            )
            e.report = report
            raise

        report.finish(RunStatus.COMPLETED)
        logger.info(
            f"Ingestion finished: {report.provinces_saved}/{report.provinces_found} provinces, "
            f"{report.units_saved} units saved, {report.units_failed} units failed"
        )
        return report

    async def _fetch_provinces(
        self, report: IngestionReport, cancel_event: asyncio.Event | None
    ) -> list[Province]:
        """Fetch the province list; exhaustion is fatal."""
        policy = self.source.retry
        try:
            return await retry(
                self.fetcher.fetch_provinces,
                max_attempts=policy.max_attempts,
                base_delay=policy.base_delay,
                cancel_event=cancel_event,
                description="fetch provinces",
            )
        except RetriesExhaustedError as e:
            report.errors.append(str(e))
            report.finish(RunStatus.FAILED)
            logger.error(f"Failed to fetch provinces: {e}")
            raise PipelineError(f"failed to fetch provinces: {e}") from e

    async def _ingest_province(
        self,
        province: Province,
        report: IngestionReport,
        cancel_event: asyncio.Event | None,
    ) -> bool:
        """
        Upsert one province and its units.

        Returns:
            True if the unit list was fetched; only then does the polite
            delay follow.
        """
        logger.info(f"Processing province {province.name!r} (id={province.id})")

        try:
            self.repository.upsert_province(province)
        except PersistenceError as e:
            report.provinces_skipped += 1
            report.errors.append(str(e))
            logger.error(f"Failed to upsert province {province.id}: {e}")
            return False
        report.provinces_saved += 1

        policy = self.source.retry
        try:
            units = await retry(
                lambda: self.fetcher.fetch_units(province.id),
                max_attempts=policy.max_attempts,
                base_delay=policy.base_delay,
                cancel_event=cancel_event,
                description=f"fetch units for province {province.id}",
            )
        except RetriesExhaustedError as e:
            report.errors.append(f"province {province.id}: {e}")
            logger.error(f"Failed to fetch units for province {province.id}: {e}")
            return False
        logger.info(f"Found {len(units)} units for province {province.id}")

        for unit in units:
            try:
                self.repository.upsert_unit(unit)
            except PersistenceError as e:
                report.units_failed += 1
                report.errors.append(str(e))
                logger.error(f"Failed to upsert unit {unit.id}: {e}")
                continue
            report.units_saved += 1

        return True
